"""
Commit selection for the two supported time windows.
"""

from __future__ import annotations

import logging
import re
from datetime import date
from typing import List, Optional

from vc_report_helper.history.models import CommitRecord
from vc_report_helper.vcs.commit_details import (
    METADATA_FORMAT,
    parse_metadata_line,
)
from vc_report_helper.vcs.process_invoker import (
    PathLike,
    ProcessExecutionError,
    ProcessInvoker,
)
from vc_report_helper.vcs.repository import ensure_repository, has_commits


logger = logging.getLogger(__name__)
if not logger.handlers:
    logger.addHandler(logging.NullHandler())
    logger.propagate = False


# SHA-1 or SHA-256 object name followed by the field separator
_HEADER_PATTERN = re.compile(r"^(?:[0-9a-f]{40}|[0-9a-f]{64})\|")


class CommitListResolver:
    """Resolve which commits fall inside a requested window.

    Both methods first check that ``repo_path`` is a Git work tree; the
    errors raised for an unusable path are meant to abort the caller.
    """

    def __init__(self, invoker: ProcessInvoker) -> None:
        self.invoker = invoker

    def _log(self, repo_path: PathLike, args: List[str]) -> str:
        """Run ``git log``; a branch without commits yields empty output."""
        try:
            return self.invoker.run(repo_path, ["log"] + args)
        except ProcessExecutionError as exc:
            if exc.exit_status is None or has_commits(self.invoker, repo_path):
                raise
            logger.info("Repository %s has no commits yet", repo_path)
            return ""

    def resolve_day(self, repo_path: PathLike, day: date) -> List[str]:
        """Return the ids of commits made on ``day``, newest first."""
        ensure_repository(self.invoker, repo_path)
        stamp = day.isoformat()
        output = self._log(
            repo_path,
            [
                f"--after={stamp} 00:00:00",
                f"--before={stamp} 23:59:59",
                "--pretty=format:%H",
            ],
        )
        commit_ids = [line.strip() for line in output.splitlines() if line.strip()]
        logger.debug("Found %d commit(s) on %s", len(commit_ids), stamp)
        return commit_ids

    def resolve_recent(self, repo_path: PathLike, days: int) -> List[CommitRecord]:
        """Return shallow records for the last ``days`` days, newest first.

        Each record carries its metadata and changed files; no diff
        statistics or excerpts are fetched in this mode.
        """
        if days < 1:
            raise ValueError("'days' must be at least 1")
        ensure_repository(self.invoker, repo_path)
        output = self._log(
            repo_path,
            [
                f"--since={days} days ago",
                f"--pretty=format:{METADATA_FORMAT}",
                "--name-only",
            ],
        )
        records = parse_log_with_files(output)
        logger.debug("Found %d commit(s) in the last %d day(s)", len(records), days)
        return records


def parse_log_with_files(output: str) -> List[CommitRecord]:
    """Parse ``log --pretty=format:... --name-only`` output.

    Header lines are recognised by their leading object name; every other
    non-blank line belongs to the most recent header. Commits without
    files (merges) produce records with an empty file list.
    """
    records: List[CommitRecord] = []
    current: Optional[CommitRecord] = None
    for line in output.splitlines():
        if not line.strip():
            continue
        if _HEADER_PATTERN.match(line):
            commit_id, author, raw_date, subject = parse_metadata_line(line)
            current = CommitRecord(
                id=commit_id,
                author=author,
                raw_timestamp=raw_date,
                subject=subject,
            )
            records.append(current)
        elif current is not None:
            current.changed_files.append(line)
        else:
            logger.warning("Ignoring unexpected line before first commit: %s", line)
    return records
