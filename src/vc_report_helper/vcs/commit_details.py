"""
Per-commit metadata queries.

:class:`CommitDetailFetcher` asks git three independent questions about
one commit (header line, changed paths, ``--stat`` block) and assembles
the answers into a :class:`CommitRecord`. A failure in any of the three
makes the whole commit unusable; the caller decides whether to skip it.
"""

from __future__ import annotations

import logging
from typing import List, Tuple

from vc_report_helper.history.models import CommitRecord
from vc_report_helper.vcs.process_invoker import PathLike, ProcessInvoker, VCSError


logger = logging.getLogger(__name__)
if not logger.handlers:
    logger.addHandler(logging.NullHandler())
    logger.propagate = False


METADATA_FORMAT = "%H|%an|%ad|%s"
FIELD_SEPARATOR = "|"


class CommitFetchError(VCSError):
    """Raised when the details of a single commit cannot be read."""

    def __init__(self, commit_id: str, reason: str) -> None:
        super().__init__(f"Could not read commit {commit_id}: {reason}")
        self.commit_id = commit_id
        self.reason = reason


def parse_metadata_line(line: str) -> Tuple[str, str, str, str]:
    """Split a ``%H|%an|%ad|%s`` line into ``(id, author, date, subject)``.

    The first three fields are fixed; everything after the third separator
    is the subject, so a subject containing ``|`` survives intact.

    Raises
    ------
    ValueError
        If the line has fewer than four fields or an empty id.
    """
    parts = line.rstrip("\r\n").split(FIELD_SEPARATOR)
    if len(parts) < 4:
        raise ValueError(f"Malformed metadata line: {line!r}")
    commit_id, author, raw_date = (part.strip() for part in parts[:3])
    if not commit_id:
        raise ValueError(f"Missing commit id in metadata line: {line!r}")
    subject = FIELD_SEPARATOR.join(parts[3:])
    return commit_id, author, raw_date, subject


def parse_name_only(output: str) -> List[str]:
    """Return the non-blank lines of ``--name-only`` output, in order.

    Paths are kept exactly as printed; surrounding spaces are part of the
    file name.
    """
    return [line for line in output.splitlines() if line.strip()]


class CommitDetailFetcher:
    """Fetch metadata, changed files and diff statistics for one commit."""

    def __init__(self, invoker: ProcessInvoker) -> None:
        self.invoker = invoker

    def fetch(self, repo_path: PathLike, commit_id: str) -> CommitRecord:
        """Build a :class:`CommitRecord` for ``commit_id``.

        The returned record has no ``file_changes`` yet.

        Raises
        ------
        CommitFetchError
            If any of the three git queries fails or its output cannot be
            parsed.
        """
        try:
            header = self.invoker.run(
                repo_path,
                ["show", "--no-patch", f"--pretty=format:{METADATA_FORMAT}", commit_id],
            )
            files_output = self.invoker.run(
                repo_path, ["show", "--pretty=", "--name-only", commit_id]
            )
            diff_stat = self.invoker.run(
                repo_path, ["show", "--stat", "--format=", commit_id]
            )
        except VCSError as exc:
            raise CommitFetchError(commit_id, str(exc)) from exc

        lines = header.splitlines()
        try:
            parsed_id, author, raw_date, subject = parse_metadata_line(lines[0] if lines else "")
        except ValueError as exc:
            raise CommitFetchError(commit_id, str(exc)) from exc

        changed_files = parse_name_only(files_output)
        logger.debug("Commit %s touches %d file(s)", parsed_id, len(changed_files))
        return CommitRecord(
            id=parsed_id,
            author=author,
            raw_timestamp=raw_date,
            subject=subject,
            changed_files=changed_files,
            diff_stat_text=diff_stat,
        )
