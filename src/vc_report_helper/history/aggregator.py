"""
End-to-end history extraction.

:class:`CommitAggregator` resolves the commits of a window, then fetches
details and diff excerpts for each one. Problems with the repository as
a whole abort the call; problems with a single commit or a single file
are logged and that item is left out.
"""

from __future__ import annotations

import logging
import threading
from concurrent.futures import ThreadPoolExecutor
from datetime import date
from typing import Any, Dict, Iterable, List, Optional, Set

from vc_report_helper.diff.diff_summarizer import DiffSummarizer, FileDiffError
from vc_report_helper.history.models import (
    CommitRecord,
    DayWindow,
    FileChange,
    HistoryRequest,
    RecentWindow,
)
from vc_report_helper.vcs.commit_details import CommitDetailFetcher, CommitFetchError
from vc_report_helper.vcs.commit_list import CommitListResolver
from vc_report_helper.vcs.process_invoker import PathLike, ProcessInvoker


logger = logging.getLogger(__name__)
if not logger.handlers:
    logger.addHandler(logging.NullHandler())
    logger.propagate = False


def _cancelled(cancel_event: Optional[threading.Event]) -> bool:
    return cancel_event is not None and cancel_event.is_set()


class CommitAggregator:
    """Drive the history pipeline for one request at a time.

    Parameters
    ----------
    invoker : ProcessInvoker
        Used for every git query; chosen once by the caller.
    max_workers : int, optional
        Number of threads used to fetch the file diffs of one commit.
        ``1`` (the default) keeps everything sequential. Output order
        never depends on this value.
    """

    def __init__(self, invoker: ProcessInvoker, max_workers: int = 1) -> None:
        if max_workers < 1:
            raise ValueError("'max_workers' must be at least 1")
        self.invoker = invoker
        self.max_workers = max_workers
        self.resolver = CommitListResolver(invoker)
        self.fetcher = CommitDetailFetcher(invoker)
        self.summarizer = DiffSummarizer(invoker)

    def collect(
        self,
        request: HistoryRequest,
        cancel_event: Optional[threading.Event] = None,
    ) -> List[CommitRecord]:
        """Run the pipeline for ``request`` and return its commit records."""
        mode = request.mode
        if isinstance(mode, DayWindow):
            return self.collect_day(request.repo_path, mode.date, cancel_event)
        if isinstance(mode, RecentWindow):
            return self.collect_recent(request.repo_path, mode.days, cancel_event)
        raise TypeError(f"Unsupported history window: {mode!r}")

    def collect_day(
        self,
        repo_path: PathLike,
        day: date,
        cancel_event: Optional[threading.Event] = None,
    ) -> List[CommitRecord]:
        """Return detailed records for the commits made on ``day``.

        Raises
        ------
        DirectoryAccessError, NotARepositoryError, ProcessExecutionError
            If the commit list itself cannot be resolved.
        """
        commit_ids = self.resolver.resolve_day(repo_path, day)
        records: List[CommitRecord] = []
        seen: Set[str] = set()
        for commit_id in commit_ids:
            if _cancelled(cancel_event):
                logger.info("Cancelled after %d of %d commit(s)", len(records), len(commit_ids))
                break
            if commit_id in seen:
                logger.warning("Skipping repeated commit id %s", commit_id)
                continue
            seen.add(commit_id)
            try:
                record = self.fetcher.fetch(repo_path, commit_id)
            except CommitFetchError as exc:
                logger.warning("Dropping commit %s: %s", commit_id, exc)
                continue
            record.file_changes = self._summarize_files(
                repo_path, record.id, record.changed_files, cancel_event
            )
            records.append(record)
        return records

    def collect_recent(
        self,
        repo_path: PathLike,
        days: int,
        cancel_event: Optional[threading.Event] = None,
    ) -> List[CommitRecord]:
        """Return shallow records (metadata and file list) for the last ``days`` days."""
        records: List[CommitRecord] = []
        seen: Set[str] = set()
        for record in self.resolver.resolve_recent(repo_path, days):
            if _cancelled(cancel_event):
                break
            if record.id in seen:
                logger.warning("Skipping repeated commit id %s", record.id)
                continue
            seen.add(record.id)
            records.append(record)
        return records

    def _summarize_one(
        self,
        repo_path: PathLike,
        commit_id: str,
        path: str,
        cancel_event: Optional[threading.Event],
    ) -> Optional[FileChange]:
        if _cancelled(cancel_event):
            return None
        try:
            return self.summarizer.summarize(repo_path, commit_id, path)
        except FileDiffError as exc:
            logger.warning("Dropping diff excerpt: %s", exc)
            return None

    def _summarize_files(
        self,
        repo_path: PathLike,
        commit_id: str,
        paths: List[str],
        cancel_event: Optional[threading.Event],
    ) -> List[FileChange]:
        if self.max_workers == 1 or len(paths) < 2:
            results: Iterable[Optional[FileChange]] = (
                self._summarize_one(repo_path, commit_id, path, cancel_event) for path in paths
            )
            return [change for change in results if change is not None]

        workers = min(self.max_workers, len(paths))
        with ThreadPoolExecutor(max_workers=workers) as executor:
            # map() yields in submission order, whatever the completion order
            results = list(
                executor.map(
                    lambda path: self._summarize_one(repo_path, commit_id, path, cancel_event),
                    paths,
                )
            )
        return [change for change in results if change is not None]


def serialize_records(records: Iterable[CommitRecord]) -> List[Dict[str, Any]]:
    """Render records in the caller-facing dictionary shape."""
    return [record.to_dict() for record in records]
