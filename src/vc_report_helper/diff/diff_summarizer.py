"""
Diff excerpt extraction.

For every file a commit touched, :class:`DiffSummarizer` requests a
unified diff limited to that path with one line of context and keeps a
short excerpt of the added and removed lines. The excerpt is meant as
compact evidence for a summarizing model, not as a faithful patch.
"""

from __future__ import annotations

import logging
from typing import List

from vc_report_helper.history.models import FileChange
from vc_report_helper.vcs.process_invoker import PathLike, ProcessInvoker, VCSError


logger = logging.getLogger(__name__)
if not logger.handlers:
    logger.addHandler(logging.NullHandler())
    logger.propagate = False


MAX_EXCERPT_LINES = 10


class FileDiffError(VCSError):
    """Raised when no excerpt can be produced for a file of a commit."""

    def __init__(self, commit_id: str, path: str, reason: str) -> None:
        super().__init__(f"No diff excerpt for '{path}' in {commit_id}: {reason}")
        self.commit_id = commit_id
        self.path = path
        self.reason = reason


def extract_excerpt(diff_text: str, limit: int = MAX_EXCERPT_LINES) -> List[str]:
    """Return up to ``limit`` added/removed lines from ``diff_text``.

    A line qualifies when it starts with ``+`` or ``-`` and does not start
    with the ``+++``/``---`` file header markers. Lines keep their diff
    order.
    """
    excerpt: List[str] = []
    for line in diff_text.splitlines():
        if len(excerpt) >= limit:
            break
        if not line.startswith(("+", "-")):
            continue
        if line.startswith(("+++", "---")):
            continue
        excerpt.append(line)
    return excerpt


class DiffSummarizer:
    """Produce a :class:`FileChange` for one file of one commit."""

    def __init__(self, invoker: ProcessInvoker, max_lines: int = MAX_EXCERPT_LINES) -> None:
        self.invoker = invoker
        self.max_lines = max_lines

    def summarize(self, repo_path: PathLike, commit_id: str, path: str) -> FileChange:
        """Return the diff excerpt of ``path`` in ``commit_id``.

        Raises
        ------
        FileDiffError
            If the diff query fails or the diff has no added/removed lines
            (binary files, pure renames, mode changes).
        """
        try:
            diff_text = self.invoker.run(
                repo_path,
                ["show", "--pretty=format:", "--unified=1", commit_id, "--", path],
            )
        except VCSError as exc:
            raise FileDiffError(commit_id, path, str(exc)) from exc

        excerpt = extract_excerpt(diff_text, self.max_lines)
        if not excerpt:
            raise FileDiffError(commit_id, path, "diff has no added or removed lines")
        return FileChange(path=path, excerpt_lines=excerpt)
