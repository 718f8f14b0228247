"""
Repository discovery and validation helpers.
"""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Optional

from vc_report_helper.vcs.process_invoker import (
    PathLike,
    ProcessExecutionError,
    ProcessInvoker,
    VCSError,
)


logger = logging.getLogger(__name__)
if not logger.handlers:
    logger.addHandler(logging.NullHandler())
    logger.propagate = False


class NotARepositoryError(VCSError):
    """Raised when a directory is not inside a Git working tree."""

    def __init__(self, path: PathLike, detail: str = "") -> None:
        message = f"'{path}' is not a Git repository"
        if detail:
            message = f"{message}: {detail}"
        super().__init__(message)
        self.path = str(path)
        self.detail = detail


def is_repo(path: Path) -> bool:
    """Return True if ``path`` itself holds Git metadata."""
    return (path / ".git").exists()


def find_repo_root(start: Path) -> Optional[Path]:
    """Find the root of the Git repository containing ``start``.

    Walk upwards until a ``.git`` entry is found or the filesystem root is
    reached.
    """
    current = start.resolve()
    while True:
        if is_repo(current):
            return current
        if current.parent == current:
            # reached filesystem root
            return None
        current = current.parent


def ensure_repository(invoker: ProcessInvoker, repo_path: PathLike) -> None:
    """Verify that ``repo_path`` is inside a Git working tree.

    Raises
    ------
    DirectoryAccessError
        If the path is not a readable directory.
    NotARepositoryError
        If git runs but reports that the path is not a work tree.
    ProcessExecutionError
        If git itself cannot be started.
    """
    try:
        output = invoker.run(repo_path, ["rev-parse", "--is-inside-work-tree"])
    except ProcessExecutionError as exc:
        if exc.exit_status is None:
            raise
        raise NotARepositoryError(repo_path, exc.stderr.strip()) from exc
    if output.strip() != "true":
        raise NotARepositoryError(repo_path, "not inside a work tree")
    logger.debug("Verified Git work tree at %s", repo_path)


def has_commits(invoker: ProcessInvoker, repo_path: PathLike) -> bool:
    """Return False if ``HEAD`` does not resolve yet (freshly initialised repository)."""
    try:
        invoker.run(repo_path, ["rev-parse", "--verify", "-q", "HEAD"])
    except ProcessExecutionError as exc:
        if exc.exit_status is None:
            raise
        return False
    return True
