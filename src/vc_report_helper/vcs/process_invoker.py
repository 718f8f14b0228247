"""
Subprocess boundary for vc_report_helper.

Every Git query issued by the history pipeline goes through a
:class:`ProcessInvoker`. The invoker owns no state between calls: it
checks the working directory, runs one command, and returns its
standard output or raises a typed error. Tests replace it with a fake
that answers canned output, so nothing else in the package touches
:mod:`subprocess` directly.
"""

from __future__ import annotations

import logging
import os
import subprocess
from pathlib import Path
from typing import List, Optional, Sequence, Union


logger = logging.getLogger(__name__)
# Attach a null handler to avoid logging errors when the root logger is not
# configured. Logs will propagate to the root when configured by the CLI.
if not logger.handlers:
    logger.addHandler(logging.NullHandler())
    logger.propagate = False


PathLike = Union[str, Path]

# Passed before every subcommand. Paths are printed verbatim instead of
# C-quoted, so they can be handed back to git after a "--".
DEFAULT_GIT_OPTIONS = ("-c", "core.quotePath=false")


class VCSError(Exception):
    """Base class for every error raised while reading repository history."""

    pass


class DirectoryAccessError(VCSError):
    """Raised when the working directory is missing or unreadable."""

    def __init__(self, path: PathLike, reason: str) -> None:
        super().__init__(f"Cannot access directory '{path}': {reason}")
        self.path = str(path)
        self.reason = reason


class ProcessExecutionError(VCSError):
    """Raised when a command exits non-zero or cannot be spawned.

    ``exit_status`` is ``None`` when the process never ran (missing
    executable, permission problem, timeout).
    """

    def __init__(self, argv: Sequence[str], exit_status: Optional[int], stderr: str) -> None:
        self.argv = list(argv)
        self.exit_status = exit_status
        self.stderr = stderr
        detail = stderr.strip() or "no error output"
        if exit_status is None:
            message = f"Failed to run '{' '.join(self.argv)}': {detail}"
        else:
            message = f"'{' '.join(self.argv)}' exited with status {exit_status}: {detail}"
        super().__init__(message)


def check_directory(path: PathLike) -> Path:
    """Return ``path`` as a :class:`Path` if it is a readable directory.

    Raises
    ------
    DirectoryAccessError
        If the path does not exist, is not a directory, or is not readable.
    """
    directory = Path(path)
    if not directory.exists():
        raise DirectoryAccessError(directory, "no such directory")
    if not directory.is_dir():
        raise DirectoryAccessError(directory, "not a directory")
    if not os.access(directory, os.R_OK | os.X_OK):
        raise DirectoryAccessError(directory, "permission denied")
    return directory


class ProcessInvoker:
    """Run version-control commands and capture their output.

    Parameters
    ----------
    executable : str, optional
        Program prefixed to every argument list. Defaults to ``"git"``.
    timeout : float, optional
        Seconds to wait for a single command. ``None`` (the default)
        waits until the process ends on its own.
    options : sequence of str, optional
        Arguments placed between the executable and the subcommand.
        Defaults to :data:`DEFAULT_GIT_OPTIONS`.
    """

    def __init__(
        self,
        executable: str = "git",
        timeout: Optional[float] = None,
        options: Sequence[str] = DEFAULT_GIT_OPTIONS,
    ) -> None:
        self.executable = executable
        self.timeout = timeout
        self.options = list(options)

    def run(self, working_directory: PathLike, args: Sequence[str]) -> str:
        """Run ``executable args...`` inside ``working_directory``.

        Returns
        -------
        str
            The captured standard output.

        Raises
        ------
        DirectoryAccessError
            If ``working_directory`` is not a readable directory.
        ProcessExecutionError
            If the command cannot be started, times out, or exits non-zero.
        """
        cwd = check_directory(working_directory)
        full_cmd: List[str] = [self.executable] + self.options + list(args)
        logger.debug("Executing command in %s: %s", cwd, " ".join(full_cmd))
        try:
            result = subprocess.run(
                full_cmd,
                cwd=cwd,
                stdin=subprocess.DEVNULL,
                stdout=subprocess.PIPE,
                stderr=subprocess.PIPE,
                text=True,
                encoding="utf-8",
                errors="replace",  # Replace invalid characters instead of failing
                timeout=self.timeout,
            )
        except subprocess.TimeoutExpired as exc:
            logger.error("Command timed out after %ss: %s", self.timeout, " ".join(full_cmd))
            raise ProcessExecutionError(full_cmd, None, f"timed out after {self.timeout}s") from exc
        except OSError as exc:
            logger.error("Could not start command %s: %s", " ".join(full_cmd), exc)
            raise ProcessExecutionError(full_cmd, None, str(exc)) from exc

        if result.returncode != 0:
            logger.error(
                "Command failed: %s\nSTDOUT: %s\nSTDERR: %s",
                " ".join(full_cmd),
                result.stdout,
                result.stderr,
            )
            raise ProcessExecutionError(full_cmd, result.returncode, result.stderr or result.stdout)
        return result.stdout
