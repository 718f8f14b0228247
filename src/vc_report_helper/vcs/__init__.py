"""
Git integration.

This package contains the subprocess boundary (:class:`ProcessInvoker`),
repository discovery helpers, and the queries that list commits and read
their details. :class:`DemoProcessInvoker` is a canned stand-in for the
real invoker.
"""

from .process_invoker import (  # noqa: F401
    DirectoryAccessError,
    ProcessExecutionError,
    ProcessInvoker,
    VCSError,
)
from .repository import NotARepositoryError, find_repo_root, has_commits  # noqa: F401
from .commit_details import CommitDetailFetcher, CommitFetchError  # noqa: F401
from .commit_list import CommitListResolver  # noqa: F401
from .demo_invoker import DemoProcessInvoker  # noqa: F401
