"""
Canned git history for demonstrations and tests.

:class:`DemoProcessInvoker` answers the exact git commands issued by the
history pipeline from an in-memory list of :class:`DemoCommit` objects.
It never touches the filesystem or spawns a process. It is only used
when selected explicitly (``aidaily --demo``); a failing real invoker is
never silently replaced by it.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Dict, List, Optional, Sequence

from vc_report_helper.vcs.process_invoker import PathLike, ProcessExecutionError


@dataclass
class DemoCommit:
    """One fake commit with per-file unified diffs."""

    id: str
    author: str
    time: str
    subject: str
    diffs: Dict[str, str] = field(default_factory=dict)

    @property
    def files(self) -> List[str]:
        return list(self.diffs)


DEFAULT_COMMITS: List[DemoCommit] = [
    DemoCommit(
        id="a1b2c3d4e5f60718293a4b5c6d7e8f9012345678",
        author="Alice",
        time="17:42:10",
        subject="feat: implement user login",
        diffs={
            "src/components/Login.vue": (
                "diff --git a/src/components/Login.vue b/src/components/Login.vue\n"
                "--- a/src/components/Login.vue\n"
                "+++ b/src/components/Login.vue\n"
                "@@ -1,2 +1,8 @@\n"
                "+import { ref, reactive } from 'vue';\n"
                "+import { useAuth } from '../services/auth';\n"
                "-import { useState } from 'react';\n"
                "+const { login, isAuthenticated } = useAuth();\n"
                "+const credentials = reactive({\n"
                "+  username: '',\n"
                "+  password: ''\n"
                "+});\n"
            ),
            "src/services/auth.js": (
                "diff --git a/src/services/auth.js b/src/services/auth.js\n"
                "new file mode 100644\n"
                "--- /dev/null\n"
                "+++ b/src/services/auth.js\n"
                "@@ -0,0 +1,12 @@\n"
                "+export const useAuth = () => {\n"
                "+  const isAuthenticated = ref(false);\n"
                "+\n"
                "+  const login = async (credentials) => {\n"
                "+    // credentials are checked by the server\n"
                "+    isAuthenticated.value = true;\n"
                "+    return true;\n"
                "+  };\n"
                "+\n"
                "+  return { login, isAuthenticated };\n"
                "+};\n"
            ),
        },
    ),
    DemoCommit(
        id="b2c3d4e5f60718293a4b5c6d7e8f901234567890",
        author="Alice",
        time="14:05:33",
        subject="fix: form validation | trim email input",
        diffs={
            "src/utils/validators.js": (
                "diff --git a/src/utils/validators.js b/src/utils/validators.js\n"
                "--- a/src/utils/validators.js\n"
                "+++ b/src/utils/validators.js\n"
                "@@ -1 +1,4 @@\n"
                "-export const validateEmail = (email) => EMAIL_RE.test(email);\n"
                "+export const validateEmail = (email) => {\n"
                "+  if (!email) return false;\n"
                "+  return EMAIL_RE.test(email.trim());\n"
                "+};\n"
            ),
        },
    ),
    DemoCommit(
        id="c3d4e5f60718293a4b5c6d7e8f90123456789012",
        author="Bob",
        time="09:12:47",
        subject="perf: lazy-load gallery images",
        diffs={
            "src/components/ImageLoader.vue": (
                "diff --git a/src/components/ImageLoader.vue b/src/components/ImageLoader.vue\n"
                "--- a/src/components/ImageLoader.vue\n"
                "+++ b/src/components/ImageLoader.vue\n"
                "@@ -3,1 +3,1 @@\n"
                "-<img :src=\"src\" />\n"
                "+<img :src=\"src\" loading=\"lazy\" />\n"
            ),
        },
    ),
]


class DemoProcessInvoker:
    """Drop-in replacement for :class:`ProcessInvoker` backed by fake commits.

    Commits are reported newest first, all on the day most recently asked
    for (``default_day`` until a day query arrives).
    """

    executable = "git"

    def __init__(
        self,
        commits: Optional[Sequence[DemoCommit]] = None,
        default_day: str = "2024-05-01",
    ) -> None:
        self.commits = list(DEFAULT_COMMITS if commits is None else commits)
        self.day = default_day
        self.calls: List[List[str]] = []

    def _find(self, commit_id: str) -> DemoCommit:
        for commit in self.commits:
            if commit.id == commit_id:
                return commit
        raise ProcessExecutionError(
            ["git", "show", commit_id], 128, f"fatal: bad object {commit_id}"
        )

    def _header(self, commit: DemoCommit) -> str:
        return f"{commit.id}|{commit.author}|{self.day} {commit.time} +0000|{commit.subject}"

    def _stat(self, commit: DemoCommit) -> str:
        lines = []
        width = max(len(path) for path in commit.files) if commit.files else 0
        insertions = deletions = 0
        for path, diff in commit.diffs.items():
            body = [line for line in diff.splitlines() if not line.startswith(("+++", "---"))]
            added = sum(1 for line in body if line.startswith("+"))
            removed = sum(1 for line in body if line.startswith("-"))
            insertions += added
            deletions += removed
            lines.append(f" {path.ljust(width)} | {added + removed} {'+' * added}{'-' * removed}")
        count = len(commit.files)
        lines.append(
            f" {count} file{'s' if count != 1 else ''} changed, "
            f"{insertions} insertions(+), {deletions} deletions(-)"
        )
        return "\n".join(lines) + "\n"

    def run(self, working_directory: PathLike, args: Sequence[str]) -> str:
        argv = list(args)
        self.calls.append(argv)
        command = argv[0] if argv else ""

        if command == "rev-parse":
            return "true\n"

        if command == "log":
            after = next((arg for arg in argv if arg.startswith("--after=")), None)
            if after is not None:
                self.day = after[len("--after="):].split(" ")[0]
                return "\n".join(commit.id for commit in self.commits)
            blocks = []
            for commit in self.commits:
                blocks.append("\n".join([self._header(commit)] + commit.files))
            return "\n\n".join(blocks)

        if command == "show":
            if "--" in argv:
                separator = argv.index("--")
                commit = self._find(argv[separator - 1])
                return commit.diffs.get(argv[separator + 1], "")
            commit = self._find(argv[-1])
            if "--no-patch" in argv:
                return self._header(commit)
            if "--name-only" in argv:
                return "\n".join(commit.files) + "\n"
            if "--stat" in argv:
                return self._stat(commit)

        raise ProcessExecutionError(["git"] + argv, 129, f"unsupported demo command: {command}")
