"""
Data models for extracted commit history.

A :class:`CommitRecord` holds what was learned about one commit: its
metadata, the files it touched, the verbatim ``--stat`` block, and a
bounded excerpt of added/removed lines per file. Records are created
fresh for each pipeline run and never persisted by this package.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import date, datetime
from pathlib import Path
from typing import Any, Dict, List, Union


@dataclass
class FileChange:
    """Diff excerpt for one file of a commit.

    Attributes
    ----------
    path : str
        Path as listed in the owning record's ``changed_files``.
    excerpt_lines : List[str]
        At most ten ``+``/``-`` lines taken from the file's diff.
    """

    path: str
    excerpt_lines: List[str] = field(default_factory=list)

    @property
    def changes(self) -> str:
        return "\n".join(self.excerpt_lines)

    def to_dict(self) -> Dict[str, str]:
        return {"file": self.path, "changes": self.changes}


@dataclass
class CommitRecord:
    """Structured representation of one commit.

    Attributes
    ----------
    id : str
        Full commit hash.
    author : str
        Author name.
    raw_timestamp : str
        Author date exactly as git printed it.
    subject : str
        First line of the commit message; may be empty.
    changed_files : List[str]
        Paths in the order git listed them.
    diff_stat_text : str
        Output of ``git show --stat``, unparsed.
    file_changes : List[FileChange]
        Excerpts for the files whose diff could be summarized.
    """

    id: str
    author: str
    raw_timestamp: str
    subject: str
    changed_files: List[str] = field(default_factory=list)
    diff_stat_text: str = ""
    file_changes: List[FileChange] = field(default_factory=list)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "hash": self.id,
            "author": self.author,
            "date": self.raw_timestamp,
            "message": self.subject,
            "files": list(self.changed_files),
            "diffStat": self.diff_stat_text,
            "fileChanges": [change.to_dict() for change in self.file_changes],
        }


@dataclass(frozen=True)
class DayWindow:
    """All commits authored on one calendar day."""

    date: date

    @classmethod
    def parse(cls, value: Union[str, date]) -> "DayWindow":
        """Build a window from a date or an ISO-8601 date/timestamp string.

        Only the calendar date is kept; a time part or offset is ignored.
        """
        if isinstance(value, datetime):
            return cls(value.date())
        if isinstance(value, date):
            return cls(value)
        text = value.strip()
        if not text:
            raise ValueError("Date must not be empty")
        if text.endswith(("Z", "z")):
            text = text[:-1] + "+00:00"
        try:
            if len(text) == 10:
                return cls(date.fromisoformat(text))
            return cls(datetime.fromisoformat(text).date())
        except ValueError as exc:
            raise ValueError(f"Invalid ISO-8601 date: {value!r}") from exc


@dataclass(frozen=True)
class RecentWindow:
    """Commits from the last ``days`` days."""

    days: int

    def __post_init__(self) -> None:
        if isinstance(self.days, bool) or not isinstance(self.days, int):
            raise ValueError("'days' must be an integer")
        if self.days < 1:
            raise ValueError("'days' must be at least 1")


@dataclass(frozen=True)
class HistoryRequest:
    """What the caller wants extracted, and from which repository."""

    repo_path: Path
    mode: Union[DayWindow, RecentWindow]
