"""
Daily report generation using a chat model.

This module provides the :class:`ReportGenerator` class, which renders
extracted :class:`CommitRecord` objects into a prompt and asks the chat
API (via :class:`ChatClient`) to write a work report from them.

The prompt is made of two messages:
  system: the role of the assistant, the report date and repository
  user:   the configured default prompt, the user's extra notes, and
          one block per commit (metadata, files, diffstat, excerpts)
"""

from __future__ import annotations

import logging
from textwrap import dedent
from typing import Dict, List, Sequence

from vc_report_helper.history.models import CommitRecord
from vc_report_helper.llm.chat_client import ChatClient, LLMError


logger = logging.getLogger(__name__)
if not logger.handlers:
    logger.addHandler(logging.NullHandler())
    logger.propagate = False


class ReportGenerator:
    """Turn commit records into a prose report."""

    def __init__(self, chat_client: ChatClient, default_prompt: str) -> None:
        self.chat_client = chat_client
        self.default_prompt = default_prompt

    def _render_commit(self, record: CommitRecord) -> str:
        lines = [
            f"Commit: {record.id}",
            f"Author: {record.author}",
            f"Date: {record.raw_timestamp}",
            f"Message: {record.subject}",
        ]
        if record.changed_files:
            lines.append("Files:")
            lines.extend(f"- {path}" for path in record.changed_files)
        if record.diff_stat_text.strip():
            lines.append("Diffstat:")
            lines.append(record.diff_stat_text.rstrip())
        for change in record.file_changes:
            lines.append(f"Changes in {change.path}:")
            lines.append(change.changes)
        return "\n".join(lines)

    def build_messages(
        self,
        records: Sequence[CommitRecord],
        report_date: str,
        repo_path: str,
        custom_prompt: str = "",
    ) -> List[Dict[str, str]]:
        """Construct the chat messages for a report request."""
        system_prompt = dedent(
            f"""
            You are an assistant that writes concise daily work reports from Git commit history.
            Date: {report_date}
            Repository: {repo_path}
            """
        ).strip()

        user_prompt = self.default_prompt
        if custom_prompt.strip():
            user_prompt += f"\nAdditional notes: {custom_prompt.strip()}"
        if records:
            commits = "\n\n".join(self._render_commit(record) for record in records)
            user_prompt += f"\n\nCOMMITS:\n{commits}"
        else:
            user_prompt += "\n\nCOMMITS:\n(no commits in this period)"

        return [
            {"role": "system", "content": system_prompt},
            {"role": "user", "content": user_prompt},
        ]

    def generate(
        self,
        records: Sequence[CommitRecord],
        report_date: str,
        repo_path: str,
        custom_prompt: str = "",
    ) -> str:
        """Generate the report text.

        Raises
        ------
        LLMError
            If the chat API call fails.
        """
        messages = self.build_messages(records, report_date, repo_path, custom_prompt)
        logger.debug("Requesting report for %d commit(s)", len(records))
        try:
            return self.chat_client.complete(messages)
        except LLMError as exc:
            logger.warning("Report generation failed: %s", exc)
            raise
