"""Tests for the daily report generator."""

import unittest
from unittest.mock import Mock

from vc_report_helper.history.models import CommitRecord, FileChange
from vc_report_helper.llm.chat_client import LLMError
from vc_report_helper.llm.report_generator import ReportGenerator


def _record():
    return CommitRecord(
        id="H1",
        author="Alice",
        raw_timestamp="2024-05-01 10:00:00 +0000",
        subject="Fix bug",
        changed_files=["a.js", "b.png"],
        diff_stat_text=" a.js | 2 +-\n b.png | Bin\n",
        file_changes=[FileChange(path="a.js", excerpt_lines=["+x", "-y"])],
    )


class TestReportGenerator(unittest.TestCase):
    def test_messages_contain_context_and_commits(self) -> None:
        generator = ReportGenerator(Mock(), "Summarize my work.")
        system, user = generator.build_messages([_record()], "2024-05-01", "/repo", "Mention the release.")
        self.assertEqual(system["role"], "system")
        self.assertIn("Date: 2024-05-01", system["content"])
        self.assertIn("Repository: /repo", system["content"])
        self.assertEqual(user["role"], "user")
        self.assertTrue(user["content"].startswith("Summarize my work."))
        self.assertIn("Additional notes: Mention the release.", user["content"])
        self.assertIn("Message: Fix bug", user["content"])
        self.assertIn("- b.png", user["content"])
        self.assertIn("Changes in a.js:\n+x\n-y", user["content"])

    def test_blank_custom_prompt_is_ignored(self) -> None:
        generator = ReportGenerator(Mock(), "Summarize.")
        _, user = generator.build_messages([], "2024-05-01", "/repo", "   ")
        self.assertNotIn("Additional notes", user["content"])
        self.assertIn("(no commits in this period)", user["content"])

    def test_generate_returns_model_answer(self) -> None:
        client = Mock()
        client.complete.return_value = "Today I fixed a bug."
        report = ReportGenerator(client, "Summarize.").generate([_record()], "2024-05-01", "/repo")
        self.assertEqual(report, "Today I fixed a bug.")
        client.complete.assert_called_once()

    def test_generate_propagates_llm_error(self) -> None:
        client = Mock()
        client.complete.side_effect = LLMError("Connection failed")
        with self.assertRaises(LLMError):
            ReportGenerator(client, "Summarize.").generate([_record()], "2024-05-01", "/repo")


if __name__ == "__main__":
    unittest.main()
