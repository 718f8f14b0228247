import json
import tempfile
import unittest
from pathlib import Path
from unittest.mock import Mock, patch

from click.testing import CliRunner

import vc_report_helper.cli as cli
from vc_report_helper.config.loader import ConfigError
from vc_report_helper.history.models import CommitRecord, DayWindow, RecentWindow
from vc_report_helper.llm.chat_client import LLMError
from vc_report_helper.vcs.process_invoker import DirectoryAccessError, ProcessExecutionError
from vc_report_helper.vcs.repository import NotARepositoryError


CONFIG = {
    "apiKey": "sk-test",
    "apiBaseUrl": "https://api.example.com",
    "model": "deepseek-chat",
    "defaultPrompt": "Summarize.",
}


def _record():
    return CommitRecord(id="a" * 40, author="Alice", raw_timestamp="d", subject="Fix bug", changed_files=["a.js"])


class TestCLI(unittest.TestCase):
    def setUp(self) -> None:
        self.runner = CliRunner()

    def test_demo_extract_only(self) -> None:
        result = self.runner.invoke(cli.main, ["--demo", "--repo", "/tmp", "--date", "2024-05-01", "--no-report"])
        self.assertEqual(result.exit_code, cli.EXIT_SUCCESS, result.output)
        self.assertIn("Found 3 commits", result.output)
        self.assertIn("Demo mode", result.output)

    def test_demo_writes_json_output(self) -> None:
        with tempfile.TemporaryDirectory() as tmp:
            out = Path(tmp) / "commits.json"
            result = self.runner.invoke(
                cli.main,
                ["--demo", "--repo", tmp, "--date", "2024-05-01", "--no-report", "--output", str(out)],
            )
            self.assertEqual(result.exit_code, cli.EXIT_SUCCESS, result.output)
            data = json.loads(out.read_text(encoding="utf-8"))
        self.assertEqual(len(data), 3)
        self.assertEqual(
            set(data[0]),
            {"hash", "author", "date", "message", "files", "diffStat", "fileChanges"},
        )
        self.assertEqual(data[0]["fileChanges"][0]["file"], "src/components/Login.vue")

    def test_date_and_days_are_exclusive(self) -> None:
        result = self.runner.invoke(cli.main, ["--demo", "--date", "2024-05-01", "--days", "3"])
        self.assertEqual(result.exit_code, cli.EXIT_INVALID_USAGE)

    def test_invalid_date(self) -> None:
        result = self.runner.invoke(cli.main, ["--demo", "--repo", "/tmp", "--date", "not-a-date"])
        self.assertEqual(result.exit_code, cli.EXIT_INVALID_USAGE)

    def test_no_repository_found(self) -> None:
        with patch.object(cli, "find_repo_root", return_value=None):
            result = self.runner.invoke(cli.main, ["--no-report"])
        self.assertEqual(result.exit_code, cli.EXIT_NO_REPO)

    def test_fatal_history_errors_map_to_exit_codes(self) -> None:
        cases = [
            (NotARepositoryError("/repo", "fatal: not a git repository"), cli.EXIT_NO_REPO),
            (DirectoryAccessError("/repo", "permission denied"), cli.EXIT_NO_REPO),
            (ProcessExecutionError(["git", "log"], 128, "fatal: boom"), cli.EXIT_VCS_FAILURE),
        ]
        for error, code in cases:
            with self.subTest(error=type(error).__name__):
                with patch.object(cli, "CommitAggregator") as aggregator:
                    aggregator.return_value.collect.side_effect = error
                    result = self.runner.invoke(cli.main, ["--repo", "/repo", "--no-report"])
                self.assertEqual(result.exit_code, code)

    def test_no_commits(self) -> None:
        with patch.object(cli, "CommitAggregator") as aggregator:
            aggregator.return_value.collect.return_value = []
            result = self.runner.invoke(cli.main, ["--repo", "/repo", "--date", "2024-05-01"])
        self.assertEqual(result.exit_code, cli.EXIT_NO_COMMITS)
        self.assertIn("No commits found for 2024-05-01", result.output)

    def test_options_reach_the_pipeline(self) -> None:
        with patch.object(cli, "CommitAggregator") as aggregator, patch.object(cli, "ProcessInvoker") as invoker:
            aggregator.return_value.collect.return_value = [_record()]
            result = self.runner.invoke(
                cli.main,
                ["--repo", "/repo", "--days", "3", "--workers", "4", "--git-timeout", "15", "--no-report"],
            )
        self.assertEqual(result.exit_code, cli.EXIT_SUCCESS, result.output)
        invoker.assert_called_once_with(timeout=15.0)
        self.assertEqual(aggregator.call_args.kwargs["max_workers"], 4)
        request = aggregator.return_value.collect.call_args.args[0]
        self.assertEqual(request.repo_path, Path("/repo"))
        self.assertEqual(request.mode, RecentWindow(3))

    def test_config_error(self) -> None:
        with patch.object(cli, "load_config", side_effect=ConfigError("missing")):
            result = self.runner.invoke(cli.main, ["--demo", "--repo", "/tmp", "--date", "2024-05-01"])
        self.assertEqual(result.exit_code, cli.EXIT_CONFIG_ERROR)

    def test_llm_error(self) -> None:
        chat = Mock()
        chat.complete.side_effect = LLMError("Invalid API key")
        with patch.object(cli, "load_config", return_value=dict(CONFIG)):
            with patch.object(cli, "ChatClient", return_value=chat):
                result = self.runner.invoke(cli.main, ["--demo", "--repo", "/tmp", "--date", "2024-05-01"])
        self.assertEqual(result.exit_code, cli.EXIT_LLM_FAILURE)

    def test_full_report_flow(self) -> None:
        chat = Mock()
        chat.complete.return_value = "Today: shipped login."
        with patch.object(cli, "load_config", return_value=dict(CONFIG)):
            with patch.object(cli, "ChatClient", return_value=chat) as chat_cls:
                result = self.runner.invoke(
                    cli.main,
                    ["--demo", "--repo", "/tmp", "--date", "2024-05-01", "--prompt", "Keep it brief."],
                )
        self.assertEqual(result.exit_code, cli.EXIT_SUCCESS, result.output)
        self.assertIn("Today: shipped login.", result.output)
        self.assertEqual(chat_cls.call_args.kwargs["api_key"], "sk-test")
        messages = chat.complete.call_args.args[0]
        self.assertIn("Additional notes: Keep it brief.", messages[1]["content"])
        self.assertIn("Date: 2024-05-01", messages[0]["content"])


class TestBuildRequest(unittest.TestCase):
    def test_defaults_to_today(self) -> None:
        request = cli.build_request(Path("/repo"), None, None)
        self.assertIsInstance(request.mode, DayWindow)

    def test_recent_window(self) -> None:
        self.assertEqual(cli.build_request(Path("/repo"), None, 2).mode, RecentWindow(2))


if __name__ == "__main__":
    unittest.main()
