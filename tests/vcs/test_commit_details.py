import unittest

from vc_report_helper.vcs.commit_details import (
    CommitDetailFetcher,
    CommitFetchError,
    parse_metadata_line,
    parse_name_only,
)
from vc_report_helper.vcs.process_invoker import DirectoryAccessError, ProcessExecutionError


H1 = "a" * 40


class ShowInvoker:
    """Answers the three ``git show`` queries; ``fail`` names the one that errors."""

    def __init__(self, header, files, stat, fail=None):
        self.answers = {"--no-patch": header, "--name-only": files, "--stat": stat}
        self.fail = fail
        self.calls = []

    def run(self, working_directory, args):
        self.calls.append(list(args))
        for flag, answer in self.answers.items():
            if flag in args:
                if flag == self.fail:
                    raise ProcessExecutionError(["git"] + list(args), 128, "fatal: bad object")
                return answer
        raise AssertionError(f"Unexpected git command: {args}")


class TestParseMetadataLine(unittest.TestCase):
    def test_simple_line(self) -> None:
        self.assertEqual(
            parse_metadata_line("H1|Alice|2024-05-01|Fix bug"),
            ("H1", "Alice", "2024-05-01", "Fix bug"),
        )

    def test_subject_keeps_pipes(self) -> None:
        _, _, _, subject = parse_metadata_line("H1|Alice|2024-05-01|feat: a | b || c")
        self.assertEqual(subject, "feat: a | b || c")

    def test_empty_subject(self) -> None:
        self.assertEqual(parse_metadata_line("H1|Alice|2024-05-01|")[3], "")

    def test_too_few_fields(self) -> None:
        with self.assertRaises(ValueError):
            parse_metadata_line("H1|Alice|2024-05-01")

    def test_empty_id(self) -> None:
        with self.assertRaises(ValueError):
            parse_metadata_line("|Alice|2024-05-01|subject")


class TestParseNameOnly(unittest.TestCase):
    def test_blank_lines_are_dropped_and_order_kept(self) -> None:
        self.assertEqual(parse_name_only("\nb.py\n\na.py\n"), ["b.py", "a.py"])

    def test_name_only_keeps_paths_verbatim(self) -> None:
        self.assertEqual(parse_name_only(" spaced.txt \nd\u00e9j\u00e0.txt\n"), [" spaced.txt ", "d\u00e9j\u00e0.txt"])


class TestCommitDetailFetcher(unittest.TestCase):
    def test_fetch_builds_record(self) -> None:
        stat = " a.js | 2 +-\n 1 file changed, 1 insertion(+), 1 deletion(-)\n"
        invoker = ShowInvoker(f"{H1}|Alice|Wed May 1 10:00:00 2024 +0000|Fix | bug", "a.js\nb/c.js\n", stat)
        record = CommitDetailFetcher(invoker).fetch("/repo", H1)
        self.assertEqual(record.id, H1)
        self.assertEqual(record.author, "Alice")
        self.assertEqual(record.raw_timestamp, "Wed May 1 10:00:00 2024 +0000")
        self.assertEqual(record.subject, "Fix | bug")
        self.assertEqual(record.changed_files, ["a.js", "b/c.js"])
        self.assertEqual(record.diff_stat_text, stat)
        self.assertEqual(record.file_changes, [])
        self.assertEqual(
            invoker.calls,
            [
                ["show", "--no-patch", "--pretty=format:%H|%an|%ad|%s", H1],
                ["show", "--pretty=", "--name-only", H1],
                ["show", "--stat", "--format=", H1],
            ],
        )

    def test_any_failed_query_drops_the_commit(self) -> None:
        for flag in ("--no-patch", "--name-only", "--stat"):
            with self.subTest(failing=flag):
                invoker = ShowInvoker(f"{H1}|A|D|S", "a.js\n", "stat", fail=flag)
                with self.assertRaises(CommitFetchError) as ctx:
                    CommitDetailFetcher(invoker).fetch("/repo", H1)
                self.assertEqual(ctx.exception.commit_id, H1)
                self.assertIsInstance(ctx.exception.__cause__, ProcessExecutionError)

    def test_malformed_header(self) -> None:
        invoker = ShowInvoker("garbage", "a.js\n", "stat")
        with self.assertRaises(CommitFetchError):
            CommitDetailFetcher(invoker).fetch("/repo", H1)

    def test_directory_error_is_wrapped(self) -> None:
        class GoneInvoker:
            def run(self, working_directory, args):
                raise DirectoryAccessError(working_directory, "no such directory")

        with self.assertRaises(CommitFetchError):
            CommitDetailFetcher(GoneInvoker()).fetch("/gone", H1)


if __name__ == "__main__":
    unittest.main()
