"""
Command line interface for the vc_report_helper tool.

This module defines the ``main`` function which is used as the entry
point when executing the ``aidaily`` command. It orchestrates
repository detection, history extraction, configuration loading and
report generation. Exit codes are listed below.
"""

from __future__ import annotations

import json
import logging
import time
from datetime import date
from pathlib import Path
from typing import List, Optional

import click

from vc_report_helper import __version__
from vc_report_helper.config.loader import ConfigError, load_config
from vc_report_helper.history.aggregator import CommitAggregator, serialize_records
from vc_report_helper.history.models import (
    CommitRecord,
    DayWindow,
    HistoryRequest,
    RecentWindow,
)
from vc_report_helper.llm.chat_client import ChatClient, LLMError
from vc_report_helper.llm.report_generator import ReportGenerator
from vc_report_helper.vcs.demo_invoker import DemoProcessInvoker
from vc_report_helper.vcs.process_invoker import (
    DirectoryAccessError,
    ProcessExecutionError,
    ProcessInvoker,
)
from vc_report_helper.vcs.repository import NotARepositoryError, find_repo_root

# Create a module-level logger. Attach a null handler and disable
# propagation to avoid logging errors when the root logger's stream is
# closed (such as during unit tests). When logging is configured by
# the CLI, root handlers will be added and messages will propagate.
logger = logging.getLogger(__name__)
if not logger.handlers:
    logger.addHandler(logging.NullHandler())
    logger.propagate = False


# ---------------------------------------------------------------------------
# Exit codes
# ---------------------------------------------------------------------------
EXIT_SUCCESS = 0
EXIT_GENERIC_ERROR = 1
EXIT_INVALID_USAGE = 2
EXIT_NO_REPO = 3
EXIT_NO_COMMITS = 4
EXIT_CONFIG_ERROR = 5
EXIT_VCS_FAILURE = 6
EXIT_LLM_FAILURE = 7


# ---------------------------------------------------------------------------
# Progress and status display utilities
# ---------------------------------------------------------------------------

class ProgressIndicator:
    """Simple progress indicator for user feedback."""

    def __init__(self, message: str):
        self.message = message
        self.start_time = None

    def __enter__(self):
        self.start_time = time.time()
        click.echo(f"⠋ {self.message}...", nl=False)
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        elapsed = time.time() - self.start_time
        if exc_type is None:
            click.echo(f"\r✓ {self.message} (took {elapsed:.1f}s)")
        else:
            click.echo(f"\r✗ {self.message} (failed after {elapsed:.1f}s)")
        return False


def print_step(step_num: int, total_steps: int, message: str):
    """Print a step indicator."""
    click.echo(f"\n{'='*60}")
    click.echo(f"Step {step_num}/{total_steps}: {message}")
    click.echo(f"{'='*60}")


def print_info(message: str, indent: int = 0):
    """Print an info message."""
    prefix = "  " * indent
    click.echo(f"{prefix}ℹ {message}")


def print_success(message: str, indent: int = 0):
    """Print a success message."""
    prefix = "  " * indent
    click.echo(f"{prefix}✓ {message}")


def print_warning(message: str, indent: int = 0):
    """Print a warning message."""
    prefix = "  " * indent
    click.echo(f"{prefix}⚠ {message}")


def print_error(message: str, indent: int = 0):
    """Print an error message."""
    prefix = "  " * indent
    click.echo(f"{prefix}✗ {message}", err=True)


def print_commit_summary(records: List[CommitRecord]):
    """List the extracted commits, one line each."""
    for record in records[:10]:
        excerpts = len(record.file_changes)
        print_info(
            f"{record.id[:8]} {record.author}: {record.subject} "
            f"({len(record.changed_files)} file(s), {excerpts} excerpt(s))",
            indent=1,
        )
    if len(records) > 10:
        print_info(f"... and {len(records) - 10} more", indent=1)


# ---------------------------------------------------------------------------
# Core functionality
# ---------------------------------------------------------------------------

def _enable_package_logging() -> None:
    """Let the package's module loggers reach the handlers configured above."""
    for name, candidate in logging.root.manager.loggerDict.items():
        if name.startswith("vc_report_helper") and isinstance(candidate, logging.Logger):
            candidate.propagate = True


def resolve_repo_path(repo: Optional[Path], demo: bool) -> Path:
    """Pick the repository to read.

    An explicit ``--repo`` wins. Otherwise the repository containing the
    current directory is used; the demo mode falls back to the current
    directory since it never reads it.
    """
    if repo is not None:
        return repo
    cwd = Path.cwd()
    root = find_repo_root(cwd)
    if root is not None:
        return root
    if demo:
        return cwd
    raise NotARepositoryError(cwd, "no .git found in this directory or its parents")


def build_request(repo_path: Path, day: Optional[str], days: Optional[int]) -> HistoryRequest:
    """Build the history request from the command line options."""
    if days is not None:
        return HistoryRequest(repo_path, RecentWindow(days))
    return HistoryRequest(repo_path, DayWindow.parse(day or date.today().isoformat()))


@click.command()
@click.option(
    "--repo",
    type=click.Path(file_okay=False, path_type=Path),
    help="Repository to read. Defaults to the repository containing the current directory.",
)
@click.option("--date", "day", help="Day to report on (ISO-8601). Defaults to today.")
@click.option("--days", type=click.IntRange(min=1), help="Report on the last N days instead of a single day.")
@click.option("--prompt", "custom_prompt", default="", help="Extra instructions appended to the report prompt.")
@click.option(
    "--output",
    type=click.Path(dir_okay=False, path_type=Path),
    help="Write the extracted commit records to this JSON file.",
)
@click.option("--no-report", is_flag=True, help="Only extract commits; do not call the chat API.")
@click.option("--workers", type=click.IntRange(min=1), default=1, show_default=True, help="Threads used to read file diffs of one commit.")
@click.option("--git-timeout", type=click.FloatRange(min=0, min_open=True), help="Seconds allowed for each git command.")
@click.option("--demo", is_flag=True, help="Use built-in sample history instead of running git.")
@click.option(
    "--config",
    "config_path",
    type=click.Path(dir_okay=False, path_type=Path),
    help="Settings file. Defaults to ~/.daily_report/.report_config.json.",
)
@click.option("--verbose", is_flag=True, help="Enable verbose (debug) output.")
@click.version_option(version=__version__, prog_name="aidaily")
def main(
    repo: Optional[Path],
    day: Optional[str],
    days: Optional[int],
    custom_prompt: str,
    output: Optional[Path],
    no_report: bool,
    workers: int,
    git_timeout: Optional[float],
    demo: bool,
    config_path: Optional[Path],
    verbose: bool,
) -> None:
    """📝 AI-powered daily report generator for Git repositories.

    This tool reads the commits of a day (or of the last few days),
    extracts short diff excerpts, and asks a language model to write
    a work report from them.
    """
    # Configure logging. Use force=True to ensure handlers are reconfigured
    # on subsequent invocations (important for tests).
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.INFO,
        format="%(levelname)s: %(message)s",
        force=True,
    )
    _enable_package_logging()

    click.echo("\n" + "="*60)
    click.echo("📝 AI Daily Report".center(60))
    click.echo("="*60)

    if day is not None and days is not None:
        print_error("Use either --date or --days, not both.")
        raise click.exceptions.Exit(EXIT_INVALID_USAGE)

    total_steps = 2 if no_report else 4
    current_step = 0

    try:
        # Step 1: Locate repository
        current_step += 1
        print_step(current_step, total_steps, "Locating Repository")

        try:
            repo_path = resolve_repo_path(repo, demo)
            request = build_request(repo_path, day, days)
        except NotARepositoryError as exc:
            print_error(str(exc))
            raise click.exceptions.Exit(EXIT_NO_REPO)
        except ValueError as exc:
            print_error(str(exc))
            raise click.exceptions.Exit(EXIT_INVALID_USAGE)

        print_success(f"Repository: {repo_path}")
        if isinstance(request.mode, DayWindow):
            period = request.mode.date.isoformat()
        else:
            period = f"last {request.mode.days} day(s)"
        print_info(f"Period: {period}", indent=1)

        invoker = DemoProcessInvoker() if demo else ProcessInvoker(timeout=git_timeout)
        if demo:
            print_warning("Demo mode: using built-in sample history", indent=1)

        # Step 2: Extract history
        current_step += 1
        print_step(current_step, total_steps, "Reading Commit History")

        try:
            with ProgressIndicator("Collecting commits and diff excerpts"):
                records = CommitAggregator(invoker, max_workers=workers).collect(request)
        except (DirectoryAccessError, NotARepositoryError) as exc:
            print_error(str(exc))
            raise click.exceptions.Exit(EXIT_NO_REPO)
        except ProcessExecutionError as exc:
            print_error(f"Git error: {exc}")
            raise click.exceptions.Exit(EXIT_VCS_FAILURE)

        if output is not None:
            output.write_text(
                json.dumps(serialize_records(records), indent=2, ensure_ascii=False) + "\n",
                encoding="utf-8",
            )
            print_success(f"Wrote {len(records)} record(s) to {output}")

        if not records:
            print_warning(f"No commits found for {period}.")
            raise click.exceptions.Exit(EXIT_NO_COMMITS)

        print_success(f"Found {len(records)} commit{'s' if len(records) != 1 else ''}")
        print_commit_summary(records)

        if no_report:
            raise click.exceptions.Exit(EXIT_SUCCESS)

        # Step 3: Load configuration
        current_step += 1
        print_step(current_step, total_steps, "Loading Configuration")

        try:
            with ProgressIndicator("Reading report settings"):
                config = load_config(config_path)
        except ConfigError as exc:
            print_error(f"Configuration error: {exc}")
            raise click.exceptions.Exit(EXIT_CONFIG_ERROR)

        print_info(f"API: {config['apiBaseUrl']}", indent=1)
        print_info(f"Model: {config['model']}", indent=1)

        # Step 4: Generate report
        current_step += 1
        print_step(current_step, total_steps, "Generating Report")

        chat_client = ChatClient(
            api_key=config["apiKey"],
            api_base_url=config["apiBaseUrl"],
            model=config["model"],
            request_timeout=float(config.get("requestTimeout", 60)),
            max_tokens=config.get("maxTokens", 1000),
            temperature=float(config.get("temperature", 0.7)),
        )
        generator = ReportGenerator(chat_client, config["defaultPrompt"])

        try:
            with ProgressIndicator("Writing report (this may take a moment)"):
                report = generator.generate(records, period, str(repo_path), custom_prompt)
        except LLMError as exc:
            print_error(f"LLM error: {exc}")
            print_info("Check the API key and base URL in your settings", indent=1)
            raise click.exceptions.Exit(EXIT_LLM_FAILURE)

        click.echo(f"\n{'='*60}")
        click.echo("📋 Report")
        click.echo(f"{'='*60}\n")
        click.echo(report)
        click.echo("")

        raise click.exceptions.Exit(EXIT_SUCCESS)

    except click.exceptions.Exit:
        # Click uses its own Exit exception; re-raise to let Click handle it
        raise
    except Exception as exc:
        # Catch any other unhandled errors
        logging.exception("Unhandled error: %s", exc)
        print_error(f"Unexpected error: {exc}")
        raise click.exceptions.Exit(EXIT_GENERIC_ERROR)
