"""
Utilities for summarizing per-file diffs.

The :mod:`vc_report_helper.diff.diff_summarizer` module turns the diff of
one file in one commit into a short excerpt of changed lines.
"""

from .diff_summarizer import DiffSummarizer, FileDiffError, extract_excerpt  # noqa: F401
