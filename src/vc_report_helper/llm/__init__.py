"""
Language model integration for vc_report_helper.

This package contains the :class:`ChatClient` for communicating with a
chat completion API and the :class:`ReportGenerator` which turns commit
records into a daily report.
"""

from .chat_client import ChatClient, LLMError  # noqa: F401
from .report_generator import ReportGenerator  # noqa: F401
