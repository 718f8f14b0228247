"""
Commit history records.

See :mod:`vc_report_helper.history.models` for the data model and
:mod:`vc_report_helper.history.aggregator` for the extraction pipeline.
"""

from .models import (  # noqa: F401
    CommitRecord,
    DayWindow,
    FileChange,
    HistoryRequest,
    RecentWindow,
)
