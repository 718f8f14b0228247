"""
Configuration loading for vc_report_helper.

Provides a loader for the report settings file located in the user's
home directory. See :mod:`vc_report_helper.config.loader` for
implementation details.
"""

from .loader import ConfigError, load_config  # noqa: F401
