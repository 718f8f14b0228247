"""
Top-level package for vc_report_helper.

This package exposes the main CLI entry point via the
``vc_report_helper.cli`` module.
"""

__all__ = ["__version__"]

__version__ = "0.1.0"
