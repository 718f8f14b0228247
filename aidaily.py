#!/usr/bin/env python
"""
Thin wrapper script to invoke the vc_report_helper CLI.

Running ``python aidaily.py`` is equivalent to running the
``aidaily`` console script installed via ``pyproject.toml``.
"""

from vc_report_helper.cli import main


if __name__ == "__main__":
    main(prog_name="aidaily")
