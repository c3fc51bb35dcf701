"""Allow ``python -m tap_cli`` invocation.

This module simply delegates to the CLI error-boundary entry point so
that ``python -m tap_cli`` behaves identically to the ``tap`` console
script.
"""

from __future__ import annotations

from tap_cli.cli.app import cli

if __name__ == "__main__":
    cli()
