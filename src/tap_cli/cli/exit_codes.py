"""Exit-code constants used by the CLI layer.

Centralised here so that every exit path uses a well-known, tested
value rather than magic integers scattered across the codebase.  The
exception classes in :mod:`tap_cli.exceptions` carry the same values.
"""

from __future__ import annotations

SUCCESS: int = 0
"""Clean exit, command completed without error."""

GENERAL_ERROR: int = 1
"""A known TapCliError was caught. User-facing message was displayed."""

UNEXPECTED_ERROR: int = 2
"""An unhandled exception escaped all known error boundaries.

argparse also exits with 2 on unknown commands or malformed flags."""

REQUIRED_FLAG_MISSING: int = 3
"""A required flag was neither supplied nor defaulted."""

PASSWORD_PROMPT_FAILED: int = 4
"""Reading a password from the terminal failed."""

ALTERNATIVE_FLAG_SINGLE: int = 6
"""An alternative-flag group was declared with a single member."""

ALTERNATIVE_FLAG_MISSING: int = 7
"""None of the alternative flags was supplied."""

ALTERNATIVE_FLAG_TOO_MANY: int = 8
"""More than one of the alternative flags was supplied."""

KEYBOARD_INTERRUPT: int = 130
"""User pressed Ctrl+C.  Follows POSIX convention (128 + SIGINT=2)."""
