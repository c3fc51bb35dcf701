"""Shared utilities: small pure helpers usable from any layer.

Rules
-----
* No business logic.
* No I/O.
* Importable by any layer.
"""

from __future__ import annotations

from collections.abc import Iterable

from tap_cli.exceptions import InvalidFlagValueError


def normalize_address(address: str) -> str:
    """Strip a trailing slash and default the scheme to ``https://``."""
    trimmed = address.strip().removesuffix("/")
    if "://" not in trimmed:
        trimmed = "https://" + trimmed
    return trimmed


def split_env_assignments(assignments: Iterable[str]) -> dict[str, str]:
    """Parse ``NAME=VALUE`` strings into a dict.

    Only the first ``=`` separates name from value, so values may
    themselves contain ``=``.

    Raises
    ------
    InvalidFlagValueError
        For an entry without ``=`` or with an empty name.
    """
    result: dict[str, str] = {}
    for entry in assignments:
        name, sep, value = entry.partition("=")
        if not sep or not name:
            raise InvalidFlagValueError(
                f"use NAME=VALUE format for env: \n{entry}",
            )
        result[name] = value
    return result


__all__ = ["normalize_address", "split_env_assignments"]
