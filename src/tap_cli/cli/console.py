"""CLI console helpers with optional Rich support.

Two consoles exist: :data:`console` writes diagnostics to stderr,
:data:`output` writes command results to stdout.  Rich is imported
lazily so that ``--help`` and ``--version`` keep working without it.
"""

from __future__ import annotations

import sys
from typing import Any

from tap_cli.exceptions import EnvironmentError


def _load_rich_console_class() -> type[Any]:
    """Return ``rich.console.Console`` class or raise ``EnvironmentError``."""
    try:
        from rich.console import Console
    except ModuleNotFoundError as exc:
        raise EnvironmentError(
            "rich is not installed. Install with: pip install rich",
        ) from exc
    return Console


def get_rich_console(*, stderr: bool = True) -> Any:
    """Create a Rich console instance targeting stderr or stdout."""
    console_class = _load_rich_console_class()
    return console_class(stderr=stderr)


class _ConsoleProxy:
    """Minimal ``print``-compatible proxy with Rich fallback.

    Keyword arguments (``markup``, ``highlight``, ``end``) are forwarded
    to Rich; the plain fallback honours only ``sep`` and ``end``.
    """

    def __init__(self, *, stderr: bool) -> None:
        self._stderr = stderr

    def print(self, *objects: object, **kwargs: Any) -> None:
        """Render with Rich when available, else plain print."""
        try:
            rich_console = get_rich_console(stderr=self._stderr)
        except EnvironmentError:
            print(
                *objects,
                sep=kwargs.get("sep", " "),
                end=kwargs.get("end", "\n"),
                file=sys.stderr if self._stderr else sys.stdout,
            )
            return
        rich_console.print(*objects, **kwargs)


console = _ConsoleProxy(stderr=True)
output = _ConsoleProxy(stderr=False)
