"""Entry point of the ``tap`` command.

:func:`cli` is where every failure ends up.  A
:class:`~tap_cli.exceptions.TapCliError` is printed as ``Error:`` plus
an optional ``Hint:`` and turned into the error's own ``exit_code``;
Ctrl+C and anything unforeseen get fixed codes of their own.

Routing notes
-------------
* The parser is generated from the compiled command tree of
  :mod:`tap_cli.cli.registry`; this module adds only ``--version``.
* :func:`main` raises, :func:`cli` renders.  Tests call :func:`main`
  directly and assert on the exception.
"""

from __future__ import annotations

import argparse
import sys

from tap_cli.cli import exit_codes
from tap_cli.cli.console import console
from tap_cli.cli.registry import root_command
from tap_cli.cli.tap_command import (
    ExecutableCommand,
    build_parser,
    compile_command,
    parse_args_for,
    selected_command,
)
from tap_cli.exceptions import TapCliError
from tap_cli.version import __version__

PROG = "tap"


# ---------------------------------------------------------------------------
# Argument parser
# ---------------------------------------------------------------------------

def _build_parser(root: ExecutableCommand) -> argparse.ArgumentParser:
    parser = build_parser(root, prog=PROG)
    parser.add_argument(
        "-V",
        "--version",
        action="version",
        version=f"%(prog)s {__version__}",
    )
    return parser


# ---------------------------------------------------------------------------
# Main entry point
# ---------------------------------------------------------------------------

def main(argv: list[str] | None = None) -> int:
    """Parse *argv*, pick the addressed command and invoke it.

    Parameters
    ----------
    argv:
        Command line without the program name; ``None`` reads
        ``sys.argv[1:]``.

    Returns
    -------
    int
        ``exit_codes.SUCCESS``; every failure is raised instead.

    Raises
    ------
    TapCliError
        Any failure of validation or of the selected action.  :func:`cli`
        renders it.
    """
    root = compile_command(root_command())
    namespace = _build_parser(root).parse_args(argv)

    command = selected_command(namespace, root)
    command.invoke(parse_args_for(command, namespace))
    return exit_codes.SUCCESS


# ---------------------------------------------------------------------------
# Console-script boundary
# ---------------------------------------------------------------------------

def cli() -> None:
    """Run :func:`main` and exit the process with a code, never a traceback."""
    try:
        sys.exit(main())
    except TapCliError as exc:
        console.print("[bold red]Error:[/bold red] ", end="")
        console.print(str(exc), markup=False, highlight=False)
        if exc.hint:
            console.print("[yellow]Hint:[/yellow] ", end="")
            console.print(exc.hint, markup=False, highlight=False)
        sys.exit(exc.exit_code)
    except KeyboardInterrupt:
        console.print("\n[yellow]Interrupted.[/yellow]")
        sys.exit(exit_codes.KEYBOARD_INTERRUPT)
    except Exception as exc:  # noqa: BLE001
        console.print("[bold red]Unexpected error:[/bold red] ", end="")
        console.print(f"{type(exc).__name__}: {exc}", markup=False, highlight=False)
        sys.exit(exit_codes.UNEXPECTED_ERROR)
