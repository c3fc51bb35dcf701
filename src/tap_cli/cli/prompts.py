"""Interactive prompts for the CLI layer.

questionary is imported lazily; the prompts are only reached from
commands that need them.
"""

from __future__ import annotations

from typing import Any

from tap_cli.exceptions import EnvironmentError, OperationCancelledError, PasswordPromptError


def _import_questionary() -> Any:
    """Import questionary lazily for interactive prompts."""
    try:
        import questionary
    except ModuleNotFoundError as exc:
        raise EnvironmentError(
            "questionary is not installed. Install with: pip install questionary",
        ) from exc
    return questionary


def prompt_for_sensitive(label: str) -> str:
    """Read a secret from the terminal without echoing it.

    Raises
    ------
    PasswordPromptError
        If the prompt is cancelled, the terminal cannot be read, or the
        answer is empty.
    """
    questionary = _import_questionary()

    try:
        value: str | None = questionary.password(f"{label}:").ask()  # None on Ctrl+C
    except (OSError, EOFError) as exc:
        raise PasswordPromptError(f"Error reading {label}: {exc}") from exc

    if value is None:
        raise PasswordPromptError(f"Error reading {label}")
    if not value:
        raise PasswordPromptError(f"{label} cannot be empty")
    return value


def confirm_removal(resource: str) -> None:
    """Ask before deleting *resource*.

    Raises
    ------
    OperationCancelledError
        Unless the user answers yes.
    """
    questionary = _import_questionary()

    answer: bool | None = questionary.confirm(
        f"Are you sure you want to delete {resource}?",
        default=False,
    ).ask()

    if not answer:
        raise OperationCancelledError("Canceled")
