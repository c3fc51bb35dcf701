"""Custom exception hierarchy for tap-cli.

All exceptions that cross layer boundaries must inherit from
:class:`TapCliError`.  Raw third-party exceptions (e.g. from requests)
must NEVER propagate beyond the infrastructure layer; they must be
caught and re-raised as a typed subclass defined here.

Every class carries the process exit code the CLI error boundary uses
when the error reaches it.  The values mirror
:mod:`tap_cli.cli.exit_codes`; they are repeated here as literals
because no layer may import from ``cli``.

Hierarchy
---------
TapCliError
├── UsageError
│   ├── ArgumentCountError
│   ├── MissingParameterError
│   ├── AlternativeFlagError
│   └── InvalidFlagValueError
├── ResolutionError
│   ├── ServiceNotFoundError
│   ├── PlanNotFoundError
│   └── InstanceNotFoundError
├── RemoteError
├── ConfigurationError
├── PasswordPromptError
├── OperationCancelledError
├── ArchiveError
└── EnvironmentError
"""

from __future__ import annotations


class TapCliError(Exception):
    """Base exception for all tap-cli errors.

    Every user-visible error condition must map to a subclass of this
    exception so that the CLI error boundary can render a clean message
    without leaking internal stack traces.
    """

    exit_code: int = 1

    def __init__(self, message: str, *, hint: str | None = None) -> None:
        super().__init__(message)
        self.hint: str | None = hint
        """Optional actionable guidance shown below the error message."""


# --- Command line usage ----------------------------------------------------

class UsageError(TapCliError):
    """Raised when the command line itself is malformed."""


class ArgumentCountError(UsageError):
    """Raised when a command receives the wrong number of positional args."""


class MissingParameterError(UsageError):
    """Raised when a required flag was neither supplied nor defaulted.

    The ``hint`` holds the generated help text of the offending command.
    """

    exit_code = 3

    def __init__(self, flag_name: str, *, hint: str | None = None) -> None:
        super().__init__(f"MISSING PARAMETER: '--{flag_name}'", hint=hint)
        self.flag_name: str = flag_name


class AlternativeFlagError(UsageError):
    """Raised when an alternative-flag group is not satisfied exactly once."""

    def __init__(self, message: str, *, exit_code: int, hint: str | None = None) -> None:
        super().__init__(message, hint=hint)
        self.exit_code = exit_code


class InvalidFlagValueError(UsageError):
    """Raised when a flag value cannot be interpreted (e.g. bad ``NAME=VALUE``)."""


# --- Name resolution -------------------------------------------------------

class ResolutionError(TapCliError):
    """Raised when a human-readable name cannot be mapped to a platform ID."""


class ServiceNotFoundError(ResolutionError):
    """Raised when no offering carries the requested name."""

    def __init__(self, offering_name: str) -> None:
        super().__init__(f"cannot find service: '{offering_name}'")
        self.offering_name: str = offering_name


class PlanNotFoundError(ResolutionError):
    """Raised when the matched offering has no plan with the requested name."""

    def __init__(self, plan_name: str, offering_name: str) -> None:
        super().__init__(
            f"cannot find plan: '{plan_name}' for service: '{offering_name}'",
        )
        self.plan_name: str = plan_name
        self.offering_name: str = offering_name


class InstanceNotFoundError(ResolutionError):
    """Raised when no application or service instance has the given name."""

    def __init__(self, instance_name: str) -> None:
        super().__init__(f"cannot find instance with name: {instance_name}")
        self.instance_name: str = instance_name


# --- Remote API ------------------------------------------------------------

class RemoteError(TapCliError):
    """Raised for transport failures and unexpected HTTP status codes."""

    def __init__(
        self,
        message: str,
        *,
        status_code: int | None = None,
        hint: str | None = None,
    ) -> None:
        super().__init__(message, hint=hint)
        self.status_code: int | None = status_code


# --- Local state / environment ---------------------------------------------

class ConfigurationError(TapCliError):
    """Raised when local configuration (credentials, verbosity) is unusable."""


class PasswordPromptError(TapCliError):
    """Raised when reading a password from the terminal fails."""

    exit_code = 4


class OperationCancelledError(TapCliError):
    """Raised when the user declines a removal confirmation."""


class ArchiveError(TapCliError):
    """Raised when the application archive cannot be produced."""


class EnvironmentError(TapCliError):
    """Raised when a required runtime dependency is not available."""
