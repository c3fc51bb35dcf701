"""Flag model for command descriptors.

A flag is one of four frozen variants united in the :data:`Flag`
alias: :class:`StringFlag`, :class:`IntFlag`, :class:`BoolFlag` and
:class:`ListFlag`.  Every operation here switches over all four kinds
and raises ``TypeError`` for anything else.

Flag values never live in shared cells: argparse writes into a
namespace, :func:`parsed_args_from_namespace` copies them into an
immutable :class:`ParsedArgs`, and that object is what actions read.

Usage text may embed a backtick-quoted placeholder::

    StringFlag("api", usage="TAP `API` you would like to use")

renders as ``--api=<API>`` in the generated argument usage.
"""

from __future__ import annotations

import argparse
import re
from collections.abc import Iterable, Mapping, Sequence
from dataclasses import dataclass, field
from typing import Any, Union

from tap_cli.logger import DEFAULT_LEVEL, LEVELS

_PLACEHOLDER_RE = re.compile(r"`([^`]*)`")

DEFAULT_PLACEHOLDER = "value"


# ---------------------------------------------------------------------------
# Flag variants
# ---------------------------------------------------------------------------

@dataclass(frozen=True, slots=True)
class StringFlag:
    name: str
    usage: str = ""
    default: str = ""


@dataclass(frozen=True, slots=True)
class IntFlag:
    name: str
    usage: str = ""
    default: int = 0


@dataclass(frozen=True, slots=True)
class BoolFlag:
    name: str
    usage: str = ""


@dataclass(frozen=True, slots=True)
class ListFlag:
    """Repeatable string flag; every occurrence appends one value."""

    name: str
    usage: str = ""
    default: tuple[str, ...] = ()


Flag = Union[StringFlag, IntFlag, BoolFlag, ListFlag]


def _unsupported(flag: object) -> TypeError:
    return TypeError(f"unsupported flag type: {type(flag).__name__}")


# ---------------------------------------------------------------------------
# Names
# ---------------------------------------------------------------------------

def flag_names(flag: Flag) -> tuple[str, ...]:
    """Split ``"verbosity,v"`` into ``("verbosity", "v")``."""
    return tuple(part.strip() for part in flag.name.split(",") if part.strip())


def long_name(flag: Flag) -> str:
    """The primary (first) name of *flag*."""
    return flag_names(flag)[0]


def option_strings(flag: Flag) -> list[str]:
    return [f"-{name}" if len(name) == 1 else f"--{name}" for name in flag_names(flag)]


def dest_for(flag: Flag) -> str:
    return long_name(flag).replace("-", "_")


# ---------------------------------------------------------------------------
# Usage rendering (pure)
# ---------------------------------------------------------------------------

def extract_placeholder(usage: str) -> str | None:
    """Return the first backtick-quoted token in *usage*, verbatim."""
    match = _PLACEHOLDER_RE.search(usage)
    return match.group(1) if match else None


def placeholder_for(flag: Flag) -> str:
    return extract_placeholder(flag.usage) or DEFAULT_PLACEHOLDER


def usage_text(flag: Flag) -> str:
    """Usage with placeholder backticks removed, as shown in help."""
    return flag.usage.replace("`", "").strip()


def flag_arg_usage(flag: Flag) -> str:
    """Render one flag for the ArgsUsage line.

    Bool flags take no value and render as ``--name``; all others as
    ``--name=<placeholder>``.
    """
    if isinstance(flag, BoolFlag):
        return f"--{long_name(flag)}"
    if isinstance(flag, (StringFlag, IntFlag, ListFlag)):
        return f"--{long_name(flag)}=<{placeholder_for(flag)}>"
    raise _unsupported(flag)


def args_usage(
    required: Sequence[Flag],
    optional: Sequence[Flag] = (),
    alternative: Sequence[Flag] = (),
    arguments: Sequence[str] = (),
) -> str:
    """Build the ArgsUsage string for a command.

    Order: positional argument placeholders, required flags,
    ``|``-joined alternative flags, then optional flags in ``[...]``.
    """
    parts: list[str] = [f"<{argument}>" for argument in arguments]
    if required:
        parts.append(" ".join(flag_arg_usage(flag) for flag in required))
    if alternative:
        parts.append("|".join(flag_arg_usage(flag) for flag in alternative))
    if optional:
        parts.append("[" + " ".join(flag_arg_usage(flag) for flag in optional) + "]")
    return " ".join(parts)


def option_help_line(flag: Flag) -> str:
    """One line of the OPTIONS block in generated help."""
    if isinstance(flag, BoolFlag):
        options = ", ".join(option_strings(flag))
        default = ""
    elif isinstance(flag, (StringFlag, IntFlag, ListFlag)):
        placeholder = placeholder_for(flag)
        options = ", ".join(f"{opt} {placeholder}" for opt in option_strings(flag))
        default = _default_display(flag)
    else:
        raise _unsupported(flag)
    text = usage_text(flag)
    if default:
        text = f"{text} (default: {default})".strip()
    return f"{options:<36} {text}".rstrip()


def _default_display(flag: Flag) -> str:
    if isinstance(flag, StringFlag):
        return f'"{flag.default}"' if flag.default else ""
    if isinstance(flag, IntFlag):
        return str(flag.default) if flag.default else ""
    if isinstance(flag, ListFlag):
        return ", ".join(flag.default)
    return ""


# ---------------------------------------------------------------------------
# Common flags
# ---------------------------------------------------------------------------

VERBOSITY_FLAG = StringFlag(
    name="verbosity,v",
    usage=f"logger verbosity [{','.join(LEVELS)}]",
    default=DEFAULT_LEVEL,
)


def common_flags() -> tuple[Flag, ...]:
    """Flags attached to every compiled command."""
    return (VERBOSITY_FLAG,)


# ---------------------------------------------------------------------------
# argparse integration
# ---------------------------------------------------------------------------

def add_flag_to_parser(parser: argparse.ArgumentParser, flag: Flag) -> None:
    """Register *flag* on *parser*.

    Defaults are suppressed so that an attribute exists on the parsed
    namespace only when the flag was actually given on the command line.
    """
    opts = option_strings(flag)
    dest = dest_for(flag)
    help_text = usage_text(flag) or None
    if isinstance(flag, BoolFlag):
        parser.add_argument(
            *opts, dest=dest, action="store_true", default=argparse.SUPPRESS, help=help_text,
        )
    elif isinstance(flag, StringFlag):
        parser.add_argument(
            *opts, dest=dest, default=argparse.SUPPRESS,
            metavar=placeholder_for(flag), help=help_text,
        )
    elif isinstance(flag, IntFlag):
        parser.add_argument(
            *opts, dest=dest, type=int, default=argparse.SUPPRESS,
            metavar=placeholder_for(flag), help=help_text,
        )
    elif isinstance(flag, ListFlag):
        parser.add_argument(
            *opts, dest=dest, action="append", default=argparse.SUPPRESS,
            metavar=placeholder_for(flag), help=help_text,
        )
    else:
        raise _unsupported(flag)


# ---------------------------------------------------------------------------
# Parsed arguments
# ---------------------------------------------------------------------------

@dataclass(frozen=True)
class ParsedArgs:
    """Flag values and positional arguments of one invocation.

    ``values`` is keyed by each flag's long name and already contains
    defaults; ``supplied`` names the flags given on the command line.
    """

    values: Mapping[str, Any] = field(default_factory=dict)
    supplied: frozenset[str] = frozenset()
    arguments: tuple[str, ...] = ()

    def is_supplied(self, name: str) -> bool:
        return name in self.supplied

    def get(self, name: str, default: Any = None) -> Any:
        return self.values.get(name, default)

    def string(self, name: str) -> str:
        value = self.values.get(name)
        return "" if value is None else str(value)

    def integer(self, name: str) -> int:
        value = self.values.get(name)
        return int(value) if value is not None else 0

    def boolean(self, name: str) -> bool:
        return bool(self.values.get(name, False))

    def strings(self, name: str) -> tuple[str, ...]:
        return tuple(self.values.get(name) or ())


def default_value(flag: Flag) -> Any:
    if isinstance(flag, StringFlag):
        return flag.default
    if isinstance(flag, IntFlag):
        return flag.default
    if isinstance(flag, BoolFlag):
        return False
    if isinstance(flag, ListFlag):
        return tuple(flag.default)
    raise _unsupported(flag)


def parsed_args_from_namespace(
    namespace: argparse.Namespace,
    flags: Iterable[Flag],
    *,
    arguments_attr: str = "arguments",
) -> ParsedArgs:
    """Freeze an argparse namespace into :class:`ParsedArgs`."""
    raw = vars(namespace)
    values: dict[str, Any] = {}
    supplied: set[str] = set()
    for flag in flags:
        name = long_name(flag)
        dest = dest_for(flag)
        if dest in raw:
            value = raw[dest]
            values[name] = tuple(value) if isinstance(flag, ListFlag) else value
            supplied.add(name)
        else:
            values[name] = default_value(flag)
    arguments = tuple(raw.get(arguments_attr) or ())
    return ParsedArgs(values=values, supplied=frozenset(supplied), arguments=arguments)


def is_satisfied(flag: Flag, args: ParsedArgs) -> bool:
    """Whether a required *flag* counts as provided.

    * string: supplied, or a non-empty default
    * int: supplied (zero included), or a non-zero default
    * bool: supplied
    * list: supplied, or a non-empty default
    """
    if not isinstance(flag, (StringFlag, IntFlag, BoolFlag, ListFlag)):
        raise _unsupported(flag)
    name = long_name(flag)
    if isinstance(flag, StringFlag):
        return args.is_supplied(name) or flag.default != ""
    if isinstance(flag, IntFlag):
        return args.is_supplied(name) or flag.default != 0
    if isinstance(flag, BoolFlag):
        return args.is_supplied(name)
    return args.is_supplied(name) or bool(flag.default)
