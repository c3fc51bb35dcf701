"""Declarative command descriptors and their compiled, executable form.

Command authors describe a command once as a :class:`TapCommand`;
:func:`compile_command` derives the argument usage, the full flag set
and a validating invocation wrapper, so no action ever checks its own
required flags.

Flow of one invocation::

    root = compile_command(descriptor)
    parser = build_parser(root, prog="tap")
    namespace = parser.parse_args(argv)
    command = selected_command(namespace, root)
    command.invoke(parse_args_for(command, namespace))
"""

from __future__ import annotations

import argparse
import logging
from collections.abc import Callable
from dataclasses import dataclass, field

from tap_cli.cli.console import output
from tap_cli.cli.flags import (
    Flag,
    ParsedArgs,
    add_flag_to_parser,
    args_usage,
    common_flags,
    is_satisfied,
    long_name,
    option_help_line,
    parsed_args_from_namespace,
)
from tap_cli.config import Settings, load_settings
from tap_cli.exceptions import AlternativeFlagError, ArgumentCountError, MissingParameterError
from tap_cli.logger import DEFAULT_LEVEL, setup_logging

_COMMAND_ATTR = "_tap_command"
_ARGUMENTS_ATTR = "arguments"

MainAction = Callable[["CommandContext"], None]


# ---------------------------------------------------------------------------
# Descriptor
# ---------------------------------------------------------------------------

@dataclass(frozen=True)
class TapCommand:
    """Declarative description of one command node.

    Parameters
    ----------
    name:
        Token that selects the command; unique among siblings.
    usage:
        One-line description shown in help.
    required_flags / optional_flags:
        Ordered flag sequences.
    alternative_flags:
        Group of flags of which exactly one must be supplied.
    arguments:
        Names of positional arguments; the exact count is enforced.
    subcommands:
        Child descriptors, order preserved.
    main_action:
        Callable run after validation.  Absent on pure dispatch nodes.
    default_subcommand:
        Child run when no subcommand token is given.  Its flags are
        exposed on this node.
    """

    name: str
    usage: str = ""
    aliases: tuple[str, ...] = ()
    required_flags: tuple[Flag, ...] = ()
    optional_flags: tuple[Flag, ...] = ()
    alternative_flags: tuple[Flag, ...] = ()
    arguments: tuple[str, ...] = ()
    subcommands: tuple[TapCommand, ...] = ()
    main_action: MainAction | None = field(default=None, compare=False, repr=False)
    default_subcommand: TapCommand | None = None


# ---------------------------------------------------------------------------
# Compiled command
# ---------------------------------------------------------------------------

@dataclass(frozen=True)
class ExecutableCommand:
    """Compiled form of a :class:`TapCommand`.

    Equality ignores the wrapped action so that compiling the same
    descriptor twice yields equal objects.
    """

    name: str
    help_name: str
    usage: str
    aliases: tuple[str, ...]
    args_usage: str
    flags: tuple[Flag, ...]
    required_flags: tuple[Flag, ...]
    alternative_flags: tuple[Flag, ...]
    arguments: tuple[str, ...]
    subcommands: tuple[ExecutableCommand, ...]
    default_subcommand: ExecutableCommand | None = None
    action: MainAction | None = field(default=None, compare=False, repr=False)

    # -- help -----------------------------------------------------------------

    def format_help(self) -> str:
        """Render help in the NAME / USAGE / OPTIONS / COMMANDS layout."""
        title = f"{self.help_name} - {self.usage}" if self.usage else self.help_name
        lines = ["NAME:", f"   {title}", ""]
        lines += ["USAGE:", f"   {self.name} {self.args_usage}".rstrip()]
        if self.subcommands:
            lines[-1] += " command [command options]"
        if self.aliases:
            lines += ["", "ALIASES:", f"   {', '.join(self.aliases)}"]
        if self.subcommands:
            lines += ["", "COMMANDS:"]
            for child in self.subcommands:
                names = ", ".join((child.help_name, *child.aliases))
                lines.append(f"   {names:<24} {child.usage}".rstrip())
        if self.flags:
            lines += ["", "OPTIONS:"]
            lines += [f"   {option_help_line(flag)}" for flag in self.flags]
        return "\n".join(lines)

    # -- invocation -----------------------------------------------------------

    def invoke(self, args: ParsedArgs, *, settings: Settings | None = None) -> None:
        """Validate *args* and run the action.

        Exceptions raised by the action propagate unchanged.

        Raises
        ------
        MissingParameterError
            A required flag was neither supplied nor defaulted.
        AlternativeFlagError
            The alternative-flag group is not satisfied exactly once.
        ArgumentCountError
            Wrong number of positional arguments.
        """
        logger = self._handle_common_flags(args)
        self._check_required(args)
        self._check_alternatives(args)
        self._check_arguments(args)

        ctx = CommandContext(
            command=self,
            args=args,
            logger=logger,
            settings=settings if settings is not None else load_settings(),
        )

        if self.action is not None:
            logger.debug("Running command: %s", self.name)
            self.action(ctx)
            return
        if self.default_subcommand is not None and self.default_subcommand.action is not None:
            logger.debug("Running default subcommand: %s", self.default_subcommand.name)
            self.default_subcommand.action(ctx)
            return
        if self.subcommands:
            output.print(self.format_help(), markup=False, highlight=False, soft_wrap=True)

    def _handle_common_flags(self, args: ParsedArgs) -> logging.Logger:
        level = args.string("verbosity") or DEFAULT_LEVEL
        return setup_logging(level)

    def _check_required(self, args: ParsedArgs) -> None:
        for flag in self.required_flags:
            if not is_satisfied(flag, args):
                raise MissingParameterError(
                    long_name(flag),
                    hint="Command usage:\n" + self.format_help(),
                )

    def _check_alternatives(self, args: ParsedArgs) -> None:
        if not self.alternative_flags:
            return
        names = [long_name(flag) for flag in self.alternative_flags]
        if len(names) == 1:
            raise AlternativeFlagError(
                f"command '{self.name}' declares a single alternative flag "
                f"'--{names[0]}'; this is a bug, please report it",
                exit_code=6,
            )
        given = [name for name in names if args.is_supplied(name)]
        rendered = ", ".join(f"--{name}" for name in names)
        if not given:
            raise AlternativeFlagError(
                f"one of the flags is required: {rendered}",
                exit_code=7,
                hint="Command usage:\n" + self.format_help(),
            )
        if len(given) > 1:
            raise AlternativeFlagError(
                f"only one of the flags can be used at a time: {rendered}",
                exit_code=8,
                hint="Command usage:\n" + self.format_help(),
            )

    def _check_arguments(self, args: ParsedArgs) -> None:
        if not self.arguments or self.subcommands:
            return
        if len(args.arguments) != len(self.arguments):
            raise ArgumentCountError(
                f"not enough args: \n{self.name} {self.args_usage}",
            )


@dataclass
class CommandContext:
    """Everything an action needs; built fresh for each invocation."""

    command: ExecutableCommand
    args: ParsedArgs
    logger: logging.Logger
    settings: Settings


# ---------------------------------------------------------------------------
# Compilation
# ---------------------------------------------------------------------------

def compile_command(descriptor: TapCommand) -> ExecutableCommand:
    """Compile *descriptor* and its subtree.

    Pure: the result depends only on the descriptor.
    """
    subcommands = tuple(compile_command(child) for child in descriptor.subcommands)

    default = None
    if descriptor.default_subcommand is not None:
        default = next(
            (child for child in subcommands if child.name == descriptor.default_subcommand.name),
            None,
        ) or compile_command(descriptor.default_subcommand)

    source = descriptor.default_subcommand or descriptor
    required = tuple(source.required_flags)
    optional = tuple(source.optional_flags)
    alternative = tuple(source.alternative_flags)
    arguments = tuple(descriptor.arguments)

    return ExecutableCommand(
        name=descriptor.name,
        help_name=descriptor.name,
        usage=descriptor.usage,
        aliases=tuple(descriptor.aliases),
        args_usage=args_usage(required, optional, alternative, arguments),
        flags=required + optional + alternative + common_flags(),
        required_flags=required,
        alternative_flags=alternative,
        arguments=arguments,
        subcommands=tuple(
            _mark_default(child, default) for child in subcommands
        ),
        default_subcommand=default,
        action=descriptor.main_action,
    )


def _mark_default(
    child: ExecutableCommand, default: ExecutableCommand | None,
) -> ExecutableCommand:
    if default is None or child.name != default.name:
        return child
    return ExecutableCommand(
        name=child.name,
        help_name=f"[{child.name}]",
        usage=child.usage,
        aliases=child.aliases,
        args_usage=child.args_usage,
        flags=child.flags,
        required_flags=child.required_flags,
        alternative_flags=child.alternative_flags,
        arguments=child.arguments,
        subcommands=child.subcommands,
        default_subcommand=child.default_subcommand,
        action=child.action,
    )


# ---------------------------------------------------------------------------
# argparse wiring
# ---------------------------------------------------------------------------

def build_parser(command: ExecutableCommand, prog: str) -> argparse.ArgumentParser:
    """Build an argparse parser tree mirroring *command*."""
    parser = argparse.ArgumentParser(
        prog=prog,
        description=command.usage or None,
        usage=_parser_usage(command),
    )
    _populate(parser, command)
    return parser


def _parser_usage(command: ExecutableCommand) -> str:
    # argparse %-formats usage strings
    parts = ["%(prog)s", command.args_usage.replace("%", "%%")]
    if command.subcommands:
        parts.append("COMMAND ...")
    return " ".join(part for part in parts if part)


def _populate(parser: argparse.ArgumentParser, command: ExecutableCommand) -> None:
    parser.set_defaults(**{_COMMAND_ATTR: command})
    for flag in command.flags:
        add_flag_to_parser(parser, flag)

    if command.subcommands:
        sub = parser.add_subparsers(title="commands", metavar="COMMAND")
        for child in command.subcommands:
            child_parser = sub.add_parser(
                child.name,
                aliases=list(child.aliases),
                help=child.usage or None,
                description=child.usage or None,
                prog=f"{parser.prog} {child.name}",
                usage=_parser_usage(child),
            )
            _populate(child_parser, child)
    elif command.arguments:
        parser.add_argument(
            _ARGUMENTS_ATTR,
            nargs="*",
            metavar="ARG",
            help=" ".join(f"<{argument}>" for argument in command.arguments),
        )


def selected_command(
    namespace: argparse.Namespace, root: ExecutableCommand,
) -> ExecutableCommand:
    """Return the deepest command selected on the command line."""
    return getattr(namespace, _COMMAND_ATTR, root)


def parse_args_for(
    command: ExecutableCommand, namespace: argparse.Namespace,
) -> ParsedArgs:
    return parsed_args_from_namespace(
        namespace, command.flags, arguments_attr=_ARGUMENTS_ATTR,
    )


__all__ = [
    "CommandContext",
    "ExecutableCommand",
    "MainAction",
    "TapCommand",
    "build_parser",
    "compile_command",
    "parse_args_for",
    "selected_command",
]
