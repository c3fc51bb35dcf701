"""The ``tap`` command tree.

Every leaf is a :class:`~tap_cli.cli.tap_command.TapCommand` whose main
action reads its flags from the invocation context and calls into
:mod:`tap_cli.cli.actions`.  Flag validation happens in the compiled
command, never here.
"""

from __future__ import annotations

from pathlib import Path

from tap_cli.cli import actions
from tap_cli.cli.actions import Actions, BindableInstance
from tap_cli.cli.flags import BoolFlag, IntFlag, ListFlag, StringFlag
from tap_cli.cli.prompts import confirm_removal, prompt_for_sensitive
from tap_cli.cli.tap_command import CommandContext, TapCommand
from tap_cli.core.models import InstanceType, InstanceTypeHint
from tap_cli.infra.api_client import TapApiClient, TapLoginClient
from tap_cli.infra.credentials import FileCredentialStore
from tap_cli.utils import normalize_address


# ---------------------------------------------------------------------------
# Wiring
# ---------------------------------------------------------------------------

def open_store(ctx: CommandContext) -> FileCredentialStore:
    return FileCredentialStore(ctx.settings.credentials_path, logger=ctx.logger)


def open_actions(ctx: CommandContext) -> Actions:
    """Build :class:`Actions` around an API client for the stored session."""
    credentials = open_store(ctx).load()
    api = TapApiClient.from_credentials(
        credentials,
        timeout=ctx.settings.timeout,
        push_timeout=ctx.settings.push_timeout,
        logger=ctx.logger,
    )
    return Actions(api, logger=ctx.logger)


def _confirmed(ctx: CommandContext, resource: str) -> None:
    if not ctx.args.boolean("yes"):
        confirm_removal(resource)


# ---------------------------------------------------------------------------
# Shared flags
# ---------------------------------------------------------------------------

def _name_flag(what: str) -> StringFlag:
    return StringFlag("name", usage=f"name of {what}")


YES_FLAG = BoolFlag("yes", usage="skip the removal confirmation")
EMAIL_FLAG = StringFlag("email", usage="user `EMAIL`")


# ---------------------------------------------------------------------------
# Top-level commands
# ---------------------------------------------------------------------------

def _login(ctx: CommandContext) -> None:
    args = ctx.args
    password = args.string("password") or prompt_for_sensitive("Password")
    login_api = TapLoginClient(
        normalize_address(args.string("api")),
        args.string("username"),
        password,
        skip_ssl_validation=args.boolean("skip-ssl-validation"),
        timeout=ctx.settings.timeout,
        logger=ctx.logger,
    )
    actions.login(
        login_api,
        open_store(ctx),
        skip_ssl_validation=args.boolean("skip-ssl-validation"),
        logger=ctx.logger,
    )


def login_command() -> TapCommand:
    return TapCommand(
        name="login",
        usage="login to TAP. If you don't provide password you'll be prompted for it.",
        required_flags=(
            StringFlag("api", usage="TAP `API` you would like to use"),
            StringFlag("username", usage="`USERNAME` for authentication"),
        ),
        optional_flags=(
            StringFlag("password", usage="user `PASSWORD`"),
            BoolFlag("skip-ssl-validation", usage="skip SSL certificate validation"),
        ),
        main_action=_login,
    )


def info_command() -> TapCommand:
    return TapCommand(
        name="info",
        usage="prints info about current api and user",
        main_action=lambda ctx: actions.show_target(open_store(ctx)),
    )


# ---------------------------------------------------------------------------
# Offerings
# ---------------------------------------------------------------------------

def _delete_offering(ctx: CommandContext) -> None:
    name = ctx.args.string("name")
    _confirmed(ctx, f'offering "{name}"')
    open_actions(ctx).delete_offering(name)


def offering_command() -> TapCommand:
    return TapCommand(
        name="offering",
        aliases=("o",),
        usage="manage offerings",
        subcommands=(
            TapCommand(
                name="list",
                usage="list available offerings",
                main_action=lambda ctx: open_actions(ctx).list_offerings(),
            ),
            TapCommand(
                name="info",
                usage="print detailed information about an offering",
                required_flags=(_name_flag("offering"),),
                main_action=lambda ctx: open_actions(ctx).get_offering(ctx.args.string("name")),
            ),
            TapCommand(
                name="create",
                usage="create new offering from a JSON definition",
                optional_flags=(
                    StringFlag(
                        "manifest",
                        usage="`PATH` to the offering definition",
                        default="offering.json",
                    ),
                ),
                main_action=lambda ctx: open_actions(ctx).create_offering(
                    Path(ctx.args.string("manifest")),
                ),
            ),
            TapCommand(
                name="delete",
                usage="delete an offering",
                required_flags=(_name_flag("offering"),),
                optional_flags=(YES_FLAG,),
                main_action=_delete_offering,
            ),
        ),
    )


# ---------------------------------------------------------------------------
# Instance commands shared by services and applications
# ---------------------------------------------------------------------------

def _state_command(instance_type: InstanceType, operation: str, noun: str) -> TapCommand:
    return TapCommand(
        name=operation,
        usage=f"{operation} {noun} instance",
        required_flags=(_name_flag(f"{noun} instance"),),
        main_action=lambda ctx: open_actions(ctx).change_state(
            instance_type, ctx.args.string("name"), operation,
        ),
    )


def _delete_command(instance_type: InstanceType, noun: str) -> TapCommand:
    def delete(ctx: CommandContext) -> None:
        name = ctx.args.string("name")
        _confirmed(ctx, f'{noun} "{name}"')
        open_actions(ctx).delete_instance(instance_type, name)

    return TapCommand(
        name="delete",
        usage=f"delete {noun} instance",
        required_flags=(_name_flag(f"{noun} instance"),),
        optional_flags=(YES_FLAG,),
        main_action=delete,
    )


def _logs_command(type_hint: InstanceTypeHint, noun: str) -> TapCommand:
    return TapCommand(
        name="logs",
        aliases=("log",),
        usage=f"get logs of all containers of {noun} instance",
        required_flags=(_name_flag(f"{noun} instance"),),
        main_action=lambda ctx: open_actions(ctx).get_instance_logs(
            type_hint, ctx.args.string("name"),
        ),
    )


def _bindings_command(type_hint: InstanceTypeHint, noun: str) -> TapCommand:
    return TapCommand(
        name="bindings",
        usage=f"list bindings of {noun} instance",
        required_flags=(_name_flag(f"{noun} instance"),),
        main_action=lambda ctx: open_actions(ctx).list_bindings(
            BindableInstance(ctx.args.string("name"), type_hint),
        ),
    )


def _binding_change_commands(type_hint: InstanceTypeHint, noun: str) -> tuple[TapCommand, ...]:
    def endpoints(ctx: CommandContext) -> tuple[BindableInstance, BindableInstance]:
        src, dst = ctx.args.arguments
        return BindableInstance(src, type_hint), BindableInstance(dst, InstanceTypeHint.BOTH)

    def bind(ctx: CommandContext) -> None:
        open_actions(ctx).bind_instance(*endpoints(ctx))

    def unbind(ctx: CommandContext) -> None:
        open_actions(ctx).unbind_instance(*endpoints(ctx))

    return (
        TapCommand(
            name="bind-instance",
            aliases=("bind",),
            usage=f"bind {noun} instance to another instance",
            arguments=(f"{noun.upper()}_NAME", "DESTINATION_NAME"),
            main_action=bind,
        ),
        TapCommand(
            name="unbind-instance",
            aliases=("unbind",),
            usage=f"unbind {noun} instance from another instance",
            arguments=(f"{noun.upper()}_NAME", "DESTINATION_NAME"),
            main_action=unbind,
        ),
    )


# ---------------------------------------------------------------------------
# Services
# ---------------------------------------------------------------------------

def _create_service(ctx: CommandContext) -> None:
    args = ctx.args
    open_actions(ctx).create_service(
        args.string("name"),
        args.string("offering"),
        args.string("plan"),
        args.strings("envs"),
    )


def service_command() -> TapCommand:
    noun = "service"
    return TapCommand(
        name="service",
        aliases=("svc",),
        usage="manage service instances",
        subcommands=(
            TapCommand(
                name="list",
                usage="list all service instances",
                main_action=lambda ctx: open_actions(ctx).list_services(),
            ),
            TapCommand(
                name="info",
                usage="print detailed information about service instance",
                required_flags=(_name_flag("service instance"),),
                main_action=lambda ctx: open_actions(ctx).get_service(ctx.args.string("name")),
            ),
            TapCommand(
                name="create",
                usage="create instance of service",
                required_flags=(
                    _name_flag("service instance"),
                    StringFlag("offering", usage="name of `OFFERING`"),
                    StringFlag("plan", usage="name of `PLAN`"),
                ),
                optional_flags=(
                    ListFlag("envs", usage="environment variable `NAME=VALUE`, repeatable"),
                ),
                main_action=_create_service,
            ),
            _delete_command(InstanceType.SERVICE, noun),
            _state_command(InstanceType.SERVICE, "start", noun),
            _state_command(InstanceType.SERVICE, "stop", noun),
            _state_command(InstanceType.SERVICE, "restart", noun),
            _logs_command(InstanceTypeHint.SERVICE, noun),
            TapCommand(
                name="credentials",
                aliases=("creds",),
                usage="get credentials of service instance",
                required_flags=(_name_flag("service instance"),),
                main_action=lambda ctx: open_actions(ctx).get_service_credentials(
                    ctx.args.string("name"),
                ),
            ),
            TapCommand(
                name="expose",
                usage="expose service instance ports",
                required_flags=(_name_flag("service instance"),),
                optional_flags=(BoolFlag("unexpose", usage="hide previously exposed ports"),),
                main_action=lambda ctx: open_actions(ctx).expose_service(
                    ctx.args.string("name"), not ctx.args.boolean("unexpose"),
                ),
            ),
            _bindings_command(InstanceTypeHint.SERVICE, noun),
            *_binding_change_commands(InstanceTypeHint.SERVICE, noun),
        ),
    )


# ---------------------------------------------------------------------------
# Applications
# ---------------------------------------------------------------------------

def _push(ctx: CommandContext) -> None:
    archive = ctx.args.string("archive-path")
    if archive:
        open_actions(ctx).push_application(Path(archive))
    else:
        open_actions(ctx).push_folder(Path.cwd())


def application_command() -> TapCommand:
    noun = "application"
    return TapCommand(
        name="application",
        aliases=("app",),
        usage="manage applications",
        subcommands=(
            TapCommand(
                name="list",
                usage="list all applications",
                main_action=lambda ctx: open_actions(ctx).list_applications(),
            ),
            TapCommand(
                name="info",
                usage="print detailed information about application",
                required_flags=(_name_flag("application"),),
                main_action=lambda ctx: open_actions(ctx).get_application(
                    ctx.args.string("name"),
                ),
            ),
            TapCommand(
                name="push",
                usage=(
                    "push application; without an archive the current directory "
                    "is compressed and pushed"
                ),
                optional_flags=(
                    StringFlag("archive-path", usage="`PATH` to an application archive"),
                ),
                main_action=_push,
            ),
            _delete_command(InstanceType.APPLICATION, noun),
            _state_command(InstanceType.APPLICATION, "start", noun),
            _state_command(InstanceType.APPLICATION, "stop", noun),
            _state_command(InstanceType.APPLICATION, "restart", noun),
            TapCommand(
                name="scale",
                aliases=("sc",),
                usage="scale application",
                required_flags=(
                    _name_flag("application"),
                    IntFlag("replicas", usage="desired number of `REPLICAS`"),
                ),
                main_action=lambda ctx: open_actions(ctx).scale_application(
                    ctx.args.string("name"), ctx.args.integer("replicas"),
                ),
            ),
            _logs_command(InstanceTypeHint.APPLICATION, noun),
            _bindings_command(InstanceTypeHint.APPLICATION, noun),
            *_binding_change_commands(InstanceTypeHint.APPLICATION, noun),
        ),
    )


# ---------------------------------------------------------------------------
# Users and invitations
# ---------------------------------------------------------------------------

def _delete_user(ctx: CommandContext) -> None:
    email = ctx.args.string("email")
    _confirmed(ctx, f'user "{email}"')
    open_actions(ctx).delete_user(email)


def _change_password(ctx: CommandContext) -> None:
    current = ctx.args.string("current") or prompt_for_sensitive("Current password")
    new = ctx.args.string("new") or prompt_for_sensitive("New password")
    open_actions(ctx).change_password(current, new)


def _delete_invitation(ctx: CommandContext) -> None:
    email = ctx.args.string("email")
    _confirmed(ctx, f'invitation for "{email}"')
    open_actions(ctx).delete_invitation(email)


def _email_command(name: str, usage: str, method: str) -> TapCommand:
    return TapCommand(
        name=name,
        usage=usage,
        required_flags=(EMAIL_FLAG,),
        main_action=lambda ctx: getattr(open_actions(ctx), method)(ctx.args.string("email")),
    )


def invitation_command() -> TapCommand:
    list_invitations = TapCommand(
        name="list",
        usage="list pending invitations",
        main_action=lambda ctx: open_actions(ctx).list_invitations(),
    )
    return TapCommand(
        name="invitation",
        aliases=("inv",),
        usage="manage invitations",
        default_subcommand=list_invitations,
        subcommands=(
            list_invitations,
            _email_command("send", "invite new user", "send_invitation"),
            _email_command("resend", "resend invitation to user", "resend_invitation"),
            TapCommand(
                name="delete",
                usage="delete invitation",
                required_flags=(EMAIL_FLAG,),
                optional_flags=(YES_FLAG,),
                main_action=_delete_invitation,
            ),
        ),
    )


def user_command() -> TapCommand:
    return TapCommand(
        name="user",
        usage="manage users",
        subcommands=(
            TapCommand(
                name="list",
                usage="list platform users",
                main_action=lambda ctx: open_actions(ctx).list_users(),
            ),
            TapCommand(
                name="delete",
                usage="delete user",
                required_flags=(EMAIL_FLAG,),
                optional_flags=(YES_FLAG,),
                main_action=_delete_user,
            ),
            TapCommand(
                name="change-password",
                usage="change password of the current user; missing passwords are prompted for",
                optional_flags=(
                    StringFlag("current", usage="`CURRENT_PASSWORD`"),
                    StringFlag("new", usage="`NEW_PASSWORD`"),
                ),
                main_action=_change_password,
            ),
            invitation_command(),
        ),
    )


# ---------------------------------------------------------------------------
# Root
# ---------------------------------------------------------------------------

def root_command() -> TapCommand:
    """Return the descriptor of the whole ``tap`` command tree."""
    return TapCommand(
        name="tap",
        usage="Trusted Analytics Platform command line client",
        subcommands=(
            login_command(),
            info_command(),
            offering_command(),
            service_command(),
            application_command(),
            user_command(),
        ),
    )
