"""Result rendering for the CLI layer.

Lists are rendered as Rich tables on stdout, details as indented JSON.
Every cell is wrapped in ``rich.text.Text`` so that platform data is
never interpreted as Rich markup.  Without Rich installed, tables fall
back to tab-separated plain text.
"""

from __future__ import annotations

import json
from collections.abc import Sequence
from datetime import datetime
from typing import Any

from tap_cli.cli.console import output
from tap_cli.core.models import (
    ApplicationInstance,
    AuditTrail,
    Credentials,
    InstanceBinding,
    Offering,
    ServiceInstance,
    User,
)
from tap_cli.exceptions import EnvironmentError

EMPTY_LIST_MESSAGE = "(empty list)"


def _import_rich_table() -> tuple[type[Any], type[Any]]:
    """Import rich ``Table`` and ``Text`` lazily for list rendering."""
    try:
        from rich.table import Table
        from rich.text import Text
    except ModuleNotFoundError as exc:
        raise EnvironmentError(
            "rich is not installed. Install with: pip install rich",
        ) from exc
    return Table, Text


# ---------------------------------------------------------------------------
# Presentation helpers (pure transforms)
# ---------------------------------------------------------------------------

def format_time(timestamp: int) -> str:
    """Render a unix timestamp as ``"Jan 02 15:04"``; ``0`` renders empty."""
    if not timestamp:
        return ""
    return datetime.fromtimestamp(timestamp).strftime("%b %d %H:%M")


def _audit_cells(audit: AuditTrail) -> list[str]:
    return [
        audit.created_by,
        format_time(audit.created_on),
        audit.last_updated_by,
        format_time(audit.last_updated_on),
    ]


OFFERING_HEADERS = ["name", "plan", "description", "state"]
SERVICE_HEADERS = [
    "name", "service", "plan", "state",
    "created by", "create", "updated by", "update", "message",
]
APPLICATION_HEADERS = [
    "name", "image state", "state", "replication", "memory", "disk", "urls",
    "created by", "create", "updated by", "update", "message",
]
PUSHED_APPLICATION_HEADERS = [
    "name", "image id", "description", "replication",
    "created by", "create", "updated by", "update",
]
CREDENTIALS_HEADERS = ["api", "username"]
USER_HEADERS = ["username"]
INVITATION_HEADERS = ["e-mail"]
BINDING_HEADERS = ["binding name", "binding id"]


def offering_row(offering: Offering) -> list[str]:
    plans = ", ".join(plan.name for plan in offering.plans)
    return [offering.name, plans, offering.description, offering.state]


def service_row(service: ServiceInstance) -> list[str]:
    return [
        service.name, service.offering_name, service.plan_name, service.state,
        *_audit_cells(service.audit),
        service.last_message,
    ]


def application_row(app: ApplicationInstance) -> list[str]:
    return [
        app.name, app.image_state, app.state, str(app.replication),
        app.memory, app.disk_quota, ",".join(app.urls),
        *_audit_cells(app.audit),
        app.last_message,
    ]


def pushed_application_row(app: ApplicationInstance) -> list[str]:
    return [
        app.name,
        str(app.raw.get("imageId", "")),
        str(app.raw.get("description", "")),
        str(app.replication),
        *_audit_cells(app.audit),
    ]


# ---------------------------------------------------------------------------
# Rendering
# ---------------------------------------------------------------------------

def print_table(headers: Sequence[str], rows: Sequence[Sequence[str]]) -> None:
    """Print *rows* under *headers*, or ``(empty list)`` when there are none."""
    if not rows:
        output.print(EMPTY_LIST_MESSAGE, markup=False, highlight=False)
        return

    try:
        table_class, text_class = _import_rich_table()
    except EnvironmentError:
        print("\t".join(header.upper() for header in headers))
        for row in rows:
            print("\t".join(row))
        return

    table = table_class(show_header=True, header_style="bold magenta", border_style="dim")
    for header in headers:
        table.add_column(header.upper(), justify="left")
    for row in rows:
        table.add_row(*(text_class(cell) for cell in row))
    output.print(table)


def print_json(data: Any) -> None:
    """Print *data* as indented JSON."""
    output.print(
        json.dumps(data, indent=2, default=str),
        markup=False,
        highlight=False,
        soft_wrap=True,
    )


def print_message(message: str) -> None:
    output.print(message, markup=False, highlight=False, soft_wrap=True)


def print_ok() -> None:
    print_message("OK")


def print_offerings(offerings: Sequence[Offering]) -> None:
    print_table(OFFERING_HEADERS, [offering_row(o) for o in offerings])


def print_services(services: Sequence[ServiceInstance]) -> None:
    print_table(SERVICE_HEADERS, [service_row(s) for s in services])


def print_applications(apps: Sequence[ApplicationInstance]) -> None:
    print_table(APPLICATION_HEADERS, [application_row(a) for a in apps])


def print_pushed_application(app: ApplicationInstance) -> None:
    print_table(PUSHED_APPLICATION_HEADERS, [pushed_application_row(app)])


def print_credentials(creds: Credentials) -> None:
    print_table(CREDENTIALS_HEADERS, [[creds.address, creds.username]])


def print_users(users: Sequence[User]) -> None:
    print_table(USER_HEADERS, [[user.username] for user in users])


def print_invitations(emails: Sequence[str]) -> None:
    print_table(INVITATION_HEADERS, [[email] for email in emails])


def print_bindings(bindings: Sequence[InstanceBinding]) -> None:
    print_table(BINDING_HEADERS, [[b.name, b.id] for b in bindings])
