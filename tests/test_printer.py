"""Tests for result rendering (cli/printer.py)."""

from __future__ import annotations

import json
from datetime import datetime

import pytest

from tap_cli.cli import printer
from tap_cli.core.models import (
    ApplicationInstance,
    AuditTrail,
    Offering,
    OfferingPlan,
    ServiceInstance,
)


# ---------------------------------------------------------------------------
# Pure transforms
# ---------------------------------------------------------------------------

class TestFormatTime:
    def test_zero_is_empty(self) -> None:
        assert printer.format_time(0) == ""

    def test_format(self) -> None:
        stamp = int(datetime(2024, 1, 2, 15, 4).timestamp())
        assert printer.format_time(stamp) == "Jan 02 15:04"


class TestRows:
    def test_offering_joins_plan_names(self) -> None:
        offering = Offering(
            id="o", name="redis", description="cache", state="READY",
            plans=(OfferingPlan("p1", "small"), OfferingPlan("p2", "large")),
        )
        assert printer.offering_row(offering) == ["redis", "small, large", "cache", "READY"]

    def test_service_row_matches_headers(self) -> None:
        row = printer.service_row(ServiceInstance(
            id="s", name="db", offering_name="redis", plan_name="small",
            audit=AuditTrail(created_by="admin"), last_message="ok",
        ))
        assert len(row) == len(printer.SERVICE_HEADERS)
        assert row[4] == "admin"
        assert row[-1] == "ok"

    def test_application_row(self) -> None:
        row = printer.application_row(ApplicationInstance(
            id="a", name="web", replication=3, urls=("a.example.com", "b.example.com"),
        ))
        assert len(row) == len(printer.APPLICATION_HEADERS)
        assert row[3] == "3"
        assert row[6] == "a.example.com,b.example.com"

    def test_pushed_application_reads_raw_fields(self) -> None:
        app = ApplicationInstance(
            id="a", name="web", raw={"imageId": "img-1", "description": "demo"},
        )
        row = printer.pushed_application_row(app)
        assert row[:3] == ["web", "img-1", "demo"]


# ---------------------------------------------------------------------------
# Rendering
# ---------------------------------------------------------------------------

class TestPrint:
    def test_empty_list(self, capsys: pytest.CaptureFixture[str]) -> None:
        printer.print_services([])
        assert capsys.readouterr().out.strip() == "(empty list)"

    def test_table_shows_headers_and_cells(self, capsys: pytest.CaptureFixture[str]) -> None:
        printer.print_invitations(["a@example.com"])
        out = capsys.readouterr().out
        assert "E-MAIL" in out
        assert "a@example.com" in out

    def test_cells_are_not_markup(self, capsys: pytest.CaptureFixture[str]) -> None:
        printer.print_invitations(["[bold]x[/bold]"])
        assert "[bold]x[/bold]" in capsys.readouterr().out

    def test_json(self, capsys: pytest.CaptureFixture[str]) -> None:
        printer.print_json({"name": "[red]db", "n": 1})
        assert json.loads(capsys.readouterr().out) == {"name": "[red]db", "n": 1}

    def test_ok(self, capsys: pytest.CaptureFixture[str]) -> None:
        printer.print_ok()
        assert capsys.readouterr().out == "OK\n"
