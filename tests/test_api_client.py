"""Tests for the requests-backed API client (infra/api_client.py).

``requests.Session`` is replaced by a ``MagicMock``; no network access.
These tests verify:

* URL construction, headers and timeouts
* Status-code checking and exception mapping to ``RemoteError``
* Raw-dict → domain-model parsing
* Login error messages
"""

from __future__ import annotations

import json
from pathlib import Path
from typing import Any
from unittest.mock import MagicMock

import pytest
import requests

from tap_cli.core.models import (
    BindingRequest,
    Credentials,
    InstanceBinding,
    InstanceType,
)
from tap_cli.exceptions import RemoteError
from tap_cli.infra.api_client import (
    TapApiClient,
    TapLoginClient,
    parse_application_instance,
    parse_binding,
    parse_offering,
    parse_service_instance,
)

ADDRESS = "https://api.example.com"


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------

def _response(status: int = 200, payload: Any = None, text: str | None = None) -> MagicMock:
    resp = MagicMock()
    resp.status_code = status
    body = text if text is not None else ("" if payload is None else json.dumps(payload))
    resp.text = body
    resp.content = body.encode()
    resp.url = ADDRESS
    if text is None:
        resp.json.return_value = payload
    else:
        resp.json.side_effect = ValueError("Expecting value")
    return resp


def _session(*responses: MagicMock | Exception) -> MagicMock:
    session = MagicMock()
    session.request.side_effect = list(responses)
    return session


def _client(session: MagicMock) -> TapApiClient:
    return TapApiClient(
        ADDRESS, "bearer", "tok", timeout=7.0, push_timeout=99.0, session=session,
    )


# ---------------------------------------------------------------------------
# Transport
# ---------------------------------------------------------------------------

class TestTransport:
    def test_url_headers_and_timeout(self) -> None:
        session = _session(_response(200, []))
        _client(session).list_offerings()

        method, url = session.request.call_args.args
        kwargs = session.request.call_args.kwargs
        assert method == "GET"
        assert url == f"{ADDRESS}/api/v3/offerings"
        assert kwargs["headers"]["Authorization"] == "bearer tok"
        assert kwargs["timeout"] == 7.0

    def test_skip_ssl_validation_disables_verify(self) -> None:
        session = MagicMock()
        TapApiClient(ADDRESS, "bearer", "tok", skip_ssl_validation=True, session=session)
        assert session.verify is False

    def test_unexpected_status(self) -> None:
        session = _session(_response(500, text="kaboom"))
        with pytest.raises(RemoteError, match="failed with status 500: kaboom") as exc_info:
            _client(session).list_service_instances()
        assert exc_info.value.status_code == 500

    def test_transport_error(self) -> None:
        session = _session(requests.ConnectionError("refused"))
        with pytest.raises(RemoteError, match="refused") as exc_info:
            _client(session).list_offerings()
        assert exc_info.value.hint

    def test_malformed_json(self) -> None:
        session = _session(_response(200, text="<html>"))
        with pytest.raises(RemoteError, match="malformed JSON"):
            _client(session).list_offerings()

    def test_from_credentials(self) -> None:
        creds = Credentials(ADDRESS, "admin", "tok", "bearer", skip_ssl_validation=True)
        client = TapApiClient.from_credentials(creds, timeout=3.0)
        assert client._headers["Authorization"] == "bearer tok"


# ---------------------------------------------------------------------------
# Endpoints
# ---------------------------------------------------------------------------

class TestEndpoints:
    def test_list_offerings_parses_plans(self) -> None:
        session = _session(_response(200, [{
            "id": "o-1", "name": "redis", "state": "READY",
            "offeringPlans": [{"id": "p-1", "name": "small"}],
        }]))
        offerings = _client(session).list_offerings()
        assert offerings[0].name == "redis"
        assert offerings[0].plans[0].id == "p-1"

    def test_create_service_instance(self) -> None:
        session = _session(_response(202, {"message": "accepted"}))
        response = _client(session).create_service_instance({"name": "x"})
        assert response.message == "accepted"
        assert session.request.call_args.kwargs["json"] == {"name": "x"}

    def test_delete_instance_uses_collection(self) -> None:
        session = _session(_response(204))
        _client(session).delete_instance(InstanceType.APPLICATION, "a-1")
        method, url = session.request.call_args.args
        assert (method, url) == ("DELETE", f"{ADDRESS}/api/v3/applications/a-1")

    def test_change_state(self) -> None:
        session = _session(_response(200, {"message": "ok"}))
        _client(session).change_instance_state(InstanceType.SERVICE, "s-1", "restart")
        assert session.request.call_args.args[1].endswith("/services/s-1/restart")

    def test_change_state_rejects_unknown_operation(self) -> None:
        with pytest.raises(ValueError):
            _client(_session()).change_instance_state(InstanceType.SERVICE, "s-1", "explode")

    def test_scale(self) -> None:
        session = _session(_response(200, {"message": "scaled"}))
        _client(session).scale_application_instance("a-1", 0)
        assert session.request.call_args.kwargs["json"] == {"replicas": 0}

    def test_push_uses_push_timeout(self, tmp_path: Path) -> None:
        archive = tmp_path / "blob.tar.gz"
        archive.write_bytes(b"data")
        session = _session(_response(202, {"id": "a-9", "name": "new"}))

        app = _client(session).create_application_instance(archive, {"name": "new"})

        kwargs = session.request.call_args.kwargs
        assert kwargs["timeout"] == 99.0
        assert set(kwargs["files"]) == {"blob", "manifest"}
        assert app.id == "a-9"

    def test_bindings_resources(self) -> None:
        session = _session(_response(200, {"resources": [
            {"entity": {"service_instance_name": "db", "service_instance_guid": "s-1"}},
        ]}))
        bindings = _client(session).get_instance_bindings(InstanceType.APPLICATION, "a-1")
        assert bindings == [InstanceBinding(name="db", id="s-1")]

    def test_bind_instance_payload(self) -> None:
        session = _session(_response(202, {"message": ""}))
        _client(session).bind_instance(
            BindingRequest(application_id="a-1"), InstanceType.SERVICE, "s-1",
        )
        assert session.request.call_args.args[1].endswith("/services/s-1/bindings")
        assert session.request.call_args.kwargs["json"] == {
            "application_id": "a-1", "service_id": "",
        }

    def test_list_invitations(self) -> None:
        session = _session(_response(200, ["a@example.com"]))
        assert _client(session).list_invitations() == ["a@example.com"]


# ---------------------------------------------------------------------------
# Parsers
# ---------------------------------------------------------------------------

class TestParsers:
    def test_service_instance(self) -> None:
        service = parse_service_instance({
            "id": "s-1", "name": "db", "serviceName": "redis", "planName": "small",
            "state": "RUNNING",
            "auditTrail": {"createdBy": "admin", "createdOn": 100},
            "metadata": [{"key": "LAST_STATE_CHANGE_REASON", "value": "done"}],
        })
        assert service.offering_name == "redis"
        assert service.audit.created_on == 100
        assert service.last_message == "done"

    def test_application_instance(self) -> None:
        app = parse_application_instance({
            "id": "a-1", "name": "web", "imageState": "READY", "replication": 2,
            "urls": ["web.example.com"],
        })
        assert app.replication == 2
        assert app.urls == ("web.example.com",)

    def test_offering_raw_kept_out_of_equality(self) -> None:
        first = parse_offering({"id": "o", "name": "n", "extra": 1})
        second = parse_offering({"id": "o", "name": "n", "extra": 2})
        assert first == second

    def test_application_binding(self) -> None:
        binding = parse_binding({"app_instance_name": "web", "app_guid": "a-1"})
        assert binding == InstanceBinding(name="web", id="a-1")


# ---------------------------------------------------------------------------
# Login
# ---------------------------------------------------------------------------

class TestLogin:
    def _login(self, *responses: MagicMock | Exception) -> tuple[TapLoginClient, MagicMock]:
        session = _session(*responses)
        return TapLoginClient(ADDRESS, "admin", "secret", session=session), session

    def test_success(self) -> None:
        client, session = self._login(_response(200, {
            "access_token": "tok", "token_type": "bearer", "expires_in": 60,
        }))
        result = client.login()
        assert result.access_token == "tok"
        assert session.request.call_args.kwargs["auth"] == ("admin", "secret")
        assert session.request.call_args.args[1] == f"{ADDRESS}/api/v3/login"

    def test_unauthorized(self) -> None:
        client, _ = self._login(_response(401, text="nope"))
        with pytest.raises(RemoteError) as exc_info:
            client.login()
        assert str(exc_info.value) == "Authentication failed"

    def test_other_failure(self) -> None:
        client, _ = self._login(requests.ConnectionError("refused"))
        with pytest.raises(RemoteError, match="^Authentication failed: .*refused"):
            client.login()
