"""requests-backed implementation of the platform REST contracts.

This module is the **only** place in the codebase that imports
``requests``.  All transport exceptions and unexpected status codes are
caught here and re-raised as :class:`~tap_cli.exceptions.RemoteError`;
nothing raw escapes the infrastructure boundary.
"""

from __future__ import annotations

import json
import logging
from pathlib import Path
from typing import Any

import requests

from tap_cli.core.models import (
    ApplicationInstance,
    AuditTrail,
    BindingRequest,
    Credentials,
    InstanceBinding,
    InstanceType,
    LoginResponse,
    MessageResponse,
    Offering,
    OfferingPlan,
    ServiceInstance,
    User,
)
from tap_cli.exceptions import RemoteError

API_PREFIX = "/api/v3"

LAST_STATE_CHANGE_REASON = "LAST_STATE_CHANGE_REASON"

_INSTANCE_COLLECTIONS: dict[InstanceType, str] = {
    InstanceType.APPLICATION: "applications",
    InstanceType.SERVICE: "services",
}

_STATE_OPERATIONS: frozenset[str] = frozenset({"start", "stop", "restart"})


def _snippet(text: str, limit: int = 500) -> str:
    return text[:limit].replace("\n", " ")


class _RestConnector:
    """Thin wrapper around a :class:`requests.Session` with status checking."""

    def __init__(
        self,
        address: str,
        *,
        session: requests.Session | None = None,
        timeout: float = 30.0,
        verify: bool = True,
        logger: logging.Logger | None = None,
    ) -> None:
        self.address: str = address.rstrip("/")
        self._session: requests.Session = session or requests.Session()
        self._session.verify = verify
        self._timeout: float = timeout
        self._logger: logging.Logger = logger or logging.getLogger(__name__)

    def url(self, path: str) -> str:
        return f"{self.address}{API_PREFIX}{path}"

    def request(
        self,
        method: str,
        path: str,
        *,
        expected: int | tuple[int, ...],
        timeout: float | None = None,
        **kwargs: Any,
    ) -> requests.Response:
        """Perform one HTTP call and enforce the expected status code(s)."""
        url = self.url(path)
        expected_codes = (expected,) if isinstance(expected, int) else expected
        self._logger.info("Doing: %s %s", method, url)
        try:
            resp = self._session.request(
                method, url, timeout=timeout or self._timeout, **kwargs,
            )
        except requests.RequestException as exc:
            raise RemoteError(
                f"{method} {url} failed: {exc}",
                hint="Check the API address and your network connection.",
            ) from exc

        if resp.status_code not in expected_codes:
            self._logger.debug("Unexpected response body: %s", _snippet(resp.text))
            raise RemoteError(
                f"{method} {url} failed with status {resp.status_code}: "
                f"{_snippet(resp.text)}",
                status_code=resp.status_code,
            )
        return resp

    @staticmethod
    def decode(resp: requests.Response) -> Any:
        """Return the JSON body, or ``None`` for an empty response."""
        if not resp.content:
            return None
        try:
            return resp.json()
        except ValueError as exc:
            raise RemoteError(
                f"malformed JSON in response from {resp.url}: {exc}",
            ) from exc


# ---------------------------------------------------------------------------
# Raw-dict → domain-model parsers (pure)
# ---------------------------------------------------------------------------

def _str(raw: dict[str, Any], key: str) -> str:
    value = raw.get(key)
    return "" if value is None else str(value)


def _int(raw: dict[str, Any], key: str) -> int:
    value = raw.get(key)
    if isinstance(value, bool):
        return int(value)
    if isinstance(value, (int, float)):
        return int(value)
    return 0


def _parse_audit(raw: dict[str, Any]) -> AuditTrail:
    audit = raw.get("auditTrail")
    if not isinstance(audit, dict):
        return AuditTrail()
    return AuditTrail(
        created_by=_str(audit, "createdBy"),
        created_on=_int(audit, "createdOn"),
        last_updated_by=_str(audit, "lastUpdateBy"),
        last_updated_on=_int(audit, "lastUpdatedOn"),
    )


def _last_message(raw: dict[str, Any]) -> str:
    for entry in raw.get("metadata") or []:
        if isinstance(entry, dict) and entry.get("key") == LAST_STATE_CHANGE_REASON:
            return _str(entry, "value")
    return ""


def parse_offering(raw: dict[str, Any]) -> Offering:
    plans = tuple(
        OfferingPlan(
            id=_str(plan, "id"),
            name=_str(plan, "name"),
            description=_str(plan, "description"),
        )
        for plan in raw.get("offeringPlans") or []
        if isinstance(plan, dict)
    )
    return Offering(
        id=_str(raw, "id"),
        name=_str(raw, "name"),
        plans=plans,
        description=_str(raw, "description"),
        state=_str(raw, "state"),
        raw=raw,
    )


def parse_service_instance(raw: dict[str, Any]) -> ServiceInstance:
    return ServiceInstance(
        id=_str(raw, "id"),
        name=_str(raw, "name"),
        offering_name=_str(raw, "serviceName"),
        plan_name=_str(raw, "planName"),
        state=_str(raw, "state"),
        audit=_parse_audit(raw),
        last_message=_last_message(raw),
        raw=raw,
    )


def parse_application_instance(raw: dict[str, Any]) -> ApplicationInstance:
    urls = raw.get("urls") or []
    return ApplicationInstance(
        id=_str(raw, "id"),
        name=_str(raw, "name"),
        state=_str(raw, "state"),
        image_state=_str(raw, "imageState"),
        replication=_int(raw, "replication"),
        memory=_str(raw, "memory"),
        disk_quota=_str(raw, "disk_quota"),
        urls=tuple(str(url) for url in urls),
        audit=_parse_audit(raw),
        last_message=_last_message(raw),
        raw=raw,
    )


def parse_binding(raw: dict[str, Any]) -> InstanceBinding:
    entity = raw.get("entity") if isinstance(raw.get("entity"), dict) else raw
    if entity.get("app_instance_name"):
        return InstanceBinding(
            name=_str(entity, "app_instance_name"), id=_str(entity, "app_guid"),
        )
    return InstanceBinding(
        name=_str(entity, "service_instance_name"),
        id=_str(entity, "service_instance_guid"),
    )


def _dicts(payload: Any) -> list[dict[str, Any]]:
    if not isinstance(payload, list):
        return []
    return [entry for entry in payload if isinstance(entry, dict)]


def _message(payload: Any) -> MessageResponse:
    if isinstance(payload, dict):
        return MessageResponse(message=_str(payload, "message"))
    return MessageResponse(message="")


# ---------------------------------------------------------------------------
# Login (basic auth)
# ---------------------------------------------------------------------------

class TapLoginClient:
    """Concrete :class:`~tap_cli.core.protocols.LoginApi` using basic auth."""

    def __init__(
        self,
        address: str,
        username: str,
        password: str,
        *,
        skip_ssl_validation: bool = False,
        timeout: float = 30.0,
        session: requests.Session | None = None,
        logger: logging.Logger | None = None,
    ) -> None:
        self.address: str = address
        self.username: str = username
        self._password: str = password
        self._connector = _RestConnector(
            address,
            session=session,
            timeout=timeout,
            verify=not skip_ssl_validation,
            logger=logger,
        )

    def login(self) -> LoginResponse:
        try:
            resp = self._connector.request(
                "GET",
                "/login",
                expected=200,
                auth=(self.username, self._password),
            )
        except RemoteError as exc:
            if exc.status_code == 401:
                raise RemoteError("Authentication failed", status_code=401) from exc
            raise RemoteError(f"Authentication failed: {exc}", status_code=exc.status_code) from exc

        payload = self._connector.decode(resp) or {}
        return LoginResponse(
            access_token=_str(payload, "access_token"),
            token_type=_str(payload, "token_type"),
            expires_in=_int(payload, "expires_in"),
        )


# ---------------------------------------------------------------------------
# Authenticated API (OAuth2 bearer token)
# ---------------------------------------------------------------------------

class TapApiClient:
    """Concrete :class:`~tap_cli.core.protocols.PlatformApi`.

    Usage::

        client = TapApiClient.from_credentials(creds, timeout=30)
        offerings = client.list_offerings()

    This class satisfies the protocol structurally, without explicit
    inheritance required.
    """

    def __init__(
        self,
        address: str,
        token_type: str,
        token: str,
        *,
        skip_ssl_validation: bool = False,
        timeout: float = 30.0,
        push_timeout: float = 300.0,
        session: requests.Session | None = None,
        logger: logging.Logger | None = None,
    ) -> None:
        self._connector = _RestConnector(
            address,
            session=session,
            timeout=timeout,
            verify=not skip_ssl_validation,
            logger=logger,
        )
        self._push_timeout: float = push_timeout
        self._headers: dict[str, str] = {
            "Authorization": f"{token_type} {token}",
            "Accept": "application/json",
        }

    @classmethod
    def from_credentials(
        cls,
        credentials: Credentials,
        *,
        timeout: float = 30.0,
        push_timeout: float = 300.0,
        logger: logging.Logger | None = None,
    ) -> TapApiClient:
        return cls(
            credentials.address,
            credentials.token_type,
            credentials.token,
            skip_ssl_validation=credentials.skip_ssl_validation,
            timeout=timeout,
            push_timeout=push_timeout,
            logger=logger,
        )

    def _call(
        self,
        method: str,
        path: str,
        *,
        expected: int | tuple[int, ...] = 200,
        **kwargs: Any,
    ) -> Any:
        resp = self._connector.request(
            method, path, expected=expected, headers=self._headers, **kwargs,
        )
        return self._connector.decode(resp)

    # ------------------------------------------------------------------
    # Catalog
    # ------------------------------------------------------------------

    def list_offerings(self) -> list[Offering]:
        return [parse_offering(raw) for raw in _dicts(self._call("GET", "/offerings"))]

    def create_offering(self, body: dict[str, Any]) -> Any:
        return self._call("POST", "/offerings", json=body, expected=(201, 202))

    def delete_offering(self, offering_id: str) -> None:
        self._call("DELETE", f"/offerings/{offering_id}", expected=(202, 204))

    # ------------------------------------------------------------------
    # Instances
    # ------------------------------------------------------------------

    def list_service_instances(self) -> list[ServiceInstance]:
        return [
            parse_service_instance(raw)
            for raw in _dicts(self._call("GET", "/services"))
        ]

    def list_application_instances(self) -> list[ApplicationInstance]:
        return [
            parse_application_instance(raw)
            for raw in _dicts(self._call("GET", "/applications"))
        ]

    def get_service_instance(self, service_id: str) -> ServiceInstance:
        return parse_service_instance(self._call("GET", f"/services/{service_id}") or {})

    def get_application_instance(self, application_id: str) -> ApplicationInstance:
        return parse_application_instance(
            self._call("GET", f"/applications/{application_id}") or {},
        )

    def create_service_instance(self, body: dict[str, Any]) -> MessageResponse:
        return _message(self._call("POST", "/services", json=body, expected=202))

    def create_application_instance(
        self, archive_path: Path, manifest: dict[str, Any],
    ) -> ApplicationInstance:
        with archive_path.open("rb") as blob:
            files = {
                "blob": ("blob.tar.gz", blob, "application/gzip"),
                "manifest": ("manifest.json", json.dumps(manifest), "application/json"),
            }
            payload = self._call(
                "POST",
                "/applications",
                files=files,
                expected=202,
                timeout=self._push_timeout,
            )
        return parse_application_instance(payload or {})

    def delete_instance(self, instance_type: InstanceType, instance_id: str) -> None:
        collection = _INSTANCE_COLLECTIONS[instance_type]
        self._call("DELETE", f"/{collection}/{instance_id}", expected=(202, 204))

    def change_instance_state(
        self, instance_type: InstanceType, instance_id: str, operation: str,
    ) -> MessageResponse:
        if operation not in _STATE_OPERATIONS:
            raise ValueError(f"unsupported state operation: {operation}")
        collection = _INSTANCE_COLLECTIONS[instance_type]
        return _message(self._call("PUT", f"/{collection}/{instance_id}/{operation}"))

    def scale_application_instance(
        self, application_id: str, replicas: int,
    ) -> MessageResponse:
        return _message(
            self._call(
                "PUT",
                f"/applications/{application_id}/scale",
                json={"replicas": replicas},
            ),
        )

    def get_instance_logs(
        self, instance_type: InstanceType, instance_id: str,
    ) -> dict[str, str]:
        collection = _INSTANCE_COLLECTIONS[instance_type]
        payload = self._call("GET", f"/{collection}/{instance_id}/logs")
        if not isinstance(payload, dict):
            return {}
        return {str(key): str(value) for key, value in payload.items()}

    def get_instance_credentials(self, service_id: str) -> list[Any]:
        payload = self._call("GET", f"/services/{service_id}/credentials")
        return payload if isinstance(payload, list) else []

    def expose_service(self, service_id: str, exposed: bool) -> list[str]:
        payload = self._call(
            "PUT",
            f"/services/{service_id}/expose",
            json={"exposed": exposed},
            expected=(200, 202),
        )
        return [str(host) for host in payload] if isinstance(payload, list) else []

    # ------------------------------------------------------------------
    # Bindings
    # ------------------------------------------------------------------

    def get_instance_bindings(
        self, instance_type: InstanceType, instance_id: str,
    ) -> list[InstanceBinding]:
        collection = _INSTANCE_COLLECTIONS[instance_type]
        payload = self._call("GET", f"/{collection}/{instance_id}/bindings")
        resources = payload.get("resources") if isinstance(payload, dict) else payload
        return [parse_binding(raw) for raw in _dicts(resources)]

    def bind_instance(
        self, request: BindingRequest, dst_type: InstanceType, dst_id: str,
    ) -> MessageResponse:
        collection = _INSTANCE_COLLECTIONS[dst_type]
        return _message(
            self._call(
                "POST",
                f"/{collection}/{dst_id}/bindings",
                json=request.to_payload(),
                expected=(200, 202),
            ),
        )

    def unbind_instance(
        self, request: BindingRequest, dst_type: InstanceType, dst_id: str,
    ) -> None:
        collection = _INSTANCE_COLLECTIONS[dst_type]
        source_id = request.application_id or request.service_id
        self._call(
            "DELETE",
            f"/{collection}/{dst_id}/bindings/{source_id}",
            expected=(200, 202, 204),
        )

    # ------------------------------------------------------------------
    # Users and invitations
    # ------------------------------------------------------------------

    def list_users(self) -> list[User]:
        return [
            User(username=_str(raw, "username"))
            for raw in _dicts(self._call("GET", "/users"))
        ]

    def delete_user(self, email: str) -> None:
        self._call("DELETE", "/users", json={"email": email}, expected=204)

    def change_current_user_password(
        self, current_password: str, new_password: str,
    ) -> None:
        self._call(
            "PUT",
            "/users/current/password",
            json={"current_password": current_password, "new_password": new_password},
        )

    def list_invitations(self) -> list[str]:
        payload = self._call("GET", "/users/invitations")
        return [str(email) for email in payload] if isinstance(payload, list) else []

    def send_invitation(self, email: str) -> None:
        self._call("POST", "/users/invitations", json={"email": email}, expected=201)

    def resend_invitation(self, email: str) -> None:
        self._call(
            "POST", "/users/invitations/resend", json={"email": email}, expected=201,
        )

    def delete_invitation(self, email: str) -> None:
        self._call("DELETE", "/users/invitations", json={"email": email}, expected=204)
