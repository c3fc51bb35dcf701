"""Protocols (interfaces) consumed by the core and CLI layers.

These define the contracts that infrastructure adapters must satisfy.
Core code depends ONLY on these protocols, never on concrete
implementations.
"""

from __future__ import annotations

from collections.abc import Sequence
from pathlib import Path
from typing import Any, Protocol

from tap_cli.core.models import (
    ApplicationInstance,
    BindingRequest,
    Credentials,
    InstanceBinding,
    InstanceType,
    LoginResponse,
    MessageResponse,
    Offering,
    ServiceInstance,
    User,
)


class PlatformApi(Protocol):
    """Contract for the authenticated platform REST client.

    Implementations must map all transport and HTTP-status failures to
    :class:`~tap_cli.exceptions.RemoteError`.
    """

    # --- catalog -----------------------------------------------------------

    def list_offerings(self) -> Sequence[Offering]: ...  # pragma: no cover

    def create_offering(self, body: dict[str, Any]) -> Any: ...  # pragma: no cover

    def delete_offering(self, offering_id: str) -> None: ...  # pragma: no cover

    # --- instances ---------------------------------------------------------

    def list_service_instances(self) -> Sequence[ServiceInstance]:
        """Return every service instance visible to the current user.

        Raises
        ------
        RemoteError
            On transport failure or an unexpected status code.
        """
        ...  # pragma: no cover

    def list_application_instances(self) -> Sequence[ApplicationInstance]:
        """Return every application instance visible to the current user.

        Raises
        ------
        RemoteError
            On transport failure or an unexpected status code.
        """
        ...  # pragma: no cover

    def get_service_instance(self, service_id: str) -> ServiceInstance: ...  # pragma: no cover

    def get_application_instance(
        self, application_id: str,
    ) -> ApplicationInstance: ...  # pragma: no cover

    def create_service_instance(self, body: dict[str, Any]) -> MessageResponse: ...  # pragma: no cover

    def create_application_instance(
        self, archive_path: Path, manifest: dict[str, Any],
    ) -> ApplicationInstance: ...  # pragma: no cover

    def delete_instance(
        self, instance_type: InstanceType, instance_id: str,
    ) -> None: ...  # pragma: no cover

    def change_instance_state(
        self, instance_type: InstanceType, instance_id: str, operation: str,
    ) -> MessageResponse: ...  # pragma: no cover

    def scale_application_instance(
        self, application_id: str, replicas: int,
    ) -> MessageResponse: ...  # pragma: no cover

    def get_instance_logs(
        self, instance_type: InstanceType, instance_id: str,
    ) -> dict[str, str]: ...  # pragma: no cover

    def get_instance_credentials(self, service_id: str) -> list[Any]: ...  # pragma: no cover

    def expose_service(self, service_id: str, exposed: bool) -> list[str]: ...  # pragma: no cover

    # --- bindings ----------------------------------------------------------

    def get_instance_bindings(
        self, instance_type: InstanceType, instance_id: str,
    ) -> Sequence[InstanceBinding]: ...  # pragma: no cover

    def bind_instance(
        self, request: BindingRequest, dst_type: InstanceType, dst_id: str,
    ) -> MessageResponse: ...  # pragma: no cover

    def unbind_instance(
        self, request: BindingRequest, dst_type: InstanceType, dst_id: str,
    ) -> None: ...  # pragma: no cover

    # --- users -------------------------------------------------------------

    def list_users(self) -> Sequence[User]: ...  # pragma: no cover

    def delete_user(self, email: str) -> None: ...  # pragma: no cover

    def change_current_user_password(
        self, current_password: str, new_password: str,
    ) -> None: ...  # pragma: no cover

    def list_invitations(self) -> Sequence[str]: ...  # pragma: no cover

    def send_invitation(self, email: str) -> None: ...  # pragma: no cover

    def resend_invitation(self, email: str) -> None: ...  # pragma: no cover

    def delete_invitation(self, email: str) -> None: ...  # pragma: no cover


class LoginApi(Protocol):
    """Contract for the basic-auth login endpoint."""

    address: str
    username: str

    def login(self) -> LoginResponse:
        """Exchange username/password for a token.

        Raises
        ------
        RemoteError
            ``"Authentication failed"`` on HTTP 401, otherwise any
            transport or status failure.
        """
        ...  # pragma: no cover


class CredentialStore(Protocol):
    """Contract for the local credential file."""

    def load(self) -> Credentials:
        """Return stored credentials.

        Raises
        ------
        ConfigurationError
            ``"Please login first!"`` when nothing is stored, otherwise
            the raw parser message for a malformed file.
        """
        ...  # pragma: no cover

    def save(self, credentials: Credentials) -> None: ...  # pragma: no cover
