"""Command actions: the work behind each ``tap`` command.

An :class:`Actions` object is built once per invocation around an
authenticated :class:`~tap_cli.core.protocols.PlatformApi`, resolves
human-readable names through :class:`~tap_cli.core.resolver.NameResolver`
and renders results with :mod:`tap_cli.cli.printer`.

Successful mutations print ``OK``.  Errors propagate to the error
boundary in :mod:`tap_cli.cli.app`.
"""

from __future__ import annotations

import json
import logging
from dataclasses import dataclass
from pathlib import Path
from typing import Any

from tap_cli.cli import printer
from tap_cli.core.models import (
    BindingRequest,
    Credentials,
    InstanceType,
    InstanceTypeHint,
    MessageResponse,
)
from tap_cli.core.protocols import CredentialStore, LoginApi, PlatformApi
from tap_cli.core.resolver import NameResolver
from tap_cli.exceptions import (
    ConfigurationError,
    ResolutionError,
    TapCliError,
)
from tap_cli.infra.archiver import create_application_archive
from tap_cli.utils import split_env_assignments

MANIFEST_FILENAME = "manifest.json"
OFFERING_PLAN_ID = "PLAN_ID"


@dataclass(frozen=True, slots=True)
class BindableInstance:
    """A binding endpoint given by name, with the types it may resolve to."""

    name: str
    type_hint: InstanceTypeHint


def _read_json_file(path: Path) -> Any:
    try:
        text = path.read_text(encoding="utf-8")
    except OSError as exc:
        raise ConfigurationError(f"cannot read {path}: {exc}") from exc
    try:
        return json.loads(text)
    except json.JSONDecodeError as exc:
        raise ConfigurationError(f"invalid JSON in {path}: {exc}") from exc


# ---------------------------------------------------------------------------
# Session actions (no authenticated API needed)
# ---------------------------------------------------------------------------

def login(
    login_api: LoginApi,
    store: CredentialStore,
    *,
    skip_ssl_validation: bool = False,
    logger: logging.Logger | None = None,
) -> Credentials:
    """Authenticate and persist the issued token, replacing any old session."""
    log = logger or logging.getLogger(__name__)

    printer.print_message("Authenticating...")
    response = login_api.login()
    credentials = Credentials(
        address=login_api.address,
        username=login_api.username,
        token=response.access_token,
        token_type=response.token_type,
        expires_in=response.expires_in,
        skip_ssl_validation=skip_ssl_validation,
    )
    store.save(credentials)
    log.info("Logged in to %s as %s", credentials.address, credentials.username)
    printer.print_message("Authentication succeeded")
    return credentials


def show_target(store: CredentialStore) -> None:
    """Print the API address and user of the current session."""
    printer.print_credentials(store.load())


# ---------------------------------------------------------------------------
# Authenticated actions
# ---------------------------------------------------------------------------

class Actions:
    """Operations run against an authenticated platform API.

    Parameters
    ----------
    api:
        Any object satisfying :class:`PlatformApi`.
    resolver:
        Name resolver; built around *api* when omitted.
    logger:
        Logger of the current invocation.
    """

    def __init__(
        self,
        api: PlatformApi,
        *,
        resolver: NameResolver | None = None,
        logger: logging.Logger | None = None,
    ) -> None:
        self._api = api
        self._logger = logger or logging.getLogger(__name__)
        self._resolver = resolver or NameResolver(api, logger=self._logger)

    # -- helpers --------------------------------------------------------------

    def _resolve(self, type_hint: InstanceTypeHint, name: str) -> tuple[str, InstanceType]:
        resolved = self._resolver.fetch_instance_id_and_type(type_hint, name)
        return resolved.id, resolved.type

    @staticmethod
    def _print_response(response: MessageResponse) -> None:
        printer.print_message(response.message or "OK")

    # -- offerings ------------------------------------------------------------

    def list_offerings(self) -> None:
        printer.print_offerings(self._api.list_offerings())

    def get_offering(self, name: str) -> None:
        for offering in self._api.list_offerings():
            if offering.name == name:
                printer.print_json(offering.raw or {"id": offering.id, "name": offering.name})
                return
        raise ResolutionError(f"cannot find offering with name: {name}")

    def create_offering(self, manifest_path: Path) -> None:
        """Register an offering described by the JSON file at *manifest_path*.

        Every plan dependency names an offering and plan; both are
        resolved to IDs before the request is sent.
        """
        body = _read_json_file(manifest_path)
        if not isinstance(body, dict):
            raise ConfigurationError(f"{manifest_path} does not contain a JSON object")

        for service in body.get("services") or []:
            for plan in service.get("plans") or []:
                for dependency in plan.get("dependencies") or []:
                    service_id, plan_id = self._resolver.fetch_service_and_plan_id(
                        dependency.get("serviceName", ""), dependency.get("planName", ""),
                    )
                    dependency["serviceId"] = service_id
                    dependency["planId"] = plan_id

        self._api.create_offering(body)
        printer.print_ok()

    def delete_offering(self, name: str) -> None:
        offering_id = self._resolver.get_offering_id(name)
        self._api.delete_offering(offering_id)
        printer.print_ok()

    # -- instances (shared) ---------------------------------------------------

    def delete_instance(self, instance_type: InstanceType, name: str) -> None:
        instance_id, _ = self._resolve(InstanceTypeHint(instance_type.value), name)
        self._api.delete_instance(instance_type, instance_id)
        printer.print_ok()

    def change_state(self, instance_type: InstanceType, name: str, operation: str) -> None:
        """Start, stop or restart the named instance."""
        instance_id, _ = self._resolve(InstanceTypeHint(instance_type.value), name)
        self._print_response(
            self._api.change_instance_state(instance_type, instance_id, operation),
        )

    def get_instance_logs(self, type_hint: InstanceTypeHint, name: str) -> None:
        instance_id, instance_type = self._resolve(type_hint, name)
        logs = self._api.get_instance_logs(instance_type, instance_id)
        for container, text in logs.items():
            printer.print_message(f"{container}:\n\n{text}")

    # -- services -------------------------------------------------------------

    def list_services(self) -> None:
        printer.print_services(self._api.list_service_instances())

    def get_service(self, name: str) -> None:
        instance_id, _ = self._resolve(InstanceTypeHint.SERVICE, name)
        printer.print_json(self._api.get_service_instance(instance_id).raw)

    def create_service(
        self, name: str, offering: str, plan: str, envs: tuple[str, ...] = (),
    ) -> None:
        env_map = split_env_assignments(envs)
        offering_id, plan_id = self._resolver.fetch_service_and_plan_id(offering, plan)

        metadata = [{"key": OFFERING_PLAN_ID, "value": plan_id}]
        metadata += [{"key": key, "value": value} for key, value in env_map.items()]
        body = {
            "name": name,
            "type": InstanceType.SERVICE.value,
            "offeringId": offering_id,
            "metadata": metadata,
        }
        self._api.create_service_instance(body)
        printer.print_ok()

    def get_service_credentials(self, name: str) -> None:
        instance_id, instance_type = self._resolve(InstanceTypeHint.BOTH, name)
        if instance_type is not InstanceType.SERVICE:
            raise TapCliError(f'"{name}" is not a service')
        for credentials in self._api.get_instance_credentials(instance_id):
            printer.print_json(credentials)

    def expose_service(self, name: str, exposed: bool) -> None:
        instance_id, _ = self._resolve(InstanceTypeHint.SERVICE, name)
        printer.print_json(self._api.expose_service(instance_id, exposed))

    # -- applications ---------------------------------------------------------

    def list_applications(self) -> None:
        printer.print_applications(self._api.list_application_instances())

    def get_application(self, name: str) -> None:
        application_id = self._resolver.get_application_id(name)
        printer.print_json(self._api.get_application_instance(application_id).raw)

    def push_application(self, archive_path: Path, manifest_dir: Path | None = None) -> None:
        """Upload *archive_path* with the ``manifest.json`` from *manifest_dir*.

        Service names listed under the manifest's ``bindings`` are
        replaced by instance IDs before the upload.  A manifest asking
        for more than one instance is scaled right after the push.
        """
        manifest_path = (manifest_dir or Path.cwd()) / MANIFEST_FILENAME
        manifest = _read_json_file(manifest_path)
        if not isinstance(manifest, dict):
            raise ConfigurationError(f"{manifest_path} does not contain a JSON object")

        bindings = manifest.get("bindings")
        if isinstance(bindings, list):
            self._resolver.convert_bindings_list(bindings)

        self._logger.info("Pushing %s", archive_path)
        app = self._api.create_application_instance(archive_path, manifest)
        printer.print_pushed_application(app)

        instances = manifest.get("instances")
        if isinstance(instances, int) and instances > 1 and app.id:
            self._print_response(self._api.scale_application_instance(app.id, instances))
        printer.print_ok()

    def push_folder(self, folder: Path) -> None:
        """Archive *folder* and push it; the temporary archive is always removed."""
        archive_path = create_application_archive(folder, logger=self._logger)
        try:
            self.push_application(archive_path, manifest_dir=folder)
        finally:
            archive_path.unlink(missing_ok=True)

    def scale_application(self, name: str, replicas: int) -> None:
        instance_id, _ = self._resolve(InstanceTypeHint.APPLICATION, name)
        self._print_response(self._api.scale_application_instance(instance_id, replicas))

    # -- bindings -------------------------------------------------------------

    def list_bindings(self, instance: BindableInstance) -> None:
        instance_id, instance_type = self._resolve(instance.type_hint, instance.name)
        printer.print_bindings(self._api.get_instance_bindings(instance_type, instance_id))

    def bind_instance(self, src: BindableInstance, dst: BindableInstance) -> None:
        request, dst_type, dst_id = self._binding_endpoints(src, dst)
        self._api.bind_instance(request, dst_type, dst_id)
        printer.print_ok()

    def unbind_instance(self, src: BindableInstance, dst: BindableInstance) -> None:
        request, dst_type, dst_id = self._binding_endpoints(src, dst)
        self._api.unbind_instance(request, dst_type, dst_id)
        printer.print_ok()

    def _binding_endpoints(
        self, src: BindableInstance, dst: BindableInstance,
    ) -> tuple[BindingRequest, InstanceType, str]:
        src_id, src_type = self._resolve(src.type_hint, src.name)
        dst_id, dst_type = self._resolve(dst.type_hint, dst.name)
        if src_type is InstanceType.APPLICATION:
            request = BindingRequest(application_id=src_id)
        else:
            request = BindingRequest(service_id=src_id)
        return request, dst_type, dst_id

    # -- users and invitations ------------------------------------------------

    def list_users(self) -> None:
        printer.print_users(self._api.list_users())

    def delete_user(self, email: str) -> None:
        self._api.delete_user(email)
        printer.print_ok()

    def change_password(self, current_password: str, new_password: str) -> None:
        self._api.change_current_user_password(current_password, new_password)
        printer.print_message(
            "User password successfully changed.\nPlease remember to login again now.",
        )
        printer.print_ok()

    def list_invitations(self) -> None:
        printer.print_invitations(self._api.list_invitations())

    def send_invitation(self, email: str) -> None:
        self._api.send_invitation(email)
        printer.print_ok()

    def resend_invitation(self, email: str) -> None:
        self._api.resend_invitation(email)
        printer.print_ok()

    def delete_invitation(self, email: str) -> None:
        self._api.delete_invitation(email)
        printer.print_ok()
