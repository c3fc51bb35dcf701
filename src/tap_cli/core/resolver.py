"""Name resolution: human-readable names to platform identifiers.

Every remote operation in tap-cli is keyed by opaque IDs while users
type names.  :class:`NameResolver` bridges the two by scanning the
platform's list endpoints on each call.

Guarantees
----------
* No caching: every lookup is a fresh round trip, so a name created or
  deleted between two invocations is always seen as it is now.
* Exact, case-sensitive name matching; the first match wins.
* Service instances are scanned before application instances, so a
  name shared by both resolves to the service.
* Only :class:`~tap_cli.exceptions.TapCliError` subclasses escape.
"""

from __future__ import annotations

import logging
from collections.abc import MutableSequence

from tap_cli.core.models import InstanceType, InstanceTypeHint, ResolvedInstance
from tap_cli.core.protocols import PlatformApi
from tap_cli.exceptions import (
    InstanceNotFoundError,
    PlanNotFoundError,
    RemoteError,
    ResolutionError,
    ServiceNotFoundError,
)


class NameResolver:
    """Stateless translator from names to IDs.

    Parameters
    ----------
    api:
        Any object satisfying the :class:`PlatformApi` protocol.
    logger:
        Logger for diagnostics; defaults to the module logger.
    """

    def __init__(self, api: PlatformApi, logger: logging.Logger | None = None) -> None:
        self._api: PlatformApi = api
        self._logger: logging.Logger = logger or logging.getLogger(__name__)

    # ------------------------------------------------------------------
    # Offerings and plans
    # ------------------------------------------------------------------

    def fetch_service_and_plan_id(
        self, offering_name: str, plan_name: str,
    ) -> tuple[str, str]:
        """Return ``(offering_id, plan_id)`` for the named offering plan.

        Raises
        ------
        RemoteError
            If the offerings list cannot be fetched.
        ServiceNotFoundError
            If no offering is named *offering_name*.
        PlanNotFoundError
            If the offering has no plan named *plan_name*.
        """
        for offering in self._api.list_offerings():
            if offering.name != offering_name:
                continue
            for plan in offering.plans:
                if plan.name == plan_name:
                    return offering.id, plan.id
            raise PlanNotFoundError(plan_name, offering_name)
        raise ServiceNotFoundError(offering_name)

    def get_offering_id(self, offering_name: str) -> str:
        """Return the ID of the offering named *offering_name*."""
        try:
            offerings = self._api.list_offerings()
        except RemoteError as exc:
            raise RemoteError(
                f"cannot fetch offering list: {exc}", status_code=exc.status_code,
            ) from exc

        for offering in offerings:
            if offering.name == offering_name:
                return offering.id
        raise ServiceNotFoundError(offering_name)

    # ------------------------------------------------------------------
    # Instances
    # ------------------------------------------------------------------

    def fetch_instance_id_and_type(
        self, type_hint: InstanceTypeHint, instance_name: str,
    ) -> ResolvedInstance:
        """Resolve *instance_name* to its ID and instance type.

        A failing list call for one instance type is logged and skipped
        so the other type can still be searched; only the final "not
        found" is reported.

        Raises
        ------
        InstanceNotFoundError
            If neither scanned list contains *instance_name*.
        """
        if type_hint in (InstanceTypeHint.SERVICE, InstanceTypeHint.BOTH):
            try:
                services = self._api.list_service_instances()
            except RemoteError as exc:
                self._logger.debug("Listing service instances failed: %s", exc)
                services = ()
            for service in services:
                if service.name == instance_name:
                    return ResolvedInstance(id=service.id, type=InstanceType.SERVICE)

        if type_hint in (InstanceTypeHint.APPLICATION, InstanceTypeHint.BOTH):
            try:
                applications = self._api.list_application_instances()
            except RemoteError as exc:
                self._logger.debug("Listing application instances failed: %s", exc)
                applications = ()
            for application in applications:
                if application.name == instance_name:
                    return ResolvedInstance(
                        id=application.id, type=InstanceType.APPLICATION,
                    )

        raise InstanceNotFoundError(instance_name)

    def get_application_id(self, application_name: str) -> str:
        """Return the ID of the application named *application_name*."""
        try:
            applications = self._api.list_application_instances()
        except RemoteError as exc:
            raise RemoteError(
                f"cannot fetch applications list: {exc}", status_code=exc.status_code,
            ) from exc

        for application in applications:
            if application.name == application_name:
                return application.id
        raise InstanceNotFoundError(application_name)

    def convert_bindings_list(self, names: MutableSequence[str]) -> None:
        """Replace every service-instance name in *names* with its ID, in place.

        All unknown names are collected and reported together.
        """
        try:
            services = self._api.list_service_instances()
        except RemoteError as exc:
            raise RemoteError(
                f"cannot fetch service instances: {exc}", status_code=exc.status_code,
            ) from exc

        ids_by_name: dict[str, str] = {}
        for service in services:
            ids_by_name.setdefault(service.name, service.id)

        missing: list[str] = []
        for index, name in enumerate(names):
            if name in ids_by_name:
                names[index] = ids_by_name[name]
            else:
                missing.append(name)

        if missing:
            raise ResolutionError(
                "following service instances don't exist: " + ", ".join(missing),
            )
