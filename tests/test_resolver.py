"""Tests for NameResolver (core/resolver.py).

The :class:`PlatformApi` dependency is **mocked**; no network access.
These tests verify:

* Offering/plan resolution and its two failure modes
* Instance resolution by type hint, including the service-first tie-break
* Swallowing of a failing list call in the dual-type lookup
* Propagation of list errors in the single-type lookups
* In-place conversion of binding names
"""

from __future__ import annotations

from unittest.mock import MagicMock

import pytest

from tap_cli.core.models import (
    ApplicationInstance,
    InstanceType,
    InstanceTypeHint,
    Offering,
    OfferingPlan,
    ResolvedInstance,
    ServiceInstance,
)
from tap_cli.core.resolver import NameResolver
from tap_cli.exceptions import (
    InstanceNotFoundError,
    PlanNotFoundError,
    RemoteError,
    ResolutionError,
    ServiceNotFoundError,
)


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------

def _offering(name: str, offering_id: str, *plans: tuple[str, str]) -> Offering:
    return Offering(
        id=offering_id,
        name=name,
        plans=tuple(OfferingPlan(id=pid, name=pname) for pname, pid in plans),
    )


def _fake_api(
    *,
    offerings: list[Offering] | Exception | None = None,
    services: list[ServiceInstance] | Exception | None = None,
    applications: list[ApplicationInstance] | Exception | None = None,
) -> MagicMock:
    """Return a mock PlatformApi; exceptions become ``side_effect``."""
    api = MagicMock()
    for method, value in (
        (api.list_offerings, offerings),
        (api.list_service_instances, services),
        (api.list_application_instances, applications),
    ):
        if isinstance(value, Exception):
            method.side_effect = value
        else:
            method.return_value = value or []
    return api


# ---------------------------------------------------------------------------
# Offerings and plans
# ---------------------------------------------------------------------------

class TestFetchServiceAndPlanId:
    def test_match(self) -> None:
        api = _fake_api(offerings=[
            _offering("redis", "o-1", ("small", "p-1"), ("large", "p-2")),
        ])
        assert NameResolver(api).fetch_service_and_plan_id("redis", "large") == ("o-1", "p-2")

    def test_missing_plan_names_plan_and_offering(self) -> None:
        api = _fake_api(offerings=[
            _offering("offeringX", "o-1", ("p1", "id-1"), ("p2", "id-2")),
        ])
        with pytest.raises(PlanNotFoundError) as exc_info:
            NameResolver(api).fetch_service_and_plan_id("offeringX", "missingPlan")
        assert "missingPlan" in str(exc_info.value)
        assert "offeringX" in str(exc_info.value)

    def test_missing_offering(self) -> None:
        api = _fake_api(offerings=[_offering("redis", "o-1", ("small", "p-1"))])
        with pytest.raises(ServiceNotFoundError, match="cannot find service: 'mysql'"):
            NameResolver(api).fetch_service_and_plan_id("mysql", "small")

    def test_match_is_case_sensitive(self) -> None:
        api = _fake_api(offerings=[_offering("Redis", "o-1", ("small", "p-1"))])
        with pytest.raises(ServiceNotFoundError):
            NameResolver(api).fetch_service_and_plan_id("redis", "small")

    def test_not_cached(self) -> None:
        api = _fake_api(offerings=[_offering("redis", "o-1", ("small", "p-1"))])
        resolver = NameResolver(api)
        resolver.fetch_service_and_plan_id("redis", "small")
        resolver.fetch_service_and_plan_id("redis", "small")
        assert api.list_offerings.call_count == 2

    def test_list_error_propagates(self) -> None:
        api = _fake_api(offerings=RemoteError("down"))
        with pytest.raises(RemoteError, match="down"):
            NameResolver(api).fetch_service_and_plan_id("redis", "small")


class TestGetOfferingId:
    def test_match(self) -> None:
        api = _fake_api(offerings=[_offering("a", "o-a"), _offering("b", "o-b")])
        assert NameResolver(api).get_offering_id("b") == "o-b"

    def test_not_found(self) -> None:
        with pytest.raises(ServiceNotFoundError):
            NameResolver(_fake_api()).get_offering_id("ghost")

    def test_list_error_is_wrapped(self) -> None:
        api = _fake_api(offerings=RemoteError("boom", status_code=500))
        with pytest.raises(RemoteError, match="cannot fetch offering list: boom") as exc_info:
            NameResolver(api).get_offering_id("a")
        assert exc_info.value.status_code == 500


# ---------------------------------------------------------------------------
# Instances
# ---------------------------------------------------------------------------

class TestFetchInstanceIdAndType:
    def test_single_service_is_stable(self) -> None:
        api = _fake_api(services=[ServiceInstance(id="svc-foo", name="foo")])
        resolver = NameResolver(api)
        for _ in range(3):
            assert resolver.fetch_instance_id_and_type(InstanceTypeHint.BOTH, "foo") == (
                ResolvedInstance(id="svc-foo", type=InstanceType.SERVICE)
            )

    def test_service_wins_tie_break(self) -> None:
        api = _fake_api(
            services=[ServiceInstance(id="svc1", name="x")],
            applications=[ApplicationInstance(id="app1", name="x")],
        )
        resolved = NameResolver(api).fetch_instance_id_and_type(InstanceTypeHint.BOTH, "x")
        assert resolved == ResolvedInstance(id="svc1", type=InstanceType.SERVICE)
        api.list_application_instances.assert_not_called()

    def test_service_list_error_is_swallowed(self) -> None:
        api = _fake_api(
            services=RemoteError("transient"),
            applications=[ApplicationInstance(id="app-bar", name="bar")],
        )
        resolved = NameResolver(api).fetch_instance_id_and_type(InstanceTypeHint.BOTH, "bar")
        assert resolved == ResolvedInstance(id="app-bar", type=InstanceType.APPLICATION)

    def test_application_hint_skips_services(self) -> None:
        api = _fake_api(
            services=[ServiceInstance(id="svc1", name="x")],
            applications=[ApplicationInstance(id="app1", name="x")],
        )
        resolved = NameResolver(api).fetch_instance_id_and_type(
            InstanceTypeHint.APPLICATION, "x",
        )
        assert resolved.type is InstanceType.APPLICATION
        api.list_service_instances.assert_not_called()

    def test_service_hint_skips_applications(self) -> None:
        api = _fake_api(applications=[ApplicationInstance(id="app1", name="x")])
        with pytest.raises(InstanceNotFoundError):
            NameResolver(api).fetch_instance_id_and_type(InstanceTypeHint.SERVICE, "x")
        api.list_application_instances.assert_not_called()

    def test_not_found_after_both_lists_fail(self) -> None:
        api = _fake_api(services=RemoteError("a"), applications=RemoteError("b"))
        with pytest.raises(InstanceNotFoundError, match="cannot find instance with name: y"):
            NameResolver(api).fetch_instance_id_and_type(InstanceTypeHint.BOTH, "y")

    def test_first_match_wins(self) -> None:
        api = _fake_api(services=[
            ServiceInstance(id="first", name="dup"),
            ServiceInstance(id="second", name="dup"),
        ])
        resolved = NameResolver(api).fetch_instance_id_and_type(InstanceTypeHint.SERVICE, "dup")
        assert resolved.id == "first"


class TestGetApplicationId:
    def test_match(self) -> None:
        api = _fake_api(applications=[ApplicationInstance(id="app1", name="web")])
        assert NameResolver(api).get_application_id("web") == "app1"

    def test_list_error_is_not_swallowed(self) -> None:
        api = _fake_api(applications=RemoteError("down"))
        with pytest.raises(RemoteError, match="cannot fetch applications list"):
            NameResolver(api).get_application_id("web")

    def test_not_found(self) -> None:
        with pytest.raises(InstanceNotFoundError):
            NameResolver(_fake_api()).get_application_id("web")


# ---------------------------------------------------------------------------
# Bindings
# ---------------------------------------------------------------------------

class TestConvertBindingsList:
    def test_names_replaced_in_place(self) -> None:
        api = _fake_api(services=[
            ServiceInstance(id="id-db", name="db"),
            ServiceInstance(id="id-mq", name="mq"),
        ])
        names = ["mq", "db"]
        NameResolver(api).convert_bindings_list(names)
        assert names == ["id-mq", "id-db"]

    def test_all_missing_names_reported(self) -> None:
        api = _fake_api(services=[ServiceInstance(id="id-db", name="db")])
        with pytest.raises(ResolutionError) as exc_info:
            NameResolver(api).convert_bindings_list(["a", "db", "b"])
        assert str(exc_info.value) == "following service instances don't exist: a, b"
