"""Domain models for tap-cli.

All models are **frozen** dataclasses: immutable value objects with no
behaviour beyond data access.  Models built from API payloads keep the
original payload in ``raw`` (excluded from equality) so detail views
can render exactly what the platform returned.
"""

from __future__ import annotations

import enum
from dataclasses import dataclass, field
from typing import Any


class InstanceType(str, enum.Enum):
    """Kind of a provisioned platform instance."""

    APPLICATION = "APPLICATION"
    SERVICE = "SERVICE"


class InstanceTypeHint(str, enum.Enum):
    """Which instance lists the resolver is allowed to scan."""

    APPLICATION = "APPLICATION"
    SERVICE = "SERVICE"
    BOTH = "BOTH"


# ---------------------------------------------------------------------------
# Credentials
# ---------------------------------------------------------------------------

@dataclass(frozen=True, slots=True)
class Credentials:
    """Session data persisted after a successful login."""

    address: str
    username: str
    token: str
    token_type: str
    expires_in: int = 0
    skip_ssl_validation: bool = False


@dataclass(frozen=True, slots=True)
class LoginResponse:
    """Token issued by the platform's login endpoint."""

    access_token: str
    token_type: str
    expires_in: int


# ---------------------------------------------------------------------------
# Catalog
# ---------------------------------------------------------------------------

@dataclass(frozen=True, slots=True)
class OfferingPlan:
    """A named tier of an :class:`Offering`."""

    id: str
    name: str
    description: str = ""


@dataclass(frozen=True, slots=True)
class Offering:
    """A catalog entry describing a provisionable service."""

    id: str
    name: str
    plans: tuple[OfferingPlan, ...] = ()
    description: str = ""
    state: str = ""
    raw: dict[str, Any] = field(default_factory=dict, compare=False, repr=False)


# ---------------------------------------------------------------------------
# Instances
# ---------------------------------------------------------------------------

@dataclass(frozen=True, slots=True)
class AuditTrail:
    created_by: str = ""
    created_on: int = 0
    last_updated_by: str = ""
    last_updated_on: int = 0


@dataclass(frozen=True, slots=True)
class ServiceInstance:
    """A provisioned instance of an offering."""

    id: str
    name: str
    offering_name: str = ""
    plan_name: str = ""
    state: str = ""
    audit: AuditTrail = AuditTrail()
    last_message: str = ""
    raw: dict[str, Any] = field(default_factory=dict, compare=False, repr=False)


@dataclass(frozen=True, slots=True)
class ApplicationInstance:
    """A pushed application."""

    id: str
    name: str
    state: str = ""
    image_state: str = ""
    replication: int = 0
    memory: str = ""
    disk_quota: str = ""
    urls: tuple[str, ...] = ()
    audit: AuditTrail = AuditTrail()
    last_message: str = ""
    raw: dict[str, Any] = field(default_factory=dict, compare=False, repr=False)


@dataclass(frozen=True, slots=True)
class ResolvedInstance:
    """Result of a name → (ID, type) lookup."""

    id: str
    type: InstanceType


# ---------------------------------------------------------------------------
# Bindings and users
# ---------------------------------------------------------------------------

@dataclass(frozen=True, slots=True)
class InstanceBinding:
    """One entry of an instance's binding list."""

    name: str
    id: str


@dataclass(frozen=True, slots=True)
class BindingRequest:
    """Body of a bind/unbind call; exactly one field is set."""

    application_id: str = ""
    service_id: str = ""

    def to_payload(self) -> dict[str, str]:
        return {"application_id": self.application_id, "service_id": self.service_id}


@dataclass(frozen=True, slots=True)
class User:
    username: str


@dataclass(frozen=True, slots=True)
class MessageResponse:
    """Plain status message returned by state-changing endpoints."""

    message: str
