"""Core layer: domain models, protocols and name resolution.

Rules
-----
* No ``print()`` calls.
* No filesystem or network I/O.
* No imports from ``cli`` or ``infra``.
"""

from tap_cli.core.models import (
    ApplicationInstance,
    Credentials,
    InstanceType,
    InstanceTypeHint,
    Offering,
    OfferingPlan,
    ResolvedInstance,
    ServiceInstance,
)
from tap_cli.core.protocols import CredentialStore, LoginApi, PlatformApi
from tap_cli.core.resolver import NameResolver

__all__: list[str] = [
    "ApplicationInstance",
    "CredentialStore",
    "Credentials",
    "InstanceType",
    "InstanceTypeHint",
    "LoginApi",
    "NameResolver",
    "Offering",
    "OfferingPlan",
    "PlatformApi",
    "ResolvedInstance",
    "ServiceInstance",
]
