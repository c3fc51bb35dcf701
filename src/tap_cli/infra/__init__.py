"""Infrastructure layer: external system integration.

This layer wraps all interaction with the platform's REST API, the
credential file and the filesystem.  Every raw third-party exception
must be caught here and re-raised as a
:class:`~tap_cli.exceptions.TapCliError` subclass.

Rules
-----
* No imports from ``cli``.
* No user-facing output (no ``print()``, no Rich rendering).
* Must expose clean, typed interfaces consumed by the core layer.
"""

from tap_cli.infra.api_client import TapApiClient, TapLoginClient
from tap_cli.infra.archiver import create_application_archive
from tap_cli.infra.credentials import FileCredentialStore

__all__: list[str] = [
    "FileCredentialStore",
    "TapApiClient",
    "TapLoginClient",
    "create_application_archive",
]
