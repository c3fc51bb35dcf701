"""Infrastructure: the local credential file.

Rules
-----
* A login always replaces the whole file; nothing edits it in place.
* A missing file maps to ``"Please login first!"``; any other read or
  parse failure is reported with the raw underlying message.
"""

from __future__ import annotations

import json
import logging
import os
import tempfile
from pathlib import Path
from typing import Any

from tap_cli.core.models import Credentials
from tap_cli.exceptions import ConfigurationError

_DIR_PERMISSIONS = 0o700
_FILE_PERMISSIONS = 0o600


def credentials_to_dict(creds: Credentials) -> dict[str, Any]:
    return {
        "address": creds.address,
        "username": creds.username,
        "token": creds.token,
        "type": creds.token_type,
        "expires": creds.expires_in,
        "skip-ssl-validation": creds.skip_ssl_validation,
    }


def credentials_from_dict(raw: dict[str, Any]) -> Credentials:
    try:
        expires = int(raw.get("expires") or 0)
    except (TypeError, ValueError) as exc:
        raise ConfigurationError(f"invalid 'expires' value in credentials: {exc}") from exc
    return Credentials(
        address=str(raw.get("address") or ""),
        username=str(raw.get("username") or ""),
        token=str(raw.get("token") or ""),
        token_type=str(raw.get("type") or ""),
        expires_in=expires,
        skip_ssl_validation=bool(raw.get("skip-ssl-validation", False)),
    )


class FileCredentialStore:
    """Concrete :class:`~tap_cli.core.protocols.CredentialStore` backed by JSON."""

    def __init__(self, path: Path, logger: logging.Logger | None = None) -> None:
        self.path: Path = path
        self._logger: logging.Logger = logger or logging.getLogger(__name__)

    def load(self) -> Credentials:
        try:
            text = self.path.read_text(encoding="utf-8")
        except FileNotFoundError as exc:
            raise ConfigurationError(
                "Please login first!",
                hint="Run: tap login --api=<API> --username=<user>",
            ) from exc
        except OSError as exc:
            raise ConfigurationError(str(exc)) from exc

        try:
            raw = json.loads(text)
        except json.JSONDecodeError as exc:
            raise ConfigurationError(str(exc)) from exc

        if not isinstance(raw, dict):
            raise ConfigurationError(
                f"credentials file {self.path} does not contain a JSON object",
            )
        return credentials_from_dict(raw)

    def save(self, credentials: Credentials) -> None:
        """Overwrite the credential file with *credentials*."""
        self.path.parent.mkdir(parents=True, exist_ok=True, mode=_DIR_PERMISSIONS)
        payload = json.dumps(credentials_to_dict(credentials))

        fd, tmp_name = tempfile.mkstemp(
            dir=self.path.parent, prefix=".credentials-", suffix=".tmp",
        )
        try:
            with os.fdopen(fd, "w", encoding="utf-8") as handle:
                handle.write(payload)
            os.chmod(tmp_name, _FILE_PERMISSIONS)
            os.replace(tmp_name, self.path)
        except OSError as exc:
            Path(tmp_name).unlink(missing_ok=True)
            raise ConfigurationError(f"cannot write credentials: {exc}") from exc

        self._logger.debug("Credentials written to %s", self.path)
