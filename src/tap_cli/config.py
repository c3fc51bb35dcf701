"""Central configuration for tap_cli.

Settings are read from the environment once per invocation; nothing
here touches the network or the credential file itself.
"""

from __future__ import annotations

import logging
import os
from dataclasses import dataclass
from pathlib import Path

logger = logging.getLogger(__name__)

CREDENTIALS_FILENAME = "credentials.json"


def _float_env(name: str, default: float) -> float:
    raw = os.environ.get(name)
    if raw is None or not raw.strip():
        return default
    try:
        value = float(raw)
    except ValueError:
        logger.warning("Ignoring invalid %s=%r, using %s", name, raw, default)
        return default
    if value <= 0:
        logger.warning("Ignoring non-positive %s=%r, using %s", name, raw, default)
        return default
    return value


@dataclass(frozen=True, slots=True)
class Settings:
    """Runtime settings for tap-cli.

    All settings are loaded from environment variables with sensible defaults.
    """

    home: Path
    """Directory holding the credential file."""

    timeout: float
    """Timeout in seconds for ordinary API calls."""

    push_timeout: float
    """Timeout in seconds for application uploads."""

    @property
    def credentials_path(self) -> Path:
        return self.home / CREDENTIALS_FILENAME


def load_settings() -> Settings:
    """Build :class:`Settings` from ``TAP_CLI_*`` environment variables."""
    home_raw = os.environ.get("TAP_CLI_HOME", "").strip()
    home = Path(home_raw).expanduser() if home_raw else Path.home() / ".tap-cli"
    return Settings(
        home=home,
        timeout=_float_env("TAP_CLI_TIMEOUT", 30.0),
        push_timeout=_float_env("TAP_CLI_PUSH_TIMEOUT", 300.0),
    )


__all__ = ["Settings", "load_settings", "CREDENTIALS_FILENAME"]
