"""Shared pytest fixtures and configuration for the tap-cli test suite.

Guidelines
----------
* No internet access in any test.
* The platform API is mocked at the infra boundary (``requests.Session``)
  or replaced by a ``MagicMock`` satisfying ``PlatformApi``.
* Core tests must be pure: no side effects.
* Tests must not depend on OS state: the credential directory always
  points into ``tmp_path``.
"""

from __future__ import annotations

import logging
from collections.abc import Iterator
from pathlib import Path

import pytest

from tap_cli.logger import LOGGER_NAME


@pytest.fixture(autouse=True)
def isolated_home(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> Path:
    """Point the credential directory at a per-test temporary folder."""
    home = tmp_path / "tap-home"
    monkeypatch.setenv("TAP_CLI_HOME", str(home))
    monkeypatch.delenv("TAP_CLI_TIMEOUT", raising=False)
    monkeypatch.delenv("TAP_CLI_PUSH_TIMEOUT", raising=False)
    return home


@pytest.fixture(autouse=True)
def reset_logger() -> Iterator[None]:
    """Drop the handler installed by ``setup_logging`` so capture streams never leak."""
    yield
    logger = logging.getLogger(LOGGER_NAME)
    for handler in list(logger.handlers):
        if handler.get_name() == LOGGER_NAME:
            logger.removeHandler(handler)
    logger.setLevel(logging.NOTSET)
