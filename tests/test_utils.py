"""Tests for shared helpers, settings and logging setup."""

from __future__ import annotations

import logging
from pathlib import Path

import pytest

from tap_cli.config import load_settings
from tap_cli.exceptions import ConfigurationError, InvalidFlagValueError
from tap_cli.logger import LOGGER_NAME, parse_level, setup_logging
from tap_cli.utils import normalize_address, split_env_assignments


# ---------------------------------------------------------------------------
# utils
# ---------------------------------------------------------------------------

class TestNormalizeAddress:
    @pytest.mark.parametrize(
        ("raw", "expected"),
        [
            ("api.example.com", "https://api.example.com"),
            ("api.example.com/", "https://api.example.com"),
            ("http://api.example.com", "http://api.example.com"),
            (" https://api.example.com/ ", "https://api.example.com"),
        ],
    )
    def test_normalize(self, raw: str, expected: str) -> None:
        assert normalize_address(raw) == expected


class TestSplitEnvAssignments:
    def test_value_may_contain_equals(self) -> None:
        assert split_env_assignments(["A=1", "URL=x=y"]) == {"A": "1", "URL": "x=y"}

    def test_empty_value_allowed(self) -> None:
        assert split_env_assignments(["A="]) == {"A": ""}

    @pytest.mark.parametrize("entry", ["NOVALUE", "=1"])
    def test_invalid(self, entry: str) -> None:
        with pytest.raises(InvalidFlagValueError, match="NAME=VALUE"):
            split_env_assignments([entry])


# ---------------------------------------------------------------------------
# config
# ---------------------------------------------------------------------------

class TestLoadSettings:
    def test_home_from_environment(self, isolated_home: Path) -> None:
        settings = load_settings()
        assert settings.home == isolated_home
        assert settings.credentials_path == isolated_home / "credentials.json"

    def test_defaults(self) -> None:
        settings = load_settings()
        assert settings.timeout == 30.0
        assert settings.push_timeout == 300.0

    def test_timeout_override(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setenv("TAP_CLI_TIMEOUT", "5")
        assert load_settings().timeout == 5.0

    @pytest.mark.parametrize("raw", ["abc", "-1", "0"])
    def test_invalid_timeout_falls_back(
        self, monkeypatch: pytest.MonkeyPatch, raw: str,
    ) -> None:
        monkeypatch.setenv("TAP_CLI_PUSH_TIMEOUT", raw)
        assert load_settings().push_timeout == 300.0


# ---------------------------------------------------------------------------
# logger
# ---------------------------------------------------------------------------

class TestLogging:
    def test_parse_level_case_insensitive(self) -> None:
        assert parse_level("debug") == logging.DEBUG

    def test_empty_level_uses_default(self) -> None:
        assert parse_level("") == logging.CRITICAL

    def test_unknown_level(self) -> None:
        with pytest.raises(ConfigurationError, match="unknown verbosity level"):
            parse_level("LOUD")

    @staticmethod
    def _own_handlers(logger: logging.Logger) -> list[logging.Handler]:
        return [h for h in logger.handlers if h.get_name() == LOGGER_NAME]

    def test_handler_installed_once(self) -> None:
        setup_logging("INFO")
        logger = setup_logging("DEBUG")
        assert len(self._own_handlers(logger)) == 1
        assert logger.level == logging.DEBUG

    def test_foreign_handler_does_not_block_install(self) -> None:
        logger = logging.getLogger(LOGGER_NAME)
        foreign = logging.NullHandler()
        logger.addHandler(foreign)
        try:
            setup_logging("DEBUG")
            own = self._own_handlers(logger)
            assert len(own) == 1
            assert isinstance(own[0], logging.StreamHandler)
            assert foreign in logger.handlers
        finally:
            logger.removeHandler(foreign)
