"""Logging helpers for tap_cli."""

from __future__ import annotations

import logging

from tap_cli.exceptions import ConfigurationError

LOGGER_NAME = "tap_cli"

DEFAULT_LEVEL = "CRITICAL"

LEVELS: tuple[str, ...] = ("CRITICAL", "ERROR", "WARNING", "INFO", "DEBUG")


def parse_level(level_name: str) -> int:
    """Map a verbosity name to a :mod:`logging` level number."""
    normalized = (level_name or DEFAULT_LEVEL).strip().upper()
    if normalized not in LEVELS:
        raise ConfigurationError(
            f"unknown verbosity level: {level_name}",
            hint=f"Use one of: {', '.join(LEVELS)}",
        )
    return getattr(logging, normalized)


def setup_logging(level_name: str = DEFAULT_LEVEL) -> logging.Logger:
    """Configure and return the application logger.

    The returned instance is handed to every component that logs.  Our
    own handler is tagged with the logger name and installed once;
    handlers added by a host program or test runner are left alone.
    """
    level = parse_level(level_name)

    logger = logging.getLogger(LOGGER_NAME)
    if not any(h.get_name() == LOGGER_NAME for h in logger.handlers):
        handler = logging.StreamHandler()
        handler.set_name(LOGGER_NAME)
        formatter = logging.Formatter(
            fmt="%(asctime)s %(levelname)s %(name)s: %(message)s",
            datefmt="%Y-%m-%d %H:%M:%S",
        )
        handler.setFormatter(formatter)
        logger.addHandler(handler)
    logger.setLevel(level)
    logger.propagate = False

    # Suppress verbose HTTP connection logs
    logging.getLogger("urllib3").setLevel(logging.WARNING)
    logging.getLogger("requests").setLevel(logging.WARNING)

    return logger


__all__ = ["DEFAULT_LEVEL", "LEVELS", "LOGGER_NAME", "setup_logging", "parse_level"]
