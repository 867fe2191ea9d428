"""Logging setup for the secret quiz service."""

from __future__ import annotations

import logging
from logging import Logger

from secret_quiz.constants.logging_constants import (
    ACCESS_LOGGER_NAME,
    DEFAULT_LOG_LEVEL,
    LOG_FORMAT,
    LOGGER_NAME,
)


def resolve_level(level: int | str) -> int:
    """Accept either a numeric level or a name such as ``"debug"``."""
    if isinstance(level, int):
        return level
    resolved = logging.getLevelName(level.strip().upper())
    if not isinstance(resolved, int):
        raise ValueError(f"Unknown log level: {level!r}")
    return resolved


def configure_logging(level: int | str = DEFAULT_LOG_LEVEL, access_log: bool = False) -> Logger:
    """Route service and server logs through one handler and return the service logger.

    Quiz state changes and rejected operations are logged by the manager, so the
    uvicorn access log is held at WARNING unless ``access_log`` is set.
    """
    numeric_level = resolve_level(level)
    logging.basicConfig(level=numeric_level, format=LOG_FORMAT)
    service_logger = logging.getLogger(LOGGER_NAME)
    service_logger.setLevel(numeric_level)
    logging.getLogger(ACCESS_LOGGER_NAME).setLevel(numeric_level if access_log else logging.WARNING)
    return service_logger
