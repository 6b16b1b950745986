"""Loguru sink configuration.

Library modules log through ``loguru.logger`` directly; only entry points
(the CLI) call ``configure_logging``.
"""

from __future__ import annotations

import sys

from loguru import logger

from recon.config import get_settings

LOG_LEVELS = ("TRACE", "DEBUG", "INFO", "SUCCESS", "WARNING", "ERROR", "CRITICAL")

LOG_FORMAT = (
    "<green>{time:YYYY-MM-DD HH:mm:ss.SSS}</green> | <level>{level: <8}</level> | "
    "<cyan>{name}</cyan>:<cyan>{function}</cyan>:<cyan>{line}</cyan> - <level>{message}</level>"
)


def configure_logging(level: str | None = None) -> None:
    """Replace loguru's default sink with one stderr sink at *level*.

    Falls back to ``Settings.log_level`` when no level is given.
    """
    logger.remove()
    logger.add(
        sys.stderr,
        level=(level or get_settings().log_level).upper(),
        format=LOG_FORMAT,
    )
