"""
Loguru configuration for the command line tool.

Library modules only emit through ``loguru.logger``; sinks are installed
by ``configure_logger``, which the CLI calls once at startup.
"""

import sys

from loguru import logger

from localhost_ca.config import Settings, get_settings


def configure_logger(settings: Settings | None = None) -> None:
    """
    Configures loguru with the given settings.

    This function:
    1. Removes default loguru handlers
    2. Adds handler to stderr with the configured level and format

    Args:
        settings: Settings to apply, defaults to ``get_settings()``
    """
    settings = settings or get_settings()

    logger.remove()

    logger.add(
        sink=sys.stderr,
        level=settings.log_level.upper(),
        format=settings.log_format,
        colorize=True,
        serialize=False,
        backtrace=True,
        diagnose=False,
        enqueue=settings.logger_enqueue,
    )


__all__ = ["logger", "configure_logger"]
