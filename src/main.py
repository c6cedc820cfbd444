"""MyAmanah core — bootstrap for host applications.

The engines themselves are pure functions; embedding code calls
``configure_logging()`` once at startup so their loggers share the host's
format and level.
"""

from __future__ import annotations

import logging
import sys

from src.config import Settings, get_settings

logger = logging.getLogger("amanah")


def configure_logging(settings: Settings | None = None) -> None:
    """Install the root log handler using the configured level."""
    settings = settings or get_settings()
    level = logging.DEBUG if settings.debug else getattr(
        logging, settings.log_level.upper(), logging.INFO
    )
    logging.basicConfig(
        level=level,
        format="%(asctime)s %(levelname)-8s %(name)s — %(message)s",
        datefmt="%Y-%m-%d %H:%M:%S",
        stream=sys.stdout,
    )
    logger.info(
        "Starting %s core v%s [%s]",
        settings.app_name,
        settings.app_version,
        settings.environment,
    )
