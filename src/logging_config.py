"""Logging setup shared by anything that embeds the stores.

Modules log through ``logging.getLogger(__name__)``; structlog is routed
through the same stdlib handlers so both styles end up in one stream.
"""

from __future__ import annotations

import logging
import sys

import structlog

from src.config import settings


def configure_logging(level: str | None = None) -> None:
    """Configure stdlib logging and structlog. Defaults to LOG_LEVEL."""
    level = (level or settings.log_level).upper()

    logging.basicConfig(
        level=getattr(logging, level),
        format="%(asctime)s %(levelname)-8s %(name)s — %(message)s",
        stream=sys.stdout,
    )
    structlog.configure(
        processors=[
            structlog.stdlib.filter_by_level,
            structlog.stdlib.add_logger_name,
            structlog.stdlib.add_log_level,
            structlog.processors.TimeStamper(fmt="iso"),
            structlog.dev.ConsoleRenderer(),
        ],
        wrapper_class=structlog.stdlib.BoundLogger,
        context_class=dict,
        logger_factory=structlog.stdlib.LoggerFactory(),
    )
    # SQL echo stays off unless explicitly debugging
    if level != "DEBUG":
        logging.getLogger("sqlalchemy.engine").setLevel(logging.WARNING)
