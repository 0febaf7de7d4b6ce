"""structlog setup for the LocalAPI client.

Library code only calls structlog.get_logger(); applications (and the CLI)
call configure_logging() once to choose level and renderer.
"""

from __future__ import annotations

import logging
import sys
from typing import Optional

import structlog

from tailscale_localapi.core.config import LoggingConfig


def configure_logging(
    level: str = "INFO",
    fmt: str = "console",
    config: Optional[LoggingConfig] = None,
) -> None:
    """Configure structlog processors and the minimum level.

    Args:
        level: Minimum level name (DEBUG, INFO, ...).
        fmt: "json" for machine-readable lines, "console" for humans.
        config: Optional LoggingConfig; overrides level and fmt when given.
    """
    if config is not None:
        level = config.level
        fmt = config.format

    renderer: structlog.types.Processor
    if fmt == "json":
        renderer = structlog.processors.JSONRenderer()
    else:
        renderer = structlog.dev.ConsoleRenderer(colors=False)

    structlog.configure(
        processors=[
            structlog.contextvars.merge_contextvars,
            structlog.processors.add_log_level,
            structlog.processors.TimeStamper(fmt="iso"),
            structlog.processors.StackInfoRenderer(),
            structlog.processors.format_exc_info,
            renderer,
        ],
        wrapper_class=structlog.make_filtering_bound_logger(
            logging.getLevelName(level.upper())
        ),
        logger_factory=structlog.PrintLoggerFactory(file=sys.stderr),
        cache_logger_on_first_use=False,
    )
