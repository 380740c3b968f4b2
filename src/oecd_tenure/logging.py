"""
structlog configuration for the pipeline scripts.

Call configure_logging() once at process startup, then:

    log = get_logger(__name__)
    log.info("sheet_tidied", sheet="HM1.3.A2", rows=2470)
"""

from __future__ import annotations

import logging
import sys
from typing import Any, Optional

import structlog

from oecd_tenure.config import LOG_FORMAT, LOG_LEVEL


def configure_logging(log_level: Optional[str] = None, log_format: Optional[str] = None) -> None:
    """
    Configure structlog for the process. Idempotent.

    Parameters
    ----------
    log_level : str, optional
        Override LOG_LEVEL ("DEBUG", "INFO", ...).
    log_format : str, optional
        Override LOG_FORMAT ("json" | "console").
    """
    level = getattr(logging, (log_level or LOG_LEVEL).upper(), logging.INFO)
    fmt = log_format or LOG_FORMAT

    logging.basicConfig(format="%(message)s", stream=sys.stdout, level=level)

    if fmt == "json":
        renderer: Any = structlog.processors.JSONRenderer()
    else:
        renderer = structlog.dev.ConsoleRenderer(colors=sys.stdout.isatty())

    structlog.configure(
        processors=[
            structlog.contextvars.merge_contextvars,
            structlog.stdlib.add_log_level,
            structlog.processors.TimeStamper(fmt="iso", utc=True),
            structlog.processors.StackInfoRenderer(),
            structlog.processors.format_exc_info,
            renderer,
        ],
        wrapper_class=structlog.make_filtering_bound_logger(level),
        context_class=dict,
        logger_factory=structlog.PrintLoggerFactory(),
        cache_logger_on_first_use=True,
    )


def get_logger(name: str, **initial_values: Any) -> structlog.BoundLogger:
    """Return a structlog logger bound with optional initial context."""
    logger = structlog.get_logger(name)
    if initial_values:
        logger = logger.bind(**initial_values)
    return logger  # type: ignore[return-value]
