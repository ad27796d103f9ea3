"""Structured logging configuration.

Logs go to stderr so they never mix with the generated code printed on
stdout.  The default level is ``WARNING``; pass ``--verbose`` on the command
line or set ``PAGEGEN_LOG_LEVEL`` to see the pipeline steps.
"""

from __future__ import annotations

import logging
import os
import sys
from typing import Optional

import structlog


def configure_logging(level: Optional[str] = None) -> None:
    """Configure structlog on top of the standard library logger.

    Args:
        level: Log level name (``DEBUG``, ``INFO``, ...).  Defaults to
            ``PAGEGEN_LOG_LEVEL`` or ``WARNING``.
    """
    level = (level or os.environ.get("PAGEGEN_LOG_LEVEL", "WARNING")).upper()

    logging.basicConfig(
        format="%(message)s",
        stream=sys.stderr,
        level=getattr(logging, level, logging.WARNING),
        force=True,
    )

    structlog.configure(
        processors=[
            structlog.stdlib.filter_by_level,
            structlog.stdlib.add_logger_name,
            structlog.stdlib.add_log_level,
            structlog.processors.TimeStamper(fmt="iso"),
            structlog.processors.StackInfoRenderer(),
            structlog.processors.format_exc_info,
            structlog.dev.ConsoleRenderer(colors=False),
        ],
        wrapper_class=structlog.stdlib.BoundLogger,
        context_class=dict,
        logger_factory=structlog.stdlib.LoggerFactory(),
        cache_logger_on_first_use=False,
    )


def get_logger(name: Optional[str] = None) -> structlog.stdlib.BoundLogger:
    """Return a structlog logger for *name*."""
    return structlog.get_logger(name)
