"""Structured logging via structlog.

Configure once at process startup. Library modules keep using
``logging.getLogger(__name__)``; the stdlib bridge routes those records to
the same stream.

Renderer selection:
  debug=True : `ConsoleRenderer` with colours for local development.
  debug=False: `JSONRenderer` for machine-parseable build-agent logs.
"""

from __future__ import annotations

import logging
import sys
from typing import Optional

import structlog

from rubyrunner.core.config import get_settings


def configure_structlog(debug: Optional[bool] = None) -> None:
    """Configure structlog for the process lifetime.

    When ``debug`` is None the value comes from ``Settings.debug``.
    Calling multiple times is safe: structlog is idempotent.
    """
    if debug is None:
        debug = get_settings().debug

    shared_processors: list = [
        structlog.stdlib.add_log_level,
        structlog.processors.TimeStamper(fmt="iso"),
        structlog.processors.StackInfoRenderer(),
        structlog.processors.format_exc_info,
    ]

    if debug:
        renderer = structlog.dev.ConsoleRenderer()
    else:
        renderer = structlog.processors.JSONRenderer()

    structlog.configure(
        processors=shared_processors + [renderer],
        wrapper_class=structlog.make_filtering_bound_logger(logging.DEBUG),
        context_class=dict,
        logger_factory=structlog.WriteLoggerFactory(file=sys.stdout),
        cache_logger_on_first_use=True,
    )

    logging.basicConfig(
        format="%(message)s",
        stream=sys.stdout,
        level=logging.DEBUG if debug else logging.INFO,
    )
