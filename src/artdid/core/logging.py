"""
artdid.core.logging - structlog Setup
=======================================

Every module logs through a module-level ``structlog.get_logger()`` and binds
a component name per instance. This module routes structlog through stdlib
logging once at startup, so the root logger's level and handlers apply to
registry events and to records from third-party libraries alike.

Pipeline:
    structlog event ──→ shared processors ──→ stdlib logging.Logger
                                                   │
                           root StreamHandler + ProcessorFormatter
                                                   │
                                  ConsoleRenderer | JSONRenderer

Usage:
    >>> configure_logging("DEBUG")
    >>> configure_logging("INFO", json=True)   # one JSON object per line
"""

from __future__ import annotations

import logging
import sys

import structlog


# Marks the handler this module installs so a second call replaces it.
_HANDLER_NAME = "artdid"


def configure_logging(level: str = "INFO", json: bool = False) -> None:
    """Configure structlog over the stdlib root logger.

    Args:
        level: Logging level name (DEBUG, INFO, WARNING, ERROR, CRITICAL).
            Unknown names fall back to INFO.
        json: Render JSON lines instead of the console renderer.
    """
    log_level = logging.getLevelName(level.upper())
    if not isinstance(log_level, int):
        log_level = logging.INFO

    shared_processors = [
        structlog.contextvars.merge_contextvars,
        structlog.stdlib.add_log_level,
        structlog.stdlib.add_logger_name,
        structlog.processors.TimeStamper(fmt="iso", utc=True),
    ]

    structlog.configure(
        processors=[
            structlog.stdlib.filter_by_level,
            *shared_processors,
            structlog.processors.StackInfoRenderer(),
            structlog.stdlib.ProcessorFormatter.wrap_for_formatter,
        ],
        wrapper_class=structlog.stdlib.BoundLogger,
        logger_factory=structlog.stdlib.LoggerFactory(),
    )

    if json:
        render = [structlog.processors.format_exc_info, structlog.processors.JSONRenderer()]
    else:
        render = [structlog.dev.ConsoleRenderer()]

    formatter = structlog.stdlib.ProcessorFormatter(
        foreign_pre_chain=shared_processors,
        processors=[structlog.stdlib.ProcessorFormatter.remove_processors_meta, *render],
    )
    handler = logging.StreamHandler(sys.stdout)
    handler.set_name(_HANDLER_NAME)
    handler.setFormatter(formatter)

    root = logging.getLogger()
    for existing in list(root.handlers):
        if existing.get_name() == _HANDLER_NAME:
            root.removeHandler(existing)
    root.addHandler(handler)
    root.setLevel(log_level)
