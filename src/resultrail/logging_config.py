"""
Logging setup — structlog configuration for applications using resultrail.

The library itself only emits events through structlog.get_logger():

    outcome.exception_captured  (debug)    a combinator turned an exception into an ExceptionError
    outcome.conversion_error    (warning)  a conversion produced a ConversionError

Applications that already configure structlog need nothing from this module.
"""

from __future__ import annotations

import logging

import structlog

from resultrail.config import get_settings


def configure_logging(log_level: str | None = None) -> None:
    """
    Configure structlog with a colored, human-readable console renderer.

    The level defaults to the log_level setting. Unknown level names fall back
    to WARNING.
    """
    level_name = (log_level or get_settings().log_level).upper()
    structlog.configure(
        processors=[
            structlog.contextvars.merge_contextvars,
            structlog.processors.add_log_level,
            structlog.processors.StackInfoRenderer(),
            structlog.dev.set_exc_info,
            structlog.processors.TimeStamper(fmt="iso"),
            structlog.dev.ConsoleRenderer(),
        ],
        wrapper_class=structlog.make_filtering_bound_logger(
            getattr(logging, level_name, logging.WARNING)
        ),
        context_class=dict,
        logger_factory=structlog.PrintLoggerFactory(),
        cache_logger_on_first_use=False,
    )
