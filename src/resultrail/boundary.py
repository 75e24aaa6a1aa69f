"""
Exception boundary — where native exceptions become Error reasons.

Combinators (map, bind, ensure, select...) and the try_ factories call
capture_exception() when user code raises.

Synchronous paths capture Exception subclasses. Async paths (try_async and the
map / bind / ensure / select continuations of a PendingOutcome) also capture
asyncio.CancelledError raised at an await point, so a cancelled continuation
ends the pipeline as an ExceptionError like any other failure.
KeyboardInterrupt and SystemExit always propagate.
"""

from __future__ import annotations

import asyncio
from typing import Callable

import structlog

from resultrail.reasons import Error, ExceptionError

log = structlog.get_logger()

ErrorFactory = Callable[[BaseException], Error]

ASYNC_CAPTURED: tuple[type[BaseException], ...] = (Exception, asyncio.CancelledError)


def capture_exception(
    exception: Exception | asyncio.CancelledError,
    error_factory: ErrorFactory | None = None,
) -> Error:
    """
    Convert a caught exception into an Error reason.

    Uses error_factory when given, otherwise wraps the exception in an
    ExceptionError. A factory returning anything but an Error is a programming
    mistake and raises TypeError.
    """
    log.debug(
        "outcome.exception_captured",
        exception_type=type(exception).__name__,
        error=str(exception),
    )
    if error_factory is None:
        return ExceptionError(exception)

    error = error_factory(exception)
    if not isinstance(error, Error):
        raise TypeError(
            f"error_factory must return an Error, got {type(error).__name__}"
        )
    return error
