"""
Conversions — turning plain values, errors and error collections into outcomes.

Two policies apply:

  fail-fast  None is a programming error: from_error(None) and
             from_errors(None) raise TypeError immediately.
  fail-soft  An empty error collection is a valid but meaningless input.
             from_errors(()) / from_errors([]) return a failed outcome holding
             a ConversionError that records what was converted, and the
             conversion is logged as a warning.

The explicit factory Outcome.fail([]) keeps raising ValueError: callers of the
factory state their intent, callers of a conversion only hand over data.
"""

from __future__ import annotations

import functools
import inspect
from collections.abc import Callable
from typing import Any, TypeVar

import structlog

from resultrail.config import get_settings
from resultrail.outcome import Outcome, ValueOutcome
from resultrail.reasons import ConversionError, Error

log = structlog.get_logger()

T = TypeVar("T")


def from_value(value: T) -> ValueOutcome[T]:
    return ValueOutcome.ok(value)


def from_error(error: Error) -> ValueOutcome[Any]:
    if error is None:
        raise TypeError("error must not be None")
    if not isinstance(error, Error):
        raise TypeError(f"Expected an Error, got {type(error).__name__}")
    return ValueOutcome.fail(error)


def from_errors(errors: tuple[Error, ...] | list[Error]) -> ValueOutcome[Any]:
    """
    Failed outcome from a collection of errors.

    Empty tuple → ConversionError tagged ConversionType="tuple[Error]", ArrayLength=0.
    Empty list  → ConversionError tagged ConversionType="list[Error]", ListCount=0.
    """
    if errors is None:
        raise TypeError("errors must not be None")
    match errors:
        case tuple():
            conversion_type, count_tag = "tuple[Error]", "ArrayLength"
        case list():
            conversion_type, count_tag = "list[Error]", "ListCount"
        case _:
            raise TypeError(f"Expected a tuple or list of Errors, got {type(errors).__name__}")

    for item in errors:
        if not isinstance(item, Error):
            raise TypeError(f"Expected an Error, got {type(item).__name__}")
    if errors:
        return ValueOutcome.fail(errors)

    error = (
        ConversionError(f"An empty {conversion_type} collection was provided")
        .with_conversion_type(conversion_type)
        .with_tag(count_tag, 0)
    )
    if get_settings().log_conversion_errors:
        log.warning(
            "outcome.conversion_error",
            conversion_type=conversion_type,
            error=error.message,
        )
    return ValueOutcome.fail(error)


def _is_error_collection(obj: Any) -> bool:
    return isinstance(obj, (tuple, list)) and bool(obj) and all(isinstance(item, Error) for item in obj)


def to_outcome(obj: Any) -> Outcome:
    """
    Convert whatever a function returned into an outcome.

        outcome          → unchanged
        Error            → failed outcome with that error
        tuple/list of Error (non-empty) → failed outcome with all of them
        anything else    → successful outcome holding it as the value
    """
    match obj:
        case Outcome():
            return obj
        case Error():
            return from_error(obj)
        case _ if _is_error_collection(obj):
            return from_errors(obj)
        case _:
            return from_value(obj)


def as_outcome(func: Callable[..., Any]) -> Callable[..., Any]:
    """
    Decorator: wrap the function's return value with to_outcome().

    Works for plain and coroutine functions. Exceptions are not captured;
    combine with try_ for that.

        @as_outcome
        def parse_port(raw: str):
            port = int(raw)
            return port if 0 < port < 65536 else ValidationError("Port out of range", "port")
    """
    if inspect.iscoroutinefunction(func):

        @functools.wraps(func)
        async def async_wrapper(*args: Any, **kwargs: Any) -> Outcome:
            return to_outcome(await func(*args, **kwargs))

        return async_wrapper

    @functools.wraps(func)
    def wrapper(*args: Any, **kwargs: Any) -> Outcome:
        return to_outcome(func(*args, **kwargs))

    return wrapper
