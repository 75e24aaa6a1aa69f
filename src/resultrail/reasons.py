"""
Reasons — the units of context carried by an Outcome.

A Reason is either a Success (an annotation such as "order validated") or an
Error (why the railway switched to the failure track). Every reason has a
message and an insertion-ordered bag of tags: opaque key/value context that
downstream consumers can read without re-inspecting the original failure.

The hierarchy is closed and dispatched with match/case:

    Reason
      ├── Success
      └── Error
            ├── ExceptionError   — wraps a caught exception
            ├── ConversionError  — produced by the fail-soft conversion path
            └── DomainError      — see resultrail.errors

Tags are mutable only while a reason is being built. Once a reason is attached
to an Outcome it is sealed and with_tag() raises TypeError.

    >>> error = Error("Email is invalid").with_tag("Field", "email")
    >>> error.tags["Field"]
    'email'
"""

from __future__ import annotations

import traceback
from collections.abc import Iterator, Mapping
from datetime import UTC, datetime
from types import MappingProxyType
from typing import Any, Self

from resultrail._guards import require_message
from resultrail.config import get_settings

_MISSING: Any = object()


class Reason:
    """
    Abstract unit of context: a message plus ordered key/value tags.

    Not instantiated directly; use Success, Error or one of their subclasses.
    """

    __match_args__ = ("message",)

    def __init__(self, message: str = "", tags: Mapping[str, Any] | None = None) -> None:
        if type(self) is Reason:
            raise TypeError("Reason is abstract; create a Success or an Error")
        self._message = "" if message is None else str(message)
        self._tags: dict[str, Any] = {}
        self._sealed = False
        if tags:
            self.with_tags(tags)

    @property
    def message(self) -> str:
        return self._message

    @property
    def tags(self) -> Mapping[str, Any]:
        """Read-only view of the tags, in insertion order."""
        return MappingProxyType(self._tags)

    # ──────────────────────── Building ────────────────────────

    def with_tag(self, key: str, value: Any) -> Self:
        """
        Add or overwrite a tag and return this reason for fluent chaining.

        The last write for a key wins. Raises TypeError for a None key or when
        the reason is already attached to an Outcome.
        """
        if key is None:
            raise TypeError("Tag key must not be None")
        if self._sealed:
            raise TypeError(
                f"{type(self).__name__} is attached to an outcome and its tags are read-only"
            )
        self._tags[key] = value
        return self

    def with_tags(self, tags: Mapping[str, Any] | None = None, /, **kwargs: Any) -> Self:
        """Add many tags at once, from a mapping and/or keyword arguments."""
        for key, value in (tags or {}).items():
            self.with_tag(key, value)
        for key, value in kwargs.items():
            self.with_tag(key, value)
        return self

    def _seal(self) -> None:
        self._sealed = True

    # ──────────────────────── Tag access ────────────────────────

    def has_tag(self, key: str) -> bool:
        return key in self._tags

    def get_tag(self, key: str, default: Any = None) -> Any:
        return self._tags.get(key, default)

    def require_tag(self, key: str) -> Any:
        """Return the tag value or raise KeyError naming the reason type."""
        value = self._tags.get(key, _MISSING)
        if value is _MISSING:
            raise KeyError(f"Required tag {key!r} not found on {type(self).__name__}")
        return value

    def format_tags(self, separator: str = ", ") -> str:
        """Render the tags as key=value pairs, e.g. 'Field=email, Code=42'."""
        return separator.join(f"{key}={value}" for key, value in self._tags.items())

    def iter_tags(self) -> Iterator[tuple[str, Any]]:
        return iter(self._tags.items())

    # ──────────────────────── Dunder methods ────────────────────────

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, Reason):
            return NotImplemented
        return (
            type(self) is type(other)
            and self._message == other._message
            and self._tags == other._tags
        )

    __hash__ = None  # type: ignore[assignment]

    def __repr__(self) -> str:
        if not self._tags:
            return f"{type(self).__name__}({self._message!r})"
        return f"{type(self).__name__}({self._message!r}, tags={{{self.format_tags()}}})"

    def __str__(self) -> str:
        return self._message


class Success(Reason):
    """Annotation that a step completed, e.g. Success("User created")."""


class Error(Reason):
    """Failure context. Appending an Error to an Outcome switches it to failed."""


class ExceptionError(Error):
    """
    Error wrapping a caught exception.

    The exception's message, type name and inner exception (explicit __cause__
    or implicit __context__) are mirrored into tags, so consumers can diagnose
    the failure from the reason alone:

        ExceptionType     — e.g. "ZeroDivisionError"
        ExceptionMessage  — str(exception)
        InnerException    — message of the chained exception, when present
        StackTrace        — only when the capture_stack_trace setting is on
    """

    def __init__(self, exception: BaseException, message: str | None = None) -> None:
        if exception is None:
            raise TypeError("ExceptionError exception must not be None")
        exception_message = str(exception)
        if message is None:
            message = exception_message or type(exception).__name__
        super().__init__(message)
        self._exception = exception

        self.with_tag("ExceptionType", type(exception).__name__)
        self.with_tag("ExceptionMessage", exception_message)
        inner = exception.__cause__ or exception.__context__
        if inner is not None:
            self.with_tag("InnerException", str(inner) or type(inner).__name__)
        if get_settings().capture_stack_trace and exception.__traceback__ is not None:
            self.with_tag("StackTrace", "".join(traceback.format_tb(exception.__traceback__)))

    @property
    def exception(self) -> BaseException:
        return self._exception


class ConversionError(Error):
    """
    Error produced when a conversion receives a valid but empty error collection.

    Tagged as a warning-level conversion problem with a UTC timestamp; the
    converting code adds what was converted and how many items it held.
    """

    def __init__(self, reason: str) -> None:
        super().__init__(f"Conversion failed: {reason}")
        self.with_tag("ErrorType", "Conversion")
        self.with_tag("Severity", "Warning")
        self.with_tag("Timestamp", datetime.now(UTC))

    def with_conversion_type(self, conversion_type: str) -> Self:
        return self.with_tag("ConversionType", conversion_type)

    def with_provided_value(self, value: Any) -> Self:
        return self.with_tag("ProvidedValue", "None" if value is None else str(value))


# ──────────────────────── Coercion helpers ────────────────────────


def as_error(item: str | Error) -> Error:
    """Accept an Error as-is or wrap a non-empty message in one."""
    match item:
        case Error():
            return item
        case str():
            return Error(require_message(item, "error message"))
        case None:
            raise TypeError("error must not be None")
    raise TypeError(f"Expected an Error or a message, got {type(item).__name__}")


def as_success(item: str | Success) -> Success:
    """Accept a Success as-is or wrap a non-empty message in one."""
    match item:
        case Success():
            return item
        case str():
            return Success(require_message(item, "success message"))
        case None:
            raise TypeError("success must not be None")
    raise TypeError(f"Expected a Success or a message, got {type(item).__name__}")


def is_failure_reason(reason: Reason) -> bool:
    """
    Whether appending this reason leaves an outcome failed.

    Error → True, Success → False. Anything else is rejected with TypeError.
    """
    match reason:
        case Error():
            return True
        case Success():
            return False
        case None:
            raise TypeError("reason must not be None")
    raise TypeError(f"Expected a Success or an Error, got {type(reason).__name__}")
