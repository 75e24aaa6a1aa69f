"""
Convenience factory methods for common failed outcomes.

Usage:
    from resultrail import Failures

    # Instead of:
    ValueOutcome.fail(NotFoundError("User", user_id))

    # Write:
    Failures.not_found("User", user_id)

error_from_exception() doubles as an error factory for try_:

    outcome = ValueOutcome.try_(lambda: repo.load(key), Failures.error_from_exception)
"""

from __future__ import annotations

from typing import Any

from resultrail.errors import (
    ConflictError,
    ForbiddenError,
    NotFoundError,
    UnauthorizedError,
    ValidationError,
)
from resultrail.outcome import ValueOutcome
from resultrail.reasons import Error, ExceptionError


class Failures:
    """Factory methods for common failure types."""

    @staticmethod
    def validation(message: str, field_name: str | None = None) -> ValueOutcome[Any]:
        """Invalid input: missing fields, wrong format, rule violation."""
        return ValueOutcome.fail(ValidationError(message, field_name))

    @staticmethod
    def not_found(entity_name: str, entity_id: Any) -> ValueOutcome[Any]:
        return ValueOutcome.fail(NotFoundError(entity_name, entity_id))

    @staticmethod
    def conflict(message: str) -> ValueOutcome[Any]:
        return ValueOutcome.fail(ConflictError(message))

    @staticmethod
    def unauthorized(message: str = "Authentication required") -> ValueOutcome[Any]:
        return ValueOutcome.fail(UnauthorizedError(message))

    @staticmethod
    def forbidden(message: str = "Access denied") -> ValueOutcome[Any]:
        return ValueOutcome.fail(ForbiddenError(message))

    @staticmethod
    def from_exception(exception: Exception) -> ValueOutcome[Any]:
        """Failed outcome holding the domain error mapped from the exception."""
        return ValueOutcome.fail(Failures.error_from_exception(exception))

    @staticmethod
    def error_from_exception(exception: Exception) -> Error:
        """
        Map a Python exception to the most appropriate domain error.

        Mapping:
          - ValueError, TypeError, KeyError → ValidationError
          - LookupError, FileNotFoundError  → NotFoundError
          - PermissionError                 → ForbiddenError
          - Everything else                 → ExceptionError
        """
        message = str(exception) or type(exception).__name__
        match exception:
            case ValueError() | TypeError() | KeyError():
                error: Error = ValidationError(message)
            case LookupError() | FileNotFoundError():
                error = NotFoundError(message)
            case PermissionError():
                error = ForbiddenError(message)
            case _:
                return ExceptionError(exception)
        return error.with_tag("ExceptionType", type(exception).__name__)
