"""
Domain errors — typed Error reasons for the common failure categories.

Each error tags itself with its ErrorType and the HTTP status of its kind, so
an outer layer can build a response from the reason alone:

    >>> error = NotFoundError("User", 42)
    >>> error.message
    "User with id '42' was not found"
    >>> dict(error.tags)
    {'ErrorType': 'NotFound', 'HttpStatusCode': 404, 'EntityName': 'User', 'EntityId': '42'}

The kind → status table is a plain static mapping; there is no runtime cache.
"""

from __future__ import annotations

from enum import Enum, unique
from typing import Any, ClassVar

from resultrail.reasons import Error

_MISSING: Any = object()


@unique
class ErrorKind(Enum):
    """Closed set of domain failure categories."""

    VALIDATION = "Validation"
    """Invalid input: missing fields, bad format, rule violations (→ 422)."""

    UNAUTHORIZED = "Unauthorized"
    """Missing or invalid credentials (→ 401)."""

    FORBIDDEN = "Forbidden"
    """Authenticated, but not allowed (→ 403)."""

    NOT_FOUND = "NotFound"
    """Entity does not exist (→ 404)."""

    CONFLICT = "Conflict"
    """State conflict such as a duplicate key (→ 409)."""

    @property
    def http_status(self) -> int:
        return _KIND_TO_STATUS[self]


_KIND_TO_STATUS: dict[ErrorKind, int] = {
    ErrorKind.VALIDATION: 422,
    ErrorKind.UNAUTHORIZED: 401,
    ErrorKind.FORBIDDEN: 403,
    ErrorKind.NOT_FOUND: 404,
    ErrorKind.CONFLICT: 409,
}


def _display(value: Any) -> str:
    return "None" if value is None else str(value)


class DomainError(Error):
    """Error with a fixed ErrorKind. Subclasses set `kind`."""

    kind: ClassVar[ErrorKind]

    def __init__(self, message: str) -> None:
        if type(self) is DomainError:
            raise TypeError("DomainError is abstract; use one of its subclasses")
        super().__init__(message)
        self.with_tag("ErrorType", self.kind.value)
        self.with_tag("HttpStatusCode", self.kind.http_status)

    @property
    def http_status(self) -> int:
        return self.kind.http_status


class ValidationError(DomainError):
    """Invalid input, optionally naming the offending field (tag FieldName)."""

    kind = ErrorKind.VALIDATION

    def __init__(self, message: str, field_name: str | None = None) -> None:
        super().__init__(message)
        self.field_name = field_name
        if field_name is not None:
            self.with_tag("FieldName", field_name)


class NotFoundError(DomainError):
    """
    Missing entity.

    NotFoundError("No active session") uses the message as given;
    NotFoundError("User", 42) builds "User with id '42' was not found" and tags
    EntityName / EntityId.
    """

    kind = ErrorKind.NOT_FOUND

    def __init__(self, message_or_entity: str, entity_id: Any = _MISSING) -> None:
        if entity_id is _MISSING:
            super().__init__(message_or_entity)
            return
        super().__init__(f"{message_or_entity} with id '{_display(entity_id)}' was not found")
        self.with_tag("EntityName", message_or_entity)
        self.with_tag("EntityId", _display(entity_id))


class ConflictError(DomainError):
    kind = ErrorKind.CONFLICT

    @classmethod
    def for_field(cls, entity_name: str, field: str, value: Any) -> ConflictError:
        """ConflictError.for_field("User", "email", "a@b.c") → "User with email 'a@b.c' already exists"."""
        error = cls(f"{entity_name} with {field} '{_display(value)}' already exists")
        return error.with_tags(
            EntityName=entity_name,
            ConflictField=field,
            ConflictValue=_display(value),
        )


class UnauthorizedError(DomainError):
    kind = ErrorKind.UNAUTHORIZED

    def __init__(self, message: str = "Authentication required") -> None:
        super().__init__(message)


class ForbiddenError(DomainError):
    kind = ErrorKind.FORBIDDEN

    def __init__(self, message: str = "Access denied") -> None:
        super().__init__(message)

    @classmethod
    def for_action(cls, action: str, resource: str) -> ForbiddenError:
        error = cls(f"Access denied: insufficient permissions to {action} {resource}")
        return error.with_tags(Action=action, Resource=resource)
