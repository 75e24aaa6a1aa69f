"""
resultrail — railway-oriented outcomes for Python.

Explicit, composable failure handling: operations return an Outcome carrying
the reasons (successes and errors) that explain it, instead of raising.

    from resultrail import ValueOutcome, ValidationError

    def validate_age(age: int) -> ValueOutcome[int]:
        if age < 0:
            return ValueOutcome.fail(ValidationError("Age must be non-negative", "age"))
        return ValueOutcome.ok(age)

    outcome = (
        ValueOutcome.ok({"name": "Alice", "age": 30})
        .bind(lambda d: validate_age(d["age"]))
        .map(lambda age: f"Valid user, age {age}")
    )
"""

from resultrail.reasons import ConversionError, Error, ExceptionError, Reason, Success
from resultrail.errors import (
    ConflictError,
    DomainError,
    ErrorKind,
    ForbiddenError,
    NotFoundError,
    UnauthorizedError,
    ValidationError,
)
from resultrail.outcome import Outcome, ValueOutcome
from resultrail.pending import PendingOutcome
from resultrail.validation import (
    AsyncPredicateRule,
    AsyncValidationRule,
    PredicateRule,
    RuleSet,
    RuleSetBuilder,
    ValidationRule,
)
from resultrail.conversions import as_outcome, from_error, from_errors, from_value, to_outcome
from resultrail.failures import Failures
from resultrail.assertions import OutcomeAssertions
from resultrail.config import ResultRailSettings, get_settings
from resultrail.logging_config import configure_logging

__all__ = [
    "Reason",
    "Success",
    "Error",
    "ExceptionError",
    "ConversionError",
    "ErrorKind",
    "DomainError",
    "ValidationError",
    "NotFoundError",
    "ConflictError",
    "UnauthorizedError",
    "ForbiddenError",
    "Outcome",
    "ValueOutcome",
    "PendingOutcome",
    "ValidationRule",
    "AsyncValidationRule",
    "PredicateRule",
    "AsyncPredicateRule",
    "RuleSet",
    "RuleSetBuilder",
    "from_value",
    "from_error",
    "from_errors",
    "to_outcome",
    "as_outcome",
    "Failures",
    "OutcomeAssertions",
    "ResultRailSettings",
    "get_settings",
    "configure_logging",
]

__version__ = "1.0.0"
