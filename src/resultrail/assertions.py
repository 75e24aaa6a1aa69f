"""
Test assertions for outcomes.

Expressive assert methods with clear failure messages, for suites that test
outcome-returning code.

Usage in tests:
    from resultrail import OutcomeAssertions

    def test_create_user():
        outcome = create_user(valid_command)
        user = OutcomeAssertions.assert_success(outcome)
        assert user.name == "Alice"

    def test_invalid_email():
        outcome = create_user(bad_command)
        OutcomeAssertions.assert_failure(outcome, ValidationError)
        OutcomeAssertions.assert_failure_message_contains(outcome, "email")
"""

from __future__ import annotations

from typing import Any

from resultrail.outcome import Outcome, ValueOutcome
from resultrail.reasons import Error


def _describe_errors(outcome: Outcome) -> str:
    return "; ".join(f"{type(error).__name__}: {error.message!r}" for error in outcome.errors())


class OutcomeAssertions:
    """Expressive test assertions for Outcome values."""

    @staticmethod
    def assert_success(outcome: Outcome, message: str = "") -> Any:
        """
        Assert the outcome succeeded and return its value (None when untyped).

            value = OutcomeAssertions.assert_success(outcome)
        """
        context = f" ({message})" if message else ""
        assert outcome.is_success(), f"Expected success but got failure [{_describe_errors(outcome)}]{context}"
        return outcome.value() if isinstance(outcome, ValueOutcome) else None

    @staticmethod
    def assert_failure(
        outcome: Outcome,
        expected_type: type[Error] | None = None,
        message: str = "",
    ) -> tuple[Error, ...]:
        """
        Assert the outcome failed, optionally requiring an error of a given type.

            errors = OutcomeAssertions.assert_failure(outcome, NotFoundError)
        """
        context = f" ({message})" if message else ""
        assert outcome.is_failed(), f"Expected failure but got {outcome!r}{context}"
        errors = outcome.errors()
        if expected_type is not None:
            assert any(isinstance(error, expected_type) for error in errors), (
                f"Expected an error of type {expected_type.__name__} "
                f"but got [{_describe_errors(outcome)}]{context}"
            )
        return errors

    @staticmethod
    def assert_failure_message_contains(outcome: Outcome, substring: str) -> None:
        """Case-insensitive: some error message must contain the substring."""
        OutcomeAssertions.assert_failure(outcome)
        assert any(substring.lower() in error.message.lower() for error in outcome.errors()), (
            f"Expected an error message containing {substring!r} "
            f"but errors were: [{_describe_errors(outcome)}]"
        )

    @staticmethod
    def assert_error_messages(outcome: Outcome, *expected_messages: str) -> None:
        """Assert the exact error messages, in order."""
        OutcomeAssertions.assert_failure(outcome)
        actual = [error.message for error in outcome.errors()]
        assert actual == list(expected_messages), (
            f"Expected error messages {list(expected_messages)!r} but got {actual!r}"
        )

    @staticmethod
    def assert_success_value(outcome: ValueOutcome[Any], expected_value: Any) -> None:
        value = OutcomeAssertions.assert_success(outcome)
        assert value == expected_value, f"Expected success value {expected_value!r} but got {value!r}"

    @staticmethod
    def assert_has_tag(outcome: Outcome, key: str, expected_value: Any = None) -> None:
        """Assert that some reason carries the tag (and, when given, the value)."""
        matching = [reason for reason in outcome.reasons() if reason.has_tag(key)]
        assert matching, f"Expected a reason tagged {key!r} but none of {list(outcome.reasons())!r} is"
        if expected_value is not None:
            values = [reason.tags[key] for reason in matching]
            assert expected_value in values, (
                f"Expected tag {key}={expected_value!r} but found values {values!r}"
            )
