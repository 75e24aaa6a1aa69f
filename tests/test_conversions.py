"""
Tests for value / error / error-collection conversions.

Fail-fast: None inputs raise TypeError.
Fail-soft: empty error collections become a single ConversionError.
"""

from __future__ import annotations

import pytest
from structlog.testing import capture_logs

from resultrail import (
    ConversionError,
    Error,
    Outcome,
    ValueOutcome,
    as_outcome,
    from_error,
    from_errors,
    from_value,
    to_outcome,
)


# ═══════════════════════════════════════════════════════════════
# 1. Fail-fast
# ═══════════════════════════════════════════════════════════════


class TestFailFast:
    def test_none_error(self):
        with pytest.raises(TypeError):
            from_error(None)  # type: ignore[arg-type]

    def test_none_error_collection(self):
        with pytest.raises(TypeError):
            from_errors(None)  # type: ignore[arg-type]

    def test_non_error_item(self):
        with pytest.raises(TypeError):
            from_errors([Error("a"), "b"])  # type: ignore[list-item]

    def test_unsupported_collection_type(self):
        with pytest.raises(TypeError):
            from_errors(error for error in [Error("a")])  # type: ignore[arg-type]


# ═══════════════════════════════════════════════════════════════
# 2. Fail-soft
# ═══════════════════════════════════════════════════════════════


class TestFailSoft:
    def test_empty_tuple_yields_conversion_error(self):
        """
        GIVEN an empty tuple of errors
        WHEN it is converted
        THEN no exception is raised and the outcome holds exactly one ConversionError
        """
        outcome = from_errors(())

        assert outcome.is_failed()
        assert len(outcome.reasons()) == 1
        error = outcome.reasons()[0]
        assert isinstance(error, ConversionError)
        assert error.tags["ConversionType"] == "tuple[Error]"
        assert error.tags["ArrayLength"] == 0

    def test_empty_list_yields_conversion_error(self):
        error = from_errors([]).errors()[0]
        assert isinstance(error, ConversionError)
        assert error.tags["ConversionType"] == "list[Error]"
        assert error.tags["ListCount"] == 0
        assert error.message.startswith("Conversion failed: ")

    def test_conversion_error_is_logged(self):
        with capture_logs() as logs:
            from_errors([])

        assert len(logs) == 1
        assert logs[0]["event"] == "outcome.conversion_error"
        assert logs[0]["log_level"] == "warning"
        assert logs[0]["conversion_type"] == "list[Error]"

    def test_logging_can_be_disabled(self, monkeypatch):
        monkeypatch.setenv("RESULTRAIL_LOG_CONVERSION_ERRORS", "false")
        with capture_logs() as logs:
            from_errors(())
        assert logs == []

    def test_factory_keeps_failing_fast_on_empty(self):
        with pytest.raises(ValueError):
            Outcome.fail([])


# ═══════════════════════════════════════════════════════════════
# 3. Dispatch
# ═══════════════════════════════════════════════════════════════


class TestToOutcome:
    def test_value(self):
        assert to_outcome(5) == ValueOutcome.ok(5)

    def test_outcome_passes_through(self):
        outcome = Outcome.ok()
        assert to_outcome(outcome) is outcome

    def test_single_error(self):
        assert to_outcome(Error("bad")).errors() == (Error("bad"),)

    def test_error_collection(self):
        outcome = to_outcome([Error("a"), Error("b")])
        assert [e.message for e in outcome.errors()] == ["a", "b"]

    def test_mixed_list_is_a_value(self):
        assert to_outcome([Error("a"), 1]).value() == [Error("a"), 1]

    def test_empty_list_is_a_value(self):
        assert to_outcome([]).value() == []

    def test_from_value_accepts_none(self):
        assert from_value(None).is_success()


class TestAsOutcomeDecorator:
    def test_wraps_return_value(self):
        @as_outcome
        def parse_port(raw: str):
            port = int(raw)
            return port if 0 < port < 65536 else Error("Port out of range")

        assert parse_port("8080").value() == 8080
        assert parse_port("70000").errors()[0].message == "Port out of range"
        assert parse_port.__name__ == "parse_port"

    @pytest.mark.asyncio
    async def test_wraps_coroutine_functions(self):
        @as_outcome
        async def load(key: str):
            return [Error(f"{key} missing")]

        outcome = await load("user")
        assert outcome.errors() == (Error("user missing"),)
