"""
Tests for the synchronous combinators.

Tests cover:
  - map / bind (success propagation, short-circuit, exception wrapping)
  - tap / tap_on_failure (same instance, exceptions propagate)
  - ensure / ensure_all / ensure_not_null (batch aggregation)
  - where / select / select_many (query sugar)
  - match / match_action (mandatory branches)
  - None arguments are programmer errors
"""

from __future__ import annotations

import pytest

from resultrail import Error, ExceptionError, Outcome, Success, ValueOutcome

from support import raise_error


# ═══════════════════════════════════════════════════════════════
# 1. map
# ═══════════════════════════════════════════════════════════════


class TestMap:
    def test_map_transforms_value(self):
        assert ValueOutcome.ok(5).map(lambda x: x * 2).value() == 10

    def test_map_carries_success_reasons(self):
        outcome = ValueOutcome.ok(5, "Loaded").map(str)
        assert outcome.value() == "5"
        assert outcome.successes() == (Success("Loaded"),)

    def test_map_identity_law(self):
        for source in (ValueOutcome.ok(3, "s1"), ValueOutcome.fail(["e1", "e2"])):
            mapped = source.map(lambda x: x)
            assert mapped.is_success() == source.is_success()
            assert mapped.reasons() == source.reasons()
            assert mapped.value_or_default() == source.value_or_default()

    def test_map_identity_law_keeps_errors_from_before_recovery(self):
        """
        GIVEN a successful outcome that still lists an earlier error
        WHEN it is mapped with the identity function
        THEN the result equals the source, error included
        """
        source = ValueOutcome.ok(5).with_error("e1").with_success("s1")
        assert source.map(lambda x: x) == source

    def test_map_identity_law_on_failure_with_annotations(self):
        source = ValueOutcome.ok(5).with_error("e1")
        assert source.map(lambda x: x) == source

    def test_map_on_failure_keeps_trailing_successes(self):
        source = ValueOutcome.fail("e1").with_success("s1").with_error("e2")
        outcome = source.map(lambda x: x * 2)
        assert outcome.reasons() == (Error("e1"), Success("s1"), Error("e2"))

    def test_map_after_recovery_keeps_every_reason(self):
        outcome = ValueOutcome.fail("e1").with_success("s1").map(lambda _: "mapped")
        assert outcome.value() == "mapped"
        assert outcome.reasons() == (Error("e1"), Success("s1"))

    def test_map_on_failure_is_not_invoked(self):
        calls = []
        outcome = ValueOutcome.fail("bad").map(calls.append)
        assert outcome.is_failed()
        assert outcome.errors() == (Error("bad"),)
        assert calls == []

    def test_map_wraps_exception(self):
        """
        GIVEN a successful outcome
        WHEN the mapper raises
        THEN the result fails with exactly one ExceptionError carrying the message
        """
        outcome = ValueOutcome.ok(5).map(lambda x: raise_error(RuntimeError("boom")))

        assert outcome.is_failed()
        assert len(outcome.reasons()) == 1
        error = outcome.reasons()[0]
        assert isinstance(error, ExceptionError)
        assert error.message == "boom"

    def test_untyped_map_takes_no_argument(self):
        assert Outcome.ok().map(lambda: "built").value() == "built"

    def test_map_rejects_none(self):
        with pytest.raises(TypeError, match="mapper must not be None"):
            ValueOutcome.ok(1).map(None)  # type: ignore[arg-type]


# ═══════════════════════════════════════════════════════════════
# 2. bind
# ═══════════════════════════════════════════════════════════════


class TestBind:
    def test_bind_merges_success_reasons_in_order(self):
        outcome = (
            ValueOutcome.ok(1, "s1")
            .bind(lambda x: ValueOutcome.ok(x + 1, "s2"))
            .bind(lambda x: ValueOutcome.ok(x + 1, "s3"))
        )
        assert outcome.value() == 3
        assert [s.message for s in outcome.successes()] == ["s1", "s2", "s3"]

    def test_bind_short_circuits_after_first_failure(self):
        calls = {"f1": 0, "f2": 0, "f3": 0}

        def step(name, result):
            def run(value):
                calls[name] += 1
                return result

            return run

        outcome = (
            ValueOutcome.ok(1)
            .bind(step("f1", ValueOutcome.fail("first failed")))
            .bind(step("f2", ValueOutcome.ok(2)))
            .bind(step("f3", ValueOutcome.ok(3)))
        )

        assert outcome.errors() == (Error("first failed"),)
        assert calls == {"f1": 1, "f2": 0, "f3": 0}

    def test_bind_returns_failed_link_unchanged(self):
        failed = ValueOutcome.fail("nope")
        assert ValueOutcome.ok(1, "s1").bind(lambda _: failed) is failed

    def test_failed_untyped_source_stays_untyped(self):
        source = Outcome.fail("x")
        bound = source.bind(lambda: Outcome.ok())
        assert type(bound) is Outcome
        assert bound is source

    def test_bind_keeps_errors_from_before_recovery(self):
        source = ValueOutcome.fail("e1").with_success("s1")
        outcome = source.bind(lambda x: ValueOutcome.ok(x, "s2"))
        assert outcome.reasons() == (Error("e1"), Success("s1"), Success("s2"))

    def test_bind_wraps_exception(self):
        outcome = ValueOutcome.ok(1).bind(lambda _: raise_error(KeyError("id")))
        assert isinstance(outcome.errors()[0], ExceptionError)

    def test_bind_non_outcome_result_is_a_programmer_error(self):
        with pytest.raises(TypeError, match="must return an Outcome"):
            ValueOutcome.ok(1).bind(lambda x: x)

    def test_untyped_bind(self):
        outcome = Outcome.ok("s1").bind(lambda: Outcome.ok("s2"))
        assert [s.message for s in outcome.successes()] == ["s1", "s2"]


# ═══════════════════════════════════════════════════════════════
# 3. tap
# ═══════════════════════════════════════════════════════════════


class TestTap:
    def test_tap_returns_same_instance(self):
        seen = []
        outcome = ValueOutcome.ok(5)
        assert outcome.tap(seen.append) is outcome
        assert seen == [5]

    def test_tap_not_called_on_failure(self):
        seen = []
        ValueOutcome.fail("x").tap(seen.append)
        assert seen == []

    def test_tap_exceptions_propagate(self):
        with pytest.raises(RuntimeError, match="logger down"):
            ValueOutcome.ok(1).tap(lambda _: raise_error(RuntimeError("logger down")))

    def test_tap_on_failure_receives_errors(self):
        seen = []
        outcome = ValueOutcome.fail(["a", "b"])
        assert outcome.tap_on_failure(seen.append) is outcome
        assert [e.message for e in seen[0]] == ["a", "b"]

    def test_tap_on_failure_skipped_on_success(self):
        seen = []
        Outcome.ok().tap_on_failure(seen.append)
        assert seen == []


# ═══════════════════════════════════════════════════════════════
# 4. ensure
# ═══════════════════════════════════════════════════════════════


VALIDATIONS = [
    (lambda x: x > 0, "must be positive"),
    (lambda x: x < 100, "must be below 100"),
    (lambda x: x % 2 == 0, "must be even"),
]


class TestEnsure:
    def test_ensure_passes_returns_source(self):
        outcome = ValueOutcome.ok(4)
        assert outcome.ensure(lambda x: x > 0, "must be positive") is outcome

    def test_ensure_fails_with_error(self):
        error = Error("must be positive").with_tag("Field", "amount")
        outcome = ValueOutcome.ok(-1).ensure(lambda x: x > 0, error)
        assert outcome.errors() == (error,)

    def test_ensure_predicate_exception_is_wrapped(self):
        outcome = ValueOutcome.ok(None).ensure(lambda x: x > 0, "must be positive")
        assert isinstance(outcome.errors()[0], ExceptionError)

    def test_ensure_on_failure_does_not_evaluate(self):
        calls = []
        source = ValueOutcome.fail("earlier")
        assert source.ensure(lambda x: calls.append(x), "unused") is source
        assert calls == []

    def test_batch_reports_one_error_per_failing_predicate(self):
        outcome = ValueOutcome.ok(150).ensure_all(VALIDATIONS)
        assert [e.message for e in outcome.errors()] == ["must be below 100"]

    def test_batch_does_not_short_circuit(self):
        outcome = ValueOutcome.ok(-5).ensure_all(VALIDATIONS)
        assert [e.message for e in outcome.errors()] == ["must be positive", "must be even"]

    def test_batch_all_pass_returns_source(self):
        source = ValueOutcome.ok(42)
        assert source.ensure_all(VALIDATIONS) is source

    def test_batch_rejects_empty(self):
        with pytest.raises(ValueError):
            ValueOutcome.ok(1).ensure_all([])

    def test_batch_rejects_none_predicate(self):
        with pytest.raises(TypeError):
            ValueOutcome.ok(1).ensure_all([(None, "x")])  # type: ignore[list-item]

    def test_ensure_not_null_default_message(self):
        outcome = ValueOutcome.ok(None).ensure_not_null()
        assert outcome.errors() == (Error("Value can not be null"),)

    def test_ensure_not_null_custom_message(self):
        outcome = ValueOutcome.ok(None).ensure_not_null("User missing")
        assert outcome.errors()[0].message == "User missing"

    def test_ensure_not_null_default_from_settings(self, monkeypatch):
        monkeypatch.setenv("RESULTRAIL_NOT_NULL_MESSAGE", "Nothing here")
        assert ValueOutcome.ok(None).ensure_not_null().errors()[0].message == "Nothing here"


# ═══════════════════════════════════════════════════════════════
# 5. Query Sugar
# ═══════════════════════════════════════════════════════════════


class TestQuerySyntax:
    def test_where_default_message(self):
        outcome = ValueOutcome.ok(3).where(lambda x: x > 5)
        assert outcome.errors() == (Error("Predicate not satisfied"),)

    def test_select_is_map(self):
        assert ValueOutcome.ok(3).select(lambda x: x + 1).value() == 4

    def test_select_many_two_argument_form(self):
        assert ValueOutcome.ok(3).select_many(lambda x: ValueOutcome.ok(x * 10)).value() == 30

    def test_select_many_with_result_selector(self):
        outcome = ValueOutcome.ok(2).select_many(
            lambda a: ValueOutcome.ok(a * 10),
            lambda a, b: a + b,
        )
        assert outcome.value() == 22

    def test_select_many_inner_failure(self):
        outcome = ValueOutcome.ok(2).select_many(
            lambda a: ValueOutcome.fail("inner"),
            lambda a, b: a + b,
        )
        assert outcome.errors() == (Error("inner"),)

    def test_select_many_untyped_binder_is_a_programmer_error(self):
        with pytest.raises(TypeError, match="must return a ValueOutcome"):
            ValueOutcome.ok(1).select_many(lambda _: Outcome.ok(), lambda a, b: a)

    def test_select_many_raising_binder_is_wrapped(self):
        outcome = ValueOutcome.ok(1).select_many(
            lambda _: raise_error(LookupError("missing")),
            lambda a, b: a + b,
        )
        assert isinstance(outcome.errors()[0], ExceptionError)
        assert outcome.errors()[0].message == "missing"

    def test_select_many_selector_exception_is_wrapped(self):
        outcome = ValueOutcome.ok(2).select_many(
            lambda a: ValueOutcome.ok(0),
            lambda a, b: a / b,
        )
        assert isinstance(outcome.errors()[0], ExceptionError)


# ═══════════════════════════════════════════════════════════════
# 6. match
# ═══════════════════════════════════════════════════════════════


class TestMatch:
    def test_match_success_branch(self):
        result = ValueOutcome.ok(5).match(lambda v: f"got {v}", lambda errors: "failed")
        assert result == "got 5"

    def test_match_failure_branch_receives_errors(self):
        result = ValueOutcome.fail(["a", "b"]).match(
            lambda v: "ok",
            lambda errors: ",".join(e.message for e in errors),
        )
        assert result == "a,b"

    def test_untyped_match(self):
        assert Outcome.ok().match(lambda: "yes", lambda errors: "no") == "yes"

    @pytest.mark.parametrize("branches", [(None, lambda e: e), (lambda v: v, None)])
    def test_missing_branch_raises_before_running(self, branches):
        calls = []
        on_success, on_failure = branches
        wrapped = [
            None if branch is None else (lambda *args, b=branch: calls.append(b))
            for branch in (on_success, on_failure)
        ]
        with pytest.raises(TypeError):
            ValueOutcome.ok(1).match(*wrapped)
        assert calls == []

    def test_match_action_runs_one_branch(self):
        seen = []
        assert ValueOutcome.fail("x").match_action(seen.append, lambda errors: seen.append("failure")) is None
        assert seen == ["failure"]
