"""
Validation rules — reusable checks that report failures as Error reasons.

A rule selects one property of an entity and tests it with a predicate. A
RuleSet runs its rules in order against the same entity and returns a
ValueOutcome: the entity on success, or one ValidationError per failing rule,
each tagged with the RuleName that produced it.

    rules = (
        RuleSetBuilder()
        .rule(lambda u: u.name, "NameRequired", "Name is required", bool)
        .rule(lambda u: u.age, "AdultOnly", "Must be 18 or older", lambda age: age >= 18)
        .rule_async(lambda u: u.email, "UniqueEmail", "Email already exists", emails.is_unique)
        .build()
    )

    outcome = await rules.validate_all_async(user)

A selector or predicate that raises does not escape: the rule fails with an
ExceptionError whose message names the rule.
"""

from __future__ import annotations

from collections.abc import Awaitable, Callable, Iterable
from typing import Any, Generic, Protocol, TypeVar, runtime_checkable

import structlog

from resultrail._guards import require, require_message
from resultrail.boundary import ASYNC_CAPTURED
from resultrail.errors import ValidationError
from resultrail.outcome import ValueOutcome
from resultrail.reasons import Error, ExceptionError

log = structlog.get_logger()

T = TypeVar("T")
P = TypeVar("P")


@runtime_checkable
class ValidationRule(Protocol[T]):
    """
    A named check run synchronously against an entity.

    Returns ValueOutcome[T]: the entity when the check passes, otherwise a
    failure holding a single Error.
    """

    name: str
    error_message: str

    def validate(self, entity: T) -> ValueOutcome[T]: ...


@runtime_checkable
class AsyncValidationRule(Protocol[T]):
    """A named check whose predicate must be awaited (uniqueness lookups, remote calls)."""

    name: str
    error_message: str

    async def validate_async(self, entity: T) -> ValueOutcome[T]: ...


def _rule_failed(name: str, message: str) -> ValueOutcome[Any]:
    return ValueOutcome.fail(ValidationError(message).with_tag("RuleName", name))


def _rule_raised(name: str, exception: BaseException) -> ValueOutcome[Any]:
    error = ExceptionError(exception, f"Validation error in rule '{name}': {exception}")
    return ValueOutcome.fail(error.with_tag("RuleName", name))


class PredicateRule(Generic[T, P]):
    """Selects a property and tests it with a plain predicate."""

    __slots__ = ("name", "error_message", "_selector", "_predicate")

    def __init__(
        self,
        selector: Callable[[T], P],
        name: str,
        error_message: str,
        predicate: Callable[[P], bool],
    ) -> None:
        self._selector = require(selector, "selector")
        self.name = require_message(name, "name")
        self.error_message = require_message(error_message, "error_message")
        self._predicate = require(predicate, "predicate")

    def validate(self, entity: T) -> ValueOutcome[T]:
        try:
            passed = self._predicate(self._selector(entity))
        except Exception as exc:
            return _rule_raised(self.name, exc)
        if passed:
            return ValueOutcome.ok(entity)
        return _rule_failed(self.name, self.error_message)

    def __repr__(self) -> str:
        return f"PredicateRule({self.name!r})"


class AsyncPredicateRule(Generic[T, P]):
    """
    Selects a property and tests it with an awaitable predicate.

        AsyncPredicateRule(lambda u: u.email, "UniqueEmail", "Email already exists", emails.is_unique)

    Cancellation inside the predicate is reported like any other exception.
    """

    __slots__ = ("name", "error_message", "_selector", "_predicate")

    def __init__(
        self,
        selector: Callable[[T], P],
        name: str,
        error_message: str,
        predicate: Callable[[P], Awaitable[bool]],
    ) -> None:
        self._selector = require(selector, "selector")
        self.name = require_message(name, "name")
        self.error_message = require_message(error_message, "error_message")
        self._predicate = require(predicate, "predicate")

    async def validate_async(self, entity: T) -> ValueOutcome[T]:
        try:
            passed = await self._predicate(self._selector(entity))
        except ASYNC_CAPTURED as exc:
            return _rule_raised(self.name, exc)
        if passed:
            return ValueOutcome.ok(entity)
        return _rule_failed(self.name, self.error_message)

    def __repr__(self) -> str:
        return f"AsyncPredicateRule({self.name!r})"


class RuleSet(Generic[T]):
    """
    An ordered, immutable collection of rules.

    validate() stops at the first failing rule; validate_all() runs every rule
    and collects one error per failure, in rule order. The synchronous forms
    refuse a set that holds async-only rules instead of skipping them.
    """

    __slots__ = ("_rules",)

    def __init__(self, rules: Iterable[Any] = ()) -> None:
        self._rules = tuple(_checked_rule(rule) for rule in require(rules, "rules"))

    @property
    def rules(self) -> tuple[Any, ...]:
        return self._rules

    def __len__(self) -> int:
        return len(self._rules)

    def validate(self, entity: T) -> ValueOutcome[T]:
        for rule in self._sync_rules():
            outcome = rule.validate(entity)
            if outcome.is_failed():
                return outcome
        return ValueOutcome.ok(entity)

    def validate_all(self, entity: T) -> ValueOutcome[T]:
        return self._collected(entity, [rule.validate(entity) for rule in self._sync_rules()])

    async def validate_async(self, entity: T) -> ValueOutcome[T]:
        """First failure wins; sync and async rules run in the order they were added."""
        for rule in self._rules:
            outcome = await _run(rule, entity)
            if outcome.is_failed():
                return outcome
        return ValueOutcome.ok(entity)

    async def validate_all_async(self, entity: T) -> ValueOutcome[T]:
        return self._collected(entity, [await _run(rule, entity) for rule in self._rules])

    def _sync_rules(self) -> tuple[ValidationRule[Any], ...]:
        for rule in self._rules:
            if not isinstance(rule, ValidationRule):
                raise TypeError(
                    f"Rule '{rule.name}' is asynchronous; use validate_async or validate_all_async"
                )
        return self._rules

    def _collected(self, entity: T, outcomes: list[ValueOutcome[Any]]) -> ValueOutcome[T]:
        errors: list[Error] = [error for outcome in outcomes for error in outcome.errors()]
        log.debug("validation.completed", rules=len(self._rules), failures=len(errors))
        if errors:
            return ValueOutcome.fail(errors)
        return ValueOutcome.ok(entity)

    def __repr__(self) -> str:
        return f"RuleSet({[rule.name for rule in self._rules]!r})"


async def _run(rule: Any, entity: Any) -> ValueOutcome[Any]:
    if isinstance(rule, AsyncValidationRule):
        return await rule.validate_async(entity)
    return rule.validate(entity)


def _checked_rule(rule: Any) -> Any:
    require(rule, "rule")
    if not isinstance(rule, (ValidationRule, AsyncValidationRule)):
        raise TypeError(
            f"Expected a validation rule with validate or validate_async, got {type(rule).__name__}"
        )
    return rule


class RuleSetBuilder(Generic[T]):
    """
    Fluent construction of a RuleSet.

        rules = (
            RuleSetBuilder()
            .rule(lambda o: o.total, "PositiveTotal", "Total must be positive", lambda t: t > 0)
            .build()
        )
    """

    __slots__ = ("_rules",)

    def __init__(self) -> None:
        self._rules: list[Any] = []

    def add_rule(self, rule: Any) -> RuleSetBuilder[T]:
        self._rules.append(_checked_rule(rule))
        return self

    def rule(
        self,
        selector: Callable[[T], Any],
        name: str,
        error_message: str,
        predicate: Callable[[Any], bool],
    ) -> RuleSetBuilder[T]:
        return self.add_rule(PredicateRule(selector, name, error_message, predicate))

    def rule_async(
        self,
        selector: Callable[[T], Any],
        name: str,
        error_message: str,
        predicate: Callable[[Any], Awaitable[bool]],
    ) -> RuleSetBuilder[T]:
        return self.add_rule(AsyncPredicateRule(selector, name, error_message, predicate))

    def build(self) -> RuleSet[T]:
        return RuleSet(self._rules)
