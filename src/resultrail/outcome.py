"""
Outcome — the core of the library.

An Outcome is an immutable, ordered list of reasons (Success / Error) plus an
explicit success flag. ValueOutcome[T] adds a value that can only be read on
success. Every combinator returns a new outcome; failures propagate untouched,
so a pipeline is written for the happy path only.

    ┌───────────┐    bind     ┌───────────┐    bind     ┌──────────┐
    │ validate  │──Success────│  enrich   │──Success────│ persist  │──→ ValueOutcome[T]
    └─────┬─────┘             └─────┬─────┘             └─────┬────┘
          │ Error                   │ Error                   │ Error
          └─────────────────────────┴─────────────────────────┴──→ (all reasons carried)

State flag: the last appended reason decides it. Appending an Error makes the
outcome failed; appending a Success makes it successful again, even if earlier
Error reasons are still in the list:

    >>> Outcome.fail("e1").with_success("s1").is_success()
    True

Exceptions raised by user functions inside map / bind / ensure / select become
an ExceptionError. tap() is the exception: its side effects propagate.
"""

from __future__ import annotations

import asyncio
from collections.abc import Awaitable, Callable, Iterable, Sequence
from typing import TYPE_CHECKING, Any, Generic, Self, TypeVar

from resultrail._guards import require
from resultrail.boundary import ASYNC_CAPTURED, ErrorFactory, capture_exception
from resultrail.config import get_settings
from resultrail.reasons import Error, Reason, Success, as_error, as_success, is_failure_reason

if TYPE_CHECKING:
    from resultrail.pending import PendingOutcome

T = TypeVar("T")
U = TypeVar("U")
V = TypeVar("V")
R = TypeVar("R")

Validation = tuple[Callable[[T], Any], "str | Error"]


def _pending(source: Any) -> PendingOutcome[Any]:
    from resultrail.pending import PendingOutcome  # pending builds on this module

    return PendingOutcome(source)


def _collect(items: Any, coerce: Callable[[Any], Reason], name: str) -> tuple[Reason, ...]:
    """Coerce one item or an iterable of items; None and empty input are rejected."""
    require(items, name)
    if isinstance(items, (str, Reason)):
        items = (items,)
    collected = tuple(coerce(item) for item in items)
    if not collected:
        raise ValueError(f"{name} must not be empty")
    return collected


def _as_reason(item: Reason) -> Reason:
    is_failure_reason(item)
    return item


def _holds(condition: bool | Callable[[], bool]) -> bool:
    return bool(condition()) if callable(condition) else bool(condition)


def _bound_value_outcome(inner: Any) -> ValueOutcome[Any]:
    """select_many needs a value to project; an untyped binder result is a programmer error."""
    if not isinstance(inner, ValueOutcome):
        raise TypeError(f"binder must return a ValueOutcome, got {type(inner).__name__}")
    return inner


class Outcome:
    """
    Untyped outcome: reasons plus a success flag, no value.

    Usage:
        >>> Outcome.ok().with_success("Cache warmed").is_success()
        True

        >>> outcome = Outcome.fail(["Name is required", "Age must be positive"])
        >>> [error.message for error in outcome.errors()]
        ['Name is required', 'Age must be positive']
    """

    __slots__ = ("_reasons", "_is_success")

    def __init__(self, reasons: Iterable[Reason] = (), is_success: bool | None = None) -> None:
        reasons = tuple(require(reasons, "reasons"))
        state = True
        for reason in reasons:
            state = not is_failure_reason(reason)
        for reason in reasons:
            reason._seal()
        self._reasons = reasons
        self._is_success = state if is_success is None else bool(is_success)

    # ──────────────────────── Introspection ────────────────────────

    def is_success(self) -> bool:
        return self._is_success

    def is_failed(self) -> bool:
        return not self._is_success

    def reasons(self) -> tuple[Reason, ...]:
        """Every reason, in the order it was appended."""
        return self._reasons

    def errors(self) -> tuple[Error, ...]:
        return tuple(reason for reason in self._reasons if isinstance(reason, Error))

    def successes(self) -> tuple[Success, ...]:
        return tuple(reason for reason in self._reasons if isinstance(reason, Success))

    # ──────────────────────── Static Factories ────────────────────────

    @staticmethod
    def ok(*successes: str | Success) -> Outcome:
        """Successful outcome, optionally annotated: Outcome.ok("Saved")."""
        return Outcome(tuple(as_success(success) for success in successes), True)

    @staticmethod
    def fail(errors: str | Error | Iterable[str | Error]) -> Outcome:
        """
        Failed outcome from a message, an Error, or a non-empty collection of them.

        None raises TypeError and an empty collection raises ValueError: an
        explicit failure without a reason is always a caller mistake.
        """
        return Outcome(_collect(errors, as_error, "errors"), False)

    @staticmethod
    def ok_if(condition: bool | Callable[[], bool], error: str | Error) -> Outcome:
        """ok() when the condition holds, fail(error) otherwise."""
        error = as_error(error)
        try:
            passed = _holds(condition)
        except Exception as exc:
            return Outcome.fail(capture_exception(exc))
        return Outcome.ok() if passed else Outcome.fail(error)

    @staticmethod
    def fail_if(condition: bool | Callable[[], bool], error: str | Error) -> Outcome:
        """fail(error) when the condition holds, ok() otherwise."""
        error = as_error(error)
        try:
            failed = _holds(condition)
        except Exception as exc:
            return Outcome.fail(capture_exception(exc))
        return Outcome.fail(error) if failed else Outcome.ok()

    @staticmethod
    def try_(operation: Callable[[], Any], error_factory: ErrorFactory | None = None) -> Outcome:
        """
        Run code that may raise and report it as an Outcome.

        Before:
            try:
                cache.flush()
            except Exception as e:
                ...

        After:
            outcome = Outcome.try_(cache.flush)
        """
        require(operation, "operation")
        try:
            operation()
        except Exception as exc:
            return Outcome.fail(capture_exception(exc, error_factory))
        return Outcome.ok()

    @staticmethod
    def try_async(
        operation: Callable[[], Awaitable[Any]],
        error_factory: ErrorFactory | None = None,
    ) -> PendingOutcome[None]:
        """Async try_: awaits operation() and wraps any exception it raises, cancellation included."""
        require(operation, "operation")

        async def attempt() -> Outcome:
            try:
                await operation()
            except ASYNC_CAPTURED as exc:
                return Outcome.fail(capture_exception(exc, error_factory))
            return Outcome.ok()

        return _pending(attempt)

    @staticmethod
    def merge(*outcomes: Outcome) -> Outcome:
        """Concatenate the reasons of every outcome; the last reason decides the state."""
        return Outcome(
            reason for outcome in outcomes for reason in require(outcome, "outcome").reasons()
        )

    @staticmethod
    def combine(*outcomes: Outcome) -> Outcome:
        """
        Succeed only when every outcome succeeded.

        Failure carries the errors of all failed outcomes; success carries the
        Success reasons of all of them.
        """
        failures = [outcome for outcome in outcomes if require(outcome, "outcome").is_failed()]
        if failures:
            return Outcome.fail([error for outcome in failures for error in outcome.errors()])
        return Outcome([success for outcome in outcomes for success in outcome.successes()], True)

    @classmethod
    def combine_async(cls, *sources: Awaitable[Outcome] | Outcome) -> PendingOutcome[Any]:
        """Await all sources concurrently with asyncio.gather, then combine()."""

        async def gather() -> Outcome:
            outcomes = await asyncio.gather(*(_pending(source).resolve() for source in sources))
            return cls.combine(*outcomes)

        return _pending(gather)

    # ──────────────────────── State transitions ────────────────────────

    def with_reason(self, reason: Reason) -> Self:
        """Append one reason. Error → failed, Success → successful."""
        reason = _as_reason(reason)
        return self._derive(self._reasons + (reason,), not is_failure_reason(reason))

    def with_reasons(self, reasons: Iterable[Reason]) -> Self:
        return self._append(_collect(reasons, _as_reason, "reasons"))

    def with_success(self, success: str | Success) -> Self:
        return self.with_reason(as_success(success))

    def with_error(self, error: str | Error) -> Self:
        return self.with_reason(as_error(error))

    def with_successes(self, successes: Iterable[str | Success]) -> Self:
        return self._append(_collect(successes, as_success, "successes"))

    def with_errors(self, errors: Iterable[str | Error]) -> Self:
        return self._append(_collect(errors, as_error, "errors"))

    def _append(self, added: tuple[Reason, ...]) -> Self:
        return self._derive(self._reasons + added, not is_failure_reason(added[-1]))

    def _derive(self, reasons: tuple[Reason, ...], is_success: bool) -> Self:
        return type(self)(reasons, is_success)

    # ──────────────────────── Combinator building blocks ────────────────────────
    # Shared with resultrail.pending, which runs the same steps with awaits.

    def _arguments(self) -> tuple[Any, ...]:
        return ()

    def _propagate(self) -> ValueOutcome[Any]:
        return ValueOutcome(None, self._reasons, False)

    def _mapped(self, value: U) -> ValueOutcome[U]:
        # every prior reason is kept: a success may still hold errors from before a recency flip
        return ValueOutcome(value, self._reasons, True)

    def _failed_with(self, error: Error) -> ValueOutcome[Any]:
        return ValueOutcome(None, (error,), False)

    def _bound(self, result: Outcome) -> Outcome:
        if not isinstance(result, Outcome):
            raise TypeError(f"binder must return an Outcome, got {type(result).__name__}")
        if result.is_failed():
            return result
        return result._derive(self._reasons + result.reasons(), result.is_success())

    # ──────────────────────── Core Transformations ────────────────────────

    def map(self, mapper: Callable[..., U]) -> ValueOutcome[U]:
        """
        Transform the success value. Short-circuits on failure.

            ValueOutcome.ok(5).map(lambda x: x * 2)   # → ok(10)

        A raising mapper yields a failed outcome holding one ExceptionError.
        """
        require(mapper, "mapper")
        if self.is_failed():
            return self._propagate()
        try:
            value = mapper(*self._arguments())
        except Exception as exc:
            return self._failed_with(capture_exception(exc))
        return self._mapped(value)

    def bind(self, binder: Callable[..., Outcome]) -> Outcome:
        """
        Chain an Outcome-returning step. Short-circuits on failure.

        Reasons of this outcome are placed before those of the step, so a chain
        of binds accumulates every annotation up to the first failure. A failed
        source is returned as-is.
        """
        require(binder, "binder")
        if self.is_failed():
            return self
        try:
            result = binder(*self._arguments())
        except Exception as exc:
            return self._failed_with(capture_exception(exc))
        return self._bound(result)

    # ──────────────────────── Side Effects ────────────────────────

    def tap(self, action: Callable[..., Any]) -> Self:
        """
        Run a side effect on success and return this same outcome.

        Exceptions raised by the action are not caught: a broken logger or
        metrics call must not be silently swallowed.
        """
        require(action, "action")
        if self.is_success():
            action(*self._arguments())
        return self

    def tap_on_failure(self, action: Callable[[tuple[Error, ...]], Any]) -> Self:
        """Run a side effect with the errors on failure. Exceptions propagate."""
        require(action, "action")
        if self.is_failed():
            action(self.errors())
        return self

    # ──────────────────────── Match ────────────────────────

    def match(
        self,
        on_success: Callable[..., R],
        on_failure: Callable[[tuple[Error, ...]], R],
    ) -> R:
        """
        Fold the outcome into a single value. Both branches are required.

            message = outcome.match(
                on_success=lambda user: f"Hello {user.name}",
                on_failure=lambda errors: "; ".join(e.message for e in errors),
            )
        """
        require(on_success, "on_success")
        require(on_failure, "on_failure")
        if self.is_success():
            return on_success(*self._arguments())
        return on_failure(self.errors())

    def match_action(
        self,
        on_success: Callable[..., Any],
        on_failure: Callable[[tuple[Error, ...]], Any],
    ) -> None:
        """Run exactly one of two actions. Both branches are required."""
        self.match(on_success, on_failure)

    # ──────────────────────── Async Support ────────────────────────

    def to_pending(self) -> PendingOutcome[Any]:
        """Lift this outcome into a PendingOutcome pipeline."""
        return _pending(self)

    def map_async(self, mapper: Callable[..., Awaitable[U] | U]) -> PendingOutcome[U]:
        """
        map() with an async mapper.

            user = await ValueOutcome.ok(user_id).map_async(fetch_user)
        """
        return self.to_pending().map(mapper)

    def bind_async(self, binder: Callable[..., Awaitable[Outcome] | Outcome]) -> PendingOutcome[Any]:
        return self.to_pending().bind(binder)

    def tap_async(self, action: Callable[..., Any]) -> PendingOutcome[Any]:
        return self.to_pending().tap(action)

    def tap_on_failure_async(self, action: Callable[[tuple[Error, ...]], Any]) -> PendingOutcome[Any]:
        return self.to_pending().tap_on_failure(action)

    def match_async(
        self,
        on_success: Callable[..., Awaitable[R] | R],
        on_failure: Callable[[tuple[Error, ...]], Awaitable[R] | R],
    ) -> Awaitable[R]:
        return self.to_pending().match(on_success, on_failure)

    # ──────────────────────── Conversions ────────────────────────

    def to_value_outcome(self, value: T) -> ValueOutcome[T]:
        """Attach a value; reasons and state are carried over unchanged."""
        if self.is_failed():
            return self._propagate()
        return ValueOutcome(value, self._reasons, True)

    # ──────────────────────── Dunder methods ────────────────────────

    def __bool__(self) -> bool:
        """Allow truthiness check: `if outcome: ...` holds only on success."""
        return self._is_success

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, Outcome):
            return NotImplemented
        return (
            type(self) is type(other)
            and self._is_success == other._is_success
            and self._reasons == other._reasons
        )

    __hash__ = None  # type: ignore[assignment]

    def __repr__(self) -> str:
        state = "success" if self._is_success else "failed"
        return f"{type(self).__name__}({state}, reasons={list(self._reasons)!r})"


class ValueOutcome(Outcome, Generic[T]):
    """
    Value-carrying outcome.

    The value is readable only on success; value() on a failed outcome raises
    ValueError listing every error message. value_or_default() never raises.

    Usage:
        >>> ValueOutcome.ok(42).map(lambda x: x * 2).value()
        84

        >>> outcome = ValueOutcome.fail("bad input")
        >>> outcome.map(lambda x: x * 2).is_failed()
        True
    """

    __slots__ = ("_value",)

    def __init__(
        self,
        value: T | None = None,
        reasons: Iterable[Reason] = (),
        is_success: bool | None = None,
    ) -> None:
        super().__init__(reasons, is_success)
        self._value = value

    # ──────────────────────── Value access ────────────────────────

    def value(self) -> T:
        """
        Extract the success value. Raises ValueError on a failed outcome.

        Prefer match() or value_or_default() for safe access.
        """
        if self.is_failed():
            messages = ", ".join(error.message for error in self.errors())
            raise ValueError(
                f"Cannot access the value of a failed outcome. Errors: [{messages}]"
            )
        return self._value  # type: ignore[return-value]

    def value_or_default(self, default: T | None = None) -> T | None:
        return self._value if self.is_success() else default

    def value_or_else(self, handler: Callable[[tuple[Error, ...]], T]) -> T:
        """Extract the value or compute a fallback from the errors."""
        require(handler, "handler")
        return self._value if self.is_success() else handler(self.errors())  # type: ignore[return-value]

    # ──────────────────────── Static Factories ────────────────────────

    @staticmethod
    def ok(value: T, *successes: str | Success) -> ValueOutcome[T]:  # type: ignore[override]
        """Successful outcome wrapping value, optionally annotated."""
        return ValueOutcome(value, tuple(as_success(success) for success in successes), True)

    @staticmethod
    def fail(errors: str | Error | Iterable[str | Error]) -> ValueOutcome[Any]:
        """Same validation as Outcome.fail: no None, no empty collections."""
        return ValueOutcome(None, _collect(errors, as_error, "errors"), False)

    @staticmethod
    def ok_if(  # type: ignore[override]
        condition: bool | Callable[[], bool],
        value: T,
        error: str | Error,
    ) -> ValueOutcome[T]:
        error = as_error(error)
        try:
            passed = _holds(condition)
        except Exception as exc:
            return ValueOutcome.fail(capture_exception(exc))
        return ValueOutcome.ok(value) if passed else ValueOutcome.fail(error)

    @staticmethod
    def try_(  # type: ignore[override]
        operation: Callable[[], T],
        error_factory: ErrorFactory | None = None,
    ) -> ValueOutcome[T]:
        """
        Create an outcome from a computation that may raise.

            outcome = ValueOutcome.try_(lambda: json.loads(payload))
        """
        require(operation, "operation")
        try:
            return ValueOutcome.ok(operation())
        except Exception as exc:
            return ValueOutcome.fail(capture_exception(exc, error_factory))

    @staticmethod
    def try_async(  # type: ignore[override]
        operation: Callable[[], Awaitable[T]],
        error_factory: ErrorFactory | None = None,
    ) -> PendingOutcome[T]:
        require(operation, "operation")

        async def attempt() -> ValueOutcome[T]:
            try:
                return ValueOutcome.ok(await operation())
            except ASYNC_CAPTURED as exc:
                return ValueOutcome.fail(capture_exception(exc, error_factory))

        return _pending(attempt)

    @staticmethod
    def combine(*outcomes: ValueOutcome[T]) -> ValueOutcome[list[T]]:  # type: ignore[override]
        """
        Collect values into a list. All must succeed.

            ValueOutcome.combine(parse(a), parse(b))   # → ok([a, b]) or all errors
        """
        failures = [outcome for outcome in outcomes if require(outcome, "outcome").is_failed()]
        if failures:
            return ValueOutcome.fail([error for outcome in failures for error in outcome.errors()])
        return ValueOutcome(
            [outcome.value() for outcome in outcomes],
            [success for outcome in outcomes for success in outcome.successes()],
            True,
        )

    # ──────────────────────── Building blocks ────────────────────────

    def _derive(self, reasons: tuple[Reason, ...], is_success: bool) -> Self:
        return type(self)(self._value, reasons, is_success)

    def _arguments(self) -> tuple[Any, ...]:
        return (self._value,)

    def _propagate(self) -> ValueOutcome[Any]:
        return self

    def _validated(self, errors: Sequence[Error]) -> ValueOutcome[T]:
        return ValueOutcome.fail(errors) if errors else self

    # ──────────────────────── Validation ────────────────────────

    def ensure(self, predicate: Callable[[T], bool], error: str | Error) -> ValueOutcome[T]:
        """
        Validate the success value. Short-circuits on an existing failure.

            ValueOutcome.ok(order).ensure(lambda o: o.total > 0, "Order total must be positive")
        """
        return self.ensure_all([(predicate, error)])

    def ensure_all(self, validations: Iterable[Validation[T]]) -> ValueOutcome[T]:
        """
        Run every (predicate, error) pair against the value, without short-circuit.

        The result carries one Error per failing predicate, in order, or is this
        outcome when all pass. A raising predicate contributes an ExceptionError.
        """
        checks = [
            (require(predicate, "predicate"), as_error(error))
            for predicate, error in require(validations, "validations")
        ]
        if not checks:
            raise ValueError("ensure_all requires at least one validation")
        if self.is_failed():
            return self

        errors: list[Error] = []
        for predicate, error in checks:
            try:
                passed = predicate(self._value)
            except Exception as exc:
                errors.append(capture_exception(exc))
                continue
            if not passed:
                errors.append(error)
        return self._validated(errors)

    def ensure_not_null(self, message: str | None = None) -> ValueOutcome[T]:
        """Fail when the value is None (default message from settings)."""
        return self.ensure(lambda value: value is not None, message or get_settings().not_null_message)

    # ──────────────────────── Query syntax ────────────────────────

    def where(self, predicate: Callable[[T], bool], message: str | None = None) -> ValueOutcome[T]:
        return self.ensure(predicate, message or get_settings().predicate_message)

    def select(self, mapper: Callable[[T], U]) -> ValueOutcome[U]:
        return self.map(mapper)

    def select_many(
        self,
        binder: Callable[[T], Outcome],
        result_selector: Callable[[T, U], V] | None = None,
    ) -> Outcome:
        """
        bind(), optionally projecting the source and bound values together.

            ValueOutcome.ok(2).select_many(
                lambda a: ValueOutcome.ok(a * 10),
                lambda a, b: a + b,
            )   # → ok(22)
        """
        require(binder, "binder")
        if result_selector is None:
            return self.bind(binder)
        if self.is_failed():
            return self
        try:
            inner = binder(self._value)
        except Exception as exc:
            return self._failed_with(capture_exception(exc))
        projected = _bound_value_outcome(inner).map(lambda bound: result_selector(self._value, bound))
        return self._bound(projected)

    # ──────────────────────── Async Support ────────────────────────

    def ensure_async(self, predicate: Callable[[T], Any], error: str | Error) -> PendingOutcome[T]:
        return self.to_pending().ensure(predicate, error)

    def ensure_all_async(self, validations: Iterable[Validation[T]]) -> PendingOutcome[T]:
        return self.to_pending().ensure_all(validations)

    def where_async(self, predicate: Callable[[T], Any], message: str | None = None) -> PendingOutcome[T]:
        return self.to_pending().where(predicate, message)

    def select_async(self, mapper: Callable[[T], Any]) -> PendingOutcome[Any]:
        return self.to_pending().select(mapper)

    def select_many_async(
        self,
        binder: Callable[[T], Any],
        result_selector: Callable[[T, Any], Any] | None = None,
    ) -> PendingOutcome[Any]:
        return self.to_pending().select_many(binder, result_selector)

    # ──────────────────────── Conversions ────────────────────────

    def without_value(self) -> Outcome:
        """Drop the value, keeping reasons and state."""
        return Outcome(self.reasons(), self.is_success())

    # ──────────────────────── Dunder methods ────────────────────────

    def __eq__(self, other: object) -> bool:
        """The value takes part only on success; a failed outcome has no readable value."""
        if not isinstance(other, ValueOutcome):
            return NotImplemented
        return super().__eq__(other) and (self.is_failed() or self._value == other._value)

    __hash__ = None  # type: ignore[assignment]

    def __repr__(self) -> str:
        if self.is_success():
            return f"ValueOutcome(success, value={self._value!r}, reasons={list(self.reasons())!r})"
        return f"ValueOutcome(failed, reasons={list(self.reasons())!r})"
