"""
PendingOutcome — awaitable outcome pipelines.

Every async combinator returns a PendingOutcome. It wraps an outcome that is
either ready, awaitable, or produced lazily by a zero-argument callable, and
exposes the same combinators as Outcome / ValueOutcome. Continuations may be
plain functions or coroutine functions; each step awaits its continuation's
result only when it is awaitable.

    user = await (
        ValueOutcome.ok(user_id)
        .map_async(fetch_user)            # async mapper
        .ensure(lambda u: u.active, "User is inactive")
        .tap(audit_log.record)            # sync action
    )

Steps run in declaration order once the pipeline is awaited, and a failure
skips every later map / bind / ensure / tap continuation. Evaluation happens
once: the first await starts a task, concurrent awaiters (two branches built
on the same parent, say) share it, and later awaits read the cached outcome.
"""

from __future__ import annotations

import asyncio
import inspect
from collections.abc import Awaitable, Callable, Generator, Iterable
from typing import Any, Generic, TypeVar

from resultrail._guards import require
from resultrail.boundary import ASYNC_CAPTURED, capture_exception
from resultrail.config import get_settings
from resultrail.outcome import Outcome, ValueOutcome, _bound_value_outcome
from resultrail.reasons import Error, as_error

T = TypeVar("T")
R = TypeVar("R")

Step = Callable[[Outcome], Awaitable[Outcome]]


async def _settle(value: Any) -> Any:
    if inspect.isawaitable(value):
        return await value
    return value


# ──────────────────────── Steps ────────────────────────


async def _map(outcome: Outcome, mapper: Callable[..., Any]) -> Outcome:
    if outcome.is_failed():
        return outcome._propagate()
    try:
        value = await _settle(mapper(*outcome._arguments()))
    except ASYNC_CAPTURED as exc:
        return outcome._failed_with(capture_exception(exc))
    return outcome._mapped(value)


async def _bind(outcome: Outcome, binder: Callable[..., Any]) -> Outcome:
    if outcome.is_failed():
        return outcome
    try:
        result = await _settle(binder(*outcome._arguments()))
    except ASYNC_CAPTURED as exc:
        return outcome._failed_with(capture_exception(exc))
    return outcome._bound(result)


async def _tap(outcome: Outcome, action: Callable[..., Any]) -> Outcome:
    if outcome.is_success():
        await _settle(action(*outcome._arguments()))
    return outcome


async def _tap_on_failure(outcome: Outcome, action: Callable[..., Any]) -> Outcome:
    if outcome.is_failed():
        await _settle(action(outcome.errors()))
    return outcome


async def _ensure_all(outcome: Outcome, checks: list[tuple[Callable[..., Any], Error]]) -> Outcome:
    if not isinstance(outcome, ValueOutcome):
        raise TypeError("ensure requires a ValueOutcome source")
    if outcome.is_failed():
        return outcome

    errors: list[Error] = []
    for predicate, error in checks:
        try:
            passed = await _settle(predicate(outcome.value()))
        except ASYNC_CAPTURED as exc:
            errors.append(capture_exception(exc))
            continue
        if not passed:
            errors.append(error)
    return outcome._validated(errors)


async def _select_many(
    outcome: Outcome,
    binder: Callable[..., Any],
    result_selector: Callable[..., Any],
) -> Outcome:
    if outcome.is_failed():
        return outcome
    arguments = outcome._arguments()
    try:
        inner = await _settle(binder(*arguments))
    except ASYNC_CAPTURED as exc:
        return outcome._failed_with(capture_exception(exc))
    inner = _bound_value_outcome(inner)
    return outcome._bound(await _map(inner, lambda bound: result_selector(*arguments, bound)))


# ──────────────────────── PendingOutcome ────────────────────────


class PendingOutcome(Generic[T]):
    """
    Awaitable wrapper around an Outcome that is not available yet.

    Building a chain does no work; awaiting it (or calling resolve()) runs the
    source and every step, in order.
    """

    __slots__ = ("_source", "_outcome", "_task")

    def __init__(self, source: Outcome | Awaitable[Outcome] | Callable[[], Any]) -> None:
        require(source, "source")
        if not isinstance(source, Outcome) and not inspect.isawaitable(source) and not callable(source):
            raise TypeError(
                f"PendingOutcome source must be an Outcome, an awaitable or a callable, "
                f"got {type(source).__name__}"
            )
        self._source = source
        self._outcome: Outcome | None = source if isinstance(source, Outcome) else None
        self._task: asyncio.Future[Outcome] | None = None

    async def resolve(self) -> Outcome:
        """
        Run the pipeline once and return its outcome.

        Concurrent callers await the same task. The shield keeps one caller's
        cancellation from cancelling the evaluation the others wait on.
        """
        if self._outcome is None:
            if self._task is None:
                self._task = asyncio.ensure_future(self._evaluate())
            self._outcome = await asyncio.shield(self._task)
        return self._outcome

    async def _evaluate(self) -> Outcome:
        source = self._source
        result = await _settle(source() if callable(source) else source)
        if not isinstance(result, Outcome):
            raise TypeError(f"Pending source resolved to {type(result).__name__}, not an Outcome")
        return result

    def __await__(self) -> Generator[Any, None, Outcome]:
        return self.resolve().__await__()

    def _then(self, step: Step) -> PendingOutcome[Any]:
        async def run() -> Outcome:
            return await step(await self.resolve())

        return PendingOutcome(run)

    # ──────────────────────── Combinators ────────────────────────

    def map(self, mapper: Callable[..., Any]) -> PendingOutcome[Any]:
        require(mapper, "mapper")
        return self._then(lambda outcome: _map(outcome, mapper))

    def bind(self, binder: Callable[..., Any]) -> PendingOutcome[Any]:
        require(binder, "binder")
        return self._then(lambda outcome: _bind(outcome, binder))

    def tap(self, action: Callable[..., Any]) -> PendingOutcome[T]:
        """Side effect on success; exceptions raised by the action propagate on await."""
        require(action, "action")
        return self._then(lambda outcome: _tap(outcome, action))

    def tap_on_failure(self, action: Callable[[tuple[Error, ...]], Any]) -> PendingOutcome[T]:
        require(action, "action")
        return self._then(lambda outcome: _tap_on_failure(outcome, action))

    def ensure(self, predicate: Callable[[Any], Any], error: str | Error) -> PendingOutcome[T]:
        return self.ensure_all([(predicate, error)])

    def ensure_all(self, validations: Iterable[tuple[Callable[[Any], Any], str | Error]]) -> PendingOutcome[T]:
        """Batch validation; every predicate runs, failures are collected in order."""
        checks = [
            (require(predicate, "predicate"), as_error(error))
            for predicate, error in require(validations, "validations")
        ]
        if not checks:
            raise ValueError("ensure_all requires at least one validation")
        return self._then(lambda outcome: _ensure_all(outcome, checks))

    def ensure_not_null(self, message: str | None = None) -> PendingOutcome[T]:
        return self.ensure(lambda value: value is not None, message or get_settings().not_null_message)

    def where(self, predicate: Callable[[Any], Any], message: str | None = None) -> PendingOutcome[T]:
        return self.ensure(predicate, message or get_settings().predicate_message)

    def select(self, mapper: Callable[[Any], Any]) -> PendingOutcome[Any]:
        return self.map(mapper)

    def select_many(
        self,
        binder: Callable[[Any], Any],
        result_selector: Callable[[Any, Any], Any] | None = None,
    ) -> PendingOutcome[Any]:
        require(binder, "binder")
        if result_selector is None:
            return self.bind(binder)
        return self._then(lambda outcome: _select_many(outcome, binder, result_selector))

    # ──────────────────────── Terminal operations ────────────────────────

    async def match(
        self,
        on_success: Callable[..., Any],
        on_failure: Callable[[tuple[Error, ...]], Any],
    ) -> Any:
        """Await the pipeline and fold it with one of two (sync or async) handlers."""
        require(on_success, "on_success")
        require(on_failure, "on_failure")
        outcome = await self.resolve()
        if outcome.is_success():
            return await _settle(on_success(*outcome._arguments()))
        return await _settle(on_failure(outcome.errors()))

    async def match_action(
        self,
        on_success: Callable[..., Any],
        on_failure: Callable[[tuple[Error, ...]], Any],
    ) -> None:
        await self.match(on_success, on_failure)

    def __repr__(self) -> str:
        if self._outcome is None:
            return "PendingOutcome(<unresolved>)"
        return f"PendingOutcome({self._outcome!r})"
