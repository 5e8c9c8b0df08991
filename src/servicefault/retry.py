import asyncio
import threading
import time
from collections.abc import Awaitable, Callable
from typing import Any, NoReturn, TypeVar

from .classify import ErrorClassifier
from .config import RetrySettings
from .errors import (
    RetriesExhaustedError,
    RetryHelperError,
    RetryInterruptedError,
    ServiceException,
    StopReason,
)
from .hooks import HookEmitter, LogHook, MetricHook
from .propagate import translate_and_propagate
from .strategies import BackoffContext, StrategyFn, exponential_jitter

T = TypeVar("T")

ShouldRetryFn = Callable[[BaseException], bool]


def retryable_service_exception(exc: BaseException) -> bool:
    return isinstance(exc, ServiceException) and exc.retryable


class _RetryState:
    """Per-call bookkeeping shared by the sync and async loops."""

    def __init__(self, helper: "RetryHelper", emitter: HookEmitter) -> None:
        self.helper = helper
        self.emitter = emitter
        self.start = helper.clock()
        self.prev_sleep_s: float | None = None

    def remaining(self) -> float:
        return self.helper.settings.deadline_s - (self.helper.clock() - self.start)

    def next_sleep(self, exc: Exception, attempt: int) -> float:
        """
        Return how long to wait before the next attempt, or raise
        RetriesExhaustedError from `exc` when no further attempt is allowed.
        """
        settings = self.helper.settings
        if not self.helper.should_retry(exc):
            self._stop(StopReason.NON_RETRYABLE, "non_retryable", exc, attempt)
        if attempt >= settings.max_attempts:
            self._stop(StopReason.MAX_ATTEMPTS, "max_attempts_exceeded", exc, attempt)
        remaining = self.remaining()
        if remaining <= 0:
            self._stop(StopReason.DEADLINE_EXCEEDED, "deadline_exceeded", exc, attempt)

        ctx = BackoffContext(
            attempt=attempt,
            exception=exc,
            prev_sleep_s=self.prev_sleep_s,
            remaining_s=remaining,
        )
        sleep_s = min(max(0.0, float(self.helper.strategy(ctx))), remaining)
        self.prev_sleep_s = sleep_s
        self.emitter.emit("retry", attempt, sleep_s, exc)
        return sleep_s

    def interrupted(self, attempt: int) -> RetryInterruptedError:
        self.emitter.emit("aborted", attempt, 0.0, stop_reason=StopReason.ABORTED)
        return RetryInterruptedError(attempt)

    def _stop(self, stop_reason: StopReason, event: str, exc: Exception, attempt: int) -> NoReturn:
        self.emitter.emit(event, attempt, 0.0, exc, stop_reason=stop_reason)
        raise RetriesExhaustedError(stop_reason, attempt) from exc


class RetryHelper:
    """
    Run a callable, retrying failures that are safe to retry.

    The helper does not decide what is retryable on its own: by default it
    retries exactly the ServiceExceptions whose `retryable` flag is set.

    Parameters
    ----------
    settings:
        Attempt cap, wall-clock deadline and backoff strategy.

    should_retry:
        Optional predicate overriding the default retry decision.

    clock:
        Monotonic clock used for the deadline; injectable for tests.

    Raises
    ------
    RetriesExhaustedError
        When retries stop. The last exception is chained as __cause__.

    RetryInterruptedError
        When the abort event is set while waiting between attempts.
    """

    def __init__(
        self,
        settings: RetrySettings | None = None,
        *,
        should_retry: ShouldRetryFn | None = None,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        self.settings = settings or RetrySettings()
        self.should_retry = should_retry or retryable_service_exception
        self.strategy: StrategyFn = self.settings.strategy or exponential_jitter()
        self.clock = clock

    def run(
        self,
        func: Callable[[], T],
        *,
        abort: threading.Event | None = None,
        on_metric: MetricHook | None = None,
        on_log: LogHook | None = None,
        operation: str | None = None,
    ) -> T:
        state = _RetryState(self, HookEmitter(on_metric, on_log, operation))
        attempt = 0
        while True:
            attempt += 1
            try:
                result = func()
            except RetryHelperError:
                raise
            except Exception as exc:
                sleep_s = state.next_sleep(exc, attempt)
                if abort is None:
                    time.sleep(sleep_s)
                elif abort.wait(sleep_s):
                    raise state.interrupted(attempt) from None
                continue
            state.emitter.emit("success", attempt, 0.0)
            return result

    async def arun(
        self,
        func: Callable[[], Awaitable[T]],
        *,
        abort: asyncio.Event | None = None,
        on_metric: MetricHook | None = None,
        on_log: LogHook | None = None,
        operation: str | None = None,
    ) -> T:
        """Async mirror of run(); waits on an asyncio.Event for aborts."""
        state = _RetryState(self, HookEmitter(on_metric, on_log, operation))
        attempt = 0
        while True:
            attempt += 1
            try:
                result = await func()
            except RetryHelperError:
                raise
            except Exception as exc:
                sleep_s = state.next_sleep(exc, attempt)
                if await _wait_or_abort(abort, sleep_s):
                    raise state.interrupted(attempt) from None
                continue
            state.emitter.emit("success", attempt, 0.0)
            return result


async def _wait_or_abort(abort: asyncio.Event | None, sleep_s: float) -> bool:
    if abort is None:
        await asyncio.sleep(sleep_s)
        return False
    try:
        await asyncio.wait_for(abort.wait(), timeout=sleep_s)
    except TimeoutError:
        return abort.is_set()
    return True


def run_with_retries(
    func: Callable[[], T],
    classifier: ErrorClassifier,
    *,
    idempotent: bool,
    settings: RetrySettings | None = None,
    abort: threading.Event | None = None,
    **hooks: Any,
) -> T:
    """
    Call `func` with retries, raising a ServiceException on failure.

    Exceptions raised by `func` are translated by `classifier`; the
    resulting ServiceException is what the caller sees once retries stop.
    Exceptions the classifier does not recognize (a KeyError from a bug in
    `func`, say) are not retried and propagate as they were raised.
    Interruption surfaces as RetryInterruptedError.
    """

    def attempt() -> T:
        try:
            return func()
        except ServiceException:
            raise
        except Exception as exc:
            translated = classifier.translate(exc, idempotent)
            if translated is None:
                raise
            raise translated from exc

    try:
        return RetryHelper(settings).run(attempt, abort=abort, **hooks)
    except RetryHelperError as exc:
        translate_and_propagate(exc)
        _raise_unclassified(exc)
        raise


async def arun_with_retries(
    func: Callable[[], Awaitable[T]],
    classifier: ErrorClassifier,
    *,
    idempotent: bool,
    settings: RetrySettings | None = None,
    abort: asyncio.Event | None = None,
    **hooks: Any,
) -> T:
    """Async mirror of run_with_retries()."""

    async def attempt() -> T:
        try:
            return await func()
        except ServiceException:
            raise
        except Exception as exc:
            translated = classifier.translate(exc, idempotent)
            if translated is None:
                raise
            raise translated from exc

    try:
        return await RetryHelper(settings).arun(attempt, abort=abort, **hooks)
    except RetryHelperError as exc:
        translate_and_propagate(exc)
        _raise_unclassified(exc)
        raise


def _raise_unclassified(error: RetryHelperError) -> None:
    cause = error.__cause__
    if isinstance(cause, Exception):
        raise cause
