import random
from collections.abc import Callable
from dataclasses import dataclass


@dataclass(frozen=True)
class BackoffContext:
    attempt: int
    exception: BaseException
    prev_sleep_s: float | None
    remaining_s: float | None


StrategyFn = Callable[[BackoffContext], float]


def exponential_jitter(
    initial_s: float = 1.0,
    multiplier: float = 2.0,
    max_s: float = 32.0,
) -> StrategyFn:
    """
    Exponential backoff with full jitter.

    cap = min(max_s, initial_s * multiplier^(attempt - 1))
    sleep in [0, cap]
    """
    if initial_s <= 0:
        raise ValueError("initial_s must be > 0.")
    if multiplier < 1.0:
        raise ValueError("multiplier must be >= 1.0.")

    def f(ctx: BackoffContext) -> float:
        cap = min(max_s, initial_s * (multiplier ** (ctx.attempt - 1)))
        return random.uniform(0.0, cap)

    return f


def decorrelated_jitter(base_s: float = 0.25, max_s: float = 30.0) -> StrategyFn:
    """
    Backoff driven by the previous sleep rather than the attempt number.

    Each wait is drawn from [base_s, 3 * previous wait], never above max_s;
    the first wait treats base_s as the previous one. Concurrent clients
    retrying the same overloaded backend drift apart quickly.
    """
    _check_bounds(base_s, max_s)

    def f(ctx: BackoffContext) -> float:
        prev = ctx.prev_sleep_s or base_s
        return min(max_s, random.uniform(base_s, prev * 3.0))

    return f


def equal_jitter(base_s: float = 0.25, max_s: float = 30.0) -> StrategyFn:
    """
    Doubling backoff that always waits at least half of its ceiling.

    The ceiling for attempt n is base_s * 2**n, limited to max_s. Half of it
    is fixed and the other half random, so a retry never fires immediately.
    """
    _check_bounds(base_s, max_s)

    def f(ctx: BackoffContext) -> float:
        cap = min(max_s, base_s * (2.0**ctx.attempt))
        return cap / 2.0 + random.uniform(0.0, cap / 2.0)

    return f


def _check_bounds(base_s: float, max_s: float) -> None:
    if base_s <= 0:
        raise ValueError("base_s must be > 0.")
    if max_s < base_s:
        raise ValueError("max_s must be >= base_s.")


def constant(sleep_s: float) -> StrategyFn:
    if sleep_s < 0:
        raise ValueError("sleep_s must be >= 0.")

    def f(ctx: BackoffContext) -> float:
        return sleep_s

    return f
