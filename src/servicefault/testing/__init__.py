"""Testing utilities for deterministic retries and classified failures."""

from __future__ import annotations

import json
from collections.abc import Mapping, Sequence
from dataclasses import dataclass, field
from typing import Any

from ..config import RetrySettings
from ..strategies import BackoffContext


@dataclass
class DeterministicStrategy:
    """Deterministic backoff for tests.

    Returns values from ``sleeps`` based on attempt number (1-based).
    If attempts exceed the list, returns ``default`` when provided, or
    the last value in the list.
    """

    sleeps: Sequence[float]
    default: float | None = None
    calls: list[BackoffContext] = field(default_factory=list)

    def __call__(self, ctx: BackoffContext) -> float:
        self.calls.append(ctx)
        index = ctx.attempt - 1
        if index < len(self.sleeps):
            return float(self.sleeps[index])
        if self.default is not None:
            return float(self.default)
        if self.sleeps:
            return float(self.sleeps[-1])
        return 0.0


def instant_retries(_: BackoffContext) -> float:
    """Zero-sleep strategy for fast, deterministic retries in tests."""

    return 0.0


def no_retries(*, deadline_s: float = 60.0) -> RetrySettings:
    """Return RetrySettings with retries disabled (max_attempts=1)."""

    return RetrySettings(max_attempts=1, deadline_s=deadline_s, strategy=instant_retries)


class FakeClock:
    """Manually advanced monotonic clock."""

    def __init__(self, start: float = 0.0) -> None:
        self.now = start

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds


@dataclass
class HookRecorder:
    """Collects events from on_metric/on_log hooks."""

    metrics: list[tuple[str, int, float, dict[str, Any]]] = field(default_factory=list)
    logs: list[tuple[str, dict[str, Any]]] = field(default_factory=list)

    def on_metric(self, event: str, attempt: int, sleep_s: float, tags: dict[str, Any]) -> None:
        self.metrics.append((event, attempt, sleep_s, tags))

    def on_log(self, event: str, fields: dict[str, Any]) -> None:
        self.logs.append((event, fields))

    def events(self) -> list[str]:
        return [event for event, *_ in self.metrics]


def json_error_body(
    code: int,
    message: str = "error",
    items: Sequence[Mapping[str, Any]] = (),
) -> bytes:
    """Encode a cloud JSON API error envelope."""

    error: dict[str, Any] = {"code": code, "message": message}
    if items:
        error["errors"] = [dict(item) for item in items]
    return json.dumps({"error": error}).encode("utf-8")


__all__ = [
    "DeterministicStrategy",
    "FakeClock",
    "HookRecorder",
    "instant_retries",
    "json_error_body",
    "no_retries",
]
