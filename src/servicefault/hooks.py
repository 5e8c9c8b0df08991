import logging
from collections.abc import Callable
from typing import Any

from .errors import ServiceException, StopReason

MetricHook = Callable[[str, int, float, dict[str, Any]], None]
LogHook = Callable[[str, dict[str, Any]], None]


def failure_tags(exc: BaseException | None) -> dict[str, Any]:
    """
    Safe tags describing a failure: classification fields only, never
    messages or payloads.
    """
    if exc is None:
        return {}
    tags: dict[str, Any] = {"err": type(exc).__name__}
    if isinstance(exc, ServiceException):
        tags["code"] = exc.code
        tags["reason"] = exc.reason
        tags["retryable"] = exc.retryable
    return tags


class HookEmitter:
    """Fan out events to optional metric/log hooks, swallowing hook errors."""

    def __init__(
        self,
        on_metric: MetricHook | None,
        on_log: LogHook | None,
        operation: str | None,
    ) -> None:
        self.on_metric = on_metric
        self.on_log = on_log
        self.operation = operation

    def emit(
        self,
        event: str,
        attempt: int,
        sleep_s: float,
        exc: BaseException | None = None,
        *,
        stop_reason: StopReason | None = None,
    ) -> None:
        tags = failure_tags(exc)
        if self.operation:
            tags["operation"] = self.operation
        if stop_reason is not None:
            tags["stop_reason"] = stop_reason.value

        if self.on_metric is not None:
            try:
                self.on_metric(event, attempt, sleep_s, dict(tags))
            except Exception:
                pass

        if self.on_log is not None:
            fields = {"attempt": attempt, "sleep_s": sleep_s, **tags}
            try:
                self.on_log(event, fields)
            except Exception:
                pass


_LEVELS = {
    "success": logging.DEBUG,
    "retry": logging.INFO,
}


def logging_hook(logger: logging.Logger) -> LogHook:
    """
    Adapt a stdlib logger to the on_log hook signature.

    Retries log at INFO, terminal failures at WARNING.
    """

    def hook(event: str, fields: dict[str, Any]) -> None:
        level = _LEVELS.get(event, logging.WARNING)
        logger.log(level, "servicefault.%s", event, extra={"servicefault": fields})

    return hook
