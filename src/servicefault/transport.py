"""Retry decisions for raw transport faults that carry no structured payload."""

from collections.abc import Collection
from enum import Enum, auto

INSUFFICIENT_DATA_WRITTEN = "insufficient data written"

DEFAULT_SENTINEL_MESSAGES: frozenset[str] = frozenset({INSUFFICIENT_DATA_WRITTEN})


class FaultKind(Enum):
    TIMEOUT = auto()
    CONNECTION = auto()
    OTHER = auto()


def fault_kind(exc: BaseException) -> FaultKind:
    """
    Map a stdlib exception onto a FaultKind.

    socket.timeout is an alias of TimeoutError; ConnectionError covers reset,
    aborted, refused and broken-pipe faults.
    """
    if isinstance(exc, TimeoutError):
        return FaultKind.TIMEOUT
    if isinstance(exc, ConnectionError):
        return FaultKind.CONNECTION
    return FaultKind.OTHER


def fault_message(exc: BaseException) -> str | None:
    if isinstance(exc, OSError) and exc.strerror:
        return exc.strerror
    if not exc.args:
        return None
    return str(exc)


def is_transport_retryable(
    exc: BaseException,
    idempotent: bool,
    kind: FaultKind | None = None,
    *,
    sentinel_messages: Collection[str] = DEFAULT_SENTINEL_MESSAGES,
) -> bool:
    """
    Decide retryability of a bare transport fault.

    Only idempotent operations are ever retried here: without a response the
    request may already have been applied.
    """
    if not idempotent:
        return False
    kind = kind if kind is not None else fault_kind(exc)
    if kind in (FaultKind.TIMEOUT, FaultKind.CONNECTION):
        return True
    return fault_message(exc) in sentinel_messages
