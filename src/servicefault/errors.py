from enum import Enum
from typing import Any

UNKNOWN_CODE = 0

_READ_ONLY = frozenset(
    {"code", "message", "reason", "retryable", "idempotent", "location", "debug_info", "_cause"}
)


class StopReason(str, Enum):
    MAX_ATTEMPTS = "MAX_ATTEMPTS"
    DEADLINE_EXCEEDED = "DEADLINE_EXCEEDED"
    NON_RETRYABLE = "NON_RETRYABLE"
    ABORTED = "ABORTED"


class ServiceException(Exception):
    """
    Uniform exception raised for any failed remote call.

    Instances are produced by ErrorClassifier from whatever the transport
    surfaced (a JSON error body, a socket fault, an RPC status). Callers only
    need to look at `retryable` to decide whether an automatic retry is safe.

    All attributes are read-only; `retryable` is decided once, when the
    exception is built.
    """

    def __init__(
        self,
        code: int,
        message: str | None,
        reason: str | None = None,
        *,
        retryable: bool = False,
        idempotent: bool = False,
        location: str | None = None,
        debug_info: str | None = None,
        cause: BaseException | None = None,
    ) -> None:
        super().__init__(message)
        self._frozen = False
        self.code = code
        self.message = message
        self.reason = reason
        self.retryable = retryable
        self.idempotent = idempotent
        self.location = location
        self.debug_info = debug_info
        self._cause = cause
        if cause is not None:
            self.__cause__ = cause
        self._frozen = True

    def __setattr__(self, name: str, value: Any) -> None:
        if self.__dict__.get("_frozen") and name in _READ_ONLY:
            raise AttributeError(f"{type(self).__name__}.{name} is read-only")
        super().__setattr__(name, value)

    @property
    def cause(self) -> BaseException | None:
        # Fixed at construction; `raise ... from` may rebind __cause__ later.
        return self._cause

    def _key(self) -> tuple[Any, ...]:
        return (
            self.cause,
            self.message,
            self.code,
            self.retryable,
            self.reason,
            self.idempotent,
            self.location,
            self.debug_info,
        )

    def __eq__(self, other: object) -> bool:
        if other is self:
            return True
        if not isinstance(other, ServiceException) or type(other) is not type(self):
            return NotImplemented
        return self._key() == other._key()

    def __hash__(self) -> int:
        return hash(self._key())

    def __reduce__(self) -> tuple[Any, ...]:
        kwargs = {
            "retryable": self.retryable,
            "idempotent": self.idempotent,
            "location": self.location,
            "debug_info": self.debug_info,
            "cause": self.cause,
        }
        return (_rebuild, (type(self), self.code, self.message, self.reason, kwargs))

    def __str__(self) -> str:
        return self.message or ""

    def __repr__(self) -> str:
        return (
            f"{type(self).__name__}(code={self.code!r}, reason={self.reason!r}, "
            f"message={self.message!r}, retryable={self.retryable!r}, "
            f"idempotent={self.idempotent!r})"
        )


def _rebuild(
    cls: type[ServiceException],
    code: int,
    message: str | None,
    reason: str | None,
    kwargs: dict[str, Any],
) -> ServiceException:
    return cls(code, message, reason, **kwargs)


class RetryHelperError(Exception):
    """Base class for terminal failures of the retry harness."""

    pass


class RetriesExhaustedError(RetryHelperError):
    """
    Raised when the retry harness stops without a successful attempt.

    The last attempt's exception is chained as `__cause__`.
    """

    def __init__(self, stop_reason: StopReason, attempts: int) -> None:
        super().__init__(f"Retries stopped after {attempts} attempt(s): {stop_reason.value}")
        self.stop_reason = stop_reason
        self.attempts = attempts


class RetryInterruptedError(RetryHelperError):
    """Raised when waiting for the next attempt was interrupted."""

    def __init__(self, attempts: int = 0) -> None:
        super().__init__("Retry interrupted while waiting for the next attempt")
        self.stop_reason = StopReason.ABORTED
        self.attempts = attempts
