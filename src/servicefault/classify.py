from collections.abc import Callable, Collection, Iterable
from dataclasses import dataclass, replace
from typing import TYPE_CHECKING

from .errors import UNKNOWN_CODE, ServiceException
from .payload import ErrorPayload
from .rules import ErrorDescriptor, RetryRule
from .transport import DEFAULT_SENTINEL_MESSAGES, FaultKind, is_transport_retryable

if TYPE_CHECKING:
    from .config import ClassifierConfig


@dataclass(frozen=True)
class RpcStatus:
    """A status already classified by an RPC layer, retry verdict included."""

    code: int
    name: str
    retryable: bool
    message: str | None = None


# A translator turns a library exception into a ServiceException, or returns
# None when it does not recognize the exception.
TranslatorFn = Callable[["ErrorClassifier", BaseException, bool], ServiceException | None]


class ErrorClassifier:
    """
    Normalizes failures of remote calls into ServiceException instances.

    The classifier is deliberately small:
      * It holds an immutable set of RetryRules supplied by the service.
      * Every method is a pure function of its inputs and never raises.
      * It never retries anything; `retryable` on the result is advisory.

    Parameters
    ----------
    rules:
        RetryRules naming the errors this service considers retryable.

    exception_type:
        ServiceException subclass to build, so each service can raise its
        own type (e.g. StorageException) while sharing the logic.

    sentinel_messages:
        Transport fault messages treated as retryable for idempotent calls.

    translators:
        Optional adapters consulted by `translate` before the stdlib
        fallback, in order. See servicefault.extras.
    """

    def __init__(
        self,
        rules: Iterable[RetryRule] = (),
        *,
        exception_type: type[ServiceException] = ServiceException,
        sentinel_messages: Collection[str] = DEFAULT_SENTINEL_MESSAGES,
        translators: Iterable[TranslatorFn] = (),
    ) -> None:
        self.rules = frozenset(rules)
        self.exception_type = exception_type
        self.sentinel_messages = frozenset(sentinel_messages)
        self.translators = tuple(translators)

    @classmethod
    def from_config(
        cls,
        config: "ClassifierConfig",
        *,
        translators: Iterable[TranslatorFn] = (),
    ) -> "ErrorClassifier":
        """
        Construct an ErrorClassifier from a ClassifierConfig bundle.
        """
        return cls(
            config.rule_set(),
            exception_type=config.exception_type,
            sentinel_messages=config.sentinel_messages,
            translators=translators,
        )

    def is_retryable(self, descriptor: ErrorDescriptor, idempotent: bool) -> bool:
        return descriptor.is_retryable(idempotent, self.rules)

    def from_payload(
        self,
        payload: ErrorPayload,
        idempotent: bool,
        *,
        cause: BaseException | None = None,
    ) -> ServiceException:
        """
        Classify a structured error payload.

        Only the first error item is consulted. Location and debug info are
        taken from it when it carries a reason.
        """
        descriptor = ErrorDescriptor(payload.code, payload.first_reason())
        location = debug_info = None
        if descriptor.reason is not None:
            item = payload.first_item()
            if item is not None:
                location = item.location
                debug_info = item.debug_info
        return self.exception_type(
            payload.code,
            payload.message,
            descriptor.reason,
            retryable=self.is_retryable(descriptor, idempotent),
            idempotent=idempotent,
            location=location,
            debug_info=debug_info,
            cause=cause,
        )

    def from_http_error(
        self,
        exc: BaseException,
        idempotent: bool,
        *,
        status: int | None = None,
        payload: ErrorPayload | None = None,
        kind: FaultKind | None = None,
    ) -> ServiceException:
        """
        Classify an HTTP-level exception that may carry a parsed error body.

        With a payload the rule set decides, using the HTTP status when the
        body carries no code of its own. Without a payload the status code is
        kept and the transport fault rules decide.
        """
        if payload is not None:
            if payload.code == UNKNOWN_CODE and status is not None:
                payload = replace(payload, code=status)
            return self.from_payload(payload, idempotent, cause=exc)
        return self.exception_type(
            status if status is not None else UNKNOWN_CODE,
            _message(exc),
            retryable=self._transport_retryable(exc, idempotent, kind),
            idempotent=idempotent,
            cause=exc,
        )

    def from_transport(
        self,
        exc: BaseException,
        idempotent: bool,
        *,
        kind: FaultKind | None = None,
    ) -> ServiceException:
        """Classify a raw transport fault (timeout, reset, generic I/O)."""
        return self.from_http_error(exc, idempotent, kind=kind)

    def from_rpc_status(
        self,
        status: RpcStatus,
        idempotent: bool,
        *,
        cause: BaseException | None = None,
    ) -> ServiceException:
        """
        Classify an RPC status. The RPC layer's retry verdict is used as is.
        """
        return self.exception_type(
            status.code,
            status.message if status.message is not None else _message(cause),
            status.name,
            retryable=status.retryable,
            idempotent=idempotent,
            cause=cause,
        )

    def from_code(
        self,
        code: int,
        message: str | None,
        reason: str | None,
        idempotent: bool,
        *,
        cause: BaseException | None = None,
    ) -> ServiceException:
        """Build a ServiceException for a (code, reason) known to the caller."""
        return self.exception_type(
            code,
            message,
            reason,
            retryable=self.is_retryable(ErrorDescriptor(code, reason), idempotent),
            idempotent=idempotent,
            cause=cause,
        )

    def translate(self, exc: BaseException, idempotent: bool) -> ServiceException | None:
        """
        Turn an exception raised by a client library into a ServiceException.

        ServiceExceptions pass through unchanged. Otherwise each translator is
        tried in order, then OSError (timeouts and connection faults included)
        goes through the stdlib transport rules. Anything else is not a remote
        failure and yields None.
        """
        if isinstance(exc, ServiceException):
            return exc
        for translator in self.translators:
            translated = translator(self, exc, idempotent)
            if translated is not None:
                return translated
        if isinstance(exc, OSError):
            return self.from_transport(exc, idempotent)
        return None

    def _transport_retryable(
        self, exc: BaseException, idempotent: bool, kind: FaultKind | None
    ) -> bool:
        return is_transport_retryable(
            exc, idempotent, kind, sentinel_messages=self.sentinel_messages
        )

    def __repr__(self) -> str:
        return (
            f"ErrorClassifier(rules={len(self.rules)}, "
            f"exception_type={self.exception_type.__name__})"
        )


def _message(exc: BaseException | None) -> str | None:
    if exc is None or not exc.args:
        return None
    return str(exc)
