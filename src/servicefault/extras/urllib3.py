"""Optional urllib3 translator."""

import importlib

from ..classify import ErrorClassifier
from ..errors import ServiceException
from ..transport import FaultKind


def urllib3_translator(
    classifier: ErrorClassifier, exc: BaseException, idempotent: bool
) -> ServiceException | None:
    """
    Translate urllib3 exceptions into ServiceException.

    MaxRetryError is classified by the fault it wraps. Returns None when
    urllib3 is unavailable or the exception is not a urllib3 error.
    """
    try:
        urllib3_exc = importlib.import_module("urllib3.exceptions")
    except Exception:
        return None

    http_error = getattr(urllib3_exc, "HTTPError", None)
    if http_error is None or not isinstance(http_error, type) or not isinstance(exc, http_error):
        return None

    kind = _fault_kind(urllib3_exc, exc)
    max_retry_error = getattr(urllib3_exc, "MaxRetryError", None)
    if max_retry_error is not None and isinstance(exc, max_retry_error):
        reason = getattr(exc, "reason", None)
        if isinstance(reason, BaseException):
            kind = _fault_kind(urllib3_exc, reason)
    return classifier.from_transport(exc, idempotent, kind=kind)


def _fault_kind(urllib3_exc: object, exc: BaseException) -> FaultKind:
    # NewConnectionError subclasses ConnectTimeoutError, so test it first.
    connection_types = tuple(
        t
        for t in (
            getattr(urllib3_exc, "NewConnectionError", None),
            getattr(urllib3_exc, "ProtocolError", None),
        )
        if t is not None
    )
    if connection_types and isinstance(exc, connection_types):
        return FaultKind.CONNECTION

    timeout_exc = getattr(urllib3_exc, "TimeoutError", None)
    if timeout_exc is not None and isinstance(exc, timeout_exc):
        return FaultKind.TIMEOUT

    if isinstance(exc, TimeoutError):
        return FaultKind.TIMEOUT
    if isinstance(exc, ConnectionError):
        return FaultKind.CONNECTION
    return FaultKind.OTHER
