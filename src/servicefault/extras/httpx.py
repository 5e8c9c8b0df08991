"""Optional httpx translator."""

import importlib

from ..classify import ErrorClassifier
from ..errors import ServiceException
from ..payload import parse_error_payload
from ..transport import FaultKind


def httpx_translator(
    classifier: ErrorClassifier, exc: BaseException, idempotent: bool
) -> ServiceException | None:
    """
    Translate httpx exceptions into ServiceException.

    HTTPStatusError bodies are parsed as JSON error payloads. Returns None when
    httpx is unavailable or the exception is not an httpx error.
    """
    try:
        httpx = importlib.import_module("httpx")
    except Exception:
        return None

    status_error = getattr(httpx, "HTTPStatusError", None)
    if status_error is not None and isinstance(exc, status_error):
        response = getattr(exc, "response", None)
        status = getattr(response, "status_code", None)
        payload = None
        if response is not None:
            try:
                payload = parse_error_payload(response.content)
            except RuntimeError:
                # Streaming responses that were never read have no content.
                payload = None
        return classifier.from_http_error(exc, idempotent, status=status, payload=payload)

    timeout_exc = getattr(httpx, "TimeoutException", None)
    if timeout_exc is not None and isinstance(exc, timeout_exc):
        return classifier.from_transport(exc, idempotent, kind=FaultKind.TIMEOUT)

    connection_types = tuple(
        t
        for t in (
            getattr(httpx, "NetworkError", None),
            getattr(httpx, "RemoteProtocolError", None),
        )
        if t is not None
    )
    if connection_types and isinstance(exc, connection_types):
        return classifier.from_transport(exc, idempotent, kind=FaultKind.CONNECTION)

    transport_error = getattr(httpx, "TransportError", None)
    if transport_error is not None and isinstance(exc, transport_error):
        return classifier.from_transport(exc, idempotent)

    return None
