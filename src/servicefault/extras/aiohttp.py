"""Optional aiohttp translator."""

import importlib

from ..classify import ErrorClassifier
from ..errors import ServiceException
from ..transport import FaultKind


def aiohttp_translator(
    classifier: ErrorClassifier, exc: BaseException, idempotent: bool
) -> ServiceException | None:
    """
    Translate aiohttp client exceptions into ServiceException.

    ClientResponseError carries a status but no body, so it is classified as
    an HTTP error without payload.
    """
    try:
        aiohttp_exc = importlib.import_module("aiohttp.client_exceptions")
    except Exception:
        return None

    response_exc = getattr(aiohttp_exc, "ClientResponseError", None)
    if response_exc is not None and isinstance(response_exc, type) and isinstance(exc, response_exc):
        status = getattr(exc, "status", None)
        return classifier.from_http_error(
            exc, idempotent, status=status if isinstance(status, int) else None
        )

    timeout_exc = getattr(aiohttp_exc, "ServerTimeoutError", None)
    if timeout_exc is not None and isinstance(timeout_exc, type) and isinstance(exc, timeout_exc):
        return classifier.from_transport(exc, idempotent, kind=FaultKind.TIMEOUT)

    connection_exc = getattr(aiohttp_exc, "ClientConnectionError", None)
    if (
        connection_exc is not None
        and isinstance(connection_exc, type)
        and isinstance(exc, connection_exc)
    ):
        return classifier.from_transport(exc, idempotent, kind=FaultKind.CONNECTION)

    client_error = getattr(aiohttp_exc, "ClientError", None)
    if client_error is not None and isinstance(client_error, type) and isinstance(exc, client_error):
        return classifier.from_transport(exc, idempotent)

    return None
