"""Optional gRPC translator."""

import importlib
from collections.abc import Collection

from ..classify import ErrorClassifier, RpcStatus, TranslatorFn
from ..errors import UNKNOWN_CODE, ServiceException

DEFAULT_RETRYABLE_STATUSES: frozenset[str] = frozenset({"UNAVAILABLE", "DEADLINE_EXCEEDED"})


def rpc_status_from_error(
    exc: BaseException,
    retryable_statuses: Collection[str] = DEFAULT_RETRYABLE_STATUSES,
) -> RpcStatus | None:
    """
    Read the status of a grpc.RpcError (or grpc.aio.AioRpcError).

    The retry verdict is decided by status name, the way the RPC layer's
    retry settings name retryable codes. Returns None for other exceptions.
    """
    try:
        grpc_mod = importlib.import_module("grpc")
    except Exception:
        return None

    rpc_error = getattr(grpc_mod, "RpcError", None)
    if rpc_error is None or not isinstance(rpc_error, type) or not isinstance(exc, rpc_error):
        return None

    code_fn = getattr(exc, "code", None)
    status = code_fn() if callable(code_fn) else None
    details_fn = getattr(exc, "details", None)
    details = details_fn() if callable(details_fn) else None

    name = getattr(status, "name", None) or "UNKNOWN"
    value = getattr(status, "value", None)
    code = UNKNOWN_CODE
    if isinstance(value, tuple) and value and isinstance(value[0], int):
        code = value[0]
    return RpcStatus(
        code=code,
        name=name,
        retryable=name in retryable_statuses,
        message=details if isinstance(details, str) else None,
    )


def grpc_translator_for(retryable_statuses: Collection[str]) -> TranslatorFn:
    """Build a gRPC translator with a custom set of retryable status names."""
    statuses = frozenset(retryable_statuses)

    def translator(
        classifier: ErrorClassifier, exc: BaseException, idempotent: bool
    ) -> ServiceException | None:
        status = rpc_status_from_error(exc, statuses)
        if status is None:
            return None
        return classifier.from_rpc_status(status, idempotent, cause=exc)

    return translator


grpc_translator = grpc_translator_for(DEFAULT_RETRYABLE_STATUSES)
