# tests/test_classify.py

import pytest

from servicefault.classify import ErrorClassifier, RpcStatus
from servicefault.config import ClassifierConfig
from servicefault.errors import UNKNOWN_CODE, ServiceException
from servicefault.payload import ErrorItem, ErrorPayload
from servicefault.presets import DEFAULT_RULES
from servicefault.rules import ErrorDescriptor, RetryRule
from servicefault.transport import INSUFFICIENT_DATA_WRITTEN, FaultKind

RULES = {
    RetryRule(code=429, rejected=True),
    RetryRule(code=503),
    RetryRule(reason="backendError"),
}


class StorageException(ServiceException):
    pass


@pytest.fixture
def classifier() -> ErrorClassifier:
    return ErrorClassifier(RULES)


def test_payload_uses_first_item_only(classifier: ErrorClassifier) -> None:
    payload = ErrorPayload(
        code=400,
        message="bad",
        errors=(
            ErrorItem(reason="invalid", location="name", extra={"debugInfo": "d1"}),
            ErrorItem(reason="backendError", location="other", extra={"debugInfo": "d2"}),
        ),
    )

    exc = classifier.from_payload(payload, idempotent=True)

    assert exc.code == 400
    assert exc.message == "bad"
    assert exc.reason == "invalid"
    assert exc.location == "name"
    assert exc.debug_info == "d1"
    assert exc.retryable is False
    assert exc.idempotent is True


def test_payload_without_items_has_no_reason(classifier: ErrorClassifier) -> None:
    exc = classifier.from_payload(ErrorPayload(code=503, message="unavailable"), idempotent=True)

    assert exc.reason is None
    assert exc.location is None
    assert exc.debug_info is None
    assert exc.retryable is True


def test_payload_item_without_reason_drops_location(classifier: ErrorClassifier) -> None:
    payload = ErrorPayload(code=500, errors=(ErrorItem(location="x", extra={"debugInfo": "d"}),))

    exc = classifier.from_payload(payload, idempotent=True)

    assert exc.reason is None
    assert exc.location is None
    assert exc.debug_info is None


def test_rejected_rule_retries_non_idempotent(classifier: ErrorClassifier) -> None:
    payload = ErrorPayload(code=429, message="slow", errors=(ErrorItem(reason="rateLimitExceeded"),))

    assert classifier.from_payload(payload, idempotent=False).retryable is True


def test_http_error_with_payload_keeps_cause(classifier: ErrorClassifier) -> None:
    raw = OSError("HTTP 503")
    payload = ErrorPayload(code=503, message="backend down", errors=(ErrorItem(reason="backendError"),))

    exc = classifier.from_http_error(raw, idempotent=False, status=503, payload=payload)

    assert exc.cause is raw
    assert exc.message == "backend down"
    assert exc.code == 503
    assert exc.reason == "backendError"
    assert exc.retryable is False


def test_http_error_payload_without_code_takes_status(classifier: ErrorClassifier) -> None:
    raw = OSError("HTTP 503")
    payload = ErrorPayload(code=UNKNOWN_CODE, message="backend down")

    exc = classifier.from_http_error(raw, idempotent=True, status=503, payload=payload)

    assert exc.code == 503
    assert exc.message == "backend down"
    assert exc.retryable is True
    assert exc.cause is raw


def test_http_error_without_payload_uses_status(classifier: ErrorClassifier) -> None:
    raw = OSError("HTTP 503")

    exc = classifier.from_http_error(raw, idempotent=True, status=503)

    assert exc.code == 503
    assert exc.reason is None
    assert exc.message == "HTTP 503"
    # Without a body only the transport rules decide.
    assert exc.retryable is False


def test_transport_fault_defaults(classifier: ErrorClassifier) -> None:
    exc = classifier.from_transport(ConnectionResetError(104, "reset"), idempotent=True)

    assert exc.code == UNKNOWN_CODE
    assert exc.reason is None
    assert exc.retryable is True


def test_transport_fault_sentinel(classifier: ErrorClassifier) -> None:
    assert classifier.from_transport(OSError(INSUFFICIENT_DATA_WRITTEN), True).retryable is True
    assert classifier.from_transport(OSError(INSUFFICIENT_DATA_WRITTEN), False).retryable is False
    assert classifier.from_transport(OSError("other"), True).retryable is False


def test_transport_fault_explicit_kind(classifier: ErrorClassifier) -> None:
    exc = classifier.from_transport(RuntimeError("lib timeout"), True, kind=FaultKind.TIMEOUT)

    assert exc.retryable is True


def test_rpc_status_trusted_verbatim(classifier: ErrorClassifier) -> None:
    cause = RuntimeError("rpc failed")
    retryable = classifier.from_rpc_status(
        RpcStatus(code=14, name="UNAVAILABLE", retryable=True), idempotent=False, cause=cause
    )
    not_retryable = classifier.from_rpc_status(
        RpcStatus(code=429, name="RESOURCE_EXHAUSTED", retryable=False, message="quota"),
        idempotent=True,
    )

    assert retryable.retryable is True
    assert retryable.code == 14
    assert retryable.reason == "UNAVAILABLE"
    assert retryable.message == "rpc failed"
    assert retryable.cause is cause
    # Rule 429/rejected would say retryable; the RPC verdict wins.
    assert not_retryable.retryable is False
    assert not_retryable.message == "quota"


def test_from_code(classifier: ErrorClassifier) -> None:
    assert classifier.from_code(429, "slow", "rateLimitExceeded", idempotent=False).retryable is True
    assert classifier.from_code(500, "boom", "internalError", idempotent=True).retryable is False
    assert classifier.from_code(503, "down", None, idempotent=True).retryable is True


def test_is_retryable(classifier: ErrorClassifier) -> None:
    assert classifier.is_retryable(ErrorDescriptor(503), True) is True
    assert classifier.is_retryable(ErrorDescriptor(503), False) is False


def test_empty_classifier_never_retries_structured_errors() -> None:
    classifier = ErrorClassifier()

    assert classifier.from_code(503, "down", None, idempotent=True).retryable is False


def test_exception_type_is_used() -> None:
    classifier = ErrorClassifier(RULES, exception_type=StorageException)

    assert type(classifier.from_code(404, "missing", "notFound", True)) is StorageException
    assert type(classifier.from_transport(TimeoutError(), True)) is StorageException


def test_translate_passes_service_exceptions_through(classifier: ErrorClassifier) -> None:
    original = ServiceException(404, "missing")

    assert classifier.translate(original, idempotent=True) is original


def test_translate_consults_translators_in_order() -> None:
    calls: list[str] = []

    def skip(classifier: ErrorClassifier, exc: BaseException, idempotent: bool) -> None:
        calls.append("skip")
        return None

    def handle(
        classifier: ErrorClassifier, exc: BaseException, idempotent: bool
    ) -> ServiceException:
        calls.append("handle")
        return classifier.from_code(418, str(exc), "teapot", idempotent, cause=exc)

    classifier = ErrorClassifier(RULES, translators=[skip, handle])
    exc = classifier.translate(ValueError("short and stout"), idempotent=True)

    assert calls == ["skip", "handle"]
    assert exc is not None
    assert exc.code == 418
    assert exc.reason == "teapot"


def test_translate_falls_back_to_transport(classifier: ErrorClassifier) -> None:
    raw = TimeoutError("read timed out")

    exc = classifier.translate(raw, idempotent=True)

    assert exc is not None
    assert exc.retryable is True
    assert exc.cause is raw
    assert exc.code == UNKNOWN_CODE


def test_translate_leaves_non_transport_errors_alone(classifier: ErrorClassifier) -> None:
    assert classifier.translate(KeyError("bucket"), idempotent=True) is None
    assert classifier.translate(ValueError("bad literal"), idempotent=True) is None


def test_classification_is_deterministic(classifier: ErrorClassifier) -> None:
    raw = TimeoutError("t")

    assert classifier.translate(raw, True) == classifier.translate(raw, True)


def test_from_config() -> None:
    config = ClassifierConfig.from_mapping(
        {"rules": [{"code": 429, "rejected": True}], "sentinel_messages": ["eof"]}
    )
    classifier = ErrorClassifier.from_config(config)

    assert classifier.rules == frozenset({RetryRule(code=429, rejected=True)})
    assert classifier.from_transport(OSError("eof"), True).retryable is True
    assert classifier.from_transport(OSError(INSUFFICIENT_DATA_WRITTEN), True).retryable is False


def test_default_rules_preset() -> None:
    classifier = ErrorClassifier(DEFAULT_RULES)

    assert classifier.from_code(429, "slow", None, idempotent=False).retryable is True
    assert classifier.from_code(403, "x", "userRateLimitExceeded", idempotent=False).retryable is True
    assert classifier.from_code(502, "bad gw", None, idempotent=True).retryable is True
    assert classifier.from_code(502, "bad gw", None, idempotent=False).retryable is False
    assert classifier.from_code(404, "missing", "notFound", idempotent=True).retryable is False
