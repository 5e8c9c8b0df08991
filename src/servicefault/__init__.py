from .classify import ErrorClassifier, RpcStatus, TranslatorFn
from .config import ClassifierConfig, RetrySettings
from .errors import (
    UNKNOWN_CODE,
    RetriesExhaustedError,
    RetryHelperError,
    RetryInterruptedError,
    ServiceException,
    StopReason,
)
from .extras import DEFAULT_TRANSLATORS
from .hooks import LogHook, MetricHook, logging_hook
from .payload import ErrorItem, ErrorPayload, parse_error_payload
from .presets import DEFAULT_RULES, RATE_LIMIT_RULES, SERVER_ERROR_RULES
from .propagate import (
    Interrupted,
    Reclassified,
    Unchanged,
    translate_and_propagate,
    unwrap_retry_error,
)
from .retry import RetryHelper, arun_with_retries, run_with_retries
from .rules import ErrorDescriptor, RetryRule, rules_from_mapping
from .strategies import (
    BackoffContext,
    constant,
    decorrelated_jitter,
    equal_jitter,
    exponential_jitter,
)
from .transport import INSUFFICIENT_DATA_WRITTEN, FaultKind, is_transport_retryable

__all__ = [
    "BackoffContext",
    "ClassifierConfig",
    "DEFAULT_RULES",
    "DEFAULT_TRANSLATORS",
    "ErrorClassifier",
    "ErrorDescriptor",
    "ErrorItem",
    "ErrorPayload",
    "FaultKind",
    "INSUFFICIENT_DATA_WRITTEN",
    "Interrupted",
    "LogHook",
    "MetricHook",
    "RATE_LIMIT_RULES",
    "Reclassified",
    "RetriesExhaustedError",
    "RetryHelper",
    "RetryHelperError",
    "RetryInterruptedError",
    "RetryRule",
    "RetrySettings",
    "RpcStatus",
    "SERVER_ERROR_RULES",
    "ServiceException",
    "StopReason",
    "TranslatorFn",
    "UNKNOWN_CODE",
    "Unchanged",
    "arun_with_retries",
    "constant",
    "decorrelated_jitter",
    "equal_jitter",
    "exponential_jitter",
    "is_transport_retryable",
    "logging_hook",
    "parse_error_payload",
    "rules_from_mapping",
    "run_with_retries",
    "translate_and_propagate",
    "unwrap_retry_error",
]
