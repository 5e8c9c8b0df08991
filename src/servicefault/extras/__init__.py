"""Optional translators for common client libraries.

Dependency-free by default. Each translator imports its library lazily and
returns None when the library is missing, so ErrorClassifier.translate falls
back to the stdlib transport rules.
"""

from .aiohttp import aiohttp_translator
from .grpc import (
    DEFAULT_RETRYABLE_STATUSES,
    grpc_translator,
    grpc_translator_for,
    rpc_status_from_error,
)
from .httpx import httpx_translator
from .urllib3 import urllib3_translator

DEFAULT_TRANSLATORS = (
    httpx_translator,
    aiohttp_translator,
    urllib3_translator,
    grpc_translator,
)

__all__ = [
    "DEFAULT_RETRYABLE_STATUSES",
    "DEFAULT_TRANSLATORS",
    "aiohttp_translator",
    "grpc_translator",
    "grpc_translator_for",
    "httpx_translator",
    "rpc_status_from_error",
    "urllib3_translator",
]
