"""Structured JSON error payloads returned by cloud JSON APIs.

The envelope looks like:

    {
      "error": {
        "code": 429,
        "message": "Rate limit exceeded",
        "errors": [
          {"reason": "rateLimitExceeded", "location": "bucket", "debugInfo": "..."}
        ]
      }
    }
"""

import json
from collections.abc import Mapping, Sequence
from dataclasses import dataclass, field
from typing import Any

from .errors import UNKNOWN_CODE


@dataclass(frozen=True)
class ErrorItem:
    reason: str | None = None
    location: str | None = None
    extra: Mapping[str, Any] = field(default_factory=dict)

    @property
    def debug_info(self) -> str | None:
        value = self.extra.get("debugInfo")
        return value if isinstance(value, str) else None


@dataclass(frozen=True)
class ErrorPayload:
    code: int
    message: str | None = None
    errors: Sequence[ErrorItem] = ()

    def first_item(self) -> ErrorItem | None:
        return self.errors[0] if self.errors else None

    def first_reason(self) -> str | None:
        # Multi-error responses are summarized by their first error.
        item = self.first_item()
        return item.reason if item is not None else None


def _as_str(value: object) -> str | None:
    return value if isinstance(value, str) else None


def _parse_item(raw: object) -> ErrorItem:
    if not isinstance(raw, Mapping):
        return ErrorItem()
    extra = {k: v for k, v in raw.items() if k not in ("reason", "location")}
    return ErrorItem(
        reason=_as_str(raw.get("reason")),
        location=_as_str(raw.get("location")),
        extra=extra,
    )


def parse_error_payload(body: object) -> ErrorPayload | None:
    """
    Parse a JSON error body into an ErrorPayload.

    Accepts a mapping, a JSON string or bytes, with or without the outer
    {"error": ...} envelope. Returns None when no error object is present.
    """
    if isinstance(body, bytes | bytearray):
        try:
            body = body.decode("utf-8")
        except UnicodeDecodeError:
            return None
    if isinstance(body, str):
        try:
            body = json.loads(body)
        except ValueError:
            return None
    if not isinstance(body, Mapping):
        return None

    inner = body.get("error", body)
    if not isinstance(inner, Mapping):
        return None
    if "code" not in inner and "errors" not in inner and "message" not in inner:
        return None

    code = inner.get("code")
    if isinstance(code, bool) or not isinstance(code, int):
        code = UNKNOWN_CODE

    raw_items = inner.get("errors")
    items: tuple[ErrorItem, ...] = ()
    if isinstance(raw_items, list):
        items = tuple(_parse_item(raw) for raw in raw_items)

    return ErrorPayload(code=code, message=_as_str(inner.get("message")), errors=items)
