"""Retry rules and the descriptor they are matched against."""

from collections.abc import Iterable, Mapping
from dataclasses import dataclass
from typing import Any


@dataclass(frozen=True)
class ErrorDescriptor:
    """
    The (code, reason) summary of a failure.

    `rejected` marks descriptors for errors where the server certainly did not
    process the request. It only matters inside rules.
    """

    code: int | None
    reason: str | None = None
    rejected: bool = False

    def is_retryable(self, idempotent: bool, rules: Iterable["RetryRule"]) -> bool:
        """
        Return whether a failure described by this descriptor may be retried.

        A matching rule allows the retry when the operation is idempotent or
        when the rule says the request was rejected outright. Without a
        matching rule the failure is never retryable.
        """
        return any(rule.matches(self) and (idempotent or rule.rejected) for rule in rules)


@dataclass(frozen=True)
class RetryRule:
    """
    A (code, reason) pattern naming a retryable error.

    A field left as None matches any value. Set `rejected` for errors where
    the server provably did not apply the request (e.g. rate limiting), which
    makes the error retryable even for non-idempotent operations.
    """

    code: int | None = None
    reason: str | None = None
    rejected: bool = False

    def matches(self, descriptor: ErrorDescriptor) -> bool:
        return (self.code is None or self.code == descriptor.code) and (
            self.reason is None or self.reason == descriptor.reason
        )


def rules_from_mapping(entries: Iterable[Mapping[str, Any]]) -> frozenset[RetryRule]:
    """
    Build a rule set from plain data, e.g. loaded from a config file.

        rules_from_mapping([{"code": 429, "rejected": True}, {"reason": "backendError"}])
    """
    rules = set()
    for entry in entries:
        unknown = set(entry) - {"code", "reason", "rejected"}
        if unknown:
            raise ValueError(f"Unknown retry rule keys: {', '.join(sorted(unknown))}.")
        code = entry.get("code")
        if code is not None and (isinstance(code, bool) or not isinstance(code, int)):
            raise ValueError("Retry rule code must be an int.")
        reason = entry.get("reason")
        if reason is not None and not isinstance(reason, str):
            raise ValueError("Retry rule reason must be a string.")
        rules.add(RetryRule(code=code, reason=reason, rejected=bool(entry.get("rejected", False))))
    return frozenset(rules)
