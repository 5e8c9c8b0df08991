from collections.abc import Collection, Iterable, Mapping
from dataclasses import dataclass, field
from typing import Any

from .errors import ServiceException
from .rules import RetryRule, rules_from_mapping
from .strategies import StrategyFn
from .transport import DEFAULT_SENTINEL_MESSAGES


@dataclass
class ClassifierConfig:
    rules: Collection[RetryRule] = field(default_factory=frozenset)
    exception_type: type[ServiceException] = ServiceException
    sentinel_messages: Collection[str] = DEFAULT_SENTINEL_MESSAGES

    @classmethod
    def from_mapping(cls, data: Mapping[str, Any]) -> "ClassifierConfig":
        """
        Build a config from plain data:

            {"rules": [{"code": 429, "rejected": True}], "sentinel_messages": [...]}
        """
        rules: Iterable[Mapping[str, Any]] = data.get("rules") or ()
        sentinels = data.get("sentinel_messages")
        return cls(
            rules=rules_from_mapping(rules),
            sentinel_messages=(
                frozenset(sentinels) if sentinels is not None else DEFAULT_SENTINEL_MESSAGES
            ),
        )

    def rule_set(self) -> frozenset[RetryRule]:
        return frozenset(self.rules)


@dataclass
class RetrySettings:
    max_attempts: int = 6
    deadline_s: float = 50.0
    strategy: StrategyFn | None = None

    def __post_init__(self) -> None:
        if self.max_attempts < 1:
            raise ValueError("max_attempts must be >= 1.")
        if self.deadline_s <= 0:
            raise ValueError("deadline_s must be > 0.")
