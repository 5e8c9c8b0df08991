"""Ready-made rule sets for cloud JSON APIs."""

from .rules import RetryRule

# The server did not process a rate-limited request, so these are safe to
# retry even for non-idempotent calls.
RATE_LIMIT_RULES: frozenset[RetryRule] = frozenset(
    {
        RetryRule(code=429, rejected=True),
        RetryRule(reason="rateLimitExceeded", rejected=True),
        RetryRule(reason="userRateLimitExceeded", rejected=True),
    }
)

SERVER_ERROR_RULES: frozenset[RetryRule] = frozenset(
    {
        RetryRule(code=500),
        RetryRule(code=502),
        RetryRule(code=503),
        RetryRule(code=504),
        RetryRule(reason="backendError"),
        RetryRule(reason="internalError"),
    }
)

DEFAULT_RULES: frozenset[RetryRule] = RATE_LIMIT_RULES | SERVER_ERROR_RULES
