"""
Unwrapping of terminal retry-harness failures.

A retry loop that gives up raises a RetryHelperError. Callers usually want
the underlying ServiceException back, untouched, and need to tell "gave up"
apart from "cancelled while waiting".
"""

from dataclasses import dataclass

from .errors import RetryHelperError, RetryInterruptedError, ServiceException


class UnwrapResult:
    """Base class for results returned by unwrap_retry_error."""

    pass


@dataclass(frozen=True)
class Unchanged(UnwrapResult):
    """The failure carries nothing to unwrap; the caller decides."""

    error: RetryHelperError


@dataclass(frozen=True)
class Reclassified(UnwrapResult):
    """The failure wraps an already classified ServiceException."""

    exception: ServiceException


@dataclass(frozen=True)
class Interrupted(UnwrapResult):
    """Waiting for the next attempt was interrupted."""

    error: RetryInterruptedError


def unwrap_retry_error(error: RetryHelperError) -> UnwrapResult:
    cause = error.__cause__
    if isinstance(cause, ServiceException):
        return Reclassified(cause)
    if isinstance(error, RetryInterruptedError):
        return Interrupted(error)
    return Unchanged(error)


def translate_and_propagate(error: RetryHelperError) -> None:
    """
    Re-raise what a RetryHelperError stands for, when possible.

    Raises the wrapped ServiceException itself (same object) or the
    RetryInterruptedError. Returns normally when there is nothing to unwrap.
    """
    result = unwrap_retry_error(error)
    if isinstance(result, Reclassified):
        raise result.exception
    if isinstance(result, Interrupted):
        raise result.error
