"""
Exception hierarchy for LLM Router.

Provider-side failures (``ProviderError`` and subclasses) are raised inside a
provider attempt and absorbed by the provider call executor, which turns them
into failed ``GenerationResponse`` objects. Routing and configuration errors
surface to the caller.

All exceptions inherit from LLMRouterError, allowing callers to
catch every router error with a single except clause.

Example:
    >>> try:
    ...     await manager.generate(request)
    ... except LLMRouterError as e:
    ...     print(f"Generation failed: {e}")
"""

from __future__ import annotations

from typing import TYPE_CHECKING

from llm_router.core.error_types import ErrorType

if TYPE_CHECKING:
    from llm_router.core.types import TokenUsage


class LLMRouterError(Exception):
    """Base exception for all router errors."""

    error_type: ErrorType = ErrorType.UNEXPECTED_ERROR


class ProviderError(LLMRouterError):
    """Raised by a provider attempt when the vendor call fails.

    Attributes:
        provider: Name of the provider that failed
        message: Human-readable explanation, safe to show to callers
        retryable: Whether the call executor may retry the attempt
        usage: Billable usage the vendor reported in its error body. None when
            the vendor reported nothing, in which case the failure costs zero
    """

    retryable: bool = False

    def __init__(
        self,
        message: str,
        *,
        provider: str = "",
        retryable: bool | None = None,
        usage: TokenUsage | None = None,
    ) -> None:
        self.provider = provider
        self.message = message
        if retryable is not None:
            self.retryable = retryable
        self.usage = usage
        super().__init__(message)

    def __repr__(self) -> str:
        return (
            f"{type(self).__name__}(provider={self.provider!r}, "
            f"message={self.message!r}, retryable={self.retryable!r})"
        )


class ProviderUnavailable(ProviderError):
    """Raised when the vendor is unreachable or rejects the credential.

    Unreachable vendors and 5xx responses are retryable; a rejected
    credential is not.
    """

    retryable = True
    error_type = ErrorType.UPSTREAM_UNAVAILABLE


class RateLimited(ProviderError):
    """Raised when the vendor signals a rate limit.

    Attributes:
        retry_after: Seconds the vendor asked us to wait, when it said so
    """

    retryable = True
    error_type = ErrorType.RATE_LIMIT

    def __init__(
        self,
        message: str = "Rate limit exceeded",
        *,
        provider: str = "",
        retry_after: float | None = None,
        usage: TokenUsage | None = None,
    ) -> None:
        super().__init__(message, provider=provider, usage=usage)
        self.retry_after = retry_after


class InvalidRequest(ProviderError):
    """Raised when a request is malformed (e.g. empty user prompt).

    Never retried.
    """

    retryable = False
    error_type = ErrorType.BAD_REQUEST


class ProviderTimeout(ProviderError):
    """Raised when a provider attempt exceeds its configured timeout."""

    retryable = True
    error_type = ErrorType.TIMEOUT

    def __init__(self, message: str = "Request timeout", *, provider: str = "") -> None:
        super().__init__(message, provider=provider)


class NoProviderAvailable(LLMRouterError):
    """Raised when no enabled provider can serve a request."""

    error_type = ErrorType.NO_PROVIDER


class NoSuitableModel(LLMRouterError):
    """Raised when no enabled provider has a model for the requested operation.

    Attributes:
        operation: The operation tag nobody supports
    """

    error_type = ErrorType.NO_SUITABLE_MODEL

    def __init__(self, operation: str) -> None:
        self.operation = operation
        super().__init__(f"No configured model supports operation '{operation}'")


class ConfigurationError(LLMRouterError):
    """Raised when router configuration is invalid or incomplete.

    This indicates a deployment mistake (unknown strategy, missing
    default/fallback provider, unknown provider kind) rather than a
    runtime condition to tolerate.
    """

    error_type = ErrorType.CONFIGURATION_ERROR


__all__ = [
    "LLMRouterError",
    "ProviderError",
    "ProviderUnavailable",
    "RateLimited",
    "InvalidRequest",
    "ProviderTimeout",
    "NoProviderAvailable",
    "NoSuitableModel",
    "ConfigurationError",
]
