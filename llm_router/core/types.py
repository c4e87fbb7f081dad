"""Request, response and bookkeeping records shared across the router."""

from __future__ import annotations

import math
from dataclasses import asdict, dataclass, field
from datetime import datetime, timezone
from enum import Enum
from typing import Any

from llm_router.core.exceptions import InvalidRequest

# Rough estimate: 1 token ~= 4 characters of English text
CHARS_PER_TOKEN = 4


class AIOperation(str, Enum):
    """Closed set of generation tasks used to match requests to models."""

    PROMPT_IMPROVE = "prompt-improve"
    PROMPT_GENERATE = "prompt-generate"
    CONTENT_SUMMARIZE = "content-summarize"
    CONTENT_EXPAND = "content-expand"
    CODE_REVIEW = "code-review"
    TRANSLATION = "translation"
    ANALYSIS = "analysis"
    # Internal: health probes. Never listed in ModelConfig.recommended_for.
    HEALTH_CHECK = "health-check"


class ComplexityLevel(str, Enum):
    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"


def estimate_tokens(text: str) -> int:
    """Estimate the token count of ``text`` (ceil of chars / 4)."""
    return math.ceil(len(text) / CHARS_PER_TOKEN)


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


@dataclass(frozen=True)
class GenerationRequest:
    """A normalized generation request.

    ``operation`` accepts an :class:`AIOperation` or its string value.
    Construction fails with :class:`InvalidRequest` when the user prompt is
    blank or a sampling parameter is out of range.
    """

    system_prompt: str
    user_prompt: str
    max_tokens: int | None = None
    temperature: float | None = None
    model: str | None = None
    operation: AIOperation | None = None

    def __post_init__(self) -> None:
        if not self.user_prompt or not self.user_prompt.strip():
            raise InvalidRequest("User prompt is required")
        if self.max_tokens is not None and self.max_tokens <= 0:
            raise InvalidRequest(f"max_tokens must be positive (got {self.max_tokens})")
        if self.temperature is not None and not 0 <= self.temperature <= 2:
            raise InvalidRequest(f"temperature must be between 0 and 2 (got {self.temperature})")
        if self.operation is not None and not isinstance(self.operation, AIOperation):
            try:
                operation = AIOperation(self.operation)
            except ValueError as e:
                raise InvalidRequest(f"Unknown operation '{self.operation}'") from e
            object.__setattr__(self, "operation", operation)

    @property
    def estimated_input_tokens(self) -> int:
        return estimate_tokens(self.system_prompt + self.user_prompt)


@dataclass(frozen=True)
class TokenUsage:
    """Token counts and cost of one provider call.

    ``total_tokens`` is always derived from the input and output counts.
    """

    input_tokens: int = 0
    output_tokens: int = 0
    cost_cents: float = 0.0

    def __post_init__(self) -> None:
        if self.input_tokens < 0 or self.output_tokens < 0:
            raise ValueError("Token counts cannot be negative")
        if self.cost_cents < 0:
            raise ValueError("Cost cannot be negative")

    @property
    def total_tokens(self) -> int:
        return self.input_tokens + self.output_tokens

    @classmethod
    def empty(cls) -> TokenUsage:
        return cls()

    def to_dict(self) -> dict[str, Any]:
        return {
            "input_tokens": self.input_tokens,
            "output_tokens": self.output_tokens,
            "total_tokens": self.total_tokens,
            "cost_cents": self.cost_cents,
        }


@dataclass(frozen=True)
class GenerationResponse:
    """Normalized result of a provider call.

    A failed response always carries ``error``; a successful one never does.
    ``warning`` marks a successful but degraded result, e.g. a model priced
    with fallback rates.
    """

    text: str
    usage: TokenUsage
    provider: str
    model: str
    response_time_ms: float = 0.0
    success: bool = True
    error: str | None = None
    warning: str | None = None
    attempts: int = 1

    def __post_init__(self) -> None:
        if self.response_time_ms < 0:
            raise ValueError("response_time_ms cannot be negative")
        if self.success and self.error is not None:
            raise ValueError("A successful response cannot carry an error")
        if not self.success and not self.error:
            raise ValueError("A failed response must carry an error message")

    @classmethod
    def ok(
        cls,
        text: str,
        usage: TokenUsage,
        *,
        provider: str,
        model: str,
        response_time_ms: float = 0.0,
        warning: str | None = None,
        attempts: int = 1,
    ) -> GenerationResponse:
        return cls(
            text=text,
            usage=usage,
            provider=provider,
            model=model,
            response_time_ms=response_time_ms,
            warning=warning,
            attempts=attempts,
        )

    @classmethod
    def failed(
        cls,
        error: str,
        *,
        provider: str,
        model: str,
        usage: TokenUsage | None = None,
        response_time_ms: float = 0.0,
        attempts: int = 1,
    ) -> GenerationResponse:
        return cls(
            text="",
            usage=usage or TokenUsage.empty(),
            provider=provider,
            model=model,
            response_time_ms=response_time_ms,
            success=False,
            error=error,
            attempts=attempts,
        )

    def to_dict(self) -> dict[str, Any]:
        return {
            "text": self.text,
            "usage": self.usage.to_dict(),
            "provider": self.provider,
            "model": self.model,
            "response_time_ms": self.response_time_ms,
            "success": self.success,
            "error": self.error,
            "warning": self.warning,
            "attempts": self.attempts,
        }


@dataclass(frozen=True)
class HealthStatus:
    """Result of one health probe. Recomputed on demand, never persisted."""

    provider: str
    healthy: bool
    response_time_ms: float
    last_checked: datetime = field(default_factory=utcnow)
    error: str | None = None

    def to_dict(self) -> dict[str, Any]:
        data = asdict(self)
        data["last_checked"] = self.last_checked.isoformat()
        return data


@dataclass(frozen=True)
class ProviderStats:
    """Cumulative usage counters for one provider."""

    provider: str
    total_requests: int = 0
    successful_requests: int = 0
    failed_requests: int = 0
    average_response_time_ms: float = 0.0
    total_cost_cents: float = 0.0
    last_used: datetime | None = None

    @property
    def success_rate(self) -> float | None:
        if self.total_requests == 0:
            return None
        return self.successful_requests / self.total_requests

    def to_dict(self) -> dict[str, Any]:
        data = asdict(self)
        data["last_used"] = self.last_used.isoformat() if self.last_used else None
        data["success_rate"] = self.success_rate
        return data
