"""Provider capability and the shared call executor.

Every provider variant implements :class:`LLMProvider` and delegates the
timeout, retry, latency and pricing work of a call to a
:class:`ProviderCallExecutor` it owns.
"""

from __future__ import annotations

import asyncio
import logging
import time
from collections.abc import Awaitable, Callable
from dataclasses import dataclass
from typing import Protocol, runtime_checkable

import httpx

from llm_router.core.exceptions import (
    InvalidRequest,
    ProviderError,
    ProviderTimeout,
    ProviderUnavailable,
    RateLimited,
)
from llm_router.core.provider_config import ModelConfig, ProviderConfig
from llm_router.core.types import (
    AIOperation,
    GenerationRequest,
    GenerationResponse,
    HealthStatus,
    TokenUsage,
    estimate_tokens,
)

logger = logging.getLogger(__name__)

DEFAULT_MAX_TOKENS = 1000
DEFAULT_TEMPERATURE = 0.7

HEALTH_PROBE_MAX_TOKENS = 10


@runtime_checkable
class LLMProvider(Protocol):
    """Capability shared by every provider variant."""

    name: str

    async def generate(self, request: GenerationRequest) -> GenerationResponse: ...

    async def check_health(self) -> HealthStatus: ...

    def get_config(self) -> ProviderConfig: ...


@dataclass(frozen=True)
class VendorResult:
    """Raw outcome of one successful vendor attempt.

    Token counts are None when the vendor did not report them.
    """

    text: str
    input_tokens: int | None = None
    output_tokens: int | None = None


VendorAttempt = Callable[[GenerationRequest, str], Awaitable[VendorResult]]


def _parse_retry_after(value: str | None) -> float | None:
    if not value:
        return None
    try:
        seconds = float(value)
    except ValueError:
        return None
    return seconds if seconds >= 0 else None


def _error_usage(response: httpx.Response) -> TokenUsage | None:
    """Token usage reported in an error body, in OpenAI or Anthropic field names."""
    try:
        body = response.json()
    except ValueError:
        return None
    usage = body.get("usage") if isinstance(body, dict) else None
    if not isinstance(usage, dict):
        return None
    input_tokens = usage.get("prompt_tokens", usage.get("input_tokens"))
    output_tokens = usage.get("completion_tokens", usage.get("output_tokens"))
    if not isinstance(input_tokens, int) and not isinstance(output_tokens, int):
        return None
    return TokenUsage(
        max(input_tokens, 0) if isinstance(input_tokens, int) else 0,
        max(output_tokens, 0) if isinstance(output_tokens, int) else 0,
    )


def classify_http_error(response: httpx.Response, *, provider: str) -> ProviderError:
    """Map a vendor error response to the router's error taxonomy."""
    status = response.status_code
    usage = _error_usage(response)
    if status in (401, 403):
        return ProviderUnavailable(
            "Invalid API key", provider=provider, retryable=False, usage=usage
        )
    if status == 429:
        return RateLimited(
            provider=provider,
            retry_after=_parse_retry_after(response.headers.get("retry-after")),
            usage=usage,
        )
    if status in (400, 404, 413, 422):
        return InvalidRequest(
            f"Request rejected by provider (HTTP {status})", provider=provider, usage=usage
        )
    if status >= 500:
        return ProviderUnavailable(
            f"Provider server error (HTTP {status})", provider=provider, usage=usage
        )
    return ProviderError(
        f"Unexpected provider response (HTTP {status})", provider=provider, usage=usage
    )


def health_probe_request() -> GenerationRequest:
    return GenerationRequest(
        system_prompt="You are a health check. Reply with OK.",
        user_prompt="ping",
        max_tokens=HEALTH_PROBE_MAX_TOKENS,
        temperature=0,
        operation=AIOperation.HEALTH_CHECK,
    )


class ProviderCallExecutor:
    """Runs vendor attempts with timeout, retry, latency and cost accounting.

    Responsibilities:
    - Bound every attempt by the provider timeout
    - Retry retryable failures with capped exponential backoff
    - Convert vendor failures into failed GenerationResponse objects
    - Price token usage with the model actually used
    """

    def __init__(
        self,
        config: ProviderConfig,
        *,
        backoff_base: float = 0.5,
        backoff_max: float = 8.0,
        sleep: Callable[[float], Awaitable[None]] = asyncio.sleep,
    ) -> None:
        self.config = config
        self.backoff_base = backoff_base
        self.backoff_max = backoff_max
        self._sleep = sleep

    def resolve_model(self, request: GenerationRequest) -> str:
        if request.model:
            return request.model
        default = self.config.default_model
        if default is None:
            raise ProviderUnavailable(
                f"Provider '{self.config.name}' has no models configured",
                provider=self.config.name,
                retryable=False,
            )
        return default.name

    def backoff_delay(self, attempt: int, retry_after: float | None = None) -> float:
        """Delay before retry number ``attempt`` (0-based)."""
        delay = min(self.backoff_base * 2**attempt, self.backoff_max)
        if retry_after is not None:
            delay = max(delay, min(retry_after, self.backoff_max))
        return delay

    def price(self, model_name: str, usage: TokenUsage) -> tuple[TokenUsage, str | None]:
        """Attach the cost of ``usage`` for ``model_name``.

        Unknown models are priced with the provider's cheapest model rates
        and a warning is returned alongside.
        """
        warning = None
        model: ModelConfig | None = self.config.get_model(model_name)
        if model is None:
            model = self.config.cheapest_model_for(None, usage.input_tokens, usage.output_tokens)
            if model is None:
                return usage, f"No pricing available for model '{model_name}'"
            warning = (
                f"Unknown model '{model_name}' for provider '{self.config.name}'; "
                f"cost estimated with '{model.name}' rates"
            )
            logger.warning(warning)
        cost = model.estimate_cost(usage.input_tokens, usage.output_tokens)
        return TokenUsage(usage.input_tokens, usage.output_tokens, cost), warning

    async def _attempt(
        self, attempt_fn: VendorAttempt, request: GenerationRequest, model_name: str
    ) -> VendorResult:
        try:
            return await asyncio.wait_for(attempt_fn(request, model_name), self.config.timeout)
        except asyncio.TimeoutError as e:
            raise ProviderTimeout(provider=self.config.name) from e
        except httpx.TimeoutException as e:
            raise ProviderTimeout(provider=self.config.name) from e
        except httpx.HTTPStatusError as e:
            raise classify_http_error(e.response, provider=self.config.name) from e
        except httpx.TransportError as e:
            raise ProviderUnavailable(
                f"Provider unreachable: {type(e).__name__}", provider=self.config.name
            ) from e

    async def execute(
        self,
        request: GenerationRequest,
        attempt_fn: VendorAttempt,
        *,
        max_retries: int | None = None,
    ) -> GenerationResponse:
        """Run ``attempt_fn`` until it succeeds or retries are exhausted.

        Never raises for vendor-side problems.
        """
        retries = self.config.max_retries if max_retries is None else max_retries
        start = time.perf_counter()
        name = self.config.name

        def elapsed_ms() -> float:
            return (time.perf_counter() - start) * 1000

        try:
            model_name = self.resolve_model(request)
        except ProviderError as e:
            return GenerationResponse.failed(
                e.message, provider=name, model=request.model or "", attempts=0
            )

        attempts = 0
        last_error: ProviderError | None = None
        while True:
            attempts += 1
            try:
                result = await self._attempt(attempt_fn, request, model_name)
            except ProviderError as e:
                last_error = e
                logger.debug(f"{name} attempt {attempts} failed: {e!r}")
            except Exception as e:
                logger.exception(f"Unexpected error calling provider '{name}'")
                return GenerationResponse.failed(
                    f"Unexpected provider error: {type(e).__name__}",
                    provider=name,
                    model=model_name,
                    response_time_ms=elapsed_ms(),
                    attempts=attempts,
                )
            else:
                input_tokens = result.input_tokens
                if input_tokens is None:
                    input_tokens = request.estimated_input_tokens
                output_tokens = result.output_tokens
                if output_tokens is None:
                    output_tokens = estimate_tokens(result.text)
                usage, warning = self.price(model_name, TokenUsage(input_tokens, output_tokens))
                return GenerationResponse.ok(
                    result.text,
                    usage,
                    provider=name,
                    model=model_name,
                    response_time_ms=elapsed_ms(),
                    warning=warning,
                    attempts=attempts,
                )

            if not last_error.retryable or attempts > retries:
                break
            retry_after = getattr(last_error, "retry_after", None)
            delay = self.backoff_delay(attempts - 1, retry_after)
            logger.info(
                f"Retrying provider '{name}' in {delay:.2f}s "
                f"(attempt {attempts + 1}/{retries + 1}): {last_error.message}"
            )
            await self._sleep(delay)

        usage = last_error.usage
        if usage is not None:
            usage, _ = self.price(model_name, usage)
        logger.warning(
            f"Provider '{name}' failed after {attempts} attempt(s) "
            f"[{last_error.error_type.value}]: {last_error.message}"
        )
        return GenerationResponse.failed(
            last_error.message,
            provider=name,
            model=model_name,
            usage=usage,
            response_time_ms=elapsed_ms(),
            attempts=attempts,
        )

    async def probe(self, attempt_fn: VendorAttempt) -> HealthStatus:
        """Single retry-free health probe bounded by the provider timeout."""
        response = await self.execute(health_probe_request(), attempt_fn, max_retries=0)
        return HealthStatus(
            provider=self.config.name,
            healthy=response.success,
            response_time_ms=response.response_time_ms,
            error=response.error,
        )
