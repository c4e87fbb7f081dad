"""Provider manager: registry, selection policy, fallback, health and statistics."""

from __future__ import annotations

import asyncio
import dataclasses
import logging
import threading
import time
from dataclasses import dataclass
from datetime import datetime

from llm_router.core.exceptions import ConfigurationError, NoProviderAvailable, NoSuitableModel
from llm_router.core.provider.provider_registry import ProviderRegistry
from llm_router.core.provider_config import LoadBalancingStrategy, ProviderConfig
from llm_router.core.types import (
    AIOperation,
    ComplexityLevel,
    GenerationRequest,
    GenerationResponse,
    HealthStatus,
    ProviderStats,
    utcnow,
)
from llm_router.providers.base import DEFAULT_MAX_TOKENS, LLMProvider

logger = logging.getLogger(__name__)

# Estimated token thresholds for complexity assessment
LOW_COMPLEXITY_MAX_TOKENS = 500
MEDIUM_COMPLEXITY_MAX_TOKENS = 2000


@dataclass
class _StatsRecord:
    """Mutable counters behind a ProviderStats snapshot. Guarded by the manager lock."""

    provider: str
    total_requests: int = 0
    successful_requests: int = 0
    failed_requests: int = 0
    average_response_time_ms: float = 0.0
    total_cost_cents: float = 0.0
    last_used: datetime | None = None

    def record(self, success: bool, response_time_ms: float, cost_cents: float) -> None:
        self.total_requests += 1
        if success:
            self.successful_requests += 1
        else:
            self.failed_requests += 1
        self.average_response_time_ms += (
            response_time_ms - self.average_response_time_ms
        ) / self.total_requests
        self.total_cost_cents += cost_cents
        self.last_used = utcnow()

    def snapshot(self) -> ProviderStats:
        return ProviderStats(
            provider=self.provider,
            total_requests=self.total_requests,
            successful_requests=self.successful_requests,
            failed_requests=self.failed_requests,
            average_response_time_ms=self.average_response_time_ms,
            total_cost_cents=self.total_cost_cents,
            last_used=self.last_used,
        )


class ProviderManager:
    """Routes generation requests across registered providers.

    The manager owns the provider registry, the cached health results and
    all usage statistics. Statistics are updated once per ``generate`` call,
    after the provider finished all of its retries.
    """

    def __init__(
        self,
        *,
        strategy: LoadBalancingStrategy | str = LoadBalancingStrategy.CHEAPEST,
        cost_optimization: bool = True,
        max_cost_per_request_cents: float | None = None,
        default_provider: str | None = None,
        fallback_provider: str | None = None,
    ) -> None:
        try:
            self.strategy = LoadBalancingStrategy(strategy)
        except ValueError as e:
            raise ConfigurationError(f"Unknown load-balancing strategy '{strategy}'") from e
        self.cost_optimization = cost_optimization
        self.max_cost_per_request_cents = max_cost_per_request_cents
        self.default_provider = default_provider
        self.fallback_provider = fallback_provider or None

        self._registry = ProviderRegistry()
        self._stats: dict[str, _StatsRecord] = {}
        self._health: dict[str, HealthStatus] = {}
        self._lock = threading.Lock()
        self._round_robin_index = 0

    # Registry

    def add_provider(self, provider: LLMProvider) -> None:
        """Register ``provider``, replacing any provider with the same name."""
        # Stats exist before the provider becomes selectable
        with self._lock:
            self._stats.setdefault(provider.name, _StatsRecord(provider.name))
            # A replaced instance starts with unknown health
            self._health.pop(provider.name, None)
        previous = self._registry.register(provider)
        if previous is not None:
            logger.info(f"Replaced provider '{provider.name}'")
        else:
            logger.debug(f"Registered provider '{provider.name}'")

    def remove_provider(self, name: str) -> None:
        self._registry.unregister(name)
        with self._lock:
            self._stats.pop(name, None)
            self._health.pop(name, None)

    def get_provider(self, name: str) -> LLMProvider | None:
        return self._registry.get(name)

    def _enabled_providers(self) -> list[LLMProvider]:
        providers = [p for p in self._registry.list_all().values() if p.get_config().enabled]
        return sorted(providers, key=lambda p: (p.get_config().priority, p.name))

    def list_providers(self) -> list[ProviderConfig]:
        """Enabled provider configurations, most preferred first."""
        return [p.get_config() for p in self._enabled_providers()]

    # Selection

    @staticmethod
    def assess_complexity(request: GenerationRequest) -> ComplexityLevel:
        tokens = request.estimated_input_tokens
        if tokens < LOW_COMPLEXITY_MAX_TOKENS:
            return ComplexityLevel.LOW
        if tokens < MEDIUM_COMPLEXITY_MAX_TOKENS:
            return ComplexityLevel.MEDIUM
        return ComplexityLevel.HIGH

    @staticmethod
    def estimate_cost(config: ProviderConfig, request: GenerationRequest) -> float:
        """Estimated cost in cents of serving ``request`` with ``config``.

        Uses the requested model when the provider declares it, else the
        provider's cheapest model for the request's token counts.
        """
        input_tokens = request.estimated_input_tokens
        output_tokens = request.max_tokens or DEFAULT_MAX_TOKENS
        model = config.get_model(request.model)
        if model is None:
            model = config.cheapest_model_for(request.operation, input_tokens, output_tokens)
        if model is None:
            return float("inf")
        return model.estimate_cost(input_tokens, output_tokens)

    def _healthy_or_unknown(self, providers: list[LLMProvider]) -> list[LLMProvider]:
        with self._lock:
            health = dict(self._health)
        return [p for p in providers if health.get(p.name) is None or health[p.name].healthy]

    def _stats_snapshot(self) -> dict[str, ProviderStats]:
        with self._lock:
            return {name: record.snapshot() for name, record in self._stats.items()}

    def select_provider(self, request: GenerationRequest) -> LLMProvider:
        """Pick the provider that should serve ``request``.

        Raises:
            NoProviderAvailable: If no enabled, not-unhealthy provider exists.
            NoSuitableModel: If none of them supports the request operation.
        """
        candidates = self._healthy_or_unknown(self._enabled_providers())
        if not candidates:
            raise NoProviderAvailable("No available LLM providers")

        operation = request.operation
        suitable = [p for p in candidates if p.get_config().supports(operation)]
        if not suitable:
            raise NoSuitableModel(operation.value if operation else "any")

        costs = {p.name: self.estimate_cost(p.get_config(), request) for p in suitable}

        cap = self.max_cost_per_request_cents
        if self.cost_optimization and cap is not None:
            affordable = [p for p in suitable if costs[p.name] <= cap]
            if affordable:
                suitable = affordable
            else:
                logger.warning(
                    f"No provider can serve the request within {cap} cents; "
                    "ignoring the cost cap"
                )

        chosen = self._rank(suitable, costs)
        logger.debug(f"Selected provider '{chosen.name}' using {self.strategy.value} strategy")
        return chosen

    def _rank(self, providers: list[LLMProvider], costs: dict[str, float]) -> LLMProvider:
        strategy = self.strategy

        def secondary(p: LLMProvider) -> float:
            return costs[p.name] if self.cost_optimization else 0.0

        def tail(p: LLMProvider) -> tuple[int, str]:
            return p.get_config().priority, p.name

        if strategy is LoadBalancingStrategy.CHEAPEST:
            return min(providers, key=lambda p: (costs[p.name], *tail(p)))

        if strategy is LoadBalancingStrategy.FASTEST:
            stats = self._stats_snapshot()

            def speed(p: LLMProvider) -> tuple[int, float]:
                record = stats.get(p.name)
                if record is None or record.total_requests == 0:
                    return 1, 0.0
                return 0, record.average_response_time_ms

            return min(providers, key=lambda p: (*speed(p), secondary(p), *tail(p)))

        if strategy is LoadBalancingStrategy.PRIORITY:
            return min(providers, key=lambda p: (p.get_config().priority, secondary(p), p.name))

        if strategy is LoadBalancingStrategy.LEAST_USED:
            stats = self._stats_snapshot()

            def usage(p: LLMProvider) -> int:
                record = stats.get(p.name)
                return record.total_requests if record else 0

            return min(providers, key=lambda p: (usage(p), secondary(p), *tail(p)))

        if strategy is LoadBalancingStrategy.ROUND_ROBIN:
            ordered = sorted(providers, key=tail)
            with self._lock:
                index = self._round_robin_index % len(ordered)
                self._round_robin_index = index + 1
            return ordered[index]

        raise ConfigurationError(f"Unknown load-balancing strategy '{strategy}'")

    # Generation

    @staticmethod
    def _route(provider: LLMProvider, request: GenerationRequest) -> GenerationRequest:
        """Pin the provider's cheapest suitable model when the request names none."""
        if request.model is not None:
            return request
        model = provider.get_config().cheapest_model_for(
            request.operation,
            request.estimated_input_tokens,
            request.max_tokens or DEFAULT_MAX_TOKENS,
        )
        if model is None:
            return request
        return dataclasses.replace(request, model=model.name)

    def _record(self, name: str, success: bool, response_time_ms: float, cost_cents: float) -> None:
        with self._lock:
            record = self._stats.get(name)
            if record is None:
                # Provider removed while the call was in flight
                return
            record.record(success, response_time_ms, cost_cents)

    async def _invoke(
        self, provider: LLMProvider, request: GenerationRequest
    ) -> GenerationResponse:
        start = time.perf_counter()
        try:
            response = await provider.generate(request)
        except Exception:
            elapsed_ms = (time.perf_counter() - start) * 1000
            self._record(provider.name, False, elapsed_ms, 0.0)
            logger.exception(f"Provider '{provider.name}' raised unexpectedly")
            raise
        self._record(
            provider.name, response.success, response.response_time_ms, response.usage.cost_cents
        )
        return response

    async def generate(self, request: GenerationRequest) -> GenerationResponse:
        """Serve ``request`` with one selected provider.

        The provider's response is returned verbatim, failures included.
        """
        provider = self.select_provider(request)
        return await self._invoke(provider, self._route(provider, request))

    def _fallback_for(self, primary: LLMProvider, request: GenerationRequest) -> LLMProvider | None:
        if not self.fallback_provider or self.fallback_provider == primary.name:
            return None
        fallback = self._registry.get(self.fallback_provider)
        if fallback is None:
            return None
        config = fallback.get_config()
        if not config.enabled or not config.supports(request.operation):
            return None
        return fallback

    async def generate_with_fallback(self, request: GenerationRequest) -> GenerationResponse:
        """Like ``generate``, with one extra attempt on the fallback provider.

        At most two provider attempts are made.
        """
        primary = self.select_provider(request)
        response = await self._invoke(primary, self._route(primary, request))
        if response.success:
            return response

        fallback = self._fallback_for(primary, request)
        if fallback is None:
            return response

        logger.warning(
            f"Provider '{primary.name}' failed ({response.error}); "
            f"falling back to '{fallback.name}'"
        )
        fallback_request = request
        if request.model is not None and fallback.get_config().get_model(request.model) is None:
            fallback_request = dataclasses.replace(request, model=None)
        return await self._invoke(fallback, self._route(fallback, fallback_request))

    # Diagnostics

    def get_best_provider(
        self,
        operation: AIOperation | str | None = None,
        complexity: ComplexityLevel | str | None = None,
    ) -> ProviderConfig:
        """Best enabled provider by health, success rate, latency and priority.

        Raises:
            NoProviderAvailable: If no provider is enabled.
            NoSuitableModel: If no provider matches the operation/complexity filters.
        """
        providers = self._enabled_providers()
        if not providers:
            raise NoProviderAvailable("No available LLM providers")

        op = AIOperation(operation) if operation is not None else None
        level = ComplexityLevel(complexity) if complexity is not None else None

        def matches(p: LLMProvider) -> bool:
            return any(
                m.supports(op) and (level is None or level in m.capabilities)
                for m in p.get_config().models
            )

        providers = [p for p in providers if matches(p)]
        if not providers:
            raise NoSuitableModel(op.value if op else "any")

        with self._lock:
            health = dict(self._health)
        stats = self._stats_snapshot()

        def rank(p: LLMProvider) -> tuple:
            status = health.get(p.name)
            health_rank = 1 if status is None else (0 if status.healthy else 2)
            record = stats.get(p.name)
            rate = record.success_rate if record else None
            measured = record is not None and record.total_requests > 0
            return (
                health_rank,
                rate is None,
                -(rate or 0.0),
                not measured,
                record.average_response_time_ms if measured else 0.0,
                p.get_config().priority,
                p.name,
            )

        return min(providers, key=rank).get_config()

    async def _probe(self, provider: LLMProvider) -> HealthStatus:
        timeout = provider.get_config().timeout
        start = time.perf_counter()
        try:
            return await asyncio.wait_for(provider.check_health(), timeout)
        except asyncio.TimeoutError:
            error = f"Health check timed out after {timeout}s"
        except Exception as e:
            logger.warning(f"Health check for '{provider.name}' raised {type(e).__name__}: {e}")
            error = f"Health check failed: {type(e).__name__}"
        return HealthStatus(
            provider=provider.name,
            healthy=False,
            response_time_ms=(time.perf_counter() - start) * 1000,
            error=error,
        )

    async def check_all_providers(self) -> list[HealthStatus]:
        """Probe every enabled provider concurrently.

        Each probe is bounded by its own provider timeout, so one slow
        provider never delays the others' results.
        """
        providers = self._enabled_providers()
        results = await asyncio.gather(*(self._probe(p) for p in providers))
        with self._lock:
            for status in results:
                if status.provider in self._stats:
                    self._health[status.provider] = status
        for status in results:
            if not status.healthy:
                logger.warning(f"Provider '{status.provider}' is unhealthy: {status.error}")
        return list(results)

    def get_health_snapshot(self) -> list[HealthStatus]:
        """Last cached health results, in provider order."""
        with self._lock:
            health = dict(self._health)
        return [health[p.name] for p in self._enabled_providers() if p.name in health]

    def get_provider_stats(self) -> list[ProviderStats]:
        """Snapshot copies of every registered provider's statistics."""
        stats = self._stats_snapshot()
        ordered = sorted(
            self._registry.list_all().values(), key=lambda p: (p.get_config().priority, p.name)
        )
        return [stats[p.name] for p in ordered if p.name in stats]
