from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum

from llm_router.core.types import AIOperation, ComplexityLevel

PROVIDER_KINDS = ("openai", "anthropic", "mock")


class LoadBalancingStrategy(str, Enum):
    """How the manager ranks eligible providers."""

    CHEAPEST = "cheapest"
    FASTEST = "fastest"
    PRIORITY = "priority"
    ROUND_ROBIN = "round-robin"
    LEAST_USED = "least-used"


@dataclass(frozen=True)
class ModelConfig:
    """Pricing and capabilities of one vendor model.

    Costs are expressed in cents per 1,000 tokens.
    """

    name: str
    provider: str
    max_tokens: int = 4096
    input_cost_per_1k: float = 0.0
    output_cost_per_1k: float = 0.0
    context_window: int = 8192
    capabilities: tuple[ComplexityLevel, ...] = ()
    recommended_for: tuple[AIOperation, ...] = ()

    def __post_init__(self) -> None:
        if not self.name:
            raise ValueError("Model name is required")
        if self.input_cost_per_1k < 0 or self.output_cost_per_1k < 0:
            raise ValueError(f"Model '{self.name}' cannot have negative pricing")
        # Accept plain strings from config files
        object.__setattr__(
            self, "capabilities", tuple(ComplexityLevel(c) for c in self.capabilities)
        )
        object.__setattr__(
            self, "recommended_for", tuple(AIOperation(op) for op in self.recommended_for)
        )

    def supports(self, operation: AIOperation | None) -> bool:
        """A model supports no-operation requests and those it is recommended for."""
        return operation is None or operation in self.recommended_for

    def estimate_cost(self, input_tokens: int, output_tokens: int) -> float:
        """Cost in cents for the given token counts."""
        return (input_tokens / 1000) * self.input_cost_per_1k + (
            output_tokens / 1000
        ) * self.output_cost_per_1k


@dataclass(frozen=True)
class ProviderConfig:
    """Configuration for a specific provider"""

    name: str
    kind: str = ""
    api_key: str | None = None
    credential_ref: str | None = None
    base_url: str | None = None
    timeout: float = 30.0
    max_retries: int = 3
    models: tuple[ModelConfig, ...] = field(default_factory=tuple)
    priority: int = 100
    enabled: bool = True

    def __post_init__(self) -> None:
        """Validate configuration after initialization"""
        if not self.name:
            raise ValueError("Provider name is required")
        if not self.kind:
            object.__setattr__(self, "kind", self.name)
        if self.kind not in PROVIDER_KINDS:
            raise ValueError(
                f"Invalid provider kind '{self.kind}' for provider '{self.name}'. "
                f"Must be one of {', '.join(PROVIDER_KINDS)}"
            )
        if self.timeout <= 0:
            raise ValueError(f"Timeout must be positive for provider '{self.name}'")
        if self.max_retries < 0:
            raise ValueError(f"max_retries cannot be negative for provider '{self.name}'")
        object.__setattr__(self, "models", tuple(self.models))
        if self.enabled and not self.models:
            raise ValueError(f"Provider '{self.name}' needs at least one model")
        if self.enabled and self.requires_api_key and not self.api_key:
            raise ValueError(f"API key is required for provider '{self.name}'")

    @property
    def requires_api_key(self) -> bool:
        return self.kind != "mock"

    @property
    def default_model(self) -> ModelConfig | None:
        """The first configured model is the provider's default."""
        return self.models[0] if self.models else None

    def get_model(self, name: str | None) -> ModelConfig | None:
        if name is None:
            return None
        for model in self.models:
            if model.name == name:
                return model
        return None

    def supports(self, operation: AIOperation | None) -> bool:
        return any(model.supports(operation) for model in self.models)

    def cheapest_model_for(
        self, operation: AIOperation | None, input_tokens: int, output_tokens: int
    ) -> ModelConfig | None:
        """Model supporting ``operation`` with the lowest cost for these token counts.

        Ties keep configuration order.
        """
        candidates = [m for m in self.models if m.supports(operation)]
        if not candidates:
            return None
        return min(candidates, key=lambda m: m.estimate_cost(input_tokens, output_tokens))


@dataclass(frozen=True)
class LLMConfig:
    """Static router configuration: providers plus routing policy."""

    providers: tuple[ProviderConfig, ...]
    default_provider: str
    fallback_provider: str | None = None
    strategy: LoadBalancingStrategy = LoadBalancingStrategy.CHEAPEST
    cost_optimization: bool = True
    max_cost_per_request_cents: float | None = None
    health_check_on_start: bool = True

    def __post_init__(self) -> None:
        object.__setattr__(self, "providers", tuple(self.providers))
        names = [p.name for p in self.providers]
        duplicates = {n for n in names if names.count(n) > 1}
        if duplicates:
            raise ValueError(f"Duplicate provider names: {', '.join(sorted(duplicates))}")

    @property
    def enabled_providers(self) -> tuple[ProviderConfig, ...]:
        return tuple(p for p in self.providers if p.enabled)
