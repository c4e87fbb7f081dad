"""Built-in model catalog.

Prices are in cents per 1,000 tokens.
"""

from __future__ import annotations

from llm_router.core.provider_config import ModelConfig
from llm_router.core.types import AIOperation, ComplexityLevel

_ALL = (ComplexityLevel.LOW, ComplexityLevel.MEDIUM, ComplexityLevel.HIGH)
_PROMPT_WORK = (
    AIOperation.PROMPT_IMPROVE,
    AIOperation.PROMPT_GENERATE,
    AIOperation.CONTENT_SUMMARIZE,
    AIOperation.CONTENT_EXPAND,
)

OPENAI_DEFAULT_BASE_URL = "https://api.openai.com/v1"
ANTHROPIC_DEFAULT_BASE_URL = "https://api.anthropic.com"

OPENAI_MODELS: tuple[ModelConfig, ...] = (
    ModelConfig(
        name="gpt-4o-mini",
        provider="openai",
        max_tokens=4096,
        input_cost_per_1k=0.15,
        output_cost_per_1k=0.6,
        context_window=128000,
        capabilities=_ALL,
        recommended_for=_PROMPT_WORK,
    ),
    ModelConfig(
        name="gpt-4o",
        provider="openai",
        max_tokens=4096,
        input_cost_per_1k=2.5,
        output_cost_per_1k=10,
        context_window=128000,
        capabilities=(ComplexityLevel.MEDIUM, ComplexityLevel.HIGH),
        recommended_for=(AIOperation.CODE_REVIEW, AIOperation.ANALYSIS, AIOperation.TRANSLATION),
    ),
    ModelConfig(
        name="gpt-3.5-turbo",
        provider="openai",
        max_tokens=4096,
        input_cost_per_1k=0.5,
        output_cost_per_1k=1.5,
        context_window=16385,
        capabilities=(ComplexityLevel.LOW, ComplexityLevel.MEDIUM),
        recommended_for=(AIOperation.PROMPT_IMPROVE, AIOperation.CONTENT_SUMMARIZE),
    ),
)

ANTHROPIC_MODELS: tuple[ModelConfig, ...] = (
    ModelConfig(
        name="claude-3-haiku-20240307",
        provider="anthropic",
        max_tokens=4096,
        input_cost_per_1k=0.25,
        output_cost_per_1k=1.25,
        context_window=200000,
        capabilities=_ALL,
        recommended_for=_PROMPT_WORK,
    ),
    ModelConfig(
        name="claude-3-sonnet-20240229",
        provider="anthropic",
        max_tokens=4096,
        input_cost_per_1k=3,
        output_cost_per_1k=15,
        context_window=200000,
        capabilities=(ComplexityLevel.MEDIUM, ComplexityLevel.HIGH),
        recommended_for=(AIOperation.CODE_REVIEW, AIOperation.ANALYSIS, AIOperation.TRANSLATION),
    ),
    ModelConfig(
        name="claude-3-opus-20240229",
        provider="anthropic",
        max_tokens=4096,
        input_cost_per_1k=15,
        output_cost_per_1k=75,
        context_window=200000,
        capabilities=(ComplexityLevel.HIGH,),
        recommended_for=(AIOperation.ANALYSIS, AIOperation.CODE_REVIEW),
    ),
)

MOCK_MODELS: tuple[ModelConfig, ...] = (
    ModelConfig(
        name="mock-model",
        provider="mock",
        max_tokens=4096,
        context_window=128000,
        capabilities=_ALL,
        recommended_for=tuple(op for op in AIOperation if op is not AIOperation.HEALTH_CHECK),
    ),
)

MODELS_BY_KIND: dict[str, tuple[ModelConfig, ...]] = {
    "openai": OPENAI_MODELS,
    "anthropic": ANTHROPIC_MODELS,
    "mock": MOCK_MODELS,
}

DEFAULT_BASE_URLS: dict[str, str] = {
    "openai": OPENAI_DEFAULT_BASE_URL,
    "anthropic": ANTHROPIC_DEFAULT_BASE_URL,
}
