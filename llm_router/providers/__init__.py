"""Provider variants and the shared call executor."""

from llm_router.providers.anthropic_provider import AnthropicProvider
from llm_router.providers.base import LLMProvider, ProviderCallExecutor, VendorResult
from llm_router.providers.mock_provider import MockProvider
from llm_router.providers.openai_provider import OpenAIProvider

__all__ = [
    "AnthropicProvider",
    "LLMProvider",
    "MockProvider",
    "OpenAIProvider",
    "ProviderCallExecutor",
    "VendorResult",
]
