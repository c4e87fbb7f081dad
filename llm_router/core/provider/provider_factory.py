"""Provider factory for building provider instances from configuration."""

from collections.abc import Callable

from llm_router.core.exceptions import ConfigurationError
from llm_router.core.provider_config import ProviderConfig
from llm_router.providers.anthropic_provider import AnthropicProvider
from llm_router.providers.base import LLMProvider
from llm_router.providers.mock_provider import MockProvider
from llm_router.providers.openai_provider import OpenAIProvider

ProviderBuilder = Callable[[ProviderConfig], LLMProvider]


class ProviderFactory:
    """Creates provider instances per provider kind.

    Responsibilities:
    - Map a ProviderConfig.kind to the provider class implementing it
    - Allow extra kinds to be registered (tests, custom vendors)
    """

    def __init__(self) -> None:
        self._builders: dict[str, ProviderBuilder] = {
            "openai": OpenAIProvider,
            "anthropic": AnthropicProvider,
            "mock": MockProvider,
        }

    def register(self, kind: str, builder: ProviderBuilder) -> None:
        self._builders[kind] = builder

    def create(self, config: ProviderConfig) -> LLMProvider:
        """Build the provider for ``config``.

        Raises:
            ConfigurationError: If no builder handles the provider kind.
        """
        builder = self._builders.get(config.kind)
        if builder is None:
            raise ConfigurationError(
                f"Unknown provider kind '{config.kind}' for provider '{config.name}'"
            )
        return builder(config)

    def __call__(self, config: ProviderConfig) -> LLMProvider:
        return self.create(config)
