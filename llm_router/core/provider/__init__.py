"""Provider management package.

Focused components used by the provider manager:

- ProviderRegistry: Stores and retrieves provider instances
- ProviderFactory: Builds provider instances from their configuration
- ProviderConfigLoader: Loads provider configs from the environment
- DefaultProviderSelector: Handles default/fallback selection
"""

from llm_router.core.provider.default_selector import DefaultProviderSelector
from llm_router.core.provider.provider_config_loader import (
    ProviderConfigLoader,
    ProviderLoadResult,
)
from llm_router.core.provider.provider_factory import ProviderFactory
from llm_router.core.provider.provider_registry import ProviderRegistry

__all__ = [
    "DefaultProviderSelector",
    "ProviderConfigLoader",
    "ProviderFactory",
    "ProviderLoadResult",
    "ProviderRegistry",
]
