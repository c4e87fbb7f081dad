"""Configuration facade for LLM Router.

All values are loaded at initialization time from environment variables
using schema-based validation. ``llm_config()`` turns them into the static
router configuration consumed by the manager factory.
"""

import hashlib
import os
import threading
from typing import Any

from llm_router.core.config.schema import ConfigSchema
from llm_router.core.config.validation import load_env_var
from llm_router.core.provider.default_selector import DefaultProviderSelector
from llm_router.core.provider.provider_config_loader import ProviderConfigLoader
from llm_router.core.provider_config import LLMConfig, LoadBalancingStrategy


class Config:
    """Configuration with direct property access to all settings."""

    def __init__(self) -> None:
        self._values: dict[str, Any] = {
            name: load_env_var(spec) for name, spec in ConfigSchema.all_specs().items()
        }

    def _source(self, spec_name: str) -> str:
        spec = getattr(ConfigSchema, spec_name)
        return "env" if os.environ.get(spec.name, "").strip() else "system"

    # Server settings
    @property
    def host(self) -> str:
        return self._values["HOST"]

    @property
    def port(self) -> int:
        return self._values["PORT"]

    @property
    def log_level(self) -> str:
        return self._values["LOG_LEVEL"].split()[0].upper()

    # Provider settings
    @property
    def skip_ai_request(self) -> bool:
        return self._values["SKIP_AI_REQUEST"]

    @property
    def openai_api_key(self) -> str | None:
        return self._values["OPENAI_API_KEY"]

    @property
    def anthropic_api_key(self) -> str | None:
        return self._values["ANTHROPIC_API_KEY"]

    @property
    def base_urls(self) -> dict[str, str]:
        return {
            "openai": self._values["OPENAI_BASE_URL"],
            "anthropic": self._values["ANTHROPIC_BASE_URL"],
        }

    # Routing settings
    @property
    def default_provider(self) -> str:
        return "mock" if self.skip_ai_request else self._values["LLM_DEFAULT_PROVIDER"]

    @property
    def fallback_provider(self) -> str | None:
        if self.skip_ai_request:
            return None
        return self._values["LLM_FALLBACK_PROVIDER"]

    @property
    def strategy(self) -> LoadBalancingStrategy:
        return LoadBalancingStrategy(self._values["LLM_STRATEGY"])

    @property
    def cost_optimization(self) -> bool:
        # Cost tracking is meaningless for the zero-cost mock provider
        return self._values["LLM_COST_OPTIMIZATION"] and not self.skip_ai_request

    @property
    def max_cost_per_request_cents(self) -> float:
        return self._values["LLM_MAX_COST_PER_REQUEST_CENTS"]

    @property
    def health_check_on_start(self) -> bool:
        return self._values["LLM_HEALTH_CHECK_ON_START"]

    # Timeout settings
    @property
    def request_timeout(self) -> float:
        return self._values["REQUEST_TIMEOUT"]

    @property
    def max_retries(self) -> int:
        return self._values["MAX_RETRIES"]

    def display_values(self) -> dict[str, str]:
        """All settings as strings, with secrets masked."""
        shown: dict[str, str] = {}
        for name, spec in sorted(ConfigSchema.all_specs().items()):
            value = self._values[name]
            if spec.secret:
                shown[spec.name] = self.mask_secret(value)
            else:
                shown[spec.name] = "<not-set>" if value is None else str(value)
        return shown

    @staticmethod
    def mask_secret(value: str | None) -> str:
        if not value:
            return "<not-set>"
        return "sha256:" + hashlib.sha256(value.encode()).hexdigest()[:16] + "..."

    def provider_loader(self) -> ProviderConfigLoader:
        return ProviderConfigLoader(
            timeout=self.request_timeout,
            max_retries=self.max_retries,
            base_urls=self.base_urls,
        )

    def llm_config(self, loader: ProviderConfigLoader | None = None) -> LLMConfig:
        """Build the static router configuration from these settings.

        Raises:
            ConfigurationError: If no provider is enabled, or an explicitly
                configured default/fallback provider is not enabled.
        """
        loader = loader or self.provider_loader()
        providers = loader.load_all(offline=self.skip_ai_request)
        enabled = [p.name for p in sorted(providers, key=lambda p: p.priority) if p.enabled]

        selector = DefaultProviderSelector(
            self.default_provider,
            self.fallback_provider,
            default_source="env" if self.skip_ai_request else self._source("LLM_DEFAULT_PROVIDER"),
            fallback_source=self._source("LLM_FALLBACK_PROVIDER"),
        )
        default = selector.select_default(enabled)
        fallback = selector.select_fallback(enabled, default)

        return LLMConfig(
            providers=providers,
            default_provider=default,
            fallback_provider=fallback,
            strategy=self.strategy,
            cost_optimization=self.cost_optimization,
            max_cost_per_request_cents=self.max_cost_per_request_cents,
            health_check_on_start=self.health_check_on_start,
        )


_config: Config | None = None
_config_lock = threading.Lock()


def get_config() -> Config:
    """Return the process-wide Config, loading it on first use."""
    global _config
    if _config is None:
        with _config_lock:
            if _config is None:
                _config = Config()
    return _config


def reset_config() -> None:
    """Drop the cached Config so the next access reloads the environment.

    WARNING: Intended for the test suite; never call this in production code!
    """
    global _config
    with _config_lock:
        _config = None
