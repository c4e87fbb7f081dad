"""Default and fallback provider selection with intelligent fallback."""

import logging

from llm_router.core.exceptions import ConfigurationError

logger = logging.getLogger(__name__)


class DefaultProviderSelector:
    """Resolves the default and fallback provider names.

    Responsibilities:
    - Validate configured default/fallback providers against enabled ones
    - Substitute the best enabled provider when a system default is unavailable
    - Raise helpful errors when a user-configured name is unavailable

    ``source`` is "system" when the name comes from schema defaults and
    "env" when the user configured it explicitly.
    """

    def __init__(
        self,
        default_provider: str,
        fallback_provider: str | None,
        *,
        default_source: str = "system",
        fallback_source: str = "system",
    ) -> None:
        self._default = default_provider
        self._fallback = fallback_provider or None
        self._default_source = default_source
        self._fallback_source = fallback_source

    def select_default(self, enabled_providers: list[str]) -> str:
        """Select the default provider from enabled provider names.

        Args:
            enabled_providers: Enabled provider names, most preferred first.

        Raises:
            ConfigurationError: If nothing is enabled, or a user-configured
                default is not enabled.
        """
        if self._default in enabled_providers:
            return self._default

        if not enabled_providers:
            raise ConfigurationError(
                "No providers configured. Please set at least one provider API key "
                "(e.g., OPENAI_API_KEY) or enable SKIP_AI_REQUEST for offline mode."
            )

        if self._default_source != "system":
            raise ConfigurationError(
                f"Default provider '{self._default}' is not enabled. "
                f"Enabled providers: {', '.join(enabled_providers)}"
            )

        selected = enabled_providers[0]
        logger.debug(f"Using '{selected}' as default provider (first available provider)")
        return selected

    def select_fallback(self, enabled_providers: list[str], default: str) -> str | None:
        """Select the fallback provider, or None when no distinct one exists."""
        if self._fallback is None:
            return None
        if self._fallback in enabled_providers:
            return self._fallback if self._fallback != default else None

        if self._fallback_source != "system":
            raise ConfigurationError(
                f"Fallback provider '{self._fallback}' is not enabled. "
                f"Enabled providers: {', '.join(enabled_providers) or 'none'}"
            )

        candidates = [name for name in enabled_providers if name != default]
        if not candidates:
            logger.debug("No fallback provider available")
            return None
        logger.debug(f"Using '{candidates[0]}' as fallback provider")
        return candidates[0]
