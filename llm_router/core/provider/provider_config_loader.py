"""Provider configuration loading from environment settings."""

import hashlib
import logging
import os
from dataclasses import dataclass

from llm_router.core.catalog import DEFAULT_BASE_URLS, MODELS_BY_KIND
from llm_router.core.provider_config import ProviderConfig

# Priority of each built-in provider (lower = preferred)
DEFAULT_PRIORITIES = {"mock": 0, "openai": 1, "anthropic": 2}


@dataclass
class ProviderLoadResult:
    """Result of loading a provider configuration."""

    name: str
    status: str  # "enabled", "disabled"
    message: str | None = None
    api_key_hash: str | None = None
    base_url: str | None = None


class ProviderConfigLoader:
    """Builds ProviderConfig entries from loaded settings.

    Responsibilities:
    - Resolve credential references ({KIND}_API_KEY) from the environment
    - Attach the built-in model catalog for each provider kind
    - Enable only providers whose credentials are present
    - Record a load result per provider for startup summaries
    """

    def __init__(
        self,
        *,
        timeout: float,
        max_retries: int,
        base_urls: dict[str, str] | None = None,
    ) -> None:
        self._logger = logging.getLogger(__name__)
        self._timeout = timeout
        self._max_retries = max_retries
        self._base_urls = {**DEFAULT_BASE_URLS, **(base_urls or {})}
        self._load_results: list[ProviderLoadResult] = []

    @staticmethod
    def credential_ref(kind: str) -> str:
        return f"{kind.upper()}_API_KEY"

    def resolve_credential(self, credential_ref: str) -> str | None:
        value = os.environ.get(credential_ref, "").strip()
        return value or None

    def load_provider(self, kind: str, *, force_disabled: bool = False) -> ProviderConfig:
        """Load a single vendor provider configuration.

        The provider is disabled when its credential is missing or
        ``force_disabled`` is set (offline mode).
        """
        credential_ref = self.credential_ref(kind)
        api_key = self.resolve_credential(credential_ref)
        enabled = api_key is not None and not force_disabled
        base_url = self._base_urls.get(kind)

        if enabled:
            self._load_results.append(
                ProviderLoadResult(
                    name=kind,
                    status="enabled",
                    api_key_hash=self._get_api_key_hash(api_key or ""),
                    base_url=base_url,
                )
            )
        else:
            reason = "offline mode" if force_disabled else f"{credential_ref} not set"
            self._logger.debug(f"Provider '{kind}' disabled: {reason}")
            self._load_results.append(
                ProviderLoadResult(name=kind, status="disabled", message=reason)
            )

        return ProviderConfig(
            name=kind,
            kind=kind,
            api_key=api_key,
            credential_ref=credential_ref,
            base_url=base_url,
            timeout=self._timeout,
            max_retries=self._max_retries,
            models=MODELS_BY_KIND[kind],
            priority=DEFAULT_PRIORITIES[kind],
            enabled=enabled,
        )

    def load_mock(self, *, enabled: bool) -> ProviderConfig:
        if enabled:
            self._load_results.append(ProviderLoadResult(name="mock", status="enabled"))
        return ProviderConfig(
            name="mock",
            kind="mock",
            timeout=5.0,
            max_retries=0,
            models=MODELS_BY_KIND["mock"],
            priority=DEFAULT_PRIORITIES["mock"],
            enabled=enabled,
        )

    def load_all(self, *, offline: bool) -> tuple[ProviderConfig, ...]:
        """Load every built-in provider.

        In offline mode only the mock provider is enabled.
        """
        self._load_results = []
        return (
            self.load_mock(enabled=offline),
            self.load_provider("openai", force_disabled=offline),
            self.load_provider("anthropic", force_disabled=offline),
        )

    def get_load_results(self) -> list[ProviderLoadResult]:
        return list(self._load_results)

    @staticmethod
    def _get_api_key_hash(api_key: str) -> str:
        """Return first 8 chars of sha256 hash."""
        return hashlib.sha256(api_key.encode()).hexdigest()[:8]
