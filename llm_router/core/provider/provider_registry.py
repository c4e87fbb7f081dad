"""Provider registry for storing and querying provider instances."""

import threading

from llm_router.providers.base import LLMProvider


class ProviderRegistry:
    """Central registry of provider instances keyed by name.

    Responsibilities:
    - Store and retrieve providers
    - Replace a provider registered under an existing name
    - List registered providers

    Mutations are guarded by a lock so the registry can be shared between
    the event loop and worker threads.
    """

    def __init__(self) -> None:
        self._providers: dict[str, LLMProvider] = {}
        self._lock = threading.Lock()

    def register(self, provider: LLMProvider) -> LLMProvider | None:
        """Register a provider, returning the one it replaced, if any."""
        with self._lock:
            previous = self._providers.get(provider.name)
            self._providers[provider.name] = provider
            return previous

    def unregister(self, provider_name: str) -> LLMProvider | None:
        with self._lock:
            return self._providers.pop(provider_name, None)

    def get(self, provider_name: str) -> LLMProvider | None:
        with self._lock:
            return self._providers.get(provider_name)

    def list_all(self) -> dict[str, LLMProvider]:
        """Return a copy of all registered providers."""
        with self._lock:
            return self._providers.copy()
