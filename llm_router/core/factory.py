"""Manager construction, process-wide access and high-level prompt operations."""

from __future__ import annotations

import asyncio
import logging
import threading
from collections.abc import Callable
from enum import Enum
from typing import Any

from llm_router.core.exceptions import ConfigurationError, InvalidRequest
from llm_router.core.provider.provider_factory import ProviderFactory
from llm_router.core.provider_config import LLMConfig, ProviderConfig
from llm_router.core.provider_manager import ProviderManager
from llm_router.core.types import (
    AIOperation,
    GenerationRequest,
    GenerationResponse,
    ProviderStats,
    utcnow,
)
from llm_router.providers.base import LLMProvider

logger = logging.getLogger(__name__)


class ImproveMode(str, Enum):
    TIGHTEN = "tighten"
    EXPAND = "expand"


IMPROVE_SYSTEM_PROMPTS = {
    ImproveMode.TIGHTEN: (
        "You are an expert at making prompts more concise and focused. Your task is to "
        "tighten the given prompt by removing unnecessary words, making it more direct, "
        "and ensuring it gets straight to the point while maintaining all essential "
        "information. Return only the improved prompt without any explanations."
    ),
    ImproveMode.EXPAND: (
        "You are an expert at expanding prompts with more detail and context. Your task "
        "is to enhance the given prompt by adding relevant details, clarifying "
        "instructions, and providing more context to help get better results from AI "
        "models. Return only the improved prompt without any explanations."
    ),
}

GENERATE_SYSTEM_PROMPT = (
    "You are an expert at creating effective AI prompts. Create a well-structured prompt "
    "based on the user's description. The prompt should be clear, specific, and optimized "
    "for AI models. Return only the generated prompt without any explanations."
)

# Keeps background health sweeps referenced until they finish
_background_tasks: set[asyncio.Task[None]] = set()


def _schedule_initial_health_check(manager: ProviderManager) -> None:
    async def sweep() -> None:
        try:
            statuses = await manager.check_all_providers()
        except Exception:
            logger.exception("Failed to perform initial health check")
            return
        summary = ", ".join(
            f"{s.provider}={'healthy' if s.healthy else 'unhealthy'}" for s in statuses
        )
        logger.info(f"LLM provider health: {summary or 'no providers'}")

    try:
        loop = asyncio.get_running_loop()
    except RuntimeError:
        loop = None

    if loop is not None:
        task = loop.create_task(sweep())
        _background_tasks.add(task)
        task.add_done_callback(_background_tasks.discard)
    else:
        threading.Thread(
            target=asyncio.run, args=(sweep(),), name="llm-health-sweep", daemon=True
        ).start()


def create_manager(
    llm_config: LLMConfig,
    *,
    provider_factory: Callable[[ProviderConfig], LLMProvider] | None = None,
    health_check: bool | None = None,
) -> ProviderManager:
    """Build an independent manager from ``llm_config``.

    Only enabled providers are registered. The initial health sweep runs in
    the background and never blocks construction.

    Raises:
        ConfigurationError: If the default or fallback provider is not enabled,
            the strategy is unknown, or a provider kind has no implementation.
    """
    enabled = [p.name for p in llm_config.enabled_providers]
    if llm_config.default_provider not in enabled:
        raise ConfigurationError(
            f"Default provider '{llm_config.default_provider}' is not enabled. "
            f"Enabled providers: {', '.join(enabled) or 'none'}"
        )
    if llm_config.fallback_provider and llm_config.fallback_provider not in enabled:
        raise ConfigurationError(
            f"Fallback provider '{llm_config.fallback_provider}' is not enabled. "
            f"Enabled providers: {', '.join(enabled)}"
        )

    manager = ProviderManager(
        strategy=llm_config.strategy,
        cost_optimization=llm_config.cost_optimization,
        max_cost_per_request_cents=llm_config.max_cost_per_request_cents,
        default_provider=llm_config.default_provider,
        fallback_provider=llm_config.fallback_provider,
    )

    build = provider_factory or ProviderFactory()
    for provider_config in llm_config.enabled_providers:
        manager.add_provider(build(provider_config))

    if enabled == ["mock"]:
        logger.info("Mock AI provider enabled - no actual API calls will be made")
    else:
        logger.info(f"LLM providers enabled: {', '.join(enabled)}")

    if llm_config.health_check_on_start if health_check is None else health_check:
        _schedule_initial_health_check(manager)
    return manager


_manager: ProviderManager | None = None
_manager_lock = threading.Lock()


def get_manager(llm_config: LLMConfig | None = None) -> ProviderManager:
    """Return the process-wide manager, building it on first use.

    ``llm_config`` is only used by the call that builds the instance; when
    omitted, the configuration is loaded from the environment.
    """
    global _manager
    if _manager is None:
        with _manager_lock:
            # Double-check: another thread may have initialized while we waited
            if _manager is None:
                if llm_config is None:
                    from llm_router.core.config import get_config

                    llm_config = get_config().llm_config()
                _manager = create_manager(llm_config)
    return _manager


def reset_manager() -> None:
    """Drop the process-wide manager.

    WARNING: Intended for the test suite; never call this in production code!
    """
    global _manager
    with _manager_lock:
        _manager = None


async def _run(
    manager: ProviderManager, request: GenerationRequest, use_fallback: bool
) -> GenerationResponse:
    if use_fallback:
        return await manager.generate_with_fallback(request)
    return await manager.generate(request)


async def improve_prompt(
    prompt: str,
    mode: ImproveMode | str = ImproveMode.TIGHTEN,
    *,
    max_tokens: int = 1000,
    temperature: float = 0.7,
    model: str | None = None,
    use_fallback: bool = False,
    manager: ProviderManager | None = None,
) -> GenerationResponse:
    """Tighten or expand ``prompt``.

    Raises:
        InvalidRequest: If the prompt is blank or the mode is unknown.
        NoProviderAvailable, NoSuitableModel: If nothing can serve the request.
    """
    if not prompt or not prompt.strip():
        raise InvalidRequest("Prompt is required")
    try:
        improve_mode = ImproveMode(mode)
    except ValueError as e:
        raise InvalidRequest(f"Mode must be 'tighten' or 'expand' (got '{mode}')") from e

    request = GenerationRequest(
        system_prompt=IMPROVE_SYSTEM_PROMPTS[improve_mode],
        user_prompt=f'Please {improve_mode.value} this prompt:\n\n"{prompt}"',
        max_tokens=max_tokens,
        temperature=temperature,
        model=model,
        operation=AIOperation.PROMPT_IMPROVE,
    )
    try:
        return await _run(manager or get_manager(), request, use_fallback)
    except Exception:
        logger.exception("Failed to improve prompt")
        raise


async def generate_prompt(
    description: str,
    *,
    max_tokens: int = 500,
    temperature: float = 0.7,
    model: str | None = None,
    use_fallback: bool = False,
    manager: ProviderManager | None = None,
) -> GenerationResponse:
    """Write a prompt from a free-form ``description``."""
    if not description or not description.strip():
        raise InvalidRequest("Description is required")

    request = GenerationRequest(
        system_prompt=GENERATE_SYSTEM_PROMPT,
        user_prompt=f"Create a prompt for: {description}",
        max_tokens=max_tokens,
        temperature=temperature,
        model=model,
        operation=AIOperation.PROMPT_GENERATE,
    )
    try:
        return await _run(manager or get_manager(), request, use_fallback)
    except Exception:
        logger.exception("Failed to generate prompt")
        raise


async def get_provider_health(manager: ProviderManager | None = None) -> dict[str, Any]:
    """Probe every provider and return ``{health, stats, timestamp}``."""
    manager = manager or get_manager()
    health = await manager.check_all_providers()
    return {
        "health": health,
        "stats": manager.get_provider_stats(),
        "timestamp": utcnow(),
    }


def get_provider_stats(manager: ProviderManager | None = None) -> list[ProviderStats]:
    return (manager or get_manager()).get_provider_stats()
