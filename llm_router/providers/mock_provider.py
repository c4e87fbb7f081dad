"""Offline provider backed by the deterministic mock generator."""

from __future__ import annotations

import asyncio
import logging

from llm_router.core.exceptions import ProviderError
from llm_router.core.provider_config import ProviderConfig
from llm_router.core.types import GenerationRequest, GenerationResponse, HealthStatus
from llm_router.providers import mock_generator
from llm_router.providers.base import ProviderCallExecutor, VendorResult

logger = logging.getLogger(__name__)


class MockProvider:
    """Provider that never touches the network.

    ``latency`` simulates vendor delay in seconds. ``failure``, when set, is
    raised by every attempt so outage handling can be exercised offline.
    """

    def __init__(
        self,
        config: ProviderConfig,
        *,
        executor: ProviderCallExecutor | None = None,
        latency: float = 0.0,
        failure: ProviderError | None = None,
        seed: int | None = None,
    ):
        self.name = config.name
        self._config = config
        self.executor = executor or ProviderCallExecutor(config)
        self.latency = latency
        self.failure = failure
        self.seed = seed
        self.calls = 0

    def get_config(self) -> ProviderConfig:
        return self._config

    async def _call(self, request: GenerationRequest, model: str) -> VendorResult:
        self.calls += 1
        if self.latency:
            await asyncio.sleep(self.latency)
        if self.failure is not None:
            raise self.failure

        output = mock_generator.generate(
            request.operation,
            request.user_prompt,
            system_prompt=request.system_prompt,
            seed=self.seed,
        )
        logger.debug(f"Mock reply for {request.operation or 'generic'} request on '{model}'")
        return VendorResult(
            text=output.text,
            input_tokens=output.usage.input_tokens,
            output_tokens=output.usage.output_tokens,
        )

    async def generate(self, request: GenerationRequest) -> GenerationResponse:
        return await self.executor.execute(request, self._call)

    async def check_health(self) -> HealthStatus:
        return await self.executor.probe(self._call)
