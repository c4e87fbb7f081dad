"""Anthropic messages API provider."""

from __future__ import annotations

from typing import Any

import httpx

from llm_router.core.catalog import ANTHROPIC_DEFAULT_BASE_URL
from llm_router.core.exceptions import ProviderUnavailable
from llm_router.core.provider_config import ProviderConfig
from llm_router.core.types import GenerationRequest, GenerationResponse, HealthStatus
from llm_router.providers.base import (
    DEFAULT_MAX_TOKENS,
    DEFAULT_TEMPERATURE,
    ProviderCallExecutor,
    VendorResult,
)

ANTHROPIC_VERSION = "2023-06-01"


class AnthropicProvider:
    """Client for Anthropic-compatible ``/v1/messages`` APIs."""

    def __init__(self, config: ProviderConfig, *, executor: ProviderCallExecutor | None = None):
        self.name = config.name
        self._config = config
        self.base_url = (config.base_url or ANTHROPIC_DEFAULT_BASE_URL).rstrip("/")
        self.executor = executor or ProviderCallExecutor(config)

        self.headers = {
            "x-api-key": config.api_key or "",
            "content-type": "application/json",
            "anthropic-version": ANTHROPIC_VERSION,
        }

    def get_config(self) -> ProviderConfig:
        return self._config

    @staticmethod
    def build_payload(request: GenerationRequest, model: str) -> dict[str, Any]:
        payload: dict[str, Any] = {
            "model": model,
            "max_tokens": request.max_tokens or DEFAULT_MAX_TOKENS,
            "temperature": (
                DEFAULT_TEMPERATURE if request.temperature is None else request.temperature
            ),
            "messages": [{"role": "user", "content": request.user_prompt}],
        }
        if request.system_prompt:
            payload["system"] = request.system_prompt
        return payload

    def parse_response(self, data: dict[str, Any]) -> VendorResult:
        blocks = data.get("content")
        if not isinstance(blocks, list):
            raise ProviderUnavailable(
                "Provider returned no content", provider=self.name, retryable=False
            )
        text = "".join(
            block.get("text", "") for block in blocks if block.get("type") == "text"
        )
        usage = data.get("usage") or {}
        return VendorResult(
            text=text.strip(),
            input_tokens=usage.get("input_tokens"),
            output_tokens=usage.get("output_tokens"),
        )

    async def _call(self, request: GenerationRequest, model: str) -> VendorResult:
        async with httpx.AsyncClient(timeout=self._config.timeout, headers=self.headers) as client:
            response = await client.post(
                f"{self.base_url}/v1/messages",
                json=self.build_payload(request, model),
            )
            response.raise_for_status()
            return self.parse_response(response.json())

    async def generate(self, request: GenerationRequest) -> GenerationResponse:
        return await self.executor.execute(request, self._call)

    async def check_health(self) -> HealthStatus:
        return await self.executor.probe(self._call)
