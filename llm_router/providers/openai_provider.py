"""OpenAI chat completions provider."""

from __future__ import annotations

from typing import Any

import httpx

from llm_router.core.catalog import OPENAI_DEFAULT_BASE_URL
from llm_router.core.exceptions import ProviderUnavailable
from llm_router.core.provider_config import ProviderConfig
from llm_router.core.types import GenerationRequest, GenerationResponse, HealthStatus
from llm_router.providers.base import (
    DEFAULT_MAX_TOKENS,
    DEFAULT_TEMPERATURE,
    ProviderCallExecutor,
    VendorResult,
)


class OpenAIProvider:
    """Client for the OpenAI ``/chat/completions`` API."""

    def __init__(self, config: ProviderConfig, *, executor: ProviderCallExecutor | None = None):
        self.name = config.name
        self._config = config
        self.base_url = (config.base_url or OPENAI_DEFAULT_BASE_URL).rstrip("/")
        self.executor = executor or ProviderCallExecutor(config)

    def get_config(self) -> ProviderConfig:
        return self._config

    def _headers(self) -> dict[str, str]:
        return {
            "Authorization": f"Bearer {self._config.api_key}",
            "Content-Type": "application/json",
        }

    @staticmethod
    def build_payload(request: GenerationRequest, model: str) -> dict[str, Any]:
        messages = []
        if request.system_prompt:
            messages.append({"role": "system", "content": request.system_prompt})
        messages.append({"role": "user", "content": request.user_prompt})
        return {
            "model": model,
            "messages": messages,
            "max_tokens": request.max_tokens or DEFAULT_MAX_TOKENS,
            "temperature": (
                DEFAULT_TEMPERATURE if request.temperature is None else request.temperature
            ),
            "stream": False,
        }

    def parse_response(self, data: dict[str, Any]) -> VendorResult:
        choices = data.get("choices") or []
        if not choices:
            raise ProviderUnavailable(
                "Provider returned no choices", provider=self.name, retryable=False
            )
        content = (choices[0].get("message") or {}).get("content") or ""
        usage = data.get("usage") or {}
        return VendorResult(
            text=content.strip(),
            input_tokens=usage.get("prompt_tokens"),
            output_tokens=usage.get("completion_tokens"),
        )

    async def _call(self, request: GenerationRequest, model: str) -> VendorResult:
        async with httpx.AsyncClient(timeout=self._config.timeout) as client:
            response = await client.post(
                f"{self.base_url}/chat/completions",
                headers=self._headers(),
                json=self.build_payload(request, model),
            )
            response.raise_for_status()
            return self.parse_response(response.json())

    async def generate(self, request: GenerationRequest) -> GenerationResponse:
        return await self.executor.execute(request, self._call)

    async def check_health(self) -> HealthStatus:
        return await self.executor.probe(self._call)
