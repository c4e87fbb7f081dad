"""Tests for the OpenAI and Anthropic providers against mocked vendor APIs."""

import json

import httpx
import pytest

from llm_router.core.catalog import ANTHROPIC_MODELS, OPENAI_MODELS
from llm_router.core.exceptions import ConfigurationError
from llm_router.core.provider.provider_factory import ProviderFactory
from llm_router.core.provider_config import ProviderConfig
from llm_router.core.types import AIOperation, GenerationRequest
from llm_router.providers import AnthropicProvider, LLMProvider, MockProvider, OpenAIProvider
from llm_router.providers.base import ProviderCallExecutor
from tests.fixtures.mock_http import create_anthropic_error, create_openai_error


async def _no_sleep(delay: float) -> None:
    return None


def _openai(max_retries: int = 0) -> OpenAIProvider:
    config = ProviderConfig(
        name="openai", api_key="test-openai-key", models=OPENAI_MODELS, max_retries=max_retries
    )
    return OpenAIProvider(config, executor=ProviderCallExecutor(config, sleep=_no_sleep))


def _anthropic(max_retries: int = 0) -> AnthropicProvider:
    config = ProviderConfig(
        name="anthropic",
        api_key="test-anthropic-key",
        models=ANTHROPIC_MODELS,
        max_retries=max_retries,
    )
    return AnthropicProvider(config, executor=ProviderCallExecutor(config, sleep=_no_sleep))


def _request(**kwargs) -> GenerationRequest:
    return GenerationRequest(
        system_prompt="You rewrite prompts.",
        user_prompt="Please summarize this report",
        operation=AIOperation.PROMPT_IMPROVE,
        **kwargs,
    )


@pytest.mark.unit
@pytest.mark.asyncio
class TestOpenAIProvider:
    async def test_successful_completion(self, mock_openai_api, openai_chat_completion):
        route = mock_openai_api.post("/v1/chat/completions").mock(
            return_value=httpx.Response(200, json=openai_chat_completion)
        )

        response = await _openai().generate(_request(model="gpt-4o-mini", max_tokens=200))

        assert response.success
        assert response.text == "Summarize the report in three bullet points."
        assert response.provider == "openai"
        assert response.model == "gpt-4o-mini"
        assert response.usage.input_tokens == 1000
        assert response.usage.output_tokens == 2000
        assert response.usage.cost_cents == pytest.approx(1.35)

        sent = route.calls.last.request
        assert sent.headers["authorization"] == "Bearer test-openai-key"
        body = json.loads(sent.content)
        assert body["model"] == "gpt-4o-mini"
        assert body["max_tokens"] == 200
        assert body["stream"] is False
        assert body["messages"][0] == {"role": "system", "content": "You rewrite prompts."}
        assert body["messages"][1]["role"] == "user"

    async def test_default_model_and_sampling(self, mock_openai_api, openai_chat_completion):
        route = mock_openai_api.post("/v1/chat/completions").mock(
            return_value=httpx.Response(200, json=openai_chat_completion)
        )

        await _openai().generate(_request())

        body = json.loads(route.calls.last.request.content)
        assert body["model"] == "gpt-4o-mini"
        assert body["max_tokens"] == 1000
        assert body["temperature"] == 0.7

    async def test_invalid_api_key_is_not_retried(self, mock_openai_api):
        route = mock_openai_api.post("/v1/chat/completions").mock(
            return_value=httpx.Response(
                401, json=create_openai_error("invalid_request_error", "Incorrect API key")
            )
        )

        response = await _openai(max_retries=3).generate(_request())

        assert not response.success
        assert response.error == "Invalid API key"
        assert route.call_count == 1

    async def test_server_error_is_retried(self, mock_openai_api, openai_chat_completion):
        route = mock_openai_api.post("/v1/chat/completions").mock(
            side_effect=[
                httpx.Response(500, json=create_openai_error("server_error", "boom")),
                httpx.Response(200, json=openai_chat_completion),
            ]
        )

        response = await _openai(max_retries=2).generate(_request())

        assert response.success
        assert response.attempts == 2
        assert route.call_count == 2

    async def test_usage_in_error_body_is_billed(self, mock_openai_api):
        error = create_openai_error("server_error", "generation aborted")
        error["usage"] = {"prompt_tokens": 1000, "completion_tokens": 200}
        mock_openai_api.post("/v1/chat/completions").mock(
            return_value=httpx.Response(500, json=error)
        )

        response = await _openai().generate(_request())

        assert not response.success
        assert response.usage.input_tokens == 1000
        assert response.usage.output_tokens == 200
        assert response.usage.cost_cents == pytest.approx(
            OPENAI_MODELS[0].estimate_cost(1000, 200)
        )

    async def test_error_without_usage_costs_nothing(self, mock_openai_api):
        mock_openai_api.post("/v1/chat/completions").mock(
            return_value=httpx.Response(500, json=create_openai_error("server_error", "boom"))
        )

        response = await _openai().generate(_request())

        assert not response.success
        assert response.usage.total_tokens == 0
        assert response.usage.cost_cents == 0.0

    async def test_rate_limit_exhausts_retries(self, mock_openai_api):
        route = mock_openai_api.post("/v1/chat/completions").mock(
            return_value=httpx.Response(
                429,
                headers={"retry-after": "1"},
                json=create_openai_error("rate_limit_exceeded", "Slow down"),
            )
        )

        response = await _openai(max_retries=1).generate(_request())

        assert not response.success
        assert response.error == "Rate limit exceeded"
        assert route.call_count == 2

    async def test_connection_error(self, mock_openai_api):
        mock_openai_api.post("/v1/chat/completions").mock(
            side_effect=httpx.ConnectError("connection refused")
        )

        response = await _openai().generate(_request())

        assert not response.success
        assert response.error == "Provider unreachable: ConnectError"

    async def test_empty_choices_is_a_failure(self, mock_openai_api):
        mock_openai_api.post("/v1/chat/completions").mock(
            return_value=httpx.Response(200, json={"choices": [], "usage": {}})
        )

        response = await _openai(max_retries=2).generate(_request())

        assert not response.success
        assert response.error == "Provider returned no choices"
        assert response.attempts == 1

    async def test_health_check(self, mock_openai_api, openai_chat_completion):
        route = mock_openai_api.post("/v1/chat/completions").mock(
            return_value=httpx.Response(200, json=openai_chat_completion)
        )

        status = await _openai().check_health()

        assert status.healthy
        assert status.provider == "openai"
        assert status.error is None
        assert json.loads(route.calls.last.request.content)["max_tokens"] == 10

    async def test_unhealthy_on_server_error(self, mock_openai_api):
        mock_openai_api.post("/v1/chat/completions").mock(return_value=httpx.Response(503))

        status = await _openai(max_retries=3).check_health()

        assert not status.healthy
        assert status.error == "Provider server error (HTTP 503)"


@pytest.mark.unit
@pytest.mark.asyncio
class TestAnthropicProvider:
    async def test_successful_message(self, mock_anthropic_api, anthropic_message_response):
        route = mock_anthropic_api.post("/v1/messages").mock(
            return_value=httpx.Response(200, json=anthropic_message_response)
        )

        response = await _anthropic().generate(_request())

        assert response.success
        assert response.text == "Summarize the report in three bullet points."
        assert response.model == "claude-3-haiku-20240307"
        # 1000 * 0.25/1K + 2000 * 1.25/1K
        assert response.usage.cost_cents == pytest.approx(2.75)

        sent = route.calls.last.request
        assert sent.headers["x-api-key"] == "test-anthropic-key"
        assert sent.headers["anthropic-version"] == "2023-06-01"
        body = json.loads(sent.content)
        assert body["system"] == "You rewrite prompts."
        assert body["messages"] == [{"role": "user", "content": "Please summarize this report"}]

    async def test_non_text_blocks_are_ignored(self, mock_anthropic_api):
        mock_anthropic_api.post("/v1/messages").mock(
            return_value=httpx.Response(
                200,
                json={
                    "content": [
                        {"type": "tool_use", "id": "t1", "name": "x", "input": {}},
                        {"type": "text", "text": "Hello"},
                    ],
                    "usage": {"input_tokens": 3, "output_tokens": 1},
                },
            )
        )

        response = await _anthropic().generate(_request())

        assert response.text == "Hello"

    async def test_missing_usage_is_estimated(self, mock_anthropic_api):
        mock_anthropic_api.post("/v1/messages").mock(
            return_value=httpx.Response(
                200, json={"content": [{"type": "text", "text": "abcdefgh"}]}
            )
        )

        response = await _anthropic().generate(_request())

        assert response.usage.output_tokens == 2
        assert response.usage.input_tokens == _request().estimated_input_tokens

    async def test_bad_request_is_not_retried(self, mock_anthropic_api):
        route = mock_anthropic_api.post("/v1/messages").mock(
            return_value=httpx.Response(
                400, json=create_anthropic_error("invalid_request_error", "max_tokens too large")
            )
        )

        response = await _anthropic(max_retries=3).generate(_request())

        assert response.error == "Request rejected by provider (HTTP 400)"
        assert route.call_count == 1

    async def test_forbidden_means_invalid_key(self, mock_anthropic_api):
        mock_anthropic_api.post("/v1/messages").mock(
            return_value=httpx.Response(
                403, json=create_anthropic_error("permission_error", "Forbidden")
            )
        )

        response = await _anthropic().generate(_request())

        assert response.error == "Invalid API key"

    async def test_custom_base_url(self):
        config = ProviderConfig(
            name="anthropic",
            api_key="k",
            base_url="https://gateway.example.com/",
            models=ANTHROPIC_MODELS,
        )
        assert AnthropicProvider(config).base_url == "https://gateway.example.com"


@pytest.mark.unit
class TestProviderFactory:
    def test_builds_each_kind(self):
        factory = ProviderFactory()
        openai = factory.create(
            ProviderConfig(name="openai", api_key="k", models=OPENAI_MODELS)
        )
        anthropic = factory.create(
            ProviderConfig(name="anthropic", api_key="k", models=ANTHROPIC_MODELS)
        )
        mock = factory(ProviderConfig(name="offline", kind="mock", models=OPENAI_MODELS))

        assert isinstance(openai, OpenAIProvider)
        assert isinstance(anthropic, AnthropicProvider)
        assert isinstance(mock, MockProvider)
        assert mock.name == "offline"
        for provider in (openai, anthropic, mock):
            assert isinstance(provider, LLMProvider)

    def test_unregistered_kind(self):
        factory = ProviderFactory()
        factory._builders.pop("anthropic")
        with pytest.raises(ConfigurationError, match="Unknown provider kind 'anthropic'"):
            factory.create(ProviderConfig(name="anthropic", api_key="k", models=ANTHROPIC_MODELS))

    def test_register_custom_builder(self):
        factory = ProviderFactory()
        built = []

        def builder(config):
            built.append(config.name)
            return MockProvider(config)

        factory.register("mock", builder)
        factory.create(ProviderConfig(name="offline", kind="mock", models=OPENAI_MODELS))
        assert built == ["offline"]
