"""Tests for the shared call executor: retries, timeouts, pricing, latency."""

import asyncio

import httpx
import pytest

from llm_router.core.exceptions import InvalidRequest, ProviderUnavailable, RateLimited
from llm_router.core.types import AIOperation, GenerationRequest, TokenUsage
from llm_router.providers.base import ProviderCallExecutor, VendorResult, classify_http_error
from tests.fixtures.providers import make_model, make_provider_config


def _request(**kwargs) -> GenerationRequest:
    return GenerationRequest(system_prompt="You are helpful.", user_prompt="Hello there", **kwargs)


class RecordingSleep:
    def __init__(self):
        self.delays: list[float] = []

    async def __call__(self, delay: float) -> None:
        self.delays.append(delay)


class ScriptedAttempts:
    """Attempt function that raises or returns the scripted outcomes in order."""

    def __init__(self, *outcomes):
        self.outcomes = list(outcomes)
        self.models: list[str] = []

    async def __call__(self, request: GenerationRequest, model: str) -> VendorResult:
        self.models.append(model)
        outcome = self.outcomes.pop(0)
        if isinstance(outcome, BaseException):
            raise outcome
        return outcome


def _executor(max_retries=3, timeout=5.0, models=None):
    config = make_provider_config(
        "vendor",
        models=models
        or (
            make_model("small", "vendor", input_cost=0.15, output_cost=0.6),
            make_model("large", "vendor", input_cost=2.5, output_cost=10),
        ),
        max_retries=max_retries,
        timeout=timeout,
    )
    sleep = RecordingSleep()
    return ProviderCallExecutor(config, backoff_base=0.5, backoff_max=4.0, sleep=sleep), sleep


@pytest.mark.unit
@pytest.mark.asyncio
class TestRetryPolicy:
    async def test_retryable_failures_are_retried_until_success(self):
        executor, sleep = _executor(max_retries=3)
        attempts = ScriptedAttempts(
            ProviderUnavailable("Provider server error (HTTP 503)"),
            ProviderUnavailable("Provider server error (HTTP 502)"),
            VendorResult("done", 5, 7),
        )

        response = await executor.execute(_request(), attempts)

        assert response.success
        assert response.text == "done"
        assert response.attempts == 3
        assert sleep.delays == [0.5, 1.0]

    async def test_non_retryable_failure_fails_immediately(self):
        executor, sleep = _executor(max_retries=3)
        attempts = ScriptedAttempts(InvalidRequest("Request rejected by provider (HTTP 400)"))

        response = await executor.execute(_request(), attempts)

        assert not response.success
        assert response.error == "Request rejected by provider (HTTP 400)"
        assert response.attempts == 1
        assert sleep.delays == []

    async def test_retries_are_bounded(self):
        executor, sleep = _executor(max_retries=2)
        attempts = ScriptedAttempts(*[ProviderUnavailable("down")] * 3)

        response = await executor.execute(_request(), attempts)

        assert not response.success
        assert response.attempts == 3
        assert len(sleep.delays) == 2
        assert response.usage.total_tokens == 0

    async def test_backoff_is_capped_and_honours_retry_after(self):
        executor, sleep = _executor(max_retries=4)
        attempts = ScriptedAttempts(
            RateLimited(retry_after=3.0),
            RateLimited(retry_after=60.0),
            ProviderUnavailable("down"),
            ProviderUnavailable("down"),
            VendorResult("ok"),
        )

        await executor.execute(_request(), attempts)

        assert sleep.delays == [3.0, 4.0, 2.0, 4.0]

    async def test_unexpected_exception_is_normalized_without_retry(self):
        executor, sleep = _executor(max_retries=3)
        attempts = ScriptedAttempts(KeyError("choices"))

        response = await executor.execute(_request(), attempts)

        assert not response.success
        assert response.error == "Unexpected provider error: KeyError"
        assert response.attempts == 1

    async def test_failure_keeps_usage_reported_by_vendor(self):
        executor, _ = _executor(max_retries=0)
        attempts = ScriptedAttempts(
            ProviderUnavailable("cut off", usage=TokenUsage(1000, 1000), retryable=False)
        )

        response = await executor.execute(_request(model="small"), attempts)

        assert response.usage.total_tokens == 2000
        assert response.usage.cost_cents == pytest.approx(0.75)


@pytest.mark.unit
@pytest.mark.asyncio
class TestTimeouts:
    async def test_slow_attempt_times_out_and_is_retried(self):
        executor, sleep = _executor(max_retries=1, timeout=0.05)

        calls = 0

        async def attempt(request, model):
            nonlocal calls
            calls += 1
            if calls == 1:
                await asyncio.sleep(1)
            return VendorResult("late but fine")

        response = await executor.execute(_request(), attempt)

        assert response.success
        assert response.attempts == 2
        assert len(sleep.delays) == 1

    async def test_httpx_timeout_maps_to_timeout_error(self):
        executor, _ = _executor(max_retries=0)
        attempts = ScriptedAttempts(httpx.ReadTimeout("read timed out"))

        response = await executor.execute(_request(), attempts)

        assert response.error == "Request timeout"


@pytest.mark.unit
@pytest.mark.asyncio
class TestPricing:
    async def test_cost_uses_model_actually_used(self):
        executor, _ = _executor()
        attempts = ScriptedAttempts(VendorResult("ok", 1000, 2000))

        response = await executor.execute(_request(model="large"), attempts)

        assert attempts.models == ["large"]
        assert response.usage.cost_cents == pytest.approx(22.5)
        assert response.usage.total_tokens == 3000
        assert response.warning is None

    async def test_default_model_is_first_configured(self):
        executor, _ = _executor()
        attempts = ScriptedAttempts(VendorResult("ok", 1000, 0))

        response = await executor.execute(_request(), attempts)

        assert response.model == "small"
        assert response.usage.cost_cents == pytest.approx(0.15)

    async def test_unknown_model_priced_with_cheapest_rates(self, caplog):
        executor, _ = _executor()
        attempts = ScriptedAttempts(VendorResult("ok", 1000, 1000))

        response = await executor.execute(_request(model="brand-new"), attempts)

        assert response.success
        assert response.usage.cost_cents == pytest.approx(0.75)
        assert "Unknown model 'brand-new'" in response.warning
        assert "Unknown model 'brand-new'" in caplog.text

    async def test_missing_usage_is_estimated(self):
        executor, _ = _executor()
        attempts = ScriptedAttempts(VendorResult("x" * 9))

        response = await executor.execute(_request(), attempts)

        request = _request()
        assert response.usage.input_tokens == request.estimated_input_tokens
        assert response.usage.output_tokens == 3

    async def test_latency_covers_retries(self):
        executor, _ = _executor(max_retries=1)
        executor._sleep = asyncio.sleep
        executor.backoff_base = 0.05
        attempts = ScriptedAttempts(ProviderUnavailable("down"), VendorResult("ok"))

        response = await executor.execute(_request(), attempts)

        assert response.response_time_ms >= 40


@pytest.mark.unit
@pytest.mark.asyncio
async def test_probe_is_single_attempt():
    executor, sleep = _executor(max_retries=3)
    attempts = ScriptedAttempts(ProviderUnavailable("down"), VendorResult("OK"))

    status = await executor.probe(attempts)

    assert status.provider == "vendor"
    assert status.healthy is False
    assert status.error == "down"
    assert sleep.delays == []
    assert len(attempts.models) == 1


@pytest.mark.unit
@pytest.mark.parametrize(
    ("status", "error_type", "retryable"),
    [
        (401, ProviderUnavailable, False),
        (403, ProviderUnavailable, False),
        (429, RateLimited, True),
        (400, InvalidRequest, False),
        (422, InvalidRequest, False),
        (500, ProviderUnavailable, True),
        (503, ProviderUnavailable, True),
    ],
)
def test_classify_http_error(status, error_type, retryable):
    response = httpx.Response(status, headers={"retry-after": "7"})
    error = classify_http_error(response, provider="openai")
    assert isinstance(error, error_type)
    assert error.retryable is retryable
    assert error.provider == "openai"
    if status == 429:
        assert error.retry_after == 7.0
    if status == 401:
        assert error.message == "Invalid API key"


@pytest.mark.unit
def test_health_check_operation_is_never_recommended():
    config = make_provider_config("vendor")
    assert not config.supports(AIOperation.HEALTH_CHECK)


@pytest.mark.unit
@pytest.mark.parametrize(
    ("body", "expected"),
    [
        ({"usage": {"prompt_tokens": 12, "completion_tokens": 3}}, TokenUsage(12, 3)),
        ({"usage": {"input_tokens": 40}}, TokenUsage(40, 0)),
        ({"error": {"message": "boom"}}, None),
        ([1, 2], None),
    ],
)
def test_classify_http_error_keeps_reported_usage(body, expected):
    error = classify_http_error(httpx.Response(500, json=body), provider="anthropic")
    assert error.usage == expected


@pytest.mark.unit
def test_classify_http_error_ignores_non_json_body():
    error = classify_http_error(httpx.Response(502, text="<html>bad gateway</html>"), provider="x")
    assert error.usage is None
