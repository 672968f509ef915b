"""Tests for the query gateway.

Covers:
  - Gateway types and DTOs
  - OpenRouter client (mocked HTTP) and error classification
  - Retry policy with exponential backoff
  - Development response cache
  - Query dispatcher (batching, fallback, caching)
"""

from __future__ import annotations

import asyncio
from unittest.mock import AsyncMock, patch

import httpx
import pytest

from llm_fingerprint.gateway.cache import ResponseCache
from llm_fingerprint.gateway.client import (
    BaseModelClient,
    OpenRouterClient,
    PermanentModelError,
    TransientModelError,
    classify_status,
)
from llm_fingerprint.gateway.dispatcher import QueryDispatcher
from llm_fingerprint.gateway.mock_responses import MockResponseGenerator
from llm_fingerprint.gateway.retry import RetryPolicy, call_with_retry
from llm_fingerprint.gateway.types import (
    DEFAULT_MAX_TOKENS,
    DEFAULT_TEMPERATURES,
    LlmQuery,
    PromptType,
    RawResponse,
)


def _query(model="openai/gpt-4-turbo", prompt="What do you know about Acme Dental?", prompt_type=PromptType.FACTUAL):
    return LlmQuery(model=model, prompt=prompt, prompt_type=prompt_type)


# ==========================================================================
# Test: Gateway Types
# ==========================================================================


class TestGatewayTypes:
    def test_query_defaults(self):
        query = LlmQuery()
        assert query.prompt_type == PromptType.FACTUAL
        assert query.max_tokens == DEFAULT_MAX_TOKENS == 2000

    def test_default_temperatures(self):
        assert DEFAULT_TEMPERATURES[PromptType.FACTUAL] == 0.3
        assert DEFAULT_TEMPERATURES[PromptType.OPINION] == 0.5
        assert DEFAULT_TEMPERATURES[PromptType.RECOMMENDATION] == 0.7

    def test_query_is_immutable(self):
        query = _query()
        with pytest.raises(AttributeError):
            query.prompt = "changed"

    def test_raw_response_to_dict(self):
        resp = RawResponse(content="Hi", tokens_used=12, model="m", request_id="r1", processing_time_ms=5)
        d = resp.to_dict()
        assert d["content"] == "Hi"
        assert d["tokens_used"] == 12
        assert d["request_id"] == "r1"
        assert d["cached"] is False
        assert d["is_fallback"] is False


# ==========================================================================
# Test: OpenRouter client
# ==========================================================================


def _make_httpx_response(status_code: int, json_data: dict | None = None, text: str = "") -> httpx.Response:
    request = httpx.Request("POST", "https://openrouter.ai/api/v1/chat/completions")
    if json_data is not None:
        return httpx.Response(status_code, json=json_data, request=request)
    return httpx.Response(status_code, text=text, request=request)


def _mock_completion(text="Acme Dental is a reputable practice.", model="openai/gpt-4-turbo"):
    return _make_httpx_response(
        200,
        json_data={
            "id": "gen-123",
            "model": model,
            "choices": [{"message": {"role": "assistant", "content": text}, "finish_reason": "stop"}],
            "usage": {"prompt_tokens": 10, "completion_tokens": 20, "total_tokens": 30},
        },
    )


def _patched_client(post_result=None, post_side_effect=None):
    mock_client = AsyncMock()
    if post_side_effect is not None:
        mock_client.post.side_effect = post_side_effect
    else:
        mock_client.post.return_value = post_result
    mock_client.__aenter__ = AsyncMock(return_value=mock_client)
    mock_client.__aexit__ = AsyncMock(return_value=None)
    return mock_client


class TestErrorClassification:
    @pytest.mark.parametrize("status", [408, 429, 500, 502, 503, 504])
    def test_transient_statuses(self, status):
        assert isinstance(classify_status(status, "x"), TransientModelError)

    @pytest.mark.parametrize("status", [400, 401, 403, 404, 422])
    def test_permanent_statuses(self, status):
        err = classify_status(status, "x")
        assert isinstance(err, PermanentModelError)
        assert err.status_code == status


class TestOpenRouterClient:
    def test_is_configured(self):
        assert OpenRouterClient(api_key="sk-or-test").is_configured
        assert not OpenRouterClient(api_key="").is_configured

    @pytest.mark.asyncio
    async def test_success(self):
        client = OpenRouterClient(api_key="sk-or-test")

        with patch("llm_fingerprint.gateway.client.httpx.AsyncClient") as mock_client_cls:
            mock_client = _patched_client(_mock_completion())
            mock_client_cls.return_value = mock_client

            resp = await client.call("openai/gpt-4-turbo", "Tell me about Acme", temperature=0.3, max_tokens=500)

        assert resp.content == "Acme Dental is a reputable practice."
        assert resp.tokens_used == 30
        assert resp.model == "openai/gpt-4-turbo"
        assert resp.request_id == "gen-123"
        assert resp.cached is False
        assert resp.is_fallback is False

        kwargs = mock_client.post.call_args.kwargs
        assert kwargs["headers"]["Authorization"] == "Bearer sk-or-test"
        assert "HTTP-Referer" in kwargs["headers"]
        assert "X-Title" in kwargs["headers"]
        assert kwargs["json"]["temperature"] == 0.3
        assert kwargs["json"]["max_tokens"] == 500
        assert kwargs["json"]["messages"] == [{"role": "user", "content": "Tell me about Acme"}]

    @pytest.mark.asyncio
    async def test_rate_limited_is_transient(self):
        client = OpenRouterClient(api_key="sk-or-test")

        with patch("llm_fingerprint.gateway.client.httpx.AsyncClient") as mock_client_cls:
            mock_client_cls.return_value = _patched_client(_make_httpx_response(429, text="rate limited"))

            with pytest.raises(TransientModelError) as exc_info:
                await client.call("openai/gpt-4-turbo", "Hello")

        assert exc_info.value.status_code == 429

    @pytest.mark.asyncio
    async def test_server_error_is_transient(self):
        client = OpenRouterClient(api_key="sk-or-test")

        with patch("llm_fingerprint.gateway.client.httpx.AsyncClient") as mock_client_cls:
            mock_client_cls.return_value = _patched_client(_make_httpx_response(503, text="unavailable"))

            with pytest.raises(TransientModelError):
                await client.call("openai/gpt-4-turbo", "Hello")

    @pytest.mark.asyncio
    async def test_unauthorized_is_permanent(self):
        client = OpenRouterClient(api_key="bad-key")

        with patch("llm_fingerprint.gateway.client.httpx.AsyncClient") as mock_client_cls:
            mock_client_cls.return_value = _patched_client(_make_httpx_response(401, text="invalid key"))

            with pytest.raises(PermanentModelError) as exc_info:
                await client.call("openai/gpt-4-turbo", "Hello")

        assert "401" in str(exc_info.value)

    @pytest.mark.asyncio
    async def test_timeout_is_transient(self):
        client = OpenRouterClient(api_key="sk-or-test", timeout=5.0)

        with patch("llm_fingerprint.gateway.client.httpx.AsyncClient") as mock_client_cls:
            mock_client_cls.return_value = _patched_client(post_side_effect=httpx.TimeoutException("timeout"))

            with pytest.raises(TransientModelError):
                await client.call("openai/gpt-4-turbo", "Hello")

    @pytest.mark.asyncio
    async def test_connection_error_is_transient(self):
        client = OpenRouterClient(api_key="sk-or-test")

        with patch("llm_fingerprint.gateway.client.httpx.AsyncClient") as mock_client_cls:
            mock_client_cls.return_value = _patched_client(post_side_effect=httpx.ConnectError("refused"))

            with pytest.raises(TransientModelError):
                await client.call("openai/gpt-4-turbo", "Hello")

    @pytest.mark.asyncio
    async def test_empty_choices_is_transient(self):
        client = OpenRouterClient(api_key="sk-or-test")

        with patch("llm_fingerprint.gateway.client.httpx.AsyncClient") as mock_client_cls:
            mock_client_cls.return_value = _patched_client(
                _make_httpx_response(200, json_data={"choices": [], "model": "x"})
            )

            with pytest.raises(TransientModelError):
                await client.call("openai/gpt-4-turbo", "Hello")


# ==========================================================================
# Test: Retry policy
# ==========================================================================


class TestRetryPolicy:
    def test_backoff_doubles(self):
        policy = RetryPolicy(base_delay=1.0, max_delay=30.0)
        assert policy.backoff_delay(0) == 1.0
        assert policy.backoff_delay(1) == 2.0
        assert policy.backoff_delay(2) == 4.0

    def test_backoff_capped(self):
        policy = RetryPolicy(base_delay=1.0, max_delay=30.0)
        assert policy.backoff_delay(10) == 30.0

    @pytest.mark.asyncio
    async def test_success_first_try(self, recorded_sleep):
        operation = AsyncMock(return_value="ok")
        result = await call_with_retry(operation, RetryPolicy(), sleep=recorded_sleep)
        assert result == "ok"
        assert operation.await_count == 1
        assert recorded_sleep.delays == []

    @pytest.mark.asyncio
    async def test_transient_then_success(self, recorded_sleep):
        operation = AsyncMock(side_effect=[TransientModelError("503", 503), TransientModelError("503", 503), "ok"])
        retries = []

        result = await call_with_retry(
            operation,
            RetryPolicy(max_attempts=3),
            sleep=recorded_sleep,
            on_retry=lambda attempt, error: retries.append(attempt),
        )

        assert result == "ok"
        assert operation.await_count == 3
        assert recorded_sleep.delays == [1.0, 2.0]
        assert retries == [0, 1]

    @pytest.mark.asyncio
    async def test_exhausted_raises_last_error(self, recorded_sleep):
        errors = [TransientModelError(f"fail {i}", 500) for i in range(3)]
        operation = AsyncMock(side_effect=errors)

        with pytest.raises(TransientModelError) as exc_info:
            await call_with_retry(operation, RetryPolicy(max_attempts=3), sleep=recorded_sleep)

        assert exc_info.value is errors[-1]
        assert operation.await_count == 3
        assert recorded_sleep.delays == [1.0, 2.0]  # no sleep after the final attempt

    @pytest.mark.asyncio
    async def test_permanent_not_retried(self, recorded_sleep):
        operation = AsyncMock(side_effect=PermanentModelError("401", 401))

        with pytest.raises(PermanentModelError):
            await call_with_retry(operation, RetryPolicy(max_attempts=5), sleep=recorded_sleep)

        assert operation.await_count == 1
        assert recorded_sleep.delays == []

    @pytest.mark.asyncio
    async def test_zero_attempts(self, recorded_sleep):
        operation = AsyncMock(return_value="ok")

        with pytest.raises(TransientModelError):
            await call_with_retry(operation, RetryPolicy(max_attempts=0), sleep=recorded_sleep)

        operation.assert_not_awaited()


# ==========================================================================
# Test: Response cache
# ==========================================================================


class TestResponseCache:
    @pytest.mark.asyncio
    async def test_miss_then_hit(self, manual_clock):
        cache = ResponseCache(ttl_seconds=60, clock=manual_clock)
        resp = RawResponse(content="cached text", model="m")

        assert await cache.get("m", "prompt") is None
        await cache.set("m", "prompt", resp)
        assert await cache.get("m", "prompt") == resp
        assert len(cache) == 1

    @pytest.mark.asyncio
    async def test_key_includes_model(self, manual_clock):
        cache = ResponseCache(ttl_seconds=60, clock=manual_clock)
        await cache.set("model-a", "prompt", RawResponse(content="a"))
        assert await cache.get("model-b", "prompt") is None

    @pytest.mark.asyncio
    async def test_expiry(self, manual_clock):
        cache = ResponseCache(ttl_seconds=60, clock=manual_clock)
        await cache.set("m", "prompt", RawResponse(content="x"))

        manual_clock.advance(59)
        assert await cache.get("m", "prompt") is not None

        manual_clock.advance(2)
        assert await cache.get("m", "prompt") is None
        assert len(cache) == 0

    @pytest.mark.asyncio
    async def test_purge_and_clear(self, manual_clock):
        cache = ResponseCache(ttl_seconds=60, clock=manual_clock)
        await cache.set("m", "old", RawResponse(content="x"))
        manual_clock.advance(30)
        await cache.set("m", "new", RawResponse(content="y"))
        manual_clock.advance(40)

        assert await cache.purge_expired() == 1
        assert len(cache) == 1
        assert await cache.clear() == 1
        assert len(cache) == 0

    @pytest.mark.asyncio
    async def test_writes_drop_expired_entries(self, manual_clock):
        cache = ResponseCache(ttl_seconds=10, clock=manual_clock)
        for i in range(100):
            await cache.set("m", f"prompt {i}", RawResponse(content=str(i)))
            manual_clock.advance(20)

        assert len(cache) == 1
        assert await cache.get("m", "prompt 99") is None

    def test_make_key_is_md5_hex(self):
        key = ResponseCache.make_key("m", "p")
        assert len(key) == 32
        assert key == ResponseCache.make_key("m", "p")
        assert key != ResponseCache.make_key("m", "q")


# ==========================================================================
# Test: Query dispatcher
# ==========================================================================


class TestQueryDispatcher:
    @pytest.mark.asyncio
    async def test_empty_input(self, fake_client_cls, recorded_sleep):
        dispatcher = QueryDispatcher(client=fake_client_cls(), sleep=recorded_sleep)
        assert await dispatcher.dispatch([]) == []

    @pytest.mark.asyncio
    async def test_same_length_and_order(self, fake_client_cls, recorded_sleep):
        models = [f"vendor/model-{i}" for i in range(7)]
        dispatcher = QueryDispatcher(client=fake_client_cls(), sleep=recorded_sleep)

        responses = await dispatcher.dispatch([_query(model=m) for m in models])

        assert [r.content for r in responses] == [f"{m} says hello" for m in models]
        assert all(not r.is_fallback for r in responses)

    @pytest.mark.asyncio
    async def test_cooldown_between_batches_only(self, fake_client_cls, recorded_sleep):
        dispatcher = QueryDispatcher(
            client=fake_client_cls(), batch_size=5, batch_cooldown=0.1, sleep=recorded_sleep
        )

        await dispatcher.dispatch([_query(model=f"m{i}") for i in range(12)])

        assert recorded_sleep.delays == [0.1, 0.1]  # 3 batches → 2 cooldowns

    @pytest.mark.asyncio
    async def test_peak_concurrency_bounded_by_batch_size(self, recorded_sleep):
        class SlowClient(BaseModelClient):
            def __init__(self):
                self.in_flight = 0
                self.peak = 0

            @property
            def is_configured(self):
                return True

            async def call(self, model, prompt, *, temperature=0.7, max_tokens=2000):
                self.in_flight += 1
                self.peak = max(self.peak, self.in_flight)
                for _ in range(3):
                    await asyncio.sleep(0)
                self.in_flight -= 1
                return RawResponse(content="ok", model=model)

        client = SlowClient()
        dispatcher = QueryDispatcher(client=client, batch_size=4, sleep=recorded_sleep)

        responses = await dispatcher.dispatch([_query(model=f"m{i}") for i in range(10)])

        assert len(responses) == 10
        assert client.peak == 4

    @pytest.mark.asyncio
    async def test_transient_failure_retried(self, fake_client_cls, recorded_sleep):
        client = fake_client_cls({"m": [TransientModelError("503", 503), "recovered"]})
        dispatcher = QueryDispatcher(client=client, sleep=recorded_sleep)

        [resp] = await dispatcher.dispatch([_query(model="m")])

        assert resp.content == "recovered"
        assert resp.is_fallback is False
        assert len(client.calls) == 2
        assert recorded_sleep.delays == [1.0]

    @pytest.mark.asyncio
    async def test_retries_exhausted_uses_mock(self, fake_client_cls, recorded_sleep):
        client = fake_client_cls({"m": [TransientModelError("503", 503)] * 3})
        dispatcher = QueryDispatcher(client=client, retry_policy=RetryPolicy(max_attempts=3), sleep=recorded_sleep)

        [resp] = await dispatcher.dispatch([_query(model="m")])

        assert resp.is_fallback is True
        assert resp.model == "m"
        assert "Acme Dental" in resp.content
        assert len(client.calls) == 3

    @pytest.mark.asyncio
    async def test_permanent_failure_uses_mock_without_retry(self, fake_client_cls, recorded_sleep):
        client = fake_client_cls({"m": [PermanentModelError("404 model not found", 404)]})
        dispatcher = QueryDispatcher(client=client, sleep=recorded_sleep)

        [resp] = await dispatcher.dispatch([_query(model="m")])

        assert resp.is_fallback is True
        assert len(client.calls) == 1
        assert recorded_sleep.delays == []

    @pytest.mark.asyncio
    async def test_unexpected_error_uses_mock(self, fake_client_cls, recorded_sleep):
        client = fake_client_cls({"m": [RuntimeError("parser blew up")]})
        dispatcher = QueryDispatcher(client=client, sleep=recorded_sleep)

        responses = await dispatcher.dispatch([_query(model="m"), _query(model="other")])

        assert responses[0].is_fallback is True
        assert responses[1].content == "other says hello"

    @pytest.mark.asyncio
    async def test_unconfigured_client_never_called(self, fake_client_cls, recorded_sleep):
        client = fake_client_cls(configured=False)
        dispatcher = QueryDispatcher(client=client, sleep=recorded_sleep)

        responses = await dispatcher.dispatch([_query(model=f"m{i}") for i in range(3)])

        assert client.calls == []
        assert all(r.is_fallback for r in responses)

    @pytest.mark.asyncio
    async def test_no_client_uses_mock(self, recorded_sleep):
        dispatcher = QueryDispatcher(client=None, sleep=recorded_sleep)
        [resp] = await dispatcher.dispatch([_query()])
        assert resp.is_fallback is True

    @pytest.mark.asyncio
    async def test_passes_query_options(self, fake_client_cls, recorded_sleep):
        client = fake_client_cls()
        dispatcher = QueryDispatcher(client=client, sleep=recorded_sleep)

        await dispatcher.dispatch([LlmQuery(model="m", prompt="p", temperature=0.3, max_tokens=123)])

        assert client.calls == [{"model": "m", "prompt": "p", "temperature": 0.3, "max_tokens": 123}]

    @pytest.mark.asyncio
    async def test_cache_hit_skips_client(self, fake_client_cls, recorded_sleep):
        client = fake_client_cls()
        dispatcher = QueryDispatcher(client=client, cache=ResponseCache(), sleep=recorded_sleep)
        queries = [_query(model="m1"), _query(model="m2")]

        first = await dispatcher.dispatch(queries)
        second = await dispatcher.dispatch(queries)

        assert len(client.calls) == 2
        assert all(not r.cached for r in first)
        assert all(r.cached for r in second)
        assert [r.content for r in second] == [r.content for r in first]

    @pytest.mark.asyncio
    async def test_fallbacks_not_cached(self, fake_client_cls, recorded_sleep):
        cache = ResponseCache()
        client = fake_client_cls({"m": [PermanentModelError("400", 400)]})
        dispatcher = QueryDispatcher(client=client, cache=cache, sleep=recorded_sleep)

        await dispatcher.dispatch([_query(model="m")])

        assert len(cache) == 0

    def test_caching_enabled_flag(self):
        assert QueryDispatcher(cache=ResponseCache()).caching_enabled is True
        assert QueryDispatcher().caching_enabled is False

    def test_rejects_bad_batch_size(self):
        with pytest.raises(ValueError):
            QueryDispatcher(batch_size=0)

    @pytest.mark.asyncio
    async def test_deterministic_mock_when_not_varying(self, fake_client_cls, recorded_sleep):
        dispatcher = QueryDispatcher(
            client=fake_client_cls(configured=False),
            mock_generator=MockResponseGenerator(vary_output=False),
            sleep=recorded_sleep,
        )
        query = _query(prompt="What are the best dental practices in Austin?", prompt_type=PromptType.RECOMMENDATION)

        first = await dispatcher.dispatch([query])
        second = await dispatcher.dispatch([query])

        assert first[0].content == second[0].content
