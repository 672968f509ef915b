"""Query Dispatcher: runs fingerprinting queries against model backends.

Main entry point for sending a battery of queries:
  1. Splits the ordered query list into fixed-size batches
  2. Runs every query of a batch concurrently and waits for all to settle
  3. Sleeps a fixed cooldown between batches (provider rate limits)
  4. Per query: cache lookup → client call with retry → cache write
  5. Substitutes a mock response for any query that could not be answered

Usage:
    dispatcher = QueryDispatcher(client=OpenRouterClient(api_key="sk-or-..."))
    responses = await dispatcher.dispatch(queries)  # same length and order as queries
"""

from __future__ import annotations

import asyncio
import logging
import time
from collections.abc import Callable
from dataclasses import replace

from llm_fingerprint.core.metrics import LLM_QUERIES, LLM_RETRIES
from llm_fingerprint.gateway.cache import ResponseCache
from llm_fingerprint.gateway.client import BaseModelClient, ModelClientError
from llm_fingerprint.gateway.mock_responses import MockResponseGenerator
from llm_fingerprint.gateway.retry import RetryPolicy, SleepFunc, call_with_retry
from llm_fingerprint.gateway.types import LlmQuery, RawResponse

logger = logging.getLogger(__name__)

DEFAULT_BATCH_SIZE = 5
DEFAULT_BATCH_COOLDOWN = 0.1  # seconds


class QueryDispatcher:
    """Batched, retrying, fallback-safe dispatcher.

    Every query resolves to a RawResponse: a live answer, a cached answer or
    a mock fallback. Nothing raised for a single query escapes dispatch().
    """

    def __init__(
        self,
        client: BaseModelClient | None = None,
        mock_generator: MockResponseGenerator | None = None,
        cache: ResponseCache | None = None,
        batch_size: int = DEFAULT_BATCH_SIZE,
        batch_cooldown: float = DEFAULT_BATCH_COOLDOWN,
        retry_policy: RetryPolicy | None = None,
        sleep: SleepFunc = asyncio.sleep,
        clock: Callable[[], float] = time.monotonic,
    ):
        """
        Args:
            client: Model backend. None (or an unconfigured client) → mock responses only
            mock_generator: Fallback text generator
            cache: Optional development cache; None disables caching
            batch_size: Max queries in flight at once
            batch_cooldown: Seconds to wait between batches
            retry_policy: Attempt cap and backoff for transient failures
            sleep: Awaitable sleep, injectable so tests do not wait
            clock: Monotonic clock in seconds
        """
        if batch_size < 1:
            raise ValueError("batch_size must be at least 1")

        self.client = client
        self.mock_generator = mock_generator or MockResponseGenerator()
        self.cache = cache
        self.batch_size = batch_size
        self.batch_cooldown = batch_cooldown
        self.retry_policy = retry_policy or RetryPolicy()
        self._sleep = sleep
        self._clock = clock

    @property
    def caching_enabled(self) -> bool:
        return self.cache is not None

    def _elapsed_ms(self, start: float) -> int:
        return max(0, int((self._clock() - start) * 1000))

    def _fallback(self, query: LlmQuery, start: float | None = None) -> RawResponse:
        response = self.mock_generator.generate(query.model, query.prompt)
        LLM_QUERIES.labels(model=query.model, outcome="fallback").inc()
        if start is None:
            return response
        return replace(response, processing_time_ms=max(1, self._elapsed_ms(start)))

    async def execute_single(self, query: LlmQuery) -> RawResponse:
        """Resolve one query: cache → live call with retry → mock fallback."""
        start = self._clock()

        if self.cache is not None:
            cached = await self.cache.get(query.model, query.prompt)
            if cached is not None:
                LLM_QUERIES.labels(model=query.model, outcome="cached").inc()
                return replace(cached, cached=True, processing_time_ms=self._elapsed_ms(start))

        if self.client is None or not self.client.is_configured:
            logger.warning("Model client not configured; using mock response for %s", query.model)
            return self._fallback(query, start)

        client = self.client

        async def _call() -> RawResponse:
            return await client.call(
                query.model,
                query.prompt,
                temperature=query.temperature,
                max_tokens=query.max_tokens,
            )

        try:
            response = await call_with_retry(
                _call,
                self.retry_policy,
                sleep=self._sleep,
                label=f"{query.model}/{query.prompt_type.value}",
                on_retry=lambda attempt, error: LLM_RETRIES.labels(model=query.model).inc(),
            )
        except ModelClientError as e:
            logger.warning(
                "Query failed for %s (%s, status=%s): %s; using mock response",
                query.model,
                query.prompt_type.value,
                e.status_code or "-",
                e,
            )
            return self._fallback(query, start)

        if self.cache is not None:
            await self.cache.set(query.model, query.prompt, response)

        LLM_QUERIES.labels(model=query.model, outcome="live").inc()
        return replace(response, processing_time_ms=self._elapsed_ms(start))

    async def dispatch(self, queries: list[LlmQuery]) -> list[RawResponse]:
        """Run all queries in batches. Output has the same length and order as *queries*."""
        if not queries:
            return []

        start = self._clock()
        logger.info(
            "Dispatching %d queries in batches of %d (models=%s)",
            len(queries),
            self.batch_size,
            sorted({q.model for q in queries}),
        )

        responses: list[RawResponse] = []

        for offset in range(0, len(queries), self.batch_size):
            batch = queries[offset : offset + self.batch_size]
            settled = await asyncio.gather(
                *(self.execute_single(q) for q in batch),
                return_exceptions=True,
            )

            for query, outcome in zip(batch, settled):
                if isinstance(outcome, RawResponse):
                    responses.append(outcome)
                    continue
                if not isinstance(outcome, Exception):
                    raise outcome
                logger.error(
                    "Unexpected dispatcher error for %s (%s): %r; using mock response",
                    query.model,
                    query.prompt_type.value,
                    outcome,
                )
                responses.append(self._fallback(query))

            if offset + self.batch_size < len(queries):
                await self._sleep(self.batch_cooldown)

        fallback_count = sum(1 for r in responses if r.is_fallback)
        cached_count = sum(1 for r in responses if r.cached)
        logger.info(
            "Dispatch complete: %d queries, %d live, %d cached, %d fallback, %dms",
            len(responses),
            len(responses) - fallback_count - cached_count,
            cached_count,
            fallback_count,
            self._elapsed_ms(start),
        )
        return responses
