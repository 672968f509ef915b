"""Business Fingerprinter: orchestrates one visibility analysis.

Flow:
  1. Prompt generator → three prompts (factual, opinion, recommendation)
  2. One LlmQuery per (model × prompt type)
  3. Dispatcher → one RawResponse per query (live, cached or mock)
  4. Analyzer → one AnalysisResult per response
  5. Metrics aggregator + leaderboard builder → FingerprintAnalysis

A failure anywhere in the flow yields a zeroed FingerprintAnalysis rather
than an exception.

Usage:
    fingerprinter = build_fingerprinter()
    analysis = await fingerprinter.fingerprint(BusinessContext(name="Acme Dental", url="https://acme.example"))
"""

from __future__ import annotations

import logging
import random
import time
import uuid
from collections.abc import Callable

from llm_fingerprint.analysis.leaderboard import build_leaderboard
from llm_fingerprint.analysis.pipeline import ResponseAnalyzer
from llm_fingerprint.analysis.scoring import aggregate_metrics
from llm_fingerprint.analysis.stats import get_processing_stats
from llm_fingerprint.analysis.types import (
    AnalysisResult,
    CompetitiveLeaderboard,
    TargetStanding,
    VisibilityMetrics,
)
from llm_fingerprint.core.config import DEFAULT_MODELS, Settings, settings
from llm_fingerprint.core.metrics import FINGERPRINT_DURATION, FINGERPRINT_RUNS
from llm_fingerprint.gateway.cache import ResponseCache
from llm_fingerprint.gateway.client import OpenRouterClient
from llm_fingerprint.gateway.dispatcher import QueryDispatcher
from llm_fingerprint.gateway.mock_responses import MockResponseGenerator
from llm_fingerprint.gateway.retry import RetryPolicy
from llm_fingerprint.gateway.types import DEFAULT_MAX_TOKENS, DEFAULT_TEMPERATURES, LlmQuery, PromptType
from llm_fingerprint.prompt_engine.generator import PromptGenerator, TemplatePromptGenerator
from llm_fingerprint.services.types import BusinessContext, FingerprintAnalysis

logger = logging.getLogger(__name__)

MetricsAggregator = Callable[[list[AnalysisResult]], VisibilityMetrics]
LeaderboardBuilder = Callable[[list[AnalysisResult], str], CompetitiveLeaderboard]

PROMPT_TYPES = (PromptType.FACTUAL, PromptType.OPINION, PromptType.RECOMMENDATION)


class BusinessFingerprinter:
    """Runs the full query → analyze → aggregate flow for one business at a time."""

    def __init__(
        self,
        dispatcher: QueryDispatcher,
        analyzer: ResponseAnalyzer | None = None,
        prompt_generator: PromptGenerator | None = None,
        models: list[str] | tuple[str, ...] = DEFAULT_MODELS,
        max_tokens: int = DEFAULT_MAX_TOKENS,
        metrics_aggregator: MetricsAggregator = aggregate_metrics,
        leaderboard_builder: LeaderboardBuilder = build_leaderboard,
        clock: Callable[[], float] = time.monotonic,
    ):
        if not models:
            raise ValueError("at least one model is required")

        self.dispatcher = dispatcher
        self.analyzer = analyzer or ResponseAnalyzer()
        self.prompt_generator = prompt_generator or TemplatePromptGenerator()
        self.models = list(models)
        self.max_tokens = max_tokens
        self.metrics_aggregator = metrics_aggregator
        self.leaderboard_builder = leaderboard_builder
        self._clock = clock

    @property
    def expected_query_count(self) -> int:
        return len(self.models) * len(PROMPT_TYPES)

    def build_queries(self, context: BusinessContext) -> list[LlmQuery]:
        """One query per (model × prompt type), model-major order."""
        prompts = self.prompt_generator.generate(context)
        return [
            LlmQuery(
                model=model,
                prompt=prompts.for_type(prompt_type),
                prompt_type=prompt_type,
                temperature=DEFAULT_TEMPERATURES[prompt_type],
                max_tokens=self.max_tokens,
            )
            for model in self.models
            for prompt_type in PROMPT_TYPES
        ]

    async def fingerprint(self, context: BusinessContext) -> FingerprintAnalysis:
        """Measure how visible the business is across the configured models."""
        session_id = f"fp_{uuid.uuid4().hex[:12]}"
        start = self._clock()

        logger.info(
            "Starting business fingerprinting: business=%s, location=%s, crawl_facts=%s, models=%s, queries=%d",
            context.name,
            context.location is not None,
            bool(context.crawl_facts),
            self.models,
            self.expected_query_count,
            extra={"session_id": session_id},
        )

        try:
            queries = self.build_queries(context)
            responses = await self.dispatcher.dispatch(queries)
            if len(responses) != len(queries):
                raise RuntimeError(f"dispatcher returned {len(responses)} responses for {len(queries)} queries")

            results = [
                self.analyzer.analyze(response, context.name, query.prompt_type, prompt=query.prompt)
                for query, response in zip(queries, responses)
            ]
            if not results:
                raise RuntimeError("no analysis results")

            metrics = self.metrics_aggregator(results)
            leaderboard = self.leaderboard_builder(results, context.name)
        except Exception:
            elapsed_ms = self._elapsed_ms(start)
            logger.exception(
                "Business fingerprinting failed: business=%s, %dms",
                context.name,
                elapsed_ms,
                extra={"session_id": session_id},
            )
            FINGERPRINT_RUNS.labels(status="fallback").inc()
            FINGERPRINT_DURATION.observe(elapsed_ms / 1000)
            return self.fallback_analysis(context, elapsed_ms)

        elapsed_ms = self._elapsed_ms(start)
        analysis = FingerprintAnalysis(
            business_id=context.business_id or 0,
            business_name=context.name,
            metrics=metrics,
            competitive_leaderboard=leaderboard,
            llm_results=tuple(results),
            processing_time_ms=elapsed_ms,
        )

        FINGERPRINT_RUNS.labels(status="ok").inc()
        FINGERPRINT_DURATION.observe(elapsed_ms / 1000)
        self._log_summary(analysis, session_id)
        return analysis

    def fallback_analysis(self, context: BusinessContext, processing_time_ms: int = 0) -> FingerprintAnalysis:
        """Zeroed analysis reporting every expected query as unsuccessful."""
        return FingerprintAnalysis(
            business_id=context.business_id or 0,
            business_name=context.name,
            metrics=VisibilityMetrics(
                visibility_score=0,
                mention_rate=0.0,
                sentiment_score=0.0,
                confidence_level=0.0,
                avg_rank_position=None,
                total_queries=self.expected_query_count,
                successful_queries=0,
            ),
            competitive_leaderboard=CompetitiveLeaderboard(
                target_business=TargetStanding(name=context.name),
                competitors=(),
                total_recommendation_queries=0,
            ),
            llm_results=(),
            processing_time_ms=processing_time_ms,
        )

    def get_processing_stats(self, results: list[AnalysisResult]) -> dict:
        return get_processing_stats(results)

    def get_capabilities(self) -> dict:
        return {
            "models": list(self.models),
            "prompt_types": [p.value for p in PROMPT_TYPES],
            "max_concurrency": self.dispatcher.batch_size,
            "caching_enabled": self.dispatcher.caching_enabled,
        }

    def _elapsed_ms(self, start: float) -> int:
        return max(0, int((self._clock() - start) * 1000))

    def _log_summary(self, analysis: FingerprintAnalysis, session_id: str) -> None:
        stats = get_processing_stats(list(analysis.llm_results))
        metrics = analysis.metrics

        logger.info(
            "Business fingerprinting completed: business=%s, score=%d, mention_rate=%d%%, sentiment=%d%%, "
            "confidence=%d%%, avg_rank=%s, competitors=%d, successful=%d/%d, %dms",
            analysis.business_name,
            metrics.visibility_score,
            round(metrics.mention_rate),
            round(metrics.sentiment_score * 100),
            round(metrics.confidence_level * 100),
            metrics.avg_rank_position,
            len(analysis.competitive_leaderboard.competitors),
            metrics.successful_queries,
            metrics.total_queries,
            analysis.processing_time_ms,
            extra={"session_id": session_id},
        )

        for model, performance in stats["model_performance"].items():
            logger.debug(
                "Model performance: model=%s, queries=%d, mentions=%d, mention_rate=%d%%, avg_confidence=%d%%",
                model,
                performance["queries"],
                performance["mentions"],
                round(performance["mentions"] / performance["queries"] * 100),
                round(performance["avg_confidence"] * 100),
                extra={"session_id": session_id},
            )


def build_fingerprinter(config: Settings | None = None) -> BusinessFingerprinter:
    """Wire a fingerprinter from settings. No API key → every query is answered by the mock generator."""
    config = config or settings

    client = OpenRouterClient(
        api_key=config.openrouter_api_key,
        api_url=config.openrouter_api_url,
        timeout=config.llm_request_timeout,
        referer=config.openrouter_referer,
        app_title=config.openrouter_app_title,
    )
    if not client.is_configured:
        logger.warning("OPENROUTER_API_KEY is not set; fingerprints will use mock responses")

    cache = ResponseCache(ttl_seconds=config.cache_ttl_seconds) if config.caching_enabled else None

    dispatcher = QueryDispatcher(
        client=client,
        mock_generator=MockResponseGenerator(
            rng=random.Random(config.mock_seed),
            vary_output=config.mock_vary_output,
        ),
        cache=cache,
        batch_size=config.dispatch_batch_size,
        batch_cooldown=config.dispatch_batch_cooldown,
        retry_policy=RetryPolicy(
            max_attempts=config.retry_max_attempts,
            base_delay=config.retry_base_delay,
            max_delay=config.retry_max_delay,
        ),
    )

    return BusinessFingerprinter(
        dispatcher=dispatcher,
        analyzer=ResponseAnalyzer(),
        prompt_generator=TemplatePromptGenerator(rng=random.Random(config.mock_seed)),
        models=config.llm_models,
        max_tokens=config.llm_max_tokens,
    )
