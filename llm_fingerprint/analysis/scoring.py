"""Visibility Metrics Aggregator.

Reduces per-query results into one VisibilityMetrics record:

  mention_rate      = mentioned / successful × 100
  sentiment_score   = mean over mentioned of {positive 1, neutral 0.5, negative 0}
  confidence_level  = mean confidence over successful
  avg_rank_position = mean rank over mentioned results that carry one

  visibility_score  = 40 × mention_rate(fraction)
                    + 25 × sentiment_score
                    + 20 × confidence_level
                    + max(0, 15 − (avg_rank − 1) × 3)
                    − 10 × (1 − successful / total)
  clamped to [0, 100], rounded half-up.
"""

from __future__ import annotations

import logging
import math

from llm_fingerprint.analysis.types import (
    AnalysisResult,
    Sentiment,
    VisibilityMetrics,
    successful,
)

logger = logging.getLogger(__name__)

MENTION_WEIGHT = 40
SENTIMENT_WEIGHT = 25
CONFIDENCE_WEIGHT = 20
RANKING_WEIGHT = 15
RANK_STEP_PENALTY = 3  # Ranking points lost per place below first
SUCCESS_PENALTY_WEIGHT = 10

SENTIMENT_VALUES = {
    Sentiment.POSITIVE: 1.0,
    Sentiment.NEUTRAL: 0.5,
    Sentiment.NEGATIVE: 0.0,
}
DEFAULT_SENTIMENT_SCORE = 0.5


def ranking_points(avg_rank_position: float | None) -> float:
    """0–15 points; first place earns all of them, each place below costs 3."""
    if avg_rank_position is None:
        return 0.0
    return max(0.0, RANKING_WEIGHT - (avg_rank_position - 1) * RANK_STEP_PENALTY)


def calculate_visibility_score(
    mention_rate: float,
    sentiment_score: float,
    confidence_level: float,
    avg_rank_position: float | None,
    successful_queries: int,
    total_queries: int,
) -> int:
    """Weighted 0–100 visibility score.

    Args:
        mention_rate: Fraction 0..1 (not the percentage stored on VisibilityMetrics)
        sentiment_score: 0..1
        confidence_level: 0..1
        avg_rank_position: Mean rank, None if never ranked
        successful_queries: Results without an analysis error
        total_queries: All results, including failures
    """
    success_rate = successful_queries / total_queries if total_queries > 0 else 0.0

    raw_score = (
        mention_rate * MENTION_WEIGHT
        + sentiment_score * SENTIMENT_WEIGHT
        + confidence_level * CONFIDENCE_WEIGHT
        + ranking_points(avg_rank_position)
        - (1 - success_rate) * SUCCESS_PENALTY_WEIGHT
    )

    clamped = max(0.0, min(100.0, raw_score))
    return int(math.floor(clamped + 0.5))


def aggregate_metrics(results: list[AnalysisResult]) -> VisibilityMetrics:
    """Summarize a set of per-query results. Total: never raises, empty input → zeros."""
    total_queries = len(results)
    ok = successful(results)
    successful_queries = len(ok)

    if successful_queries == 0:
        return VisibilityMetrics(
            visibility_score=0,
            mention_rate=0.0,
            sentiment_score=0.0,
            confidence_level=0.0,
            avg_rank_position=None,
            total_queries=total_queries,
            successful_queries=0,
        )

    mentioned = [r for r in ok if r.mentioned]
    mention_rate = len(mentioned) / successful_queries * 100

    if mentioned:
        sentiment_score = sum(SENTIMENT_VALUES[r.sentiment] for r in mentioned) / len(mentioned)
    else:
        sentiment_score = DEFAULT_SENTIMENT_SCORE

    confidence_level = sum(r.confidence for r in ok) / successful_queries

    ranks = [r.rank_position for r in mentioned if r.rank_position is not None]
    avg_rank_position = sum(ranks) / len(ranks) if ranks else None

    visibility_score = calculate_visibility_score(
        mention_rate=mention_rate / 100,
        sentiment_score=sentiment_score,
        confidence_level=confidence_level,
        avg_rank_position=avg_rank_position,
        successful_queries=successful_queries,
        total_queries=total_queries,
    )

    logger.debug(
        "Aggregated %d results (%d successful): score=%d, mention_rate=%.1f%%, sentiment=%.2f, "
        "confidence=%.2f, avg_rank=%s",
        total_queries,
        successful_queries,
        visibility_score,
        mention_rate,
        sentiment_score,
        confidence_level,
        avg_rank_position,
    )

    return VisibilityMetrics(
        visibility_score=visibility_score,
        mention_rate=mention_rate,
        sentiment_score=sentiment_score,
        confidence_level=confidence_level,
        avg_rank_position=avg_rank_position,
        total_queries=total_queries,
        successful_queries=successful_queries,
    )
