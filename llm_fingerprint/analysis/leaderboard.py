"""Leaderboard Builder.

Only recommendation-type results without an analysis error count. For each:
  - target mentioned → target mention_count += 1, record its rank if any
  - each listed competitor → mention_count += 1, appears_with_target += 1
    when the target is in the same response, and its list position is
    estimated from the first numbered raw-text line naming it

Competitors are sorted by mention_count (descending, ties in first-seen
order) and cut to the top 10.
"""

from __future__ import annotations

import logging
import math
from dataclasses import dataclass, field

from llm_fingerprint.analysis.competitors import list_position
from llm_fingerprint.analysis.types import (
    AnalysisResult,
    AnalysisSuccess,
    CompetitiveLeaderboard,
    CompetitorEntry,
    TargetStanding,
)
from llm_fingerprint.gateway.types import PromptType

logger = logging.getLogger(__name__)

MAX_COMPETITORS = 10


@dataclass
class _CompetitorTally:
    count: int = 0
    positions: list[int] = field(default_factory=list)
    appears_with_target: int = 0


def _mean(values: list[int]) -> float | None:
    return sum(values) / len(values) if values else None


def build_leaderboard(results: list[AnalysisResult], business_name: str) -> CompetitiveLeaderboard:
    """Competitive standings from the recommendation queries in *results*."""
    recommendations = [
        r for r in results if isinstance(r, AnalysisSuccess) and r.prompt_type == PromptType.RECOMMENDATION
    ]

    if not recommendations:
        return CompetitiveLeaderboard(
            target_business=TargetStanding(name=business_name),
            competitors=(),
            total_recommendation_queries=0,
        )

    # dicts keep insertion order, so ties below stay first-seen
    tallies: dict[str, _CompetitorTally] = {}
    target_mentions = 0
    target_positions: list[int] = []

    for result in recommendations:
        if result.mentioned:
            target_mentions += 1
            if result.rank_position is not None:
                target_positions.append(result.rank_position)

        for competitor in result.competitor_mentions:
            tally = tallies.setdefault(competitor, _CompetitorTally())
            tally.count += 1
            if result.mentioned:
                tally.appears_with_target += 1

            position = list_position(result.raw_response, competitor)
            if position is not None:
                tally.positions.append(position)

    ranked = sorted(tallies.items(), key=lambda item: item[1].count, reverse=True)
    competitors = tuple(
        CompetitorEntry(
            name=name,
            mention_count=tally.count,
            avg_position=_mean(tally.positions) or 0.0,
            appears_with_target=tally.appears_with_target,
        )
        for name, tally in ranked[:MAX_COMPETITORS]
    )

    target_avg = _mean(target_positions)
    target = TargetStanding(
        name=business_name,
        rank=int(math.floor(target_avg + 0.5)) if target_avg is not None else None,
        avg_position=target_avg,
        mention_count=target_mentions,
    )

    logger.debug(
        "Leaderboard for %s: %d recommendation queries, %d distinct competitors, target mentions=%d",
        business_name,
        len(recommendations),
        len(tallies),
        target_mentions,
    )

    return CompetitiveLeaderboard(
        target_business=target,
        competitors=competitors,
        total_recommendation_queries=len(recommendations),
    )
