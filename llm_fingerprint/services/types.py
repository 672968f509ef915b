"""Business context (input) and fingerprint analysis (output) records."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime, timezone

from llm_fingerprint.analysis.types import (
    AnalysisResult,
    CompetitiveLeaderboard,
    VisibilityMetrics,
)


@dataclass(frozen=True)
class Location:
    city: str | None = None
    state: str | None = None
    country: str | None = None

    def to_dict(self) -> dict:
        return {"city": self.city, "state": self.state, "country": self.country}


@dataclass(frozen=True)
class BusinessContext:
    """What the caller knows about the business being fingerprinted.

    crawl_facts is whatever the crawler extracted from the business website;
    the prompt generator reads "services", "description" and
    "business_details" ({"industry", "sector"}) when present.
    """

    name: str = ""
    url: str = ""
    business_id: int | None = None
    category: str | None = None
    location: Location | None = None
    crawl_facts: dict | None = None


@dataclass(frozen=True)
class FingerprintAnalysis:
    """Result of one fingerprinting run. Owned by the caller once returned."""

    business_id: int = 0
    business_name: str = ""
    metrics: VisibilityMetrics = field(default_factory=VisibilityMetrics)
    competitive_leaderboard: CompetitiveLeaderboard = field(default_factory=CompetitiveLeaderboard)
    llm_results: tuple[AnalysisResult, ...] = ()
    generated_at: datetime = field(default_factory=lambda: datetime.now(timezone.utc))
    processing_time_ms: int = 0

    # Flat fields kept for consumers of the older record shape

    @property
    def visibility_score(self) -> int:
        return self.metrics.visibility_score

    @property
    def mention_rate(self) -> float:
        return self.metrics.mention_rate

    @property
    def sentiment_score(self) -> float:
        return self.metrics.sentiment_score

    @property
    def accuracy_score(self) -> float:
        return self.metrics.confidence_level

    @property
    def avg_rank_position(self) -> float | None:
        return self.metrics.avg_rank_position

    def to_dict(self) -> dict:
        return {
            "business_id": self.business_id,
            "business_name": self.business_name,
            "metrics": self.metrics.to_dict(),
            "competitive_leaderboard": self.competitive_leaderboard.to_dict(),
            "llm_results": [r.to_dict() for r in self.llm_results],
            "generated_at": self.generated_at.isoformat(),
            "processing_time_ms": self.processing_time_ms,
            "visibility_score": self.visibility_score,
            "mention_rate": self.mention_rate,
            "sentiment_score": self.sentiment_score,
            "accuracy_score": self.accuracy_score,
            "avg_rank_position": self.avg_rank_position,
        }
