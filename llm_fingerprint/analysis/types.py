"""Core types and DTOs for the analysis and aggregation engine."""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Union

from llm_fingerprint.gateway.types import PromptType


# ---------------------------------------------------------------------------
# Enums
# ---------------------------------------------------------------------------


class Sentiment(str, Enum):
    """Coarse sentiment bucket toward the target business."""

    POSITIVE = "positive"
    NEUTRAL = "neutral"
    NEGATIVE = "negative"


class MatchType(str, Enum):
    """Which mention rule fired."""

    EXACT = "exact"  # Full business name found
    VARIANT = "variant"  # Suffix/article stripped, &/and swapped, initialism
    CONTEXTUAL = "contextual"  # Referential phrase + business vocabulary
    NONE = "none"


class SanitizationFlag(str, Enum):
    """Flags assigned during text preprocessing."""

    CLEAN = "clean"
    THINK_STRIPPED = "think_stripped"  # <think>...</think> reasoning removed
    EMPTY_RESPONSE = "empty_response"


# ---------------------------------------------------------------------------
# Step outputs
# ---------------------------------------------------------------------------


@dataclass
class SanitizedText:
    """Output of the text preprocessor."""

    text: str = ""  # Cleaned text for analysis
    original_text: str = ""  # Raw text before cleaning
    flag: SanitizationFlag = SanitizationFlag.CLEAN
    think_content: str = ""  # Extracted <think> block
    stripped_chars: int = 0


@dataclass
class MentionAnalysis:
    mentioned: bool = False
    confidence: float = 0.9
    match_type: MatchType = MatchType.NONE
    variants: list[str] = field(default_factory=list)  # Which name variant matched
    reasoning: str = ""


@dataclass
class SentimentAnalysis:
    sentiment: Sentiment = Sentiment.NEUTRAL
    confidence: float = 0.5
    score: float = 0.0  # -1.0 (negative) .. +1.0 (positive)
    keywords: list[str] = field(default_factory=list)
    reasoning: str = ""


@dataclass
class CompetitorAnalysis:
    competitors: list[str] = field(default_factory=list)  # Unique, discovery order
    target_rank: int | None = None  # 1..10
    confidence: float = 0.5  # Extraction confidence, 0.1..0.95
    reasoning: str = ""


# ---------------------------------------------------------------------------
# Per-query result: tagged variant
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class AnalysisSuccess:
    """Analysis of one response that completed normally."""

    model: str = ""
    prompt_type: PromptType = PromptType.FACTUAL
    mentioned: bool = False
    sentiment: Sentiment = Sentiment.NEUTRAL
    confidence: float = 0.0
    rank_position: int | None = None
    competitor_mentions: tuple[str, ...] = ()
    raw_response: str = ""
    tokens_used: int = 0
    prompt: str = ""
    processing_time_ms: int = 0

    @property
    def ok(self) -> bool:
        return True

    @property
    def error(self) -> None:
        return None

    def to_dict(self) -> dict:
        return {
            "model": self.model,
            "prompt_type": self.prompt_type.value,
            "mentioned": self.mentioned,
            "sentiment": self.sentiment.value,
            "confidence": self.confidence,
            "rank_position": self.rank_position,
            "competitor_mentions": list(self.competitor_mentions),
            "raw_response": self.raw_response,
            "tokens_used": self.tokens_used,
            "prompt": self.prompt,
            "processing_time_ms": self.processing_time_ms,
        }


@dataclass(frozen=True)
class AnalysisFailure:
    """Analysis that raised internally. Signal fields read as zero/neutral."""

    model: str = ""
    prompt_type: PromptType = PromptType.FACTUAL
    error: str = ""
    raw_response: str = ""
    tokens_used: int = 0
    prompt: str = ""
    processing_time_ms: int = 0

    @property
    def ok(self) -> bool:
        return False

    @property
    def mentioned(self) -> bool:
        return False

    @property
    def sentiment(self) -> Sentiment:
        return Sentiment.NEUTRAL

    @property
    def confidence(self) -> float:
        return 0.0

    @property
    def rank_position(self) -> None:
        return None

    @property
    def competitor_mentions(self) -> tuple[str, ...]:
        return ()

    def to_dict(self) -> dict:
        return {
            "model": self.model,
            "prompt_type": self.prompt_type.value,
            "mentioned": False,
            "sentiment": Sentiment.NEUTRAL.value,
            "confidence": 0.0,
            "rank_position": None,
            "competitor_mentions": [],
            "raw_response": self.raw_response,
            "tokens_used": self.tokens_used,
            "prompt": self.prompt,
            "processing_time_ms": self.processing_time_ms,
            "error": self.error,
        }


AnalysisResult = Union[AnalysisSuccess, AnalysisFailure]


def successful(results: list[AnalysisResult]) -> list[AnalysisSuccess]:
    """Keep only the results whose analysis completed."""
    return [r for r in results if isinstance(r, AnalysisSuccess)]


# ---------------------------------------------------------------------------
# Aggregates
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class VisibilityMetrics:
    visibility_score: int = 0  # 0..100
    mention_rate: float = 0.0  # Percentage 0..100
    sentiment_score: float = 0.0  # 0..1
    confidence_level: float = 0.0  # 0..1
    avg_rank_position: float | None = None
    total_queries: int = 0
    successful_queries: int = 0

    def to_dict(self) -> dict:
        return {
            "visibility_score": self.visibility_score,
            "mention_rate": self.mention_rate,
            "sentiment_score": self.sentiment_score,
            "confidence_level": self.confidence_level,
            "avg_rank_position": self.avg_rank_position,
            "total_queries": self.total_queries,
            "successful_queries": self.successful_queries,
        }


@dataclass(frozen=True)
class TargetStanding:
    name: str = ""
    rank: int | None = None  # Rounded avg_position
    avg_position: float | None = None
    mention_count: int = 0

    def to_dict(self) -> dict:
        return {
            "name": self.name,
            "rank": self.rank,
            "avg_position": self.avg_position,
            "mention_count": self.mention_count,
        }


@dataclass(frozen=True)
class CompetitorEntry:
    name: str = ""
    mention_count: int = 0
    avg_position: float = 0.0  # 0 = position never estimated
    appears_with_target: int = 0

    def to_dict(self) -> dict:
        return {
            "name": self.name,
            "mention_count": self.mention_count,
            "avg_position": self.avg_position,
            "appears_with_target": self.appears_with_target,
        }


@dataclass(frozen=True)
class CompetitiveLeaderboard:
    target_business: TargetStanding = field(default_factory=TargetStanding)
    competitors: tuple[CompetitorEntry, ...] = ()  # Top 10 by mention count
    total_recommendation_queries: int = 0

    def to_dict(self) -> dict:
        return {
            "target_business": self.target_business.to_dict(),
            "competitors": [c.to_dict() for c in self.competitors],
            "total_recommendation_queries": self.total_recommendation_queries,
        }
