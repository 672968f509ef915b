"""Sentiment classification: analysis step 3.

Only meaningful when the business is mentioned:
  1. Count distinct indicator terms from the positive / negative / neutral lists
  2. score = (pos - neg) / max(1, total)
     > 0.3 → positive, < -0.3 → negative, otherwise neutral (0.7)
     classified confidence = min(0.95, 0.6 + |score| × 0.35)
  3. No indicator at all → implicit phrase patterns (0.6), else neutral (0.8)
"""

from __future__ import annotations

import re

from llm_fingerprint.analysis.types import Sentiment, SentimentAnalysis

POSITIVE_INDICATORS = (
    "excellent", "outstanding", "great", "amazing", "fantastic", "wonderful",
    "professional", "reliable", "trustworthy", "reputable", "quality",
    "highly recommended", "top-rated", "best", "leading", "premier",
    "experienced", "skilled", "expert", "knowledgeable", "competent",
    "friendly", "helpful", "responsive", "efficient", "thorough",
    "satisfied", "pleased", "happy", "impressed", "delighted",
)  # fmt: skip

NEGATIVE_INDICATORS = (
    "terrible", "awful", "horrible", "disappointing", "poor", "bad",
    "unprofessional", "unreliable", "untrustworthy", "questionable",
    "avoid", "warning", "complaint", "problem", "issue", "concern",
    "rude", "unhelpful", "slow", "inefficient", "careless",
    "overpriced", "expensive", "cheap", "low-quality", "subpar",
    "dissatisfied", "unhappy", "frustrated", "disappointed", "regret",
)  # fmt: skip

NEUTRAL_INDICATORS = (
    "okay", "average", "decent", "standard", "typical", "normal",
    "adequate", "acceptable", "reasonable", "fair", "moderate",
    "mixed", "varies", "depends", "sometimes", "generally",
)  # fmt: skip

_IMPLICIT_POSITIVE = [
    re.compile(r"would\s+recommend", re.IGNORECASE),
    re.compile(r"good\s+choice", re.IGNORECASE),
    re.compile(r"solid\s+(?:option|choice)", re.IGNORECASE),
    re.compile(r"worth\s+considering", re.IGNORECASE),
    re.compile(r"established\s+presence", re.IGNORECASE),
    re.compile(r"professional\s+standards", re.IGNORECASE),
]

_IMPLICIT_NEGATIVE = [
    re.compile(r"would\s+not\s+recommend", re.IGNORECASE),
    re.compile(r"\bavoid", re.IGNORECASE),
    re.compile(r"be\s+careful", re.IGNORECASE),
    re.compile(r"limited\s+information", re.IGNORECASE),
    re.compile(r"don't\s+have\s+enough", re.IGNORECASE),
    re.compile(r"insufficient\s+data", re.IGNORECASE),
]

POSITIVE_THRESHOLD = 0.3
NEGATIVE_THRESHOLD = -0.3
NEUTRAL_CONFIDENCE = 0.7
IMPLICIT_CONFIDENCE = 0.6
DEFAULT_CONFIDENCE = 0.8
NOT_MENTIONED_CONFIDENCE = 0.5


def _term_pattern(term: str) -> re.Pattern[str]:
    # Whole word plus plural or inflected endings: "complaint" counts "complaints", "bad" skips "badge"
    return re.compile(r"\b" + re.escape(term) + r"(?:s|es|ed|ing)?\b", re.IGNORECASE)


_POSITIVE_PATTERNS = [(t, _term_pattern(t)) for t in POSITIVE_INDICATORS]
_NEGATIVE_PATTERNS = [(t, _term_pattern(t)) for t in NEGATIVE_INDICATORS]
_NEUTRAL_PATTERNS = [(t, _term_pattern(t)) for t in NEUTRAL_INDICATORS]


def _hits(text: str, patterns: list[tuple[str, re.Pattern[str]]]) -> list[str]:
    return [term for term, pattern in patterns if pattern.search(text)]


def classify_score(score: float) -> tuple[Sentiment, float]:
    """Map a score in [-1, 1] to a sentiment bucket and its confidence."""
    if score > POSITIVE_THRESHOLD:
        return Sentiment.POSITIVE, min(0.95, 0.6 + score * 0.35)
    if score < NEGATIVE_THRESHOLD:
        return Sentiment.NEGATIVE, min(0.95, 0.6 + abs(score) * 0.35)
    return Sentiment.NEUTRAL, NEUTRAL_CONFIDENCE


def implicit_sentiment(text: str) -> SentimentAnalysis:
    """Fallback when no indicator word is present: look for telling phrases."""
    positive = sum(1 for p in _IMPLICIT_POSITIVE if p.search(text))
    negative = sum(1 for p in _IMPLICIT_NEGATIVE if p.search(text))

    if positive > negative:
        return SentimentAnalysis(
            sentiment=Sentiment.POSITIVE,
            confidence=IMPLICIT_CONFIDENCE,
            score=0.5,
            reasoning="Implicit positive sentiment detected from context",
        )
    if negative > positive:
        return SentimentAnalysis(
            sentiment=Sentiment.NEGATIVE,
            confidence=IMPLICIT_CONFIDENCE,
            score=-0.5,
            reasoning="Implicit negative sentiment detected from context",
        )
    return SentimentAnalysis(
        sentiment=Sentiment.NEUTRAL,
        confidence=DEFAULT_CONFIDENCE,
        score=0.0,
        reasoning="No clear sentiment indicators found, defaulting to neutral",
    )


def analyze_sentiment(text: str, mentioned: bool) -> SentimentAnalysis:
    """Classify the tone of *text* toward the business."""
    if not mentioned:
        return SentimentAnalysis(
            sentiment=Sentiment.NEUTRAL,
            confidence=NOT_MENTIONED_CONFIDENCE,
            score=0.0,
            reasoning="Business not mentioned, neutral sentiment assigned",
        )

    positive = _hits(text, _POSITIVE_PATTERNS)
    negative = _hits(text, _NEGATIVE_PATTERNS)
    neutral = _hits(text, _NEUTRAL_PATTERNS)

    total = len(positive) + len(negative) + len(neutral)
    if total == 0:
        return implicit_sentiment(text)

    score = (len(positive) - len(negative)) / max(1, total)
    sentiment, confidence = classify_score(score)

    return SentimentAnalysis(
        sentiment=sentiment,
        confidence=confidence,
        score=score,
        keywords=positive + negative + neutral,
        reasoning=(
            f"Found {len(positive)} positive, {len(negative)} negative, "
            f"{len(neutral)} neutral indicators"
        ),
    )
