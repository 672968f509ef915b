"""Mention detection: analysis step 2.

Ordered rule list, first match wins:
  1. exact       case-insensitive substring of the full name     → 0.95
  2. variant     whole-word match on a name variant               → 0.85
  3. contextual  referential phrase + ≥2 business-context words   → 0.6
  4. none        not mentioned, high confidence in the negative   → 0.9

Each rule is a pure function (text, business_name) → MentionAnalysis | None,
so precedence is the order of MENTION_RULES and nothing else.
"""

from __future__ import annotations

import re
from collections.abc import Callable
from dataclasses import dataclass

from llm_fingerprint.analysis.types import MatchType, MentionAnalysis
from llm_fingerprint.analysis.variants import find_variant

EXACT_CONFIDENCE = 0.95
VARIANT_CONFIDENCE = 0.85
CONTEXTUAL_CONFIDENCE = 0.6
NOT_MENTIONED_CONFIDENCE = 0.9

CONTEXT_KEYWORD_THRESHOLD = 2

_REFERENTIAL_PATTERNS = [
    re.compile(r"\bthis\s+(?:business|company|establishment|place|location)\b", re.IGNORECASE),
    re.compile(r"\bthey\s+(?:are|offer|provide|specialize)\b", re.IGNORECASE),
    re.compile(r"\btheir\s+(?:services|reputation|quality|experience)\b", re.IGNORECASE),
    re.compile(r"\bit\s+(?:is|appears|seems|looks)\b", re.IGNORECASE),
]

BUSINESS_CONTEXT_WORDS = (
    "services",
    "reputation",
    "quality",
    "professional",
    "experience",
    "customers",
    "clients",
    "staff",
    "team",
    "location",
    "business",
)


def _exact_rule(text: str, business_name: str) -> MentionAnalysis | None:
    name = business_name.strip()
    if name and name.lower() in text.lower():
        return MentionAnalysis(
            mentioned=True,
            confidence=EXACT_CONFIDENCE,
            match_type=MatchType.EXACT,
            variants=[name],
            reasoning=f'Exact match found for "{name}"',
        )
    return None


def _variant_rule(text: str, business_name: str) -> MentionAnalysis | None:
    variant = find_variant(text, business_name)
    if variant is None:
        return None
    return MentionAnalysis(
        mentioned=True,
        confidence=VARIANT_CONFIDENCE,
        match_type=MatchType.VARIANT,
        variants=[variant],
        reasoning=f'Partial match found for variation "{variant}"',
    )


def _contextual_rule(text: str, business_name: str) -> MentionAnalysis | None:
    if not any(p.search(text) for p in _REFERENTIAL_PATTERNS):
        return None

    lower = text.lower()
    hits = [w for w in BUSINESS_CONTEXT_WORDS if w in lower]
    if len(hits) < CONTEXT_KEYWORD_THRESHOLD:
        return None

    return MentionAnalysis(
        mentioned=True,
        confidence=CONTEXTUAL_CONFIDENCE,
        match_type=MatchType.CONTEXTUAL,
        reasoning=f"Contextual business reference detected with {len(hits)} business-related terms",
    )


@dataclass(frozen=True)
class MentionRule:
    name: str
    match: Callable[[str, str], MentionAnalysis | None]


MENTION_RULES: list[MentionRule] = [
    MentionRule("exact", _exact_rule),
    MentionRule("variant", _variant_rule),
    MentionRule("contextual", _contextual_rule),
]


def analyze_mention(
    text: str,
    business_name: str,
    rules: list[MentionRule] | None = None,
) -> MentionAnalysis:
    """Decide whether *text* mentions the business. First matching rule wins."""
    for rule in rules if rules is not None else MENTION_RULES:
        result = rule.match(text, business_name)
        if result is not None:
            return result

    return MentionAnalysis(
        mentioned=False,
        confidence=NOT_MENTIONED_CONFIDENCE,
        match_type=MatchType.NONE,
        reasoning="No mention of business name or variations found",
    )
