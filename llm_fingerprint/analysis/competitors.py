"""Competitor & Rank Extraction: analysis step 4.

Competitors come from list structure only:
  - Numbered lines:  "1. Name - description", "2) Name: description"
  - Bulleted lines:  "- Name", "* Name", "• Name"

The leading phrase of each item up to the first dash / colon / paren is the
candidate. Candidates then pass through CANDIDATE_RULES in order; the first
rule that rejects a candidate drops it. Survivors are de-duplicated in
discovery order.

Target rank (only when the business is mentioned):
  1. Ordinal patterns (#3, number 3, 3rd place, top 3, ranked 3, position 3)
     on lines that mention the business
  2. Leading numeral of a numbered line that mentions the business
Values outside 1..10 are ignored.
"""

from __future__ import annotations

import re
from collections.abc import Callable
from dataclasses import dataclass

from llm_fingerprint.analysis.types import CompetitorAnalysis
from llm_fingerprint.analysis.variants import is_same_business, mentions_business

MIN_RANK = 1
MAX_RANK = 10
MAX_EXPECTED_COMPETITORS = 10

# ---------------------------------------------------------------------------
# List parsing
# ---------------------------------------------------------------------------

_NUMBERED_LINE = re.compile(r"^\s*(\d+)[.)]\s+(.+?)\s*$")
_BULLET_LINE = re.compile(r"^\s*[-*•]\s+(.+?)\s*$")
_HAS_NUMBERED_LIST = re.compile(r"^\s*\d+[.)]", re.MULTILINE)

# "Name - desc", "Name — desc", "Name: desc", "Name (desc)"; "Coca-Cola" stays whole
_ITEM_SEPARATOR = re.compile(r"\s+[-–—]\s*|[–—:(]")
_LEGAL_SUFFIX_END = re.compile(r"\b(?:Inc|Corp|Co|Ltd|LLC)\.$")

_RECOMMENDATION_PHRASING = re.compile(r"\b(?:recommend|top|best)", re.IGNORECASE)

# ---------------------------------------------------------------------------
# Rejection vocabulary
# ---------------------------------------------------------------------------

_BOILERPLATE_PATTERNS = [
    re.compile(r"^(?:here are|i'd recommend|i recommend|to give you|that's a|i need|quality recommendations)", re.I),
    re.compile(r"^(?:each of these|these businesses|professional standards|local community)", re.I),
    re.compile(r"^(?:demonstrated|serves the|effectively|strong community presence)", re.I),
    re.compile(r"^(?:with strong|community presence|demonstrated professional)", re.I),
    re.compile(r"^(?:some top|top recommendations|recommendations for)", re.I),
    re.compile(r"^(?:a great|great question|little more|more information)", re.I),
    re.compile(r"^(?:what you're|you're looking|looking for)", re.I),
]

_NARRATIVE_STARTS = [
    re.compile(r"^(?:and|or|but|if|when|where|why|how)\s+", re.I),  # conjunction
    re.compile(r"^(?:is|are|was|were|be|been|being)\s+", re.I),  # copula
    re.compile(r"^(?:can|could|should|would|will|may|might)\s+", re.I),  # modal
    re.compile(r"^(?:this|that|these|those)\s+", re.I),  # demonstrative
    re.compile(r"^(?:it|they|we|you|he|she)\s+", re.I),  # pronoun
]

FILLER_PHRASES = (
    "quality professional services",
    "professional services providers",
    "strong community presence",
    "demonstrated professional standards",
    "serves the local community",
    "professional service with",
    "established local reputation",
    "quality recommendations for",
    "each of these businesses",
)

GENERIC_WORDS = frozenset(
    {"quality", "professional", "local", "community", "excellence", "choice", "group", "services", "solutions"}
)

NON_BUSINESS_ENTITIES = (
    # search engines, social networks, review platforms
    "Google", "Bing", "Facebook", "Twitter", "LinkedIn", "Instagram",
    "Better Business Bureau", "BBB", "Yelp", "TripAdvisor",
    # places
    "United States", "New York", "California", "Texas",
    # days
    "Monday", "Tuesday", "Wednesday", "Thursday", "Friday", "Saturday", "Sunday",
    # months
    "January", "February", "March", "April", "May", "June",
    "July", "August", "September", "October", "November", "December",
)  # fmt: skip

_NON_BUSINESS_PATTERN = re.compile(
    r"\b(?:" + "|".join(re.escape(e) for e in NON_BUSINESS_ENTITIES) + r")\b",
    re.IGNORECASE,
)

_MULTI_SENTENCE = re.compile(r"\.\s+[A-Z]|[?!\n]")

# ---------------------------------------------------------------------------
# Ordinal rank patterns
# ---------------------------------------------------------------------------

RANK_PATTERNS = [
    re.compile(r"(?:\bnumber\s+|#)(\d+)", re.IGNORECASE),
    re.compile(r"\b(\d+)(?:st|nd|rd|th)\s+(?:place|choice|option)\b", re.IGNORECASE),
    re.compile(r"\btop\s+(\d+)\b", re.IGNORECASE),
    re.compile(r"\branked\s+(?:#|number\s+)?(\d+)\b", re.IGNORECASE),
    re.compile(r"\bposition\s+(\d+)\b", re.IGNORECASE),
]


# ---------------------------------------------------------------------------
# Candidate rules
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class CandidateRule:
    """Named predicate; True means the candidate is not a competitor."""

    name: str
    rejects: Callable[[str, str], bool]


def _bad_length(candidate: str, business_name: str) -> bool:
    return len(candidate) < 2 or len(candidate) > 80


def _not_capitalized(candidate: str, business_name: str) -> bool:
    return not candidate[:1].isupper()


def _no_letters(candidate: str, business_name: str) -> bool:
    return not any(c.isalpha() for c in candidate)


def _boilerplate(candidate: str, business_name: str) -> bool:
    return any(p.search(candidate) for p in _BOILERPLATE_PATTERNS)


def _narrative_start(candidate: str, business_name: str) -> bool:
    return any(p.search(candidate) for p in _NARRATIVE_STARTS)


def _filler_phrase(candidate: str, business_name: str) -> bool:
    lower = candidate.lower()
    return any(phrase in lower for phrase in FILLER_PHRASES)


def _generic_word(candidate: str, business_name: str) -> bool:
    return candidate.lower() in GENERIC_WORDS


def _multi_sentence(candidate: str, business_name: str) -> bool:
    return bool(_MULTI_SENTENCE.search(candidate))


def _target_business(candidate: str, business_name: str) -> bool:
    if not business_name.strip():
        return False
    return is_same_business(candidate, business_name) or business_name.strip().lower() in candidate.lower()


def _non_business_entity(candidate: str, business_name: str) -> bool:
    return bool(_NON_BUSINESS_PATTERN.search(candidate))


CANDIDATE_RULES: list[CandidateRule] = [
    CandidateRule("length", _bad_length),
    CandidateRule("not_capitalized", _not_capitalized),
    CandidateRule("no_letters", _no_letters),
    CandidateRule("boilerplate", _boilerplate),
    CandidateRule("narrative_start", _narrative_start),
    CandidateRule("filler_phrase", _filler_phrase),
    CandidateRule("generic_word", _generic_word),
    CandidateRule("multi_sentence", _multi_sentence),
    CandidateRule("target_business", _target_business),
    CandidateRule("non_business_entity", _non_business_entity),
]


def rejection_reason(
    candidate: str,
    business_name: str,
    rules: list[CandidateRule] | None = None,
) -> str | None:
    """Name of the first rule that rejects *candidate*, or None if it is kept."""
    for rule in rules if rules is not None else CANDIDATE_RULES:
        if rule.rejects(candidate, business_name):
            return rule.name
    return None


# ---------------------------------------------------------------------------
# Extraction
# ---------------------------------------------------------------------------


def clean_item(item: str) -> str:
    """Leading name phrase of a list item."""
    name = _ITEM_SEPARATOR.split(item, maxsplit=1)[0].strip()
    name = name.rstrip(",;").strip()
    if name.endswith(".") and not _LEGAL_SUFFIX_END.search(name):
        name = name.rstrip(".").strip()
    return name


def list_items(text: str) -> list[str]:
    """Cleaned leading phrases of all numbered and bulleted lines, in text order."""
    items: list[str] = []
    for line in text.split("\n"):
        match = _NUMBERED_LINE.match(line)
        if match:
            items.append(clean_item(match.group(2)))
            continue
        match = _BULLET_LINE.match(line)
        if match:
            items.append(clean_item(match.group(1)))
    return [item for item in items if item]


def extract_competitors(
    text: str,
    business_name: str,
    rules: list[CandidateRule] | None = None,
) -> list[str]:
    """Competitor names listed in *text*, unique, in discovery order."""
    competitors: list[str] = []
    seen: set[str] = set()
    for candidate in list_items(text):
        if candidate in seen:
            continue
        seen.add(candidate)
        if rejection_reason(candidate, business_name, rules) is None:
            competitors.append(candidate)
    return competitors


def _in_rank_range(value: str) -> int | None:
    rank = int(value)
    return rank if MIN_RANK <= rank <= MAX_RANK else None


def list_position(text: str, name: str) -> int | None:
    """Leading numeral of the first numbered line containing *name*, if in 1..10."""
    lower_name = name.lower()
    for line in text.split("\n"):
        if lower_name not in line.lower():
            continue
        match = _NUMBERED_LINE.match(line)
        if match:
            rank = _in_rank_range(match.group(1))
            if rank is not None:
                return rank
    return None


def extract_rank(text: str, business_name: str) -> int | None:
    """Rank of the business in *text*, or None when no ranking is stated."""
    lines = [line for line in text.split("\n") if mentions_business(line, business_name)]
    if not lines:
        return None

    for pattern in RANK_PATTERNS:
        for line in lines:
            for match in pattern.finditer(line):
                rank = _in_rank_range(match.group(1))
                if rank is not None:
                    return rank

    for line in lines:
        match = _NUMBERED_LINE.match(line)
        if match:
            rank = _in_rank_range(match.group(1))
            if rank is not None:
                return rank

    return None


def extraction_confidence(text: str, competitors: list[str]) -> float:
    """How much to trust the competitor list, 0.1..0.95."""
    confidence = 0.5
    if _RECOMMENDATION_PHRASING.search(text):
        confidence += 0.2
    if _HAS_NUMBERED_LIST.search(text):
        confidence += 0.2
    if len(competitors) > MAX_EXPECTED_COMPETITORS:
        confidence -= 0.2
    elif not competitors:
        confidence -= 0.3
    return max(0.1, min(0.95, confidence))


def analyze_competitors(text: str, business_name: str, mentioned: bool) -> CompetitorAnalysis:
    competitors = extract_competitors(text, business_name)
    target_rank = extract_rank(text, business_name) if mentioned else None
    confidence = extraction_confidence(text, competitors)

    reasoning = f"Found {len(competitors)} potential competitors"
    if target_rank is not None:
        reasoning += f", target ranked at position {target_rank}"

    return CompetitorAnalysis(
        competitors=competitors,
        target_rank=target_rank,
        confidence=confidence,
        reasoning=reasoning,
    )
