"""Business-name variants.

A model rarely repeats a business name verbatim. Variants cover the usual
drift:
  - legal / generic suffix dropped ("Acme Dental LLC" → "Acme Dental")
  - leading article dropped ("The Corner Cafe" → "Corner Cafe")
    (each strip alone, and only when two words remain)
  - "&" ↔ "and", "centre" ↔ "center"
  - initialism of multi-word names ("Bay Area Dental" → "BAD")
"""

from __future__ import annotations

import re

NAME_SUFFIXES = ("inc", "llc", "corp", "company", "co", "ltd", "group", "services", "solutions")
NAME_PREFIXES = ("the", "a", "an")

# Word-level substitutions, applied one at a time
_REPLACEMENTS = (
    (re.compile(r"\s*&\s*"), " and "),
    (re.compile(r"\band\b", re.IGNORECASE), "&"),
    (re.compile(r"\bcentre\b", re.IGNORECASE), "center"),
    (re.compile(r"\bcenter\b", re.IGNORECASE), "centre"),
)

_SUFFIX_PATTERN = re.compile(
    r"[\s,]+(?:" + "|".join(NAME_SUFFIXES) + r")\.?$",
    re.IGNORECASE,
)
_PREFIX_PATTERN = re.compile(
    r"^(?:" + "|".join(NAME_PREFIXES) + r")\s+",
    re.IGNORECASE,
)
_WHITESPACE = re.compile(r"\s+")


def _normalize(name: str) -> str:
    return _WHITESPACE.sub(" ", name).strip()


def _distinctive(stripped: str) -> bool:
    # A stripped name must keep two words besides a leading article;
    # "The Dental Group" must not shrink to "Dental" or "The Dental".
    return len(_normalize(_PREFIX_PATTERN.sub("", stripped)).split(" ")) >= 2


def initialism(name: str) -> str | None:
    """Upper-cased first letters of a multi-word name, or None."""
    words = [w for w in _normalize(name).split(" ") if w and w[0].isalnum()]
    if len(words) < 2:
        return None
    return "".join(w[0].upper() for w in words)


def name_variants(business_name: str, include_initialism: bool = True) -> list[str]:
    """All spellings of *business_name* worth searching for, original first."""
    name = _normalize(business_name)
    if not name:
        return []

    variants: list[str] = [name]

    def add(value: str) -> None:
        value = _normalize(value)
        if len(value) >= 2 and value.lower() not in (v.lower() for v in variants):
            variants.append(value)

    for stripped in (_SUFFIX_PATTERN.sub("", name), _PREFIX_PATTERN.sub("", name)):
        if _distinctive(stripped):
            add(stripped)

    for pattern, replacement in _REPLACEMENTS:
        if pattern.search(name):
            add(pattern.sub(replacement, name))

    if include_initialism:
        abbreviation = initialism(name)
        if abbreviation:
            add(abbreviation)

    return variants


def variant_pattern(variant: str) -> re.Pattern[str]:
    """Case-insensitive whole-word search pattern for one variant."""
    return re.compile(r"(?<!\w)" + re.escape(variant) + r"(?!\w)", re.IGNORECASE)


def find_variant(text: str, business_name: str) -> str | None:
    """First variant (other than the exact name) that occurs in *text* as a whole word."""
    for variant in name_variants(business_name)[1:]:
        if variant_pattern(variant).search(text):
            return variant
    return None


def mentions_business(text: str, business_name: str) -> bool:
    """True if *text* contains the business name or one of its variants."""
    name = _normalize(business_name)
    if not name:
        return False
    if name.lower() in text.lower():
        return True
    return find_variant(text, name) is not None


def is_same_business(candidate: str, business_name: str) -> bool:
    """True if two names refer to the same business.

    Compares the spelled-out variants of both names. An initialism only
    counts when the candidate *is* the target's initialism, so "Tom Baker"
    never matches "Test Business".
    """
    left = _normalize(candidate).lower()
    right = _normalize(business_name).lower()
    if not left or not right:
        return False
    if left == right:
        return True

    left_variants = {v.lower() for v in name_variants(candidate, include_initialism=False)}
    right_variants = {v.lower() for v in name_variants(business_name, include_initialism=False)}
    if left_variants & right_variants:
        return True

    target_initialism = initialism(business_name)
    return target_initialism is not None and _normalize(candidate) == target_initialism
