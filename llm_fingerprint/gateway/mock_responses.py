"""Mock response generator: fallback text when no real backend answers.

Inspects the prompt to decide whether it is a factual, opinion or
recommendation question, pulls the business name, location and industry out
of it, and writes plausible prose around them. Recommendation answers are a
numbered "N. Name - description" list so the analyzer always sees
well-formed input.

Randomness comes from an injected random.Random. With vary_output=False each
prompt seeds its own generator, so the same prompt always yields the same text.
"""

from __future__ import annotations

import hashlib
import random
import re

from llm_fingerprint.gateway.types import PromptType, RawResponse

_BUSINESS_TYPES = [
    "restaurant",
    "dental practice",
    "law firm",
    "consulting company",
    "retail store",
    "service provider",
    "healthcare facility",
    "tech company",
]

_POSITIVE_DESCRIPTORS = [
    "reputable",
    "professional",
    "reliable",
    "experienced",
    "trusted",
    "established",
    "quality",
    "excellent",
    "outstanding",
    "top-rated",
]

_COMPETITORS: dict[str, list[str]] = {
    "restaurant": ["Local Bistro", "Corner Cafe", "Family Kitchen", "Downtown Grill"],
    "dental": ["Family Dental", "Modern Dentistry", "Gentle Care Dental", "Smile Center"],
    "legal": ["Smith & Associates", "Legal Solutions", "Community Law", "Professional Legal"],
    "default": ["Quality Services", "Local Excellence", "Community Choice", "Professional Group"],
}

# ---------------------------------------------------------------------------
# Prompt inspection patterns
# ---------------------------------------------------------------------------

_FACTUAL_MARKERS = ("what do you know about", "information do you have about", "information about", "tell me about")
_OPINION_MARKERS = ("thinking about", "considering", "your take", "your opinion")
_RECOMMENDATION_MARKERS = ("recommend", "best", "top")

_BUSINESS_NAME_PATTERNS = [
    re.compile(r"going to\s+([^?]+?)(?:\?|\.|\s+in\s+|\s+for\s+)", re.IGNORECASE),
    re.compile(r"about\s+([^?]+?)(?:\?|\.|\s+in\s+)", re.IGNORECASE),
    re.compile(r"services of\s+([^?]+?)(?:\?|\.|\s+located|\s+in\s+)", re.IGNORECASE),
    re.compile(r"recommended\s+(.+?)(?:\s+in\s+.+?)?\s+to me", re.IGNORECASE),
]

_LOCATION_PATTERN = re.compile(r"\b(?:located in|in)\s+([^?.]+?)(?:\?|\.|$)", re.IGNORECASE)
_INDUSTRY_PATTERN = re.compile(r"(?:best|top(?:\s+\d+)?)\s+([A-Za-z\s]+?)(?:\s+in\b|\s+located|\?)", re.IGNORECASE)

_UNKNOWN_PROMPT_TEXT = (
    "I can help you find information about local businesses. Could you please provide "
    "more specific details about what you're looking for?"
)


def classify_prompt(prompt: str) -> PromptType | None:
    """Guess which kind of question a prompt asks. None if it matches no marker."""
    lower = prompt.lower()
    if any(m in lower for m in _FACTUAL_MARKERS):
        return PromptType.FACTUAL
    if any(m in lower for m in _OPINION_MARKERS):
        return PromptType.OPINION
    if any(m in lower for m in _RECOMMENDATION_MARKERS):
        return PromptType.RECOMMENDATION
    return None


def extract_business_name(prompt: str) -> str:
    for pattern in _BUSINESS_NAME_PATTERNS:
        match = pattern.search(prompt)
        if match:
            return match.group(1).strip()
    return "this business"


def extract_location(prompt: str) -> str | None:
    match = _LOCATION_PATTERN.search(prompt)
    return match.group(1).strip() if match else None


def extract_industry(prompt: str) -> str:
    match = _INDUSTRY_PATTERN.search(prompt)
    return match.group(1).lower().strip() if match else "businesses"


class MockResponseGenerator:
    """Builds synthetic responses with the same shape as real model output."""

    def __init__(self, rng: random.Random | None = None, vary_output: bool = True):
        self._rng = rng or random.Random()
        self.vary_output = vary_output

    def _rng_for(self, model: str, prompt: str) -> random.Random:
        if self.vary_output:
            return self._rng
        seed = int(hashlib.md5(f"{model}:{prompt}".encode("utf-8")).hexdigest()[:16], 16)
        return random.Random(seed)

    def generate(self, model: str, prompt: str) -> RawResponse:
        """Synthesize a response for *prompt* as if *model* had answered it."""
        rng = self._rng_for(model, prompt)
        prompt_type = classify_prompt(prompt)
        business_name = extract_business_name(prompt)
        location = extract_location(prompt)

        if prompt_type == PromptType.FACTUAL:
            content = self.factual_response(rng, business_name, location)
        elif prompt_type == PromptType.OPINION:
            content = self.opinion_response(rng, business_name, location)
        elif prompt_type == PromptType.RECOMMENDATION:
            content = self.recommendation_response(rng, business_name, extract_industry(prompt), location)
        else:
            content = _UNKNOWN_PROMPT_TEXT

        return RawResponse(
            content=content,
            tokens_used=rng.randint(100, 299),
            model=model,
            cached=False,
            processing_time_ms=1,
            is_fallback=True,
        )

    @staticmethod
    def factual_response(rng: random.Random, business_name: str, location: str | None = None) -> str:
        location_str = f" in {location}" if location else ""

        if rng.random() > 0.3:
            descriptor = rng.choice(_POSITIVE_DESCRIPTORS)
            business_type = rng.choice(_BUSINESS_TYPES)
            return (
                f"Based on available information, {business_name}{location_str} is a {descriptor} "
                f"{business_type} that has been serving the local community. They maintain professional "
                f"standards and offer quality services to their customers. The business has established "
                f"a presence in the area and continues to operate with a focus on customer satisfaction."
            )
        return (
            f"I don't have specific detailed information about {business_name}{location_str} in my current "
            f"knowledge base. For the most accurate and up-to-date information about their services, "
            f"reputation, and offerings, I'd recommend checking their official website, recent customer "
            f"reviews, or contacting them directly."
        )

    @staticmethod
    def opinion_response(rng: random.Random, business_name: str, location: str | None = None) -> str:
        location_str = f" in {location}" if location else ""

        if rng.random() <= 0.4:
            return (
                f"I don't have enough specific information to form a reliable opinion about "
                f"{business_name}{location_str}. For making an informed decision, I'd suggest checking "
                f"recent online reviews, industry ratings, and getting recommendations from people who "
                f"have used their services."
            )

        tone = rng.random()
        if tone > 0.7:
            return (
                f"Based on general indicators, {business_name}{location_str} appears to be a solid choice. "
                f"They seem to maintain professional standards and have positive community presence. "
                f"However, I'd recommend verifying current customer reviews and ratings to make an "
                f"informed decision about their services."
            )
        if tone > 0.3:
            return (
                f"{business_name}{location_str} appears to be a legitimate business operation. While I don't "
                f"have extensive specific details, they seem to maintain basic professional standards. I'd "
                f"suggest researching recent customer feedback and comparing with other local options."
            )
        return (
            f"I have limited information about {business_name}{location_str} to provide a strong opinion. "
            f"I'd recommend thoroughly researching customer reviews, Better Business Bureau ratings, and "
            f"asking for references before making a decision."
        )

    @staticmethod
    def recommendation_response(
        rng: random.Random,
        business_name: str,
        industry: str,
        location: str | None = None,
    ) -> str:
        location_str = f" in {location}" if location else ""
        lower_industry = industry.lower()
        if "dental" in lower_industry:
            key = "dental"
        elif "legal" in lower_industry or "law" in lower_industry:
            key = "legal"
        elif "restaurant" in lower_industry:
            key = "restaurant"
        else:
            key = "default"

        names = _COMPETITORS[key][: rng.randint(3, 4)]

        if rng.random() > 0.5 and rng.random() > 0.3:
            position = rng.randint(1, len(names))
            names.insert(position - 1, business_name)

        lines = [f"Here are some top {industry}{location_str} I'd recommend:", ""]
        for index, name in enumerate(names[:5], start=1):
            if name == business_name:
                description = "Professional service with established local reputation"
            else:
                description = f"Quality {lower_industry} with strong community presence"
            lines.append(f"{index}. {name} - {description}")

        lines.append("")
        lines.append(
            "Each of these businesses has demonstrated professional standards and serves the local "
            "community effectively."
        )
        return "\n".join(lines)
