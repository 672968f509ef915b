"""Template-based prompt generation.

PromptGenerator is the seam the fingerprinter depends on; any object with a
matching generate() can replace the template generator (e.g. an LLM-backed
one, or a fixed-prompt stub in tests).
"""

from __future__ import annotations

import logging
import random
from dataclasses import dataclass
from typing import Protocol

from llm_fingerprint.gateway.types import PromptType
from llm_fingerprint.prompt_engine.templates import (
    CATEGORY_HINTS,
    CRAWL_HINTS,
    DEFAULT_INDUSTRY,
    INDUSTRY_MAPPINGS,
    SERVICE_KEYWORDS,
    TEMPLATES,
)
from llm_fingerprint.services.types import BusinessContext, Location

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class GeneratedPrompts:
    factual: str = ""
    opinion: str = ""
    recommendation: str = ""

    def for_type(self, prompt_type: PromptType) -> str:
        return getattr(self, prompt_type.value)


class PromptGenerator(Protocol):
    def generate(self, context: BusinessContext) -> GeneratedPrompts: ...


def location_context(location: Location | None) -> str:
    """' in City, State' or '' when no city/state is known."""
    if location is None:
        return ""
    parts = [p for p in (location.city, location.state) if p]
    return f" in {', '.join(parts)}" if parts else ""


def _direct_industry(text: str) -> str | None:
    for industry in INDUSTRY_MAPPINGS:
        if industry != DEFAULT_INDUSTRY and industry in text:
            return industry
    return None


def _hinted_industry(text: str, hints: list[tuple[tuple[str, ...], str]]) -> str | None:
    for keywords, industry in hints:
        if any(k in text for k in keywords):
            return industry
    return None


def _crawl_text(crawl_facts: dict) -> str:
    details = crawl_facts.get("business_details") or {}
    parts = [
        crawl_facts.get("description"),
        details.get("industry"),
        details.get("sector"),
        *(crawl_facts.get("services") or []),
    ]
    return " ".join(str(p) for p in parts if p).lower()


def detect_industry(context: BusinessContext) -> str:
    """Industry key for *context*: category first, then crawl facts, then URL."""
    if context.category:
        category = context.category.lower()
        industry = _direct_industry(category) or _hinted_industry(category, CATEGORY_HINTS)
        if industry:
            return industry

    if context.crawl_facts:
        text = _crawl_text(context.crawl_facts)
        industry = _direct_industry(text) or _hinted_industry(text, CRAWL_HINTS)
        if industry:
            return industry

    if context.url:
        industry = _direct_industry(context.url.lower())
        if industry:
            return industry

    return DEFAULT_INDUSTRY


def service_context(context: BusinessContext, default_service: str) -> str:
    """Most specific service wording available: first crawled service, keyword in description, default."""
    facts = context.crawl_facts or {}

    services = facts.get("services") or []
    if services:
        return str(services[0]).lower()

    description = str(facts.get("description") or "").lower()
    for keyword in SERVICE_KEYWORDS:
        if keyword in description:
            return keyword

    return default_service


class TemplatePromptGenerator:
    """Picks one template per prompt type and fills it from the business context."""

    def __init__(self, rng: random.Random | None = None):
        self._rng = rng or random.Random()

    def build_variables(self, context: BusinessContext) -> dict[str, str]:
        industry = detect_industry(context)
        wording = INDUSTRY_MAPPINGS.get(industry, INDUSTRY_MAPPINGS[DEFAULT_INDUSTRY])
        return {
            "business_name": context.name,
            "location_context": location_context(context.location),
            "industry": industry if industry != DEFAULT_INDUSTRY else "local business",
            "industry_plural": wording.plural,
            "business_type": wording.type,
            "service_type": wording.service,
            "service_context": service_context(context, wording.service),
        }

    def generate_one(self, context: BusinessContext, prompt_type: PromptType) -> str:
        template = self._rng.choice(TEMPLATES[prompt_type])
        return template.format_map(self.build_variables(context))

    def generate(self, context: BusinessContext) -> GeneratedPrompts:
        prompts = GeneratedPrompts(
            factual=self.generate_one(context, PromptType.FACTUAL),
            opinion=self.generate_one(context, PromptType.OPINION),
            recommendation=self.generate_one(context, PromptType.RECOMMENDATION),
        )
        logger.debug("Generated prompts for %s: %s", context.name, prompts)
        return prompts
