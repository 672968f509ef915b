"""Prompt templates and industry wording.

Templates use str.format placeholders:
  {business_name}, {location_context}, {industry}, {industry_plural},
  {business_type}, {service_type}, {service_context}
"""

from __future__ import annotations

from dataclasses import dataclass

from llm_fingerprint.gateway.types import PromptType

FACTUAL_TEMPLATES = [
    "What information do you have about {business_name}{location_context}? Please provide factual details "
    "about their services, reputation, contact information, and any notable characteristics.",
    "Can you tell me about {business_name}{location_context}? I'm looking for factual information about what "
    "they do, their background, and their reputation in the community.",
    "I need information about {business_name}{location_context}. What can you tell me about their services, "
    "experience, and standing in the {industry} industry?",
]

OPINION_TEMPLATES = [
    "I'm considering using the services of {business_name}{location_context}. Based on what you know, would "
    "you say they are a reputable and reliable {business_type}? What's your assessment of their quality and "
    "trustworthiness?",
    "I'm thinking about going to {business_name}{location_context} for {service_context}. Do you think "
    "they're a good choice? What's your opinion on their reputation and service quality?",
    "A friend recommended {business_name}{location_context} to me. What's your take on them? Are they known "
    "for being professional and delivering good results in the {industry} space?",
]

RECOMMENDATION_TEMPLATES = [
    "What are the best {industry_plural}{location_context}? I'm looking for top recommendations for quality "
    "{service_type} providers in the area.",
    "Can you recommend the top 5 {industry_plural}{location_context}? I need reliable options for "
    "{service_context} and want to know who the leading providers are.",
    "I'm looking for the most reputable {industry_plural}{location_context}. Who would you recommend for "
    "someone seeking high-quality {service_type} services?",
]

TEMPLATES: dict[PromptType, list[str]] = {
    PromptType.FACTUAL: FACTUAL_TEMPLATES,
    PromptType.OPINION: OPINION_TEMPLATES,
    PromptType.RECOMMENDATION: RECOMMENDATION_TEMPLATES,
}


@dataclass(frozen=True)
class IndustryWording:
    plural: str  # "dental practices"
    service: str  # "dental care"
    type: str  # "dental practice"


DEFAULT_INDUSTRY = "default"

# Insertion order is match order: the first key found in the category wins
INDUSTRY_MAPPINGS: dict[str, IndustryWording] = {
    # Healthcare & medical
    "healthcare": IndustryWording("healthcare providers", "medical care", "healthcare provider"),
    "dental": IndustryWording("dental practices", "dental care", "dental practice"),
    "medical": IndustryWording("medical practices", "medical services", "medical provider"),
    "veterinary": IndustryWording("veterinary clinics", "pet care", "veterinary clinic"),
    # Professional services
    "legal": IndustryWording("law firms", "legal services", "law firm"),
    "accounting": IndustryWording("accounting firms", "financial services", "accounting firm"),
    "consulting": IndustryWording("consulting firms", "business consulting", "consulting company"),
    "real estate": IndustryWording("real estate agencies", "property services", "real estate agency"),
    # Food & hospitality
    "restaurant": IndustryWording("restaurants", "dining", "restaurant"),
    "cafe": IndustryWording("cafes", "coffee and food", "cafe"),
    "catering": IndustryWording("catering companies", "event catering", "catering service"),
    "hotel": IndustryWording("hotels", "accommodation", "hotel"),
    # Retail & commerce
    "retail": IndustryWording("retail stores", "shopping", "retail business"),
    "automotive": IndustryWording("auto services", "vehicle maintenance", "automotive service"),
    "beauty": IndustryWording("beauty salons", "beauty services", "beauty salon"),
    "fitness": IndustryWording("fitness centers", "fitness training", "fitness facility"),
    # Technology & services
    "technology": IndustryWording("tech companies", "technology solutions", "technology company"),
    "marketing": IndustryWording("marketing agencies", "marketing services", "marketing agency"),
    "construction": IndustryWording("construction companies", "construction services", "construction company"),
    "cleaning": IndustryWording("cleaning services", "cleaning", "cleaning service"),
    DEFAULT_INDUSTRY: IndustryWording("businesses", "professional services", "business"),
}

# Secondary keyword → industry hints, checked after the direct keys
CATEGORY_HINTS: list[tuple[tuple[str, ...], str]] = [
    (("food", "dining"), "restaurant"),
    (("health", "medical"), "healthcare"),
    (("law", "attorney"), "legal"),
    (("tech", "software"), "technology"),
    (("shop", "store"), "retail"),
]

CRAWL_HINTS: list[tuple[tuple[str, ...], str]] = [
    (("doctor", "clinic"), "healthcare"),
    (("lawyer", "attorney"), "legal"),
    (("restaurant", "food"), "restaurant"),
    (("software", "app"), "technology"),
]

SERVICE_KEYWORDS = (
    "consulting", "design", "development", "marketing", "sales",
    "repair", "maintenance", "installation", "training", "support",
    "care", "treatment", "therapy", "advice", "planning",
)  # fmt: skip
