"""Core types and DTOs for the LLM query gateway."""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum


# ---------------------------------------------------------------------------
# Enums
# ---------------------------------------------------------------------------


class PromptType(str, Enum):
    """Kind of question asked about the business."""

    FACTUAL = "factual"
    OPINION = "opinion"
    RECOMMENDATION = "recommendation"


# Sampling temperature per prompt type: lower for facts, higher for recommendations
DEFAULT_TEMPERATURES: dict[PromptType, float] = {
    PromptType.FACTUAL: 0.3,
    PromptType.OPINION: 0.5,
    PromptType.RECOMMENDATION: 0.7,
}

DEFAULT_MAX_TOKENS = 2000


# ---------------------------------------------------------------------------
# Query: input to the dispatcher
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class LlmQuery:
    """A single prompt to send to one model backend.

    Built once per (model × prompt type) pair for a business.
    """

    model: str = ""  # OpenRouter model id, e.g. "openai/gpt-4-turbo"
    prompt: str = ""
    prompt_type: PromptType = PromptType.FACTUAL
    temperature: float = 0.7
    max_tokens: int = DEFAULT_MAX_TOKENS


# ---------------------------------------------------------------------------
# Raw response: output of the dispatcher
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class RawResponse:
    """Text returned by a model backend (or by the mock fallback generator)."""

    content: str = ""
    tokens_used: int = 0
    model: str = ""  # Actual model reported by the backend
    request_id: str | None = None
    cached: bool = False
    processing_time_ms: int = 0
    is_fallback: bool = False  # Synthesized by MockResponseGenerator

    def to_dict(self) -> dict:
        """Serialize to JSON-compatible dict."""
        return {
            "content": self.content,
            "tokens_used": self.tokens_used,
            "model": self.model,
            "request_id": self.request_id,
            "cached": self.cached,
            "processing_time_ms": self.processing_time_ms,
            "is_fallback": self.is_fallback,
        }
