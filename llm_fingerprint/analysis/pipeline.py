"""Analysis Pipeline: per-response analyzer.

Chains the analysis steps in order:
  1. Text Preprocessor
  2. Mention detection
  3. Sentiment classification
  4. Competitor & rank extraction

Overall confidence = 0.5 × mention + 0.3 × sentiment + 0.2 × extraction.

Input:  RawResponse (from the gateway dispatcher)
Output: AnalysisResult (AnalysisSuccess, or AnalysisFailure on internal error)
"""

from __future__ import annotations

import logging
import time
from collections.abc import Callable

from llm_fingerprint.analysis.competitors import analyze_competitors
from llm_fingerprint.analysis.mention import analyze_mention
from llm_fingerprint.analysis.preprocessor import preprocess
from llm_fingerprint.analysis.sentiment import analyze_sentiment
from llm_fingerprint.analysis.types import (
    AnalysisFailure,
    AnalysisResult,
    AnalysisSuccess,
    CompetitorAnalysis,
    MentionAnalysis,
    SentimentAnalysis,
)
from llm_fingerprint.core.metrics import ANALYSIS_FAILURES
from llm_fingerprint.gateway.types import PromptType, RawResponse

logger = logging.getLogger(__name__)

MENTION_WEIGHT = 0.5
SENTIMENT_WEIGHT = 0.3
COMPETITOR_WEIGHT = 0.2


def overall_confidence(
    mention: MentionAnalysis,
    sentiment: SentimentAnalysis,
    competitors: CompetitorAnalysis,
) -> float:
    return (
        mention.confidence * MENTION_WEIGHT
        + sentiment.confidence * SENTIMENT_WEIGHT
        + competitors.confidence * COMPETITOR_WEIGHT
    )


class ResponseAnalyzer:
    """Turns one model response into mention / sentiment / rank / competitor signals.

    analyze() never raises: any error inside the heuristics becomes an
    AnalysisFailure carrying the error message.
    """

    def __init__(self, clock: Callable[[], float] = time.monotonic):
        self._clock = clock

    def analyze(
        self,
        response: RawResponse,
        business_name: str,
        prompt_type: PromptType,
        prompt: str = "",
    ) -> AnalysisResult:
        start = self._clock()

        try:
            text = preprocess(response.content).text

            mention = analyze_mention(text, business_name)
            sentiment = analyze_sentiment(text, mention.mentioned)
            competitors = analyze_competitors(text, business_name, mention.mentioned)

            result = AnalysisSuccess(
                model=response.model,
                prompt_type=prompt_type,
                mentioned=mention.mentioned,
                sentiment=sentiment.sentiment,
                confidence=overall_confidence(mention, sentiment, competitors),
                rank_position=competitors.target_rank,
                competitor_mentions=tuple(competitors.competitors),
                raw_response=response.content,
                tokens_used=response.tokens_used,
                prompt=prompt,
                processing_time_ms=self._elapsed_ms(start),
            )
        except Exception as e:
            logger.exception(
                "Response analysis failed: model=%s, prompt_type=%s, business=%s",
                response.model,
                prompt_type,
                business_name,
            )
            ANALYSIS_FAILURES.labels(model=response.model).inc()
            return AnalysisFailure(
                model=response.model,
                prompt_type=prompt_type,
                error=str(e) or type(e).__name__,
                raw_response=response.content,
                tokens_used=response.tokens_used,
                prompt=prompt,
                processing_time_ms=self._elapsed_ms(start),
            )

        logger.debug(
            "Response analysis completed: model=%s, prompt_type=%s, mentioned=%s (%s), "
            "sentiment=%s, confidence=%.2f, rank=%s, competitors=%d",
            response.model,
            prompt_type.value,
            result.mentioned,
            mention.match_type.value,
            result.sentiment.value,
            result.confidence,
            result.rank_position,
            len(result.competitor_mentions),
        )
        return result

    def analyze_batch(
        self,
        responses: list[RawResponse],
        business_name: str,
        prompt_types: list[PromptType],
        prompts: list[str] | None = None,
    ) -> list[AnalysisResult]:
        """Analyze responses paired positionally with their prompt types and prompts."""
        if len(prompt_types) != len(responses):
            raise ValueError("responses and prompt_types must have the same length")
        prompts = prompts or [""] * len(responses)

        return [
            self.analyze(response, business_name, prompt_type, prompt)
            for response, prompt_type, prompt in zip(responses, prompt_types, prompts)
        ]

    def _elapsed_ms(self, start: float) -> int:
        return max(0, int((self._clock() - start) * 1000))
