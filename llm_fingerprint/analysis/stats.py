"""Processing statistics: read-only monitoring view over per-query results.

Independent of the visibility aggregator: mention_rate here is a fraction
rounded to 2 decimals, not a percentage.
"""

from __future__ import annotations

from llm_fingerprint.analysis.types import AnalysisResult, Sentiment, successful


def get_processing_stats(results: list[AnalysisResult]) -> dict:
    ok = successful(results)

    sentiment_distribution = {s.value: 0 for s in Sentiment}
    for r in ok:
        sentiment_distribution[r.sentiment.value] += 1

    model_performance: dict[str, dict] = {}
    for r in ok:
        stats = model_performance.setdefault(r.model, {"queries": 0, "mentions": 0, "avg_confidence": 0.0})
        stats["queries"] += 1
        if r.mentioned:
            stats["mentions"] += 1
        stats["avg_confidence"] += r.confidence

    for stats in model_performance.values():
        stats["avg_confidence"] = round(stats["avg_confidence"] / stats["queries"], 2)

    if ok:
        mention_rate = round(sum(1 for r in ok if r.mentioned) / len(ok), 2)
        avg_confidence = round(sum(r.confidence for r in ok) / len(ok), 2)
    else:
        mention_rate = 0.0
        avg_confidence = 0.0

    return {
        "total_queries": len(results),
        "successful_queries": len(ok),
        "mention_rate": mention_rate,
        "avg_confidence": avg_confidence,
        "sentiment_distribution": sentiment_distribution,
        "model_performance": model_performance,
    }
