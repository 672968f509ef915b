"""
run_fingerprint.py: one end-to-end fingerprint from the command line

Runs the whole pipeline in one go:
  1. Builds prompts for the business
  2. Queries every configured model (mock responses when OPENROUTER_API_KEY is unset)
  3. Analyzes the responses and aggregates the visibility score
  4. Prints a summary and the full JSON result

Usage:
    python run_fingerprint.py "Acme Dental" https://acme-dental.example dental Austin TX
"""

import asyncio
import json
import sys

from llm_fingerprint.core.config import settings, validate_settings
from llm_fingerprint.core.logging import setup_logging
from llm_fingerprint.services.fingerprinter import build_fingerprinter
from llm_fingerprint.services.types import BusinessContext, Location

USAGE = "usage: run_fingerprint.py NAME [URL] [CATEGORY] [CITY] [STATE]"


def parse_context(argv: list[str]) -> BusinessContext:
    if not argv:
        raise SystemExit(USAGE)

    name, url, category, city, state = (argv + [""] * 5)[:5]
    location = Location(city=city, state=state or None) if city else None
    return BusinessContext(
        name=name,
        url=url,
        category=category or None,
        location=location,
    )


async def main():
    context = parse_context(sys.argv[1:])

    setup_logging()
    validate_settings()

    fingerprinter = build_fingerprinter(settings)
    analysis = await fingerprinter.fingerprint(context)

    metrics = analysis.metrics
    print("=" * 60)
    print(f"  {analysis.business_name}")
    print("=" * 60)
    print(f"  Visibility score:  {metrics.visibility_score}/100")
    print(f"  Mention rate:      {metrics.mention_rate:.0f}%")
    print(f"  Sentiment:         {metrics.sentiment_score:.2f}")
    print(f"  Confidence:        {metrics.confidence_level:.2f}")
    print(f"  Avg rank:          {metrics.avg_rank_position}")
    print(f"  Queries:           {metrics.successful_queries}/{metrics.total_queries}")

    leaderboard = analysis.competitive_leaderboard
    if leaderboard.competitors:
        print("\n  Competitors:")
        for entry in leaderboard.competitors:
            print(f"    {entry.name:30s} mentions={entry.mention_count} avg_pos={entry.avg_position:.1f}")

    print("\n" + json.dumps(analysis.to_dict(), indent=2, ensure_ascii=False))


if __name__ == "__main__":
    asyncio.run(main())
