"""LLM Response Analysis & Aggregation Engine.

Heuristic pipeline for analyzing raw model responses about one business:
  1. Text Preprocessor (think blocks, markdown artifacts)
  2. Mention detection (exact → variant → contextual)
  3. Sentiment classification (word lists, implicit patterns)
  4. Competitor & rank extraction (list parsing, rejection rules)

Per-query results are then reduced by:
  - Visibility Metrics Aggregator (0–100 visibility score)
  - Leaderboard Builder (competitor standings from recommendation queries)

Input:  RawResponse (from the gateway dispatcher)
Output: AnalysisResult, VisibilityMetrics, CompetitiveLeaderboard
"""
