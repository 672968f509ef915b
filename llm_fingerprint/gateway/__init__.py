"""LLM query gateway.

Dispatches fingerprinting queries to model backends with:
  - Batched concurrent execution with a cooldown between batches
  - Retry with exponential backoff for transient failures
  - Development-time response cache (TTL, advisory)
  - Mock fallback responses so every query resolves to text
"""
