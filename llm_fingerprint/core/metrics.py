"""Prometheus metrics for the fingerprinting pipeline."""

from prometheus_client import Counter, Histogram, Info, generate_latest

from llm_fingerprint import __version__

# --- Metrics ---

APP_INFO = Info("llm_fingerprint", "LLM business fingerprinting info")
APP_INFO.info({"version": __version__, "name": "llm_fingerprint"})

LLM_QUERIES = Counter(
    "llm_fingerprint_queries_total",
    "LLM queries resolved by the dispatcher",
    ["model", "outcome"],  # outcome: live | cached | fallback
)

LLM_RETRIES = Counter(
    "llm_fingerprint_query_retries_total",
    "Transient LLM call failures that were retried",
    ["model"],
)

ANALYSIS_FAILURES = Counter(
    "llm_fingerprint_analysis_failures_total",
    "Responses the analyzer could not process",
    ["model"],
)

FINGERPRINT_RUNS = Counter(
    "llm_fingerprint_runs_total",
    "Fingerprint runs",
    ["status"],  # status: ok | fallback
)

FINGERPRINT_DURATION = Histogram(
    "llm_fingerprint_run_duration_seconds",
    "Fingerprint run duration in seconds",
    buckets=[0.1, 0.5, 1, 2.5, 5, 10, 30, 60, 120],
)


def metrics_payload() -> bytes:
    """Render all metrics in the Prometheus text exposition format."""
    return generate_latest()
