"""Logging setup for fingerprint runs.

Modules log through ``logging.getLogger(__name__)`` under ``llm_fingerprint.*``:
the dispatcher reports batch progress, retries and mock fallbacks, the
analyzer logs per-response failures, and the fingerprinter logs run start,
summary and zeroed fallbacks. Run-level records carry a ``session_id`` extra
(``fp_<hex>``) so one business's run can be followed through JSON output.
"""

import json
import logging
import sys
from datetime import datetime, timezone

from llm_fingerprint.core.config import Settings, settings


class JSONFormatter(logging.Formatter):
    """Structured JSON log formatter for production."""

    def format(self, record: logging.LogRecord) -> str:
        log_data = {
            "timestamp": datetime.now(timezone.utc).isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
        }
        if record.exc_info and record.exc_info[1]:
            log_data["exception"] = self.formatException(record.exc_info)
        if hasattr(record, "session_id"):
            log_data["session_id"] = record.session_id
        return json.dumps(log_data, ensure_ascii=False)


def setup_logging(config: Settings | None = None) -> None:
    """Configure logging for the entire application."""
    config = config or settings
    level = getattr(logging, config.log_level.upper(), logging.INFO)

    root = logging.getLogger()
    root.setLevel(level)

    # Remove existing handlers
    for handler in root.handlers[:]:
        root.removeHandler(handler)

    handler = logging.StreamHandler(sys.stdout)
    handler.setLevel(level)

    if config.log_json:
        handler.setFormatter(JSONFormatter())
    else:
        handler.setFormatter(
            logging.Formatter(
                "%(asctime)s | %(levelname)-8s | %(name)s | %(message)s",
                datefmt="%Y-%m-%d %H:%M:%S",
            )
        )

    root.addHandler(handler)

    # Suppress noisy libraries
    logging.getLogger("httpx").setLevel(logging.WARNING)
    logging.getLogger("httpcore").setLevel(logging.WARNING)
