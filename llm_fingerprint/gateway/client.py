"""Model Client: sends one prompt to one model backend.

The client performs a single HTTP call and classifies failures:
  - TransientModelError: network errors, timeouts, 408/429, 5xx, empty choices
  - PermanentModelError: any other 4xx (bad key, unknown model, bad payload)

Retrying is the dispatcher's job; the client never sleeps.
"""

from __future__ import annotations

import logging
import time
from abc import ABC, abstractmethod

import httpx

from llm_fingerprint.gateway.types import DEFAULT_MAX_TOKENS, RawResponse

logger = logging.getLogger(__name__)

# 4xx codes that mean "try again later" rather than "this request is wrong"
_RETRYABLE_CLIENT_CODES = frozenset({408, 429})


class ModelClientError(Exception):
    """Base error for a failed model call."""

    def __init__(self, message: str, status_code: int = 0):
        super().__init__(message)
        self.status_code = status_code


class TransientModelError(ModelClientError):
    """Failure that may succeed on retry."""


class PermanentModelError(ModelClientError):
    """Failure that will not succeed on retry."""


def classify_status(status_code: int, message: str) -> ModelClientError:
    """Map a non-2xx HTTP status to the matching error class."""
    if 400 <= status_code < 500 and status_code not in _RETRYABLE_CLIENT_CODES:
        return PermanentModelError(message, status_code=status_code)
    return TransientModelError(message, status_code=status_code)


class BaseModelClient(ABC):
    """Base class for model backends."""

    @property
    @abstractmethod
    def is_configured(self) -> bool:
        """True when the client has the credentials it needs to make calls."""
        ...

    @abstractmethod
    async def call(
        self,
        model: str,
        prompt: str,
        *,
        temperature: float = 0.7,
        max_tokens: int = DEFAULT_MAX_TOKENS,
    ) -> RawResponse:
        """Send one prompt and return the response text and token usage."""
        ...


# ---------------------------------------------------------------------------
# OpenRouter client (OpenAI-compatible chat completions)
# ---------------------------------------------------------------------------


class OpenRouterClient(BaseModelClient):
    """OpenRouter chat completions client."""

    api_url = "https://openrouter.ai/api/v1/chat/completions"

    def __init__(
        self,
        api_key: str,
        api_url: str | None = None,
        timeout: float = 60.0,
        referer: str = "http://localhost",
        app_title: str = "LLM Business Fingerprinting",
    ):
        self.api_key = api_key
        self.api_url = api_url or self.api_url
        self.timeout = timeout
        self.referer = referer
        self.app_title = app_title

    @property
    def is_configured(self) -> bool:
        return bool(self.api_key)

    async def call(
        self,
        model: str,
        prompt: str,
        *,
        temperature: float = 0.7,
        max_tokens: int = DEFAULT_MAX_TOKENS,
    ) -> RawResponse:
        start = time.monotonic()

        payload = {
            "model": model,
            "messages": [{"role": "user", "content": prompt}],
            "temperature": temperature,
            "max_tokens": max_tokens,
        }

        try:
            async with httpx.AsyncClient(timeout=self.timeout) as client:
                resp = await client.post(
                    self.api_url,
                    json=payload,
                    headers={
                        "Authorization": f"Bearer {self.api_key}",
                        "Content-Type": "application/json",
                        "HTTP-Referer": self.referer,
                        "X-Title": self.app_title,
                    },
                )
        except httpx.TimeoutException as e:
            raise TransientModelError(f"OpenRouter timeout after {self.timeout}s") from e
        except httpx.TransportError as e:
            raise TransientModelError(f"OpenRouter transport error: {e}") from e

        if resp.status_code >= 400:
            raise classify_status(
                resp.status_code,
                f"OpenRouter API error: {resp.status_code} - {resp.text[:200]}",
            )

        data = resp.json()
        choices = data.get("choices") or []
        if not choices:
            raise TransientModelError("No response choices returned from OpenRouter API")

        content = (choices[0].get("message") or {}).get("content") or ""
        usage = data.get("usage") or {}
        elapsed_ms = int((time.monotonic() - start) * 1000)

        logger.debug(
            "OpenRouter call completed: model=%s, tokens=%d, %dms",
            model,
            usage.get("total_tokens", 0),
            elapsed_ms,
        )

        return RawResponse(
            content=content,
            tokens_used=usage.get("total_tokens", 0) or 0,
            model=data.get("model", model),
            request_id=data.get("id"),
            cached=False,
            processing_time_ms=elapsed_ms,
        )
