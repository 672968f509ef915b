import random
from collections.abc import Callable

import pytest

from llm_fingerprint.analysis.types import AnalysisFailure, AnalysisSuccess, Sentiment
from llm_fingerprint.gateway.client import BaseModelClient
from llm_fingerprint.gateway.types import DEFAULT_MAX_TOKENS, PromptType, RawResponse


class RecordedSleep:
    """Awaitable stand-in for asyncio.sleep that only records the requested delays."""

    def __init__(self):
        self.delays: list[float] = []

    async def __call__(self, delay: float) -> None:
        self.delays.append(delay)


class FakeModelClient(BaseModelClient):
    """Scripted model client.

    *script* maps a model id to a list of outcomes consumed one per call;
    an outcome is either response text or an exception instance to raise.
    Models without a script answer with "<model> says hello".
    """

    def __init__(self, script: dict[str, list] | None = None, configured: bool = True):
        self.script = {model: list(outcomes) for model, outcomes in (script or {}).items()}
        self.configured = configured
        self.calls: list[dict] = []

    @property
    def is_configured(self) -> bool:
        return self.configured

    async def call(self, model, prompt, *, temperature=0.7, max_tokens=DEFAULT_MAX_TOKENS):
        self.calls.append({"model": model, "prompt": prompt, "temperature": temperature, "max_tokens": max_tokens})

        outcomes = self.script.get(model)
        outcome = outcomes.pop(0) if outcomes else f"{model} says hello"
        if isinstance(outcome, BaseException):
            raise outcome
        return RawResponse(content=outcome, tokens_used=42, model=model, request_id=f"req-{len(self.calls)}")


class ManualClock:
    def __init__(self, start: float = 1000.0):
        self.now = start

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds


@pytest.fixture
def recorded_sleep() -> RecordedSleep:
    return RecordedSleep()


@pytest.fixture
def manual_clock() -> ManualClock:
    return ManualClock()


@pytest.fixture
def seeded_rng() -> random.Random:
    return random.Random(1234)


@pytest.fixture
def make_success() -> Callable[..., AnalysisSuccess]:
    def _make(
        model: str = "openai/gpt-4-turbo",
        prompt_type: PromptType = PromptType.FACTUAL,
        mentioned: bool = True,
        sentiment: Sentiment = Sentiment.NEUTRAL,
        confidence: float = 0.8,
        rank_position: int | None = None,
        competitor_mentions: tuple[str, ...] = (),
        raw_response: str = "",
    ) -> AnalysisSuccess:
        return AnalysisSuccess(
            model=model,
            prompt_type=prompt_type,
            mentioned=mentioned,
            sentiment=sentiment,
            confidence=confidence,
            rank_position=rank_position,
            competitor_mentions=competitor_mentions,
            raw_response=raw_response,
        )

    return _make


@pytest.fixture
def make_failure() -> Callable[..., AnalysisFailure]:
    def _make(
        model: str = "openai/gpt-4-turbo",
        prompt_type: PromptType = PromptType.FACTUAL,
        error: str = "boom",
    ) -> AnalysisFailure:
        return AnalysisFailure(model=model, prompt_type=prompt_type, error=error)

    return _make


@pytest.fixture
def fake_client_cls() -> type[FakeModelClient]:
    return FakeModelClient
