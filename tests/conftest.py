"""Shared fixtures: temporary database, fake clock, scripted trend source."""

import asyncio
import tempfile
from pathlib import Path

import pytest

from market_pulse.db import Database
from market_pulse.trends.models import Sentiment, Source, TrendItem

START_MS = 1_760_000_000_000


class FakeClock:
    """Settable epoch-millisecond clock."""

    def __init__(self, now: int = START_MS):
        self.now = now

    def __call__(self) -> int:
        return self.now

    def advance(self, ms: int) -> None:
        self.now += ms


class ScriptedSource:
    """Trend source returning queued results; records every call.

    When ``gate`` is set, each fetch waits on it before returning.
    """

    def __init__(self, *results):
        self.results = list(results)
        self.calls = []
        self.gate: asyncio.Event | None = None

    async def fetch(self, query, persona):
        self.calls.append((query, persona))
        result = self.results.pop(0) if self.results else []
        if self.gate is not None:
            await self.gate.wait()
        if isinstance(result, Exception):
            raise result
        return result


def make_trend(title: str = "Short-form video", impact: int = 50, sentiment=Sentiment.NEUTRAL, **kwargs) -> TrendItem:
    return TrendItem(
        title=title,
        category=kwargs.pop("category", "Social"),
        summary=kwargs.pop("summary", f"{title} summary"),
        impact_score=impact,
        sentiment=sentiment,
        advice=kwargs.pop("advice", "Try it this week."),
        sources=kwargs.pop("sources", [Source(title="Example", uri="https://example.com/a")]),
        **kwargs,
    )


def make_trends(count: int = 6) -> list[TrendItem]:
    return [make_trend(f"Trend {i}", impact=10 * i) for i in range(count)]


@pytest.fixture
def db():
    with tempfile.TemporaryDirectory() as tmpdir:
        yield Database(Path(tmpdir) / "test.db")


@pytest.fixture
def clock():
    return FakeClock()
