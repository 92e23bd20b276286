"""Client-side trend filters (sentiment and minimum impact)."""

from __future__ import annotations

from market_pulse.trends.models import TrendItem

SENTIMENT_FILTERS = ("All", "Positive", "Mixed", "Neutral")
IMPACT_STEP = 10


def filter_trends(trends: list[TrendItem], sentiment: str = "All", min_impact: int = 0) -> list[TrendItem]:
    """Keep trends matching the sentiment filter with impact >= min_impact, in order."""
    return [
        t for t in trends
        if (sentiment == "All" or t.sentiment.value == sentiment) and t.impact_score >= min_impact
    ]
