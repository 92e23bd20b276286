"""Parse the model's labelled-line trend format into TrendItems."""

from __future__ import annotations

from market_pulse.trends.models import Sentiment, Source, TrendItem

ENTRY_DELIMITER = "---"
UNTITLED = "Untitled Trend"

# (label, field) pairs; labels are matched case-insensitively at line start
_LABELS = (
    ("title:", "title"),
    ("category:", "category"),
    ("impact:", "impact"),
    ("sentiment:", "sentiment"),
    ("summary:", "summary"),
    ("actionable tip:", "advice"),
)


def _strip_markdown(text: str) -> str:
    return text.replace("**", "")


def _parse_sentiment(text: str) -> Sentiment:
    if "Positive" in text:
        return Sentiment.POSITIVE
    if "Mixed" in text:
        return Sentiment.MIXED
    return Sentiment.NEUTRAL


def _parse_int(text: str) -> int | None:
    """Leading-integer parse: '85/100' -> 85, 'high' -> None."""
    text = text.strip()
    end = 0
    if text[:1] in ("-", "+"):
        end = 1
    while end < len(text) and text[end].isdigit():
        end += 1
    digits = text[:end]
    if not digits.lstrip("+-"):
        return None
    return int(digits)


def parse_entry(entry: str, sources: list[Source]) -> TrendItem | None:
    """Parse one delimited entry; returns None when it has no title."""
    fields = {
        "title": UNTITLED,
        "category": "General",
        "summary": "",
        "impact": 50,
        "sentiment": Sentiment.NEUTRAL,
        "advice": "Keep an eye on this trend.",
    }
    for line in entry.split("\n"):
        lower = line.lower()
        for label, name in _LABELS:
            if not lower.startswith(label):
                continue
            value = line[len(label):].strip()
            if name == "impact":
                parsed = _parse_int(value)
                if parsed is not None:
                    fields["impact"] = parsed
            elif name == "sentiment":
                fields["sentiment"] = _parse_sentiment(value)
            else:
                fields[name] = value
            break

    if fields["title"] == UNTITLED:
        return None

    return TrendItem(
        title=_strip_markdown(fields["title"]),
        category=_strip_markdown(fields["category"]),
        summary=_strip_markdown(fields["summary"]),
        impact_score=fields["impact"],
        sentiment=fields["sentiment"],
        advice=_strip_markdown(fields["advice"]),
        sources=list(sources),
    )


def parse_trends(text: str, sources: list[Source] | None = None) -> list[TrendItem]:
    """Split model output on ``---`` and parse every titled entry."""
    sources = sources or []
    trends: list[TrendItem] = []
    for chunk in text.split(ENTRY_DELIMITER):
        chunk = chunk.strip()
        if not chunk:
            continue
        trend = parse_entry(chunk, sources)
        if trend is not None:
            trends.append(trend)
    return trends
