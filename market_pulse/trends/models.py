"""Trend data models."""

from __future__ import annotations

import uuid
from dataclasses import dataclass, field
from enum import Enum


class Sentiment(str, Enum):
    POSITIVE = "Positive"
    NEUTRAL = "Neutral"
    MIXED = "Mixed"


class TrendCategory(str, Enum):
    ALL = "All"
    SAVED = "Saved Trends"
    READ_LATER = "Read Later"
    BUSINESS = "Business Growth"
    SEO = "SEO"
    SOCIAL_MEDIA = "Social Media"
    AI_MARKETING = "AI Marketing"
    CONTENT = "Content Strategy"
    PPC = "PPC & Ads"

    @property
    def is_local(self) -> bool:
        """Local categories are backed by a collection, never by the network."""
        return self in (TrendCategory.SAVED, TrendCategory.READ_LATER)

    @property
    def label(self) -> str:
        return CATEGORY_LABELS[self]


CATEGORY_LABELS = {
    TrendCategory.ALL: "Everything",
    TrendCategory.SAVED: "Saved Trends",
    TrendCategory.READ_LATER: "Read Later",
    TrendCategory.BUSINESS: "Grow Your Business",
    TrendCategory.AI_MARKETING: "AI Tools",
    TrendCategory.SEO: "Google Search",
    TrendCategory.SOCIAL_MEDIA: "Social Media",
    TrendCategory.CONTENT: "Content Writing",
    TrendCategory.PPC: "Paid Ads",
}


class Persona(str, Enum):
    GENERAL = "General"
    SMALL_BUSINESS = "Small Business Owner"
    AGENCY = "Agency Owner"
    CREATOR = "Content Creator"
    CMO = "Enterprise CMO"

    @property
    def label(self) -> str:
        return "General Reader" if self is Persona.GENERAL else self.value


class SocialPlatform(str, Enum):
    LINKEDIN = "LinkedIn"
    TWITTER = "Twitter"
    NEWSLETTER = "Newsletter"
    TIKTOK = "TikTok"


def new_trend_id() -> str:
    return uuid.uuid4().hex


@dataclass(frozen=True)
class Source:
    """Web attribution for a trend."""

    title: str
    uri: str

    def to_dict(self) -> dict:
        return {"title": self.title, "uri": self.uri}

    @classmethod
    def from_dict(cls, data: dict) -> Source:
        return cls(title=data["title"], uri=data["uri"])


@dataclass
class TrendItem:
    """One AI-generated insight. Identity is the client-side ``id``."""

    title: str
    category: str = "General"
    summary: str = ""
    impact_score: int = 50  # nominally 0-100, never clamped
    sentiment: Sentiment = Sentiment.NEUTRAL
    advice: str = ""
    sources: list[Source] = field(default_factory=list)
    id: str = field(default_factory=new_trend_id)

    def to_dict(self) -> dict:
        """Serialize using the persisted (camelCase) field names."""
        return {
            "id": self.id,
            "title": self.title,
            "category": self.category,
            "summary": self.summary,
            "impactScore": self.impact_score,
            "sentiment": self.sentiment.value,
            "advice": self.advice,
            "sources": [s.to_dict() for s in self.sources],
        }

    @classmethod
    def from_dict(cls, data: dict) -> TrendItem:
        return cls(
            id=data["id"],
            title=data["title"],
            category=data.get("category") or "General",
            summary=data.get("summary") or "",
            impact_score=int(data.get("impactScore", 50)),
            sentiment=Sentiment(data.get("sentiment", Sentiment.NEUTRAL.value)),
            advice=data.get("advice") or "",
            sources=[Source.from_dict(s) for s in data.get("sources") or []],
        )


def dedupe_sources(sources: list[Source]) -> list[Source]:
    """Drop repeated URIs, keeping the first occurrence."""
    seen: set[str] = set()
    unique: list[Source] = []
    for source in sources:
        if source.uri in seen:
            continue
        seen.add(source.uri)
        unique.append(source)
    return unique
