"""Per (category, persona) trend cache on top of the key/value store."""

from __future__ import annotations

import json
from dataclasses import dataclass, field

from market_pulse.db import Database
from market_pulse.trends.models import Persona, TrendCategory, TrendItem
from market_pulse.utils.logger import get_logger

logger = get_logger()

# Bump whenever the TrendItem shape or the number of trends per entry changes,
# so entries written by an older layout are never deserialized.
CACHE_KEY_PREFIX = "cache_v2"


def cache_key(category: TrendCategory, persona: Persona) -> str:
    """Storage key for a (category, persona) pair.

    Category and persona values never contain ``_``, which keeps the
    mapping injective.
    """
    return f"{CACHE_KEY_PREFIX}_{category.value}_{persona.value}"


@dataclass
class CacheEntry:
    """Trends from one successful fetch, stamped with epoch milliseconds."""

    timestamp: int
    trends: list[TrendItem] = field(default_factory=list)

    def serialize(self) -> str:
        return json.dumps({
            "timestamp": self.timestamp,
            "trends": [t.to_dict() for t in self.trends],
        })

    @classmethod
    def deserialize(cls, raw: str) -> CacheEntry:
        data = json.loads(raw)
        return cls(
            timestamp=int(data["timestamp"]),
            trends=[TrendItem.from_dict(t) for t in data["trends"]],
        )

    def age(self, now: int) -> int:
        return now - self.timestamp


class TrendCache:
    """Reads and writes cache entries; unreadable entries count as absent."""

    def __init__(self, db: Database):
        self.db = db

    def read(self, category: TrendCategory, persona: Persona) -> CacheEntry | None:
        key = cache_key(category, persona)
        try:
            raw = self.db.get(key)
            if raw is None:
                return None
            return CacheEntry.deserialize(raw)
        except Exception as e:
            logger.error("Cache read error for %s: %s", key, e)
            return None

    def write(self, category: TrendCategory, persona: Persona, entry: CacheEntry) -> None:
        key = cache_key(category, persona)
        self.db.set(key, entry.serialize())
        logger.debug("Cached %d trends under %s", len(entry.trends), key)

    def find_trend(self, trend_id: str) -> TrendItem | None:
        """Look a trend up by id (or id prefix) across every cached entry."""
        for key in self.db.keys(f"{CACHE_KEY_PREFIX}_"):
            try:
                entry = CacheEntry.deserialize(self.db.get(key) or "")
            except Exception as e:
                logger.warning("Skipping unreadable cache entry %s: %s", key, e)
                continue
            for trend in entry.trends:
                if trend.id.startswith(trend_id):
                    return trend
        return None
