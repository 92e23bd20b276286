"""User-curated trend collections (Saved, Read Later) with write-through persistence."""

from __future__ import annotations

import copy
import json

from market_pulse.db import Database
from market_pulse.trends.models import TrendItem
from market_pulse.utils.logger import get_logger

logger = get_logger()

SAVED_KEY = "saved_trends"
READ_LATER_KEY = "read_later"


class CollectionStore:
    """Insertion-ordered set of trends keyed by id."""

    def __init__(self, db: Database, key: str, name: str = ""):
        self.db = db
        self.key = key
        self.name = name or key
        self._items: list[TrendItem] = self._load()

    def _load(self) -> list[TrendItem]:
        try:
            raw = self.db.get(self.key)
            if not raw:
                return []
            return [TrendItem.from_dict(d) for d in json.loads(raw)]
        except Exception as e:
            logger.error("Failed to load %s: %s", self.name, e)
            return []

    def _persist(self, items: list[TrendItem]) -> None:
        self.db.set(self.key, json.dumps([t.to_dict() for t in items]))

    def contains(self, trend_id: str) -> bool:
        return any(t.id == trend_id for t in self._items)

    def get(self, trend_id: str) -> TrendItem | None:
        for trend in self._items:
            if trend.id == trend_id:
                return trend
        return None

    def items(self) -> list[TrendItem]:
        return list(self._items)

    def toggle(self, trend: TrendItem) -> bool:
        """Add or remove a trend. Returns True when the trend is now a member."""
        if self.contains(trend.id):
            items = [t for t in self._items if t.id != trend.id]
            added = False
        else:
            # Snapshot so later edits to the caller's object don't leak in
            items = self._items + [copy.deepcopy(trend)]
            added = True
        self._persist(items)
        self._items = items
        logger.info("%s %s: %s", "Added to" if added else "Removed from", self.name, trend.title)
        return added

    def __len__(self) -> int:
        return len(self._items)

    def __contains__(self, trend_id: object) -> bool:
        return isinstance(trend_id, str) and self.contains(trend_id)


def saved_store(db: Database) -> CollectionStore:
    return CollectionStore(db, SAVED_KEY, name="Saved Trends")


def read_later_store(db: Database) -> CollectionStore:
    return CollectionStore(db, READ_LATER_KEY, name="Read Later")
