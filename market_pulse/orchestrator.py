"""Cache and refresh orchestration for the trend dashboard.

For every (category, persona) selection the orchestrator decides whether to
serve cached trends, fetch fresh ones, or both. Cached data is always shown
immediately, whatever its age; a cooldown after each successful fetch
suppresses automatic refetches until it elapses or the user forces a
refresh.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Callable

from market_pulse.countdown import Countdown, now_ms
from market_pulse.db import Database
from market_pulse.generator.prompts import build_trend_query
from market_pulse.library.collection_store import CollectionStore, read_later_store, saved_store
from market_pulse.trends.cache import CacheEntry, TrendCache, cache_key
from market_pulse.trends.fetcher import TrendSource
from market_pulse.trends.models import Persona, TrendCategory, TrendItem
from market_pulse.utils.logger import get_logger

logger = get_logger()

COOLDOWN_MS = 3 * 60 * 60 * 1000
PERSONA_KEY = "persona"


@dataclass(frozen=True)
class ViewState:
    """Immutable snapshot of what the dashboard should display."""

    category: TrendCategory
    persona: Persona
    trends: tuple[TrendItem, ...]
    loading: bool
    deadline: int | None
    time_remaining: str


def load_persona(db: Database) -> Persona:
    try:
        raw = db.get(PERSONA_KEY)
    except Exception as e:
        logger.error("Failed to load persona: %s", e)
        return Persona.GENERAL
    if raw is None:
        return Persona.GENERAL
    try:
        return Persona(raw)
    except ValueError:
        logger.warning("Unknown stored persona %r, using %s", raw, Persona.GENERAL.value)
        return Persona.GENERAL


class TrendOrchestrator:
    """Owns the current selection, the displayed trends and the cooldown."""

    def __init__(
        self,
        db: Database,
        source: TrendSource,
        cooldown_ms: int = COOLDOWN_MS,
        domain: str = "Digital Marketing",
        clock: Callable[[], int] = now_ms,
        listener: Callable[[ViewState], None] | None = None,
        saved: CollectionStore | None = None,
        read_later: CollectionStore | None = None,
    ):
        self.db = db
        self.source = source
        self.cooldown_ms = cooldown_ms
        self.domain = domain
        self.clock = clock
        self.listener = listener
        self.cache = TrendCache(db)
        self.saved = saved or saved_store(db)
        self.read_later = read_later or read_later_store(db)
        self.category = TrendCategory.ALL
        self.persona = load_persona(db)
        self.trends: list[TrendItem] = []
        self.loading = False
        self.countdown = Countdown(clock=clock, on_tick=lambda _text: self._notify())
        self._sequence = 0
        # cache key -> sequence of the newest resolution fetching it
        self._fetching: dict[str, int] = {}

    # --- State ---

    @property
    def deadline(self) -> int | None:
        return self.countdown.deadline

    @property
    def time_remaining(self) -> str:
        return self.countdown.text

    @property
    def show_countdown(self) -> bool:
        """True while the countdown replaces the manual refresh affordance."""
        return self.deadline is not None and bool(self.time_remaining) and not self.loading

    def snapshot(self) -> ViewState:
        return ViewState(
            category=self.category,
            persona=self.persona,
            trends=tuple(self.trends),
            loading=self.loading,
            deadline=self.deadline,
            time_remaining=self.time_remaining,
        )

    def _notify(self) -> None:
        if self.listener is not None:
            self.listener(self.snapshot())

    def _collection_for(self, category: TrendCategory) -> CollectionStore:
        return self.saved if category == TrendCategory.SAVED else self.read_later

    # --- Resolution ---

    async def resolve(
        self,
        category: TrendCategory,
        persona: Persona,
        force_refresh: bool = False,
    ) -> list[TrendItem]:
        """Bring the displayed trends up to date for a selection.

        Returns the trends this resolution settled on. A resolution that is
        superseded while its fetch is in flight still caches what it
        fetched under its own key, unless a newer resolution has started a
        fetch for that same key, and it leaves the display alone.
        """
        self._sequence += 1
        sequence = self._sequence
        self.category = category
        self.persona = persona
        self.countdown.clear()

        if category.is_local:
            self.trends = self._collection_for(category).items()
            self.loading = False
            self._notify()
            return self.trends

        has_stale_data = False
        entry = self.cache.read(category, persona)
        if entry is not None:
            self.trends = list(entry.trends)
            has_stale_data = True

            if entry.age(self.clock()) < self.cooldown_ms and not force_refresh:
                self.countdown.set_deadline(entry.timestamp + self.cooldown_ms)
                self.loading = False
                self._notify()
                return self.trends

        if not has_stale_data:
            self.trends = []
        self.loading = True
        self._notify()

        key = cache_key(category, persona)
        self._fetching[key] = sequence
        query = build_trend_query(category, self.domain)
        try:
            items = await self.source.fetch(query, persona)
        except Exception as e:
            logger.error("Trend source failed for '%s': %s", query, e)
            items = []

        fetched_at = self.clock()
        superseded_for_key = self._fetching.get(key) != sequence
        if items and superseded_for_key:
            logger.info("Not caching %s: a newer fetch for the same key was started", key)
        elif items:
            try:
                self.cache.write(category, persona, CacheEntry(timestamp=fetched_at, trends=list(items)))
            except Exception as e:
                logger.error("Failed to cache trends for %s / %s: %s", category.value, persona.value, e)

        if sequence != self._sequence:
            logger.info(
                "Discarding late result for %s / %s (%d trends)",
                category.value, persona.value, len(items),
            )
            return list(items)

        if items:
            self.trends = list(items)
            self.countdown.set_deadline(fetched_at + self.cooldown_ms)
        elif has_stale_data:
            logger.info("Fetch failed, keeping stale data for %s / %s", category.value, persona.value)
        else:
            logger.warning("No trends returned for %s / %s", category.value, persona.value)

        self.loading = False
        self._notify()
        return self.trends

    async def select_category(self, category: TrendCategory) -> list[TrendItem]:
        return await self.resolve(category, self.persona)

    async def select_persona(self, persona: Persona) -> list[TrendItem]:
        """Persist the persona and re-resolve the current category under it."""
        self.db.set(PERSONA_KEY, persona.value)
        return await self.resolve(self.category, persona)

    async def refresh(self) -> list[TrendItem]:
        """Force a fetch for the current selection, ignoring the cooldown."""
        return await self.resolve(self.category, self.persona, force_refresh=True)

    # --- Collections ---

    def _toggle(self, store: CollectionStore, category: TrendCategory, trend: TrendItem) -> bool:
        added = store.toggle(trend)
        if self.category == category:
            self.trends = store.items()
            self._notify()
        return added

    def toggle_saved(self, trend: TrendItem) -> bool:
        return self._toggle(self.saved, TrendCategory.SAVED, trend)

    def toggle_read_later(self, trend: TrendItem) -> bool:
        return self._toggle(self.read_later, TrendCategory.READ_LATER, trend)

    def find_trend(self, trend_id: str) -> TrendItem | None:
        """Find a trend by id (or unique-enough id prefix) anywhere it is held."""
        for pool in (self.trends, self.saved.items(), self.read_later.items()):
            for trend in pool:
                if trend.id.startswith(trend_id):
                    return trend
        return self.cache.find_trend(trend_id)

    # --- Presentation helpers ---

    def subheader_text(self) -> str:
        if self.category == TrendCategory.SAVED:
            return f"{len(self.saved)} items saved"
        if self.category == TrendCategory.READ_LATER:
            return f"{len(self.read_later)} items to read"
        if self.loading and self.trends:
            return "Updating trends..."
        if self.deadline is not None:
            return "Trends up to date"
        if self.loading:
            return "Fetching trends..."
        return "Ready to update"

    def close(self) -> None:
        self.countdown.close()
