"""Tests for trend models and the per-selection cache."""

from itertools import product

from conftest import make_trend, make_trends

from market_pulse.trends.cache import CACHE_KEY_PREFIX, CacheEntry, TrendCache, cache_key
from market_pulse.trends.models import (
    Persona,
    Sentiment,
    Source,
    TrendCategory,
    TrendItem,
    dedupe_sources,
    new_trend_id,
)


def test_trend_ids_are_unique():
    """New trends get distinct ids."""
    assert len({new_trend_id() for _ in range(100)}) == 100
    assert make_trend().id != make_trend().id


def test_trend_to_dict_uses_persisted_field_names():
    """Serialized trends use the stored camelCase field names."""
    trend = make_trend("AI Overviews", impact=90, sentiment=Sentiment.MIXED)
    data = trend.to_dict()
    assert data["impactScore"] == 90
    assert data["sentiment"] == "Mixed"
    assert data["sources"] == [{"title": "Example", "uri": "https://example.com/a"}]
    assert TrendItem.from_dict(data) == trend


def test_impact_score_is_not_clamped():
    """Impact scores outside 0-100 are kept as given."""
    trend = TrendItem.from_dict({"id": "x1", "title": "Huge", "impactScore": 140})
    assert trend.impact_score == 140


def test_dedupe_sources_keeps_first_occurrence():
    """Duplicate source URIs collapse to the first one seen."""
    sources = [
        Source("First", "https://a.example"),
        Source("Other", "https://b.example"),
        Source("Duplicate", "https://a.example"),
    ]
    assert dedupe_sources(sources) == [Source("First", "https://a.example"), Source("Other", "https://b.example")]


def test_cache_entry_round_trip():
    """Cache entries survive serialize and deserialize."""
    entry = CacheEntry(timestamp=1_760_000_000_123, trends=make_trends(3) + [make_trend("No sources", sources=[])])
    assert CacheEntry.deserialize(entry.serialize()) == entry


def test_cache_entry_age():
    """Entry age is measured from its timestamp."""
    assert CacheEntry(timestamp=1_000).age(4_500) == 3_500


def test_cache_key_is_injective():
    """Every (category, persona) pair maps to its own key."""
    keys = {cache_key(c, p) for c, p in product(TrendCategory, Persona)}
    assert len(keys) == len(TrendCategory) * len(Persona)


def test_cache_key_format():
    """Cache keys carry the versioned prefix."""
    assert cache_key(TrendCategory.SEO, Persona.AGENCY) == f"{CACHE_KEY_PREFIX}_SEO_Agency Owner"


def test_read_missing_entry(db):
    """Reading an absent key returns None."""
    assert TrendCache(db).read(TrendCategory.ALL, Persona.GENERAL) is None


def test_write_then_read(db):
    """Written entries read back intact."""
    cache = TrendCache(db)
    entry = CacheEntry(timestamp=42, trends=make_trends(2))
    cache.write(TrendCategory.SEO, Persona.CMO, entry)
    assert cache.read(TrendCategory.SEO, Persona.CMO) == entry
    # Other personas are separate partitions
    assert cache.read(TrendCategory.SEO, Persona.GENERAL) is None


def test_corrupt_entry_reads_as_absent(db):
    """Invalid JSON reads as a missing entry."""
    db.set(cache_key(TrendCategory.ALL, Persona.GENERAL), "{not json")
    assert TrendCache(db).read(TrendCategory.ALL, Persona.GENERAL) is None


def test_wrong_shape_entry_reads_as_absent(db):
    """JSON of the wrong shape reads as a missing entry."""
    db.set(cache_key(TrendCategory.ALL, Persona.GENERAL), '{"trends": []}')
    assert TrendCache(db).read(TrendCategory.ALL, Persona.GENERAL) is None


def test_find_trend_across_entries(db):
    """Trends are found by id in any cached entry."""
    cache = TrendCache(db)
    target = make_trend("Target")
    cache.write(TrendCategory.SEO, Persona.GENERAL, CacheEntry(1, make_trends(2)))
    cache.write(TrendCategory.PPC, Persona.AGENCY, CacheEntry(2, [target]))
    db.set(cache_key(TrendCategory.CONTENT, Persona.GENERAL), "garbage")

    assert cache.find_trend(target.id) == target
    assert cache.find_trend(target.id[:8]) == target
    assert cache.find_trend("does-not-exist") is None
