import pytest

from core.cache import TTLCache
from core.cache_keys import (
    article_identity_key,
    articles_key,
    entities_key,
    explain_key,
    news_key,
    processed_key,
    related_key,
    report_key,
)


def test_set_then_get_within_ttl(cache, clock):
    """Test that a stored value is visible until its TTL elapses."""
    cache.set("news:a", {"value": 1}, 60)
    clock.advance(60)

    assert cache.get("news:a") == {"value": 1}
    assert "news:a" in cache


def test_expired_entry_is_removed_on_read(cache, clock):
    """Test that an expired entry is deleted by the read that finds it."""
    cache.set("news:a", "payload", 10)
    clock.advance(10.5)

    assert cache.get("news:a") is None
    assert len(cache) == 0
    # Not resurrected by a later read
    assert cache.get("news:a", "fallback") == "fallback"

    stats = cache.get_stats()
    assert stats["expired"] == 1
    assert stats["misses"] == 2


def test_last_write_wins(cache, clock):
    """Test that a second set replaces both value and expiry."""
    cache.set("key", "first", 5)
    clock.advance(4)
    cache.set("key", "second", 100)
    clock.advance(10)

    assert cache.get("key") == "second"


def test_hit_rate_statistics(cache):
    """Test hit/miss accounting."""
    cache.set("key", "value", 30)
    cache.get("key")
    cache.get("key")
    cache.get("missing")

    stats = cache.get_stats()
    assert stats["hits"] == 2
    assert stats["misses"] == 1
    assert stats["sets"] == 1
    assert stats["hit_rate"] == pytest.approx(66.666, rel=1e-3)


def test_default_clock_is_wall_time():
    """Test that a cache without an injected clock still stores values."""
    cache = TTLCache()
    cache.set("key", 42, 3600)
    assert cache.get("key") == 42


def test_namespaces_never_collide():
    """Test that every key family uses its own prefix for identical parameters."""
    keys = [
        articles_key("ai", "2025-10-01", "2025-10-07", "en"),
        processed_key("ai", "2025-10-01", "2025-10-07", "en"),
        report_key("ai", "2025-10-01", "2025-10-07", "en"),
        entities_key("ai", "2025-10-01", "2025-10-07", "en", 12),
        related_key("ai", 5),
        news_key({"q": "ai", "start_date": "2025-10-01"}),
        explain_key("deep_dive", "ai", None, None, "a,b"),
    ]
    expected_prefixes = ["articles:", "processed:", "ai:report:", "entities:", "related:", "news:", "ai:deep_dive:"]

    assert len(set(keys)) == len(keys)
    for key, prefix in zip(keys, expected_prefixes):
        assert key.startswith(prefix)


def test_curly_quotes_map_to_same_key():
    """Test that quote style does not change the cache key."""
    straight = processed_key('"quantum computing"', "2025-10-01", "2025-10-07")
    curly = processed_key("“quantum computing”", "2025-10-01", "2025-10-07")

    assert straight == curly
    assert report_key("‘ai’ chips", "2025-10-01", "2025-10-07") == report_key("'ai' chips", "2025-10-01", "2025-10-07")


def test_news_key_ignores_insertion_order_and_none():
    """Test that news keys use a fixed field order and drop unset parameters."""
    first = news_key({"cursor": "abc", "q": "ai", "language": "en", "country": None})
    second = news_key({"q": "ai", "language": "en", "cursor": "abc"})

    assert first == second
    assert first == 'news:{"q":"ai","language":"en","cursor":"abc"}'


def test_explain_key_rejects_report_context():
    """Test that explanations cannot be written into the report namespace."""
    with pytest.raises(ValueError):
        explain_key("report", "ai", None, None, "")


def test_article_identity_key_prefers_ids(make_article):
    """Test that identity keys use ids and fall back to titles."""
    articles = [make_article("First", article_id="a1"), make_article("Second", article_id="")]
    assert article_identity_key(articles) == "a1,Second"
    assert article_identity_key([{"title": "Dict article"}]) == "Dict article"
