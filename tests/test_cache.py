# tests/test_cache.py
from datetime import datetime, timedelta, timezone

import pytest
from freezegun import freeze_time
from sqlalchemy.exc import OperationalError

from newsengine.cache import ArticleCache, canonicalize_url, compute_article_id
from newsengine.config import CACHE_TTL
from newsengine.errors import CacheUnavailableError
from newsengine.schema import ArticleData

from conftest import put_article

NOW = datetime(2025, 3, 1, 12, 0, 0, tzinfo=timezone.utc)


def test_article_id_is_stable_sha256_hex():
    a = compute_article_id("https://example.com/news/1")
    assert a == compute_article_id("https://example.com/news/1")
    assert len(a) == 64 and all(c in "0123456789abcdef" for c in a)
    assert a != compute_article_id("https://example.com/news/2")


def test_canonical_url_ignores_tracking_and_fragment():
    assert canonicalize_url("HTTPS://Example.com/a/?utm_source=x&id=3#top") == "https://example.com/a?id=3"
    assert compute_article_id(" https://example.com/a/ ") == compute_article_id("https://example.com/a")


def test_article_id_rejects_empty_url():
    with pytest.raises(ValueError):
        compute_article_id("   ")


def test_upsert_sets_ttl_window(cache):
    row = put_article(cache, "https://example.com/1", now=NOW)
    assert row.cached_at == NOW
    assert row.expires_at == NOW + CACHE_TTL


def test_get_cached_hit_orders_by_published_desc(cache):
    put_article(cache, "https://example.com/old", now=NOW, title="old", published_at=NOW - timedelta(hours=5))
    put_article(cache, "https://example.com/new", now=NOW, title="new", published_at=NOW - timedelta(hours=1))
    put_article(cache, "https://example.com/elsewhere", city="Delhi", now=NOW)

    page = cache.get_cached("pune", page=1, page_size=10, now=NOW + timedelta(minutes=1))
    assert page.is_cache_hit
    assert page.total == 2
    assert [a.title for a in page.articles] == ["new", "old"]


def test_get_cached_paginates_and_reports_empty_page_as_miss(cache):
    for i in range(3):
        put_article(cache, f"https://example.com/{i}", now=NOW, published_at=NOW - timedelta(hours=i))

    second = cache.get_cached("Pune", page=2, page_size=2, now=NOW)
    assert second.is_cache_hit and len(second.articles) == 1 and second.total == 3

    beyond = cache.get_cached("Pune", page=3, page_size=2, now=NOW)
    assert beyond.is_cache_hit is False
    assert beyond.articles == [] and beyond.total == 0


def test_expired_articles_are_never_served(cache):
    with freeze_time(NOW):
        put_article(cache, "https://example.com/ttl")
        assert cache.get_cached("Pune", 1, 20).is_cache_hit

    with freeze_time(NOW + CACHE_TTL + timedelta(seconds=1)):
        page = cache.get_cached("Pune", 1, 20)
        assert page.is_cache_hit is False
        assert cache.candidates("Pune") == []


def test_upsert_replaces_set_fields_and_keeps_unset_ones(cache):
    url = "https://example.com/summary"
    put_article(cache, url, now=NOW, title="first", category="Politics")
    cache.set_summary(compute_article_id(url), "A stored summary.", None)

    later = NOW + timedelta(minutes=20)
    row = put_article(cache, url, now=later, title="second")

    assert row.title == "second"
    assert row.ai_summary == "A stored summary."  # not supplied, so kept
    assert row.category == "Politics"
    assert row.cached_at == later and row.expires_at == later + CACHE_TTL


def test_explicit_none_invalidates_summary(cache):
    url = "https://example.com/invalidate"
    put_article(cache, url, now=NOW)
    cache.set_summary(compute_article_id(url), "old", "General")

    row = cache.upsert(ArticleData(article_id=compute_article_id(url), ai_summary=None), now=NOW)
    assert row.ai_summary is None


def test_set_summary_unknown_article_returns_false(cache):
    assert cache.set_summary("missing", "text", "General") is False


def test_storage_errors_surface_as_cache_unavailable(db, mocker):
    cache = ArticleCache(db)
    mocker.patch.object(db, "get_session").return_value.exec.side_effect = OperationalError("SELECT", {}, Exception("down"))
    with pytest.raises(CacheUnavailableError):
        cache.get_cached("Pune", 1, 20)


def test_timestamps_round_trip_as_aware_utc(cache):
    ist = timezone(timedelta(hours=5, minutes=30))
    row = put_article(cache, "https://example.com/tz", now=NOW.astimezone(ist),
                      published_at=datetime(2025, 3, 1, 10, 0, 0))
    stored = cache.get(row.article_id)
    assert stored.cached_at == NOW and stored.cached_at.tzinfo == timezone.utc
    # naive input is read as UTC
    assert stored.published_at == datetime(2025, 3, 1, 10, 0, 0, tzinfo=timezone.utc)
    assert cache.get_cached("Pune", 1, 20, now=NOW + CACHE_TTL - timedelta(seconds=1)).is_cache_hit
    assert not cache.get_cached("Pune", 1, 20, now=NOW + CACHE_TTL).is_cache_hit
