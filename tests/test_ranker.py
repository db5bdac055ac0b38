# tests/test_ranker.py
import math
from datetime import datetime, timedelta, timezone
from types import SimpleNamespace

import pytest

from newsengine.engagement import EngagementCounts
from newsengine.ranker import age_hours, paginate, rank, raw_score, score_articles, trending_score

NOW = datetime(2025, 1, 1, 12, 0, 0, tzinfo=timezone.utc)


def test_raw_score_weights():
    counts = EngagementCounts(likes=2, comments=3, shares=4, poll_votes=5)
    assert raw_score(counts) == pytest.approx(2 * 1.0 + 3 * 2.0 + 4 * 1.5 + 5 * 1.0)


def test_trending_score_applies_exponential_decay():
    counts = EngagementCounts(likes=10)
    score = trending_score(counts, NOW - timedelta(hours=5), now=NOW)
    assert score == pytest.approx(10 * math.exp(-0.08 * 5))


def test_trending_score_strictly_decreases_with_age():
    counts = EngagementCounts(likes=1, comments=1, shares=1, poll_votes=1)
    scores = [trending_score(counts, NOW - timedelta(hours=h), now=NOW) for h in (0, 1, 6, 24, 72)]
    assert all(a > b for a, b in zip(scores, scores[1:]))


def test_future_publish_time_is_clamped_to_zero_age():
    counts = EngagementCounts(shares=2)
    assert age_hours(NOW + timedelta(hours=3), now=NOW) == 0.0
    assert trending_score(counts, NOW + timedelta(hours=3), now=NOW) == pytest.approx(3.0)


def test_missing_publish_time_counts_as_new():
    assert trending_score(EngagementCounts(likes=1), None, now=NOW) == pytest.approx(1.0)


def test_rank_is_stable_for_equal_scores():
    arts = [SimpleNamespace(article_id=k, published_at=NOW) for k in ("a", "b", "c", "d")]
    counts = {"b": EngagementCounts(likes=3)}
    ranked = rank(score_articles(arts, counts, now=NOW))
    assert [a.article_id for a, _ in ranked] == ["b", "a", "c", "d"]


def test_paginate():
    assert paginate(list(range(7)), page=2, limit=3) == [3, 4, 5]
    assert paginate(list(range(7)), page=4, limit=3) == []


def test_age_accepts_naive_and_aware_timestamps():
    naive_now = NOW.replace(tzinfo=None)
    assert age_hours(NOW - timedelta(hours=2), now=naive_now) == pytest.approx(2.0)
    assert age_hours(naive_now - timedelta(hours=2), now=NOW) == pytest.approx(2.0)
