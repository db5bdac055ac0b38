# newsengine/feed.py
from dataclasses import dataclass
from datetime import datetime
from typing import Any, Dict, List, Optional, Tuple
import time
import uuid

from .cache import ArticleCache, compute_article_id
from .engagement import EngagementAggregator
from .errors import CacheUnavailableError
from .keywords import classify_category, extract_tags
from .logging_setup import get_logger
from .models import Article
from .personalize import UserPreferenceProfile, build_profile, personalize_all
from .preferences import PreferenceStore, is_excluded
from .ranker import paginate, rank, score_articles
from .schema import ArticleData, ArticleOut
from .sources import SourceClient
from .timeutil import to_utc, utcnow

logger = get_logger("newsengine.feed")


@dataclass
class FeedPage:
    articles: List[ArticleOut]
    total: int
    page: int
    has_more: bool
    cached: bool
    profile: Optional[UserPreferenceProfile] = None


@dataclass
class IngestReport:
    stored: int = 0
    skipped: int = 0
    storage_failures: int = 0


class FeedService:
    """
    Orchestrates one feed request:
    - cache page lookup (hit/miss)
    - origin fetch + identity hashing + TTL upsert on a miss
    - engagement counts, trending score, optional personalization
    - stable sort of the whole candidate set, then pagination
    """

    def __init__(self, cache: ArticleCache, aggregator: EngagementAggregator,
                 sources: SourceClient, preferences: PreferenceStore, fetch_page_size: int = 30):
        self.cache = cache
        self.aggregator = aggregator
        self.sources = sources
        self.preferences = preferences
        self.fetch_page_size = fetch_page_size

    # ---- ingest ----

    def ingest(self, items: List[Dict[str, Any]], city: str, now: Optional[datetime] = None) -> IngestReport:
        """
        Hash and upsert each fetched item. One bad item never aborts the batch,
        but a batch where every write hit a storage error is a storage outage.
        """
        now = now or utcnow()
        report = IngestReport()
        for it in items:
            url = it.get("url", "")
            try:
                data = ArticleData(
                    article_id=compute_article_id(url),
                    title=it.get("title") or "",
                    description=it.get("description") or None,
                    content=it.get("content") or None,
                    url=url,
                    image_url=it.get("image_url"),
                    source_name=it.get("source") or None,
                    published_at=to_utc(it.get("published_at")),
                    location_name=city,
                    category=classify_category(it.get("title") or "", it.get("content") or ""),
                    tags=extract_tags(it.get("title") or "", it.get("content") or ""),
                )
                self.cache.upsert(data, now=now)
                report.stored += 1
            except CacheUnavailableError as e:
                report.skipped += 1
                report.storage_failures += 1
                logger.warning("INGEST_ARTICLE_SKIPPED", extra={"url": url, "error": type(e).__name__})
            except ValueError as e:
                # empty URL or a field that fails validation
                report.skipped += 1
                logger.warning("INGEST_ARTICLE_SKIPPED", extra={"url": url, "error": type(e).__name__})

        logger.info("INGEST_DONE", extra={"city": city, "stored": report.stored, "skipped": report.skipped})
        if report.stored == 0 and report.storage_failures:
            raise CacheUnavailableError(f"no article could be stored for {city!r}")
        return report

    # ---- candidates ----

    def load_candidates(self, city: str, country: str, page: int, limit: int,
                        now: Optional[datetime] = None) -> Tuple[List[Article], bool]:
        now = now or utcnow()
        cached_page = self.cache.get_cached(city, page, limit, now=now)
        if cached_page.is_cache_hit:
            logger.info("FEED_CACHE_HIT", extra={"city": city, "page": page, "total": cached_page.total})
            return self.cache.candidates(city, now=now), True

        logger.info("FEED_CACHE_MISS", extra={"city": city, "page": page})
        t_fetch = time.perf_counter()
        items = self.sources.fetch_for_location(city, country, max_items=self.fetch_page_size)
        logger.info(
            "FETCH_OK",
            extra={"city": city, "count": len(items), "elapsed_ms": round((time.perf_counter() - t_fetch) * 1000)},
        )
        self.ingest(items, city, now=now)
        return self.cache.candidates(city, now=now), False

    # ---- feeds ----

    def _page(self, ranked: List[Tuple[Article, float, Optional[float]]], page: int, limit: int,
              cached: bool, profile: Optional[UserPreferenceProfile] = None) -> FeedPage:
        total = len(ranked)
        articles = [
            ArticleOut.model_validate(a).model_copy(update={"trending_score": base, "score": final})
            for a, base, final in paginate(ranked, page, limit)
        ]
        return FeedPage(articles=articles, total=total, page=page,
                        has_more=page * limit < total, cached=cached, profile=profile)

    def get_feed(self, city: str, country: str, page: int = 1, limit: int = 20) -> FeedPage:
        run_id = uuid.uuid4().hex[:8]
        now = utcnow()
        t0 = time.perf_counter()

        candidates, cached = self.load_candidates(city, country, page, limit, now=now)
        counts = self.aggregator.counts_for(a.article_id for a in candidates)
        ranked = [(a, s, None) for a, s in rank(score_articles(candidates, counts, now))]

        logger.info("FEED_READY", extra={
            "run_id": run_id, "city": city, "candidates": len(candidates), "cached": cached,
            "elapsed_ms": round((time.perf_counter() - t0) * 1000),
        })
        return self._page(ranked, page, limit, cached)

    def get_personalized_feed(self, user_id: str, city: str, country: str,
                              page: int = 1, limit: int = 20) -> FeedPage:
        run_id = uuid.uuid4().hex[:8]
        now = utcnow()
        t0 = time.perf_counter()

        candidates, cached = self.load_candidates(city, country, page, limit, now=now)
        stored_prefs = self.preferences.get(user_id)
        visible = [a for a in candidates if not is_excluded(a, stored_prefs)]

        profile = build_profile(self.aggregator, user_id, now=now)
        counts = self.aggregator.counts_for(a.article_id for a in visible)
        scored = personalize_all(score_articles(visible, counts, now), profile)
        # stable: equal final scores keep candidate order
        ranked = sorted(scored, key=lambda t: t[2], reverse=True)

        logger.info("PERSONALIZED_FEED_READY", extra={
            "run_id": run_id, "city": city, "candidates": len(candidates),
            "excluded": len(candidates) - len(visible), "profile_empty": profile.is_empty(),
            "cached": cached, "elapsed_ms": round((time.perf_counter() - t0) * 1000),
        })
        return self._page(ranked, page, limit, cached, profile=profile)
