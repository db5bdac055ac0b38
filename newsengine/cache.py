# newsengine/cache.py
"""
Article identity and the TTL-bounded article cache.

Articles are content-addressed: the primary key is the SHA-256 of the
article's canonical URL, so repeated fetches of the same story from any
provider land on the same row. Every write refreshes the row's 15 minute
validity window; reads never return a row whose window has passed.
"""
from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from typing import List, Optional
from urllib.parse import parse_qsl, urlencode, urlsplit, urlunsplit
import hashlib

from sqlalchemy import func
from sqlalchemy.exc import IntegrityError
from sqlmodel import select

from .config import CACHE_TTL
from .logging_setup import get_logger
from .models import Article
from .schema import ArticleData
from .store import Database
from .timeutil import utcnow

logger = get_logger("newsengine.cache")

_TRACKING_PREFIXES = ("utm_",)
_TRACKING_PARAMS = {"fbclid", "gclid"}


def canonicalize_url(url: str) -> str:
    raw = (url or "").strip()
    if not raw:
        raise ValueError("article URL is empty")

    parts = urlsplit(raw)
    query = [
        (k, v) for k, v in parse_qsl(parts.query, keep_blank_values=True)
        if not k.lower().startswith(_TRACKING_PREFIXES) and k.lower() not in _TRACKING_PARAMS
    ]
    path = parts.path
    if len(path) > 1 and path.endswith("/"):
        path = path.rstrip("/")
    return urlunsplit((parts.scheme.lower(), parts.netloc.lower(), path, urlencode(query), ""))


def compute_article_id(url: str) -> str:
    """SHA-256 (hex) of the canonical URL. Identical URLs always give identical ids."""
    return hashlib.sha256(canonicalize_url(url).encode("utf-8")).hexdigest()


@dataclass
class CachedPage:
    articles: List[Article]
    total: int
    is_cache_hit: bool


class ArticleCache:
    def __init__(self, db: Database):
        self._db = db

    def _live_filter(self, location_key: str, now: datetime):
        return (
            func.lower(Article.location_name) == location_key.strip().lower(),
            Article.expires_at > now,
        )

    def get_cached(
        self,
        location_key: str,
        page: int,
        page_size: int,
        now: Optional[datetime] = None,
    ) -> CachedPage:
        """
        One page of live articles for a location, newest first.

        An empty page is reported as a miss; cached rows are never merged with
        freshly fetched ones.
        """
        now = now or utcnow()
        where = self._live_filter(location_key, now)
        with self._db.session() as s:
            rows = s.exec(
                select(Article)
                .where(*where)
                .order_by(Article.published_at.desc())
                .offset((page - 1) * page_size)
                .limit(page_size)
            ).all()
            if not rows:
                return CachedPage(articles=[], total=0, is_cache_hit=False)
            total = s.exec(select(func.count()).select_from(Article).where(*where)).one()
        return CachedPage(articles=list(rows), total=int(total), is_cache_hit=True)

    def candidates(self, location_key: str, now: Optional[datetime] = None) -> List[Article]:
        """Every live article for a location, in the same order as get_cached."""
        now = now or utcnow()
        with self._db.session() as s:
            rows = s.exec(
                select(Article)
                .where(*self._live_filter(location_key, now))
                .order_by(Article.published_at.desc())
            ).all()
        return list(rows)

    def get(self, article_id: str) -> Optional[Article]:
        with self._db.session() as s:
            return s.get(Article, article_id)

    def upsert(self, data: ArticleData, now: Optional[datetime] = None) -> Article:
        """
        Insert or replace an article by id and restart its TTL window.

        Explicitly set fields overwrite (an explicit None clears the column);
        unset fields keep whatever is stored. The row is written in a single
        commit, so a failure leaves the previous row untouched.
        """
        now = now or utcnow()
        values = data.model_dump(exclude_unset=True)
        values["article_id"] = data.article_id

        with self._db.session() as s:
            try:
                row = self._apply(s, values, now)
                s.commit()
            except IntegrityError:
                # A concurrent request inserted the same id first; last write wins.
                s.rollback()
                row = self._apply(s, values, now)
                s.commit()
            s.refresh(row)
            return row

    @staticmethod
    def _apply(s, values: dict, now: datetime) -> Article:
        row = s.get(Article, values["article_id"])
        if row is None:
            row = Article(article_id=values["article_id"], cached_at=now, expires_at=now + CACHE_TTL)
        for key, value in values.items():
            setattr(row, key, value)
        row.cached_at = now
        row.expires_at = now + CACHE_TTL
        s.add(row)
        s.flush()
        return row

    def set_summary(self, article_id: str, summary: str, category: Optional[str]) -> bool:
        """Store an AI summary on an existing row. Returns False when the row is unknown."""
        with self._db.session() as s:
            row = s.get(Article, article_id)
            if row is None:
                return False
            row.ai_summary = summary
            if category:
                row.category = category
            s.add(row)
            s.commit()
        logger.info("SUMMARY_STORED", extra={"article_id": article_id})
        return True
