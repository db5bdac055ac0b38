# newsengine/sources.py
"""
Location-scoped news providers.

Providers:
  - NewsAPIProvider: /v2/everything search, requires NEWSAPI_KEY
  - GoogleNewsRSSProvider: query-driven RSS, no API key

Every provider call is a single attempt with an explicit timeout. Retrying is
the transport layer's business, not this engine's.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Dict, List, Optional

import feedparser
import requests

from .cache import canonicalize_url
from .errors import UpstreamSourceError
from .logging_setup import get_logger
from .text_extraction import html_to_text
from .timeutil import parse_iso

logger = get_logger("newsengine.sources")

# ---------- Utilities ----------

def _parse_feed_datetime(entry) -> Optional[datetime]:
    """feedparser exposes 'published_parsed' as a UTC struct_time."""
    tt = getattr(entry, "published_parsed", None) or getattr(entry, "updated_parsed", None)
    if not tt:
        return None
    return datetime(*tt[:6], tzinfo=timezone.utc)

def _dedupe(items: List[Dict]) -> List[Dict]:
    """Deduplicate by canonical URL; items without a URL pass through untouched."""
    seen: set[str] = set()
    out: List[Dict] = []
    for it in items:
        try:
            key = canonicalize_url(it.get("url") or "")
        except ValueError:
            out.append(it)
            continue
        if key in seen:
            continue
        seen.add(key)
        out.append(it)
    return out

# ---------- Provider base ----------

@dataclass
class ProviderResult:
    items: List[Dict]
    source_name: str

class BaseProvider:
    name = "base"
    session: Optional[requests.Session] = None

    def fetch(self, city: str, country: str, max_items: int = 30) -> ProviderResult:
        raise NotImplementedError

    def close(self) -> None:
        if self.session is not None:
            self.session.close()

# ---------- NewsAPI ----------

class NewsAPIProvider(BaseProvider):
    """
    https://newsapi.org/ - /everything endpoint, searched by city name.
    """

    name = "newsapi"
    BASE_URL = "https://newsapi.org/v2/everything"

    def __init__(self, api_key: str, timeout: float = 10.0, session: Optional[requests.Session] = None):
        self.api_key = api_key
        self.timeout = timeout
        self.session = session or requests.Session()

    def fetch(self, city: str, country: str, max_items: int = 30) -> ProviderResult:
        params = {
            "q": f'"{city}"',
            "sortBy": "publishedAt",
            "language": "en",
            "pageSize": min(max_items, 100),
        }
        headers = {"X-Api-Key": self.api_key}
        r = self.session.get(self.BASE_URL, params=params, headers=headers, timeout=self.timeout)
        r.raise_for_status()
        data = r.json()
        items: List[Dict] = []
        for a in data.get("articles", []):
            if not a.get("title") or a.get("title") == "[Removed]":
                continue
            items.append({
                "url": a.get("url") or "",
                "title": a.get("title") or "",
                "description": a.get("description") or "",
                "content": a.get("content") or a.get("description") or "",
                "image_url": a.get("urlToImage"),
                "published_at": parse_iso(a.get("publishedAt")),
                "source": (a.get("source") or {}).get("name") or "NewsAPI",
            })
        return ProviderResult(items=_dedupe(items)[:max_items], source_name=self.name)

# ---------- Google News RSS ----------

class GoogleNewsRSSProvider(BaseProvider):
    """
    Uses Google News RSS to run a location query.
    Pros: free, no key. Cons: RSS snippets are short HTML fragments.
    """

    name = "google_news_rss"
    BASE_URL = "https://news.google.com/rss/search"

    def __init__(self, lang: str = "en", timeout: float = 10.0, session: Optional[requests.Session] = None):
        self.lang = lang
        self.timeout = timeout
        self.session = session or requests.Session()

    def _params(self, city: str, country: str) -> Dict[str, str]:
        # gl wants an ISO country code; names fall back to US edition
        gl = country.upper() if len(country) == 2 else "US"
        return {
            "q": f"{city} {country} when:1d",
            "hl": self.lang,
            "gl": gl,
            "ceid": f"{gl}:{self.lang}",
        }

    def fetch(self, city: str, country: str, max_items: int = 30) -> ProviderResult:
        r = self.session.get(self.BASE_URL, params=self._params(city, country), timeout=self.timeout)
        r.raise_for_status()
        feed = feedparser.parse(r.content)
        items: List[Dict] = []
        for e in feed.entries[: max_items * 2]:  # oversample then dedupe
            snippet = html_to_text(getattr(e, "summary", ""))
            source = getattr(e, "source", None)
            items.append({
                "url": getattr(e, "link", ""),
                "title": getattr(e, "title", ""),
                "description": snippet,
                "content": snippet,
                "image_url": None,
                "published_at": _parse_feed_datetime(e),
                "source": (source.get("title") if source else None) or feed.feed.get("title", "Google News"),
            })
        return ProviderResult(items=_dedupe(items)[:max_items], source_name=self.name)

# ---------- Orchestrator ----------

class SourceClient:
    """Queries every configured provider for a location and merges the results."""

    def __init__(self, providers: List[BaseProvider]):
        self.providers = providers

    @classmethod
    def from_settings(cls, settings) -> "SourceClient":
        providers: List[BaseProvider] = []
        if settings.newsapi_key:
            providers.append(NewsAPIProvider(settings.newsapi_key, timeout=settings.source_timeout))
        providers.append(GoogleNewsRSSProvider(lang=settings.rss_lang, timeout=settings.source_timeout))
        return cls(providers)

    def close(self) -> None:
        for p in self.providers:
            p.close()

    def fetch_for_location(self, city: str, country: str, max_items: int = 30) -> List[Dict]:
        """
        Merged, deduplicated items in provider order.

        One failing provider is logged and skipped; if every provider fails the
        request fails with UpstreamSourceError.
        """
        all_items: List[Dict] = []
        failures = 0
        for p in self.providers:
            try:
                res = p.fetch(city=city, country=country, max_items=max_items)
            except (requests.RequestException, ValueError) as e:
                failures += 1
                logger.warning(
                    "PROVIDER_FAILED",
                    extra={"provider": p.name, "city": city, "error": type(e).__name__},
                )
                continue
            logger.info("PROVIDER_OK", extra={"provider": p.name, "city": city, "count": len(res.items)})
            all_items.extend(res.items)

        if self.providers and failures == len(self.providers):
            raise UpstreamSourceError(f"all {failures} news providers failed for {city!r}")

        return _dedupe(all_items)[:max_items]
