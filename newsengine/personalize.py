# newsengine/personalize.py
"""
Per-caller reweighting of trending scores.

The profile is rebuilt from the caller's raw engagement on every request and
only ever produces a new score; stored articles and the shared trending score
are never touched.
"""
from __future__ import annotations

from collections import Counter
from dataclasses import dataclass, field
from datetime import datetime, timedelta
from typing import Dict, List, Optional, Sequence, Tuple

from .config import PROFILE_WINDOW_DAYS, WEIGHTS, RankingWeights
from .engagement import EngagementAggregator
from .keywords import keyword_counts, keyword_set
from .logging_setup import get_logger
from .timeutil import utcnow

logger = get_logger("newsengine.personalize")

TOP_CITIES = 5
TOP_SOURCES = 5
TOP_CATEGORIES = 5
TOP_KEYWORDS = 10


@dataclass
class UserPreferenceProfile:
    preferred_cities: List[str] = field(default_factory=list)
    preferred_sources: List[str] = field(default_factory=list)
    preferred_categories: List[str] = field(default_factory=list)
    preferred_keywords: List[str] = field(default_factory=list)

    def is_empty(self) -> bool:
        return not (self.preferred_cities or self.preferred_sources
                    or self.preferred_categories or self.preferred_keywords)

    def as_response(self) -> Dict[str, List[str]]:
        return {
            "preferredCities": list(self.preferred_cities),
            "preferredSources": list(self.preferred_sources),
            "preferredCategories": list(self.preferred_categories),
            "preferredKeywords": list(self.preferred_keywords),
        }


def _top(counter: Counter, n: int) -> List[str]:
    return [k for k, _ in counter.most_common(n)]


def _norm(value: Optional[str]) -> str:
    return (value or "").strip().lower()


def build_profile(aggregator: EngagementAggregator, user_id: str,
                  window_days: int = PROFILE_WINDOW_DAYS,
                  now: Optional[datetime] = None) -> UserPreferenceProfile:
    """
    Tally the caller's engaged articles over the trailing window.

    Raw frequency only: an article liked twice counts twice, and recency within
    the window carries no extra weight.
    """
    now = now or utcnow()
    history = aggregator.history_for(user_id, since=now - timedelta(days=window_days))

    cities: Counter = Counter()
    sources: Counter = Counter()
    categories: Counter = Counter()
    texts: List[str] = []
    for _event, article in history:
        if article.location_name:
            cities[article.location_name] += 1
        if article.source_name:
            sources[article.source_name] += 1
        if article.category:
            categories[article.category] += 1
        texts.append(" ".join(filter(None, [article.title, article.description, article.ai_summary])))

    profile = UserPreferenceProfile(
        preferred_cities=_top(cities, TOP_CITIES),
        preferred_sources=_top(sources, TOP_SOURCES),
        preferred_categories=_top(categories, TOP_CATEGORIES),
        preferred_keywords=_top(keyword_counts(texts), TOP_KEYWORDS),
    )
    logger.debug("PROFILE_BUILT", extra={"events": len(history), "empty": profile.is_empty()})
    return profile


def keyword_matches(article, profile: UserPreferenceProfile) -> int:
    if not profile.preferred_keywords:
        return 0
    words = keyword_set(article.title or "", article.description or "", article.ai_summary or "")
    return sum(1 for kw in set(profile.preferred_keywords) if kw in words)


def personalize(article, base_score: float, profile: UserPreferenceProfile,
                weights: RankingWeights = WEIGHTS) -> float:
    """Apply city, source, category and keyword boosts, in that order."""
    if profile.is_empty():
        return base_score

    score = base_score
    if _norm(article.location_name) in {_norm(c) for c in profile.preferred_cities}:
        score *= weights.city_boost
    if _norm(article.source_name) in {_norm(s) for s in profile.preferred_sources}:
        score *= weights.source_boost
    if _norm(article.category) in {_norm(c) for c in profile.preferred_categories}:
        score *= weights.category_boost
    matches = keyword_matches(article, profile)
    if matches:
        # Linear in the match count, not compounding per keyword.
        score *= 1 + weights.keyword_step * matches
    return score


def personalize_all(scored: Sequence[Tuple[object, float]],
                    profile: UserPreferenceProfile) -> List[Tuple[object, float, float]]:
    """(article, trending score, final score) for each input, input order kept."""
    return [(a, base, personalize(a, base, profile)) for a, base in scored]
