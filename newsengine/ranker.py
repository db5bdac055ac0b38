from datetime import datetime
from typing import Dict, List, Optional, Sequence, Tuple, TypeVar
import math

from .config import DECAY_K, WEIGHTS, RankingWeights
from .engagement import EngagementCounts
from .timeutil import to_utc, utcnow

T = TypeVar("T")

def age_hours(published_at: Optional[datetime], now: Optional[datetime] = None) -> float:
    # Future timestamps (source clock skew) and missing ones count as brand new
    now = to_utc(now) or utcnow()
    published_at = to_utc(published_at)
    if published_at is None:
        return 0.0
    return max(0.0, (now - published_at).total_seconds() / 3600.0)

def raw_score(counts: EngagementCounts, weights: RankingWeights = WEIGHTS) -> float:
    return (counts.likes * weights.like
            + counts.comments * weights.comment
            + counts.shares * weights.share
            + counts.poll_votes * weights.poll_vote)

def trending_score(counts: EngagementCounts, published_at: Optional[datetime],
                   now: Optional[datetime] = None, weights: RankingWeights = WEIGHTS) -> float:
    decay = math.exp(-DECAY_K * age_hours(published_at, now))
    return raw_score(counts, weights) * decay

def score_articles(articles: Sequence, counts: Dict[str, EngagementCounts],
                   now: Optional[datetime] = None) -> List[Tuple[object, float]]:
    """Pair each article with its trending score, keeping input order."""
    now = now or utcnow()
    return [
        (a, trending_score(counts.get(a.article_id, EngagementCounts()), a.published_at, now))
        for a in articles
    ]

def rank(scored: Sequence[Tuple[T, float]]) -> List[Tuple[T, float]]:
    # sorted() is stable: equal scores keep fetch order
    return sorted(scored, key=lambda pair: pair[1], reverse=True)

def paginate(items: Sequence[T], page: int, limit: int) -> List[T]:
    start = (page - 1) * limit
    return list(items[start:start + limit])
