# newsengine/engagement.py
from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from typing import Dict, Iterable, List, Optional, Tuple

from sqlalchemy import func
from sqlmodel import select

from .logging_setup import get_logger
from .models import Article, EngagementEvent
from .store import Database
from .timeutil import utcnow

logger = get_logger("newsengine.engagement")

EVENT_TYPES = ("like", "comment", "share", "poll_vote")


@dataclass
class EngagementCounts:
    likes: int = 0
    comments: int = 0
    shares: int = 0
    poll_votes: int = 0


_FIELD_FOR_TYPE = {
    "like": "likes",
    "comment": "comments",
    "share": "shares",
    "poll_vote": "poll_votes",
}


class EngagementAggregator:
    """Reads (and appends) raw engagement events. Counts are never cached."""

    def __init__(self, db: Database):
        self._db = db

    def counts_for(self, article_ids: Iterable[str]) -> Dict[str, EngagementCounts]:
        ids = list(dict.fromkeys(article_ids))
        counts = {aid: EngagementCounts() for aid in ids}
        if not ids:
            return counts

        with self._db.session() as s:
            rows = s.exec(
                select(EngagementEvent.article_id, EngagementEvent.event_type, func.count())
                .where(EngagementEvent.article_id.in_(ids))
                .group_by(EngagementEvent.article_id, EngagementEvent.event_type)
            ).all()

        for article_id, event_type, n in rows:
            field = _FIELD_FOR_TYPE.get(event_type)
            if field is None:
                continue
            setattr(counts[article_id], field, int(n))
        return counts

    def record(self, user_id: str, article_id: str, event_type: str,
               now: Optional[datetime] = None) -> EngagementEvent:
        if event_type not in EVENT_TYPES:
            raise ValueError(f"unknown event type: {event_type}")
        event = EngagementEvent(
            user_id=user_id,
            article_id=article_id,
            event_type=event_type,
            created_at=now or utcnow(),
        )
        with self._db.session() as s:
            s.add(event)
            s.commit()
            s.refresh(event)
        logger.info("ENGAGEMENT_RECORDED", extra={"article_id": article_id, "event_type": event_type})
        return event

    def history_for(self, user_id: str, since: datetime) -> List[Tuple[EngagementEvent, Article]]:
        """The caller's events since ``since``, each joined to its article."""
        with self._db.session() as s:
            rows = s.exec(
                select(EngagementEvent, Article)
                .join(Article, Article.article_id == EngagementEvent.article_id)
                .where(EngagementEvent.user_id == user_id, EngagementEvent.created_at >= since)
                .order_by(EngagementEvent.created_at.desc())
            ).all()
        return [(event, article) for event, article in rows]
