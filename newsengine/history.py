# newsengine/history.py
from __future__ import annotations

from datetime import datetime
from typing import Dict, Optional, Tuple

from sqlalchemy import delete

from .logging_setup import get_logger
from .models import EngagementEvent, UserEvent, UserNewsPreferences
from .store import Database
from .timeutil import utcnow

logger = get_logger("newsengine.history")

# deleted_counts key -> engagement event type
INTERACTION_KEYS = {
    "likes": "like",
    "comments": "comment",
    "shares": "share",
    "pollVotes": "poll_vote",
}

CLEAR_TYPES = ("all", "interactions", "preferences", "events")


def clear_history(db: Database, user_id: str, clear_type: str,
                  now: Optional[datetime] = None) -> Tuple[Dict[str, int], datetime]:
    """
    Delete the caller's own rows for the requested scope in one transaction.

    Every statement is filtered on ``user_id``; there is no path that touches
    another user's rows.
    """
    if clear_type not in CLEAR_TYPES:
        raise ValueError(f"unknown clear type: {clear_type}")
    if not user_id:
        raise ValueError("user_id is required")

    counts = {"likes": 0, "shares": 0, "events": 0, "preferences": 0, "pollVotes": 0, "comments": 0}
    with db.session() as s:
        if clear_type in ("all", "interactions"):
            for key, event_type in INTERACTION_KEYS.items():
                res = s.execute(
                    delete(EngagementEvent).where(
                        EngagementEvent.user_id == user_id,
                        EngagementEvent.event_type == event_type,
                    )
                )
                counts[key] = res.rowcount or 0
        if clear_type in ("all", "events"):
            res = s.execute(delete(UserEvent).where(UserEvent.user_id == user_id))
            counts["events"] = res.rowcount or 0
        if clear_type in ("all", "preferences"):
            res = s.execute(delete(UserNewsPreferences).where(UserNewsPreferences.user_id == user_id))
            counts["preferences"] = res.rowcount or 0
        s.commit()

    cleared_at = now or utcnow()
    logger.info("HISTORY_CLEARED", extra={"clear_type": clear_type, "deleted": counts})
    return counts, cleared_at
