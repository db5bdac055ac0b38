# newsengine/events.py
from __future__ import annotations

from typing import Any, Dict, Optional

from .errors import CacheUnavailableError
from .logging_setup import get_logger
from .models import UserEvent
from .store import Database
from .timeutil import utcnow

logger = get_logger("newsengine.events")


class EventRecorder:
    """Analytics/audit events (table user_events)."""

    def __init__(self, db: Database):
        self._db = db

    def record(self, event_type: str, properties: Dict[str, Any], user_id: Optional[str] = None) -> None:
        with self._db.session() as s:
            s.add(UserEvent(user_id=user_id, event_type=event_type,
                            properties=properties, created_at=utcnow()))
            s.commit()

    def record_quietly(self, event_type: str, properties: Dict[str, Any], user_id: Optional[str] = None) -> None:
        """Background-task variant: the response is already sent, so only log on failure."""
        try:
            self.record(event_type, properties, user_id=user_id)
        except CacheUnavailableError:
            logger.warning("AUDIT_EVENT_DROPPED", extra={"event_type": event_type})
