# newsengine/preferences.py
from __future__ import annotations

from typing import List, Optional

from .models import UserNewsPreferences
from .store import Database
from .timeutil import utcnow


def _clean(values: List[str]) -> List[str]:
    return list(dict.fromkeys(v.strip() for v in values if v and v.strip()))


class PreferenceStore:
    """Explicit, user-edited feed exclusions (table user_news_preferences)."""

    def __init__(self, db: Database):
        self._db = db

    def get(self, user_id: str) -> Optional[UserNewsPreferences]:
        with self._db.session() as s:
            return s.get(UserNewsPreferences, user_id)

    def update(self, user_id: str, excluded_sources: Optional[List[str]] = None,
               excluded_categories: Optional[List[str]] = None) -> UserNewsPreferences:
        with self._db.session() as s:
            prefs = s.get(UserNewsPreferences, user_id) or UserNewsPreferences(user_id=user_id, updated_at=utcnow())
            if excluded_sources is not None:
                prefs.excluded_sources = _clean(excluded_sources)
            if excluded_categories is not None:
                prefs.excluded_categories = _clean(excluded_categories)
            prefs.updated_at = utcnow()
            s.add(prefs)
            s.commit()
            s.refresh(prefs)
            return prefs


def is_excluded(article, prefs: Optional[UserNewsPreferences]) -> bool:
    if prefs is None:
        return False
    sources = {s.lower() for s in prefs.excluded_sources or []}
    categories = {c.lower() for c in prefs.excluded_categories or []}
    return ((article.source_name or "").lower() in sources
            or (article.category or "").lower() in categories)
