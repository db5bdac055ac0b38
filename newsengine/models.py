from typing import Optional, List
from sqlalchemy.types import DateTime, TypeDecorator
from sqlmodel import SQLModel, Field, Column, JSON
from datetime import datetime, timezone

# All timestamps are timezone-aware UTC in Python.

class UTCDateTime(TypeDecorator):
    """
    ``DateTime(timezone=True)`` that always hands back aware UTC values.

    SQLite keeps no offset, so naive values read back (or passed in) are
    taken to be UTC.
    """
    impl = DateTime(timezone=True)
    cache_ok = True

    def process_bind_param(self, value, dialect):
        if value is None:
            return None
        if value.tzinfo is None:
            return value.replace(tzinfo=timezone.utc)
        return value.astimezone(timezone.utc)

    def process_result_value(self, value, dialect):
        if value is None:
            return None
        if value.tzinfo is None:
            return value.replace(tzinfo=timezone.utc)
        return value.astimezone(timezone.utc)


class Article(SQLModel, table=True):
    __tablename__ = "news_cache"

    article_id: str = Field(primary_key=True, max_length=64)
    title: str = ""
    description: Optional[str] = None
    content: Optional[str] = None
    url: str = ""
    image_url: Optional[str] = None
    source_name: Optional[str] = None
    published_at: Optional[datetime] = Field(default=None, index=True, sa_type=UTCDateTime)
    location_name: Optional[str] = Field(default=None, index=True)
    category: Optional[str] = None
    ai_summary: Optional[str] = None
    tags: List[str] = Field(default_factory=list, sa_column=Column(JSON))
    cached_at: datetime = Field(sa_type=UTCDateTime)
    expires_at: datetime = Field(index=True, sa_type=UTCDateTime)

class EngagementEvent(SQLModel, table=True):
    __tablename__ = "engagement_events"

    id: Optional[int] = Field(default=None, primary_key=True)
    user_id: str = Field(index=True)
    article_id: str = Field(index=True)
    event_type: str  # like | comment | share | poll_vote
    created_at: datetime = Field(index=True, sa_type=UTCDateTime)

class UserEvent(SQLModel, table=True):
    __tablename__ = "user_events"

    id: Optional[int] = Field(default=None, primary_key=True)
    user_id: Optional[str] = Field(default=None, index=True)
    event_type: str
    properties: dict = Field(default_factory=dict, sa_column=Column(JSON))
    created_at: datetime = Field(sa_type=UTCDateTime)

class UserNewsPreferences(SQLModel, table=True):
    __tablename__ = "user_news_preferences"

    user_id: str = Field(primary_key=True)
    excluded_sources: List[str] = Field(default_factory=list, sa_column=Column(JSON))
    excluded_categories: List[str] = Field(default_factory=list, sa_column=Column(JSON))
    updated_at: datetime = Field(sa_type=UTCDateTime)
