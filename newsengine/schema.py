from datetime import datetime
from typing import List, Literal, Optional

from pydantic import BaseModel, ConfigDict, Field

EventType = Literal["like", "comment", "share", "poll_vote"]
ClearType = Literal["all", "interactions", "preferences", "events"]


# ---- Write path into the article cache ----

class ArticleData(BaseModel):
    """
    Fields for an article upsert. Only fields that were explicitly set are
    written; anything left unset keeps its stored value.
    """
    article_id: str
    title: str = ""
    description: Optional[str] = None
    content: Optional[str] = None
    url: str = ""
    image_url: Optional[str] = None
    source_name: Optional[str] = None
    published_at: Optional[datetime] = None
    location_name: Optional[str] = None
    category: Optional[str] = None
    ai_summary: Optional[str] = None
    tags: List[str] = Field(default_factory=list)


# ---- Feeds ----

class FeedRequest(BaseModel):
    model_config = ConfigDict(str_strip_whitespace=True)

    city: str = Field(min_length=1)
    country: str = Field(min_length=1)
    page: int = Field(1, ge=1)
    limit: int = Field(20, ge=1, le=100)

class ArticleOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    article_id: str
    title: str
    description: Optional[str] = None
    content: Optional[str] = None
    url: str
    image_url: Optional[str] = None
    source_name: Optional[str] = None
    published_at: Optional[datetime] = None
    location_name: Optional[str] = None
    category: Optional[str] = None
    ai_summary: Optional[str] = None
    tags: List[str] = Field(default_factory=list)
    cached_at: datetime
    expires_at: datetime
    trending_score: float = 0.0
    score: Optional[float] = None  # personalized feed only

class ProfileOut(BaseModel):
    preferredCities: List[str] = Field(default_factory=list)
    preferredSources: List[str] = Field(default_factory=list)
    preferredCategories: List[str] = Field(default_factory=list)
    preferredKeywords: List[str] = Field(default_factory=list)

class FeedResponse(BaseModel):
    articles: List[ArticleOut]
    total: int
    page: int
    has_more: bool
    cached: bool

class PersonalizedFeedResponse(FeedResponse):
    preferences: ProfileOut


# ---- Summaries ----

class ArticlePayload(BaseModel):
    title: str = ""
    description: Optional[str] = ""
    content: Optional[str] = ""
    url: Optional[str] = ""
    source: Optional[str] = ""
    publishedAt: Optional[str] = None

class SummarizeRequest(BaseModel):
    article: ArticlePayload
    articleId: Optional[str] = None

class SummarizeResponse(BaseModel):
    summary: str
    keywords: Optional[List[str]] = None
    category: Optional[str] = None
    cached: bool


# ---- History ----

class ClearHistoryRequest(BaseModel):
    clearType: ClearType

class DeletedCounts(BaseModel):
    likes: int = 0
    shares: int = 0
    events: int = 0
    preferences: int = 0
    pollVotes: int = 0
    comments: int = 0

class ClearHistoryResponse(BaseModel):
    success: bool
    deleted_counts: DeletedCounts
    cleared_at: datetime


# ---- Engagement & stored preferences ----

class EngagementIn(BaseModel):
    article_id: str = Field(min_length=1)
    event_type: EventType

class PrefsIn(BaseModel):
    excluded_sources: Optional[List[str]] = None
    excluded_categories: Optional[List[str]] = None

class PrefsOut(BaseModel):
    excluded_sources: List[str] = Field(default_factory=list)
    excluded_categories: List[str] = Field(default_factory=list)
