# newsengine/dependencies.py
"""
Service container and the FastAPI dependencies that read it.

One ``Services`` instance is built per application (in the lifespan, or by a
test through ``create_app(services=...)``) and stored on ``app.state``.
"""
from __future__ import annotations

from dataclasses import dataclass
from typing import Optional

from fastapi import Depends, Header, HTTPException, Request, status

from .cache import ArticleCache
from .config import Settings
from .engagement import EngagementAggregator
from .errors import IdentityUnavailableError
from .events import EventRecorder
from .feed import FeedService
from .identity import IdentityProvider, bearer_token, identity_from_settings
from .logging_setup import get_logger
from .preferences import PreferenceStore
from .sources import SourceClient
from .store import Database
from .summarize import SummarizationPipeline, Summarizer

logger = get_logger("newsengine.dependencies")


@dataclass
class Services:
    db: Database
    cache: ArticleCache
    aggregator: EngagementAggregator
    events: EventRecorder
    preferences: PreferenceStore
    feed: FeedService
    summarizer: Summarizer
    summaries: SummarizationPipeline
    identity: IdentityProvider

    @classmethod
    def build(cls, settings: Settings, db: Optional[Database] = None,
              sources: Optional[SourceClient] = None,
              summarizer: Optional[Summarizer] = None,
              identity: Optional[IdentityProvider] = None) -> "Services":
        db = db or Database(settings.db_url)
        cache = ArticleCache(db)
        aggregator = EngagementAggregator(db)
        preferences = PreferenceStore(db)
        sources = sources or SourceClient.from_settings(settings)
        summarizer = summarizer or Summarizer.from_settings(settings)
        return cls(
            db=db,
            cache=cache,
            aggregator=aggregator,
            events=EventRecorder(db),
            preferences=preferences,
            feed=FeedService(cache, aggregator, sources, preferences,
                             fetch_page_size=settings.fetch_page_size),
            summarizer=summarizer,
            summaries=SummarizationPipeline(cache, summarizer),
            identity=identity or identity_from_settings(settings),
        )

    def close(self) -> None:
        """Release every client and connection pool the services hold."""
        self.identity.close()
        self.feed.sources.close()
        self.summarizer.close()
        self.db.dispose()


def get_services(request: Request) -> Services:
    return request.app.state.services


def optional_caller(
    authorization: Optional[str] = Header(default=None),
    services: Services = Depends(get_services),
) -> Optional[str]:
    token = bearer_token(authorization)
    if token is None:
        return None
    try:
        return services.identity.resolve(token)
    except IdentityUnavailableError:
        # endpoints with optional identity carry on anonymously
        logger.warning("IDENTITY_UNAVAILABLE_ANONYMOUS")
        return None


def require_caller(
    authorization: Optional[str] = Header(default=None),
    services: Services = Depends(get_services),
) -> str:
    token = bearer_token(authorization)
    if token is None:
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="Missing bearer credential")
    user_id = services.identity.resolve(token)
    if not user_id:
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="Invalid credential")
    return user_id
