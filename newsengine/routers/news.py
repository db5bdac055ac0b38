from fastapi import APIRouter, Depends
from ..dependencies import Services, get_services, require_caller
from ..logging_setup import get_logger
from ..schema import FeedRequest, FeedResponse, PersonalizedFeedResponse

logger = get_logger("newsengine.routes.news")

router = APIRouter(prefix="/news", tags=["News"])

@router.post("/feed", response_model=FeedResponse)
def fetch_feed(body: FeedRequest, services: Services = Depends(get_services)):
    """
    Trending feed for a city. Served from the article cache while it holds a
    live page for the location; otherwise fetched from the news providers,
    cached for 15 minutes and ranked.
    """
    logger.info(f"Feed requested: city={body.city} country={body.country} page={body.page} limit={body.limit}")
    feed = services.feed.get_feed(body.city, body.country, page=body.page, limit=body.limit)
    return FeedResponse(articles=feed.articles, total=feed.total, page=feed.page,
                        has_more=feed.has_more, cached=feed.cached)

@router.post("/personalized", response_model=PersonalizedFeedResponse)
def personalized_feed(body: FeedRequest,
                      user_id: str = Depends(require_caller),
                      services: Services = Depends(get_services)):
    """Same candidates as /news/feed, reweighted by the caller's last 14 days of engagement."""
    logger.info(f"Personalized feed requested: city={body.city} page={body.page} limit={body.limit}")
    feed = services.feed.get_personalized_feed(user_id, body.city, body.country,
                                               page=body.page, limit=body.limit)
    return PersonalizedFeedResponse(articles=feed.articles, total=feed.total, page=feed.page,
                                    has_more=feed.has_more, cached=feed.cached,
                                    preferences=feed.profile.as_response())
