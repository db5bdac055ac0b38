from fastapi import APIRouter, Depends, HTTPException, status
from ..dependencies import Services, get_services, require_caller
from ..logging_setup import get_logger
from ..schema import EngagementIn

logger = get_logger("newsengine.routes.engagement")

router = APIRouter(prefix="/engagement", tags=["Engagement"])

@router.post("", status_code=status.HTTP_201_CREATED)
def post_engagement(body: EngagementIn,
                    user_id: str = Depends(require_caller),
                    services: Services = Depends(get_services)):
    logger.info(f"Engagement received: article={body.article_id} type={body.event_type}")
    if services.cache.get(body.article_id) is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Unknown article")
    event = services.aggregator.record(user_id, body.article_id, body.event_type)
    return {"ok": True, "id": event.id}
