from fastapi import APIRouter
from ..logging_setup import get_logger

logger = get_logger("newsengine.routes.health")

router = APIRouter(tags=["Health"])

@router.get("/health")
def health():
    logger.debug("Health check invoked")
    return {"status": "ok"}
