from fastapi import APIRouter, Depends
from ..dependencies import Services, get_services, require_caller
from ..history import clear_history
from ..logging_setup import get_logger
from ..schema import ClearHistoryRequest, ClearHistoryResponse, DeletedCounts

logger = get_logger("newsengine.routes.history")

router = APIRouter(prefix="/history", tags=["History"])

@router.post("/clear", response_model=ClearHistoryResponse)
def clear(body: ClearHistoryRequest, user_id: str = Depends(require_caller),
          services: Services = Depends(get_services)):
    """Bulk-delete the caller's own engagement, events and/or stored preferences."""
    logger.info(f"History clear requested: type={body.clearType}")
    counts, cleared_at = clear_history(services.db, user_id, body.clearType)
    return ClearHistoryResponse(success=True, deleted_counts=DeletedCounts(**counts), cleared_at=cleared_at)
