from fastapi import APIRouter, Depends
from ..dependencies import Services, get_services, require_caller
from ..logging_setup import get_logger
from ..schema import PrefsIn, PrefsOut

logger = get_logger("newsengine.routes.prefs")

router = APIRouter(prefix="/prefs", tags=["Preferences"])

@router.get("", response_model=PrefsOut)
def read_prefs(user_id: str = Depends(require_caller), services: Services = Depends(get_services)):
    prefs = services.preferences.get(user_id)
    if prefs is None:
        return PrefsOut()
    return PrefsOut(excluded_sources=prefs.excluded_sources, excluded_categories=prefs.excluded_categories)

@router.put("", response_model=PrefsOut)
def update_prefs(body: PrefsIn, user_id: str = Depends(require_caller),
                 services: Services = Depends(get_services)):
    logger.info("Updating preferences")
    prefs = services.preferences.update(user_id,
                                        excluded_sources=body.excluded_sources,
                                        excluded_categories=body.excluded_categories)
    return PrefsOut(excluded_sources=prefs.excluded_sources, excluded_categories=prefs.excluded_categories)
