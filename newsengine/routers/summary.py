from typing import Optional

from fastapi import APIRouter, BackgroundTasks, Depends
from fastapi.responses import JSONResponse

from ..cache import compute_article_id
from ..dependencies import Services, get_services, optional_caller
from ..errors import CacheUnavailableError, SummaryNotStoredError
from ..logging_setup import get_logger
from ..schema import SummarizeRequest, SummarizeResponse
from ..summarize import SummaryResult, fallback_summary

logger = get_logger("newsengine.routes.summary")

router = APIRouter(prefix="/news", tags=["Summaries"])


def _article_id(body: SummarizeRequest) -> Optional[str]:
    if body.articleId:
        return body.articleId
    try:
        return compute_article_id(body.article.url or "")
    except ValueError:
        return None


def _audit(services: Services, bg: BackgroundTasks, result: SummaryResult,
           article_id: Optional[str], user_id: Optional[str]) -> None:
    # Fire-and-forget: runs after the response has been sent
    bg.add_task(
        services.events.record_quietly,
        "summary_generated",
        {
            "article_id": article_id,
            "summary_length": len(result.summary),
            "keyword_count": len(result.keywords or []),
            "category": result.category,
            "provider": result.provider,
        },
        user_id=user_id,
    )


@router.post("/summarize", response_model=SummarizeResponse, response_model_exclude_none=True)
def summarize_article(body: SummarizeRequest, bg: BackgroundTasks,
                      user_id: Optional[str] = Depends(optional_caller),
                      services: Services = Depends(get_services)):
    """
    2-3 sentence summary, keywords and category for one article.

    Stored summaries are returned without calling the model. Model failures
    degrade to a local summary with a 200. Storage failures answer 500 but
    still carry a summary: the model result when there was one, the local
    summary otherwise.
    """
    article_id = _article_id(body)
    logger.info(f"Summary requested: article={article_id}")

    try:
        if article_id is None:
            result = services.summarizer.generate(body.article)
        else:
            result = services.summaries.summarize(article_id, body.article)
    except SummaryNotStoredError as e:
        logger.exception("SUMMARY_STORAGE_FAILED", extra={"article_id": article_id})
        _audit(services, bg, e.result, article_id, user_id)
        return JSONResponse({**e.result.as_response(), "error": "Storage unavailable"},
                            status_code=500, background=bg)
    except CacheUnavailableError:
        logger.exception("SUMMARY_STORAGE_FAILED", extra={"article_id": article_id})
        degraded = fallback_summary(body.article)
        return JSONResponse({**degraded.as_response(), "error": "Storage unavailable"}, status_code=500)

    if not result.cached:
        _audit(services, bg, result, article_id, user_id)
    return result.as_response()
