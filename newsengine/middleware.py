# newsengine/middleware.py
import re
import time
import uuid

from starlette.middleware.base import BaseHTTPMiddleware
from starlette.requests import Request

from .logging_setup import request_id_var, get_logger

logger = get_logger("newsengine.http")

REQUEST_ID_HEADER = "X-Request-ID"
_SAFE_ID = re.compile(r"^[A-Za-z0-9._-]{1,64}$")


def resolve_request_id(incoming: str) -> str:
    """Reuse a gateway-supplied id when it is short and plain, else mint one."""
    if incoming and _SAFE_ID.match(incoming):
        return incoming
    return uuid.uuid4().hex[:12]


class RequestContextMiddleware(BaseHTTPMiddleware):
    """Binds a request id for the duration of the request and logs one line per request."""

    async def dispatch(self, request: Request, call_next):
        req_id = resolve_request_id(request.headers.get(REQUEST_ID_HEADER, ""))
        token = request_id_var.set(req_id)
        start = time.perf_counter()
        status_code = 500
        try:
            response = await call_next(request)
            status_code = response.status_code
            response.headers[REQUEST_ID_HEADER] = req_id
            return response
        except Exception:
            logger.exception("HTTP_UNHANDLED", extra={"method": request.method, "path": request.url.path})
            raise
        finally:
            logger.info("HTTP_REQUEST", extra={
                "method": request.method,
                "path": request.url.path,
                "status_code": status_code,
                "elapsed_ms": round((time.perf_counter() - start) * 1000, 1),
            })
            request_id_var.reset(token)
