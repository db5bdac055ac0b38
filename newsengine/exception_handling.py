# newsengine/exception_handling.py
from __future__ import annotations

from fastapi import FastAPI, Request
from fastapi.encoders import jsonable_encoder
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from .errors import NewsEngineError
from .logging_setup import get_logger

# Keep a separate logger namespace for exceptions
logger = get_logger("newsengine.exceptions")


async def http_exception_handler(request: Request, exc: StarletteHTTPException):
    logger.warning(
        "HTTP_EXCEPTION",
        extra={"handled": True, "path": str(request.url.path), "status_code": exc.status_code},
    )
    return JSONResponse({"detail": exc.detail}, status_code=exc.status_code,
                        headers=getattr(exc, "headers", None))


async def validation_exception_handler(request: Request, exc: RequestValidationError):
    # Missing/invalid input is a 400 for this API, not FastAPI's default 422
    logger.info("VALIDATION_ERROR", extra={"handled": True, "path": str(request.url.path)})
    return JSONResponse({"detail": jsonable_encoder(exc.errors())}, status_code=400)


async def engine_exception_handler(request: Request, exc: NewsEngineError):
    # Typed upstream/storage failures: generic message, traceback only in the log
    logger.exception(
        "ENGINE_EXCEPTION",
        extra={"handled": True, "path": str(request.url.path), "error": type(exc).__name__},
    )
    return JSONResponse({"detail": exc.public_message}, status_code=exc.status_code)


async def unhandled_exception_handler(request: Request, exc: Exception):
    logger.exception(
        "UNHANDLED_EXCEPTION",
        extra={"handled": False, "path": str(request.url.path)},
    )
    return JSONResponse({"detail": "Internal Server Error"}, status_code=500)


def register_exception_handlers(app: FastAPI) -> None:
    """
    Register all exception handlers in one place.
    Call from create_app() right after creating the FastAPI app.
    """
    app.add_exception_handler(StarletteHTTPException, http_exception_handler)
    app.add_exception_handler(RequestValidationError, validation_exception_handler)
    app.add_exception_handler(NewsEngineError, engine_exception_handler)
    app.add_exception_handler(Exception, unhandled_exception_handler)
