# newsengine/main.py
from typing import Optional

from fastapi import FastAPI

from .config import Settings
from .dependencies import Services
from .exception_handling import register_exception_handlers
from .lifespan import lifespan
from .logging_setup import setup_logging, get_logger
from .middleware import RequestContextMiddleware

from .routers import engagement, health, history, news, prefs, summary

logger = get_logger("newsengine.main")


def create_app(settings: Optional[Settings] = None, services: Optional[Services] = None) -> FastAPI:
    """
    Build the API. ``services`` lets a caller (tests, an embedding host) supply
    pre-built dependencies; otherwise the lifespan builds them from settings.
    """
    app = FastAPI(title="News Engine", version="0.1.0", lifespan=lifespan)
    app.state.settings = settings or Settings.from_env()
    app.state.services = services
    app.add_middleware(RequestContextMiddleware)

    register_exception_handlers(app)

    app.include_router(health.router)
    app.include_router(news.router)
    app.include_router(summary.router)
    app.include_router(engagement.router)
    app.include_router(prefs.router)
    app.include_router(history.router)
    return app


setup_logging()  # <-- set up logging ASAP
app = create_app()
