# newsengine/lifespan.py
from contextlib import asynccontextmanager
from fastapi import FastAPI

from .dependencies import Services
from .logging_setup import get_logger

logger = get_logger("newsengine.lifespan")

@asynccontextmanager
async def lifespan(app: FastAPI):
    # ---- Startup ----
    settings = app.state.settings
    logger.info("APP STARTUP", extra={"settings": settings.describe()})

    owns_services = getattr(app.state, "services", None) is None
    if owns_services:
        app.state.services = Services.build(settings)
    app.state.services.db.init()
    logger.info("Database ready")

    # Hand control to the application
    yield

    # ---- Shutdown ----
    logger.info("APP SHUTDOWN")
    if owns_services:
        app.state.services.close()
        app.state.services = None
