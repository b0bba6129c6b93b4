"""
Träwelling check-in API - FastAPI backend.
Application factory: logging, schema bootstrap, CORS and routers.
"""

import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from config import settings, twitter_configured, validate_security_settings
from database import engine, Base
import models  # noqa: F401
from routers import (
    health,
    auth,
    settings as settings_router,
    social,
    statuses,
    notifications,
    export,
)

logging.basicConfig(
    level=settings.LOG_LEVEL.upper(),
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
)
logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Check secrets and bootstrap the schema on startup; release the pool on shutdown."""
    logger.info("Starting %s API...", settings.APP_NAME)
    validate_security_settings()
    if settings.AUTO_CREATE_DB_SCHEMA:
        try:
            async with engine.begin() as conn:
                await conn.run_sync(Base.metadata.create_all)
            logger.info("Database schema verified.")
        except Exception as e:
            logger.warning("Database bootstrap skipped: %s", e)
    if not twitter_configured():
        logger.warning("TWITTER_CLIENT_ID/TWITTER_CLIENT_SECRET missing; cross-posting will fail.")
    yield
    await engine.dispose()
    logger.info("Shutting down API...")


app = FastAPI(
    title=f"{settings.APP_NAME} API",
    description="Check in to trips, cross-post them and export your travel history",
    version="0.1.0",
    lifespan=lifespan,
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.CORS_ORIGINS,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

app.include_router(health.router, tags=["Health"])
app.include_router(auth.router, prefix="/auth", tags=["Authentication"])
app.include_router(settings_router.router, prefix="/settings", tags=["Settings"])
app.include_router(social.router, prefix="/social", tags=["Social"])
app.include_router(statuses.router, prefix="/statuses", tags=["Statuses"])
app.include_router(notifications.router, prefix="/notifications", tags=["Notifications"])
app.include_router(export.router, prefix="/export", tags=["Export"])


@app.get("/")
async def root():
    return {
        "name": f"{settings.APP_NAME} API",
        "version": "0.1.0",
        "status": "running"
    }
