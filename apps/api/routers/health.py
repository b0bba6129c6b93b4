"""
Health probes for the API process and its backing services.
"""

from typing import Dict, List

from fastapi import APIRouter
from fastapi.responses import JSONResponse
from sqlalchemy import text
import redis.asyncio as redis

from config import settings, twitter_configured
from database import engine

router = APIRouter()


async def _probe_database() -> str:
    try:
        async with engine.connect() as conn:
            await conn.execute(text("SELECT 1"))
    except Exception as e:
        return f"down: {e}"
    return "up"


async def _probe_redis() -> str:
    client = redis.from_url(settings.REDIS_URL)
    try:
        await client.ping()
    except Exception as e:
        return f"down: {e}"
    finally:
        await client.aclose()
    return "up"


def _missing_twitter_settings() -> List[str]:
    return [
        name
        for name in ("TWITTER_CLIENT_ID", "TWITTER_CLIENT_SECRET")
        if not str(getattr(settings, name) or "").strip()
    ]


@router.get("/health")
async def health_check() -> Dict[str, str]:
    """
    Database and redis reachability plus which optional integrations are set up.
    Redis being down only degrades throttling, which falls back to in-process counters.
    """
    checks = {
        "database": await _probe_database(),
        "redis": await _probe_redis(),
    }
    return {
        "status": "healthy" if all(v == "up" for v in checks.values()) else "degraded",
        "api": "up",
        **checks,
        "twitter": "configured" if twitter_configured() else "missing",
        "smtp": "configured" if settings.SMTP_HOST else "missing",
    }


@router.get("/health/ready")
async def readiness_check():
    """Readiness probe: cross-posting needs the X client credentials."""
    missing = _missing_twitter_settings()
    if missing:
        return JSONResponse(status_code=503, content={"ready": False, "missing": missing})
    return {"ready": True}


@router.get("/health/live")
async def liveness_check():
    return {"alive": True}
