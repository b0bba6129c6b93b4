"""Per-client request throttling for unauthenticated and posting endpoints."""

from typing import Callable

from fastapi import HTTPException, Request

from config import settings
from services import quota


def client_identifier(request: Request) -> str:
    """Peer address; the first ``X-Forwarded-For`` hop only when the peer is a trusted proxy."""
    peer = request.client.host if request.client and request.client.host else "unknown"
    if peer not in settings.TRUSTED_PROXIES:
        return peer
    first_hop = request.headers.get("x-forwarded-for", "").split(",")[0].strip()
    return first_hop or peer


def rate_limit(prefix: str, limit: int, window_seconds: int) -> Callable:
    """Dependency factory: at most ``limit`` calls per client within ``window_seconds``."""

    async def _dependency(request: Request) -> None:
        if getattr(request.app.state, "disable_rate_limits", False):
            return
        name = f"rate:{prefix}:{client_identifier(request)}"
        if not await quota.allow(name, limit, window_seconds):
            raise HTTPException(
                status_code=429,
                detail=f"Too many {prefix} requests. Try again later.",
                headers={"Retry-After": str(window_seconds)},
            )

    return _dependency
