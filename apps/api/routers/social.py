"""
X (Twitter) account linking and direct posting.
"""

import logging
from datetime import datetime, timezone
from typing import Optional

from fastapi import APIRouter, Depends, HTTPException
from pydantic import BaseModel, Field
from sqlalchemy.ext.asyncio import AsyncSession

from database import get_db
from models.social_profile import SocialProfile
from models.user import User
from routers.auth_scope import get_current_user
from routers.rate_limit import rate_limit
from services.crypto import encrypt_token
from services.twitter import (
    NotConnectedError,
    ProviderAuthError,
    ProviderRequestError,
    get_twitter_api_client,
    is_connected,
    publish,
)
from services.twitter.credentials import get_social_profile

router = APIRouter()
logger = logging.getLogger(__name__)


class SyncTwitterRequest(BaseModel):
    twitter_id: str = Field(min_length=1)
    access_token: str = Field(min_length=1)
    refresh_token: str = Field(min_length=1)
    expires_at: int  # Unix timestamp (seconds)


class TwitterStatusResponse(BaseModel):
    connected: bool
    twitter_id: Optional[str] = None
    expires_at: Optional[int] = None


class TweetRequest(BaseModel):
    text: str = Field(min_length=1, max_length=280)


def twitter_http_error(exc: Exception) -> HTTPException:
    """Translate integration failures for API callers."""
    if isinstance(exc, NotConnectedError):
        return HTTPException(status_code=409, detail=str(exc))
    if isinstance(exc, ProviderAuthError):
        return HTTPException(status_code=502, detail=f"Twitter rejected the credentials: {exc}")
    if isinstance(exc, ProviderRequestError):
        return HTTPException(status_code=502, detail=f"Twitter request failed: {exc}")
    return HTTPException(status_code=500, detail="Twitter integration failed.")


def _status_payload(profile: Optional[SocialProfile]) -> TwitterStatusResponse:
    if not is_connected(profile):
        return TwitterStatusResponse(connected=False)
    expires_at = profile.twitter_token_expires_at
    if expires_at.tzinfo is None:
        expires_at = expires_at.replace(tzinfo=timezone.utc)
    return TwitterStatusResponse(
        connected=True,
        twitter_id=profile.twitter_id,
        expires_at=int(expires_at.timestamp()),
    )


@router.post("/twitter/sync", response_model=TwitterStatusResponse)
async def sync_twitter_credentials(
    request: SyncTwitterRequest,
    user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    """Persist tokens obtained by the frontend's X OAuth flow."""
    profile = await get_social_profile(user.id, db)
    if not profile:
        profile = SocialProfile(user_id=user.id)
        db.add(profile)

    profile.twitter_id = request.twitter_id
    profile.twitter_token_encrypted = encrypt_token(request.access_token)
    profile.twitter_refresh_token_encrypted = encrypt_token(request.refresh_token)
    profile.twitter_token_expires_at = datetime.fromtimestamp(request.expires_at, tz=timezone.utc)
    await db.commit()
    await db.refresh(profile)
    logger.info("Linked twitter account %s for user %s", request.twitter_id, user.id)
    return _status_payload(profile)


@router.get("/twitter", response_model=TwitterStatusResponse)
async def get_twitter_status(
    user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    return _status_payload(await get_social_profile(user.id, db))


@router.post("/twitter/tweet")
async def post_tweet(
    request: TweetRequest,
    _rate_limit: None = Depends(rate_limit("tweet", limit=30, window_seconds=900)),
    user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    """Publish free text to the linked X account."""
    try:
        tweet_id = await publish(user.id, request.text, db, api=get_twitter_api_client())
    except (NotConnectedError, ProviderAuthError, ProviderRequestError) as exc:
        logger.warning("Tweet for user %s failed: %s", user.id, exc)
        raise twitter_http_error(exc) from exc
    return {"tweet_id": tweet_id}
