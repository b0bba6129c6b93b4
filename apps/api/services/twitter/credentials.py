"""Keeps a user's X access token fresh before it is used."""

from __future__ import annotations

import logging
from datetime import datetime, timezone
from typing import Optional

from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.future import select

from models.social_profile import SocialProfile
from services.crypto import decrypt_token, encrypt_token
from services.twitter.client import TwitterApiClient, get_twitter_api_client
from services.twitter.types import NotConnectedError, TwitterCredential

logger = logging.getLogger(__name__)


def _as_utc(value: datetime) -> datetime:
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value


def is_connected(profile: Optional[SocialProfile]) -> bool:
    return bool(
        profile is not None
        and profile.twitter_id is not None
        and profile.twitter_token_encrypted is not None
        and profile.twitter_refresh_token_encrypted is not None
        and profile.twitter_token_expires_at is not None
    )


async def get_social_profile(user_id: str, db: AsyncSession) -> Optional[SocialProfile]:
    result = await db.execute(select(SocialProfile).where(SocialProfile.user_id == user_id))
    return result.scalar_one_or_none()


def read_credential(profile: Optional[SocialProfile]) -> TwitterCredential:
    """Decrypt a stored credential, refusing partial records."""
    if not is_connected(profile):
        raise NotConnectedError()
    return TwitterCredential(
        twitter_id=profile.twitter_id,
        access_token=decrypt_token(profile.twitter_token_encrypted),
        refresh_token=decrypt_token(profile.twitter_refresh_token_encrypted),
        expires_at=_as_utc(profile.twitter_token_expires_at),
    )


async def ensure_fresh_credential(
    user_id: str,
    db: AsyncSession,
    *,
    api: Optional[TwitterApiClient] = None,
    now: Optional[datetime] = None,
) -> str:
    """
    Return a usable X access token for the user.

    The stored token is returned untouched while ``now`` is not after its
    expiry. Otherwise the refresh token is exchanged and access token, refresh
    token and expiry are replaced together in a single commit. Refresh
    failures propagate to the caller.

    Two concurrent callers may both pass the expiry check and refresh
    independently; the last commit wins.
    """
    profile = await get_social_profile(user_id, db)
    credential = read_credential(profile)

    current = _as_utc(now or datetime.now(timezone.utc))
    if not current > credential.expires_at:
        return credential.access_token

    client = api or get_twitter_api_client()
    refreshed = await client.refresh_token(credential.refresh_token)

    profile.twitter_token_encrypted = encrypt_token(refreshed.token)
    profile.twitter_refresh_token_encrypted = encrypt_token(refreshed.refresh_token)
    profile.twitter_token_expires_at = datetime.fromtimestamp(refreshed.expires, tz=timezone.utc)
    await db.commit()

    logger.info("Refreshed twitter access token for %s", credential.twitter_id)
    return refreshed.token
