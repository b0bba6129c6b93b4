"""Publishes status text to X on behalf of a user."""

from __future__ import annotations

import logging
from typing import Any, Dict, Optional

from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.future import select

from models.status import Status
from services.twitter.client import TwitterApiClient, get_twitter_api_client
from services.twitter.credentials import ensure_fresh_credential, get_social_profile, is_connected
from services.twitter.types import NotConnectedError, ProviderRequestError

logger = logging.getLogger(__name__)


def extract_post_id(response: Dict[str, Any]) -> str:
    """Read the created post id, preferring ``id_str`` over ``id``."""
    data = response.get("data") if isinstance(response, dict) else None
    if isinstance(data, dict):
        if data.get("id_str") is not None:
            return str(data["id_str"])
        if data.get("id") is not None:
            return str(data["id"])
    raise ProviderRequestError("X response did not contain a post id.")


async def publish(
    user_id: str,
    message: str,
    db: AsyncSession,
    *,
    api: Optional[TwitterApiClient] = None,
) -> str:
    """Post ``message`` to the user's X account and return the external post id."""
    profile = await get_social_profile(user_id, db)
    if not is_connected(profile):
        raise NotConnectedError()

    client = api or get_twitter_api_client()
    access_token = await ensure_fresh_credential(user_id, db, api=client)
    response = await client.create_post(access_token, message)
    post_id = extract_post_id(response)
    logger.info("Published post %s for twitter account %s", post_id, profile.twitter_id)
    return post_id


async def publish_status(
    status_id: str,
    user_id: str,
    db: AsyncSession,
    *,
    social_text: Optional[str] = None,
    api: Optional[TwitterApiClient] = None,
) -> str:
    """Cross-post a check-in and remember the returned post id on it."""
    result = await db.execute(select(Status).where(Status.id == status_id, Status.user_id == user_id))
    status = result.scalar_one_or_none()
    if not status:
        raise LookupError(f"Status {status_id} not found")

    text = (social_text or "").strip() or (status.body or "").strip()
    if not text:
        raise ValueError("Nothing to post: status has no text.")

    post_id = await publish(user_id, text, db, api=api)
    status.tweet_id = post_id
    await db.commit()
    return post_id
