"""Profile settings mutation for the settings API."""

from __future__ import annotations

import asyncio
import base64
import binascii
import io
import logging
from pathlib import Path
from typing import Any, Dict, Optional

from PIL import Image
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.future import select

from config import settings
from models.user import User
from services.mail_verification import send_verification_mail
from services.passwords import hash_password
from services.twitter.credentials import get_social_profile, is_connected

logger = logging.getLogger(__name__)

AVATAR_SIZE = (300, 300)

# API field name -> User column
_SETTINGS_FIELDS = {
    "username": "username",
    "displayName": "display_name",
    "privateProfile": "private_profile",
    "preventIndex": "prevent_index",
    "privacyHideDays": "privacy_hide_days",
    "defaultStatusVisibility": "default_status_visibility",
    "mastodonVisibility": "mastodon_visibility",
}


class SettingsConflictError(ValueError):
    """Raised when a unique field (username, e-mail) is already taken."""

    def __init__(self, field: str, message: str) -> None:
        super().__init__(message)
        self.field = field


def profile_picture_url(user: User) -> str:
    return f"{settings.APP_URL.rstrip('/')}/@{user.username}/picture"


async def build_profile_settings(user: User, db: AsyncSession) -> Dict[str, Any]:
    profile = await get_social_profile(user.id, db)
    return {
        "username": user.username,
        "displayName": user.display_name,
        "profilePicture": profile_picture_url(user),
        "privateProfile": bool(user.private_profile),
        "preventIndex": bool(user.prevent_index),
        "defaultStatusVisibility": int(user.default_status_visibility),
        "mastodonVisibility": int(user.mastodon_visibility),
        "privacyHideDays": user.privacy_hide_days,
        "password": user.password_hash is not None,
        "email": user.email,
        "emailVerified": user.email_verified_at is not None,
        "profilePictureSet": user.avatar_path is not None,
        "twitter": is_connected(profile),
    }


async def _ensure_unique(db: AsyncSession, user: User, column, value: str, field: str) -> None:
    result = await db.execute(select(User.id).where(column == value, User.id != user.id))
    if result.scalar_one_or_none():
        raise SettingsConflictError(field, f"The {field} has already been taken.")


async def update_settings(user: User, changes: Dict[str, Any], db: AsyncSession) -> User:
    """
    Apply validated changes to the user.

    Keys may be API names (``displayName``) or ``email`` / ``password``.
    ``None`` leaves the stored value unchanged. A changed e-mail address
    resets verification and sends a new verification mail after the
    commit; ``RateLimitExceededError`` from that mail propagates.
    """
    if changes.get("username") is not None and changes["username"] != user.username:
        await _ensure_unique(db, user, User.username, changes["username"], "username")
    new_email = changes.get("email")
    email_changed = new_email is not None and new_email != user.email
    if email_changed:
        await _ensure_unique(db, user, User.email, new_email, "email")

    for api_name, column in _SETTINGS_FIELDS.items():
        value = changes.get(api_name)
        if value is None:
            continue
        if column in ("default_status_visibility", "mastodon_visibility"):
            value = int(value)
        setattr(user, column, value)

    if email_changed:
        user.email = new_email
        user.email_verified_at = None

    if changes.get("password") is not None:
        user.password_hash = hash_password(changes["password"])

    await db.commit()
    await db.refresh(user)

    if email_changed:
        await send_verification_mail(user)
    return user


def _decode_image(image: str) -> bytes:
    payload = image.strip()
    if payload.startswith("data:"):
        _, _, payload = payload.partition(",")
    try:
        raw = base64.b64decode(payload, validate=True)
    except (binascii.Error, ValueError) as exc:
        raise ValueError("Image is not valid base64.") from exc
    if not raw:
        raise ValueError("Image is empty.")
    if len(raw) > int(settings.PROFILE_PICTURE_MAX_BYTES):
        raise ValueError("Image is too large.")
    return raw


def _write_avatar(raw: bytes, target: Path) -> None:
    try:
        with Image.open(io.BytesIO(raw)) as img:
            if img.format not in ("PNG", "JPEG"):
                raise ValueError("Only PNG and JPEG images are supported.")
            avatar = img.convert("RGB").resize(AVATAR_SIZE, Image.Resampling.LANCZOS)
    except OSError as exc:
        raise ValueError("Image could not be read.") from exc
    target.parent.mkdir(parents=True, exist_ok=True)
    avatar.save(target, format="PNG")


async def update_profile_picture(user: User, image: Optional[str], db: AsyncSession) -> bool:
    """Store a new avatar. Returns False when the upload is unusable."""
    if not image:
        return False
    try:
        raw = _decode_image(image)
        target = Path(settings.PROFILE_PICTURE_DIR) / f"{user.id}.png"
        await asyncio.to_thread(_write_avatar, raw, target)
    except ValueError as exc:
        logger.info("Rejected profile picture for user %s: %s", user.id, exc)
        return False

    user.avatar_path = str(target)
    await db.commit()
    return True


async def delete_profile_picture(user: User, db: AsyncSession) -> bool:
    """Remove the avatar. Returns False when none is set."""
    if not user.avatar_path:
        return False
    path = Path(user.avatar_path)
    try:
        await asyncio.to_thread(path.unlink, True)
    except OSError:
        logger.warning("Could not remove profile picture file %s", path)
    user.avatar_path = None
    await db.commit()
    return True
