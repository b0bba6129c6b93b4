"""E-mail verification mails with per-user throttling."""

from __future__ import annotations

import asyncio
import logging
from datetime import datetime, timezone
from urllib.parse import quote_plus

from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.future import select

from config import settings
from models.user import User
from services import quota
from services.mailer import send_email
from services.session_token import create_email_verification_token, decode_email_verification_token
from services.templating import render_template

logger = logging.getLogger(__name__)


class RateLimitExceededError(RuntimeError):
    """Raised when verification mails are requested too often."""


def build_verification_link(token: str) -> str:
    return f"{settings.APP_URL.rstrip('/')}/auth/email/verify?token={quote_plus(token)}"


async def send_verification_mail(user: User) -> bool:
    """Send the verification link for the user's current address."""
    allowed = await quota.allow(
        f"mail-verification:{user.id}",
        settings.MAIL_VERIFICATION_LIMIT,
        settings.MAIL_VERIFICATION_WINDOW_SECONDS,
    )
    if not allowed:
        raise RateLimitExceededError("Too many verification mails requested. Try again later.")

    link = build_verification_link(create_email_verification_token(user.id, user.email))
    html_body = render_template("email_verification.html", username=user.username, link=link)
    text_body = f"Hello {user.username},\n\nplease confirm your e-mail address: {link}\n"
    sent = await asyncio.to_thread(
        send_email,
        user.email,
        f"{settings.APP_NAME}: confirm your e-mail address",
        text_body,
        html_body,
    )
    logger.info("Verification mail for user %s queued=%s", user.id, sent)
    return sent


async def verify_email_token(token: str, db: AsyncSession) -> User:
    """Mark the address in ``token`` as verified if it is still the user's address."""
    payload = decode_email_verification_token(token)
    result = await db.execute(select(User).where(User.id == str(payload["sub"])))
    user = result.scalar_one_or_none()
    if not user:
        raise LookupError("User not found")
    if user.email != str(payload["email"]):
        raise ValueError("Verification link does not match the current e-mail address.")
    if user.email_verified_at is None:
        user.email_verified_at = datetime.now(timezone.utc)
        await db.commit()
    return user
