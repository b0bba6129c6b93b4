"""Signed JWT helpers for API sessions and e-mail verification links."""

from datetime import datetime, timedelta, timezone
from typing import Any, Dict, Optional

from jose import JWTError, jwt

from config import settings


SESSION_TOKEN_TYPE = "trwl_session"
EMAIL_VERIFICATION_TOKEN_TYPE = "trwl_email_verification"


def _encode(claims: Dict[str, Any], ttl: timedelta) -> Dict[str, Any]:
    now = datetime.now(timezone.utc)
    expires_at = now + ttl
    claims = {
        **claims,
        "iat": int(now.timestamp()),
        "exp": int(expires_at.timestamp()),
    }
    token = jwt.encode(claims, settings.JWT_SECRET, algorithm=settings.JWT_ALGORITHM)
    return {
        "token": token,
        "expires_at": int(expires_at.timestamp()),
    }


def _decode(token: str, expected_type: str) -> Dict[str, Any]:
    try:
        payload = jwt.decode(token, settings.JWT_SECRET, algorithms=[settings.JWT_ALGORITHM])
    except JWTError as exc:
        raise ValueError("Invalid or expired token.") from exc

    token_type = str(payload.get("type", "")).strip()
    if token_type != expected_type:
        raise ValueError("Invalid token type.")

    subject = str(payload.get("sub", "")).strip()
    if not subject:
        raise ValueError("Token missing subject.")

    return payload


def create_session_token(
    user_id: str,
    email: Optional[str] = None,
    expires_hours: Optional[int] = None,
) -> Dict[str, Any]:
    """Signed session token plus its expiry as a unix timestamp."""
    ttl_hours = int(expires_hours or settings.JWT_EXPIRATION_HOURS or 24)
    claims: Dict[str, Any] = {"sub": user_id, "type": SESSION_TOKEN_TYPE}
    if email:
        claims["email"] = email
    return _encode(claims, timedelta(hours=max(ttl_hours, 1)))


def decode_session_token(token: str) -> Dict[str, Any]:
    """Claims of a valid session token; raises ValueError otherwise."""
    return _decode(token, SESSION_TOKEN_TYPE)


def create_email_verification_token(user_id: str, email: str) -> str:
    """Token bound to ``email``; it verifies only that exact address."""
    ttl_hours = max(int(settings.EMAIL_VERIFICATION_EXPIRATION_HOURS), 1)
    claims = {"sub": user_id, "email": email, "type": EMAIL_VERIFICATION_TOKEN_TYPE}
    return _encode(claims, timedelta(hours=ttl_hours))["token"]


def decode_email_verification_token(token: str) -> Dict[str, Any]:
    payload = _decode(token, EMAIL_VERIFICATION_TOKEN_TYPE)
    if not str(payload.get("email", "")).strip():
        raise ValueError("Token missing email.")
    return payload
