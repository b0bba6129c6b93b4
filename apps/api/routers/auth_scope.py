"""Bearer session dependencies."""

from fastapi import Depends, HTTPException
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.future import select

from database import get_db
from models.user import User
from services.session_token import decode_session_token


bearer_scheme = HTTPBearer(auto_error=False)


def _unauthorized(detail: str) -> HTTPException:
    return HTTPException(status_code=401, detail=detail, headers={"WWW-Authenticate": "Bearer"})


async def get_session_user_id(
    credentials: HTTPAuthorizationCredentials = Depends(bearer_scheme),
) -> str:
    """User id carried by a valid session token."""
    if credentials is None:
        raise _unauthorized("Missing Bearer session token.")
    try:
        payload = decode_session_token(credentials.credentials)
    except ValueError as exc:
        raise _unauthorized(str(exc)) from exc
    return str(payload["sub"])


async def get_current_user(
    user_id: str = Depends(get_session_user_id),
    db: AsyncSession = Depends(get_db),
) -> User:
    """Load the session's user; a token for a deleted account is rejected."""
    result = await db.execute(select(User).where(User.id == user_id))
    user = result.scalar_one_or_none()
    if user is None:
        raise _unauthorized("Session user no longer exists.")
    return user
