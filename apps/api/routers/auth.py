"""
Authentication router: registration, password login and e-mail verification.
"""

import logging
from typing import Optional

from fastapi import APIRouter, Depends, HTTPException
from pydantic import BaseModel, EmailStr, Field
from sqlalchemy import or_
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.future import select

from database import get_db
from models.user import User
from routers.auth_scope import get_current_user
from routers.rate_limit import rate_limit
from services.mail_verification import RateLimitExceededError, send_verification_mail, verify_email_token
from services.passwords import hash_password, verify_password
from services.session_token import create_session_token

router = APIRouter()
logger = logging.getLogger(__name__)

USERNAME_PATTERN = r"^[a-zA-Z0-9_]*$"


class RegisterRequest(BaseModel):
    username: str = Field(min_length=1, max_length=25, pattern=USERNAME_PATTERN)
    displayName: str = Field(min_length=1, max_length=50)
    email: EmailStr
    password: str = Field(min_length=8, max_length=255)


class LoginRequest(BaseModel):
    login: str = Field(min_length=1)
    password: str


class SessionResponse(BaseModel):
    user_id: str
    username: str
    session_token: str
    session_expires_at: int


class CurrentUserResponse(BaseModel):
    user_id: str
    username: str
    display_name: str
    email: str
    email_verified: bool


def _session_response(user: User) -> SessionResponse:
    session = create_session_token(user.id, user.email)
    return SessionResponse(
        user_id=user.id,
        username=user.username,
        session_token=session["token"],
        session_expires_at=session["expires_at"],
    )


@router.post("/register", response_model=SessionResponse, status_code=201)
async def register(
    request: RegisterRequest,
    _rate_limit: None = Depends(rate_limit("register", limit=10, window_seconds=3600)),
    db: AsyncSession = Depends(get_db),
):
    """Create a password account and open a session."""
    existing = await db.execute(
        select(User).where(or_(User.username == request.username, User.email == str(request.email)))
    )
    clash = existing.scalars().first()
    if clash:
        field = "username" if clash.username == request.username else "email"
        raise HTTPException(status_code=422, detail=f"The {field} has already been taken.")

    user = User(
        username=request.username,
        display_name=request.displayName,
        email=str(request.email),
        password_hash=hash_password(request.password),
    )
    db.add(user)
    await db.commit()
    await db.refresh(user)
    logger.info("Registered user %s", user.id)

    try:
        await send_verification_mail(user)
    except RateLimitExceededError:
        logger.warning("Verification mail throttled right after registration for user %s", user.id)

    return _session_response(user)


@router.post("/login", response_model=SessionResponse)
async def login(
    request: LoginRequest,
    _rate_limit: None = Depends(rate_limit("login", limit=20, window_seconds=300)),
    db: AsyncSession = Depends(get_db),
):
    """Exchange username-or-email and password for a session token."""
    result = await db.execute(
        select(User).where(or_(User.username == request.login, User.email == request.login))
    )
    user: Optional[User] = result.scalars().first()
    if not user or not verify_password(request.password, user.password_hash):
        raise HTTPException(status_code=401, detail="These credentials do not match our records.")
    return _session_response(user)


@router.get("/me", response_model=CurrentUserResponse)
async def get_me(user: User = Depends(get_current_user)):
    """Current session user."""
    return CurrentUserResponse(
        user_id=user.id,
        username=user.username,
        display_name=user.display_name,
        email=user.email,
        email_verified=user.email_verified_at is not None,
    )


@router.get("/email/verify")
async def verify_email(token: str, db: AsyncSession = Depends(get_db)):
    """Confirm an e-mail address from the link in the verification mail."""
    try:
        user = await verify_email_token(token, db)
    except LookupError:
        raise HTTPException(status_code=404, detail="User not found")
    except ValueError as exc:
        raise HTTPException(status_code=400, detail=str(exc)) from exc
    return {"user_id": user.id, "email": user.email, "email_verified": True}


@router.post("/logout")
async def logout(_user: User = Depends(get_current_user)):
    """Sessions are stateless; the client discards its token."""
    return {"message": "Logged out."}
