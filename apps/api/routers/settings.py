"""
Settings router: profile settings, e-mail, password and profile picture.
"""

import logging
from typing import Optional

from fastapi import APIRouter, Depends, HTTPException, Response
from pydantic import BaseModel, EmailStr, Field, model_validator
from sqlalchemy.ext.asyncio import AsyncSession

from database import get_db
from models.enums import MastodonVisibility, StatusVisibility
from models.user import User
from routers.auth import USERNAME_PATTERN
from routers.auth_scope import get_current_user
from services.mail_verification import RateLimitExceededError, send_verification_mail
from services.passwords import verify_password
from services.profile_settings import (
    SettingsConflictError,
    build_profile_settings,
    delete_profile_picture,
    update_profile_picture,
    update_settings,
)

router = APIRouter()
logger = logging.getLogger(__name__)

TOO_MANY_VERIFICATION_MAILS = "Too many verification e-mails requested. Please try again later."


class UpdateProfileSettingsRequest(BaseModel):
    username: str = Field(min_length=1, max_length=25, pattern=USERNAME_PATTERN)
    displayName: str = Field(min_length=1, max_length=50)
    privateProfile: Optional[bool] = None
    preventIndex: Optional[bool] = None
    privacyHideDays: Optional[int] = Field(default=None, ge=1)
    defaultStatusVisibility: Optional[StatusVisibility] = None
    mastodonVisibility: Optional[MastodonVisibility] = None


class UpdateMailRequest(BaseModel):
    email: EmailStr
    password: str


class UpdatePasswordRequest(BaseModel):
    currentPassword: Optional[str] = None
    password: str = Field(min_length=8)
    password_confirmation: str

    @model_validator(mode="after")
    def _check_confirmation(self):
        if self.password != self.password_confirmation:
            raise ValueError("The password confirmation does not match.")
        return self


class ProfilePictureRequest(BaseModel):
    image: Optional[str] = None


def _validation_error(message: str) -> HTTPException:
    return HTTPException(status_code=422, detail=message)


async def _settings_response(user: User, db: AsyncSession) -> dict:
    return {"data": await build_profile_settings(user, db)}


async def _apply(user: User, changes: dict, db: AsyncSession) -> dict:
    try:
        updated = await update_settings(user, changes, db)
    except SettingsConflictError as exc:
        raise _validation_error(str(exc)) from exc
    except RateLimitExceededError as exc:
        raise HTTPException(status_code=400, detail=TOO_MANY_VERIFICATION_MAILS) from exc
    return await _settings_response(updated, db)


@router.get("/profile")
async def get_profile_settings(
    user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    """Current user's profile settings."""
    return await _settings_response(user, db)


@router.put("/profile")
async def update_profile_settings(
    request: UpdateProfileSettingsRequest,
    user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    """Update the current user's profile settings."""
    return await _apply(user, request.model_dump(), db)


@router.put("/email")
async def update_mail(
    request: UpdateMailRequest,
    user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    """Change the e-mail address after confirming the password."""
    if not verify_password(request.password, user.password_hash):
        raise _validation_error("The provided password is incorrect.")
    return await _apply(user, {"email": str(request.email)}, db)


@router.post("/email/resend", status_code=204)
async def resend_mail(user: User = Depends(get_current_user)):
    """Send the verification mail for the current address again."""
    try:
        await send_verification_mail(user)
    except RateLimitExceededError as exc:
        raise HTTPException(status_code=429, detail=TOO_MANY_VERIFICATION_MAILS) from exc
    return Response(status_code=204)


@router.put("/password")
async def update_password(
    request: UpdatePasswordRequest,
    user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    """Set a new password; the current one is required if the account has one."""
    if user.password_hash is not None:
        if not request.currentPassword:
            raise _validation_error("The current password field is required.")
        if not verify_password(request.currentPassword, user.password_hash):
            raise _validation_error("The current password is incorrect.")
    return await _apply(user, {"password": request.password}, db)


@router.delete("/profile-picture")
async def remove_profile_picture(
    user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    if await delete_profile_picture(user, db):
        return {"message": "Profile picture deleted."}
    raise HTTPException(status_code=400, detail="No profile picture to delete.")


@router.post("/profile-picture")
async def upload_profile_picture(
    request: ProfilePictureRequest,
    user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    if await update_profile_picture(user, request.image, db):
        return {"message": "Settings saved."}
    raise HTTPException(status_code=400, detail="Invalid profile picture.")
