"""
Notification board endpoints.
"""

from fastapi import APIRouter, Depends, HTTPException, Query
from sqlalchemy.ext.asyncio import AsyncSession

from database import get_db
from models.user import User
from routers.auth_scope import get_current_user
from services.notifications import count_unread, list_notifications, mark_all_read, toggle_read

router = APIRouter()


@router.get("")
async def get_notifications(
    limit: int = Query(default=50, ge=1, le=200),
    user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    return {"data": await list_notifications(user.id, db, limit=limit)}


@router.get("/unread/count")
async def get_unread_count(
    user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    return {"data": await count_unread(user.id, db)}


@router.put("/read/all")
async def read_all(
    user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    """Mark every notification as read."""
    return {"updated": await mark_all_read(user.id, db)}


@router.put("/{notification_id}/read")
async def toggle_notification_read(
    notification_id: str,
    user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    """Flip the read state of one notification."""
    try:
        return {"data": await toggle_read(notification_id, user.id, db)}
    except LookupError:
        raise HTTPException(status_code=404, detail="Notification not found")
