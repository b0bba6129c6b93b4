"""Notification board queries and read-state changes."""

from __future__ import annotations

from datetime import datetime, timezone
from typing import Any, Dict, List, Optional

from sqlalchemy import func, update
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.future import select

from models.notification import Notification


def serialize_notification(notification: Notification) -> Dict[str, Any]:
    return {
        "id": notification.id,
        "type": notification.type,
        "data": notification.payload_json or {},
        "read": notification.read_at is not None,
        "read_at": notification.read_at.isoformat() if notification.read_at else None,
        "created_at": notification.created_at.isoformat() if notification.created_at else None,
    }


async def create_notification(
    user_id: str,
    notification_type: str,
    db: AsyncSession,
    payload: Optional[Dict[str, Any]] = None,
) -> Notification:
    notification = Notification(user_id=user_id, type=notification_type, payload_json=payload or {})
    db.add(notification)
    await db.flush()
    return notification


async def list_notifications(user_id: str, db: AsyncSession, *, limit: int = 50) -> List[Dict[str, Any]]:
    result = await db.execute(
        select(Notification)
        .where(Notification.user_id == user_id)
        .order_by(Notification.created_at.desc(), Notification.id.desc())
        .limit(max(1, min(int(limit), 200)))
    )
    return [serialize_notification(row) for row in result.scalars().all()]


async def count_unread(user_id: str, db: AsyncSession) -> int:
    result = await db.execute(
        select(func.count(Notification.id)).where(
            Notification.user_id == user_id,
            Notification.read_at.is_(None),
        )
    )
    return int(result.scalar() or 0)


async def toggle_read(notification_id: str, user_id: str, db: AsyncSession) -> Dict[str, Any]:
    result = await db.execute(
        select(Notification).where(
            Notification.id == notification_id,
            Notification.user_id == user_id,
        )
    )
    notification = result.scalar_one_or_none()
    if not notification:
        raise LookupError("Notification not found")

    notification.read_at = None if notification.read_at else datetime.now(timezone.utc)
    await db.commit()
    await db.refresh(notification)
    return serialize_notification(notification)


async def mark_all_read(user_id: str, db: AsyncSession) -> int:
    """Mark every unread notification as read and return how many changed."""
    result = await db.execute(
        update(Notification)
        .where(Notification.user_id == user_id, Notification.read_at.is_(None))
        .values(read_at=datetime.now(timezone.utc))
    )
    await db.commit()
    return int(result.rowcount or 0)
