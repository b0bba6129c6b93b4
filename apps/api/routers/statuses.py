"""
Check-in router: record trips and cross-post them to X.
"""

import logging
from datetime import datetime, timezone
from typing import Any, Dict, Optional

from fastapi import APIRouter, Depends, HTTPException, Query
from pydantic import BaseModel, Field, model_validator
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.future import select

from database import get_db
from models.enums import Business, StatusVisibility, TransportCategory
from models.status import Status
from models.user import User
from routers.auth_scope import get_current_user
from routers.social import twitter_http_error
from services.notifications import create_notification
from services.twitter import (
    NotConnectedError,
    ProviderAuthError,
    ProviderRequestError,
    get_twitter_api_client,
    publish_status,
)

router = APIRouter()
logger = logging.getLogger(__name__)


class CheckinRequest(BaseModel):
    body: Optional[str] = Field(default=None, max_length=280)
    visibility: Optional[StatusVisibility] = None
    business: Business = Business.PRIVATE
    category: TransportCategory
    line_name: str = Field(min_length=1, max_length=64)
    origin_name: str = Field(min_length=1, max_length=255)
    destination_name: str = Field(min_length=1, max_length=255)
    departure_planned: datetime
    departure_real: Optional[datetime] = None
    arrival_planned: datetime
    arrival_real: Optional[datetime] = None
    distance_meters: int = Field(default=0, ge=0)
    post_to_twitter: bool = False
    social_text: Optional[str] = Field(default=None, max_length=280)

    @model_validator(mode="after")
    def _check_times(self):
        if _utc(self.arrival_planned) < _utc(self.departure_planned):
            raise ValueError("arrival_planned must not be before departure_planned.")
        return self


class ShareRequest(BaseModel):
    social_text: Optional[str] = Field(default=None, max_length=280)


def _utc(value: Optional[datetime]) -> Optional[datetime]:
    if value is None:
        return None
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc)


def _iso(value: Optional[datetime]) -> Optional[str]:
    return _utc(value).isoformat() if value else None


def serialize_status(status: Status) -> Dict[str, Any]:
    return {
        "id": status.id,
        "body": status.body,
        "visibility": int(status.visibility),
        "business": int(status.business),
        "category": status.category,
        "line_name": status.line_name,
        "origin_name": status.origin_name,
        "destination_name": status.destination_name,
        "departure_planned": _iso(status.departure_planned),
        "departure_real": _iso(status.departure_real),
        "arrival_planned": _iso(status.arrival_planned),
        "arrival_real": _iso(status.arrival_real),
        "distance_meters": int(status.distance_meters or 0),
        "duration_minutes": int(status.duration_minutes or 0),
        "tweet_id": status.tweet_id,
    }


def _duration_minutes(request: CheckinRequest) -> int:
    departure = _utc(request.departure_real or request.departure_planned)
    arrival = _utc(request.arrival_real or request.arrival_planned)
    return max(int((arrival - departure).total_seconds() // 60), 0)


@router.post("", status_code=201)
async def create_checkin(
    request: CheckinRequest,
    user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    """Record a check-in; optionally cross-post it. Posting failures keep the check-in."""
    visibility = request.visibility if request.visibility is not None else user.default_status_visibility
    status = Status(
        user_id=user.id,
        body=request.body,
        visibility=int(visibility),
        business=int(request.business),
        category=request.category.value,
        line_name=request.line_name,
        origin_name=request.origin_name,
        destination_name=request.destination_name,
        departure_planned=_utc(request.departure_planned),
        departure_real=_utc(request.departure_real),
        arrival_planned=_utc(request.arrival_planned),
        arrival_real=_utc(request.arrival_real),
        distance_meters=request.distance_meters,
        duration_minutes=_duration_minutes(request),
    )
    db.add(status)
    await db.commit()
    await db.refresh(status)

    payload = serialize_status(status)
    if request.post_to_twitter:
        try:
            payload["tweet_id"] = await publish_status(
                status.id,
                user.id,
                db,
                social_text=request.social_text,
                api=get_twitter_api_client(),
            )
        except (NotConnectedError, ProviderAuthError, ProviderRequestError, ValueError) as exc:
            logger.warning("Cross-posting status %s failed: %s", status.id, exc)
            payload["twitter_error"] = str(exc)
            await create_notification(
                user.id,
                "social_post_failed",
                db,
                payload={"status_id": status.id, "platform": "twitter", "error": str(exc)},
            )
            await db.commit()
    return payload


@router.get("")
async def list_checkins(
    limit: int = Query(default=50, ge=1, le=200),
    user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    result = await db.execute(
        select(Status)
        .where(Status.user_id == user.id)
        .order_by(Status.departure_planned.desc())
        .limit(limit)
    )
    return {"data": [serialize_status(row) for row in result.scalars().all()]}


@router.post("/{status_id}/share/twitter")
async def share_checkin(
    status_id: str,
    request: ShareRequest,
    user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    """Cross-post an existing check-in to X."""
    try:
        tweet_id = await publish_status(
            status_id,
            user.id,
            db,
            social_text=request.social_text,
            api=get_twitter_api_client(),
        )
    except LookupError:
        raise HTTPException(status_code=404, detail="Status not found")
    except ValueError as exc:
        raise HTTPException(status_code=422, detail=str(exc)) from exc
    except (NotConnectedError, ProviderAuthError, ProviderRequestError) as exc:
        logger.warning("Sharing status %s failed: %s", status_id, exc)
        raise twitter_http_error(exc) from exc
    return {"status_id": status_id, "tweet_id": tweet_id}
