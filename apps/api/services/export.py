"""Trip history export (print layout, PDF, CSV and JSON)."""

from __future__ import annotations

import csv
import io
import logging
from datetime import date, datetime, time, timedelta, timezone
from typing import Any, Dict, List, Optional
from zoneinfo import ZoneInfo

from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.future import select
from xhtml2pdf import pisa

from config import settings
from models.status import Status
from models.user import User
from services.templating import render_template

logger = logging.getLogger(__name__)

DATE_FORMAT = "%d.%m.%Y"
DATETIME_FORMAT = "%d.%m.%Y %H:%M"

CSV_COLUMNS = [
    "type",
    "number",
    "origin",
    "departure_planned",
    "departure_real",
    "destination",
    "arrival_planned",
    "arrival_real",
    "duration_minutes",
    "distance_km",
    "reason",
]


def _zone() -> ZoneInfo:
    return ZoneInfo(settings.APP_TIMEZONE)


def _local(value: Optional[datetime]) -> Optional[datetime]:
    if value is None:
        return None
    if value.tzinfo is None:
        value = value.replace(tzinfo=timezone.utc)
    return value.astimezone(_zone())


def _fmt(value: Optional[datetime]) -> str:
    local = _local(value)
    return local.strftime(DATETIME_FORMAT) if local else ""


def _is_delayed(planned: Optional[datetime], real: Optional[datetime]) -> bool:
    if planned is None or real is None:
        return False
    return _local(real) > _local(planned)


def validate_range(begin: date, end: date) -> None:
    if end < begin:
        raise ValueError("The end date must not be before the start date.")
    if (end - begin).days > int(settings.EXPORT_MAX_DAYS):
        raise ValueError(f"Exports are limited to {int(settings.EXPORT_MAX_DAYS)} days.")


def build_row(status: Status) -> Dict[str, Any]:
    distance_km = round((status.distance_meters or 0) / 1000, 2)
    return {
        "status_id": status.id,
        "type": status.category,
        "number": status.line_name,
        "origin": status.origin_name,
        "departure_planned": _fmt(status.departure_planned),
        "departure_real": _fmt(status.departure_real),
        "departure_delayed": _is_delayed(status.departure_planned, status.departure_real),
        "destination": status.destination_name,
        "arrival_planned": _fmt(status.arrival_planned),
        "arrival_real": _fmt(status.arrival_real),
        "arrival_delayed": _is_delayed(status.arrival_planned, status.arrival_real),
        "duration_minutes": int(status.duration_minutes or 0),
        "distance_km": distance_km,
        "reason": int(status.business),
    }


async def build_export(user: User, begin: date, end: date, db: AsyncSession) -> Dict[str, Any]:
    """Collect the user's trips departing between ``begin`` and ``end`` (inclusive)."""
    validate_range(begin, end)
    zone = _zone()
    window_start = datetime.combine(begin, time.min, tzinfo=zone).astimezone(timezone.utc)
    window_end = datetime.combine(end + timedelta(days=1), time.min, tzinfo=zone).astimezone(timezone.utc)

    result = await db.execute(
        select(Status)
        .where(
            Status.user_id == user.id,
            Status.departure_planned >= window_start,
            Status.departure_planned < window_end,
        )
        .order_by(Status.departure_planned.asc())
    )
    rows = [build_row(status) for status in result.scalars().all()]

    return {
        "username": user.username,
        "begin": begin.isoformat(),
        "end": end.isoformat(),
        "generated_at": datetime.now(timezone.utc).isoformat(),
        "rows": rows,
        "total_duration_minutes": sum(row["duration_minutes"] for row in rows),
        "total_distance_km": round(sum(row["distance_km"] for row in rows), 2),
    }


def render_export_html(export: Dict[str, Any]) -> str:
    begin = date.fromisoformat(export["begin"])
    end = date.fromisoformat(export["end"])
    generated = datetime.fromisoformat(export["generated_at"]).astimezone(_zone())
    return render_template(
        "export.html",
        export=export,
        begin=begin.strftime(DATE_FORMAT),
        end=end.strftime(DATE_FORMAT),
        generated=generated.strftime(DATE_FORMAT),
    )


def render_export_csv(export: Dict[str, Any]) -> str:
    buffer = io.StringIO()
    writer = csv.DictWriter(buffer, fieldnames=CSV_COLUMNS, extrasaction="ignore")
    writer.writeheader()
    rows: List[Dict[str, Any]] = export["rows"]
    for row in rows:
        writer.writerow(row)
    return buffer.getvalue()


def render_export_pdf(export: Dict[str, Any]) -> bytes:
    """Print layout rendered to PDF. Blocking; run it off the event loop."""
    buffer = io.BytesIO()
    result = pisa.CreatePDF(src=render_export_html(export), dest=buffer, encoding="utf-8")
    if result.err:
        logger.error("PDF rendering reported %s error(s) for %s", result.err, export["username"])
        raise RuntimeError("PDF rendering failed.")
    return buffer.getvalue()
