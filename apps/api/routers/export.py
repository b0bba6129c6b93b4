"""
Trip history export.
"""

import asyncio
import logging
from datetime import date
from typing import Literal

from fastapi import APIRouter, Depends, HTTPException, Query
from fastapi.responses import HTMLResponse, Response
from sqlalchemy.ext.asyncio import AsyncSession

from database import get_db
from models.user import User
from routers.auth_scope import get_current_user
from services.export import build_export, render_export_csv, render_export_html, render_export_pdf

router = APIRouter()
logger = logging.getLogger(__name__)


def _attachment(content, media_type: str, filename: str) -> Response:
    return Response(
        content=content,
        media_type=media_type,
        headers={"Content-Disposition": f'attachment; filename="{filename}"'},
    )


@router.get("")
async def export_trips(
    begin: date = Query(alias="from"),
    end: date = Query(alias="until"),
    format: Literal["html", "pdf", "csv", "json"] = "html",
    user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    """Export check-ins departing in the inclusive date range."""
    try:
        export = await build_export(user, begin, end, db)
        stem = f"export_{begin.isoformat()}_{end.isoformat()}"
        if format == "json":
            return export
        if format == "csv":
            return _attachment(render_export_csv(export), "text/csv", f"{stem}.csv")
        if format == "pdf":
            pdf = await asyncio.to_thread(render_export_pdf, export)
            return _attachment(pdf, "application/pdf", f"{stem}.pdf")
        return HTMLResponse(content=render_export_html(export))
    except ValueError as exc:
        raise HTTPException(status_code=422, detail=str(exc)) from exc
    except Exception:
        logger.exception("Failed to export trips for user %s", user.id)
        raise HTTPException(status_code=500, detail="Failed to build export.")
