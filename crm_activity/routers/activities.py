"""Activity feed, recently viewed items and CSV export."""

from __future__ import annotations

import csv
import io
import uuid
from datetime import datetime

from fastapi import APIRouter, Depends, Query
from fastapi.responses import Response
from sqlalchemy.ext.asyncio import AsyncSession

from ..config import settings
from ..context import RequestContext, get_request_context
from ..database import get_db
from ..schemas.activity import ActivityResponse, RecentItem
from ..services import activity_svc, recent_svc
from ..services.activity_svc import ActivityFilter

router = APIRouter(prefix="/activities", tags=["activities"])

EXPORT_FIELDS = ["id", "user", "subject_type", "subject_id", "action", "info", "created_at"]


def _feed_filter(
    action: list[str] | None,
    exclude: list[str] | None,
    subject_type: str | None,
    since: datetime | None,
    limit: int | None,
) -> ActivityFilter:
    return ActivityFilter(
        with_actions=tuple(action or ()),
        without_actions=tuple(exclude or ()),
        subject_type=subject_type,
        since=since,
        limit=limit,
    )


@router.get("/", response_model=list[ActivityResponse])
async def activity_feed(
    ctx: RequestContext = Depends(get_request_context),
    db: AsyncSession = Depends(get_db),
    action: list[str] | None = Query(None),
    exclude: list[str] | None = Query(None),
    subject_type: str | None = None,
    user_id: uuid.UUID | None = None,
    since: datetime | None = None,
):
    flt = _feed_filter(action, exclude, subject_type, since, settings.activity_feed_limit)
    return await activity_svc.query_for(db, user_id, flt, viewer_id=ctx.viewer_id)


@router.get("/recent", response_model=list[RecentItem])
async def recently_viewed(
    ctx: RequestContext = Depends(get_request_context),
    db: AsyncSession = Depends(get_db),
    subject_type: str | None = None,
    limit: int | None = Query(None, ge=1, le=100),
):
    items = await recent_svc.recently_viewed_items(db, ctx.viewer_id, subject_type, limit)
    return [
        RecentItem(subject_type=ref.subject_type, subject_id=ref.subject_id, label=label)
        for ref, label in items
    ]


@router.get("/export.csv")
async def activity_export(
    ctx: RequestContext = Depends(get_request_context),
    db: AsyncSession = Depends(get_db),
    action: list[str] | None = Query(None),
    exclude: list[str] | None = Query(None),
    subject_type: str | None = None,
    since: datetime | None = None,
):
    flt = _feed_filter(action, exclude, subject_type, since, None)
    rows = await activity_svc.export_rows(db, flt, viewer_id=ctx.viewer_id)

    output = io.StringIO()
    writer = csv.DictWriter(output, fieldnames=EXPORT_FIELDS)
    writer.writeheader()
    writer.writerows(rows)
    return Response(
        content=output.getvalue(),
        media_type="text/csv",
        headers={"Content-Disposition": 'attachment; filename="activities.csv"'},
    )
