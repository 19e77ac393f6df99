"""Activity service - audit trail storage and queries."""

from __future__ import annotations

import logging
import uuid
from collections.abc import Sequence
from dataclasses import dataclass
from datetime import datetime

from sqlalchemy import Select, delete, select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload

from ..errors import InvalidActionError, PersistenceError
from ..models.activity import ACTIONS, Activity
from ..subjects import SubjectRef
from .visibility import visible_activity_clause

log = logging.getLogger(__name__)


@dataclass(frozen=True)
class ActivityFilter:
    """Query criteria shared by feed queries, purges and exports."""

    with_actions: Sequence[str] = ()
    without_actions: Sequence[str] = ()
    subject_type: str | None = None
    subject_id: uuid.UUID | None = None
    since: datetime | None = None
    until: datetime | None = None
    limit: int | None = None


def _where(stmt, actor_id: uuid.UUID | None, flt: ActivityFilter):
    if actor_id is not None:
        stmt = stmt.where(Activity.user_id == actor_id)
    if flt.with_actions:
        stmt = stmt.where(Activity.action.in_(list(flt.with_actions)))
    if flt.without_actions:
        stmt = stmt.where(Activity.action.not_in(list(flt.without_actions)))
    if flt.subject_type:
        stmt = stmt.where(Activity.subject_type == flt.subject_type)
    if flt.subject_id:
        stmt = stmt.where(Activity.subject_id == flt.subject_id)
    if flt.since:
        stmt = stmt.where(Activity.created_at >= flt.since)
    if flt.until:
        stmt = stmt.where(Activity.created_at < flt.until)
    return stmt


def _newest_first(stmt: Select) -> Select:
    return stmt.order_by(Activity.created_at.desc(), Activity.id.desc())


async def record(
    db: AsyncSession,
    actor_id: uuid.UUID | None,
    subject_ref: SubjectRef,
    action: str,
    info: str = "",
    *,
    commit: bool = True,
) -> Activity:
    """Append one activity row.

    With ``commit=False`` the row is only flushed so it shares the caller's
    transaction (the lifecycle hooks use this inside a savepoint).
    """
    if action not in ACTIONS:
        raise InvalidActionError(f"Unknown activity action {action!r}")
    activity = Activity(
        user_id=actor_id,
        subject_type=subject_ref.subject_type,
        subject_id=subject_ref.subject_id,
        action=action,
        info=info or "",
    )
    db.add(activity)
    try:
        if commit:
            await db.commit()
            await db.refresh(activity)
        else:
            await db.flush()
    except SQLAlchemyError as exc:
        if commit:
            await db.rollback()
        raise PersistenceError(f"Could not record {action} for {subject_ref}: {exc}") from exc
    log.debug("activity %s %s by %s", action, subject_ref, actor_id)
    return activity


async def query_for(
    db: AsyncSession,
    actor_id: uuid.UUID | None,
    flt: ActivityFilter | None = None,
    *,
    viewer_id: uuid.UUID | None = None,
) -> list[Activity]:
    """Activities matching ``flt``, newest first.

    ``actor_id=None`` spans all actors. With ``viewer_id`` only activities
    whose subject that user may currently see are returned, before the limit
    is applied. Each call builds a fresh query, so the result can be re-read
    at any time.
    """
    flt = flt or ActivityFilter()
    stmt = _newest_first(_where(select(Activity), actor_id, flt))
    if viewer_id is not None:
        stmt = stmt.where(visible_activity_clause(viewer_id))
    if flt.limit:
        stmt = stmt.limit(flt.limit)
    result = await db.execute(stmt)
    return list(result.scalars().all())


async def delete_all_matching(
    db: AsyncSession,
    criteria: ActivityFilter | None = None,
    *,
    actor_id: uuid.UUID | None = None,
    commit: bool = True,
) -> int:
    """Bulk purge for maintenance and tests. Returns the number of rows removed."""
    stmt = _where(delete(Activity), actor_id, criteria or ActivityFilter())
    try:
        result = await db.execute(stmt.execution_options(synchronize_session=False))
        if commit:
            await db.commit()
    except SQLAlchemyError as exc:
        if commit:
            await db.rollback()
        raise PersistenceError(f"Activity purge failed: {exc}") from exc
    removed = result.rowcount or 0
    log.info("purged %d activities", removed)
    return removed


async def cascade_on_subject_deletion(
    db: AsyncSession, subject_ref: SubjectRef, *, commit: bool = True
) -> int:
    """Drop every actor's ``viewed`` rows for a removed subject.

    Other actions stay as the historical audit trail.
    """
    return await delete_all_matching(
        db,
        ActivityFilter(
            with_actions=("viewed",),
            subject_type=subject_ref.subject_type,
            subject_id=subject_ref.subject_id,
        ),
        commit=commit,
    )


async def export_rows(
    db: AsyncSession,
    flt: ActivityFilter | None = None,
    *,
    actor_id: uuid.UUID | None = None,
    viewer_id: uuid.UUID | None = None,
) -> list[dict[str, object]]:
    """Flat rows for CSV export, newest first."""
    flt = flt or ActivityFilter()
    stmt = _newest_first(_where(select(Activity), actor_id, flt)).options(
        selectinload(Activity.user)
    )
    if viewer_id is not None:
        stmt = stmt.where(visible_activity_clause(viewer_id))
    if flt.limit:
        stmt = stmt.limit(flt.limit)
    result = await db.execute(stmt)
    rows = []
    for activity in result.scalars().all():
        rows.append({
            "id": activity.id,
            "user": activity.user.full_name if activity.user else "",
            "subject_type": activity.subject_type,
            "subject_id": str(activity.subject_id),
            "action": activity.action,
            "info": activity.info,
            "created_at": activity.created_at.isoformat() if activity.created_at else "",
        })
    return rows
