"""Recently viewed items - a deduplicated view over ``viewed`` activities.

Every display appends a new ``viewed`` row; the newest row per
(actor, subject) decides the subject's position in the list.
"""

from __future__ import annotations

import logging
import uuid

from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession

from ..config import settings
from ..models.activity import Activity
from ..subjects import SubjectRef, registry
from . import activity_svc
from .classifier import subject_label

log = logging.getLogger(__name__)


async def mark_viewed(
    db: AsyncSession,
    actor_id: uuid.UUID | None,
    subject_ref: SubjectRef,
    info: str | None = None,
    *,
    commit: bool = True,
) -> Activity | None:
    """Record a ``viewed`` activity unless the subject type is not tracked.

    Raises NotFoundError when ``info`` is not given and the subject does not
    resolve.
    """
    if not registry.is_trackable(subject_ref.subject_type):
        log.debug("not tracking views of %s", subject_ref.subject_type)
        return None
    if info is None:
        subject = await registry.load(db, subject_ref)
        if subject.is_deleted:
            return None
        info = subject_label(subject)
    return await activity_svc.record(db, actor_id, subject_ref, "viewed", info, commit=commit)


def _latest_views(actor_id: uuid.UUID, subject_type: str | None):
    stmt = select(func.max(Activity.id)).where(
        Activity.user_id == actor_id,
        Activity.action == "viewed",
    )
    if subject_type:
        stmt = stmt.where(Activity.subject_type == subject_type)
    return stmt.group_by(Activity.subject_type, Activity.subject_id)


async def recently_viewed_items(
    db: AsyncSession,
    actor_id: uuid.UUID,
    subject_type: str | None = None,
    limit: int | None = None,
) -> list[tuple[SubjectRef, str]]:
    """Distinct subjects with the label captured at their latest view."""
    if limit is None:
        limit = settings.recently_viewed_limit
    stmt = (
        select(Activity)
        .where(Activity.id.in_(_latest_views(actor_id, subject_type)))
        .order_by(Activity.created_at.desc(), Activity.id.desc())
        .limit(limit)
    )
    result = await db.execute(stmt)
    return [(a.subject_ref, a.info) for a in result.scalars().all()]


async def recently_viewed_for(
    db: AsyncSession,
    actor_id: uuid.UUID,
    subject_type: str | None = None,
    limit: int | None = None,
) -> list[SubjectRef]:
    """Distinct subject refs, most recently viewed first."""
    items = await recently_viewed_items(db, actor_id, subject_type, limit)
    return [ref for ref, _ in items]
