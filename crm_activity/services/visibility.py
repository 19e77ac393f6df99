"""Visibility filter - which activities and records a viewer may see.

Visibility is never stored on an activity. It is derived on every call from
the subject's *current* access level and permission list:

* ``Public``  - everyone.
* ``Private`` - the owner only.
* ``Shared``  - the owner plus users on the subject's permission list.
"""

from __future__ import annotations

import logging
import uuid
from collections import defaultdict
from collections.abc import Iterable

from sqlalchemy import and_, exists, or_, select
from sqlalchemy.ext.asyncio import AsyncSession

from ..errors import UnknownSubjectType
from ..models.activity import Activity
from ..models.base import ACCESS_PUBLIC, ACCESS_SHARED
from ..models.permission import Permission
from ..subjects import registry

log = logging.getLogger(__name__)


def can_see(subject: object, viewer_id: uuid.UUID, shared_with_viewer: bool) -> bool:
    if subject.user_id == viewer_id:
        return True
    if subject.access == ACCESS_PUBLIC:
        return True
    return subject.access == ACCESS_SHARED and shared_with_viewer


def visible_clause(model, subject_type: str, viewer_id: uuid.UUID):
    """SQL form of ``can_see`` for listing subjects of one type."""
    shared = exists(
        select(Permission.id).where(
            Permission.asset_type == subject_type,
            Permission.asset_id == model.id,
            Permission.user_id == viewer_id,
        )
    )
    return or_(
        model.user_id == viewer_id,
        model.access == ACCESS_PUBLIC,
        and_(model.access == ACCESS_SHARED, shared),
    )


async def _granted(
    db: AsyncSession, viewer_id: uuid.UUID, subject_type: str, ids: Iterable[uuid.UUID]
) -> set[uuid.UUID]:
    id_list = list(ids)
    if not id_list:
        return set()
    stmt = select(Permission.asset_id).where(
        Permission.user_id == viewer_id,
        Permission.asset_type == subject_type,
        Permission.asset_id.in_(id_list),
    )
    return set((await db.execute(stmt)).scalars().all())


async def visible_to(
    db: AsyncSession, activities: Iterable[Activity], viewer_id: uuid.UUID
) -> list[Activity]:
    """Keep the activities ``viewer_id`` may see, preserving order."""
    activities = list(activities)
    ids_by_type: dict[str, set[uuid.UUID]] = defaultdict(set)
    for activity in activities:
        ids_by_type[activity.subject_type].add(activity.subject_id)

    allowed: set[tuple[str, uuid.UUID]] = set()
    for subject_type, ids in ids_by_type.items():
        try:
            subjects = await registry.load_many(db, subject_type, ids)
        except UnknownSubjectType:
            log.warning("dropping activities for unregistered subject type %r", subject_type)
            continue
        shared_ids = [sid for sid, s in subjects.items() if s.access == ACCESS_SHARED]
        granted = await _granted(db, viewer_id, subject_type, shared_ids)
        for subject_id, subject in subjects.items():
            if can_see(subject, viewer_id, subject_id in granted):
                allowed.add((subject_type, subject_id))

    return [a for a in activities if (a.subject_type, a.subject_id) in allowed]


def visible_activity_clause(viewer_id: uuid.UUID):
    """SQL form of ``visible_to`` for activity queries.

    One correlated EXISTS per registered subject type, so LIMIT and paging
    apply to the rows the viewer may see. Unregistered types match nothing.
    """
    clauses = []
    for subject_type in registry.types():
        model = registry.model_for(subject_type)
        subject_visible = exists(
            select(model.id).where(
                model.id == Activity.subject_id,
                visible_clause(model, subject_type, viewer_id),
            )
        )
        clauses.append(and_(Activity.subject_type == subject_type, subject_visible))
    return or_(*clauses)
