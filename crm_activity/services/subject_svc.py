"""Subject service - CRUD for accounts, campaigns, contacts, leads,
opportunities and tasks, with activity hooks and share lists."""

from __future__ import annotations

import uuid
from collections.abc import Iterable
from datetime import datetime, timezone

from sqlalchemy import delete, func, select
from sqlalchemy.ext.asyncio import AsyncSession

from ..errors import NotFoundError
from ..models.base import ACCESS_SHARED
from ..models.permission import Permission
from ..subjects import registry
from . import lifecycle
from .classifier import snapshot
from .visibility import can_see, visible_clause


async def _replace_permissions(
    db: AsyncSession,
    subject_type: str,
    subject_id: uuid.UUID,
    access: str,
    user_ids: Iterable[uuid.UUID] | None,
) -> None:
    """Shared records get exactly ``user_ids``; other access levels get none."""
    await db.execute(
        delete(Permission).where(
            Permission.asset_type == subject_type,
            Permission.asset_id == subject_id,
        )
    )
    if access != ACCESS_SHARED:
        return
    for user_id in dict.fromkeys(user_ids or ()):
        db.add(Permission(user_id=user_id, asset_type=subject_type, asset_id=subject_id))
    await db.flush()


async def shared_with(
    db: AsyncSession, subject_type: str, subject_id: uuid.UUID
) -> list[uuid.UUID]:
    stmt = select(Permission.user_id).where(
        Permission.asset_type == subject_type,
        Permission.asset_id == subject_id,
    )
    return list((await db.execute(stmt)).scalars().all())


async def list_subjects(
    db: AsyncSession,
    viewer_id: uuid.UUID,
    subject_type: str,
    *,
    offset: int = 0,
    limit: int = 50,
) -> tuple[list, int]:
    """List live records the viewer may see. Returns (records, total)."""
    model = registry.model_for(subject_type)
    stmt = select(model).where(
        model.deleted_at.is_(None),
        visible_clause(model, subject_type, viewer_id),
    )

    count_stmt = select(func.count()).select_from(stmt.subquery())
    total = (await db.execute(count_stmt)).scalar() or 0

    stmt = stmt.order_by(model.created_at.desc()).offset(offset).limit(limit)
    result = await db.execute(stmt)
    return list(result.scalars().all()), total


async def get_subject(
    db: AsyncSession,
    subject_type: str,
    subject_id: uuid.UUID,
    *,
    include_deleted: bool = False,
):
    model = registry.model_for(subject_type)
    stmt = select(model).where(model.id == subject_id)
    if not include_deleted:
        stmt = stmt.where(model.deleted_at.is_(None))
    result = await db.execute(stmt)
    return result.scalar_one_or_none()


async def create_subject(
    db: AsyncSession,
    actor_id: uuid.UUID | None,
    subject_type: str,
    *,
    permissions: Iterable[uuid.UUID] | None = None,
    commit: bool = True,
    **fields,
):
    """Create a record owned by the actor unless ``user_id`` says otherwise."""
    model = registry.model_for(subject_type)
    fields.setdefault("user_id", actor_id)
    subject = model(**fields)
    db.add(subject)
    await db.flush()
    await _replace_permissions(db, subject_type, subject.id, subject.access, permissions)
    await lifecycle.on_created(db, actor_id, subject)
    if commit:
        await db.commit()
        await db.refresh(subject)
    return subject


async def update_subject(
    db: AsyncSession,
    actor_id: uuid.UUID | None,
    subject_type: str,
    subject_id: uuid.UUID,
    *,
    permissions: Iterable[uuid.UUID] | None = None,
    commit: bool = True,
    **fields,
):
    """Update a live record. Returns None when it does not exist.

    ``permissions`` replaces the share list; when omitted the list is kept
    unless the access level moves away from Shared.

    With ``commit=False`` the changes are only flushed so a caller can
    group several writes in one transaction.
    """
    subject = await get_subject(db, subject_type, subject_id)
    if not subject:
        return None
    before = snapshot(subject)
    for key, value in fields.items():
        setattr(subject, key, value)
    await db.flush()
    if permissions is not None or subject.access != ACCESS_SHARED:
        await _replace_permissions(db, subject_type, subject.id, subject.access, permissions)
    await lifecycle.on_updated(db, actor_id, subject, before)
    if commit:
        await db.commit()
        await db.refresh(subject)
    return subject


async def delete_subject(
    db: AsyncSession,
    actor_id: uuid.UUID | None,
    subject_type: str,
    subject_id: uuid.UUID,
) -> bool:
    """Soft-delete a record. Returns True if found and deleted."""
    subject = await get_subject(db, subject_type, subject_id)
    if not subject:
        return False
    subject.deleted_at = datetime.now(timezone.utc)
    await db.flush()
    await lifecycle.on_deleted(db, actor_id, subject)
    await db.commit()
    return True


async def visible_subject(
    db: AsyncSession,
    viewer_id: uuid.UUID,
    subject_type: str,
    subject_id: uuid.UUID,
):
    """Load a live record the viewer may see.

    Raises NotFoundError when the record is missing, deleted, or hidden from
    the viewer.
    """
    subject = await get_subject(db, subject_type, subject_id)
    if subject is None:
        raise NotFoundError(subject_type, subject_id)
    granted = viewer_id in await shared_with(db, subject_type, subject_id)
    if not can_see(subject, viewer_id, granted):
        raise NotFoundError(subject_type, subject_id)
    return subject


async def show_subject(
    db: AsyncSession,
    viewer_id: uuid.UUID,
    subject_type: str,
    subject_id: uuid.UUID,
):
    """Load a record for display and mark it recently viewed."""
    subject = await visible_subject(db, viewer_id, subject_type, subject_id)
    await lifecycle.on_viewed(db, viewer_id, subject)
    await db.commit()
    return subject
