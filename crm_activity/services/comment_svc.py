"""Comment service."""

from __future__ import annotations

import uuid

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from ..errors import NotFoundError
from ..models.comment import Comment
from ..subjects import SubjectRef, registry
from . import lifecycle


async def list_comments(db: AsyncSession, subject_ref: SubjectRef) -> list[Comment]:
    stmt = (
        select(Comment)
        .where(
            Comment.commentable_type == subject_ref.subject_type,
            Comment.commentable_id == subject_ref.subject_id,
        )
        .order_by(Comment.created_at.desc())
    )
    result = await db.execute(stmt)
    return list(result.scalars().all())


async def add_comment(
    db: AsyncSession,
    actor_id: uuid.UUID | None,
    subject_ref: SubjectRef,
    comment: str,
    title: str = "",
) -> Comment:
    """Attach a comment and record a ``commented`` activity.

    Raises NotFoundError when the subject is missing or deleted.
    """
    subject = await registry.load(db, subject_ref)
    if subject.is_deleted:
        raise NotFoundError(subject_ref.subject_type, subject_ref.subject_id)
    note = Comment(
        user_id=actor_id,
        commentable_type=subject_ref.subject_type,
        commentable_id=subject_ref.subject_id,
        title=title,
        comment=comment,
    )
    db.add(note)
    await db.flush()
    await lifecycle.on_commented(db, actor_id, subject)
    await db.commit()
    await db.refresh(note)
    return note


async def delete_comment(db: AsyncSession, comment_id: uuid.UUID) -> bool:
    stmt = select(Comment).where(Comment.id == comment_id)
    result = await db.execute(stmt)
    note = result.scalar_one_or_none()
    if not note:
        return False
    await db.delete(note)
    await db.commit()
    return True
