"""Task service - completion, rescheduling and reassignment shortcuts."""

from __future__ import annotations

import uuid
from datetime import date, datetime, time, timezone

from sqlalchemy.ext.asyncio import AsyncSession

from ..models.task import TASK_BUCKETS, Task
from . import subject_svc


def _coerce_datetime(value: object) -> datetime | None:
    """Coerce common date/time representations into an aware `datetime`.

    Form posts send strings; Date columns from other records send dates.
    """
    if value is None:
        return None

    if isinstance(value, datetime):
        if value.tzinfo is None:
            value = value.replace(tzinfo=timezone.utc)
        return value

    if isinstance(value, date):
        return datetime.combine(value, time.min, tzinfo=timezone.utc)

    if isinstance(value, str):
        raw = value.strip()
        if not raw:
            return None
        try:
            parsed = datetime.fromisoformat(raw.replace("Z", "+00:00"))
        except ValueError:
            return None
        return _coerce_datetime(parsed)

    return None


async def create_task(db: AsyncSession, actor_id: uuid.UUID, **kwargs) -> Task:
    if "due_at" in kwargs:
        kwargs["due_at"] = _coerce_datetime(kwargs.get("due_at"))
    return await subject_svc.create_subject(db, actor_id, "task", **kwargs)


async def complete_task(
    db: AsyncSession, actor_id: uuid.UUID, task_id: uuid.UUID
) -> Task | None:
    """Mark a task done; records a ``completed`` activity."""
    return await subject_svc.update_subject(
        db, actor_id, "task", task_id,
        completed_at=datetime.now(timezone.utc),
        completed_by=actor_id,
    )


async def reschedule_task(
    db: AsyncSession,
    actor_id: uuid.UUID,
    task_id: uuid.UUID,
    *,
    bucket: str,
    due_at: object = None,
) -> Task | None:
    if bucket not in TASK_BUCKETS:
        raise ValueError(f"Unknown task bucket {bucket!r}")
    return await subject_svc.update_subject(
        db, actor_id, "task", task_id,
        bucket=bucket, due_at=_coerce_datetime(due_at),
    )


async def reassign_task(
    db: AsyncSession,
    actor_id: uuid.UUID,
    task_id: uuid.UUID,
    assignee_id: uuid.UUID | None,
) -> Task | None:
    return await subject_svc.update_subject(
        db, actor_id, "task", task_id, assigned_to=assignee_id
    )
