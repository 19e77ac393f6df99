"""Lifecycle hooks - turn subject events into activity rows.

Subject services call these after flushing their own change and before
committing, so the activity rows join the same transaction. Each write runs
in a SAVEPOINT; a failed write is retried ``settings.activity_write_retries``
times and then dropped with a warning. Audit failures never propagate to the
caller: the subject mutation always goes through.
"""

from __future__ import annotations

import logging
import uuid
from collections.abc import Awaitable, Callable

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from ..config import settings
from ..errors import InvalidActionError, NotFoundError, PersistenceError
from ..models.activity import Activity
from ..subjects import SubjectRef, registry
from . import activity_svc, recent_svc
from .classifier import (
    EVENT_COMMENT,
    EVENT_CREATE,
    EVENT_DESTROY,
    EVENT_UPDATE,
    EVENT_VIEW,
    Classification,
    Snapshot,
    classify,
    subject_label,
)

log = logging.getLogger(__name__)


async def _guarded(db: AsyncSession, what: str, op: Callable[[], Awaitable]):
    attempts = 1 + max(settings.activity_write_retries, 0)
    for attempt in range(1, attempts + 1):
        try:
            async with db.begin_nested():
                return await op()
        except (PersistenceError, SQLAlchemyError) as exc:
            log.warning("%s failed (attempt %d/%d): %s", what, attempt, attempts, exc)
        except NotFoundError as exc:
            log.warning("%s skipped: %s", what, exc)
            return None
    log.warning("%s dropped after %d attempts", what, attempts)
    return None


async def _record(
    db: AsyncSession, actor_id: uuid.UUID | None, ref: SubjectRef, c: Classification
) -> Activity | None:
    return await _guarded(
        db,
        f"recording {c.action} for {ref}",
        lambda: activity_svc.record(db, actor_id, ref, c.action, c.info, commit=False),
    )


async def _mark_viewed(
    db: AsyncSession, actor_id: uuid.UUID | None, ref: SubjectRef, info: str
) -> Activity | None:
    return await _guarded(
        db,
        f"marking {ref} viewed",
        lambda: recent_svc.mark_viewed(db, actor_id, ref, info, commit=False),
    )


def _classify(event: str, subject: object, before: Snapshot | None) -> Classification:
    try:
        return classify(event, subject, before=before)
    except InvalidActionError as exc:
        fallback = "updated" if event == EVENT_UPDATE else "custom"
        log.warning("unclassifiable %s event, recording %s: %s", event, fallback, exc)
        return Classification(action=fallback, info=subject_label(subject))


def _collect(*activities: Activity | None) -> list[Activity]:
    return [a for a in activities if a is not None]


async def on_created(
    db: AsyncSession, actor_id: uuid.UUID | None, subject: object
) -> list[Activity]:
    """``created``, then ``viewed`` for tracked types."""
    ref = registry.ref(subject)
    c = _classify(EVENT_CREATE, subject, None)
    created = await _record(db, actor_id, ref, c)
    viewed = await _mark_viewed(db, actor_id, ref, c.info)
    return _collect(created, viewed)


async def on_updated(
    db: AsyncSession, actor_id: uuid.UUID | None, subject: object, before: Snapshot | None
) -> list[Activity]:
    """Classified update; a plain ``updated`` also counts as a view.

    Without a ``before`` snapshot no transition can be detected, so the
    update is recorded as plain ``updated``.
    """
    ref = registry.ref(subject)
    c = _classify(EVENT_UPDATE, subject, before)
    updated = await _record(db, actor_id, ref, c)
    viewed = None
    if c.action == "updated":
        viewed = await _mark_viewed(db, actor_id, ref, c.info)
    return _collect(updated, viewed)


async def on_deleted(
    db: AsyncSession, actor_id: uuid.UUID | None, subject: object
) -> list[Activity]:
    """``deleted``, then every actor's ``viewed`` rows for the subject go."""
    ref = registry.ref(subject)
    c = _classify(EVENT_DESTROY, subject, None)
    deleted = await _record(db, actor_id, ref, c)
    await _guarded(
        db,
        f"clearing recent views of {ref}",
        lambda: activity_svc.cascade_on_subject_deletion(db, ref, commit=False),
    )
    return _collect(deleted)


async def on_commented(
    db: AsyncSession, actor_id: uuid.UUID | None, subject: object
) -> list[Activity]:
    ref = registry.ref(subject)
    return _collect(await _record(db, actor_id, ref, _classify(EVENT_COMMENT, subject, None)))


async def on_viewed(
    db: AsyncSession, actor_id: uuid.UUID | None, subject: object
) -> list[Activity]:
    ref = registry.ref(subject)
    c = _classify(EVENT_VIEW, subject, None)
    return _collect(await _mark_viewed(db, actor_id, ref, c.info))


_HOOKS = {
    EVENT_CREATE: on_created,
    EVENT_DESTROY: on_deleted,
    EVENT_COMMENT: on_commented,
    EVENT_VIEW: on_viewed,
}


async def on_event(
    db: AsyncSession,
    actor_id: uuid.UUID | None,
    subject: object,
    event: str,
    before: Snapshot | None = None,
) -> list[Activity]:
    """Dispatch by event name; unknown events are recorded as ``custom``."""
    if event == EVENT_UPDATE:
        return await on_updated(db, actor_id, subject, before)
    hook = _HOOKS.get(event)
    if hook is not None:
        return await hook(db, actor_id, subject)
    ref = registry.ref(subject)
    return _collect(await _record(db, actor_id, ref, _classify(event, subject, None)))
