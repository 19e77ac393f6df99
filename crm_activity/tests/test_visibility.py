"""Which activities a viewer may see, derived from the subject's current access."""

from __future__ import annotations

import uuid

import pytest
from sqlalchemy import delete, select
from sqlalchemy.ext.asyncio import AsyncSession

from crm_activity.models.account import Account
from crm_activity.models.user import User
from crm_activity.services import activity_svc, subject_svc
from crm_activity.services.activity_svc import ActivityFilter
from crm_activity.services.visibility import can_see, visible_clause, visible_to
from crm_activity.subjects import SubjectRef

SUBJECT_FIELDS = {
    "account": {"name": "Hidden Cove"},
    "campaign": {"name": "Hidden Cove"},
    "contact": {"first_name": "Hidden", "last_name": "Cove"},
    "lead": {"first_name": "Hidden", "last_name": "Cove"},
    "opportunity": {"name": "Hidden Cove"},
    "task": {"name": "Hidden Cove"},
}


async def _lifecycle(db: AsyncSession, owner: User, subject_type: str, **extra):
    """Create a subject owned by ``owner`` and rename it once."""
    subject = await subject_svc.create_subject(
        db, owner.id, subject_type, **SUBJECT_FIELDS[subject_type], **extra
    )
    rename = (
        {"last_name": "Bay"} if subject_type in ("contact", "lead") else {"name": "Hidden Bay"}
    )
    await subject_svc.update_subject(db, owner.id, subject_type, subject.id, **rename)
    return subject


async def _seen_by(db: AsyncSession, viewer: User, subject_id: uuid.UUID) -> list[str]:
    activities = await activity_svc.query_for(db, None, ActivityFilter(subject_id=subject_id))
    return sorted(a.action for a in await visible_to(db, activities, viewer.id))


@pytest.mark.asyncio
@pytest.mark.parametrize("subject_type", list(SUBJECT_FIELDS))
async def test_private_subject_of_another_user_is_hidden(
    db: AsyncSession, current_user: User, other_user: User, subject_type: str
):
    subject = await _lifecycle(db, other_user, subject_type, access="Private")
    await subject_svc.delete_subject(db, other_user.id, subject_type, subject.id)

    assert await _seen_by(db, current_user, subject.id) == []
    assert "deleted" in await _seen_by(db, other_user, subject.id)


@pytest.mark.asyncio
@pytest.mark.parametrize("subject_type", list(SUBJECT_FIELDS))
async def test_shared_subject_not_shared_with_viewer_is_hidden(
    db: AsyncSession, current_user: User, other_user: User, third_user: User, subject_type: str
):
    subject = await _lifecycle(
        db, other_user, subject_type, access="Shared", permissions=[third_user.id]
    )
    assert await _seen_by(db, current_user, subject.id) == []
    assert await _seen_by(db, third_user, subject.id) != []


@pytest.mark.asyncio
@pytest.mark.parametrize("subject_type", ["account", "contact", "lead", "opportunity"])
async def test_shared_subject_shared_with_viewer_is_visible(
    db: AsyncSession, current_user: User, other_user: User, subject_type: str
):
    subject = await _lifecycle(
        db, other_user, subject_type, access="Shared", permissions=[current_user.id]
    )
    assert await _seen_by(db, current_user, subject.id) == [
        "created", "updated", "viewed", "viewed",
    ]


@pytest.mark.asyncio
async def test_public_subject_is_visible_to_everyone(
    db: AsyncSession, current_user: User, other_user: User, third_user: User
):
    subject = await _lifecycle(db, other_user, "campaign", access="Public")
    for viewer in (current_user, other_user, third_user):
        assert await _seen_by(db, viewer, subject.id) != []


@pytest.mark.asyncio
async def test_access_changes_apply_to_recorded_activities(
    db: AsyncSession, current_user: User, other_user: User
):
    subject = await _lifecycle(db, other_user, "account", access="Public")
    assert await _seen_by(db, current_user, subject.id) != []

    await subject_svc.update_subject(db, other_user.id, "account", subject.id, access="Private")
    assert await _seen_by(db, current_user, subject.id) == []

    await subject_svc.update_subject(
        db, other_user.id, "account", subject.id,
        access="Shared", permissions=[current_user.id],
    )
    assert await _seen_by(db, current_user, subject.id) != []

    # Moving away from Shared drops the share list.
    await subject_svc.update_subject(db, other_user.id, "account", subject.id, access="Private")
    assert await subject_svc.shared_with(db, "account", subject.id) == []


@pytest.mark.asyncio
async def test_order_is_preserved(db: AsyncSession, current_user: User, other_user: User):
    mine = await subject_svc.create_subject(db, current_user.id, "account", name="Mine")
    hidden = await subject_svc.create_subject(
        db, other_user.id, "account", name="Theirs", access="Private"
    )
    await subject_svc.update_subject(db, current_user.id, "account", mine.id, name="Mine 2")

    activities = await activity_svc.query_for(db, None)
    visible = await visible_to(db, activities, current_user.id)
    assert [a.id for a in visible] == [a.id for a in activities if a.subject_id != hidden.id]
    assert [a.action for a in visible] == ["viewed", "updated", "viewed", "created"]


@pytest.mark.asyncio
async def test_hard_deleted_subject_drops_its_activities(db: AsyncSession, current_user: User):
    subject = await subject_svc.create_subject(db, current_user.id, "account", name="Gone")
    await db.execute(delete(Account).where(Account.id == subject.id))
    await db.commit()

    assert await _seen_by(db, current_user, subject.id) == []


@pytest.mark.asyncio
async def test_unregistered_subject_type_is_dropped(db: AsyncSession, current_user: User):
    await activity_svc.record(db, current_user.id, SubjectRef("invoice", uuid.uuid4()), "created")
    activities = await activity_svc.query_for(db, current_user.id)
    assert len(activities) == 1
    assert await visible_to(db, activities, current_user.id) == []


def test_can_see_rules():
    owner, viewer = uuid.uuid4(), uuid.uuid4()
    assert can_see(Account(user_id=owner, access="Private"), owner, False)
    assert not can_see(Account(user_id=owner, access="Private"), viewer, True)
    assert can_see(Account(user_id=owner, access="Public"), viewer, False)
    assert can_see(Account(user_id=owner, access="Shared"), viewer, True)
    assert not can_see(Account(user_id=owner, access="Shared"), viewer, False)


@pytest.mark.asyncio
async def test_visible_clause_lists_only_visible_records(
    db: AsyncSession, current_user: User, other_user: User
):
    await subject_svc.create_subject(db, other_user.id, "account", name="Open", access="Public")
    await subject_svc.create_subject(db, other_user.id, "account", name="Closed", access="Private")
    await subject_svc.create_subject(
        db, other_user.id, "account", name="Shared In",
        access="Shared", permissions=[current_user.id],
    )
    await subject_svc.create_subject(db, other_user.id, "account", name="Shared Out", access="Shared")

    stmt = select(Account.name).where(visible_clause(Account, "account", current_user.id))
    names = sorted((await db.execute(stmt)).scalars().all())
    assert names == ["Open", "Shared In"]


@pytest.mark.asyncio
async def test_feed_limit_applies_after_visibility(
    db: AsyncSession, current_user: User, other_user: User
):
    mine = await subject_svc.create_subject(
        db, current_user.id, "account", name="Mine", access="Public"
    )
    for i in range(3):
        await subject_svc.create_subject(
            db, other_user.id, "account", name=f"Secret {i}", access="Private"
        )

    feed = await activity_svc.query_for(
        db, None, ActivityFilter(limit=3), viewer_id=current_user.id
    )
    assert [(a.subject_id, a.action) for a in feed] == [(mine.id, "viewed"), (mine.id, "created")]


@pytest.mark.asyncio
async def test_sql_visibility_matches_visible_to(
    db: AsyncSession, current_user: User, other_user: User, third_user: User
):
    await _lifecycle(db, other_user, "contact", access="Public")
    await _lifecycle(db, other_user, "lead", access="Private")
    await _lifecycle(db, other_user, "opportunity", access="Shared", permissions=[current_user.id])
    await _lifecycle(db, other_user, "campaign", access="Shared", permissions=[third_user.id])
    await activity_svc.record(db, current_user.id, SubjectRef("invoice", uuid.uuid4()), "created")

    everything = await activity_svc.query_for(db, None)
    expected = [a.id for a in await visible_to(db, everything, current_user.id)]
    filtered = await activity_svc.query_for(db, None, viewer_id=current_user.id)
    assert [a.id for a in filtered] == expected
    assert {a.subject_type for a in filtered} == {"contact", "opportunity"}
