"""Action classifier rules, no database involved."""

from __future__ import annotations

import uuid
from datetime import datetime, timezone

import pytest

from crm_activity.errors import InvalidActionError
from crm_activity.models.account import Account
from crm_activity.models.contact import Contact
from crm_activity.models.task import Task
from crm_activity.services.classifier import (
    EVENT_COMMENT,
    EVENT_CREATE,
    EVENT_DESTROY,
    EVENT_UPDATE,
    EVENT_VIEW,
    changed,
    classify,
    classify_update,
    snapshot,
    subject_label,
)

NOW = datetime(2026, 10, 19, 9, 30, tzinfo=timezone.utc)


def test_completed_wins_over_everything_else():
    before = {"completed_at": None, "assigned_to": None, "bucket": "due_asap"}
    after = {"completed_at": NOW, "assigned_to": uuid.uuid4(), "bucket": "due_later"}
    assert classify_update(before, after) == "completed"


def test_reassigned_before_rescheduled():
    before = {"assigned_to": None, "bucket": "due_asap", "completed_at": None}
    after = {"assigned_to": uuid.uuid4(), "bucket": "due_tomorrow", "completed_at": None}
    assert classify_update(before, after) == "reassigned"


def test_rescheduled_on_bucket_or_due_date():
    assert classify_update({"bucket": "due_asap"}, {"bucket": "due_tomorrow"}) == "rescheduled"
    assert classify_update({"due_at": None}, {"due_at": NOW}) == "rescheduled"


def test_rejected_only_on_transition():
    assert classify_update({"status": "new"}, {"status": "rejected"}) == "rejected"
    assert classify_update({"status": "rejected"}, {"status": "rejected"}) == "updated"
    assert classify_update({"status": "new"}, {"status": "contacted"}) == "updated"


def test_uncompleting_is_a_plain_update():
    assert classify_update({"completed_at": NOW}, {"completed_at": None}) == "updated"


def test_changed_ignores_fields_missing_from_a_snapshot():
    check = changed("assigned_to")
    assert check({}, {"assigned_to": uuid.uuid4()}) is False


def test_custom_rule_list():
    rules = ((changed("name"), "custom"),)
    assert classify_update({"name": "a"}, {"name": "b"}, rules) == "custom"
    assert classify_update({"name": "a"}, {"name": "a"}, rules) == "updated"


def test_lifecycle_events_map_to_actions():
    account = Account(name="Acme")
    assert classify(EVENT_CREATE, account).action == "created"
    assert classify(EVENT_DESTROY, account).action == "deleted"
    assert classify(EVENT_COMMENT, account).action == "commented"
    assert classify(EVENT_VIEW, account).action == "viewed"


def test_update_event_uses_snapshots():
    task = Task(name="Call back", bucket="due_asap")
    before = {"bucket": "due_asap"}
    result = classify(EVENT_UPDATE, task, before=before, after={"bucket": "due_later"})
    assert result.action == "rescheduled"
    assert result.info == "Call back"


def test_update_event_without_before_is_invalid():
    with pytest.raises(InvalidActionError):
        classify(EVENT_UPDATE, Account(name="Acme"))


def test_unknown_event_is_invalid():
    with pytest.raises(InvalidActionError):
        classify("archive", Account(name="Acme"))


def test_label_prefers_full_name():
    assert subject_label(Contact(first_name="Billy", last_name="Bones")) == "Billy Bones"
    assert subject_label(Account(name="Billy Bones")) == "Billy Bones"


def test_label_is_truncated():
    assert len(subject_label(Account(name="x" * 400))) == 255


def test_snapshot_copies_loaded_columns():
    task = Task(name="Write report", bucket="due_today")
    values = snapshot(task)
    assert values["name"] == "Write report"
    assert values["bucket"] == "due_today"
