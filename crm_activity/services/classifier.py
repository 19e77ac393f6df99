"""Action classifier - maps lifecycle events to activity actions.

Update events are refined by an ordered list of ``(predicate, action)``
rules; the first predicate that matches the before/after attribute snapshots
wins, and a plain ``updated`` is the fallback. Everything here is pure so the
rules can be tested without a database.
"""

from __future__ import annotations

from collections.abc import Callable, Mapping
from dataclasses import dataclass

from sqlalchemy import inspect

from ..errors import InvalidActionError

Snapshot = Mapping[str, object]
Predicate = Callable[[Snapshot, Snapshot], bool]

EVENT_CREATE = "create"
EVENT_UPDATE = "update"
EVENT_DESTROY = "destroy"
EVENT_COMMENT = "comment"
EVENT_VIEW = "view"

_EVENT_ACTIONS = {
    EVENT_CREATE: "created",
    EVENT_DESTROY: "deleted",
    EVENT_COMMENT: "commented",
    EVENT_VIEW: "viewed",
}

INFO_MAX_LENGTH = 255


@dataclass(frozen=True)
class Classification:
    action: str
    info: str


def became_set(field: str) -> Predicate:
    def check(before: Snapshot, after: Snapshot) -> bool:
        return before.get(field) is None and after.get(field) is not None

    return check


def changed(*fields: str) -> Predicate:
    def check(before: Snapshot, after: Snapshot) -> bool:
        return any(
            field in before and field in after and before[field] != after[field]
            for field in fields
        )

    return check


def became(field: str, value: object) -> Predicate:
    def check(before: Snapshot, after: Snapshot) -> bool:
        return before.get(field) != value and after.get(field) == value

    return check


UPDATE_RULES: tuple[tuple[Predicate, str], ...] = (
    (became_set("completed_at"), "completed"),
    (changed("assigned_to"), "reassigned"),
    (changed("bucket", "due_at"), "rescheduled"),
    (became("status", "rejected"), "rejected"),
)


def classify_update(
    before: Snapshot,
    after: Snapshot,
    rules: tuple[tuple[Predicate, str], ...] = UPDATE_RULES,
) -> str:
    for predicate, action in rules:
        if predicate(before, after):
            return action
    return "updated"


def subject_label(subject: object) -> str:
    """Human readable label: full name when the subject has one, else name."""
    label = getattr(subject, "full_name", None) or getattr(subject, "name", None) or ""
    return str(label)[:INFO_MAX_LENGTH]


def snapshot(subject: object) -> dict[str, object]:
    """Copy the loaded column values of ``subject`` into a plain dict.

    Expired attributes are skipped; touching them would trigger a lazy load,
    which an AsyncSession does not allow.
    """
    state = inspect(subject)
    unloaded = state.unloaded
    return {
        attr.key: getattr(subject, attr.key)
        for attr in state.mapper.column_attrs
        if attr.key not in unloaded
    }


def classify(
    event: str,
    subject: object,
    *,
    before: Snapshot | None = None,
    after: Snapshot | None = None,
) -> Classification:
    """Compute the action and point-in-time info for one lifecycle event."""
    if event == EVENT_UPDATE:
        if before is None:
            raise InvalidActionError("update event needs a before snapshot")
        action = classify_update(before, after if after is not None else snapshot(subject))
    elif event in _EVENT_ACTIONS:
        action = _EVENT_ACTIONS[event]
    else:
        raise InvalidActionError(f"Unknown lifecycle event {event!r}")
    return Classification(action=action, info=subject_label(subject))
