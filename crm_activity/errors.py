"""Errors raised by the activity subsystem."""

from __future__ import annotations


class ActivityError(Exception):
    """Base class for activity trail errors."""


class PersistenceError(ActivityError):
    """Raised when an activity row cannot be written or purged."""


class NotFoundError(ActivityError):
    """Raised when a subject reference does not resolve."""

    def __init__(self, subject_type: str, subject_id: object) -> None:
        super().__init__(f"{subject_type} {subject_id} not found")
        self.subject_type = subject_type
        self.subject_id = subject_id


class InvalidActionError(ActivityError):
    """Raised when an event cannot be mapped to an activity action."""


class UnknownSubjectType(ActivityError):
    """Raised when a subject type tag is not registered."""
