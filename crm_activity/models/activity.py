"""Activity model - polymorphic audit trail."""

from __future__ import annotations

import uuid
from datetime import datetime, timezone

from sqlalchemy import Boolean, DateTime, ForeignKey, Index, Integer, String, Uuid
from sqlalchemy.orm import Mapped, mapped_column, relationship

from .base import Base

ACTIONS = (
    "created",
    "updated",
    "deleted",
    "viewed",
    "commented",
    "completed",
    "reassigned",
    "rescheduled",
    "rejected",
    "custom",
)


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class Activity(Base):
    __tablename__ = "activity"
    __table_args__ = (
        Index("ix_activity_subject", "subject_type", "subject_id"),
        Index("ix_activity_user_action", "user_id", "action"),
    )

    # Integer key keeps insertion order as a tie-breaker for equal timestamps.
    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    user_id: Mapped[uuid.UUID | None] = mapped_column(
        Uuid, ForeignKey("users.id", ondelete="SET NULL"), default=None
    )
    subject_type: Mapped[str] = mapped_column(String(32))  # account, lead, task, etc.
    subject_id: Mapped[uuid.UUID] = mapped_column(Uuid)
    action: Mapped[str] = mapped_column(String(32), default="created")
    info: Mapped[str] = mapped_column(String(255), default="")
    private: Mapped[bool] = mapped_column(Boolean, default=False)  # reserved
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), default=_utcnow, index=True
    )
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), default=_utcnow, onupdate=_utcnow
    )

    # Relationships
    user: Mapped["User | None"] = relationship()  # noqa: F821

    @property
    def subject_ref(self):
        from ..subjects import SubjectRef

        return SubjectRef(self.subject_type, self.subject_id)

    def __repr__(self) -> str:
        return f"<Activity {self.action} {self.subject_type}>"
