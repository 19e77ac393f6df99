"""Task model."""

from __future__ import annotations

import uuid
from datetime import datetime

from sqlalchemy import DateTime, String, Text, Uuid
from sqlalchemy.orm import Mapped, mapped_column

from .base import Base, UUIDMixin, TimestampMixin, OwnedMixin, ACCESS_PRIVATE

TASK_BUCKETS = (
    "overdue",
    "due_asap",
    "due_today",
    "due_tomorrow",
    "due_this_week",
    "due_next_week",
    "due_later",
    "specific_time",
)


class Task(UUIDMixin, TimestampMixin, OwnedMixin, Base):
    __tablename__ = "task"

    # Tasks are private to their owner unless stated otherwise.
    access: Mapped[str] = mapped_column(String(8), default=ACCESS_PRIVATE)
    name: Mapped[str] = mapped_column(String(255))
    description: Mapped[str | None] = mapped_column(Text, default=None)
    # Optional polymorphic link to the record the task is about.
    asset_type: Mapped[str | None] = mapped_column(String(32), default=None)
    asset_id: Mapped[uuid.UUID | None] = mapped_column(Uuid, default=None, index=True)
    category: Mapped[str | None] = mapped_column(String(32), default=None)  # call, email, follow_up, ...
    bucket: Mapped[str] = mapped_column(String(32), default="due_asap")
    due_at: Mapped[datetime | None] = mapped_column(DateTime(timezone=True), default=None)
    completed_at: Mapped[datetime | None] = mapped_column(DateTime(timezone=True), default=None)
    completed_by: Mapped[uuid.UUID | None] = mapped_column(Uuid, default=None)

    @property
    def is_completed(self) -> bool:
        return self.completed_at is not None

    def __repr__(self) -> str:
        return f"<Task {self.name!r}>"
