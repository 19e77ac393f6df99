"""Base model classes and mixins for CRM models."""

from __future__ import annotations

import uuid
from datetime import datetime

from sqlalchemy import DateTime, ForeignKey, String, Uuid, func
from sqlalchemy.orm import DeclarativeBase, Mapped, mapped_column

ACCESS_PRIVATE = "Private"
ACCESS_PUBLIC = "Public"
ACCESS_SHARED = "Shared"


class Base(DeclarativeBase):
    pass


class UUIDMixin:
    """Adds a UUID primary key."""

    id: Mapped[uuid.UUID] = mapped_column(
        Uuid,
        primary_key=True,
        default=uuid.uuid4,
    )


class TimestampMixin:
    """Adds created_at / updated_at columns."""

    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), server_default=func.now()
    )
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), server_default=func.now(), onupdate=func.now()
    )


class OwnedMixin:
    """Adds owner, assignee, access level and soft-delete columns.

    Every activity subject carries these; the visibility filter and the
    subject listing both read ``user_id``, ``access`` and the ``Permission``
    rows for ``Shared`` records.
    """

    user_id: Mapped[uuid.UUID | None] = mapped_column(
        Uuid,
        ForeignKey("users.id", ondelete="SET NULL"),
        default=None,
        index=True,
    )
    assigned_to: Mapped[uuid.UUID | None] = mapped_column(Uuid, default=None, index=True)
    access: Mapped[str] = mapped_column(String(8), default=ACCESS_PUBLIC)
    deleted_at: Mapped[datetime | None] = mapped_column(
        DateTime(timezone=True), default=None, index=True
    )

    @property
    def is_deleted(self) -> bool:
        return self.deleted_at is not None
