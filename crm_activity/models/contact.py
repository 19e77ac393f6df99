"""Contact model."""

from __future__ import annotations

import uuid

from sqlalchemy import ForeignKey, Index, String, Uuid
from sqlalchemy.orm import Mapped, mapped_column, relationship

from .base import Base, UUIDMixin, TimestampMixin, OwnedMixin


class Contact(UUIDMixin, TimestampMixin, OwnedMixin, Base):
    __tablename__ = "contact"
    __table_args__ = (
        Index("ix_contact_name", "last_name", "first_name"),
    )

    account_id: Mapped[uuid.UUID | None] = mapped_column(
        Uuid, ForeignKey("account.id", ondelete="SET NULL"),
        default=None, index=True
    )
    first_name: Mapped[str | None] = mapped_column(String(64), default=None)
    last_name: Mapped[str | None] = mapped_column(String(64), default=None)
    title: Mapped[str | None] = mapped_column(String(64), default=None)
    email: Mapped[str | None] = mapped_column(String(254), default=None, index=True)
    phone: Mapped[str | None] = mapped_column(String(32), default=None)
    source: Mapped[str | None] = mapped_column(String(32), default=None)

    # Relationships
    account: Mapped["Account | None"] = relationship(back_populates="contacts")  # noqa: F821

    @property
    def full_name(self) -> str:
        parts = [p for p in (self.first_name, self.last_name) if p]
        return " ".join(parts) or "Unnamed"

    def __repr__(self) -> str:
        return f"<Contact {self.full_name!r}>"
