"""Lead model."""

from __future__ import annotations

import uuid

from sqlalchemy import ForeignKey, Integer, String, Uuid
from sqlalchemy.orm import Mapped, mapped_column, relationship

from .base import Base, UUIDMixin, TimestampMixin, OwnedMixin


class Lead(UUIDMixin, TimestampMixin, OwnedMixin, Base):
    __tablename__ = "lead"

    campaign_id: Mapped[uuid.UUID | None] = mapped_column(
        Uuid, ForeignKey("campaign.id", ondelete="SET NULL"),
        default=None, index=True
    )
    first_name: Mapped[str | None] = mapped_column(String(64), default=None)
    last_name: Mapped[str | None] = mapped_column(String(64), default=None)
    company: Mapped[str | None] = mapped_column(String(64), default=None)
    email: Mapped[str | None] = mapped_column(String(254), default=None, index=True)
    phone: Mapped[str | None] = mapped_column(String(32), default=None)
    status: Mapped[str] = mapped_column(String(32), default="new")  # new, contacted, converted, rejected
    source: Mapped[str | None] = mapped_column(String(32), default=None)
    rating: Mapped[int] = mapped_column(Integer, default=0)

    # Relationships
    campaign: Mapped["Campaign | None"] = relationship(back_populates="leads")  # noqa: F821

    @property
    def full_name(self) -> str:
        parts = [p for p in (self.first_name, self.last_name) if p]
        return " ".join(parts) or "Unnamed"

    def __repr__(self) -> str:
        return f"<Lead {self.full_name!r} ({self.status})>"
