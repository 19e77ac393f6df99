"""Campaign model."""

from __future__ import annotations

from datetime import date

from sqlalchemy import Date, Float, String, Text
from sqlalchemy.orm import Mapped, mapped_column, relationship

from .base import Base, UUIDMixin, TimestampMixin, OwnedMixin


class Campaign(UUIDMixin, TimestampMixin, OwnedMixin, Base):
    __tablename__ = "campaign"

    name: Mapped[str] = mapped_column(String(64), index=True)
    status: Mapped[str] = mapped_column(String(32), default="planned")  # planned/started/completed/on_hold/called_off
    budget: Mapped[float | None] = mapped_column(Float, default=None)
    starts_on: Mapped[date | None] = mapped_column(Date, default=None)
    ends_on: Mapped[date | None] = mapped_column(Date, default=None)
    objectives: Mapped[str | None] = mapped_column(Text, default=None)

    # Relationships
    leads: Mapped[list["Lead"]] = relationship(back_populates="campaign")  # noqa: F821

    def __repr__(self) -> str:
        return f"<Campaign {self.name!r}>"
