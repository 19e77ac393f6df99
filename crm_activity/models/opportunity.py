"""Opportunity model - deals attached to accounts."""

from __future__ import annotations

import uuid
from datetime import date

from sqlalchemy import Date, Float, ForeignKey, Integer, String, Uuid
from sqlalchemy.orm import Mapped, mapped_column, relationship

from .base import Base, UUIDMixin, TimestampMixin, OwnedMixin


class Opportunity(UUIDMixin, TimestampMixin, OwnedMixin, Base):
    __tablename__ = "opportunity"

    name: Mapped[str] = mapped_column(String(64), index=True)
    account_id: Mapped[uuid.UUID | None] = mapped_column(
        Uuid, ForeignKey("account.id", ondelete="SET NULL"),
        default=None, index=True
    )
    stage: Mapped[str] = mapped_column(String(32), default="prospecting")  # prospecting ... won, lost
    amount: Mapped[float | None] = mapped_column(Float, default=None)
    discount: Mapped[float | None] = mapped_column(Float, default=None)
    probability: Mapped[int | None] = mapped_column(Integer, default=None)
    closes_on: Mapped[date | None] = mapped_column(Date, default=None)

    # Relationships
    account: Mapped["Account | None"] = relationship(back_populates="opportunities")  # noqa: F821

    @property
    def weighted_amount(self) -> float:
        return ((self.amount or 0) - (self.discount or 0)) * (self.probability or 0) / 100.0

    def __repr__(self) -> str:
        return f"<Opportunity {self.name!r}>"
