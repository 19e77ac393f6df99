"""Account model."""

from __future__ import annotations

from sqlalchemy import String, Text
from sqlalchemy.orm import Mapped, mapped_column, relationship

from .base import Base, UUIDMixin, TimestampMixin, OwnedMixin


class Account(UUIDMixin, TimestampMixin, OwnedMixin, Base):
    __tablename__ = "account"

    name: Mapped[str] = mapped_column(String(64), index=True)
    website: Mapped[str | None] = mapped_column(String(64), default=None)
    email: Mapped[str | None] = mapped_column(String(254), default=None)
    phone: Mapped[str | None] = mapped_column(String(32), default=None)
    background_info: Mapped[str | None] = mapped_column(Text, default=None)

    # Relationships
    contacts: Mapped[list["Contact"]] = relationship(back_populates="account")  # noqa: F821
    opportunities: Mapped[list["Opportunity"]] = relationship(  # noqa: F821
        back_populates="account"
    )

    def __repr__(self) -> str:
        return f"<Account {self.name!r}>"
