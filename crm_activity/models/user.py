"""User model - actors and record owners."""

from __future__ import annotations

from sqlalchemy import Boolean, String
from sqlalchemy.orm import Mapped, mapped_column

from .base import Base, UUIDMixin, TimestampMixin


class User(UUIDMixin, TimestampMixin, Base):
    __tablename__ = "users"

    username: Mapped[str] = mapped_column(String(32), unique=True, index=True)
    email: Mapped[str] = mapped_column(String(254), unique=True, index=True)
    first_name: Mapped[str | None] = mapped_column(String(32), default=None)
    last_name: Mapped[str | None] = mapped_column(String(32), default=None)
    admin: Mapped[bool] = mapped_column(Boolean, default=False)

    @property
    def full_name(self) -> str:
        parts = [p for p in (self.first_name, self.last_name) if p]
        return " ".join(parts) or self.username or self.email

    def __repr__(self) -> str:
        return f"<User {self.username!r}>"
