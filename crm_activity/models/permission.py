"""Permission model - explicit share list for Shared records."""

from __future__ import annotations

import uuid

from sqlalchemy import ForeignKey, Index, String, UniqueConstraint, Uuid
from sqlalchemy.orm import Mapped, mapped_column

from .base import Base, UUIDMixin, TimestampMixin


class Permission(UUIDMixin, TimestampMixin, Base):
    __tablename__ = "permission"
    __table_args__ = (
        UniqueConstraint("user_id", "asset_type", "asset_id", name="uq_permission_user_asset"),
        Index("ix_permission_asset", "asset_type", "asset_id"),
    )

    user_id: Mapped[uuid.UUID] = mapped_column(
        Uuid, ForeignKey("users.id", ondelete="CASCADE"), index=True
    )
    asset_type: Mapped[str] = mapped_column(String(32))
    asset_id: Mapped[uuid.UUID] = mapped_column(Uuid)

    def __repr__(self) -> str:
        return f"<Permission {self.asset_type}:{self.asset_id} user={self.user_id}>"
