"""Comment model - attached to any activity subject."""

from __future__ import annotations

import uuid

from sqlalchemy import Boolean, ForeignKey, Index, String, Text, Uuid
from sqlalchemy.orm import Mapped, mapped_column

from .base import Base, UUIDMixin, TimestampMixin


class Comment(UUIDMixin, TimestampMixin, Base):
    __tablename__ = "comment"
    __table_args__ = (
        Index("ix_comment_commentable", "commentable_type", "commentable_id"),
    )

    user_id: Mapped[uuid.UUID | None] = mapped_column(
        Uuid, ForeignKey("users.id", ondelete="SET NULL"), default=None
    )
    commentable_type: Mapped[str] = mapped_column(String(32))
    commentable_id: Mapped[uuid.UUID] = mapped_column(Uuid)
    private: Mapped[bool] = mapped_column(Boolean, default=False)  # reserved
    title: Mapped[str] = mapped_column(String(255), default="")
    comment: Mapped[str] = mapped_column(Text, default="")

    def __repr__(self) -> str:
        return f"<Comment {self.commentable_type}:{self.commentable_id}>"
