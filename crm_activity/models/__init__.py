"""CRM models - re-exports all models and Base.metadata."""

from .base import Base, UUIDMixin, TimestampMixin, OwnedMixin
from .user import User
from .permission import Permission
from .account import Account
from .campaign import Campaign
from .contact import Contact
from .lead import Lead
from .opportunity import Opportunity
from .task import Task
from .comment import Comment
from .activity import Activity

__all__ = [
    "Base",
    "UUIDMixin",
    "TimestampMixin",
    "OwnedMixin",
    "User",
    "Permission",
    "Account",
    "Campaign",
    "Contact",
    "Lead",
    "Opportunity",
    "Task",
    "Comment",
    "Activity",
]
