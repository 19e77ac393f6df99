"""Activity schemas."""

from __future__ import annotations

import uuid
from datetime import datetime

from pydantic import BaseModel


class ActivityResponse(BaseModel):
    id: int
    user_id: uuid.UUID | None = None
    subject_type: str
    subject_id: uuid.UUID
    action: str
    info: str
    created_at: datetime

    model_config = {"from_attributes": True}


class RecentItem(BaseModel):
    subject_type: str
    subject_id: uuid.UUID
    label: str
