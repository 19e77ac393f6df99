"""Subject schemas - one create and one update model per subject type."""

from __future__ import annotations

import uuid
from datetime import date, datetime
from typing import ClassVar, Literal

from pydantic import BaseModel, model_validator

Access = Literal["Private", "Public", "Shared"]


class SubjectBase(BaseModel):
    # Columns that may be left out of an update but never set to null.
    not_null: ClassVar[tuple[str, ...]] = ()

    access: Access | None = None
    assigned_to: uuid.UUID | None = None
    permissions: list[uuid.UUID] | None = None

    @model_validator(mode="after")
    def reject_explicit_nulls(self):
        nulls = [f for f in self.not_null if f in self.model_fields_set and getattr(self, f) is None]
        if nulls:
            raise ValueError(f"{', '.join(nulls)} may not be null")
        return self


class AccountUpdate(SubjectBase):
    not_null: ClassVar[tuple[str, ...]] = ("name",)

    name: str | None = None
    website: str | None = None
    email: str | None = None
    phone: str | None = None
    background_info: str | None = None


class AccountCreate(AccountUpdate):
    name: str


class CampaignUpdate(SubjectBase):
    not_null: ClassVar[tuple[str, ...]] = ("name", "status")

    name: str | None = None
    status: str | None = None
    budget: float | None = None
    starts_on: date | None = None
    ends_on: date | None = None
    objectives: str | None = None


class CampaignCreate(CampaignUpdate):
    name: str


class ContactUpdate(SubjectBase):
    account_id: uuid.UUID | None = None
    first_name: str | None = None
    last_name: str | None = None
    title: str | None = None
    email: str | None = None
    phone: str | None = None
    source: str | None = None


class ContactCreate(ContactUpdate):
    pass


class LeadUpdate(SubjectBase):
    not_null: ClassVar[tuple[str, ...]] = ("status", "rating")

    campaign_id: uuid.UUID | None = None
    first_name: str | None = None
    last_name: str | None = None
    company: str | None = None
    email: str | None = None
    phone: str | None = None
    status: Literal["new", "contacted", "converted", "rejected"] | None = None
    source: str | None = None
    rating: int | None = None


class LeadCreate(LeadUpdate):
    pass


class OpportunityUpdate(SubjectBase):
    not_null: ClassVar[tuple[str, ...]] = ("name", "stage")

    name: str | None = None
    account_id: uuid.UUID | None = None
    stage: str | None = None
    amount: float | None = None
    discount: float | None = None
    probability: int | None = None
    closes_on: date | None = None


class OpportunityCreate(OpportunityUpdate):
    name: str


class TaskUpdate(SubjectBase):
    not_null: ClassVar[tuple[str, ...]] = ("name", "bucket")

    name: str | None = None
    description: str | None = None
    asset_type: str | None = None
    asset_id: uuid.UUID | None = None
    category: str | None = None
    bucket: str | None = None
    due_at: datetime | None = None
    completed_at: datetime | None = None


class TaskCreate(TaskUpdate):
    name: str


CREATE_SCHEMAS: dict[str, type[SubjectBase]] = {
    "account": AccountCreate,
    "campaign": CampaignCreate,
    "contact": ContactCreate,
    "lead": LeadCreate,
    "opportunity": OpportunityCreate,
    "task": TaskCreate,
}

UPDATE_SCHEMAS: dict[str, type[SubjectBase]] = {
    "account": AccountUpdate,
    "campaign": CampaignUpdate,
    "contact": ContactUpdate,
    "lead": LeadUpdate,
    "opportunity": OpportunityUpdate,
    "task": TaskUpdate,
}


class SubjectResponse(BaseModel):
    id: uuid.UUID
    subject_type: str
    label: str
    access: str
    user_id: uuid.UUID | None = None
    assigned_to: uuid.UUID | None = None
    fields: dict


class SubjectPage(BaseModel):
    items: list[SubjectResponse]
    total: int
    page: int
    per_page: int


class CommentCreate(BaseModel):
    comment: str
    title: str = ""


class CommentResponse(BaseModel):
    id: uuid.UUID
    user_id: uuid.UUID | None = None
    commentable_type: str
    commentable_id: uuid.UUID
    title: str
    comment: str

    model_config = {"from_attributes": True}
