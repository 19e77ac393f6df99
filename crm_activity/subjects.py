"""Polymorphic subject references and the registry that resolves them.

An activity points at its subject with a ``(subject_type, subject_id)`` pair.
The registry maps each type tag to the model class and a loader, so resolving
a reference never goes through dynamic class lookup.
"""

from __future__ import annotations

import uuid
from collections.abc import Awaitable, Callable, Iterable
from dataclasses import dataclass

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from .config import settings
from .errors import NotFoundError, UnknownSubjectType
from .models.account import Account
from .models.campaign import Campaign
from .models.contact import Contact
from .models.lead import Lead
from .models.opportunity import Opportunity
from .models.task import Task

Loader = Callable[[AsyncSession, Iterable[uuid.UUID]], Awaitable[dict[uuid.UUID, object]]]


@dataclass(frozen=True)
class SubjectRef:
    subject_type: str
    subject_id: uuid.UUID

    def __str__(self) -> str:
        return f"{self.subject_type}:{self.subject_id}"


def _default_loader(model) -> Loader:
    async def load(db: AsyncSession, ids: Iterable[uuid.UUID]) -> dict[uuid.UUID, object]:
        id_list = list(set(ids))
        if not id_list:
            return {}
        # Soft-deleted rows are included: their access settings still govern
        # who may see the activities recorded against them.
        stmt = (
            select(model)
            .where(model.id.in_(id_list))
            .execution_options(populate_existing=True)
        )
        result = await db.execute(stmt)
        return {row.id: row for row in result.scalars().all()}

    return load


class SubjectRegistry:
    """Type tag <-> model class registry with batch loaders."""

    def __init__(self) -> None:
        self._models: dict[str, type] = {}
        self._loaders: dict[str, Loader] = {}
        self._tags: dict[type, str] = {}

    def register(self, subject_type: str, model: type, loader: Loader | None = None) -> None:
        self._models[subject_type] = model
        self._loaders[subject_type] = loader or _default_loader(model)
        self._tags[model] = subject_type

    def types(self) -> list[str]:
        return list(self._models)

    def model_for(self, subject_type: str) -> type:
        try:
            return self._models[subject_type]
        except KeyError:
            raise UnknownSubjectType(f"Unknown subject type {subject_type!r}") from None

    def type_of(self, subject: object) -> str:
        try:
            return self._tags[type(subject)]
        except KeyError:
            raise UnknownSubjectType(f"{type(subject).__name__} is not an activity subject") from None

    def ref(self, subject: object) -> SubjectRef:
        return SubjectRef(self.type_of(subject), subject.id)

    def is_trackable(self, subject_type: str) -> bool:
        """Whether ``viewed`` activities are kept for this type."""
        return subject_type in self._models and subject_type not in settings.recently_viewed_excluded

    async def load_many(
        self, db: AsyncSession, subject_type: str, ids: Iterable[uuid.UUID]
    ) -> dict[uuid.UUID, object]:
        self.model_for(subject_type)
        return await self._loaders[subject_type](db, ids)

    async def load(self, db: AsyncSession, ref: SubjectRef) -> object:
        """Resolve a reference or raise NotFoundError."""
        found = await self.load_many(db, ref.subject_type, [ref.subject_id])
        subject = found.get(ref.subject_id)
        if subject is None:
            raise NotFoundError(ref.subject_type, ref.subject_id)
        return subject


registry = SubjectRegistry()
registry.register("account", Account)
registry.register("campaign", Campaign)
registry.register("contact", Contact)
registry.register("lead", Lead)
registry.register("opportunity", Opportunity)
registry.register("task", Task)
