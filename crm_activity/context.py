"""Per-request context passed explicitly to handlers."""

from __future__ import annotations

import uuid
from dataclasses import dataclass

from fastapi import Depends, HTTPException, Query, Request
from sqlalchemy.ext.asyncio import AsyncSession

from .config import settings
from .database import get_db
from .models.user import User
from .services import user_svc


@dataclass(frozen=True)
class RequestContext:
    viewer: User
    page: int = 1
    per_page: int = 20

    @property
    def viewer_id(self) -> uuid.UUID:
        return self.viewer.id

    @property
    def offset(self) -> int:
        return (self.page - 1) * self.per_page


async def get_request_context(
    request: Request,
    page: int = Query(1, ge=1),
    per_page: int = Query(20, ge=1, le=200),
    db: AsyncSession = Depends(get_db),
) -> RequestContext:
    """Resolve the viewer from the user header. Raises 401 if missing or unknown."""
    raw = request.headers.get(settings.user_header, "").strip()
    if not raw:
        raise HTTPException(status_code=401, detail=f"{settings.user_header} header required")
    try:
        user_id = uuid.UUID(raw)
    except ValueError:
        raise HTTPException(status_code=401, detail="Malformed user id") from None
    viewer = await user_svc.get_user(db, user_id)
    if viewer is None:
        raise HTTPException(status_code=401, detail="Unknown user")
    return RequestContext(viewer=viewer, page=page, per_page=per_page)
