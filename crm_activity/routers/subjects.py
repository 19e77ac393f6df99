"""Subject routes - JSON CRUD for every registered subject type."""

from __future__ import annotations

import uuid
from typing import Any

from fastapi import APIRouter, Body, Depends, HTTPException
from fastapi.responses import Response
from pydantic import ValidationError
from sqlalchemy.ext.asyncio import AsyncSession

from ..context import RequestContext, get_request_context
from ..database import get_db
from ..errors import NotFoundError
from ..schemas.subject import (
    CREATE_SCHEMAS,
    UPDATE_SCHEMAS,
    CommentCreate,
    CommentResponse,
    SubjectBase,
    SubjectPage,
    SubjectResponse,
)
from ..services import comment_svc, subject_svc
from ..services.classifier import snapshot, subject_label
from ..subjects import SubjectRef

router = APIRouter(tags=["subjects"])


def _schema_for(subject_type: str, schemas: dict = UPDATE_SCHEMAS) -> type[SubjectBase]:
    schema = schemas.get(subject_type)
    if schema is None:
        raise HTTPException(status_code=404, detail=f"Unknown record type '{subject_type}'")
    return schema


def _parse(
    subject_type: str, payload: dict[str, Any], schemas: dict[str, type[SubjectBase]]
) -> tuple[dict[str, Any], list[uuid.UUID] | None]:
    schema = _schema_for(subject_type, schemas)
    try:
        data = schema.model_validate(payload)
    except ValidationError as exc:
        raise HTTPException(
            status_code=422, detail=exc.errors(include_url=False, include_context=False)
        ) from None
    fields = data.model_dump(exclude_unset=True)
    permissions = fields.pop("permissions", None)
    if fields.get("access") is None:
        fields.pop("access", None)
    return fields, permissions


def _to_response(subject_type: str, subject) -> SubjectResponse:
    return SubjectResponse(
        id=subject.id,
        subject_type=subject_type,
        label=subject_label(subject),
        access=subject.access,
        user_id=subject.user_id,
        assigned_to=subject.assigned_to,
        fields=snapshot(subject),
    )


@router.get("/{subject_type}/", response_model=SubjectPage)
async def subject_list(
    subject_type: str,
    ctx: RequestContext = Depends(get_request_context),
    db: AsyncSession = Depends(get_db),
):
    _schema_for(subject_type)
    items, total = await subject_svc.list_subjects(
        db, ctx.viewer_id, subject_type, offset=ctx.offset, limit=ctx.per_page
    )
    return SubjectPage(
        items=[_to_response(subject_type, s) for s in items],
        total=total,
        page=ctx.page,
        per_page=ctx.per_page,
    )


@router.post("/{subject_type}/", response_model=SubjectResponse, status_code=201)
async def subject_create(
    subject_type: str,
    payload: dict[str, Any] = Body(...),
    ctx: RequestContext = Depends(get_request_context),
    db: AsyncSession = Depends(get_db),
):
    fields, permissions = _parse(subject_type, payload, CREATE_SCHEMAS)
    subject = await subject_svc.create_subject(
        db, ctx.viewer_id, subject_type, permissions=permissions, **fields
    )
    return _to_response(subject_type, subject)


@router.get("/{subject_type}/{subject_id}", response_model=SubjectResponse)
async def subject_show(
    subject_type: str,
    subject_id: uuid.UUID,
    ctx: RequestContext = Depends(get_request_context),
    db: AsyncSession = Depends(get_db),
):
    _schema_for(subject_type)
    try:
        subject = await subject_svc.show_subject(db, ctx.viewer_id, subject_type, subject_id)
    except NotFoundError as exc:
        raise HTTPException(status_code=404, detail=str(exc)) from None
    return _to_response(subject_type, subject)


@router.patch("/{subject_type}/{subject_id}", response_model=SubjectResponse)
async def subject_update(
    subject_type: str,
    subject_id: uuid.UUID,
    payload: dict[str, Any] = Body(...),
    ctx: RequestContext = Depends(get_request_context),
    db: AsyncSession = Depends(get_db),
):
    fields, permissions = _parse(subject_type, payload, UPDATE_SCHEMAS)
    try:
        await subject_svc.visible_subject(db, ctx.viewer_id, subject_type, subject_id)
    except NotFoundError as exc:
        raise HTTPException(status_code=404, detail=str(exc)) from None
    subject = await subject_svc.update_subject(
        db, ctx.viewer_id, subject_type, subject_id, permissions=permissions, **fields
    )
    return _to_response(subject_type, subject)


@router.delete("/{subject_type}/{subject_id}", status_code=204)
async def subject_delete(
    subject_type: str,
    subject_id: uuid.UUID,
    ctx: RequestContext = Depends(get_request_context),
    db: AsyncSession = Depends(get_db),
):
    _schema_for(subject_type)
    try:
        await subject_svc.visible_subject(db, ctx.viewer_id, subject_type, subject_id)
    except NotFoundError as exc:
        raise HTTPException(status_code=404, detail=str(exc)) from None
    await subject_svc.delete_subject(db, ctx.viewer_id, subject_type, subject_id)
    return Response(status_code=204)


@router.post(
    "/{subject_type}/{subject_id}/comments",
    response_model=CommentResponse,
    status_code=201,
)
async def subject_comment(
    subject_type: str,
    subject_id: uuid.UUID,
    body: CommentCreate,
    ctx: RequestContext = Depends(get_request_context),
    db: AsyncSession = Depends(get_db),
):
    _schema_for(subject_type)
    try:
        await subject_svc.visible_subject(db, ctx.viewer_id, subject_type, subject_id)
        comment = await comment_svc.add_comment(
            db, ctx.viewer_id, SubjectRef(subject_type, subject_id),
            body.comment, title=body.title,
        )
    except NotFoundError as exc:
        raise HTTPException(status_code=404, detail=str(exc)) from None
    return CommentResponse.model_validate(comment)
