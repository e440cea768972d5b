# portal/api/endpoints/records.py

from typing import Any, Dict, Literal, Optional
from fastapi import APIRouter, Body, Depends, HTTPException, status
from fastapi.exceptions import RequestValidationError
from pydantic import BaseModel, ValidationError
from sqlmodel import select
from sqlalchemy.ext.asyncio import AsyncSession

from portal.api.deps import get_db_session, get_current_actor
from portal.core.policies import Actor, ResourceKind, authorize
from portal.models.people import Teacher
from portal.schemas.record import TeacherUserLink
from portal.services import lifecycle_service
from portal.services.audit_service import log_activity
from portal.services.record_service import (
    RecordType,
    create_record,
    link_teacher_account,
    purge_record,
    record_type,
    resource_for,
    update_record,
)

router = APIRouter(prefix="/api/records", tags=["Records"])


def _resolve(kind: str) -> RecordType:
    try:
        return record_type(kind)
    except ValueError as e:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(e))


def _action_name(verb: str, kind: ResourceKind) -> str:
    return f"{verb}_{kind.value}"


def _parse(schema, payload: Dict[str, Any]) -> BaseModel:
    # body shape depends on {kind}, so validation happens here instead of in the signature
    try:
        return schema.model_validate(payload)
    except ValidationError as e:
        raise RequestValidationError(e.errors())


# -------------------------------------------------------------------
# List (trashed=with|only shows the trash bin)
# -------------------------------------------------------------------
@router.get("/{kind}")
async def list_records(
    kind: str,
    trashed: Optional[Literal["with", "only"]] = None,
    session: AsyncSession = Depends(get_db_session),
    actor: Actor = Depends(get_current_actor),
):
    rt = _resolve(kind)
    authorize(actor, "view_any", rt.kind)
    if trashed:
        authorize(actor, "restore", rt.kind)

    query = lifecycle_service.scoped(select(rt.model), rt.model, trashed).order_by(rt.model.id)
    result = await session.execute(query)
    return result.scalars().all()


@router.post("/{kind}", status_code=status.HTTP_201_CREATED)
async def create_new_record(
    kind: str,
    payload: Dict[str, Any] = Body(...),
    session: AsyncSession = Depends(get_db_session),
    actor: Actor = Depends(get_current_actor),
):
    rt = _resolve(kind)
    authorize(actor, "create", rt.kind)
    data = _parse(rt.create_schema, payload)

    try:
        record = await create_record(session, rt, **data.model_dump())
    except ValueError as e:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(e))

    await log_activity(_action_name("create", rt.kind), actor.id, rt.kind.value, record.id)
    return record


# -------------------------------------------------------------------
# Single record
# -------------------------------------------------------------------
@router.get("/{kind}/{record_id}")
async def read_record(
    kind: str,
    record_id: int,
    session: AsyncSession = Depends(get_db_session),
    actor: Actor = Depends(get_current_actor),
):
    rt = _resolve(kind)
    record = await lifecycle_service.get_record(session, rt.model, record_id)
    authorize(actor, "view", rt.kind, resource_for(rt, record))
    return record


@router.patch("/{kind}/{record_id}")
async def update_existing_record(
    kind: str,
    record_id: int,
    payload: Dict[str, Any] = Body(...),
    session: AsyncSession = Depends(get_db_session),
    actor: Actor = Depends(get_current_actor),
):
    rt = _resolve(kind)
    record = await lifecycle_service.get_record(session, rt.model, record_id)
    target = resource_for(rt, record)
    authorize(actor, "update", rt.kind, target)

    changes = _parse(rt.update_schema, payload).model_dump(exclude_unset=True)
    if "user_id" in changes and changes["user_id"] != record.user_id:
        authorize(actor, "assign_owner", rt.kind, target)

    try:
        return await update_record(session, record, **changes)
    except ValueError as e:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(e))


@router.put("/teachers/{teacher_id}/user")
async def link_teacher_to_account(
    teacher_id: int,
    data: TeacherUserLink,
    session: AsyncSession = Depends(get_db_session),
    actor: Actor = Depends(get_current_actor),
):
    authorize(actor, "manage_teacher_assignments", ResourceKind.User)
    teacher = await lifecycle_service.get_record(session, Teacher, teacher_id)

    try:
        teacher = await link_teacher_account(session, teacher, data.user_id)
    except ValueError as e:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(e))

    await log_activity(
        "link_teacher_account", actor.id, "teacher", teacher.id, details={"user_id": data.user_id}
    )
    return teacher


# -------------------------------------------------------------------
# Trash / restore / purge
# -------------------------------------------------------------------
@router.delete("/{kind}/{record_id}")
async def trash_record(
    kind: str,
    record_id: int,
    session: AsyncSession = Depends(get_db_session),
    actor: Actor = Depends(get_current_actor),
):
    rt = _resolve(kind)
    record = await lifecycle_service.get_record(session, rt.model, record_id)
    authorize(actor, "delete", rt.kind, resource_for(rt, record))

    await lifecycle_service.soft_delete(session, record)
    return {"detail": f"{rt.model.__name__} moved to trash"}


@router.post("/{kind}/{record_id}/restore")
async def restore_record(
    kind: str,
    record_id: int,
    session: AsyncSession = Depends(get_db_session),
    actor: Actor = Depends(get_current_actor),
):
    rt = _resolve(kind)
    record = await lifecycle_service.get_record(session, rt.model, record_id, with_trashed=True)
    authorize(actor, "restore", rt.kind, resource_for(rt, record))

    await lifecycle_service.restore(session, record)
    await log_activity(_action_name("restore", rt.kind), actor.id, rt.kind.value, record.id)
    return record


@router.delete("/{kind}/{record_id}/force")
async def force_delete_record(
    kind: str,
    record_id: int,
    session: AsyncSession = Depends(get_db_session),
    actor: Actor = Depends(get_current_actor),
):
    rt = _resolve(kind)
    record = await lifecycle_service.get_record(session, rt.model, record_id, with_trashed=True)
    authorize(actor, "force_delete", rt.kind, resource_for(rt, record))

    await purge_record(session, rt, record)
    await log_activity(_action_name("force_delete", rt.kind), actor.id, rt.kind.value, record_id)
    return {"detail": f"{rt.model.__name__} permanently deleted"}
