# portal/api/endpoints/labs.py

from typing import List, Literal, Optional
from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy.ext.asyncio import AsyncSession

from portal.api.deps import get_db_session, get_current_actor, get_optional_actor
from portal.core.policies import Actor, Resource, ResourceKind, authorize
from portal.core.roles import is_admin
from portal.models.enums import AttachableType
from portal.models.lab import Lab, LabTeacher
from portal.schemas.lab import LabCreate, LabMember, LabMembersUpdate, LabRead, LabUpdate
from portal.services import lab_service, lifecycle_service
from portal.services.audit_service import log_activity
from portal.services.record_service import detach_all

router = APIRouter(prefix="/api/labs", tags=["Labs"])


async def _lab_resource(session: AsyncSession, lab: Lab) -> Resource:
    return Resource.of_lab(lab, await lab_service.member_ids(session, lab.id))


# -------------------------------------------------------------------
# Public listing
# -------------------------------------------------------------------
@router.get("/", response_model=List[LabRead])
async def list_labs(
    trashed: Optional[Literal["with", "only"]] = None,
    session: AsyncSession = Depends(get_db_session),
    actor: Optional[Actor] = Depends(get_optional_actor),
):
    if actor is not None and is_admin(actor.role):
        return await lab_service.list_labs(session, trashed=trashed)
    return await lab_service.list_labs(session, visible_only=True)


@router.get("/{lab_id}", response_model=LabRead)
async def read_lab(lab_id: int, session: AsyncSession = Depends(get_db_session)):
    return await lab_service.get_lab(session, lab_id)


@router.get("/{lab_id}/members", response_model=List[LabMember])
async def read_lab_members(lab_id: int, session: AsyncSession = Depends(get_db_session)):
    lab = await lab_service.get_lab(session, lab_id)
    return await lab_service.list_members(session, lab.id)


# -------------------------------------------------------------------
# Admin: create
# -------------------------------------------------------------------
@router.post("/", response_model=LabRead, status_code=status.HTTP_201_CREATED)
async def create_lab(
    data: LabCreate,
    session: AsyncSession = Depends(get_db_session),
    actor: Actor = Depends(get_current_actor),
):
    authorize(actor, "create", ResourceKind.Lab)
    try:
        return await lab_service.create_lab(session, **data.model_dump())
    except ValueError as e:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(e))


# -------------------------------------------------------------------
# Members & admins: update
# -------------------------------------------------------------------
@router.patch("/{lab_id}", response_model=LabRead)
async def update_lab(
    lab_id: int,
    data: LabUpdate,
    session: AsyncSession = Depends(get_db_session),
    actor: Actor = Depends(get_current_actor),
):
    lab = await lab_service.get_lab(session, lab_id)
    authorize(actor, "update", ResourceKind.Lab, await _lab_resource(session, lab))
    try:
        return await lab_service.update_lab(session, lab, **data.model_dump(exclude_unset=True))
    except ValueError as e:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(e))


@router.put("/{lab_id}/members", response_model=List[LabMember])
async def replace_lab_members(
    lab_id: int,
    data: LabMembersUpdate,
    session: AsyncSession = Depends(get_db_session),
    actor: Actor = Depends(get_current_actor),
):
    lab = await lab_service.get_lab(session, lab_id)
    authorize(actor, "manage_members", ResourceKind.Lab, await _lab_resource(session, lab))
    try:
        members = await lab_service.set_members(session, lab.id, data.teacher_ids)
    except ValueError as e:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(e))

    await log_activity("manage_lab_members", actor.id, "lab", lab.id, details={"teacher_ids": data.teacher_ids})
    return members


# -------------------------------------------------------------------
# Trash / restore / purge (Admin only)
# -------------------------------------------------------------------
@router.delete("/{lab_id}")
async def delete_lab(
    lab_id: int,
    session: AsyncSession = Depends(get_db_session),
    actor: Actor = Depends(get_current_actor),
):
    lab = await lab_service.get_lab(session, lab_id)
    authorize(actor, "delete", ResourceKind.Lab, await _lab_resource(session, lab))
    await lifecycle_service.soft_delete(session, lab)
    return {"detail": "Lab moved to trash"}


@router.post("/{lab_id}/restore", response_model=LabRead)
async def restore_lab(
    lab_id: int,
    session: AsyncSession = Depends(get_db_session),
    actor: Actor = Depends(get_current_actor),
):
    lab = await lab_service.get_lab(session, lab_id, with_trashed=True)
    authorize(actor, "restore", ResourceKind.Lab, await _lab_resource(session, lab))
    await lifecycle_service.restore(session, lab)
    await log_activity("restore_lab", actor.id, "lab", lab.id)
    return lab


@router.delete("/{lab_id}/force")
async def force_delete_lab(
    lab_id: int,
    session: AsyncSession = Depends(get_db_session),
    actor: Actor = Depends(get_current_actor),
):
    lab = await lab_service.get_lab(session, lab_id, with_trashed=True)
    authorize(actor, "force_delete", ResourceKind.Lab, await _lab_resource(session, lab))

    code = lab.code
    await detach_all(session, AttachableType.Lab, lab_id)
    await lifecycle_service.purge(session, lab, (LabTeacher, "lab_id"))
    await log_activity("force_delete_lab", actor.id, "lab", lab_id, details={"code": code})
    return {"detail": "Lab permanently deleted"}
