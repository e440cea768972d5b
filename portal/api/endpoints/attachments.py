# portal/api/endpoints/attachments.py

from typing import List, Literal, Optional
from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy.ext.asyncio import AsyncSession

from portal.api.deps import get_db_session, get_current_actor
from portal.core.exceptions import NotFound
from portal.core.policies import Actor, Resource, ResourceKind, authorize
from portal.core.storage import PublicDisk, get_public_disk
from portal.models.attachment import Attachment
from portal.models.enums import AttachableType
from portal.schemas.attachment import AttachmentCreate, AttachmentRead, AttachmentUpdate
from portal.services import attachment_service, lifecycle_service
from portal.services.audit_service import log_activity

# Public file links
public_router = APIRouter(prefix="/attachments", tags=["Attachments"])

# Admin management
router = APIRouter(prefix="/api/attachments", tags=["Attachments"])


# -------------------------------------------------------------------
# SHOW: external link first, otherwise same as download
# -------------------------------------------------------------------
@public_router.get("/{attachment_id}")
async def show_attachment(
    attachment_id: int,
    session: AsyncSession = Depends(get_db_session),
    disk: PublicDisk = Depends(get_public_disk),
):
    attachment = await attachment_service.get_attachment(session, attachment_id)
    return await attachment_service.show(attachment, disk)


# -------------------------------------------------------------------
# DOWNLOAD: serve the stored file
# -------------------------------------------------------------------
@public_router.get("/{attachment_id}/download")
async def download_attachment(
    attachment_id: int,
    session: AsyncSession = Depends(get_db_session),
    disk: PublicDisk = Depends(get_public_disk),
):
    attachment = await attachment_service.get_attachment(session, attachment_id)
    return await attachment_service.download(attachment, disk)


# ===================================================================
# ADMIN
# ===================================================================
async def _load(session: AsyncSession, attachment_id: int, with_trashed: bool = False) -> Attachment:
    attachment = await session.get(Attachment, attachment_id)
    if not attachment or (attachment.deleted_at is not None and not with_trashed):
        raise NotFound("Attachment not found")
    return attachment


@router.get("/", response_model=List[AttachmentRead])
async def list_attachments(
    attachable_type: Optional[AttachableType] = None,
    attachable_id: Optional[int] = None,
    trashed: Optional[Literal["with", "only"]] = None,
    session: AsyncSession = Depends(get_db_session),
    actor: Actor = Depends(get_current_actor),
):
    authorize(actor, "view_any", ResourceKind.Attachment)
    if trashed:
        authorize(actor, "restore", ResourceKind.Attachment)
    return await attachment_service.list_attachments(session, attachable_type, attachable_id, trashed)


@router.post("/", response_model=AttachmentRead, status_code=status.HTTP_201_CREATED)
async def create_attachment(
    data: AttachmentCreate,
    session: AsyncSession = Depends(get_db_session),
    actor: Actor = Depends(get_current_actor),
):
    authorize(actor, "create", ResourceKind.Attachment)
    try:
        return await attachment_service.create_attachment(session, **data.model_dump(exclude_none=True))
    except ValueError as e:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(e))


@router.patch("/{attachment_id}", response_model=AttachmentRead)
async def update_attachment(
    attachment_id: int,
    data: AttachmentUpdate,
    session: AsyncSession = Depends(get_db_session),
    actor: Actor = Depends(get_current_actor),
):
    attachment = await _load(session, attachment_id)
    authorize(actor, "update", ResourceKind.Attachment, Resource(id=attachment.id))
    return await attachment_service.update_attachment(
        session, attachment, **data.model_dump(exclude_unset=True)
    )


@router.delete("/{attachment_id}")
async def delete_attachment(
    attachment_id: int,
    session: AsyncSession = Depends(get_db_session),
    actor: Actor = Depends(get_current_actor),
):
    attachment = await _load(session, attachment_id)
    authorize(actor, "delete", ResourceKind.Attachment, Resource(id=attachment.id))
    await lifecycle_service.soft_delete(session, attachment)
    return {"detail": "Attachment moved to trash"}


@router.post("/{attachment_id}/restore", response_model=AttachmentRead)
async def restore_attachment(
    attachment_id: int,
    session: AsyncSession = Depends(get_db_session),
    actor: Actor = Depends(get_current_actor),
):
    attachment = await _load(session, attachment_id, with_trashed=True)
    authorize(actor, "restore", ResourceKind.Attachment, Resource(id=attachment.id))
    await lifecycle_service.restore(session, attachment)
    await log_activity("restore_attachment", actor.id, "attachment", attachment.id)
    return attachment


@router.delete("/{attachment_id}/force")
async def force_delete_attachment(
    attachment_id: int,
    session: AsyncSession = Depends(get_db_session),
    actor: Actor = Depends(get_current_actor),
):
    attachment = await _load(session, attachment_id, with_trashed=True)
    authorize(actor, "force_delete", ResourceKind.Attachment, Resource(id=attachment.id))

    details = {"title": attachment.title, "file_url": attachment.file_url}
    await lifecycle_service.purge(session, attachment)
    await log_activity("force_delete_attachment", actor.id, "attachment", attachment_id, details=details)
    return {"detail": "Attachment permanently deleted"}
