# portal/services/attachment_service.py
"""
Serving attachments.

Old records point at files in several historical layouts, so ``download``
walks an ordered fallback chain:

    absolute URL > public path > legacy/ path > "/<raw>" guess > 404

A storage backend that cannot answer is treated as a missing file (404).

Resolution never writes to the attachment row.
"""

import posixpath
import re
from datetime import datetime
from typing import Optional

from fastapi.responses import RedirectResponse, Response
from loguru import logger
from sqlmodel import select
from sqlalchemy import func
from sqlalchemy.ext.asyncio import AsyncSession

from portal.core.exceptions import NotFound, StorageFileNotFound, StorageUnavailable
from portal.core.storage import PublicDisk
from portal.models.attachment import Attachment
from portal.models.enums import AttachableType, AttachmentType
from portal.models.registry import get_attachable
from portal.services.lifecycle_service import scoped

ABSOLUTE_URL = re.compile(r"^https?://", re.IGNORECASE)
STORAGE_PREFIX = "storage/"
LEGACY_PREFIX = "legacy/"


def _redirect(url: str) -> RedirectResponse:
    return RedirectResponse(url=url, status_code=302)


# ============================================================================
# SHOW (redirect-preferring)
# ============================================================================
async def show(attachment: Attachment, disk: PublicDisk) -> Response:
    if attachment.external_url:
        return _redirect(attachment.external_url)
    return await download(attachment, disk)


# ============================================================================
# DOWNLOAD (force-serve)
# ============================================================================
async def download(attachment: Attachment, disk: PublicDisk) -> Response:
    raw = attachment.file_url or ""

    if ABSOLUTE_URL.match(raw):
        return _redirect(raw)

    path = raw.lstrip("/")
    if not path:
        if attachment.external_url:
            return _redirect(attachment.external_url)
        raise NotFound("Attachment has no file")

    if path.startswith(STORAGE_PREFIX):
        path = path[len(STORAGE_PREFIX):]

    try:
        resolved = await resolve_public_path(path, disk)
    except StorageUnavailable:
        logger.error(f"Attachment #{attachment.id}: storage lookup failed for '{path}'")
        raise NotFound("File not found")

    if resolved is None:
        logger.debug(f"Attachment #{attachment.id}: '{raw}' not on public disk, redirecting")
        return _redirect("/" + raw)

    return await _serve(attachment, resolved, disk)


async def resolve_public_path(path: str, disk: PublicDisk) -> Optional[str]:
    if await disk.exists(path):
        return path

    # migrated files live in the legacy/ tree of the public disk
    if path.startswith(LEGACY_PREFIX):
        candidate = LEGACY_PREFIX + path
        if await disk.exists(candidate):
            return candidate

    return None


async def _serve(attachment: Attachment, path: str, disk: PublicDisk) -> Response:
    filename = attachment.title or posixpath.basename(path)
    try:
        return await disk.download(path, filename=filename, media_type=attachment.mime_type or None)
    except StorageFileNotFound:
        logger.warning(f"Attachment #{attachment.id}: '{path}' disappeared before it could be served")
        raise NotFound("File not found")


# ============================================================================
# CRUD
# ============================================================================
async def get_attachment(session: AsyncSession, attachment_id: int) -> Attachment:
    result = await session.execute(
        select(Attachment).where(Attachment.id == attachment_id, Attachment.deleted_at.is_(None))
    )
    attachment = result.scalar_one_or_none()
    if not attachment:
        raise NotFound("Attachment not found")
    return attachment


async def list_attachments(
    session: AsyncSession,
    attachable_type: Optional[AttachableType] = None,
    attachable_id: Optional[int] = None,
    trashed: Optional[str] = None,
) -> list[Attachment]:
    query = scoped(select(Attachment), Attachment, trashed)
    if attachable_type:
        query = query.where(Attachment.attachable_type == attachable_type)
    if attachable_id:
        query = query.where(Attachment.attachable_id == attachable_id)
    query = query.order_by(Attachment.sort_order, Attachment.id)
    result = await session.execute(query)
    return result.scalars().all()


async def create_attachment(session: AsyncSession, **fields) -> Attachment:
    owner = await get_attachable(session, fields["attachable_type"], fields["attachable_id"])
    if owner is None:
        raise ValueError(
            f"{AttachableType(fields['attachable_type']).value} #{fields['attachable_id']} does not exist"
        )

    if not fields.get("file_url") and not fields.get("external_url"):
        raise ValueError("Either file_url or external_url is required")

    if fields.get("external_url") and not fields.get("file_url") and "type" not in fields:
        fields["type"] = AttachmentType.Link

    attachment = Attachment(**fields)
    session.add(attachment)
    await session.commit()
    await session.refresh(attachment)
    return attachment


async def update_attachment(session: AsyncSession, attachment: Attachment, **fields) -> Attachment:
    for key, value in fields.items():
        setattr(attachment, key, value)
    attachment.updated_at = datetime.utcnow()
    session.add(attachment)
    await session.commit()
    await session.refresh(attachment)
    return attachment


async def total_size(session: AsyncSession) -> int:
    result = await session.execute(
        select(func.coalesce(func.sum(Attachment.file_size), 0)).where(Attachment.deleted_at.is_(None))
    )
    return int(result.scalar_one())
