# portal/api/endpoints/contact_messages.py

from typing import List, Optional
from fastapi import APIRouter, Depends, Query, Request, status
from sqlalchemy.ext.asyncio import AsyncSession

from portal.api.deps import get_db_session, get_current_actor
from portal.core.config import settings
from portal.core.policies import Actor, Resource, ResourceKind, authorize
from portal.core.rate_limiter import limiter
from portal.models.enums import ContactMessageStatus
from portal.schemas.contact_message import (
    ContactMessageCreate,
    ContactMessageRead,
    ContactMessageStatusUpdate,
)
from portal.services import contact_service

router = APIRouter(prefix="/api/contact-messages", tags=["Contact"])


# -------------------------------------------------------------------
# Public contact form (rate limited per client IP)
# -------------------------------------------------------------------
@router.post("/", response_model=ContactMessageRead, status_code=status.HTTP_201_CREATED)
@limiter.limit(settings.CONTACT_RATE_LIMIT)
async def submit_contact_message(
    request: Request,
    data: ContactMessageCreate,
    session: AsyncSession = Depends(get_db_session),
):
    return await contact_service.create_message(session, **data.model_dump())


# -------------------------------------------------------------------
# Admin inbox
# -------------------------------------------------------------------
@router.get("/", response_model=List[ContactMessageRead])
async def list_contact_messages(
    status_filter: Optional[ContactMessageStatus] = Query(None, alias="status"),
    limit: int = 50,
    offset: int = 0,
    session: AsyncSession = Depends(get_db_session),
    actor: Actor = Depends(get_current_actor),
):
    authorize(actor, "view_any", ResourceKind.ContactMessage)
    return await contact_service.list_messages(session, status_filter, min(limit, 200), offset)


@router.get("/{message_id}", response_model=ContactMessageRead)
async def read_contact_message(
    message_id: int,
    session: AsyncSession = Depends(get_db_session),
    actor: Actor = Depends(get_current_actor),
):
    authorize(actor, "view", ResourceKind.ContactMessage, Resource(id=message_id))
    return await contact_service.get_message(session, message_id)


async def _set_status(session, actor: Actor, message_id: int, new_status: ContactMessageStatus):
    authorize(actor, "update", ResourceKind.ContactMessage, Resource(id=message_id))
    message = await contact_service.get_message(session, message_id)
    return await contact_service.set_status(session, message, new_status, processed_by=actor.id)


@router.patch("/{message_id}", response_model=ContactMessageRead)
async def update_contact_message(
    message_id: int,
    data: ContactMessageStatusUpdate,
    session: AsyncSession = Depends(get_db_session),
    actor: Actor = Depends(get_current_actor),
):
    return await _set_status(session, actor, message_id, data.status)


@router.patch("/{message_id}/spam", response_model=ContactMessageRead)
async def mark_as_spam(
    message_id: int,
    session: AsyncSession = Depends(get_db_session),
    actor: Actor = Depends(get_current_actor),
):
    return await _set_status(session, actor, message_id, ContactMessageStatus.Spam)


@router.patch("/{message_id}/resolved", response_model=ContactMessageRead)
async def mark_as_resolved(
    message_id: int,
    session: AsyncSession = Depends(get_db_session),
    actor: Actor = Depends(get_current_actor),
):
    return await _set_status(session, actor, message_id, ContactMessageStatus.Resolved)


@router.delete("/{message_id}")
async def delete_contact_message(
    message_id: int,
    session: AsyncSession = Depends(get_db_session),
    actor: Actor = Depends(get_current_actor),
):
    authorize(actor, "delete", ResourceKind.ContactMessage, Resource(id=message_id))
    message = await contact_service.get_message(session, message_id)
    await contact_service.delete_message(session, message)
    return {"detail": "Contact message deleted"}
