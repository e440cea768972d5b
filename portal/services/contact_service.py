# portal/services/contact_service.py

from datetime import datetime
from typing import Optional

from loguru import logger
from sqlmodel import select
from sqlalchemy.ext.asyncio import AsyncSession

from portal.core.exceptions import NotFound
from portal.models.contact_message import ContactMessage
from portal.models.enums import ContactMessageStatus


async def create_message(session: AsyncSession, **fields) -> ContactMessage:
    message = ContactMessage(**fields, status=ContactMessageStatus.New)
    session.add(message)
    await session.commit()
    await session.refresh(message)
    logger.info(f"Contact message #{message.id} received from {message.email}")
    return message


async def list_messages(
    session: AsyncSession,
    status: Optional[ContactMessageStatus] = None,
    limit: int = 50,
    offset: int = 0,
) -> list[ContactMessage]:
    query = select(ContactMessage).order_by(ContactMessage.created_at.desc(), ContactMessage.id.desc())
    if status:
        query = query.where(ContactMessage.status == status)
    result = await session.execute(query.limit(limit).offset(offset))
    return result.scalars().all()


async def get_message(session: AsyncSession, message_id: int) -> ContactMessage:
    message = await session.get(ContactMessage, message_id)
    if not message:
        raise NotFound("Contact message not found")
    return message


async def set_status(
    session: AsyncSession,
    message: ContactMessage,
    status: ContactMessageStatus,
    processed_by: int,
) -> ContactMessage:
    """Every status change records who handled the message and when."""
    message.status = status
    message.processed_by = processed_by
    message.processed_at = datetime.utcnow()
    message.updated_at = message.processed_at

    session.add(message)
    await session.commit()
    await session.refresh(message)
    return message


async def delete_message(session: AsyncSession, message: ContactMessage) -> None:
    await session.delete(message)
    await session.commit()
