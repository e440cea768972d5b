# portal/services/lifecycle_service.py
"""
Soft-delete lifecycle shared by every trashable record.

    active --soft_delete--> trashed --restore--> active
    active | trashed --purge--> (row removed, irreversible)
"""

from datetime import datetime
from enum import Enum
from typing import Optional, Type

from loguru import logger
from sqlmodel import SQLModel, select
from sqlalchemy import delete
from sqlalchemy.ext.asyncio import AsyncSession

from portal.core.exceptions import LifecycleError, NotFound


class LifecycleState(str, Enum):
    Active = "active"
    Trashed = "trashed"


def state_of(record) -> LifecycleState:
    return LifecycleState.Trashed if record.deleted_at is not None else LifecycleState.Active


def active(query, model: Type[SQLModel]):
    """Default scope: hide trashed rows."""
    return query.where(model.deleted_at.is_(None))


def scoped(query, model: Type[SQLModel], trashed: Optional[str] = None):
    """trashed=None -> active only, 'with' -> everything, 'only' -> trash bin."""
    if trashed == "only":
        return query.where(model.deleted_at.is_not(None))
    if trashed == "with":
        return query
    return active(query, model)


async def get_record(session: AsyncSession, model: Type[SQLModel], record_id: int, with_trashed: bool = False):
    query = select(model).where(model.id == record_id)
    if not with_trashed:
        query = active(query, model)
    result = await session.execute(query)
    record = result.scalar_one_or_none()
    if record is None:
        raise NotFound(f"{model.__name__} not found")
    return record


# ------------------------------------------------------------
# Transitions
# ------------------------------------------------------------
async def soft_delete(session: AsyncSession, record) -> None:
    if record.deleted_at is not None:
        raise LifecycleError(f"{type(record).__name__} #{record.id} is already in the trash")

    record.deleted_at = datetime.utcnow()
    session.add(record)
    await session.commit()
    logger.info(f"Trashed {type(record).__name__} #{record.id}")


async def restore(session: AsyncSession, record) -> None:
    if record.deleted_at is None:
        raise LifecycleError(f"{type(record).__name__} #{record.id} is not in the trash")

    record.deleted_at = None
    record.updated_at = datetime.utcnow()
    session.add(record)
    await session.commit()
    await session.refresh(record)
    logger.info(f"Restored {type(record).__name__} #{record.id}")


async def purge(session: AsyncSession, record, *link_tables) -> None:
    """
    Permanently deletes the row. ``link_tables`` are (model, column)
    pairs whose rows referencing the record are removed first.
    """
    record_id = record.id
    for link_model, column in link_tables:
        await session.execute(delete(link_model).where(getattr(link_model, column) == record_id))

    await session.delete(record)
    await session.commit()
    logger.warning(f"Purged {type(record).__name__} #{record_id}")
