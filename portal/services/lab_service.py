# portal/services/lab_service.py

from datetime import datetime
from typing import Iterable, Optional

from sqlmodel import select
from sqlalchemy import delete
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from portal.core.exceptions import NotFound
from portal.models.lab import Lab, LabTeacher
from portal.models.people import Teacher
from portal.services.lifecycle_service import scoped


async def list_labs(session: AsyncSession, trashed: Optional[str] = None, visible_only: bool = False) -> list[Lab]:
    query = scoped(select(Lab), Lab, trashed)
    if visible_only:
        query = query.where(Lab.visible.is_(True))
    result = await session.execute(query.order_by(Lab.sort_order, Lab.id))
    return result.scalars().all()


async def get_lab(session: AsyncSession, lab_id: int, with_trashed: bool = False) -> Lab:
    query = select(Lab).where(Lab.id == lab_id)
    if not with_trashed:
        query = query.where(Lab.deleted_at.is_(None))
    result = await session.execute(query)
    lab = result.scalar_one_or_none()
    if not lab:
        raise NotFound("Lab not found")
    return lab


# ------------------------------------------------------------
# Membership
# ------------------------------------------------------------
async def member_ids(session: AsyncSession, lab_id: int) -> set[int]:
    result = await session.execute(select(LabTeacher.teacher_id).where(LabTeacher.lab_id == lab_id))
    return set(result.scalars().all())


async def list_members(session: AsyncSession, lab_id: int) -> list[Teacher]:
    result = await session.execute(
        select(Teacher)
        .join(LabTeacher, LabTeacher.teacher_id == Teacher.id)
        .where(LabTeacher.lab_id == lab_id, Teacher.deleted_at.is_(None))
        .order_by(Teacher.sort_order, Teacher.id)
    )
    return result.scalars().all()


async def labs_for_teacher(session: AsyncSession, teacher_id: int) -> list[Lab]:
    result = await session.execute(
        select(Lab)
        .join(LabTeacher, LabTeacher.lab_id == Lab.id)
        .where(LabTeacher.teacher_id == teacher_id, Lab.deleted_at.is_(None))
        .order_by(Lab.sort_order, Lab.id)
    )
    return result.scalars().all()


async def set_members(session: AsyncSession, lab_id: int, teacher_ids: Iterable[int]) -> list[Teacher]:
    """Replaces the lab's member list."""
    wanted = set(teacher_ids)
    if wanted:
        result = await session.execute(
            select(Teacher.id).where(Teacher.id.in_(wanted), Teacher.deleted_at.is_(None))
        )
        missing = wanted - set(result.scalars().all())
        if missing:
            raise ValueError(f"Unknown teacher ids: {sorted(missing)}")

    await session.execute(delete(LabTeacher).where(LabTeacher.lab_id == lab_id))
    for teacher_id in sorted(wanted):
        session.add(LabTeacher(lab_id=lab_id, teacher_id=teacher_id))
    await session.commit()

    return await list_members(session, lab_id)


# ------------------------------------------------------------
# CRUD
# ------------------------------------------------------------
async def create_lab(session: AsyncSession, teacher_ids: Iterable[int] = (), **fields) -> Lab:
    lab = Lab(**fields)
    session.add(lab)
    try:
        await session.commit()
    except IntegrityError:
        await session.rollback()
        raise ValueError(f"Lab code '{fields.get('code')}' already exists")
    await session.refresh(lab)

    if teacher_ids:
        await set_members(session, lab.id, teacher_ids)
    return lab


async def update_lab(session: AsyncSession, lab: Lab, **fields) -> Lab:
    for key, value in fields.items():
        setattr(lab, key, value)
    lab.updated_at = datetime.utcnow()
    session.add(lab)
    try:
        await session.commit()
    except IntegrityError:
        await session.rollback()
        raise ValueError(f"Lab code '{fields.get('code')}' already exists")
    await session.refresh(lab)
    return lab
