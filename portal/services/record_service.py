# portal/services/record_service.py
"""
Generic editing for the directory-style records (staff, teachers,
research, programs): create, update, trash, restore and purge.
"""

from dataclasses import dataclass
from datetime import datetime
from typing import Optional, Tuple, Type

from pydantic import BaseModel
from sqlmodel import SQLModel
from sqlalchemy import delete
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from portal.core.policies import Resource, ResourceKind
from portal.models.attachment import Attachment
from portal.models.enums import AttachableType
from portal.models.lab import LabTeacher
from portal.models.people import Staff, Teacher
from portal.models.research import Publication, Project, ProjectTeacher
from portal.models.academic import Program, Course, ProgramCourse
from portal.schemas.record import (
    CourseCreate, CourseUpdate,
    ProgramCreate, ProgramUpdate,
    ProjectCreate, ProjectUpdate,
    PublicationCreate, PublicationUpdate,
    StaffCreate, StaffUpdate,
    TeacherCreate, TeacherUpdate,
)
from portal.services import lifecycle_service
from portal.services.user_service import get_user_by_id


@dataclass(frozen=True)
class RecordType:
    model: Type[SQLModel]
    kind: ResourceKind
    create_schema: Type[BaseModel]
    update_schema: Type[BaseModel]
    attachable: Optional[AttachableType] = None
    # (link model, column) rows removed on purge
    links: Tuple[Tuple[Type[SQLModel], str], ...] = ()


RECORD_TYPES = {
    "staff": RecordType(Staff, ResourceKind.Staff, StaffCreate, StaffUpdate, AttachableType.Staff),
    "teachers": RecordType(
        Teacher, ResourceKind.Teacher, TeacherCreate, TeacherUpdate, AttachableType.Teacher,
        links=((LabTeacher, "teacher_id"), (ProjectTeacher, "teacher_id")),
    ),
    "publications": RecordType(
        Publication, ResourceKind.Publication, PublicationCreate, PublicationUpdate, AttachableType.Publication,
    ),
    "projects": RecordType(
        Project, ResourceKind.Project, ProjectCreate, ProjectUpdate, AttachableType.Project,
        links=((ProjectTeacher, "project_id"),),
    ),
    "programs": RecordType(
        Program, ResourceKind.Program, ProgramCreate, ProgramUpdate, AttachableType.Program,
        links=((ProgramCourse, "program_id"),),
    ),
    "courses": RecordType(
        Course, ResourceKind.Course, CourseCreate, CourseUpdate, AttachableType.Course,
        links=((ProgramCourse, "course_id"),),
    ),
}


def record_type(name: str) -> RecordType:
    try:
        return RECORD_TYPES[name]
    except KeyError:
        raise ValueError(f"Unknown record type '{name}'")


def resource_for(record_type: RecordType, record) -> Resource:
    if record_type.model is Staff:
        return Resource.of_staff(record)
    return Resource(id=record.id)


async def detach_all(session: AsyncSession, attachable: AttachableType, attachable_id: int) -> None:
    """Queues removal of every attachment row (trashed or not) owned by the record."""
    await session.execute(
        delete(Attachment).where(
            Attachment.attachable_type == attachable,
            Attachment.attachable_id == attachable_id,
        )
    )


async def purge_record(session: AsyncSession, record_type: RecordType, record) -> None:
    if record_type.attachable is not None:
        await detach_all(session, record_type.attachable, record.id)
    await lifecycle_service.purge(session, record, *record_type.links)


# ------------------------------------------------------------
# Create / update
# ------------------------------------------------------------
async def _check_account(session: AsyncSession, user_id: Optional[int]) -> None:
    if user_id is not None and not await get_user_by_id(session, user_id):
        raise ValueError(f"User #{user_id} does not exist")


async def _commit(session: AsyncSession, record) -> None:
    session.add(record)
    try:
        await session.commit()
    except IntegrityError:
        await session.rollback()
        raise ValueError(f"{type(record).__name__} conflicts with an existing record")
    await session.refresh(record)


async def create_record(session: AsyncSession, record_type: RecordType, **fields):
    await _check_account(session, fields.get("user_id"))
    record = record_type.model(**fields)
    await _commit(session, record)
    return record


async def update_record(session: AsyncSession, record, **fields):
    if "user_id" in fields:
        await _check_account(session, fields["user_id"])
    for key, value in fields.items():
        setattr(record, key, value)
    record.updated_at = datetime.utcnow()
    await _commit(session, record)
    return record


async def link_teacher_account(session: AsyncSession, teacher: Teacher, user_id: Optional[int]) -> Teacher:
    """Points a faculty profile at a login account (or detaches it with None)."""
    return await update_record(session, teacher, user_id=user_id)
