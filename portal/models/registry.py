# portal/models/registry.py
#
# Importing this module registers every table on SQLModel.metadata.

from typing import Dict, Type

from sqlmodel import SQLModel
from sqlalchemy.ext.asyncio import AsyncSession

from portal.models.enums import AttachableType
from portal.models.user import User
from portal.models.people import Teacher, Staff
from portal.models.lab import Lab, LabTeacher
from portal.models.post import Post, PostCategory
from portal.models.attachment import Attachment
from portal.models.contact_message import ContactMessage
from portal.models.research import Publication, Project, ProjectTeacher
from portal.models.academic import Program, Course, ProgramCourse
from portal.models.audit import AuditLog


# ------------------------------------------------------------
# Polymorphic attachment owners
# ------------------------------------------------------------
ATTACHABLE_MODELS: Dict[AttachableType, Type[SQLModel]] = {
    AttachableType.Post: Post,
    AttachableType.Lab: Lab,
    AttachableType.Teacher: Teacher,
    AttachableType.Staff: Staff,
    AttachableType.Project: Project,
    AttachableType.Publication: Publication,
    AttachableType.Program: Program,
    AttachableType.Course: Course,
}


def attachable_model(kind: AttachableType | str) -> Type[SQLModel]:
    """Raises ValueError for a kind that cannot own attachments."""
    try:
        return ATTACHABLE_MODELS[AttachableType(kind)]
    except (ValueError, KeyError):
        raise ValueError(f"Unknown attachable type '{kind}'")


async def get_attachable(session: AsyncSession, kind: AttachableType | str, attachable_id: int):
    """Returns the owning record, or None when it does not exist or is trashed."""
    model = attachable_model(kind)
    record = await session.get(model, attachable_id)
    if record is None or getattr(record, "deleted_at", None) is not None:
        return None
    return record


__all__ = [
    "User", "Teacher", "Staff", "Lab", "LabTeacher", "Post", "PostCategory",
    "Attachment", "ContactMessage", "Publication", "Project", "ProjectTeacher",
    "Program", "Course", "ProgramCourse", "AuditLog",
    "ATTACHABLE_MODELS", "attachable_model", "get_attachable",
]
