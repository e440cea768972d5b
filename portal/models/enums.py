from enum import Enum

from sqlalchemy import Column
from sqlalchemy import Enum as SAEnum


class UserRole(str, Enum):
    Admin = "admin"
    Teacher = "teacher"
    User = "user"


class UserStatus(str, Enum):
    Active = "active"
    Suspended = "suspended"


class PostStatus(str, Enum):
    Draft = "draft"
    Published = "published"
    Archived = "archived"


class PostSourceType(str, Enum):
    Manual = "manual"
    Link = "link"


class AttachmentType(str, Enum):
    Image = "image"
    Document = "document"
    Link = "link"


class AttachableType(str, Enum):
    """Every record kind an attachment may hang off."""
    Post = "post"
    Lab = "lab"
    Teacher = "teacher"
    Staff = "staff"
    Project = "project"
    Publication = "publication"
    Program = "program"
    Course = "course"


class ContactMessageStatus(str, Enum):
    New = "new"
    InProgress = "in_progress"
    Resolved = "resolved"
    Spam = "spam"


class PublicationType(str, Enum):
    Journal = "journal"
    Conference = "conference"
    Book = "book"
    Other = "other"


class ProgramLevel(str, Enum):
    Bachelor = "bachelor"
    Master = "master"
    AiInservice = "ai_inservice"
    Dual = "dual"


def enum_column(enum_cls, name: str, nullable: bool = False, index: bool = False, **kwargs) -> Column:
    """
    Enum column that stores the lowercase values (not member names) and
    works on both Postgres and SQLite.
    """
    return Column(
        SAEnum(
            enum_cls,
            name=name,
            native_enum=False,
            validate_strings=True,
            values_callable=lambda e: [m.value for m in e],
        ),
        nullable=nullable,
        index=index,
        **kwargs,
    )
