from sqlmodel import SQLModel, Field
from sqlalchemy import Column, Text, UniqueConstraint
from typing import Optional

from portal.models.base import SoftDeleteMixin
from portal.models.enums import ProgramLevel, enum_column


class Program(SoftDeleteMixin, table=True):
    __tablename__ = "programs"

    id: Optional[int] = Field(default=None, primary_key=True)
    code: str = Field(nullable=False, index=True)
    level: ProgramLevel = Field(
        default=ProgramLevel.Bachelor,
        sa_column=enum_column(ProgramLevel, "program_level")
    )
    website_url: Optional[str] = None

    name: str = Field(nullable=False)
    name_en: Optional[str] = None
    description: Optional[str] = Field(default=None, sa_column=Column(Text, nullable=True))
    description_en: Optional[str] = Field(default=None, sa_column=Column(Text, nullable=True))

    sort_order: int = Field(default=0)
    visible: bool = Field(default=True)


class Course(SoftDeleteMixin, table=True):
    __tablename__ = "courses"

    id: Optional[int] = Field(default=None, primary_key=True)
    code: str = Field(nullable=False, unique=True, index=True)
    credit: Optional[int] = None
    hours: Optional[int] = None
    url: Optional[str] = None

    name: str = Field(nullable=False)
    name_en: Optional[str] = None
    description: Optional[str] = Field(default=None, sa_column=Column(Text, nullable=True))
    description_en: Optional[str] = Field(default=None, sa_column=Column(Text, nullable=True))

    visible: bool = Field(default=True)


class ProgramCourse(SQLModel, table=True):
    __tablename__ = "program_courses"
    __table_args__ = (UniqueConstraint("program_id", "course_id", name="uq_program_course"),)

    id: Optional[int] = Field(default=None, primary_key=True)
    program_id: int = Field(foreign_key="programs.id", index=True)
    course_id: int = Field(foreign_key="courses.id", index=True)
