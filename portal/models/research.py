# portal/models/research.py

from datetime import date
from decimal import Decimal
from sqlmodel import SQLModel, Field
from sqlalchemy import Column, Text, UniqueConstraint
from typing import Optional

from portal.models.base import SoftDeleteMixin
from portal.models.enums import PublicationType, enum_column


class Publication(SoftDeleteMixin, table=True):
    __tablename__ = "publications"

    id: Optional[int] = Field(default=None, primary_key=True)
    year: Optional[int] = Field(default=None, index=True)
    type: PublicationType = Field(
        default=PublicationType.Journal,
        sa_column=enum_column(PublicationType, "publication_type")
    )
    venue: Optional[str] = None
    doi: Optional[str] = None
    url: Optional[str] = None

    title: str = Field(nullable=False)
    title_en: Optional[str] = None
    authors_text: Optional[str] = Field(default=None, sa_column=Column(Text, nullable=True))
    authors_text_en: Optional[str] = Field(default=None, sa_column=Column(Text, nullable=True))
    abstract: Optional[str] = Field(default=None, sa_column=Column(Text, nullable=True))
    abstract_en: Optional[str] = Field(default=None, sa_column=Column(Text, nullable=True))

    visible: bool = Field(default=True)


class Project(SoftDeleteMixin, table=True):
    __tablename__ = "projects"

    id: Optional[int] = Field(default=None, primary_key=True)
    code: Optional[str] = Field(default=None, index=True)
    start_date: Optional[date] = None
    end_date: Optional[date] = None
    sponsor: Optional[str] = None
    budget: Optional[Decimal] = Field(default=None, max_digits=14, decimal_places=2)
    website_url: Optional[str] = None

    title: str = Field(nullable=False)
    title_en: Optional[str] = None
    abstract: Optional[str] = Field(default=None, sa_column=Column(Text, nullable=True))
    abstract_en: Optional[str] = Field(default=None, sa_column=Column(Text, nullable=True))

    visible: bool = Field(default=True)


class ProjectTeacher(SQLModel, table=True):
    __tablename__ = "project_teachers"
    __table_args__ = (UniqueConstraint("project_id", "teacher_id", name="uq_project_teacher"),)

    id: Optional[int] = Field(default=None, primary_key=True)
    project_id: int = Field(foreign_key="projects.id", index=True)
    teacher_id: int = Field(foreign_key="teachers.id", index=True)
