# portal/models/lab.py

from sqlmodel import SQLModel, Field
from sqlalchemy import Column, Text, UniqueConstraint
from typing import Optional

from portal.models.base import SoftDeleteMixin


class Lab(SoftDeleteMixin, table=True):
    __tablename__ = "labs"

    id: Optional[int] = Field(default=None, primary_key=True)
    code: str = Field(nullable=False, unique=True, index=True, max_length=50)

    name: str = Field(nullable=False)
    name_en: Optional[str] = None
    description: Optional[str] = Field(default=None, sa_column=Column(Text, nullable=True))
    description_en: Optional[str] = Field(default=None, sa_column=Column(Text, nullable=True))

    website_url: Optional[str] = None
    email: Optional[str] = None
    phone: Optional[str] = None
    cover_image_url: Optional[str] = None

    sort_order: int = Field(default=0)
    visible: bool = Field(default=True)


class LabTeacher(SQLModel, table=True):
    __tablename__ = "lab_teachers"
    __table_args__ = (UniqueConstraint("lab_id", "teacher_id", name="uq_lab_teacher"),)

    id: Optional[int] = Field(default=None, primary_key=True)
    lab_id: int = Field(foreign_key="labs.id", index=True)
    teacher_id: int = Field(foreign_key="teachers.id", index=True)
