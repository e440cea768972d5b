# portal/models/people.py

from sqlmodel import Field
from sqlalchemy import Column, Text
from typing import Optional

from portal.models.base import SoftDeleteMixin


# ------------------------------------------------------------
# Faculty profile (optionally linked to a login account)
# ------------------------------------------------------------
class Teacher(SoftDeleteMixin, table=True):
    __tablename__ = "teachers"

    id: Optional[int] = Field(default=None, primary_key=True)
    user_id: Optional[int] = Field(default=None, foreign_key="users.id", unique=True, index=True)

    name: str = Field(nullable=False)
    name_en: Optional[str] = None
    title: Optional[str] = None
    title_en: Optional[str] = None
    email: Optional[str] = None
    phone: Optional[str] = None
    office: Optional[str] = None
    job_title: Optional[str] = None
    photo_url: Optional[str] = None
    bio: Optional[str] = Field(default=None, sa_column=Column(Text, nullable=True))
    bio_en: Optional[str] = Field(default=None, sa_column=Column(Text, nullable=True))
    expertise: Optional[str] = None
    expertise_en: Optional[str] = None

    sort_order: int = Field(default=0)
    visible: bool = Field(default=True)


# ------------------------------------------------------------
# Administrative staff
# ------------------------------------------------------------
class Staff(SoftDeleteMixin, table=True):
    __tablename__ = "staff"

    id: Optional[int] = Field(default=None, primary_key=True)
    # the account allowed to edit this entry besides admins
    user_id: Optional[int] = Field(default=None, foreign_key="users.id", index=True)

    name: str = Field(nullable=False)
    name_en: Optional[str] = None
    position: Optional[str] = None
    position_en: Optional[str] = None
    email: Optional[str] = None
    phone: Optional[str] = None
    photo_url: Optional[str] = None
    bio: Optional[str] = Field(default=None, sa_column=Column(Text, nullable=True))
    bio_en: Optional[str] = Field(default=None, sa_column=Column(Text, nullable=True))

    sort_order: int = Field(default=0)
    visible: bool = Field(default=True)
