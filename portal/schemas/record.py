from datetime import date
from decimal import Decimal
from typing import Optional
from pydantic import BaseModel, EmailStr, Field

from portal.models.enums import ProgramLevel, PublicationType


# ---------------------------------------------------------
# STAFF
# ---------------------------------------------------------
class StaffCreate(BaseModel):
    name: str = Field(min_length=1)
    name_en: Optional[str] = None
    position: str = Field(min_length=1)
    position_en: Optional[str] = None
    email: Optional[EmailStr] = None
    phone: Optional[str] = None
    photo_url: Optional[str] = None
    bio: Optional[str] = None
    bio_en: Optional[str] = None
    sort_order: int = 0
    visible: bool = True
    user_id: Optional[int] = None


class StaffUpdate(BaseModel):
    name: Optional[str] = Field(default=None, min_length=1)
    name_en: Optional[str] = None
    position: Optional[str] = Field(default=None, min_length=1)
    position_en: Optional[str] = None
    email: Optional[EmailStr] = None
    phone: Optional[str] = None
    photo_url: Optional[str] = None
    bio: Optional[str] = None
    bio_en: Optional[str] = None
    sort_order: Optional[int] = None
    visible: Optional[bool] = None
    # reassigning the editing account is admin only
    user_id: Optional[int] = None


# ---------------------------------------------------------
# TEACHERS (faculty profiles)
# ---------------------------------------------------------
class TeacherCreate(BaseModel):
    name: str = Field(min_length=1)
    name_en: Optional[str] = None
    title: Optional[str] = None
    title_en: Optional[str] = None
    email: Optional[EmailStr] = None
    phone: Optional[str] = None
    office: Optional[str] = None
    job_title: Optional[str] = None
    photo_url: Optional[str] = None
    bio: Optional[str] = None
    bio_en: Optional[str] = None
    expertise: Optional[str] = None
    expertise_en: Optional[str] = None
    sort_order: int = 0
    visible: bool = True
    user_id: Optional[int] = None


class TeacherUpdate(BaseModel):
    name: Optional[str] = Field(default=None, min_length=1)
    name_en: Optional[str] = None
    title: Optional[str] = None
    title_en: Optional[str] = None
    email: Optional[EmailStr] = None
    phone: Optional[str] = None
    office: Optional[str] = None
    job_title: Optional[str] = None
    photo_url: Optional[str] = None
    bio: Optional[str] = None
    bio_en: Optional[str] = None
    expertise: Optional[str] = None
    expertise_en: Optional[str] = None
    sort_order: Optional[int] = None
    visible: Optional[bool] = None


class TeacherUserLink(BaseModel):
    """null unlinks the profile from its account."""
    user_id: Optional[int] = None


# ---------------------------------------------------------
# RESEARCH
# ---------------------------------------------------------
class PublicationCreate(BaseModel):
    year: int
    type: PublicationType
    venue: Optional[str] = None
    doi: Optional[str] = None
    url: Optional[str] = None
    title: str = Field(min_length=1)
    title_en: Optional[str] = None
    authors_text: str = Field(min_length=1)
    authors_text_en: Optional[str] = None
    abstract: Optional[str] = None
    abstract_en: Optional[str] = None
    visible: bool = True


class PublicationUpdate(BaseModel):
    year: Optional[int] = None
    type: Optional[PublicationType] = None
    venue: Optional[str] = None
    doi: Optional[str] = None
    url: Optional[str] = None
    title: Optional[str] = Field(default=None, min_length=1)
    title_en: Optional[str] = None
    authors_text: Optional[str] = None
    authors_text_en: Optional[str] = None
    abstract: Optional[str] = None
    abstract_en: Optional[str] = None
    visible: Optional[bool] = None


class ProjectCreate(BaseModel):
    code: Optional[str] = None
    start_date: Optional[date] = None
    end_date: Optional[date] = None
    sponsor: Optional[str] = None
    budget: Optional[Decimal] = None
    website_url: Optional[str] = None
    title: str = Field(min_length=1)
    title_en: Optional[str] = None
    abstract: Optional[str] = None
    abstract_en: Optional[str] = None
    visible: bool = True


class ProjectUpdate(BaseModel):
    code: Optional[str] = None
    start_date: Optional[date] = None
    end_date: Optional[date] = None
    sponsor: Optional[str] = None
    budget: Optional[Decimal] = None
    website_url: Optional[str] = None
    title: Optional[str] = Field(default=None, min_length=1)
    title_en: Optional[str] = None
    abstract: Optional[str] = None
    abstract_en: Optional[str] = None
    visible: Optional[bool] = None


# ---------------------------------------------------------
# ACADEMIC
# ---------------------------------------------------------
class ProgramCreate(BaseModel):
    code: str = Field(min_length=1)
    level: ProgramLevel = ProgramLevel.Bachelor
    website_url: Optional[str] = None
    name: str = Field(min_length=1)
    name_en: Optional[str] = None
    description: Optional[str] = None
    description_en: Optional[str] = None
    sort_order: int = 0
    visible: bool = True


class ProgramUpdate(BaseModel):
    code: Optional[str] = Field(default=None, min_length=1)
    level: Optional[ProgramLevel] = None
    website_url: Optional[str] = None
    name: Optional[str] = Field(default=None, min_length=1)
    name_en: Optional[str] = None
    description: Optional[str] = None
    description_en: Optional[str] = None
    sort_order: Optional[int] = None
    visible: Optional[bool] = None


class CourseCreate(BaseModel):
    code: str = Field(min_length=1)
    credit: Optional[int] = None
    hours: Optional[int] = None
    url: Optional[str] = None
    name: str = Field(min_length=1)
    name_en: Optional[str] = None
    description: Optional[str] = None
    description_en: Optional[str] = None
    visible: bool = True


class CourseUpdate(BaseModel):
    code: Optional[str] = Field(default=None, min_length=1)
    credit: Optional[int] = None
    hours: Optional[int] = None
    url: Optional[str] = None
    name: Optional[str] = Field(default=None, min_length=1)
    name_en: Optional[str] = None
    description: Optional[str] = None
    description_en: Optional[str] = None
    visible: Optional[bool] = None
