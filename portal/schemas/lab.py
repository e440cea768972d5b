from datetime import datetime
from typing import List, Optional
from pydantic import BaseModel, ConfigDict, Field, model_validator


class LabCreate(BaseModel):
    code: str = Field(min_length=1, max_length=50)
    name: str = Field(min_length=1)
    name_en: Optional[str] = None
    description: Optional[str] = None
    description_en: Optional[str] = None
    website_url: Optional[str] = None
    email: Optional[str] = None
    phone: Optional[str] = None
    cover_image_url: Optional[str] = None
    sort_order: int = 0
    visible: bool = True
    teacher_ids: List[int] = []


class LabUpdate(BaseModel):
    code: Optional[str] = None
    name: Optional[str] = None
    name_en: Optional[str] = None
    description: Optional[str] = None
    description_en: Optional[str] = None
    website_url: Optional[str] = None
    email: Optional[str] = None
    phone: Optional[str] = None
    cover_image_url: Optional[str] = None
    sort_order: Optional[int] = None
    visible: Optional[bool] = None


class LabRead(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    code: str
    name: str
    name_en: Optional[str] = None
    description: Optional[str] = None
    description_en: Optional[str] = None
    website_url: Optional[str] = None
    email: Optional[str] = None
    phone: Optional[str] = None
    cover_image_url: Optional[str] = None
    sort_order: int
    visible: bool
    created_at: datetime
    deleted_at: Optional[datetime] = None

    @model_validator(mode="after")
    def fill_translations(self):
        self.name_en = self.name_en or self.name
        self.description_en = self.description_en or self.description
        return self


class LabMembersUpdate(BaseModel):
    teacher_ids: List[int]


class LabMember(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    user_id: Optional[int] = None
    name: str
    name_en: Optional[str] = None
    title: Optional[str] = None
    email: Optional[str] = None
