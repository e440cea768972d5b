from datetime import datetime
from typing import Optional
from pydantic import BaseModel, ConfigDict

from portal.models.enums import AttachableType, AttachmentType


class AttachmentCreate(BaseModel):
    attachable_type: AttachableType
    attachable_id: int
    type: Optional[AttachmentType] = None
    title: Optional[str] = None
    file_url: Optional[str] = None
    external_url: Optional[str] = None
    mime_type: Optional[str] = None
    file_size: Optional[int] = None
    alt_text: Optional[str] = None
    alt_text_en: Optional[str] = None
    sort_order: int = 0


class AttachmentUpdate(BaseModel):
    type: Optional[AttachmentType] = None
    title: Optional[str] = None
    file_url: Optional[str] = None
    external_url: Optional[str] = None
    mime_type: Optional[str] = None
    file_size: Optional[int] = None
    alt_text: Optional[str] = None
    alt_text_en: Optional[str] = None
    sort_order: Optional[int] = None


class AttachmentRead(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    attachable_type: AttachableType
    attachable_id: int
    type: AttachmentType
    title: Optional[str] = None
    file_url: Optional[str] = None
    external_url: Optional[str] = None
    mime_type: Optional[str] = None
    file_size: Optional[int] = None
    alt_text: Optional[str] = None
    alt_text_en: Optional[str] = None
    sort_order: int
    created_at: datetime
    deleted_at: Optional[datetime] = None
