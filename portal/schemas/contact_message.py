from datetime import datetime
from typing import Optional
from pydantic import BaseModel, ConfigDict, EmailStr, Field

from portal.models.enums import ContactMessageStatus


# ---------------------------------------------------------
# PUBLIC CONTACT FORM
# ---------------------------------------------------------
class ContactMessageCreate(BaseModel):
    name: str = Field(min_length=1, max_length=120)
    email: EmailStr
    subject: Optional[str] = Field(default=None, max_length=200)
    message: str = Field(min_length=1, max_length=5000)
    locale: Optional[str] = None
    file_url: Optional[str] = None


# ---------------------------------------------------------
# ADMIN PROCESSING
# ---------------------------------------------------------
class ContactMessageStatusUpdate(BaseModel):
    status: ContactMessageStatus


class ContactMessageRead(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    locale: Optional[str] = None
    name: str
    email: str
    subject: Optional[str] = None
    message: str
    file_url: Optional[str] = None
    status: ContactMessageStatus
    processed_by: Optional[int] = None
    processed_at: Optional[datetime] = None
    created_at: datetime
