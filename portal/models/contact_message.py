# portal/models/contact_message.py

from datetime import datetime
from sqlmodel import Field
from sqlalchemy import Column, Text
from typing import Optional

from portal.models.base import TimestampMixin
from portal.models.enums import ContactMessageStatus, enum_column


class ContactMessage(TimestampMixin, table=True):
    __tablename__ = "contact_messages"

    id: Optional[int] = Field(default=None, primary_key=True)
    locale: Optional[str] = Field(default=None, max_length=10)
    name: str = Field(nullable=False)
    email: str = Field(nullable=False)
    subject: Optional[str] = None
    message: str = Field(sa_column=Column(Text, nullable=False))
    file_url: Optional[str] = None

    status: ContactMessageStatus = Field(
        default=ContactMessageStatus.New,
        sa_column=enum_column(ContactMessageStatus, "contact_message_status", index=True)
    )
    processed_by: Optional[int] = Field(default=None, foreign_key="users.id")
    processed_at: Optional[datetime] = None
