# portal/models/attachment.py

from sqlmodel import Field
from typing import Optional

from portal.models.base import SoftDeleteMixin
from portal.models.enums import AttachmentType, AttachableType, enum_column


class Attachment(SoftDeleteMixin, table=True):
    __tablename__ = "attachments"

    id: Optional[int] = Field(default=None, primary_key=True)

    # polymorphic owner: (kind, id) pair resolved through portal.models.registry
    attachable_type: AttachableType = Field(
        sa_column=enum_column(AttachableType, "attachable_type", index=True)
    )
    attachable_id: int = Field(index=True)

    type: AttachmentType = Field(
        default=AttachmentType.Document,
        sa_column=enum_column(AttachmentType, "attachment_type")
    )
    title: Optional[str] = None
    file_url: Optional[str] = None
    external_url: Optional[str] = None
    mime_type: Optional[str] = None
    file_size: Optional[int] = None
    alt_text: Optional[str] = None
    alt_text_en: Optional[str] = None
    sort_order: int = Field(default=0)
