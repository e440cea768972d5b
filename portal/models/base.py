# portal/models/base.py

from datetime import datetime
from typing import Optional

from sqlmodel import SQLModel, Field


class TimestampMixin(SQLModel):
    created_at: datetime = Field(default_factory=datetime.utcnow, nullable=False)
    updated_at: datetime = Field(default_factory=datetime.utcnow, nullable=False)


class SoftDeleteMixin(TimestampMixin):
    # NULL while the record is active, set when it is moved to the trash
    deleted_at: Optional[datetime] = Field(default=None, index=True)

    @property
    def trashed(self) -> bool:
        return self.deleted_at is not None
