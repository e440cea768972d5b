# portal/models/user.py

from sqlmodel import Field
from typing import Optional

from portal.models.base import SoftDeleteMixin
from portal.models.enums import UserRole, UserStatus, enum_column


class User(SoftDeleteMixin, table=True):
    __tablename__ = "users"

    id: Optional[int] = Field(default=None, primary_key=True)

    name: str = Field(nullable=False)
    email: str = Field(nullable=False, index=True, unique=True)
    password_hash: str = Field(nullable=False)

    role: UserRole = Field(
        default=UserRole.User,
        sa_column=enum_column(UserRole, "user_role", index=True)
    )
    status: UserStatus = Field(
        default=UserStatus.Active,
        sa_column=enum_column(UserStatus, "user_status")
    )

    locale: str = Field(default="zh-TW", max_length=10)
