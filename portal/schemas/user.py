from datetime import datetime
from typing import Optional
from pydantic import BaseModel, EmailStr, Field
from portal.models.enums import UserRole, UserStatus


# ---------------------------------------------------------
# BASE
# ---------------------------------------------------------
class UserBase(BaseModel):
    name: str
    email: EmailStr


# ---------------------------------------------------------
# CREATE USER (Admin creates any user)
# ---------------------------------------------------------
class UserCreate(UserBase):
    password: str = Field(min_length=8)
    role: UserRole = UserRole.User
    status: UserStatus = UserStatus.Active
    locale: str = "zh-TW"


# ---------------------------------------------------------
# UPDATE USER (admin, manager or self)
# ---------------------------------------------------------
class UserUpdate(BaseModel):
    name: Optional[str] = None
    email: Optional[EmailStr] = None
    password: Optional[str] = Field(default=None, min_length=8)
    role: Optional[UserRole] = None
    status: Optional[UserStatus] = None
    locale: Optional[str] = None


# ---------------------------------------------------------
# READ USER (response)
# ---------------------------------------------------------
class UserRead(UserBase):
    id: int
    role: UserRole
    status: UserStatus
    locale: str
    created_at: datetime
    deleted_at: Optional[datetime] = None

    class Config:
        from_attributes = True
