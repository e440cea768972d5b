from pydantic import BaseModel, EmailStr
from typing import Optional

from portal.schemas.user import UserRead


# -------------------------------------------------------------------
# LOGIN REQUEST
# -------------------------------------------------------------------
class LoginRequest(BaseModel):
    email: EmailStr
    password: str

    class Config:
        json_schema_extra = {
            "examples": [
                {"email": "admin@dept.edu", "password": "password123"}
            ]
        }


# -------------------------------------------------------------------
# TOKEN + USER DETAILS (login response)
# -------------------------------------------------------------------
class TokenWithUser(BaseModel):
    access_token: str
    token_type: str = "bearer"
    expires_in: Optional[int] = None
    user: UserRead


# -------------------------------------------------------------------
# CURRENT SESSION
# -------------------------------------------------------------------
class Me(BaseModel):
    user: UserRead
    teacher_id: Optional[int] = None
