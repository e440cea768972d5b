# portal/api/endpoints/auth.py

from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy.ext.asyncio import AsyncSession

from portal.api.deps import get_db_session, get_current_user
from portal.schemas.auth import LoginRequest, TokenWithUser, Me
from portal.schemas.user import UserRead
from portal.models.user import User
from portal.models.enums import UserStatus
from portal.services.user_service import (
    authenticate_user,
    create_login_response,
    get_teacher_id_for_user,
)

router = APIRouter(prefix="/api/auth", tags=["Auth"])


# -------------------------------------------------------------------
# LOGIN
# -------------------------------------------------------------------
@router.post("/login", response_model=TokenWithUser)
async def login(
    payload: LoginRequest,
    session: AsyncSession = Depends(get_db_session)
):
    user = await authenticate_user(session, payload.email, payload.password)

    if not user:
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="Invalid credentials")

    if user.status == UserStatus.Suspended:
        raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail="Account suspended")

    return create_login_response(user)


# -------------------------------------------------------------------
# CURRENT USER
# -------------------------------------------------------------------
@router.get("/me", response_model=Me)
async def me(
    current_user: User = Depends(get_current_user),
    session: AsyncSession = Depends(get_db_session),
):
    return Me(
        user=UserRead.model_validate(current_user),
        teacher_id=await get_teacher_id_for_user(session, current_user.id),
    )
