# portal/api/deps.py

from typing import AsyncGenerator, Optional
import jwt
from fastapi import Depends, HTTPException, Request, status
from fastapi.security import HTTPBearer, HTTPAuthorizationCredentials
from sqlalchemy.ext.asyncio import AsyncSession

from portal.core.security import decode_token
from portal.core.database import get_session
from portal.core.policies import Actor
from portal.services.user_service import get_user_by_id, build_actor
from portal.models.user import User
from portal.models.enums import UserStatus


# ------------------------------------------------------------
# HTTP Bearer Authentication (cookie fallback for browser pages)
# ------------------------------------------------------------
bearer_scheme = HTTPBearer(auto_error=False)


# ------------------------------------------------------------
# DB Session
# ------------------------------------------------------------
async def get_db_session() -> AsyncGenerator[AsyncSession, None]:
    async for session in get_session():
        yield session


def _extract_token(request: Request, credentials: Optional[HTTPAuthorizationCredentials]) -> Optional[str]:
    if credentials:
        return credentials.credentials
    return request.cookies.get("access_token")


async def _load_user(session: AsyncSession, token: str) -> Optional[User]:
    try:
        payload = decode_token(token)
    except jwt.InvalidTokenError:
        return None

    user_id = payload.get("sub")
    if not user_id or not str(user_id).isdigit():
        return None

    user = await get_user_by_id(session, int(user_id))
    if not user or user.status == UserStatus.Suspended:
        return None
    return user


# ------------------------------------------------------------
# Optional user (public pages, route gates)
# ------------------------------------------------------------
async def get_optional_user(
    request: Request,
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(bearer_scheme),
    session: AsyncSession = Depends(get_db_session),
) -> Optional[User]:
    token = _extract_token(request, credentials)
    if not token:
        return None
    return await _load_user(session, token)


# ------------------------------------------------------------
# Get current logged-in user from JWT
# ------------------------------------------------------------
async def get_current_user(
    request: Request,
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(bearer_scheme),
    session: AsyncSession = Depends(get_db_session),
) -> User:
    token = _extract_token(request, credentials)
    if not token:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Not authenticated",
            headers={"WWW-Authenticate": "Bearer"},
        )

    user = await _load_user(session, token)
    if not user:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Could not validate credentials",
            headers={"WWW-Authenticate": "Bearer"},
        )

    return user


# ------------------------------------------------------------
# Authorization actor (user + linked teacher profile)
# ------------------------------------------------------------
async def get_current_actor(
    current_user: User = Depends(get_current_user),
    session: AsyncSession = Depends(get_db_session),
) -> Actor:
    return await build_actor(session, current_user)


async def get_optional_actor(
    current_user: Optional[User] = Depends(get_optional_user),
    session: AsyncSession = Depends(get_db_session),
) -> Optional[Actor]:
    if current_user is None:
        return None
    return await build_actor(session, current_user)
