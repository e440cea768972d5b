# portal/services/user_service.py

from sqlmodel import select
from sqlalchemy import update
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.exc import IntegrityError
from datetime import datetime
from typing import Optional

from portal.models.user import User
from portal.models.people import Staff, Teacher
from portal.models.post import Post
from portal.models.contact_message import ContactMessage
from portal.models.audit import AuditLog
from portal.models.enums import UserRole, UserStatus
from portal.core.policies import Actor
from portal.core.security import (
    hash_password,
    verify_password,
    create_access_token,
)
from portal.core.config import settings
from portal.schemas.auth import TokenWithUser
from portal.schemas.user import UserRead
from portal.services.lifecycle_service import purge, scoped


# ============================================================================
# FETCH USER BY EMAIL
# ============================================================================
async def get_user_by_email(session: AsyncSession, email: str) -> User | None:
    result = await session.execute(select(User).where(User.email == email.lower()))
    return result.scalar_one_or_none()


# ============================================================================
# FETCH USER BY ID (trashed accounts are skipped unless asked for)
# ============================================================================
async def get_user_by_id(session: AsyncSession, user_id: int, with_trashed: bool = False) -> User | None:
    query = select(User).where(User.id == user_id)
    if not with_trashed:
        query = query.where(User.deleted_at.is_(None))
    result = await session.execute(query)
    return result.scalar_one_or_none()


# ============================================================================
# LINKED TEACHER PROFILE
# ============================================================================
async def get_teacher_id_for_user(session: AsyncSession, user_id: int) -> Optional[int]:
    result = await session.execute(
        select(Teacher.id).where(Teacher.user_id == user_id, Teacher.deleted_at.is_(None))
    )
    return result.scalar_one_or_none()


async def build_actor(session: AsyncSession, user: User) -> Actor:
    teacher_id = await get_teacher_id_for_user(session, user.id)
    return Actor.from_user(user, teacher_id=teacher_id)


# ============================================================================
# CREATE USER
# ============================================================================
async def create_user(
    session: AsyncSession,
    name: str,
    email: str,
    password: str,
    role: UserRole = UserRole.User,
    status: UserStatus = UserStatus.Active,
    locale: str = "zh-TW",
) -> User:

    user = User(
        name=name,
        email=email.lower(),
        password_hash=hash_password(password),
        role=role,
        status=status,
        locale=locale,
    )

    session.add(user)

    try:
        await session.commit()
        await session.refresh(user)
        return user

    except IntegrityError:
        await session.rollback()
        raise ValueError("User with this email already exists")


# ============================================================================
# AUTHENTICATE
# ============================================================================
async def authenticate_user(session: AsyncSession, email: str, password: str) -> User | None:
    user = await get_user_by_email(session, email)
    if not user or user.deleted_at is not None:
        return None

    if not verify_password(password, user.password_hash):
        return None

    return user


def create_login_response(user: User) -> TokenWithUser:
    token = create_access_token(subject=user.id, data={"role": user.role.value})

    return TokenWithUser(
        access_token=token,
        expires_in=settings.ACCESS_TOKEN_EXPIRE_MINUTES * 60,
        user=UserRead.model_validate(user),
    )


# ============================================================================
# LIST USERS
# ============================================================================
async def list_users(
    session: AsyncSession,
    trashed: str | None = None,
    role: UserRole | None = None,
    managed_only: bool = False,
) -> list[User]:
    """
    trashed: None (active only), "with" (all) or "only" (trash bin).
    managed_only: plain accounts only, the ones a teacher may manage.
    """
    query = scoped(select(User), User, trashed).order_by(User.id)

    if role:
        query = query.where(User.role == role)

    if managed_only:
        query = query.where(User.role == UserRole.User)

    result = await session.execute(query)
    return result.scalars().all()


# ============================================================================
# UPDATE USER
# ============================================================================
async def update_user(
    session: AsyncSession,
    user: User,
    name: str | None = None,
    email: str | None = None,
    password: str | None = None,
    role: UserRole | None = None,
    status: UserStatus | None = None,
    locale: str | None = None,
) -> User:

    if email and email.lower() != user.email:
        dup = await session.execute(select(User).where(User.email == email.lower()))
        if dup.scalar_one_or_none():
            raise ValueError("Email already in use")
        user.email = email.lower()

    if name:
        user.name = name
    if password:
        user.password_hash = hash_password(password)
    if role:
        user.role = role
    if status:
        user.status = status
    if locale:
        user.locale = locale

    user.updated_at = datetime.utcnow()
    session.add(user)

    try:
        await session.commit()
        await session.refresh(user)
        return user

    except IntegrityError:
        await session.rollback()
        raise ValueError("Failed to update user")


# ============================================================================
# PURGE USER (irreversible)
# ============================================================================
async def purge_user(session: AsyncSession, user: User) -> None:
    """Detaches every row pointing at the account, then removes it."""
    user_id = user.id
    await session.execute(update(Teacher).where(Teacher.user_id == user_id).values(user_id=None))
    await session.execute(update(Staff).where(Staff.user_id == user_id).values(user_id=None))
    await session.execute(update(Post).where(Post.created_by == user_id).values(created_by=None))
    await session.execute(update(Post).where(Post.updated_by == user_id).values(updated_by=None))
    await session.execute(
        update(ContactMessage).where(ContactMessage.processed_by == user_id).values(processed_by=None)
    )
    await session.execute(update(AuditLog).where(AuditLog.actor_id == user_id).values(actor_id=None))
    await purge(session, user)
