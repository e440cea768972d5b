# portal/api/endpoints/users.py

from typing import List, Literal, Optional
from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy.ext.asyncio import AsyncSession

from portal.api.deps import get_db_session, get_current_actor
from portal.core.exceptions import NotFound
from portal.core.policies import Actor, Resource, ResourceKind, authorize
from portal.core.roles import is_admin
from portal.models.user import User
from portal.models.enums import UserRole
from portal.schemas.user import UserCreate, UserRead, UserUpdate
from portal.services import lifecycle_service
from portal.services.audit_service import log_activity
from portal.services.user_service import (
    create_user,
    get_user_by_email,
    get_user_by_id,
    list_users,
    purge_user,
    update_user,
)

router = APIRouter(prefix="/api/users", tags=["Users"])


async def _target(session: AsyncSession, user_id: int, with_trashed: bool = False) -> User:
    user = await get_user_by_id(session, user_id, with_trashed=with_trashed)
    if not user:
        raise NotFound("User not found")
    return user


# -------------------------------------------------------------------
# List users (teachers see the plain accounts they manage)
# -------------------------------------------------------------------
@router.get("/", response_model=List[UserRead])
async def list_all_users(
    role: Optional[UserRole] = None,
    trashed: Optional[Literal["with", "only"]] = None,
    session: AsyncSession = Depends(get_db_session),
    actor: Actor = Depends(get_current_actor),
):
    authorize(actor, "view_any", ResourceKind.User)

    if is_admin(actor.role):
        return await list_users(session, trashed=trashed, role=role)
    return await list_users(session, role=role, managed_only=True)


# -------------------------------------------------------------------
# Create user (Admin only)
# -------------------------------------------------------------------
@router.post("/", response_model=UserRead, status_code=status.HTTP_201_CREATED)
async def create_new_user(
    data: UserCreate,
    session: AsyncSession = Depends(get_db_session),
    actor: Actor = Depends(get_current_actor),
):
    authorize(actor, "create", ResourceKind.User)

    if await get_user_by_email(session, data.email):
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="Email already registered")

    try:
        user = await create_user(session, **data.model_dump())
    except ValueError as e:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(e))

    await log_activity("create_user", actor.id, "user", user.id, details={"role": user.role.value})
    return user


# -------------------------------------------------------------------
# Read one user
# -------------------------------------------------------------------
@router.get("/{user_id}", response_model=UserRead)
async def read_user(
    user_id: int,
    session: AsyncSession = Depends(get_db_session),
    actor: Actor = Depends(get_current_actor),
):
    user = await _target(session, user_id, with_trashed=is_admin(actor.role))
    authorize(actor, "view", ResourceKind.User, Resource.of_user(user))
    return user


# -------------------------------------------------------------------
# Update user (self, managed account, or admin)
# -------------------------------------------------------------------
@router.patch("/{user_id}", response_model=UserRead)
async def update_existing_user(
    user_id: int,
    data: UserUpdate,
    session: AsyncSession = Depends(get_db_session),
    actor: Actor = Depends(get_current_actor),
):
    user = await _target(session, user_id)
    target = Resource.of_user(user)
    authorize(actor, "update", ResourceKind.User, target)

    changes = data.model_dump(exclude_unset=True, exclude_none=True)
    previous_role = user.role.value

    if "role" in changes and changes["role"] != user.role:
        authorize(actor, "assign_role", ResourceKind.User, target)
    if "status" in changes and changes["status"] != user.status:
        authorize(actor, "suspend", ResourceKind.User, target)

    try:
        user = await update_user(session, user, **changes)
    except ValueError as e:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(e))

    if user.role.value != previous_role:
        await log_activity(
            "assign_role", actor.id, "user", user.id,
            details={"from": previous_role, "to": user.role.value},
        )
    return user


# -------------------------------------------------------------------
# Trash / restore / purge
# -------------------------------------------------------------------
@router.delete("/{user_id}")
async def delete_user(
    user_id: int,
    session: AsyncSession = Depends(get_db_session),
    actor: Actor = Depends(get_current_actor),
):
    user = await _target(session, user_id)
    authorize(actor, "delete", ResourceKind.User, Resource.of_user(user))

    await lifecycle_service.soft_delete(session, user)
    await log_activity("delete_user", actor.id, "user", user.id, details={"email": user.email})
    return {"detail": "User moved to trash"}


@router.post("/{user_id}/restore", response_model=UserRead)
async def restore_user(
    user_id: int,
    session: AsyncSession = Depends(get_db_session),
    actor: Actor = Depends(get_current_actor),
):
    user = await _target(session, user_id, with_trashed=True)
    authorize(actor, "restore", ResourceKind.User, Resource.of_user(user))

    await lifecycle_service.restore(session, user)
    await log_activity("restore_user", actor.id, "user", user.id, details={"email": user.email})
    return user


@router.delete("/{user_id}/force")
async def force_delete_user(
    user_id: int,
    session: AsyncSession = Depends(get_db_session),
    actor: Actor = Depends(get_current_actor),
):
    user = await _target(session, user_id, with_trashed=True)
    authorize(actor, "force_delete", ResourceKind.User, Resource.of_user(user))

    email = user.email
    await purge_user(session, user)
    await log_activity("force_delete_user", actor.id, "user", user_id, details={"email": email})
    return {"detail": "User permanently deleted"}
