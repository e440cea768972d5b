# portal/api/endpoints/manage.py
#
# Back-office area. Every route is gated by role rank; browsers without a
# session are redirected to the login page.

from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy.ext.asyncio import AsyncSession

from portal.api.deps import get_db_session
from portal.core.policies import Resource, ResourceKind, authorize, can
from portal.core.rbac import require_admin, require_teacher, require_user
from portal.core.roles import is_admin
from portal.models.user import User
from portal.schemas.lab import LabRead
from portal.schemas.user import UserRead, UserUpdate
from portal.services import lab_service
from portal.services.dashboard_service import admin_dashboard_data
from portal.services.user_service import build_actor, update_user

router = APIRouter(prefix="/manage", tags=["Manage"])


@router.get("/dashboard")
async def manage_dashboard(
    current_user: User = Depends(require_user),
    session: AsyncSession = Depends(get_db_session),
):
    actor = await build_actor(session, current_user)
    return {
        "user": UserRead.model_validate(current_user),
        "teacher_id": actor.teacher_id,
        "sections": {
            "admin": can(actor, "access_admin_dashboard", ResourceKind.User),
            "teacher": can(actor, "access_manage_dashboard", ResourceKind.User),
            "profile": True,
        },
    }


# -------------------------------------------------------------------
# Admin area
# -------------------------------------------------------------------
@router.get("/admin/dashboard")
async def admin_dashboard(
    current_user: User = Depends(require_admin),
    session: AsyncSession = Depends(get_db_session),
):
    actor = await build_actor(session, current_user)
    authorize(actor, "access_admin_dashboard", ResourceKind.User)
    return await admin_dashboard_data(session)


# -------------------------------------------------------------------
# Teacher area
# -------------------------------------------------------------------
@router.get("/teacher/labs")
async def teacher_labs(
    current_user: User = Depends(require_teacher),
    session: AsyncSession = Depends(get_db_session),
):
    actor = await build_actor(session, current_user)

    if is_admin(actor.role):
        labs = await lab_service.list_labs(session)
    elif actor.teacher_id is None:
        labs = []
    else:
        labs = await lab_service.labs_for_teacher(session, actor.teacher_id)

    return [LabRead.model_validate(lab) for lab in labs]


# -------------------------------------------------------------------
# Own profile / settings
# -------------------------------------------------------------------
@router.get("/user/profile", response_model=UserRead)
async def my_profile(
    current_user: User = Depends(require_user),
    session: AsyncSession = Depends(get_db_session),
):
    actor = await build_actor(session, current_user)
    authorize(actor, "view_settings", ResourceKind.User, Resource.of_user(current_user))
    return current_user


@router.patch("/user/profile", response_model=UserRead)
async def update_my_profile(
    data: UserUpdate,
    current_user: User = Depends(require_user),
    session: AsyncSession = Depends(get_db_session),
):
    actor = await build_actor(session, current_user)
    authorize(actor, "update_settings", ResourceKind.User, Resource.of_user(current_user))

    # role and status are never self-service
    changes = data.model_dump(exclude_unset=True, exclude_none=True, exclude={"role", "status"})
    try:
        return await update_user(session, current_user, **changes)
    except ValueError as e:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(e))
