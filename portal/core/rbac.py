# portal/core/rbac.py

from typing import Optional
from fastapi import Depends, Request
from loguru import logger

from portal.api.deps import get_optional_user
from portal.core.exceptions import LoginRequired, InsufficientRole
from portal.core.roles import has_role_or_higher, normalize_role
from portal.models.user import User
from portal.models.enums import UserRole


def wants_json(request: Request) -> bool:
    """API-style request: asks for JSON, is an XHR, or targets /api/."""
    accept = request.headers.get("accept", "").lower()
    if "json" in accept:
        return True
    if request.headers.get("x-requested-with", "").lower() == "xmlhttprequest":
        return True
    return request.url.path.startswith("/api/")


def require_role(role):
    """
    Route gate: the current user must hold ``role`` or a higher one.

    - not signed in  -> LoginRequired (login redirect, or 403 JSON for APIs)
    - rank too low   -> InsufficientRole (403, JSON body for APIs)

    An unrecognised role string ranks 0, so every signed-in user passes it.
    """
    required = normalize_role(role)

    async def role_checker(
        request: Request,
        current_user: Optional[User] = Depends(get_optional_user),
    ) -> User:
        if current_user is None:
            raise LoginRequired(required, wants_json(request))

        if not has_role_or_higher(current_user.role, required):
            user_role = normalize_role(current_user.role)
            logger.warning(
                f"User {current_user.id} ({user_role}) blocked from {request.url.path}, needs {required}"
            )
            raise InsufficientRole(required, user_role, wants_json(request))

        return current_user

    return role_checker


# ------------------------------------------------------------
# Exposed dependencies for routers
# ------------------------------------------------------------
require_admin = require_role(UserRole.Admin)
require_teacher = require_role(UserRole.Teacher)
require_user = require_role(UserRole.User)
