# portal/core/exceptions.py

from typing import Optional
from fastapi import HTTPException, status


class NotFound(HTTPException):
    def __init__(self, detail: str = "Not found"):
        super().__init__(status_code=status.HTTP_404_NOT_FOUND, detail=detail)


class AuthorizationDenied(HTTPException):
    """A policy check refused the action."""

    def __init__(self, action: str, kind: str, detail: Optional[str] = None):
        self.action = action
        self.kind = kind
        super().__init__(
            status_code=status.HTTP_403_FORBIDDEN,
            detail=detail or "This action is unauthorized."
        )


class LifecycleError(HTTPException):
    """Illegal trash/restore/purge transition (e.g. restoring an active record)."""

    def __init__(self, detail: str):
        super().__init__(status_code=status.HTTP_409_CONFLICT, detail=detail)


# ------------------------------------------------------------
# Route gate failures, rendered by handlers in portal.main
# ------------------------------------------------------------
class LoginRequired(HTTPException):
    def __init__(self, required_role: str, wants_json: bool):
        self.required_role = required_role
        self.wants_json = wants_json
        super().__init__(status_code=status.HTTP_403_FORBIDDEN, detail="Unauthenticated.")


class InsufficientRole(HTTPException):
    def __init__(self, required_role: str, user_role: str, wants_json: bool):
        self.required_role = required_role
        self.user_role = user_role
        self.wants_json = wants_json
        super().__init__(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="Insufficient privileges to access this resource."
        )


# ------------------------------------------------------------
# Storage
# ------------------------------------------------------------
class StorageFileNotFound(Exception):
    def __init__(self, path: str):
        self.path = path
        super().__init__(f"File not found in public storage: {path}")


class StorageUnavailable(Exception):
    """The storage backend could not be reached or answered with an error."""

    def __init__(self, path: str):
        self.path = path
        super().__init__(f"Public storage unavailable while looking up: {path}")
