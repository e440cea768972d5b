# portal/core/roles.py

from portal.models.enums import UserRole

# ==========================================================
# ROLE HIERARCHY
# ==========================================================
# Higher rank inherits every permission of a lower rank.
ROLE_RANK = {
    UserRole.Admin: 3,
    UserRole.Teacher: 2,
    UserRole.User: 1,
}


def normalize_role(role) -> str:
    if isinstance(role, UserRole):
        return role.value
    return str(role or "").strip().lower()


def role_level(role) -> int:
    """Rank of a role; unknown or empty roles rank 0."""
    try:
        return ROLE_RANK[UserRole(normalize_role(role))]
    except ValueError:
        return 0


def has_role_or_higher(actor_role, required_role) -> bool:
    return role_level(actor_role) >= role_level(required_role)


def is_admin(role) -> bool:
    return normalize_role(role) == UserRole.Admin.value
