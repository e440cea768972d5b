# portal/core/policies.py
"""
Authorization engine.

Every permission is a ``Rule``: a minimum role plus an optional predicate
over (actor, resource). ``can()`` evaluates them in a fixed order:

    1. no rule for (kind, action)            -> deny
    2. actor is admin                        -> permit, unless an
                                                ADMIN_CARVE_OUTS entry matches
    3. actor ranks below the rule's min role -> deny
    4. rule has a predicate                  -> predicate result
    5. otherwise                             -> permit

The engine is pure: callers load ownership and membership data and pass it
in through ``Actor`` / ``Resource``.
"""

import re
from dataclasses import dataclass, field
from enum import Enum
from typing import Callable, Dict, FrozenSet, Iterable, Optional, Tuple

from loguru import logger

from portal.core.exceptions import AuthorizationDenied
from portal.core.roles import has_role_or_higher, is_admin, normalize_role
from portal.models.enums import UserRole, PostStatus


class ResourceKind(str, Enum):
    Post = "post"
    PostCategory = "post_category"
    Lab = "lab"
    User = "user"
    Staff = "staff"
    Teacher = "teacher"
    Publication = "publication"
    Project = "project"
    Program = "program"
    Course = "course"
    Attachment = "attachment"
    ContactMessage = "contact_message"


# ------------------------------------------------------------
# Inputs
# ------------------------------------------------------------
@dataclass(frozen=True)
class Actor:
    id: int
    role: str
    teacher_id: Optional[int] = None

    @classmethod
    def from_user(cls, user, teacher_id: Optional[int] = None) -> "Actor":
        return cls(id=user.id, role=normalize_role(user.role), teacher_id=teacher_id)


@dataclass(frozen=True)
class Resource:
    id: Optional[int] = None
    owner_id: Optional[int] = None
    member_ids: FrozenSet[int] = field(default_factory=frozenset)
    status: Optional[str] = None
    # role of the target account, for user resources
    role: Optional[str] = None

    @classmethod
    def of_post(cls, post) -> "Resource":
        return cls(id=post.id, owner_id=post.created_by, status=_value(post.status))

    @classmethod
    def of_lab(cls, lab, member_ids: Iterable[int]) -> "Resource":
        return cls(id=lab.id, member_ids=frozenset(member_ids))

    @classmethod
    def of_user(cls, user) -> "Resource":
        return cls(id=user.id, owner_id=user.id, role=normalize_role(user.role))

    @classmethod
    def of_staff(cls, staff) -> "Resource":
        return cls(id=staff.id, owner_id=staff.user_id)


def _value(v):
    return v.value if isinstance(v, Enum) else v


def normalize_action(action: str) -> str:
    """'forceDelete' -> 'force_delete'; snake_case passes through."""
    return re.sub(r"(?<!^)(?=[A-Z])", "_", action.strip()).lower()


# ------------------------------------------------------------
# Predicates
# ------------------------------------------------------------
Check = Callable[[Actor, Resource], bool]


def owns(actor: Actor, resource: Resource) -> bool:
    return resource.owner_id is not None and resource.owner_id == actor.id


def is_self(actor: Actor, resource: Resource) -> bool:
    return resource.id is not None and resource.id == actor.id


def is_lab_member(actor: Actor, lab: Resource) -> bool:
    """Only a teacher whose linked profile is registered on the lab."""
    if normalize_role(actor.role) != UserRole.Teacher.value:
        return False
    return actor.teacher_id is not None and actor.teacher_id in lab.member_ids


def post_is_visible(actor: Actor, post: Resource) -> bool:
    if post.status == PostStatus.Published.value:
        return True
    return has_role_or_higher(actor.role, UserRole.Teacher) and owns(actor, post)


def self_or_managed_user(actor: Actor, target: Resource) -> bool:
    if is_self(actor, target):
        return True
    return (
        has_role_or_higher(actor.role, UserRole.Teacher)
        and normalize_role(target.role) == UserRole.User.value
    )


@dataclass(frozen=True)
class Rule:
    min_role: UserRole
    check: Optional[Check] = None


def _rules(min_role: UserRole, actions: Iterable[str], check: Optional[Check] = None) -> Dict[str, Rule]:
    return {a: Rule(min_role, check) for a in actions}


# ==========================================================
# RULE TABLES
# ==========================================================
POST_RULES: Dict[str, Rule] = {
    "view_any": Rule(UserRole.User),
    "view": Rule(UserRole.User, post_is_visible),
    "create": Rule(UserRole.Teacher),
    **_rules(UserRole.Teacher, ("update", "delete", "restore"), owns),
    **_rules(UserRole.Admin, (
        "force_delete", "publish", "unpublish", "manage_categories",
        "bulk_operations", "schedule_post", "moderate_comments",
    )),
    "view_analytics": Rule(UserRole.Teacher),
}

LAB_RULES: Dict[str, Rule] = {
    **_rules(UserRole.User, ("view_any", "view")),
    **_rules(UserRole.Admin, ("create", "delete", "restore", "force_delete")),
    **_rules(UserRole.Teacher, ("update", "manage_members", "view_analytics", "manage_posts"), is_lab_member),
}

USER_RULES: Dict[str, Rule] = {
    "view_any": Rule(UserRole.Teacher),
    "view": Rule(UserRole.User, self_or_managed_user),
    "update": Rule(UserRole.User, self_or_managed_user),
    **_rules(UserRole.Admin, (
        "create", "delete", "force_delete", "restore", "assign_role",
        "manage_teacher_assignments", "access_admin_dashboard", "suspend",
    )),
    **_rules(UserRole.User, ("view_settings", "update_settings"), is_self),
    "access_manage_dashboard": Rule(UserRole.Teacher),
}

STAFF_RULES: Dict[str, Rule] = {
    **_rules(UserRole.Teacher, ("view_any", "view")),
    **_rules(UserRole.Admin, ("create", "delete", "restore", "force_delete", "assign_owner")),
    "update": Rule(UserRole.Teacher, owns),
}

PUBLICATION_RULES: Dict[str, Rule] = {
    **_rules(UserRole.Teacher, ("view_any", "view", "create", "update", "delete")),
    **_rules(UserRole.Admin, ("restore", "force_delete")),
}

# Inbox of the public contact form
CONTACT_MESSAGE_RULES: Dict[str, Rule] = _rules(
    UserRole.Admin, ("view_any", "view", "update", "delete")
)

# Public content maintained from the admin panel only
ADMIN_MANAGED_RULES: Dict[str, Rule] = {
    **_rules(UserRole.User, ("view_any", "view")),
    **_rules(UserRole.Admin, ("create", "update", "delete", "restore", "force_delete")),
}

POLICIES: Dict[ResourceKind, Dict[str, Rule]] = {
    ResourceKind.Post: POST_RULES,
    ResourceKind.Lab: LAB_RULES,
    ResourceKind.User: USER_RULES,
    ResourceKind.Staff: STAFF_RULES,
    ResourceKind.Publication: PUBLICATION_RULES,
    ResourceKind.PostCategory: ADMIN_MANAGED_RULES,
    ResourceKind.Teacher: ADMIN_MANAGED_RULES,
    ResourceKind.Project: ADMIN_MANAGED_RULES,
    ResourceKind.Program: ADMIN_MANAGED_RULES,
    ResourceKind.Course: ADMIN_MANAGED_RULES,
    ResourceKind.Attachment: ADMIN_MANAGED_RULES,
    ResourceKind.ContactMessage: CONTACT_MESSAGE_RULES,
}


# ==========================================================
# ADMIN CARVE-OUTS
# ==========================================================
# The only places an admin is refused. Each predicate returns True when
# the admin must be denied.
def _other_admin(actor: Actor, target: Resource) -> bool:
    return normalize_role(target.role) == UserRole.Admin.value and not is_self(actor, target)


def _self_or_admin(actor: Actor, target: Resource) -> bool:
    return is_self(actor, target) or normalize_role(target.role) == UserRole.Admin.value


def _already_admin(actor: Actor, target: Resource) -> bool:
    return normalize_role(target.role) == UserRole.Admin.value


ADMIN_CARVE_OUTS: Dict[Tuple[ResourceKind, str], Check] = {
    (ResourceKind.User, "update"): _other_admin,
    (ResourceKind.User, "delete"): _self_or_admin,
    (ResourceKind.User, "force_delete"): _self_or_admin,
    (ResourceKind.User, "suspend"): _self_or_admin,
    (ResourceKind.User, "assign_role"): _already_admin,
}


# ==========================================================
# DECISION
# ==========================================================
def can(actor: Actor, action: str, kind, resource: Optional[Resource] = None) -> bool:
    try:
        kind = ResourceKind(_value(kind))
    except ValueError:
        return False

    action = normalize_action(action)
    rule = POLICIES[kind].get(action)
    if rule is None:
        return False

    if is_admin(actor.role):
        carve_out = ADMIN_CARVE_OUTS.get((kind, action))
        if carve_out is not None and resource is not None and carve_out(actor, resource):
            return False
        return True

    if not has_role_or_higher(actor.role, rule.min_role):
        return False

    if rule.check is not None:
        # predicates need a concrete record
        if resource is None:
            return False
        return rule.check(actor, resource)

    return True


def authorize(actor: Actor, action: str, kind, resource: Optional[Resource] = None) -> None:
    """Same as ``can`` but raises AuthorizationDenied instead of returning False."""
    if not can(actor, action, kind, resource):
        logger.info(
            f"Denied {normalize_action(action)} on {_value(kind)}"
            f"{'#' + str(resource.id) if resource and resource.id else ''} "
            f"for user {actor.id} ({actor.role})"
        )
        raise AuthorizationDenied(normalize_action(action), str(_value(kind)))
