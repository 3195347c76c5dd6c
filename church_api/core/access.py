"""
Membership checks shared by route gating and the member authorizer.

Role-based elevation lives here and only here: callers ask ``is_elevated``
instead of comparing role strings.
"""

from collections.abc import Iterable

from church_api.core.permission_catalog import (
    ALL_PERMISSIONS,
    MANAGE_PERMISSIONS,
    MEMBERS_MANAGE,
    PERMISSION_MANAGE,
)
from church_api.core.exceptions import UnknownPermissionError
from church_api.core.role_hierarchy import is_elevated_role, parse_role
from church_api.models.member_context import ActorContext
from church_api.models.role import MemberRole

MEMBER_MANAGEMENT_PERMISSIONS = (MEMBERS_MANAGE, MANAGE_PERMISSIONS)
PERMISSION_ASSIGNMENT_PERMISSIONS = (PERMISSION_MANAGE, MANAGE_PERMISSIONS)


def _check_known(names: Iterable[str]) -> None:
    unknown = sorted(set(names) - ALL_PERMISSIONS)
    if unknown:
        raise UnknownPermissionError(unknown)


def has_permission(actor: ActorContext, permission_name: str) -> bool:
    """
    Check if the actor holds a materialized permission.

    Raises:
        UnknownPermissionError: If the name is not part of the catalog
    """
    _check_known([permission_name])
    return permission_name in actor.permissions


def has_any_permission(actor: ActorContext, permission_names: Iterable[str]) -> bool:
    names = list(permission_names)
    _check_known(names)
    return any(name in actor.permissions for name in names)


def has_any_role(actor: ActorContext, allowed_roles: Iterable[MemberRole | str]) -> bool:
    return actor.role in {parse_role(r) for r in allowed_roles}


def is_elevated(actor: ActorContext) -> bool:
    """True for ADMINGERAL and ADMINFILIAL actors."""
    return is_elevated_role(actor.role)


def can_manage_members(actor: ActorContext) -> bool:
    """Elevated actors, or anyone holding members_manage / MANAGE_PERMISSIONS."""
    return is_elevated(actor) or has_any_permission(actor, MEMBER_MANAGEMENT_PERMISSIONS)


def can_assign_permissions(actor: ActorContext) -> bool:
    """Elevated actors, or anyone holding permission_manage / MANAGE_PERMISSIONS."""
    return is_elevated(actor) or has_any_permission(actor, PERMISSION_ASSIGNMENT_PERMISSIONS)


def can_see_sensitive_fields(actor: ActorContext, target_id: int) -> bool:
    """Email, phone and address are visible to managers and to the member itself."""
    return actor.member_id == target_id or is_elevated(actor) or has_permission(actor, MEMBERS_MANAGE)
