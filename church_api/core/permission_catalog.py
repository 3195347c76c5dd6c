"""Catalog of granular permissions that can be materialized on a member."""

from collections.abc import Iterable

from church_api.core.exceptions import UnknownPermissionError
from church_api.core.role_hierarchy import is_elevated_role
from church_api.models.role import MemberRole

MEMBERS_VIEW = "members_view"
MEMBERS_MANAGE = "members_manage"
CHURCH_MANAGE = "church_manage"
FINANCES_MANAGE = "finances_manage"
DEVOTIONAL_MANAGE = "devotional_manage"
EVENTS_MANAGE = "events_manage"
CONTRIBUTIONS_MANAGE = "contributions_manage"
MANAGE_PERMISSIONS = "MANAGE_PERMISSIONS"
PERMISSION_MANAGE = "permission_manage"

ALL_PERMISSIONS = frozenset(
    {
        MEMBERS_VIEW,
        MEMBERS_MANAGE,
        CHURCH_MANAGE,
        FINANCES_MANAGE,
        DEVOTIONAL_MANAGE,
        EVENTS_MANAGE,
        CONTRIBUTIONS_MANAGE,
        MANAGE_PERMISSIONS,
        PERMISSION_MANAGE,
    }
)

# A member whose role is exactly MEMBER can never hold these
RESTRICTED_PERMISSIONS = frozenset({FINANCES_MANAGE, CHURCH_MANAGE, CONTRIBUTIONS_MANAGE})

# Every member always holds this one
FLOOR_PERMISSION = MEMBERS_VIEW

PERMISSION_LABELS = {
    MEMBERS_VIEW: "Visualizar Membros",
    MEMBERS_MANAGE: "Gerenciar Membros",
    CHURCH_MANAGE: "Gerenciar Igreja",
    FINANCES_MANAGE: "Gerenciar Finanças",
    DEVOTIONAL_MANAGE: "Gerenciar Devocionais",
    EVENTS_MANAGE: "Gerenciar Eventos",
    CONTRIBUTIONS_MANAGE: "Gerenciar Contribuições",
    MANAGE_PERMISSIONS: "Gerenciar Permissões",
    PERMISSION_MANAGE: "Atribuir Permissões",
}


def all_known_permissions() -> frozenset[str]:
    return ALL_PERMISSIONS


def is_restricted(permission_name: str) -> bool:
    return permission_name in RESTRICTED_PERMISSIONS


def restricted_among(permissions: Iterable[str]) -> list[str]:
    """Restricted names found in ``permissions``, sorted for stable messages."""
    return sorted({p for p in permissions if is_restricted(p)})


def validate_permissions(permissions: Iterable[str]) -> set[str]:
    """
    Deduplicate and validate permission names against the catalog.

    Raises:
        UnknownPermissionError: If any name is not part of the catalog
    """
    requested = set(permissions)
    unknown = sorted(requested - ALL_PERMISSIONS)
    if unknown:
        raise UnknownPermissionError(unknown)
    return requested


def with_floor(permissions: Iterable[str]) -> set[str]:
    """Return ``permissions`` with the floor permission re-added."""
    return set(permissions) | {FLOOR_PERMISSION}


def default_permissions_for_role(role: MemberRole | str) -> set[str]:
    """
    Permission set materialized when a role is assigned.

    ADMINGERAL and ADMINFILIAL get the full catalog, everyone else
    only the floor permission.
    """
    if is_elevated_role(role):
        return set(ALL_PERMISSIONS)
    return {FLOOR_PERMISSION}
