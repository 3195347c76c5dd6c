"""Total order over member roles."""

from church_api.core.exceptions import InvalidRoleError
from church_api.models.role import MemberRole

# Higher number = more seniority
ROLE_HIERARCHY = {
    MemberRole.MEMBER: 1,
    MemberRole.COORDINATOR: 2,
    MemberRole.ADMINFILIAL: 3,
    MemberRole.ADMINGERAL: 4,
}

ELEVATED_ROLES = frozenset({MemberRole.ADMINGERAL, MemberRole.ADMINFILIAL})


def parse_role(value: MemberRole | str) -> MemberRole:
    """
    Coerce a raw value into a MemberRole.

    Raises:
        InvalidRoleError: If the value is not one of the known roles
    """
    if isinstance(value, MemberRole):
        return value
    try:
        return MemberRole(value)
    except ValueError:
        raise InvalidRoleError(f"Role inválida: {value!r}")


def rank(role: MemberRole | str) -> int:
    """Seniority rank of a role, strictly increasing with seniority."""
    return ROLE_HIERARCHY[parse_role(role)]


def is_senior(a: MemberRole | str, b: MemberRole | str) -> bool:
    """True if role ``a`` is strictly senior to role ``b``."""
    return rank(a) > rank(b)


def is_same_or_senior(a: MemberRole | str, b: MemberRole | str) -> bool:
    return rank(a) >= rank(b)


def is_elevated_role(role: MemberRole | str) -> bool:
    """ADMINGERAL and ADMINFILIAL are the administrative roles."""
    return parse_role(role) in ELEVATED_ROLES
