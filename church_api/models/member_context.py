"""Read-only member snapshots used for authorization decisions."""

from dataclasses import dataclass, field
from enum import Enum as PyEnum
from typing import TYPE_CHECKING

from church_api.core.role_hierarchy import parse_role
from church_api.models.role import MemberRole

if TYPE_CHECKING:
    from church_api.models.member import Member


class Scope(str, PyEnum):
    """Relationship between the actor and the target member."""

    SAME_MEMBER = "SAME_MEMBER"
    SAME_BRANCH = "SAME_BRANCH"
    SAME_CHURCH_DIFFERENT_BRANCH = "SAME_CHURCH_DIFFERENT_BRANCH"
    DIFFERENT_CHURCH = "DIFFERENT_CHURCH"


@dataclass(frozen=True)
class ActorContext:
    """
    The authenticated member performing an operation.

    Built per request from the database record, never from token claims,
    so permission changes are visible on the very next request.

    Attributes:
        member_id: ID of the acting member
        role: The member's role
        permissions: Materialized permission names
        branch_id: Branch the member belongs to
        church_id: Church that owns the branch
    """

    member_id: int
    role: MemberRole
    permissions: frozenset[str] = field(default_factory=frozenset)
    branch_id: int | None = None
    church_id: int | None = None

    def __post_init__(self):
        object.__setattr__(self, "role", parse_role(self.role))
        object.__setattr__(self, "permissions", frozenset(self.permissions))

    @classmethod
    def from_member(cls, member: "Member") -> "ActorContext":
        return cls(
            member_id=member.id,
            role=member.role,
            permissions=frozenset(member.permission_names),
            branch_id=member.branch_id,
            church_id=member.church_id,
        )

    def __repr__(self) -> str:
        return f"<ActorContext(member_id={self.member_id}, role={self.role.value}, branch_id={self.branch_id})>"


@dataclass(frozen=True)
class TargetMember:
    """The member being read or mutated."""

    id: int
    role: MemberRole
    branch_id: int | None = None
    church_id: int | None = None

    def __post_init__(self):
        object.__setattr__(self, "role", parse_role(self.role))

    @classmethod
    def from_member(cls, member: "Member") -> "TargetMember":
        return cls(
            id=member.id,
            role=member.role,
            branch_id=member.branch_id,
            church_id=member.church_id,
        )


def resolve_scope(actor: ActorContext, target: TargetMember) -> Scope:
    """Derive the branch/church relationship between actor and target."""
    if actor.member_id == target.id:
        return Scope.SAME_MEMBER
    if actor.church_id is None or actor.church_id != target.church_id:
        return Scope.DIFFERENT_CHURCH
    if actor.branch_id == target.branch_id:
        return Scope.SAME_BRANCH
    return Scope.SAME_CHURCH_DIFFERENT_BRANCH
