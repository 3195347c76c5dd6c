import logging

from sqlalchemy.orm import Session

from church_api.core.member_authorizer import MemberEditAuthorizer
from church_api.core.permission_catalog import (
    ALL_PERMISSIONS,
    PERMISSION_LABELS,
    is_restricted,
    with_floor,
)
from church_api.models.member_context import ActorContext, TargetMember
from church_api.repositories.permission_repository import PermissionRepository
from church_api.schemas.permission_schemas import PermissionAssignRequest
from church_api.services.member_service import MemberService, enforce

logger = logging.getLogger(__name__)


class PermissionService:
    """Service layer for the permission catalog and permission assignment"""

    def __init__(self, db: Session, authorizer: MemberEditAuthorizer | None = None):
        self.db = db
        self.authorizer = authorizer or MemberEditAuthorizer()
        self.member_service = MemberService(db, self.authorizer)
        self.permission_repo = PermissionRepository(db)

    def list_catalog(self) -> list[dict]:
        return [
            {"type": name, "label": PERMISSION_LABELS[name], "restricted": is_restricted(name)}
            for name in sorted(ALL_PERMISSIONS)
        ]

    def assign_permissions(
        self, member_id: int, data: PermissionAssignRequest, actor: ActorContext
    ) -> dict:
        """
        Replace a member's permission set.

        The floor permission is always kept. Replacement is a single
        transaction.

        Raises:
            UnknownPermissionError: If a requested name is not in the catalog
            NotFoundException: If the target does not exist
            ForbiddenException: If the assignment is denied
        """
        member = self.member_service.load_target(member_id)
        decision = self.authorizer.authorize_position_or_permission_change(
            actor, TargetMember.from_member(member), requested_permissions=data.permissions
        )
        enforce(decision, actor, member.id, "permission assignment")

        self.permission_repo.replace_member_permissions(member.id, with_floor(data.permissions))
        # Report what was committed, not what was requested
        permissions = self.permission_repo.get_member_permissions(member.id)
        logger.info(
            "Permissions of member %s replaced by %s: %s",
            member.id,
            actor.member_id,
            ", ".join(permissions),
        )
        return {"added": len(permissions), "permissions": permissions}
