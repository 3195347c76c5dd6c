import logging

from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from church_api.core.access import can_see_sensitive_fields
from church_api.core.decisions import AccessDecision
from church_api.core.exceptions import ForbiddenException, NotFoundException, ValidationException
from church_api.core.member_authorizer import MemberEditAuthorizer
from church_api.core.permission_catalog import default_permissions_for_role, with_floor
from church_api.models.member import Member
from church_api.models.member_context import ActorContext, TargetMember
from church_api.models.role import MemberRole
from church_api.repositories.branch_repository import BranchRepository
from church_api.repositories.member_repository import MemberRepository
from church_api.repositories.position_repository import PositionRepository
from church_api.schemas.member_schemas import (
    BIRTH_DATE_FORMAT,
    FieldEditRequest,
    MemberCreate,
    RoleChangeRequest,
)

logger = logging.getLogger(__name__)

DUPLICATE_MEMBER_MESSAGE = "Email ou usuário de autenticação já está em uso."


def format_birth_date(member: Member) -> str | None:
    if member.birth_date is None:
        return None
    return member.birth_date.strftime(BIRTH_DATE_FORMAT)


def serialize_member(member: Member, include_sensitive: bool = True) -> dict:
    """
    Build the member representation.

    Every optional key is present; email, phone and address are null
    when the viewer may not see them.
    """
    return {
        "id": member.id,
        "name": member.name,
        "email": member.email if include_sensitive else None,
        "role": member.role,
        "branch_id": member.branch_id,
        "church_id": member.church_id,
        "birth_date": format_birth_date(member),
        "phone": member.phone if include_sensitive else None,
        "address": member.address if include_sensitive else None,
        "avatar_url": member.avatar_url,
        "position_id": member.position_id,
        "position": (
            {"id": member.position.id, "name": member.position.name}
            if member.position
            else None
        ),
        "permissions": member.permission_names,
    }


def enforce(decision: AccessDecision, actor: ActorContext, target_id: int | None, operation: str) -> None:
    """Raise ForbiddenException for a denied decision, logging the reason."""
    if decision.allowed:
        return
    logger.warning(
        "Denied %s: actor=%s target=%s reason=%s",
        operation,
        actor.member_id,
        target_id,
        decision.reason.value,
    )
    raise ForbiddenException(decision.message, decision.reason.value, list(decision.details))


class MemberService:
    """
    Service layer for member management.

    Loads fresh snapshots, asks the authorizer, then persists through the
    repositories. The authorizer never sees the database and this class
    never re-implements a rule.
    """

    def __init__(self, db: Session, authorizer: MemberEditAuthorizer | None = None):
        self.db = db
        self.authorizer = authorizer or MemberEditAuthorizer()
        self.member_repo = MemberRepository(db)
        self.branch_repo = BranchRepository(db)
        self.position_repo = PositionRepository(db)

    def load_target(self, member_id: int) -> Member:
        """
        Load the target member fresh from the database.

        Raises:
            NotFoundException: If member does not exist
        """
        member = self.member_repo.load_member_with_context(member_id)
        if not member:
            raise NotFoundException("Membro não encontrado")
        return member

    def _check_position(self, position_id: int | None, church_id: int) -> None:
        if position_id is None:
            return
        if not self.position_repo.get_by_id_and_church(position_id, church_id):
            raise ValidationException("Cargo não encontrado nesta igreja.")

    def _check_email_available(self, email: str, member_id: int | None = None) -> None:
        existing = self.member_repo.get_by_email(email)
        if existing and existing.id != member_id:
            raise ValidationException("Email já está em uso.")

    def _check_auth_user_available(self, auth_user_id: str | None) -> None:
        if auth_user_id is not None and self.member_repo.get_by_auth_id(auth_user_id):
            raise ValidationException("Usuário de autenticação já vinculado a outro membro.")

    def list_members(self, actor: ActorContext) -> list[dict]:
        """
        List members visible to the actor.

        ADMINGERAL gets the whole church, everyone else its own branch.
        Sensitive fields are filtered per member.
        """
        if actor.role is MemberRole.ADMINGERAL and actor.church_id is not None:
            members = self.member_repo.list_by_church(actor.church_id)
        else:
            members = self.member_repo.list_by_branch(actor.branch_id)
        return [
            serialize_member(m, include_sensitive=can_see_sensitive_fields(actor, m.id))
            for m in members
        ]

    def get_member(self, member_id: int, actor: ActorContext) -> dict:
        member = self.load_target(member_id)
        decision = self.authorizer.authorize_view(actor, TargetMember.from_member(member))
        enforce(decision, actor, member.id, "view")
        return serialize_member(member, include_sensitive=can_see_sensitive_fields(actor, member.id))

    def get_my_profile(self, actor: ActorContext) -> dict:
        return serialize_member(self.load_target(actor.member_id))

    def create_member(self, data: MemberCreate, actor: ActorContext) -> dict:
        """
        Create a member with the default permissions of its role.

        Raises:
            NotFoundException: If the branch does not exist
            ForbiddenException: If the actor may not create this member
            ValidationException: If email or auth_user_id is taken, or position is foreign
        """
        branch_id = data.branch_id if data.branch_id is not None else actor.branch_id
        branch = self.branch_repo.get_by_id(branch_id)
        if not branch:
            raise NotFoundException("Filial não encontrada")

        decision = self.authorizer.authorize_member_creation(
            actor, branch.id, branch.church_id, data.role
        )
        enforce(decision, actor, None, "create")

        self._check_email_available(data.email)
        self._check_auth_user_available(data.auth_user_id)
        self._check_position(data.position_id, branch.church_id)

        member = Member(
            branch_id=branch.id,
            auth_user_id=data.auth_user_id,
            name=data.name,
            email=data.email,
            role=data.role,
            birth_date=data.birth_date,
            phone=data.phone,
            address=data.address,
            avatar_url=data.avatar_url,
            position_id=data.position_id,
        )
        permissions = with_floor(default_permissions_for_role(data.role))
        try:
            created = self.member_repo.create(member, permissions)
        except IntegrityError as e:
            # Unique email or auth_user_id taken by a concurrent request
            raise ValidationException(DUPLICATE_MEMBER_MESSAGE) from e
        logger.info(
            "Member %s created by %s in branch %s with role %s",
            created.id,
            actor.member_id,
            branch.id,
            created.role.value,
        )
        return serialize_member(created)

    def update_member(self, member_id: int, data: FieldEditRequest, actor: ActorContext) -> dict:
        """
        Apply a partial field edit.

        Raises:
            ValidationException: If the payload is empty or references a foreign position
            NotFoundException: If the target does not exist
            ForbiddenException: If the edit or the position change is denied
        """
        fields = data.model_dump(exclude_unset=True)
        if not fields:
            raise ValidationException("Nenhum dado para atualizar.")

        member = self.load_target(member_id)
        target = TargetMember.from_member(member)

        decision = self.authorizer.authorize_field_edit(actor, target, fields.keys())
        enforce(decision, actor, member.id, "field edit")

        if "position_id" in fields:
            decision = self.authorizer.authorize_position_or_permission_change(
                actor, target, position_change=True
            )
            enforce(decision, actor, member.id, "position change")
            self._check_position(fields["position_id"], member.church_id)

        if "email" in fields:
            self._check_email_available(fields["email"], member.id)

        try:
            updated = self.member_repo.update_fields(member, fields)
        except IntegrityError as e:
            raise ValidationException(DUPLICATE_MEMBER_MESSAGE) from e
        logger.info(
            "Member %s updated by %s: %s", member_id, actor.member_id, ", ".join(sorted(fields))
        )
        return serialize_member(
            updated, include_sensitive=can_see_sensitive_fields(actor, updated.id)
        )

    def change_role(self, member_id: int, data: RoleChangeRequest, actor: ActorContext) -> dict:
        """
        Change a member's role and replace its permissions with the new
        role's defaults. Prior permissions never survive a role change.

        Raises:
            NotFoundException: If the target does not exist
            ForbiddenException: If the role change is denied
        """
        member = self.load_target(member_id)
        decision = self.authorizer.authorize_role_change(
            actor, TargetMember.from_member(member), data.role
        )
        enforce(decision, actor, member.id, "role change")

        previous_role = member.role
        permissions = with_floor(default_permissions_for_role(data.role))
        updated = self.member_repo.update_role(member, data.role, permissions)
        logger.info(
            "Member %s role changed by %s: %s -> %s",
            member_id,
            actor.member_id,
            previous_role.value,
            updated.role.value,
        )
        return serialize_member(updated)
