"""
Authorization rules for reading, creating and mutating church members.

Every operation is a pure decision over two snapshots (actor and target)
and returns an AccessDecision. Nothing here touches the database; loading
the snapshots and persisting the approved change is the caller's job.

Scope rules for editing another member:
- ADMINGERAL: any member of the same church
- ADMINFILIAL: members of its own branch only
- COORDINATOR, MEMBER: only themselves

Nobody can change their own email through the edit path, and a role change
is approved as a value only; the permission cascade belongs to the mutation
layer.
"""

from collections.abc import Iterable

from church_api.core.access import can_assign_permissions, can_manage_members, has_permission, is_elevated
from church_api.core.decisions import AccessDecision, DenyReason
from church_api.core.permission_catalog import MEMBERS_MANAGE, restricted_among, validate_permissions
from church_api.core.role_hierarchy import is_senior, parse_role
from church_api.models.member_context import ActorContext, Scope, TargetMember, resolve_scope
from church_api.models.role import MemberRole

EMAIL_FIELD = "email"

# Scopes (other than SAME_MEMBER) in which each role may act on another member
EDIT_SCOPES = {
    MemberRole.ADMINGERAL: {Scope.SAME_BRANCH, Scope.SAME_CHURCH_DIFFERENT_BRANCH},
    MemberRole.ADMINFILIAL: {Scope.SAME_BRANCH},
}
VIEW_SCOPES = {
    MemberRole.ADMINGERAL: {Scope.SAME_BRANCH, Scope.SAME_CHURCH_DIFFERENT_BRANCH},
    MemberRole.ADMINFILIAL: {Scope.SAME_BRANCH},
    MemberRole.COORDINATOR: {Scope.SAME_BRANCH},
}

EDIT_OUT_OF_SCOPE_MESSAGES = {
    MemberRole.ADMINGERAL: "Você só pode editar membros da sua igreja.",
    MemberRole.ADMINFILIAL: "Você só pode editar membros da sua filial.",
}
VIEW_OUT_OF_SCOPE_MESSAGES = {
    MemberRole.ADMINGERAL: "Você só pode visualizar membros da sua igreja.",
    MemberRole.ADMINFILIAL: "Você só pode visualizar membros da sua filial.",
    MemberRole.COORDINATOR: "Você só pode visualizar membros da sua filial.",
}

SELF_EMAIL_MESSAGE = "Você não pode alterar seu próprio email."
SELF_ONLY_EDIT_MESSAGE = "Você só pode editar seu próprio perfil."
SELF_ONLY_VIEW_MESSAGE = "Você só pode visualizar seu próprio perfil."
SENIOR_TARGET_MESSAGE = "Você não pode alterar um membro com role superior à sua."


class MemberEditAuthorizer:
    """
    Decides whether an actor may view, create or change members.

    Args:
        allow_admingeral_promotion: When False, promoting an existing member
            to ADMINGERAL through a role change is reserved to the system,
            like creating one already is.
    """

    def __init__(self, allow_admingeral_promotion: bool = True):
        self.allow_admingeral_promotion = allow_admingeral_promotion

    def _check_scope(
        self,
        actor: ActorContext,
        target: TargetMember,
        scopes: dict[MemberRole, set[Scope]],
        out_of_scope_messages: dict[MemberRole, str],
        self_only_message: str,
    ) -> AccessDecision:
        scope = resolve_scope(actor, target)
        if scope is Scope.SAME_MEMBER:
            return AccessDecision.allow()

        allowed_scopes = scopes.get(actor.role)
        if allowed_scopes is None:
            return AccessDecision.deny(DenyReason.INSUFFICIENT_ROLE, self_only_message)
        if scope not in allowed_scopes:
            return AccessDecision.deny(DenyReason.OUT_OF_SCOPE, out_of_scope_messages[actor.role])
        return AccessDecision.allow()

    def _check_edit_scope(self, actor: ActorContext, target: TargetMember) -> AccessDecision:
        decision = self._check_scope(
            actor, target, EDIT_SCOPES, EDIT_OUT_OF_SCOPE_MESSAGES, SELF_ONLY_EDIT_MESSAGE
        )
        if not decision:
            return decision
        # Senior-or-equal: an actor never edits someone above it
        if actor.member_id != target.id and is_senior(target.role, actor.role):
            return AccessDecision.deny(DenyReason.INSUFFICIENT_ROLE, SENIOR_TARGET_MESSAGE)
        return decision

    def authorize_view(self, actor: ActorContext, target: TargetMember) -> AccessDecision:
        """ADMINGERAL sees its church, ADMINFILIAL/COORDINATOR their branch, MEMBER itself."""
        return self._check_scope(
            actor, target, VIEW_SCOPES, VIEW_OUT_OF_SCOPE_MESSAGES, SELF_ONLY_VIEW_MESSAGE
        )

    def authorize_field_edit(
        self, actor: ActorContext, target: TargetMember, fields: Iterable[str] = ()
    ) -> AccessDecision:
        """
        Decide whether ``actor`` may edit the core fields of ``target``.

        Args:
            actor: Acting member snapshot
            target: Target member snapshot
            fields: Names of the fields present in the update payload

        Returns:
            Allow, or Deny with SELF_EMAIL_FORBIDDEN, OUT_OF_SCOPE or INSUFFICIENT_ROLE
        """
        if actor.member_id == target.id and EMAIL_FIELD in set(fields):
            return AccessDecision.deny(DenyReason.SELF_EMAIL_FORBIDDEN, SELF_EMAIL_MESSAGE)
        return self._check_edit_scope(actor, target)

    def authorize_role_change(
        self, actor: ActorContext, target: TargetMember, new_role: MemberRole | str
    ) -> AccessDecision:
        """
        Decide whether ``actor`` may set ``target``'s role to ``new_role``.

        Raises:
            InvalidRoleError: If ``new_role`` is not a known role
        """
        new_role = parse_role(new_role)

        if not is_elevated(actor):
            return AccessDecision.deny(
                DenyReason.INSUFFICIENT_ROLE, "Apenas administradores podem alterar roles."
            )
        if actor.member_id == target.id:
            return AccessDecision.deny(
                DenyReason.INSUFFICIENT_ROLE, "Você não pode alterar sua própria role."
            )

        decision = self._check_edit_scope(actor, target)
        if not decision:
            return decision

        if actor.role is MemberRole.ADMINGERAL:
            if new_role is MemberRole.ADMINGERAL and not self.allow_admingeral_promotion:
                return AccessDecision.deny(
                    DenyReason.SYSTEM_ONLY_ROLE,
                    "Apenas o sistema pode definir um Administrador Geral.",
                )
            return AccessDecision.allow()

        # Below ADMINGERAL roles are only handed out, and taken away, downwards
        if not is_senior(actor.role, target.role):
            return AccessDecision.deny(
                DenyReason.INSUFFICIENT_ROLE,
                "Você só pode alterar a role de membros abaixo da sua.",
            )
        if not is_senior(actor.role, new_role):
            return AccessDecision.deny(
                DenyReason.INSUFFICIENT_ROLE,
                "Administradores de filial só podem atribuir as roles COORDINATOR ou MEMBER.",
            )
        return AccessDecision.allow()

    def authorize_position_or_permission_change(
        self,
        actor: ActorContext,
        target: TargetMember,
        requested_permissions: Iterable[str] | None = None,
        position_change: bool = False,
    ) -> AccessDecision:
        """
        Decide whether ``actor`` may change ``target``'s position and/or permissions.

        A position change needs member-management capability plus the edit
        scope rule. A permission replacement needs permission-assignment
        capability plus the edit scope rule, and a target whose role is
        exactly MEMBER can never receive a restricted permission.

        Raises:
            UnknownPermissionError: If a requested permission is not in the catalog
        """
        requested = None
        if requested_permissions is not None:
            requested = validate_permissions(requested_permissions)

        if position_change:
            if not can_manage_members(actor):
                return AccessDecision.deny(
                    DenyReason.INSUFFICIENT_ROLE,
                    "Você não tem permissão para alterar o cargo de membros.",
                )
            decision = self._check_edit_scope(actor, target)
            if not decision:
                return decision

        if requested is not None:
            if not can_assign_permissions(actor):
                return AccessDecision.deny(
                    DenyReason.INSUFFICIENT_ROLE,
                    "Você não tem permissão para atribuir permissões.",
                )
            decision = self._check_edit_scope(actor, target)
            if not decision:
                return decision

            if target.role is MemberRole.MEMBER:
                restricted = restricted_among(requested)
                if restricted:
                    return AccessDecision.deny(
                        DenyReason.RESTRICTED_PERMISSION_REQUIRES_COORDINATOR,
                        "As permissões "
                        + ", ".join(restricted)
                        + " exigem pelo menos a role de Coordenador.",
                        details=restricted,
                    )

        return AccessDecision.allow()

    def authorize_member_creation(
        self,
        actor: ActorContext,
        branch_id: int,
        church_id: int,
        new_role: MemberRole | str = MemberRole.MEMBER,
    ) -> AccessDecision:
        """
        Decide whether ``actor`` may create a member with ``new_role`` in a branch.

        Raises:
            InvalidRoleError: If ``new_role`` is not a known role
        """
        new_role = parse_role(new_role)

        if not is_elevated(actor) and not has_permission(actor, MEMBERS_MANAGE):
            return AccessDecision.deny(
                DenyReason.INSUFFICIENT_ROLE,
                "Você não tem permissão para criar membros. É necessária a permissão members_manage.",
            )

        # ADMINGERAL is the only creator allowed outside its own branch
        if actor.role is not MemberRole.ADMINGERAL and actor.branch_id != branch_id:
            return AccessDecision.deny(
                DenyReason.OUT_OF_SCOPE, "Você só pode criar membros na sua própria filial."
            )
        if actor.church_id != church_id:
            return AccessDecision.deny(
                DenyReason.OUT_OF_SCOPE,
                "Você não pode criar membros em filiais de outras igrejas.",
            )

        if new_role is MemberRole.ADMINGERAL:
            return AccessDecision.deny(
                DenyReason.SYSTEM_ONLY_ROLE,
                "Apenas o sistema pode criar um Administrador Geral.",
            )
        if actor.role is MemberRole.COORDINATOR and new_role is not MemberRole.MEMBER:
            return AccessDecision.deny(
                DenyReason.INSUFFICIENT_ROLE,
                "Coordenadores só podem criar membros com role MEMBER.",
            )
        if actor.role is MemberRole.MEMBER and new_role is not MemberRole.MEMBER:
            return AccessDecision.deny(
                DenyReason.INSUFFICIENT_ROLE, "Membros não podem atribuir roles."
            )
        return AccessDecision.allow()
