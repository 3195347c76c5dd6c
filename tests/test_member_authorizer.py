import pytest

from church_api.core.decisions import DenyReason
from church_api.core.exceptions import InvalidRoleError, UnknownPermissionError
from church_api.core.member_authorizer import MemberEditAuthorizer
from church_api.core.permission_catalog import RESTRICTED_PERMISSIONS
from church_api.models.role import MemberRole
from tests.conftest import actor, target

ROLES = list(MemberRole)


@pytest.fixture
def authorizer():
    return MemberEditAuthorizer()


class TestFieldEdit:
    """Tests for authorize_field_edit"""

    @pytest.mark.parametrize("role", ROLES)
    def test_self_email_is_always_forbidden(self, authorizer, role):
        """Nobody edits their own email, whatever the role"""
        a = actor(role, member_id=7)
        t = target(role, member_id=7)

        decision = authorizer.authorize_field_edit(a, t, ["name", "email"])

        assert not decision.allowed
        assert decision.reason is DenyReason.SELF_EMAIL_FORBIDDEN

    @pytest.mark.parametrize("role", ROLES)
    def test_self_edit_without_email_allowed(self, authorizer, role):
        a = actor(role, member_id=7)
        t = target(role, member_id=7)

        assert authorizer.authorize_field_edit(a, t, ["name", "phone"]).allowed

    def test_admingeral_edits_other_branch_same_church(self, authorizer):
        a = actor(MemberRole.ADMINGERAL, branch_id=10)
        t = target(MemberRole.MEMBER, branch_id=11)

        assert authorizer.authorize_field_edit(a, t, ["name"]).allowed

    def test_admingeral_edits_someone_elses_email(self, authorizer):
        a = actor(MemberRole.ADMINGERAL)
        t = target(MemberRole.COORDINATOR)

        assert authorizer.authorize_field_edit(a, t, ["email"]).allowed

    def test_admingeral_cannot_edit_other_church(self, authorizer):
        a = actor(MemberRole.ADMINGERAL, church_id=100)
        t = target(MemberRole.MEMBER, branch_id=50, church_id=200)

        decision = authorizer.authorize_field_edit(a, t, ["name"])

        assert decision.reason is DenyReason.OUT_OF_SCOPE
        assert "igreja" in decision.message

    def test_adminfilial_edits_own_branch(self, authorizer):
        a = actor(MemberRole.ADMINFILIAL)
        t = target(MemberRole.COORDINATOR)

        assert authorizer.authorize_field_edit(a, t, ["address"]).allowed

    def test_adminfilial_cannot_edit_other_branch(self, authorizer):
        """Same church is not enough for a branch administrator"""
        a = actor(MemberRole.ADMINFILIAL, branch_id=10)
        t = target(MemberRole.MEMBER, branch_id=11)

        decision = authorizer.authorize_field_edit(a, t, ["name"])

        assert decision.reason is DenyReason.OUT_OF_SCOPE
        assert decision.message == "Você só pode editar membros da sua filial."

    def test_adminfilial_cannot_edit_senior_in_branch(self, authorizer):
        a = actor(MemberRole.ADMINFILIAL)
        t = target(MemberRole.ADMINGERAL)

        decision = authorizer.authorize_field_edit(a, t, ["name"])

        assert decision.reason is DenyReason.INSUFFICIENT_ROLE

    @pytest.mark.parametrize("role", [MemberRole.COORDINATOR, MemberRole.MEMBER])
    def test_non_admins_only_edit_themselves(self, authorizer, role):
        a = actor(role)
        t = target(MemberRole.MEMBER)

        decision = authorizer.authorize_field_edit(a, t, ["name"])

        assert decision.reason is DenyReason.INSUFFICIENT_ROLE

    def test_members_manage_does_not_widen_field_edit_scope(self, authorizer):
        a = actor(MemberRole.COORDINATOR, permissions={"members_manage"})
        t = target(MemberRole.MEMBER)

        assert not authorizer.authorize_field_edit(a, t, ["name"]).allowed


class TestBranchAdministratorContainment:
    """An ADMINFILIAL never gets Allow for a member of another branch"""

    @pytest.mark.parametrize("target_role", ROLES)
    @pytest.mark.parametrize("target_church", [100, 200])
    def test_no_operation_allowed_outside_branch(self, authorizer, target_role, target_church):
        a = actor(MemberRole.ADMINFILIAL, branch_id=10, church_id=100)
        t = target(target_role, branch_id=11, church_id=target_church)

        decisions = [
            authorizer.authorize_field_edit(a, t, ["name"]),
            authorizer.authorize_view(a, t),
            authorizer.authorize_position_or_permission_change(a, t, position_change=True),
            authorizer.authorize_position_or_permission_change(a, t, ["events_manage"]),
        ]
        decisions += [authorizer.authorize_role_change(a, t, new_role) for new_role in ROLES]

        assert not any(d.allowed for d in decisions)
        assert all(d.reason is DenyReason.OUT_OF_SCOPE for d in decisions)


class TestRoleChange:
    """Tests for authorize_role_change"""

    @pytest.mark.parametrize("role", [MemberRole.COORDINATOR, MemberRole.MEMBER])
    def test_non_admins_cannot_change_roles(self, authorizer, role):
        a = actor(role)
        t = target(MemberRole.MEMBER)

        decision = authorizer.authorize_role_change(a, t, MemberRole.COORDINATOR)

        assert decision.reason is DenyReason.INSUFFICIENT_ROLE

    @pytest.mark.parametrize("role", ROLES)
    def test_nobody_changes_own_role(self, authorizer, role):
        a = actor(role, member_id=3)
        t = target(role, member_id=3)

        decision = authorizer.authorize_role_change(a, t, MemberRole.MEMBER)

        assert decision.reason is DenyReason.INSUFFICIENT_ROLE

    @pytest.mark.parametrize("new_role", ROLES)
    def test_admingeral_assigns_any_role(self, authorizer, new_role):
        a = actor(MemberRole.ADMINGERAL, branch_id=10)
        t = target(MemberRole.MEMBER, branch_id=11)

        assert authorizer.authorize_role_change(a, t, new_role).allowed

    def test_admingeral_promotion_can_be_reserved_to_system(self):
        authorizer = MemberEditAuthorizer(allow_admingeral_promotion=False)
        a = actor(MemberRole.ADMINGERAL)
        t = target(MemberRole.ADMINFILIAL)

        decision = authorizer.authorize_role_change(a, t, MemberRole.ADMINGERAL)

        assert decision.reason is DenyReason.SYSTEM_ONLY_ROLE
        assert authorizer.authorize_role_change(a, t, MemberRole.COORDINATOR).allowed

    def test_admingeral_cannot_change_role_in_other_church(self, authorizer):
        a = actor(MemberRole.ADMINGERAL, church_id=100)
        t = target(MemberRole.MEMBER, church_id=200)

        decision = authorizer.authorize_role_change(a, t, MemberRole.COORDINATOR)

        assert decision.reason is DenyReason.OUT_OF_SCOPE

    @pytest.mark.parametrize("new_role", [MemberRole.COORDINATOR, MemberRole.MEMBER])
    def test_adminfilial_assigns_junior_roles_in_branch(self, authorizer, new_role):
        a = actor(MemberRole.ADMINFILIAL)
        t = target(MemberRole.MEMBER)

        assert authorizer.authorize_role_change(a, t, new_role).allowed

    @pytest.mark.parametrize("new_role", [MemberRole.ADMINFILIAL, MemberRole.ADMINGERAL])
    def test_adminfilial_cannot_promote_to_admin(self, authorizer, new_role):
        a = actor(MemberRole.ADMINFILIAL)
        t = target(MemberRole.COORDINATOR)

        decision = authorizer.authorize_role_change(a, t, new_role)

        assert decision.reason is DenyReason.INSUFFICIENT_ROLE

    def test_adminfilial_cannot_demote_peer(self, authorizer):
        a = actor(MemberRole.ADMINFILIAL)
        t = target(MemberRole.ADMINFILIAL)

        decision = authorizer.authorize_role_change(a, t, MemberRole.MEMBER)

        assert decision.reason is DenyReason.INSUFFICIENT_ROLE

    def test_unknown_role_raises(self, authorizer):
        with pytest.raises(InvalidRoleError):
            authorizer.authorize_role_change(
                actor(MemberRole.ADMINGERAL), target(MemberRole.MEMBER), "BISHOP"
            )


class TestPositionChange:
    """Changing positionId needs member management plus the edit scope"""

    def test_member_cannot_change_own_position(self, authorizer):
        a = actor(MemberRole.MEMBER, member_id=4)
        t = target(MemberRole.MEMBER, member_id=4)

        decision = authorizer.authorize_position_or_permission_change(a, t, position_change=True)

        assert decision.reason is DenyReason.INSUFFICIENT_ROLE

    @pytest.mark.parametrize("permission", ["members_manage", "MANAGE_PERMISSIONS"])
    def test_member_with_management_permission_changes_own_position(self, authorizer, permission):
        a = actor(MemberRole.MEMBER, member_id=4, permissions={"members_view", permission})
        t = target(MemberRole.MEMBER, member_id=4)

        assert authorizer.authorize_position_or_permission_change(a, t, position_change=True).allowed

    def test_management_permission_still_bound_to_self(self, authorizer):
        a = actor(MemberRole.COORDINATOR, permissions={"members_manage"})
        t = target(MemberRole.MEMBER)

        decision = authorizer.authorize_position_or_permission_change(a, t, position_change=True)

        assert decision.reason is DenyReason.INSUFFICIENT_ROLE

    def test_admingeral_changes_position_across_branches(self, authorizer):
        a = actor(MemberRole.ADMINGERAL, branch_id=10)
        t = target(MemberRole.COORDINATOR, branch_id=12)

        assert authorizer.authorize_position_or_permission_change(a, t, position_change=True).allowed

    def test_no_change_requested_is_allowed(self, authorizer):
        assert authorizer.authorize_position_or_permission_change(
            actor(MemberRole.MEMBER), target(MemberRole.MEMBER)
        ).allowed


class TestPermissionChange:
    """Tests for the permission branch of authorize_position_or_permission_change"""

    def test_restricted_permission_denied_for_member_target(self, authorizer):
        a = actor(MemberRole.ADMINGERAL)
        t = target(MemberRole.MEMBER)

        decision = authorizer.authorize_position_or_permission_change(a, t, ["finances_manage"])

        assert decision.reason is DenyReason.RESTRICTED_PERMISSION_REQUIRES_COORDINATOR
        assert decision.details == ("finances_manage",)
        assert "finances_manage" in decision.message

    @pytest.mark.parametrize("permission", sorted(RESTRICTED_PERMISSIONS))
    @pytest.mark.parametrize("target_role", ROLES)
    def test_restricted_gate_depends_only_on_target_role(self, authorizer, permission, target_role):
        a = actor(MemberRole.ADMINGERAL)
        t = target(target_role)

        decision = authorizer.authorize_position_or_permission_change(a, t, [permission])

        if target_role is MemberRole.MEMBER:
            assert decision.reason is DenyReason.RESTRICTED_PERMISSION_REQUIRES_COORDINATOR
        else:
            assert decision.allowed

    def test_all_restricted_names_listed(self, authorizer):
        a = actor(MemberRole.ADMINFILIAL)
        t = target(MemberRole.MEMBER)

        decision = authorizer.authorize_position_or_permission_change(
            a, t, ["events_manage", "church_manage", "contributions_manage"]
        )

        assert decision.details == ("church_manage", "contributions_manage")

    def test_non_restricted_permission_for_member_allowed(self, authorizer):
        a = actor(MemberRole.ADMINFILIAL)
        t = target(MemberRole.MEMBER)

        assert authorizer.authorize_position_or_permission_change(
            a, t, ["events_manage", "devotional_manage"]
        ).allowed

    def test_unknown_permission_raises_before_any_rule(self, authorizer):
        with pytest.raises(UnknownPermissionError):
            authorizer.authorize_position_or_permission_change(
                actor(MemberRole.MEMBER), target(MemberRole.MEMBER), ["finances_managee"]
            )

    def test_coordinator_without_assignment_permission_denied(self, authorizer):
        a = actor(MemberRole.COORDINATOR, permissions={"members_manage"})
        t = target(MemberRole.MEMBER)

        decision = authorizer.authorize_position_or_permission_change(a, t, ["events_manage"])

        assert decision.reason is DenyReason.INSUFFICIENT_ROLE

    def test_empty_permission_list_still_checked(self, authorizer):
        """Clearing permissions is an assignment too"""
        a = actor(MemberRole.MEMBER)
        t = target(MemberRole.MEMBER)

        decision = authorizer.authorize_position_or_permission_change(a, t, [])

        assert decision.reason is DenyReason.INSUFFICIENT_ROLE


class TestView:
    def test_coordinator_sees_own_branch(self, authorizer):
        assert authorizer.authorize_view(actor(MemberRole.COORDINATOR), target(MemberRole.MEMBER)).allowed

    def test_coordinator_blocked_in_other_branch(self, authorizer):
        decision = authorizer.authorize_view(
            actor(MemberRole.COORDINATOR, branch_id=10), target(MemberRole.MEMBER, branch_id=11)
        )
        assert decision.reason is DenyReason.OUT_OF_SCOPE

    def test_member_sees_only_itself(self, authorizer):
        decision = authorizer.authorize_view(actor(MemberRole.MEMBER), target(MemberRole.MEMBER))
        assert decision.reason is DenyReason.INSUFFICIENT_ROLE
        assert authorizer.authorize_view(
            actor(MemberRole.MEMBER, member_id=9), target(MemberRole.MEMBER, member_id=9)
        ).allowed

    def test_admingeral_sees_whole_church_only(self, authorizer):
        a = actor(MemberRole.ADMINGERAL)
        assert authorizer.authorize_view(a, target(MemberRole.MEMBER, branch_id=99)).allowed
        decision = authorizer.authorize_view(a, target(MemberRole.MEMBER, church_id=101))
        assert decision.reason is DenyReason.OUT_OF_SCOPE


class TestMemberCreation:
    def test_admingeral_creates_in_any_branch_of_church(self, authorizer):
        a = actor(MemberRole.ADMINGERAL, branch_id=10)
        assert authorizer.authorize_member_creation(a, 11, 100, MemberRole.ADMINFILIAL).allowed

    def test_nobody_creates_admingeral(self, authorizer):
        decision = authorizer.authorize_member_creation(
            actor(MemberRole.ADMINGERAL), 10, 100, MemberRole.ADMINGERAL
        )
        assert decision.reason is DenyReason.SYSTEM_ONLY_ROLE

    def test_other_church_out_of_scope(self, authorizer):
        decision = authorizer.authorize_member_creation(actor(MemberRole.ADMINGERAL), 50, 200)
        assert decision.reason is DenyReason.OUT_OF_SCOPE

    def test_adminfilial_restricted_to_own_branch(self, authorizer):
        a = actor(MemberRole.ADMINFILIAL, branch_id=10)
        assert authorizer.authorize_member_creation(a, 10, 100, MemberRole.COORDINATOR).allowed
        decision = authorizer.authorize_member_creation(a, 11, 100)
        assert decision.reason is DenyReason.OUT_OF_SCOPE

    def test_coordinator_needs_members_manage(self, authorizer):
        decision = authorizer.authorize_member_creation(actor(MemberRole.COORDINATOR), 10, 100)
        assert decision.reason is DenyReason.INSUFFICIENT_ROLE

    def test_coordinator_with_members_manage_creates_only_members(self, authorizer):
        a = actor(MemberRole.COORDINATOR, permissions={"members_manage"})
        assert authorizer.authorize_member_creation(a, 10, 100, MemberRole.MEMBER).allowed
        decision = authorizer.authorize_member_creation(a, 10, 100, MemberRole.COORDINATOR)
        assert decision.reason is DenyReason.INSUFFICIENT_ROLE

    def test_member_with_members_manage_cannot_assign_roles(self, authorizer):
        a = actor(MemberRole.MEMBER, permissions={"members_manage"})
        decision = authorizer.authorize_member_creation(a, 10, 100, MemberRole.COORDINATOR)
        assert decision.reason is DenyReason.INSUFFICIENT_ROLE


def test_denial_messages_identify_the_rule(authorizer):
    """Each violated rule yields its own message"""
    messages = {
        authorizer.authorize_field_edit(
            actor(MemberRole.MEMBER, member_id=1), target(MemberRole.MEMBER, member_id=1), ["email"]
        ).message,
        authorizer.authorize_field_edit(
            actor(MemberRole.ADMINFILIAL), target(MemberRole.MEMBER, branch_id=11), ["name"]
        ).message,
        authorizer.authorize_field_edit(actor(MemberRole.MEMBER), target(MemberRole.MEMBER), ["name"]).message,
        authorizer.authorize_position_or_permission_change(
            actor(MemberRole.ADMINGERAL), target(MemberRole.MEMBER), ["finances_manage"]
        ).message,
        MemberEditAuthorizer(allow_admingeral_promotion=False)
        .authorize_role_change(actor(MemberRole.ADMINGERAL), target(MemberRole.MEMBER), MemberRole.ADMINGERAL)
        .message,
    }
    assert len(messages) == 5
    assert None not in messages
