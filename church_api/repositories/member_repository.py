"""Repository for Member model operations."""

from collections.abc import Iterable
from typing import Any

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session, joinedload, selectinload

from church_api.models.branch import Branch
from church_api.models.member import Member
from church_api.models.role import MemberRole
from church_api.repositories.permission_repository import PermissionRepository


class MemberRepository:
    """Repository for Member model operations"""

    def __init__(self, db: Session):
        self.db = db
        self.permission_repo = PermissionRepository(db)

    def _with_context(self):
        return self.db.query(Member).options(
            joinedload(Member.branch),
            joinedload(Member.position),
            selectinload(Member.permissions),
        )

    def load_member_with_context(self, member_id: int) -> Member | None:
        """
        Get member with branch (and so church), position and permissions loaded.

        Always hits the database; role and permissions may have changed
        since the previous request.

        Args:
            member_id: Member ID

        Returns:
            Member object or None if not found
        """
        self.db.expire_all()
        return self._with_context().filter(Member.id == member_id).first()

    def get_by_auth_id(self, auth_user_id: str) -> Member | None:
        """Get member by auth_user_id (JWT 'sub' claim)"""
        self.db.expire_all()
        return self._with_context().filter(Member.auth_user_id == auth_user_id).first()

    def get_by_email(self, email: str) -> Member | None:
        return self.db.query(Member).filter(Member.email == email).first()

    def list_by_branch(self, branch_id: int) -> list[Member]:
        return self._with_context().filter(Member.branch_id == branch_id).order_by(Member.name).all()

    def list_by_church(self, church_id: int) -> list[Member]:
        return (
            self._with_context()
            .join(Member.branch)
            .filter(Branch.church_id == church_id)
            .order_by(Member.name)
            .all()
        )

    def create(self, member: Member, permissions: Iterable[str]) -> Member:
        """
        Create a member together with its initial permission set.

        Args:
            member: Member object to create
            permissions: Permission names to materialize

        Returns:
            Created Member object with ID and relationships populated
        """
        try:
            self.db.add(member)
            self.db.flush()
            self.permission_repo.stage_replacement(member.id, permissions)
            self.db.commit()
        except SQLAlchemyError:
            self.db.rollback()
            raise
        return self.load_member_with_context(member.id)

    def update_fields(self, member: Member, fields: dict[str, Any]) -> Member:
        """
        Update a member's core fields.

        Args:
            member: Member object to update
            fields: Column name to new value

        Returns:
            Updated Member object
        """
        try:
            for name, value in fields.items():
                setattr(member, name, value)
            self.db.commit()
        except SQLAlchemyError:
            self.db.rollback()
            raise
        return self.load_member_with_context(member.id)

    def update_role(
        self, member: Member, new_role: MemberRole, permissions: Iterable[str]
    ) -> Member:
        """
        Change a member's role and replace its permission set in one transaction.

        Args:
            member: Member object to update
            new_role: New role to assign
            permissions: Complete permission set for the new role

        Returns:
            Updated Member object
        """
        try:
            member.role = new_role
            self.permission_repo.stage_replacement(member.id, permissions)
            self.db.commit()
        except SQLAlchemyError:
            self.db.rollback()
            raise
        return self.load_member_with_context(member.id)
