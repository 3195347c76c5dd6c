"""Repository for Permission rows."""

from collections.abc import Iterable

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from church_api.models.permission import Permission


class PermissionRepository:
    """Repository for Permission model operations"""

    def __init__(self, db: Session):
        self.db = db

    def get_member_permissions(self, member_id: int) -> list[str]:
        """
        Get permission names held by a member.

        Args:
            member_id: Member ID

        Returns:
            Sorted list of permission names
        """
        rows = (
            self.db.query(Permission.type)
            .filter(Permission.member_id == member_id)
            .order_by(Permission.type)
            .all()
        )
        return [row.type for row in rows]

    def stage_replacement(self, member_id: int, permissions: Iterable[str]) -> list[str]:
        """
        Delete every permission row of the member and add the new set,
        without committing. The caller owns the transaction.

        Returns:
            Sorted list of the permission names staged
        """
        new_permissions = sorted(set(permissions))
        self.db.query(Permission).filter(Permission.member_id == member_id).delete(
            synchronize_session="fetch"
        )
        self.db.add_all(
            [Permission(member_id=member_id, type=name) for name in new_permissions]
        )
        return new_permissions

    def replace_member_permissions(self, member_id: int, permissions: Iterable[str]) -> list[str]:
        """
        Atomically replace a member's permission set.

        Delete and insert run in one transaction, so concurrent readers see
        either the old set or the new one, never an empty set in between.

        Args:
            member_id: Member ID
            permissions: Complete new permission set

        Returns:
            Sorted list of the permission names now held

        Raises:
            SQLAlchemyError: After rolling back, if the write fails
        """
        try:
            new_permissions = self.stage_replacement(member_id, permissions)
            self.db.commit()
        except SQLAlchemyError:
            self.db.rollback()
            raise
        return new_permissions
