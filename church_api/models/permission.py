"""Materialized permission rows."""

from sqlalchemy import String, Integer, ForeignKey, UniqueConstraint
from sqlalchemy.orm import Mapped, mapped_column, relationship
from typing import TYPE_CHECKING

from church_api.models.base import Base

if TYPE_CHECKING:
    from church_api.models.member import Member


class Permission(Base):
    """
    One granted permission of one member.

    Constraints:
    - Unique(member_id, type) - a member holds each permission at most once
    - The set of rows of a member is only ever replaced as a whole, inside
      a single transaction
    """

    __tablename__ = "permissions"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    member_id: Mapped[int] = mapped_column(
        Integer,
        ForeignKey("members.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    type: Mapped[str] = mapped_column(String(100), nullable=False)

    member: Mapped["Member"] = relationship("Member", back_populates="permissions")

    __table_args__ = (
        UniqueConstraint("member_id", "type", name="uq_member_permission"),
    )

    def __repr__(self) -> str:
        return f"<Permission(member_id={self.member_id}, type='{self.type}')>"
