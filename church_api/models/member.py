from datetime import date
from sqlalchemy import String, Integer, ForeignKey, Enum, Date, Text
from sqlalchemy.orm import Mapped, mapped_column, relationship
from typing import Optional, TYPE_CHECKING

from church_api.models.base import Base, TimestampMixin
from church_api.models.role import MemberRole

if TYPE_CHECKING:
    from church_api.models.branch import Branch
    from church_api.models.permission import Permission
    from church_api.models.position import Position


class Member(Base, TimestampMixin):
    """
    A person registered in a church branch.

    auth_user_id is the 'sub' claim of the JWT issued by the auth service.
    The church is reached through the branch, never stored twice.
    """

    __tablename__ = "members"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    auth_user_id: Mapped[str | None] = mapped_column(
        String(255), unique=True, nullable=True, index=True
    )
    branch_id: Mapped[int] = mapped_column(
        Integer,
        ForeignKey("branches.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    position_id: Mapped[int | None] = mapped_column(
        Integer,
        ForeignKey("positions.id", ondelete="SET NULL"),
        nullable=True,
    )
    name: Mapped[str] = mapped_column(String(255), nullable=False)
    email: Mapped[str] = mapped_column(String(255), unique=True, nullable=False)
    role: Mapped[MemberRole] = mapped_column(
        Enum(MemberRole, native_enum=False, values_callable=lambda x: [e.value for e in x]),
        nullable=False,
        default=MemberRole.MEMBER,
    )
    birth_date: Mapped[date | None] = mapped_column(Date, nullable=True)
    phone: Mapped[str | None] = mapped_column(String(50), nullable=True)
    address: Mapped[str | None] = mapped_column(Text, nullable=True)
    avatar_url: Mapped[str | None] = mapped_column(String(500), nullable=True)

    # Relationships
    branch: Mapped["Branch"] = relationship("Branch", back_populates="members")
    position: Mapped[Optional["Position"]] = relationship("Position")
    permissions: Mapped[list["Permission"]] = relationship(
        "Permission",
        back_populates="member",
        cascade="all, delete-orphan",
    )

    @property
    def church_id(self) -> int | None:
        return self.branch.church_id if self.branch else None

    @property
    def permission_names(self) -> list[str]:
        return sorted(p.type for p in self.permissions)

    def __repr__(self) -> str:
        return f"<Member(id={self.id}, branch_id={self.branch_id}, role={self.role.value})>"
