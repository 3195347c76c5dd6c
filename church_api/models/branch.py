"""Branch (filial) model."""

from sqlalchemy import String, Integer, ForeignKey
from sqlalchemy.orm import Mapped, mapped_column, relationship
from typing import TYPE_CHECKING

from church_api.models.base import Base, TimestampMixin

if TYPE_CHECKING:
    from church_api.models.church import Church
    from church_api.models.member import Member


class Branch(Base, TimestampMixin):
    """A congregation of a church. Members belong to exactly one branch."""

    __tablename__ = "branches"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    church_id: Mapped[int] = mapped_column(
        Integer,
        ForeignKey("churches.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    name: Mapped[str] = mapped_column(String(255), nullable=False)
    is_main_branch: Mapped[bool] = mapped_column(default=False, nullable=False)

    # Relationships
    church: Mapped["Church"] = relationship("Church", back_populates="branches")
    members: Mapped[list["Member"]] = relationship(
        "Member",
        back_populates="branch",
        cascade="all, delete-orphan",
    )

    def __repr__(self) -> str:
        return f"<Branch(id={self.id}, church_id={self.church_id}, name='{self.name}')>"
