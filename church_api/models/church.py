"""Church model, the multi-tenant isolation boundary."""

from sqlalchemy import String, Integer
from sqlalchemy.orm import Mapped, mapped_column, relationship
from typing import TYPE_CHECKING

from church_api.models.base import Base, TimestampMixin

if TYPE_CHECKING:
    from church_api.models.branch import Branch
    from church_api.models.position import Position


class Church(Base, TimestampMixin):
    """
    A church is the tenant: every branch, position and member belongs to
    exactly one church, and no member ever acts outside of it.
    """

    __tablename__ = "churches"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    name: Mapped[str] = mapped_column(String(255), nullable=False)

    # Relationships
    branches: Mapped[list["Branch"]] = relationship(
        "Branch",
        back_populates="church",
        cascade="all, delete-orphan",
    )
    positions: Mapped[list["Position"]] = relationship(
        "Position",
        back_populates="church",
        cascade="all, delete-orphan",
    )

    def __repr__(self) -> str:
        return f"<Church(id={self.id}, name='{self.name}')>"
