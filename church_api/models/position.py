from sqlalchemy import String, Integer, ForeignKey
from sqlalchemy.orm import Mapped, mapped_column, relationship
from typing import TYPE_CHECKING

from church_api.models.base import Base, TimestampMixin

if TYPE_CHECKING:
    from church_api.models.church import Church


class Position(Base, TimestampMixin):
    """
    Ministry position (cargo) defined per church, e.g. "Pastor", "Diácono".

    Purely descriptive: holding a position grants no permission.
    """

    __tablename__ = "positions"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    church_id: Mapped[int] = mapped_column(
        Integer,
        ForeignKey("churches.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    name: Mapped[str] = mapped_column(String(255), nullable=False)

    church: Mapped["Church"] = relationship("Church", back_populates="positions")
