from sqlalchemy.orm import Session
from church_api.models.position import Position


class PositionRepository:
    """Repository for Position model operations"""

    def __init__(self, db: Session):
        self.db = db

    def get_by_id_and_church(self, position_id: int, church_id: int) -> Position | None:
        """
        Get a position only if it belongs to the given church.

        Returns:
            Position object or None if missing or owned by another church
        """
        return (
            self.db.query(Position)
            .filter(Position.id == position_id, Position.church_id == church_id)
            .first()
        )
