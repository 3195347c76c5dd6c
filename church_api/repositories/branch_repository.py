from sqlalchemy.orm import Session
from church_api.models.branch import Branch


class BranchRepository:
    """Repository for Branch model operations"""

    def __init__(self, db: Session):
        self.db = db

    def get_by_id(self, branch_id: int) -> Branch | None:
        """Get branch by ID"""
        return self.db.query(Branch).filter(Branch.id == branch_id).first()
