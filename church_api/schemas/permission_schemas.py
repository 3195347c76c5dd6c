from pydantic import BaseModel, Field


class PermissionAssignRequest(BaseModel):
    """Replace a member's permission set"""

    permissions: list[str] = Field(..., description="Complete set of permission names")


class PermissionAssignResponse(BaseModel):
    """Response after replacing permissions"""

    added: int
    permissions: list[str]


class PermissionCatalogEntry(BaseModel):
    type: str
    label: str
    restricted: bool
