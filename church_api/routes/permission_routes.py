from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from church_api.core.access import PERMISSION_ASSIGNMENT_PERMISSIONS
from church_api.core.member_authorizer import MemberEditAuthorizer
from church_api.database import get_db
from church_api.dependencies import get_actor, get_authorizer, require_any_permission
from church_api.models.member_context import ActorContext
from church_api.services.permission_service import PermissionService
from church_api.schemas.permission_schemas import (
    PermissionAssignRequest,
    PermissionAssignResponse,
    PermissionCatalogEntry,
)

router = APIRouter()


@router.get("", response_model=list[PermissionCatalogEntry])
async def list_permissions(
    actor: ActorContext = Depends(get_actor),
    db: Session = Depends(get_db),
):
    """List every permission of the catalog and whether it is restricted"""
    service = PermissionService(db)
    return service.list_catalog()


@router.post("/{member_id}", response_model=PermissionAssignResponse)
async def assign_permissions(
    member_id: int,
    data: PermissionAssignRequest,
    actor: ActorContext = Depends(require_any_permission(*PERMISSION_ASSIGNMENT_PERMISSIONS)),
    db: Session = Depends(get_db),
    authorizer: MemberEditAuthorizer = Depends(get_authorizer),
):
    """
    Replace a member's permissions.

    - **Requires ADMINGERAL, ADMINFILIAL or permission_manage**
    - members_view is always kept
    - Restricted permissions cannot be given to a MEMBER
    """
    service = PermissionService(db, authorizer)
    return service.assign_permissions(member_id, data, actor)
