from fastapi import APIRouter, Depends, status
from sqlalchemy.orm import Session

from church_api.core.member_authorizer import MemberEditAuthorizer
from church_api.database import get_db
from church_api.dependencies import get_actor, get_authorizer, require_roles
from church_api.models.member_context import ActorContext
from church_api.models.role import MemberRole
from church_api.services.member_service import MemberService
from church_api.schemas.member_schemas import (
    FieldEditRequest,
    MemberCreate,
    MemberResponse,
    RoleChangeRequest,
)

router = APIRouter()


@router.get("", response_model=list[MemberResponse])
async def list_members(
    actor: ActorContext = Depends(get_actor),
    db: Session = Depends(get_db),
    authorizer: MemberEditAuthorizer = Depends(get_authorizer),
):
    """
    List members visible to the authenticated member.

    - ADMINGERAL: every member of the church
    - Everyone else: members of their own branch
    - Email, phone and address only for managers (null otherwise)
    """
    service = MemberService(db, authorizer)
    return service.list_members(actor)


@router.get("/me", response_model=MemberResponse)
async def get_my_profile(
    actor: ActorContext = Depends(get_actor),
    db: Session = Depends(get_db),
):
    """Get the authenticated member's own profile"""
    service = MemberService(db)
    return service.get_my_profile(actor)


@router.post("", response_model=MemberResponse, status_code=status.HTTP_201_CREATED)
async def create_member(
    data: MemberCreate,
    actor: ActorContext = Depends(get_actor),
    db: Session = Depends(get_db),
    authorizer: MemberEditAuthorizer = Depends(get_authorizer),
):
    """
    Create a member.

    - ADMINGERAL: any branch of the church
    - ADMINFILIAL, or COORDINATOR/MEMBER holding members_manage: own branch only
    - Nobody can create an ADMINGERAL
    """
    service = MemberService(db, authorizer)
    return service.create_member(data, actor)


@router.get("/{member_id}", response_model=MemberResponse)
async def get_member(
    member_id: int,
    actor: ActorContext = Depends(get_actor),
    db: Session = Depends(get_db),
    authorizer: MemberEditAuthorizer = Depends(get_authorizer),
):
    """Get member details, scoped by the viewer's role"""
    service = MemberService(db, authorizer)
    return service.get_member(member_id, actor)


@router.put("/{member_id}", response_model=MemberResponse)
@router.patch("/{member_id}", response_model=MemberResponse)
async def update_member(
    member_id: int,
    data: FieldEditRequest,
    actor: ActorContext = Depends(get_actor),
    db: Session = Depends(get_db),
    authorizer: MemberEditAuthorizer = Depends(get_authorizer),
):
    """
    Update member fields.

    - Members can edit their own profile, except their email
    - ADMINGERAL: any member of the church
    - ADMINFILIAL: members of its branch
    - Changing positionId also requires members_manage or an admin role
    """
    service = MemberService(db, authorizer)
    return service.update_member(member_id, data, actor)


@router.patch("/{member_id}/role", response_model=MemberResponse)
async def update_member_role(
    member_id: int,
    role_update: RoleChangeRequest,
    actor: ActorContext = Depends(require_roles(MemberRole.ADMINGERAL, MemberRole.ADMINFILIAL)),
    db: Session = Depends(get_db),
    authorizer: MemberEditAuthorizer = Depends(get_authorizer),
):
    """
    Update member's role.

    - **Requires ADMINGERAL or ADMINFILIAL**
    - ADMINFILIAL: only COORDINATOR/MEMBER, only in its branch
    - Cannot change your own role
    - Permissions are replaced by the new role's defaults
    """
    service = MemberService(db, authorizer)
    return service.change_role(member_id, role_update, actor)
