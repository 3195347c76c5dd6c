import logging

from fastapi import Depends, HTTPException, status
from fastapi.security import HTTPBearer, HTTPAuthorizationCredentials
from sqlalchemy.orm import Session

from church_api.config import settings
from church_api.core.access import has_any_permission, has_any_role, is_elevated
from church_api.core.exceptions import ForbiddenException, NotFoundException, UnauthorizedException
from church_api.core.decisions import DenyReason
from church_api.core.member_authorizer import MemberEditAuthorizer
from church_api.core.security import extract_user_id
from church_api.database import get_db
from church_api.models.member import Member
from church_api.models.member_context import ActorContext
from church_api.models.role import MemberRole
from church_api.repositories.member_repository import MemberRepository

logger = logging.getLogger(__name__)

security = HTTPBearer()


async def get_current_member(
    credentials: HTTPAuthorizationCredentials = Depends(security), db: Session = Depends(get_db)
) -> Member:
    """
    FastAPI dependency to validate JWT and load the member record.

    Flow:
    1. Extract token from Authorization: Bearer <token>
    2. Validate JWT using shared SECRET_KEY
    3. Extract auth_user_id from 'sub' claim
    4. Load the Member with branch and permissions fresh from the database
    5. Return Member object for use in endpoints

    Role or permission claims carried by the token are ignored.

    Raises:
        HTTPException 401: If token invalid or expired
        NotFoundException: If no member is linked to the token subject
    """
    try:
        token = credentials.credentials
        auth_user_id = extract_user_id(token)
    except UnauthorizedException as e:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail=str(e),
            headers={"WWW-Authenticate": "Bearer"},
        )

    member = MemberRepository(db).get_by_auth_id(auth_user_id)
    if not member:
        raise NotFoundException("Membro não encontrado")
    return member


async def get_actor(member: Member = Depends(get_current_member)) -> ActorContext:
    """Snapshot of the authenticated member used for authorization decisions."""
    return ActorContext.from_member(member)


def get_authorizer() -> MemberEditAuthorizer:
    return MemberEditAuthorizer(allow_admingeral_promotion=settings.ALLOW_ADMINGERAL_PROMOTION)


def require_roles(*roles: MemberRole):
    """
    Route gate: only actors whose role is one of ``roles`` pass.

    Usage:
        @router.get("/", dependencies=[Depends(require_roles(MemberRole.ADMINGERAL))])
    """

    async def checker(actor: ActorContext = Depends(get_actor)) -> ActorContext:
        if not has_any_role(actor, roles):
            logger.warning("Role gate denied member %s (role=%s)", actor.member_id, actor.role.value)
            raise ForbiddenException("Acesso negado: role insuficiente", DenyReason.INSUFFICIENT_ROLE.value)
        return actor

    return checker


def require_any_permission(*permission_names: str, allow_elevated: bool = True):
    """
    Route gate: actors holding any of ``permission_names`` pass, and so do
    ADMINGERAL/ADMINFILIAL when ``allow_elevated`` is set.
    """

    async def checker(actor: ActorContext = Depends(get_actor)) -> ActorContext:
        if allow_elevated and is_elevated(actor):
            return actor
        if not has_any_permission(actor, permission_names):
            logger.warning(
                "Permission gate denied member %s (needs one of %s)",
                actor.member_id,
                ", ".join(permission_names),
            )
            raise ForbiddenException(
                "Acesso negado: permissão necessária", DenyReason.INSUFFICIENT_ROLE.value
            )
        return actor

    return checker
