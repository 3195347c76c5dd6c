"""Bearer token validation. Tokens are issued by the shared auth service."""

from jose import JWTError, jwt

from church_api.config import settings
from church_api.core.exceptions import UnauthorizedException

# Claim -> message when it is missing, checked in this order
REQUIRED_CLAIMS = {
    "exp": "Token sem expiração",
    "sub": "Token sem identificador de usuário",
}


def decode_jwt(token: str) -> dict:
    """
    Decode an access token signed with the shared SECRET_KEY.

    Only ``sub`` is used afterwards. Role or permission claims are never
    trusted; the member is reloaded from the database on every request.

    Raises:
        UnauthorizedException: If the signature, expiration or a required claim is invalid
    """
    try:
        payload = jwt.decode(token, settings.SECRET_KEY, algorithms=[settings.JWT_ALGORITHM])
    except JWTError as e:
        raise UnauthorizedException(f"Token inválido: {e}")

    for claim, message in REQUIRED_CLAIMS.items():
        if payload.get(claim) is None:
            raise UnauthorizedException(message)
    return payload


def extract_user_id(token: str) -> str:
    """auth_user_id of the token subject (matches Member.auth_user_id)"""
    return str(decode_jwt(token)["sub"])
