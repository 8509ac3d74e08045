from __future__ import annotations
from fastapi import Depends
from fastapi.security import HTTPBearer, HTTPAuthorizationCredentials
import jwt
from cpboard.errors import UnauthorizedError, ForbiddenError
from cpboard.security import Identity, decode_token, identity_from_claims

security = HTTPBearer(auto_error=False)

async def get_current_identity(
    credentials: HTTPAuthorizationCredentials | None = Depends(security),
) -> Identity:
    if credentials is None:
        raise UnauthorizedError("Missing access token")
    try:
        data = decode_token(credentials.credentials)
    except jwt.PyJWTError as e:
        raise UnauthorizedError("Invalid token", error=str(e))
    if data.get("type") != "access":
        raise UnauthorizedError("Wrong token type")
    if not data.get("sub"):
        raise UnauthorizedError("Invalid token")
    return identity_from_claims(data)

async def require_admin(identity: Identity = Depends(get_current_identity)) -> Identity:
    if not identity.is_admin:
        raise ForbiddenError()
    return identity
