from __future__ import annotations
from typing import assert_never
from fastapi import Depends
from fastapi.security import HTTPBearer, HTTPAuthorizationCredentials
from viemind.models.user import User, Role
from viemind.services.auth import AuthService, get_auth_service
from viemind.services.errors import Forbidden, Unauthorized

security = HTTPBearer(auto_error=False)

async def get_bearer_token(credentials: HTTPAuthorizationCredentials | None = Depends(security)) -> str:
    if credentials is None or not credentials.credentials:
        raise Unauthorized("Access token required")
    return credentials.credentials

async def get_current_user(
    token: str = Depends(get_bearer_token),
    auth: AuthService = Depends(get_auth_service),
) -> User:
    return await auth.verify(token)

def is_moderator(role: Role) -> bool:
    match role:
        case Role.ADMIN:
            return True
        case Role.USER | Role.ORGANIZATION:
            return False
        case _:
            assert_never(role)

async def require_admin(user: User = Depends(get_current_user)) -> User:
    if not is_moderator(user.role):
        raise Forbidden("Admin role required")
    return user
