from dataclasses import dataclass, field
from typing import List, Optional

from fastapi import Depends, HTTPException, status
from fastapi.security import HTTPBearer, HTTPAuthorizationCredentials

from laptop_api.core.security import verify_token, extract_roles, extract_token_from_header

security = HTTPBearer(auto_error=False)


@dataclass
class CurrentUser:
    username: str
    roles: List[str] = field(default_factory=list)

    def has_any_role(self, *roles: str) -> bool:
        return any(role in self.roles for role in roles)


def user_from_token(token: Optional[str]) -> Optional[CurrentUser]:
    """Пользователь из JWT токена или None, если токен недействителен"""
    if not token:
        return None
    payload = verify_token(token)
    if payload is None or payload.get("sub") is None:
        return None
    return CurrentUser(username=payload["sub"], roles=extract_roles(payload))


def user_from_authorization(authorization: Optional[str]) -> Optional[CurrentUser]:
    """Пользователь из заголовка Authorization (для GraphQL)"""
    return user_from_token(extract_token_from_header(authorization or ""))


async def get_optional_user(
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(security),
) -> Optional[CurrentUser]:
    if credentials is None:
        return None
    return user_from_token(credentials.credentials)


def require_roles(*roles: str):
    """Зависимость: текущий пользователь должен иметь одну из ролей"""

    async def dependency(user: Optional[CurrentUser] = Depends(get_optional_user)) -> CurrentUser:
        if user is None:
            raise HTTPException(
                status_code=status.HTTP_401_UNAUTHORIZED,
                detail="Could not validate credentials",
                headers={"WWW-Authenticate": "Bearer"},
            )
        if not user.has_any_role(*roles):
            raise HTTPException(
                status_code=status.HTTP_403_FORBIDDEN,
                detail="Insufficient role",
            )
        return user

    return dependency
