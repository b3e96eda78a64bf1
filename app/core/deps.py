"""Dependencies for FastAPI routes."""

from typing import Annotated

from fastapi import Depends
from fastapi.security import OAuth2PasswordBearer
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.database import get_db
from app.core.exceptions import AuthenticationError, AuthorizationError, NotFoundError
from app.core.permissions import Role, has_permission
from app.core.security import decode_access_token
from app.models.user import User

oauth2_scheme = OAuth2PasswordBearer(tokenUrl="/api/v1/auth/login/form", auto_error=False)


async def get_current_user(
    token: Annotated[str | None, Depends(oauth2_scheme)],
    db: Annotated[AsyncSession, Depends(get_db)],
) -> User:
    """Resolve the session user from the bearer token."""
    if not token:
        raise AuthenticationError("Unauthorized")

    payload = decode_access_token(token)
    if payload is None or payload.get("type") != "access":
        raise AuthenticationError("Could not validate credentials")

    user_id: str | None = payload.get("sub")
    if user_id is None:
        raise AuthenticationError("Could not validate credentials")

    result = await db.execute(select(User).where(User.id == user_id))
    user = result.scalar_one_or_none()

    if user is None:
        raise NotFoundError("User not found")

    if not user.is_active:
        raise AuthorizationError("Inactive user")

    return user


def require_permission(permission: str):
    """Dependency factory to check if user has a specific permission."""

    async def permission_checker(
        current_user: Annotated[User, Depends(get_current_user)],
    ) -> User:
        if not has_permission(current_user.role, permission):
            raise AuthorizationError("Not enough permissions")
        return current_user

    return permission_checker


def require_roles(*roles: Role):
    """Dependency factory to check if user has one of the specified roles."""

    async def role_checker(
        current_user: Annotated[User, Depends(get_current_user)],
    ) -> User:
        if current_user.role not in roles:
            raise AuthorizationError("Not enough permissions")
        return current_user

    return role_checker


# Common dependency aliases
CurrentUser = Annotated[User, Depends(get_current_user)]
AdminUser = Annotated[User, Depends(require_roles(Role.ADMIN))]
ClassReader = Annotated[User, Depends(require_permission("classes:read"))]
