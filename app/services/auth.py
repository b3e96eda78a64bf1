"""Authentication service."""

from sqlalchemy.ext.asyncio import AsyncSession

from app.core.security import verify_password
from app.models.user import User
from app.services.user import get_user_by_email


async def authenticate_user(
    db: AsyncSession,
    email: str,
    password: str
) -> User | None:
    """Authenticate user with email and password."""
    user = await get_user_by_email(db, email)

    if not user:
        return None

    if not verify_password(password, user.password_hash):
        return None

    return user
