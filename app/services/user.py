"""User service."""

from typing import Any

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.permissions import Role
from app.core.security import get_password_hash
from app.models.user import User
from app.schemas.user import TeacherResponse


async def get_user_by_id(db: AsyncSession, user_id: str) -> User | None:
    """Get user by ID."""
    result = await db.execute(select(User).where(User.id == user_id))
    return result.scalar_one_or_none()


async def get_user_by_email(db: AsyncSession, email: str) -> User | None:
    """Get user by email."""
    result = await db.execute(
        select(User).where(User.email == email.lower())
    )
    return result.scalar_one_or_none()


async def get_all_users(db: AsyncSession) -> list[User]:
    """Full scan of the user collection, in creation order."""
    result = await db.execute(select(User).order_by(User.created_at, User.id))
    return list(result.scalars().all())


async def get_users_by_role(db: AsyncSession, role: Role) -> list[User]:
    result = await db.execute(
        select(User).where(User.role == role).order_by(User.created_at, User.id)
    )
    return list(result.scalars().all())


async def create_user(
    db: AsyncSession,
    *,
    email: str,
    password: str,
    name: str,
    role: Role,
    **fields: Any,
) -> User:
    """Create a new user."""
    user = User(
        email=email.lower(),
        password_hash=get_password_hash(password),
        name=name,
        role=role,
        **fields,
    )

    db.add(user)
    await db.commit()
    await db.refresh(user)

    return user


async def get_teachers(
    db: AsyncSession,
    class_counts: dict[str, int],
) -> list[TeacherResponse]:
    """List every ustad with the number of classes they currently teach."""
    teachers = await get_users_by_role(db, Role.USTAD)
    return [
        TeacherResponse(
            id=teacher.id,
            name=teacher.name,
            email=teacher.email,
            specialization=teacher.specialization or "",
            phone=teacher.phone or "",
            current_classes=class_counts.get(teacher.id, 0),
        )
        for teacher in teachers
    ]
