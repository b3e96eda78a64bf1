"""CLI commands for management tasks."""

import asyncio
import sys

from app.core.database import Base, async_session_maker, engine
from app.core.permissions import Role
from app.models import SchoolClass, User  # noqa: F401  (register tables)
from app.services.user import create_user, get_user_by_email, get_users_by_role


async def init_db() -> None:
    """Create all tables."""
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    print("✓ Tables created")


async def create_admin(email: str, password: str, name: str) -> None:
    """Create an administrator account."""
    async with async_session_maker() as db:
        if await get_user_by_email(db, email):
            print(f"Error: Email {email} is already registered!")
            sys.exit(1)

        existing_admins = await get_users_by_role(db, Role.ADMIN)
        admin = await create_user(
            db, email=email, password=password, name=name, role=Role.ADMIN
        )

        print("✓ Admin created successfully!")
        print(f"  ID: {admin.id}")
        print(f"  Name: {admin.name}")
        print(f"  Email: {admin.email}")
        print(f"  Admins in total: {len(existing_admins) + 1}")


def main() -> None:
    """CLI entry point."""
    if len(sys.argv) < 2:
        print("Usage: python -m app.cli <command>")
        print("Commands:")
        print("  init-db")
        print("  create-admin <email> <password> <name>")
        sys.exit(1)

    command = sys.argv[1]

    if command == "init-db":
        asyncio.run(init_db())
    elif command == "create-admin":
        if len(sys.argv) != 5:
            print("Usage: python -m app.cli create-admin <email> <password> <name>")
            sys.exit(1)

        _, _, email, password, name = sys.argv
        asyncio.run(create_admin(email, password, name))
    else:
        print(f"Unknown command: {command}")
        sys.exit(1)


if __name__ == "__main__":
    main()
