"""Test configuration and fixtures."""

import os
from collections.abc import AsyncGenerator
from typing import Any

import pytest_asyncio
from httpx import ASGITransport, AsyncClient
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.pool import NullPool

from app.core.database import Base, get_db
from app.core.permissions import Role
from app.core.security import get_password_hash
from app.models.user import User
from main import app

# Test database URL - a throwaway SQLite file unless overridden
TEST_DATABASE_URL = os.environ.get(
    "TEST_DATABASE_URL", "sqlite+aiosqlite:///./test_pesantren.db"
)

# Create test engine with NullPool to avoid connection issues
test_engine = create_async_engine(
    TEST_DATABASE_URL,
    echo=False,
    poolclass=NullPool,
)
test_session_maker = async_sessionmaker(
    test_engine,
    class_=AsyncSession,
    expire_on_commit=False,
)

PASSWORD = "password123"
# Hashing is slow; every fixture user shares one hash
PASSWORD_HASH = get_password_hash(PASSWORD)


async def override_get_db() -> AsyncGenerator[AsyncSession, None]:
    """Override database dependency for tests."""
    async with test_session_maker() as session:
        yield session


@pytest_asyncio.fixture(scope="function")
async def setup_database() -> AsyncGenerator[None, None]:
    """Create test database tables before each test that needs it."""
    app.dependency_overrides[get_db] = override_get_db

    async with test_engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    yield
    async with test_engine.begin() as conn:
        await conn.run_sync(Base.metadata.drop_all)

    app.dependency_overrides.pop(get_db, None)


@pytest_asyncio.fixture
async def db(setup_database: None) -> AsyncGenerator[AsyncSession, None]:
    """Get database session for tests."""
    async with test_session_maker() as session:
        yield session


@pytest_asyncio.fixture
async def client(setup_database: None) -> AsyncGenerator[AsyncClient, None]:
    """Get async HTTP client."""
    async with AsyncClient(
        transport=ASGITransport(app=app),
        base_url="http://test",
    ) as ac:
        yield ac


async def make_user(db: AsyncSession, role: Role, email: str, name: str, **fields: Any) -> User:
    """Insert a user directly."""
    user = User(
        email=email,
        password_hash=PASSWORD_HASH,
        name=name,
        role=role,
        **fields,
    )
    db.add(user)
    await db.commit()
    await db.refresh(user)
    return user


@pytest_asyncio.fixture
async def admin_user(db: AsyncSession) -> User:
    """Create an administrator."""
    return await make_user(db, Role.ADMIN, "admin@pesantren.id", "Admin Pesantren")


@pytest_asyncio.fixture
async def ustad_user(db: AsyncSession) -> User:
    """Create a teacher."""
    return await make_user(
        db,
        Role.USTAD,
        "ahmad@pesantren.id",
        "Ustad Ahmad",
        specialization="Tahfidz",
        phone="081234567890",
    )


@pytest_asyncio.fixture
async def other_ustad(db: AsyncSession) -> User:
    """Create a second teacher."""
    return await make_user(db, Role.USTAD, "yusuf@pesantren.id", "Ustad Yusuf")


@pytest_asyncio.fixture
async def students(db: AsyncSession) -> list[User]:
    """Create three top-level santri."""
    return [
        await make_user(
            db, Role.SANTRI, "ali@pesantren.id", "Ali", entry_year="2023", status="active"
        ),
        await make_user(
            db, Role.SANTRI, "budi@pesantren.id", "Budi", entry_year="2024", status="active"
        ),
        await make_user(
            db, Role.SANTRI, "citra@pesantren.id", "Citra", entry_year="2024", status="inactive"
        ),
    ]


async def login(client: AsyncClient, email: str) -> str:
    response = await client.post(
        "/api/v1/auth/login",
        json={"email": email, "password": PASSWORD},
    )
    return response.json()["access_token"]


@pytest_asyncio.fixture
async def admin_token(client: AsyncClient, admin_user: User) -> str:
    """Get auth token for the administrator."""
    return await login(client, admin_user.email)


@pytest_asyncio.fixture
async def ustad_token(client: AsyncClient, ustad_user: User) -> str:
    """Get auth token for the teacher."""
    return await login(client, ustad_user.email)


def auth_header(token: str) -> dict[str, str]:
    """Create authorization header."""
    return {"Authorization": f"Bearer {token}"}


def class_payload(ustad_id: str, student_ids: list[str], **overrides: Any) -> dict[str, Any]:
    """A valid create-class body, camelCase as the API expects."""
    payload = {
        "name": "Kelas 7A",
        "academicYear": "2024/2025",
        "ustadId": ustad_id,
        "schedule": {"days": ["Senin"], "startTime": "08:00", "endTime": "09:00"},
        "studentIds": student_ids,
    }
    payload.update(overrides)
    return payload
