"""User model."""

from typing import Any

from sqlalchemy import JSON, Boolean, String
from sqlalchemy.orm import Mapped, mapped_column

from app.core.database import BaseModel
from app.core.permissions import Role


class User(BaseModel):
    """User document for every role: admin, ustad, santri and orangtua."""

    __tablename__ = "users"

    email: Mapped[str] = mapped_column(
        String(255),
        unique=True,
        nullable=False,
        index=True,
    )
    password_hash: Mapped[str] = mapped_column(String(255), nullable=False)
    name: Mapped[str] = mapped_column(String(100), nullable=False)
    role: Mapped[Role] = mapped_column(
        String(20),
        nullable=False,
        default=Role.SANTRI,
        index=True,
    )
    phone: Mapped[str | None] = mapped_column(String(50), nullable=True)

    # Ustad
    specialization: Mapped[str | None] = mapped_column(String(100), nullable=True)

    # Santri (top-level format)
    entry_year: Mapped[str | None] = mapped_column(String(10), nullable=True)
    status: Mapped[str | None] = mapped_column(String(20), nullable=True)
    orang_tua_id: Mapped[str | None] = mapped_column(String(64), nullable=True)

    # Orangtua (legacy format): students embedded in the parent record,
    # either as {studentId: {...}} or as [{...}, ...]
    legacy_students: Mapped[Any | None] = mapped_column(JSON, nullable=True)

    is_active: Mapped[bool] = mapped_column(
        Boolean,
        default=True,
        server_default="true",
    )

    @property
    def is_admin(self) -> bool:
        return self.role == Role.ADMIN

    @property
    def is_ustad(self) -> bool:
        return self.role == Role.USTAD

    def __repr__(self) -> str:
        return f"<User(id={self.id}, email={self.email}, role={self.role})>"
