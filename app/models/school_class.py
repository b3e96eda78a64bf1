"""SchoolClass model."""

from typing import Any

from sqlalchemy import JSON, ForeignKey, String
from sqlalchemy.orm import Mapped, mapped_column

from app.core.database import BaseModel


class ClassStatus:
    ACTIVE = "active"
    INACTIVE = "inactive"


class SchoolClass(BaseModel):
    """A kelas: one teacher, one weekly schedule, a set of enrolled santri.

    ``schedule`` holds ``{"days": [...], "startTime": "HH:MM", "endTime": "HH:MM"}``
    and ``student_ids`` maps each student id to ``{"enrolledAt", "status"}``.
    Both are stored as JSON documents and replaced wholesale on update.
    """

    __tablename__ = "classes"

    name: Mapped[str] = mapped_column(String(50), nullable=False)
    academic_year: Mapped[str] = mapped_column(String(9), nullable=False, index=True)
    ustad_id: Mapped[str] = mapped_column(
        String(64),
        ForeignKey("users.id"),
        nullable=False,
        index=True,
    )
    ustad_name: Mapped[str | None] = mapped_column(String(100), nullable=True)
    schedule: Mapped[dict[str, Any]] = mapped_column(JSON, nullable=False)
    student_ids: Mapped[dict[str, Any]] = mapped_column(JSON, nullable=False, default=dict)
    status: Mapped[str] = mapped_column(String(20), nullable=False, default=ClassStatus.ACTIVE)

    created_by: Mapped[str | None] = mapped_column(String(64), nullable=True)
    created_by_name: Mapped[str | None] = mapped_column(String(100), nullable=True)
    updated_by: Mapped[str | None] = mapped_column(String(64), nullable=True)
    updated_by_name: Mapped[str | None] = mapped_column(String(100), nullable=True)

    @property
    def student_count(self) -> int:
        return len(self.student_ids or {})

    def __repr__(self) -> str:
        return f"<SchoolClass(id={self.id}, name={self.name}, year={self.academic_year})>"
