"""Schemas for classes (kelas)."""

from datetime import datetime
from typing import Annotated, Any

from pydantic import AfterValidator, Field, model_validator

from app.core.config import settings
from app.schemas.common import CamelModel
from app.schemas.validators import (
    MAX_CLASS_DURATION_MINUTES,
    MIN_CLASS_DURATION_MINUTES,
    AcademicYear,
    ClassName,
    TimeOfDay,
    Weekday,
    time_to_minutes,
    unique_ids,
)

NewStudentIds = Annotated[
    list[str],
    Field(min_length=1, max_length=settings.MAX_STUDENTS_PER_CLASS),
    AfterValidator(unique_ids),
]

StudentIds = Annotated[
    list[str],
    Field(max_length=settings.MAX_STUDENTS_PER_CLASS),
    AfterValidator(unique_ids),
]


class Schedule(CamelModel):
    """Weekly schedule: a set of days and one time window."""

    days: list[Weekday] = Field(..., min_length=1, max_length=6)
    start_time: TimeOfDay
    end_time: TimeOfDay

    @model_validator(mode="after")
    def check_time_window(self) -> "Schedule":
        if len(set(self.days)) != len(self.days):
            raise ValueError("Days must not repeat")
        duration = time_to_minutes(self.end_time) - time_to_minutes(self.start_time)
        if duration <= 0:
            raise ValueError("End time must be after start time")
        if not MIN_CLASS_DURATION_MINUTES <= duration <= MAX_CLASS_DURATION_MINUTES:
            raise ValueError("Class duration must be between 30 minutes and 6 hours")
        return self

    def to_document(self) -> dict[str, Any]:
        return self.model_dump(by_alias=True)


class ClassDetails(CamelModel):
    """First wizard step: what, when and who teaches."""

    name: ClassName
    academic_year: AcademicYear
    ustad_id: str = Field(..., min_length=1)
    schedule: Schedule


class ClassCreate(ClassDetails):
    """Schema for creating a class: details plus the enrolled students."""

    student_ids: NewStudentIds


class ClassUpdate(CamelModel):
    """Schema for updating a class. Every field is optional."""

    name: ClassName | None = None
    academic_year: AcademicYear | None = None
    ustad_id: str | None = Field(None, min_length=1)
    schedule: Schedule | None = None
    student_ids: StudentIds | None = None
    status: str | None = Field(None, pattern="^(active|inactive)$")


class ConflictCheckRequest(CamelModel):
    """Advisory schedule conflict check, used while filling in the wizard."""

    ustad_id: str = Field(..., min_length=1)
    schedule: Schedule
    exclude_class_id: str | None = None


class ConflictCheckResponse(CamelModel):
    conflict: bool
    class_name: str | None = None
    conflict_schedule: dict[str, Any] | None = None


class Enrollment(CamelModel):
    enrolled_at: str
    status: str


class ClassResponse(CamelModel):
    """Class response schema."""

    id: str
    name: str
    academic_year: str
    ustad_id: str
    ustad_name: str | None
    schedule: dict[str, Any]
    student_ids: dict[str, Enrollment]
    student_count: int
    status: str
    created_at: datetime
    created_by: str | None
    created_by_name: str | None
    updated_at: datetime | None = None
    updated_by: str | None = None
    updated_by_name: str | None = None


class ClassListResponse(CamelModel):
    """Paginated list of classes."""

    classes: list[ClassResponse]
    total: int
    page: int
    limit: int
    total_pages: int


class ClassCreateResponse(CamelModel):
    message: str
    class_id: str
    class_data: ClassResponse


class ClassUpdateResponse(CamelModel):
    message: str
    class_id: str
    update_data: dict[str, Any]


class ClassDeleteResponse(CamelModel):
    message: str
    class_id: str
