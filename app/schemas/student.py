"""Student (santri) schemas."""

from pydantic import Field

from app.schemas.common import CamelModel

STUDENT_STATUSES = ["active", "inactive", "graduated"]


class Student(CamelModel):
    """Canonical santri record, whichever format it was stored in."""

    id: str
    name: str
    email: str = ""
    entry_year: str = ""
    status: str = "active"
    orang_tua_id: str = ""
    created_at: str | None = None
    source: str = "user"


class StudentFilters(CamelModel):
    """Filters for the enrollment student list. ``all`` or empty means no filter."""

    entry_year: str | None = None
    status: str | None = None
    search: str | None = None


class Pagination(CamelModel):
    total: int
    page: int
    limit: int
    total_pages: int
    has_next: bool
    has_prev: bool


class StudentFilterOptions(CamelModel):
    entry_years: list[str]
    available_statuses: list[str] = Field(default_factory=lambda: list(STUDENT_STATUSES))


class StudentListResponse(CamelModel):
    """One page of students plus the filter options for the dropdowns."""

    students: list[Student]
    total: int
    pagination: Pagination
    filters: StudentFilterOptions


class StudentIdsResponse(CamelModel):
    """Every student id matching the filters, unpaginated."""

    student_ids: list[str]
    total: int
