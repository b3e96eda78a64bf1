"""Student (santri) routes used by class enrollment."""

from typing import Annotated

from fastapi import APIRouter, Depends, Query
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.config import settings
from app.core.database import get_db
from app.core.deps import require_permission
from app.models.user import User
from app.schemas.student import (
    StudentFilterOptions,
    StudentFilters,
    StudentIdsResponse,
    StudentListResponse,
)
from app.services import student as student_service

router = APIRouter(prefix="/santri", tags=["Students"])

StudentReader = Annotated[User, Depends(require_permission("students:read"))]


def get_student_filters(
    entry_year: str | None = Query(None, alias="entryYear", description="Exact entry year, or 'all'"),
    status: str | None = Query(None, description="Exact status, or 'all'"),
    search: str | None = Query(None, description="Search by name or email"),
) -> StudentFilters:
    return StudentFilters(entry_year=entry_year, status=status, search=search)


@router.get("", response_model=StudentListResponse)
async def list_students(
    db: Annotated[AsyncSession, Depends(get_db)],
    current_user: StudentReader,
    filters: Annotated[StudentFilters, Depends(get_student_filters)],
    page: int = Query(1, ge=1),
    limit: int = Query(settings.STUDENT_LIST_DEFAULT_LIMIT, ge=1, le=100),
) -> StudentListResponse:
    """
    List santri for enrollment.

    Both top-level and parent-embedded students are listed. The total counts
    the filtered set before pagination.
    """
    students, total, entry_years = await student_service.get_students(
        db, filters, page=page, limit=limit
    )
    return StudentListResponse(
        students=students,
        total=total,
        pagination=student_service.paginate(total, page, limit),
        filters=StudentFilterOptions(entry_years=entry_years),
    )


@router.get("/ids", response_model=StudentIdsResponse)
async def list_student_ids(
    db: Annotated[AsyncSession, Depends(get_db)],
    current_user: StudentReader,
    filters: Annotated[StudentFilters, Depends(get_student_filters)],
) -> StudentIdsResponse:
    """Every student id matching the filters, for "select all filtered"."""
    student_ids = await student_service.get_student_ids(db, filters)
    return StudentIdsResponse(student_ids=student_ids, total=len(student_ids))
