"""Student (santri) service.

Santri live in two shapes: as top-level users with role ``santri`` and,
for older records, embedded inside their parent's user document. Every read
goes through :func:`normalize_students` so that filtering and selection only
ever see canonical :class:`Student` records.
"""

import logging
import math
from collections.abc import Iterable
from datetime import datetime
from typing import Any

from sqlalchemy.ext.asyncio import AsyncSession

from app.core.permissions import Role
from app.models.user import User
from app.schemas.student import Pagination, Student, StudentFilters
from app.services.user import get_all_users

logger = logging.getLogger(__name__)


def _isoformat(value: datetime | str | None) -> str | None:
    if isinstance(value, datetime):
        return value.isoformat()
    return value


def _embedded_student(parent: User, student_id: str, data: dict[str, Any], source: str) -> Student:
    return Student(
        id=student_id,
        name=data.get("name") or "",
        email=data.get("email") or "",
        entry_year=str(data.get("entryYear") or data.get("tahunDaftar") or ""),
        status=data.get("status") or "active",
        orang_tua_id=parent.id,
        created_at=_isoformat(data.get("createdAt")) or _isoformat(parent.created_at),
        source=source,
    )


def embedded_students(parent: User) -> list[Student]:
    """Students stored inside a parent record, as a map or as a list."""
    legacy = parent.legacy_students
    if isinstance(legacy, list):
        return [
            _embedded_student(parent, f"array-{parent.id}-{index}", data, "array")
            for index, data in enumerate(legacy)
            if isinstance(data, dict)
        ]
    if isinstance(legacy, dict):
        return [
            _embedded_student(parent, student_id, data, "object")
            for student_id, data in legacy.items()
            if isinstance(data, dict)
        ]
    return []


def normalize_students(users: Iterable[User]) -> list[Student]:
    """Reconcile both student formats into one list of canonical records."""
    students: list[Student] = []
    for user in users:
        if user.role == Role.SANTRI:
            students.append(
                Student(
                    id=user.id,
                    name=user.name,
                    email=user.email,
                    entry_year=user.entry_year or "",
                    status=user.status or "active",
                    orang_tua_id=user.orang_tua_id or "",
                    created_at=_isoformat(user.created_at),
                    source="user",
                )
            )
        elif user.role == Role.ORANGTUA:
            students.extend(embedded_students(user))
    return students


def _is_set(value: str | None) -> bool:
    return bool(value) and value != "all"


def filter_students(students: Iterable[Student], filters: StudentFilters) -> list[Student]:
    """Apply exact-match and free-text filters."""
    result = list(students)

    if _is_set(filters.entry_year):
        result = [s for s in result if s.entry_year == filters.entry_year]

    if _is_set(filters.status):
        result = [s for s in result if s.status == filters.status]

    if filters.search:
        needle = filters.search.lower()
        result = [
            s for s in result
            if needle in s.name.lower() or needle in s.email.lower()
        ]

    return result


def paginate(total: int, page: int, limit: int) -> Pagination:
    return Pagination(
        total=total,
        page=page,
        limit=limit,
        total_pages=math.ceil(total / limit) if limit else 0,
        has_next=page * limit < total,
        has_prev=page > 1,
    )


async def get_normalized_students(db: AsyncSession) -> list[Student]:
    users = await get_all_users(db)
    return normalize_students(users)


async def get_students(
    db: AsyncSession,
    filters: StudentFilters,
    *,
    page: int = 1,
    limit: int = 25,
) -> tuple[list[Student], int, list[str]]:
    """
    Get one page of filtered students.

    Returns the page, the filtered total and the distinct entry years of the
    filtered set.
    """
    students = filter_students(await get_normalized_students(db), filters)
    total = len(students)
    entry_years = sorted({s.entry_year for s in students if s.entry_year})

    start = (page - 1) * limit
    logger.debug("Students: %d matched, returning page %d (limit %d)", total, page, limit)
    return students[start:start + limit], total, entry_years


async def get_student_ids(db: AsyncSession, filters: StudentFilters) -> list[str]:
    """Every id matching the filters, ignoring pagination."""
    students = filter_students(await get_normalized_students(db), filters)
    return [s.id for s in students]
