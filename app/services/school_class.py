"""SchoolClass service layer."""

import asyncio
import logging
from collections import defaultdict
from typing import Any

from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.database import utc_now
from app.core.exceptions import ConflictError, NotFoundError, ValidationError
from app.core.permissions import Role
from app.models.school_class import ClassStatus, SchoolClass
from app.models.user import User
from app.schemas.school_class import ClassCreate, ClassUpdate
from app.services.schedule import ScheduleConflict, find_schedule_conflict
from app.services.student import normalize_students
from app.services.user import get_all_users, get_user_by_id

logger = logging.getLogger(__name__)

SCHEDULE_CONFLICT_MESSAGE = "Schedule conflicts with another class"
DUPLICATE_CLASS_MESSAGE = (
    "A class with the same name, academic year and teacher already exists"
)

# Check-then-write on a teacher's classes runs under that teacher's lock.
# Only serializes requests inside one process.
_teacher_locks: defaultdict[str, asyncio.Lock] = defaultdict(asyncio.Lock)


def teacher_lock(teacher_id: str) -> asyncio.Lock:
    return _teacher_locks[teacher_id]


async def get_school_class_by_id(
    db: AsyncSession, class_id: str
) -> SchoolClass | None:
    """Get a class by ID."""
    result = await db.execute(select(SchoolClass).where(SchoolClass.id == class_id))
    return result.scalar_one_or_none()


async def get_school_classes(
    db: AsyncSession,
    *,
    academic_year: str | None = None,
    ustad_id: str | None = None,
    page: int = 1,
    limit: int = 50,
) -> tuple[list[SchoolClass], int]:
    """Get classes with optional filters, oldest first."""
    query = select(SchoolClass)
    count_query = select(func.count(SchoolClass.id))

    if academic_year:
        query = query.where(SchoolClass.academic_year == academic_year)
        count_query = count_query.where(SchoolClass.academic_year == academic_year)

    if ustad_id:
        query = query.where(SchoolClass.ustad_id == ustad_id)
        count_query = count_query.where(SchoolClass.ustad_id == ustad_id)

    query = query.order_by(SchoolClass.created_at, SchoolClass.id)
    query = query.offset((page - 1) * limit).limit(limit)

    result = await db.execute(query)
    classes = list(result.scalars().all())

    count_result = await db.execute(count_query)
    total = count_result.scalar() or 0

    return classes, total


async def get_teacher_classes(db: AsyncSession, teacher_id: str) -> list[SchoolClass]:
    result = await db.execute(
        select(SchoolClass)
        .where(SchoolClass.ustad_id == teacher_id)
        .order_by(SchoolClass.created_at, SchoolClass.id)
    )
    return list(result.scalars().all())


async def count_classes_by_teacher(db: AsyncSession) -> dict[str, int]:
    result = await db.execute(
        select(SchoolClass.ustad_id, func.count(SchoolClass.id)).group_by(SchoolClass.ustad_id)
    )
    return {ustad_id: count for ustad_id, count in result.all()}


async def check_schedule_conflict(
    db: AsyncSession,
    teacher_id: str,
    schedule: dict[str, Any],
    exclude_class_id: str | None = None,
) -> ScheduleConflict | None:
    """Find the first class of this teacher whose schedule overlaps."""
    classes = await get_teacher_classes(db, teacher_id)
    return find_schedule_conflict(classes, teacher_id, schedule, exclude_class_id)


async def find_duplicate_class(
    db: AsyncSession,
    name: str,
    academic_year: str,
    ustad_id: str,
    exclude_class_id: str | None = None,
) -> SchoolClass | None:
    """Find a class with the same (name, academic year, teacher)."""
    query = select(SchoolClass).where(
        SchoolClass.name == name,
        SchoolClass.academic_year == academic_year,
        SchoolClass.ustad_id == ustad_id,
    )
    if exclude_class_id:
        query = query.where(SchoolClass.id != exclude_class_id)
    result = await db.execute(query.limit(1))
    return result.scalar_one_or_none()


async def resolve_teacher(db: AsyncSession, ustad_id: str) -> User:
    """Load the assigned ustad, failing if missing or not a teacher."""
    teacher = await get_user_by_id(db, ustad_id)
    if teacher is None:
        raise NotFoundError("Teacher not found")
    if teacher.role != Role.USTAD:
        raise ValidationError(
            "Selected user is not a teacher",
            details=[{"path": ["ustadId"], "message": "Selected user is not a teacher"}],
        )
    return teacher


async def validate_student_ids(db: AsyncSession, student_ids: list[str]) -> None:
    """Every id must resolve to a santri, in either storage format."""
    users = await get_all_users(db)
    known_students = {student.id for student in normalize_students(users)}
    other_users = {user.id for user in users}

    for student_id in student_ids:
        if student_id in known_students:
            continue
        if student_id in other_users:
            raise ValidationError(
                "Selected user is not a student",
                details=[{"path": ["studentIds"], "message": f"{student_id} is not a student"}],
            )
        raise NotFoundError(f"Student {student_id} not found")


def build_enrollments(
    student_ids: list[str],
    existing: dict[str, Any] | None = None,
) -> dict[str, Any]:
    """Materialize the enrollment map, keeping metadata of retained students."""
    existing = existing or {}
    enrolled_at = utc_now().isoformat()
    return {
        student_id: existing.get(student_id)
        or {"enrolledAt": enrolled_at, "status": ClassStatus.ACTIVE}
        for student_id in student_ids
    }


def _raise_conflict(conflict: ScheduleConflict, teacher_id: str) -> None:
    logger.warning(
        "Schedule conflict for teacher %s with class %s (%s)",
        teacher_id,
        conflict.class_id,
        conflict.class_name,
    )
    raise ConflictError(SCHEDULE_CONFLICT_MESSAGE, conflict=conflict.to_dict())


async def create_school_class(
    db: AsyncSession,
    class_data: ClassCreate,
    created_by: User,
) -> SchoolClass:
    """
    Create a new class.

    Re-validates the teacher and students, then runs the conflict and
    duplicate checks before writing.
    """
    # Only known teachers get a lock
    teacher = await resolve_teacher(db, class_data.ustad_id)

    async with teacher_lock(teacher.id):
        await validate_student_ids(db, class_data.student_ids)

        schedule = class_data.schedule.to_document()
        conflict = await check_schedule_conflict(db, teacher.id, schedule)
        if conflict:
            _raise_conflict(conflict, teacher.id)

        duplicate = await find_duplicate_class(
            db, class_data.name, class_data.academic_year, teacher.id
        )
        if duplicate:
            raise ConflictError(DUPLICATE_CLASS_MESSAGE)

        school_class = SchoolClass(
            name=class_data.name,
            academic_year=class_data.academic_year,
            ustad_id=teacher.id,
            ustad_name=teacher.name,
            schedule=schedule,
            student_ids=build_enrollments(class_data.student_ids),
            status=ClassStatus.ACTIVE,
            created_by=created_by.id,
            created_by_name=created_by.name,
        )
        db.add(school_class)
        await db.commit()
        await db.refresh(school_class)

    logger.info(
        "Created class %s (%s) for teacher %s with %d students",
        school_class.id,
        school_class.name,
        teacher.id,
        school_class.student_count,
    )
    return school_class


async def update_school_class(
    db: AsyncSession,
    school_class: SchoolClass,
    class_data: ClassUpdate,
    updated_by: User,
) -> SchoolClass:
    """
    Apply a partial update.

    Fields absent from the partial are neither changed nor re-validated.
    The schedule conflict check runs when both ``schedule`` and ``ustadId``
    are part of the partial.
    """
    update_data = class_data.model_dump(exclude_unset=True, exclude_none=True)
    teacher = None
    if "ustad_id" in update_data:
        teacher = await resolve_teacher(db, class_data.ustad_id)
    target_teacher_id = teacher.id if teacher else school_class.ustad_id

    async with teacher_lock(target_teacher_id):
        if teacher:
            school_class.ustad_id = teacher.id
            school_class.ustad_name = teacher.name

        if "schedule" in update_data:
            schedule = class_data.schedule.to_document()
            if "ustad_id" in update_data:
                conflict = await check_schedule_conflict(
                    db, target_teacher_id, schedule, exclude_class_id=school_class.id
                )
                if conflict:
                    _raise_conflict(conflict, target_teacher_id)
            school_class.schedule = schedule

        if update_data.keys() & {"name", "academic_year", "ustad_id"}:
            duplicate = await find_duplicate_class(
                db,
                update_data.get("name", school_class.name),
                update_data.get("academic_year", school_class.academic_year),
                target_teacher_id,
                exclude_class_id=school_class.id,
            )
            if duplicate:
                raise ConflictError(DUPLICATE_CLASS_MESSAGE)

        if "student_ids" in update_data:
            await validate_student_ids(db, class_data.student_ids)
            school_class.student_ids = build_enrollments(
                class_data.student_ids, existing=school_class.student_ids
            )

        for field in ("name", "academic_year", "status"):
            if field in update_data:
                setattr(school_class, field, update_data[field])

        school_class.updated_at = utc_now()
        school_class.updated_by = updated_by.id
        school_class.updated_by_name = updated_by.name

        await db.commit()
        await db.refresh(school_class)

    logger.info("Updated class %s: %s", school_class.id, ", ".join(sorted(update_data)))
    return school_class


async def delete_school_class(db: AsyncSession, school_class: SchoolClass) -> None:
    """Hard delete a class. Nothing referencing it is cascaded."""
    await db.delete(school_class)
    await db.commit()
    logger.info("Deleted class %s (%s)", school_class.id, school_class.name)
