"""Classes (kelas) API routes."""

import math
from typing import Annotated

from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.config import settings
from app.core.database import get_db
from app.core.deps import AdminUser, ClassReader
from app.core.exceptions import AuthorizationError, NotFoundError, ValidationError
from app.core.permissions import is_scoped_to_own_classes
from app.schemas.school_class import (
    ClassCreate,
    ClassCreateResponse,
    ClassDeleteResponse,
    ClassListResponse,
    ClassResponse,
    ClassUpdate,
    ClassUpdateResponse,
    ConflictCheckRequest,
    ConflictCheckResponse,
)
from app.services import school_class as school_class_service

router = APIRouter(prefix="/classes", tags=["Classes"])


def require_class_id(class_id: str | None) -> str:
    if not class_id:
        raise ValidationError(
            "Class ID is required",
            details=[{"path": ["id"], "message": "Class ID is required"}],
        )
    return class_id


async def get_class_or_404(db: AsyncSession, class_id: str):
    school_class = await school_class_service.get_school_class_by_id(db, class_id)
    if not school_class:
        raise NotFoundError("Class not found")
    return school_class


@router.get("", response_model=ClassListResponse)
async def list_classes(
    db: Annotated[AsyncSession, Depends(get_db)],
    current_user: ClassReader,
    academic_year: str | None = Query(None, alias="academicYear"),
    ustad_id: str | None = Query(None, alias="ustadId"),
    page: int = Query(1, ge=1),
    limit: int = Query(settings.CLASS_LIST_DEFAULT_LIMIT, ge=1),
):
    """
    List classes with optional filters.

    - ADMIN: all classes
    - USTAD: only their own classes, whatever ``ustadId`` was requested
    """
    if is_scoped_to_own_classes(current_user.role):
        ustad_id = current_user.id

    classes, total = await school_class_service.get_school_classes(
        db, academic_year=academic_year, ustad_id=ustad_id, page=page, limit=limit
    )
    return ClassListResponse(
        classes=[ClassResponse.model_validate(c) for c in classes],
        total=total,
        page=page,
        limit=limit,
        total_pages=math.ceil(total / limit),
    )


@router.post(
    "",
    response_model=ClassCreateResponse,
    status_code=status.HTTP_201_CREATED,
)
async def create_class(
    class_data: ClassCreate,
    db: Annotated[AsyncSession, Depends(get_db)],
    current_user: AdminUser,
):
    """Create a class with its teacher, schedule and enrolled students."""
    school_class = await school_class_service.create_school_class(db, class_data, current_user)
    return ClassCreateResponse(
        message="Class created successfully",
        class_id=school_class.id,
        class_data=ClassResponse.model_validate(school_class),
    )


@router.post("/check-conflict", response_model=ConflictCheckResponse)
async def check_conflict(
    request: ConflictCheckRequest,
    db: Annotated[AsyncSession, Depends(get_db)],
    current_user: AdminUser,
):
    """Advisory schedule check for the class wizard. Writes nothing."""
    conflict = await school_class_service.check_schedule_conflict(
        db,
        request.ustad_id,
        request.schedule.to_document(),
        exclude_class_id=request.exclude_class_id,
    )
    if conflict is None:
        return ConflictCheckResponse(conflict=False)
    return ConflictCheckResponse(
        conflict=True,
        class_name=conflict.class_name,
        conflict_schedule=conflict.conflict_schedule,
    )


@router.get("/{class_id}", response_model=ClassResponse)
async def get_class(
    class_id: str,
    db: Annotated[AsyncSession, Depends(get_db)],
    current_user: ClassReader,
):
    """Get a class by ID."""
    school_class = await get_class_or_404(db, class_id)
    if is_scoped_to_own_classes(current_user.role) and school_class.ustad_id != current_user.id:
        raise AuthorizationError("You can only view your own classes")
    return school_class


@router.put("", response_model=ClassUpdateResponse)
async def update_class(
    class_data: ClassUpdate,
    db: Annotated[AsyncSession, Depends(get_db)],
    current_user: AdminUser,
    class_id: str | None = Query(None, alias="id"),
):
    """Partially update a class."""
    class_id = require_class_id(class_id)
    school_class = await get_class_or_404(db, class_id)

    school_class = await school_class_service.update_school_class(
        db, school_class, class_data, current_user
    )

    update_data = class_data.model_dump(by_alias=True, exclude_unset=True, exclude_none=True)
    update_data.update(
        updatedAt=school_class.updated_at.isoformat(),
        updatedBy=school_class.updated_by,
        updatedByName=school_class.updated_by_name,
    )
    return ClassUpdateResponse(
        message="Class updated successfully",
        class_id=school_class.id,
        update_data=update_data,
    )


@router.delete("", response_model=ClassDeleteResponse)
async def delete_class(
    db: Annotated[AsyncSession, Depends(get_db)],
    current_user: AdminUser,
    class_id: str | None = Query(None, alias="id"),
):
    """Hard delete a class."""
    class_id = require_class_id(class_id)
    school_class = await get_class_or_404(db, class_id)

    await school_class_service.delete_school_class(db, school_class)
    return ClassDeleteResponse(message="Class deleted successfully", class_id=class_id)
