"""Teacher (ustad) routes."""

from typing import Annotated

from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.database import get_db
from app.core.deps import require_permission
from app.models.user import User
from app.schemas.user import TeacherListResponse
from app.services import school_class as school_class_service
from app.services import user as user_service

router = APIRouter(prefix="/ustads", tags=["Teachers"])


@router.get("", response_model=TeacherListResponse)
async def list_teachers(
    db: Annotated[AsyncSession, Depends(get_db)],
    current_user: Annotated[User, Depends(require_permission("teachers:read"))],
) -> TeacherListResponse:
    """List teachers available for class assignment."""
    class_counts = await school_class_service.count_classes_by_teacher(db)
    teachers = await user_service.get_teachers(db, class_counts)
    return TeacherListResponse(ustad_list=teachers, total=len(teachers))
