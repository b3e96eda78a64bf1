"""Pydantic schemas."""

from app.schemas.auth import (
    Token,
    LoginRequest,
    RefreshRequest,
)
from app.schemas.school_class import (
    ClassCreate,
    ClassDetails,
    ClassUpdate,
    ClassResponse,
    ClassListResponse,
    Schedule,
)
from app.schemas.student import (
    Student,
    StudentFilters,
    StudentListResponse,
)

__all__ = [
    # Auth
    "Token",
    "LoginRequest",
    "RefreshRequest",
    # Classes
    "ClassCreate",
    "ClassDetails",
    "ClassUpdate",
    "ClassResponse",
    "ClassListResponse",
    "Schedule",
    # Students
    "Student",
    "StudentFilters",
    "StudentListResponse",
]
