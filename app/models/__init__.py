# Database models

from app.models.user import User
from app.models.school_class import ClassStatus, SchoolClass

__all__ = [
    "User",
    "SchoolClass",
    "ClassStatus",
]
