"""User schemas."""

from app.core.permissions import Role
from app.schemas.common import CamelModel


class UserResponse(CamelModel):
    """Session user."""

    id: str
    name: str
    email: str
    role: Role


class TeacherResponse(CamelModel):
    """Ustad as shown when assigning a class."""

    id: str
    name: str
    email: str
    specialization: str = ""
    phone: str = ""
    current_classes: int = 0


class TeacherListResponse(CamelModel):
    ustad_list: list[TeacherResponse]
    total: int
