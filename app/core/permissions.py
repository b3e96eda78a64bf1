"""User roles and permissions."""

from enum import Enum


class Role(str, Enum):
    """User roles in the system."""

    ADMIN = "admin"  # Administrator, manages classes and users
    USTAD = "ustad"  # Teacher, sees only their own classes
    SANTRI = "santri"  # Student
    ORANGTUA = "orangtua"  # Parent, may carry legacy embedded students


# Permissions by role
ROLE_PERMISSIONS = {
    Role.ADMIN: [
        "classes:read",
        "classes:write",
        "students:read",
        "teachers:read",
    ],
    Role.USTAD: [
        "classes:read",
    ],
    Role.SANTRI: [],
    Role.ORANGTUA: [],
}


def has_permission(role: Role, permission: str) -> bool:
    """Check if a role has a specific permission."""
    return permission in ROLE_PERMISSIONS.get(Role(role), [])


def is_scoped_to_own_classes(role: Role) -> bool:
    """Teachers only ever see the classes they teach."""
    return role == Role.USTAD
