"""Forum roles.

Two levels:
- ADMIN (level 1): moderates any thread
- USER (level 0): manages only their own comments
"""

from enum import Enum


class UserRole(str, Enum):
    """User roles with hierarchical levels."""

    USER = "user"
    ADMIN = "admin"


ROLE_HIERARCHY: dict[UserRole, int] = {
    UserRole.USER: 0,
    UserRole.ADMIN: 1,
}


def get_role_level(role: UserRole | str | None) -> int:
    """Get the permission level for a role.

    Unknown or missing roles get level 0.
    """
    if role is None:
        return 0
    if isinstance(role, str):
        try:
            role = UserRole(role)
        except ValueError:
            return 0
    return ROLE_HIERARCHY.get(role, 0)


def has_permission(user_role: UserRole | str | None, required_role: UserRole | str) -> bool:
    """Check if ``user_role`` is at least ``required_role``.

    Examples:
        >>> has_permission(UserRole.ADMIN, UserRole.USER)
        True
        >>> has_permission("user", "admin")
        False
    """
    return get_role_level(user_role) >= get_role_level(required_role)
