"""Token-based identity for the forum API.

Login and token issuing live in the external auth service; this package
only validates bearer tokens and exposes the resulting identity.
"""

from .permissions import UserRole, has_permission
from .schemas import ForumUser


__all__ = ["ForumUser", "UserRole", "has_permission"]
