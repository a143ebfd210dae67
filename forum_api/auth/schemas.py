"""Identity resolved from the bearer token."""

from typing import Any

from pydantic import BaseModel

from forum_api.auth.permissions import UserRole, has_permission


class ForumUser(BaseModel):
    """Authenticated forum user."""

    id: str
    name: str
    email: str | None = None
    role: UserRole = UserRole.USER
    avatar: str | None = None

    @property
    def is_admin(self) -> bool:
        return has_permission(self.role, UserRole.ADMIN)

    @classmethod
    def from_token_payload(cls, payload: dict[str, Any]) -> "ForumUser":
        """Build the identity from decoded JWT claims.

        Unknown roles fall back to USER. A missing name falls back to the
        local part of the e-mail address.
        """
        email = payload.get("email")
        name = payload.get("name") or (email.split("@")[0] if email else "") or "User"

        try:
            role = UserRole(payload.get("role") or UserRole.USER.value)
        except ValueError:
            role = UserRole.USER

        return cls(
            id=str(payload["sub"]),
            name=name,
            email=email,
            role=role,
            avatar=payload.get("avatar"),
        )
