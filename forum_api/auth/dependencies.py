"""FastAPI dependencies for authentication.

Provides:
- Bearer token extraction
- Required and optional identity resolution
"""

from typing import Annotated

from fastapi import Depends, HTTPException, Request, status
from jose import JWTError

from forum_api.auth.schemas import ForumUser
from forum_api.auth.security import decode_access_token
from forum_api.core.context import set_user_id


def get_token_from_header(request: Request) -> str | None:
    """Extract Bearer token from Authorization header.

    Returns:
        Token string or None if absent or not a Bearer credential
    """
    auth_header = request.headers.get("Authorization")
    if not auth_header:
        return None

    expected_parts = 2
    parts = auth_header.split()
    if len(parts) != expected_parts or parts[0].lower() != "bearer":
        return None

    return parts[1]


async def get_current_user(
    token: Annotated[str | None, Depends(get_token_from_header)],
) -> ForumUser:
    """Resolve the authenticated user.

    Raises:
        HTTPException(401): If token is missing, invalid, or expired
    """
    if not token:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Authentication required",
            headers={"WWW-Authenticate": "Bearer"},
        )

    try:
        payload = decode_access_token(token)
    except JWTError as e:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Invalid or expired token",
            headers={"WWW-Authenticate": "Bearer"},
        ) from e

    user = ForumUser.from_token_payload(payload)
    set_user_id(user.id)
    return user


async def get_current_user_optional(
    token: Annotated[str | None, Depends(get_token_from_header)],
) -> ForumUser | None:
    """Resolve the user if a valid token is present, None otherwise.

    Used by read endpoints that work for anonymous visitors too.
    """
    if not token:
        return None

    try:
        payload = decode_access_token(token)
    except JWTError:
        return None

    user = ForumUser.from_token_payload(payload)
    set_user_id(user.id)
    return user


CurrentUser = Annotated[ForumUser, Depends(get_current_user)]

OptionalUser = Annotated[ForumUser | None, Depends(get_current_user_optional)]
