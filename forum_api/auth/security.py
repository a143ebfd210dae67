"""JWT access token helpers.

Tokens are issued by the forum's auth service; this API only needs to
validate them. ``create_access_token`` is kept for tooling and tests that
need to mint a token signed with the shared key.
"""

from datetime import UTC, datetime, timedelta
from typing import Any

from jose import JWTError, jwt

from forum_api.config.settings import get_settings


def create_access_token(
    data: dict[str, Any],
    expires_delta: timedelta | None = None,
) -> str:
    """Create a signed access token.

    Args:
        data: Claims, typically ``{"sub", "name", "email", "role", "avatar"}``
        expires_delta: Token lifetime (default from settings)

    Returns:
        Encoded JWT string with ``exp``, ``iat`` and ``type="access"`` added.
    """
    settings = get_settings()

    to_encode = data.copy()
    now = datetime.now(UTC)
    expire = now + (
        expires_delta or timedelta(minutes=settings.auth_access_token_expire_minutes)
    )
    to_encode.update({"exp": expire, "iat": now, "type": "access"})

    return jwt.encode(
        to_encode,
        settings.auth_secret_key,
        algorithm=settings.auth_algorithm,
    )


def decode_access_token(token: str) -> dict[str, Any]:
    """Decode and validate an access token.

    Validates signature, expiration, token type and presence of ``sub``.

    Raises:
        JWTError: If the token is invalid, expired or malformed.
    """
    settings = get_settings()

    payload = jwt.decode(
        token,
        settings.auth_secret_key,
        algorithms=[settings.auth_algorithm],
    )

    if payload.get("type") != "access":
        msg = "Invalid token type: expected 'access'"
        raise JWTError(msg)

    if not payload.get("sub"):
        msg = "Token has no subject"
        raise JWTError(msg)

    return payload
