"""Session token issuing and validation (HS256 JWTs)."""

import time
from typing import Any
import jwt

from .config import get_auth_settings


class TokenValidationError(Exception):
    """Raised when token validation fails."""

    def __init__(self, message: str, status_code: int = 401):
        self.message = message
        self.status_code = status_code
        super().__init__(self.message)


def _require_secret() -> str:
    settings = get_auth_settings()
    if not settings.is_configured():
        raise TokenValidationError(
            "Authentication not configured. Set SESSION_SECRET (at least 16 characters).",
            status_code=500,
        )
    return settings.session_secret


def create_session_token(user_id: str, room_id: str, display_name: str, now: float | None = None) -> str:
    """
    Issue a signed session token for a room member.

    Args:
        user_id: Stored as the ``sub`` claim.
        room_id: Stored as the ``room`` claim.
        display_name: Stored as the ``name`` claim.
        now: Issue time as a Unix timestamp, defaults to the current time.

    Raises:
        TokenValidationError: If no signing secret is configured.
    """
    secret = _require_secret()
    settings = get_auth_settings()
    issued_at = int(now if now is not None else time.time())
    claims = {
        "sub": user_id,
        "room": room_id,
        "name": display_name,
        "iat": issued_at,
        "exp": issued_at + settings.max_age_seconds,
    }
    return jwt.encode(claims, secret, algorithm=settings.algorithm)


def validate_token(token: str) -> dict[str, Any]:
    """
    Validate a session token.

    This function validates:
    - Token signature against SESSION_SECRET
    - Token expiration (exp claim)
    - Presence of the sub, room and name claims

    Args:
        token: The JWT session token to validate.

    Returns:
        The decoded token claims if valid.

    Raises:
        TokenValidationError: If the token is invalid.
    """
    secret = _require_secret()
    settings = get_auth_settings()

    try:
        return jwt.decode(
            token,
            secret,
            algorithms=[settings.algorithm],
            options={
                "require": ["exp", "iat", "sub", "room", "name"],
                "verify_exp": True,
                "verify_iat": True,
            },
        )
    except jwt.ExpiredSignatureError:
        raise TokenValidationError("Token has expired")
    except jwt.InvalidTokenError as e:
        raise TokenValidationError(f"Invalid token: {str(e)}")
