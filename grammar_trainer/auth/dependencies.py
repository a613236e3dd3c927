"""FastAPI dependencies for authentication."""

from typing import Annotated
from fastapi import Depends, HTTPException, Header, Request, status
from fastapi.security import HTTPBearer, HTTPAuthorizationCredentials
from pydantic import BaseModel

from .config import get_auth_settings
from .token_validator import validate_token, TokenValidationError


# HTTP Bearer security scheme, used when the session cookie is not sent
bearer_scheme = HTTPBearer(
    scheme_name="Bearer",
    description="Session token returned by POST /api/login",
    auto_error=False,  # Don't auto-error; we handle it for better error messages
)


class CurrentUser(BaseModel):
    """
    Represents the authenticated room member.

    Attributes:
        user_id: The user's id (sub claim).
        room_id: The room the user belongs to (room claim).
        display_name: The user's display name (name claim).
    """

    user_id: str
    room_id: str
    display_name: str

    @classmethod
    def from_token_claims(cls, claims: dict) -> "CurrentUser":
        """Create a CurrentUser from decoded token claims."""
        return cls(
            user_id=claims["sub"],
            room_id=claims["room"],
            display_name=claims["name"],
        )


def _unauthorized(detail: str) -> HTTPException:
    return HTTPException(
        status_code=status.HTTP_401_UNAUTHORIZED,
        detail=detail,
        headers={"WWW-Authenticate": "Bearer"},
    )


async def get_current_user(
    request: Request,
    credentials: Annotated[HTTPAuthorizationCredentials | None, Depends(bearer_scheme)],
    x_user_id: str | None = Header(None, description="User ID header (dev fallback)"),
    x_room_id: str | None = Header(None, description="Room ID header (dev fallback)"),
    x_display_name: str | None = Header(None, description="Display name header (dev fallback)"),
) -> CurrentUser:
    """
    FastAPI dependency that validates the session and returns the current user.

    The session token is read from the session cookie, or from the
    Authorization header as a Bearer token.

    For local development, set AUTH_ENABLED=false and provide the X-User-Id
    header (plus optionally X-Room-Id and X-Display-Name).

    Raises:
        HTTPException: 401 if the token is missing or invalid.
    """
    settings = get_auth_settings()

    # If auth is disabled (local dev mode), use the header fallback
    if not settings.enabled:
        if x_user_id:
            return CurrentUser(
                user_id=x_user_id,
                room_id=x_room_id or "local-room",
                display_name=x_display_name or x_user_id,
            )
        raise _unauthorized("Authentication disabled but no X-User-Id header provided")

    token = request.cookies.get(settings.cookie_name)
    if not token and credentials is not None:
        token = credentials.credentials
    if not token:
        raise _unauthorized("Missing authentication token")

    try:
        claims = validate_token(token)
        return CurrentUser.from_token_claims(claims)

    except TokenValidationError as e:
        raise HTTPException(
            status_code=e.status_code,
            detail=e.message,
            headers={"WWW-Authenticate": "Bearer"},
        )


# Convenience dependency aliases
require_auth = Depends(get_current_user)
