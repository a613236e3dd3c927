"""Authentication module for signed room sessions."""

from .config import get_auth_settings, AuthSettings
from .dependencies import get_current_user, CurrentUser, require_auth
from .token_validator import create_session_token, validate_token, TokenValidationError

__all__ = [
    "get_auth_settings",
    "AuthSettings",
    "get_current_user",
    "CurrentUser",
    "require_auth",
    "create_session_token",
    "validate_token",
    "TokenValidationError",
]
