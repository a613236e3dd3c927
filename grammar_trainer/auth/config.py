"""Authentication configuration for signed room sessions."""

import os
from functools import lru_cache
from pydantic import BaseModel

MIN_SECRET_LENGTH = 16
DEFAULT_MAX_AGE_SECONDS = 30 * 24 * 60 * 60


class AuthSettings(BaseModel):
    """Authentication settings loaded from environment variables."""

    session_secret: str = ""
    cookie_name: str = "gc_session"
    max_age_seconds: int = DEFAULT_MAX_AGE_SECONDS
    cookie_secure: bool = False
    enabled: bool = True  # Set to False to use X-User-Id headers (local dev, tests)

    @property
    def algorithm(self) -> str:
        return "HS256"

    def is_configured(self) -> bool:
        """Check if a usable signing secret is set."""
        return len(self.session_secret) >= MIN_SECRET_LENGTH


def _env_flag(name: str, default: str) -> bool:
    return os.getenv(name, default).lower() not in ("false", "0", "no", "off")


@lru_cache()
def get_auth_settings() -> AuthSettings:
    """Get cached authentication settings from environment variables."""
    return AuthSettings(
        session_secret=os.getenv("SESSION_SECRET", ""),
        cookie_name=os.getenv("COOKIE_NAME", "gc_session"),
        max_age_seconds=int(os.getenv("SESSION_MAX_AGE_SECONDS", str(DEFAULT_MAX_AGE_SECONDS))),
        cookie_secure=_env_flag("COOKIE_SECURE", "false"),
        enabled=_env_flag("AUTH_ENABLED", "true"),
    )
