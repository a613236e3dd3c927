"""UTC time helpers for scheduling and daily scoring.

Instants are stored as UTC ISO strings with second precision and a trailing
'Z' (YYYY-MM-DDTHH:MM:SSZ). Calendar days are UTC date keys (YYYY-MM-DD).
"""

from __future__ import annotations

from datetime import date, datetime, timedelta, timezone


def utc_now() -> datetime:
    """Return timezone-aware UTC 'now'."""
    return datetime.now(timezone.utc)


def utc_now_iso() -> str:
    """Return current time as UTC ISO string with second precision and trailing 'Z'."""
    return utc_datetime_to_iso_z(utc_now())


def utc_datetime_to_iso_z(dt: datetime) -> str:
    """Format a datetime as UTC ISO string with second precision and trailing 'Z'."""
    if dt.tzinfo is None:
        dt = dt.replace(tzinfo=timezone.utc)
    else:
        dt = dt.astimezone(timezone.utc)

    dt = dt.replace(microsecond=0)
    return dt.isoformat().replace("+00:00", "Z")


def parse_iso_z(s: str) -> datetime:
    """Parse an ISO-8601 string ending with 'Z' (or '+00:00') into UTC datetime.

    Accepts both second precision and fractional seconds.
    """
    if s.endswith("Z"):
        s = s[:-1] + "+00:00"
    dt = datetime.fromisoformat(s)
    if dt.tzinfo is None:
        dt = dt.replace(tzinfo=timezone.utc)
    return dt.astimezone(timezone.utc)


def add_days_iso(now: datetime, days: int) -> str:
    return utc_datetime_to_iso_z(now + timedelta(days=days))


def utc_date_key(dt: datetime) -> str:
    """Return the UTC calendar day of ``dt`` as YYYY-MM-DD."""
    if dt.tzinfo is not None:
        dt = dt.astimezone(timezone.utc)
    return dt.date().isoformat()


def shift_date_key(date_key: str, delta_days: int) -> str:
    """Move a YYYY-MM-DD key by ``delta_days`` (negative goes back in time)."""
    return (date.fromisoformat(date_key) + timedelta(days=delta_days)).isoformat()
