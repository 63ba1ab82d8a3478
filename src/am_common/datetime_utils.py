"""UTC datetime utilities."""

from datetime import datetime, timezone


def utc_now() -> datetime:
    """Return timezone-aware UTC now."""
    return datetime.now(timezone.utc)


def unix_now() -> int:
    """Current time as whole unix seconds, the unit of expire_time fields."""
    return int(utc_now().timestamp())
