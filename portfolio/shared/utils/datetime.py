"""
UTC datetime utilities for consistent timezone handling.

All timestamps in the system are timezone-aware UTC. Initiative dates (ETA,
last updated) are stored as ISO ``YYYY-MM-DD`` strings so they compare
lexicographically; use the helpers here to produce them.
"""

from datetime import UTC, date, datetime, timedelta


def utc_now() -> datetime:
    """
    Return the current UTC datetime with timezone info.

    Use this instead of:
        - datetime.now() - naive, uses local timezone
        - datetime.utcnow() - naive, deprecated in Python 3.12

    Returns:
        Timezone-aware datetime in UTC
    """
    return datetime.now(UTC)


def ensure_utc(dt: datetime | None) -> datetime | None:
    """
    Ensure a datetime is UTC-aware.

    - If None, returns None
    - If naive, assumes UTC and attaches timezone
    - If aware, converts to UTC

    Args:
        dt: A datetime that may be naive or aware

    Returns:
        UTC-aware datetime or None
    """
    if dt is None:
        return None

    if dt.tzinfo is None:
        return dt.replace(tzinfo=UTC)

    return dt.astimezone(UTC)


def iso_date(value: datetime | date) -> str:
    """Return the ``YYYY-MM-DD`` string for a datetime (UTC) or date."""
    if isinstance(value, datetime):
        value = ensure_utc(value).date()
    return value.isoformat()


def today_iso(now: datetime | None = None) -> str:
    """Return today's UTC date as ``YYYY-MM-DD`` (or the date of ``now`` when given)."""
    return iso_date(now or utc_now())


def add_days_iso(days: int, now: datetime | None = None) -> str:
    """Return the ``YYYY-MM-DD`` string ``days`` days after today (negative for before)."""
    return iso_date((now or utc_now()) + timedelta(days=days))


def utc_timestamp(now: datetime | None = None) -> str:
    """Return an ISO-8601 UTC timestamp string (e.g. for comments and audit entries)."""
    return (now or utc_now()).isoformat()
