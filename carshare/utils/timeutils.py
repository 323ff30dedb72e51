"""ISO-8601 instant parsing and formatting helpers."""
from datetime import datetime, date

import pytz


def parse_instant(value) -> datetime:
    """
    Parse an ISO-8601 instant into an aware UTC datetime.
    Supports:
      - 'YYYY-MM-DD' (midnight UTC)
      - 'YYYY-MM-DDTHH:MM[:SS[.ffffff]]'
      - Above with 'Z' or offsets like '+05:30'
    Naive values are taken as UTC. Raises ValueError on anything else.
    """
    if isinstance(value, datetime):
        dt = value
    elif isinstance(value, date):
        dt = datetime(value.year, value.month, value.day)
    elif isinstance(value, str):
        s = value.strip()
        if not s:
            raise ValueError("empty date")
        # Python < 3.11 does not accept a trailing 'Z'
        if s.endswith(("Z", "z")):
            s = s[:-1] + "+00:00"
        dt = datetime.fromisoformat(s)
    else:
        raise ValueError(f"Unsupported date: {value!r}")

    if dt.tzinfo is None:
        return pytz.utc.localize(dt)
    try:
        return dt.astimezone(pytz.utc)
    except OverflowError as e:
        # offsets can push year 1 or 9999 past the datetime range
        raise ValueError(f"Date out of range: {value!r}") from e


def to_iso(dt: datetime) -> str:
    """Format an instant as a UTC ISO string with millisecond precision and 'Z'."""
    u = parse_instant(dt)
    return u.isoformat(timespec="milliseconds").replace("+00:00", "Z")


def utc_now() -> datetime:
    """Wrapper for easier testing/mocking."""
    return datetime.now(pytz.utc)


def now_iso() -> str:
    return to_iso(utc_now())
