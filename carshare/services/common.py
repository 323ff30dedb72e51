"""Shared service helpers: store access, parsing and validation."""

import re
from datetime import datetime
from typing import Optional

from carshare.exceptions import ValidationError
from carshare.models.store import Store
from carshare.utils.constants import BookingStatus, DEFAULT_PAGE_SIZE, MAX_PAGE_SIZE
from carshare.utils.timeutils import parse_instant

EMAIL_PATTERN = re.compile(r"^[^\s@]+@[^\s@]+\.[^\s@]+$")


def _store() -> Store:
    """Get the singleton store instance."""
    return Store.instance()


# -------- interval math --------
def overlap(a_start: datetime, a_end: datetime, b_start: datetime, b_end: datetime) -> bool:
    """
    Check overlap between [a_start, a_end) and [b_start, b_end).
    End is exclusive: a booking ending at 12:00 does not clash with one starting at 12:00.
    Overlap rule: a_start < b_end and a_end > b_start
    """
    return a_start < b_end and a_end > b_start


# -------- converters --------
def to_float_safe(value) -> Optional[float]:
    """Safely convert to float; return None if invalid."""
    if isinstance(value, bool):
        return None
    try:
        result = float(value)
    except (TypeError, ValueError):
        return None
    if result != result or result in (float("inf"), float("-inf")):
        return None
    return result


def to_int_safe(value) -> Optional[int]:
    """Convert ints, integral floats and digit strings to int; return None otherwise."""
    if isinstance(value, bool):
        return None
    if isinstance(value, int):
        return value
    if isinstance(value, float):
        return int(value) if value.is_integer() else None
    if isinstance(value, str):
        s = value.strip()
        if re.fullmatch(r"[+-]?\d+", s):
            return int(s)
    return None


def clean(value) -> str:
    """Trim a text field; non-strings are stringified first."""
    if value is None:
        return ""
    return str(value).strip()


def is_blank(value) -> bool:
    return value is None or (isinstance(value, str) and not value.strip())


# -------- validators --------
def require(payload: dict, fields: list[str]):
    """Raise MISSING_<FIELD> for the first field that is absent or blank."""
    for name in fields:
        if is_blank(payload.get(name)):
            raise ValidationError(f"{name} is required", f"MISSING_{name.upper()}")


def parse_id(value, code: str = "INVALID_ID", label: str = "id") -> int:
    ident = to_int_safe(value)
    if ident is None:
        raise ValidationError(f"{label} must be a valid integer", code)
    return ident


def parse_positive_int(value, code: str, label: str) -> int:
    number = to_int_safe(value)
    if number is None or number <= 0:
        raise ValidationError(f"{label} must be a positive integer", code)
    return number


def parse_positive_float(value, code: str, label: str) -> float:
    number = to_float_safe(value)
    if number is None or number <= 0:
        raise ValidationError(f"{label} must be a positive number", code)
    return number


def parse_status(value) -> str:
    status = clean(value).lower()
    if status not in BookingStatus.ALL:
        raise ValidationError(
            "status must be one of: " + ", ".join(BookingStatus.ALL),
            "INVALID_STATUS",
        )
    return status


def parse_email(value, code: str = "INVALID_EMAIL", label: str = "email") -> str:
    email = clean(value).lower()
    if not EMAIL_PATTERN.match(email):
        raise ValidationError(f"{label} must be a valid email address", code)
    return email


def parse_date_field(value, code: str, label: str) -> datetime:
    try:
        return parse_instant(value)
    except (TypeError, ValueError, OverflowError):
        raise ValidationError(f"{label} must be a valid ISO date string", code) from None


# -------- listing helpers --------
def paginate(rows: list, limit=None, offset=None, max_size: int = MAX_PAGE_SIZE) -> list:
    """Slice rows by limit/offset; bad values fall back to defaults, limit is capped."""
    size = to_int_safe(limit)
    if size is None or size <= 0:
        size = DEFAULT_PAGE_SIZE
    size = min(size, max_size)
    start = to_int_safe(offset)
    if start is None or start < 0:
        start = 0
    return rows[start:start + size]


def newest_first(rows: list, key: str = "created_at") -> list:
    return sorted(rows, key=lambda r: (r.get(key) or "", r.get("id") or 0), reverse=True)
