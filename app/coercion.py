"""
Parsing of loosely typed request values.

Clients send flags and dates as whatever their form produced, so the rules
for turning those into booleans, timestamps and integers live here, one
function per rule.

Pinned flag on create (``parse_pinned_on_create``):

    ============  ======
    raw value     result
    ============  ======
    "true"        True
    anything else False   (including True, "1", None)
    ============  ======

Pinned flag on edit (``parse_pinned_on_edit``, only called when supplied):

    ============  ======
    raw value     result
    ============  ======
    "true", "1"   True
    anything else False
    ============  ======

Expiry on create (``parse_expiry_on_create``):

    ====================================  =========================
    raw value                             result
    ====================================  =========================
    str with more than 10 characters      parsed timestamp
    anything else (short str, None, int)  None (no expiry)
    ====================================  =========================

Expiry on edit (``parse_expiry_on_edit``, only called when supplied):

    ====================================  =========================
    raw value                             result
    ====================================  =========================
    "" or None                            CLEAR
    str with more than 10 characters      parsed timestamp
    anything else                         KEEP (previous value)
    ====================================  =========================
"""

import re
from datetime import UTC, datetime
from typing import Any

from app.errors import ValidationError

# A date-only value such as "2025-10-20" is exactly 10 characters long and is
# never treated as a timestamp.
MIN_TIMESTAMP_LENGTH = 11

KEEP = object()
CLEAR = None

_LEADING_INT = re.compile(r"^\s*([+-]?\d+)")


def parse_timestamp(value: str) -> datetime:
    """Parse an ISO-8601 timestamp; naive values are taken as UTC."""
    raw = value.strip()
    if raw.endswith(("Z", "z")):
        raw = raw[:-1] + "+00:00"
    try:
        parsed = datetime.fromisoformat(raw)
    except ValueError:
        raise ValidationError("Neispravan datum isteka.")
    return as_utc(parsed)


def as_utc(value: datetime) -> datetime:
    if value.tzinfo is None:
        return value.replace(tzinfo=UTC)
    return value.astimezone(UTC)


def is_timestamp_like(value: Any) -> bool:
    return isinstance(value, str) and len(value) >= MIN_TIMESTAMP_LENGTH


def parse_pinned_on_create(value: Any) -> bool:
    return value == "true"


def parse_pinned_on_edit(value: Any) -> bool:
    return value in ("true", "1")


def parse_expiry_on_create(value: Any) -> datetime | None:
    if is_timestamp_like(value):
        return parse_timestamp(value)
    return None


def parse_expiry_on_edit(value: Any) -> Any:
    """Return a timestamp, ``CLEAR`` or the ``KEEP`` sentinel."""
    if value is None or value == "":
        return CLEAR
    if is_timestamp_like(value):
        return parse_timestamp(value)
    return KEEP


def parse_optional_expiry(value: Any) -> datetime | None:
    """Expiry for the unconditional overwrite: any falsy value clears it."""
    if not value:
        return None
    if isinstance(value, str):
        return parse_timestamp(value)
    raise ValidationError("Neispravan datum isteka.")


def parse_positive_int(value: Any, default: int) -> int:
    """
    Read a leading integer the way query strings usually arrive.

    "3" -> 3, "2abc" -> 2, missing/"abc"/"0"/"-4" -> default.
    """
    if value is None:
        return default
    if isinstance(value, int) and not isinstance(value, bool):
        number = value
    else:
        match = _LEADING_INT.match(str(value))
        if not match:
            return default
        number = int(match.group(1))
    return number if number > 0 else default


def parse_id(value: Any) -> int:
    """
    Accept a record id as an int or a string of digits.

    5 -> 5, "5" -> 5; 1.9, True, "1.9", "abc" -> ValidationError.
    """
    if isinstance(value, int) and not isinstance(value, bool):
        return value
    if isinstance(value, str):
        raw = value.strip()
        if raw.isascii() and raw.isdigit():
            return int(raw)
    raise ValidationError("Neispravan id.")
