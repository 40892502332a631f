"""
Core Utilities.

Shared utility functions used across the backend.
All modules should import utilities from this module.

Two clocks are in use:
    utc_now()   - internal timestamps (created_at, sent log, sync history)
    local_now() - salon wall-clock time, used for anything compared with
                  YClients record dates, which are local and offset-free
"""

import math
import re
from datetime import date, datetime, timezone
from functools import lru_cache
from zoneinfo import ZoneInfo

RUSSIAN_MONTHS_GENITIVE = (
    "января",
    "февраля",
    "марта",
    "апреля",
    "мая",
    "июня",
    "июля",
    "августа",
    "сентября",
    "октября",
    "ноября",
    "декабря",
)

_NON_DIGITS = re.compile(r"\D")


def utc_now() -> datetime:
    """
    Return current UTC time as timezone-naive datetime.

    All internal datetime values in the application are timezone-naive
    and assumed to be UTC.

    Returns:
        Current UTC time with tzinfo stripped
    """
    return datetime.now(timezone.utc).replace(tzinfo=None)


@lru_cache
def salon_zone(name: str) -> ZoneInfo:
    return ZoneInfo(name)


def local_now() -> datetime:
    """
    Return the salon's current wall-clock time as a naive datetime.

    The timezone comes from application.timezone.
    """
    from beautyslot.backend.core.config import get_app_config

    zone = salon_zone(get_app_config().application.timezone)
    return datetime.now(zone).replace(tzinfo=None)


def parse_record_datetime(value: str | None) -> datetime | None:
    """
    Parse a YClients date or datetime string into naive wall-clock time.

    Accepts "YYYY-MM-DD HH:MM:SS", "YYYY-MM-DD", and ISO 8601 with an
    offset ("2026-03-05T14:00:00+03:00"). The offset is dropped, not
    applied, so the result stays in salon time.

    Returns:
        Parsed datetime, or None for empty or malformed input
    """
    if not value:
        return None
    try:
        parsed = datetime.fromisoformat(value.strip().replace(" ", "T", 1))
    except ValueError:
        return None
    return parsed.replace(tzinfo=None)


def record_day(value: str | None) -> str:
    """Return the YYYY-MM-DD prefix of a YClients date string."""
    return (value or "")[:10]


def digits_only(value: str | None) -> str:
    """Strip every non-digit character."""
    return _NON_DIGITS.sub("", value or "")


def normalize_phone(phone: str | None) -> str:
    """
    Normalize a Russian phone number to digits with a leading 7.

    "8 (916) 123-45-67" -> "79161234567", "9161234567" -> "79161234567".
    Other lengths are returned as bare digits.
    """
    digits = digits_only(phone)
    if len(digits) == 11 and digits.startswith("8"):
        return "7" + digits[1:]
    if len(digits) == 10:
        return "7" + digits
    return digits


def mask_phone(phone: str | None) -> str:
    """Mask every digit of a phone number except the last four."""
    if not phone:
        return ""
    total = sum(ch.isdigit() for ch in phone)
    seen = 0
    masked = []
    for ch in phone:
        if ch.isdigit():
            seen += 1
            masked.append(ch if seen > total - 4 else "*")
        else:
            masked.append(ch)
    return "".join(masked)


def format_day_month(value: date | datetime) -> str:
    """Format a date in Russian, e.g. "5 марта"."""
    return f"{value.day} {RUSSIAN_MONTHS_GENITIVE[value.month - 1]}"


def round_half_up(value: float) -> int:
    """Round to the nearest integer with .5 going up (2.5 -> 3)."""
    return math.floor(value + 0.5)


def months_between(start: datetime, end: datetime) -> int:
    """Whole calendar months from start to end, ignoring the day of month."""
    return (end.year - start.year) * 12 + (end.month - start.month)
