"""Parsing and formatting of the two date shapes leads carry.

Follow-up and connection dates arrive either day-first (``DD-MM-YYYY``, the
form typed by users) or ISO (``YYYY-MM-DD``, the form a date picker sends).
Parsing never raises; anything unrecognised yields ``None``.
"""

from __future__ import annotations

import re
from datetime import date, datetime, timedelta

_ISO_PREFIX = re.compile(r"^(\d{4})-(\d{1,2})-(\d{1,2})(?:$|[T\s])")
_DAY_FIRST = re.compile(r"^(\d{1,2})-(\d{1,2})-(\d{4})$")


def parse_lead_date(value: object) -> date | None:
    """Parse a day-first or ISO date string to a calendar date."""
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    if not isinstance(value, str):
        return None

    text = value.strip()
    if not text:
        return None

    match = _DAY_FIRST.match(text)
    if match:
        day, month, year = (int(part) for part in match.groups())
        return _safe_date(year, month, day)

    match = _ISO_PREFIX.match(text)
    if match:
        year, month, day = (int(part) for part in match.groups())
        return _safe_date(year, month, day)

    return None


def _safe_date(year: int, month: int, day: int) -> date | None:
    try:
        return date(year, month, day)
    except ValueError:
        return None


def format_day_first(value: date) -> str:
    return value.strftime("%d-%m-%Y")


def to_iso_date(value: object) -> str | None:
    parsed = parse_lead_date(value)
    return parsed.isoformat() if parsed else None


def is_day_first_format(value: str) -> bool:
    """True when ``value`` is spelled exactly ``DD-MM-YYYY``."""
    return bool(re.fullmatch(r"\d{2}-\d{2}-\d{4}", value or ""))


def end_of_week(reference: date) -> date:
    """Last day of the week containing ``reference``.

    Weeks are counted Sunday-first; a Sunday reference looks a full week ahead.
    """
    sunday_based_weekday = (reference.weekday() + 1) % 7
    return reference + timedelta(days=7 - sunday_based_weekday)


def local_now() -> datetime:
    return datetime.now().astimezone()
