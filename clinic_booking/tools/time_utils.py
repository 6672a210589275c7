"""
Rule-based date and time-of-day interpretation.

Every function here is total: text it does not understand yields None
(or, for formatting, the input unchanged), never an exception.
"""

import re
from datetime import date, datetime, timedelta, tzinfo
from typing import Optional, Union

from clinic_booking.schemas.session_schema import TimeRange
from clinic_booking.utils import ordinal

VAGUE_TIME_RANGES: list[tuple[str, TimeRange]] = [
    ("morning", TimeRange(9, 12)),
    ("afternoon", TimeRange(12, 16)),
    ("evening", TimeRange(16, 19)),
]

WEEKDAYS = ["monday", "tuesday", "wednesday", "thursday", "friday", "saturday", "sunday"]

_ISO_DATE = re.compile(r"\b(\d{4}-\d{2}-\d{2})\b")
_WEEKDAY = re.compile(r"\b(" + "|".join(WEEKDAYS) + r")\b")


def parse_vague_time(text: str) -> Optional[TimeRange]:
    """Map 'morning' / 'afternoon' / 'evening' to an hour range."""
    lower = text.lower()
    for keyword, time_range in VAGUE_TIME_RANGES:
        if keyword in lower:
            return time_range
    return None


def parse_date(text: str, today: Optional[date] = None) -> Optional[date]:
    """
    Resolve a calendar date from free text.

    Understands "today", "tomorrow", an ISO ``YYYY-MM-DD`` date anywhere in
    the text, and weekday names ("monday", "next friday"), which resolve to
    the next occurrence after today.
    """
    lower = text.lower()
    today = today or date.today()

    if "today" in lower:
        return today
    if "tomorrow" in lower:
        return today + timedelta(days=1)

    match = _ISO_DATE.search(lower)
    if match:
        try:
            return datetime.strptime(match.group(1), "%Y-%m-%d").date()
        except ValueError:
            return None

    match = _WEEKDAY.search(lower)
    if match:
        days_ahead = (WEEKDAYS.index(match.group(1)) - today.weekday()) % 7 or 7
        return today + timedelta(days=days_ahead)

    return None


def format_slot(value: Union[str, datetime], tz: Optional[tzinfo] = None) -> str:
    """Human-readable slot time, e.g. 'Monday, October 20th @ 9:00 AM'."""
    if isinstance(value, str):
        try:
            moment = datetime.fromisoformat(value.replace("Z", "+00:00"))
        except ValueError:
            return value
    else:
        moment = value

    if tz is not None and moment.tzinfo is not None:
        moment = moment.astimezone(tz)

    hour = moment.hour % 12 or 12
    meridiem = "AM" if moment.hour < 12 else "PM"
    return (
        f"{moment.strftime('%A, %B')} {ordinal(moment.day)} "
        f"@ {hour}:{moment.minute:02d} {meridiem}"
    )
