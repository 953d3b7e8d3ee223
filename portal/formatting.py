"""
Display strings derived from raw location fields.

Times are stored as 24-hour values and shown as 12-hour labels
("17:30" <-> "5:30 PM"). Operating hours are persisted per weekday as
"9:00 AM - 5:00 PM" or "Closed".
"""

import copy
import re
from datetime import date, time
from typing import Dict, Iterable, List, Optional, Tuple, Union

TimeLike = Union[str, time]

DAYS: List[Tuple[str, str]] = [
    ("monday", "Monday"),
    ("tuesday", "Tuesday"),
    ("wednesday", "Wednesday"),
    ("thursday", "Thursday"),
    ("friday", "Friday"),
    ("saturday", "Saturday"),
    ("sunday", "Sunday"),
]
DAY_LABELS = [label for _, label in DAYS]

DEFAULT_HOURS: Dict[str, Dict] = {
    "monday": {"open": "09:00", "close": "17:00", "closed": False},
    "tuesday": {"open": "09:00", "close": "17:00", "closed": False},
    "wednesday": {"open": "09:00", "close": "17:00", "closed": False},
    "thursday": {"open": "09:00", "close": "17:00", "closed": False},
    "friday": {"open": "09:00", "close": "17:00", "closed": False},
    "saturday": {"open": "10:00", "close": "16:00", "closed": False},
    "sunday": {"open": "12:00", "close": "16:00", "closed": True},
}

CLOSED = "Closed"

TWELVE_HOUR_RE = re.compile(r"^\s*(\d{1,2}):(\d{2})\s*([AaPp][Mm])\s*$")
HOURS_RANGE_RE = re.compile(r"(\d{1,2}:\d{2}) (AM|PM) - (\d{1,2}:\d{2}) (AM|PM)")


def format_time_24(value: TimeLike) -> str:
    """Normalize a time or "HH:MM[:SS]" string to zero padded "HH:MM"."""
    if isinstance(value, time):
        return value.strftime("%H:%M")
    return time.fromisoformat(value.strip()).strftime("%H:%M")


def to_12_hour(value: TimeLike) -> str:
    hours, minutes = format_time_24(value).split(":")
    h = int(hours)
    period = "PM" if h >= 12 else "AM"
    if h == 0:
        h = 12
    if h > 12:
        h -= 12
    return f"{h}:{minutes} {period}"


def to_24_hour(value: str) -> str:
    match = TWELVE_HOUR_RE.match(value or "")
    if not match:
        raise ValueError(f"Invalid 12-hour time: {value!r}")

    h, minutes, period = int(match.group(1)), match.group(2), match.group(3).upper()
    if not 1 <= h <= 12 or int(minutes) > 59:
        raise ValueError(f"Invalid 12-hour time: {value!r}")

    if period == "AM" and h == 12:
        h = 0
    if period == "PM" and h != 12:
        h += 12
    return f"{h:02d}:{minutes}"


def parse_time_input(value) -> time:
    """Accept "5:30 PM", "17:30" or "17:30:00" and return a time."""
    if isinstance(value, time):
        return value
    if not isinstance(value, str) or not value.strip():
        raise ValueError("Time is required")

    if TWELVE_HOUR_RE.match(value):
        return time.fromisoformat(to_24_hour(value))
    try:
        return time.fromisoformat(value.strip())
    except ValueError:
        raise ValueError(f"Invalid time: {value!r}. Use HH:MM or h:MM AM/PM")


def format_hours_range(open_24: str, close_24: str) -> str:
    return f"{to_12_hour(open_24)} - {to_12_hour(close_24)}"


def parse_hours_range(value: Optional[str]) -> Optional[Tuple[str, str]]:
    if not value:
        return None
    match = HOURS_RANGE_RE.search(value)
    if not match:
        return None
    return (
        to_24_hour(f"{match.group(1)} {match.group(2)}"),
        to_24_hour(f"{match.group(3)} {match.group(4)}"),
    )


def hours_from_storage(stored: Optional[Dict[str, str]]) -> Dict[str, Dict]:
    """Expand stored display strings into {day: {open, close, closed}}."""
    hours = copy.deepcopy(DEFAULT_HOURS)
    if not stored:
        return hours

    for day, value in stored.items():
        key = day.lower()
        if key not in hours:
            continue
        if not value or value == CLOSED:
            hours[key]["closed"] = True
            continue
        parsed = parse_hours_range(value)
        if parsed:
            hours[key] = {"open": parsed[0], "close": parsed[1], "closed": False}
    return hours


def hours_to_storage(hours: Dict[str, Dict]) -> Dict[str, str]:
    stored = {}
    for key, label in DAYS:
        day = hours[key]
        if day.get("closed"):
            stored[label] = CLOSED
        else:
            stored[label] = format_hours_range(day["open"], day["close"])
    return stored


def event_subtitle(day: str, start: TimeLike, end: TimeLike) -> str:
    # "Fridays, 6:00 PM - 9:00 PM"
    return f"{day}s, {to_12_hour(start)} - {to_12_hour(end)}"


def full_address(*parts: Optional[str]) -> str:
    return ", ".join(part.strip() for part in parts if part and part.strip())


def format_week_range(days: Iterable[date]) -> str:
    days = list(days)
    first, last = days[0], days[-1]
    return f"{first:%b} {first.day} - {last:%b} {last.day}"
