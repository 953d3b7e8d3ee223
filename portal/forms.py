"""
Request body parsing for the location forms.

Each reader validates the whole payload before anything touches the
session and raises ValidationError with a user facing message.
"""

from datetime import date
from typing import Dict, Optional

from portal.formatting import DAY_LABELS, DAYS, format_time_24, parse_time_input
from portal.plans import EVENT_CATEGORIES


class ValidationError(ValueError):
    def __init__(self, message: str, field: Optional[str] = None):
        self.message = message
        self.field = field
        super().__init__(message)


def as_bool(value) -> bool:
    if isinstance(value, str):
        return value.strip().lower() in ("1", "true", "yes", "on")
    return bool(value)


def clean(value) -> Optional[str]:
    if value is None:
        return None
    value = str(value).strip()
    return value or None


def _max_length(value: Optional[str], limit: int, label: str, field: str):
    if value and len(value) > limit:
        raise ValidationError(f"{label} must be at most {limit} characters", field)
    return value


def _read_state(data) -> Optional[str]:
    state = clean(data.get("state"))
    if state:
        state = state.upper()
    return _max_length(state, 2, "State", "state")


def _read_zip(data) -> Optional[str]:
    # intake forms send "zip", the address form sends "zip_code"
    zip_code = clean(data.get("zip_code", data.get("zip")))
    return _max_length(zip_code, 10, "ZIP code", "zip_code")


def read_application(data) -> Dict:
    name = clean(data.get("business_name", data.get("store_name")))
    if not name:
        raise ValidationError("Business name is required", "business_name")

    return {
        "store_name": _max_length(name, 120, "Business name", "business_name"),
        "phone": clean(data.get("phone")),
        "address": clean(data.get("address")),
        "city": clean(data.get("city")),
        "state": _read_state(data),
        "zip_code": _read_zip(data),
        "website": clean(data.get("website")),
        "description": clean(data.get("description")),
    }


def read_business(data) -> Dict:
    name = clean(data.get("store_name"))
    if not name:
        raise ValidationError("Store name is required", "store_name")

    return {
        "store_name": _max_length(name, 120, "Store name", "store_name"),
        "phone": clean(data.get("phone")),
        "email": clean(data.get("email")),
        "website": clean(data.get("website")),
        "description": clean(data.get("description")),
    }


def read_address(data) -> Dict:
    return {
        "address": clean(data.get("address")),
        "city": clean(data.get("city")),
        "state": _read_state(data),
        "zip_code": _read_zip(data),
    }


def read_hours(data) -> Dict[str, Dict]:
    """{day: {open, close, closed}} for all seven days, times as "HH:MM"."""
    submitted = data.get("hours", data)
    if not isinstance(submitted, dict):
        raise ValidationError("Hours must be an object keyed by day", "hours")

    hours = {}
    for key, label in DAYS:
        day = submitted.get(key) or submitted.get(label)
        if not isinstance(day, dict):
            raise ValidationError(f"Hours for {label} are required", key)

        if as_bool(day.get("closed")):
            hours[key] = {
                "open": day.get("open") or "09:00",
                "close": day.get("close") or "17:00",
                "closed": True,
            }
            continue

        try:
            opens = format_time_24(parse_time_input(day.get("open")))
            closes = format_time_24(parse_time_input(day.get("close")))
        except ValueError:
            raise ValidationError(f"Invalid hours for {label}", key)
        if closes <= opens:
            raise ValidationError(f"{label} must close after it opens", key)

        hours[key] = {"open": opens, "close": closes, "closed": False}
    return hours


def read_day(value) -> Optional[str]:
    if not value:
        return None
    value = str(value).strip().capitalize()
    return value if value in DAY_LABELS else None


def read_event(data) -> Dict:
    category = clean(data.get("category"))
    day = read_day(data.get("day"))
    start = data.get("start_time", data.get("start"))
    end = data.get("end_time", data.get("end"))

    if not category or not day or not start or not end:
        raise ValidationError("Please fill in all fields")
    if category not in EVENT_CATEGORIES:
        raise ValidationError(f"Unknown event type '{category}'", "category")

    try:
        start_time = parse_time_input(start)
        end_time = parse_time_input(end)
    except ValueError as e:
        raise ValidationError(str(e), "start_time")
    if end_time <= start_time:
        raise ValidationError("End time must be after start time", "end_time")

    return {
        "category": category,
        "recurrence_day": day,
        "start_time": start_time,
        "end_time": end_time,
    }


def read_date(value, field: str = "date") -> date:
    if not value:
        raise ValidationError("Please select a date", field)
    try:
        return date.fromisoformat(str(value).strip())
    except ValueError:
        raise ValidationError("Invalid date format. Use YYYY-MM-DD", field)


def read_block(data) -> Dict:
    block_date = read_date(data.get("date"))
    start, end = data.get("start_time"), data.get("end_time")
    if "all_day" in data:
        all_day = as_bool(data.get("all_day"))
    else:
        # No flag and no times blocks the whole day
        all_day = not start and not end
    start_time = end_time = None

    if not all_day:
        if not start or not end:
            raise ValidationError(
                "Start and end time are required unless blocking the whole day"
            )
        try:
            start_time = parse_time_input(start)
            end_time = parse_time_input(end)
        except ValueError as e:
            raise ValidationError(str(e), "start_time")
        if end_time <= start_time:
            raise ValidationError("End time must be after start time", "end_time")

    return {
        "date": block_date,
        "all_day": all_day,
        "start_time": start_time,
        "end_time": end_time,
        "reason": _max_length(clean(data.get("reason")), 255, "Reason", "reason"),
    }
