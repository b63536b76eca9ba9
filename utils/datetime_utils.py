"""
Date and time helpers for meeting scheduling
"""
from datetime import datetime, timedelta, timezone
from typing import Any, Dict, Union

from utils.errors import InvalidDateError

MEETING_DURATION = timedelta(hours=1)
CALENDAR_TIMEZONE = "UTC"

DateInput = Union[str, datetime]


def parse_date(value: DateInput) -> datetime:
    """Convert an ISO string or datetime into an aware UTC datetime

    Raises InvalidDateError when the value is missing or does not parse.
    Naive values are taken to be UTC.
    """
    if value is None or value == "":
        raise InvalidDateError("Date is required")

    if isinstance(value, datetime):
        parsed = value
    elif isinstance(value, str):
        text = value.strip()
        if not text:
            raise InvalidDateError("Date is required")
        if text.endswith(("Z", "z")):
            text = text[:-1] + "+00:00"
        try:
            parsed = datetime.fromisoformat(text)
        except ValueError:
            raise InvalidDateError(f"Invalid date value: {value}")
    else:
        raise InvalidDateError(f"Invalid date format: {value!r}")

    if parsed.tzinfo is None:
        return parsed.replace(tzinfo=timezone.utc)
    return parsed.astimezone(timezone.utc)


def calculate_end_time(start_time: datetime) -> datetime:
    """Meetings always last one hour"""
    return start_time + MEETING_DURATION


def to_iso(value: datetime) -> str:
    """UTC ISO-8601 with a trailing Z, the format used on the wire"""
    if value.tzinfo is None:
        value = value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc).isoformat().replace("+00:00", "Z")


def format_date_range(meeting_data: Any) -> Dict[str, Dict[str, str]]:
    """Build the start/end pair for the Google Calendar API

    Accepts a mapping with ``dateTime`` or an object with ``date_time``.
    """
    if isinstance(meeting_data, dict):
        raw = meeting_data.get("dateTime")
    else:
        raw = getattr(meeting_data, "date_time", None)

    start_time = parse_date(raw)
    end_time = calculate_end_time(start_time)

    return {
        "start": {"dateTime": to_iso(start_time), "timeZone": CALENDAR_TIMEZONE},
        "end": {"dateTime": to_iso(end_time), "timeZone": CALENDAR_TIMEZONE},
    }


def format_error(error: Any) -> str:
    if isinstance(error, BaseException):
        return str(error)
    if isinstance(error, str):
        return error
    return "Unknown error"
