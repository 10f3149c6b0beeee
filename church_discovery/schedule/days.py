from __future__ import annotations

import re
from datetime import date

SUNDAY = 1
SATURDAY = 7

DAY_NAMES = {
    1: "sunday",
    2: "monday",
    3: "tuesday",
    4: "wednesday",
    5: "thursday",
    6: "friday",
    7: "saturday",
}

_TIME_PATTERN = re.compile(r"(\d{1,2}):(\d{2})")


def weekday_code(day: date) -> int:
    """Weekday as 1 = Sunday ... 7 = Saturday."""
    return day.isoweekday() % 7 + 1


def schedule_mentions_day(schedule: str, day_code: int) -> bool:
    """Whether a schedule text names a typical attendance day.

    Only Sunday and Saturday are recognised; other codes never match.
    """
    text = schedule.lower()
    if day_code == SUNDAY:
        return "sun" in text
    if day_code == SATURDAY:
        return "sat" in text
    return False


def extract_time(schedule: str) -> tuple[int, int] | None:
    """Return ``(hour, minute)`` from the first ``H:MM`` token, or None.

    A "pm" anywhere in the text moves hours before noon into the afternoon.
    Out-of-range tokens count as absent.
    """
    match = _TIME_PATTERN.search(schedule)
    if not match:
        return None
    hour, minute = int(match.group(1)), int(match.group(2))
    if "pm" in schedule.lower() and hour < 12:
        hour += 12
    if hour > 23 or minute > 59:
        return None
    return hour, minute
