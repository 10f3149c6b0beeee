from __future__ import annotations

from datetime import date, time
from enum import Enum


class Holiday(str, Enum):
    christmas = "christmas"
    easter = "easter"
    thanksgiving = "thanksgiving"
    new_year = "new_year"


HOLIDAY_SERVICE_TIMES: dict[Holiday, time] = {
    Holiday.christmas: time(10, 0),
    Holiday.easter: time(7, 0),  # sunrise service
    Holiday.thanksgiving: time(9, 0),
    Holiday.new_year: time(10, 30),
}

# Easter is approximated by a fixed April window rather than computed.
EASTER_WINDOW = (1, 22)

_THURSDAY = 3  # date.weekday()


def holiday_for(day: date) -> Holiday | None:
    """Return the holiday falling on *day*, if any."""
    if day.month == 12 and day.day == 25:
        return Holiday.christmas
    if day.month == 1 and day.day == 1:
        return Holiday.new_year
    if day.month == 4 and EASTER_WINDOW[0] <= day.day <= EASTER_WINDOW[1]:
        return Holiday.easter
    # 4th Thursday of November always lands on the 22nd-28th
    if day.month == 11 and day.weekday() == _THURSDAY and 22 <= day.day <= 28:
        return Holiday.thanksgiving
    return None
