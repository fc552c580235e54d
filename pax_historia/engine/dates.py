"""In-game calendar arithmetic."""

import calendar
from datetime import date, timedelta

from pax_historia.errors import GameValidationError

TIME_JUMPS = ("1_week", "1_month", "3_months", "6_months", "1_year")

_MONTH_JUMPS = {"1_month": 1, "3_months": 3, "6_months": 6, "1_year": 12}


def parse_game_date(value: str) -> date:
    try:
        return date.fromisoformat(value)
    except (TypeError, ValueError) as e:
        raise GameValidationError(f"Invalid game date: {value!r}") from e


def add_months(start: date, months: int) -> date:
    """Add calendar months; a day past the end of the target month carries over.

    2024-01-31 + 1 month is 2024-03-02, the same as setting the month on a
    calendar and letting the surplus days roll forward.
    """
    index = start.month - 1 + months
    year, month = start.year + index // 12, index % 12 + 1
    last_day = calendar.monthrange(year, month)[1]
    if start.day <= last_day:
        return start.replace(year=year, month=month)
    return date(year, month, last_day) + timedelta(days=start.day - last_day)


def advance_date(current: date, time_jump: str | int) -> date:
    """Add a time jump token (``1_week`` ... ``1_year``) or a day count.

    Any integer is applied as a day count, zero and negative included.
    Anything else moves the clock by one day.
    """
    if time_jump == "1_week":
        return current + timedelta(days=7)
    if time_jump in _MONTH_JUMPS:
        return add_months(current, _MONTH_JUMPS[time_jump])
    try:
        days = int(time_jump)
    except (TypeError, ValueError):
        days = 1
    try:
        return current + timedelta(days=days)
    except OverflowError as e:
        raise GameValidationError(f"Time jump out of range: {time_jump!r}") from e
