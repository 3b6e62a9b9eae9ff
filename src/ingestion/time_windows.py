"""
Search time windows.

Maps the user's date choice onto the [start, end] window sent to providers:

- tonight: from now until 03:00 the next day
- week: today 00:00 through the seventh day after today, 23:59:59.999999
- date: the chosen day, 00:00 through 23:59:59.999999
"""

from __future__ import annotations

import datetime as dt
from enum import Enum

TONIGHT_END_HOUR = 3
WEEK_DAYS = 7


class DateRange(str, Enum):
    """Date choices offered to the user."""

    TONIGHT = "tonight"
    WEEK = "week"
    DATE = "date"


def date_window(
    date_range: DateRange | str,
    day: dt.date | None = None,
    now: dt.datetime | None = None,
) -> tuple[dt.datetime, dt.datetime]:
    """
    Compute the search window for a date choice.

    Args:
        date_range: tonight, week or date
        day: Required for ``date``; ignored otherwise
        now: Reference time, defaults to the current local time. The window
            inherits its tzinfo.

    Returns:
        (start, end) datetimes

    Raises:
        ValueError: Unknown range, or ``date`` without a day
    """
    date_range = DateRange(date_range)
    now = now or dt.datetime.now().astimezone()
    midnight = now.replace(hour=0, minute=0, second=0, microsecond=0)

    if date_range is DateRange.TONIGHT:
        end = midnight + dt.timedelta(days=1, hours=TONIGHT_END_HOUR)
        return now, end

    if date_range is DateRange.WEEK:
        end = midnight + dt.timedelta(days=WEEK_DAYS)
        return midnight, end.replace(hour=23, minute=59, second=59, microsecond=999999)

    if day is None:
        raise ValueError("A day is required for the 'date' range")
    start = dt.datetime.combine(day, dt.time.min, tzinfo=now.tzinfo)
    return start, dt.datetime.combine(day, dt.time.max, tzinfo=now.tzinfo)
