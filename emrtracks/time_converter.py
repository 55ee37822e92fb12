"""Conversion between hour-based times and calendar dates.

Time 0 is hour 0 of 1 March 1867. Months, days of month and hours are zero based.
"""

from __future__ import annotations

from datetime import date, timedelta

START_YEAR = 1867
START_MONTH = 2  # March
START_DAYOFMONTH = 0
YEARS_RANGE = 300
DAYS_RANGE = 366 * YEARS_RANGE

_EPOCH = date(START_YEAR, START_MONTH + 1, START_DAYOFMONTH + 1)


class TimeRangeError(ValueError):
    """A time or date falls outside the supported range."""


def is_leap_year(year: int) -> bool:
    return year % 400 == 0 or (year % 4 == 0 and year % 100 != 0)


def _date_of(t: int) -> date:
    day = t // 24
    if t < 0 or day >= DAYS_RANGE:
        raise TimeRangeError("Time is out of range")
    return _EPOCH + timedelta(days=day)


def time2year(t: int) -> int:
    return _date_of(t).year


def time2month(t: int) -> int:
    return _date_of(t).month - 1


def time2dayofmonth(t: int) -> int:
    return _date_of(t).day - 1


def time2hour(t: int) -> int:
    _date_of(t)
    return t % 24


def date2time(hour: int, dayofmonth: int, month: int, year: int) -> int:
    """Return the time of a date; all arguments except year are zero based."""
    if (
        not 0 <= hour < 24
        or not START_YEAR <= year < START_YEAR + YEARS_RANGE
        or not 0 <= month < 12
        or not 0 <= dayofmonth < 31
    ):
        raise TimeRangeError("Time is out of range")
    try:
        day = date(year, month + 1, dayofmonth + 1)
    except ValueError:
        raise TimeRangeError("Time is out of range") from None
    if day < _EPOCH:
        raise TimeRangeError("Time is out of range")
    return 24 * (day - _EPOCH).days + hour