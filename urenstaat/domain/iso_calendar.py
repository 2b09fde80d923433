"""
ISO-8601 calendar helpers.

Architecture Decision: Pure functions
Time entries are keyed by (ISO year, ISO week, weekday) while reports are
requested per calendar month. Every conversion between the two lives here,
free of storage concerns, so it can be tested on its own.

Week 1 is the week containing the year's first Thursday; weeks run Monday
(weekday 1) to Sunday (weekday 7).
"""

import calendar
import datetime
from typing import List, NamedTuple, Optional, Tuple

WEEKDAYS = range(1, 8)


class IsoDay(NamedTuple):
    """A calendar date expressed in ISO week coordinates."""
    iso_year: int
    iso_week: int
    weekday: int


def to_iso(date_obj: datetime.date) -> IsoDay:
    """Resolve a calendar date to its (ISO year, ISO week, ISO weekday)."""
    iso_year, iso_week, weekday = date_obj.isocalendar()
    return IsoDay(iso_year, iso_week, weekday)


def from_iso(iso_year: int, iso_week: int, weekday: int) -> datetime.date:
    """Resolve ISO week coordinates back to the calendar date."""
    return datetime.date.fromisocalendar(iso_year, iso_week, weekday)


def weeks_in_iso_year(iso_year: int) -> int:
    """
    Number of ISO weeks in an ISO year (52 or 53).

    December 28th always falls in the last ISO week of its year.
    """
    return datetime.date(iso_year, 12, 28).isocalendar()[1]


def week_dates(iso_year: int, iso_week: int) -> List[datetime.date]:
    """Monday..Sunday of an ISO week."""
    return [from_iso(iso_year, iso_week, day) for day in WEEKDAYS]


def days_in_month(year: int, month: int) -> int:
    return calendar.monthrange(year, month)[1]


def month_dates(year: int, month: int) -> List[datetime.date]:
    """Every calendar date of a month, ascending."""
    return [datetime.date(year, month, day) for day in range(1, days_in_month(year, month) + 1)]


def weeks_touching_month(year: int, month: int) -> List[Tuple[int, int]]:
    """
    Ordered (ISO year, ISO week) pairs that contain at least one day of the month.

    A month spans four to six ISO weeks; around New Year those weeks may belong
    to a different ISO year than the calendar year (e.g. 2024-12-30 is 2025-W01).
    """
    weeks: List[Tuple[int, int]] = []
    for date_obj in month_dates(year, month):
        key = to_iso(date_obj)[:2]
        if key not in weeks:
            weeks.append(key)
    return weeks


def current_iso_week(today: Optional[datetime.date] = None) -> Tuple[int, int]:
    today = today or datetime.date.today()
    iso_day = to_iso(today)
    return iso_day.iso_year, iso_day.iso_week


def previous_month(today: Optional[datetime.date] = None) -> Tuple[int, int]:
    """(year, month) of the month before today, the usual month to report on."""
    today = today or datetime.date.today()
    if today.month == 1:
        return today.year - 1, 12
    return today.year, today.month - 1


def format_week(iso_year: int, iso_week: int) -> str:
    """Week label in ISO notation, e.g. 2025-W01."""
    return f"{iso_year}-W{iso_week:02d}"
