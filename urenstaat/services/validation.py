"""
Input checks shared by the services.

All checks run before any storage call, so a rejected command leaves no
partial state behind.
"""

import math

from urenstaat.domain.errors import (
    InvalidHours,
    InvalidMonth,
    InvalidProject,
    InvalidWeek,
    InvalidWeekday,
)
from urenstaat.domain.iso_calendar import from_iso, weeks_in_iso_year

DEFAULT_MAX_DAILY_HOURS = 24.0


def validate_project(project: str) -> str:
    name = (project or "").strip()
    if not name:
        raise InvalidProject(project, "name must not be blank")
    if len(name) > 200:
        raise InvalidProject(project, "name is longer than 200 characters")
    return name


def validate_hours(hours: float, max_hours: float = DEFAULT_MAX_DAILY_HOURS) -> float:
    try:
        value = float(hours)
    except (TypeError, ValueError):
        raise InvalidHours(hours, "not a number") from None
    if math.isnan(value) or math.isinf(value):
        raise InvalidHours(hours, "not a finite number")
    if value < 0:
        raise InvalidHours(hours, "must not be negative")
    if value > max_hours:
        raise InvalidHours(hours, f"exceeds the maximum of {max_hours:g} hours per day")
    return value


def validate_weekday(weekday: int) -> int:
    if weekday not in range(1, 8):
        raise InvalidWeekday(weekday, "must be 1 (Monday) to 7 (Sunday)")
    return weekday


def validate_week(iso_year: int, iso_week: int) -> None:
    if not 1 <= iso_year <= 9999:
        raise InvalidWeek(f"{iso_year}-W{iso_week}", "year out of range")
    last_week = weeks_in_iso_year(iso_year)
    if not 1 <= iso_week <= last_week:
        raise InvalidWeek(iso_week, f"ISO year {iso_year} has weeks 1..{last_week}")
    try:
        from_iso(iso_year, iso_week, 7)
    except ValueError:
        raise InvalidWeek(f"{iso_year}-W{iso_week:02d}", "ends after the last supported date") from None


def validate_month(year: int, month: int) -> None:
    if not 1 <= month <= 12:
        raise InvalidMonth(month, "must be 1..12")
    if not 1 <= year <= 9999:
        raise InvalidMonth(f"{year}-{month}", "year out of range")
