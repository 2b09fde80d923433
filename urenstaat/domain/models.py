"""
Domain Models using Pydantic for validation.

Architecture Decision: Why Pydantic?
Pydantic provides runtime data validation, ensuring data integrity when loading
rows from the database or settings from the environment. It also provides easy
serialization for the command line and tests.
"""

import datetime
from typing import Dict, List, Optional, Tuple

from pydantic import BaseModel, ConfigDict, Field

from urenstaat.domain.iso_calendar import WEEKDAYS, days_in_month, from_iso, month_dates, week_dates


class Template(BaseModel):
    """
    Default hours per weekday for a project.

    Weekdays follow ISO numbering (1 = Monday .. 7 = Sunday). A weekday
    without a value counts as 0 hours.
    """
    model_config = ConfigDict(from_attributes=True)

    project: str = Field(..., min_length=1, max_length=200)
    hours: Dict[int, float] = Field(default_factory=dict)

    def hours_for(self, weekday: int) -> float:
        return self.hours.get(weekday, 0.0)

    def as_week(self) -> List[float]:
        """Hours Monday..Sunday."""
        return [self.hours_for(day) for day in WEEKDAYS]

    @property
    def total(self) -> float:
        return sum(self.as_week())


class TimeEntry(BaseModel):
    """
    Hours worked on a project on one day, keyed by ISO week coordinates.

    Unique per (project, iso_year, iso_week, weekday).
    """
    model_config = ConfigDict(from_attributes=True)

    id: Optional[int] = None
    project: str = Field(..., min_length=1, max_length=200)
    iso_year: int
    iso_week: int = Field(..., ge=1, le=53)
    weekday: int = Field(..., ge=1, le=7)
    hours: float = Field(default=0.0, ge=0)

    @property
    def date(self) -> datetime.date:
        """Calendar date this entry belongs to."""
        return from_iso(self.iso_year, self.iso_week, self.weekday)


class WeekRow(BaseModel):
    project: str
    hours: List[float] = Field(..., min_length=7, max_length=7)

    @property
    def total(self) -> float:
        return sum(self.hours)


class WeekSheet(BaseModel):
    """All projects logged in one ISO week, Monday..Sunday."""
    iso_year: int
    iso_week: int
    rows: List[WeekRow] = Field(default_factory=list)

    @property
    def dates(self) -> List[datetime.date]:
        return week_dates(self.iso_year, self.iso_week)

    @property
    def day_totals(self) -> List[float]:
        return [sum(row.hours[i] for row in self.rows) for i in range(7)]

    @property
    def total(self) -> float:
        return sum(row.total for row in self.rows)


class MonthRow(BaseModel):
    """Hours of one project for every day of a month; index 0 is day 1."""
    project: str
    hours: List[float]

    @property
    def total(self) -> float:
        return sum(self.hours)

    def days(self) -> List[Tuple[int, float]]:
        """(day of month, hours) pairs, ascending."""
        return [(index + 1, value) for index, value in enumerate(self.hours)]


class MonthMatrix(BaseModel):
    """
    Projects x days grid of a calendar month.

    Derived from time entries, never persisted. Days without an entry hold 0.
    """
    year: int
    month: int = Field(..., ge=1, le=12)
    rows: List[MonthRow] = Field(default_factory=list)

    @property
    def days_in_month(self) -> int:
        return days_in_month(self.year, self.month)

    @property
    def days(self) -> List[int]:
        return list(range(1, self.days_in_month + 1))

    @property
    def dates(self) -> List[datetime.date]:
        return month_dates(self.year, self.month)

    @property
    def projects(self) -> List[str]:
        return [row.project for row in self.rows]

    @property
    def project_totals(self) -> Dict[str, float]:
        return {row.project: row.total for row in self.rows}

    @property
    def day_totals(self) -> List[float]:
        return [sum(row.hours[day - 1] for row in self.rows) for day in self.days]

    @property
    def grand_total(self) -> float:
        return sum(row.total for row in self.rows)

    def row(self, project: str) -> Optional[MonthRow]:
        return next((row for row in self.rows if row.project == project), None)

    def hours(self, project: str, day: int) -> float:
        row = self.row(project)
        return row.hours[day - 1] if row else 0.0


class ExportMetadata(BaseModel):
    """
    Header and footer content of the exported time sheet.

    Optional fields degrade to blank cells.
    """
    employee_name: str = ""
    employee_title: str = ""
    employee_phone: str = ""
    period_label: str = ""

    client_name: str = ""
    project_name: str = ""
    company_address: List[str] = Field(default_factory=list)
    generated_on: datetime.date = Field(default_factory=datetime.date.today)
