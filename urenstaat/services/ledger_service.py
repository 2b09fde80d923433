"""
Time Ledger Service.

Records hours per (project, ISO week, weekday). Writes are upserts, so there
is never more than one entry per day and project. Auto-fill copies template
hours into days that have no entry yet and never overwrites a value that was
entered by hand.
"""

import logging
from typing import Dict, List, Optional, Tuple

from urenstaat.domain.iso_calendar import WEEKDAYS, format_week
from urenstaat.domain.models import TimeEntry, WeekRow, WeekSheet
from urenstaat.infra.repository import TimeEntryRepository
from urenstaat.services.template_service import TemplateService
from urenstaat.services.validation import (
    DEFAULT_MAX_DAILY_HOURS,
    validate_hours,
    validate_project,
    validate_week,
    validate_weekday,
)

logger = logging.getLogger(__name__)


class TimeLedgerService:
    """
    Records and edits time entries, applying templates on request.
    """

    def __init__(self, entry_repo: Optional[TimeEntryRepository] = None,
                 template_service: Optional[TemplateService] = None,
                 max_daily_hours: float = DEFAULT_MAX_DAILY_HOURS):
        self.entry_repo = entry_repo or TimeEntryRepository()
        self.template_service = template_service or TemplateService(max_daily_hours=max_daily_hours)
        self.max_daily_hours = max_daily_hours

    async def record_entry(self, project: str, iso_year: int, iso_week: int,
                           weekday: int, hours: float) -> TimeEntry:
        """
        Record the hours of one day, replacing any previous value.

        Raises:
            InvalidHours: hours negative or above the daily maximum
            InvalidWeek: week outside 1..weeks_in_iso_year(iso_year)
            InvalidWeekday: weekday outside 1..7
        """
        project = validate_project(project)
        hours = validate_hours(hours, self.max_daily_hours)
        validate_week(iso_year, iso_week)
        validate_weekday(weekday)

        entry = await self.entry_repo.upsert(TimeEntry(
            project=project,
            iso_year=iso_year,
            iso_week=iso_week,
            weekday=weekday,
            hours=hours,
        ))
        logger.info("Recorded %.2f h for %s on %s day %d",
                    hours, project, format_week(iso_year, iso_week), weekday)
        return entry

    async def auto_fill_week(self, project: str, iso_year: int, iso_week: int) -> int:
        """
        Fill the days of a week that have no entry from the project's template.

        Days without a template value (or projects without a template) get 0
        hours. Existing entries are never overwritten.

        Returns:
            Number of days filled
        """
        project = validate_project(project)
        validate_week(iso_year, iso_week)

        template = await self.template_service.find(project)
        defaults = {day: template.hours_for(day) if template else 0.0 for day in WEEKDAYS}

        filled = await self.entry_repo.fill_missing(project, iso_year, iso_week, defaults)
        logger.info("Auto-filled %d day(s) of %s for %s",
                    filled, format_week(iso_year, iso_week), project)
        return filled

    async def auto_fill_week_from_templates(self, iso_year: int, iso_week: int) -> Dict[str, int]:
        """
        Auto-fill a week for every project that has a template.

        All projects are filled in one transaction: a storage failure leaves
        the week as it was.

        Returns:
            Days filled per project
        """
        validate_week(iso_year, iso_week)
        templates = await self.template_service.list_templates()
        defaults = {t.project: {day: t.hours_for(day) for day in WEEKDAYS} for t in templates}
        if not defaults:
            return {}

        result = await self.entry_repo.fill_missing_many(iso_year, iso_week, defaults)
        logger.info("Auto-filled %s from %d template(s): %s",
                    format_week(iso_year, iso_week), len(result), result)
        return result

    async def add_project_to_week(self, project: str, iso_year: int, iso_week: int) -> int:
        """
        Make a project show up in a week with 0 hours on the days without entries.

        Returns:
            Number of days added
        """
        project = validate_project(project)
        validate_week(iso_year, iso_week)
        return await self.entry_repo.fill_missing(
            project, iso_year, iso_week, {day: 0.0 for day in WEEKDAYS}
        )

    async def delete_entry(self, project: str, iso_year: int, iso_week: int, weekday: int) -> None:
        """Remove one entry. Removing an absent entry is a no-op."""
        project = validate_project(project)
        validate_week(iso_year, iso_week)
        validate_weekday(weekday)
        deleted = await self.entry_repo.delete(project, iso_year, iso_week, weekday)
        if deleted:
            logger.info("Deleted entry %s %s day %d", project, format_week(iso_year, iso_week), weekday)

    async def remove_project_from_week(self, project: str, iso_year: int, iso_week: int) -> int:
        """
        Remove all entries of a project in a week.

        Returns:
            Number of entries removed
        """
        project = validate_project(project)
        validate_week(iso_year, iso_week)
        removed = await self.entry_repo.delete_week(project, iso_year, iso_week)
        logger.info("Removed %s from %s (%d entries)", project, format_week(iso_year, iso_week), removed)
        return removed

    async def entries_for_week(self, project: str, iso_year: int, iso_week: int) -> List[Tuple[int, float]]:
        """
        Hours of a project for each day of a week.

        Returns:
            Seven (weekday, hours) pairs, Monday first; days without entry are 0
        """
        project = validate_project(project)
        validate_week(iso_year, iso_week)
        entries = await self.entry_repo.get_week(project, iso_year, iso_week)
        by_day = {entry.weekday: entry.hours for entry in entries}
        return [(day, by_day.get(day, 0.0)) for day in WEEKDAYS]

    async def week_overview(self, iso_year: int, iso_week: int) -> WeekSheet:
        """All projects with entries in a week, alphabetical"""
        validate_week(iso_year, iso_week)
        entries = await self.entry_repo.get_week_all_projects(iso_year, iso_week)

        rows: Dict[str, List[float]] = {}
        for entry in entries:
            rows.setdefault(entry.project, [0.0] * 7)[entry.weekday - 1] = entry.hours

        return WeekSheet(
            iso_year=iso_year,
            iso_week=iso_week,
            rows=[WeekRow(project=project, hours=hours) for project, hours in sorted(rows.items())],
        )
