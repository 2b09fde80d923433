"""
Month Matrix Service.

Builds a projects x days grid for a calendar month. Entries are keyed by ISO
week, and an ISO week can straddle a month or year boundary, so every entry
is resolved to its calendar date before it is attributed to a month.
"""

import logging
from typing import Dict, List, Optional, Sequence

from urenstaat.domain.iso_calendar import days_in_month, weeks_touching_month
from urenstaat.domain.models import MonthMatrix, MonthRow
from urenstaat.infra.repository import TemplateRepository, TimeEntryRepository
from urenstaat.services.validation import validate_month

logger = logging.getLogger(__name__)


class MonthMatrixService:
    """
    Aggregates time entries of a month per project and per day.

    Rows are ordered alphabetically by project name; days run 1..N.
    """

    def __init__(self, entry_repo: Optional[TimeEntryRepository] = None,
                 template_repo: Optional[TemplateRepository] = None):
        self.entry_repo = entry_repo or TimeEntryRepository()
        self.template_repo = template_repo or TemplateRepository()

    async def known_projects(self) -> List[str]:
        """Every project referenced by a template or an entry, alphabetical"""
        projects = set(await self.entry_repo.list_projects())
        projects.update(await self.template_repo.list_projects())
        return sorted(projects)

    async def build_month_matrix(self, year: int, month: int,
                                 projects: Optional[Sequence[str]] = None) -> MonthMatrix:
        """
        Build the matrix of a calendar month.

        Args:
            year: Calendar year
            month: Calendar month, 1..12
            projects: Optional subset of projects to report on

        Raises:
            InvalidMonth: month outside 1..12
        """
        validate_month(year, month)

        if projects is None:
            row_projects = await self.known_projects()
        else:
            row_projects = sorted(set(projects))

        n_days = days_in_month(year, month)
        matrix: Dict[str, List[float]] = {project: [0.0] * n_days for project in row_projects}

        weeks = weeks_touching_month(year, month)
        entries = await self.entry_repo.get_for_weeks(weeks, projects=row_projects)

        skipped = 0
        for entry in entries:
            entry_date = entry.date
            if entry_date.year != year or entry_date.month != month:
                skipped += 1
                continue
            matrix[entry.project][entry_date.day - 1] += entry.hours

        logger.debug("Month %04d-%02d: %d entries in %d weeks, %d outside the month",
                     year, month, len(entries), len(weeks), skipped)

        return MonthMatrix(
            year=year,
            month=month,
            rows=[MonthRow(project=project, hours=matrix[project]) for project in row_projects],
        )
