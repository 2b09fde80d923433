"""
Template Service - default hours per weekday for each project.

Templates feed the auto-fill of the time ledger. Deleting a template never
touches time entries that were already recorded for the project.
"""

import logging
from typing import Dict, List, Optional

from urenstaat.domain.errors import DuplicateTemplate, NotFound
from urenstaat.domain.iso_calendar import WEEKDAYS
from urenstaat.domain.models import Template
from urenstaat.infra.repository import TemplateRepository
from urenstaat.services.validation import (
    DEFAULT_MAX_DAILY_HOURS,
    validate_hours,
    validate_project,
    validate_weekday,
)

logger = logging.getLogger(__name__)


class TemplateService:
    """
    CRUD over named default-hour templates.
    """

    def __init__(self, template_repo: Optional[TemplateRepository] = None,
                 max_daily_hours: float = DEFAULT_MAX_DAILY_HOURS):
        self.template_repo = template_repo or TemplateRepository()
        self.max_daily_hours = max_daily_hours

    async def create(self, project: str, hours_by_weekday: Dict[int, float]) -> Template:
        """
        Create a template. Weekdays not given default to 0 hours.

        Raises:
            DuplicateTemplate: the project already has a template
            InvalidHours / InvalidWeekday / InvalidProject: bad input
        """
        project = validate_project(project)
        hours = {day: 0.0 for day in WEEKDAYS}
        for weekday, value in hours_by_weekday.items():
            hours[validate_weekday(weekday)] = validate_hours(value, self.max_daily_hours)

        if await self.template_repo.exists(project):
            raise DuplicateTemplate(project)

        return await self.template_repo.create(Template(project=project, hours=hours))

    async def edit(self, project: str, weekday: int, hours: float) -> Template:
        """
        Change the default hours of one weekday.

        Raises:
            NotFound: no template for the project
        """
        project = validate_project(project)
        validate_weekday(weekday)
        hours = validate_hours(hours, self.max_daily_hours)

        if not await self.template_repo.exists(project):
            raise NotFound("Template", project)

        await self.template_repo.upsert_day(project, weekday, hours)
        logger.info("Template %s: weekday %d set to %.2f h", project, weekday, hours)
        return await self.get(project)

    async def delete(self, project: str) -> None:
        """
        Delete a template. Recorded time entries are left untouched.

        Raises:
            NotFound: no template for the project
        """
        project = validate_project(project)
        if not await self.template_repo.exists(project):
            raise NotFound("Template", project)
        await self.template_repo.delete(project)

    async def get(self, project: str) -> Template:
        template = await self.template_repo.get(validate_project(project))
        if template is None:
            raise NotFound("Template", project)
        return template

    async def find(self, project: str) -> Optional[Template]:
        """Get a template or None, used by auto-fill"""
        return await self.template_repo.get(project)

    async def list(self) -> List[str]:
        """Project names that have a template, alphabetical"""
        return await self.template_repo.list_projects()

    async def list_templates(self) -> List[Template]:
        return await self.template_repo.get_all()
