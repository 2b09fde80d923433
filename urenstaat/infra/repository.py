"""
Repository Pattern Implementation.

Architecture Decision: Why Repository Pattern?
Separates data access logic from business logic. Makes it easy to:
- Switch database implementations
- Mock data for testing
- Keep every write inside one transaction

The repositories are the only code that touches the database. Each public
write runs in a single transaction: it commits on success and rolls back on
any SQLAlchemy failure, which is reported as StorageError.
"""

import logging
from contextlib import asynccontextmanager
from typing import AsyncIterator, Dict, List, Optional, Sequence, Tuple

from sqlalchemy import select, delete, and_, or_
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from urenstaat.domain.errors import StorageError
from urenstaat.domain.models import Template, TimeEntry
from urenstaat.infra.db import TemplateModel, TimeEntryModel, get_engine

logger = logging.getLogger(__name__)


class BaseRepository:
    """Session handling shared by all repositories"""

    def __init__(self, session: Optional[AsyncSession] = None):
        self.session = session

    async def _get_session(self) -> AsyncSession:
        """Get session - either injected or create new one"""
        if self.session:
            return self.session
        engine = get_engine()
        return engine.get_session()

    @asynccontextmanager
    async def _reading(self, operation: str) -> AsyncIterator[AsyncSession]:
        session = await self._get_session()
        async with session:
            try:
                yield session
            except SQLAlchemyError as e:
                raise StorageError(operation, e) from e

    @asynccontextmanager
    async def _transaction(self, operation: str) -> AsyncIterator[AsyncSession]:
        session = await self._get_session()
        async with session:
            try:
                yield session
                await session.commit()
            except SQLAlchemyError as e:
                await session.rollback()
                logger.error("Rolled back %s: %s", operation, e)
                raise StorageError(operation, e) from e


class TemplateRepository(BaseRepository):
    """
    Handles all Template-related database operations.

    A template is stored as one row per (project, weekday) and converted to
    the Template domain model (weekday -> hours map) on the way out.
    """

    @staticmethod
    def _to_domain(project: str, models: Sequence[TemplateModel]) -> Template:
        return Template(project=project, hours={m.weekday: m.hours for m in models})

    async def exists(self, project: str) -> bool:
        async with self._reading("template lookup") as session:
            result = await session.execute(
                select(TemplateModel.id).where(TemplateModel.project == project).limit(1)
            )
            return result.first() is not None

    async def get(self, project: str) -> Optional[Template]:
        """Get the template of a project, None if absent"""
        async with self._reading("template lookup") as session:
            result = await session.execute(
                select(TemplateModel)
                .where(TemplateModel.project == project)
                .order_by(TemplateModel.weekday)
            )
            models = result.scalars().all()
            return self._to_domain(project, models) if models else None

    async def get_all(self) -> List[Template]:
        """Get all templates ordered by project name"""
        async with self._reading("template listing") as session:
            result = await session.execute(
                select(TemplateModel).order_by(TemplateModel.project, TemplateModel.weekday)
            )
            grouped: Dict[str, List[TemplateModel]] = {}
            for model in result.scalars().all():
                grouped.setdefault(model.project, []).append(model)
            return [self._to_domain(project, models) for project, models in grouped.items()]

    async def list_projects(self) -> List[str]:
        async with self._reading("template listing") as session:
            result = await session.execute(
                select(TemplateModel.project).distinct().order_by(TemplateModel.project)
            )
            return list(result.scalars().all())

    async def create(self, template: Template) -> Template:
        """Insert all weekday rows of a new template"""
        async with self._transaction("template create") as session:
            for weekday, hours in sorted(template.hours.items()):
                session.add(TemplateModel(project=template.project, weekday=weekday, hours=hours))
        logger.info("Created template for %s", template.project)
        return template

    async def upsert_day(self, project: str, weekday: int, hours: float) -> None:
        """Set the default hours of one weekday, inserting the row if needed"""
        async with self._transaction("template edit") as session:
            result = await session.execute(
                select(TemplateModel).where(
                    and_(TemplateModel.project == project, TemplateModel.weekday == weekday)
                )
            )
            model = result.scalar_one_or_none()
            if model is None:
                session.add(TemplateModel(project=project, weekday=weekday, hours=hours))
            else:
                model.hours = hours

    async def delete(self, project: str) -> int:
        """Delete every weekday row of a template. Returns count of deleted rows."""
        async with self._transaction("template delete") as session:
            result = await session.execute(
                delete(TemplateModel).where(TemplateModel.project == project)
            )
        logger.info("Deleted template for %s", project)
        return result.rowcount


class TimeEntryRepository(BaseRepository):
    """
    Handles all TimeEntry-related database operations.
    """

    @staticmethod
    def _key(project: str, iso_year: int, iso_week: int):
        return and_(
            TimeEntryModel.project == project,
            TimeEntryModel.iso_year == iso_year,
            TimeEntryModel.iso_week == iso_week,
        )

    async def get(self, project: str, iso_year: int, iso_week: int, weekday: int) -> Optional[TimeEntry]:
        """Get a single entry, None if absent"""
        async with self._reading("entry lookup") as session:
            result = await session.execute(
                select(TimeEntryModel).where(
                    and_(self._key(project, iso_year, iso_week), TimeEntryModel.weekday == weekday)
                )
            )
            model = result.scalar_one_or_none()
            return TimeEntry.model_validate(model) if model else None

    async def get_week(self, project: str, iso_year: int, iso_week: int) -> List[TimeEntry]:
        """Get the entries of one project in one ISO week"""
        async with self._reading("week lookup") as session:
            result = await session.execute(
                select(TimeEntryModel)
                .where(self._key(project, iso_year, iso_week))
                .order_by(TimeEntryModel.weekday)
            )
            return [TimeEntry.model_validate(m) for m in result.scalars().all()]

    async def get_week_all_projects(self, iso_year: int, iso_week: int) -> List[TimeEntry]:
        """Get the entries of every project in one ISO week"""
        async with self._reading("week lookup") as session:
            result = await session.execute(
                select(TimeEntryModel)
                .where(and_(TimeEntryModel.iso_year == iso_year, TimeEntryModel.iso_week == iso_week))
                .order_by(TimeEntryModel.project, TimeEntryModel.weekday)
            )
            return [TimeEntry.model_validate(m) for m in result.scalars().all()]

    async def get_for_weeks(self, weeks: Sequence[Tuple[int, int]],
                            projects: Optional[Sequence[str]] = None) -> List[TimeEntry]:
        """
        Get all entries in the given (ISO year, ISO week) pairs.

        Args:
            weeks: ISO weeks to include
            projects: Optional project filter
        """
        if not weeks:
            return []
        async with self._reading("entry range lookup") as session:
            query = select(TimeEntryModel).where(
                or_(*[
                    and_(TimeEntryModel.iso_year == year, TimeEntryModel.iso_week == week)
                    for year, week in weeks
                ])
            )
            if projects is not None:
                query = query.where(TimeEntryModel.project.in_(list(projects)))

            result = await session.execute(
                query.order_by(TimeEntryModel.iso_year, TimeEntryModel.iso_week, TimeEntryModel.weekday)
            )
            return [TimeEntry.model_validate(m) for m in result.scalars().all()]

    async def list_projects(self) -> List[str]:
        async with self._reading("project listing") as session:
            result = await session.execute(
                select(TimeEntryModel.project).distinct().order_by(TimeEntryModel.project)
            )
            return list(result.scalars().all())

    async def upsert(self, entry: TimeEntry) -> TimeEntry:
        """Insert the entry or overwrite the hours of the existing one with the same key"""
        async with self._transaction("entry write") as session:
            result = await session.execute(
                select(TimeEntryModel).where(
                    and_(
                        self._key(entry.project, entry.iso_year, entry.iso_week),
                        TimeEntryModel.weekday == entry.weekday,
                    )
                )
            )
            model = result.scalar_one_or_none()
            if model is None:
                model = TimeEntryModel(
                    project=entry.project,
                    iso_year=entry.iso_year,
                    iso_week=entry.iso_week,
                    weekday=entry.weekday,
                    hours=entry.hours,
                )
                session.add(model)
            else:
                model.hours = entry.hours
            await session.flush()
            saved = TimeEntry.model_validate(model)
        return saved

    @classmethod
    async def _insert_missing(cls, session: AsyncSession, project: str, iso_year: int, iso_week: int,
                              hours_by_weekday: Dict[int, float]) -> int:
        result = await session.execute(
            select(TimeEntryModel.weekday).where(cls._key(project, iso_year, iso_week))
        )
        present = set(result.scalars().all())
        missing = [day for day in sorted(hours_by_weekday) if day not in present]
        for weekday in missing:
            session.add(TimeEntryModel(
                project=project,
                iso_year=iso_year,
                iso_week=iso_week,
                weekday=weekday,
                hours=hours_by_weekday[weekday],
            ))
        return len(missing)

    async def fill_missing(self, project: str, iso_year: int, iso_week: int,
                           hours_by_weekday: Dict[int, float]) -> int:
        """
        Insert entries for the weekdays of a week that have none yet.

        Existing entries are never touched. The lookup and the inserts share
        one transaction. Returns the number of inserted entries.
        """
        async with self._transaction("week auto-fill") as session:
            filled = await self._insert_missing(session, project, iso_year, iso_week, hours_by_weekday)
        return filled

    async def fill_missing_many(self, iso_year: int, iso_week: int,
                                defaults: Dict[str, Dict[int, float]]) -> Dict[str, int]:
        """
        fill_missing for several projects at once, in a single transaction.

        Args:
            defaults: Hours per weekday, keyed by project

        Returns:
            Number of inserted entries per project
        """
        filled = {}
        async with self._transaction("week auto-fill") as session:
            for project, hours_by_weekday in defaults.items():
                filled[project] = await self._insert_missing(
                    session, project, iso_year, iso_week, hours_by_weekday
                )
        return filled

    async def delete(self, project: str, iso_year: int, iso_week: int, weekday: int) -> int:
        """Delete one entry. Returns count of deleted rows (0 when absent)."""
        async with self._transaction("entry delete") as session:
            result = await session.execute(
                delete(TimeEntryModel).where(
                    and_(self._key(project, iso_year, iso_week), TimeEntryModel.weekday == weekday)
                )
            )
        return result.rowcount

    async def delete_week(self, project: str, iso_year: int, iso_week: int) -> int:
        """Delete all entries of a project in a week. Returns count of deleted rows."""
        async with self._transaction("week delete") as session:
            result = await session.execute(
                delete(TimeEntryModel).where(self._key(project, iso_year, iso_week))
            )
        return result.rowcount
