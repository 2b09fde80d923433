"""
Command line interface.

Usage:
    urenstaat template list|create|edit|delete
    urenstaat log show|set|autofill|add|remove|delete
    urenstaat month
    urenstaat export

Every command opens the database, runs to completion and disposes the
engine again. Settings are loaded once, before any command runs.
"""

import asyncio
import logging
import re
from typing import Awaitable, Callable, Optional, Tuple, TypeVar

import click
from rich.console import Console

from urenstaat.domain.errors import UrenstaatError
from urenstaat.domain.iso_calendar import current_iso_week, format_week, previous_month
from urenstaat.infra.assets import FileAssetSource
from urenstaat.infra.config import Settings, load_settings
from urenstaat.infra.db import DatabaseEngine, init_db
from urenstaat.services.excel_export_service import ExcelExportService, build_metadata, save_month_export
from urenstaat.services.ledger_service import TimeLedgerService
from urenstaat.services.month_matrix_service import MonthMatrixService
from urenstaat.services.template_service import TemplateService
from urenstaat.cli.tables import month_table, templates_table, week_table

logger = logging.getLogger(__name__)

T = TypeVar("T")

DAY_NAMES = ["mon", "tue", "wed", "thu", "fri", "sat", "sun"]


class WeekdayType(click.ParamType):
    """Accepts mon..sun or 1..7"""
    name = "weekday"

    def convert(self, value, param, ctx):
        if isinstance(value, int):
            return value
        text = str(value).strip().lower()
        if text.isdigit():
            return int(text)
        if text[:3] in DAY_NAMES:
            return DAY_NAMES.index(text[:3]) + 1
        self.fail(f"{value!r} is not a weekday (mon..sun or 1..7)", param, ctx)


class IsoWeekType(click.ParamType):
    """Accepts 2025-W01 or 2025-01"""
    name = "week"
    pattern = re.compile(r"^(\d{4})-?W?(\d{1,2})$", re.IGNORECASE)

    def convert(self, value, param, ctx):
        if isinstance(value, tuple):
            return value
        match = self.pattern.match(str(value).strip())
        if not match:
            self.fail(f"{value!r} is not an ISO week (YYYY-Www)", param, ctx)
        return int(match.group(1)), int(match.group(2))


WEEKDAY = WeekdayType()
ISO_WEEK = IsoWeekType()


def run(settings: Settings, work: Callable[[], Awaitable[T]]) -> T:
    """Run one command against the configured database"""

    async def _main() -> T:
        try:
            await init_db(settings.get_db_url())
            return await work()
        finally:
            await DatabaseEngine.reset()

    try:
        return asyncio.run(_main())
    except UrenstaatError as e:
        raise click.ClickException(str(e)) from e


def week_option(func):
    return click.option(
        "--week", "week", type=ISO_WEEK, default=lambda: format_week(*current_iso_week()),
        show_default="current week", help="ISO week, e.g. 2025-W01",
    )(func)


def month_options(func):
    default_year, default_month = previous_month()
    func = click.option("--month", type=click.IntRange(1, 12), default=default_month,
                        show_default=True, help="Calendar month (1-12)")(func)
    func = click.option("--year", type=int, default=default_year, show_default=True,
                        help="Calendar year")(func)
    return func


def ledger(settings: Settings) -> TimeLedgerService:
    return TimeLedgerService(max_daily_hours=settings.max_daily_hours)


@click.group()
@click.option("--verbose", is_flag=True, default=False, help="Log debug output")
@click.pass_context
def cli(ctx: click.Context, verbose: bool):
    """Track your daily hours per project per week"""
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )
    try:
        ctx.obj = load_settings()
    except UrenstaatError as e:
        raise click.ClickException(str(e)) from e


# --- Templates ---

@cli.group()
def template():
    """Manage default hours per project"""


@template.command(name="list")
@click.pass_obj
def template_list(settings: Settings):
    """Show all templates with day and week totals"""
    templates = run(settings, lambda: TemplateService().list_templates())
    Console().print(templates_table(templates))


@template.command(name="create")
@click.argument("project")
@click.option("--mon", type=float, default=0.0)
@click.option("--tue", type=float, default=0.0)
@click.option("--wed", type=float, default=0.0)
@click.option("--thu", type=float, default=0.0)
@click.option("--fri", type=float, default=0.0)
@click.option("--sat", type=float, default=0.0)
@click.option("--sun", type=float, default=0.0)
@click.pass_obj
def template_create(settings: Settings, project: str, **days: float):
    """Create a template for PROJECT"""
    hours = {DAY_NAMES.index(name) + 1: value for name, value in days.items()}
    service = TemplateService(max_daily_hours=settings.max_daily_hours)
    created = run(settings, lambda: service.create(project, hours))
    click.echo(f"Template created for {created.project} ({created.total:g} h/week)")


@template.command(name="edit")
@click.argument("project")
@click.argument("day", type=WEEKDAY)
@click.argument("hours", type=float)
@click.pass_obj
def template_edit(settings: Settings, project: str, day: int, hours: float):
    """Set the default HOURS of PROJECT on DAY"""
    service = TemplateService(max_daily_hours=settings.max_daily_hours)
    updated = run(settings, lambda: service.edit(project, day, hours))
    click.echo(f"Template {updated.project}: {DAY_NAMES[day - 1]} = {hours:g} h")


@template.command(name="delete")
@click.argument("project")
@click.confirmation_option(prompt="Are you sure?")
@click.pass_obj
def template_delete(settings: Settings, project: str):
    """Delete the template of PROJECT (logged hours are kept)"""
    run(settings, lambda: TemplateService().delete(project))
    click.echo(f"Template deleted for {project}")


# --- Weekly log ---

@cli.group()
def log():
    """Log hours per project for an ISO week"""


@log.command(name="show")
@week_option
@click.pass_obj
def log_show(settings: Settings, week: Tuple[int, int]):
    """Show all projects logged in a week"""
    sheet = run(settings, lambda: ledger(settings).week_overview(*week))
    if not sheet.rows:
        click.echo(f"No entries found for {format_week(*week)}.")
        return
    Console().print(week_table(sheet))


@log.command(name="set")
@click.argument("project")
@click.argument("day", type=WEEKDAY)
@click.argument("hours", type=float)
@week_option
@click.pass_obj
def log_set(settings: Settings, project: str, day: int, hours: float, week: Tuple[int, int]):
    """Record HOURS for PROJECT on DAY"""
    entry = run(settings, lambda: ledger(settings).record_entry(project, week[0], week[1], day, hours))
    click.echo(f"{entry.project} {format_week(*week)} {DAY_NAMES[day - 1]}: {entry.hours:g} h")


@log.command(name="autofill")
@click.argument("project", required=False)
@week_option
@click.pass_obj
def log_autofill(settings: Settings, project: Optional[str], week: Tuple[int, int]):
    """Fill empty days from templates (one PROJECT, or all templates)"""
    service = ledger(settings)
    if project:
        filled = run(settings, lambda: service.auto_fill_week(project, *week))
        click.echo(f"{project}: {filled} day(s) filled in {format_week(*week)}")
        return

    result = run(settings, lambda: service.auto_fill_week_from_templates(*week))
    if not result:
        click.echo("No templates defined.")
    for name, filled in result.items():
        click.echo(f"{name}: {filled} day(s) filled in {format_week(*week)}")


@log.command(name="add")
@click.argument("project")
@week_option
@click.pass_obj
def log_add(settings: Settings, project: str, week: Tuple[int, int]):
    """Add PROJECT to a week with empty days"""
    added = run(settings, lambda: ledger(settings).add_project_to_week(project, *week))
    click.echo(f"{project}: {added} day(s) added to {format_week(*week)}")


@log.command(name="remove")
@click.argument("project")
@week_option
@click.confirmation_option(prompt="Remove all hours of this project for the week?")
@click.pass_obj
def log_remove(settings: Settings, project: str, week: Tuple[int, int]):
    """Remove PROJECT and its hours from a week"""
    removed = run(settings, lambda: ledger(settings).remove_project_from_week(project, *week))
    click.echo(f"{project}: {removed} entr{'y' if removed == 1 else 'ies'} removed from {format_week(*week)}")


@log.command(name="delete")
@click.argument("project")
@click.argument("day", type=WEEKDAY)
@week_option
@click.pass_obj
def log_delete(settings: Settings, project: str, day: int, week: Tuple[int, int]):
    """Delete the entry of PROJECT on DAY"""
    run(settings, lambda: ledger(settings).delete_entry(project, week[0], week[1], day))
    click.echo(f"{project} {format_week(*week)} {DAY_NAMES[day - 1]}: deleted")


# --- Month report & export ---

@cli.command(name="month")
@month_options
@click.option("--project", "projects", multiple=True, help="Only these projects (repeatable)")
@click.pass_obj
def month(settings: Settings, year: int, month: int, projects: Tuple[str, ...]):
    """Show the projects x days matrix of a month"""
    matrix = run(settings, lambda: MonthMatrixService().build_month_matrix(year, month, projects or None))
    if matrix.grand_total == 0:
        click.echo(f"No data found for {month}/{year}.")
        return
    Console().print(month_table(matrix))


@cli.command(name="export")
@month_options
@click.option("--project", default=None, help="Export a single project")
@click.option("--strict/--lenient", default=None,
              help="Fail when the logo or signature image is unreadable")
@click.pass_obj
def export(settings: Settings, year: int, month: int, project: Optional[str], strict: Optional[bool]):
    """Export a month to an .xlsx time sheet in the output directory"""
    projects = [project] if project else None
    matrix = run(settings, lambda: MonthMatrixService().build_month_matrix(year, month, projects))

    service = ExcelExportService(strict_assets=settings.strict_assets)
    try:
        path = save_month_export(
            service,
            matrix,
            build_metadata(settings, matrix, project),
            FileAssetSource(settings.logo_path),
            FileAssetSource(settings.signature_path),
            settings.output_dir,
            project=project,
            strict=strict,
        )
    except UrenstaatError as e:
        raise click.ClickException(str(e)) from e
    except OSError as e:
        raise click.ClickException(f"Could not write export: {e}") from e

    click.echo(f"File successfully generated: {path}")
