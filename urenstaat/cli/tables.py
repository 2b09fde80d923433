"""
Terminal tables for templates, weeks and months.

Zero hours render as empty cells so the filled-in days stand out.
"""

from typing import List

from rich import box
from rich.table import Table

from urenstaat.domain.iso_calendar import format_week
from urenstaat.domain.models import MonthMatrix, Template, WeekSheet

DAY_HEADERS = ["Mon", "Tue", "Wed", "Thu", "Fri", "Sat", "Sun"]


def format_hours(hours: float) -> str:
    if hours == 0:
        return ""
    return f"{hours:.2f}".rstrip("0").rstrip(".")


def _new_table(title: str, first_column: str, day_headers: List[str]) -> Table:
    table = Table(title=title, box=box.SIMPLE_HEAD, show_footer=True)
    table.add_column(first_column, footer="TOTAL", style="bold", footer_style="bold")
    for header in day_headers:
        table.add_column(header, justify="center")
    table.add_column("TOTAL", justify="right", style="bold")
    return table


def _set_footer(table: Table, day_totals: List[float], total: float) -> None:
    for column, value in zip(table.columns[1:-1], day_totals):
        column.footer = format_hours(value)
    table.columns[-1].footer = format_hours(total)


def templates_table(templates: List[Template]) -> Table:
    """Default hours per project and weekday, with day and week totals"""
    table = _new_table("Templates (daily defaults)", "Project", DAY_HEADERS)
    for template in templates:
        table.add_row(template.project, *map(format_hours, template.as_week()), format_hours(template.total))
    day_totals = [sum(t.as_week()[i] for t in templates) for i in range(7)]
    _set_footer(table, day_totals, sum(t.total for t in templates))
    return table


def week_table(sheet: WeekSheet) -> Table:
    headers = [f"{name}\n{date:%d-%m}" for name, date in zip(DAY_HEADERS, sheet.dates)]
    table = _new_table(f"Timesheet {format_week(sheet.iso_year, sheet.iso_week)}", "Project", headers)
    for row in sheet.rows:
        table.add_row(row.project, *map(format_hours, row.hours), format_hours(row.total))
    _set_footer(table, sheet.day_totals, sheet.total)
    return table


def month_table(matrix: MonthMatrix) -> Table:
    """Projects x days matrix, headers show weekday and day number"""
    headers = [f"{date:%a}\n{date.day:02d}" for date in matrix.dates]
    table = _new_table(f"Report {matrix.month}/{matrix.year}", "Project", headers)
    for row in matrix.rows:
        table.add_row(row.project, *map(format_hours, row.hours), format_hours(row.total))
    _set_footer(table, matrix.day_totals, matrix.grand_total)
    return table
