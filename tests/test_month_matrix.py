"""
Tests for the Month Matrix Service.
"""

import pytest

from urenstaat.domain.errors import InvalidMonth


@pytest.mark.asyncio
async def test_month_matrix_generation(ledger, template_service, matrix_service):
    """
    Full aggregation flow:
    1. Create a template and auto-fill a week.
    2. Override one day by hand and log a second project.
    3. Build the matrix and verify rows, columns and totals.
    """
    await template_service.create("Development", {1: 8, 2: 8, 3: 8, 4: 8, 5: 8})
    await ledger.auto_fill_week("Development", 2024, 10)        # 4-10 March 2024
    await ledger.record_entry("Development", 2024, 10, 5, 4)    # Friday 8 March
    await ledger.record_entry("Meetings", 2024, 10, 5, 2.5)

    matrix = await matrix_service.build_month_matrix(2024, 3)

    assert matrix.projects == ["Development", "Meetings"]
    assert matrix.hours("Development", 4) == 8.0
    assert matrix.hours("Development", 8) == 4.0
    assert matrix.hours("Meetings", 8) == 2.5
    assert matrix.hours("Meetings", 4) == 0.0

    assert matrix.project_totals == {"Development": 36.0, "Meetings": 2.5}
    assert matrix.day_totals[7] == 6.5
    assert matrix.grand_total == 38.5
    assert sum(matrix.day_totals) == matrix.grand_total


@pytest.mark.asyncio
async def test_leap_february_has_29_days(matrix_service, ledger):
    await ledger.record_entry("Alpha", 2024, 9, 4, 3)  # Thursday 29 February 2024

    leap = await matrix_service.build_month_matrix(2024, 2)
    common = await matrix_service.build_month_matrix(2023, 2)

    assert leap.days_in_month == 29
    assert len(leap.row("Alpha").hours) == 29
    assert leap.hours("Alpha", 29) == 3.0
    assert len(common.row("Alpha").hours) == 28
    assert common.grand_total == 0


@pytest.mark.asyncio
async def test_entries_attributed_across_year_boundary(ledger, matrix_service):
    """2024-12-30 and 2024-12-31 sit in ISO week 1 of 2025 but belong to December 2024"""
    await ledger.record_entry("Alpha", 2024, 48, 1, 5)    # 25 November 2024
    await ledger.record_entry("Alpha", 2024, 52, 7, 1)    # 29 December 2024
    await ledger.record_entry("Alpha", 2025, 1, 1, 3)     # 30 December 2024
    await ledger.record_entry("Alpha", 2025, 1, 2, 2)     # 31 December 2024
    await ledger.record_entry("Alpha", 2025, 1, 3, 4)     # 1 January 2025
    await ledger.record_entry("Beta", 2025, 1, 5, 6)      # 3 January 2025

    december = await matrix_service.build_month_matrix(2024, 12)
    january = await matrix_service.build_month_matrix(2025, 1)
    november = await matrix_service.build_month_matrix(2024, 11)

    assert december.row("Alpha").days()[28:] == [(29, 1.0), (30, 3.0), (31, 2.0)]
    assert december.grand_total == 6.0
    assert december.project_totals == {"Alpha": 6.0, "Beta": 0.0}

    assert january.hours("Alpha", 1) == 4.0
    assert january.hours("Beta", 3) == 6.0
    assert january.grand_total == 10.0

    assert november.grand_total == 5.0
    assert november.hours("Alpha", 25) == 5.0


@pytest.mark.asyncio
async def test_empty_month_is_all_zeros(matrix_service, template_service):
    await template_service.create("Alpha", {1: 8})

    matrix = await matrix_service.build_month_matrix(2025, 6)

    assert matrix.projects == ["Alpha"]
    assert matrix.row("Alpha").hours == [0.0] * 30
    assert matrix.grand_total == 0


@pytest.mark.asyncio
async def test_projects_sorted_and_filtered(ledger, matrix_service):
    for project in ["Zeta", "alpha", "Beta"]:
        await ledger.record_entry(project, 2024, 10, 1, 1)

    matrix = await matrix_service.build_month_matrix(2024, 3)
    assert matrix.projects == ["Beta", "Zeta", "alpha"]

    only_zeta = await matrix_service.build_month_matrix(2024, 3, projects=["Zeta"])
    assert only_zeta.projects == ["Zeta"]
    assert only_zeta.grand_total == 1.0


@pytest.mark.asyncio
@pytest.mark.parametrize("month", [0, 13])
async def test_invalid_month(matrix_service, month):
    with pytest.raises(InvalidMonth):
        await matrix_service.build_month_matrix(2024, month)
