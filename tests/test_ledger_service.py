"""
Tests for the Time Ledger Service.
"""

import pytest
from sqlalchemy.exc import OperationalError

from urenstaat.domain.errors import InvalidHours, InvalidProject, InvalidWeek, InvalidWeekday, StorageError
from urenstaat.services.ledger_service import TimeLedgerService


@pytest.mark.asyncio
async def test_record_entry_upserts(ledger, entry_repo):
    await ledger.record_entry("Alpha", 2024, 10, 1, 5)
    await ledger.record_entry("Alpha", 2024, 10, 1, 6.75)

    entries = await entry_repo.get_week("Alpha", 2024, 10)
    assert len(entries) == 1
    assert entries[0].hours == 6.75


@pytest.mark.asyncio
async def test_entries_for_week_reports_missing_days_as_zero(ledger):
    await ledger.record_entry("Alpha", 2024, 10, 3, 4)

    assert await ledger.entries_for_week("Alpha", 2024, 10) == [
        (1, 0.0), (2, 0.0), (3, 4.0), (4, 0.0), (5, 0.0), (6, 0.0), (7, 0.0)
    ]


@pytest.mark.asyncio
@pytest.mark.parametrize("hours", [-1, -0.25, 24.5, float("nan")])
async def test_invalid_hours(ledger, entry_repo, hours):
    with pytest.raises(InvalidHours):
        await ledger.record_entry("Alpha", 2024, 10, 1, hours)
    assert await entry_repo.get_week("Alpha", 2024, 10) == []


@pytest.mark.asyncio
async def test_soft_maximum_is_configurable(entry_repo, template_service):
    strict_ledger = TimeLedgerService(entry_repo=entry_repo, template_service=template_service,
                                      max_daily_hours=10)
    with pytest.raises(InvalidHours):
        await strict_ledger.record_entry("Alpha", 2024, 10, 1, 11)
    await strict_ledger.record_entry("Alpha", 2024, 10, 1, 10)


@pytest.mark.asyncio
@pytest.mark.parametrize("iso_year, iso_week", [
    (2024, 54), (2024, 53), (2024, 0), (2023, 53),
    (9999, 52),  # Sunday would be 2 January 10000
])
async def test_invalid_week(ledger, iso_year, iso_week):
    with pytest.raises(InvalidWeek):
        await ledger.record_entry("Alpha", iso_year, iso_week, 1, 4)


@pytest.mark.asyncio
async def test_week_53_exists_in_long_years(ledger):
    await ledger.record_entry("Alpha", 2020, 53, 7, 3)
    assert (await ledger.entries_for_week("Alpha", 2020, 53))[6] == (7, 3.0)


@pytest.mark.asyncio
async def test_invalid_weekday(ledger):
    with pytest.raises(InvalidWeekday):
        await ledger.record_entry("Alpha", 2024, 10, 8, 4)


@pytest.mark.asyncio
async def test_auto_fill_never_overwrites_manual_entries(ledger, template_service):
    await template_service.create("Alpha", {1: 8, 2: 8, 3: 8, 4: 8, 5: 8})
    await ledger.record_entry("Alpha", 2024, 10, 1, 5)

    filled = await ledger.auto_fill_week("Alpha", 2024, 10)

    assert filled == 6
    assert await ledger.entries_for_week("Alpha", 2024, 10) == [
        (1, 5.0), (2, 8.0), (3, 8.0), (4, 8.0), (5, 8.0), (6, 0.0), (7, 0.0)
    ]
    # A second run has nothing left to fill
    assert await ledger.auto_fill_week("Alpha", 2024, 10) == 0


@pytest.mark.asyncio
async def test_auto_fill_without_template_fills_zeros(ledger, entry_repo):
    assert await ledger.auto_fill_week("Beta", 2024, 10) == 7

    entries = await entry_repo.get_week("Beta", 2024, 10)
    assert [e.hours for e in entries] == [0.0] * 7


@pytest.mark.asyncio
async def test_auto_fill_week_from_templates(ledger, template_service):
    await template_service.create("Alpha", {1: 8})
    await template_service.create("Beta", {2: 4})
    await ledger.record_entry("Beta", 2024, 10, 2, 1)

    result = await ledger.auto_fill_week_from_templates(2024, 10)

    assert result == {"Alpha": 7, "Beta": 6}
    sheet = await ledger.week_overview(2024, 10)
    assert [row.project for row in sheet.rows] == ["Alpha", "Beta"]
    assert sheet.day_totals[:2] == [8.0, 1.0]
    assert sheet.total == 9.0


@pytest.mark.asyncio
async def test_delete_entry_is_idempotent(ledger, entry_repo):
    await ledger.record_entry("Alpha", 2024, 10, 1, 5)

    await ledger.delete_entry("Alpha", 2024, 10, 1)
    await ledger.delete_entry("Alpha", 2024, 10, 1)

    assert await entry_repo.get("Alpha", 2024, 10, 1) is None


@pytest.mark.asyncio
async def test_add_and_remove_project_in_week(ledger):
    await ledger.record_entry("Alpha", 2024, 10, 2, 3)

    assert await ledger.add_project_to_week("Alpha", 2024, 10) == 6
    assert (await ledger.entries_for_week("Alpha", 2024, 10))[1] == (2, 3.0)

    assert await ledger.remove_project_from_week("Alpha", 2024, 10) == 7
    assert (await ledger.week_overview(2024, 10)).rows == []


@pytest.mark.asyncio
async def test_storage_failure_rolls_back(ledger, entry_repo, db_session, monkeypatch):
    await ledger.record_entry("Alpha", 2024, 10, 1, 5)

    async def failing_commit():
        raise OperationalError("COMMIT", {}, Exception("disk I/O error"))

    monkeypatch.setattr(db_session, "commit", failing_commit)
    with pytest.raises(StorageError):
        await ledger.record_entry("Alpha", 2024, 10, 1, 7)
    with pytest.raises(StorageError):
        await ledger.auto_fill_week("Alpha", 2024, 10)
    monkeypatch.undo()

    assert await ledger.entries_for_week("Alpha", 2024, 10) == [
        (1, 5.0), (2, 0.0), (3, 0.0), (4, 0.0), (5, 0.0), (6, 0.0), (7, 0.0)
    ]
    # The failed auto-fill left no rows behind
    assert len(await entry_repo.get_week("Alpha", 2024, 10)) == 1


@pytest.mark.asyncio
async def test_failed_auto_fill_from_templates_leaves_week_untouched(ledger, template_service,
                                                                     entry_repo, db_session, monkeypatch):
    """
    Filling every template runs in one transaction:
    1. Alpha's days are queued first.
    2. The lookup for Beta fails.
    3. Neither project keeps any row.
    """
    await template_service.create("Alpha", {1: 8})
    await template_service.create("Beta", {2: 4})

    original_execute = db_session.execute

    async def execute_failing_for_beta(statement, *args, **kwargs):
        if "Beta" in statement.compile().params.values():
            raise OperationalError("SELECT", {}, Exception("disk I/O error"))
        return await original_execute(statement, *args, **kwargs)

    monkeypatch.setattr(db_session, "execute", execute_failing_for_beta)
    with pytest.raises(StorageError):
        await ledger.auto_fill_week_from_templates(2024, 10)
    monkeypatch.undo()

    assert await entry_repo.get_week("Alpha", 2024, 10) == []
    assert await entry_repo.get_week("Beta", 2024, 10) == []
    assert await ledger.auto_fill_week_from_templates(2024, 10) == {"Alpha": 7, "Beta": 7}


@pytest.mark.asyncio
@pytest.mark.parametrize("project", ["", "   ", "x" * 201])
async def test_invalid_project_name(ledger, template_service, entry_repo, project):
    with pytest.raises(InvalidProject):
        await ledger.record_entry(project, 2024, 10, 1, 4)
    with pytest.raises(InvalidProject):
        await template_service.create(project, {1: 8})
    assert await entry_repo.list_projects() == []
    assert await template_service.list() == []
