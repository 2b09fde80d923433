"""
End-to-end tests of the command line against a SQLite file.
"""

import pytest
from click.testing import CliRunner
from openpyxl import load_workbook

from conftest import make_png
from urenstaat.cli.commands import cli


@pytest.fixture
def cli_env(tmp_path, monkeypatch):
    monkeypatch.chdir(tmp_path)
    (tmp_path / "logo.png").write_bytes(make_png(400, 100))
    (tmp_path / "signature.png").write_bytes(make_png(300, 150))
    return {
        "URENSTAAT_OUTPUT_DIR": str(tmp_path / "out"),
        "URENSTAAT_DATABASE_URL": f"sqlite+aiosqlite:///{tmp_path / 'urenstaat.db'}",
        "URENSTAAT_EMPLOYEE_NAME": "Jan Jansen",
        "URENSTAAT_LOGO_PATH": str(tmp_path / "logo.png"),
        "URENSTAAT_SIGNATURE_PATH": str(tmp_path / "signature.png"),
        "COLUMNS": "250",
    }


@pytest.fixture
def invoke(cli_env):
    runner = CliRunner()

    def _invoke(*args):
        return runner.invoke(cli, list(args), env=cli_env)

    return _invoke


def test_template_log_month_export_flow(invoke, tmp_path):
    result = invoke("template", "create", "Alpha", "--mon", "8", "--tue", "8", "--wed", "6")
    assert result.exit_code == 0, result.output
    assert "22 h/week" in result.output

    result = invoke("log", "set", "Alpha", "mon", "5", "--week", "2024-W10")
    assert result.exit_code == 0, result.output

    result = invoke("log", "autofill", "--week", "2024-W10")
    assert result.exit_code == 0, result.output
    assert "Alpha: 6 day(s) filled" in result.output

    result = invoke("log", "show", "--week", "2024-W10")
    assert result.exit_code == 0, result.output
    assert "Alpha" in result.output
    assert "19" in result.output

    result = invoke("month", "--year", "2024", "--month", "3")
    assert result.exit_code == 0, result.output
    assert "Alpha" in result.output

    result = invoke("export", "--year", "2024", "--month", "3")
    assert result.exit_code == 0, result.output
    exported = tmp_path / "out" / "Urenstaat_2024_03.xlsx"
    assert exported.exists()

    ws = load_workbook(exported, data_only=True)["Urenstaat"]
    assert ws["C4"].value == "Jan Jansen"
    assert ws["B17"].value == "Alpha"
    assert ws["F17"].value == 5.0   # Monday 4 March
    assert ws["AH22"].value == 19.0
    assert len(ws._images) == 2


def test_template_edit_and_delete(invoke):
    invoke("template", "create", "Alpha", "--mon", "8")

    result = invoke("template", "edit", "Alpha", "fri", "4")
    assert result.exit_code == 0, result.output

    result = invoke("template", "list")
    assert result.exit_code == 0, result.output
    assert "Alpha" in result.output
    assert "12" in result.output

    result = invoke("template", "delete", "Alpha", "--yes")
    assert result.exit_code == 0, result.output

    result = invoke("template", "delete", "Alpha", "--yes")
    assert result.exit_code == 1
    assert "Template not found: Alpha" in result.output


def test_invalid_input_is_reported(invoke):
    result = invoke("log", "set", "Alpha", "mon", "--week", "2024-W10", "--", "-1")
    assert result.exit_code == 1
    assert "Invalid hours -1.0" in result.output

    result = invoke("log", "set", "Alpha", "mon", "4", "--week", "2024-W54")
    assert result.exit_code == 1
    assert "Invalid ISO week 54" in result.output

    result = invoke("log", "set", "Alpha", "someday", "4")
    assert result.exit_code == 2


def test_add_remove_and_delete_in_week(invoke):
    assert invoke("log", "add", "Beta", "--week", "2025-W01").exit_code == 0
    assert invoke("log", "set", "Beta", "tue", "3", "--week", "2025-W01").exit_code == 0
    assert invoke("log", "delete", "Beta", "tue", "--week", "2025-W01").exit_code == 0

    result = invoke("log", "remove", "Beta", "--week", "2025-W01", "--yes")
    assert result.exit_code == 0, result.output
    assert "6 entries removed" in result.output

    result = invoke("log", "show", "--week", "2025-W01")
    assert "No entries found for 2025-W01" in result.output


def test_missing_output_dir(cli_env):
    env = dict(cli_env, URENSTAAT_OUTPUT_DIR="")
    result = CliRunner().invoke(cli, ["template", "list"], env=env)
    assert result.exit_code == 1
    assert "output_dir" in result.output


def test_unopenable_database_is_reported(cli_env, tmp_path):
    env = dict(cli_env, URENSTAAT_DATABASE_URL=f"sqlite+aiosqlite:///{tmp_path / 'missing' / 'dir' / 'u.db'}")
    result = CliRunner().invoke(cli, ["template", "list"], env=env)
    assert result.exit_code == 1
    assert "Storage failure during database initialisation" in result.output
