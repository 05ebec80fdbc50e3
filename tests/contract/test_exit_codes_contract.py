from __future__ import annotations

from pathlib import Path

import pytest

from hr_bulk_import.cli import main as cli_main
from hr_bulk_import.cli.__main__ import EXIT_FATAL, EXIT_PARTIAL_FAILURE, EXIT_SUCCESS_ALL

"""Exit code contract: 0 all submitted rows succeeded, 2 partial, 1 fatal."""

HEADER = ["Name", "Employee ID", "Phone", "Branch"]
GOOD = ["John Doe", "EMP-001", "9876543210", "CSE"]
BAD = ["John Doe", "EMP-002", "12345", "CSE"]


def test_exit_code_values():
    assert (EXIT_SUCCESS_ALL, EXIT_FATAL, EXIT_PARTIAL_FAILURE) == (0, 1, 2)


@pytest.mark.parametrize(
    "rows, expected",
    [
        ([GOOD], EXIT_SUCCESS_ALL),
        ([GOOD, BAD], EXIT_PARTIAL_FAILURE),
        ([BAD], EXIT_PARTIAL_FAILURE),
    ],
)
def test_dry_run_exit_codes(write_config, make_spreadsheet, rows, expected):
    path = make_spreadsheet("staff.xlsx", [HEADER, *rows])
    assert cli_main([str(path), "--dry-run"]) == expected


def test_exit_code_fatal_on_unreadable_file(write_config, temp_workdir: Path, capsys):
    code = cli_main([str(temp_workdir / "data" / "staff.pdf"), "--dry-run"])
    assert code == EXIT_FATAL
    assert "ERROR import: unsupported file type" in capsys.readouterr().out


def test_exit_code_fatal_on_bad_config(write_config, make_spreadsheet, capsys):
    write_config.write_text("api_base_url: http://x/api\nunknown_key: 1\n", encoding="utf-8")
    path = make_spreadsheet("staff.xlsx", [HEADER, GOOD])
    assert cli_main([str(path), "--dry-run"]) == EXIT_FATAL
    assert "ERROR config: config validation failed" in capsys.readouterr().out
