from __future__ import annotations

import json
from pathlib import Path

import httpx
import pytest

from hr_bulk_import.api.client import HRApiClient
from hr_bulk_import.cli import main as cli_main

HEADER = ["Employee Name", "Emp ID", "Mobile", "Dept", "Role"]
GOOD = ["John Doe", "EMP-001", "9876543210", "CSE", "Lab Incharge"]
GOOD_2 = ["Jane Roe", "EMP-002", "9876500000", "ECE", "Technician"]
BAD = ["J", "E1", "123", "OLD", ""]


def _use_backend(monkeypatch, handler) -> list[httpx.Request]:
    """Route the CLI's HRApiClient through an httpx MockTransport."""
    requests: list[httpx.Request] = []

    def recording(request: httpx.Request) -> httpx.Response:
        requests.append(request)
        return handler(request)

    def factory(session, timeout=10.0):
        return HRApiClient(session, client=httpx.Client(transport=httpx.MockTransport(recording)))

    monkeypatch.setattr("hr_bulk_import.cli.__main__.HRApiClient", factory)
    return requests


def _backend(bulk_response: httpx.Response | None = None):
    def handler(request: httpx.Request) -> httpx.Response:
        if request.url.path.endswith("/employee/branches"):
            return httpx.Response(200, json={"branches": [
                {"code": "CSE", "name": "Computer Science", "isActive": True},
                {"code": "ECE", "name": "Electronics", "isActive": True},
            ]})
        if request.url.path.endswith("/hr/roles"):
            return httpx.Response(200, json=[
                {"value": "lab_incharge", "label": "Lab Incharge"},
                {"value": "technician", "label": "Technician"},
                {"value": "other", "label": "Other"},
            ])
        if bulk_response is not None:
            return bulk_response
        employees = json.loads(request.content)["employees"]
        return httpx.Response(200, json={"results": [
            {"row": i + 1, "employeeId": e["employeeId"], "email": e["email"], "success": True}
            for i, e in enumerate(employees)
        ]})
    return handler


def test_cli_inspect(write_config, make_spreadsheet, capsys):
    path = make_spreadsheet("staff.xlsx", [HEADER, GOOD, BAD])
    code = cli_main([str(path), "--inspect"])
    out = capsys.readouterr().out
    assert code == 0
    assert "FILE: staff.xlsx SHEET: Employees rows=2" in out
    assert "Name: ✓ Mapped" in out
    assert "Email: ✗ Not found (optional)" in out
    assert "sample_row=" in out


def test_cli_inspect_unreadable_file(write_config, temp_workdir: Path, capsys):
    code = cli_main([str(temp_workdir / "data" / "missing.xlsx"), "--inspect"])
    assert code == 1
    assert "inspect: file not found" in capsys.readouterr().out


def test_cli_dry_run_partial(write_config, make_spreadsheet, temp_workdir: Path, capsys):
    path = make_spreadsheet("staff.xlsx", [HEADER, GOOD, BAD])
    code = cli_main([str(path), "--dry-run"])
    out = capsys.readouterr().out
    assert code == 2
    assert "INFO mode=dry-run campus=engineering" in out
    assert "WARN row=3 branchCode: Invalid branch for selected campus" in out
    assert "SUMMARY rows=2 valid=1 invalid=1 submitted=0 succeeded=0 failed=0 elapsed_sec=0" in out
    logs = list((temp_workdir / "logs").glob("import-errors-*.log"))
    assert len(logs) == 1
    assert "error log:" in out


def test_cli_dry_run_all_valid(write_config, make_spreadsheet, temp_workdir: Path, capsys):
    path = make_spreadsheet("staff.xlsx", [HEADER, GOOD])
    code = cli_main([str(path), "--dry-run"])
    out = capsys.readouterr().out
    assert code == 0
    assert "SUMMARY rows=1 valid=1 invalid=0" in out
    assert list((temp_workdir / "logs").glob("*.log")) == []


def test_cli_missing_campus(write_config, make_spreadsheet, capsys):
    write_config.write_text("api_base_url: http://hr.example.test/api\n", encoding="utf-8")
    path = make_spreadsheet("staff.xlsx", [HEADER, GOOD])
    code = cli_main([str(path), "--dry-run"])
    assert code == 1
    assert "ERROR campus: operator campus not configured" in capsys.readouterr().out


def test_cli_campus_flag_overrides_config(write_config, make_spreadsheet, capsys):
    path = make_spreadsheet("staff.xlsx", [HEADER, GOOD])
    code = cli_main([str(path), "--dry-run", "--campus", "pharmacy"])
    out = capsys.readouterr().out
    # pharmacy has no configured branches
    assert code == 1
    assert "ERROR import: No active branches found for your campus" in out


def test_cli_config_error(temp_workdir: Path, capsys):
    code = cli_main(["staff.xlsx", "--config", str(temp_workdir / "config" / "nope.yml")])
    assert code == 1
    assert "ERROR config: config file not found" in capsys.readouterr().out


def test_cli_debug_mode(write_config, make_spreadsheet, capsys):
    path = make_spreadsheet("staff.xlsx", [HEADER, GOOD])
    cli_main([str(path), "--dry-run", "--debug"])
    assert "DEBUG debug mode enabled" in capsys.readouterr().out


def test_cli_live_success(write_config, make_spreadsheet, monkeypatch, capsys):
    monkeypatch.setenv("HR_API_TOKEN", "tok-123")
    requests = _use_backend(monkeypatch, _backend())
    path = make_spreadsheet("staff.xlsx", [HEADER, GOOD, GOOD_2])

    code = cli_main([str(path)])
    out = capsys.readouterr().out

    assert code == 0
    assert "INFO mode=live campus=engineering api=http://hr.example.test/api" in out
    assert "INFO registered row=2 employeeId=EMP-002" in out
    assert "SUMMARY rows=2 valid=2 invalid=0 submitted=2 succeeded=2 failed=0" in out
    assert all(r.headers["Authorization"] == "Bearer tok-123" for r in requests)
    bulk = [r for r in requests if r.method == "POST"]
    assert len(bulk) == 1
    assert [e["employeeId"] for e in json.loads(bulk[0].content)["employees"]] == ["EMP-001", "EMP-002"]


def test_cli_live_excludes_invalid_rows(write_config, make_spreadsheet, monkeypatch, capsys):
    requests = _use_backend(monkeypatch, _backend())
    path = make_spreadsheet("staff.xlsx", [HEADER, GOOD, BAD])

    code = cli_main([str(path)])
    out = capsys.readouterr().out

    assert code == 2
    assert "WARN 1 invalid rows were excluded from submission" in out
    bulk = [r for r in requests if r.method == "POST"]
    assert [e["employeeId"] for e in json.loads(bulk[0].content)["employees"]] == ["EMP-001"]


def test_cli_live_row_failures(write_config, make_spreadsheet, monkeypatch, capsys):
    response = httpx.Response(200, json={"results": [
        {"row": 1, "employeeId": "EMP-001", "email": "", "success": True},
        {"row": 2, "employeeId": "EMP-002", "email": "", "success": False, "error": "Employee ID already exists"},
    ]})
    _use_backend(monkeypatch, _backend(response))
    path = make_spreadsheet("staff.xlsx", [HEADER, GOOD, GOOD_2])

    code = cli_main([str(path)])
    out = capsys.readouterr().out

    assert code == 2
    assert "ERROR failed row=2 employeeId=EMP-002: Employee ID already exists" in out
    assert "succeeded=1 failed=1" in out


@pytest.mark.parametrize(
    "response, message",
    [
        (httpx.Response(500, json={"msg": "Server error"}), "ERROR submit: bulk registration failed: Server error"),
        (httpx.Response(401), "ERROR submit: bulk registration failed: unauthorized"),
    ],
)
def test_cli_live_submit_failure(write_config, make_spreadsheet, monkeypatch, capsys, response, message):
    _use_backend(monkeypatch, _backend(response))
    path = make_spreadsheet("staff.xlsx", [HEADER, GOOD])

    code = cli_main([str(path)])
    assert code == 1
    assert message in capsys.readouterr().out


def test_cli_live_nothing_to_submit(write_config, make_spreadsheet, monkeypatch, capsys):
    requests = _use_backend(monkeypatch, _backend())
    path = make_spreadsheet("staff.xlsx", [HEADER, BAD])

    code = cli_main([str(path)])
    assert code == 1
    assert "ERROR submit: no valid rows to submit (1 invalid)" in capsys.readouterr().out
    assert [r for r in requests if r.method == "POST"] == []
