# Shared pytest fixtures
from __future__ import annotations

import tempfile
from collections.abc import Callable
from pathlib import Path

import pandas as pd
import pytest

from hr_bulk_import.api.reference import StaticReferenceData
from hr_bulk_import.logging.error_log import ErrorLogBuffer
from hr_bulk_import.logging.init import reset_logging
from hr_bulk_import.models.bulk_result import BulkResult
from hr_bulk_import.models.employee_record import Branch, MappedRecord, Role

CAMPUS = "engineering"


@pytest.fixture()
def temp_workdir(monkeypatch) -> Path:
    with tempfile.TemporaryDirectory() as d:
        p = Path(d)
        (p / "config").mkdir()
        (p / "data").mkdir()
        (p / "logs").mkdir()
        monkeypatch.chdir(p)
        for var in ("HR_API_BASE_URL", "HR_API_TOKEN", "HR_CAMPUS"):
            monkeypatch.delenv(var, raising=False)
        yield p


@pytest.fixture(autouse=True)
def _fresh_logging():
    reset_logging()
    yield
    reset_logging()


@pytest.fixture()
def sample_config_yaml() -> str:
    return """api_base_url: http://hr.example.test/api
timeout_seconds: 5
operator_campus: engineering
branches:
  engineering:
    - {code: CSE, name: Computer Science}
    - {code: ECE, name: Electronics}
    - {code: OLD, name: Closed Branch, isActive: false}
"""


@pytest.fixture()
def write_config(temp_workdir: Path, sample_config_yaml: str) -> Path:
    cfg = temp_workdir / "config" / "import.yml"
    cfg.write_text(sample_config_yaml, encoding="utf-8")
    return cfg


@pytest.fixture()
def branches() -> list[Branch]:
    return [
        Branch(code="CSE", name="Computer Science", is_active=True),
        Branch(code="ECE", name="Electronics", is_active=True),
    ]


@pytest.fixture()
def roles() -> list[Role]:
    return [
        Role(value="assistant_professor", label="Assistant Professor"),
        Role(value="lab_incharge", label="Lab Incharge"),
        Role(value="other", label="Other"),
    ]


@pytest.fixture()
def make_record(branches: list[Branch], roles: list[Role]) -> Callable[..., MappedRecord]:
    """Factory for a fully valid record; override fields via kwargs."""
    def factory(**overrides) -> MappedRecord:
        values = dict(
            name="John Doe",
            email="john.doe@college.edu",
            employee_id="EMP-001",
            phone_number="9876543210",
            branch_code="CSE",
            campus=CAMPUS,
            branches=list(branches),
            roles=list(roles),
        )
        values.update(overrides)
        return MappedRecord(**values)
    return factory


@pytest.fixture()
def make_spreadsheet(temp_workdir: Path) -> Callable[..., Path]:
    """Write rows (first row = header) to an .xlsx/.csv file under data/."""
    def factory(name: str, rows: list[list[object]]) -> Path:
        p = temp_workdir / "data" / name
        df = pd.DataFrame(rows)
        if p.suffix == ".csv":
            df.to_csv(p, header=False, index=False)
        else:
            with pd.ExcelWriter(p) as writer:
                df.to_excel(writer, sheet_name="Employees", header=False, index=False)
        return p
    return factory


class FakeBackend:
    """Reference data + submitter double recording every call."""

    def __init__(self, branches: list[Branch], roles: list[Role], results: list[BulkResult] | None = None):
        self.branches = {CAMPUS: branches}
        self.roles = {CAMPUS: roles}
        self.results = results
        self.branch_calls: list[str] = []
        self.submitted: list[list[MappedRecord]] = []
        self.error: Exception | None = None

    def fetch_branches(self, campus: str) -> list[Branch]:
        self.branch_calls.append(campus)
        return list(self.branches.get(campus, []))

    def fetch_roles(self, campus: str) -> list[Role]:
        return list(self.roles.get(campus, []))

    def bulk_register(self, records):
        if self.error is not None:
            raise self.error
        self.submitted.append(list(records))
        if self.results is not None:
            return list(self.results)
        return [
            BulkResult(row=i + 1, employee_id=r.employee_id, email=r.email, success=True)
            for i, r in enumerate(records)
        ]


@pytest.fixture()
def backend(branches: list[Branch], roles: list[Role]) -> FakeBackend:
    return FakeBackend(branches, roles)


@pytest.fixture()
def static_reference(branches: list[Branch], roles: list[Role]) -> StaticReferenceData:
    return StaticReferenceData(branches={CAMPUS: branches}, roles={CAMPUS: roles})


@pytest.fixture()
def error_log(temp_workdir: Path) -> ErrorLogBuffer:
    return ErrorLogBuffer(temp_workdir / "logs")
