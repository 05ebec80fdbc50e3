from __future__ import annotations

import json

import httpx

from hr_bulk_import.api.client import HRApiClient
from hr_bulk_import.api.session import ApiSession
from hr_bulk_import.models.session_state import SessionState
from hr_bulk_import.services.orchestrator import BulkImportSession

"""End-to-end: spreadsheet -> mapping -> edits -> batch submit over HTTP (MockTransport)."""

CAMPUS = "diploma"


class FakeHRBackend:
    """Minimal in-memory stand-in for the three backend endpoints."""

    def __init__(self) -> None:
        self.registered: list[dict] = []
        self.branch_calls: list[str] = []

    def __call__(self, request: httpx.Request) -> httpx.Response:
        if request.url.path == "/api/employee/branches":
            campus = request.url.params["campus"]
            self.branch_calls.append(campus)
            branches = {
                "diploma": [{"code": "DME", "name": "Mechanical", "isActive": True},
                            {"code": "DCE", "name": "Civil", "isActive": True}],
                "pharmacy": [{"code": "PHC", "name": "Pharmaceutics", "isActive": True}],
            }.get(campus, [])
            return httpx.Response(200, json={"branches": branches})
        if request.url.path == "/api/hr/roles":
            return httpx.Response(200, json={"roles": [
                {"value": "senior_lecturer", "label": "Senior Lecturer"},
                {"value": "lecturer", "label": "Lecturer"},
                {"value": "other", "label": "Other"},
            ]})
        if request.url.path == "/api/hr/employees/bulk":
            results = []
            for i, emp in enumerate(json.loads(request.content)["employees"], start=1):
                duplicate = any(r["employeeId"] == emp["employeeId"] for r in self.registered)
                if not duplicate:
                    self.registered.append(emp)
                results.append({
                    "row": i, "employeeId": emp["employeeId"], "email": emp["email"],
                    "success": not duplicate, "error": "Employee ID already exists" if duplicate else None,
                })
            return httpx.Response(200, json={"results": results})
        return httpx.Response(404, json={"msg": "not found"})


def test_upload_edit_and_submit(make_spreadsheet, error_log):
    path = make_spreadsheet(
        "diploma_staff.xlsx",
        [
            ["S.No", "Faculty Name", "Mail ID", "Staff ID", "Contact No", "Dept", "Designation", "Other Role", "Leaves"],
            [1, "Ravi Kumar", "ravi.kumar@college.edu", "DIP-101", 9876543210, "DME", "Senior Lecturer", None, 15],
            [2, "Asha", "asha@college.edu", "DIP-102", 9876543211, "DCE", "other", None, None],
            [3, "Meena Rao", None, "DIP-103", 98765, "Chemistry", "Lecturer", None, 10],
        ],
    )
    backend = FakeHRBackend()
    http = httpx.Client(transport=httpx.MockTransport(backend))
    client = HRApiClient(ApiSession("http://hr.example.test/api", "tok"), client=http)
    session = BulkImportSession(client, CAMPUS, submitter=client, error_log=error_log)

    counts = session.load_file(path)
    assert (counts.total, counts.valid, counts.invalid) == (3, 1, 2)

    ravi, asha, meena = session.records
    assert ravi.phone_number == "9876543210"
    assert ravi.leave_balance_by_experience == "15"
    assert asha.leave_balance_by_experience == 12
    assert session.errors_for(asha.row_id) == {
        "email": "Email must have at least 5 characters before @",
        "customRole": "Custom role is required",
    }
    assert set(session.errors_for(meena.row_id)) == {"phoneNumber", "branchCode"}

    # fix Asha, leave Meena invalid
    session.on_field_change(asha.row_id, "email", "Asha.Devi@College.edu")
    assert session.on_field_change(asha.row_id, "customRole", "Workshop Instructor") == {}

    outcome = session.submit()
    assert (outcome.submitted, outcome.succeeded, outcome.failed, outcome.excluded) == (2, 2, 0, 1)
    assert [e["employeeId"] for e in backend.registered] == ["DIP-101", "DIP-102"]
    sent = backend.registered[1]
    assert sent["email"] == "asha.devi@college.edu"
    assert sent["customRole"] == "Workshop Instructor"
    assert sent["campus"] == "diploma"
    assert sent["department"] == "DCE"
    assert session.state is SessionState.DONE

    # second submit of the same rows: backend reports duplicates per row
    again = session.submit()
    assert again.failed == 2
    assert all(r.error == "Employee ID already exists" for r in again.results)
    client.close()
    http.close()


def test_campus_change_refetches_reference_data(make_spreadsheet, error_log):
    path = make_spreadsheet(
        "one.xlsx",
        [["Name", "Employee ID", "Phone", "Branch", "Role"], ["Ravi Kumar", "DIP-101", "9876543210", "DME", "Lecturer"]],
    )
    backend = FakeHRBackend()
    with HRApiClient(ApiSession("http://hr.example.test/api"), client=httpx.Client(transport=httpx.MockTransport(backend))) as client:
        session = BulkImportSession(client, CAMPUS, submitter=client, error_log=error_log)
        session.load_file(path)
        (rec,) = session.records

        errors = session.on_field_change(rec.row_id, "campus", "pharmacy")

    assert backend.branch_calls == ["diploma", "pharmacy"]
    assert [b.code for b in rec.branches] == ["PHC"]
    assert (rec.branch_code, rec.role) == ("", "")
    assert errors == {"campus": "Campus must be diploma", "branchCode": "Branch is required"}
