from __future__ import annotations

import math
import re
from collections.abc import Iterable, Mapping
from typing import Any

from ..models.employee_record import MappedRecord, normalize_role
from ..models.fields import CAMPUS_FIELD, CanonicalField

"""Per-row validation of mapped employee records.

``validate_row`` returns a field-keyed error map (wire names); an empty map
means the row may be submitted. Every field is checked independently so one
row can carry several errors at once. Validation never raises and never
mutates the record: bad data is reported, not thrown.
"""

__all__ = [
    "ValidationErrorMap",
    "validate_row",
    "is_row_valid",
    "is_bulk_valid",
    "normalize_role",
]

ValidationErrorMap = dict[str, str]

NAME_MIN, NAME_MAX = 2, 100
EMAIL_LOCAL_MIN, EMAIL_MAX = 5, 100
EMPLOYEE_ID_MIN, EMPLOYEE_ID_MAX = 3, 20
LEAVE_BALANCE_MIN, LEAVE_BALANCE_MAX = 0, 30
DESIGNATION_MAX = 50

_NAME_RE = re.compile(r"[A-Za-z\s.]*")
_EMAIL_RE = re.compile(r"[\w.+-]+@[\w.-]+\.[A-Za-z]{2,}", re.ASCII)
_EMPLOYEE_ID_RE = re.compile(r"[A-Za-z0-9-]+")
_PHONE_RE = re.compile(r"[0-9]{10}")


def _text(value: Any) -> str:
    return "" if value is None else str(value)


def _check_name(name: str) -> str | None:
    if not name.strip():
        return "Name is required"
    if len(name) < NAME_MIN:
        return "Name is too short"
    if len(name) > NAME_MAX:
        return "Name is too long"
    if not _NAME_RE.fullmatch(name):
        return "Name can only contain letters, spaces and dots"
    return None


def _check_email(email: str) -> str | None:
    if not email.strip():
        return None  # optional
    local_part = email.split("@")[0]
    if len(local_part) < EMAIL_LOCAL_MIN:
        return f"Email must have at least {EMAIL_LOCAL_MIN} characters before @"
    if not _EMAIL_RE.fullmatch(email):
        return "Invalid email format"
    if len(email) > EMAIL_MAX:
        return "Email is too long"
    if ".." in email or "--" in email:
        return "Invalid email format"
    return None


def _check_employee_id(employee_id: str) -> str | None:
    if not employee_id:
        return "Employee ID is required"
    if not _EMPLOYEE_ID_RE.fullmatch(employee_id):
        return "Employee ID can only contain letters, numbers and hyphens"
    if len(employee_id) < EMPLOYEE_ID_MIN:
        return "Employee ID is too short"
    if len(employee_id) > EMPLOYEE_ID_MAX:
        return "Employee ID is too long"
    return None


def _check_phone(phone: str) -> str | None:
    if not phone:
        return "Phone number is required"
    if not _PHONE_RE.fullmatch(phone):
        return "Phone number must be 10 digits"
    return None


def _check_leave_balance(value: Any) -> str | None:
    if value is None:
        return None
    text = str(value).strip()
    if text == "":
        return None  # optional, default 12 applied on submit
    try:
        number = float(text)
    except ValueError:
        return "Leave balance must be a number"
    if math.isnan(number) or math.isinf(number):
        return "Leave balance must be a number"
    if number < LEAVE_BALANCE_MIN:
        return "Leave balance cannot be negative"
    if number > LEAVE_BALANCE_MAX:
        return f"Leave balance cannot exceed {LEAVE_BALANCE_MAX}"
    return None


def _check_campus(campus: str, operator_campus: str) -> str | None:
    if not campus:
        return "Campus is required"
    if campus != operator_campus:
        return f"Campus must be {operator_campus}"
    return None


def _check_branch(branch_code: str, record: MappedRecord) -> str | None:
    if not branch_code:
        return "Branch is required"
    if not any(b.code == branch_code or b.name == branch_code for b in record.branches):
        return "Invalid branch for selected campus"
    return None


def validate_row(record: MappedRecord, operator_campus: str) -> ValidationErrorMap:
    """Validate one record against its scoped branches/roles and the operator campus.

    Returns an empty dict iff the row is valid. Keys are the wire field names
    (``name``, ``employeeId``, ``branchCode`` ... and ``campus``).
    """
    errors: ValidationErrorMap = {}

    def put(f: CanonicalField | str, message: str | None) -> None:
        if message is not None:
            errors[f.value if isinstance(f, CanonicalField) else f] = message

    put(CanonicalField.NAME, _check_name(_text(record.name)))
    put(CanonicalField.EMAIL, _check_email(_text(record.email)))
    put(CanonicalField.EMPLOYEE_ID, _check_employee_id(_text(record.employee_id)))
    put(CanonicalField.PHONE_NUMBER, _check_phone(_text(record.phone_number)))
    put(CanonicalField.LEAVE_BALANCE, _check_leave_balance(record.leave_balance_by_experience))
    put(CAMPUS_FIELD, _check_campus(_text(record.campus), operator_campus))
    put(CanonicalField.BRANCH_CODE, _check_branch(_text(record.branch_code), record))

    role = _text(record.role)
    if role.strip():
        matched = record.matched_role()
        if matched is None:
            allowed = ", ".join(r.label for r in record.roles)
            put(CanonicalField.ROLE, f"Invalid role for selected campus: '{role}'. Allowed: {allowed}")
        elif matched.is_other and not _text(record.custom_role).strip():
            put(CanonicalField.CUSTOM_ROLE, "Custom role is required")

    designation = _text(record.designation)
    if len(designation) > DESIGNATION_MAX:
        put(CanonicalField.DESIGNATION, "Designation is too long")

    return errors


def is_row_valid(errors: Mapping[str, str] | None) -> bool:
    return not errors


def is_bulk_valid(error_maps: Iterable[Mapping[str, str]]) -> bool:
    """True iff there is at least one row and every row's error map is empty."""
    maps = list(error_maps)
    return len(maps) > 0 and all(is_row_valid(m) for m in maps)
