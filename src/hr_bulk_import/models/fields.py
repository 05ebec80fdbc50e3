from __future__ import annotations

from enum import Enum
from typing import Any

"""Canonical employee fields for bulk registration.

Every spreadsheet column must eventually map to one of these fields. The enum
value is the wire name used by the REST backend and as the key of validation
error maps; ``attr`` is the matching attribute on ``MappedRecord``.
"""

__all__ = [
    "CanonicalField",
    "CAMPUS_FIELD",
    "EDITABLE_FIELDS",
    "DEFAULT_STATUS",
    "DEFAULT_LEAVE_BALANCE",
]

DEFAULT_STATUS = "active"
DEFAULT_LEAVE_BALANCE = 12

# campus is editable per row but never read from the spreadsheet
CAMPUS_FIELD = "campus"


class CanonicalField(Enum):
    """Target fields of the header mapping, in mapping order."""
    NAME = "name"
    EMAIL = "email"
    EMPLOYEE_ID = "employeeId"
    PHONE_NUMBER = "phoneNumber"
    BRANCH_CODE = "branchCode"
    ROLE = "role"
    CUSTOM_ROLE = "customRole"
    STATUS = "status"
    DESIGNATION = "designation"
    LEAVE_BALANCE = "leaveBalanceByExperience"

    @property
    def attr(self) -> str:
        return _ATTRS[self]

    @property
    def default(self) -> Any:
        return _DEFAULTS.get(self, "")

    @property
    def label(self) -> str:
        return _LABELS[self]

    @property
    def required(self) -> bool:
        return self in _REQUIRED

    @classmethod
    def from_wire(cls, name: str) -> CanonicalField:
        try:
            return cls(name)
        except ValueError:
            raise ValueError(f"unknown employee field: {name!r}") from None


_ATTRS = {
    CanonicalField.NAME: "name",
    CanonicalField.EMAIL: "email",
    CanonicalField.EMPLOYEE_ID: "employee_id",
    CanonicalField.PHONE_NUMBER: "phone_number",
    CanonicalField.BRANCH_CODE: "branch_code",
    CanonicalField.ROLE: "role",
    CanonicalField.CUSTOM_ROLE: "custom_role",
    CanonicalField.STATUS: "status",
    CanonicalField.DESIGNATION: "designation",
    CanonicalField.LEAVE_BALANCE: "leave_balance_by_experience",
}

_DEFAULTS: dict[CanonicalField, Any] = {
    CanonicalField.STATUS: DEFAULT_STATUS,
    CanonicalField.LEAVE_BALANCE: DEFAULT_LEAVE_BALANCE,
}

_LABELS = {
    CanonicalField.NAME: "Name",
    CanonicalField.EMAIL: "Email",
    CanonicalField.EMPLOYEE_ID: "Employee ID",
    CanonicalField.PHONE_NUMBER: "Phone Number",
    CanonicalField.BRANCH_CODE: "Branch",
    CanonicalField.ROLE: "Role",
    CanonicalField.CUSTOM_ROLE: "Custom Role",
    CanonicalField.STATUS: "Status",
    CanonicalField.DESIGNATION: "Designation",
    CanonicalField.LEAVE_BALANCE: "Leave Balance",
}

_REQUIRED = frozenset({
    CanonicalField.NAME,
    CanonicalField.EMPLOYEE_ID,
    CanonicalField.PHONE_NUMBER,
    CanonicalField.BRANCH_CODE,
})

EDITABLE_FIELDS: frozenset[str] = frozenset({f.value for f in CanonicalField} | {CAMPUS_FIELD})
