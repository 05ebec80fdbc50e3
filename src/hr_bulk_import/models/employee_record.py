from __future__ import annotations

import re
from collections.abc import Iterable
from dataclasses import dataclass, field
from typing import Any

from .fields import (
    CAMPUS_FIELD,
    DEFAULT_LEAVE_BALANCE,
    DEFAULT_STATUS,
    CanonicalField,
)

"""Employee record models for bulk registration.

``MappedRecord`` is the editable, typed form of one spreadsheet row after
header mapping. ``Branch`` and ``Role`` are campus-scoped reference data
fetched from the backend and attached to every record for validation.
"""

__all__ = [
    "Branch",
    "Role",
    "MappedRecord",
    "OTHER_ROLE",
    "normalize_role",
    "match_role",
]

OTHER_ROLE = "other"

_ROLE_SEP_RE = re.compile(r"[_\s]+")


def normalize_role(text: str) -> str:
    """Lowercase and drop underscores / whitespace ("Lab_Incharge" -> "labincharge")."""
    return _ROLE_SEP_RE.sub("", str(text).strip().lower())


@dataclass(frozen=True)
class Branch:
    """Active branch (department) of a campus."""
    code: str
    name: str
    is_active: bool = True

    @classmethod
    def from_api(cls, data: dict[str, Any]) -> Branch:
        return cls(
            code=str(data.get("code") or ""),
            name=str(data.get("name") or ""),
            is_active=bool(data.get("isActive", False)),
        )


@dataclass(frozen=True)
class Role:
    """Selectable employee role of a campus (value is the backend key)."""
    value: str
    label: str

    @classmethod
    def from_api(cls, data: dict[str, Any]) -> Role:
        value = str(data.get("value") or "")
        return cls(value=value, label=str(data.get("label") or value))

    @property
    def is_other(self) -> bool:
        return normalize_role(self.value) == OTHER_ROLE


def match_role(role: str, roles: Iterable[Role]) -> Role | None:
    """Campus role whose value or label matches ``role`` after normalize_role()."""
    wanted = normalize_role(role)
    for r in roles:
        if wanted in (normalize_role(r.value), normalize_role(r.label)):
            return r
    return None


@dataclass
class MappedRecord:
    """One spreadsheet row mapped onto the canonical employee fields.

    row_id は読み込み時に採番される安定 ID (削除後も再利用しない)。
    source_row is the 1-based spreadsheet row the record was read from
    (the header occupies row 1).
    """
    name: str = ""
    email: str = ""
    employee_id: str = ""
    phone_number: str = ""
    branch_code: str = ""
    role: str = ""
    custom_role: str = ""
    status: str = DEFAULT_STATUS
    designation: str = ""
    leave_balance_by_experience: Any = DEFAULT_LEAVE_BALANCE
    campus: str = ""
    row_id: int = -1
    source_row: int = -1
    branches: list[Branch] = field(default_factory=list)
    roles: list[Role] = field(default_factory=list)

    def get(self, wire_name: str) -> Any:
        return getattr(self, _attr_for(wire_name))

    def set(self, wire_name: str, value: Any) -> None:
        setattr(self, _attr_for(wire_name), value)

    def matched_role(self) -> Role | None:
        role = "" if self.role is None else str(self.role)
        return match_role(role, self.roles) if role.strip() else None

    def is_other_role(self) -> bool:
        """True when the role resolves to the campus 'other' role.

        Unmatched text falls back to comparing the typed role itself.
        """
        matched = self.matched_role()
        if matched is not None:
            return matched.is_other
        return normalize_role("" if self.role is None else str(self.role)) == OTHER_ROLE

    def fields(self) -> dict[str, Any]:
        """Editable values keyed by wire name (canonical fields + campus)."""
        values = {f.value: getattr(self, f.attr) for f in CanonicalField}
        values[CAMPUS_FIELD] = self.campus
        return values

    def to_payload(self) -> dict[str, Any]:
        """JSON body entry for the bulk registration endpoint."""
        return {
            "name": self.name,
            "email": self.email,
            "employeeId": self.employee_id,
            "phoneNumber": self.phone_number,
            "role": self.role,
            "customRole": self.custom_role if self.is_other_role() else "",
            "department": self.branch_code,
            "branchCode": self.branch_code,
            "campus": self.campus,
            "status": self.status,
            "designation": self.designation or "",
            "leaveBalanceByExperience": _leave_balance_number(self.leave_balance_by_experience),
        }


def _attr_for(wire_name: str) -> str:
    if wire_name == CAMPUS_FIELD:
        return CAMPUS_FIELD
    return CanonicalField.from_wire(wire_name).attr


def _leave_balance_number(value: Any) -> int | float:
    # 空欄は既定値 12
    if value is None or (isinstance(value, str) and value.strip() == ""):
        return DEFAULT_LEAVE_BALANCE
    number = float(value)
    return int(number) if number.is_integer() else number
