from __future__ import annotations

from collections.abc import Mapping
from typing import Any

from ..models.employee_record import MappedRecord
from ..models.fields import DEFAULT_STATUS, CanonicalField
from .normalize import cell_to_text, normalize_header
from .variants import HeaderVariantTable

"""Spreadsheet header → canonical field mapping.

Operator-authored headers ("Emp ID", "Mobile No.", "Dept") are matched to the
canonical employee fields in three tiers, first match wins per field:

1. exact: normalized header equals a normalized variant
2. containment: one contains the other
3. prefix overlap: both >= 3 chars and the first 3 chars of one occur in
   the other

Tiers 1-2 are evaluated independently per field. Tier 3 only considers
headers that no field claimed in tiers 1-2, so a broad prefix such as
"emp" cannot pull an already-mapped "Employee Name" column into "status".
Among tier-3 candidates the first (header, variant) pair in iteration order
wins; there is no further tie-breaking.
"""

__all__ = [
    "MAPPED",
    "NOT_FOUND",
    "NOT_FOUND_OPTIONAL",
    "resolve_headers",
    "map_headers",
    "build_mapping_report",
]

MAPPED = "✓ Mapped"
NOT_FOUND = "✗ Not found"
NOT_FOUND_OPTIONAL = "✗ Not found (optional)"

PREFIX_LEN = 3

RawRow = Mapping[str, Any]


def _match_exact(variants: tuple[str, ...], headers: list[tuple[str, str]]) -> str | None:
    for variant in variants:
        for header, norm in headers:
            if norm == variant:
                return header
    return None


def _match_containment(variants: tuple[str, ...], headers: list[tuple[str, str]]) -> str | None:
    for variant in variants:
        for header, norm in headers:
            if variant in norm or norm in variant:
                return header
    return None


def _match_prefix(
    variants: tuple[str, ...], headers: list[tuple[str, str]], claimed: set[str]
) -> str | None:
    for header, norm in headers:
        if header in claimed or len(norm) < PREFIX_LEN:
            continue
        for variant in variants:
            if len(variant) < PREFIX_LEN:
                continue
            if variant[:PREFIX_LEN] in norm or norm[:PREFIX_LEN] in variant:
                return header
    return None


def resolve_headers(
    row: RawRow, variants: HeaderVariantTable | None = None
) -> dict[CanonicalField, str | None]:
    """Return the source header chosen for each canonical field (None = not found)."""
    table = variants or HeaderVariantTable.default()
    # 英数字を含まないヘッダ ("#", "") は何にも一致させない
    headers = [(str(h), normalize_header(h)) for h in row]
    headers = [(h, norm) for h, norm in headers if norm]

    resolved: dict[CanonicalField, str | None] = {}
    for f in CanonicalField:
        found = _match_exact(table.for_field(f), headers)
        if found is None:
            found = _match_containment(table.for_field(f), headers)
        resolved[f] = found

    claimed = {h for h in resolved.values() if h is not None}
    for f in CanonicalField:
        if resolved[f] is None:
            resolved[f] = _match_prefix(table.for_field(f), headers, claimed)
    return resolved


def map_headers(row: RawRow, variants: HeaderVariantTable | None = None) -> MappedRecord:
    """Map one raw spreadsheet row onto a MappedRecord.

    Pure function of (row, variants). Missing fields get their default:
    ``status`` -> "active", ``leaveBalanceByExperience`` -> 12, others "".
    ``status`` is lower-cased. row_id / campus / reference data are left for
    the caller to fill in.
    """
    resolved = resolve_headers(row, variants)
    values: dict[CanonicalField, str] = {}
    for f, header in resolved.items():
        values[f] = cell_to_text(row[header]) if header is not None else ""

    leave_balance: Any = values[CanonicalField.LEAVE_BALANCE]
    if leave_balance == "":
        leave_balance = CanonicalField.LEAVE_BALANCE.default

    return MappedRecord(
        name=values[CanonicalField.NAME],
        email=values[CanonicalField.EMAIL],
        employee_id=values[CanonicalField.EMPLOYEE_ID],
        phone_number=values[CanonicalField.PHONE_NUMBER],
        branch_code=values[CanonicalField.BRANCH_CODE],
        role=values[CanonicalField.ROLE],
        custom_role=values[CanonicalField.CUSTOM_ROLE],
        status=(values[CanonicalField.STATUS] or DEFAULT_STATUS).lower(),
        designation=values[CanonicalField.DESIGNATION],
        leave_balance_by_experience=leave_balance,
    )


def _not_found_label(f: CanonicalField) -> str:
    if f.required:
        return NOT_FOUND
    if f.default != "":
        return f"{NOT_FOUND} (default: {f.default})"
    return NOT_FOUND_OPTIONAL


def build_mapping_report(
    sample_row: RawRow, variants: HeaderVariantTable | None = None
) -> dict[str, str]:
    """Display report of which canonical fields were found in the sample row.

    Keys are display labels ("Employee ID"), values one of "✓ Mapped",
    "✗ Not found", "✗ Not found (optional)" or "✗ Not found (default: ...)".
    """
    resolved = resolve_headers(sample_row, variants)
    return {
        f.label: MAPPED if resolved[f] is not None else _not_found_label(f)
        for f in CanonicalField
    }
