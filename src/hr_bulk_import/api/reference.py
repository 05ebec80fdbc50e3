from __future__ import annotations

from collections.abc import Mapping, Sequence
from typing import Any, Protocol

from ..models.bulk_result import BulkResult
from ..models.employee_record import Branch, MappedRecord, Role

"""Reference-data and submission seams used by the bulk import session.

HRApiClient satisfies both protocols. StaticReferenceData serves branches
and roles from configuration so a spreadsheet can be validated without a
backend (dry run).
"""

__all__ = [
    "ReferenceDataProvider",
    "BulkSubmitter",
    "StaticReferenceData",
]


class ReferenceDataProvider(Protocol):
    def fetch_branches(self, campus: str) -> list[Branch]: ...

    def fetch_roles(self, campus: str) -> list[Role]: ...


class BulkSubmitter(Protocol):
    def bulk_register(self, records: Sequence[MappedRecord]) -> list[BulkResult]: ...


class StaticReferenceData:
    """Campus-keyed branches and roles held in memory.

    Campus keys are matched case-insensitively. Inactive branches are dropped
    the same way the backend client drops them.
    """

    def __init__(
        self,
        branches: Mapping[str, Sequence[Branch]] | None = None,
        roles: Mapping[str, Sequence[Role]] | None = None,
    ) -> None:
        self._branches = {k.lower(): list(v) for k, v in (branches or {}).items()}
        self._roles = {k.lower(): list(v) for k, v in (roles or {}).items()}

    def fetch_branches(self, campus: str) -> list[Branch]:
        return [b for b in self._branches.get(campus.lower(), []) if b.is_active]

    def fetch_roles(self, campus: str) -> list[Role]:
        return list(self._roles.get(campus.lower(), []))

    @classmethod
    def from_raw(
        cls,
        branches: Mapping[str, Sequence[Mapping[str, Any]]],
        roles: Mapping[str, Sequence[Mapping[str, Any]]],
    ) -> StaticReferenceData:
        """Build from config-shaped dicts (backend camelCase keys)."""
        return cls(
            branches={c: [Branch.from_api({"isActive": True, **dict(b)}) for b in items]
                      for c, items in branches.items()},
            roles={c: [Role.from_api(dict(r)) for r in items] for c, items in roles.items()},
        )
