from __future__ import annotations

from enum import Enum

"""Leave / CCL request status with explicit legal transitions.

The dashboards compare these statuses as free-form strings; this enum gives
them one spelling and rejects moves the approval flow does not allow.

Flow:
    Pending → Forwarded by HOD → (Forwarded to HR | Forwarded to Principal) → Approved | Rejected
    Pending → Forwarded to Principal (CCL work requests)
    Pending → Forwarded to SuperAdmin (HR's own leave) → Approved | Rejected
Approved and Rejected are terminal.
"""

__all__ = [
    "LeaveStatus",
    "IllegalStatusTransition",
    "transition",
]


class IllegalStatusTransition(ValueError):
    """Raised when a status change is not allowed by the approval flow."""

    def __init__(self, current: LeaveStatus, target: LeaveStatus) -> None:
        self.current = current
        self.target = target
        super().__init__(f"illegal leave status transition: {current.value!r} -> {target.value!r}")


class LeaveStatus(Enum):
    PENDING = "Pending"
    FORWARDED_BY_HOD = "Forwarded by HOD"
    FORWARDED_TO_HR = "Forwarded to HR"
    FORWARDED_TO_PRINCIPAL = "Forwarded to Principal"
    FORWARDED_TO_SUPERADMIN = "Forwarded to SuperAdmin"
    APPROVED = "Approved"
    REJECTED = "Rejected"

    @property
    def is_terminal(self) -> bool:
        return not _TRANSITIONS[self]

    def can_transition_to(self, target: LeaveStatus) -> bool:
        return target in _TRANSITIONS[self]

    @classmethod
    def parse(cls, text: str) -> LeaveStatus:
        """Parse a backend status string (case and surrounding space insensitive)."""
        wanted = " ".join(str(text).split()).lower()
        for status in cls:
            if status.value.lower() == wanted:
                return status
        raise ValueError(f"unknown leave status: {text!r}")


_TRANSITIONS: dict[LeaveStatus, frozenset[LeaveStatus]] = {
    LeaveStatus.PENDING: frozenset({
        LeaveStatus.FORWARDED_BY_HOD,
        LeaveStatus.FORWARDED_TO_PRINCIPAL,
        LeaveStatus.FORWARDED_TO_SUPERADMIN,
        LeaveStatus.REJECTED,
    }),
    LeaveStatus.FORWARDED_BY_HOD: frozenset({
        LeaveStatus.FORWARDED_TO_HR,
        LeaveStatus.FORWARDED_TO_PRINCIPAL,
        LeaveStatus.APPROVED,
        LeaveStatus.REJECTED,
    }),
    LeaveStatus.FORWARDED_TO_HR: frozenset({LeaveStatus.APPROVED, LeaveStatus.REJECTED}),
    LeaveStatus.FORWARDED_TO_PRINCIPAL: frozenset({LeaveStatus.APPROVED, LeaveStatus.REJECTED}),
    LeaveStatus.FORWARDED_TO_SUPERADMIN: frozenset({LeaveStatus.APPROVED, LeaveStatus.REJECTED}),
    LeaveStatus.APPROVED: frozenset(),
    LeaveStatus.REJECTED: frozenset(),
}


def transition(current: LeaveStatus, target: LeaveStatus) -> LeaveStatus:
    """Return ``target`` if the move is legal, else raise IllegalStatusTransition."""
    if not current.can_transition_to(target):
        raise IllegalStatusTransition(current, target)
    return target
