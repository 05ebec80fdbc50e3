"""Domain models for the HR bulk employee import tool.

This package contains the record, reference-data, result and status types
shared by the mapping, validation and orchestration layers.
"""

from .bulk_result import BulkResult, RowCounts, SubmissionOutcome
from .employee_record import Branch, MappedRecord, Role, match_role
from .error_record import ImportErrorRecord
from .fields import CAMPUS_FIELD, EDITABLE_FIELDS, CanonicalField
from .leave_status import IllegalStatusTransition, LeaveStatus, transition
from .session_state import SessionState

__all__ = [
    # Field catalogue
    "CanonicalField",
    "CAMPUS_FIELD",
    "EDITABLE_FIELDS",
    # Records and reference data
    "Branch",
    "MappedRecord",
    "Role",
    "match_role",
    # Results
    "BulkResult",
    "RowCounts",
    "SubmissionOutcome",
    "ImportErrorRecord",
    # Workflow / status
    "SessionState",
    "LeaveStatus",
    "IllegalStatusTransition",
    "transition",
]
