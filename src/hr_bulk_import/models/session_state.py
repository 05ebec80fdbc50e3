from __future__ import annotations

from enum import Enum

"""SessionState enum for the bulk import workflow.

State transitions:
    idle → parsing → mapped → editing ⇄ submitting → done → editing ...
A failed parse or reference-data fetch returns to the state held before
parsing; a failed submission returns to editing.
"""

__all__ = [
    "SessionState",
]


class SessionState(Enum):
    """Lifecycle of a BulkImportSession.

    - IDLE: no file loaded
    - PARSING: spreadsheet is being decoded
    - MAPPED: rows mapped and validated, no edits yet
    - EDITING: operator has edited or deleted rows
    - SUBMITTING: batch request in flight
    - DONE: results received
    """
    IDLE = "idle"
    PARSING = "parsing"
    MAPPED = "mapped"
    EDITING = "editing"
    SUBMITTING = "submitting"
    DONE = "done"
