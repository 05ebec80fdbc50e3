from __future__ import annotations

import logging
import time
from pathlib import Path
from typing import Any

from ..api.client import ApiError
from ..api.reference import BulkSubmitter, ReferenceDataProvider
from ..excel.reader import SpreadsheetParseError, read_spreadsheet
from ..logging.error_log import ErrorLogBuffer
from ..mapping.header_mapper import build_mapping_report, map_headers
from ..mapping.variants import HeaderVariantTable
from ..models.bulk_result import BulkResult, RowCounts, SubmissionOutcome
from ..models.employee_record import Branch, MappedRecord, Role
from ..models.error_record import ImportErrorRecord
from ..models.fields import CAMPUS_FIELD, EDITABLE_FIELDS, CanonicalField
from ..models.session_state import SessionState
from ..validation.row_validator import (
    ValidationErrorMap,
    is_bulk_valid,
    is_row_valid,
    validate_row,
)
from .progress import RowProgress

logger = logging.getLogger(__name__)

"""Bulk import session orchestration.

Coordinates one operator session end to end: parse the spreadsheet, fetch
campus reference data, map and validate every row, apply edits/deletes with
per-row re-validation, and submit only the valid subset in one batch call.

Rows are keyed by a stable ``row_id`` assigned at load time; ids are never
reused, so deleting a row never shifts the identity of another.

I/O failures (parse, reference fetch, submit) are converted to the
exceptions below and leave the in-memory record set untouched.
"""

__all__ = [
    "BulkImportSession",
    "ImportAbortedError",
    "ReferenceDataError",
    "NothingToSubmitError",
    "SubmissionInProgressError",
    "SubmissionFailedError",
]


class ImportAbortedError(Exception):
    """Raised when loading a file fails before any row is mapped."""


class ReferenceDataError(Exception):
    """Raised when branches/roles for a campus cannot be fetched during an edit."""


class NothingToSubmitError(Exception):
    """Raised by submit() when no row is valid; the API is not called."""


class SubmissionInProgressError(Exception):
    """Raised when the session is re-entered while a batch request is in flight."""


class SubmissionFailedError(Exception):
    """Raised when the batch request fails as a whole (network / API error)."""


class BulkImportSession:
    """Editable bulk registration session for one operator campus.

    Args:
        reference_data: provider of branches/roles per campus
        operator_campus: campus name of the HR operator; every row must match it
        submitter: bulk registration endpoint (None = validation only, e.g. dry run)
        variants: header variant table (None = packaged table)
        error_log: buffer receiving parse/validation/submission error records
        show_progress: show a tqdm row bar on a TTY while loading
    """

    def __init__(
        self,
        reference_data: ReferenceDataProvider,
        operator_campus: str,
        submitter: BulkSubmitter | None = None,
        *,
        variants: HeaderVariantTable | None = None,
        error_log: ErrorLogBuffer | None = None,
        show_progress: bool = False,
    ) -> None:
        self._reference = reference_data
        self._submitter = submitter
        self.operator_campus = operator_campus
        self._variants = variants
        self.error_log = error_log if error_log is not None else ErrorLogBuffer()
        self._show_progress = show_progress

        self.state = SessionState.IDLE
        self.file_name: str | None = None
        self.detected_headers: list[str] = []
        self.mapping_report: dict[str, str] = {}
        self._records: dict[int, MappedRecord] = {}
        self._errors: dict[int, ValidationErrorMap] = {}
        self._results: list[BulkResult] = []
        self._next_row_id = 1
        self._in_flight = False

    # ------------------------------------------------------------------ views

    @property
    def records(self) -> list[MappedRecord]:
        return list(self._records.values())

    @property
    def errors(self) -> dict[int, ValidationErrorMap]:
        return {rid: dict(e) for rid, e in self._errors.items()}

    @property
    def results(self) -> list[BulkResult]:
        return list(self._results)

    @property
    def in_flight(self) -> bool:
        return self._in_flight

    @property
    def is_bulk_valid(self) -> bool:
        return is_bulk_valid(self._errors.values())

    @property
    def is_submittable(self) -> bool:
        return len(self._records) > 0 and not self._in_flight

    def record(self, row_id: int) -> MappedRecord:
        try:
            return self._records[row_id]
        except KeyError:
            raise KeyError(f"unknown row id: {row_id}") from None

    def errors_for(self, row_id: int) -> ValidationErrorMap:
        self.record(row_id)
        return dict(self._errors[row_id])

    def counts(self) -> RowCounts:
        total = len(self._records)
        valid = sum(1 for e in self._errors.values() if is_row_valid(e))
        return RowCounts(total=total, valid=valid, invalid=total - valid)

    def valid_records(self) -> list[MappedRecord]:
        return [r for rid, r in self._records.items() if is_row_valid(self._errors[rid])]

    def invalid_records(self) -> list[MappedRecord]:
        return [r for rid, r in self._records.items() if not is_row_valid(self._errors[rid])]

    # ------------------------------------------------------------------ loading

    def _abort(
        self, previous: SessionState, previous_file: str | None, file_name: str, error_type: str, message: str
    ) -> ImportAbortedError:
        self.state = previous
        self.file_name = previous_file
        self.error_log.append(ImportErrorRecord.create(file_name, -1, error_type, message))
        logger.error(f"import aborted: {message}")
        return ImportAbortedError(message)

    def _fetch_reference(self, campus: str) -> tuple[list[Branch], list[Role]]:
        branches = self._reference.fetch_branches(campus)
        roles = self._reference.fetch_roles(campus)
        return branches, roles

    def load_file(self, path: Path) -> RowCounts:
        """Parse, map and validate a spreadsheet, replacing the current record set.

        Raises:
            ImportAbortedError: parse failure, no operator campus, reference
                data unavailable or empty. The previous record set is kept.
            SubmissionInProgressError: a submission is in flight
        """
        self._guard_in_flight()
        previous, previous_file = self.state, self.file_name
        self.state = SessionState.PARSING

        def abort(error_type: str, message: str) -> ImportAbortedError:
            return self._abort(previous, previous_file, path.name, error_type, message)

        try:
            sheet = read_spreadsheet(path)
        except SpreadsheetParseError as e:
            raise abort("PARSE_ERROR", str(e)) from e

        campus = self.operator_campus
        if not campus:
            raise abort("CAMPUS_MISSING", "HR campus not found")

        try:
            branches, roles = self._fetch_reference(campus)
        except ApiError as e:
            raise abort("REFERENCE_DATA_ERROR", f"failed to fetch reference data: {e}") from e
        if not branches:
            raise abort("REFERENCE_DATA_ERROR", "No active branches found for your campus")
        if not roles:
            raise abort("REFERENCE_DATA_ERROR", "No roles found for your campus")

        records: dict[int, MappedRecord] = {}
        errors: dict[int, ValidationErrorMap] = {}
        next_id = self._next_row_id
        invalid = 0
        with RowProgress(len(sheet.rows), enabled=self._show_progress) as progress:
            for idx, raw in enumerate(sheet.rows):
                record = map_headers(raw, self._variants)
                record.row_id = next_id
                record.source_row = idx + 2  # header is spreadsheet row 1
                record.campus = campus
                record.branches = list(branches)
                record.roles = list(roles)
                records[next_id] = record
                errors[next_id] = validate_row(record, campus)
                if errors[next_id]:
                    invalid += 1
                    progress.set_postfix(invalid=invalid)
                next_id += 1
                progress.advance()

        # 全行成功後にのみ状態を差し替える
        self.file_name = path.name
        self._records = records
        self._errors = errors
        self._results = []
        self._next_row_id = next_id
        self.detected_headers = list(sheet.columns)
        self.mapping_report = build_mapping_report(sheet.rows[0], self._variants) if sheet.rows else {}
        self.state = SessionState.MAPPED

        counts = self.counts()
        logger.info(
            f"loaded file={path.name} columns={len(sheet.columns)} rows={counts.total} "
            f"valid={counts.valid} invalid={counts.invalid}"
        )
        return counts

    # ------------------------------------------------------------------ editing

    def on_field_change(self, row_id: int, field: str, value: Any) -> ValidationErrorMap:
        """Apply one edit and re-validate that row only.

        - name: title-cased word by word
        - email / status: lower-cased
        - role: anything not resolving to the campus "other" role clears customRole
        - campus: branches/roles re-fetched for the new campus and
          branchCode / role / customRole cleared

        Returns the row's new error map.

        Raises:
            KeyError: unknown row id
            ValueError: unknown field
            ReferenceDataError: campus change could not fetch reference data
                (the row is left unchanged)
        """
        self._guard_in_flight()
        record = self.record(row_id)
        if field not in EDITABLE_FIELDS:
            raise ValueError(f"unknown employee field: {field!r}")
        if field != CanonicalField.LEAVE_BALANCE.value:
            value = "" if value is None else str(value)

        if field == CAMPUS_FIELD:
            try:
                branches, roles = self._fetch_reference(value)
            except ApiError as e:
                self.error_log.append(
                    ImportErrorRecord.create(
                        self.file_name or "<unknown>", record.source_row,
                        "REFERENCE_DATA_ERROR", str(e), field=CAMPUS_FIELD,
                    )
                )
                raise ReferenceDataError(f"failed to fetch reference data for campus '{value}': {e}") from e
            record.campus = value
            record.branches = branches
            record.roles = roles
            record.branch_code = ""
            record.role = ""
            record.custom_role = ""
        elif field == CanonicalField.ROLE.value:
            record.role = value
            if not record.is_other_role():
                record.custom_role = ""
        elif field == CanonicalField.NAME.value:
            record.name = " ".join(w[:1].upper() + w[1:].lower() for w in value.split(" "))
        elif field in (CanonicalField.EMAIL.value, CanonicalField.STATUS.value):
            record.set(field, value.lower())
        else:
            record.set(field, value)

        self._errors[row_id] = validate_row(record, self.operator_campus)
        self.state = SessionState.EDITING
        logger.debug(f"edit row_id={row_id} field={field} errors={len(self._errors[row_id])}")
        return dict(self._errors[row_id])

    def delete_row(self, row_id: int) -> None:
        """Remove a record and its error map; previous results are discarded."""
        self._guard_in_flight()
        self.record(row_id)
        del self._records[row_id]
        del self._errors[row_id]
        self._results = []
        self.state = SessionState.EDITING
        logger.debug(f"deleted row_id={row_id} remaining={len(self._records)}")

    # ------------------------------------------------------------------ submission

    def _guard_in_flight(self) -> None:
        if self._in_flight:
            raise SubmissionInProgressError("a bulk submission is already in progress")

    def record_validation_errors(self) -> int:
        """Append one error record per invalid field to the error log; returns the count."""
        written = 0
        for rid, record in self._records.items():
            for field, message in self._errors[rid].items():
                self.error_log.append(
                    ImportErrorRecord.create(
                        self.file_name or "<unknown>", record.source_row,
                        "VALIDATION_ERROR", message, field=field,
                    )
                )
                written += 1
        return written

    def submit(self) -> SubmissionOutcome:
        """Send exactly the valid rows in one batch call.

        Raises:
            SubmissionInProgressError: another submission is in flight
            NothingToSubmitError: zero valid rows (API not called)
            SubmissionFailedError: no submitter configured, or the batch call
                failed; records are untouched and submit() may be retried
        """
        self._guard_in_flight()
        counts = self.counts()
        valid = self.valid_records()
        if not valid:
            message = f"no valid rows to submit ({counts.invalid} invalid)"
            self.error_log.append(
                ImportErrorRecord.create(self.file_name or "<unknown>", -1, "NOTHING_TO_SUBMIT", message)
            )
            raise NothingToSubmitError(message)
        if self._submitter is None:
            raise SubmissionFailedError("session has no submitter configured")

        if counts.invalid:
            logger.warning(f"{counts.invalid} invalid rows were excluded from submission")
            self.record_validation_errors()

        self._in_flight = True
        self.state = SessionState.SUBMITTING
        started = time.perf_counter()
        try:
            results = self._submitter.bulk_register(valid)
        except ApiError as e:
            self.state = SessionState.EDITING
            self.error_log.append(
                ImportErrorRecord.create(self.file_name or "<unknown>", -1, "SUBMISSION_ERROR", str(e))
            )
            logger.error(f"bulk submission failed: {e}")
            raise SubmissionFailedError(str(e)) from e
        finally:
            self._in_flight = False
        elapsed = time.perf_counter() - started

        self._results = list(results)
        for result in self._results:
            if not result.success:
                self.error_log.append(
                    ImportErrorRecord.create(
                        self.file_name or "<unknown>", result.row, "REGISTRATION_FAILED",
                        result.error or "registration failed",
                    )
                )
        self.state = SessionState.DONE

        outcome = SubmissionOutcome(
            counts=counts,
            submitted=len(valid),
            results=tuple(self._results),
            elapsed_seconds=elapsed,
        )
        logger.info(
            f"submitted={outcome.submitted} succeeded={outcome.succeeded} "
            f"failed={outcome.failed} excluded={outcome.excluded}"
        )
        return outcome
