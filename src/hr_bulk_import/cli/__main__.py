from __future__ import annotations

import argparse
import logging
import sys
from pathlib import Path

from dotenv import load_dotenv

from hr_bulk_import.api.client import HRApiClient
from hr_bulk_import.api.reference import StaticReferenceData
from hr_bulk_import.api.session import ApiSession
from hr_bulk_import.config.loader import (
    DEFAULT_CONFIG_PATH,
    ConfigError,
    ImportConfig,
    default_config,
    load_config,
    load_header_variants,
)
from hr_bulk_import.excel.reader import SpreadsheetParseError, read_spreadsheet
from hr_bulk_import.logging.error_log import ErrorLogBuffer
from hr_bulk_import.logging.init import enable_debug, log_summary, setup_logging
from hr_bulk_import.mapping.header_mapper import build_mapping_report, map_headers
from hr_bulk_import.mapping.variants import HeaderVariantTable
from hr_bulk_import.models.bulk_result import SubmissionOutcome
from hr_bulk_import.services.orchestrator import (
    BulkImportSession,
    ImportAbortedError,
    NothingToSubmitError,
    SubmissionFailedError,
)
from hr_bulk_import.services.summary import render_summary_line

"""CLI entrypoint.

Flow:
- Load .env (override) then config/import.yml (or defaults + environment)
- Read the spreadsheet, fetch campus branches/roles, map + validate rows
- Report the header mapping and every invalid row
- Submit the valid rows (unless --dry-run) and print per-row results
- Print the SUMMARY line; exit code per the table below
"""

EXIT_SUCCESS_ALL = 0
EXIT_PARTIAL_FAILURE = 2
EXIT_FATAL = 1

INSPECT_SAMPLE_ROWS = 3


def _load_env_file(path: Path, override: bool = True) -> None:
    """Load .env using python-dotenv; failures only warn."""
    try:
        if path.exists():
            load_dotenv(dotenv_path=path, override=override)
    except OSError as e:  # pragma: no cover
        print(f"WARNING: failed to load .env via python-dotenv: {e}")


def _parse_args(argv: list[str]) -> argparse.Namespace:
    p = argparse.ArgumentParser(
        prog="hr-bulk-import", description="Bulk employee registration from a spreadsheet"
    )
    p.add_argument("file", help="Spreadsheet to import (.xlsx, .xls or .csv)")
    p.add_argument("--config", default=None, help=f"Config YAML (default: {DEFAULT_CONFIG_PATH})")
    p.add_argument("--campus", default=None, help="Operator campus (overrides config / HR_CAMPUS)")
    p.add_argument("--dry-run", action="store_true", help="Validate against configured reference data; submit nothing")
    p.add_argument("--inspect", action="store_true", help="Print headers, mapping report and sample rows then exit")
    p.add_argument("--debug", action="store_true", help="Enable debug logging")
    return p.parse_args(argv)


def _resolve_config(arg: str | None) -> ImportConfig:
    if arg is not None:
        return load_config(Path(arg))
    if DEFAULT_CONFIG_PATH.exists():
        return load_config(DEFAULT_CONFIG_PATH)
    return default_config()


def _inspect(path: Path, variants: HeaderVariantTable) -> int:
    try:
        sheet = read_spreadsheet(path)
    except SpreadsheetParseError as e:
        print(f"inspect: {e}")
        return EXIT_FATAL
    print(f"FILE: {path.name} SHEET: {sheet.sheet_name} rows={len(sheet.rows)}")
    print(f"  headers={sheet.columns}")
    if not sheet.rows:
        print("  (no data rows)")
        return EXIT_SUCCESS_ALL
    for label, status in build_mapping_report(sheet.rows[0], variants).items():
        print(f"  {label}: {status}")
    for raw in sheet.rows[:INSPECT_SAMPLE_ROWS]:
        print("    sample_row=", map_headers(raw, variants).fields())
    return EXIT_SUCCESS_ALL


def _report_session(logger: logging.Logger, session: BulkImportSession) -> None:
    for label, status in session.mapping_report.items():
        logger.info(f"mapping {label}: {status}")
    for record in session.invalid_records():
        for field, message in session.errors_for(record.row_id).items():
            logger.warning(f"row={record.source_row} {field}: {message}")
    counts = session.counts()
    logger.info(f"rows total={counts.total} valid={counts.valid} invalid={counts.invalid}")


def _report_results(logger: logging.Logger, outcome: SubmissionOutcome) -> None:
    for result in outcome.results:
        if result.success:
            logger.info(f"registered row={result.row} employeeId={result.employee_id}")
        else:
            logger.error(f"failed row={result.row} employeeId={result.employee_id}: {result.error}")


def _finish(outcome: SubmissionOutcome) -> int:
    summary_line = render_summary_line(outcome)
    # log_summary が "SUMMARY " を付けるので除去
    log_summary(summary_line[len("SUMMARY "):])
    if outcome.excluded > 0 or outcome.failed > 0:
        return EXIT_PARTIAL_FAILURE
    return EXIT_SUCCESS_ALL


def main(argv: list[str] | None = None) -> int:
    logger = setup_logging()

    # None のときのみシステム引数を読む (テストで [] を渡すケースを保護)
    if argv is None:
        argv = sys.argv[1:]
    args = _parse_args(argv)
    _load_env_file(Path(".env"), override=True)

    try:
        cfg = _resolve_config(args.config)
        variants = load_header_variants(cfg.header_variants)
    except ConfigError as e:
        logger.error(f"config: {e}")
        return EXIT_FATAL

    if args.debug:
        enable_debug()
        logger.debug("debug mode enabled")

    path = Path(args.file)
    if args.inspect:
        return _inspect(path, variants)

    campus = args.campus or cfg.operator_campus
    if not campus:
        logger.error("campus: operator campus not configured (use --campus or HR_CAMPUS)")
        return EXIT_FATAL

    error_log = ErrorLogBuffer()
    client: HRApiClient | None = None
    if args.dry_run:
        reference = StaticReferenceData.from_raw(cfg.branches, cfg.campus_roles)
        session = BulkImportSession(
            reference, campus, variants=variants, error_log=error_log, show_progress=True
        )
        logger.info(f"mode=dry-run campus={campus}")
    else:
        client = HRApiClient(ApiSession(cfg.api_base_url, cfg.api_token), timeout=cfg.timeout_seconds)
        session = BulkImportSession(
            client, campus, submitter=client, variants=variants, error_log=error_log, show_progress=True
        )
        logger.info(f"mode=live campus={campus} api={cfg.api_base_url}")

    try:
        try:
            session.load_file(path)
        except ImportAbortedError as e:
            logger.error(f"import: {e}")
            return EXIT_FATAL
        _report_session(logger, session)

        if args.dry_run:
            session.record_validation_errors()
            return _finish(SubmissionOutcome.preview(session.counts()))

        try:
            outcome = session.submit()
        except NothingToSubmitError as e:
            logger.error(f"submit: {e}")
            return EXIT_FATAL
        except SubmissionFailedError as e:
            logger.error(f"submit: bulk registration failed: {e}")
            return EXIT_FATAL
        _report_results(logger, outcome)
        return _finish(outcome)
    finally:
        if client is not None:
            client.close()
        log_path = error_log.flush()
        if log_path is not None:
            logger.info(f"error log: {log_path}")


if __name__ == "__main__":  # pragma: no cover
    raise SystemExit(main())
