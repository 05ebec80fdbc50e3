from __future__ import annotations

from ..models.bulk_result import SubmissionOutcome

"""SUMMARY line rendering for bulk import runs.

Format:
SUMMARY rows={total} valid={valid} invalid={invalid} submitted={submitted}
succeeded={succeeded} failed={failed} elapsed_sec={elapsed}
"""

__all__ = [
    "render_summary_line",
    "format_seconds",
]


def format_seconds(value: float) -> str:
    """Render seconds without scientific notation or a trailing '.0'."""
    if value == 0:
        return "0"
    if value == int(value):
        return str(int(value))
    if value < 0.01:
        return f"{value:.6f}".rstrip('0').rstrip('.')
    return str(round(value, 3))


def render_summary_line(outcome: SubmissionOutcome) -> str:
    """Render the SUMMARY line for one session outcome.

    Examples:
        >>> from hr_bulk_import.models.bulk_result import RowCounts
        >>> render_summary_line(SubmissionOutcome.preview(RowCounts(total=3, valid=2, invalid=1)))
        'SUMMARY rows=3 valid=2 invalid=1 submitted=0 succeeded=0 failed=0 elapsed_sec=0'
    """
    counts = outcome.counts
    return (
        f"SUMMARY rows={counts.total} "
        f"valid={counts.valid} "
        f"invalid={counts.invalid} "
        f"submitted={outcome.submitted} "
        f"succeeded={outcome.succeeded} "
        f"failed={outcome.failed} "
        f"elapsed_sec={format_seconds(outcome.elapsed_seconds)}"
    )
