"""Header normalization and spreadsheet-column to canonical-field mapping."""

from .header_mapper import build_mapping_report, map_headers, resolve_headers
from .normalize import normalize_header
from .variants import HeaderVariantTable, VariantTableError

__all__ = [
    "HeaderVariantTable",
    "VariantTableError",
    "build_mapping_report",
    "map_headers",
    "normalize_header",
    "resolve_headers",
]
