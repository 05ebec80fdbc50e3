"""Row validation for mapped employee records."""

from .row_validator import (
    ValidationErrorMap,
    is_bulk_valid,
    is_row_valid,
    normalize_role,
    validate_row,
)

__all__ = [
    "ValidationErrorMap",
    "is_bulk_valid",
    "is_row_valid",
    "normalize_role",
    "validate_row",
]
