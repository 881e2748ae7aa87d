"""Input validation package."""

from budget_tracker.validation.validator import (
    InputValidationError,
    blank_to_none,
    describe_validation_error,
    normalize_code,
    normalize_email,
    parse_payload,
    parse_row_id,
    require_month_id,
)

__all__ = [
    "InputValidationError",
    "blank_to_none",
    "describe_validation_error",
    "normalize_code",
    "normalize_email",
    "parse_payload",
    "parse_row_id",
    "require_month_id",
]
