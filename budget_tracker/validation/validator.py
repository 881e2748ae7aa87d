"""
Input Coercion and Validation

DESIGN DECISION: Every request body is parsed into a pydantic model
before it reaches the ledger. Coercion rules live here so request models
and query-string handling share one definition:

- Numeric fields are parsed from numbers or numeric strings
- Account codes are trimmed and upper-cased
- Optional free text becomes None when blank
- Emails are trimmed and lower-cased

IMPORTANT: Parsing failures never reach the datastore. They surface as
InputValidationError, which the HTTP layer reports as a 400.
"""

from typing import Any, Optional, TypeVar
from uuid import UUID

from pydantic import BaseModel
from pydantic import ValidationError as PydanticValidationError


ModelT = TypeVar("ModelT", bound=BaseModel)


class InputValidationError(Exception):
    """Malformed or missing input."""

    def __init__(self, message: str, field: Optional[str] = None):
        super().__init__(message)
        self.message = message
        self.field = field


def normalize_code(value: Any) -> str:
    """Trim and upper-case an account code."""
    if value is None:
        return ""
    return str(value).strip().upper()


def normalize_email(value: Any) -> str:
    """Trim and lower-case an email address."""
    if value is None:
        return ""
    return str(value).strip().lower()


def blank_to_none(value: Any) -> Optional[str]:
    """Turn blank or missing free text into None, trim everything else."""
    if value is None:
        return None
    text = str(value).strip()
    return text or None


def describe_validation_error(error: PydanticValidationError) -> tuple[str, Optional[str]]:
    """
    Reduce a pydantic error to one user-facing message.

    Returns:
        (message, field_name) for the first offending field
    """
    first = error.errors()[0]
    location = ".".join(str(part) for part in first.get("loc", ()) if part != "__root__")
    message = first.get("msg", "Invalid input")
    # pydantic prefixes messages raised from validators
    message = message.removeprefix("Value error, ")
    if location:
        return f"{location}: {message}", location
    return message, None


def parse_payload(model_cls: type[ModelT], payload: Any) -> ModelT:
    """
    Parse a decoded JSON body into a request model.

    Args:
        model_cls: The pydantic model to validate against
        payload: Decoded JSON (must be an object)

    Raises:
        InputValidationError: If the body is not an object or fails validation
    """
    if payload is None:
        payload = {}
    if not isinstance(payload, dict):
        raise InputValidationError("Request body must be a JSON object")

    try:
        return model_cls.model_validate(payload)
    except PydanticValidationError as e:
        message, field = describe_validation_error(e)
        raise InputValidationError(message, field=field) from e


def require_month_id(value: Optional[str]) -> UUID:
    """
    Parse the mandatory `month_id` list filter.

    Raises:
        InputValidationError: If missing or not a valid id
    """
    if value is None or not value.strip():
        raise InputValidationError("month_id query param is required", field="month_id")
    try:
        return UUID(value.strip())
    except ValueError:
        raise InputValidationError("month_id must be a valid id", field="month_id")


def parse_row_id(value: Any) -> Optional[UUID]:
    """
    Parse a row id taken from a URL path.

    Returns None for anything that is not a UUID: such an id can never
    match a row, and callers report it as not found.
    """
    if isinstance(value, UUID):
        return value
    try:
        return UUID(str(value))
    except ValueError:
        return None
