"""Shared domain error messages and error types."""


class DomainError(ValueError):
    """Base class for domain-level errors.

    Subclasses provide semantic categories while preserving ValueError
    compatibility for existing error handling.
    """


class ValidationError(DomainError):
    """Invalid input or failed validation in domain logic."""


class NotFoundError(DomainError):
    """Requested domain entity does not exist."""


class InvalidScopeError(ValidationError):
    """Aggregation scope (location, year, month) is structurally invalid."""


def empty_location() -> str:
    """Return message for a missing location identifier."""
    return "Location ID must be a non-empty string"


def invalid_year(year: object) -> str:
    """Return message for a year outside the calendar range."""
    return f"Year must be an integer between 1 and 9999, got {year!r}"


def invalid_month(month: object) -> str:
    """Return message for a month outside 1-12."""
    return f"Month must be an integer between 1 and 12, got {month!r}"


def summary_not_found(location_id: str, year: int, month: int) -> str:
    """Return message for a scope without a stored summary."""
    return f"No summary stored for location '{location_id}' {year}-{month:02d}"


def no_line_items(location_id: str, year: int, month: int) -> str:
    """Return message for a scope without stored line items."""
    return f"No line items found for location '{location_id}' {year}-{month:02d}"
