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


class UnsupportedFileTypeError(DomainError):
    """Import file extension is neither .csv nor .xlsx."""


class UnreadableImportFileError(DomainError):
    """Import file has a supported extension but cannot be opened."""


def unsupported_file_type(extension: str) -> str:
    """Return message for an import file with an unknown extension."""
    shown = extension or "(none)"
    return f"Unsupported import file type '{shown}'. Use .csv or .xlsx."


def expense_line_not_found(expense_line_id: int) -> str:
    """Return message for missing expense line."""
    return f"Expense line {expense_line_id} not found"


def missing_field_mapping(field: str) -> str:
    """Return row error message when a required field has no column."""
    return f"Missing mapping for required field: {field}"


def recurring_without_rule() -> str:
    """Return message for a recurring expense created without a rule."""
    return "Recurring expenses require a recurrence rule."


def unreadable_workbook(file_name: str, error: Exception) -> str:
    """Return message for an .xlsx file that is not a valid workbook."""
    return f"Could not read workbook '{file_name}': {str(error) or type(error).__name__}"
