"""Domain layer for budgetit.

Services live in their own modules (budgetit.domain.expense_import,
budgetit.domain.actuals_import, ...) and are imported from there.
"""

from budgetit.domain.entities import (
    ActualsCommitResult,
    CommitResult,
    ExpenseLine,
    IngestResult,
    MappingTemplate,
    NormalizedActualRow,
    NormalizedExpenseRow,
    Occurrence,
    PreviewResult,
    RecurrenceRule,
    RowError,
    SpendTransaction,
)
from budgetit.domain.errors import (
    DomainError,
    NotFoundError,
    UnreadableImportFileError,
    UnsupportedFileTypeError,
    ValidationError,
)

__all__ = [
    "ActualsCommitResult",
    "CommitResult",
    "ExpenseLine",
    "IngestResult",
    "MappingTemplate",
    "NormalizedActualRow",
    "NormalizedExpenseRow",
    "Occurrence",
    "PreviewResult",
    "RecurrenceRule",
    "RowError",
    "SpendTransaction",
    "DomainError",
    "NotFoundError",
    "UnreadableImportFileError",
    "UnsupportedFileTypeError",
    "ValidationError",
]
