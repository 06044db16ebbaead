"""Domain model entities for budgetit.

These are pure data classes representing ledger records and import results,
independent of database schema. Ledger entities are returned by the Database
interface; import entities are produced by the import services and never
persisted directly.
"""

from dataclasses import dataclass, field
from datetime import datetime, date
from typing import Optional, Union

EXPENSE_TYPES = ("recurring", "one_time")
EXPENSE_STATUSES = ("planned", "approved", "committed", "actual", "cancelled")
FREQUENCIES = ("monthly", "quarterly", "yearly")

ColumnMapping = dict[str, str]
"""Business field name -> source header. Keys come from an importer's field catalog."""


@dataclass(frozen=True)
class RecurrenceRule:
    """Recurrence shape of a recurring expense line."""

    frequency: str
    interval: int
    day_of_month: int
    month_of_year: Optional[int] = None
    anchor_date: Optional[date] = None


@dataclass(frozen=True)
class ExpenseLine:
    """Persisted planned expense line."""

    id: int
    scenario_id: str
    service_id: str
    contract_id: Optional[str]
    name: str
    expense_type: str
    status: str
    amount_minor: int
    currency: str
    start_date: Optional[date]
    end_date: Optional[date]
    recurrence: Optional[RecurrenceRule]
    created_at: datetime
    deleted_at: Optional[datetime] = None


@dataclass(frozen=True)
class Occurrence:
    """A dated, materialized instance of a recurring expense line."""

    id: int
    scenario_id: str
    expense_line_id: int
    occurrence_date: date
    amount_minor: int
    currency: str
    state: str


@dataclass(frozen=True)
class SpendTransaction:
    """Persisted actual (bank) transaction."""

    id: int
    scenario_id: str
    service_id: str
    contract_id: Optional[str]
    transaction_date: date
    amount_minor: int
    currency: str
    description: Optional[str]
    matched_occurrence_id: Optional[int]
    created_at: datetime


@dataclass(frozen=True)
class MappingTemplate:
    """A saved, reusable column mapping."""

    name: str
    header_signature: str
    mapping: ColumnMapping
    updated_at: str


@dataclass(frozen=True)
class NormalizedExpenseRow:
    """A validated expense line import candidate."""

    row_number: int
    scenario_id: str
    service_id: str
    contract_id: Optional[str]
    name: str
    expense_type: str
    status: str
    amount_minor: int
    currency: str
    start_date: Optional[date]
    end_date: Optional[date]
    recurrence: Optional[RecurrenceRule]
    fingerprint: str


@dataclass(frozen=True)
class NormalizedActualRow:
    """A validated actual transaction import candidate."""

    row_number: int
    scenario_id: str
    service_id: str
    contract_id: Optional[str]
    transaction_date: date
    amount_minor: int
    currency: str
    description: Optional[str]
    fingerprint: str


NormalizedRow = Union[NormalizedExpenseRow, NormalizedActualRow]


@dataclass(frozen=True)
class RowError:
    """One validation or duplicate finding for a source row.

    field is a business field name, or "row" for findings about the whole row.
    """

    row_number: int
    code: str
    field: str
    message: str


@dataclass(frozen=True)
class PreviewResult:
    """Outcome of a dry run."""

    total_rows: int
    accepted_count: int
    rejected_count: int
    duplicate_count: int
    mapping: ColumnMapping
    errors: list[RowError] = field(default_factory=list)
    accepted_rows: list[NormalizedRow] = field(default_factory=list)
    template_applied: Optional[str] = None
    template_saved: Optional[str] = None


@dataclass(frozen=True)
class CommitResult:
    """Outcome of a committed expense import."""

    preview: PreviewResult
    inserted_count: int
    skipped_duplicate_count: int

    @property
    def total_rows(self) -> int:
        return self.preview.total_rows

    @property
    def accepted_count(self) -> int:
        return self.preview.accepted_count

    @property
    def rejected_count(self) -> int:
        return self.preview.rejected_count

    @property
    def duplicate_count(self) -> int:
        return self.preview.duplicate_count

    @property
    def mapping(self) -> ColumnMapping:
        return self.preview.mapping

    @property
    def errors(self) -> list[RowError]:
        return self.preview.errors

    @property
    def accepted_rows(self) -> list[NormalizedRow]:
        return self.preview.accepted_rows


@dataclass(frozen=True)
class IngestResult:
    """Aggregate statistics from reconciling actual transactions."""

    inserted: int
    matched: int
    unmatched: int
    match_rate: float


@dataclass(frozen=True)
class ActualsCommitResult(CommitResult):
    """Outcome of a committed actuals import, including reconciliation."""

    matched_count: int = 0
    unmatched_count: int = 0
    match_rate: float = 0.0
    unmatched_for_review: list[SpendTransaction] = field(default_factory=list)
