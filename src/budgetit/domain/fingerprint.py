"""Deterministic row fingerprints and duplicate screening.

A fingerprint is the SHA-256 hex digest of a canonical, "|"-joined token of
a row's business fields. The same token functions are applied to import
candidates and to persisted ledger rows, so a manually entered expense line
and an imported one with identical values hash identically. Hashes are
equality keys only.
"""

import hashlib
import logging
from dataclasses import dataclass, field
from typing import Iterable, Optional

from budgetit.domain.entities import (
    ExpenseLine,
    NormalizedActualRow,
    NormalizedExpenseRow,
    NormalizedRow,
    RecurrenceRule,
    RowError,
    SpendTransaction,
)
from budgetit.database.base import Database

logger = logging.getLogger(__name__)


def _iso(value) -> str:
    return value.isoformat() if value is not None else ""


def recurrence_token(recurrence: Optional[RecurrenceRule]) -> str:
    """Canonical sub-token for a recurrence rule; "" when absent."""
    if recurrence is None:
        return ""
    return "|".join(
        [
            recurrence.frequency,
            str(recurrence.interval),
            str(recurrence.day_of_month),
            str(recurrence.month_of_year) if recurrence.month_of_year is not None else "",
            _iso(recurrence.anchor_date),
        ]
    )


def expense_token(line: ExpenseLine | NormalizedExpenseRow) -> str:
    """Canonical token for an expense line or expense import row."""
    return "|".join(
        [
            line.scenario_id,
            line.service_id,
            line.contract_id or "",
            line.name.lower(),
            line.expense_type,
            line.status,
            str(line.amount_minor),
            line.currency,
            _iso(line.start_date),
            _iso(line.end_date),
            recurrence_token(line.recurrence),
        ]
    )


def actual_token(txn: SpendTransaction | NormalizedActualRow) -> str:
    """Canonical token for a spend transaction or actuals import row."""
    return "|".join(
        [
            txn.scenario_id,
            txn.service_id,
            txn.contract_id or "",
            _iso(txn.transaction_date),
            str(txn.amount_minor),
            txn.currency,
            txn.description or "",
        ]
    )


def hash_token(token: str) -> str:
    return hashlib.sha256(token.encode("utf-8")).hexdigest()


def expense_fingerprint(line: ExpenseLine | NormalizedExpenseRow) -> str:
    return hash_token(expense_token(line))


def actual_fingerprint(txn: SpendTransaction | NormalizedActualRow) -> str:
    return hash_token(actual_token(txn))


def load_existing_expense_fingerprints(db: Database) -> frozenset[str]:
    """Fingerprints of all non-deleted persisted expense lines."""
    return frozenset(expense_fingerprint(line) for line in db.list_expense_lines())


def load_existing_actual_fingerprints(db: Database) -> frozenset[str]:
    """Fingerprints of all persisted spend transactions."""
    return frozenset(actual_fingerprint(txn) for txn in db.list_spend_transactions())


@dataclass(frozen=True)
class ScreenResult:
    """Rows that survived validation and dedup, plus every finding."""

    accepted_rows: list[NormalizedRow] = field(default_factory=list)
    errors: list[RowError] = field(default_factory=list)
    duplicate_count: int = 0


def screen_rows(
    outcomes: Iterable[tuple[int, Optional[NormalizedRow], list[RowError]]],
    existing_fingerprints: frozenset[str],
    duplicate_message: str,
) -> ScreenResult:
    """Filter validated rows against persisted and in-batch fingerprints.

    Rows are processed strictly in the given (file) order. A valid row whose
    fingerprint is already persisted, or was seen earlier in this batch, is
    reported as a "duplicate" row error; only the first occurrence of each
    fingerprint is accepted.

    Args:
        outcomes: (row_number, normalized row or None, row errors) per source row
        existing_fingerprints: Fingerprints of persisted ledger rows
        duplicate_message: Message for duplicate row errors

    Returns:
        ScreenResult
    """
    accepted: list[NormalizedRow] = []
    errors: list[RowError] = []
    seen: set[str] = set()
    duplicate_count = 0

    for row_number, normalized, row_errors in outcomes:
        if normalized is None:
            errors.extend(row_errors)
            continue

        fingerprint = normalized.fingerprint
        if fingerprint in existing_fingerprints or fingerprint in seen:
            logger.debug("Row %d is a duplicate of %s", row_number, fingerprint[:12])
            duplicate_count += 1
            errors.append(RowError(row_number, "duplicate", "row", duplicate_message))
            continue

        seen.add(fingerprint)
        accepted.append(normalized)

    return ScreenResult(accepted_rows=accepted, errors=errors, duplicate_count=duplicate_count)
