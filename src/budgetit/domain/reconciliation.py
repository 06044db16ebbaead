"""Matching of actual spend transactions against planned occurrences."""

import logging

from budgetit.database.base import Database
from budgetit.domain.entities import IngestResult, NormalizedActualRow, SpendTransaction
from budgetit.domain.errors import ValidationError

logger = logging.getLogger(__name__)


class ReconciliationService:
    """Service for ingesting actual transactions and matching them to occurrences."""

    def __init__(self, db: Database):
        """Initialize reconciliation service.

        Args:
            db: Database instance
        """
        self.db = db

    def ingest_actual_transactions(self, rows: list[NormalizedActualRow]) -> IngestResult:
        """Insert actual transactions, matching each to at most one occurrence.

        A transaction matches the nearest unmatched occurrence in the same
        scenario, service, amount, currency and calendar month. All rows are
        written in one unit of work; any failure rolls back the batch.

        Args:
            rows: Normalized actual transaction rows

        Returns:
            IngestResult

        Raises:
            ValidationError: If a row is missing identifiers or has a negative amount
        """
        inserted = 0
        matched = 0
        used: set[int] = set()

        with self.db.unit_of_work() as uow:
            for row in rows:
                _check_transaction(row)
                candidates = self.db.find_occurrence_candidates(
                    scenario_id=row.scenario_id,
                    service_id=row.service_id,
                    amount_minor=row.amount_minor,
                    currency=row.currency,
                    transaction_date=row.transaction_date,
                )
                selected = next((c for c in candidates if c.id not in used), None)

                uow.add_spend_transaction(
                    scenario_id=row.scenario_id,
                    service_id=row.service_id,
                    transaction_date=row.transaction_date,
                    amount_minor=row.amount_minor,
                    currency=row.currency,
                    contract_id=row.contract_id,
                    description=row.description,
                    matched_occurrence_id=selected.id if selected else None,
                )
                if selected is not None:
                    used.add(selected.id)
                    uow.mark_occurrence_actualized(selected.id)
                    matched += 1
                inserted += 1

        result = IngestResult(
            inserted=inserted,
            matched=matched,
            unmatched=inserted - matched,
            match_rate=matched / inserted if inserted else 0.0,
        )
        logger.info(
            "Ingested %d actual transactions: %d matched, %d unmatched",
            result.inserted,
            result.matched,
            result.unmatched,
        )
        return result

    def list_unmatched_actual_transactions(self, scenario_id: str) -> list[SpendTransaction]:
        """List a scenario's actual transactions that matched no occurrence."""
        return self.db.list_unmatched_spend_transactions(scenario_id)


def _check_transaction(row: NormalizedActualRow) -> None:
    if not row.scenario_id:
        raise ValidationError("scenario_id is required.")
    if not row.service_id:
        raise ValidationError("service_id is required.")
    if row.amount_minor < 0:
        raise ValidationError("amount_minor must be a non-negative integer.")
