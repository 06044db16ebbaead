"""Actual transaction import domain service."""

import logging
from dataclasses import dataclass
from typing import Optional

from budgetit.database.base import Database
from budgetit.domain.entities import ActualsCommitResult, ColumnMapping, PreviewResult
from budgetit.domain.file_reader import read_import_rows
from budgetit.domain.fingerprint import load_existing_actual_fingerprints, screen_rows
from budgetit.domain.mapping import ACTUAL_FIELD_ALIASES, MappingResolver
from budgetit.domain.reconciliation import ReconciliationService
from budgetit.domain.row_validator import validate_actual_row

logger = logging.getLogger(__name__)

DUPLICATE_MESSAGE = "Duplicate actual transaction skipped by deterministic fingerprint."
REVIEW_QUEUE_LIMIT = 20


@dataclass(frozen=True)
class ActualsImportRequest:
    """Caller options for an actual transaction import."""

    file_path: str
    mapping: Optional[ColumnMapping] = None


class ActualsImportService:
    """Service for previewing and committing actual transaction imports.

    Mapping is explicit or auto-detected; templates are never read or saved.
    """

    def __init__(self, db: Database, reconciliation: Optional[ReconciliationService] = None):
        """Initialize actuals import service.

        Args:
            db: Database instance
            reconciliation: Matching collaborator, defaults to one over db
        """
        self.db = db
        self.reconciliation = reconciliation or ReconciliationService(db)

    def preview(self, request: ActualsImportRequest) -> PreviewResult:
        """Validate and deduplicate an actuals file without touching the ledger.

        Raises:
            UnsupportedFileTypeError: If the file is not .csv or .xlsx
            FileNotFoundError: If the file doesn't exist
        """
        headers, rows = read_import_rows(request.file_path)
        resolution = MappingResolver(ACTUAL_FIELD_ALIASES).resolve(headers, mapping=request.mapping)
        mapping = resolution.mapping

        existing = load_existing_actual_fingerprints(self.db)
        screened = screen_rows(
            (
                (row_number, *validate_actual_row(row, row_number, mapping))
                for row_number, row in enumerate(rows, start=2)
            ),
            existing,
            DUPLICATE_MESSAGE,
        )

        logger.info(
            "Actuals import preview: %d rows, %d accepted, %d errors, %d duplicates",
            len(rows),
            len(screened.accepted_rows),
            len(screened.errors),
            screened.duplicate_count,
        )
        return PreviewResult(
            total_rows=len(rows),
            accepted_count=len(screened.accepted_rows),
            rejected_count=len(screened.errors),
            duplicate_count=screened.duplicate_count,
            mapping=mapping,
            errors=screened.errors,
            accepted_rows=screened.accepted_rows,
        )

    def commit(self, request: ActualsImportRequest) -> ActualsCommitResult:
        """Ingest accepted rows through reconciliation and build the review queue.

        Args:
            request: Import options

        Returns:
            ActualsCommitResult with match statistics and up to 20 unmatched
            transactions of the first accepted row's scenario
        """
        preview = self.preview(request)
        if not preview.accepted_rows:
            return ActualsCommitResult(
                preview=preview,
                inserted_count=0,
                skipped_duplicate_count=preview.duplicate_count,
            )

        ingest = self.reconciliation.ingest_actual_transactions(preview.accepted_rows)
        scenario_id = preview.accepted_rows[0].scenario_id
        review = self.reconciliation.list_unmatched_actual_transactions(scenario_id)

        return ActualsCommitResult(
            preview=preview,
            inserted_count=ingest.inserted,
            skipped_duplicate_count=preview.duplicate_count,
            matched_count=ingest.matched,
            unmatched_count=ingest.unmatched,
            match_rate=ingest.match_rate,
            unmatched_for_review=review[:REVIEW_QUEUE_LIMIT],
        )
