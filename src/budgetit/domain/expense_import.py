"""Expense line import domain service."""

import logging
from dataclasses import dataclass
from typing import Optional

from budgetit.database.base import Database
from budgetit.domain.entities import ColumnMapping, CommitResult, PreviewResult
from budgetit.domain.file_reader import read_import_rows
from budgetit.domain.fingerprint import load_existing_expense_fingerprints, screen_rows
from budgetit.domain.mapping import EXPENSE_FIELD_ALIASES, MappingResolver
from budgetit.domain.row_validator import validate_expense_row
from budgetit.domain.template_store import TemplateStore

logger = logging.getLogger(__name__)

DUPLICATE_MESSAGE = "Duplicate row skipped by deterministic fingerprint."


@dataclass(frozen=True)
class ExpenseImportRequest:
    """Caller options for an expense line import."""

    file_path: str
    template_store_path: str
    mapping: Optional[ColumnMapping] = None
    template_name: Optional[str] = None
    use_saved_template: bool = True
    save_template: bool = False


class ExpenseImportService:
    """Service for previewing and committing expense line imports."""

    def __init__(self, db: Database):
        """Initialize expense import service.

        Args:
            db: Database instance
        """
        self.db = db

    def preview(self, request: ExpenseImportRequest) -> PreviewResult:
        """Validate and deduplicate an import file without touching the ledger.

        The only side effect is a template store write when
        request.save_template is set.

        Args:
            request: Import options

        Returns:
            PreviewResult with totals, the resolved mapping, every row error
            (in file order) and the accepted rows

        Raises:
            UnsupportedFileTypeError: If the file is not .csv or .xlsx
            FileNotFoundError: If the file doesn't exist
        """
        headers, rows = read_import_rows(request.file_path)

        resolver = MappingResolver(EXPENSE_FIELD_ALIASES, TemplateStore(request.template_store_path))
        resolution = resolver.resolve(
            headers,
            mapping=request.mapping,
            template_name=request.template_name,
            use_saved_template=request.use_saved_template,
            save_template=request.save_template,
        )
        mapping = resolution.mapping

        existing = load_existing_expense_fingerprints(self.db)
        screened = screen_rows(
            (
                (row_number, *validate_expense_row(row, row_number, mapping))
                for row_number, row in enumerate(rows, start=2)
            ),
            existing,
            DUPLICATE_MESSAGE,
        )

        logger.info(
            "Expense import preview: %d rows, %d accepted, %d errors, %d duplicates",
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
            template_applied=resolution.template_applied,
            template_saved=resolution.template_saved,
        )

    def commit(self, request: ExpenseImportRequest) -> CommitResult:
        """Import every accepted row in one ledger transaction.

        The preview is always recomputed, so rows committed by an earlier
        call are reported as duplicates here. If any insert fails, the whole
        batch is rolled back and the error propagates.

        Args:
            request: Import options

        Returns:
            CommitResult
        """
        preview = self.preview(request)
        if not preview.accepted_rows:
            return CommitResult(
                preview=preview,
                inserted_count=0,
                skipped_duplicate_count=preview.duplicate_count,
            )

        try:
            with self.db.unit_of_work() as uow:
                for row in preview.accepted_rows:
                    uow.add_expense_line(
                        scenario_id=row.scenario_id,
                        service_id=row.service_id,
                        name=row.name,
                        expense_type=row.expense_type,
                        status=row.status,
                        amount_minor=row.amount_minor,
                        currency=row.currency,
                        contract_id=row.contract_id,
                        start_date=row.start_date,
                        end_date=row.end_date,
                        recurrence=row.recurrence,
                    )
        except Exception:
            logger.error("Expense import of %s rolled back", request.file_path)
            raise

        logger.info("Inserted %d expense lines from %s", len(preview.accepted_rows), request.file_path)
        return CommitResult(
            preview=preview,
            inserted_count=len(preview.accepted_rows),
            skipped_duplicate_count=preview.duplicate_count,
        )
