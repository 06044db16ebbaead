"""Row validation and normalization for expense line and actuals imports.

Each field is checked independently into a FieldResult (a value or an error
message). The row-level functions merge those results into one error list;
a row is accepted only when that list is empty, so a single bad field
rejects the whole row while every problem with it is still reported.
"""

import dataclasses
import re
from dataclasses import dataclass
from typing import Any, Optional

from budgetit.domain.entities import (
    EXPENSE_STATUSES,
    EXPENSE_TYPES,
    FREQUENCIES,
    ColumnMapping,
    NormalizedActualRow,
    NormalizedExpenseRow,
    RecurrenceRule,
    RowError,
)
from budgetit.domain.errors import missing_field_mapping
from budgetit.domain.fingerprint import actual_fingerprint, expense_fingerprint
from budgetit.domain.mapping import ACTUAL_REQUIRED_FIELDS, EXPENSE_REQUIRED_FIELDS
from budgetit.utils.amount_parser import parse_minor_units
from budgetit.utils.date_parser import parse_iso_date

VALIDATION = "validation"

_INTEGER = re.compile(r"^-?\d+$", re.ASCII)


@dataclass(frozen=True)
class FieldResult:
    """Outcome of checking one field: a parsed value or an error message."""

    value: Any = None
    error: Optional[str] = None

    @property
    def ok(self) -> bool:
        return self.error is None


def _fail(message: str) -> FieldResult:
    return FieldResult(error=message)


def cell_value(row: dict[str, str], mapping: ColumnMapping, field: str) -> str:
    """Return the trimmed cell for a field, or "" when the field is unmapped."""
    header = mapping.get(field)
    if not header:
        return ""
    return (row.get(header) or "").strip()


def parse_int_strict(value: str) -> Optional[int]:
    """Parse an optionally signed integer with no other characters."""
    if not _INTEGER.match(value.strip()):
        return None
    return int(value)


def check_required_text(field: str, value: str) -> FieldResult:
    if not value:
        return _fail(f"{field} is required.")
    return FieldResult(value)


def check_choice(field: str, value: str, choices: tuple[str, ...]) -> FieldResult:
    if value not in choices:
        return _fail(f"{field} must be one of: {', '.join(choices)}.")
    return FieldResult(value)


def check_amount(value: str) -> FieldResult:
    try:
        amount_minor = parse_minor_units(value)
    except ValueError:
        return _fail("amount is invalid.")
    if amount_minor < 0:
        return _fail("amount must be non-negative.")
    return FieldResult(amount_minor)


def check_currency(value: str) -> FieldResult:
    currency = value.upper() or "USD"
    if currency != "USD":
        return _fail("currency must be USD.")
    return FieldResult(currency)


def check_date(field: str, value: str, required: bool = False) -> FieldResult:
    if not value and not required:
        return FieldResult(None)
    try:
        return FieldResult(parse_iso_date(value))
    except ValueError:
        return _fail(f"{field} must use YYYY-MM-DD format.")


def check_recurrence(
    frequency_raw: str,
    interval_raw: str,
    day_of_month_raw: str,
    month_of_year_raw: str,
    anchor_raw: str,
) -> dict[str, FieldResult]:
    """Check the recurrence fields of a recurring expense row.

    Returns:
        Dict of field name -> FieldResult for every recurrence field
    """
    results: dict[str, FieldResult] = {}

    if frequency_raw in FREQUENCIES:
        results["frequency"] = FieldResult(frequency_raw)
    else:
        results["frequency"] = _fail(
            f"frequency is required for recurring expenses ({', '.join(FREQUENCIES)})."
        )

    interval = parse_int_strict(interval_raw) if interval_raw else 1
    if interval is None or interval <= 0:
        results["interval"] = _fail("interval must be a positive integer.")
    else:
        results["interval"] = FieldResult(interval)

    day_of_month = parse_int_strict(day_of_month_raw)
    if day_of_month is None or not 1 <= day_of_month <= 31:
        results["day_of_month"] = _fail("day_of_month must be an integer between 1 and 31.")
    else:
        results["day_of_month"] = FieldResult(day_of_month)

    month_of_year = parse_int_strict(month_of_year_raw) if month_of_year_raw else None
    month_in_range = month_of_year is not None and 1 <= month_of_year <= 12
    if frequency_raw == "yearly" and not month_in_range:
        results["month_of_year"] = _fail("month_of_year is required for yearly recurrence (1-12).")
    elif month_of_year_raw and not month_in_range:
        results["month_of_year"] = _fail("month_of_year must be between 1 and 12.")
    else:
        results["month_of_year"] = FieldResult(month_of_year)

    results["anchor_date"] = check_date("anchor_date", anchor_raw)
    return results


def _mapping_errors(
    mapping: ColumnMapping, required_fields: tuple[str, ...], row_number: int
) -> list[RowError]:
    return [
        RowError(row_number, VALIDATION, field, missing_field_mapping(field))
        for field in required_fields
        if not mapping.get(field)
    ]


def _collect(results: dict[str, FieldResult], row_number: int) -> list[RowError]:
    return [
        RowError(row_number, VALIDATION, field, result.error)
        for field, result in results.items()
        if not result.ok
    ]


def validate_expense_row(
    row: dict[str, str], row_number: int, mapping: ColumnMapping
) -> tuple[Optional[NormalizedExpenseRow], list[RowError]]:
    """Validate and normalize one expense line row.

    Args:
        row: Raw header -> value record
        row_number: Source row number (header is row 1)
        mapping: Resolved field -> header mapping

    Returns:
        Tuple of (normalized row or None, row errors). Exactly one of the
        two is meaningful: the row is None whenever errors is non-empty.
    """
    def value(field: str) -> str:
        return cell_value(row, mapping, field)

    errors = _mapping_errors(mapping, EXPENSE_REQUIRED_FIELDS, row_number)

    results = {
        "scenario_id": check_required_text("scenario_id", value("scenario_id")),
        "service_id": check_required_text("service_id", value("service_id")),
        "name": check_required_text("name", value("name")),
        "expense_type": check_choice("expense_type", value("expense_type").lower(), EXPENSE_TYPES),
        "status": check_choice("status", value("status").lower(), EXPENSE_STATUSES),
        "amount": check_amount(value("amount")),
        "currency": check_currency(value("currency")),
        "start_date": check_date("start_date", value("start_date")),
        "end_date": check_date("end_date", value("end_date")),
    }
    errors.extend(_collect(results, row_number))

    recurrence = None
    if results["expense_type"].value == "recurring":
        recurrence_results = check_recurrence(
            value("frequency").lower(),
            value("interval"),
            value("day_of_month"),
            value("month_of_year"),
            value("anchor_date"),
        )
        recurrence_errors = _collect(recurrence_results, row_number)
        errors.extend(recurrence_errors)
        if not errors:
            recurrence = RecurrenceRule(
                **{field: result.value for field, result in recurrence_results.items()}
            )

    if errors:
        return None, errors

    normalized = NormalizedExpenseRow(
        row_number=row_number,
        scenario_id=results["scenario_id"].value,
        service_id=results["service_id"].value,
        contract_id=value("contract_id") or None,
        name=results["name"].value,
        expense_type=results["expense_type"].value,
        status=results["status"].value,
        amount_minor=results["amount"].value,
        currency=results["currency"].value,
        start_date=results["start_date"].value,
        end_date=results["end_date"].value,
        recurrence=recurrence,
        fingerprint="",
    )
    return dataclasses.replace(normalized, fingerprint=expense_fingerprint(normalized)), []


def validate_actual_row(
    row: dict[str, str], row_number: int, mapping: ColumnMapping
) -> tuple[Optional[NormalizedActualRow], list[RowError]]:
    """Validate and normalize one actual transaction row.

    Args:
        row: Raw header -> value record
        row_number: Source row number (header is row 1)
        mapping: Resolved field -> header mapping

    Returns:
        Tuple of (normalized row or None, row errors)
    """
    def value(field: str) -> str:
        return cell_value(row, mapping, field)

    errors = _mapping_errors(mapping, ACTUAL_REQUIRED_FIELDS, row_number)

    results = {
        "scenario_id": check_required_text("scenario_id", value("scenario_id")),
        "service_id": check_required_text("service_id", value("service_id")),
        "transaction_date": check_date("transaction_date", value("transaction_date"), required=True),
        "currency": check_currency(value("currency")),
        "amount": check_amount(value("amount")),
    }
    errors.extend(_collect(results, row_number))
    if errors:
        return None, errors

    normalized = NormalizedActualRow(
        row_number=row_number,
        scenario_id=results["scenario_id"].value,
        service_id=results["service_id"].value,
        contract_id=value("contract_id") or None,
        transaction_date=results["transaction_date"].value,
        amount_minor=results["amount"].value,
        currency=results["currency"].value,
        description=value("description") or None,
        fingerprint="",
    )
    return dataclasses.replace(normalized, fingerprint=actual_fingerprint(normalized)), []
