"""Tests for ActualsImportService preview and commit."""

from datetime import date

from budgetit.domain.actuals_import import ActualsImportRequest
from budgetit.domain.entities import RecurrenceRule
from conftest import ACTUAL_HEADERS


def plan_monthly_line(db, service_id="svc-1", amount_minor=15000, day_of_month=15):
    return db.create_expense_line(
        scenario_id="scn-1",
        service_id=service_id,
        name="Monitoring",
        expense_type="recurring",
        status="committed",
        amount_minor=amount_minor,
        start_date=date(2026, 1, day_of_month),
        recurrence=RecurrenceRule("monthly", 1, day_of_month),
    )


def test_preview_auto_detects_bank_headers(actuals_service, write_csv):
    """Test bank-style headers are mapped without an explicit mapping."""
    path = write_csv(
        ["Posted Date", "Memo", "USD", "Scenario", "Service"],
        [["2026-02-14", "Feb invoice", "150.00", "scn-1", "svc-1"]],
    )

    preview = actuals_service.preview(ActualsImportRequest(file_path=path))

    assert preview.mapping == {
        "scenario_id": "Scenario",
        "service_id": "Service",
        "transaction_date": "Posted Date",
        "amount": "USD",
        "description": "Memo",
    }
    assert preview.accepted_count == 1
    assert preview.accepted_rows[0].amount_minor == 15000
    assert preview.template_applied is None
    assert preview.template_saved is None


def test_preview_with_explicit_mapping(actuals_service, write_csv):
    """Test an explicit mapping for headers the catalog doesn't know."""
    path = write_csv(["Plan", "Vendor", "Booked", "Charge"], [["scn-1", "svc-1", "2026-02-14", "9.99"]])
    mapping = {
        "scenario_id": "Plan",
        "service_id": "Vendor",
        "transaction_date": "Booked",
        "amount": "Charge",
    }

    preview = actuals_service.preview(ActualsImportRequest(file_path=path, mapping=mapping))

    assert preview.mapping == mapping
    assert preview.accepted_rows[0].transaction_date == date(2026, 2, 14)


def test_preview_does_not_write(actuals_service, temp_db, write_csv):
    """Test preview leaves the ledger untouched."""
    path = write_csv(ACTUAL_HEADERS, [["scn-1", "svc-1", "2026-02-14", "150", "", "x"]])

    actuals_service.preview(ActualsImportRequest(file_path=path))

    assert temp_db.list_spend_transactions() == []


def test_commit_reconciles_and_builds_review_queue(actuals_service, forecast_service, temp_db, write_csv):
    """Test matched and unmatched transactions are reported after commit."""
    plan_monthly_line(temp_db)
    forecast_service.materialize_scenario_occurrences("scn-1", horizon_months=2)
    path = write_csv(
        ACTUAL_HEADERS,
        [
            ["scn-1", "svc-1", "2026-02-14", "150.00", "", "Feb invoice"],
            ["scn-1", "svc-1", "2026-02-20", "150.00", "", "Feb extra"],
            ["scn-1", "svc-2", "2026-03-15", "150", "", "Other service"],
            ["scn-1", "svc-1", "bad-date", "150", "", "Broken"],
        ],
    )

    result = actuals_service.commit(ActualsImportRequest(file_path=path))

    assert result.total_rows == 4
    assert result.rejected_count == 1
    assert result.inserted_count == 3
    assert result.matched_count == 1
    assert result.unmatched_count == 2
    assert result.match_rate == 1 / 3
    assert [t.description for t in result.unmatched_for_review] == ["Feb extra", "Other service"]

    feb = [o for o in temp_db.list_occurrences("scn-1") if o.occurrence_date == date(2026, 2, 15)][0]
    assert feb.state == "actualized"
    matched = [t for t in temp_db.list_spend_transactions() if t.matched_occurrence_id is not None]
    assert [t.matched_occurrence_id for t in matched] == [feb.id]


def test_commit_twice_skips_duplicates(actuals_service, temp_db, write_csv):
    """Test re-importing the same actuals inserts nothing."""
    path = write_csv(ACTUAL_HEADERS, [["scn-1", "svc-1", "2026-02-14", "150", "", "Feb invoice"]])
    request = ActualsImportRequest(file_path=path)

    first = actuals_service.commit(request)
    second = actuals_service.commit(request)

    assert first.inserted_count == 1
    assert second.inserted_count == 0
    assert second.skipped_duplicate_count == 1
    assert second.unmatched_for_review == []
    assert second.match_rate == 0.0
    assert len(temp_db.list_spend_transactions()) == 1


def test_review_queue_is_limited(actuals_service, write_csv):
    """Test at most 20 unmatched transactions are returned for review."""
    rows = [["scn-1", "svc-1", f"2026-01-{day:02d}", "5", "", f"charge {day}"] for day in range(1, 26)]
    path = write_csv(ACTUAL_HEADERS, rows)

    result = actuals_service.commit(ActualsImportRequest(file_path=path))

    assert result.inserted_count == 25
    assert result.unmatched_count == 25
    assert len(result.unmatched_for_review) == 20
    assert result.unmatched_for_review[0].transaction_date == date(2026, 1, 1)
