"""Tests for Database interface returning domain models."""

import pytest
from datetime import date, datetime

from budgetit.domain import entities
from budgetit.domain.errors import NotFoundError, ValidationError


class TestDatabaseInterface:
    """Tests to verify Database interface returns domain models."""

    def test_get_expense_line_returns_domain_model(self, temp_db):
        """Test that get_expense_line returns a domain ExpenseLine entity."""
        line_id = temp_db.create_expense_line(
            scenario_id="scn-1",
            service_id="svc-1",
            name="Hosting",
            expense_type="one_time",
            status="planned",
            amount_minor=1234,
            contract_id="ctr-1",
        )

        line = temp_db.get_expense_line(line_id)

        assert isinstance(line, entities.ExpenseLine)
        assert line.id == line_id
        assert line.contract_id == "ctr-1"
        assert line.currency == "USD"
        assert line.recurrence is None
        assert isinstance(line.created_at, datetime)

    def test_recurring_line_round_trips_rule(self, temp_db):
        """Test that a recurrence rule is stored and returned with its line."""
        rule = entities.RecurrenceRule("yearly", 2, 31, month_of_year=12, anchor_date=date(2026, 12, 31))
        line_id = temp_db.create_expense_line(
            scenario_id="scn-1",
            service_id="svc-1",
            name="Renewal",
            expense_type="recurring",
            status="approved",
            amount_minor=99900,
            recurrence=rule,
        )

        assert temp_db.get_expense_line(line_id).recurrence == rule
        assert temp_db.list_expense_lines(scenario_id="scn-1")[0].recurrence == rule

    def test_recurring_line_requires_rule(self, temp_db):
        """Test that a recurring line without a rule is rejected."""
        with pytest.raises(ValidationError):
            temp_db.create_expense_line(
                scenario_id="scn-1",
                service_id="svc-1",
                name="Broken",
                expense_type="recurring",
                status="planned",
                amount_minor=1,
            )
        assert temp_db.list_expense_lines() == []

    def test_list_expense_lines_filters(self, temp_db):
        """Test scenario and soft-delete filtering."""
        keep = temp_db.create_expense_line("scn-1", "svc-1", "A", "one_time", "planned", 1)
        gone = temp_db.create_expense_line("scn-1", "svc-1", "B", "one_time", "planned", 2)
        temp_db.create_expense_line("scn-2", "svc-1", "C", "one_time", "planned", 3)

        temp_db.delete_expense_line(gone)

        assert [line.id for line in temp_db.list_expense_lines(scenario_id="scn-1")] == [keep]
        assert len(temp_db.list_expense_lines()) == 2
        assert len(temp_db.list_expense_lines(include_deleted=True)) == 3
        assert temp_db.get_expense_line(gone).deleted_at is not None

    def test_delete_missing_line(self, temp_db):
        """Test deleting an unknown line raises NotFoundError."""
        with pytest.raises(NotFoundError, match="Expense line 999 not found"):
            temp_db.delete_expense_line(999)

    def test_unit_of_work_commits(self, temp_db):
        """Test that leaving the block normally commits staged rows."""
        with temp_db.unit_of_work() as uow:
            uow.add_spend_transaction("scn-1", "svc-1", date(2026, 1, 2), 500, description="ok")

        transactions = temp_db.list_spend_transactions()
        assert len(transactions) == 1
        assert isinstance(transactions[0], entities.SpendTransaction)
        assert transactions[0].matched_occurrence_id is None

    def test_unit_of_work_rolls_back_on_error(self, temp_db):
        """Test that an exception discards every staged row."""
        with pytest.raises(RuntimeError):
            with temp_db.unit_of_work() as uow:
                uow.add_expense_line("scn-1", "svc-1", "A", "one_time", "planned", 1)
                uow.add_spend_transaction("scn-1", "svc-1", date(2026, 1, 2), 500)
                raise RuntimeError("boom")

        assert temp_db.list_expense_lines() == []
        assert temp_db.list_spend_transactions() == []

    def test_mark_missing_occurrence(self, temp_db):
        """Test actualizing an unknown occurrence raises NotFoundError."""
        with pytest.raises(NotFoundError):
            with temp_db.unit_of_work() as uow:
                uow.mark_occurrence_actualized(42)

    def test_find_occurrence_candidates_month_bounds(self, temp_db):
        """Test candidates are limited to the transaction's calendar month."""
        line_id = temp_db.create_expense_line(
            "scn-1",
            "svc-1",
            "Hosting",
            "recurring",
            "planned",
            700,
            recurrence=entities.RecurrenceRule("monthly", 1, 1),
        )
        with temp_db.unit_of_work() as uow:
            uow.replace_occurrences(
                "scn-1",
                [
                    {"expense_line_id": line_id, "occurrence_date": d, "amount_minor": 700, "currency": "USD"}
                    for d in (date(2026, 1, 31), date(2026, 2, 1), date(2026, 2, 28), date(2026, 3, 1))
                ],
            )

        candidates = temp_db.find_occurrence_candidates("scn-1", "svc-1", 700, "USD", date(2026, 2, 20))

        assert all(isinstance(c, entities.Occurrence) for c in candidates)
        assert [c.occurrence_date for c in candidates] == [date(2026, 2, 28), date(2026, 2, 1)]
