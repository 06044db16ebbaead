"""Tests for forecast occurrence generation."""

from datetime import date, datetime, UTC

from budgetit.domain.entities import ExpenseLine, RecurrenceRule
from budgetit.domain.forecast import occurrence_dates

TODAY = date(2026, 3, 1)


def line(recurrence, start_date=None, end_date=None):
    return ExpenseLine(
        id=1,
        scenario_id="scn-1",
        service_id="svc-1",
        contract_id=None,
        name="Hosting",
        expense_type="recurring",
        status="approved",
        amount_minor=1000,
        currency="USD",
        start_date=start_date,
        end_date=end_date,
        recurrence=recurrence,
        created_at=datetime.now(UTC),
    )


def test_monthly_clamps_to_month_end():
    """Test a 31st rule lands on the last day of shorter months."""
    dates = occurrence_dates(
        line(RecurrenceRule("monthly", 1, 31, anchor_date=date(2026, 1, 31))), horizon_months=3, today=TODAY
    )
    assert dates == [date(2026, 1, 31), date(2026, 2, 28), date(2026, 3, 31), date(2026, 4, 30)]


def test_quarterly_from_start_date():
    """Test quarterly steps of three months from the start date."""
    dates = occurrence_dates(
        line(RecurrenceRule("quarterly", 1, 10), start_date=date(2026, 1, 10)), horizon_months=12, today=TODAY
    )
    assert dates == [
        date(2026, 1, 10),
        date(2026, 4, 10),
        date(2026, 7, 10),
        date(2026, 10, 10),
        date(2027, 1, 10),
    ]


def test_monthly_interval():
    """Test interval multiplies the monthly step."""
    dates = occurrence_dates(
        line(RecurrenceRule("monthly", 2, 5, anchor_date=date(2026, 1, 5))), horizon_months=6, today=TODAY
    )
    assert dates == [date(2026, 1, 5), date(2026, 3, 5), date(2026, 5, 5), date(2026, 7, 5)]


def test_yearly_without_anchor_uses_configured_month():
    """Test a yearly rule with no anchor or start fires in its configured month."""
    dates = occurrence_dates(line(RecurrenceRule("yearly", 1, 30, month_of_year=6)), today=TODAY)
    assert dates == [date(2026, 6, 30), date(2027, 6, 30), date(2028, 6, 30)]


def test_dates_outside_active_window_dropped():
    """Test dates before start or after end are skipped."""
    dates = occurrence_dates(
        line(
            RecurrenceRule("monthly", 1, 1, anchor_date=date(2025, 12, 1)),
            start_date=date(2026, 2, 1),
            end_date=date(2026, 3, 15),
        ),
        horizon_months=6,
        today=TODAY,
    )
    assert dates == [date(2026, 2, 1), date(2026, 3, 1)]


def test_materialize_scenario(temp_db, forecast_service):
    """Test only active recurring lines of the scenario are expanded."""
    rule = RecurrenceRule("monthly", 1, 15)
    active_id = temp_db.create_expense_line(
        scenario_id="scn-1",
        service_id="svc-1",
        name="Active",
        expense_type="recurring",
        status="planned",
        amount_minor=2500,
        start_date=date(2026, 1, 15),
        recurrence=rule,
    )
    for status, scenario in [("cancelled", "scn-1"), ("planned", "scn-2")]:
        temp_db.create_expense_line(
            scenario_id=scenario,
            service_id="svc-1",
            name=f"{status} {scenario}",
            expense_type="recurring",
            status=status,
            amount_minor=2500,
            start_date=date(2026, 1, 15),
            recurrence=rule,
        )
    temp_db.create_expense_line(
        scenario_id="scn-1",
        service_id="svc-1",
        name="One off",
        expense_type="one_time",
        status="planned",
        amount_minor=100,
    )
    deleted_id = temp_db.create_expense_line(
        scenario_id="scn-1",
        service_id="svc-1",
        name="Deleted",
        expense_type="recurring",
        status="planned",
        amount_minor=2500,
        start_date=date(2026, 1, 15),
        recurrence=rule,
    )
    temp_db.delete_expense_line(deleted_id)

    created = forecast_service.materialize_scenario_occurrences("scn-1", horizon_months=2)

    occurrences = temp_db.list_occurrences("scn-1")
    assert created == 3
    assert [o.occurrence_date for o in occurrences] == [date(2026, 1, 15), date(2026, 2, 15), date(2026, 3, 15)]
    assert all(o.expense_line_id == active_id for o in occurrences)
    assert all(o.state == "forecast" and o.amount_minor == 2500 for o in occurrences)
    assert temp_db.list_occurrences("scn-2") == []


def test_rematerialize_keeps_actualized(temp_db, forecast_service):
    """Test regenerating replaces forecast occurrences but keeps actualized ones."""
    temp_db.create_expense_line(
        scenario_id="scn-1",
        service_id="svc-1",
        name="Active",
        expense_type="recurring",
        status="planned",
        amount_minor=2500,
        start_date=date(2026, 1, 15),
        recurrence=RecurrenceRule("monthly", 1, 15),
    )
    forecast_service.materialize_scenario_occurrences("scn-1", horizon_months=2)
    first = temp_db.list_occurrences("scn-1")[0]
    with temp_db.unit_of_work() as uow:
        uow.mark_occurrence_actualized(first.id)

    created = forecast_service.materialize_scenario_occurrences("scn-1", horizon_months=2)

    occurrences = temp_db.list_occurrences("scn-1")
    assert created == 2
    assert len(occurrences) == 3
    assert [o.state for o in occurrences] == ["actualized", "forecast", "forecast"]
    assert occurrences[0].id == first.id
