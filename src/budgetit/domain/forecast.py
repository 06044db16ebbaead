"""Forecast occurrence generation for recurring expense lines."""

import logging
from datetime import date
from typing import Optional

from budgetit.database.base import Database
from budgetit.domain.entities import ExpenseLine, RecurrenceRule
from budgetit.utils.date_parser import add_months_clamped, clamped_date

logger = logging.getLogger(__name__)

DEFAULT_HORIZON_MONTHS = 24

_MONTHS_PER_STEP = {"monthly": 1, "quarterly": 3, "yearly": 12}


def step_months(recurrence: RecurrenceRule) -> int:
    return _MONTHS_PER_STEP[recurrence.frequency] * recurrence.interval


def anchor_date(line: ExpenseLine, today: date) -> date:
    """First date a recurring line fires on.

    Falls back from the rule's anchor date to the line's start date, then to
    the configured day in the current month (the configured month for yearly
    rules).
    """
    recurrence = line.recurrence
    if recurrence.anchor_date is not None:
        return recurrence.anchor_date
    if line.start_date is not None:
        return line.start_date
    month = today.month
    if recurrence.frequency == "yearly" and recurrence.month_of_year:
        month = recurrence.month_of_year
    return clamped_date(today.year, month, recurrence.day_of_month)


def occurrence_dates(
    line: ExpenseLine, horizon_months: int = DEFAULT_HORIZON_MONTHS, today: Optional[date] = None
) -> list[date]:
    """Expand a recurring expense line into dates within its active window."""
    if line.recurrence is None:
        return []
    today = today or date.today()
    recurrence = line.recurrence

    anchor = anchor_date(line, today)
    last = add_months_clamped(anchor, horizon_months, recurrence.day_of_month)
    step = step_months(recurrence)

    dates = []
    current = anchor
    while current <= last:
        after_start = line.start_date is None or current >= line.start_date
        before_end = line.end_date is None or current <= line.end_date
        if after_start and before_end:
            dates.append(current)
        current = add_months_clamped(current, step, recurrence.day_of_month)
    return dates


class ForecastService:
    """Service for materializing planned occurrences of a scenario."""

    def __init__(self, db: Database):
        """Initialize forecast service.

        Args:
            db: Database instance
        """
        self.db = db

    def materialize_scenario_occurrences(
        self,
        scenario_id: str,
        horizon_months: int = DEFAULT_HORIZON_MONTHS,
        today: Optional[date] = None,
    ) -> int:
        """Regenerate forecast occurrences for every active recurring line.

        Cancelled and soft-deleted lines are skipped. Forecast occurrences
        are replaced in one unit of work; actualized ones are kept.

        Args:
            scenario_id: Scenario to materialize
            horizon_months: Months past each line's anchor to expand
            today: Reference date for lines without an anchor or start date

        Returns:
            Number of occurrences created
        """
        lines = [
            line
            for line in self.db.list_expense_lines(scenario_id=scenario_id)
            if line.expense_type == "recurring"
            and line.status != "cancelled"
            and line.recurrence is not None
        ]

        occurrences = [
            {
                "expense_line_id": line.id,
                "occurrence_date": occurrence_date,
                "amount_minor": line.amount_minor,
                "currency": line.currency,
            }
            for line in lines
            for occurrence_date in occurrence_dates(line, horizon_months, today)
        ]

        with self.db.unit_of_work() as uow:
            created = uow.replace_occurrences(scenario_id, occurrences)

        logger.info(
            "Materialized %d occurrences for scenario %s from %d recurring lines",
            created,
            scenario_id,
            len(lines),
        )
        return created
