"""Mapper functions to convert between domain models and SQLAlchemy models.

This layer isolates the conversion logic, so the domain entities (and the
fingerprints computed from them) stay stable when the schema changes.
"""

from typing import Optional

from budgetit.domain import entities as domain
from budgetit.database.models import (
    ExpenseLine as ORMExpenseLine,
    RecurrenceRule as ORMRecurrenceRule,
    Occurrence as ORMOccurrence,
    SpendTransaction as ORMSpendTransaction,
)


def recurrence_rule_to_domain(
    orm_rule: Optional[ORMRecurrenceRule],
) -> Optional[domain.RecurrenceRule]:
    """Convert SQLAlchemy RecurrenceRule model to domain RecurrenceRule entity.

    Rules without a frequency, interval or day of month are incomplete and
    map to None.
    """
    if orm_rule is None:
        return None
    if not (orm_rule.frequency and orm_rule.interval and orm_rule.day_of_month):
        return None
    return domain.RecurrenceRule(
        frequency=orm_rule.frequency,
        interval=orm_rule.interval,
        day_of_month=orm_rule.day_of_month,
        month_of_year=orm_rule.month_of_year,
        anchor_date=orm_rule.anchor_date,
    )


def expense_line_to_domain(orm_line: ORMExpenseLine) -> domain.ExpenseLine:
    """Convert SQLAlchemy ExpenseLine model to domain ExpenseLine entity."""
    recurrence = None
    if orm_line.expense_type == "recurring":
        recurrence = recurrence_rule_to_domain(orm_line.recurrence_rule)
    return domain.ExpenseLine(
        id=orm_line.id,
        scenario_id=orm_line.scenario_id,
        service_id=orm_line.service_id,
        contract_id=orm_line.contract_id,
        name=orm_line.name,
        expense_type=orm_line.expense_type,
        status=orm_line.status,
        amount_minor=orm_line.amount_minor,
        currency=orm_line.currency,
        start_date=orm_line.start_date,
        end_date=orm_line.end_date,
        recurrence=recurrence,
        created_at=orm_line.created_at,
        deleted_at=orm_line.deleted_at,
    )


def occurrence_to_domain(orm_occurrence: ORMOccurrence) -> domain.Occurrence:
    """Convert SQLAlchemy Occurrence model to domain Occurrence entity."""
    return domain.Occurrence(
        id=orm_occurrence.id,
        scenario_id=orm_occurrence.scenario_id,
        expense_line_id=orm_occurrence.expense_line_id,
        occurrence_date=orm_occurrence.occurrence_date,
        amount_minor=orm_occurrence.amount_minor,
        currency=orm_occurrence.currency,
        state=orm_occurrence.state,
    )


def spend_transaction_to_domain(orm_txn: ORMSpendTransaction) -> domain.SpendTransaction:
    """Convert SQLAlchemy SpendTransaction model to domain SpendTransaction entity."""
    return domain.SpendTransaction(
        id=orm_txn.id,
        scenario_id=orm_txn.scenario_id,
        service_id=orm_txn.service_id,
        contract_id=orm_txn.contract_id,
        transaction_date=orm_txn.transaction_date,
        amount_minor=orm_txn.amount_minor,
        currency=orm_txn.currency,
        description=orm_txn.description,
        matched_occurrence_id=orm_txn.matched_occurrence_id,
        created_at=orm_txn.created_at,
    )
