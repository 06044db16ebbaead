"""Abstract database interface."""

from abc import ABC, abstractmethod
from typing import Optional
from datetime import date

# Import entities directly to avoid circular import through domain/__init__.py
from budgetit.domain.entities import (
    ExpenseLine,
    Occurrence,
    RecurrenceRule,
    SpendTransaction,
)


class UnitOfWork(ABC):
    """An explicit ledger transaction.

    Writes staged through a unit of work become visible only on commit().
    Used as a context manager it commits when the block completes and rolls
    back every staged write when the block raises.
    """

    def __enter__(self) -> "UnitOfWork":
        return self

    def __exit__(self, exc_type, exc, tb) -> bool:
        if exc_type is None:
            self.commit()
        else:
            self.rollback()
        return False

    @abstractmethod
    def add_expense_line(
        self,
        scenario_id: str,
        service_id: str,
        name: str,
        expense_type: str,
        status: str,
        amount_minor: int,
        currency: str = "USD",
        contract_id: Optional[str] = None,
        start_date: Optional[date] = None,
        end_date: Optional[date] = None,
        recurrence: Optional[RecurrenceRule] = None,
    ) -> int:
        """Stage an expense line (and its recurrence rule). Returns expense line ID."""
        pass

    @abstractmethod
    def add_spend_transaction(
        self,
        scenario_id: str,
        service_id: str,
        transaction_date: date,
        amount_minor: int,
        currency: str = "USD",
        contract_id: Optional[str] = None,
        description: Optional[str] = None,
        matched_occurrence_id: Optional[int] = None,
    ) -> int:
        """Stage a spend transaction. Returns transaction ID."""
        pass

    @abstractmethod
    def mark_occurrence_actualized(self, occurrence_id: int) -> None:
        """Stage the state change of a matched occurrence."""
        pass

    @abstractmethod
    def replace_occurrences(self, scenario_id: str, occurrences: list[dict]) -> int:
        """Stage deletion of a scenario's occurrences and insertion of new ones.

        Each dict carries expense_line_id, occurrence_date, amount_minor and
        currency. Returns the number of occurrences staged.
        """
        pass

    @abstractmethod
    def commit(self) -> None:
        """Make all staged writes durable."""
        pass

    @abstractmethod
    def rollback(self) -> None:
        """Discard all staged writes."""
        pass


class Database(ABC):
    """Abstract database interface for the budgetit ledger."""

    @abstractmethod
    def connect(self) -> None:
        """Connect to the database."""
        pass

    @abstractmethod
    def disconnect(self) -> None:
        """Disconnect from the database."""
        pass

    @abstractmethod
    def initialize_schema(self) -> None:
        """Initialize database schema (create tables)."""
        pass

    @abstractmethod
    def unit_of_work(self) -> UnitOfWork:
        """Begin an explicit ledger transaction."""
        pass

    # Expense line operations
    @abstractmethod
    def create_expense_line(
        self,
        scenario_id: str,
        service_id: str,
        name: str,
        expense_type: str,
        status: str,
        amount_minor: int,
        currency: str = "USD",
        contract_id: Optional[str] = None,
        start_date: Optional[date] = None,
        end_date: Optional[date] = None,
        recurrence: Optional[RecurrenceRule] = None,
    ) -> int:
        """Create and commit an expense line. Returns expense line ID."""
        pass

    @abstractmethod
    def get_expense_line(self, expense_line_id: int) -> Optional[ExpenseLine]:
        """Get expense line by ID, including soft-deleted lines."""
        pass

    @abstractmethod
    def list_expense_lines(
        self, scenario_id: Optional[str] = None, include_deleted: bool = False
    ) -> list[ExpenseLine]:
        """List expense lines with their recurrence rules."""
        pass

    @abstractmethod
    def delete_expense_line(self, expense_line_id: int) -> None:
        """Soft-delete an expense line."""
        pass

    # Occurrence operations
    @abstractmethod
    def list_occurrences(self, scenario_id: str) -> list[Occurrence]:
        """List a scenario's occurrences ordered by date."""
        pass

    @abstractmethod
    def find_occurrence_candidates(
        self,
        scenario_id: str,
        service_id: str,
        amount_minor: int,
        currency: str,
        transaction_date: date,
        limit: int = 24,
    ) -> list[Occurrence]:
        """Find unmatched occurrences a spend transaction could settle.

        Candidates share scenario, service (through their expense line),
        amount, currency and calendar month with the transaction and have
        no spend transaction matched to them. Ordered by day distance from
        transaction_date, then by date.
        """
        pass

    # Spend transaction operations
    @abstractmethod
    def list_spend_transactions(self, scenario_id: Optional[str] = None) -> list[SpendTransaction]:
        """List spend transactions."""
        pass

    @abstractmethod
    def list_unmatched_spend_transactions(self, scenario_id: str) -> list[SpendTransaction]:
        """List a scenario's spend transactions with no matched occurrence."""
        pass
