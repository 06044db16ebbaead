"""SQLAlchemy models for budgetit database."""

from datetime import datetime, UTC
from sqlalchemy import (
    Column,
    Integer,
    String,
    ForeignKey,
    DateTime,
    Date,
    create_engine,
)
from sqlalchemy.orm import declarative_base, relationship, sessionmaker, Session

Base = declarative_base()


class ExpenseLine(Base):
    """Planned expense line model."""

    __tablename__ = "expense_lines"

    id = Column(Integer, primary_key=True)
    scenario_id = Column(String, nullable=False, index=True)
    service_id = Column(String, nullable=False)
    contract_id = Column(String, nullable=True)
    name = Column(String, nullable=False)
    expense_type = Column(String, nullable=False)
    status = Column(String, nullable=False)
    amount_minor = Column(Integer, nullable=False)
    currency = Column(String, nullable=False)
    start_date = Column(Date, nullable=True)
    end_date = Column(Date, nullable=True)
    created_at = Column(DateTime, default=lambda: datetime.now(UTC), nullable=False)
    deleted_at = Column(DateTime, nullable=True)

    # Relationships
    recurrence_rule = relationship(
        "RecurrenceRule", back_populates="expense_line", uselist=False, cascade="all, delete-orphan"
    )
    occurrences = relationship("Occurrence", back_populates="expense_line", cascade="all, delete-orphan")


class RecurrenceRule(Base):
    """Recurrence rule model, one per recurring expense line."""

    __tablename__ = "recurrence_rules"

    id = Column(Integer, primary_key=True)
    expense_line_id = Column(Integer, ForeignKey("expense_lines.id"), nullable=False, unique=True)
    frequency = Column(String, nullable=False)
    interval = Column(Integer, nullable=False)
    day_of_month = Column(Integer, nullable=True)
    month_of_year = Column(Integer, nullable=True)
    anchor_date = Column(Date, nullable=True)
    created_at = Column(DateTime, default=lambda: datetime.now(UTC), nullable=False)

    # Relationships
    expense_line = relationship("ExpenseLine", back_populates="recurrence_rule")


class Occurrence(Base):
    """Materialized occurrence of a recurring expense line."""

    __tablename__ = "occurrences"

    id = Column(Integer, primary_key=True)
    scenario_id = Column(String, nullable=False, index=True)
    expense_line_id = Column(Integer, ForeignKey("expense_lines.id"), nullable=False)
    occurrence_date = Column(Date, nullable=False)
    amount_minor = Column(Integer, nullable=False)
    currency = Column(String, nullable=False)
    state = Column(String, default="forecast", nullable=False)
    created_at = Column(DateTime, default=lambda: datetime.now(UTC), nullable=False)

    # Relationships
    expense_line = relationship("ExpenseLine", back_populates="occurrences")


class SpendTransaction(Base):
    """Actual spend transaction model."""

    __tablename__ = "spend_transactions"

    id = Column(Integer, primary_key=True)
    scenario_id = Column(String, nullable=False, index=True)
    service_id = Column(String, nullable=False)
    contract_id = Column(String, nullable=True)
    transaction_date = Column(Date, nullable=False)
    amount_minor = Column(Integer, nullable=False)
    currency = Column(String, nullable=False)
    description = Column(String, nullable=True)
    matched_occurrence_id = Column(Integer, ForeignKey("occurrences.id"), nullable=True)
    created_at = Column(DateTime, default=lambda: datetime.now(UTC), nullable=False)


def create_session_factory(database_url: str) -> sessionmaker[Session]:
    """Create a SQLAlchemy session factory."""
    engine = create_engine(database_url, echo=False)
    Base.metadata.create_all(engine)
    return sessionmaker(bind=engine)
