"""Shared pytest fixtures for budgetit tests."""

import csv
import tempfile
import os
import pytest
import openpyxl

from budgetit.database.factories import create_sqlite_database
from budgetit.domain.actuals_import import ActualsImportService
from budgetit.domain.expense_import import ExpenseImportService
from budgetit.domain.forecast import ForecastService
from budgetit.domain.reconciliation import ReconciliationService

EXPENSE_HEADERS = [
    "scenario_id",
    "service_id",
    "name",
    "expense_type",
    "status",
    "amount",
    "currency",
    "start_date",
    "end_date",
    "frequency",
    "interval",
    "day_of_month",
    "month_of_year",
    "anchor_date",
]

ACTUAL_HEADERS = ["scenario_id", "service_id", "transaction_date", "amount", "currency", "description"]


@pytest.fixture
def temp_db():
    """Create a temporary database for testing."""
    # Create a temporary file for the database
    fd, db_path = tempfile.mkstemp(suffix=".db")
    os.close(fd)

    # Create database
    db = create_sqlite_database(database_path=db_path)
    # Store the path for tests that need it
    db.database_path = db_path
    db.connect()
    db.initialize_schema()

    yield db

    # Cleanup
    db.disconnect()
    if os.path.exists(db_path):
        os.unlink(db_path)


@pytest.fixture
def expense_service(temp_db):
    """Create an ExpenseImportService with a temporary database."""
    return ExpenseImportService(temp_db)


@pytest.fixture
def actuals_service(temp_db):
    """Create an ActualsImportService with a temporary database."""
    return ActualsImportService(temp_db)


@pytest.fixture
def reconciliation_service(temp_db):
    """Create a ReconciliationService with a temporary database."""
    return ReconciliationService(temp_db)


@pytest.fixture
def forecast_service(temp_db):
    """Create a ForecastService with a temporary database."""
    return ForecastService(temp_db)


@pytest.fixture
def template_store_path(tmp_path):
    """Return a path for a template store that does not exist yet."""
    return str(tmp_path / "templates" / "import-templates.json")


@pytest.fixture
def write_csv(tmp_path):
    """Return a helper that writes header + rows to a CSV file."""

    def _write(headers, rows, name="import.csv"):
        path = tmp_path / name
        with open(path, "w", newline="", encoding="utf-8") as f:
            writer = csv.writer(f, lineterminator="\n")
            writer.writerow(headers)
            writer.writerows(rows)
        return str(path)

    return _write


@pytest.fixture
def write_xlsx(tmp_path):
    """Return a helper that writes header + rows to the first sheet of an XLSX file."""

    def _write(headers, rows, name="import.xlsx"):
        path = tmp_path / name
        wb = openpyxl.Workbook()
        ws = wb.active
        ws.append(headers)
        for row in rows:
            ws.append(row)
        wb.save(path)
        return str(path)

    return _write


@pytest.fixture
def expense_row():
    """Return a helper that builds an expense CSV row in EXPENSE_HEADERS order."""

    def _row(**overrides):
        values = {
            "scenario_id": "scn-1",
            "service_id": "svc-monitoring",
            "name": "Monitoring",
            "expense_type": "one_time",
            "status": "committed",
            "amount": "$150",
            "currency": "USD",
            "start_date": "",
            "end_date": "",
            "frequency": "",
            "interval": "",
            "day_of_month": "",
            "month_of_year": "",
            "anchor_date": "",
        }
        values.update(overrides)
        return [values[h] for h in EXPENSE_HEADERS]

    return _row


@pytest.fixture
def cli_runner():
    """Create a Click CLI test runner."""
    from click.testing import CliRunner

    return CliRunner()
