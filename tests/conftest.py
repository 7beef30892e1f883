"""Shared pytest fixtures for feerecon tests."""

import tempfile
import os
from datetime import date
from decimal import Decimal
from pathlib import Path
import pytest

from feerecon.database.factories import create_sqlite_database
from feerecon.domain.invoice import InvoiceService
from feerecon.domain.mapping_profile import MappingProfileService
from feerecon.domain.statement_import import StatementImportService


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
def invoice_service(temp_db):
    """Create an InvoiceService with a temporary database."""
    return InvoiceService(temp_db)


@pytest.fixture
def profile_service(temp_db):
    """Create a MappingProfileService with a temporary database."""
    return MappingProfileService(temp_db)


@pytest.fixture
def import_service(temp_db):
    """Create a StatementImportService with a temporary database."""
    return StatementImportService(temp_db)


@pytest.fixture
def sample_holder(invoice_service):
    """Create a sample account holder."""
    holder_id = invoice_service.create_account_holder("John", "Smith", student_number="1234567")
    return invoice_service.get_account_holder(holder_id)


@pytest.fixture
def seeded_ledger(invoice_service, sample_holder):
    """Open invoices used across reconciliation tests.

    Returns a dict of reference -> invoice ID.
    """
    return {
        "HAR149": invoice_service.create_invoice("HAR149", Decimal("2500.00"), date(2024, 1, 31)),
        "HAR020": invoice_service.create_invoice("HAR020", Decimal("1200.00"), date(2024, 2, 28)),
        "HAR300": invoice_service.create_invoice(
            "HAR300", Decimal("800.00"), date(2024, 3, 31), account_holder_id=sample_holder.id
        ),
    }


@pytest.fixture
def cli_runner():
    """Create a Click CLI test runner."""
    from click.testing import CliRunner

    return CliRunner()


@pytest.fixture
def fixtures_dir():
    """Return the path to the test fixtures directory."""
    return Path(__file__).parent / "fixtures"
