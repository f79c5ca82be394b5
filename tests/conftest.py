"""Shared pytest fixtures for dentbooks tests."""

import logging
import os
import tempfile
from pathlib import Path

import pytest
import structlog

from dentbooks.database.factories import create_sqlite_database
from dentbooks.domain.category import CategoryService
from dentbooks.domain.csv_import import CSVImportService
from dentbooks.domain.practice import PracticeService
from dentbooks.domain.production import ProductionService
from dentbooks.domain.reconciliation import ReconciliationService
from dentbooks.domain.report import ReportService
from dentbooks.domain.settings import SettingService
from dentbooks.domain.tax_planning import TaxPlanningService
from dentbooks.domain.transaction import TransactionService


@pytest.fixture(autouse=True)
def restore_logging():
    """Undo logging configuration done by CLI invocations."""
    root = logging.getLogger()
    handlers, level = root.handlers[:], root.level
    yield
    root.handlers = handlers
    root.setLevel(level)
    structlog.reset_defaults()


@pytest.fixture
def temp_db():
    """Create a temporary database for testing."""
    fd, db_path = tempfile.mkstemp(suffix=".db")
    os.close(fd)

    db = create_sqlite_database(database_path=db_path)
    # Store the path for tests that drive the CLI
    db.database_path = db_path
    db.connect()
    db.initialize_schema()

    yield db

    db.disconnect()
    if os.path.exists(db_path):
        os.unlink(db_path)


@pytest.fixture
def category_service(temp_db):
    return CategoryService(temp_db)


@pytest.fixture
def practice_service(temp_db):
    return PracticeService(temp_db)


@pytest.fixture
def transaction_service(temp_db):
    return TransactionService(temp_db)


@pytest.fixture
def csv_service(temp_db):
    return CSVImportService(temp_db)


@pytest.fixture
def reconciliation_service(temp_db):
    return ReconciliationService(temp_db)


@pytest.fixture
def production_service(temp_db):
    return ProductionService(temp_db)


@pytest.fixture
def report_service(temp_db):
    return ReportService(temp_db)


@pytest.fixture
def tax_service(temp_db):
    return TaxPlanningService(temp_db)


@pytest.fixture
def setting_service(temp_db):
    return SettingService(temp_db)


@pytest.fixture
def sample_categories(category_service):
    """Seed the default categories and return a name to ID map."""
    category_service.seed_defaults()
    return {c.name: c.id for c in category_service.list_categories()}


@pytest.fixture
def sample_practice(practice_service):
    """Create a sample practice for testing."""
    practice_id = practice_service.create_practice(
        name="Smile Dental", city="Austin", state="TX"
    )
    return practice_service.get_practice(practice_id)


@pytest.fixture
def other_practice(practice_service):
    practice_id = practice_service.create_practice(name="Bright Smiles")
    return practice_service.get_practice(practice_id)


@pytest.fixture
def cli_runner():
    """Create a Click CLI test runner."""
    from click.testing import CliRunner

    return CliRunner()


@pytest.fixture
def fixtures_dir():
    """Return the path to the test fixtures directory."""
    return Path(__file__).parent / "fixtures"
