"""Shared pytest fixtures for pnlkit tests."""

import logging
import tempfile
import os
from decimal import Decimal
from pathlib import Path
import pytest

from pnlkit.database.factories import create_sqlite_database
from pnlkit.domain.aggregation_service import AggregationService
from pnlkit.domain.entities import LineItem
from pnlkit.domain.ledger_import import LedgerImportService


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


@pytest.fixture(autouse=True)
def reset_pnlkit_logger():
    """Drop handlers the CLI attached to captured streams."""
    yield
    logger = logging.getLogger("pnlkit")
    logger.handlers.clear()
    logger.propagate = True
    logger.setLevel(logging.NOTSET)


@pytest.fixture
def aggregation_service(temp_db):
    """Create an AggregationService with a temporary database."""
    return AggregationService(temp_db, max_workers=2, page_size=2)


@pytest.fixture
def import_service(temp_db):
    """Create a LedgerImportService with a temporary database."""
    return LedgerImportService(temp_db)


@pytest.fixture
def make_item():
    """Build line items for one scope with sensible defaults."""

    def _make(
        category: str,
        amount,
        subcategory: str | None = None,
        gl_account: str | None = "Bedrijfsopbrengsten",
        import_id: str | None = None,
        location_id: str = "amsterdam",
        year: int = 2025,
        month: int = 3,
    ) -> LineItem:
        return LineItem(
            location_id=location_id,
            year=year,
            month=month,
            category=category,
            subcategory=subcategory,
            gl_account=gl_account,
            amount=amount if isinstance(amount, Decimal) else Decimal(str(amount)),
            import_id=import_id,
        )

    return _make


@pytest.fixture
def scenario_items(make_item):
    """Produced goods parent and detail rows, a duplicate and cost of sales."""
    produced = "Netto-omzet uit leveringen geproduceerde goederen"
    return [
        make_item(produced, "1500", import_id="a"),
        make_item(produced, "500", subcategory="Omzet diner (btw laag)", import_id="a"),
        make_item(produced, "500", subcategory="Omzet diner (btw laag)", import_id="b"),
        make_item(
            "Kostprijs van de omzet",
            "-300",
            subcategory="Inkopen keuken (btw laag)",
            gl_account="Bedrijfslasten",
            import_id="a",
        ),
    ]


@pytest.fixture
def cli_runner():
    """Create a Click CLI test runner."""
    from click.testing import CliRunner

    return CliRunner()


@pytest.fixture
def fixtures_dir():
    """Return the path to the test fixtures directory."""
    return Path(__file__).parent / "fixtures"
