"""Shared fixtures for DataCollections tests."""

import tempfile
from pathlib import Path
from typing import AsyncGenerator

import pytest
import pytest_asyncio

from tests.fixtures.sample_data import make_record

# Configure pytest-asyncio
pytest_plugins = ("pytest_asyncio",)


# ============================================================================
# Database Fixtures
# ============================================================================


@pytest_asyncio.fixture
async def temp_db_path() -> AsyncGenerator[Path, None]:
    """Create temporary database file."""
    with tempfile.TemporaryDirectory() as tmpdir:
        db_path = Path(tmpdir) / "test.db"
        yield db_path


@pytest_asyncio.fixture
async def test_database(temp_db_path: Path):
    """Initialized test database."""
    from datacollections.database.connection import Database

    db = Database(temp_db_path)
    await db.connect()
    yield db
    await db.close()


@pytest_asyncio.fixture
async def record_store(test_database):
    """RecordStore over the test database."""
    from datacollections.store.record_store import RecordStore

    return RecordStore(test_database)


# ============================================================================
# Configuration Fixtures
# ============================================================================


@pytest.fixture
def test_config(temp_db_path):
    """Complete test Config."""
    from datacollections.config import AppSettings, Config, StoreConfig

    return Config(
        store=StoreConfig(db_path=temp_db_path, reports_dir=temp_db_path.parent / "reports"),
        settings=AppSettings(),
    )


# ============================================================================
# Maintenance Fixtures
# ============================================================================


@pytest.fixture
def temp_reports_dir():
    """Temporary reports directory."""
    with tempfile.TemporaryDirectory() as tmpdir:
        yield Path(tmpdir)


@pytest.fixture
def maintenance_progress(temp_reports_dir):
    """MaintenanceProgress with temporary file."""
    from datacollections.maintenance.progress import MaintenanceProgress

    return MaintenanceProgress(temp_reports_dir / "maintenance_status.json")


@pytest_asyncio.fixture
async def maintenance_service(record_store, maintenance_progress, test_database):
    """MaintenanceService over the test store."""
    from datacollections.maintenance.service import MaintenanceService

    return MaintenanceService(store=record_store, progress=maintenance_progress, db=test_database)


# ============================================================================
# Sample Data Fixtures
# ============================================================================


@pytest.fixture
def scenario_records():
    """Two rows for article 100 and one unparseable row for article 200."""
    return [
        make_record("A", "B1", "S1", "100", NetAmount="10"),
        make_record("A", "B1", "S1", "100", NetAmount="5.5"),
        make_record("A", "B1", "S1", "200", NetAmount="abc"),
    ]


@pytest.fixture
def sample_records():
    """Mixed sales rows: duplicates, other branches, garbage measures."""
    return [
        make_record(
            "FOOD", "North", "Acme", "A-1",
            NetSlsQty="2", NetAmount="20.5", NetSlsCostValue="12", SlsExtCostValue="1",
            Description="Crackers",
        ),
        make_record(
            "FOOD", "North", "Acme", "A-1",
            NetSlsQty=3, NetAmount=30, NetSlsCostValue="18", SlsExtCostValue=None,
            Description="Crackers (late posting)",
        ),
        make_record(
            "FOOD", "South", "Acme", "A-1",
            NetSlsQty="1", NetAmount="10", NetSlsCostValue="6", SlsExtCostValue="0.5",
        ),
        make_record(
            "DRINK", "North", "Fizz", "D-7",
            NetSlsQty="n/a", NetAmount="", NetSlsCostValue="4", SlsExtCostValue="2",
        ),
        make_record(
            None, "North", "Fizz", "D-7",
            NetSlsQty="5", NetAmount="50", NetSlsCostValue="25", SlsExtCostValue="5",
        ),
        make_record(
            "", "North", "Fizz", "D-7",
            NetSlsQty="1", NetAmount="10", NetSlsCostValue="5", SlsExtCostValue="1",
        ),
    ]
