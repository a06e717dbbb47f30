"""
CafeStaff Backend — Test Configuration (conftest.py)
======================================================

What:  Shared pytest fixtures for the entire test suite.
How:   Each test gets its own SQLite file database (aiosqlite) and its own
       logo storage directory under tmp_path, so transactions, foreign keys
       and rollbacks behave like they do in production.

Fixture Hierarchy (all function-scoped):
    ├── database:            Database on a fresh SQLite file, tables created
    ├── asset_store:         AssetStore rooted in tmp_path
    ├── clock:               FrozenClock the services read "now" from
    ├── employee_service / cafe_service / reporting_service
    ├── test_client:         HTTPX AsyncClient wired to a fresh app
    └── sample_image_bytes:  Minimal JPEG for logo uploads
"""

import os
import tempfile
from datetime import datetime, timedelta, timezone

# Override settings for testing BEFORE any cafestaff imports
os.environ["DATABASE_URL"] = "sqlite+aiosqlite:///./test.db"
os.environ["STORAGE_ROOT"] = tempfile.mkdtemp(prefix="cafestaff_test_")
os.environ["LOG_LEVEL"] = "WARNING"

import pytest
import pytest_asyncio
from httpx import ASGITransport, AsyncClient

from cafestaff.database import Database
from cafestaff.models import Cafe
from cafestaff.services.asset_store import AssetStore
from cafestaff.services.assignment_service import AssignmentService
from cafestaff.services.cafe_service import CafeService
from cafestaff.services.employee_service import EmployeeService
from cafestaff.services.reporting_service import ReportingService

T0 = datetime(2024, 3, 1, 9, 0, tzinfo=timezone.utc)


class FrozenClock:
    """Callable clock that only moves when a test advances it."""

    def __init__(self, now: datetime = T0):
        self.now = now

    def __call__(self) -> datetime:
        return self.now

    def advance(self, **kwargs) -> datetime:
        self.now = self.now + timedelta(**kwargs)
        return self.now


# ══════════════════════════════════════════════════════════════════════════
# Storage Fixtures
# ══════════════════════════════════════════════════════════════════════════

@pytest_asyncio.fixture
async def database(tmp_path):
    """
    A real database per test.

    Why a file (not :memory:): every session of an in-memory SQLite database
    would get its own empty database.
    """
    db = Database(f"sqlite+aiosqlite:///{tmp_path / 'cafestaff.db'}", echo=False)
    await db.create_all()
    yield db
    await db.dispose()


@pytest.fixture
def asset_store(tmp_path):
    return AssetStore(storage_root=str(tmp_path / "storage"))


@pytest.fixture
def clock():
    return FrozenClock()


# ══════════════════════════════════════════════════════════════════════════
# Service Fixtures
# ══════════════════════════════════════════════════════════════════════════

@pytest.fixture
def employee_service(database, clock):
    return EmployeeService(database, assignments=AssignmentService(), clock=clock)


@pytest.fixture
def cafe_service(database, asset_store):
    return CafeService(database, asset_store)


@pytest.fixture
def reporting_service(database, clock):
    return ReportingService(database, clock=clock)


@pytest.fixture
def add_cafe(database):
    """
    Insert a cafe row directly, with a chosen created_at.

    Usage:
        cafe_id = await add_cafe("Cafe A", location="Lahore", created_at=T0)
    """
    counter = {"n": 0}

    async def _add(name: str, location: str = "Lahore", created_at: datetime = None, logo=None) -> str:
        counter["n"] += 1
        cafe = Cafe(
            name=name,
            description=f"{name} description",
            location=location,
            logo=logo,
            created_at=created_at or T0 + timedelta(minutes=counter["n"]),
        )
        async with database.transaction() as session:
            session.add(cafe)
        return cafe.id

    return _add


# ══════════════════════════════════════════════════════════════════════════
# API Fixtures
# ══════════════════════════════════════════════════════════════════════════

@pytest_asyncio.fixture
async def test_client(database, asset_store):
    """
    HTTPX AsyncClient talking to a fresh app through ASGITransport.

    ASGITransport does not run the lifespan, so the collaborators it would
    open are placed on app.state here.
    """
    from cafestaff.main import create_app

    app = create_app()
    app.state.database = database
    app.state.asset_store = asset_store
    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as client:
        yield client


@pytest.fixture
def sample_image_bytes():
    """Smallest valid JPEG: SOI + JFIF header + EOI."""
    return (
        b'\xff\xd8\xff\xe0\x00\x10JFIF\x00\x01\x01\x00\x00\x01\x00\x01\x00\x00'
        b'\xff\xd9'
    )
