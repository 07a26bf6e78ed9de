"""
Centralized Test Configuration.
"""

import os

# Must be set before the app (and its settings) are imported
os.environ.setdefault("DATABASE_URL", "sqlite+aiosqlite:///:memory:")
os.environ.setdefault("BCRYPT_ROUNDS", "4")
os.environ.setdefault("LOG_LEVEL", "WARNING")

import pytest
from httpx import AsyncClient, ASGITransport
from sqlalchemy import event
from sqlalchemy.ext.asyncio import create_async_engine, async_sessionmaker, AsyncSession
from sqlalchemy.pool import Pool, StaticPool

from ridehail_backend.app.main import app
from ridehail_backend.app.db.session import get_db, Base
from ridehail_backend.app.core.security import get_password_hash
from ridehail_backend.app.models.driver import Driver
from ridehail_backend.app.models.booking import Booking
from ridehail_backend.app.models.rider import Rider
from ridehail_backend.app.models.audit_log import AuditLog  # noqa: F401 (registers table)
from ridehail_backend.app.models.enums import DriverStatus, BookingStatus

# Setup In-Memory Test Database
TEST_DATABASE_URL = "sqlite+aiosqlite:///:memory:"


@event.listens_for(Pool, "connect")
def set_sqlite_pragma(dbapi_conn, connection_record):
    """Enable foreign key constraints for SQLite."""
    if 'sqlite' in str(type(dbapi_conn)).lower():
        cursor = dbapi_conn.cursor()
        cursor.execute("PRAGMA foreign_keys=ON")
        cursor.close()


engine = create_async_engine(
    TEST_DATABASE_URL,
    connect_args={"check_same_thread": False},
    poolclass=StaticPool,
)

TestingSessionLocal = async_sessionmaker(
    engine, class_=AsyncSession, expire_on_commit=False
)


@pytest.fixture(autouse=True)
async def setup_database():
    """Create tables and route the app to the test database for each test."""
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    async def override_get_db():
        async with TestingSessionLocal() as session:
            yield session

    app.dependency_overrides[get_db] = override_get_db

    yield

    app.dependency_overrides = {}
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.drop_all)


@pytest.fixture
async def client():
    """Async client for testing."""
    async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as ac:
        yield ac


# Shared session for fixture data creation
@pytest.fixture
async def db_session():
    async with TestingSessionLocal() as session:
        yield session


@pytest.fixture
async def rider(db_session):
    rider = Rider(name="Asha Rider", email="asha@test.com")
    db_session.add(rider)
    await db_session.commit()
    await db_session.refresh(rider)
    return rider


@pytest.fixture
def make_driver(db_session):
    """Factory inserting a driver straight into the database."""
    async def _make(email="driver@test.com", vehicle_type="car", is_available=True,
                    status=DriverStatus.IDLE, password="password123"):
        driver = Driver(
            name=email.split("@")[0],
            email=email,
            hashed_password=get_password_hash(password),
            vehicle_type=vehicle_type,
            is_available=is_available,
            status=status,
            location={"type": "Point", "coordinates": [0.0, 0.0]}
        )
        db_session.add(driver)
        await db_session.commit()
        await db_session.refresh(driver)
        return driver
    return _make


@pytest.fixture
def make_booking(db_session, rider):
    """Factory inserting a booking as the booking-creation flow would."""
    async def _make(status=BookingStatus.PENDING, driver_id=None, vehicle_type="car", estimated_price=12.5):
        booking = Booking(
            user_id=rider.id,
            driver_id=driver_id,
            status=status,
            pickup_location={"type": "Point", "coordinates": [77.59, 12.97]},
            dropoff_location={"type": "Point", "coordinates": [77.64, 12.93]},
            vehicle_type=vehicle_type,
            estimated_price=estimated_price
        )
        db_session.add(booking)
        await db_session.commit()
        await db_session.refresh(booking)
        return booking
    return _make


@pytest.fixture
def session_factory():
    """Independent sessions on the test database, e.g. one per simulated request."""
    return TestingSessionLocal
