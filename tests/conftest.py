"""
Shared test fixtures: SQLite test database, test client, sample inputs.
"""

import os
import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker

# Set DATABASE_URL before importing app modules
os.environ["DATABASE_URL"] = "sqlite:///./test.db"

from fm200.calculators.sizing import RoomInput
from fm200.database import Base, get_db
from fm200.main import app
from fm200.price_loader import DEFAULT_EXCHANGE_RATES, DEFAULT_PRICES
from fm200.pricing_engine import ExchangeRateTable, PriceTable


TEST_DATABASE_URL = "sqlite:///./test.db"
engine = create_engine(TEST_DATABASE_URL, connect_args={"check_same_thread": False})
TestingSessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)


def override_get_db():
    db = TestingSessionLocal()
    try:
        yield db
    finally:
        db.close()


app.dependency_overrides[get_db] = override_get_db


@pytest.fixture(autouse=True)
def setup_database():
    """Create all tables before each test, drop after."""
    Base.metadata.create_all(bind=engine)
    yield
    Base.metadata.drop_all(bind=engine)


@pytest.fixture
def client():
    """FastAPI test client."""
    return TestClient(app)


@pytest.fixture
def db():
    """Direct database session for test setup/assertions."""
    session = TestingSessionLocal()
    try:
        yield session
    finally:
        session.close()


@pytest.fixture
def server_room():
    """10m × 8m × 4m server room: the reference scenario."""
    return RoomInput(
        length=10.0,
        width=8.0,
        height=4.0,
        equipment_volume=0.0,
        design_temperature=20.0,
        altitude=0.0,
        safety_factor=1.07,
        concentration_percent=7.0,
        cylinder_unit_size=54.4,
    )


@pytest.fixture
def server_room_fields():
    """The reference scenario as raw form values."""
    return {
        "length": "10",
        "width": "8",
        "height": "4",
        "equipment_volume": "0",
        "design_temperature": "20",
        "altitude": "0",
        "safety_factor": "1.07",
        "concentration_percent": "7",
        "cylinder_unit_size": "54.4",
    }


@pytest.fixture
def prices():
    return PriceTable.from_mapping(DEFAULT_PRICES)


@pytest.fixture
def exchange_rates():
    return ExchangeRateTable.from_mapping(DEFAULT_EXCHANGE_RATES)
