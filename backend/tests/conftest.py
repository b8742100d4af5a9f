# backend/tests/conftest.py
import os

# Must be set before tourbooking.config is imported
os.environ["DATABASE_URL"] = "sqlite://"
os.environ["REDIS_URL"] = "redis://localhost:6379/15"
os.environ["ENABLE_BACKGROUND_JOBS"] = "false"
os.environ["SKIP_PAYMENT"] = "false"

from datetime import date
from unittest.mock import MagicMock

import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

import tourbooking.main as main_module
import tourbooking.services.events as events_module
from tourbooking.database import get_db, init_db
from tourbooking.models.generated import Holidays, TourInstances, Tours

MONDAY = date(2024, 1, 1)
SUNDAY = date(2024, 1, 7)


@pytest.fixture
def engine():
    engine = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    init_db(bind=engine)
    yield engine
    engine.dispose()


@pytest.fixture
def db(engine):
    TestingSession = sessionmaker(bind=engine, autocommit=False, autoflush=False)
    session = TestingSession()
    try:
        yield session
    finally:
        session.close()


@pytest.fixture(autouse=True)
def redis_mock(monkeypatch: pytest.MonkeyPatch):
    """Replace the shared Redis client; no server is needed in tests."""
    mock = MagicMock()
    mock.ping.return_value = True
    monkeypatch.setattr(events_module, "redis_client", mock)
    monkeypatch.setattr(main_module, "redis_client", mock)
    return mock


@pytest.fixture
def client(db):
    def _override_get_db():
        yield db

    main_module.app.dependency_overrides[get_db] = _override_get_db
    client = TestClient(main_module.app)
    try:
        yield client
    finally:
        client.close()
        main_module.app.dependency_overrides.clear()


@pytest.fixture
def make_tour(db):
    def _make_tour(**overrides) -> Tours:
        fields = {
            "name": "Vineyard walk",
            "tour_type": "Standard",
            "base_price": 100.0,
            "min_attendants": 1,
            "max_attendants": 10,
            "duration_minutes": 60,
            "buffer_minutes": 60,
            "earliest_hour": "09:00:00",
            "latest_hour": "17:00:00",
            "is_active": 1,
        }
        fields.update(overrides)
        tour = Tours(**fields)
        db.add(tour)
        db.commit()
        db.refresh(tour)
        return tour

    return _make_tour


@pytest.fixture
def make_instance(db):
    def _make_instance(
        tour: Tours,
        start_time: str,
        current_attendants: int = 0,
        instance_date: date = MONDAY,
        status: str = "active",
        is_exclusive: bool | None = None,
    ) -> TourInstances:
        if is_exclusive is None:
            is_exclusive = tour.tour_type in ("Special", "option_3")
        instance = TourInstances(
            tour_id=tour.id,
            instance_date=instance_date.isoformat(),
            start_time=start_time,
            current_attendants=current_attendants,
            status=status,
            is_exclusive=1 if is_exclusive else 0,
        )
        db.add(instance)
        db.commit()
        db.refresh(instance)
        return instance

    return _make_instance


@pytest.fixture
def make_holiday(db):
    def _make_holiday(holiday_date: date, description: str = "Holiday") -> Holidays:
        holiday = Holidays(holiday_date=holiday_date.isoformat(), description=description)
        db.add(holiday)
        db.commit()
        db.refresh(holiday)
        return holiday

    return _make_holiday
