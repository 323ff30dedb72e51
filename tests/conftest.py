import sys, os, pathlib

ROOT = pathlib.Path(__file__).resolve().parents[1]
sys.path.insert(0, str(ROOT))

os.environ.setdefault("APP_ENV", "test")
os.environ["CARSHARE_DATA_PATH"] = ""

import pytest

from carshare import create_app
from carshare.models.store import Store


@pytest.fixture(autouse=True)
def fake_store(monkeypatch):
    """
    Provide a clean in-memory store for each test and make it the global
    instance, so services called without `store=` see the same object.
    """
    store = Store(None)
    monkeypatch.setattr(Store, "_inst", store)
    return store


@pytest.fixture
def make_vehicle(fake_store):
    """Factory writing a valid listing straight into the store."""
    counter = {"n": 0}

    def _make(**overrides):
        counter["n"] += 1
        record = {
            "car_name": "Honda City",
            "car_model": "City VX",
            "number_plate": f"KA-01-AB-{1000 + counter['n']}",
            "rc_number": "RC123",
            "fuel_type": "Petrol",
            "price_per_hour": 500.0,
            "insurance": "Comprehensive",
            "driving_notes": None,
            "owner_name": "Rajesh",
            "owner_contact": "+91-9876543210",
            "owner_email": "rajesh@example.com",
            "owner_license": "DL123",
            "car_image": None,
            "created_at": f"2024-01-{counter['n']:02d}T00:00:00.000Z",
        }
        record.update(overrides)
        return fake_store.create_vehicle(record)

    return _make


@pytest.fixture
def make_booking(fake_store):
    """Factory writing a booking straight into the store (no validation, no conflict check)."""

    def _make(car_id, start, end, status="pending", **overrides):
        record = {
            "car_id": car_id,
            "car_name": "Honda City",
            "renter_name": "Meera",
            "renter_email": "meera@example.com",
            "renter_phone": "+91-9000000001",
            "start_date": start,
            "end_date": end,
            "total_hours": 2,
            "total_price": 1000.0,
            "status": status,
            "created_at": "2024-02-01T00:00:00.000Z",
        }
        record.update(overrides)
        return fake_store.create_booking(record)

    return _make


@pytest.fixture
def booking_payload():
    """A valid booking request body for car 1; tweak per test."""

    def _payload(**overrides):
        body = {
            "car_id": 1,
            "car_name": "Honda City",
            "renter_name": "Meera Iyer",
            "renter_email": "meera@example.com",
            "renter_phone": "+91-9000000001",
            "start_date": "2030-01-10T10:00:00Z",
            "end_date": "2030-01-10T12:00:00Z",
            "total_hours": 2,
            "total_price": 1000,
        }
        body.update(overrides)
        return body

    return _payload


@pytest.fixture
def client(fake_store):
    """Flask test client bound to the in-memory store."""
    app = create_app({"TESTING": True}, store=fake_store)
    with app.test_client() as c:
        yield c
