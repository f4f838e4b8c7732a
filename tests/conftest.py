import os

# Settings are read once; point them at an in-memory database before the app is imported
os.environ["DATABASE_URL"] = "sqlite://"
os.environ["RUN_MIGRATIONS"] = "false"
os.environ.setdefault("LOG_LEVEL", "WARNING")

from datetime import date, timedelta
from itertools import count

import pytest
from fastapi.testclient import TestClient
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from tailorshop.domain.models import Base
from tailorshop.infrastructure import db as db_module
from tailorshop.infrastructure.db import build_engine, get_db
from tailorshop.main import app

_phones = count(3001000000)


@pytest.fixture
def engine(monkeypatch):
    """Fresh in-memory database per test, shared by every session through one connection."""
    engine = build_engine("sqlite://", poolclass=StaticPool)
    Base.metadata.create_all(engine)
    # Health checks resolve the engine at request time
    monkeypatch.setattr(db_module, "engine", engine)
    yield engine
    engine.dispose()


@pytest.fixture
def session_factory(engine):
    return sessionmaker(bind=engine, autoflush=False, autocommit=False, expire_on_commit=False)


@pytest.fixture
def db(session_factory):
    session = session_factory()
    yield session
    session.close()


@pytest.fixture
def client(session_factory):
    def override_get_db():
        session = session_factory()
        try:
            yield session
        finally:
            session.close()

    app.dependency_overrides[get_db] = override_get_db
    yield TestClient(app)
    app.dependency_overrides.clear()


def _next_phone() -> str:
    return f"+{next(_phones)}"


@pytest.fixture
def unique_phone():
    return _next_phone


@pytest.fixture
def make_customer(client):
    def _make(name="Ahmed Raza", phone=None, address=None):
        payload = {"name": name, "phone": phone or _next_phone()}
        if address is not None:
            payload["address"] = address
        resp = client.post("/api/customers", json=payload)
        assert resp.status_code == 201, resp.text
        return resp.json()
    return _make


@pytest.fixture
def make_measurement(client):
    def _make(customer_id, name="Wedding suit", is_default=False, **values):
        payload = {"customer_id": customer_id, "name": name, "is_default": is_default, **values}
        resp = client.post("/api/measurements", json=payload)
        assert resp.status_code == 201, resp.text
        return resp.json()
    return _make


@pytest.fixture
def make_order(client):
    def _make(customer_id, total=1000, advance=0, booking=None, delivery=None, **extra):
        booking = booking or date.today()
        delivery = delivery or booking + timedelta(days=14)
        payload = {
            "customerId": customer_id,
            "bookingDate": booking.isoformat(),
            "deliveryDate": delivery.isoformat(),
            "totalAmount": total,
            "advancePaid": advance,
            **extra,
        }
        resp = client.post("/api/orders", json=payload)
        assert resp.status_code == 201, resp.text
        return resp.json()
    return _make


@pytest.fixture
def make_payment(client):
    def _make(order_id, amount, **extra):
        resp = client.post("/api/payments", json={"order_id": order_id, "amount": amount, **extra})
        assert resp.status_code == 201, resp.text
        return resp.json()
    return _make
