"""Shared pytest fixtures: in-memory sqlite, eager celery, fake checkout lock."""

import itertools
import os
from decimal import Decimal

# must be set before anything from app is imported
os.environ["DATABASE_URL"] = "sqlite://"
os.environ["CELERY_TASK_ALWAYS_EAGER"] = "true"

import pytest
from fastapi.testclient import TestClient

from app.api.deps import get_lock_service
from app.data.database import Base, SessionLocal, engine
from app.data.models import ProductModel, UserModel
from app.domain.schemas import CheckoutIn, OrderCheckoutIn
from app.main import app


class FakeLockService:
    """In-process replacement for the redis checkout lock."""

    def __init__(self):
        self.held = {}
        self.released = []

    def acquire_checkout_lock(self, user_id, ttl):
        if user_id in self.held:
            return None
        token = f"token-{user_id}"
        self.held[user_id] = token
        return token

    def release_checkout_lock(self, user_id, token):
        self.released.append(user_id)
        if self.held.get(user_id) == token:
            del self.held[user_id]
            return True
        return False


class RecordingNotifications:
    def __init__(self):
        self.sent = []

    def send_order_notification(self, user_id, order_id):
        self.sent.append(("order", user_id, order_id))

    def send_sale_notification(self, seller_id, purchase_id):
        self.sent.append(("sale", seller_id, purchase_id))

    def send_status_notification(self, user_id, kind, record_id, status):
        self.sent.append(("status", user_id, kind, record_id, status))


ADDRESS = {
    "street": "12 MG Road",
    "city": "Pune",
    "state": "Maharashtra",
    "pincode": "411001",
}


def checkout_data(**overrides):
    data = {
        "address": dict(ADDRESS),
        "location": "Near the clock tower",
        "payment_method": "Cash on Delivery",
    }
    data.update(overrides)
    return data


@pytest.fixture(autouse=True)
def schema():
    Base.metadata.drop_all(bind=engine)
    Base.metadata.create_all(bind=engine)
    yield


@pytest.fixture
def db():
    session = SessionLocal()
    try:
        yield session
    finally:
        session.close()


@pytest.fixture
def lock_service():
    return FakeLockService()


@pytest.fixture
def notifications():
    return RecordingNotifications()


@pytest.fixture
def client(lock_service):
    app.dependency_overrides[get_lock_service] = lambda: lock_service
    with TestClient(app) as c:
        yield c
    app.dependency_overrides.clear()


@pytest.fixture
def make_user(db):
    counter = itertools.count(1)

    def _make(username=None):
        n = next(counter)
        user = UserModel(username=username or f"user{n}", email=f"user{n}@example.com")
        db.add(user)
        db.commit()
        db.refresh(user)
        return user

    return _make


@pytest.fixture
def make_product(db):
    def _make(seller, title="Item", price="10.00", is_available=True, category="Other"):
        product = ProductModel(
            seller_id=seller.id,
            title=title,
            description=f"{title} description",
            category=category,
            condition="Good",
            price=Decimal(price),
            images=[],
            tags=[],
            is_available=is_available,
            views=0,
        )
        db.add(product)
        db.commit()
        db.refresh(product)
        return product

    return _make


@pytest.fixture
def order_checkout():
    def _make(**overrides):
        return OrderCheckoutIn(**checkout_data(**overrides))

    return _make


@pytest.fixture
def purchase_checkout():
    def _make(**overrides):
        return CheckoutIn(**checkout_data(**overrides))

    return _make
