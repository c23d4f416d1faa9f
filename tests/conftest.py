import os

os.environ["DATABASE_URL"] = "sqlite://"
os.environ["SMTP_HOST"] = ""

import itertools
from datetime import timedelta
from decimal import Decimal

import fakeredis
import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine, select
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from marketplace.api import create_app
from marketplace.api.deps import get_gateway, get_lock_service
from marketplace.celery_worker import celery_app
from marketplace.data import models  # noqa: F401
from marketplace.data.database import Base, get_db
from marketplace.data.models import (
    InventoryModel,
    PricingModel,
    ProductModel,
    UserModel,
    VendorModel,
)
from marketplace.services.cart_service import CartService
from marketplace.services.checkout_service import CheckoutService
from marketplace.services.lock_service import LockService
from marketplace.services.payment_gateway import PaymentGatewayClient, compute_signature
from marketplace.utils.clock import utcnow
from marketplace.utils.money import to_minor_units

celery_app.conf.task_always_eager = True

_ids = itertools.count(1)


class FakeGateway(PaymentGatewayClient):
    """Bramka w pamieci: zamowienia i platnosci bez HTTP."""

    def __init__(self):
        super().__init__(
            base_url="https://gateway.invalid/v1",
            key_id="rzp_test_key",
            key_secret="test_secret",
            currency="INR",
        )
        self.orders = {}
        self.payments = {}

    def create_order(self, amount, receipt):
        order_id = f"order_{len(self.orders) + 1}"
        self.orders[order_id] = {
            "id": order_id,
            "amount": to_minor_units(amount),
            "currency": self.currency,
            "receipt": receipt,
            "status": "created",
        }
        return self.orders[order_id]

    def fetch_payment(self, payment_id):
        return self.payments[payment_id]

    def pay(self, order_id, payment_id="pay_1", amount=None, status="captured"):
        """Symuluje platnosc klienta, zwraca podpis callbacku."""
        self.payments[payment_id] = {
            "id": payment_id,
            "order_id": order_id,
            "amount": self.orders[order_id]["amount"] if amount is None else amount,
            "status": status,
        }
        return compute_signature(self.key_secret, order_id, payment_id)


class RecordingNotifications:
    def __init__(self):
        self.sent = []

    def send_order_confirmation(self, email, name, order_numbers):
        self.sent.append((email, name, list(order_numbers)))
        return True


@pytest.fixture
def engine():
    engine = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    Base.metadata.create_all(bind=engine)
    yield engine
    Base.metadata.drop_all(bind=engine)
    engine.dispose()


@pytest.fixture
def db(engine):
    session = sessionmaker(autocommit=False, autoflush=False, bind=engine)()
    try:
        yield session
    finally:
        session.close()


@pytest.fixture
def gateway():
    return FakeGateway()


@pytest.fixture
def lock_service():
    return LockService(client=fakeredis.FakeRedis(decode_responses=True))


@pytest.fixture
def notifications():
    return RecordingNotifications()


@pytest.fixture
def checkout_service(db, gateway, lock_service, notifications):
    return CheckoutService(db, gateway=gateway, lock_service=lock_service, notifications=notifications)


@pytest.fixture
def client(db, gateway, lock_service):
    app = create_app()

    def override_get_db():
        yield db

    app.dependency_overrides[get_db] = override_get_db
    app.dependency_overrides[get_gateway] = lambda: gateway
    app.dependency_overrides[get_lock_service] = lambda: lock_service

    with TestClient(app) as c:
        yield c


# ---------- factories ----------

@pytest.fixture
def make_user(db):
    def _make(name="Customer", role="CUSTOMER"):
        n = next(_ids)
        user = UserModel(name=f"{name} {n}", email=f"user{n}@example.com", role=role)
        db.add(user)
        db.commit()
        return user

    return _make


@pytest.fixture
def make_vendor(db, make_user):
    def _make(company_name="Rent Co"):
        user = make_user(name="Vendor", role="VENDOR")
        vendor = VendorModel(user_id=user.id, company_name=company_name)
        db.add(vendor)
        db.commit()
        return vendor

    return _make


@pytest.fixture
def make_product(db):
    def _make(vendor, price="100.00", qty=5, unit="DAY", published=True, name="Camera"):
        product = ProductModel(
            vendor_id=vendor.id,
            name=name,
            category="electronics",
            is_published=published,
            inventory=InventoryModel(total_qty=qty, available_qty=qty),
            pricing=[PricingModel(unit=unit, price=Decimal(price))],
        )
        db.add(product)
        db.commit()
        return product

    return _make


@pytest.fixture
def rental_window():
    """Dwa pelne dni od jutra 10:00 UTC."""
    def _window(days=2):
        start = (utcnow() + timedelta(days=1)).replace(hour=10, minute=0, second=0, microsecond=0)
        return start, start + timedelta(days=days)

    return _window


@pytest.fixture
def add_to_cart(db, rental_window):
    def _add(user, product, quantity=1, days=2):
        start, end = rental_window(days)
        return CartService(db).add_item(user.id, product.id, quantity, start, end)

    return _add


@pytest.fixture
def stock(db):
    def _stock(product_id):
        return db.execute(
            select(InventoryModel.available_qty).where(InventoryModel.product_id == product_id)
        ).scalar_one()

    return _stock
