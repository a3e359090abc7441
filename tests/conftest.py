"""Pytest fixtures for storefront tests."""

from datetime import timedelta

import pytest
from fastapi.testclient import TestClient
from sqlmodel import Session

from storefront.config import Settings
from storefront.main import create_app
from storefront.models import utcnow
from storefront.services.identity import IdentityService
from storefront.services.notifications import Notifier
from storefront.services.orders import OrderService
from storefront.utils.db import build_engine, create_tables
from storefront.utils.security import PasswordHasher, TokenService

PASSWORD = "Passw0rd"


class FakeClock:
    """Callable clock the tests can move forward or backward."""

    def __init__(self):
        self.now = utcnow()

    def __call__(self):
        return self.now

    def advance(self, **kwargs):
        self.now += timedelta(**kwargs)


class RecordingNotifier(Notifier):
    """Keeps every message in memory instead of sending it."""

    def __init__(self, settings):
        super().__init__(settings)
        self.codes = {}
        self.sent = []
        self.fail_verification = False
        self.fail_orders = False

    def send_verification_code(self, email, code, expiry_minutes):
        if self.fail_verification:
            raise ConnectionError("SMTP server unavailable")
        self.codes.setdefault(email, []).append(code)

    def last_code(self, email):
        return self.codes[email][-1]

    def send_order_confirmation(self, order):
        if self.fail_orders:
            raise ConnectionError("SMTP server unavailable")
        self.sent.append(("confirmation", order.order_number))

    def send_status_update(self, order, old_status, note=None):
        if self.fail_orders:
            raise ConnectionError("SMTP server unavailable")
        self.sent.append(("status", order.order_number, old_status, order.status.value, note))

    def send_sms(self, phone, order_number, status):
        self.sent.append(("sms", order_number, status))


@pytest.fixture
def settings():
    return Settings(
        database_url="sqlite://",
        jwt_secret="test-secret",
        bcrypt_rounds=4,
        rate_limit_max_requests=1000,
        razorpay_key_id="rzp_test_key",
        razorpay_key_secret="rzp_test_secret",
        log_level="WARNING",
    )


@pytest.fixture
def clock():
    return FakeClock()


@pytest.fixture
def notifier(settings):
    return RecordingNotifier(settings)


@pytest.fixture
def session(settings):
    engine = build_engine(settings.database_url)
    create_tables(engine)
    with Session(engine) as session:
        yield session


@pytest.fixture
def identity(session, settings, notifier, clock):
    return IdentityService(
        session=session,
        settings=settings,
        notifier=notifier,
        hasher=PasswordHasher(settings.bcrypt_rounds),
        tokens=TokenService(settings),
        clock=clock,
    )


@pytest.fixture
def order_service(session, clock):
    return OrderService(session, clock=clock)


@pytest.fixture
def verified_account(identity, notifier):
    """An account that completed email verification. Returns its id."""
    account_id = identity.register("buyer@x.com", PASSWORD, "Buyer", "+15550001111")
    identity.verify_code("buyer@x.com", notifier.last_code("buyer@x.com"))
    return account_id


@pytest.fixture
def app(settings, notifier, clock):
    return create_app(settings, notifier=notifier, clock=clock)


@pytest.fixture
def client(app):
    return TestClient(app)


def signup(client, notifier, email="a@x.com", password=PASSWORD, full_name="Alice", phone="+15551234567"):
    """Register, verify and log in through the API. Returns the bearer header."""
    response = client.post(
        "/auth/register",
        json={"email": email, "password": password, "full_name": full_name, "phone_number": phone},
    )
    assert response.status_code == 201, response.text
    response = client.post("/auth/verify-otp", json={"email": email, "otp": notifier.last_code(email)})
    assert response.status_code == 200, response.text
    response = client.post("/auth/login", json={"email": email, "password": password})
    assert response.status_code == 200, response.text
    return {"Authorization": f"Bearer {response.json()['token']}"}


def order_payload(items=None, shipping_cost=50, tax=36, **extra):
    payload = {
        "items": items
        if items is not None
        else [{"product_id": "p-1", "product_name": "Lamp", "product_category": "home", "quantity": 2, "price": 100}],
        "shipping_cost": shipping_cost,
        "tax": tax,
        "shipping_info": {
            "full_name": "Alice",
            "email": "a@x.com",
            "phone": "+15551234567",
            "address": "1 Main St",
            "city": "Pune",
            "state": "MH",
            "zip_code": "411001",
            "country": "India",
        },
        "payment_info": {"method": "card"},
    }
    payload.update(extra)
    return payload
