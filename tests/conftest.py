"""
Shared test fixtures and helpers for the Good Stay test suite.

The environment is fixed before any goodstay module is imported: an in-memory
SQLite database, rate limiting off, and known Stripe/admin secrets.
"""

import hashlib
import hmac
import json
import os
import time
from decimal import Decimal
from typing import Optional

os.environ["DATABASE_URL"] = "sqlite://"
os.environ["RATE_LIMIT_ENABLED"] = "false"
os.environ["STRIPE_SECRET_KEY"] = "sk_test_placeholder"
os.environ["STRIPE_WEBHOOK_SECRET"] = "whsec_test_secret"
os.environ["ADMIN_JWT_SECRET"] = "test-admin-jwt-secret"
os.environ["FRONTEND_URL"] = "https://shop.example.com"
os.environ["DB_LOG_SLOW_QUERIES"] = "false"

import pytest  # noqa: E402
from fastapi.testclient import TestClient  # noqa: E402
from jose import jwt as jose_jwt  # noqa: E402

from goodstay.database import Base, SessionLocal, engine, get_db  # noqa: E402
from goodstay.domain.checkout.cart import Cart  # noqa: E402
from goodstay.domain.checkout.metadata import build_order_intent, encode_order_metadata  # noqa: E402
from goodstay.domain.checkout.stripe_service import get_stripe_service  # noqa: E402
from goodstay.exceptions import CheckoutSessionError  # noqa: E402
from goodstay.main import app  # noqa: E402
from goodstay.models import Product  # noqa: E402

WEBHOOK_SECRET = os.environ["STRIPE_WEBHOOK_SECRET"]
ADMIN_SECRET = os.environ["ADMIN_JWT_SECRET"]

SHIPPING_ADDRESS = {
    "name": "Jamie Rivera",
    "email": "jamie@example.com",
    "line1": "12 Kennel Lane",
    "line2": None,
    "city": "Portland",
    "state": "OR",
    "postal_code": "97201",
    "country": "US",
}


# ============================================================================
# Stripe fakes
# ============================================================================


class FakeStripeService:
    """In-process stand-in for StripeService; records what it was asked to do"""

    def __init__(self):
        self.created: list[dict] = []
        self.sessions: dict[str, dict] = {}
        self.error: Optional[Exception] = None

    def is_available(self) -> bool:
        return True

    async def create_checkout_session(self, **kwargs) -> dict:
        if self.error:
            raise self.error
        session_id = f"cs_test_{len(self.created) + 1}"
        self.created.append(kwargs)
        return {"id": session_id, "url": f"https://checkout.stripe.com/c/pay/{session_id}"}

    async def retrieve_checkout_session(self, session_id: str) -> dict:
        if self.error:
            raise self.error
        if session_id not in self.sessions:
            raise CheckoutSessionError("Failed to retrieve checkout session")
        return self.sessions[session_id]


def make_paid_session(
    items: list[dict],
    payment_intent: str = "pi_123",
    session_id: str = "cs_test_paid",
    payment_status: str = "paid",
) -> dict:
    """A checkout.session object as Stripe returns it once the customer has paid"""
    cart = Cart()
    for item in items:
        cart.add(item["id"], item["name"], Decimal(str(item["price"])), item["quantity"])
    intent = build_order_intent(cart, dict(SHIPPING_ADDRESS))
    return {
        "id": session_id,
        "object": "checkout.session",
        "payment_status": payment_status,
        "payment_intent": payment_intent,
        "amount_total": intent.total_cents,
        "customer_email": SHIPPING_ADDRESS["email"],
        "customer_details": {"name": SHIPPING_ADDRESS["name"], "email": SHIPPING_ADDRESS["email"]},
        "metadata": encode_order_metadata(intent),
    }


def sign_stripe_payload(payload: str, secret: str = WEBHOOK_SECRET, timestamp: Optional[int] = None) -> str:
    """Stripe-Signature header value for `payload`"""
    timestamp = timestamp or int(time.time())
    signature = hmac.new(secret.encode("utf-8"), f"{timestamp}.{payload}".encode("utf-8"), hashlib.sha256).hexdigest()
    return f"t={timestamp},v1={signature}"


def stripe_event(event_type: str, data_object: dict, event_id: str = "evt_test_1") -> str:
    return json.dumps({"id": event_id, "object": "event", "type": event_type, "data": {"object": data_object}})


# ============================================================================
# Fixtures
# ============================================================================


@pytest.fixture
def db():
    Base.metadata.create_all(bind=engine)
    session = SessionLocal()
    try:
        yield session
    finally:
        session.close()
        Base.metadata.drop_all(bind=engine)


@pytest.fixture
def fake_stripe():
    return FakeStripeService()


@pytest.fixture
def client(db, fake_stripe):
    def override_get_db():
        yield db

    app.dependency_overrides[get_db] = override_get_db
    app.dependency_overrides[get_stripe_service] = lambda: fake_stripe
    try:
        yield TestClient(app)
    finally:
        app.dependency_overrides.clear()


def make_token(role: Optional[str] = "admin", expires_in: int = 3600, secret: str = ADMIN_SECRET) -> str:
    claims = {
        "sub": "user-1",
        "email": "owner@thegoodstay.com",
        "aud": "authenticated",
        "exp": int(time.time()) + expires_in,
        "app_metadata": {"role": role} if role else {},
    }
    return jose_jwt.encode(claims, secret, algorithm="HS256")


@pytest.fixture
def admin_headers():
    return {"Authorization": f"Bearer {make_token()}"}


@pytest.fixture
def product(db):
    item = Product(id="p1", name="Chew Rope", price=Decimal("10.00"), stock_quantity=5, is_active=True)
    db.add(item)
    db.commit()
    db.refresh(item)
    return item
