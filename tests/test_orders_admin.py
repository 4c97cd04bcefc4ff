"""
Tests for the admin order console and admin authentication.
"""

from decimal import Decimal

import pytest

from conftest import make_paid_session, make_token
from goodstay.domain.orders.reconciler import OrderReconciler
from goodstay.models import Order, OrderItem, OrderStatus

ITEMS = [{"id": "p1", "name": "Chew Rope", "price": "10.00", "quantity": 2}]


@pytest.fixture
def order(db, product):
    return OrderReconciler(db).reconcile(make_paid_session(ITEMS)).order


@pytest.fixture
def pending_order(db):
    order = Order(
        stripe_payment_intent_id="pi_pending",
        total_amount=Decimal("5.00"),
        subtotal=Decimal("5.00"),
        status=OrderStatus.PENDING.value,
    )
    order.items = [OrderItem(product_id="gone", product_name=None, quantity=1, price=Decimal("5.00"))]
    db.add(order)
    db.commit()
    return order


class TestAdminOrders:
    def test_list_orders(self, client, order, admin_headers):
        response = client.get("/api/admin/orders", headers=admin_headers)

        assert response.status_code == 200
        [row] = response.json()
        assert row["id"] == order.id
        assert row["items"][0]["product_name"] == "Chew Rope"

    def test_filter_by_status(self, client, order, pending_order, admin_headers):
        response = client.get("/api/admin/orders", params={"status": "pending"}, headers=admin_headers)

        assert [row["id"] for row in response.json()] == [pending_order.id]

    def test_pending_to_completed_allowed(self, client, pending_order, admin_headers, db):
        response = client.patch(
            f"/api/admin/orders/{pending_order.id}/status", json={"status": "completed"}, headers=admin_headers
        )

        assert response.status_code == 200
        assert response.json()["status"] == "completed"
        db.refresh(pending_order)
        assert pending_order.status == OrderStatus.COMPLETED.value

    def test_unknown_status_rejected(self, client, order, admin_headers):
        response = client.patch(
            f"/api/admin/orders/{order.id}/status", json={"status": "refunded"}, headers=admin_headers
        )
        assert response.status_code == 422

    def test_missing_product_name_falls_back(self, client, pending_order, admin_headers):
        response = client.get(f"/api/admin/orders/{pending_order.id}", headers=admin_headers)

        assert response.json()["items"][0]["product_name"] == "Unknown Product"

    def test_live_catalog_name_preferred(self, client, order, product, admin_headers, db):
        product.name = "Chew Rope XL"
        db.commit()

        response = client.get(f"/api/admin/orders/{order.id}", headers=admin_headers)

        assert response.json()["items"][0]["product_name"] == "Chew Rope XL"

    def test_update_notes(self, client, order, admin_headers):
        response = client.patch(
            f"/api/admin/orders/{order.id}/notes", json={"notes": "Left at front desk"}, headers=admin_headers
        )

        assert response.json()["notes"] == "Left at front desk"

    def test_delete_order(self, client, order, admin_headers, db):
        response = client.delete(f"/api/admin/orders/{order.id}", headers=admin_headers)

        assert response.status_code == 200
        assert db.query(Order).count() == 0
        assert db.query(OrderItem).count() == 0

    def test_missing_order_404(self, client, admin_headers):
        response = client.get("/api/admin/orders/does-not-exist", headers=admin_headers)

        assert response.status_code == 404
        assert response.json()["detail"] == "Order not found"


class TestAdminAuth:
    def test_no_token(self, client):
        response = client.get("/api/admin/orders")
        assert response.status_code in (401, 403)

    def test_non_admin_forbidden(self, client):
        headers = {"Authorization": f"Bearer {make_token(role='customer')}"}

        response = client.get("/api/admin/orders", headers=headers)

        assert response.status_code == 403

    def test_expired_token(self, client):
        headers = {"Authorization": f"Bearer {make_token(expires_in=-60)}"}

        response = client.get("/api/admin/orders", headers=headers)

        assert response.status_code == 401
        assert response.headers["X-Token-Expired"] == "true"

    def test_wrong_signing_key(self, client):
        headers = {"Authorization": f"Bearer {make_token(secret='someone-else')}"}

        response = client.get("/api/admin/orders", headers=headers)

        assert response.status_code == 401
