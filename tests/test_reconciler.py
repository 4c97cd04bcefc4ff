"""
Tests for OrderReconciler: at-most-once order creation for a paid session.
"""

import logging
from decimal import Decimal

import pytest
from sqlalchemy import event
from sqlalchemy.exc import OperationalError

from conftest import make_paid_session
from goodstay import config
from goodstay.domain.orders.reconciler import OrderReconciler, extract_payment_intent_id
from goodstay.domain.orders.repository import OrderRepository
from goodstay.exceptions import OrderPersistenceError
from goodstay.models import Order, OrderItem, OrderSnapshot, OrderStatus, Product

SCENARIO_ITEMS = [{"id": "p1", "name": "Chew Rope", "price": "10.00", "quantity": 2}]


class TestReconcile:
    def test_scenario_a_paid_session_becomes_order(self, db, product):
        result = OrderReconciler(db).reconcile(make_paid_session(SCENARIO_ITEMS, payment_intent="pi_123"))

        assert result.created is True
        order = result.order
        assert order.stripe_payment_intent_id == "pi_123"
        assert order.status == OrderStatus.PAID.value
        assert order.total_amount == Decimal("20.00")
        assert order.customer_email == "jamie@example.com"
        assert order.payment_method == "stripe"
        assert len(order.items) == 1
        assert order.items[0].quantity == 2
        assert order.items[0].price == Decimal("10.00")
        assert order.items[0].product_name == "Chew Rope"

    def test_scenario_b_second_reconcile_is_noop(self, db, product):
        session = make_paid_session(SCENARIO_ITEMS, payment_intent="pi_123")
        reconciler = OrderReconciler(db)

        first = reconciler.reconcile(session)
        second = reconciler.reconcile(session)

        assert second.created is False
        assert second.order.id == first.order.id
        assert db.query(Order).filter(Order.stripe_payment_intent_id == "pi_123").count() == 1
        assert db.query(OrderItem).count() == 1

    def test_many_reconciles_one_order(self, db, product):
        session = make_paid_session(SCENARIO_ITEMS, payment_intent="pi_many")
        results = [OrderReconciler(db).reconcile(session) for _ in range(5)]

        assert [r.created for r in results] == [True, False, False, False, False]
        assert len({r.order.id for r in results}) == 1
        assert db.query(Order).filter(Order.stripe_payment_intent_id == "pi_many").count() == 1

    def test_losing_the_race_returns_winner(self, db, product, monkeypatch):
        session = make_paid_session(SCENARIO_ITEMS, payment_intent="pi_race")
        winner = OrderReconciler(db).reconcile(session).order

        # The second path checked before the first committed, so it saw nothing
        original_lookup = OrderRepository.get_by_payment_intent
        calls = {"count": 0}

        def stale_then_fresh(db_session, payment_intent_id):
            calls["count"] += 1
            if calls["count"] == 1:
                return None
            return original_lookup(db_session, payment_intent_id)

        monkeypatch.setattr(OrderRepository, "get_by_payment_intent", staticmethod(stale_then_fresh))

        result = OrderReconciler(db).reconcile(session)

        assert result.created is False
        assert result.order.id == winner.id
        assert db.query(Order).count() == 1
        assert db.query(OrderItem).count() == 1

    def test_unpaid_session_is_ignored(self, db):
        session = make_paid_session(SCENARIO_ITEMS, payment_status="unpaid")
        assert OrderReconciler(db).reconcile(session) is None
        assert db.query(Order).count() == 0

    def test_paid_session_without_metadata_fails(self, db):
        session = make_paid_session(SCENARIO_ITEMS)
        session["metadata"] = {}

        with pytest.raises(OrderPersistenceError):
            OrderReconciler(db).reconcile(session)
        assert db.query(Order).count() == 0

    def test_expanded_payment_intent(self):
        assert extract_payment_intent_id({"payment_intent": {"id": "pi_obj"}}) == "pi_obj"
        assert extract_payment_intent_id({"payment_intent": "pi_str"}) == "pi_str"
        assert extract_payment_intent_id({}) is None


class TestSnapshotFidelity:
    def test_amounts_come_from_checkout_not_catalog(self, db, product):
        session = make_paid_session(SCENARIO_ITEMS, payment_intent="pi_price")

        # Price changed after the customer checked out
        product.price = Decimal("99.00")
        db.commit()

        order = OrderReconciler(db).reconcile(session).order

        assert order.total_amount == Decimal("20.00")
        assert order.subtotal + order.shipping_amount + order.tax_amount == order.total_amount
        assert order.items[0].price == Decimal("10.00")

    def test_order_snapshot_written(self, db, product):
        order = OrderReconciler(db).reconcile(make_paid_session(SCENARIO_ITEMS)).order

        snapshot = db.query(OrderSnapshot).filter(OrderSnapshot.order_id == order.id).one()
        assert snapshot.pricing_data["total_amount"] == "20.00"
        assert snapshot.product_data["order_items"][0]["quantity"] == 2
        assert snapshot.shipping_data["shipping_address"]["city"] == "Portland"

    def test_snapshot_currency_follows_checkout_currency(self, db, product, monkeypatch):
        monkeypatch.setattr(config, "STRIPE_CURRENCY", "cad")

        order = OrderReconciler(db).reconcile(make_paid_session(SCENARIO_ITEMS, payment_intent="pi_cad")).order

        snapshot = db.query(OrderSnapshot).filter(OrderSnapshot.order_id == order.id).one()
        assert snapshot.pricing_data["currency"] == "CAD"


class TestStockNotEnforced:
    def test_quantity_beyond_stock_still_recorded(self, db, product):
        # Current behaviour: nothing checks or decrements stock when an order is recorded
        items = [{"id": "p1", "name": "Chew Rope", "price": "10.00", "quantity": 50}]

        result = OrderReconciler(db).reconcile(make_paid_session(items, payment_intent="pi_stock"))

        assert result.created is True
        assert result.order.items[0].quantity == 50
        db.refresh(product)
        assert product.stock_quantity == 5


class TestPartialFailure:
    def test_item_insert_failure_leaves_no_order(self, db, product, caplog):
        def fail_item_insert(mapper, connection, target):
            raise OperationalError("INSERT INTO order_items", {}, Exception("disk I/O error"))

        event.listen(OrderItem, "before_insert", fail_item_insert)
        caplog.set_level(logging.ERROR, logger="goodstay.domain.orders.reconciler")
        try:
            with pytest.raises(OrderPersistenceError):
                OrderReconciler(db).reconcile(make_paid_session(SCENARIO_ITEMS, payment_intent="pi_fail"))
        finally:
            event.remove(OrderItem, "before_insert", fail_item_insert)

        assert db.query(Order).count() == 0
        assert db.query(OrderItem).count() == 0
        assert "pi_fail" in caplog.text
        assert "cs_test_paid" in caplog.text


class TestPaymentIntentStatus:
    def test_succeeded_moves_to_processing(self, db, product):
        OrderReconciler(db).reconcile(make_paid_session(SCENARIO_ITEMS, payment_intent="pi_ok"))

        order = OrderReconciler(db).apply_payment_intent_event("payment_intent.succeeded", "pi_ok")

        assert order.status == OrderStatus.PROCESSING.value

    def test_failed_cancels(self, db, product):
        OrderReconciler(db).reconcile(make_paid_session(SCENARIO_ITEMS, payment_intent="pi_bad"))

        order = OrderReconciler(db).apply_payment_intent_status("pi_bad", OrderStatus.CANCELLED)

        assert order.status == OrderStatus.CANCELLED.value

    def test_unknown_payment_intent_is_ignored(self, db):
        assert OrderReconciler(db).apply_payment_intent_event("payment_intent.succeeded", "pi_missing") is None

    def test_unrelated_event_type_is_ignored(self, db):
        assert OrderReconciler(db).apply_payment_intent_event("charge.refunded", "pi_any") is None


def test_deleting_product_keeps_order_history(db, product):
    order = OrderReconciler(db).reconcile(make_paid_session(SCENARIO_ITEMS)).order

    db.delete(db.get(Product, "p1"))
    db.commit()
    db.refresh(order)

    assert order.items[0].product_id == "p1"
    assert order.items[0].product_name == "Chew Rope"
