"""
Order reconciler - turns a paid Stripe checkout session into an Order.

Two triggers reach this code for the same session: the success page polling
`GET /api/checkout?session_id=...` and the `checkout.session.completed`
webhook. They can arrive in either order or at the same time. The unique
index on `orders.stripe_payment_intent_id` decides the winner; the loser sees
an IntegrityError, rolls back and returns the winner's row.
"""

import logging
from dataclasses import dataclass
from typing import Optional

from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.orm import Session

from ...exceptions import OrderPersistenceError
from ...models import Order, OrderItem, OrderStatus
from ...shared.money import to_decimal
from ..checkout.metadata import OrderIntent, decode_order_metadata
from ..snapshots import create_order_snapshot
from .repository import OrderRepository

logger = logging.getLogger(__name__)

# Stripe lifecycle events that only move an existing order's status
PAYMENT_INTENT_STATUS = {
    "payment_intent.succeeded": OrderStatus.PROCESSING,
    "payment_intent.payment_failed": OrderStatus.CANCELLED,
}


@dataclass
class ReconcileResult:
    order: Order
    created: bool


def extract_payment_intent_id(session: dict) -> Optional[str]:
    """payment_intent is an id string, or an object when the session was expanded"""
    payment_intent = session.get("payment_intent")
    if isinstance(payment_intent, dict):
        return payment_intent.get("id")
    return payment_intent


class OrderReconciler:
    def __init__(self, db: Session):
        self.db = db
        self.repo = OrderRepository()

    def reconcile(self, session: dict) -> Optional[ReconcileResult]:
        """
        Materialize the order for a checkout session, at most once.

        Returns:
            None when the session is not paid yet, otherwise the order and
            whether this call created it.

        Raises:
            OrderPersistenceError: paid session without usable order data, or the
                insert failed for a reason other than losing the race.
        """
        session_id = session.get("id")

        if session.get("payment_status") != "paid":
            logger.info(f"Session {session_id} not paid yet ({session.get('payment_status')}); nothing to reconcile")
            return None

        payment_intent_id = extract_payment_intent_id(session)
        if not payment_intent_id:
            logger.error(f"❌ Paid session {session_id} has no payment intent; manual reconciliation needed")
            raise OrderPersistenceError("Paid checkout session has no payment intent")

        existing = self.repo.get_by_payment_intent(self.db, payment_intent_id)
        if existing:
            logger.info(f"Order {existing.id} already exists for payment intent {payment_intent_id}")
            return ReconcileResult(order=existing, created=False)

        try:
            intent = decode_order_metadata(session.get("metadata"))
        except ValueError as e:
            logger.error(
                f"❌ Cannot build order for paid session {session_id} "
                f"(payment intent {payment_intent_id}): {e}"
            )
            raise OrderPersistenceError("Order data missing from checkout session") from e

        order = self._build_order(session, payment_intent_id, intent)

        try:
            self.repo.add_order(self.db, order)
        except IntegrityError as e:
            self.db.rollback()
            winner = self.repo.get_by_payment_intent(self.db, payment_intent_id)
            if winner:
                logger.info(
                    f"Order {winner.id} for payment intent {payment_intent_id} was created concurrently; "
                    "returning existing order"
                )
                return ReconcileResult(order=winner, created=False)
            logger.error(
                f"❌ Integrity error recording order for payment intent {payment_intent_id} "
                f"(session {session_id}): {e}"
            )
            raise OrderPersistenceError() from e
        except SQLAlchemyError as e:
            # Order and items share one transaction, so nothing was kept
            self.db.rollback()
            logger.error(
                f"❌ Failed to record order for payment intent {payment_intent_id} "
                f"(session {session_id}); customer was charged, manual reconciliation needed: {e}"
            )
            raise OrderPersistenceError() from e

        logger.info(
            f"✅ Order {order.id} created for payment intent {payment_intent_id} "
            f"(session {session_id}, total {order.total_amount}, {len(order.items)} items)"
        )
        create_order_snapshot(self.db, order)
        return ReconcileResult(order=order, created=True)

    def apply_payment_intent_event(self, event_type: str, payment_intent_id: Optional[str]) -> Optional[Order]:
        """Status write for payment_intent.* events; no-op when no order matches"""
        status = PAYMENT_INTENT_STATUS.get(event_type)
        if status is None:
            return None
        return self.apply_payment_intent_status(payment_intent_id, status)

    def apply_payment_intent_status(self, payment_intent_id: Optional[str], status: OrderStatus) -> Optional[Order]:
        if not payment_intent_id:
            return None

        order = self.repo.get_by_payment_intent(self.db, payment_intent_id)
        if not order:
            logger.warning(f"⚠️ Status {status.value} for payment intent {payment_intent_id} but no order exists yet")
            return None

        self.repo.update_order(self.db, order, status=status.value)
        logger.info(f"Order {order.id} status -> {status.value} (payment intent {payment_intent_id})")
        return order

    def _build_order(self, session: dict, payment_intent_id: str, intent: OrderIntent) -> Order:
        # Amounts come from the snapshot priced at checkout, never from current catalog prices.
        # Stock is neither checked nor decremented here.
        customer = session.get("customer_details") or {}
        address = intent.shippingAddress or {}

        order = Order(
            stripe_payment_intent_id=payment_intent_id,
            stripe_session_id=session.get("id"),
            customer_name=customer.get("name") or address.get("name"),
            customer_email=customer.get("email") or session.get("customer_email") or address.get("email"),
            subtotal=to_decimal(intent.subtotal),
            tax_amount=to_decimal(intent.tax),
            shipping_amount=to_decimal(intent.shipping),
            total_amount=to_decimal(intent.total),
            status=OrderStatus.PAID.value,
            payment_method="stripe",
            shipping_address=address,
        )
        order.items = [
            OrderItem(
                product_id=item.id,
                product_name=item.name,
                quantity=item.quantity,
                price=to_decimal(item.price),
            )
            for item in intent.items
        ]
        return order
