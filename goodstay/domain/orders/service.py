"""Order service - admin status console over the order store"""

import logging
from typing import Optional

from sqlalchemy.orm import Session

from ...exceptions import NotFoundError
from ...models import Order, OrderStatus
from .repository import OrderRepository
from .schemas import OrderItemResponse, OrderResponse

logger = logging.getLogger(__name__)

UNKNOWN_PRODUCT = "Unknown Product"


class OrderService:
    def __init__(self, db: Session):
        self.db = db
        self.repo = OrderRepository()

    def list_orders(self, status: Optional[OrderStatus] = None) -> list[OrderResponse]:
        orders = self.repo.list_orders(self.db, status.value if status else None)
        names = self.repo.get_product_names(
            self.db, [item.product_id for order in orders for item in order.items]
        )
        return [self._to_response(order, names) for order in orders]

    def get_order(self, order_id: str) -> Order:
        order = self.repo.get_order(self.db, order_id)
        if not order:
            raise NotFoundError("Order not found")
        return order

    def get_order_detail(self, order_id: str) -> OrderResponse:
        order = self.get_order(order_id)
        names = self.repo.get_product_names(self.db, [item.product_id for item in order.items])
        return self._to_response(order, names)

    def update_status(self, order_id: str, status: OrderStatus) -> OrderResponse:
        order = self.get_order(order_id)
        previous = order.status
        self.repo.update_order(self.db, order, status=status.value)
        logger.info(f"Order {order_id} status changed by admin: {previous} -> {status.value}")
        return self.get_order_detail(order_id)

    def update_notes(self, order_id: str, notes: Optional[str]) -> OrderResponse:
        order = self.get_order(order_id)
        self.repo.update_order(self.db, order, notes=notes)
        return self.get_order_detail(order_id)

    def delete_order(self, order_id: str) -> dict:
        order = self.get_order(order_id)
        self.repo.delete_order(self.db, order)
        logger.info(f"🗑️ Order {order_id} deleted by admin")
        return {"message": "Order deleted"}

    @staticmethod
    def _to_response(order: Order, product_names: dict[str, str]) -> OrderResponse:
        return OrderResponse(
            id=order.id,
            stripe_payment_intent_id=order.stripe_payment_intent_id,
            stripe_session_id=order.stripe_session_id,
            status=order.status,
            customer_name=order.customer_name,
            customer_email=order.customer_email,
            total_amount=order.total_amount,
            subtotal=order.subtotal,
            tax_amount=order.tax_amount,
            shipping_amount=order.shipping_amount,
            shipping_address=order.shipping_address,
            notes=order.notes,
            created_at=order.created_at,
            updated_at=order.updated_at,
            items=[
                OrderItemResponse(
                    id=item.id,
                    product_id=item.product_id,
                    product_name=product_names.get(item.product_id)
                    or item.product_name
                    or UNKNOWN_PRODUCT,
                    quantity=item.quantity,
                    price=item.price,
                )
                for item in order.items
            ],
        )
