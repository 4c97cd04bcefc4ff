"""
Order and booking snapshots.

A snapshot freezes what the customer agreed to (prices, products, address,
booking rules) next to the live row. Snapshots are a courtesy record: failing
to write one is logged and never fails the order or booking.
"""

import logging
from typing import Optional

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from .. import config
from ..models import Booking, BookingSnapshot, Order, OrderSnapshot
from ..shared.money import format_amount

logger = logging.getLogger(__name__)


def build_order_snapshot(order: Order) -> OrderSnapshot:
    return OrderSnapshot(
        order_id=order.id,
        product_data={
            "order_items": [
                {
                    "product_id": item.product_id,
                    "product_name": item.product_name,
                    "quantity": item.quantity,
                    "price_at_time": format_amount(item.price),
                }
                for item in order.items
            ]
        },
        pricing_data={
            "subtotal": format_amount(order.subtotal),
            "tax_amount": format_amount(order.tax_amount),
            "shipping_amount": format_amount(order.shipping_amount),
            "total_amount": format_amount(order.total_amount),
            "currency": config.STRIPE_CURRENCY.upper(),
            "payment_method": order.payment_method,
        },
        shipping_data={
            "customer_name": order.customer_name,
            "customer_email": order.customer_email,
            "shipping_address": order.shipping_address,
        },
    )


def create_order_snapshot(db: Session, order: Order) -> Optional[OrderSnapshot]:
    try:
        snapshot = build_order_snapshot(order)
        db.add(snapshot)
        db.commit()
        logger.info(f"📸 Order snapshot created for order {order.id}")
        return snapshot
    except SQLAlchemyError as e:
        db.rollback()
        logger.error(f"Failed to create order snapshot for order {order.id}: {e}")
        return None


def create_booking_snapshot(db: Session, booking: Booking, settings: Optional[dict] = None) -> Optional[BookingSnapshot]:
    try:
        snapshot = BookingSnapshot(
            booking_id=booking.id,
            booking_data={
                "dog_name": booking.dog_name,
                "dog_breed": booking.dog_breed,
                "dog_age": booking.dog_age,
                "preferred_date": booking.preferred_date.isoformat(),
                "preferred_time": booking.preferred_time,
                "contact_name": booking.contact_name,
                "contact_email": booking.contact_email,
                "contact_phone": booking.contact_phone,
                "special_requirements": booking.special_requirements,
            },
            settings_data=settings,
        )
        db.add(snapshot)
        db.commit()
        return snapshot
    except SQLAlchemyError as e:
        db.rollback()
        logger.error(f"Failed to create booking snapshot for booking {booking.id}: {e}")
        return None
