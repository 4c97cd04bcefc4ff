"""Order domain schemas - Pydantic models for validation"""

from datetime import datetime
from decimal import Decimal
from typing import Optional

from pydantic import BaseModel

from ...models import OrderStatus


class OrderItemResponse(BaseModel):
    id: int
    product_id: Optional[str] = None
    product_name: str
    quantity: int
    price: Decimal


class OrderResponse(BaseModel):
    id: str
    stripe_payment_intent_id: str
    stripe_session_id: Optional[str] = None
    status: str
    customer_name: Optional[str] = None
    customer_email: Optional[str] = None
    total_amount: Decimal
    subtotal: Decimal
    tax_amount: Decimal
    shipping_amount: Decimal
    shipping_address: Optional[dict] = None
    notes: Optional[str] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None
    items: list[OrderItemResponse] = []


class OrderStatusUpdate(BaseModel):
    """Any status may be set from any other; admins use this to correct mistakes"""

    status: OrderStatus


class OrderNotesUpdate(BaseModel):
    notes: Optional[str] = None
