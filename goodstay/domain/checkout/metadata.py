"""
Order intent carried in Stripe checkout session metadata.

Between "customer clicked pay" and the order row being written, the session
metadata is the only durable copy of what was bought. Stripe caps metadata
values at 500 characters and 50 keys, so long carts are split across
`orderData_0..n` with `orderDataParts` holding the count. Short carts use the
single `orderData` key, which is also what older sessions carry.
"""

import json
import logging
from decimal import Decimal

from pydantic import BaseModel, Field, ValidationError

from ...exceptions import CheckoutSessionError
from ...shared.money import to_decimal, to_minor_units
from .cart import Cart

logger = logging.getLogger(__name__)

METADATA_KEY = "orderData"
PARTS_KEY = "orderDataParts"
MAX_VALUE_LENGTH = 500
MAX_PARTS = 40  # leaves room under Stripe's 50-key limit for other metadata


class IntentItem(BaseModel):
    id: str
    name: str
    price: Decimal
    quantity: int = Field(..., ge=1)


class OrderIntent(BaseModel):
    items: list[IntentItem]
    shippingAddress: dict
    subtotal: Decimal
    shipping: Decimal = Decimal("0.00")
    tax: Decimal = Decimal("0.00")
    total: Decimal

    @property
    def total_cents(self) -> int:
        return to_minor_units(self.total)


def build_order_intent(cart: Cart, shipping_address: dict) -> OrderIntent:
    """Price the cart. Shipping and tax are flat zero for now."""
    subtotal = to_decimal(cart.subtotal)
    shipping = Decimal("0.00")
    tax = Decimal("0.00")
    return OrderIntent(
        items=[
            IntentItem(id=line.product_id, name=line.name, price=line.unit_price, quantity=line.quantity)
            for line in cart.lines
        ],
        shippingAddress=shipping_address,
        subtotal=subtotal,
        shipping=shipping,
        tax=tax,
        total=to_decimal(subtotal + shipping + tax),
    )


def encode_order_metadata(intent: OrderIntent) -> dict[str, str]:
    payload = json.dumps(intent.model_dump(mode="json"), separators=(",", ":"))
    if len(payload) <= MAX_VALUE_LENGTH:
        return {METADATA_KEY: payload}

    chunks = [payload[i : i + MAX_VALUE_LENGTH] for i in range(0, len(payload), MAX_VALUE_LENGTH)]
    if len(chunks) > MAX_PARTS:
        raise CheckoutSessionError("Cart is too large to check out in one order")

    metadata = {f"{METADATA_KEY}_{index}": chunk for index, chunk in enumerate(chunks)}
    metadata[PARTS_KEY] = str(len(chunks))
    return metadata


def decode_order_metadata(metadata: dict) -> OrderIntent:
    """
    Rebuild the order intent from session metadata.

    Raises:
        ValueError: if the metadata has no order data or it does not parse
    """
    metadata = metadata or {}

    if metadata.get(METADATA_KEY):
        payload = metadata[METADATA_KEY]
    elif metadata.get(PARTS_KEY):
        try:
            parts = int(metadata[PARTS_KEY])
            payload = "".join(metadata[f"{METADATA_KEY}_{index}"] for index in range(parts))
        except (KeyError, ValueError) as e:
            raise ValueError(f"Incomplete order data in session metadata: {e}") from e
    else:
        raise ValueError("Session metadata has no order data")

    try:
        return OrderIntent.model_validate(json.loads(payload))
    except (json.JSONDecodeError, ValidationError) as e:
        raise ValueError(f"Corrupt order data in session metadata: {e}") from e
