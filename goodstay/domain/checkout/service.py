"""Checkout service - turns a submitted cart into a Stripe checkout session"""

import logging

from sqlalchemy.orm import Session

from ... import config
from ...exceptions import ProductUnavailableError
from ...shared.money import to_minor_units
from ..catalog.service import CatalogService
from ..orders.reconciler import OrderReconciler
from .cart import Cart
from .metadata import build_order_intent, encode_order_metadata
from .schemas import (
    CheckoutRequest,
    CheckoutSessionResponse,
    CheckoutStatusResponse,
    OrderSummary,
)
from .stripe_service import StripeService

logger = logging.getLogger(__name__)


class CheckoutService:
    def __init__(self, db: Session, stripe_service: StripeService):
        self.db = db
        self.stripe = stripe_service
        self.catalog = CatalogService(db)

    async def create_checkout_session(self, request: CheckoutRequest) -> CheckoutSessionResponse:
        """
        Price the cart and open a hosted checkout session.

        Nothing is written to the order store here; the order only exists once
        Stripe reports the session paid.

        Raises:
            EmptyCartError: no items submitted
            ProductUnavailableError: an item is unknown or deactivated
            CheckoutSessionError: Stripe rejected the session
            PaymentProviderUnavailable: Stripe is not configured
        """
        cart = Cart.from_items(request.items)
        cart.ensure_not_empty()

        unavailable = self.catalog.find_unorderable([line.product_id for line in cart.lines])
        if unavailable:
            logger.warning(f"Checkout rejected, unavailable products: {unavailable}")
            raise ProductUnavailableError(unavailable)

        shipping_address = request.shippingAddress.model_dump()
        intent = build_order_intent(cart, shipping_address)
        metadata = encode_order_metadata(intent)

        line_items = [
            {
                "price_data": {
                    "currency": config.STRIPE_CURRENCY,
                    "product_data": {"name": line.name},
                    "unit_amount": to_minor_units(line.unit_price),
                },
                "quantity": line.quantity,
            }
            for line in cart.lines
        ]

        session = await self.stripe.create_checkout_session(
            line_items=line_items,
            success_url=f"{config.FRONTEND_URL}/shop/success?session_id={{CHECKOUT_SESSION_ID}}",
            cancel_url=f"{config.FRONTEND_URL}/shop/cart",
            customer_email=shipping_address.get("email"),
            metadata=metadata,
            allowed_countries=config.STRIPE_ALLOWED_COUNTRIES,
        )

        logger.info(
            f"💳 Checkout session {session.get('id')} created "
            f"({cart.item_count} items, {intent.total_cents} cents)"
        )

        return CheckoutSessionResponse(
            sessionId=session["id"],
            url=session.get("url"),
            amountTotal=intent.total_cents,
        )

    async def get_checkout_status(self, session_id: str) -> CheckoutStatusResponse:
        """Pull path: the success page asks whether its session has become an order"""
        session = await self.stripe.retrieve_checkout_session(session_id)

        result = OrderReconciler(self.db).reconcile(session)
        customer = session.get("customer_details") or {}

        order_summary = None
        if result is not None:
            order_summary = OrderSummary(
                id=result.order.id,
                status=result.order.status,
                total_amount=result.order.total_amount,
                customer_email=result.order.customer_email,
            )

        return CheckoutStatusResponse(
            sessionId=session.get("id") or session_id,
            paymentStatus=session.get("payment_status"),
            amountTotal=session.get("amount_total"),
            customerEmail=customer.get("email") or session.get("customer_email"),
            orderCreated=result is not None,
            order=order_summary,
        )
