"""Stripe service - hosted checkout sessions"""

import json
import logging
from typing import Optional

import stripe
from fastapi.concurrency import run_in_threadpool

from ...config import STRIPE_SECRET_KEY
from ...exceptions import CheckoutSessionError, PaymentProviderUnavailable

logger = logging.getLogger(__name__)


def stripe_object_to_dict(obj) -> dict:
    """StripeObject serializes itself as JSON; plain dicts pass through"""
    if isinstance(obj, dict) and not isinstance(obj, stripe.StripeObject):
        return obj
    return json.loads(str(obj))


class StripeService:
    """Service for Stripe Checkout API operations"""

    def __init__(self, api_key: Optional[str] = None):
        self.api_key = api_key if api_key is not None else STRIPE_SECRET_KEY

        if not self.api_key:
            logger.warning("STRIPE_SECRET_KEY not set; checkout endpoints will fail until configured")
        else:
            logger.info("Stripe client configured")

    def is_available(self) -> bool:
        """Check if Stripe is configured"""
        return bool(self.api_key)

    async def create_checkout_session(
        self,
        line_items: list[dict],
        success_url: str,
        cancel_url: str,
        customer_email: Optional[str],
        metadata: dict[str, str],
        allowed_countries: list[str],
    ) -> dict:
        """Create a hosted checkout session in payment mode"""
        if not self.is_available():
            raise PaymentProviderUnavailable()

        try:
            session = await run_in_threadpool(
                stripe.checkout.Session.create,
                api_key=self.api_key,
                mode="payment",
                payment_method_types=["card"],
                line_items=line_items,
                success_url=success_url,
                cancel_url=cancel_url,
                shipping_address_collection={"allowed_countries": allowed_countries},
                customer_email=customer_email,
                metadata=metadata,
            )
        except stripe.StripeError as e:
            logger.error(f"❌ Stripe rejected checkout session: {e}")
            raise CheckoutSessionError() from e

        return stripe_object_to_dict(session)

    async def retrieve_checkout_session(self, session_id: str) -> dict:
        """Fetch a checkout session by id"""
        if not self.is_available():
            raise PaymentProviderUnavailable()

        try:
            session = await run_in_threadpool(
                stripe.checkout.Session.retrieve, session_id, api_key=self.api_key
            )
        except stripe.StripeError as e:
            logger.error(f"❌ Failed to retrieve checkout session {session_id}: {e}")
            raise CheckoutSessionError("Failed to retrieve checkout session") from e

        return stripe_object_to_dict(session)


# Singleton instance
stripe_service = StripeService()


def get_stripe_service() -> StripeService:
    """Dependency injection for the Stripe service (overridden in tests)"""
    return stripe_service
