"""
Stripe webhook handler

Events handled:
- checkout.session.completed - create the order (same path as the success page poll)
- payment_intent.succeeded - order moves to processing
- payment_intent.payment_failed - order is cancelled

Everything else is acknowledged and ignored. Any failure after the signature
check returns a 5xx so Stripe redelivers the event.
"""

import logging

from fastapi import APIRouter, Depends, HTTPException, Request
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from ...database import get_db
from ...webhook_security import verify_stripe_webhook
from .reconciler import PAYMENT_INTENT_STATUS, OrderReconciler

logger = logging.getLogger(__name__)

webhooks_router = APIRouter(prefix="/api/webhooks", tags=["Webhooks"])


@webhooks_router.post("/stripe")
async def handle_stripe_webhook(request: Request, db: Session = Depends(get_db)):
    # Raises WebhookSignatureError (400) before anything in the body is trusted
    event = await verify_stripe_webhook(request)

    event_type = event.get("type")
    event_id = event.get("id")
    data_object = (event.get("data") or {}).get("object") or {}

    logger.info(f"📥 Stripe webhook {event_id}: {event_type}")

    reconciler = OrderReconciler(db)

    try:
        if event_type == "checkout.session.completed":
            result = reconciler.reconcile(data_object)
            if result is None:
                logger.info(f"Session {data_object.get('id')} completed without payment; waiting")

        elif event_type in PAYMENT_INTENT_STATUS:
            reconciler.apply_payment_intent_event(event_type, data_object.get("id"))

        else:
            logger.info(f"ℹ️ Unhandled Stripe event type: {event_type}")

    except SQLAlchemyError as e:
        db.rollback()
        logger.error(f"❌ Database error handling Stripe event {event_id} ({event_type}): {e}")
        raise HTTPException(status_code=500, detail="Webhook handler failed") from e

    return {"received": True}
