"""
Webhook signature verification.

Stripe signs `"{timestamp}.{raw body}"` with HMAC-SHA256 and sends
`Stripe-Signature: t=...,v1=...`. The raw body must be verified before it is
parsed; nothing from an unverified payload is trusted.
"""

import json
import logging
from typing import Optional

import stripe
from fastapi import Request

from . import config
from .exceptions import WebhookSignatureError

logger = logging.getLogger(__name__)

SIGNATURE_HEADER = "stripe-signature"


def verify_stripe_payload(
    payload: bytes,
    signature_header: Optional[str],
    secret: Optional[str],
    tolerance: Optional[int] = None,
) -> dict:
    """
    Verify a Stripe webhook body and return the parsed event.

    Raises:
        WebhookSignatureError: missing secret/header, bad signature, stale timestamp
            or an unparseable body. The message is deliberately generic.
    """
    if not secret:
        logger.error("❌ STRIPE_WEBHOOK_SECRET not configured; rejecting webhook")
        raise WebhookSignatureError()

    if not signature_header:
        logger.warning("🚫 Stripe webhook without Stripe-Signature header")
        raise WebhookSignatureError()

    try:
        body = payload.decode("utf-8") if isinstance(payload, bytes) else payload
    except UnicodeDecodeError as e:
        logger.warning("🚫 Stripe webhook body is not valid UTF-8")
        raise WebhookSignatureError() from e

    if tolerance is None:
        tolerance = config.STRIPE_WEBHOOK_TOLERANCE

    try:
        stripe.WebhookSignature.verify_header(body, signature_header, secret, tolerance)
    except stripe.SignatureVerificationError as e:
        logger.warning(f"🚫 Stripe webhook signature mismatch: {e}")
        raise WebhookSignatureError() from e

    try:
        event = json.loads(body)
    except json.JSONDecodeError as e:
        logger.error("❌ Signed Stripe webhook body is not valid JSON")
        raise WebhookSignatureError() from e

    if not isinstance(event, dict) or "type" not in event:
        raise WebhookSignatureError()

    return event


async def verify_stripe_webhook(request: Request, secret: Optional[str] = None) -> dict:
    """Read the raw request body and verify it against the configured secret"""
    raw_body = await request.body()
    return verify_stripe_payload(
        raw_body,
        request.headers.get(SIGNATURE_HEADER),
        secret if secret is not None else config.STRIPE_WEBHOOK_SECRET,
    )
