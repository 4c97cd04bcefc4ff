"""Checkout router - session creation and the success page status poll"""

import logging
from typing import Optional

from fastapi import APIRouter, Depends, HTTPException, Query
from sqlalchemy.orm import Session

from ... import config
from ...database import get_db
from ...rate_limiter import create_rate_limiter
from .schemas import CheckoutRequest, CheckoutSessionResponse, CheckoutStatusResponse
from .service import CheckoutService
from .stripe_service import StripeService, get_stripe_service

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/checkout", tags=["Checkout"])

checkout_rate_limit = create_rate_limiter(
    limit=config.CHECKOUT_RATE_LIMIT, window_seconds=3600, key_prefix="checkout"
)


def get_checkout_service(
    db: Session = Depends(get_db),
    stripe_service: StripeService = Depends(get_stripe_service),
) -> CheckoutService:
    """Dependency injection for CheckoutService"""
    return CheckoutService(db, stripe_service)


@router.post("", response_model=CheckoutSessionResponse)
async def create_checkout_session(
    body: CheckoutRequest,
    _: None = Depends(checkout_rate_limit),
    service: CheckoutService = Depends(get_checkout_service),
):
    """Create a hosted Stripe checkout session for the submitted cart"""
    return await service.create_checkout_session(body)


@router.get("", response_model=CheckoutStatusResponse)
async def get_checkout_status(
    session_id: Optional[str] = Query(None),
    service: CheckoutService = Depends(get_checkout_service),
):
    """
    Report a checkout session's payment status.

    When the session is paid this also records the order if the webhook has
    not done so yet.
    """
    if not session_id:
        raise HTTPException(status_code=400, detail="Session ID is required")
    return await service.get_checkout_status(session_id)
