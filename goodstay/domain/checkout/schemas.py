"""Checkout domain schemas - Pydantic models for validation"""

from decimal import Decimal
from typing import Optional

from pydantic import BaseModel, Field, field_validator

from ...shared.validators import require_text, validate_email


class CartItem(BaseModel):
    """One cart line as submitted by the storefront"""

    id: str
    name: str
    price: Decimal = Field(..., ge=0)
    quantity: int = Field(..., ge=1)


class ShippingAddress(BaseModel):
    name: str
    email: str
    line1: str
    line2: Optional[str] = None
    city: str
    state: str
    postal_code: str
    country: str

    @field_validator("name", "line1", "city", "state", "postal_code", "country")
    @classmethod
    def validate_required(cls, v: str) -> str:
        return require_text(v, "This field is required")

    @field_validator("email")
    @classmethod
    def validate_email_address(cls, v: str) -> str:
        return validate_email(require_text(v, "Email is required"))


class CheckoutRequest(BaseModel):
    """Schema for creating a checkout session"""

    # May be empty: an empty cart is a domain error (400), not a schema error
    items: list[CartItem] = Field(default_factory=list)
    shippingAddress: ShippingAddress


class CheckoutSessionResponse(BaseModel):
    sessionId: str
    url: Optional[str] = None
    amountTotal: int  # cents


class OrderSummary(BaseModel):
    id: str
    status: str
    total_amount: Decimal
    customer_email: Optional[str] = None


class CheckoutStatusResponse(BaseModel):
    sessionId: str
    paymentStatus: Optional[str] = None
    amountTotal: Optional[int] = None
    customerEmail: Optional[str] = None
    orderCreated: bool
    order: Optional[OrderSummary] = None
