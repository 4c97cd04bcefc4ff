"""Domain errors and their HTTP status codes"""

from typing import Optional


class GoodStayError(Exception):
    """Base class for errors the API maps straight to a JSON response"""

    status_code = 500
    default_detail = "Internal server error"

    def __init__(self, detail: Optional[str] = None):
        self.detail = detail or self.default_detail
        super().__init__(self.detail)

    def to_dict(self) -> dict:
        return {"detail": self.detail}


class EmptyCartError(GoodStayError):
    status_code = 400
    default_detail = "No items in cart"


class ProductUnavailableError(GoodStayError):
    status_code = 400
    default_detail = "One or more products are no longer available"

    def __init__(self, product_ids: list[str]):
        self.product_ids = product_ids
        super().__init__(f"Products not available for purchase: {', '.join(product_ids)}")

    def to_dict(self) -> dict:
        return {"detail": self.detail, "product_ids": self.product_ids}


class BookingValidationError(GoodStayError):
    status_code = 400
    default_detail = "Invalid booking request"

    def __init__(self, field: str, message: str):
        self.field = field
        super().__init__(message)

    def to_dict(self) -> dict:
        return {"detail": self.detail, "field": self.field}


class NotFoundError(GoodStayError):
    status_code = 404
    default_detail = "Not found"


class CheckoutSessionError(GoodStayError):
    status_code = 502
    default_detail = "Failed to create checkout session"


class PaymentProviderUnavailable(GoodStayError):
    status_code = 503
    default_detail = "Payment service temporarily unavailable"


class WebhookSignatureError(GoodStayError):
    """Raised when webhook signature verification fails"""

    status_code = 400
    default_detail = "Webhook signature verification failed"


class OrderPersistenceError(GoodStayError):
    status_code = 500
    default_detail = "Failed to record order"
