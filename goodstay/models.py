import enum
import uuid

from sqlalchemy import (
    JSON,
    Boolean,
    CheckConstraint,
    Column,
    Date,
    DateTime,
    ForeignKey,
    Integer,
    Numeric,
    String,
    Text,
)
from sqlalchemy.orm import relationship
from sqlalchemy.sql import func

from .database import Base


def generate_id():
    """Generate a UUID primary key, matching the ids the storefront already uses"""
    return str(uuid.uuid4())


class OrderStatus(str, enum.Enum):
    # pending → paid → processing → shipped → delivered | completed, cancelled from any
    # non-terminal state. Admins may set any value directly; no transition table.
    PENDING = "pending"
    PAID = "paid"
    PROCESSING = "processing"
    SHIPPED = "shipped"
    DELIVERED = "delivered"
    COMPLETED = "completed"
    CANCELLED = "cancelled"


class BookingStatus(str, enum.Enum):
    PENDING = "pending"
    CONFIRMED = "confirmed"
    COMPLETED = "completed"
    CANCELLED = "cancelled"


class Product(Base):
    __tablename__ = "products"
    __table_args__ = (CheckConstraint("stock_quantity >= 0", name="ck_products_stock_non_negative"),)

    id = Column(String(36), primary_key=True, default=generate_id)
    name = Column(String(255), nullable=False)
    description = Column(Text, nullable=True)
    price = Column(Numeric(10, 2), nullable=False)
    category = Column(String(100), nullable=True, index=True)
    stock_quantity = Column(Integer, default=0, nullable=False)
    is_active = Column(Boolean, default=True, nullable=False)
    image_url = Column(String(500), nullable=True)  # Public URL in object storage
    created_at = Column(DateTime, server_default=func.now())
    updated_at = Column(DateTime, server_default=func.now(), onupdate=func.now())


class Order(Base):
    __tablename__ = "orders"

    id = Column(String(36), primary_key=True, default=generate_id)
    # Idempotency anchor: both the success-page poll and the webhook race to insert here
    stripe_payment_intent_id = Column(String(255), unique=True, nullable=False, index=True)
    stripe_session_id = Column(String(255), nullable=True, index=True)
    customer_name = Column(String(255), nullable=True)
    customer_email = Column(String(255), nullable=True, index=True)
    total_amount = Column(Numeric(10, 2), nullable=False)
    subtotal = Column(Numeric(10, 2), nullable=False)
    tax_amount = Column(Numeric(10, 2), default=0, nullable=False)
    shipping_amount = Column(Numeric(10, 2), default=0, nullable=False)
    status = Column(String(20), default=OrderStatus.PENDING.value, nullable=False, index=True)
    payment_method = Column(String(50), default="stripe", nullable=True)
    shipping_address = Column(JSON, nullable=True)  # name, email, line1/2, city, state, postal_code, country
    notes = Column(Text, nullable=True)
    created_at = Column(DateTime, server_default=func.now())
    updated_at = Column(DateTime, server_default=func.now(), onupdate=func.now())

    items = relationship(
        "OrderItem", back_populates="order", cascade="all, delete-orphan", lazy="selectin"
    )


class OrderItem(Base):
    __tablename__ = "order_items"

    id = Column(Integer, primary_key=True, index=True)
    order_id = Column(String(36), ForeignKey("orders.id", ondelete="CASCADE"), nullable=False)
    # Weak reference: products can be deleted or renamed without touching order history
    product_id = Column(String(36), nullable=True, index=True)
    product_name = Column(String(255), nullable=True)  # Name at time of order
    quantity = Column(Integer, nullable=False)
    price = Column(Numeric(10, 2), nullable=False)  # Unit price at time of order

    order = relationship("Order", back_populates="items")


class Booking(Base):
    __tablename__ = "bookings"

    id = Column(String(36), primary_key=True, default=generate_id)
    dog_name = Column(String(255), nullable=False)
    dog_breed = Column(String(255), nullable=True)
    dog_age = Column(Integer, nullable=True)
    preferred_date = Column(Date, nullable=False, index=True)
    preferred_time = Column(String(5), nullable=False)  # HH:MM
    status = Column(String(20), default=BookingStatus.PENDING.value, nullable=False, index=True)
    contact_name = Column(String(255), nullable=True)
    contact_email = Column(String(255), nullable=True)
    contact_phone = Column(String(50), nullable=True)
    # Still carries "Contact: X, Email: Y, Phone: Z" for rows written before the contact columns
    notes = Column(Text, nullable=True)
    special_requirements = Column(Text, nullable=True)
    created_at = Column(DateTime, server_default=func.now())
    updated_at = Column(DateTime, server_default=func.now(), onupdate=func.now())


class BookingSetting(Base):
    __tablename__ = "booking_settings"

    id = Column(Integer, primary_key=True, index=True)
    setting_key = Column(String(100), unique=True, nullable=False)
    setting_value = Column(String(255), nullable=False)
    setting_type = Column(String(20), default="string", nullable=False)  # string | number
    updated_at = Column(DateTime, server_default=func.now(), onupdate=func.now())


class OrderSnapshot(Base):
    """Point-in-time copy of an order's pricing, products and shipping details"""

    __tablename__ = "order_snapshots"

    id = Column(Integer, primary_key=True, index=True)
    order_id = Column(String(36), ForeignKey("orders.id", ondelete="CASCADE"), nullable=False, index=True)
    product_data = Column(JSON, nullable=False)
    pricing_data = Column(JSON, nullable=False)
    shipping_data = Column(JSON, nullable=True)
    created_at = Column(DateTime, server_default=func.now())


class BookingSnapshot(Base):
    """Point-in-time copy of a booking and the settings it was validated against"""

    __tablename__ = "booking_snapshots"

    id = Column(Integer, primary_key=True, index=True)
    booking_id = Column(
        String(36), ForeignKey("bookings.id", ondelete="CASCADE"), nullable=False, index=True
    )
    booking_data = Column(JSON, nullable=False)
    settings_data = Column(JSON, nullable=True)
    created_at = Column(DateTime, server_default=func.now())
