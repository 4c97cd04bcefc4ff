import os
from pathlib import Path

from dotenv import load_dotenv

# Load .env from project root
env_path = Path(__file__).resolve().parent.parent / ".env"
load_dotenv(dotenv_path=env_path)

DATABASE_URL = os.getenv("DATABASE_URL", "sqlite:///./goodstay.db")

# Stripe Configuration
STRIPE_SECRET_KEY = os.getenv("STRIPE_SECRET_KEY")
STRIPE_WEBHOOK_SECRET = os.getenv("STRIPE_WEBHOOK_SECRET")
STRIPE_CURRENCY = os.getenv("STRIPE_CURRENCY", "usd")
# Countries offered in the hosted checkout's shipping address form
STRIPE_ALLOWED_COUNTRIES = [
    c.strip().upper() for c in os.getenv("STRIPE_ALLOWED_COUNTRIES", "US,CA").split(",") if c.strip()
]
# Seconds of clock skew tolerated when verifying Stripe-Signature headers
STRIPE_WEBHOOK_TOLERANCE = int(os.getenv("STRIPE_WEBHOOK_TOLERANCE", "300"))

# Admin authentication (Supabase-issued HS256 access tokens)
ADMIN_JWT_SECRET = os.getenv("ADMIN_JWT_SECRET")
ADMIN_JWT_AUDIENCE = os.getenv("ADMIN_JWT_AUDIENCE", "authenticated")
ADMIN_ROLE = os.getenv("ADMIN_ROLE", "admin")

# Frontend base URL for checkout redirects
FRONTEND_URL = os.getenv("FRONTEND_URL", "http://localhost:3000")

# Booking calendar defaults - rows in booking_settings override these
BUSINESS_TIMEZONE = os.getenv("BUSINESS_TIMEZONE", "America/New_York")
BOOKING_START_TIME = os.getenv("BOOKING_START_TIME", "09:00")
BOOKING_END_TIME = os.getenv("BOOKING_END_TIME", "17:00")
BOOKING_INTERVAL_MINUTES = int(os.getenv("BOOKING_INTERVAL_MINUTES", "60"))
BOOKING_MIN_ADVANCE_HOURS = int(os.getenv("BOOKING_MIN_ADVANCE_HOURS", "3"))

# Rate limiting for public form endpoints
RATE_LIMIT_ENABLED = os.getenv("RATE_LIMIT_ENABLED", "true").lower() == "true"
CHECKOUT_RATE_LIMIT = int(os.getenv("CHECKOUT_RATE_LIMIT", "20"))  # per IP per hour
BOOKING_RATE_LIMIT = int(os.getenv("BOOKING_RATE_LIMIT", "10"))  # per IP per hour
