"""Booking service - assessment visit intake, admin status console and calendar settings"""

import logging
import re
from datetime import date, datetime
from typing import Callable, Optional

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from ...exceptions import BookingValidationError, NotFoundError
from ...models import Booking, BookingStatus
from ...shared.validators import validate_time_label
from ..snapshots import create_booking_snapshot
from .repository import BookingRepository, BookingSettingRepository
from .schemas import (
    AvailabilityResponse,
    BookingCreate,
    BookingResponse,
    BookingSettingsResponse,
    BookingSettingsUpdate,
)
from .slots import (
    BookingSettings,
    available_slots,
    business_now,
    parse_time_label,
    validate_requested_slot,
)

logger = logging.getLogger(__name__)

# Legacy contact line kept in Booking.notes for older admin tooling
LEGACY_CONTACT_TEMPLATE = "Contact: {name}, Email: {email}, Phone: {phone}"
CONTACT_NAME_PATTERN = re.compile(r"Contact:\s*([^,]+)")
CONTACT_EMAIL_PATTERN = re.compile(r"Email:\s*([^\s,]+)")
CONTACT_PHONE_PATTERN = re.compile(r"Phone:\s*([^\s,]+)")

NUMBER_SETTINGS = {"booking_interval", "min_advance_hours"}


def format_legacy_contact(name: str, email: str, phone: str) -> str:
    return LEGACY_CONTACT_TEMPLATE.format(name=name, email=email, phone=phone)


def parse_legacy_contact(notes: Optional[str]) -> dict:
    """Pull contact details back out of a legacy notes line"""
    if not notes:
        return {"name": "Unknown", "email": "N/A", "phone": "N/A"}

    name = CONTACT_NAME_PATTERN.search(notes)
    email = CONTACT_EMAIL_PATTERN.search(notes)
    phone = CONTACT_PHONE_PATTERN.search(notes)

    return {
        "name": name.group(1).strip() if name else "Unknown",
        "email": email.group(1).strip() if email else "N/A",
        "phone": phone.group(1).strip() if phone else "N/A",
    }


class BookingService:
    def __init__(self, db: Session, now_fn: Callable[[], datetime] = business_now):
        self.db = db
        self.now_fn = now_fn
        self.repo = BookingRepository()
        self.settings_repo = BookingSettingRepository()

    # ------------------------------------------------------------------
    # Settings
    # ------------------------------------------------------------------

    def get_settings(self) -> BookingSettings:
        """Configured defaults overridden by booking_settings rows"""
        values = BookingSettings.from_config().to_dict()
        for row in self.settings_repo.list_settings(self.db):
            if row.setting_key not in values:
                continue
            if row.setting_type == "number" or row.setting_key in NUMBER_SETTINGS:
                try:
                    values[row.setting_key] = int(row.setting_value)
                except ValueError:
                    logger.warning(f"⚠️ Ignoring non-numeric booking setting {row.setting_key}={row.setting_value!r}")
            else:
                try:
                    values[row.setting_key] = validate_time_label(row.setting_value)
                except ValueError:
                    logger.warning(f"⚠️ Ignoring malformed booking setting {row.setting_key}={row.setting_value!r}")
        return BookingSettings(**values)

    def update_settings(self, data: BookingSettingsUpdate) -> BookingSettingsResponse:
        changes = data.model_dump(exclude_unset=True, exclude_none=True)
        merged = BookingSettings(**{**self.get_settings().to_dict(), **changes})

        if parse_time_label(merged.booking_start_time) >= parse_time_label(merged.booking_end_time):
            raise BookingValidationError("booking_end_time", "Closing time must be after opening time")

        self.settings_repo.upsert_settings(
            self.db,
            {
                key: (str(value), "number" if key in NUMBER_SETTINGS else "string")
                for key, value in changes.items()
            },
        )
        logger.info(f"Booking settings updated: {changes}")
        return BookingSettingsResponse(**merged.to_dict())

    def get_availability(self, booking_date: date) -> AvailabilityResponse:
        settings = self.get_settings()
        return AvailabilityResponse(
            booking_date=booking_date,
            settings=BookingSettingsResponse(**settings.to_dict()),
            slots=available_slots(booking_date, self.now_fn(), settings),
        )

    # ------------------------------------------------------------------
    # Intake
    # ------------------------------------------------------------------

    def submit_booking(self, data: BookingCreate) -> Booking:
        """
        Validate the requested slot and record a pending booking.

        Raises:
            BookingValidationError: slot not offered or too soon; nothing is written
        """
        settings = self.get_settings()
        validate_requested_slot(data.preferred_date, data.preferred_time, self.now_fn(), settings)

        notes = format_legacy_contact(data.contact.name, data.contact.email, data.contact.phone)
        if data.notes and data.notes.strip():
            notes = f"{notes}\n{data.notes.strip()}"

        try:
            booking = self.repo.create_booking(
                self.db,
                dog_name=data.dog.name,
                dog_breed=data.dog.breed,
                dog_age=data.dog.age,
                preferred_date=data.preferred_date,
                preferred_time=data.preferred_time,
                status=BookingStatus.PENDING.value,
                contact_name=data.contact.name,
                contact_email=data.contact.email,
                contact_phone=data.contact.phone,
                notes=notes,
                special_requirements=data.special_requirements,
            )
        except SQLAlchemyError as e:
            self.db.rollback()
            logger.error(f"❌ Failed to record booking for {data.contact.email} on {data.preferred_date}: {e}")
            raise

        logger.info(f"✅ Booking {booking.id} requested for {booking.preferred_date} {booking.preferred_time}")
        create_booking_snapshot(self.db, booking, settings.to_dict())
        return booking

    # ------------------------------------------------------------------
    # Admin
    # ------------------------------------------------------------------

    def list_bookings(self, status: Optional[BookingStatus] = None) -> list[BookingResponse]:
        bookings = self.repo.list_bookings(self.db, status.value if status else None)
        return [self._to_response(b) for b in bookings]

    def get_booking(self, booking_id: str) -> Booking:
        booking = self.repo.get_booking(self.db, booking_id)
        if not booking:
            raise NotFoundError("Booking not found")
        return booking

    def get_booking_detail(self, booking_id: str) -> BookingResponse:
        return self._to_response(self.get_booking(booking_id))

    def update_status(self, booking_id: str, status: BookingStatus) -> BookingResponse:
        booking = self.get_booking(booking_id)
        previous = booking.status
        self.repo.update_booking(self.db, booking, status=status.value)
        logger.info(f"Booking {booking_id} status changed by admin: {previous} -> {status.value}")
        return self._to_response(booking)

    @staticmethod
    def _to_response(booking: Booking) -> BookingResponse:
        response = BookingResponse.model_validate(booking)
        if not (booking.contact_name or booking.contact_email or booking.contact_phone):
            # Rows written before contact columns existed
            legacy = parse_legacy_contact(booking.notes)
            response.contact_name = legacy["name"]
            response.contact_email = legacy["email"]
            response.contact_phone = legacy["phone"]
        return response
