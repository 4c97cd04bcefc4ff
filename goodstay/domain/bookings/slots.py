"""
Booking calendar rules.

Slots run from the opening time to the closing time, every `interval_minutes`,
closing time included. A slot today is bookable once it is at or after the
earliest bookable instant: now plus the minimum advance, rounded down onto the
slot grid. Any slot on a later date is bookable; earlier dates never are.

All times are naive local times in the business timezone.
"""

from dataclasses import asdict, dataclass
from datetime import date, datetime, time, timedelta
from typing import Optional
from zoneinfo import ZoneInfo

from ... import config
from ...exceptions import BookingValidationError
from ...shared.validators import validate_time_label


@dataclass(frozen=True)
class BookingSettings:
    booking_start_time: str = "09:00"
    booking_end_time: str = "17:00"
    booking_interval: int = 60  # minutes
    min_advance_hours: int = 3

    @classmethod
    def from_config(cls) -> "BookingSettings":
        return cls(
            booking_start_time=config.BOOKING_START_TIME,
            booking_end_time=config.BOOKING_END_TIME,
            booking_interval=config.BOOKING_INTERVAL_MINUTES,
            min_advance_hours=config.BOOKING_MIN_ADVANCE_HOURS,
        )

    def to_dict(self) -> dict:
        return asdict(self)


def business_now() -> datetime:
    """Current wall-clock time at the business, without tzinfo"""
    return datetime.now(ZoneInfo(config.BUSINESS_TIMEZONE)).replace(tzinfo=None)


def parse_time_label(label: str) -> time:
    hours, minutes = validate_time_label(label).split(":")
    return time(int(hours), int(minutes))


def generate_time_slots(settings: BookingSettings) -> list[str]:
    """HH:MM labels from opening to closing time inclusive"""
    if settings.booking_interval <= 0:
        raise ValueError("booking_interval must be positive")

    day = date(2000, 1, 1)
    current = datetime.combine(day, parse_time_label(settings.booking_start_time))
    end = datetime.combine(day, parse_time_label(settings.booking_end_time))
    step = timedelta(minutes=settings.booking_interval)

    slots = []
    while current <= end:
        slots.append(current.strftime("%H:%M"))
        current += step
    return slots


def earliest_bookable(now: datetime, settings: BookingSettings) -> datetime:
    """now + min advance, rounded down onto the slot grid of that day"""
    candidate = now + timedelta(hours=settings.min_advance_hours)
    anchor = datetime.combine(candidate.date(), parse_time_label(settings.booking_start_time))
    if candidate <= anchor:
        return candidate

    step = timedelta(minutes=settings.booking_interval)
    return anchor + ((candidate - anchor) // step) * step


def is_slot_bookable(preferred_date: date, slot: str, now: datetime, settings: BookingSettings) -> bool:
    today = now.date()
    if preferred_date < today:
        return False
    if preferred_date > today:
        return True
    slot_at = datetime.combine(preferred_date, parse_time_label(slot))
    return slot_at >= earliest_bookable(now, settings)


def available_slots(preferred_date: date, now: datetime, settings: BookingSettings) -> list[str]:
    return [slot for slot in generate_time_slots(settings) if is_slot_bookable(preferred_date, slot, now, settings)]


def validate_requested_slot(
    preferred_date: date,
    preferred_time: str,
    now: datetime,
    settings: Optional[BookingSettings] = None,
) -> None:
    """
    Check a requested visit time against the calendar rules.

    Raises:
        BookingValidationError: naming the offending field
    """
    settings = settings or BookingSettings.from_config()

    if preferred_date < now.date():
        raise BookingValidationError("preferred_date", "Please select a date that is not in the past")

    if preferred_time not in generate_time_slots(settings):
        raise BookingValidationError("preferred_time", "Please select one of the available times")

    if not is_slot_bookable(preferred_date, preferred_time, now, settings):
        raise BookingValidationError(
            "preferred_time",
            f"Please select a date and time at least {settings.min_advance_hours} hours from now",
        )
