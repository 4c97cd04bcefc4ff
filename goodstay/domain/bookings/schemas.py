"""Booking domain schemas - Pydantic models for validation"""

from datetime import date, datetime
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator

from ...models import BookingStatus
from ...shared.validators import require_text, validate_email, validate_phone, validate_time_label


class ContactInfo(BaseModel):
    name: str
    email: str
    phone: str

    @field_validator("name")
    @classmethod
    def validate_name(cls, v: str) -> str:
        return require_text(v, "Please enter your full name")

    @field_validator("email")
    @classmethod
    def validate_email_address(cls, v: str) -> str:
        return validate_email(require_text(v, "Please enter your email address"))

    @field_validator("phone")
    @classmethod
    def validate_phone_number(cls, v: str) -> str:
        return validate_phone(require_text(v, "Please enter your phone number"))


class DogInfo(BaseModel):
    name: str
    breed: Optional[str] = None
    age: Optional[int] = Field(None, ge=0, le=40)

    @field_validator("name")
    @classmethod
    def validate_name(cls, v: str) -> str:
        return require_text(v, "Please enter your dog's name")


class BookingCreate(BaseModel):
    """Schema for an assessment visit request from the public booking form"""

    contact: ContactInfo
    dog: DogInfo
    preferred_date: date
    preferred_time: str
    notes: Optional[str] = None
    special_requirements: Optional[str] = None

    @field_validator("preferred_time")
    @classmethod
    def validate_preferred_time(cls, v: str) -> str:
        return validate_time_label(v)


class BookingCreatedResponse(BaseModel):
    id: str
    status: str


class BookingResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: str
    dog_name: str
    dog_breed: Optional[str] = None
    dog_age: Optional[int] = None
    preferred_date: date
    preferred_time: str
    status: str
    contact_name: Optional[str] = None
    contact_email: Optional[str] = None
    contact_phone: Optional[str] = None
    notes: Optional[str] = None
    special_requirements: Optional[str] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None


class BookingStatusUpdate(BaseModel):
    """Any status may be set from any other"""

    status: BookingStatus


class BookingSettingsResponse(BaseModel):
    booking_start_time: str
    booking_end_time: str
    booking_interval: int
    min_advance_hours: int


class BookingSettingsUpdate(BaseModel):
    """Only provided settings are stored; the rest keep their current value"""

    booking_start_time: Optional[str] = None
    booking_end_time: Optional[str] = None
    booking_interval: Optional[int] = Field(None, ge=5, le=480)
    min_advance_hours: Optional[int] = Field(None, ge=0, le=720)

    @field_validator("booking_start_time", "booking_end_time")
    @classmethod
    def validate_times(cls, v: Optional[str]) -> Optional[str]:
        if v is None:
            return v
        return validate_time_label(v)


class AvailabilityResponse(BaseModel):
    booking_date: date
    settings: BookingSettingsResponse
    slots: list[str]
