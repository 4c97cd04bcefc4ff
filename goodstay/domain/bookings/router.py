"""Booking router - public booking form, availability and admin booking console"""

import logging
from datetime import date
from typing import Optional

from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session

from ... import config
from ...auth import AdminUser, get_current_admin
from ...database import get_db
from ...models import BookingStatus
from ...rate_limiter import create_rate_limiter
from .schemas import (
    AvailabilityResponse,
    BookingCreate,
    BookingCreatedResponse,
    BookingResponse,
    BookingSettingsResponse,
    BookingSettingsUpdate,
    BookingStatusUpdate,
)
from .service import BookingService

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/bookings", tags=["Bookings"])
admin_router = APIRouter(prefix="/api/admin/bookings", tags=["Admin - Bookings"])
settings_router = APIRouter(prefix="/api/admin/booking-settings", tags=["Admin - Bookings"])

booking_rate_limit = create_rate_limiter(
    limit=config.BOOKING_RATE_LIMIT, window_seconds=3600, key_prefix="booking"
)


def get_booking_service(db: Session = Depends(get_db)) -> BookingService:
    """Dependency injection for BookingService"""
    return BookingService(db)


# ============================================================================
# PUBLIC BOOKING FORM
# ============================================================================


@router.post("", response_model=BookingCreatedResponse, status_code=201)
async def submit_booking(
    body: BookingCreate,
    _: None = Depends(booking_rate_limit),
    service: BookingService = Depends(get_booking_service),
):
    """Request an assessment visit"""
    booking = service.submit_booking(body)
    return BookingCreatedResponse(id=booking.id, status=booking.status)


@router.get("/availability", response_model=AvailabilityResponse)
async def get_availability(
    date: date = Query(..., description="YYYY-MM-DD"),
    service: BookingService = Depends(get_booking_service),
):
    """Slots still open on the given day"""
    return service.get_availability(date)


# ============================================================================
# ADMIN
# ============================================================================


@admin_router.get("", response_model=list[BookingResponse])
async def list_bookings(
    status: Optional[BookingStatus] = Query(None),
    _admin: AdminUser = Depends(get_current_admin),
    service: BookingService = Depends(get_booking_service),
):
    return service.list_bookings(status)


@admin_router.get("/{booking_id}", response_model=BookingResponse)
async def get_booking(
    booking_id: str,
    _admin: AdminUser = Depends(get_current_admin),
    service: BookingService = Depends(get_booking_service),
):
    return service.get_booking_detail(booking_id)


@admin_router.patch("/{booking_id}/status", response_model=BookingResponse)
async def update_booking_status(
    booking_id: str,
    body: BookingStatusUpdate,
    _admin: AdminUser = Depends(get_current_admin),
    service: BookingService = Depends(get_booking_service),
):
    """Set the booking status directly"""
    return service.update_status(booking_id, body.status)


@settings_router.get("", response_model=BookingSettingsResponse)
async def get_booking_settings(
    _admin: AdminUser = Depends(get_current_admin),
    service: BookingService = Depends(get_booking_service),
):
    return BookingSettingsResponse(**service.get_settings().to_dict())


@settings_router.put("", response_model=BookingSettingsResponse)
async def update_booking_settings(
    body: BookingSettingsUpdate,
    _admin: AdminUser = Depends(get_current_admin),
    service: BookingService = Depends(get_booking_service),
):
    return service.update_settings(body)
