"""Booking repository - Database operations for bookings and booking settings"""

from typing import Optional

from sqlalchemy.orm import Session

from ...models import Booking, BookingSetting


class BookingRepository:
    """Repository for booking database operations"""

    @staticmethod
    def create_booking(db: Session, **booking_data) -> Booking:
        booking = Booking(**booking_data)
        db.add(booking)
        db.commit()
        db.refresh(booking)
        return booking

    @staticmethod
    def get_booking(db: Session, booking_id: str) -> Optional[Booking]:
        return db.query(Booking).filter(Booking.id == booking_id).first()

    @staticmethod
    def list_bookings(db: Session, status: Optional[str] = None) -> list[Booking]:
        query = db.query(Booking)
        if status:
            query = query.filter(Booking.status == status)
        return query.order_by(Booking.preferred_date.asc(), Booking.preferred_time.asc()).all()

    @staticmethod
    def update_booking(db: Session, booking: Booking, **updates) -> Booking:
        for key, value in updates.items():
            if hasattr(booking, key):
                setattr(booking, key, value)

        db.commit()
        db.refresh(booking)
        return booking


class BookingSettingRepository:
    """Repository for booking_settings key/value rows"""

    @staticmethod
    def list_settings(db: Session) -> list[BookingSetting]:
        return db.query(BookingSetting).all()

    @staticmethod
    def upsert_settings(db: Session, values: dict[str, tuple[str, str]]) -> None:
        """Write {key: (value, type)} pairs in one commit"""
        existing = {
            row.setting_key: row
            for row in db.query(BookingSetting).filter(BookingSetting.setting_key.in_(list(values))).all()
        }
        for key, (value, setting_type) in values.items():
            row = existing.get(key)
            if row is None:
                db.add(BookingSetting(setting_key=key, setting_value=value, setting_type=setting_type))
            else:
                row.setting_value = value
                row.setting_type = setting_type
        db.commit()
