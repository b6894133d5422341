"""Booking repository - Database operations for bookings"""

from datetime import datetime
from typing import Optional

from sqlalchemy.orm import Session

from ...models import Booking, Channel, Property


class BookingRepository:
    """Repository for booking database operations"""

    @staticmethod
    def get_bookings(
        db: Session,
        user_id: int,
        offset: int,
        limit: int,
        property_id: Optional[int] = None,
        status: Optional[str] = None,
        channel_id: Optional[int] = None,
        start_date: Optional[datetime] = None,
        end_date: Optional[datetime] = None,
    ) -> tuple[list[Booking], int]:
        """Bookings of a user, newest check-in first, with the total before paging"""
        query = db.query(Booking).filter(Booking.user_id == user_id)

        if property_id:
            query = query.filter(Booking.property_id == property_id)
        if status:
            query = query.filter(Booking.status == status)
        if channel_id:
            query = query.filter(Booking.channel_id == channel_id)
        if start_date and end_date:
            # Any overlap with the requested range
            query = query.filter(Booking.check_in <= end_date, Booking.check_out >= start_date)

        total = query.count()
        bookings = (
            query.order_by(Booking.check_in.desc(), Booking.id.desc())
            .offset(offset)
            .limit(limit)
            .all()
        )
        return bookings, total

    @staticmethod
    def get_booking_by_id(db: Session, booking_id: int, user_id: int) -> Optional[Booking]:
        return (
            db.query(Booking)
            .filter(Booking.id == booking_id, Booking.user_id == user_id)
            .first()
        )

    @staticmethod
    def get_property(db: Session, property_id: int, user_id: int) -> Optional[Property]:
        return (
            db.query(Property)
            .filter(Property.id == property_id, Property.user_id == user_id)
            .first()
        )

    @staticmethod
    def get_channel(db: Session, channel_id: int, user_id: int) -> Optional[Channel]:
        return (
            db.query(Channel)
            .filter(Channel.id == channel_id, Channel.user_id == user_id)
            .first()
        )

    @staticmethod
    def create_booking(db: Session, user_id: int, **booking_data) -> Booking:
        booking = Booking(user_id=user_id, **booking_data)
        db.add(booking)
        db.commit()
        db.refresh(booking)
        return booking

    @staticmethod
    def update_booking(db: Session, booking: Booking, **updates) -> Booking:
        for key, value in updates.items():
            setattr(booking, key, value)

        db.commit()
        db.refresh(booking)
        return booking

    @staticmethod
    def delete_booking(db: Session, booking: Booking) -> None:
        db.delete(booking)
        db.commit()
