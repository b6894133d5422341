"""iCal repository - Database operations for calendar sync and export"""

from datetime import datetime
from typing import Optional

from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from ...models import Booking, BookingStatus, Channel, Property


class ICalRepository:
    """Repository for calendar feed and imported booking operations"""

    @staticmethod
    def get_property(db: Session, property_id: int, user_id: int) -> Optional[Property]:
        return (
            db.query(Property)
            .filter(Property.id == property_id, Property.user_id == user_id)
            .first()
        )

    @staticmethod
    def get_property_by_id(db: Session, property_id: int) -> Optional[Property]:
        return db.query(Property).filter(Property.id == property_id).first()

    @staticmethod
    def get_property_by_token(db: Session, token: str) -> Optional[Property]:
        return db.query(Property).filter(Property.ical_token == token).first()

    @staticmethod
    def get_properties_with_feeds(db: Session) -> list[Property]:
        """Every property, of any owner, with at least one external feed configured"""
        properties = (
            db.query(Property).filter(Property.ical_urls.isnot(None)).order_by(Property.id).all()
        )
        # JSON null and empty lists are filtered here, portable across dialects
        return [p for p in properties if isinstance(p.ical_urls, list) and p.ical_urls]

    @staticmethod
    def get_channels(db: Session, user_id: int) -> list[Channel]:
        return db.query(Channel).filter(Channel.user_id == user_id).order_by(Channel.id).all()

    @staticmethod
    def get_imported_booking(db: Session, property_id: int, ical_uid: str) -> Optional[Booking]:
        return (
            db.query(Booking)
            .filter(Booking.property_id == property_id, Booking.ical_uid == ical_uid)
            .first()
        )

    @staticmethod
    def create_imported_booking(db: Session, **booking_data) -> Optional[Booking]:
        """
        Insert an imported booking.
        Returns None when the (property_id, ical_uid) unique constraint rejects it,
        i.e. another run imported the same event first.
        """
        booking = Booking(**booking_data)
        db.add(booking)
        try:
            db.commit()
        except IntegrityError:
            db.rollback()
            return None
        db.refresh(booking)
        return booking

    @staticmethod
    def update_booking_dates(
        db: Session, booking: Booking, check_in: datetime, check_out: datetime, nights: int
    ) -> Booking:
        booking.check_in = check_in
        booking.check_out = check_out
        booking.nights = nights
        db.commit()
        db.refresh(booking)
        return booking

    @staticmethod
    def set_feeds(db: Session, property: Property, feeds: list[dict]) -> Property:
        # Reassign rather than mutate so the JSON column is flagged dirty
        property.ical_urls = feeds
        db.commit()
        db.refresh(property)
        return property

    @staticmethod
    def set_token(db: Session, property: Property, token: str) -> Property:
        property.ical_token = token
        db.commit()
        db.refresh(property)
        return property

    @staticmethod
    def stamp_last_sync(db: Session, property: Property, synced_at: datetime) -> None:
        property.ical_last_sync = synced_at
        db.commit()

    @staticmethod
    def get_export_bookings(db: Session, property_id: int, since: datetime) -> list[Booking]:
        """Non-cancelled bookings of a property checking out on or after `since`"""
        return (
            db.query(Booking)
            .filter(
                Booking.property_id == property_id,
                Booking.status != BookingStatus.CANCELLED,
                Booking.check_out >= since,
            )
            .order_by(Booking.check_in.asc())
            .all()
        )
