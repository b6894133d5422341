"""Booking service - Business logic and financial derivation for bookings"""

import logging
from datetime import datetime
from typing import Optional

from fastapi import HTTPException
from sqlalchemy.orm import Session

from ...models import Booking, Channel, Property, User
from ...utils.finance import (
    calculate_booking_margin,
    calculate_commission,
    calculate_nights,
    pagination_meta,
)
from .repository import BookingRepository
from .schemas import BookingCreate, BookingUpdate

logger = logging.getLogger(__name__)

# Request field -> column; ical_uid/ical_source are owned by the calendar sync
UPDATABLE_FIELDS = {
    "propertyId": "property_id",
    "channelId": "channel_id",
    "guestName": "guest_name",
    "checkIn": "check_in",
    "checkOut": "check_out",
    "numberOfGuests": "number_of_guests",
    "grossRevenue": "gross_revenue",
    "variableCosts": "variable_costs",
    "status": "status",
    "notes": "notes",
}
NULLABLE_FIELDS = {"channelId", "notes"}


class BookingService:
    """Service layer for booking business logic"""

    def __init__(self, db: Session):
        self.db = db
        self.repo = BookingRepository()

    @staticmethod
    def to_response(booking: Booking) -> dict:
        return {
            "id": booking.id,
            "propertyId": booking.property_id,
            "propertyName": booking.property.name if booking.property else None,
            "channelId": booking.channel_id,
            "channelName": booking.channel.name if booking.channel else None,
            "guestName": booking.guest_name,
            "checkIn": booking.check_in,
            "checkOut": booking.check_out,
            "nights": booking.nights,
            "numberOfGuests": booking.number_of_guests,
            "grossRevenue": booking.gross_revenue,
            "commissionRate": booking.commission_rate,
            "commissionAmount": booking.commission_amount,
            "variableCosts": booking.variable_costs,
            "netRevenue": booking.net_revenue,
            "netMargin": booking.net_margin,
            "status": booking.status,
            "notes": booking.notes,
            "iCalUid": booking.ical_uid,
            "iCalSource": booking.ical_source,
            "created_at": booking.created_at,
        }

    @staticmethod
    def _financials(gross_revenue: float, commission_rate: float, variable_costs: float) -> dict:
        commission_amount, net_revenue = calculate_commission(gross_revenue, commission_rate)
        return {
            "gross_revenue": gross_revenue,
            "commission_rate": commission_rate,
            "commission_amount": commission_amount,
            "variable_costs": variable_costs,
            "net_revenue": net_revenue,
            "net_margin": calculate_booking_margin(net_revenue, variable_costs),
        }

    def _get_property(self, property_id: int, user: User) -> Property:
        property = self.repo.get_property(self.db, property_id, user.id)
        if not property:
            raise HTTPException(status_code=404, detail="Property not found")
        return property

    def _get_channel(self, channel_id: Optional[int], user: User) -> Optional[Channel]:
        if channel_id is None:
            return None
        channel = self.repo.get_channel(self.db, channel_id, user.id)
        if not channel:
            raise HTTPException(status_code=400, detail="Channel not found")
        return channel

    def list_bookings(
        self,
        user: User,
        page: int,
        limit: int,
        property_id: Optional[int] = None,
        status: Optional[str] = None,
        channel_id: Optional[int] = None,
        start_date: Optional[datetime] = None,
        end_date: Optional[datetime] = None,
    ) -> dict:
        bookings, total = self.repo.get_bookings(
            self.db,
            user.id,
            offset=(page - 1) * limit,
            limit=limit,
            property_id=property_id,
            status=status,
            channel_id=channel_id,
            start_date=start_date,
            end_date=end_date,
        )
        return {
            "data": [self.to_response(b) for b in bookings],
            "meta": pagination_meta(total, page, limit),
        }

    def get_booking(self, booking_id: int, user: User) -> Booking:
        booking = self.repo.get_booking_by_id(self.db, booking_id, user.id)
        if not booking:
            raise HTTPException(status_code=404, detail="Booking not found")
        return booking

    def create_booking(self, data: BookingCreate, user: User) -> Booking:
        property = self._get_property(data.propertyId, user)
        channel = self._get_channel(data.channelId, user)
        commission_rate = channel.commission_rate if channel else 0

        logger.info(f"📅 Creating booking for property {property.id} (user_id: {user.id})")
        return self.repo.create_booking(
            self.db,
            user.id,
            property_id=property.id,
            channel_id=channel.id if channel else None,
            guest_name=data.guestName,
            check_in=data.checkIn,
            check_out=data.checkOut,
            nights=calculate_nights(data.checkIn, data.checkOut),
            number_of_guests=data.numberOfGuests,
            status=data.status,
            notes=data.notes,
            **self._financials(data.grossRevenue, commission_rate, data.variableCosts),
        )

    def update_booking(self, booking_id: int, data: BookingUpdate, user: User) -> Booking:
        """
        Apply the fields present in the request and recompute nights and money.

        Changing the channel takes the new channel's commission rate (0 when the
        channel is cleared); otherwise the stored rate is kept.
        """
        booking = self.get_booking(booking_id, user)
        changes = {
            key: value
            for key, value in data.model_dump(exclude_unset=True).items()
            if value is not None or key in NULLABLE_FIELDS
        }
        updates = {UPDATABLE_FIELDS[key]: value for key, value in changes.items()}

        if "property_id" in updates:
            self._get_property(updates["property_id"], user)

        commission_rate = booking.commission_rate
        if "channel_id" in updates:
            channel = self._get_channel(updates["channel_id"], user)
            commission_rate = channel.commission_rate if channel else 0

        check_in = updates.get("check_in", booking.check_in)
        check_out = updates.get("check_out", booking.check_out)
        if check_out < check_in:
            raise HTTPException(status_code=400, detail="Check-out must not be before check-in")
        updates["nights"] = calculate_nights(check_in, check_out)

        updates.update(
            self._financials(
                updates.get("gross_revenue", booking.gross_revenue),
                commission_rate,
                updates.get("variable_costs", booking.variable_costs),
            )
        )
        return self.repo.update_booking(self.db, booking, **updates)

    def update_status(self, booking_id: int, status: str, user: User) -> Booking:
        booking = self.get_booking(booking_id, user)
        return self.repo.update_booking(self.db, booking, status=status)

    def delete_booking(self, booking_id: int, user: User) -> dict:
        booking = self.get_booking(booking_id, user)
        self.repo.delete_booking(self.db, booking)
        logger.info(f"🗑️ Booking {booking_id} deleted by user {user.id}")
        return {"message": "Booking deleted"}
