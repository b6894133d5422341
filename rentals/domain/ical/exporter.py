"""Renders a property's bookings as a public iCalendar feed"""

from datetime import datetime, timedelta, timezone

from icalendar import Calendar, Event

from ...models import Booking, BookingStatus, Property

PRODID = "-//Rentals Backend//Booking Calendar//EN"


def _description(booking: Booking) -> str:
    lines = [f"Guests: {booking.number_of_guests}", f"Nights: {booking.nights}"]
    if booking.notes:
        lines.append(f"Notes: {booking.notes}")
    return "\n".join(lines)


def build_export_calendar(property: Property, bookings: list[Booking]) -> bytes:
    calendar = Calendar()
    calendar.add("prodid", PRODID)
    calendar.add("version", "2.0")
    calendar.add("method", "PUBLISH")
    calendar.add("x-wr-calname", property.name)

    stamp = datetime.now(timezone.utc)
    for booking in bookings:
        event = Event()
        event.add("uid", f"booking-{booking.id}@property-{property.id}")
        event.add("dtstamp", stamp)
        # All-day events: guests arrive and leave on dates, not instants.
        # DTEND is exclusive and must follow DTSTART, so same-day stays span one day.
        start = booking.check_in.date()
        event.add("dtstart", start)
        event.add("dtend", max(booking.check_out.date(), start + timedelta(days=1)))
        event.add("summary", f"{booking.guest_name} - {booking.ical_source or 'Booking'}")
        event.add("description", _description(booking))
        event.add(
            "status", "CONFIRMED" if booking.status == BookingStatus.CONFIRMED else "TENTATIVE"
        )
        calendar.add_component(event)

    return calendar.to_ical()
