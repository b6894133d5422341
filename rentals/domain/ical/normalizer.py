"""Turns raw calendar events into booking candidates"""

import logging
from dataclasses import dataclass
from datetime import date, datetime, timedelta, timezone
from typing import Optional

from ...config import ICAL_BLOCK_LABEL, ICAL_DEFAULT_GUEST_LABEL, ICAL_STALE_AFTER_DAYS
from ...utils.finance import calculate_nights
from .exceptions import InvalidEventDates
from .feed_client import CalendarEvent, EventTime

logger = logging.getLogger(__name__)

GUEST_NAME_SEPARATOR = " - "
BLOCK_KEYWORDS = ("reserved", "blocked", "not available", "airbnb")


@dataclass
class CandidateBooking:
    uid: str
    start: datetime
    end: datetime
    nights: int
    guest_name: str
    notes: Optional[str]
    source_name: str


def to_instant(value: EventTime) -> datetime:
    """
    Convert an iCal DTSTART/DTEND value to a naive UTC datetime.
    All-day dates become midnight; floating times are taken as UTC.
    """
    if isinstance(value, datetime):
        if value.tzinfo is not None:
            return value.astimezone(timezone.utc).replace(tzinfo=None)
        return value
    if isinstance(value, date):
        return datetime(value.year, value.month, value.day)
    raise InvalidEventDates(f"Not a date or datetime: {value!r}")


def derive_guest_name(summary: Optional[str]) -> str:
    summary = (summary or "").strip()
    if not summary:
        return ICAL_DEFAULT_GUEST_LABEL

    if GUEST_NAME_SEPARATOR in summary:
        guest_name = summary.split(GUEST_NAME_SEPARATOR, 1)[0].strip()
        return guest_name or ICAL_DEFAULT_GUEST_LABEL

    lowered = summary.lower()
    if any(keyword in lowered for keyword in BLOCK_KEYWORDS):
        return ICAL_BLOCK_LABEL

    return summary


def normalize_event(
    event: CalendarEvent,
    now: datetime,
    source_name: str,
    stale_after_days: int = ICAL_STALE_AFTER_DAYS,
) -> Optional[CandidateBooking]:
    """
    Build a booking candidate from a feed event, or None when the event is discarded:
    unparseable dates, end before start, missing UID, or ended more than
    `stale_after_days` before `now` (naive UTC).
    """
    try:
        start = to_instant(event.start)
        end = to_instant(event.end)
        if end < start:
            raise InvalidEventDates(f"End {end} is before start {start}")
    except InvalidEventDates as e:
        logger.debug(f"Skipping event {event.uid or '<no uid>'} from {source_name}: {e}")
        return None

    if not event.uid:
        logger.debug(f"Skipping event without UID from {source_name}")
        return None

    if end < now - timedelta(days=stale_after_days):
        return None

    return CandidateBooking(
        uid=event.uid,
        start=start,
        end=end,
        nights=calculate_nights(start, end),
        guest_name=derive_guest_name(event.summary),
        notes=event.description or None,
        source_name=source_name,
    )
