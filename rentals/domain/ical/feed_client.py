"""
iCal Feed Client
Downloads external calendar feeds (Airbnb, Booking.com, VRBO...) and parses their events
"""

import logging
from dataclasses import dataclass
from datetime import date, datetime, timedelta
from typing import Optional, Union

import httpx
from icalendar import Calendar

from ...config import ICAL_FETCH_TIMEOUT_SECONDS, ICAL_USER_AGENT
from .exceptions import FeedUnavailable

logger = logging.getLogger(__name__)

EventTime = Optional[Union[date, datetime]]


@dataclass
class CalendarEvent:
    uid: str
    start: EventTime
    end: EventTime
    summary: str = ""
    description: str = ""


def _decoded(component, name: str):
    try:
        return component.decoded(name)
    except (KeyError, ValueError, TypeError):
        return None


def _text(component, name: str) -> str:
    value = component.get(name)
    return str(value).strip() if value is not None else ""


def _event_end(component, start: EventTime) -> EventTime:
    end = _decoded(component, "DTEND")
    if end is not None:
        return end
    if start is None:
        return None
    duration = _decoded(component, "DURATION")
    if isinstance(duration, timedelta):
        return start + duration
    # RFC 5545: an all-day event without DTEND lasts one day, a timed one is a point
    if isinstance(start, datetime):
        return start
    if isinstance(start, date):
        return start + timedelta(days=1)
    return None


def parse_calendar(payload: Union[bytes, str], url: str = "") -> list[CalendarEvent]:
    """Parse an iCalendar document into events, in document order"""
    try:
        calendar = Calendar.from_ical(payload)
    except (ValueError, IndexError, KeyError) as e:
        raise FeedUnavailable(url, f"Invalid iCal data: {e}") from e

    events = []
    for component in calendar.walk("VEVENT"):
        start = _decoded(component, "DTSTART")
        if not isinstance(start, (date, datetime)):
            start = None
        events.append(
            CalendarEvent(
                uid=_text(component, "UID"),
                start=start,
                end=_event_end(component, start),
                summary=_text(component, "SUMMARY"),
                description=_text(component, "DESCRIPTION"),
            )
        )
    return events


class ICalFeedClient:
    """Fetches a feed URL on every call; nothing is cached between sync ticks"""

    def __init__(
        self,
        timeout: float = ICAL_FETCH_TIMEOUT_SECONDS,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        self.timeout = timeout
        self.transport = transport

    async def fetch_events(self, url: str) -> list[CalendarEvent]:
        fetch_url = "https://" + url[len("webcal://"):] if url.lower().startswith("webcal://") else url

        try:
            async with httpx.AsyncClient(
                timeout=self.timeout, follow_redirects=True, transport=self.transport
            ) as client:
                response = await client.get(
                    fetch_url, headers={"User-Agent": ICAL_USER_AGENT, "Accept": "text/calendar"}
                )
                response.raise_for_status()
        except httpx.TimeoutException as e:
            logger.warning(f"⏱️ iCal feed timed out after {self.timeout}s: {fetch_url}")
            raise FeedUnavailable(url, f"Timed out after {self.timeout}s") from e
        except httpx.HTTPStatusError as e:
            raise FeedUnavailable(url, f"HTTP {e.response.status_code}") from e
        except (httpx.HTTPError, httpx.InvalidURL) as e:
            raise FeedUnavailable(url, f"Request failed: {e}") from e

        events = parse_calendar(response.content, url)
        logger.debug(f"📅 Fetched {len(events)} events from {fetch_url}")
        return events
