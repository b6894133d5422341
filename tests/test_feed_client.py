from datetime import date, datetime, timedelta, timezone

import httpx
import pytest

from rentals.domain.ical.exceptions import FeedUnavailable
from rentals.domain.ical.feed_client import ICalFeedClient, parse_calendar

AIRBNB_FEED = b"""BEGIN:VCALENDAR\r
VERSION:2.0\r
PRODID:-//Airbnb Inc//Hosting Calendar 0.8.8//EN\r
CALSCALE:GREGORIAN\r
BEGIN:VEVENT\r
DTSTAMP:20250520T120000Z\r
DTSTART;VALUE=DATE:20250601\r
DTEND;VALUE=DATE:20250604\r
SUMMARY:Jane Doe - Airbnb reservation\r
UID:abc123@airbnb.com\r
DESCRIPTION:Reservation URL: https://www.airbnb.com/hosting/reservations/det\r
 ails/HM123\r
END:VEVENT\r
BEGIN:VEVENT\r
DTSTAMP:20250520T120000Z\r
DTSTART;VALUE=DATE:20250710\r
DTEND;VALUE=DATE:20250712\r
SUMMARY:Airbnb (Not available)\r
UID:def456@airbnb.com\r
END:VEVENT\r
END:VCALENDAR\r
"""

TIMED_FEED = b"""BEGIN:VCALENDAR\r
VERSION:2.0\r
PRODID:-//Test//EN\r
BEGIN:VEVENT\r
UID:timed-1\r
DTSTART:20250601T140000Z\r
DURATION:P3D\r
SUMMARY:Mario Rossi\r
END:VEVENT\r
BEGIN:VEVENT\r
UID:all-day-1\r
DTSTART;VALUE=DATE:20250801\r
SUMMARY:Owner stay\r
END:VEVENT\r
END:VCALENDAR\r
"""


def transport_for(status_code=200, content=AIRBNB_FEED, seen=None):
    def handler(request: httpx.Request) -> httpx.Response:
        if seen is not None:
            seen.append(request)
        return httpx.Response(status_code, content=content)

    return httpx.MockTransport(handler)


def test_parse_calendar_keeps_document_order_and_fields():
    events = parse_calendar(AIRBNB_FEED)

    assert [e.uid for e in events] == ["abc123@airbnb.com", "def456@airbnb.com"]
    first = events[0]
    assert first.start == date(2025, 6, 1)
    assert first.end == date(2025, 6, 4)
    assert first.summary == "Jane Doe - Airbnb reservation"
    assert first.description.endswith("details/HM123")


def test_parse_calendar_derives_missing_end():
    timed, all_day = parse_calendar(TIMED_FEED)

    assert timed.start == datetime(2025, 6, 1, 14, 0, tzinfo=timezone.utc)
    assert timed.end == timed.start + timedelta(days=3)
    assert all_day.start == date(2025, 8, 1)
    assert all_day.end == date(2025, 8, 2)


def test_parse_calendar_rejects_non_calendar_payload():
    with pytest.raises(FeedUnavailable):
        parse_calendar(b"<html><body>Login required</body></html>", "https://example.com/feed.ics")


async def test_fetch_events_downloads_and_parses():
    seen = []
    client = ICalFeedClient(transport=transport_for(seen=seen))

    events = await client.fetch_events("https://www.airbnb.com/calendar/ical/1.ics?s=abc")

    assert len(events) == 2
    assert seen[0].headers["Accept"] == "text/calendar"


async def test_webcal_urls_are_fetched_over_https():
    seen = []
    client = ICalFeedClient(transport=transport_for(seen=seen))

    await client.fetch_events("webcal://calendar.example.com/feed.ics")

    assert seen[0].url.scheme == "https"
    assert seen[0].url.host == "calendar.example.com"


async def test_http_error_status_raises_feed_unavailable():
    client = ICalFeedClient(transport=transport_for(status_code=404, content=b"Not found"))

    with pytest.raises(FeedUnavailable) as exc_info:
        await client.fetch_events("https://example.com/missing.ics")

    assert exc_info.value.message == "HTTP 404"
    assert exc_info.value.url == "https://example.com/missing.ics"


async def test_timeout_raises_feed_unavailable():
    def handler(request):
        raise httpx.ReadTimeout("timed out", request=request)

    client = ICalFeedClient(timeout=1, transport=httpx.MockTransport(handler))

    with pytest.raises(FeedUnavailable) as exc_info:
        await client.fetch_events("https://slow.example.com/feed.ics")

    assert "Timed out" in exc_info.value.message


async def test_connection_error_raises_feed_unavailable():
    def handler(request):
        raise httpx.ConnectError("connection refused", request=request)

    client = ICalFeedClient(transport=httpx.MockTransport(handler))

    with pytest.raises(FeedUnavailable):
        await client.fetch_events("https://down.example.com/feed.ics")


async def test_invalid_payload_raises_feed_unavailable():
    client = ICalFeedClient(transport=transport_for(content=b"<html>Maintenance</html>"))

    with pytest.raises(FeedUnavailable):
        await client.fetch_events("https://example.com/feed.ics")
