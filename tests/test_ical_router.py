from datetime import date, timedelta

import pytest
from icalendar import Calendar

from factories import make_event, make_property
from rentals.domain.ical.exceptions import FeedUnavailable, PersistenceFailure
from rentals.domain.ical.service import ICalSyncService
from rentals.models import Booking, BookingStatus
from rentals.utils.dates import utcnow

FEED_URL = "https://www.airbnb.com/calendar/ical/42.ics"


@pytest.fixture
def property(db, user):
    return make_property(db, user)


def add_booking(db, property, check_in, check_out, **kwargs):
    booking = Booking(
        user_id=property.user_id,
        property_id=property.id,
        guest_name=kwargs.pop("guest_name", "Guest"),
        check_in=check_in,
        check_out=check_out,
        nights=(check_out - check_in).days,
        **kwargs,
    )
    db.add(booking)
    db.commit()
    return booking


# ============================================================================
# FEED SETTINGS
# ============================================================================


def test_add_and_remove_feed(client, property):
    response = client.post(
        f"/ical/add-url/{property.id}", json={"name": "Airbnb", "url": FEED_URL}
    )

    assert response.status_code == 200
    [feed] = response.json()["iCalUrls"]
    assert feed["name"] == "Airbnb"
    assert feed["url"] == FEED_URL
    assert feed["id"]

    response = client.delete(f"/ical/remove-url/{property.id}/{feed['id']}")

    assert response.status_code == 200
    assert response.json() == {"iCalUrls": []}


def test_remove_unknown_feed_keeps_list(client, property):
    client.post(f"/ical/add-url/{property.id}", json={"name": "Airbnb", "url": FEED_URL})

    response = client.delete(f"/ical/remove-url/{property.id}/does-not-exist")

    assert len(response.json()["iCalUrls"]) == 1


@pytest.mark.parametrize(
    "payload",
    [
        {"name": "Airbnb"},
        {"url": FEED_URL},
        {"name": "  ", "url": FEED_URL},
        {"name": "Airbnb", "url": "ftp://example.com/cal.ics"},
    ],
)
def test_add_feed_rejects_incomplete_or_bad_input(client, property, payload):
    response = client.post(f"/ical/add-url/{property.id}", json=payload)
    assert response.status_code == 400


def test_add_feed_rejects_duplicates(client, property):
    client.post(f"/ical/add-url/{property.id}", json={"name": "Airbnb", "url": FEED_URL})

    same_url = client.post(f"/ical/add-url/{property.id}", json={"name": "Other", "url": FEED_URL})
    same_name = client.post(
        f"/ical/add-url/{property.id}",
        json={"name": "AIRBNB", "url": "https://example.com/other.ics"},
    )

    assert same_url.status_code == 400
    assert same_url.json()["detail"] == "URL already added"
    assert same_name.status_code == 400


def test_webcal_feed_is_accepted(client, property):
    response = client.post(
        f"/ical/add-url/{property.id}", json={"name": "Vrbo", "url": "webcal://vrbo.com/cal.ics"}
    )
    assert response.status_code == 200


def test_settings_of_new_property(client, property):
    response = client.get(f"/ical/settings/{property.id}")

    assert response.status_code == 200
    body = response.json()
    assert body["name"] == "Sea View"
    assert body["iCalToken"] is None
    assert body["exportUrl"] is None
    assert body["iCalUrls"] == []
    assert body["iCalLastSync"] is None


def test_generate_token_is_stable(client, property):
    first = client.post(f"/ical/generate-token/{property.id}").json()
    second = client.post(f"/ical/generate-token/{property.id}").json()

    assert first["token"] == second["token"]
    assert len(first["token"]) == 48
    assert first["url"].endswith(f"/ical/export/{first['token']}.ics")

    settings = client.get(f"/ical/settings/{property.id}").json()
    assert settings["iCalToken"] == first["token"]
    assert settings["exportUrl"] == first["url"]


def test_other_users_property_is_not_found(client, db, other_user):
    foreign = make_property(db, other_user, name="Not mine")

    assert client.get(f"/ical/settings/{foreign.id}").status_code == 404
    assert client.post(f"/ical/generate-token/{foreign.id}").status_code == 404
    assert (
        client.post(f"/ical/add-url/{foreign.id}", json={"name": "A", "url": FEED_URL}).status_code
        == 404
    )
    assert client.post(f"/ical/sync/{foreign.id}").status_code == 404


# ============================================================================
# SYNC
# ============================================================================


def test_manual_sync(client, db, user, channels, fake_feeds):
    property = make_property(db, user, [{"name": "Airbnb", "url": FEED_URL}])
    start = date.today() + timedelta(days=10)
    fake_feeds[FEED_URL] = [make_event("abc123", start, start + timedelta(days=3), "Jane Doe - Airbnb")]

    response = client.post(f"/ical/sync/{property.id}")

    assert response.status_code == 200
    body = response.json()
    assert body["propertyId"] == property.id
    assert (body["imported"], body["skipped"]) == (1, 0)
    assert body["errors"] == []
    assert body["lastSync"] is not None

    again = client.post(f"/ical/sync/{property.id}").json()
    assert (again["imported"], again["skipped"]) == (0, 1)


def test_manual_sync_reports_feed_errors(client, db, user, fake_feeds):
    property = make_property(db, user, [{"name": "Airbnb", "url": FEED_URL}])
    fake_feeds[FEED_URL] = FeedUnavailable(FEED_URL, "HTTP 404")

    response = client.post(f"/ical/sync/{property.id}")

    assert response.status_code == 200
    assert response.json()["errors"] == [{"sourceName": "Airbnb", "message": "HTTP 404"}]


def test_sync_without_feeds_is_rejected(client, property, fake_feeds):
    response = client.post(f"/ical/sync/{property.id}")

    assert response.status_code == 400
    assert response.json()["detail"] == "No external calendars configured"


def test_sync_persistence_failure_returns_500(client, db, user, fake_feeds, monkeypatch):
    property = make_property(db, user, [{"name": "Airbnb", "url": FEED_URL}])
    start = date.today() + timedelta(days=10)
    fake_feeds[FEED_URL] = [make_event("abc123", start, start + timedelta(days=3), "Jane")]

    def broken_reconcile(self, property, candidate, channels):
        raise PersistenceFailure(property.id, "database is locked", candidate.uid)

    monkeypatch.setattr(ICalSyncService, "reconcile_event", broken_reconcile)

    response = client.post(f"/ical/sync/{property.id}")

    assert response.status_code == 500
    assert response.json()["propertyId"] == property.id


# ============================================================================
# PUBLIC EXPORT
# ============================================================================


def test_export_lists_current_bookings(client, db, property):
    token = client.post(f"/ical/generate-token/{property.id}").json()["token"]
    today = utcnow().replace(hour=0, minute=0, second=0, microsecond=0)

    upcoming = add_booking(
        db, property, today + timedelta(days=5), today + timedelta(days=8),
        guest_name="Jane Doe", ical_source="Airbnb", notes="Two dogs",
    )
    pending = add_booking(
        db, property, today + timedelta(days=20), today + timedelta(days=22),
        status=BookingStatus.PENDING,
    )
    add_booking(
        db, property, today + timedelta(days=30), today + timedelta(days=32),
        status=BookingStatus.CANCELLED,
    )
    add_booking(db, property, today - timedelta(days=45), today - timedelta(days=40))

    response = client.get(f"/ical/export/{token}.ics")

    assert response.status_code == 200
    assert response.headers["content-type"].startswith("text/calendar")
    assert 'filename="Sea_View.ics"' in response.headers["content-disposition"]

    calendar = Calendar.from_ical(response.content)
    events = list(calendar.walk("VEVENT"))
    assert [str(e.get("uid")) for e in events] == [
        f"booking-{upcoming.id}@property-{property.id}",
        f"booking-{pending.id}@property-{property.id}",
    ]
    first = events[0]
    assert str(first.get("summary")) == "Jane Doe - Airbnb"
    assert first.decoded("dtstart") == (today + timedelta(days=5)).date()
    assert first.decoded("dtend") == (today + timedelta(days=8)).date()
    assert "Notes: Two dogs" in str(first.get("description"))
    assert str(first.get("status")) == "CONFIRMED"
    assert str(events[1].get("summary")) == "Guest - Booking"
    assert str(events[1].get("status")) == "TENTATIVE"


def test_export_works_without_ics_suffix(client, property):
    token = client.post(f"/ical/generate-token/{property.id}").json()["token"]

    response = client.get(f"/ical/export/{token}")

    assert response.status_code == 200
    assert Calendar.from_ical(response.content).get("x-wr-calname") == "Sea View"


def test_export_unknown_token(client):
    assert client.get("/ical/export/nope.ics").status_code == 404


def test_export_same_day_booking_spans_one_day(client, db, property):
    token = client.post(f"/ical/generate-token/{property.id}").json()["token"]
    day = utcnow().replace(hour=0, minute=0, second=0, microsecond=0) + timedelta(days=3)
    add_booking(db, property, day, day)

    response = client.get(f"/ical/export/{token}.ics")

    [event] = Calendar.from_ical(response.content).walk("VEVENT")
    assert event.decoded("dtstart") == day.date()
    assert event.decoded("dtend") == day.date() + timedelta(days=1)
