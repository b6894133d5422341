"""iCal service - Calendar feed reconciliation and export settings"""

import logging
import secrets
import uuid
from datetime import datetime, timedelta
from typing import Callable, Optional

from fastapi import HTTPException
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from ...config import FRONTEND_URL, ICAL_EXPORT_WINDOW_DAYS
from ...database import SessionLocal
from ...models import BookingStatus, Channel, Property, User
from ...utils.dates import utcnow
from ...utils.finance import calculate_booking_margin, calculate_commission
from .channel_matcher import match_channel
from .exceptions import ChannelLookupFailure, FeedUnavailable, PersistenceFailure
from .exporter import build_export_calendar
from .feed_client import ICalFeedClient
from .normalizer import CandidateBooking, normalize_event
from .repository import ICalRepository
from .schemas import PropertySyncErrors, SyncError, SyncResult, SyncSummary

logger = logging.getLogger(__name__)

CREATED = "created"
UPDATED = "updated"
UNCHANGED = "unchanged"

ALLOWED_FEED_SCHEMES = ("http://", "https://", "webcal://")


class ICalSyncService:
    """
    Reconciles external calendar feeds into bookings.

    For each feed event, keyed by (property, event UID):
    - no booking yet: create one (channel guessed from the feed name, no revenue data)
    - booking exists with other dates: move check-in/check-out/nights, nothing else
    - booking exists with the same dates: leave it alone

    Bookings without an iCal UID (manual entry, file imports) are never touched,
    and nothing is ever deleted or cancelled when an event disappears from a feed.
    """

    def __init__(
        self,
        db: Session,
        feed_client: Optional[ICalFeedClient] = None,
        clock: Callable[[], datetime] = utcnow,
    ):
        self.db = db
        self.feed_client = feed_client or ICalFeedClient()
        self.clock = clock
        self.repo = ICalRepository()

    def _load_channels(self, user_id: int) -> list[Channel]:
        try:
            return self.repo.get_channels(self.db, user_id)
        except SQLAlchemyError as e:
            self.db.rollback()
            raise ChannelLookupFailure(str(e)) from e

    def _new_booking_data(
        self, property: Property, candidate: CandidateBooking, channel: Optional[Channel]
    ) -> dict:
        # Feeds carry no money: amounts stay at zero, the channel rate is kept for later edits
        commission_rate = channel.commission_rate if channel else 0
        commission_amount, net_revenue = calculate_commission(0, commission_rate)
        return {
            "user_id": property.user_id,
            "property_id": property.id,
            "channel_id": channel.id if channel else None,
            "guest_name": candidate.guest_name,
            "check_in": candidate.start,
            "check_out": candidate.end,
            "nights": candidate.nights,
            "number_of_guests": 1,
            "ical_uid": candidate.uid,
            "ical_source": candidate.source_name,
            "gross_revenue": 0,
            "commission_rate": commission_rate,
            "commission_amount": commission_amount,
            "variable_costs": 0,
            "net_revenue": net_revenue,
            "net_margin": calculate_booking_margin(net_revenue, 0),
            "status": BookingStatus.CONFIRMED,
            "notes": candidate.notes,
        }

    def reconcile_event(
        self, property: Property, candidate: CandidateBooking, channels: list[Channel]
    ) -> str:
        """Apply one candidate; returns CREATED, UPDATED or UNCHANGED"""
        property_id = property.id
        try:
            existing = self.repo.get_imported_booking(self.db, property_id, candidate.uid)

            if existing is None:
                channel = match_channel(candidate.source_name, channels)
                created = self.repo.create_imported_booking(
                    self.db, **self._new_booking_data(property, candidate, channel)
                )
                if created is not None:
                    return CREATED

                # Lost an insert race on the unique key: treat as an existing booking
                existing = self.repo.get_imported_booking(self.db, property_id, candidate.uid)
                if existing is None:
                    raise PersistenceFailure(
                        property_id, "Booking insert rejected by the database", candidate.uid
                    )
                logger.info(
                    f"🔁 Event {candidate.uid} already imported for property {property_id}, updating instead"
                )

            if existing.check_in == candidate.start and existing.check_out == candidate.end:
                return UNCHANGED

            self.repo.update_booking_dates(
                self.db, existing, candidate.start, candidate.end, candidate.nights
            )
            return UPDATED

        except SQLAlchemyError as e:
            self.db.rollback()
            raise PersistenceFailure(property_id, str(e), candidate.uid) from e

    async def sync_property(self, property: Property) -> SyncResult:
        """Import every configured feed of a property; feed failures are collected, not raised"""
        result = SyncResult(propertyId=property.id, propertyName=property.name)
        feeds = list(property.ical_urls or [])
        try:
            channels = self._load_channels(property.user_id)
        except ChannelLookupFailure as e:
            logger.warning(
                f"⚠️ Channel lookup failed for property {property.id}, importing without channels: {e}"
            )
            channels = []

        for feed in feeds:
            source_name = (feed.get("name") or "").strip()
            url = (feed.get("url") or "").strip()

            try:
                if not url:
                    raise FeedUnavailable(url, "Feed has no URL")
                events = await self.feed_client.fetch_events(url)
            except FeedUnavailable as e:
                logger.warning(
                    f"⚠️ [iCal Sync] Feed '{source_name}' of property {property.id} unavailable: {e.message}"
                )
                result.errors.append(SyncError(sourceName=source_name, message=e.message))
                continue

            now = self.clock()
            for event in events:
                candidate = normalize_event(event, now, source_name)
                if candidate is None:
                    continue

                outcome = self.reconcile_event(property, candidate, channels)
                if outcome == UNCHANGED:
                    result.skipped += 1
                else:
                    result.imported += 1

        synced_at = self.clock()
        try:
            self.repo.stamp_last_sync(self.db, property, synced_at)
        except SQLAlchemyError as e:
            self.db.rollback()
            raise PersistenceFailure(property.id, str(e)) from e

        result.lastSync = synced_at
        return result

    async def sync_all(self) -> SyncSummary:
        """Sync every property with feeds; one property's failure never stops the batch"""
        logger.info(f"🔄 [iCal Sync] Starting sync at {self.clock().isoformat()}")
        summary = SyncSummary()

        try:
            properties = self.repo.get_properties_with_feeds(self.db)
        except SQLAlchemyError as e:
            self.db.rollback()
            logger.error(f"❌ [iCal Sync] Could not load properties: {e}")
            return summary

        if not properties:
            logger.info("ℹ️ [iCal Sync] No properties with iCal URLs configured")
            return summary

        logger.info(f"📋 [iCal Sync] Found {len(properties)} properties to sync")

        for property in properties:
            property_id, property_name = property.id, property.name
            summary.properties += 1
            try:
                result = await self.sync_property(property)
            except PersistenceFailure as e:
                logger.error(
                    f"❌ [iCal Sync] {property_name} (id={property_id}) aborted on event {e.event_uid}: {e.message}"
                )
                summary.errors.append(
                    PropertySyncErrors(
                        propertyId=property_id,
                        propertyName=property_name,
                        errors=[SyncError(sourceName="", message=e.message)],
                    )
                )
                continue
            except Exception as e:
                logger.error(
                    f"❌ [iCal Sync] {property_name} (id={property_id}) failed: {type(e).__name__}: {e}"
                )
                self.db.rollback()
                summary.errors.append(
                    PropertySyncErrors(
                        propertyId=property_id,
                        propertyName=property_name,
                        errors=[SyncError(sourceName="", message=str(e))],
                    )
                )
                continue

            summary.imported += result.imported
            summary.skipped += result.skipped
            if result.errors:
                summary.errors.append(
                    PropertySyncErrors(
                        propertyId=property_id, propertyName=property_name, errors=result.errors
                    )
                )
            logger.info(
                f"🏠 [iCal Sync] {property_name}: {result.imported} imported, {result.skipped} skipped"
            )

        logger.info(
            f"✅ [iCal Sync] Complete: {summary.imported} new/updated, {summary.skipped} unchanged"
        )
        if summary.errors:
            logger.warning(f"⚠️ [iCal Sync] Errors: {[e.model_dump() for e in summary.errors]}")
        return summary


async def sync_all_properties(
    session_factory=None,
    feed_client: Optional[ICalFeedClient] = None,
    clock: Callable[[], datetime] = utcnow,
) -> SyncSummary:
    """Run one sync tick in its own database session"""
    db = (session_factory or SessionLocal)()
    try:
        return await ICalSyncService(db, feed_client, clock).sync_all()
    finally:
        db.close()


class ICalService:
    """Service layer for a property's feed settings and its public export"""

    def __init__(self, db: Session):
        self.db = db
        self.repo = ICalRepository()

    def get_property(self, property_id: int, user: User) -> Property:
        property = self.repo.get_property(self.db, property_id, user.id)
        if not property:
            raise HTTPException(status_code=404, detail="Property not found")
        return property

    @staticmethod
    def export_url(token: str, base_url: str) -> str:
        base = (FRONTEND_URL or base_url).rstrip("/")
        return f"{base}/ical/export/{token}.ics"

    def get_settings(self, property_id: int, user: User, base_url: str) -> dict:
        property = self.get_property(property_id, user)
        return {
            "id": property.id,
            "name": property.name,
            "iCalToken": property.ical_token,
            "iCalUrls": property.ical_urls or [],
            "iCalLastSync": property.ical_last_sync,
            "exportUrl": self.export_url(property.ical_token, base_url) if property.ical_token else None,
        }

    def generate_token(self, property_id: int, user: User, base_url: str) -> dict:
        """Create the export token once; later calls return the same one"""
        property = self.get_property(property_id, user)
        token = property.ical_token or secrets.token_hex(24)
        if property.ical_token != token:
            self.repo.set_token(self.db, property, token)
            logger.info(f"🔑 iCal export token generated for property {property.id}")
        return {"token": token, "url": self.export_url(token, base_url)}

    def add_feed(self, property_id: int, user: User, name: Optional[str], url: Optional[str]) -> list[dict]:
        name = (name or "").strip()
        url = (url or "").strip()
        if not name or not url:
            raise HTTPException(status_code=400, detail="Name and URL are required")
        if not url.lower().startswith(ALLOWED_FEED_SCHEMES):
            raise HTTPException(status_code=400, detail="URL must start with http://, https:// or webcal://")

        property = self.get_property(property_id, user)
        feeds = list(property.ical_urls or [])

        if any(feed.get("url") == url for feed in feeds):
            raise HTTPException(status_code=400, detail="URL already added")
        if any((feed.get("name") or "").strip().lower() == name.lower() for feed in feeds):
            raise HTTPException(status_code=400, detail="A calendar with this name already exists")

        feeds.append({"id": str(uuid.uuid4()), "name": name, "url": url})
        self.repo.set_feeds(self.db, property, feeds)
        logger.info(f"➕ Feed '{name}' added to property {property.id}")
        return feeds

    def remove_feed(self, property_id: int, user: User, feed_id: str) -> list[dict]:
        property = self.get_property(property_id, user)
        feeds = [feed for feed in (property.ical_urls or []) if feed.get("id") != feed_id]
        self.repo.set_feeds(self.db, property, feeds)
        return feeds

    async def sync_now(
        self, property_id: int, user: User, feed_client: Optional[ICalFeedClient] = None
    ) -> SyncResult:
        property = self.get_property(property_id, user)
        if not property.ical_urls:
            raise HTTPException(status_code=400, detail="No external calendars configured")

        logger.info(f"🔄 Manual iCal sync requested for property {property.id} by user {user.id}")
        return await ICalSyncService(self.db, feed_client).sync_property(property)

    def export_calendar(self, token: str) -> tuple[Property, bytes]:
        token = token[: -len(".ics")] if token.endswith(".ics") else token
        property = self.repo.get_property_by_token(self.db, token)
        if not property:
            raise HTTPException(status_code=404, detail="Calendar not found")

        since = utcnow() - timedelta(days=ICAL_EXPORT_WINDOW_DAYS)
        bookings = self.repo.get_export_bookings(self.db, property.id, since)
        return property, build_export_calendar(property, bookings)
