"""iCal router - Calendar feed settings, manual sync and public export"""

import logging
import re

from fastapi import APIRouter, Depends, Request, Response
from sqlalchemy.orm import Session

from ...auth import get_current_user
from ...database import get_db
from ...models import User
from .feed_client import ICalFeedClient
from .schemas import (
    FeedListResponse,
    FeedSourceCreate,
    ICalSettingsResponse,
    ICalTokenResponse,
    SyncResult,
)
from .service import ICalService

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/ical", tags=["iCal"])


def get_ical_service(db: Session = Depends(get_db)) -> ICalService:
    """Dependency injection for ICalService"""
    return ICalService(db)


def get_feed_client() -> ICalFeedClient:
    return ICalFeedClient()


# ============================================================================
# PUBLIC EXPORT (token in URL, no auth)
# ============================================================================


@router.get("/export/{token}")
async def export_calendar(token: str, service: ICalService = Depends(get_ical_service)):
    """Serve a property's bookings as an .ics feed for external platforms"""
    property, body = service.export_calendar(token)
    filename = re.sub(r"[^a-z0-9]", "_", property.name, flags=re.IGNORECASE)
    return Response(
        content=body,
        media_type="text/calendar; charset=utf-8",
        headers={"Content-Disposition": f'attachment; filename="{filename}.ics"'},
    )


# ============================================================================
# FEED SETTINGS
# ============================================================================


@router.get("/settings/{property_id}", response_model=ICalSettingsResponse)
async def get_ical_settings(
    property_id: int,
    request: Request,
    current_user: User = Depends(get_current_user),
    service: ICalService = Depends(get_ical_service),
):
    return service.get_settings(property_id, current_user, str(request.base_url))


@router.post("/generate-token/{property_id}", response_model=ICalTokenResponse)
async def generate_ical_token(
    property_id: int,
    request: Request,
    current_user: User = Depends(get_current_user),
    service: ICalService = Depends(get_ical_service),
):
    """Create the secret export URL for a property (reused if it already exists)"""
    return service.generate_token(property_id, current_user, str(request.base_url))


@router.post("/add-url/{property_id}", response_model=FeedListResponse)
async def add_ical_url(
    property_id: int,
    data: FeedSourceCreate,
    current_user: User = Depends(get_current_user),
    service: ICalService = Depends(get_ical_service),
):
    feeds = service.add_feed(property_id, current_user, data.name, data.url)
    return {"iCalUrls": feeds}


@router.delete("/remove-url/{property_id}/{url_id}", response_model=FeedListResponse)
async def remove_ical_url(
    property_id: int,
    url_id: str,
    current_user: User = Depends(get_current_user),
    service: ICalService = Depends(get_ical_service),
):
    feeds = service.remove_feed(property_id, current_user, url_id)
    return {"iCalUrls": feeds}


# ============================================================================
# SYNC
# ============================================================================


@router.post("/sync/{property_id}", response_model=SyncResult)
async def sync_ical(
    property_id: int,
    current_user: User = Depends(get_current_user),
    service: ICalService = Depends(get_ical_service),
    feed_client: ICalFeedClient = Depends(get_feed_client),
):
    """Import external calendars of a property now instead of waiting for the next tick"""
    return await service.sync_now(property_id, current_user, feed_client)
