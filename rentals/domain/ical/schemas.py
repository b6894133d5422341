"""iCal domain schemas - Pydantic models for validation"""

from datetime import datetime
from typing import Optional

from pydantic import BaseModel


class FeedSourceCreate(BaseModel):
    """Schema for adding an external calendar feed to a property"""

    name: Optional[str] = None
    url: Optional[str] = None


class FeedSource(BaseModel):
    id: str
    name: str
    url: str


class FeedListResponse(BaseModel):
    iCalUrls: list[FeedSource]


class ICalTokenResponse(BaseModel):
    token: str
    url: str


class ICalSettingsResponse(BaseModel):
    id: int
    name: str
    iCalToken: Optional[str] = None
    iCalUrls: list[FeedSource] = []
    iCalLastSync: Optional[datetime] = None
    exportUrl: Optional[str] = None


class SyncError(BaseModel):
    """A feed that failed during a property sync"""

    sourceName: str
    message: str


class SyncResult(BaseModel):
    """Outcome of syncing one property; `imported` counts created and re-dated bookings"""

    propertyId: int
    propertyName: str
    imported: int = 0
    skipped: int = 0
    errors: list[SyncError] = []
    lastSync: Optional[datetime] = None


class PropertySyncErrors(BaseModel):
    propertyId: int
    propertyName: str
    errors: list[SyncError]


class SyncSummary(BaseModel):
    """Aggregate of one sync tick across all properties with feeds"""

    properties: int = 0
    imported: int = 0
    skipped: int = 0
    errors: list[PropertySyncErrors] = []
