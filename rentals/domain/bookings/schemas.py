"""Booking domain schemas - Pydantic models for validation"""

from datetime import datetime
from typing import Optional

from pydantic import BaseModel, field_validator, model_validator

from ...models import BookingStatus
from ...utils.dates import as_naive_utc


def _validate_guest_name(v):
    if v is None:
        return v
    v = v.strip()
    if len(v) < 2:
        raise ValueError("Guest name must be at least 2 characters")
    return v


def _validate_status(v):
    if v is not None and v not in BookingStatus.ALL:
        raise ValueError(f"Status must be one of {', '.join(BookingStatus.ALL)}")
    return v


class BookingCreate(BaseModel):
    """Schema for entering a booking by hand"""

    propertyId: int
    channelId: Optional[int] = None
    guestName: str
    checkIn: datetime
    checkOut: datetime
    numberOfGuests: int = 1
    grossRevenue: float = 0
    variableCosts: float = 0
    status: str = BookingStatus.CONFIRMED
    notes: Optional[str] = None

    @field_validator("guestName")
    @classmethod
    def validate_guest_name(cls, v):
        return _validate_guest_name(v)

    @field_validator("status")
    @classmethod
    def validate_status(cls, v):
        return _validate_status(v)

    @field_validator("checkIn", "checkOut")
    @classmethod
    def validate_dates_utc(cls, v):
        return as_naive_utc(v)

    @field_validator("numberOfGuests")
    @classmethod
    def validate_guests(cls, v):
        if v < 1:
            raise ValueError("At least one guest is required")
        return v

    @field_validator("grossRevenue", "variableCosts")
    @classmethod
    def validate_amount(cls, v):
        if v < 0:
            raise ValueError("Amounts cannot be negative")
        return v

    @model_validator(mode="after")
    def validate_dates(self):
        if self.checkOut < self.checkIn:
            raise ValueError("Check-out must not be before check-in")
        return self


class BookingUpdate(BaseModel):
    """Partial update; only fields present in the request are applied"""

    propertyId: Optional[int] = None
    channelId: Optional[int] = None
    guestName: Optional[str] = None
    checkIn: Optional[datetime] = None
    checkOut: Optional[datetime] = None
    numberOfGuests: Optional[int] = None
    grossRevenue: Optional[float] = None
    variableCosts: Optional[float] = None
    status: Optional[str] = None
    notes: Optional[str] = None

    @field_validator("guestName")
    @classmethod
    def validate_guest_name(cls, v):
        return _validate_guest_name(v)

    @field_validator("status")
    @classmethod
    def validate_status(cls, v):
        return _validate_status(v)

    @field_validator("checkIn", "checkOut")
    @classmethod
    def validate_dates_utc(cls, v):
        return as_naive_utc(v)

    @field_validator("grossRevenue", "variableCosts")
    @classmethod
    def validate_amount(cls, v):
        if v is not None and v < 0:
            raise ValueError("Amounts cannot be negative")
        return v


class BookingStatusUpdate(BaseModel):
    status: str

    @field_validator("status")
    @classmethod
    def validate_status(cls, v):
        return _validate_status(v)


class BookingResponse(BaseModel):
    id: int
    propertyId: int
    propertyName: Optional[str] = None
    channelId: Optional[int] = None
    channelName: Optional[str] = None
    guestName: str
    checkIn: datetime
    checkOut: datetime
    nights: int
    numberOfGuests: int
    grossRevenue: float
    commissionRate: float
    commissionAmount: float
    variableCosts: float
    netRevenue: float
    netMargin: float
    status: str
    notes: Optional[str] = None
    iCalUid: Optional[str] = None
    iCalSource: Optional[str] = None
    created_at: Optional[datetime] = None


class PaginationMeta(BaseModel):
    total: int
    page: int
    limit: int
    totalPages: int
    hasNext: bool
    hasPrev: bool


class BookingListResponse(BaseModel):
    data: list[BookingResponse]
    meta: PaginationMeta
