"""Property domain schemas - Pydantic models for validation"""

from datetime import datetime
from typing import Optional

from pydantic import BaseModel, field_validator


class PropertyCreate(BaseModel):
    """Schema for creating a new property"""

    name: str
    address: Optional[str] = None

    @field_validator("name")
    @classmethod
    def validate_name(cls, v):
        v = v.strip()
        if not v:
            raise ValueError("Name is required")
        return v


class PropertyUpdate(BaseModel):
    name: Optional[str] = None
    address: Optional[str] = None


class PropertyResponse(BaseModel):
    id: int
    name: str
    address: Optional[str] = None
    iCalUrls: list[dict] = []
    iCalLastSync: Optional[datetime] = None
    bookingsCount: int = 0
    created_at: Optional[datetime] = None
