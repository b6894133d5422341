"""Channel domain schemas - Pydantic models for validation"""

from typing import Optional

from pydantic import BaseModel, field_validator


def _validate_rate(v):
    if v is not None and not 0 <= v <= 100:
        raise ValueError("Commission rate must be between 0 and 100")
    return v


class ChannelCreate(BaseModel):
    name: str
    commissionRate: float = 0
    color: Optional[str] = None

    @field_validator("name")
    @classmethod
    def validate_name(cls, v):
        v = v.strip()
        if not v:
            raise ValueError("Name is required")
        return v

    @field_validator("commissionRate")
    @classmethod
    def validate_rate(cls, v):
        return _validate_rate(v)


class ChannelUpdate(BaseModel):
    name: Optional[str] = None
    commissionRate: Optional[float] = None
    color: Optional[str] = None

    @field_validator("commissionRate")
    @classmethod
    def validate_rate(cls, v):
        return _validate_rate(v)


class ChannelResponse(BaseModel):
    id: int
    name: str
    commissionRate: float
    color: Optional[str] = None
