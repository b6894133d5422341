"""Channel router - FastAPI endpoints for sales channels"""

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from ...auth import get_current_user
from ...database import get_db
from ...models import User
from .schemas import ChannelCreate, ChannelResponse, ChannelUpdate
from .service import ChannelService

router = APIRouter(prefix="/channels", tags=["Channels"])


def get_channel_service(db: Session = Depends(get_db)) -> ChannelService:
    """Dependency injection for ChannelService"""
    return ChannelService(db)


@router.get("", response_model=list[ChannelResponse])
async def get_channels(
    current_user: User = Depends(get_current_user),
    service: ChannelService = Depends(get_channel_service),
):
    return [service.to_response(c) for c in service.get_channels(current_user)]


@router.post("", response_model=ChannelResponse, status_code=201)
async def create_channel(
    data: ChannelCreate,
    current_user: User = Depends(get_current_user),
    service: ChannelService = Depends(get_channel_service),
):
    return service.to_response(service.create_channel(data, current_user))


@router.put("/{channel_id}", response_model=ChannelResponse)
async def update_channel(
    channel_id: int,
    data: ChannelUpdate,
    current_user: User = Depends(get_current_user),
    service: ChannelService = Depends(get_channel_service),
):
    return service.to_response(service.update_channel(channel_id, data, current_user))


@router.delete("/{channel_id}")
async def delete_channel(
    channel_id: int,
    current_user: User = Depends(get_current_user),
    service: ChannelService = Depends(get_channel_service),
):
    return service.delete_channel(channel_id, current_user)
