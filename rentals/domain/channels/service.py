"""Channel service - Business logic for sales channels"""

import logging

from fastapi import HTTPException
from sqlalchemy.orm import Session

from ...models import Channel, User
from .repository import ChannelRepository
from .schemas import ChannelCreate, ChannelUpdate

logger = logging.getLogger(__name__)


class ChannelService:
    def __init__(self, db: Session):
        self.db = db
        self.repo = ChannelRepository()

    @staticmethod
    def to_response(channel: Channel) -> dict:
        return {
            "id": channel.id,
            "name": channel.name,
            "commissionRate": channel.commission_rate,
            "color": channel.color,
        }

    def get_channels(self, user: User) -> list[Channel]:
        return self.repo.get_channels(self.db, user.id)

    def get_channel(self, channel_id: int, user: User) -> Channel:
        channel = self.repo.get_channel_by_id(self.db, channel_id, user.id)
        if not channel:
            raise HTTPException(status_code=404, detail="Channel not found")
        return channel

    def create_channel(self, data: ChannelCreate, user: User) -> Channel:
        if self.repo.get_channel_by_name(self.db, data.name, user.id):
            raise HTTPException(status_code=400, detail="A channel with this name already exists")

        return self.repo.create_channel(
            self.db,
            user.id,
            name=data.name,
            commission_rate=data.commissionRate,
            color=data.color,
        )

    def update_channel(self, channel_id: int, data: ChannelUpdate, user: User) -> Channel:
        channel = self.get_channel(channel_id, user)

        name = data.name.strip() if data.name is not None else None
        if name is not None:
            if not name:
                raise HTTPException(status_code=400, detail="Name cannot be empty")
            other = self.repo.get_channel_by_name(self.db, name, user.id)
            if other and other.id != channel.id:
                raise HTTPException(status_code=400, detail="A channel with this name already exists")

        updates = {"color": data.color} if "color" in data.model_fields_set else {}
        if name is not None:
            updates["name"] = name
        if data.commissionRate is not None:
            updates["commission_rate"] = data.commissionRate
        return self.repo.update_channel(self.db, channel, **updates)

    def delete_channel(self, channel_id: int, user: User) -> dict:
        channel = self.get_channel(channel_id, user)
        self.repo.delete_channel(self.db, channel)
        logger.info(f"🗑️ Channel {channel_id} deleted by user {user.id}")
        return {"message": "Channel deleted"}
