"""Channel repository - Database operations for sales channels"""

from typing import Optional

from sqlalchemy import func
from sqlalchemy.orm import Session

from ...models import Booking, Channel


class ChannelRepository:
    @staticmethod
    def get_channels(db: Session, user_id: int) -> list[Channel]:
        return db.query(Channel).filter(Channel.user_id == user_id).order_by(Channel.id).all()

    @staticmethod
    def get_channel_by_id(db: Session, channel_id: int, user_id: int) -> Optional[Channel]:
        return (
            db.query(Channel)
            .filter(Channel.id == channel_id, Channel.user_id == user_id)
            .first()
        )

    @staticmethod
    def get_channel_by_name(db: Session, name: str, user_id: int) -> Optional[Channel]:
        return (
            db.query(Channel)
            .filter(Channel.user_id == user_id, func.lower(Channel.name) == name.lower())
            .first()
        )

    @staticmethod
    def create_channel(db: Session, user_id: int, **channel_data) -> Channel:
        channel = Channel(user_id=user_id, **channel_data)
        db.add(channel)
        db.commit()
        db.refresh(channel)
        return channel

    @staticmethod
    def update_channel(db: Session, channel: Channel, **updates) -> Channel:
        for key, value in updates.items():
            setattr(channel, key, value)

        db.commit()
        db.refresh(channel)
        return channel

    @staticmethod
    def delete_channel(db: Session, channel: Channel) -> None:
        """Delete a channel; its bookings are kept without a channel"""
        db.query(Booking).filter(Booking.channel_id == channel.id).update(
            {Booking.channel_id: None}, synchronize_session=False
        )
        db.delete(channel)
        db.commit()
