from sqlalchemy import (
    JSON,
    Column,
    DateTime,
    Float,
    ForeignKey,
    Integer,
    String,
    Text,
    UniqueConstraint,
)
from sqlalchemy.orm import relationship
from sqlalchemy.sql import func

from .database import Base


class BookingStatus:
    CONFIRMED = "CONFIRMED"
    PENDING = "PENDING"
    CANCELLED = "CANCELLED"
    COMPLETED = "COMPLETED"

    ALL = (CONFIRMED, PENDING, CANCELLED, COMPLETED)


class User(Base):
    __tablename__ = "users"

    id = Column(Integer, primary_key=True, index=True)
    firebase_uid = Column(String(255), unique=True, index=True, nullable=False)
    email = Column(String(255), index=True, nullable=False)
    full_name = Column(String(255), nullable=True)
    created_at = Column(DateTime, server_default=func.now())
    updated_at = Column(DateTime, server_default=func.now(), onupdate=func.now())

    properties = relationship("Property", back_populates="user")
    channels = relationship("Channel", back_populates="user", order_by="Channel.id")


class Channel(Base):
    """Sales channel (Airbnb, Booking.com, direct...) with its default commission"""

    __tablename__ = "channels"

    id = Column(Integer, primary_key=True, index=True)
    user_id = Column(Integer, ForeignKey("users.id"), nullable=False, index=True)
    name = Column(String(100), nullable=False)
    commission_rate = Column(Float, default=0, nullable=False)  # Percent, e.g. 15.0
    color = Column(String(7), nullable=True)  # e.g., #RRGGBB
    created_at = Column(DateTime, server_default=func.now())

    user = relationship("User", back_populates="channels")
    bookings = relationship("Booking", back_populates="channel")


class Property(Base):
    __tablename__ = "properties"

    id = Column(Integer, primary_key=True, index=True)
    user_id = Column(Integer, ForeignKey("users.id"), nullable=False, index=True)
    name = Column(String(255), nullable=False)
    address = Column(String(500), nullable=True)
    # Secret token for the public .ics export URL
    ical_token = Column(String(64), unique=True, index=True, nullable=True)
    # External feeds: [{"id": str, "name": str, "url": str}]
    ical_urls = Column(JSON, default=list, nullable=True)
    ical_last_sync = Column(DateTime, nullable=True)
    created_at = Column(DateTime, server_default=func.now())
    updated_at = Column(DateTime, server_default=func.now(), onupdate=func.now())

    user = relationship("User", back_populates="properties")
    bookings = relationship("Booking", back_populates="property", cascade="all, delete-orphan")


class Booking(Base):
    __tablename__ = "bookings"
    # One booking per external event and property; imported rows are upserted on this key
    __table_args__ = (
        UniqueConstraint("property_id", "ical_uid", name="uq_bookings_property_ical_uid"),
    )

    id = Column(Integer, primary_key=True, index=True)
    user_id = Column(Integer, ForeignKey("users.id"), nullable=False, index=True)
    property_id = Column(Integer, ForeignKey("properties.id"), nullable=False, index=True)
    channel_id = Column(Integer, ForeignKey("channels.id"), nullable=True)
    guest_name = Column(String(255), nullable=False)
    check_in = Column(DateTime, nullable=False)  # Naive UTC
    check_out = Column(DateTime, nullable=False)  # Naive UTC
    nights = Column(Integer, default=0, nullable=False)
    number_of_guests = Column(Integer, default=1, nullable=False)

    # External feed identity, only set on imported bookings
    ical_uid = Column(String(500), nullable=True)
    ical_source = Column(String(255), nullable=True)

    gross_revenue = Column(Float, default=0, nullable=False)
    commission_rate = Column(Float, default=0, nullable=False)
    commission_amount = Column(Float, default=0, nullable=False)
    variable_costs = Column(Float, default=0, nullable=False)
    net_revenue = Column(Float, default=0, nullable=False)
    net_margin = Column(Float, default=0, nullable=False)

    status = Column(String(20), default=BookingStatus.CONFIRMED, nullable=False)
    notes = Column(Text, nullable=True)
    created_at = Column(DateTime, server_default=func.now())
    updated_at = Column(DateTime, server_default=func.now(), onupdate=func.now())

    property = relationship("Property", back_populates="bookings")
    channel = relationship("Channel", back_populates="bookings")
