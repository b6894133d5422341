"""Property repository - Database operations for properties"""

from typing import Optional

from sqlalchemy import func
from sqlalchemy.orm import Session

from ...models import Booking, Property


class PropertyRepository:
    """Repository for property database operations"""

    @staticmethod
    def get_properties(db: Session, user_id: int) -> list[Property]:
        return (
            db.query(Property)
            .filter(Property.user_id == user_id)
            .order_by(Property.name.asc())
            .all()
        )

    @staticmethod
    def get_property_by_id(db: Session, property_id: int, user_id: int) -> Optional[Property]:
        return (
            db.query(Property)
            .filter(Property.id == property_id, Property.user_id == user_id)
            .first()
        )

    @staticmethod
    def count_bookings(db: Session, property_id: int) -> int:
        return (
            db.query(func.count(Booking.id)).filter(Booking.property_id == property_id).scalar()
            or 0
        )

    @staticmethod
    def create_property(db: Session, user_id: int, **property_data) -> Property:
        property = Property(user_id=user_id, ical_urls=[], **property_data)
        db.add(property)
        db.commit()
        db.refresh(property)
        return property

    @staticmethod
    def update_property(db: Session, property: Property, **updates) -> Property:
        for key, value in updates.items():
            setattr(property, key, value)

        db.commit()
        db.refresh(property)
        return property

    @staticmethod
    def delete_property(db: Session, property: Property) -> None:
        db.delete(property)
        db.commit()
