"""Property service - Business logic for property operations"""

import logging

from fastapi import HTTPException
from sqlalchemy.orm import Session

from ...models import Property, User
from .repository import PropertyRepository
from .schemas import PropertyCreate, PropertyUpdate

logger = logging.getLogger(__name__)


class PropertyService:
    """Service layer for property business logic"""

    def __init__(self, db: Session):
        self.db = db
        self.repo = PropertyRepository()

    def to_response(self, property: Property) -> dict:
        return {
            "id": property.id,
            "name": property.name,
            "address": property.address,
            "iCalUrls": property.ical_urls or [],
            "iCalLastSync": property.ical_last_sync,
            "bookingsCount": self.repo.count_bookings(self.db, property.id),
            "created_at": property.created_at,
        }

    def get_properties(self, user: User) -> list[Property]:
        return self.repo.get_properties(self.db, user.id)

    def get_property(self, property_id: int, user: User) -> Property:
        property = self.repo.get_property_by_id(self.db, property_id, user.id)
        if not property:
            raise HTTPException(status_code=404, detail="Property not found")
        return property

    def create_property(self, data: PropertyCreate, user: User) -> Property:
        logger.info(f"🏠 Creating property for user_id: {user.id}")
        return self.repo.create_property(self.db, user.id, name=data.name, address=data.address)

    def update_property(self, property_id: int, data: PropertyUpdate, user: User) -> Property:
        """Apply the fields present in the request; an explicit null clears the address"""
        property = self.get_property(property_id, user)
        updates = data.model_dump(exclude_unset=True)

        if "name" in updates:
            name = (updates["name"] or "").strip()
            if not name:
                raise HTTPException(status_code=400, detail="Name cannot be empty")
            updates["name"] = name

        return self.repo.update_property(self.db, property, **updates)

    def delete_property(self, property_id: int, user: User) -> dict:
        """Delete a property together with its bookings"""
        property = self.get_property(property_id, user)
        self.repo.delete_property(self.db, property)
        logger.info(f"🗑️ Property {property_id} deleted by user {user.id}")
        return {"message": "Property deleted"}
