"""Property router - FastAPI endpoints for property operations"""

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from ...auth import get_current_user
from ...database import get_db
from ...models import User
from .schemas import PropertyCreate, PropertyResponse, PropertyUpdate
from .service import PropertyService

router = APIRouter(prefix="/properties", tags=["Properties"])


def get_property_service(db: Session = Depends(get_db)) -> PropertyService:
    """Dependency injection for PropertyService"""
    return PropertyService(db)


@router.get("", response_model=list[PropertyResponse])
async def get_properties(
    current_user: User = Depends(get_current_user),
    service: PropertyService = Depends(get_property_service),
):
    return [service.to_response(p) for p in service.get_properties(current_user)]


@router.get("/{property_id}", response_model=PropertyResponse)
async def get_property(
    property_id: int,
    current_user: User = Depends(get_current_user),
    service: PropertyService = Depends(get_property_service),
):
    return service.to_response(service.get_property(property_id, current_user))


@router.post("", response_model=PropertyResponse, status_code=201)
async def create_property(
    data: PropertyCreate,
    current_user: User = Depends(get_current_user),
    service: PropertyService = Depends(get_property_service),
):
    return service.to_response(service.create_property(data, current_user))


@router.put("/{property_id}", response_model=PropertyResponse)
async def update_property(
    property_id: int,
    data: PropertyUpdate,
    current_user: User = Depends(get_current_user),
    service: PropertyService = Depends(get_property_service),
):
    return service.to_response(service.update_property(property_id, data, current_user))


@router.delete("/{property_id}")
async def delete_property(
    property_id: int,
    current_user: User = Depends(get_current_user),
    service: PropertyService = Depends(get_property_service),
):
    return service.delete_property(property_id, current_user)
