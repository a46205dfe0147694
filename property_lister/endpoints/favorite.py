from typing import List
from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from property_lister.schemas.property import Property
from property_lister.schemas.response import APIResponse
from property_lister.schemas.user import AuthContext
from property_lister.utils import deps
from property_lister.utils.service_registry import ServiceRegistry

router = APIRouter()

@router.get("/", response_model=APIResponse[List[Property]])
async def get_favorites(
    db: Session = Depends(deps.get_db),
    user: AuthContext = Depends(deps.get_current_user),
    services: ServiceRegistry = Depends(deps.get_services)
):
    """Retrieve the current user's favorite properties."""
    data = await services.favorites.get_favorites(db, user_id=user.user_id)
    return APIResponse(message="Favorites fetched successfully", data=data)

@router.post("/{property_id}", response_model=APIResponse[None])
async def add_to_favorites(
    property_id: str,
    db: Session = Depends(deps.get_db),
    user: AuthContext = Depends(deps.get_current_user),
    services: ServiceRegistry = Depends(deps.get_services)
):
    await services.favorites.add_favorite(db, user_id=user.user_id, property_id=property_id)
    return APIResponse(message="Added to favorites successfully")

@router.delete("/{property_id}", response_model=APIResponse[None])
async def remove_from_favorites(
    property_id: str,
    db: Session = Depends(deps.get_db),
    user: AuthContext = Depends(deps.get_current_user),
    services: ServiceRegistry = Depends(deps.get_services)
):
    await services.favorites.remove_favorite(db, user_id=user.user_id, property_id=property_id)
    return APIResponse(message="Removed from favorites successfully")
