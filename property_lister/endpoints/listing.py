from typing import List
from fastapi import APIRouter, Depends, status
from sqlalchemy.orm import Session

from property_lister.schemas.property import ListingCreate, ListingUpdate, Property
from property_lister.schemas.response import APIResponse, PaginatedAPIResponse
from property_lister.schemas.user import AuthContext
from property_lister.utils import deps
from property_lister.utils.pagination import Pagination, get_pagination
from property_lister.utils.service_registry import ServiceRegistry

router = APIRouter()

@router.get("/", response_model=PaginatedAPIResponse[List[Property]])
async def get_my_listings(
    pagination: Pagination = Depends(get_pagination),
    db: Session = Depends(deps.get_db),
    user: AuthContext = Depends(deps.get_current_user),
    services: ServiceRegistry = Depends(deps.get_services)
):
    """Retrieve the current user's listings, newest first."""
    items, meta = await services.listings.get_listings(
        db, user_id=user.user_id, page=pagination.page, limit=pagination.limit
    )
    return PaginatedAPIResponse(message="Listings fetched successfully", data=items, meta=meta)

@router.put("/", status_code=status.HTTP_201_CREATED, response_model=APIResponse[Property])
async def create_listing(
    listing_in: ListingCreate,
    db: Session = Depends(deps.get_db),
    user: AuthContext = Depends(deps.get_current_user),
    services: ServiceRegistry = Depends(deps.get_services)
):
    listing = await services.listings.create_listing(db, user_id=user.user_id, listing_in=listing_in)
    return APIResponse(message="Listing created successfully", data=listing)

@router.patch("/{listing_id}", response_model=APIResponse[Property])
async def update_listing(
    listing_id: str,
    listing_in: ListingUpdate,
    db: Session = Depends(deps.get_db),
    user: AuthContext = Depends(deps.get_current_user),
    services: ServiceRegistry = Depends(deps.get_services)
):
    listing = await services.listings.update_listing(
        db, user_id=user.user_id, listing_id=listing_id, listing_in=listing_in
    )
    return APIResponse(message="Listing updated successfully", data=listing)

@router.delete("/{listing_id}", response_model=APIResponse[None])
async def delete_listing(
    listing_id: str,
    db: Session = Depends(deps.get_db),
    user: AuthContext = Depends(deps.get_current_user),
    services: ServiceRegistry = Depends(deps.get_services)
):
    await services.listings.delete_listing(db, user_id=user.user_id, listing_id=listing_id)
    return APIResponse(message="Listing deleted successfully")
