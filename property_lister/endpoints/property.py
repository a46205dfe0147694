from typing import List, Optional
from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session

from property_lister.schemas.property import Property, PropertyFilter
from property_lister.schemas.response import APIResponse, PaginatedAPIResponse
from property_lister.utils import deps
from property_lister.utils.pagination import Pagination, get_pagination
from property_lister.utils.service_registry import ServiceRegistry

router = APIRouter()

@router.get("/", response_model=PaginatedAPIResponse[List[Property]])
def get_properties(
    min_price: Optional[int] = None,
    max_price: Optional[int] = None,
    state: Optional[str] = None,
    city: Optional[str] = None,
    type: Optional[str] = None,
    bedrooms: Optional[int] = None,
    bathrooms: Optional[int] = None,
    verified: Optional[bool] = None,
    furnished: Optional[str] = None,
    sort_by: Optional[str] = None,
    sort_order: str = "asc",
    pagination: Pagination = Depends(get_pagination),
    db: Session = Depends(deps.get_db),
    services: ServiceRegistry = Depends(deps.get_services)
):
    """Browse properties with filters, sorting and pagination."""
    filters = PropertyFilter(
        min_price=min_price, max_price=max_price, state=state, city=city, type=type,
        bedrooms=bedrooms, bathrooms=bathrooms, verified=verified, furnished=furnished,
    )
    items, meta = services.properties.list_properties(
        db, filters=filters, sort_by=sort_by, sort_order=sort_order, page=pagination.page, limit=pagination.limit
    )
    return PaginatedAPIResponse(message="Properties fetched successfully", data=items, meta=meta)

@router.get("/search", response_model=PaginatedAPIResponse[List[Property]])
def search_properties(
    q: str = Query(""),
    pagination: Pagination = Depends(get_pagination),
    db: Session = Depends(deps.get_db),
    services: ServiceRegistry = Depends(deps.get_services)
):
    items, meta = services.properties.search_properties(db, query=q, page=pagination.page, limit=pagination.limit)
    return PaginatedAPIResponse(message="Search completed successfully", data=items, meta=meta)

@router.get("/{property_id}", response_model=APIResponse[Property])
def get_property(
    property_id: str,
    db: Session = Depends(deps.get_db),
    services: ServiceRegistry = Depends(deps.get_services)
):
    data = services.properties.get_property(db, property_id=property_id)
    return APIResponse(message="Property fetched successfully", data=data)
