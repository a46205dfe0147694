from typing import List, Optional, Tuple

from fastapi import HTTPException, status
from sqlalchemy.orm import Session

from property_lister.crud.property import properties as crud_property
from property_lister.schemas.property import Property, PropertyFilter
from property_lister.schemas.response import PaginationMeta

class PropertyService:
    def list_properties(
        self, db: Session, *, filters: PropertyFilter, sort_by: Optional[str], sort_order: str, page: int, limit: int
    ) -> Tuple[List[Property], PaginationMeta]:
        items, total = crud_property.find_page(
            db,
            criteria=crud_property.build_criteria(filters),
            sort=crud_property.sort_spec(sort_by, sort_order),
            page=page,
            limit=limit,
        )
        return [Property.model_validate(p) for p in items], PaginationMeta.build(page=page, limit=limit, total=total)

    def search_properties(self, db: Session, *, query: str, page: int, limit: int) -> Tuple[List[Property], PaginationMeta]:
        if not query or not query.strip():
            raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="Search query is required")
        items, total = crud_property.find_page(
            db,
            criteria=crud_property.search_criteria(query.strip()),
            sort=(("rating", -1),),
            page=page,
            limit=limit,
        )
        return [Property.model_validate(p) for p in items], PaginationMeta.build(page=page, limit=limit, total=total)

    def get_property(self, db: Session, *, property_id: str) -> Property:
        return Property.model_validate(crud_property.get_or_404(db, property_id))

property_service = PropertyService()
