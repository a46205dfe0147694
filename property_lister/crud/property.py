from typing import Any, List, Optional, Tuple
from sqlalchemy import String, cast, func, or_
from sqlalchemy.orm import Session

from property_lister.crud.base import CRUDBase, SortSpec
from property_lister.models.property import Property
from property_lister.schemas.property import ListingCreate, ListingUpdate, PropertyFilter

FIRST_PROPERTY_NUMBER = 1000
ID_PREFIX = "PROP"

# Public sort keys mapped onto columns
SORTABLE_FIELDS = {
    "price": "price",
    "rating": "rating",
    "areaSqFt": "area_sq_ft",
    "bedrooms": "bedrooms",
    "bathrooms": "bathrooms",
}

NEWEST_FIRST: SortSpec = (("created_at", -1), ("id", -1))

def _icontains(column, value: str):
    return column.ilike(f"%{value}%")

class CRUDProperty(CRUDBase[Property, ListingCreate, ListingUpdate]):
    def build_criteria(self, filters: PropertyFilter) -> List[Any]:
        criteria = []
        if filters.min_price is not None:
            criteria.append(Property.price >= filters.min_price)
        if filters.max_price is not None:
            criteria.append(Property.price <= filters.max_price)
        if filters.state:
            criteria.append(_icontains(Property.state, filters.state))
        if filters.city:
            criteria.append(_icontains(Property.city, filters.city))
        if filters.type:
            criteria.append(_icontains(Property.type, filters.type))
        if filters.furnished:
            criteria.append(_icontains(Property.furnished, filters.furnished))
        if filters.bedrooms is not None:
            criteria.append(Property.bedrooms == filters.bedrooms)
        if filters.bathrooms is not None:
            criteria.append(Property.bathrooms == filters.bathrooms)
        if filters.verified is not None:
            criteria.append(Property.is_verified == filters.verified)
        return criteria

    def search_criteria(self, query: str) -> List[Any]:
        return [or_(
            _icontains(Property.title, query),
            _icontains(Property.state, query),
            _icontains(Property.city, query),
            _icontains(Property.type, query),
            _icontains(cast(Property.amenities, String), query),
            _icontains(cast(Property.tags, String), query),
        )]

    def sort_spec(self, sort_by: Optional[str], sort_order: str = "asc") -> SortSpec:
        column = SORTABLE_FIELDS.get(sort_by or "")
        if column is None:
            return (("price", 1),)
        return ((column, -1 if sort_order == "desc" else 1),)

    def find_page(
        self, db: Session, *, criteria: List[Any], sort: SortSpec, page: int, limit: int
    ) -> Tuple[List[Property], int]:
        total = self.count(db, criteria=criteria)
        items = self.find(db, criteria=criteria, sort=sort, skip=(page - 1) * limit, limit=limit)
        return items, total

    def get_by_ids(self, db: Session, *, ids: List[str]) -> List[Property]:
        """Properties whose id is in ``ids``, in the order of ``ids``."""
        if not ids:
            return []
        found = {p.id: p for p in self.find(db, criteria=[Property.id.in_(ids)])}
        return [found[pid] for pid in ids if pid in found]

    def get_by_owner(self, db: Session, *, owner_id: str, skip: int = 0, limit: Optional[int] = None) -> List[Property]:
        return self.find(db, created_by=owner_id, sort=NEWEST_FIRST, skip=skip, limit=limit)

    def next_id(self, db: Session) -> str:
        # Longest id first so PROP10000 sorts after PROP9999
        last = (
            db.query(Property)
            .order_by(func.length(Property.id).desc(), Property.id.desc())
            .first()
        )
        if last is None:
            return f"{ID_PREFIX}{FIRST_PROPERTY_NUMBER}"
        return f"{ID_PREFIX}{int(last.id[len(ID_PREFIX):]) + 1}"

properties = CRUDProperty(Property)
