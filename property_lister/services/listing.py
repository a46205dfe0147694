from typing import List, Tuple
import logging

from fastapi import HTTPException, status
from sqlalchemy.orm import Session

from property_lister.core.cache_config import USER_LISTINGS, build_key
from property_lister.core.database import utcnow
from property_lister.crud.property import properties as crud_property
from property_lister.models.property import Property as PropertyModel, SYSTEM_OWNER
from property_lister.schemas.property import ListingCreate, ListingUpdate, Property
from property_lister.schemas.response import PaginationMeta
from property_lister.services.cache_service import CacheService
from property_lister.services.cache_sync import CacheSyncService

logger = logging.getLogger(__name__)

class ListingService:
    def __init__(self, cache_service: CacheService, cache_sync: CacheSyncService):
        self.cache_service = cache_service
        self.cache_sync = cache_sync

    async def get_listings(self, db: Session, *, user_id: str, page: int, limit: int) -> Tuple[List[Property], PaginationMeta]:
        """One page of the user's listings, newest first.

        The cache always holds the full set; every page is cut from it.
        """
        key = build_key(USER_LISTINGS, user_id)
        listings = await self.cache_service.cached_read(key, List[Property])
        if listings is None:
            listings = [Property.model_validate(p) for p in crud_property.get_by_owner(db, owner_id=user_id)]
            await self.cache_service.populate(key, listings)

        start = (page - 1) * limit
        meta = PaginationMeta.build(page=page, limit=limit, total=len(listings))
        return listings[start:start + limit], meta

    async def create_listing(self, db: Session, *, user_id: str, listing_in: ListingCreate) -> Property:
        now = utcnow()
        data = listing_in.model_dump(by_alias=False)
        data.update(
            id=crud_property.next_id(db),
            created_by=user_id,
            is_verified=False,
            rating=0.0,
            created_at=now,
            updated_at=now,
        )
        listing = crud_property.create(db, obj_in=data)
        logger.info(f"User {user_id} created listing {listing.id}")

        await self.cache_sync.listings_changed(user_id)
        return Property.model_validate(listing)

    async def update_listing(self, db: Session, *, user_id: str, listing_id: str, listing_in: ListingUpdate) -> Property:
        listing = self._get_owned(db, user_id=user_id, listing_id=listing_id, action="update")
        update_data = listing_in.model_dump(exclude_unset=True, exclude_none=True, by_alias=False)
        update_data["updated_at"] = utcnow()
        listing = crud_property.update(db, db_obj=listing, obj_in=update_data)

        await self.cache_sync.listings_changed(listing.created_by)
        return Property.model_validate(listing)

    async def delete_listing(self, db: Session, *, user_id: str, listing_id: str) -> None:
        listing = self._get_owned(db, user_id=user_id, listing_id=listing_id, action="delete")
        owner_id = listing.created_by
        crud_property.delete(db, id=listing_id)
        logger.info(f"User {user_id} deleted listing {listing_id}")

        await self.cache_sync.listings_changed(owner_id)

    def _get_owned(self, db: Session, *, user_id: str, listing_id: str, action: str) -> PropertyModel:
        listing = crud_property.get(db, listing_id)
        if not listing:
            raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Listing not found")
        if listing.created_by not in (user_id, SYSTEM_OWNER):
            raise HTTPException(
                status_code=status.HTTP_403_FORBIDDEN,
                detail=f"You don't have permission to {action} this listing"
            )
        return listing
