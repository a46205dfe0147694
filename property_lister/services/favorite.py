from typing import List
import logging

from fastapi import HTTPException, status
from sqlalchemy.orm import Session

from property_lister.core.cache_config import USER_FAVORITE_PROPERTIES, USER_FAVORITES, build_key
from property_lister.crud.property import properties as crud_property
from property_lister.crud.user import user as crud_user
from property_lister.schemas.property import Property
from property_lister.services.cache_service import CacheService
from property_lister.services.cache_sync import CacheSyncService

logger = logging.getLogger(__name__)

class FavoriteService:
    def __init__(self, cache_service: CacheService, cache_sync: CacheSyncService):
        self.cache_service = cache_service
        self.cache_sync = cache_sync

    async def get_favorites(self, db: Session, *, user_id: str) -> List[Property]:
        props_key = build_key(USER_FAVORITE_PROPERTIES, user_id)
        cached = await self.cache_service.cached_read(props_key, List[Property])
        if cached is not None:
            return cached

        user = crud_user.get_by_id(db, user_id=user_id)
        if not user:
            raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="User not found")

        favorites = list(user.favorites or [])
        properties = [Property.model_validate(p) for p in crud_property.get_by_ids(db, ids=favorites)]

        await self.cache_service.populate(props_key, properties)
        await self.cache_service.populate(build_key(USER_FAVORITES, user_id), favorites)
        return properties

    async def add_favorite(self, db: Session, *, user_id: str, property_id: str) -> None:
        user = crud_user.get_by_id(db, user_id=user_id)
        if not user:
            raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="User not found")

        if not crud_property.get(db, property_id):
            logger.info(f"Property {property_id} not found")
            raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Property not found")

        if not crud_user.add_favorite(db, user=user, property_id=property_id):
            raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="Property is already in favorites")

        logger.info(f"Added property {property_id} to favorites for user {user_id}")
        await self.cache_sync.favorites_changed(user_id)

    async def remove_favorite(self, db: Session, *, user_id: str, property_id: str) -> None:
        user = crud_user.get_by_id(db, user_id=user_id)
        if not user:
            raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="User not found")

        if crud_user.remove_favorite(db, user=user, property_id=property_id):
            logger.info(f"Removed property {property_id} from favorites for user {user_id}")
        await self.cache_sync.favorites_changed(user_id)
