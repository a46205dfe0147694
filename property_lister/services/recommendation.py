from typing import List
import logging

from fastapi import HTTPException, status
from sqlalchemy.orm import Session

from property_lister.core.cache_config import RECEIVED, SENT, USER_RECOMMENDATIONS, build_key
from property_lister.core.database import utcnow, validate_object_id
from property_lister.crud.property import properties as crud_property
from property_lister.crud.recommendation import recommendation as crud_recommendation
from property_lister.crud.user import user as crud_user
from property_lister.models.recommendation import RecommendationStatus
from property_lister.schemas.recommendation import Recommendation, RecommendationCreate
from property_lister.schemas.user import AuthContext
from property_lister.services.cache_service import CacheService
from property_lister.services.cache_sync import CacheSyncService

logger = logging.getLogger(__name__)

class RecommendationService:
    def __init__(self, cache_service: CacheService, cache_sync: CacheSyncService):
        self.cache_service = cache_service
        self.cache_sync = cache_sync

    async def send(self, db: Session, *, sender: AuthContext, recommendation_in: RecommendationCreate) -> Recommendation:
        sender_id = validate_object_id(sender.user_id)
        recipient_email = recommendation_in.recipient_email

        if not crud_property.get(db, recommendation_in.property_id):
            raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Property not found")

        if not crud_user.get_by_email(db, email=recipient_email):
            logger.info(f"Recipient email {recipient_email} not found in system")
            raise HTTPException(
                status_code=status.HTTP_404_NOT_FOUND,
                detail="The recipient must be a registered user to receive recommendations"
            )

        if recipient_email == sender.email:
            raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="Cannot send recommendation to yourself")

        if crud_recommendation.find_duplicate(
            db, sender_id=sender_id, property_id=recommendation_in.property_id, recipient_email=recipient_email
        ):
            raise HTTPException(
                status_code=status.HTTP_409_CONFLICT,
                detail="You have already recommended this property to this user"
            )

        sender_user = crud_user.get(db, sender_id)
        if not sender_user:
            raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="User not found")

        now = utcnow()
        recommendation = crud_recommendation.create(db, obj_in={
            "property_id": recommendation_in.property_id,
            "sender_id": sender_id,
            "recipient_email": recipient_email,
            "message": recommendation_in.message,
            "status": RecommendationStatus.PENDING.value,
            "created_at": now,
            "updated_at": now,
        })
        crud_user.append_sent_recommendation(db, user=sender_user, recommendation_id=recommendation.id)
        logger.info(f"User {sender_id} recommended {recommendation_in.property_id} to {recipient_email}")

        await self.cache_sync.recommendation_sent(sender_id, recipient_email)
        return Recommendation.model_validate(recommendation)

    async def get_sent(self, db: Session, *, user: AuthContext) -> List[Recommendation]:
        key = build_key(USER_RECOMMENDATIONS, user.user_id, SENT)
        sent = await self.cache_service.cached_read(key, List[Recommendation])
        if sent is None:
            sender_id = validate_object_id(user.user_id)
            sent = [Recommendation.model_validate(r) for r in crud_recommendation.get_sent(db, sender_id=sender_id)]
            await self.cache_service.populate(key, sent)
        return sent

    async def get_received(self, db: Session, *, user: AuthContext) -> List[Recommendation]:
        key = build_key(USER_RECOMMENDATIONS, user.user_id, RECEIVED)
        received = await self.cache_service.cached_read(key, List[Recommendation])
        if received is None:
            received = [
                Recommendation.model_validate(r)
                for r in crud_recommendation.get_received(db, recipient_email=user.email)
            ]
            await self.cache_service.populate(key, received)
        return received

    async def get_all(self, db: Session, *, user: AuthContext) -> List[Recommendation]:
        """Sent followed by received; each half is served from cache when present."""
        return await self.get_sent(db, user=user) + await self.get_received(db, user=user)
