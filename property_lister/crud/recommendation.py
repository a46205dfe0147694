from typing import List, Optional
from sqlalchemy.orm import Session

from property_lister.crud.base import CRUDBase
from property_lister.models.recommendation import Recommendation
from property_lister.schemas.recommendation import RecommendationCreate

class CRUDRecommendation(CRUDBase[Recommendation, RecommendationCreate, RecommendationCreate]):
    """CRUD operations for Recommendations."""

    def get_sent(self, db: Session, *, sender_id: str) -> List[Recommendation]:
        return self.find(db, sender_id=sender_id, sort=(("created_at", 1),))

    def get_received(self, db: Session, *, recipient_email: str) -> List[Recommendation]:
        return self.find(db, recipient_email=recipient_email, sort=(("created_at", 1),))

    def find_duplicate(self, db: Session, *, sender_id: str, property_id: str, recipient_email: str) -> Optional[Recommendation]:
        return self.find_one(db, sender_id=sender_id, property_id=property_id, recipient_email=recipient_email)

recommendation = CRUDRecommendation(Recommendation)
