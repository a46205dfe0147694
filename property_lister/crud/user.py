from typing import List, Optional
from sqlalchemy.orm import Session

from property_lister.core.database import validate_object_id
from property_lister.crud.base import CRUDBase
from property_lister.models.user import User
from property_lister.schemas.user import UserCreate

class CRUDUser(CRUDBase[User, UserCreate, UserCreate]):
    def get_by_id(self, db: Session, *, user_id: str) -> Optional[User]:
        """Look a user up by hex identifier; raises InvalidIdentifier on a malformed id."""
        return self.get(db, validate_object_id(user_id))

    def get_by_email(self, db: Session, *, email: str) -> Optional[User]:
        return self.find_one(db, email=email)

    def add_favorite(self, db: Session, *, user: User, property_id: str) -> bool:
        """Append to favorites unless already present. Returns whether the user was modified."""
        favorites: List[str] = list(user.favorites or [])
        if property_id in favorites:
            return False
        user.favorites = favorites + [property_id]
        db.add(user)
        db.commit()
        db.refresh(user)
        return True

    def remove_favorite(self, db: Session, *, user: User, property_id: str) -> bool:
        favorites: List[str] = list(user.favorites or [])
        if property_id not in favorites:
            return False
        user.favorites = [pid for pid in favorites if pid != property_id]
        db.add(user)
        db.commit()
        db.refresh(user)
        return True

    def append_sent_recommendation(self, db: Session, *, user: User, recommendation_id: str) -> User:
        user.recommendations_sent = list(user.recommendations_sent or []) + [recommendation_id]
        db.add(user)
        db.commit()
        db.refresh(user)
        return user

user = CRUDUser(User)
