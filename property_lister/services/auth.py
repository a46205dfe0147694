from sqlalchemy.orm import Session
from fastapi import HTTPException, status
import logging

from property_lister.core.database import utcnow
from property_lister.core.security import create_access_token, get_password_hash, verify_password
from property_lister.crud.user import user as crud_user
from property_lister.schemas.token import AuthData
from property_lister.schemas.user import User, UserCreate
from property_lister.services.cache_sync import CacheSyncService

logger = logging.getLogger(__name__)

class AuthService:
    def __init__(self, cache_sync: CacheSyncService):
        self.cache_sync = cache_sync

    def register(self, db: Session, *, user_in: UserCreate) -> AuthData:
        if crud_user.get_by_email(db, email=user_in.email):
            raise HTTPException(status_code=status.HTTP_409_CONFLICT, detail="User with this email already exists")

        user = crud_user.create(db, obj_in={
            "email": user_in.email,
            "hashed_password": get_password_hash(user_in.password),
            "first_name": user_in.first_name,
            "last_name": user_in.last_name,
            "phone": user_in.phone,
        })
        logger.info(f"Registered user {user.id}")
        token = create_access_token(user_id=user.id, email=user.email)
        return AuthData(user=User.model_validate(user), token=token)

    async def login(self, db: Session, *, email: str, password: str) -> AuthData:
        user = crud_user.get_by_email(db, email=email)
        if not user or not verify_password(password, user.hashed_password):
            raise HTTPException(
                status_code=status.HTTP_401_UNAUTHORIZED,
                detail="Invalid email or password",
            )

        token = create_access_token(user_id=user.id, email=user.email)
        user = crud_user.update(db, db_obj=user, obj_in={"updated_at": utcnow()})

        await self.cache_sync.user_logged_in(user.id, user.email)
        return AuthData(user=User.model_validate(user), token=token)
