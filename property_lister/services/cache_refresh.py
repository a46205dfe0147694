"""Refreshers that rebuild user-scoped cache projections from the database.

Every refresher re-reads the current state and fully replaces the cached
value, so running one twice in a row leaves the same content behind. None of
them raise: the outcome is reported as a RefreshResult for the caller to log.
"""
from concurrent.futures import ThreadPoolExecutor
from contextlib import contextmanager
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Callable, Iterator, List, Optional, Tuple
import asyncio
import logging

from pydantic import ValidationError
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session, sessionmaker

from property_lister.core.cache import CacheError, CacheStore
from property_lister.core.cache_config import (
    RECEIVED, SENT, USER_FAVORITE_PROPERTIES, USER_FAVORITES, USER_LISTINGS, USER_RECOMMENDATIONS, build_key,
)
from property_lister.core.database import InvalidIdentifier, validate_object_id
from property_lister.crud.property import properties as crud_property
from property_lister.crud.recommendation import recommendation as crud_recommendation
from property_lister.crud.user import user as crud_user
from property_lister.schemas.property import Property
from property_lister.schemas.recommendation import Recommendation

logger = logging.getLogger(__name__)


class RefreshStatus(str, Enum):
    REFRESHED = "refreshed"
    SKIPPED = "skipped"  # source record missing or identifier malformed
    FAILED = "failed"    # database or cache error


@dataclass
class RefreshResult:
    name: str
    subject: str
    status: RefreshStatus
    keys: Tuple[str, ...] = field(default_factory=tuple)
    reason: str = ""

    def __str__(self) -> str:
        text = f"{self.name}[{self.subject}] {self.status.value}"
        if self.keys:
            text += f" keys={','.join(self.keys)}"
        if self.reason:
            text += f" ({self.reason})"
        return text


def log_refresh_result(result: RefreshResult):
    if result.status is RefreshStatus.FAILED:
        logger.warning(f"Cache refresh {result}")
    else:
        logger.info(f"Cache refresh {result}")


class CacheRefresher:
    """Store reads run on a bounded thread pool; cache writes stay on the event loop."""

    def __init__(self, cache: CacheStore, session_factory: sessionmaker, max_workers: int = 4):
        self.cache = cache
        self.session_factory = session_factory
        self._executor = ThreadPoolExecutor(max_workers=max_workers, thread_name_prefix="cache-refresh-db")

    def close(self):
        self._executor.shutdown(wait=False)

    @contextmanager
    def _session(self) -> Iterator[Session]:
        db = self.session_factory()
        try:
            yield db
        finally:
            db.close()

    async def _load(self, loader: Callable[..., Any], *args: Any) -> Any:
        loop = asyncio.get_running_loop()
        return await loop.run_in_executor(self._executor, loader, *args)

    def _failed(self, name: str, subject: str, error: Exception) -> RefreshResult:
        if isinstance(error, ValidationError):
            reason = f"invalid record: {error}"
        else:
            reason = f"database error: {error}"
        return RefreshResult(name, subject, RefreshStatus.FAILED, reason=reason)

    def _load_favorites(self, user_id: str) -> Optional[Tuple[List[str], List[Property]]]:
        with self._session() as db:
            user = crud_user.get(db, user_id)
            if user is None:
                return None
            favorites: List[str] = list(user.favorites or [])
            details = [Property.model_validate(p) for p in crud_property.get_by_ids(db, ids=favorites)]
            return favorites, details

    def _load_listings(self, user_id: str) -> List[Property]:
        with self._session() as db:
            return [Property.model_validate(p) for p in crud_property.get_by_owner(db, owner_id=user_id)]

    def _load_sent(self, user_id: str) -> List[Recommendation]:
        with self._session() as db:
            return [Recommendation.model_validate(r) for r in crud_recommendation.get_sent(db, sender_id=user_id)]

    def _load_received(self, email: str) -> Optional[Tuple[str, List[Recommendation]]]:
        with self._session() as db:
            recipient = crud_user.get_by_email(db, email=email)
            if recipient is None:
                return None
            received = [
                Recommendation.model_validate(r)
                for r in crud_recommendation.get_received(db, recipient_email=email)
            ]
            return recipient.id, received

    async def refresh_favorites(self, user_id: str) -> RefreshResult:
        """Rewrite the favorites id list and the favorite property details together."""
        name = "favorites"
        fav_key = build_key(USER_FAVORITES, user_id)
        props_key = build_key(USER_FAVORITE_PROPERTIES, user_id)

        try:
            validate_object_id(user_id)
        except InvalidIdentifier as e:
            return RefreshResult(name, user_id, RefreshStatus.SKIPPED, reason=str(e))

        try:
            loaded = await self._load(self._load_favorites, user_id)
        except (SQLAlchemyError, ValidationError) as e:
            return self._failed(name, user_id, e)

        if loaded is None:
            # Cannot rebuild the pair; drop it rather than leave it unverifiable
            try:
                await self.cache.delete(fav_key)
                await self.cache.delete(props_key)
            except CacheError as e:
                return RefreshResult(name, user_id, RefreshStatus.FAILED, reason=f"cache error: {e}")
            return RefreshResult(name, user_id, RefreshStatus.SKIPPED, (fav_key, props_key), "user not found, entries dropped")

        favorites, details = loaded
        try:
            await self.cache.set(fav_key, favorites)
        except CacheError as e:
            return RefreshResult(name, user_id, RefreshStatus.FAILED, reason=f"cache error: {e}")
        try:
            await self.cache.set(props_key, details)
        except CacheError as e:
            await self._discard(fav_key)
            await self._discard(props_key)
            return RefreshResult(name, user_id, RefreshStatus.FAILED, (fav_key, props_key), f"cache error: {e}")

        return RefreshResult(name, user_id, RefreshStatus.REFRESHED, (fav_key, props_key))

    async def refresh_listings(self, user_id: str) -> RefreshResult:
        name = "listings"
        key = build_key(USER_LISTINGS, user_id)
        try:
            listings = await self._load(self._load_listings, user_id)
        except (SQLAlchemyError, ValidationError) as e:
            return self._failed(name, user_id, e)
        return await self._write(name, user_id, key, listings)

    async def refresh_sent_recommendations(self, user_id: str) -> RefreshResult:
        name = "sent_recommendations"
        key = build_key(USER_RECOMMENDATIONS, user_id, SENT)
        try:
            validate_object_id(user_id)
        except InvalidIdentifier as e:
            return RefreshResult(name, user_id, RefreshStatus.SKIPPED, reason=str(e))
        try:
            sent = await self._load(self._load_sent, user_id)
        except (SQLAlchemyError, ValidationError) as e:
            return self._failed(name, user_id, e)
        return await self._write(name, user_id, key, sent)

    async def refresh_received_recommendations(self, email: str) -> RefreshResult:
        """Resolve the recipient by email and rewrite their received list."""
        name = "received_recommendations"
        try:
            loaded = await self._load(self._load_received, email)
        except (SQLAlchemyError, ValidationError) as e:
            return self._failed(name, email, e)
        if loaded is None:
            return RefreshResult(name, email, RefreshStatus.SKIPPED, reason="no user with this email")
        recipient_id, received = loaded
        key = build_key(USER_RECOMMENDATIONS, recipient_id, RECEIVED)
        return await self._write(name, email, key, received)

    async def warm_user(self, user_id: str, email: str) -> List[RefreshResult]:
        return [
            await self.refresh_favorites(user_id),
            await self.refresh_listings(user_id),
            await self.refresh_sent_recommendations(user_id),
            await self.refresh_received_recommendations(email),
        ]

    async def _write(self, name: str, subject: str, key: str, value) -> RefreshResult:
        try:
            await self.cache.set(key, value)
        except CacheError as e:
            return RefreshResult(name, subject, RefreshStatus.FAILED, (key,), f"cache error: {e}")
        return RefreshResult(name, subject, RefreshStatus.REFRESHED, (key,))

    async def _discard(self, key: str):
        try:
            await self.cache.delete(key)
        except CacheError as e:
            logger.warning(f"Could not discard {key} after a partial refresh: {e}")
