"""Process-wide dependencies, built once at startup and passed explicitly.

The app keeps its registry on ``app.state.services``; request handlers reach
it through ``deps.get_services``. Tests build their own registry around an
in-memory database and cache backend.
"""
from typing import Optional
import logging

from sqlalchemy.engine import Engine

from property_lister.core.cache import CacheBackend, CacheStore, create_cache_backend
from property_lister.core.config import Settings, settings as default_settings
from property_lister.core.database import Base, create_db_engine, create_session_factory
from property_lister.services.auth import AuthService
from property_lister.services.cache_refresh import CacheRefresher
from property_lister.services.cache_service import CacheService
from property_lister.services.cache_sync import CacheSyncService
from property_lister.services.favorite import FavoriteService
from property_lister.services.listing import ListingService
from property_lister.services.property import property_service
from property_lister.services.recommendation import RecommendationService
from property_lister.utils.dispatcher import RefreshDispatcher

logger = logging.getLogger(__name__)

class ServiceRegistry:
    def __init__(
        self,
        settings: Optional[Settings] = None,
        *,
        engine: Optional[Engine] = None,
        cache_backend: Optional[CacheBackend] = None,
        dispatcher: Optional[RefreshDispatcher] = None,
    ):
        self.settings = settings or default_settings
        self.engine = engine or create_db_engine(self.settings.DATABASE_URL)
        self.session_factory = create_session_factory(self.engine)

        backend = cache_backend or create_cache_backend(
            self.settings.REDIS_URL, self.settings.REDIS_USERNAME, self.settings.REDIS_PASSWORD
        )
        self.cache = CacheStore(backend, ttl=self.settings.CACHE_TTL, enabled=self.settings.CACHE_ENABLED)
        self.dispatcher = dispatcher or RefreshDispatcher(
            max_workers=self.settings.REFRESH_WORKERS,
            max_queue_size=self.settings.REFRESH_QUEUE_SIZE,
            eager=self.settings.REFRESH_EAGER,
        )

        self.refresher = CacheRefresher(self.cache, self.session_factory, max_workers=self.settings.REFRESH_WORKERS)
        self.cache_sync = CacheSyncService(self.refresher, self.dispatcher)
        self.cache_service = CacheService(self.cache)

        self._auth = AuthService(self.cache_sync)
        self._favorites = FavoriteService(self.cache_service, self.cache_sync)
        self._listings = ListingService(self.cache_service, self.cache_sync)
        self._recommendations = RecommendationService(self.cache_service, self.cache_sync)

    @property
    def auth(self):
        return self._auth
    @property
    def favorites(self):
        return self._favorites
    @property
    def listings(self):
        return self._listings
    @property
    def recommendations(self):
        return self._recommendations
    @property
    def properties(self):
        return property_service

    def create_tables(self):
        Base.metadata.create_all(bind=self.engine)

    async def startup(self):
        self.create_tables()
        await self.dispatcher.start()
        logger.info("Services started")

    async def shutdown(self):
        await self.dispatcher.stop()
        self.refresher.close()
        await self.cache.backend.close()
        self.engine.dispose()
        logger.info("Services stopped")
