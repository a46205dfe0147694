from typing import Awaitable, Callable, List, Union
import logging

from property_lister.models.property import SYSTEM_OWNER
from property_lister.services.cache_refresh import CacheRefresher, RefreshResult, log_refresh_result
from property_lister.utils.dispatcher import RefreshDispatcher

logger = logging.getLogger(__name__)


class CacheSyncService:
    """Mutation hooks and the login warmer.

    Each hook hands the matching refresher to the dispatcher and returns at
    once; the outcome is only logged.
    """

    def __init__(self, refresher: CacheRefresher, dispatcher: RefreshDispatcher):
        self.refresher = refresher
        self.dispatcher = dispatcher

    async def favorites_changed(self, user_id: str):
        await self._schedule(f"favorites:{user_id}", self.refresher.refresh_favorites, user_id)

    async def listings_changed(self, owner_id: str):
        if owner_id == SYSTEM_OWNER:
            return
        await self._schedule(f"listings:{owner_id}", self.refresher.refresh_listings, owner_id)

    async def recommendation_sent(self, sender_id: str, recipient_email: str):
        await self._schedule(f"recommendations_sent:{sender_id}", self.refresher.refresh_sent_recommendations, sender_id)
        await self._schedule(
            f"recommendations_received:{recipient_email}",
            self.refresher.refresh_received_recommendations,
            recipient_email,
        )

    async def user_logged_in(self, user_id: str, email: str):
        await self._schedule(f"warm:{user_id}", self.refresher.warm_user, user_id, email)

    async def _schedule(self, name: str, refresh: Callable[..., Awaitable[Union[RefreshResult, List[RefreshResult]]]], *args):
        async def job():
            outcome = await refresh(*args)
            for result in outcome if isinstance(outcome, list) else [outcome]:
                log_refresh_result(result)
            return outcome

        await self.dispatcher.submit(name, job)
