import asyncio
from typing import List

import pytest
from sqlalchemy.exc import OperationalError

from property_lister.core.cache import CacheMiss
from property_lister.core.cache_config import USER_FAVORITE_PROPERTIES, USER_FAVORITES, USER_LISTINGS, build_key
from property_lister.crud.user import user as crud_user
from property_lister.models.property import SYSTEM_OWNER
from property_lister.schemas.property import Property
from property_lister.services.cache_refresh import CacheRefresher
from property_lister.services.cache_sync import CacheSyncService
from property_lister.utils.dispatcher import RefreshDispatcher


@pytest.mark.asyncio
async def test_worker_mode_runs_every_job_by_join():
    dispatcher = RefreshDispatcher(max_workers=2)
    seen = []

    async def job(n):
        await asyncio.sleep(0)
        seen.append(n)

    for n in range(5):
        assert await dispatcher.submit(f"job-{n}", job, n) is True
    await dispatcher.join()

    assert sorted(seen) == [0, 1, 2, 3, 4]
    assert dispatcher.stats["completed"] == 5
    await dispatcher.stop()
    assert not dispatcher.running

@pytest.mark.asyncio
async def test_submit_returns_before_job_runs():
    dispatcher = RefreshDispatcher(max_workers=1)
    started = asyncio.Event()

    async def job():
        started.set()

    await dispatcher.submit("slow", job)
    assert not started.is_set()
    await dispatcher.join()
    assert started.is_set()
    await dispatcher.stop()

@pytest.mark.asyncio
async def test_failed_job_is_counted_not_raised():
    dispatcher = RefreshDispatcher(max_workers=1)

    async def job():
        raise RuntimeError("boom")

    assert await dispatcher.submit("broken", job) is True
    await dispatcher.join()

    assert dispatcher.stats["failed"] == 1
    assert dispatcher.stats["completed"] == 0
    await dispatcher.stop()

@pytest.mark.asyncio
async def test_full_queue_drops_job():
    dispatcher = RefreshDispatcher(max_workers=1, max_queue_size=1)

    async def job():
        pass

    assert await dispatcher.submit("first", job) is True
    assert await dispatcher.submit("second", job) is False
    assert dispatcher.stats["dropped"] == 1
    await dispatcher.stop()

@pytest.mark.asyncio
async def test_eager_mode_runs_inline():
    dispatcher = RefreshDispatcher(eager=True)
    seen = []

    async def job(value):
        seen.append(value)

    await dispatcher.submit("inline", job, "done")

    assert seen == ["done"]
    assert not dispatcher.running
    assert dispatcher.stats["completed"] == 1


@pytest.mark.asyncio
async def test_favorites_hook_converges_to_latest_state(refresher, cache, db_session, user_factory, property_factory):
    for n in range(1000, 1005):
        property_factory(f"PROP{n}")
    user = user_factory()
    dispatcher = RefreshDispatcher(max_workers=4)
    sync = CacheSyncService(refresher, dispatcher)

    for n in range(1000, 1005):
        crud_user.add_favorite(db_session, user=user, property_id=f"PROP{n}")
        await sync.favorites_changed(user.id)
    crud_user.remove_favorite(db_session, user=user, property_id="PROP1002")
    await sync.favorites_changed(user.id)
    await dispatcher.join()

    expected = ["PROP1000", "PROP1001", "PROP1003", "PROP1004"]
    assert await cache.get(build_key(USER_FAVORITES, user.id)) == expected
    details = await cache.get(build_key(USER_FAVORITE_PROPERTIES, user.id), List[Property])
    assert [p.id for p in details] == expected
    await dispatcher.stop()

@pytest.mark.asyncio
async def test_listings_hook_ignores_system_owner(refresher, cache):
    dispatcher = RefreshDispatcher(eager=True)
    sync = CacheSyncService(refresher, dispatcher)

    await sync.listings_changed(SYSTEM_OWNER)

    assert dispatcher.stats["submitted"] == 0
    with pytest.raises(CacheMiss):
        await cache.get(build_key(USER_LISTINGS, SYSTEM_OWNER))

@pytest.mark.asyncio
async def test_login_warmer_runs_in_background(refresher, cache, user_factory):
    user = user_factory()
    dispatcher = RefreshDispatcher(max_workers=2)
    sync = CacheSyncService(refresher, dispatcher)

    await sync.user_logged_in(user.id, user.email)
    await dispatcher.join()

    assert await cache.get(build_key(USER_LISTINGS, user.id)) == []
    assert dispatcher.stats["completed"] == 1
    await dispatcher.stop()

@pytest.mark.asyncio
async def test_failed_refresh_result_is_counted_as_failure(cache):
    def broken_session_factory():
        raise OperationalError("SELECT 1", {}, Exception("database is locked"))

    refresher = CacheRefresher(cache, broken_session_factory, max_workers=1)
    dispatcher = RefreshDispatcher(eager=True)
    sync = CacheSyncService(refresher, dispatcher)

    await sync.listings_changed("a" * 24)
    await sync.user_logged_in("a" * 24, "nobody@example.com")
    refresher.close()

    assert dispatcher.stats["failed"] == 2
    assert dispatcher.stats["completed"] == 0
