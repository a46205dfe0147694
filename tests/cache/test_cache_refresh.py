from datetime import timedelta
from typing import List
import asyncio
import time

import pytest
from sqlalchemy import event
from sqlalchemy.exc import OperationalError

from property_lister.core.cache import CacheMiss, CacheStore, MemoryCacheBackend, StoreUnavailable
from property_lister.core.cache_config import (
    RECEIVED, SENT, USER_FAVORITE_PROPERTIES, USER_FAVORITES, USER_LISTINGS, USER_RECOMMENDATIONS, build_key,
)
from property_lister.core.database import utcnow
from property_lister.crud.recommendation import recommendation as crud_recommendation
from property_lister.services.cache_refresh import CacheRefresher, RefreshStatus
from property_lister.schemas.property import Property
from property_lister.schemas.recommendation import Recommendation

MISSING_USER = "f" * 24


def broken_session_factory():
    raise OperationalError("SELECT 1", {}, Exception("database is locked"))


class FailingSetBackend(MemoryCacheBackend):
    """Memory backend that refuses writes to keys with a given prefix."""

    def __init__(self, prefix: str):
        super().__init__()
        self.prefix = prefix

    async def set(self, key, value, ttl):
        if key.startswith(self.prefix + ":"):
            raise StoreUnavailable(f"write refused for {key}")
        await super().set(key, value, ttl)


@pytest.mark.asyncio
async def test_refresh_favorites_writes_ids_and_details_in_order(refresher, cache, user_factory, property_factory):
    property_factory("PROP1000")
    property_factory("PROP1001")
    property_factory("PROP1002")
    user = user_factory(favorites=["PROP1002", "PROP1000"])

    result = await refresher.refresh_favorites(user.id)

    assert result.status is RefreshStatus.REFRESHED
    assert await cache.get(build_key(USER_FAVORITES, user.id)) == ["PROP1002", "PROP1000"]
    details = await cache.get(build_key(USER_FAVORITE_PROPERTIES, user.id), List[Property])
    assert [p.id for p in details] == ["PROP1002", "PROP1000"]
    assert details[0].area_sq_ft == 1200

@pytest.mark.asyncio
async def test_refresh_favorites_caches_empty_lists(refresher, cache, user_factory):
    user = user_factory()

    result = await refresher.refresh_favorites(user.id)

    assert result.status is RefreshStatus.REFRESHED
    assert await cache.get(build_key(USER_FAVORITES, user.id)) == []
    assert await cache.get(build_key(USER_FAVORITE_PROPERTIES, user.id)) == []

@pytest.mark.asyncio
async def test_refresh_favorites_is_idempotent(refresher, cache, user_factory, property_factory):
    property_factory("PROP1000")
    user = user_factory(favorites=["PROP1000"])

    await refresher.refresh_favorites(user.id)
    first = await cache.get(build_key(USER_FAVORITE_PROPERTIES, user.id))
    await refresher.refresh_favorites(user.id)
    second = await cache.get(build_key(USER_FAVORITE_PROPERTIES, user.id))

    assert first == second

@pytest.mark.asyncio
async def test_refresh_favorites_drops_keys_for_missing_user(refresher, cache):
    await cache.set(build_key(USER_FAVORITES, MISSING_USER), ["PROP1000"])
    await cache.set(build_key(USER_FAVORITE_PROPERTIES, MISSING_USER), [])

    result = await refresher.refresh_favorites(MISSING_USER)

    assert result.status is RefreshStatus.SKIPPED
    with pytest.raises(CacheMiss):
        await cache.get(build_key(USER_FAVORITES, MISSING_USER))
    with pytest.raises(CacheMiss):
        await cache.get(build_key(USER_FAVORITE_PROPERTIES, MISSING_USER))

@pytest.mark.asyncio
async def test_refresh_favorites_skips_malformed_id(refresher, cache):
    await cache.set(build_key(USER_FAVORITES, "not-an-id"), ["PROP1000"])

    result = await refresher.refresh_favorites("not-an-id")

    assert result.status is RefreshStatus.SKIPPED
    assert await cache.get(build_key(USER_FAVORITES, "not-an-id")) == ["PROP1000"]

@pytest.mark.asyncio
async def test_refresh_favorites_discards_both_keys_when_details_write_fails(session_factory, user_factory, property_factory):
    property_factory("PROP1000")
    user = user_factory(favorites=["PROP1000"])
    backend = FailingSetBackend(USER_FAVORITE_PROPERTIES)
    refresher = CacheRefresher(CacheStore(backend), session_factory, max_workers=1)
    fav_key = build_key(USER_FAVORITES, user.id)
    props_key = build_key(USER_FAVORITE_PROPERTIES, user.id)
    await MemoryCacheBackend.set(backend, props_key, "[]", 600)

    result = await refresher.refresh_favorites(user.id)
    refresher.close()

    assert result.status is RefreshStatus.FAILED
    assert set(result.keys) == {fav_key, props_key}
    for key in (fav_key, props_key):
        with pytest.raises(CacheMiss):
            await refresher.cache.get(key)

@pytest.mark.asyncio
async def test_refresh_listings_newest_first(refresher, cache, user_factory, property_factory):
    owner = user_factory()
    now = utcnow()
    property_factory("PROP1000", created_by=owner.id, created_at=now - timedelta(minutes=2))
    property_factory("PROP1001", created_by=owner.id, created_at=now - timedelta(minutes=1))
    property_factory("PROP1002", created_by=owner.id, created_at=now)
    property_factory("PROP1003")

    result = await refresher.refresh_listings(owner.id)

    assert result.status is RefreshStatus.REFRESHED
    listings = await cache.get(build_key(USER_LISTINGS, owner.id), List[Property])
    assert [p.id for p in listings] == ["PROP1002", "PROP1001", "PROP1000"]

@pytest.mark.asyncio
async def test_refresh_listings_database_failure_keeps_previous_value(cache):
    refresher = CacheRefresher(cache, broken_session_factory, max_workers=1)
    key = build_key(USER_LISTINGS, MISSING_USER)
    await cache.set(key, ["previous"])

    result = await refresher.refresh_listings(MISSING_USER)

    assert result.status is RefreshStatus.FAILED
    assert "database error" in result.reason
    assert await cache.get(key) == ["previous"]
    refresher.close()

@pytest.mark.asyncio
async def test_refresh_favorites_invalid_record_keeps_previous_value(refresher, cache, user_factory, property_factory):
    property_factory("PROP1000", furnished=None)
    user = user_factory(favorites=["PROP1000"])
    fav_key = build_key(USER_FAVORITES, user.id)
    await cache.set(fav_key, ["previous"])

    result = await refresher.refresh_favorites(user.id)

    assert result.status is RefreshStatus.FAILED
    assert "invalid record" in result.reason
    assert await cache.get(fav_key) == ["previous"]

@pytest.mark.asyncio
async def test_refresh_listings_invalid_record_is_reported(refresher, user_factory, property_factory):
    owner = user_factory()
    property_factory("PROP1000", created_by=owner.id, furnished=None)

    result = await refresher.refresh_listings(owner.id)

    assert result.status is RefreshStatus.FAILED
    assert "invalid record" in result.reason

@pytest.mark.asyncio
async def test_slow_database_does_not_block_event_loop(refresher, database_engine, user_factory, property_factory):
    property_factory("PROP1000")
    user = user_factory(favorites=["PROP1000"])
    ticks = 0

    def slow_query(conn, cursor, statement, parameters, context, executemany):
        time.sleep(0.2)

    async def ticker():
        nonlocal ticks
        while True:
            await asyncio.sleep(0.01)
            ticks += 1

    event.listen(database_engine, "before_cursor_execute", slow_query)
    task = asyncio.create_task(ticker())
    try:
        result = await refresher.refresh_favorites(user.id)
    finally:
        event.remove(database_engine, "before_cursor_execute", slow_query)
        task.cancel()

    assert result.status is RefreshStatus.REFRESHED
    # two queries at 0.2s each; a blocked loop would not tick at all
    assert ticks >= 10

@pytest.mark.asyncio
async def test_refresh_sent_and_received_recommendations(refresher, cache, db_session, user_factory, property_factory):
    property_factory("PROP1000")
    property_factory("PROP1001")
    alice = user_factory("alice@example.com")
    bob = user_factory("bob@example.com")
    now = utcnow()
    for n, property_id in enumerate(["PROP1000", "PROP1001"]):
        crud_recommendation.create(db_session, obj_in={
            "property_id": property_id,
            "sender_id": alice.id,
            "recipient_email": bob.email,
            "status": "pending",
            "created_at": now + timedelta(seconds=n),
            "updated_at": now + timedelta(seconds=n),
        })

    sent = await refresher.refresh_sent_recommendations(alice.id)
    received = await refresher.refresh_received_recommendations(bob.email)

    assert sent.status is RefreshStatus.REFRESHED
    assert received.status is RefreshStatus.REFRESHED
    sent_value = await cache.get(build_key(USER_RECOMMENDATIONS, alice.id, SENT), List[Recommendation])
    received_value = await cache.get(build_key(USER_RECOMMENDATIONS, bob.id, RECEIVED), List[Recommendation])
    assert [r.property_id for r in sent_value] == ["PROP1000", "PROP1001"]
    assert [r.id for r in received_value] == [r.id for r in sent_value]
    assert all(r.status == "pending" for r in received_value)

@pytest.mark.asyncio
async def test_refresh_received_for_unknown_email_is_skipped(refresher, cache_backend):
    result = await refresher.refresh_received_recommendations("nobody@example.com")

    assert result.status is RefreshStatus.SKIPPED
    assert await cache_backend.keys("*") == []

@pytest.mark.asyncio
async def test_warm_user_builds_every_projection(refresher, cache, user_factory):
    user = user_factory("carol@example.com")

    results = await refresher.warm_user(user.id, user.email)

    assert [r.status for r in results] == [RefreshStatus.REFRESHED] * 4
    assert await cache.get(build_key(USER_FAVORITES, user.id)) == []
    assert await cache.get(build_key(USER_LISTINGS, user.id)) == []
    assert await cache.get(build_key(USER_RECOMMENDATIONS, user.id, SENT)) == []
    assert await cache.get(build_key(USER_RECOMMENDATIONS, user.id, RECEIVED)) == []
