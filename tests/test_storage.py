from __future__ import annotations

from datetime import date, timedelta

import pytest
import pytest_asyncio

from aclio.crud.kv_store import MemoryKeyValueStore, open_sql_store
from aclio.crud.local_storage import (
    ALL_KEYS,
    LOCATION_KEY,
    PROFILE_KEY,
    LocalStorage,
)
from aclio.models.kv_entry import KVEntry
from aclio.schemas.gamification import StreakData
from aclio.schemas.goal import Gender, LocationData, UserProfile
from aclio.schemas.usage import UNLIMITED, FeatureType

TODAY = date(2024, 5, 20)


@pytest_asyncio.fixture
async def sql_store(tmp_path):
    store = await open_sql_store(f"sqlite+aiosqlite:///{tmp_path / 'aclio.db'}")
    yield store
    await store.close()


@pytest.mark.asyncio
async def test_sql_store_round_trip(sql_store) -> None:
    assert await sql_store.get("missing", "fallback") == "fallback"

    await sql_store.set("aclio_points", 40)
    await sql_store.set("aclio_goals", [{"id": 1, "name": "Run"}])
    assert await sql_store.get("aclio_points") == 40
    assert await sql_store.get("aclio_goals") == [{"id": 1, "name": "Run"}]

    await sql_store.set("aclio_points", 55)
    assert await sql_store.get("aclio_points") == 55

    await sql_store.delete("aclio_points")
    assert await sql_store.get("aclio_points") is None

    await sql_store.delete_many(["aclio_goals", "never_set"])
    assert await sql_store.get("aclio_goals") is None


@pytest.mark.asyncio
async def test_sql_store_corrupt_value_reads_as_default(sql_store) -> None:
    async with sql_store.session_factory() as db:
        db.add(KVEntry(key="aclio_profile", value="{not json"))
        await db.commit()

    assert await sql_store.get("aclio_profile", {}) == {}


@pytest.mark.asyncio
async def test_local_storage_over_sql_store(sql_store) -> None:
    storage = LocalStorage(sql_store)
    await storage.save_streak(StreakData(current=3, best=5, last_active="Mon May 20 2024"))

    streak = await storage.load_streak()
    assert (streak.current, streak.best) == (3, 5)
    assert await sql_store.get("aclio_streak") == {
        "current": 3,
        "best": 5,
        "lastActive": "Mon May 20 2024",
    }


@pytest.mark.asyncio
async def test_memory_store_isolates_values() -> None:
    store = MemoryKeyValueStore({"aclio_goals": []})
    goals = await store.get("aclio_goals")
    goals.append("mutated")
    assert await store.get("aclio_goals") == []


@pytest.mark.asyncio
async def test_profile_round_trip(storage) -> None:
    assert await storage.load_profile() is None

    await storage.save_profile(UserProfile(name="Sam", age="29", gender=Gender.OTHER))
    profile = await storage.load_profile()

    assert profile.display_name == "Sam"
    assert profile.age_int == 29
    assert profile.gender is Gender.OTHER


@pytest.mark.asyncio
async def test_unreadable_profile_is_discarded(store, storage) -> None:
    await store.set(PROFILE_KEY, {"gender": "Robot"})
    assert await storage.load_profile() is None


@pytest.mark.asyncio
async def test_flags_default_false(storage) -> None:
    assert await storage.has_onboarded() is False
    assert await storage.is_premium() is False
    await storage.set_onboarded()
    await storage.set_premium(True)
    assert await storage.has_onboarded() is True
    assert await storage.is_premium() is True


@pytest.mark.asyncio
async def test_location_none_clears(store, storage) -> None:
    await storage.save_location(LocationData(latitude=1.0, longitude=2.0, city="Lisbon"))
    assert (await storage.load_location()).short_display == "Lisbon"

    await storage.save_location(None)
    assert await store.get(LOCATION_KEY) is None


@pytest.mark.asyncio
async def test_daily_usage_resets_on_new_day(storage) -> None:
    feature = FeatureType.DO_IT_FOR_ME
    assert await storage.get_remaining_uses(feature, TODAY) == 2

    await storage.increment_daily_uses(feature, TODAY)
    assert await storage.increment_daily_uses(feature, TODAY) == 2
    assert await storage.get_remaining_uses(feature, TODAY) == 0

    tomorrow = TODAY + timedelta(days=1)
    assert await storage.get_daily_uses(feature, tomorrow) == 0
    assert await storage.get_remaining_uses(feature, tomorrow) == 2


@pytest.mark.asyncio
async def test_premium_is_unlimited(storage) -> None:
    await storage.set_premium(True)
    await storage.increment_daily_uses(FeatureType.EXPAND_STEP, TODAY)
    assert await storage.get_remaining_uses(FeatureType.EXPAND_STEP, TODAY) == UNLIMITED


@pytest.mark.asyncio
async def test_expanded_step_cache(storage) -> None:
    assert await storage.load_expanded_step(1, 2) is None
    await storage.save_expanded_step(1, 2, "guide")
    await storage.save_expanded_step(1, 3, "other")
    assert await storage.load_expanded_step(1, 2) == "guide"


@pytest.mark.asyncio
async def test_clear_all_data(store, storage) -> None:
    await storage.save_points(10)
    await storage.claim_daily_bonus(TODAY)
    await storage.increment_daily_uses(FeatureType.CHAT, TODAY)
    await store.set("unrelated", True)

    await storage.clear_all_data()

    assert store.keys() == ["unrelated"]
    assert "aclio_chat_messages" in ALL_KEYS
