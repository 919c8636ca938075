# aclio/crud/local_storage.py
import logging
from datetime import date
from typing import Dict, List, Optional, Type, TypeVar

from pydantic import BaseModel, ValidationError

from aclio.crud.kv_store import KeyValueStore
from aclio.schemas.gamification import StreakData, day_string
from aclio.schemas.goal import Goal, LocationData, UserProfile
from aclio.schemas.offline import OfflineOperation
from aclio.schemas.usage import UNLIMITED, DailyUsage, FeatureType

logger = logging.getLogger(__name__)

M = TypeVar("M", bound=BaseModel)

# Storage keys
GOALS_KEY = "aclio_goals"
PROFILE_KEY = "aclio_profile"
ONBOARDED_KEY = "aclio_onboarded"
POINTS_KEY = "aclio_points"
STREAK_KEY = "aclio_streak"
ACHIEVEMENTS_KEY = "aclio_achievements"
PREMIUM_KEY = "aclio_premium"
LOCATION_KEY = "aclio_location"
DAILY_BONUS_KEY = "aclio_daily_bonus"
EXPANDED_STEPS_KEY = "aclio_expanded_steps"
OFFLINE_QUEUE_KEY = "aclio_offline_queue"


def usage_key(feature: FeatureType) -> str:
    return f"aclio_{feature.storage_key}"


ALL_KEYS: List[str] = [
    GOALS_KEY, PROFILE_KEY, ONBOARDED_KEY, POINTS_KEY, STREAK_KEY,
    ACHIEVEMENTS_KEY, PREMIUM_KEY, LOCATION_KEY, DAILY_BONUS_KEY,
    EXPANDED_STEPS_KEY, OFFLINE_QUEUE_KEY,
] + [usage_key(f) for f in FeatureType]


class LocalStorage:
    """Typed accessors for every record the client keeps on the device."""

    def __init__(self, store: KeyValueStore):
        self.store = store

    async def _load_model(self, key: str, model: Type[M]) -> Optional[M]:
        raw = await self.store.get(key)
        if raw is None:
            return None
        try:
            return model.model_validate(raw)
        except ValidationError as e:
            logger.warning(f"Discarding unreadable {key}: {e.error_count()} validation errors")
            return None

    async def _save_model(self, key: str, value: BaseModel) -> None:
        await self.store.set(key, value.model_dump(mode="json", by_alias=True))

    # Goals
    async def load_goals(self) -> List[Goal]:
        raw = await self.store.get(GOALS_KEY, [])
        goals: List[Goal] = []
        for item in raw:
            try:
                goals.append(Goal.model_validate(item))
            except ValidationError as e:
                logger.warning(f"Skipping unreadable goal record: {e.error_count()} validation errors")
        return goals

    async def save_goals(self, goals: List[Goal]) -> None:
        await self.store.set(GOALS_KEY, [g.model_dump(mode="json", by_alias=True) for g in goals])

    # Profile
    async def load_profile(self) -> Optional[UserProfile]:
        return await self._load_model(PROFILE_KEY, UserProfile)

    async def save_profile(self, profile: UserProfile) -> None:
        await self._save_model(PROFILE_KEY, profile)

    # Onboarding
    async def has_onboarded(self) -> bool:
        return bool(await self.store.get(ONBOARDED_KEY, False))

    async def set_onboarded(self, value: bool = True) -> None:
        await self.store.set(ONBOARDED_KEY, value)

    # Points
    async def load_points(self) -> int:
        return int(await self.store.get(POINTS_KEY, 0))

    async def save_points(self, points: int) -> None:
        await self.store.set(POINTS_KEY, points)

    # Streak
    async def load_streak(self) -> StreakData:
        return await self._load_model(STREAK_KEY, StreakData) or StreakData()

    async def save_streak(self, streak: StreakData) -> None:
        await self._save_model(STREAK_KEY, streak)

    # Achievements
    async def load_achievements(self) -> List[str]:
        return list(await self.store.get(ACHIEVEMENTS_KEY, []))

    async def save_achievements(self, ids: List[str]) -> None:
        await self.store.set(ACHIEVEMENTS_KEY, list(ids))

    # Premium
    async def is_premium(self) -> bool:
        return bool(await self.store.get(PREMIUM_KEY, False))

    async def set_premium(self, value: bool) -> None:
        await self.store.set(PREMIUM_KEY, value)

    # Location
    async def load_location(self) -> Optional[LocationData]:
        return await self._load_model(LOCATION_KEY, LocationData)

    async def save_location(self, location: Optional[LocationData]) -> None:
        if location is None:
            await self.store.delete(LOCATION_KEY)
        else:
            await self._save_model(LOCATION_KEY, location)

    # Daily bonus
    async def is_daily_bonus_claimed(self, today: date) -> bool:
        return await self.store.get(DAILY_BONUS_KEY) == day_string(today)

    async def claim_daily_bonus(self, today: date) -> None:
        await self.store.set(DAILY_BONUS_KEY, day_string(today))

    async def clear_daily_bonus(self) -> None:
        await self.store.delete(DAILY_BONUS_KEY)

    # Daily usage limits
    async def get_daily_uses(self, feature: FeatureType, today: date) -> int:
        usage = await self._load_model(usage_key(feature), DailyUsage)
        if usage is None or usage.date != day_string(today):
            return 0
        return usage.count

    async def increment_daily_uses(self, feature: FeatureType, today: date) -> int:
        count = await self.get_daily_uses(feature, today) + 1
        await self._save_model(usage_key(feature), DailyUsage(date=day_string(today), count=count))
        return count

    async def get_remaining_uses(self, feature: FeatureType, today: date) -> int:
        if await self.is_premium():
            return UNLIMITED
        return max(0, feature.daily_limit - await self.get_daily_uses(feature, today))

    # Expanded step cache
    async def save_expanded_step(self, goal_id: int, step_id: int, content: str) -> None:
        cache: Dict[str, str] = await self.store.get(EXPANDED_STEPS_KEY, {})
        cache[f"{goal_id}-{step_id}"] = content
        await self.store.set(EXPANDED_STEPS_KEY, cache)

    async def load_expanded_step(self, goal_id: int, step_id: int) -> Optional[str]:
        cache: Dict[str, str] = await self.store.get(EXPANDED_STEPS_KEY, {})
        return cache.get(f"{goal_id}-{step_id}")

    # Offline queue
    async def load_offline_queue(self) -> List[OfflineOperation]:
        operations: List[OfflineOperation] = []
        for item in await self.store.get(OFFLINE_QUEUE_KEY, []):
            try:
                operations.append(OfflineOperation.model_validate(item))
            except ValidationError as e:
                logger.warning(f"Skipping unreadable offline operation: {e.error_count()} validation errors")
        return operations

    async def save_offline_queue(self, operations: List[OfflineOperation]) -> None:
        await self.store.set(
            OFFLINE_QUEUE_KEY,
            [op.model_dump(mode="json", by_alias=True) for op in operations],
        )

    async def clear_offline_queue(self) -> None:
        await self.store.delete(OFFLINE_QUEUE_KEY)

    # Clear all data
    async def clear_all_data(self) -> None:
        await self.store.delete_many(ALL_KEYS)
