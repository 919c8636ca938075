# aclio/schemas/gamification.py
from datetime import date, timedelta
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

# Points awarded per event
STEP_COMPLETE_POINTS = 10
GOAL_COMPLETE_POINTS = 50
DAILY_BONUS_POINTS = 25
STREAK_BONUS_POINTS = 5  # per day of streak
FIRST_GOAL_POINTS = 30


def day_string(day: date) -> str:
    """Calendar-day key used for streak and daily-bonus bookkeeping, e.g. 'Mon Jan 01 2024'."""
    return day.strftime("%a %b %d %Y")


class Level(BaseModel):
    level: int
    name: str
    min_points: int
    icon: str


class Achievement(BaseModel):
    id: str
    name: str
    description: str
    icon: str
    gradient: str


class StreakData(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    current: int = 0
    best: int = 0
    last_active: Optional[str] = None

    def is_active_on(self, today: date) -> bool:
        return self.last_active == day_string(today)

    def update(self, today: date) -> int:
        """
        Register activity on ``today``. Returns the streak bonus earned,
        which is non-zero only when yesterday's streak continues.
        """
        today_str = day_string(today)
        yesterday_str = day_string(today - timedelta(days=1))

        if self.last_active == today_str:
            return 0
        if self.last_active == yesterday_str:
            self.current += 1
            self.best = max(self.best, self.current)
            self.last_active = today_str
            return STREAK_BONUS_POINTS * self.current

        # Streak broken or first activity: start fresh
        self.current = 1
        self.best = max(self.best, self.current)
        self.last_active = today_str
        return 0


class PointsPopup(BaseModel):
    amount: int
    reason: str


class LevelUpData(BaseModel):
    level: Level


class GamificationSnapshot(BaseModel):
    """Read model for dashboards."""
    points: int
    level: Level
    next_level: Optional[Level] = None
    level_progress: float
    streak: StreakData
    unlocked_achievements: list = Field(default_factory=list)
    daily_bonus_claimed: bool = False
