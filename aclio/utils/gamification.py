# aclio/utils/gamification.py
"""
Points, levels, streaks and achievements.

The level table, achievement catalog and predicates are pure functions so any
UI layer can share them. ``GamificationEngine`` adds the persisted counters on
top, reading and writing through ``LocalStorage``.
"""
import logging
from datetime import date
from typing import Callable, Dict, Iterable, List, Optional

from aclio.crud.local_storage import LocalStorage
from aclio.schemas.gamification import (
    DAILY_BONUS_POINTS,
    FIRST_GOAL_POINTS,
    GOAL_COMPLETE_POINTS,
    STEP_COMPLETE_POINTS,
    Achievement,
    GamificationSnapshot,
    Level,
    LevelUpData,
    PointsPopup,
    StreakData,
)
from aclio.schemas.goal import Goal

logger = logging.getLogger(__name__)


# ────────────────────────────────────────────────────────────────────────────────
# LEVELS
# ────────────────────────────────────────────────────────────────────────────────
LEVELS: List[Level] = [
    Level(level=1, name="Beginner", min_points=0, icon="star"),
    Level(level=2, name="Explorer", min_points=100, icon="bolt"),
    Level(level=3, name="Achiever", min_points=300, icon="flame"),
    Level(level=4, name="Champion", min_points=600, icon="trophy"),
    Level(level=5, name="Master", min_points=1000, icon="medal"),
    Level(level=6, name="Expert", min_points=1500, icon="crown"),
    Level(level=7, name="Legend", min_points=2500, icon="diamond"),
    Level(level=8, name="Elite", min_points=4000, icon="sparkles"),
    Level(level=9, name="Grandmaster", min_points=6000, icon="rocket"),
    Level(level=10, name="Ultimate", min_points=10000, icon="scope"),
]


def get_level(points: int) -> Level:
    for level in reversed(LEVELS):
        if points >= level.min_points:
            return level
    return LEVELS[0]


def get_next_level(points: int) -> Optional[Level]:
    current = get_level(points)
    index = current.level  # levels are numbered from 1, so this is the next index
    if index < len(LEVELS):
        return LEVELS[index]
    return None


def get_level_progress(points: int) -> float:
    current = get_level(points)
    nxt = get_next_level(points)
    if nxt is None:
        return 1.0
    return (points - current.min_points) / (nxt.min_points - current.min_points)


# ────────────────────────────────────────────────────────────────────────────────
# ACHIEVEMENTS
# ────────────────────────────────────────────────────────────────────────────────
ACHIEVEMENTS: List[Achievement] = [
    Achievement(id="first_goal", name="Goal Setter", description="Created your first goal", icon="star", gradient="purple"),
    Achievement(id="first_step", name="First Step", description="Completed your first step", icon="rocket", gradient="green"),
    Achievement(id="first_complete", name="Achiever", description="Completed your first goal", icon="trophy", gradient="gold"),
    Achievement(id="streak_3", name="On Fire", description="3 day streak", icon="flame", gradient="red"),
    Achievement(id="streak_7", name="Unstoppable", description="7 day streak", icon="bolt", gradient="blue"),
    Achievement(id="five_goals", name="Ambitious", description="Created 5 goals", icon="target", gradient="pink"),
    Achievement(id="three_complete", name="Hat Trick", description="Completed 3 goals", icon="medal", gradient="teal"),
    Achievement(id="ten_steps", name="Step Master", description="Completed 10 steps", icon="activity", gradient="indigo"),
    Achievement(id="fifty_steps", name="Dedicated", description="Completed 50 steps", icon="diamond", gradient="cyan"),
    Achievement(id="hundred_points", name="Century", description="Earned 100 points", icon="coins", gradient="violet"),
    Achievement(id="five_hundred_points", name="Elite", description="Earned 500 points", icon="crown", gradient="yellow"),
    Achievement(id="level_5", name="Master", description="Reached Level 5", icon="sparkles", gradient="orange"),
]


def _total_completed_steps(goals: List[Goal]) -> int:
    return sum(len(g.completed_steps) for g in goals)


def _completed_goals(goals: List[Goal]) -> int:
    return sum(1 for g in goals if g.is_completed)


AchievementPredicate = Callable[[List[Goal], int, int], bool]

# Every predicate takes (goals, streak_current, points)
ACHIEVEMENT_PREDICATES: Dict[str, AchievementPredicate] = {
    "first_goal": lambda goals, streak, points: len(goals) >= 1,
    "first_step": lambda goals, streak, points: any(g.completed_steps for g in goals),
    "first_complete": lambda goals, streak, points: _completed_goals(goals) >= 1,
    "streak_3": lambda goals, streak, points: streak >= 3,
    "streak_7": lambda goals, streak, points: streak >= 7,
    "five_goals": lambda goals, streak, points: len(goals) >= 5,
    "three_complete": lambda goals, streak, points: _completed_goals(goals) >= 3,
    "ten_steps": lambda goals, streak, points: _total_completed_steps(goals) >= 10,
    "fifty_steps": lambda goals, streak, points: _total_completed_steps(goals) >= 50,
    "hundred_points": lambda goals, streak, points: points >= 100,
    "five_hundred_points": lambda goals, streak, points: points >= 500,
    "level_5": lambda goals, streak, points: get_level(points).level >= 5,
}


def check_achievement(achievement_id: str, goals: List[Goal], streak: int, points: int) -> bool:
    predicate = ACHIEVEMENT_PREDICATES.get(achievement_id)
    if predicate is None:
        return False
    return predicate(goals, streak, points)


def find_new_achievements(
    unlocked_ids: Iterable[str],
    goals: List[Goal],
    streak: int,
    points: int,
) -> List[Achievement]:
    """Achievements whose predicate now holds and that are not unlocked yet, in catalog order."""
    unlocked = set(unlocked_ids)
    return [
        a for a in ACHIEVEMENTS
        if a.id not in unlocked and check_achievement(a.id, goals, streak, points)
    ]


# ────────────────────────────────────────────────────────────────────────────────
# ENGINE
# ────────────────────────────────────────────────────────────────────────────────
class GamificationEngine:
    """
    Stateful points/streak/achievement bookkeeping over ``LocalStorage``.

    Call ``load()`` once before use. Transient UI signals (``points_popup``,
    ``level_up``, ``new_achievement``) are set by mutations and cleared by the
    matching ``dismiss_*`` method.
    """

    def __init__(self, storage: LocalStorage, today: Callable[[], date] = date.today):
        self.storage = storage
        self.today = today

        self.points: int = 0
        self.streak: StreakData = StreakData()
        self.unlocked_achievements: List[str] = []
        self.daily_bonus_claimed: bool = False

        self.points_popup: Optional[PointsPopup] = None
        self.level_up: Optional[LevelUpData] = None
        self.new_achievement: Optional[Achievement] = None

    async def load(self) -> "GamificationEngine":
        self.points = await self.storage.load_points()
        self.streak = await self.storage.load_streak()
        self.unlocked_achievements = await self.storage.load_achievements()
        self.daily_bonus_claimed = await self.storage.is_daily_bonus_claimed(self.today())
        return self

    # Derived state
    @property
    def current_level(self) -> Level:
        return get_level(self.points)

    @property
    def next_level(self) -> Optional[Level]:
        return get_next_level(self.points)

    @property
    def level_progress(self) -> float:
        return get_level_progress(self.points)

    def snapshot(self) -> GamificationSnapshot:
        return GamificationSnapshot(
            points=self.points,
            level=self.current_level,
            next_level=self.next_level,
            level_progress=self.level_progress,
            streak=self.streak.model_copy(),
            unlocked_achievements=list(self.unlocked_achievements),
            daily_bonus_claimed=self.daily_bonus_claimed,
        )

    # Mutations
    async def add_points(self, amount: int, reason: str) -> int:
        previous_level = self.current_level
        self.points += amount
        await self.storage.save_points(self.points)

        self.points_popup = PointsPopup(amount=amount, reason=reason)

        new_level = self.current_level
        if new_level.level > previous_level.level:
            logger.info(f"Level up: {previous_level.name} -> {new_level.name}")
            self.level_up = LevelUpData(level=new_level)

        return self.points

    async def update_streak(self) -> None:
        bonus = self.streak.update(self.today())
        await self.storage.save_streak(self.streak)
        if bonus > 0:
            await self.add_points(bonus, f"{self.streak.current}-day streak!")

    async def claim_daily_bonus(self) -> bool:
        today = self.today()
        if await self.storage.is_daily_bonus_claimed(today):
            self.daily_bonus_claimed = True
            return False

        await self.storage.claim_daily_bonus(today)
        self.daily_bonus_claimed = True
        await self.add_points(DAILY_BONUS_POINTS, "Daily login bonus!")
        await self.update_streak()
        return True

    async def award_step_points(self) -> None:
        await self.add_points(STEP_COMPLETE_POINTS, "Step completed!")
        await self.update_streak()

    async def award_goal_points(self, is_first_goal: bool = False) -> None:
        await self.add_points(GOAL_COMPLETE_POINTS, "Goal achieved!")
        if is_first_goal:
            await self.add_points(FIRST_GOAL_POINTS, "First goal bonus!")

    async def check_achievements(self, goals: List[Goal]) -> List[Achievement]:
        newly_unlocked = find_new_achievements(
            self.unlocked_achievements, goals, self.streak.current, self.points
        )
        if not newly_unlocked:
            return []

        for achievement in newly_unlocked:
            self.unlocked_achievements.append(achievement.id)
            self.new_achievement = achievement
            logger.info(f"Achievement unlocked: {achievement.id}")

        await self.storage.save_achievements(self.unlocked_achievements)
        return newly_unlocked

    def dismiss_points_popup(self) -> None:
        self.points_popup = None

    def dismiss_level_up(self) -> None:
        self.level_up = None

    def dismiss_achievement(self) -> None:
        self.new_achievement = None

    async def reset_all_progress(self) -> None:
        self.points = 0
        self.streak = StreakData()
        self.unlocked_achievements = []
        self.daily_bonus_claimed = False

        await self.storage.save_points(0)
        await self.storage.save_streak(StreakData())
        await self.storage.save_achievements([])
        await self.storage.clear_daily_bonus()
