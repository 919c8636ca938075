# aclio/schemas/usage.py
import sys
from enum import Enum

from pydantic import BaseModel

FREE_GOAL_LIMIT = 3
FREE_DO_IT_FOR_ME_DAILY = 2
FREE_EXPAND_DAILY = 3

UNLIMITED = sys.maxsize


class FeatureType(str, Enum):
    CREATE_GOAL = "createGoal"
    DO_IT_FOR_ME = "doItForMe"
    EXPAND_STEP = "expandStep"
    CHAT = "chat"

    @property
    def daily_limit(self) -> int:
        return {
            FeatureType.CREATE_GOAL: FREE_GOAL_LIMIT,
            FeatureType.DO_IT_FOR_ME: FREE_DO_IT_FOR_ME_DAILY,
            FeatureType.EXPAND_STEP: FREE_EXPAND_DAILY,
            FeatureType.CHAT: UNLIMITED,
        }[self]

    @property
    def storage_key(self) -> str:
        return {
            FeatureType.CREATE_GOAL: "goals_created",
            FeatureType.DO_IT_FOR_ME: "doitforme_uses",
            FeatureType.EXPAND_STEP: "expand_uses",
            FeatureType.CHAT: "chat_messages",
        }[self]


class DailyUsage(BaseModel):
    date: str = ""
    count: int = 0
