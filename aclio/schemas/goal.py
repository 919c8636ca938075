# aclio/schemas/goal.py
import time
from dataclasses import dataclass
from datetime import date, datetime
from enum import Enum
from typing import List, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator
from pydantic.alias_generators import to_camel


GOAL_CATEGORIES: List[str] = [
    "Health & Fitness",
    "Career",
    "Education",
    "Finance",
    "Creative",
    "Personal Growth",
    "Relationships",
    "Travel",
    "Home & Living",
    "Technology",
]

GOAL_ICON_KEYS: List[str] = [
    "target", "fitness", "book", "dollar", "palette", "rocket",
    "run", "music", "code", "plane", "home", "heart", "brain", "pencil",
]


class CamelModel(BaseModel):
    """Base for records stored and sent with camelCase keys."""
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class IconColor(CamelModel):
    id: int
    background: str
    foreground: str


ICON_COLORS: List[IconColor] = [
    IconColor(id=0, background="FFF3E6", foreground="FF9F3A"),  # Orange
    IconColor(id=1, background="EDE9F8", foreground="8B7ED8"),  # Purple
    IconColor(id=2, background="FFF4E6", foreground="F27C1F"),  # Deep Orange
    IconColor(id=3, background="E6F7F3", foreground="22C55E"),  # Green
]


class Step(CamelModel):
    id: int
    title: str
    description: str = ""
    duration: Optional[str] = None


@dataclass(frozen=True)
class DueDateStatus:
    kind: str  # overdue / today / soon / normal
    days: int = 0

    @property
    def text(self) -> str:
        if self.kind == "overdue":
            return "Overdue"
        if self.kind == "today":
            return "Due today"
        return f"{self.days}d left"

    @property
    def is_urgent(self) -> bool:
        return self.kind != "normal"


def _now_millis() -> int:
    return int(time.time() * 1000)


class Goal(CamelModel):
    id: int = Field(default_factory=_now_millis)
    name: str
    category: Optional[str] = None
    icon_key: str = "target"
    icon_color: IconColor = Field(default_factory=lambda: ICON_COLORS[0].model_copy())
    due_date: Optional[date] = None
    steps: List[Step] = Field(default_factory=list)
    completed_steps: List[int] = Field(default_factory=list)
    created_at: datetime = Field(default_factory=datetime.now)

    @field_validator("icon_key")
    @classmethod
    def known_icon_key(cls, value: str) -> str:
        return value if value in GOAL_ICON_KEYS else "target"

    @field_validator("completed_steps")
    @classmethod
    def unique_completed_steps(cls, value: List[int]) -> List[int]:
        # set semantics, first occurrence wins
        return list(dict.fromkeys(value))

    @model_validator(mode="after")
    def completed_steps_belong_to_goal(self) -> "Goal":
        step_ids = {step.id for step in self.steps}
        unknown = [sid for sid in self.completed_steps if sid not in step_ids]
        if unknown:
            raise ValueError(f"completedSteps references unknown step ids: {unknown}")
        return self

    @property
    def progress(self) -> int:
        """Completion percentage, truncated to an int."""
        if not self.steps:
            return 0
        return int(len(self.completed_steps) / len(self.steps) * 100)

    @property
    def is_completed(self) -> bool:
        return self.progress == 100

    @property
    def next_step(self) -> Optional[Step]:
        return next((s for s in self.steps if s.id not in self.completed_steps), None)

    @property
    def completed_steps_count(self) -> int:
        return len(self.completed_steps)

    @property
    def total_steps_count(self) -> int:
        return len(self.steps)

    def is_step_completed(self, step_id: int) -> bool:
        return step_id in self.completed_steps

    def toggle_step(self, step_id: int) -> bool:
        """Flip completion of a step. Returns True if the step is now completed."""
        if not any(s.id == step_id for s in self.steps):
            raise ValueError(f"Goal {self.id} has no step {step_id}")
        if step_id in self.completed_steps:
            self.completed_steps = [sid for sid in self.completed_steps if sid != step_id]
            return False
        self.completed_steps = self.completed_steps + [step_id]
        return True

    def due_date_status(self, today: Optional[date] = None) -> Optional[DueDateStatus]:
        if self.due_date is None:
            return None
        days = (self.due_date - (today or date.today())).days
        if days < 0:
            return DueDateStatus("overdue")
        if days == 0:
            return DueDateStatus("today")
        if days <= 3:
            return DueDateStatus("soon", days)
        return DueDateStatus("normal", days)


class Gender(str, Enum):
    MALE = "Male"
    FEMALE = "Female"
    OTHER = "Other"


class UserProfile(CamelModel):
    name: str = ""
    age: str = ""
    gender: Optional[Gender] = None

    @property
    def is_empty(self) -> bool:
        return not self.name.strip()

    @property
    def display_name(self) -> str:
        return "Achiever" if self.is_empty else self.name

    @property
    def age_int(self) -> Optional[int]:
        try:
            return int(self.age)
        except ValueError:
            return None


class LocationData(CamelModel):
    latitude: float
    longitude: float
    city: Optional[str] = None
    country: Optional[str] = None
    display_name: Optional[str] = None

    @property
    def short_display(self) -> str:
        return self.city or "Location enabled"
