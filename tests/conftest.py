from __future__ import annotations

from datetime import date, timedelta
from typing import List, Optional

import pytest

from aclio.core.config import settings
from aclio.crud.kv_store import MemoryKeyValueStore
from aclio.crud.local_storage import LocalStorage
from aclio.schemas.goal import Goal, Step


class FakeClock:
    def __init__(self, day: date):
        self.day = day

    def __call__(self) -> date:
        return self.day

    def advance(self, days: int = 1) -> None:
        self.day = self.day + timedelta(days=days)


@pytest.fixture
def store() -> MemoryKeyValueStore:
    return MemoryKeyValueStore()


@pytest.fixture
def storage(store: MemoryKeyValueStore) -> LocalStorage:
    return LocalStorage(store)


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock(date(2024, 1, 1))


@pytest.fixture
def api_key(monkeypatch: pytest.MonkeyPatch) -> str:
    monkeypatch.setattr(settings, "GROQ_API_KEY", "test-key")
    return "test-key"


@pytest.fixture
def no_api_key(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setattr(settings, "GROQ_API_KEY", None)


def build_goal(
    goal_id: int = 1,
    step_count: int = 2,
    completed: Optional[List[int]] = None,
    name: str = "Learn guitar",
) -> Goal:
    steps = [Step(id=i, title=f"Step {i}") for i in range(1, step_count + 1)]
    return Goal(id=goal_id, name=name, steps=steps, completed_steps=completed or [])


@pytest.fixture
def make_goal():
    return build_goal
