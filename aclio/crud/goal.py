# aclio/crud/goal.py
from typing import List, Optional

from aclio.crud.local_storage import LocalStorage
from aclio.schemas.goal import Goal, Step


class GoalNotFoundError(LookupError):
    pass


class GoalRepository:
    """CRUD over the stored goal list. Newest goals are kept first."""

    def __init__(self, storage: LocalStorage):
        self.storage = storage

    async def list_goals(self) -> List[Goal]:
        return await self.storage.load_goals()

    async def get_goal(self, goal_id: int) -> Optional[Goal]:
        goals = await self.storage.load_goals()
        return next((g for g in goals if g.id == goal_id), None)

    async def count(self) -> int:
        return len(await self.storage.load_goals())

    async def create_goal(self, goal: Goal) -> Goal:
        goals = await self.storage.load_goals()
        goals.insert(0, goal)
        await self.storage.save_goals(goals)
        return goal

    async def save_goal(self, goal: Goal) -> Goal:
        """Replace the stored goal with the same id, or insert it first if new."""
        goals = await self.storage.load_goals()
        for index, existing in enumerate(goals):
            if existing.id == goal.id:
                goals[index] = goal
                break
        else:
            goals.insert(0, goal)
        await self.storage.save_goals(goals)
        return goal

    async def update_goal(self, goal: Goal) -> Goal:
        goals = await self.storage.load_goals()
        for index, existing in enumerate(goals):
            if existing.id == goal.id:
                goals[index] = goal
                await self.storage.save_goals(goals)
                return goal
        raise GoalNotFoundError(f"Goal {goal.id} not found")

    async def delete_goal(self, goal_id: int) -> bool:
        goals = await self.storage.load_goals()
        remaining = [g for g in goals if g.id != goal_id]
        if len(remaining) == len(goals):
            return False
        await self.storage.save_goals(remaining)
        return True

    async def toggle_step(self, goal_id: int, step_id: int) -> Goal:
        goal = await self.get_goal(goal_id)
        if goal is None:
            raise GoalNotFoundError(f"Goal {goal_id} not found")
        goal.toggle_step(step_id)
        return await self.update_goal(goal)

    async def extend_goal(self, goal_id: int, new_steps: List[Step]) -> Goal:
        """Append steps to a goal, renumbering them after the current highest step id."""
        goal = await self.get_goal(goal_id)
        if goal is None:
            raise GoalNotFoundError(f"Goal {goal_id} not found")
        next_id = max((s.id for s in goal.steps), default=0) + 1
        for offset, step in enumerate(new_steps):
            goal.steps.append(step.model_copy(update={"id": next_id + offset}))
        return await self.update_goal(goal)
