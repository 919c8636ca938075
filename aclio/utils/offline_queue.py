# aclio/utils/offline_queue.py
"""
Offline operation queue.

Mutations are applied to local storage right away; the queue only records
them so a future sync endpoint can replay them. Until such an endpoint exists
every executor is a no-op, so the queue is bookkeeping plus a pending count.
"""
import logging
from typing import Awaitable, Callable, Dict, List, Optional

from aclio.core.config import settings
from aclio.crud.goal import GoalRepository
from aclio.crud.local_storage import LocalStorage
from aclio.schemas.goal import Goal
from aclio.schemas.offline import OfflineOperation, OfflineOperationType

logger = logging.getLogger(__name__)

ConnectivityListener = Callable[[bool, bool], Awaitable[None]]
OperationExecutor = Callable[[OfflineOperation], Awaitable[None]]


class NetworkMonitor:
    """Holds the current connectivity flag and notifies listeners on change."""

    def __init__(self, is_connected: bool = True):
        self.is_connected = is_connected
        self._listeners: List[ConnectivityListener] = []

    def subscribe(self, listener: ConnectivityListener) -> None:
        self._listeners.append(listener)

    async def set_connected(self, value: bool) -> None:
        previous = self.is_connected
        if previous == value:
            return
        self.is_connected = value
        logger.info(f"Connectivity changed: {'online' if value else 'offline'}")
        for listener in list(self._listeners):
            await listener(previous, value)


async def _sync_placeholder(operation: OfflineOperation) -> None:
    # Local mutation already happened; there is no server endpoint to sync to yet
    logger.debug(f"OfflineQueue: nothing to sync for {operation.type.value} {operation.id}")


DEFAULT_EXECUTORS: Dict[OfflineOperationType, OperationExecutor] = {
    op_type: _sync_placeholder for op_type in OfflineOperationType
}


async def execute_operation(operation: OfflineOperation) -> None:
    await DEFAULT_EXECUTORS[operation.type](operation)


class OfflineQueue:
    def __init__(
        self,
        storage: LocalStorage,
        monitor: NetworkMonitor,
        executor: OperationExecutor = execute_operation,
        max_retries: Optional[int] = None,
    ):
        self.storage = storage
        self.monitor = monitor
        self.executor = executor
        self.max_retries = max_retries if max_retries is not None else settings.OFFLINE_MAX_RETRIES

        self.pending_operations: List[OfflineOperation] = []
        self.is_processing = False

        monitor.subscribe(self._on_connectivity_change)

    async def load(self) -> "OfflineQueue":
        self.pending_operations = await self.storage.load_offline_queue()
        return self

    async def _on_connectivity_change(self, was_connected: bool, is_connected: bool) -> None:
        if not was_connected and is_connected:
            await self.process_queue()

    # Queue management
    async def enqueue(self, operation: OfflineOperation) -> None:
        self.pending_operations.append(operation)
        await self._save()

        if self.monitor.is_connected:
            await self.process_queue()

    async def enqueue_toggle_step(self, goal_id: int, step_id: int) -> None:
        await self.enqueue(OfflineOperation.with_json_payload(
            OfflineOperationType.TOGGLE_STEP, {"goalId": goal_id, "stepId": step_id}
        ))

    async def enqueue_goal_create(self, goal: Goal) -> None:
        await self.enqueue(OfflineOperation.with_json_payload(
            OfflineOperationType.CREATE_GOAL, goal.model_dump(mode="json", by_alias=True)
        ))

    async def enqueue_goal_update(self, goal: Goal) -> None:
        await self.enqueue(OfflineOperation.with_json_payload(
            OfflineOperationType.UPDATE_GOAL, goal.model_dump(mode="json", by_alias=True)
        ))

    async def enqueue_goal_delete(self, goal_id: int) -> None:
        await self.enqueue(OfflineOperation.with_json_payload(
            OfflineOperationType.DELETE_GOAL, {"goalId": goal_id}
        ))

    async def enqueue_goal_extend(self, goal: Goal) -> None:
        await self.enqueue(OfflineOperation.with_json_payload(
            OfflineOperationType.EXTEND_GOAL, goal.model_dump(mode="json", by_alias=True)
        ))

    # Queue processing
    async def process_queue(self) -> None:
        if self.is_processing:
            return
        if not self.monitor.is_connected:
            return
        if not self.pending_operations:
            return

        self.is_processing = True
        try:
            batch = list(self.pending_operations)
            survivors: List[OfflineOperation] = []

            for operation in batch:
                try:
                    await self.executor(operation)
                except Exception as e:
                    failed = operation.model_copy(update={"retry_count": operation.retry_count + 1})
                    if failed.retry_count < self.max_retries:
                        logger.info(
                            f"OfflineQueue: {operation.type.value} failed ({e}), "
                            f"attempt {failed.retry_count}/{self.max_retries}"
                        )
                        survivors.append(failed)
                    else:
                        logger.warning(
                            f"⚠️ OfflineQueue: Discarding operation after {self.max_retries} retries: "
                            f"{operation.type.value}"
                        )

            # Operations enqueued while this pass was running stay queued behind the survivors
            processed_ids = {op.id for op in batch}
            added_meanwhile = [op for op in self.pending_operations if op.id not in processed_ids]
            self.pending_operations = survivors + added_meanwhile
            await self._save()
        finally:
            self.is_processing = False

    async def clear(self) -> None:
        self.pending_operations = []
        await self.storage.clear_offline_queue()

    async def _save(self) -> None:
        await self.storage.save_offline_queue(self.pending_operations)

    # Status
    @property
    def has_pending_operations(self) -> bool:
        return bool(self.pending_operations)

    @property
    def pending_count(self) -> int:
        return len(self.pending_operations)


class OfflineAwareGoals:
    """Goal mutations that write locally first and record the intent while offline."""

    def __init__(self, repository: GoalRepository, queue: OfflineQueue):
        self.repository = repository
        self.queue = queue

    @property
    def is_offline(self) -> bool:
        return not self.queue.monitor.is_connected

    async def create_goal(self, goal: Goal) -> Goal:
        await self.repository.create_goal(goal)
        if self.is_offline:
            await self.queue.enqueue_goal_create(goal)
        return goal

    async def save_goal(self, goal: Goal) -> Goal:
        await self.repository.save_goal(goal)
        if self.is_offline:
            await self.queue.enqueue_goal_update(goal)
        return goal

    async def delete_goal(self, goal_id: int) -> bool:
        deleted = await self.repository.delete_goal(goal_id)
        if self.is_offline:
            await self.queue.enqueue_goal_delete(goal_id)
        return deleted

    async def toggle_step(self, goal_id: int, step_id: int) -> Goal:
        goal = await self.repository.toggle_step(goal_id, step_id)
        if self.is_offline:
            await self.queue.enqueue_toggle_step(goal_id, step_id)
        return goal

    async def extend_goal(self, goal_id: int, new_steps) -> Goal:
        goal = await self.repository.extend_goal(goal_id, new_steps)
        if self.is_offline:
            await self.queue.enqueue_goal_extend(goal)
        return goal
