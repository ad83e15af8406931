"""Task repository interface."""

from typing import Protocol

from timeblock.core.outcome import ScheduleUpdate


class TaskRepository(Protocol):
    """Interface for writing scheduling results back to a task store."""

    def apply_schedule_update(self, task_id: str, update: ScheduleUpdate) -> bool:
        """Apply an update to a task. Returns False if the store rejected it."""
        ...

    def fetch_task(self, task_id: str) -> dict:
        """Fetch the store's raw representation of a task."""
        ...
