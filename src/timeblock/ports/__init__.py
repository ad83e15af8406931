"""Ports - interfaces/protocols for external dependencies."""

from .task_repo import TaskRepository
from .calendar_repo import CalendarRepository

__all__ = [
    "TaskRepository",
    "CalendarRepository",
]
