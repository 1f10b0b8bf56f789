from __future__ import annotations

from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from .models import Task


class SchedulingError(Exception):
    """Base class for everything build_schedule can raise."""


class ValidationError(SchedulingError, ValueError):
    pass


class ConfigurationError(SchedulingError, ValueError):
    pass


class UnschedulableTaskError(SchedulingError):
    def __init__(self, task: Task, slots_needed: int, max_days: int) -> None:
        self.task = task
        self.slots_needed = slots_needed
        self.max_days = max_days
        super().__init__(
            f"task {task.id} ({task.title!r}) needs {slots_needed} consecutive slots "
            f"and could not be placed within {max_days} days"
        )
