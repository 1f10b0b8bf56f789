from __future__ import annotations

import logging
from datetime import date, datetime
from typing import Optional, Sequence

from .errors import SchedulingError
from .models import Importance, Priority, Schedule, Task
from .planner import DEFAULT_MAX_DAYS, build_schedule, validate_task
from .slots import SlotGrid
from .storage import Storage

log = logging.getLogger("slot_planner")


class TaskManager:
    """
    Keeps one user's stored schedule in step with their stored tasks: every
    change to the task set rebuilds the whole schedule and replaces the
    stored one. Other users' tasks never take part in the rebuild.
    """

    def __init__(
        self,
        storage: Storage,
        telegram_user_id: int,
        grid: SlotGrid = SlotGrid(),
        max_days: int = DEFAULT_MAX_DAYS,
    ) -> None:
        self.storage = storage
        self.telegram_user_id = telegram_user_id
        self.grid = grid
        self.max_days = max_days

    def add_task(
        self,
        *,
        title: str,
        duration: int,
        importance: Importance,
        priority: Priority,
        deadline: date,
        today: date,
        created_at: Optional[datetime] = None,
    ) -> Task:
        # reject bad input before it reaches the store
        validate_task(
            Task(
                id=0,
                title=title,
                duration=duration,
                importance=importance,
                priority=priority,
                deadline=deadline,
            )
        )
        task_id = self.storage.add_task(
            telegram_user_id=self.telegram_user_id,
            title=title,
            created_at=created_at or datetime.now(),
            duration=duration,
            importance=importance,
            priority=priority,
            deadline=deadline,
        )
        log.info("user %s added task %s (%r, %sm)", self.telegram_user_id, task_id, title, duration)
        try:
            self.refresh(today)
        except SchedulingError:
            # keep the store consistent with the last good schedule
            self.storage.delete_task(self.telegram_user_id, task_id)
            raise
        task = self.storage.get_task(self.telegram_user_id, task_id)
        assert task is not None
        return task

    def delete_task(self, task_id: int, *, today: date) -> bool:
        """
        Nothing is written unless the schedule without the task can be built,
        so a failure leaves both the task and the stored schedule untouched.
        """
        tasks = self.storage.list_tasks(self.telegram_user_id)
        remaining = [t for t in tasks if t.id != task_id]
        if len(remaining) == len(tasks):
            return False
        schedule = self._build(remaining, today)
        self.storage.delete_task(self.telegram_user_id, task_id)
        self.storage.replace_schedule(self.telegram_user_id, schedule)
        log.info("user %s deleted task %s", self.telegram_user_id, task_id)
        return True

    def tasks(self) -> list[Task]:
        return self.storage.list_tasks(self.telegram_user_id)

    def schedule(self) -> Schedule:
        return self.storage.load_schedule(self.telegram_user_id)

    def refresh(self, today: date) -> Schedule:
        """Recompute from scratch; on failure the stored schedule is left as it was."""
        schedule = self._build(self.storage.list_tasks(self.telegram_user_id), today)
        self.storage.replace_schedule(self.telegram_user_id, schedule)
        return schedule

    def _build(self, tasks: Sequence[Task], today: date) -> Schedule:
        try:
            schedule = build_schedule(
                tasks, reference_date=today, grid=self.grid, max_days=self.max_days
            )
        except SchedulingError:
            log.warning(
                "could not rebuild schedule for user %s (%d tasks)",
                self.telegram_user_id,
                len(tasks),
                exc_info=True,
            )
            raise
        log.info(
            "schedule rebuilt for user %s: %d tasks over %d days",
            self.telegram_user_id,
            len(tasks),
            len(schedule),
        )
        return schedule
