from __future__ import annotations

from dataclasses import dataclass
from datetime import date, datetime, timedelta
from functools import partial, reduce
from typing import Iterable, Optional, Sequence

from .errors import ConfigurationError, UnschedulableTaskError, ValidationError
from .models import Importance, Priority, Schedule, Task
from .slots import SlotGrid

DEFAULT_MAX_DAYS = 365


@dataclass(frozen=True)
class _Cursor:
    """Running state of the placement fold."""

    day: date
    slot_index: int
    schedule: Schedule


def validate_task(task: Task) -> None:
    if not isinstance(task.title, str) or not task.title.strip():
        raise ValidationError(f"task {task.id}: title must be a non-empty string")
    if isinstance(task.duration, bool) or not isinstance(task.duration, int) or task.duration < 1:
        raise ValidationError(f"task {task.id}: duration must be a positive number of minutes")
    if not isinstance(task.importance, Importance):
        raise ValidationError(f"task {task.id}: unknown importance {task.importance!r}")
    if not isinstance(task.priority, Priority):
        raise ValidationError(f"task {task.id}: unknown priority {task.priority!r}")
    if isinstance(task.deadline, datetime) or not isinstance(task.deadline, date):
        raise ValidationError(f"task {task.id}: deadline must be a calendar date")


def rank_key(task: Task) -> tuple[int, int, date]:
    return (task.priority.rank, task.importance.rank, task.deadline)


def rank_tasks(tasks: Iterable[Task]) -> list[Task]:
    """
    Priority class first, then importance, then earliest deadline.
    sorted() is stable, so full ties keep their input order.
    """
    return sorted(tasks, key=rank_key)


def _find_free_run(
    labels: Sequence[str], occupied: dict[str, Task], start: int, needed: int
) -> Optional[int]:
    """Index of the last slot of the first run of `needed` free slots at or after `start`."""
    free = 0
    for i in range(start, len(labels)):
        if labels[i] in occupied:
            free = 0
            continue
        free += 1
        if free == needed:
            return i
    return None


def _place(
    cursor: _Cursor,
    task: Task,
    *,
    grid: SlotGrid,
    labels: Sequence[str],
    last_day: date,
    max_days: int,
) -> _Cursor:
    needed = grid.slots_needed(task.duration)
    day, start = cursor.day, cursor.slot_index
    while day <= last_day:
        key = day.isoformat()
        occupied = cursor.schedule.get(key, {})
        end = _find_free_run(labels, occupied, start, needed)
        if end is not None:
            placed = {labels[j]: task for j in range(end - needed + 1, end + 1)}
            return _Cursor(
                day=day,
                slot_index=end + 1,
                schedule={**cursor.schedule, key: {**occupied, **placed}},
            )
        day += timedelta(days=1)
        start = 0
    raise UnschedulableTaskError(task, needed, max_days)


def build_schedule(
    tasks: Iterable[Task],
    *,
    reference_date: date,
    grid: SlotGrid = SlotGrid(),
    max_days: int = DEFAULT_MAX_DAYS,
) -> Schedule:
    """
    First-fit greedy allocator:
    - Rank tasks (see rank_tasks)
    - Walk the ranked list once, packing each task into the first run of
      free consecutive slots at or after the cursor
    - When the rest of the day can't hold the task, move to the next day
      and start from its first slot
    The cursor never moves back, so a later task is never put before an
    earlier one even if a gap is left behind.

    Only days in [reference_date, reference_date + max_days) are used;
    a task that can't be placed in that window raises UnschedulableTaskError.
    """
    if isinstance(max_days, bool) or not isinstance(max_days, int) or max_days < 1:
        raise ConfigurationError(f"max_days must be a positive integer, got {max_days!r}")

    snapshot = list(tasks)
    for t in snapshot:
        validate_task(t)

    step = partial(
        _place,
        grid=grid,
        labels=grid.labels,
        last_day=reference_date + timedelta(days=max_days - 1),
        max_days=max_days,
    )
    start = _Cursor(day=reference_date, slot_index=0, schedule={})
    return reduce(step, rank_tasks(snapshot), start).schedule
