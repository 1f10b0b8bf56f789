from __future__ import annotations

from typing import Sequence

from .models import Schedule, Task


def format_task(t: Task) -> str:
    return (
        f"{t.id}. {t.title} ~{t.duration}m | {t.importance} | {t.priority} "
        f"| due {t.deadline.isoformat()}"
    )


def format_task_list(tasks: Sequence[Task]) -> str:
    if not tasks:
        return "No tasks yet."
    return "\n".join(format_task(t) for t in tasks)


def format_schedule(schedule: Schedule) -> str:
    """One block per day, one line per occupied slot, e.g. "  9:30: Report"."""
    if not schedule:
        return "Nothing scheduled."
    lines: list[str] = []
    for day in sorted(schedule):
        slots = schedule[day]
        if not slots:
            continue
        lines.append(day)
        for slot, task in slots.items():
            lines.append(f"  {slot}: {task.title}")
    return "\n".join(lines) if lines else "Nothing scheduled."
