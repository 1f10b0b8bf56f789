from __future__ import annotations

from dataclasses import dataclass
from datetime import date
from enum import StrEnum


class Importance(StrEnum):
    ASAP = "ASAP"
    HIGH = "High"
    AVERAGE = "Average"
    LOW = "Low"

    @property
    def rank(self) -> int:
        return list(Importance).index(self)


class Priority(StrEnum):
    ASAP = "ASAP"
    HARD_DEADLINE = "Hard deadline"
    SOFT_DEADLINE = "Soft deadline"
    NO_DEADLINE = "No deadline"

    @property
    def rank(self) -> int:
        return list(Priority).index(self)


@dataclass(frozen=True)
class Task:
    id: int
    title: str
    duration: int  # minutes
    importance: Importance
    priority: Priority
    deadline: date


# ISO date -> slot label -> task occupying it
Schedule = dict[str, dict[str, Task]]
