from __future__ import annotations

import math
from dataclasses import dataclass

from .errors import ConfigurationError

SLOT_MINUTES = 30


def generate_time_slots(start_hour: int = 9, end_hour: int = 17) -> list[str]:
    """
    Half-hour labels for one working day, e.g. 9..17 gives
    ["9:00", "9:30", ..., "16:30"]. Hours are not zero-padded.
    """
    if not (0 <= start_hour < end_hour <= 24):
        raise ConfigurationError(
            f"invalid slot grid bounds: start_hour={start_hour}, end_hour={end_hour}"
        )
    slots: list[str] = []
    for hour in range(start_hour, end_hour):
        slots.append(f"{hour}:00")
        slots.append(f"{hour}:30")
    return slots


@dataclass(frozen=True)
class SlotGrid:
    start_hour: int = 9
    end_hour: int = 17

    def __post_init__(self) -> None:
        # fail on construction rather than on first use
        generate_time_slots(self.start_hour, self.end_hour)

    @property
    def slot_minutes(self) -> int:
        return SLOT_MINUTES

    @property
    def labels(self) -> list[str]:
        return generate_time_slots(self.start_hour, self.end_hour)

    @property
    def slots_per_day(self) -> int:
        return (self.end_hour - self.start_hour) * 60 // SLOT_MINUTES

    def slots_needed(self, duration_minutes: int) -> int:
        """Rounded up to whole slots: 31 minutes takes two slots."""
        return math.ceil(duration_minutes / SLOT_MINUTES)
