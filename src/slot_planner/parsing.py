from __future__ import annotations

import re
from dataclasses import dataclass
from datetime import date
from typing import Optional

from .models import Importance, Priority


@dataclass(frozen=True)
class ParsedTaskInput:
    title: str
    duration: int
    importance: Importance
    priority: Priority
    deadline: date


_RE_MINUTES = re.compile(r"(?i)\b(\d+)\s*(m|min)\b")
_RE_HOURS = re.compile(r"(?i)\b(\d+)\s*(h|hr)\b")
_RE_PRIORITY = re.compile(r"(?i)(?:^|\s)!(asap|hard|soft|none)\b")
_RE_IMPORTANCE = re.compile(r"(?i)(?:^|\s)#(asap|high|average|low)\b")
_RE_DEADLINE = re.compile(r"(?:^|\s)@(\d{4}-\d{2}-\d{2})\b")

_PRIORITIES = {
    "asap": Priority.ASAP,
    "hard": Priority.HARD_DEADLINE,
    "soft": Priority.SOFT_DEADLINE,
    "none": Priority.NO_DEADLINE,
}
_IMPORTANCES = {
    "asap": Importance.ASAP,
    "high": Importance.HIGH,
    "average": Importance.AVERAGE,
    "low": Importance.LOW,
}

DEFAULT_DURATION = 30
DEFAULT_IMPORTANCE = Importance.AVERAGE
DEFAULT_PRIORITY = Priority.SOFT_DEADLINE


def parse_task_line(line: str, today: date) -> Optional[ParsedTaskInput]:
    """
    Accepts lines like:
    - "Write report 2h !hard #high @2026-10-20"
    - "Call the bank 15m !asap"
    - "Tidy inbox"
    Missing parts default to 30 minutes, Average importance,
    Soft deadline and a deadline of `today`.
    """
    raw = line.strip()
    if not raw:
        return None

    deadline = today
    # first token that is a real date wins; impossible ones stay in the title
    for due_match in _RE_DEADLINE.finditer(raw):
        try:
            deadline = date.fromisoformat(due_match.group(1))
        except ValueError:
            continue
        raw = raw[: due_match.start()] + " " + raw[due_match.end() :]
        break

    priority = DEFAULT_PRIORITY
    prio_match = _RE_PRIORITY.search(raw)
    if prio_match:
        priority = _PRIORITIES[prio_match.group(1).lower()]
        raw = _RE_PRIORITY.sub(" ", raw)

    importance = DEFAULT_IMPORTANCE
    imp_match = _RE_IMPORTANCE.search(raw)
    if imp_match:
        importance = _IMPORTANCES[imp_match.group(1).lower()]
        raw = _RE_IMPORTANCE.sub(" ", raw)

    minutes = 0
    for m in _RE_MINUTES.finditer(raw):
        minutes += int(m.group(1))
    for h in _RE_HOURS.finditer(raw):
        minutes += int(h.group(1)) * 60

    title = _RE_MINUTES.sub(" ", raw)
    title = _RE_HOURS.sub(" ", title)
    title = re.sub(r"\s+", " ", title).strip(" -\t")

    if not title:
        return None
    if minutes <= 0:
        minutes = DEFAULT_DURATION

    return ParsedTaskInput(
        title=title,
        duration=minutes,
        importance=importance,
        priority=priority,
        deadline=deadline,
    )
