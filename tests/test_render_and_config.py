from __future__ import annotations

from datetime import date

import pytest

from slot_planner.config import load_settings
from slot_planner.errors import ConfigurationError
from slot_planner.models import Importance, Priority, Task
from slot_planner.render import format_schedule, format_task_list
from slot_planner.slots import SlotGrid


def _task(task_id: int, title: str) -> Task:
    return Task(
        id=task_id,
        title=title,
        duration=30,
        importance=Importance.HIGH,
        priority=Priority.HARD_DEADLINE,
        deadline=date(2026, 1, 12),
    )


def test_format_schedule_groups_by_day() -> None:
    a, b = _task(1, "Report"), _task(2, "Email")
    text = format_schedule({"2026-01-13": {"9:00": b}, "2026-01-12": {"9:00": a, "9:30": a}})
    assert text.splitlines() == [
        "2026-01-12",
        "  9:00: Report",
        "  9:30: Report",
        "2026-01-13",
        "  9:00: Email",
    ]


def test_empty_views() -> None:
    assert format_schedule({}) == "Nothing scheduled."
    assert format_task_list([]) == "No tasks yet."


def test_task_list_line() -> None:
    assert format_task_list([_task(3, "Report")]) == (
        "3. Report ~30m | High | Hard deadline | due 2026-01-12"
    )


def test_settings_from_env(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("SLOT_START_HOUR", "8")
    monkeypatch.setenv("SLOT_END_HOUR", "12")
    monkeypatch.setenv("MAX_LOOKAHEAD_DAYS", "30")
    monkeypatch.setenv("TIMEZONE", "UTC")
    monkeypatch.setenv("LOG_LEVEL", "debug")
    s = load_settings()
    assert s.grid() == SlotGrid(start_hour=8, end_hour=12)
    assert s.max_lookahead_days == 30
    assert s.log_level == "DEBUG"


def test_settings_defaults(monkeypatch: pytest.MonkeyPatch) -> None:
    for name in ("SLOT_START_HOUR", "SLOT_END_HOUR", "MAX_LOOKAHEAD_DAYS", "TIMEZONE", "DB_PATH"):
        monkeypatch.delenv(name, raising=False)
    s = load_settings()
    assert s.grid() == SlotGrid()
    assert s.max_lookahead_days == 365
    assert s.db_path == "slot_planner.sqlite3"


@pytest.mark.parametrize(
    "name,value",
    [
        ("SLOT_START_HOUR", "nine"),
        ("SLOT_END_HOUR", "8"),
        ("MAX_LOOKAHEAD_DAYS", "0"),
        ("TIMEZONE", "Nowhere/Special"),
    ],
)
def test_bad_settings_fail_fast(monkeypatch: pytest.MonkeyPatch, name: str, value: str) -> None:
    monkeypatch.setenv(name, value)
    with pytest.raises(ConfigurationError):
        load_settings()
