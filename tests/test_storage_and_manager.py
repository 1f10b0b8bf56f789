from __future__ import annotations

from datetime import date, datetime, timedelta
from pathlib import Path

import pytest

from slot_planner.errors import UnschedulableTaskError, ValidationError
from slot_planner.manager import TaskManager
from slot_planner.models import Importance, Priority
from slot_planner.storage import Storage

TODAY = date(2026, 1, 12)
DAY1 = TODAY.isoformat()
DAY2 = (TODAY + timedelta(days=1)).isoformat()
ALICE = 1001
BOB = 2002


def _add(storage: Storage, title: str, duration: int = 30, user_id: int = ALICE) -> int:
    return storage.add_task(
        telegram_user_id=user_id,
        title=title,
        created_at=datetime(2026, 1, 12, 8, 0),
        duration=duration,
        importance=Importance.HIGH,
        priority=Priority.HARD_DEADLINE,
        deadline=TODAY,
    )


def test_storage_task_crud(tmp_path: Path) -> None:
    storage = Storage(tmp_path / "db.sqlite3")
    a = _add(storage, "A", 45)
    b = _add(storage, "B")
    assert a != b

    tasks = storage.list_tasks(ALICE)
    assert [t.title for t in tasks] == ["A", "B"]
    assert tasks[0].duration == 45
    assert tasks[0].importance == Importance.HIGH
    assert tasks[0].priority == Priority.HARD_DEADLINE
    assert tasks[0].deadline == TODAY

    assert storage.delete_task(ALICE, a) is True
    assert storage.delete_task(ALICE, a) is False
    assert storage.get_task(ALICE, a) is None
    assert [t.id for t in storage.list_tasks(ALICE)] == [b]


def test_storage_is_scoped_per_user(tmp_path: Path) -> None:
    storage = Storage(tmp_path / "db.sqlite3")
    a = _add(storage, "Alice's", user_id=ALICE)
    b = _add(storage, "Bob's", user_id=BOB)

    assert [t.id for t in storage.list_tasks(ALICE)] == [a]
    assert [t.id for t in storage.list_tasks(BOB)] == [b]
    assert storage.get_task(BOB, a) is None
    assert storage.delete_task(BOB, a) is False
    assert storage.get_task(ALICE, a) is not None

    task_a = storage.get_task(ALICE, a)
    task_b = storage.get_task(BOB, b)
    storage.replace_schedule(ALICE, {DAY1: {"9:00": task_a}})
    storage.replace_schedule(BOB, {DAY1: {"9:00": task_b}})
    assert storage.load_schedule(ALICE) == {DAY1: {"9:00": task_a}}
    assert storage.load_schedule(BOB) == {DAY1: {"9:00": task_b}}


def test_storage_replaces_schedule_wholesale(tmp_path: Path) -> None:
    storage = Storage(tmp_path / "db.sqlite3")
    a = storage.get_task(ALICE, _add(storage, "A"))
    b = storage.get_task(ALICE, _add(storage, "B"))
    assert a is not None and b is not None

    storage.replace_schedule(ALICE, {DAY1: {"9:00": b, "9:30": b, "10:00": a}})
    loaded = storage.load_schedule(ALICE)
    assert loaded == {DAY1: {"9:00": b, "9:30": b, "10:00": a}}
    assert list(loaded[DAY1]) == ["9:00", "9:30", "10:00"]

    storage.replace_schedule(ALICE, {DAY2: {"9:00": a}})
    assert storage.load_schedule(ALICE) == {DAY2: {"9:00": a}}


def test_manager_rebuilds_schedule_on_every_change(tmp_path: Path) -> None:
    manager = TaskManager(Storage(tmp_path / "db.sqlite3"), ALICE)
    soft = manager.add_task(
        title="Soft",
        duration=30,
        importance=Importance.AVERAGE,
        priority=Priority.SOFT_DEADLINE,
        deadline=TODAY,
        today=TODAY,
    )
    assert manager.schedule() == {DAY1: {"9:00": soft}}

    asap = manager.add_task(
        title="Now",
        duration=60,
        importance=Importance.ASAP,
        priority=Priority.ASAP,
        deadline=TODAY,
        today=TODAY,
    )
    assert manager.schedule() == {DAY1: {"9:00": asap, "9:30": asap, "10:00": soft}}

    assert manager.delete_task(asap.id, today=TODAY) is True
    assert manager.schedule() == {DAY1: {"9:00": soft}}

    assert manager.delete_task(soft.id, today=TODAY) is True
    assert manager.schedule() == {}
    assert manager.delete_task(soft.id, today=TODAY) is False


def test_users_get_separate_schedules(tmp_path: Path) -> None:
    storage = Storage(tmp_path / "db.sqlite3")
    alice = TaskManager(storage, ALICE)
    bob = TaskManager(storage, BOB)

    report = alice.add_task(
        title="Report",
        duration=60,
        importance=Importance.ASAP,
        priority=Priority.ASAP,
        deadline=TODAY,
        today=TODAY,
    )
    gym = bob.add_task(
        title="Gym",
        duration=30,
        importance=Importance.LOW,
        priority=Priority.NO_DEADLINE,
        deadline=TODAY,
        today=TODAY,
    )

    # Bob's task is not pushed back by Alice's
    assert bob.schedule() == {DAY1: {"9:00": gym}}
    assert alice.schedule() == {DAY1: {"9:00": report, "9:30": report}}
    assert [t.title for t in bob.tasks()] == ["Gym"]

    # and neither can delete the other's task
    assert bob.delete_task(report.id, today=TODAY) is False
    assert alice.schedule() == {DAY1: {"9:00": report, "9:30": report}}


def test_manager_rejects_unschedulable_task_and_keeps_old_schedule(tmp_path: Path) -> None:
    manager = TaskManager(Storage(tmp_path / "db.sqlite3"), ALICE, max_days=30)
    ok = manager.add_task(
        title="Fits",
        duration=30,
        importance=Importance.LOW,
        priority=Priority.NO_DEADLINE,
        deadline=TODAY,
        today=TODAY,
    )
    with pytest.raises(UnschedulableTaskError):
        manager.add_task(
            title="Marathon",
            duration=600,
            importance=Importance.HIGH,
            priority=Priority.ASAP,
            deadline=TODAY,
            today=TODAY,
        )
    assert [t.title for t in manager.tasks()] == ["Fits"]
    assert manager.schedule() == {DAY1: {"9:00": ok}}


def test_failed_delete_keeps_task_and_schedule(tmp_path: Path) -> None:
    storage = Storage(tmp_path / "db.sqlite3")
    manager = TaskManager(storage, ALICE, max_days=30)
    ok = manager.add_task(
        title="Fits",
        duration=30,
        importance=Importance.LOW,
        priority=Priority.NO_DEADLINE,
        deadline=TODAY,
        today=TODAY,
    )
    # written straight to the store, so no schedule could ever hold it
    _add(storage, "Marathon", duration=600)

    with pytest.raises(UnschedulableTaskError):
        manager.delete_task(ok.id, today=TODAY)
    assert [t.title for t in manager.tasks()] == ["Fits", "Marathon"]
    assert manager.schedule() == {DAY1: {"9:00": ok}}


def test_manager_validates_before_storing(tmp_path: Path) -> None:
    manager = TaskManager(Storage(tmp_path / "db.sqlite3"), ALICE)
    with pytest.raises(ValidationError):
        manager.add_task(
            title="",
            duration=30,
            importance=Importance.LOW,
            priority=Priority.NO_DEADLINE,
            deadline=TODAY,
            today=TODAY,
        )
    assert manager.tasks() == []
