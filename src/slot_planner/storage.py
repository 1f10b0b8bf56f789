from __future__ import annotations

import sqlite3
from contextlib import contextmanager
from datetime import date, datetime
from pathlib import Path
from typing import Iterable, Optional

from .models import Importance, Priority, Schedule, Task


def _to_iso_dt(dt: datetime) -> str:
    return dt.isoformat(timespec="seconds")


def _to_iso_date(d: date) -> str:
    return d.isoformat()


def _from_iso_date(s: str) -> date:
    return date.fromisoformat(s)


class Storage:
    def __init__(self, db_path: str | Path) -> None:
        self.db_path = str(db_path)
        self._init()

    @contextmanager
    def _conn(self) -> Iterable[sqlite3.Connection]:
        conn = sqlite3.connect(self.db_path)
        conn.row_factory = sqlite3.Row
        try:
            yield conn
            conn.commit()
        finally:
            conn.close()

    def _init(self) -> None:
        with self._conn() as conn:
            conn.execute(
                """
                CREATE TABLE IF NOT EXISTS tasks (
                  id INTEGER PRIMARY KEY AUTOINCREMENT,
                  telegram_user_id INTEGER NOT NULL,
                  title TEXT NOT NULL,
                  created_at TEXT NOT NULL,
                  duration INTEGER NOT NULL,
                  importance TEXT NOT NULL,
                  priority TEXT NOT NULL,
                  deadline TEXT NOT NULL
                )
                """
            )
            conn.execute(
                """
                CREATE INDEX IF NOT EXISTS idx_tasks_user
                ON tasks(telegram_user_id)
                """
            )
            conn.execute(
                """
                CREATE TABLE IF NOT EXISTS schedule_slots (
                  telegram_user_id INTEGER NOT NULL,
                  day TEXT NOT NULL,
                  position INTEGER NOT NULL,
                  slot TEXT NOT NULL,
                  task_id INTEGER NOT NULL,
                  PRIMARY KEY (telegram_user_id, day, slot),
                  FOREIGN KEY (task_id) REFERENCES tasks(id)
                )
                """
            )

    def add_task(
        self,
        telegram_user_id: int,
        title: str,
        created_at: datetime,
        duration: int,
        importance: Importance,
        priority: Priority,
        deadline: date,
    ) -> int:
        with self._conn() as conn:
            cur = conn.execute(
                """
                INSERT INTO tasks(
                  telegram_user_id, title, created_at, duration, importance, priority, deadline
                )
                VALUES(?, ?, ?, ?, ?, ?, ?)
                """,
                (
                    telegram_user_id,
                    title,
                    _to_iso_dt(created_at),
                    int(duration),
                    str(importance),
                    str(priority),
                    _to_iso_date(deadline),
                ),
            )
            return int(cur.lastrowid)

    def list_tasks(self, telegram_user_id: int) -> list[Task]:
        with self._conn() as conn:
            rows = conn.execute(
                "SELECT * FROM tasks WHERE telegram_user_id=? ORDER BY id ASC",
                (telegram_user_id,),
            ).fetchall()
        return [self._row_to_task(r) for r in rows]

    def get_task(self, telegram_user_id: int, task_id: int) -> Optional[Task]:
        with self._conn() as conn:
            row = conn.execute(
                "SELECT * FROM tasks WHERE telegram_user_id=? AND id=?",
                (telegram_user_id, task_id),
            ).fetchone()
        if row is None:
            return None
        return self._row_to_task(row)

    def delete_task(self, telegram_user_id: int, task_id: int) -> bool:
        with self._conn() as conn:
            cur = conn.execute(
                "DELETE FROM tasks WHERE telegram_user_id=? AND id=?",
                (telegram_user_id, task_id),
            )
            if cur.rowcount == 0:
                return False
            conn.execute(
                "DELETE FROM schedule_slots WHERE telegram_user_id=? AND task_id=?",
                (telegram_user_id, task_id),
            )
            return True

    def replace_schedule(self, telegram_user_id: int, schedule: Schedule) -> None:
        """Drop the user's stored schedule and write `schedule` in its place."""
        rows = [
            (telegram_user_id, day, position, slot, task.id)
            for day, slots in schedule.items()
            for position, (slot, task) in enumerate(slots.items())
        ]
        with self._conn() as conn:
            conn.execute(
                "DELETE FROM schedule_slots WHERE telegram_user_id=?",
                (telegram_user_id,),
            )
            conn.executemany(
                """
                INSERT INTO schedule_slots(telegram_user_id, day, position, slot, task_id)
                VALUES(?, ?, ?, ?, ?)
                """,
                rows,
            )

    def load_schedule(self, telegram_user_id: int) -> Schedule:
        with self._conn() as conn:
            rows = conn.execute(
                """
                SELECT s.day, s.slot, t.*
                FROM schedule_slots s JOIN tasks t ON t.id = s.task_id
                WHERE s.telegram_user_id=?
                ORDER BY s.day ASC, s.position ASC
                """,
                (telegram_user_id,),
            ).fetchall()
        schedule: Schedule = {}
        for r in rows:
            schedule.setdefault(str(r["day"]), {})[str(r["slot"])] = self._row_to_task(r)
        return schedule

    @staticmethod
    def _row_to_task(row: sqlite3.Row) -> Task:
        return Task(
            id=int(row["id"]),
            title=str(row["title"]),
            duration=int(row["duration"]),
            importance=Importance(str(row["importance"])),
            priority=Priority(str(row["priority"])),
            deadline=_from_iso_date(str(row["deadline"])),
        )
