from __future__ import annotations

import os
from dataclasses import dataclass

from zoneinfo import ZoneInfo, ZoneInfoNotFoundError

from .errors import ConfigurationError
from .planner import DEFAULT_MAX_DAYS
from .slots import SlotGrid


def _env(name: str, default: str = "") -> str:
    return os.getenv(name, default).strip()


def _env_int(name: str, default: int) -> int:
    raw = _env(name)
    if not raw:
        return default
    try:
        return int(raw)
    except ValueError:
        raise ConfigurationError(f"{name} must be an integer, got {raw!r}") from None


@dataclass(frozen=True)
class Settings:
    telegram_token: str = ""
    db_path: str = "slot_planner.sqlite3"
    timezone: str = "UTC"  # IANA TZ, only used to decide what "today" is
    slot_start_hour: int = 9
    slot_end_hour: int = 17
    max_lookahead_days: int = DEFAULT_MAX_DAYS
    log_level: str = "INFO"

    def grid(self) -> SlotGrid:
        return SlotGrid(start_hour=self.slot_start_hour, end_hour=self.slot_end_hour)

    def tz(self) -> ZoneInfo:
        return ZoneInfo(self.timezone)


def load_settings() -> Settings:
    settings = Settings(
        telegram_token=_env("TELEGRAM_TOKEN"),
        db_path=_env("DB_PATH", "slot_planner.sqlite3") or "slot_planner.sqlite3",
        timezone=_env("TIMEZONE", "UTC") or "UTC",
        slot_start_hour=_env_int("SLOT_START_HOUR", 9),
        slot_end_hour=_env_int("SLOT_END_HOUR", 17),
        max_lookahead_days=_env_int("MAX_LOOKAHEAD_DAYS", DEFAULT_MAX_DAYS),
        log_level=(_env("LOG_LEVEL", "INFO") or "INFO").upper(),
    )
    settings.grid()
    if settings.max_lookahead_days < 1:
        raise ConfigurationError("MAX_LOOKAHEAD_DAYS must be at least 1")
    try:
        settings.tz()
    except (ZoneInfoNotFoundError, ValueError):
        raise ConfigurationError(f"unknown timezone: {settings.timezone!r}") from None
    return settings
