from __future__ import annotations

import logging
import os
from dataclasses import dataclass, replace
from pathlib import Path


@dataclass(frozen=True, slots=True)
class GameTimings:
    """Presentation delays in seconds. Only their order matters to the game."""

    roll_frame_s: float = 0.1
    roll_settle_s: float = 1.0
    attack_result_s: float = 2.5
    dodge_result_s: float = 1.5

    def scaled(self, factor: float) -> "GameTimings":
        if factor < 0:
            raise ValueError("time scale must be >= 0")
        return replace(
            self,
            roll_frame_s=self.roll_frame_s * factor,
            roll_settle_s=self.roll_settle_s * factor,
            attack_result_s=self.attack_result_s * factor,
            dodge_result_s=self.dodge_result_s * factor,
        )


@dataclass(frozen=True, slots=True)
class Settings:
    time_scale: float = 1.0
    log_level: int = logging.INFO
    # Seconds a session survives after its last WebSocket watcher leaves.
    session_grace_s: float = 30.0

    @property
    def timings(self) -> GameTimings:
        return GameTimings().scaled(self.time_scale)


def project_root() -> Path:
    # adventure/settings.py -> adventure/ -> project root
    return Path(__file__).resolve().parents[1]


def load_dotenv_if_present() -> None:
    env_path = project_root() / ".env"
    if env_path.exists():
        from dotenv import load_dotenv

        load_dotenv(dotenv_path=env_path, override=False)


def _parse_time_scale(raw: str) -> float:
    try:
        value = float(raw)
    except ValueError as e:
        raise ValueError(f"ADVENTURE_TIME_SCALE must be a number, got {raw!r}") from e
    if value < 0:
        raise ValueError("ADVENTURE_TIME_SCALE must be >= 0")
    return value


def _parse_grace(raw: str) -> float:
    try:
        value = float(raw)
    except ValueError as e:
        raise ValueError(f"ADVENTURE_SESSION_GRACE_S must be a number, got {raw!r}") from e
    if value < 0:
        raise ValueError("ADVENTURE_SESSION_GRACE_S must be >= 0")
    return value


def _parse_log_level(raw: str) -> int:
    level = logging.getLevelName(raw.strip().upper())
    if not isinstance(level, int):
        raise ValueError(f"ADVENTURE_LOG_LEVEL is not a logging level: {raw!r}")
    return level


def load_settings() -> Settings:
    """Read settings from the environment (call `load_dotenv_if_present()` first for `.env`)."""

    return Settings(
        time_scale=_parse_time_scale(os.environ.get("ADVENTURE_TIME_SCALE", "1.0")),
        log_level=_parse_log_level(os.environ.get("ADVENTURE_LOG_LEVEL", "INFO")),
        session_grace_s=_parse_grace(os.environ.get("ADVENTURE_SESSION_GRACE_S", "30")),
    )
