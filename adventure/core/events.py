from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Any, Literal

EventType = Literal[
    "SESSION_STARTED",
    "NAME_CHOSEN",
    "WEAPON_CHOSEN",
    "ENEMY_ENCOUNTERED",
    "ACTION_RESOLVED",
    "ENEMY_DEFEATED",
    "HIT_TAKEN",
    "GAME_OVER",
]


@dataclass(frozen=True, slots=True)
class GameEvent:
    type: EventType
    session_seq: int
    payload: dict[str, Any]
    ts: datetime

    @staticmethod
    def now(*, type: EventType, session_seq: int, payload: dict[str, Any]) -> "GameEvent":
        return GameEvent(type=type, session_seq=session_seq, payload=payload, ts=datetime.now(timezone.utc))
