from __future__ import annotations

from datetime import datetime
from enum import StrEnum
from uuid import UUID

from pydantic import BaseModel, Field


class GamePhase(StrEnum):
    name_prompt = "name_prompt"
    weapon_select = "weapon_select"
    encounter = "encounter"
    combat_round = "combat_round"
    game_over = "game_over"


class SessionCreateRequest(BaseModel):
    # Fixed seed for reproducible runs; drawn at random when omitted.
    seed: int | None = Field(default=None, ge=0)


class TriggerRequest(BaseModel):
    # Form values visible at click time, e.g. {"name": "Ada"}.
    fields: dict[str, str] = Field(default_factory=dict)


class TriggerResponse(BaseModel):
    session_id: UUID
    trigger_id: str
    accepted: bool


class WeaponView(BaseModel):
    name: str
    attack_max: int
    dodge_max: int


class SessionSnapshot(BaseModel):
    session_id: UUID
    created_at: datetime
    seed: int
    phase: GamePhase

    # Number of runs that reached game over in this session.
    runs_completed: int = 0

    # Current run; empty until a weapon has been chosen.
    player_name: str | None = None
    weapon: WeaponView | None = None
    hit_points: int | None = None
    score: int | None = None
    enemy_index: int | None = None

    # Control ids the game is waiting on right now.
    awaiting: list[str] = Field(default_factory=list)

    # Latest presented frame.
    view_seq: int = 0
    markup: str = ""


class SessionListResponse(BaseModel):
    sessions: list[SessionSnapshot]


class FrameEntry(BaseModel):
    id: str
    fields: dict[str, str]


class FrameListResponse(BaseModel):
    session_id: UUID
    stream: str
    frames: list[FrameEntry]
