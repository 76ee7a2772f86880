from __future__ import annotations

import asyncio
import contextlib
import logging
from dataclasses import dataclass, field
from datetime import UTC, datetime
from uuid import UUID, uuid4

import redis
from fastapi import WebSocket

from adventure.api.models import SessionSnapshot, WeaponView
from adventure.assets.registry import Catalog
from adventure.core.randomizer import SeededRandomizer, new_seed
from adventure.core.triggers import EventWaiter
from adventure.game_loop import GameLoop
from adventure.presentation import SessionView
from adventure.settings import GameTimings
from adventure.websocket_hub import SessionWebSocketHub, hub as default_hub

logger = logging.getLogger(__name__)


def _now() -> datetime:
    return datetime.now(tz=UTC)


@dataclass(slots=True)
class LiveSession:
    session_id: UUID
    seed: int
    created_at: datetime
    loop: GameLoop
    waiter: EventWaiter
    view: SessionView
    # None keeps the session until it is closed explicitly.
    idle_grace_s: float | None = None
    task: asyncio.Task[None] | None = field(default=None, repr=False)
    reaper: asyncio.Task[None] | None = field(default=None, repr=False)

    def fire(self, trigger_id: str, fields: dict[str, str] | None = None) -> bool:
        return self.waiter.fire(trigger_id, fields)

    def snapshot(self) -> SessionSnapshot:
        run = self.loop.session
        return SessionSnapshot(
            session_id=self.session_id,
            created_at=self.created_at,
            seed=self.seed,
            phase=self.loop.phase,
            runs_completed=self.loop.runs_completed,
            player_name=run.player_name if run else None,
            weapon=(
                WeaponView(name=run.weapon.name, attack_max=run.weapon.attack_max, dodge_max=run.weapon.dodge_max)
                if run
                else None
            ),
            hit_points=run.hit_points if run else None,
            score=run.score if run else None,
            enemy_index=run.enemy_index if run else None,
            awaiting=sorted(self.waiter.pending_ids),
            view_seq=self.view.seq,
            markup=self.view.markup,
        )


class SessionRegistry:
    """Live sessions of this process, each one a GameLoop running in its own task."""

    def __init__(self, *, hub: SessionWebSocketHub = default_hub) -> None:
        self.hub = hub
        self._sessions: dict[UUID, LiveSession] = {}

    async def create(
        self,
        *,
        catalog: Catalog,
        timings: GameTimings,
        seed: int | None = None,
        r: redis.Redis | None = None,
        idle_grace_s: float | None = None,
    ) -> LiveSession:
        session_id = uuid4()
        if seed is None:
            seed = new_seed()

        waiter = EventWaiter()
        view = SessionView(str(session_id), hub=self.hub, r=r)
        loop = GameLoop(
            catalog=catalog,
            waiter=waiter,
            presenter=view,
            randomizer=SeededRandomizer.from_seed(seed),
            timings=timings,
            session_label=str(session_id),
        )
        live = LiveSession(
            session_id=session_id,
            seed=seed,
            created_at=_now(),
            loop=loop,
            waiter=waiter,
            view=view,
            idle_grace_s=idle_grace_s,
        )

        live.task = asyncio.create_task(loop.run_forever(), name=f"adventure-session-{session_id}")
        live.task.add_done_callback(self._on_task_done)
        self._sessions[session_id] = live

        logger.info("Session %s created (seed=%s)", session_id, seed)
        return live

    def get(self, session_id: UUID) -> LiveSession | None:
        return self._sessions.get(session_id)

    def require(self, session_id: UUID) -> LiveSession:
        live = self.get(session_id)
        if live is None:
            raise ValueError("Session not found")
        return live

    def list_sessions(self) -> list[LiveSession]:
        return sorted(self._sessions.values(), key=lambda s: s.created_at, reverse=True)

    async def attach(self, live: LiveSession, websocket: WebSocket) -> None:
        """Start watching a session; a pending idle close is called off."""

        if live.reaper is not None:
            live.reaper.cancel()
            live.reaper = None
        current = live.view.frame_payload() if live.view.seq else None
        await self.hub.connect(str(live.session_id), websocket, current=current)

    async def detach(self, live: LiveSession, websocket: WebSocket) -> None:
        remaining = await self.hub.disconnect(str(live.session_id), websocket)
        if remaining or live.idle_grace_s is None or live.session_id not in self._sessions:
            return
        if live.reaper is None or live.reaper.done():
            live.reaper = asyncio.create_task(
                self._close_when_idle(live),
                name=f"adventure-reaper-{live.session_id}",
            )

    async def _close_when_idle(self, live: LiveSession) -> None:
        await asyncio.sleep(live.idle_grace_s or 0)
        if self.hub.subscriber_count(str(live.session_id)):
            return
        # close() cancels live.reaper, which is this task.
        live.reaper = None
        logger.info("Session %s has no watchers left; closing", live.session_id)
        await self.close(live.session_id)

    async def close(self, session_id: UUID) -> bool:
        live = self._sessions.pop(session_id, None)
        if live is None:
            return False

        if live.reaper is not None:
            live.reaper.cancel()
            live.reaper = None

        if live.task is not None and not live.task.done():
            live.task.cancel()
            with contextlib.suppress(asyncio.CancelledError):
                await live.task

        logger.info("Session %s closed", session_id)
        return True

    async def close_all(self) -> None:
        for session_id in list(self._sessions):
            await self.close(session_id)

    @staticmethod
    def _on_task_done(task: asyncio.Task[None]) -> None:
        if task.cancelled():
            return
        exc = task.exception()
        if exc is not None:
            logger.error("Session task %s crashed", task.get_name(), exc_info=exc)


registry = SessionRegistry()
