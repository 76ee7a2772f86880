from __future__ import annotations

import asyncio
import logging
from collections import defaultdict

from fastapi import WebSocket

logger = logging.getLogger(__name__)


class SessionWebSocketHub:
    """Frame fan-out to the browsers watching each live session.

    Contract:
      - `connect(session_id, websocket, current=...)` accepts the socket and sends the
        session's current frame first, so a late joiner never shows a blank page.
      - `broadcast(session_id, frame)` pushes a frame to every watcher; sockets that fail
        are dropped.
      - `disconnect(...)` returns how many watchers are left; the session registry reaps
        sessions whose last watcher went away.

    Sessions are in-process tasks, so watchers must hit the same replica.
    """

    def __init__(self) -> None:
        self._watchers: dict[str, set[WebSocket]] = defaultdict(set)
        self._lock = asyncio.Lock()

    async def connect(
        self,
        session_id: str,
        websocket: WebSocket,
        *,
        current: dict[str, object] | None = None,
    ) -> None:
        await websocket.accept()
        async with self._lock:
            self._watchers[session_id].add(websocket)
            # Sent under the lock so no newer broadcast can overtake it.
            if current is not None:
                await websocket.send_json(current)

    async def disconnect(self, session_id: str, websocket: WebSocket) -> int:
        async with self._lock:
            watchers = self._watchers.get(session_id)
            if watchers is None:
                return 0
            watchers.discard(websocket)
            if not watchers:
                del self._watchers[session_id]
            return len(watchers)

    def subscriber_count(self, session_id: str) -> int:
        return len(self._watchers.get(session_id, ()))

    async def broadcast(self, session_id: str, frame: dict[str, object]) -> int:
        """Send one frame to every watcher; returns how many received it."""

        async with self._lock:
            watchers = list(self._watchers.get(session_id, ()))
            delivered = 0
            for ws in watchers:
                try:
                    await ws.send_json(frame)
                    delivered += 1
                except Exception:
                    logger.debug("Dropping dead websocket for session %s", session_id)
                    self._watchers[session_id].discard(ws)
            if session_id in self._watchers and not self._watchers[session_id]:
                del self._watchers[session_id]
        return delivered


hub = SessionWebSocketHub()
