from __future__ import annotations

import logging
from typing import Protocol

import redis

from adventure.streams import ViewStream, publish_frame
from adventure.websocket_hub import SessionWebSocketHub

logger = logging.getLogger(__name__)


class PresentationPort(Protocol):
    """Output-only sink for rendered markup. The game never reads anything back."""

    async def present(self, markup: str) -> None:  # pragma: no cover
        ...


class SessionView:
    """Presentation target for one session.

    - keeps the latest frame so late subscribers and snapshots can show it.
    - pushes every frame to the session's WebSocket subscribers.
    - optionally appends frames to the Redis stream `view:{session_id}`.
    """

    def __init__(self, session_id: str, *, hub: SessionWebSocketHub, r: redis.Redis | None = None) -> None:
        self.session_id = session_id
        self.hub = hub
        self.redis = r
        self.markup = ""
        self.seq = 0

    def frame_payload(self) -> dict[str, object]:
        return {"type": "view", "session_id": self.session_id, "seq": self.seq, "markup": self.markup}

    async def present(self, markup: str) -> None:
        self.markup = markup
        self.seq += 1

        if self.redis is not None:
            try:
                publish_frame(
                    r=self.redis,
                    stream=ViewStream(session_id=self.session_id),
                    fields={"seq": str(self.seq), "markup": markup},
                )
            except redis.RedisError as e:
                # Frame log is best-effort; the game keeps going without it.
                logger.warning("Could not publish frame %s for session %s: %s", self.seq, self.session_id, e)

        await self.hub.broadcast(self.session_id, self.frame_payload())
