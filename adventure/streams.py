from __future__ import annotations

from dataclasses import dataclass
from typing import Mapping, cast

import redis

# Keep roughly the last N frames per session; the stream is a debug outbox, not game state.
FRAME_STREAM_MAXLEN = 500


@dataclass(frozen=True, slots=True)
class ViewStream:
    session_id: str

    @property
    def key(self) -> str:
        return f"view:{self.session_id}"


def publish_frame(*, r: redis.Redis, stream: ViewStream, fields: Mapping[str, str]) -> str:
    """Append a presented frame to a session's view stream."""

    # redis-py stubs expect field/value unions; we only use string fields/values.
    stream_id = r.xadd(
        stream.key,
        {str(k): str(v) for k, v in fields.items()},
        maxlen=FRAME_STREAM_MAXLEN,
        approximate=True,
    )
    return cast(str, stream_id)


def read_frames(*, r: redis.Redis, stream: ViewStream, count: int) -> list[tuple[str, dict[str, str]]]:
    # Newest first.
    entries = r.xrevrange(stream.key, count=count)
    return [(cast(str, mid), dict(fields)) for mid, fields in entries]
