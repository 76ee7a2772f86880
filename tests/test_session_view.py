from __future__ import annotations

import fakeredis
import pytest
import redis

from adventure.presentation import SessionView
from adventure.streams import ViewStream, read_frames


class _RecordingHub:
    def __init__(self) -> None:
        self.sent: list[tuple[str, dict[str, object]]] = []

    async def broadcast(self, session_id: str, payload: dict[str, object]) -> None:
        self.sent.append((session_id, payload))


class _BrokenRedis:
    def xadd(self, *args: object, **kwargs: object) -> str:
        raise redis.ConnectionError("redis is down")


@pytest.mark.asyncio
async def test_present_keeps_latest_frame_and_broadcasts_it() -> None:
    hub = _RecordingHub()
    view = SessionView("s1", hub=hub)  # type: ignore[arg-type]

    await view.present("<h1>one</h1>")
    await view.present("<h1>two</h1>")

    assert view.markup == "<h1>two</h1>"
    assert view.seq == 2
    assert [p["markup"] for _, p in hub.sent] == ["<h1>one</h1>", "<h1>two</h1>"]
    assert all(sid == "s1" and p["type"] == "view" for sid, p in hub.sent)


@pytest.mark.asyncio
async def test_presenting_the_same_markup_twice_is_idempotent() -> None:
    view = SessionView("s1", hub=_RecordingHub())  # type: ignore[arg-type]

    await view.present("<p>same</p>")
    first = view.markup
    await view.present("<p>same</p>")

    assert view.markup == first == "<p>same</p>"


@pytest.mark.asyncio
async def test_frames_are_appended_to_the_session_stream() -> None:
    r = fakeredis.FakeRedis(decode_responses=True)
    view = SessionView("s1", hub=_RecordingHub(), r=r)  # type: ignore[arg-type]

    await view.present("<p>a</p>")
    await view.present("<p>b</p>")

    frames = read_frames(r=r, stream=ViewStream(session_id="s1"), count=10)
    assert [f["markup"] for _, f in frames] == ["<p>b</p>", "<p>a</p>"]
    assert [f["seq"] for _, f in frames] == ["2", "1"]


@pytest.mark.asyncio
async def test_stream_failures_do_not_stop_the_game() -> None:
    hub = _RecordingHub()
    view = SessionView("s1", hub=hub, r=_BrokenRedis())  # type: ignore[arg-type]

    await view.present("<p>still shown</p>")

    assert view.markup == "<p>still shown</p>"
    assert len(hub.sent) == 1
