from __future__ import annotations

from uuid import UUID

from fastapi import APIRouter, Depends, HTTPException, Response, WebSocket, WebSocketDisconnect, status
import redis

from adventure.api.deps import get_catalog_dep, get_redis, get_registry, get_settings
from adventure.api.models import (
    FrameEntry,
    FrameListResponse,
    SessionCreateRequest,
    SessionListResponse,
    SessionSnapshot,
    TriggerRequest,
    TriggerResponse,
)
from adventure.assets.registry import Catalog
from adventure.session_store import LiveSession, SessionRegistry
from adventure.settings import Settings
from adventure.streams import ViewStream, read_frames

router = APIRouter()


def _require_session(sessions: SessionRegistry, session_id: UUID) -> LiveSession:
    try:
        return sessions.require(session_id)
    except ValueError as e:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(e)) from e


@router.websocket("/ws/sessions/{session_id}")
async def session_view_ws(
    websocket: WebSocket,
    session_id: UUID,
    sessions: SessionRegistry = Depends(get_registry),
) -> None:
    live = sessions.get(session_id)
    if live is None:
        await websocket.close(code=4404)
        return

    await sessions.attach(live, websocket)

    try:
        while True:
            message = await websocket.receive_json()
            if not isinstance(message, dict) or message.get("type") != "trigger":
                continue
            fields = message.get("fields") or {}
            if not isinstance(fields, dict):
                fields = {}
            live.fire(str(message.get("id")), {str(k): str(v) for k, v in fields.items()})
    except WebSocketDisconnect:
        pass
    finally:
        # The last watcher leaving starts the session's idle countdown.
        await sessions.detach(live, websocket)


@router.get("/healthcheck")
async def healthcheck() -> dict[str, str]:
    return {"status": "ok"}


@router.post("/sessions", response_model=SessionSnapshot, status_code=status.HTTP_201_CREATED)
async def create_session_route(
    payload: SessionCreateRequest,
    catalog: Catalog = Depends(get_catalog_dep),
    settings: Settings = Depends(get_settings),
    sessions: SessionRegistry = Depends(get_registry),
    r: redis.Redis | None = Depends(get_redis),
) -> SessionSnapshot:
    live = await sessions.create(
        catalog=catalog,
        timings=settings.timings,
        seed=payload.seed,
        r=r,
        idle_grace_s=settings.session_grace_s,
    )
    return live.snapshot()


@router.get("/sessions", response_model=SessionListResponse)
async def list_sessions_route(sessions: SessionRegistry = Depends(get_registry)) -> SessionListResponse:
    return SessionListResponse(sessions=[s.snapshot() for s in sessions.list_sessions()])


@router.get("/sessions/{session_id}", response_model=SessionSnapshot)
async def get_session_route(session_id: UUID, sessions: SessionRegistry = Depends(get_registry)) -> SessionSnapshot:
    return _require_session(sessions, session_id).snapshot()


@router.delete("/sessions/{session_id}", status_code=status.HTTP_204_NO_CONTENT)
async def close_session_route(session_id: UUID, sessions: SessionRegistry = Depends(get_registry)) -> Response:
    if not await sessions.close(session_id):
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Session not found")
    return Response(status_code=status.HTTP_204_NO_CONTENT)


@router.post("/sessions/{session_id}/triggers/{trigger_id}", response_model=TriggerResponse)
async def fire_trigger_route(
    session_id: UUID,
    trigger_id: str,
    payload: TriggerRequest,
    sessions: SessionRegistry = Depends(get_registry),
) -> TriggerResponse:
    live = _require_session(sessions, session_id)
    accepted = live.fire(trigger_id, payload.fields)
    return TriggerResponse(session_id=session_id, trigger_id=trigger_id, accepted=accepted)


@router.get("/sessions/{session_id}/frames", response_model=FrameListResponse)
async def list_frames_route(
    session_id: UUID,
    count: int = 20,
    sessions: SessionRegistry = Depends(get_registry),
    r: redis.Redis | None = Depends(get_redis),
) -> FrameListResponse:
    """Debug endpoint: read a session's recent frames (newest first) from its Redis stream."""

    _require_session(sessions, session_id)

    if count < 1 or count > 200:
        raise HTTPException(status_code=status.HTTP_422_UNPROCESSABLE_ENTITY, detail="count must be between 1 and 200")
    if r is None:
        raise HTTPException(status_code=status.HTTP_422_UNPROCESSABLE_ENTITY, detail="Frame streams are not configured")

    stream = ViewStream(session_id=str(session_id))
    try:
        entries = read_frames(r=r, stream=stream, count=count)
    except redis.RedisError as e:
        raise HTTPException(status_code=status.HTTP_422_UNPROCESSABLE_ENTITY, detail=str(e)) from e

    return FrameListResponse(
        session_id=session_id,
        stream=stream.key,
        frames=[FrameEntry(id=mid, fields=fields) for mid, fields in entries],
    )
