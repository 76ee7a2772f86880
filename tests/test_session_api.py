from __future__ import annotations

import time
from uuid import uuid4

from fastapi import WebSocketDisconnect
from fastapi.testclient import TestClient
import pytest


def _receive_until(ws, text: str, limit: int = 50) -> dict:
    # Late joiners may see the current frame twice; skip anything until `text` shows up.
    for _ in range(limit):
        msg = ws.receive_json()
        assert msg["type"] == "view"
        if text in msg["markup"]:
            return msg
    raise AssertionError(f"never saw a frame containing {text!r}")


def _wait_for_control(client: TestClient, sid: str, control: str, attempts: int = 200) -> None:
    for _ in range(attempts):
        if control in client.get(f"/sessions/{sid}").json()["awaiting"]:
            return
        time.sleep(0.01)
    raise AssertionError(f"session never offered {control!r}")


def test_healthcheck_and_info(client: TestClient) -> None:
    assert client.get("/healthcheck").json() == {"status": "ok"}
    assert client.get("/info").json()["name"] == "adventure"


def test_create_and_list_sessions(client: TestClient) -> None:
    resp = client.post("/sessions", json={"seed": 7})
    assert resp.status_code == 201
    created = resp.json()
    assert created["seed"] == 7
    assert created["phase"] == "name_prompt"
    assert created["weapon"] is None

    listed = client.get("/sessions").json()["sessions"]
    assert created["session_id"] in {s["session_id"] for s in listed}


def test_unknown_session_is_404(client: TestClient) -> None:
    sid = uuid4()
    assert client.get(f"/sessions/{sid}").status_code == 404
    assert client.post(f"/sessions/{sid}/triggers/ok", json={}).status_code == 404
    assert client.delete(f"/sessions/{sid}").status_code == 404


def test_play_to_first_encounter_over_websocket(client: TestClient) -> None:
    session = client.post("/sessions", json={}).json()
    sid = session["session_id"]

    def _click(ws, control: str, fields: dict[str, str] | None = None) -> None:
        _wait_for_control(client, sid, control)
        ws.send_json({"type": "trigger", "id": control, "fields": fields or {}})

    with client.websocket_connect(f"/ws/sessions/{sid}") as ws:
        _receive_until(ws, "Greetings Adventurer")
        _click(ws, "ok", {"name": "Ada"})
        _receive_until(ws, "Welcome, Ada!")
        _click(ws, "ok")
        _receive_until(ws, "choose your weapon")
        _click(ws, "weapon-1")
        _receive_until(ws, "You chose Bow")
        _click(ws, "ok")
        frame = _receive_until(ws, "You encounter a Wolf")
        _wait_for_control(client, sid, "attack")

        snap = client.get(f"/sessions/{sid}").json()
        assert snap["phase"] == "combat_round"
        assert snap["player_name"] == "Ada"
        assert snap["weapon"] == {"name": "Bow", "attack_max": 4, "dodge_max": 16}
        assert (snap["hit_points"], snap["score"], snap["enemy_index"]) == (3, 0, 0)
        assert snap["markup"] == frame["markup"]
        assert snap["awaiting"] == ["attack", "dodge"]


def test_rest_triggers_report_whether_they_were_accepted(client: TestClient) -> None:
    sid = client.post("/sessions", json={}).json()["session_id"]

    with client.websocket_connect(f"/ws/sessions/{sid}") as ws:
        _receive_until(ws, "Greetings Adventurer")
        _wait_for_control(client, sid, "ok")

        # Not offered on the name prompt.
        stray = client.post(f"/sessions/{sid}/triggers/attack", json={})
        assert stray.status_code == 200
        assert stray.json()["accepted"] is False

        ok = client.post(f"/sessions/{sid}/triggers/ok", json={"fields": {"name": "Grace"}})
        assert ok.json() == {"session_id": sid, "trigger_id": "ok", "accepted": True}
        _receive_until(ws, "Welcome, Grace!")


def test_frames_endpoint_reads_the_view_stream(client_and_redis) -> None:
    client, _ = client_and_redis
    sid = client.post("/sessions", json={}).json()["session_id"]

    with client.websocket_connect(f"/ws/sessions/{sid}") as ws:
        _receive_until(ws, "Greetings Adventurer")

        data = client.get(f"/sessions/{sid}/frames?count=5").json()
        assert data["stream"] == f"view:{sid}"
        assert "Greetings Adventurer" in data["frames"][0]["fields"]["markup"]

        assert client.get(f"/sessions/{sid}/frames?count=0").status_code == 422


def test_frames_endpoint_without_redis(client: TestClient) -> None:
    from adventure.api.deps import get_redis
    from adventure.main import app

    sid = client.post("/sessions", json={}).json()["session_id"]
    app.dependency_overrides[get_redis] = lambda: None

    resp = client.get(f"/sessions/{sid}/frames")
    assert resp.status_code == 422
    assert "not configured" in resp.json()["detail"]


def test_closed_session_is_gone(client: TestClient) -> None:
    sid = client.post("/sessions", json={}).json()["session_id"]

    assert client.delete(f"/sessions/{sid}").status_code == 204
    assert client.get(f"/sessions/{sid}").status_code == 404

    with pytest.raises(WebSocketDisconnect):
        with client.websocket_connect(f"/ws/sessions/{sid}") as ws:
            ws.receive_json()


def test_sessions_are_closed_after_their_last_watcher_leaves(client: TestClient) -> None:
    sids = []
    for _ in range(5):
        sid = client.post("/sessions", json={}).json()["session_id"]
        with client.websocket_connect(f"/ws/sessions/{sid}") as ws:
            _receive_until(ws, "Greetings Adventurer")
        sids.append(sid)

    for _ in range(200):
        listed = {s["session_id"] for s in client.get("/sessions").json()["sessions"]}
        if not listed & set(sids):
            break
        time.sleep(0.01)
    else:
        raise AssertionError("idle sessions were never closed")

    assert all(client.get(f"/sessions/{sid}").status_code == 404 for sid in sids)
