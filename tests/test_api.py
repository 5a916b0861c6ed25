"""Tests for the FastAPI state authority.

WHY: The HTTP routes and the /cable WebSocket are the only way other
processes reach the session. A route that silently drops a command, or
a malformed message that kills the socket, takes a whole venue's
renderers out of sync.

HOW: Starlette's TestClient drives the app without running the lifespan,
so no background tick loop competes with the test. Each test gets a
fresh session and hub patched into the app module; ticks are driven
explicitly.

RULES:
- Never use TestClient as a context manager (that would start the tick loop)
- WebSocket tests read the initial state record before sending anything
"""

from __future__ import annotations

import random

import pytest
from fastapi.testclient import TestClient

from word_barrage import __version__
from word_barrage.core.ir import ConversationalState
from word_barrage.core.session import BarrageSession
from word_barrage.server import app as app_module
from word_barrage.server.hub import ConnectionHub


@pytest.fixture
def api_session(monkeypatch, clock):
    session = BarrageSession(clock=clock, rng=random.Random(7))
    monkeypatch.setattr(app_module, "session", session)
    monkeypatch.setattr(app_module, "hub", ConnectionHub())
    return session


@pytest.fixture
def client(api_session):
    return TestClient(app_module.app)


# ---------------------------------------------------------------------------
# Health and observation
# ---------------------------------------------------------------------------


class TestObservation:
    def test_health(self, client):
        resp = client.get("/health")
        assert resp.status_code == 200
        assert resp.json() == {"status": "ok", "version": __version__, "clients": 0}

    def test_initial_state(self, client):
        assert client.get("/state").json() == {
            "state": "UNKNOWN",
            "tension": 0.0,
            "split_degree": 0.0,
        }

    def test_frame(self, client, api_session):
        api_session.spawn_word("hello")
        body = client.get("/frame").json()
        assert body["state"]["state"] == "UNKNOWN"
        assert len(body["particles"]) == 1
        particle = body["particles"][0]
        assert particle["text"] == "hello"
        assert particle["style"] == "normal"
        assert len(particle["color"]) == 4
        assert body["background"] == [10, 10, 10]
        assert body["flash_word"] is None
        assert body["silence_stage"] == 0


# ---------------------------------------------------------------------------
# Input and control
# ---------------------------------------------------------------------------


class TestInput:
    def test_utterance_accepted_and_processed(self, client, api_session):
        resp = client.post("/utterances", json={"text": "それは嘘だ"})
        assert resp.status_code == 202
        assert resp.json() == {"accepted": True}
        api_session.tick()
        body = client.get("/state").json()
        assert body["state"] == "ALIGNED"
        assert body["tension"] == pytest.approx(3.0)

    def test_empty_utterance_rejected(self, client):
        assert client.post("/utterances", json={"text": ""}).status_code == 422

    def test_missing_text_rejected(self, client):
        assert client.post("/utterances", json={}).status_code == 422

    def test_full_queue_reports_not_accepted(self, client):
        for i in range(10):
            client.post("/utterances", json={"text": "w{}".format(i)})
        assert client.post("/utterances", json={"text": "extra"}).json() == {"accepted": False}


class TestControl:
    def test_reset(self, client, api_session):
        client.post("/utterances", json={"text": "嘘"})
        api_session.tick()
        resp = client.post("/control/reset")
        assert resp.status_code == 200
        assert resp.json()["tension"] == 0.0
        assert len(api_session.simulator) == 0

    def test_flash_default_ttl(self, client, api_session):
        resp = client.post("/control/flash", json={"word": "嘘"})
        assert resp.status_code == 200
        assert resp.json() == {"word": "嘘", "ttl": 60}
        assert api_session.frame().flash_word == "嘘"

    def test_flash_custom_ttl(self, client):
        assert client.post("/control/flash", json={"word": "嘘", "ttl": 5}).json()["ttl"] == 5

    def test_flash_rejects_zero_ttl(self, client):
        assert client.post("/control/flash", json={"word": "嘘", "ttl": 0}).status_code == 422

    def test_spawn(self, client, api_session):
        resp = client.post("/control/spawn", json={"text": "沈黙", "style": "silence_heavy"})
        assert resp.status_code == 201
        assert api_session.frame().particles[0].style == "silence_heavy"

    def test_spawn_unknown_style_falls_back(self, client, api_session):
        resp = client.post("/control/spawn", json={"text": "x", "style": "sparkle", "color": "mauve"})
        assert resp.status_code == 201
        assert api_session.frame().particles[0].style == "normal"

    def test_spawn_rejects_negative_shake(self, client):
        assert client.post("/control/spawn", json={"text": "x", "shake": -1}).status_code == 422

    @pytest.mark.parametrize("body", [
        '{"text": "x", "vy": NaN}',
        '{"text": "x", "scale": Infinity}',
        '{"text": "x", "shake": -Infinity}',
    ])
    def test_spawn_rejects_non_finite(self, client, api_session, body):
        resp = client.post(
            "/control/spawn",
            content=body,
            headers={"Content-Type": "application/json"},
        )
        assert resp.status_code == 422
        assert len(api_session.simulator) == 0


# ---------------------------------------------------------------------------
# WebSocket
# ---------------------------------------------------------------------------


class TestCable:
    def test_state_sent_on_connect(self, client):
        with client.websocket_connect("/cable") as ws:
            assert ws.receive_json() == {
                "type": "state",
                "state": "UNKNOWN",
                "tension": 0.0,
                "split_degree": 0.0,
            }

    def test_flash_is_broadcast(self, client):
        with client.websocket_connect("/cable") as ws:
            ws.receive_json()
            ws.send_json({"type": "flash", "word": "間"})
            assert ws.receive_json() == {"type": "flash", "word": "間", "ttl": 60}

    def test_malformed_message_keeps_socket_open(self, client):
        with client.websocket_connect("/cable") as ws:
            ws.receive_json()
            ws.send_text("not json")
            ws.send_json({"type": "explode"})
            ws.send_json({"type": "flash", "word": "嘘"})
            assert ws.receive_json()["type"] == "flash"

    def test_state_overwrite_is_broadcast(self, client, api_session):
        with client.websocket_connect("/cable") as ws:
            ws.receive_json()
            ws.send_json({"type": "state", "state": "SPLIT", "tension": 9.0})
            body = ws.receive_json()
        assert body["type"] == "state"
        assert body["state"] == "SPLIT"
        assert api_session.state().tension == pytest.approx(9.0)

    def test_utterance_over_socket(self, client, api_session):
        with client.websocket_connect("/cable") as ws:
            ws.receive_json()
            ws.send_json({"type": "utterance", "text": "嘘"})
            # the flash reply proves the utterance before it was handled
            ws.send_json({"type": "flash", "word": "x"})
            ws.receive_json()
        assert api_session.tick().utterances == ["嘘"]

    def test_reset_over_socket(self, client, api_session):
        api_session.spawn_word("hello")
        with client.websocket_connect("/cable") as ws:
            ws.receive_json()
            ws.send_json({"type": "reset"})
            assert ws.receive_json()["tension"] == 0.0
        assert len(api_session.simulator) == 0


    def test_binary_frame_is_decoded(self, client):
        with client.websocket_connect("/cable") as ws:
            ws.receive_json()
            ws.send_bytes(b'{"type": "flash", "word": "x"}')
            assert ws.receive_json() == {"type": "flash", "word": "x", "ttl": 60}

    def test_undecodable_binary_frame_keeps_socket_open(self, client):
        with client.websocket_connect("/cable") as ws:
            ws.receive_json()
            ws.send_bytes(b"\x80\x81 not json")
            ws.send_json({"type": "flash", "word": "嘘"})
            assert ws.receive_json() == {"type": "flash", "word": "嘘", "ttl": 60}

    def test_non_finite_state_dropped(self, client, api_session):
        with client.websocket_connect("/cable") as ws:
            ws.receive_json()
            ws.send_text('{"type": "state", "state": "ALIGNED", "split_degree": NaN}')
            ws.send_json({"type": "flash", "word": "x"})
            assert ws.receive_json()["type"] == "flash"
        assert api_session.state().state == ConversationalState.UNKNOWN
