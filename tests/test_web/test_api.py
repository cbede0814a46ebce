"""Tests for the web API, driven through FastAPI's TestClient."""

import pytest
from fastapi.testclient import TestClient
from starlette.websockets import WebSocketDisconnect

from web.api import app


@pytest.fixture
def client():
    with TestClient(app) as test_client:
        yield test_client


def create_game(client, **body):
    response = client.post("/api/games", json={"seed": 7, **body})
    assert response.status_code == 200
    return response.json()


def act(client, game_id, state):
    """Answer whatever the human seat is being asked for with the first legal choice."""
    pending = state["pending"]
    if pending["kind"] == "pass":
        return client.post(f"/api/games/{game_id}/pass", json={"cards": pending["legal"][:3]})
    return client.post(f"/api/games/{game_id}/play", json={"card": pending["legal"][0]})


class TestMeta:
    def test_health(self, client):
        assert client.get("/health").json() == {"status": "healthy"}

    def test_strategies(self, client):
        names = {s["name"] for s in client.get("/api/strategies").json()}
        assert names == {"simple", "team", "probabilistic", "random"}


class TestGames:
    def test_create_game_waits_for_pass(self, client):
        data = create_game(client, strategy="team")
        state = data["state"]
        assert state["round_number"] == 1
        assert state["phase"] == "PASSING"
        assert state["pending"]["kind"] == "pass"
        assert state["pending"]["count"] == 3
        assert len(state["hand"]) == 13
        assert [p["hand_size"] for p in state["players"]] == [13, 13, 13, 13]
        assert state["players"][0]["is_human"]

    def test_unknown_strategy(self, client):
        response = client.post("/api/games", json={"strategy": "oracle"})
        assert response.status_code == 400

    def test_list_and_get(self, client):
        game_id = create_game(client)["game_id"]
        assert game_id in [g["id"] for g in client.get("/api/games").json()]
        assert client.get(f"/api/games/{game_id}").json()["state"]["game_id"] == game_id

    def test_unknown_game(self, client):
        assert client.get("/api/games/nope").status_code == 404
        assert client.post("/api/games/nope/play", json={"card": "2H"}).status_code == 404
        assert client.get("/api/games/nope/debug").status_code == 404

    def test_pass_then_play(self, client):
        data = create_game(client)
        game_id = data["game_id"]

        response = act(client, game_id, data["state"])
        assert response.status_code == 200
        state = response.json()["state"]
        assert state["phase"] in ("LEADING", "FOLLOWING")
        assert state["pending"]["kind"] == "card"
        assert len(state["hand"]) == 13
        assert state["current_turn"] == 0

    def test_play_round_to_completion(self, client):
        data = create_game(client, strategy="probabilistic")
        game_id, state = data["game_id"], data["state"]

        for _ in range(20):
            if state["round_number"] > 1 or state["is_game_over"]:
                break
            response = act(client, game_id, state)
            assert response.status_code == 200
            state = response.json()["state"]

        assert state["round_number"] == 2
        assert sum(p["score"] for p in state["players"]) == 36

    def test_wrong_selection_kind(self, client):
        data = create_game(client)
        response = client.post(f"/api/games/{data['game_id']}/play", json={"card": "2H"})
        assert response.status_code == 400

    def test_invalid_pass(self, client):
        data = create_game(client)
        game_id, hand = data["game_id"], data["state"]["pending"]["legal"]
        assert client.post(f"/api/games/{game_id}/pass", json={"cards": hand[:2]}).status_code == 400
        assert client.post(f"/api/games/{game_id}/pass", json={"cards": ["ZZ", "2H", "3H"]}).status_code == 400
        # The request is still open after a rejected submission.
        state = client.get(f"/api/games/{game_id}").json()["state"]
        assert state["pending"]["kind"] == "pass"

    def test_illegal_card(self, client):
        data = create_game(client)
        game_id = data["game_id"]
        state = act(client, game_id, data["state"]).json()["state"]
        illegal = [c["id"] for c in state["hand"] if c["id"] not in state["pending"]["legal"]]
        if illegal:
            response = client.post(f"/api/games/{game_id}/play", json={"card": illegal[0]})
            assert response.status_code == 400

    def test_debug_snapshot(self, client):
        game_id = create_game(client)["game_id"]
        first = client.get(f"/api/games/{game_id}/debug").json()
        second = client.get(f"/api/games/{game_id}/debug").json()
        assert first == second
        assert len(first["current_hands"]) == 4
        assert all(len(hand) == 13 for hand in first["current_hands"])
        assert first["card_tracker"]["tricks_played"] == 0

    def test_history_hides_other_hands(self, client):
        data = create_game(client)
        game_id = data["game_id"]
        act(client, game_id, data["state"])
        history = client.get(f"/api/games/{game_id}", params={"history": True}).json()["history"]
        updates = [e["data"] for e in history if e["type"] == "hand_updated"]
        assert updates
        for update in updates:
            assert ("hand" in update) == (update["seat"] == 0)

    def test_delete(self, client):
        game_id = create_game(client)["game_id"]
        assert client.delete(f"/api/games/{game_id}").json() == {"deleted": True}
        assert client.delete(f"/api/games/{game_id}").status_code == 404
        assert client.get(f"/api/games/{game_id}").status_code == 404


class TestWebSocket:
    def test_state_and_pass(self, client):
        game_id = create_game(client)["game_id"]
        with client.websocket_connect(f"/api/ws/game/{game_id}") as ws:
            first = ws.receive_json()
            assert first["type"] == "game_state"
            pending = first["state"]["pending"]
            assert pending["kind"] == "pass"

            ws.send_json({"type": "pass", "cards": pending["legal"][:3]})
            seen = []
            for _ in range(200):
                message = ws.receive_json()
                seen.append(message["type"])
                if message["type"] == "game_state":
                    break
            assert "pass_phase_complete" in seen
            assert message["state"]["pending"]["kind"] == "card"

    def test_errors(self, client):
        game_id = create_game(client)["game_id"]
        with client.websocket_connect(f"/api/ws/game/{game_id}") as ws:
            ws.receive_json()
            ws.send_json({"type": "dance"})
            assert ws.receive_json()["type"] == "error"
            ws.send_json({"type": "play", "card": "2H"})
            assert ws.receive_json()["type"] == "error"
            ws.send_json({"type": "get_state"})
            assert ws.receive_json()["type"] == "game_state"

    def test_unknown_game(self, client):
        with pytest.raises(WebSocketDisconnect):
            with client.websocket_connect("/api/ws/game/nope"):
                pass
