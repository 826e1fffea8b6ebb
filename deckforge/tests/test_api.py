"""
Tests for API layer.

Tests:
- API service methods
- Request/response serialization
- Session lifecycle over HTTP
- Error handling
- Time travel and undo
"""

import pytest

from ..api.schemas import (
    CommandRequest,
    CreateSessionRequest,
    ErrorCode,
    ErrorResponse,
    SessionStatus,
    UndoRequestBody,
    UndoVoteRequest,
)
from ..api.service import APIService
from ..cards.catalog import CARDS, DEFAULT_KINGDOM
from ..config import Settings


class TestAPIService:
    """Tests for APIService."""

    @pytest.fixture
    def service(self):
        """Create a fresh API service."""
        return APIService()

    @pytest.fixture
    def session_id(self, service):
        request = CreateSessionRequest(players=["alice", "bob"], kingdom_cards=DEFAULT_KINGDOM, seed=5)
        return service.create_session(request).session_id

    def test_create_session(self, service):
        """Can create a session with a bot seat."""
        request = CreateSessionRequest(players=["alice", "bot"], bots={"bot": "big_money"}, seed=9)
        response = service.create_session(request)

        assert response.session_id is not None
        assert response.status == SessionStatus.ACTIVE
        assert response.players == ["alice", "bot"]
        assert response.bots == {"bot": "BigMoneyPolicy"}
        assert response.seed == 9
        assert len(response.kingdom_cards) == 8

    def test_create_invalid_session(self, service):
        """Bad setup comes back as an INVALID_SETUP error."""
        response = service.create_session(CreateSessionRequest(players=["alice"]))
        assert isinstance(response, ErrorResponse)
        assert response.error_code == ErrorCode.INVALID_SETUP.value

    def test_default_seed_from_settings(self):
        """The configured seed is used when the request has none."""
        service = APIService(settings=Settings(default_seed=123))
        response = service.create_session(CreateSessionRequest(players=["a", "b"]))
        assert response.seed == 123

    def test_get_nonexistent_session(self, service):
        """Getting nonexistent session returns error."""
        response = service.get_session("nonexistent-id")

        assert hasattr(response, "error")
        assert response.error_code == "SESSION_NOT_FOUND"

    def test_game_state(self, service, session_id):
        """The state response mirrors the projected state."""
        response = service.get_game_state(session_id)
        assert response.turn == 1
        assert response.phase == "action"
        assert response.active_player == "alice"
        assert len(response.players) == 2
        assert response.players[0].is_current_turn
        assert len(response.players[0].hand) == 5
        assert response.players[0].victory_points == 3
        assert response.pending_choice is None

    def test_submit_command(self, service, session_id):
        """A legal command returns its events and the new state."""
        response = service.submit_command(
            session_id, CommandRequest(command_type="end_phase", player_id="alice")
        )
        assert response.success
        assert response.events[0].type == "PHASE_CHANGED"
        assert response.game_state.phase == "buy"

    def test_rejected_command(self, service, session_id):
        """Engine rejections carry the engine's code."""
        response = service.submit_command(
            session_id, CommandRequest(command_type="end_phase", player_id="bob")
        )
        assert isinstance(response, ErrorResponse)
        assert response.error_code == "NOT_YOUR_TURN"

    def test_unknown_command_type(self, service, session_id):
        response = service.submit_command(session_id, CommandRequest(command_type="cheat"))
        assert response.error_code == ErrorCode.INVALID_COMMAND.value

    def test_events_since(self, service, session_id):
        """Polling with since returns only new events."""
        total = service.get_events(session_id).total
        service.submit_command(session_id, CommandRequest(command_type="end_phase", player_id="alice"))
        response = service.get_events(session_id, since=total)
        assert response.total == total + 1
        assert [e.type for e in response.events] == ["PHASE_CHANGED"]

    def test_run_bots(self, service):
        """Bots play until the game ends."""
        request = CreateSessionRequest(
            players=["b1", "b2"], bots={"b1": "big_money", "b2": "big_money"}, seed=4
        )
        session_id = service.create_session(request).session_id
        response = service.run_bots(session_id, max_steps=20_000)
        assert response.success
        assert response.loop_state == "game_over"
        assert response.game_state.game_over
        assert response.game_state.winner in {"b1", "b2"}

    def test_list_cards(self, service):
        response = service.list_cards()
        assert response.count == len(CARDS)
        gardens = next(card for card in response.cards if card.name == "Gardens")
        assert gardens.vp is None

    def test_end_and_list(self, service, session_id):
        assert session_id in service.list_sessions()
        assert service.end_session(session_id)
        assert session_id not in service.list_sessions()
    def test_create_drops_stale_sessions(self):
        """Creating a session clears finished sessions past the TTL."""
        service = APIService(settings=Settings(session_ttl_seconds=60))
        request = CreateSessionRequest(
            players=["b1", "b2"], bots={"b1": "big_money", "b2": "big_money"}, seed=4
        )
        old_id = service.create_session(request).session_id
        assert service.run_bots(old_id, max_steps=20_000).game_state.game_over
        service.session_manager.get_session(old_id).created_at -= 10_000

        service.create_session(CreateSessionRequest(players=["alice", "bob"], seed=1))
        assert service.session_manager.get_session(old_id) is None

    def test_state_at_event(self, service, session_id):
        service.submit_command(session_id, CommandRequest(command_type="end_phase", player_id="alice"))
        response = service.get_state_at(session_id, "evt-1")
        assert response.phase == "action"
        assert response.event_count == 1
        assert service.get_game_state(session_id).phase == "buy"

        missing = service.get_state_at(session_id, "evt-999")
        assert missing.error_code == ErrorCode.EVENT_NOT_FOUND.value

    def test_undo_needs_approval(self, service, session_id):
        """With two humans the undo waits for the other seat."""
        total = service.get_events(session_id).total
        service.submit_command(session_id, CommandRequest(command_type="end_phase", player_id="alice"))

        pending = service.request_undo(
            session_id, UndoRequestBody(player_id="alice", to_event_id="evt-1", reason="misclick")
        )
        assert pending.status == "pending"
        assert pending.needed == ["bob"]
        assert pending.game_state.phase == "buy"

        done = service.approve_undo(session_id, pending.request_id, UndoVoteRequest(player_id="bob"))
        assert done.status == "executed"
        assert done.removed_events == 1
        assert done.game_state.phase == "action"
        assert service.get_events(session_id).total == total

    def test_undo_denied(self, service, session_id):
        service.submit_command(session_id, CommandRequest(command_type="end_phase", player_id="alice"))
        pending = service.request_undo(session_id, UndoRequestBody(player_id="alice", to_event_id="evt-1"))

        denied = service.deny_undo(session_id, pending.request_id, UndoVoteRequest(player_id="bob"))
        assert denied.status == "denied"
        assert denied.game_state.phase == "buy"

        again = service.approve_undo(session_id, pending.request_id, UndoVoteRequest(player_id="bob"))
        assert again.error_code == ErrorCode.UNDO_REJECTED.value


class TestHTTP:
    """Tests for the FastAPI routes."""

    @pytest.fixture
    def client(self):
        from fastapi.testclient import TestClient

        from ..api.app import create_app

        return TestClient(create_app(service=APIService(), settings=Settings()))

    @pytest.fixture
    def session_id(self, client):
        response = client.post(
            "/api/v1/sessions",
            json={"players": ["alice", "bob"], "kingdom_cards": DEFAULT_KINGDOM, "seed": 5},
        )
        assert response.status_code == 200
        return response.json()["session_id"]

    def test_health(self, client):
        response = client.get("/api/v1/health")
        assert response.status_code == 200
        assert response.json()["status"] == "healthy"

    def test_cards(self, client):
        response = client.get("/api/v1/cards")
        assert response.json()["count"] == len(CARDS)

    def test_bad_setup_is_400(self, client):
        response = client.post("/api/v1/sessions", json={"players": ["solo"]})
        assert response.status_code == 400
        assert response.json()["error_code"] == "INVALID_SETUP"

    def test_missing_session_is_404(self, client):
        assert client.get("/api/v1/sessions/nope").status_code == 404
        assert client.get("/api/v1/sessions/nope/state").status_code == 404
        assert client.delete("/api/v1/sessions/nope").status_code == 404

    def test_play_a_turn(self, client, session_id):
        """End both phases and see the turn pass."""
        for _ in range(2):
            response = client.post(
                f"/api/v1/sessions/{session_id}/commands",
                json={"command_type": "end_phase", "player_id": "alice"},
            )
            assert response.status_code == 200
        state = client.get(f"/api/v1/sessions/{session_id}/state").json()
        assert state["active_player"] == "bob"
        assert state["turn"] == 2

    def test_rejected_command_is_400(self, client, session_id):
        response = client.post(
            f"/api/v1/sessions/{session_id}/commands",
            json={"command_type": "buy_card", "player_id": "alice", "card": "Gold"},
        )
        assert response.status_code == 400
        assert response.json()["error_code"] == "WRONG_PHASE"

    def test_events_endpoint(self, client, session_id):
        events = client.get(f"/api/v1/sessions/{session_id}/events").json()
        assert events["events"][0]["type"] == "GAME_INITIALIZED"
        later = client.get(f"/api/v1/sessions/{session_id}/events", params={"since": events["total"]}).json()
        assert later["events"] == []
        assert client.get(f"/api/v1/sessions/{session_id}/events", params={"since": -1}).status_code == 422

    def test_run_bots_without_body(self, client, session_id):
        """With no bot seats the loop waits for a human straight away."""
        response = client.post(f"/api/v1/sessions/{session_id}/bots/run")
        assert response.status_code == 200
        assert response.json()["loop_state"] == "waiting_human"

    def test_delete(self, client, session_id):
        assert client.delete(f"/api/v1/sessions/{session_id}").json()["success"]
        assert client.get("/api/v1/sessions").json()["count"] == 0
    def test_state_at_endpoint(self, client, session_id):
        response = client.get(f"/api/v1/sessions/{session_id}/events/evt-1/state")
        assert response.status_code == 200
        assert response.json()["event_count"] == 1

        missing = client.get(f"/api/v1/sessions/{session_id}/events/evt-999/state")
        assert missing.status_code == 404
        assert missing.json()["error_code"] == "EVENT_NOT_FOUND"

    def test_undo_flow(self, client, session_id):
        """Request, approve, and see the phase rewound."""
        client.post(
            f"/api/v1/sessions/{session_id}/commands",
            json={"command_type": "end_phase", "player_id": "alice"},
        )
        request = client.post(
            f"/api/v1/sessions/{session_id}/undo",
            json={"player_id": "alice", "to_event_id": "evt-1"},
        )
        assert request.status_code == 200
        assert request.json()["status"] == "pending"
        request_id = request.json()["request_id"]

        wrong = client.post(
            f"/api/v1/sessions/{session_id}/undo/not-a-request/approve",
            json={"player_id": "bob"},
        )
        assert wrong.status_code == 400
        assert wrong.json()["error_code"] == "UNDO_REJECTED"

        approved = client.post(
            f"/api/v1/sessions/{session_id}/undo/{request_id}/approve",
            json={"player_id": "bob"},
        )
        assert approved.status_code == 200
        assert approved.json()["status"] == "executed"
        assert client.get(f"/api/v1/sessions/{session_id}/state").json()["phase"] == "action"

    def test_undo_deny_endpoint(self, client, session_id):
        request_id = client.post(
            f"/api/v1/sessions/{session_id}/undo",
            json={"player_id": "alice", "to_event_id": "evt-1"},
        ).json()["request_id"]
        denied = client.post(
            f"/api/v1/sessions/{session_id}/undo/{request_id}/deny",
            json={"player_id": "bob"},
        )
        assert denied.status_code == 200
        assert denied.json()["status"] == "denied"


class TestOpenAPISchema:
    """Tests for OpenAPI schema generation."""

    def test_response_models_in_schema(self):
        """Response models appear in OpenAPI schema."""
        from fastapi.openapi.utils import get_openapi

        from ..api.app import create_app

        app = create_app(service=APIService(), settings=Settings())
        schema = get_openapi(title=app.title, version=app.version, routes=app.routes)

        assert "/api/v1/sessions/{session_id}/commands" in schema["paths"]
        schemas = schema["components"]["schemas"]
        for name in ["SessionResponse", "GameStateResponse", "CommandResponse", "ErrorResponse"]:
            assert name in schemas, f"Missing schema: {name}"
