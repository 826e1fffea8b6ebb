"""
Tests for sessions and the bot game loop.

Tests:
- Session creation and validation
- Command execution and the event log
- Bot driving and waiting for humans
- Cleanup
"""

import pytest

from ..bots import BigMoneyPolicy
from ..cards.catalog import DEFAULT_KINGDOM
from ..engine_core.command import Command
from ..engine_core.events import EventType, format_event_id
from ..engine_core.projector import project
from ..engine_core.state import Phase
from ..session import GameLoop, LoopState, Session, SessionError, SessionManager, SessionState, UndoStatus


@pytest.fixture
def manager():
    return SessionManager()


class TestCreateSession:
    """Tests for SessionManager.create_session."""

    def test_creates_started_game(self, manager):
        session = manager.create_session(["alice", "bob"], kingdom_cards=DEFAULT_KINGDOM, seed=1)
        assert session.game_state.is_started
        assert session.state == SessionState.ACTIVE
        assert session.acting_player == "alice"
        assert manager.get_session(session.session_id) is session
        assert session.events

    def test_bad_player_count(self, manager):
        with pytest.raises(SessionError) as excinfo:
            manager.create_session(["alice"], seed=1)
        assert excinfo.value.error_code == "INVALID_SETUP"
        assert manager.list_sessions() == []

    def test_bot_seat_must_exist(self, manager):
        with pytest.raises(SessionError):
            manager.create_session(["alice", "bob"], bots={"carol": "random"})

    def test_unknown_policy(self, manager):
        with pytest.raises(SessionError):
            manager.create_session(["alice", "bob"], bots={"bob": "genius"})


class TestExecute:
    """Tests for Session.execute and the log."""

    def test_success_appends_events(self, manager):
        session = manager.create_session(["alice", "bob"], kingdom_cards=DEFAULT_KINGDOM, seed=1)
        before = len(session.events)
        result = session.execute(Command.end_phase("alice"))
        assert result.success
        assert len(session.events) == before + len(result.events)
        assert session.replay() == session.game_state

    def test_failure_leaves_log_alone(self, manager):
        session = manager.create_session(["alice", "bob"], kingdom_cards=DEFAULT_KINGDOM, seed=1)
        before = list(session.events)
        result = session.execute(Command.end_phase("bob"))
        assert not result.success
        assert session.events == before

    def test_events_since(self, manager):
        session = manager.create_session(["alice", "bob"], kingdom_cards=DEFAULT_KINGDOM, seed=1)
        count = len(session.events)
        session.execute(Command.end_phase("alice"))
        assert session.events_since(count)[0].type.value == "PHASE_CHANGED"
        assert session.events_since(-5) == session.events


class TestGameLoop:
    """Tests for driving bot seats."""

    def test_waits_for_human(self, manager):
        session = manager.create_session(
            ["alice", "bot"], bots={"bot": "big_money"}, kingdom_cards=DEFAULT_KINGDOM, seed=2
        )
        result = GameLoop(session).run_bots()
        assert result.loop_state == LoopState.WAITING_HUMAN
        assert result.steps == 0

    def test_bot_plays_its_turn(self, manager):
        session = manager.create_session(
            ["alice", "bot"], bots={"bot": "big_money"}, kingdom_cards=DEFAULT_KINGDOM, seed=2
        )
        session.execute(Command.end_phase("alice"))
        session.execute(Command.end_phase("alice"))
        result = GameLoop(session).run_bots()
        assert result.loop_state == LoopState.WAITING_HUMAN
        assert result.steps > 0
        assert session.acting_player == "alice"
        assert session.game_state.turn == 3

    def test_bot_answers_attack(self, make_state):
        """A bot seat answers a choice put to it during a human's turn."""
        state = make_state(
            players=("alice", "bot"),
            hands={"alice": ["Militia"], "bot": ["Copper"] * 5},
        )
        session = Session(
            session_id="s-1",
            players=["alice", "bot"],
            created_at=0.0,
            game_state=state,
            bots={"bot": BigMoneyPolicy()},
        )

        session.execute(Command.play_action("alice", "Militia"))
        assert session.acting_player == "bot"
        result = GameLoop(session).run_bots()
        assert result.loop_state == LoopState.WAITING_HUMAN
        assert len(session.game_state.get_player("bot").hand) == 3
        assert session.acting_player == "alice"

    def test_step_limit(self, manager):
        session = manager.create_session(
            ["b1", "b2"], bots={"b1": "big_money", "b2": "big_money"}, seed=3
        )
        result = GameLoop(session).run_bots(max_steps=5)
        assert result.loop_state == LoopState.STEP_LIMIT
        assert result.steps == 5
        assert len(result.commands) == 5

    def test_all_bots_finish(self, manager):
        session = manager.create_session(
            ["b1", "b2"], bots={"b1": "big_money", "b2": "big_money"},
            kingdom_cards=DEFAULT_KINGDOM, seed=3,
        )
        result = GameLoop(session).run_bots()
        assert result.loop_state == LoopState.GAME_OVER
        assert result.winner == session.game_state.winner
        assert session.state == SessionState.GAME_OVER
        assert GameLoop(session).next_bot_command() is None


class TestLifecycle:
    """Tests for ending and cleaning up sessions."""

    def test_end_session(self, manager):
        session = manager.create_session(["alice", "bob"], seed=1)
        assert manager.end_session(session.session_id, reason="abandoned")
        assert session.state == SessionState.ABANDONED
        assert manager.get_session(session.session_id) is None
        assert not manager.end_session(session.session_id)

    def test_cleanup_only_finished(self, manager):
        live = manager.create_session(["alice", "bob"], seed=1)
        done = manager.create_session(["b1", "b2"], bots={"b1": "big_money", "b2": "big_money"}, seed=1)
        GameLoop(done).run_bots()
        live.created_at -= 10_000
        done.created_at -= 10_000

        removed = manager.cleanup_stale_sessions(max_age_seconds=60)
        assert removed == 1
        assert manager.list_active_sessions() == [live.session_id]


class TestTimeTravel:
    """Tests for state_at and undo_to."""

    @pytest.fixture
    def session(self, manager):
        return manager.create_session(["alice", "bob"], kingdom_cards=DEFAULT_KINGDOM, seed=1)

    def test_state_at_earlier_event(self, session):
        setup = len(session.events)
        session.execute(Command.end_phase("alice"))

        earlier = session.state_at(session.events[setup - 1].id)
        assert earlier.phase == Phase.ACTION
        assert earlier == project(session.events[:setup])
        assert session.game_state.phase == Phase.BUY

    def test_state_at_unknown_event(self, session):
        with pytest.raises(SessionError) as excinfo:
            session.state_at("evt-999")
        assert excinfo.value.error_code == "EVENT_NOT_FOUND"

    def test_undo_keeps_causal_chain(self, session):
        """Undoing to a cleanup keeps the turn handover it caused."""
        session.execute(Command.end_phase("alice"))
        cleanup = session.execute(Command.end_phase("alice"))
        kept = len(session.events)
        session.execute(Command.end_phase("bob"))

        removed = session.undo_to(cleanup.events[0].id)

        assert [e.type for e in removed] == [EventType.PHASE_CHANGED]
        assert len(session.events) == kept
        assert session.game_state.active_player == "bob"
        assert session.game_state.phase == Phase.ACTION
        assert session.replay() == session.game_state

    def test_ids_continue_after_undo(self, session):
        session.execute(Command.end_phase("alice"))
        setup_root = session.events[0].id
        session.undo_to(setup_root)
        kept = len(session.events)

        result = session.execute(Command.end_phase("alice"))
        assert result.success
        assert result.events[0].id == format_event_id(kept + 1)

    def test_undo_unknown_event_changes_nothing(self, session):
        before = list(session.events)
        with pytest.raises(SessionError):
            session.undo_to("evt-999")
        assert session.events == before


class TestUndoRequests:
    """Tests for the approve/deny flow."""

    @pytest.fixture
    def session(self, manager):
        session = manager.create_session(["alice", "bob"], kingdom_cards=DEFAULT_KINGDOM, seed=1)
        session.execute(Command.end_phase("alice"))
        return session

    def test_runs_at_once_without_other_humans(self, manager):
        session = manager.create_session(
            ["alice", "bot"], bots={"bot": "big_money"}, kingdom_cards=DEFAULT_KINGDOM, seed=1
        )
        session.execute(Command.end_phase("alice"))

        request = session.request_undo("alice", session.events[0].id)
        assert request.status == UndoStatus.EXECUTED
        assert request.removed_events == 1
        assert session.pending_undo is None
        assert session.game_state.phase == Phase.ACTION

    def test_needs_every_other_human(self, session):
        before = list(session.events)
        request = session.request_undo("alice", session.events[0].id, reason="misclick")
        assert request.status == UndoStatus.PENDING
        assert request.needed == {"bob"}
        assert session.events == before

        with pytest.raises(SessionError):
            session.approve_undo("alice", request.request_id)

        session.approve_undo("bob", request.request_id)
        assert request.status == UndoStatus.EXECUTED
        assert session.pending_undo is None
        assert session.game_state.phase == Phase.ACTION

    def test_deny(self, session):
        before = list(session.events)
        request = session.request_undo("alice", session.events[0].id)
        session.deny_undo("bob", request.request_id)

        assert request.status == UndoStatus.DENIED
        assert session.events == before
        assert session.pending_undo is None
        assert session.request_undo("alice", session.events[0].id).status == UndoStatus.PENDING

    def test_one_request_at_a_time(self, session):
        request = session.request_undo("alice", session.events[0].id)
        with pytest.raises(SessionError):
            session.request_undo("bob", session.events[0].id)
        with pytest.raises(SessionError):
            session.approve_undo("bob", "other-request")
        assert session.pending_undo is request

    def test_rejects_strangers_and_missing_events(self, session):
        with pytest.raises(SessionError):
            session.request_undo("mallory", session.events[0].id)
        with pytest.raises(SessionError) as excinfo:
            session.request_undo("alice", "evt-999")
        assert excinfo.value.error_code == "EVENT_NOT_FOUND"
        assert session.pending_undo is None
