"""
Session Manager - Creates and manages game sessions.

LIFECYCLE:
1. Host creates a session: seats, bot policies, kingdom, seed
2. The session starts the game through the engine (start_game)
3. During the game:
   - Players submit commands
   - The engine validates and returns events
   - The session appends them to its log (single writer)
   - Bot seats are driven by GameLoop
4. Game ends -> session kept until cleanup or explicit end

PERSISTENCE RULES:
- Sessions are in-memory only
- The event log is the only source of truth; state is its projection
- Any participant can rebuild state by replaying the log
"""

from __future__ import annotations
import logging
import time
import uuid
from dataclasses import dataclass, field
from enum import Enum
from typing import Any

from ..bots import BotPolicy, make_policy
from ..engine_core.command import Command, CommandResult
from ..engine_core.engine import CommandEngine
from ..engine_core.events import GameEvent, truncate_after_chain
from ..engine_core.projector import apply_events, project
from ..engine_core.state import GameState

logger = logging.getLogger(__name__)


class SessionState(Enum):
    """State of a game session."""
    ACTIVE = "active"  # Waiting for a command
    WAITING_DECISION = "waiting_decision"  # A pending choice must be answered
    GAME_OVER = "game_over"  # Game completed
    ABANDONED = "abandoned"  # Ended by the host


class SessionError(Exception):
    """Raised when a session cannot be created or an undo is refused."""

    def __init__(self, message: str, error_code: str | None = None):
        self.error_code = error_code
        super().__init__(message)


class UndoStatus(Enum):
    """Where an undo request stands."""
    PENDING = "pending"  # Waiting for approvals
    EXECUTED = "executed"
    DENIED = "denied"


@dataclass
class UndoRequest:
    """
    A request to rewind the log to an event's causal chain.

    Every other human seat must approve; bot seats are not asked.
    """
    request_id: str
    by_player: str
    to_event_id: str
    needed: set[str]
    reason: str | None = None
    approvals: set[str] = field(default_factory=set)
    status: UndoStatus = UndoStatus.PENDING
    removed_events: int = 0


@dataclass
class Session:
    """
    One game and its authoritative event log.

    The session is the single writer: only execute() appends events,
    and game_state is always the projection of events.
    """
    session_id: str
    players: list[str]
    created_at: float
    engine: CommandEngine = field(default_factory=CommandEngine)
    events: list[GameEvent] = field(default_factory=list)
    game_state: GameState = field(default_factory=GameState)
    bots: dict[str, BotPolicy] = field(default_factory=dict)
    abandoned: bool = False
    pending_undo: UndoRequest | None = None
    metadata: dict[str, Any] = field(default_factory=dict)

    @property
    def state(self) -> SessionState:
        if self.abandoned:
            return SessionState.ABANDONED
        if self.game_state.game_over:
            return SessionState.GAME_OVER
        if self.game_state.pending_choice is not None:
            return SessionState.WAITING_DECISION
        return SessionState.ACTIVE

    def is_active(self) -> bool:
        """Check if session is still accepting commands."""
        return self.state in {SessionState.ACTIVE, SessionState.WAITING_DECISION}

    @property
    def acting_player(self) -> str | None:
        """The player the game is waiting on."""
        if self.game_state.pending_choice is not None:
            return self.game_state.pending_choice.player_id
        return self.game_state.active_player

    def is_bot(self, player_id: str | None) -> bool:
        return player_id in self.bots

    def execute(self, command: Command) -> CommandResult:
        """Run a command; on success append its events and advance the state."""
        result = self.engine.handle(self.game_state, command)
        if result.success:
            self.events.extend(result.events)
            self.game_state = apply_events(self.game_state, result.events)
        return result

    def replay(self) -> GameState:
        """Project the full log from scratch."""
        return project(self.events)

    def events_since(self, since: int = 0) -> list[GameEvent]:
        """Events after the first `since` events of the log."""
        return self.events[max(since, 0):]

    # =========================================================================
    # Time travel and undo
    # =========================================================================

    def _index_of(self, event_id: str) -> int:
        for index, event in enumerate(self.events):
            if event.id == event_id:
                return index
        raise SessionError(f"Event {event_id} not found", "EVENT_NOT_FOUND")

    def state_at(self, event_id: str) -> GameState:
        """The state right after event_id was applied."""
        return project(self.events[:self._index_of(event_id) + 1])

    def undo_to(self, event_id: str) -> list[GameEvent]:
        """
        Rewind the log to the end of event_id's causal chain.

        The event and everything it caused stay; later events are dropped
        and the state is re-projected. Returns the dropped events.
        """
        self._index_of(event_id)
        kept = truncate_after_chain(self.events, event_id)
        removed = self.events[len(kept):]
        self.events = kept
        self.game_state = project(kept)
        self.pending_undo = None
        logger.info(
            "Session %s undone to %s (%d events removed)",
            self.session_id, event_id, len(removed),
        )
        return removed

    def request_undo(self, player_id: str, to_event_id: str, reason: str | None = None) -> UndoRequest:
        """
        Ask to undo to an event.

        Runs at once when no other human seat has to approve.
        """
        if player_id not in self.players:
            raise SessionError(f"{player_id} is not seated", "UNDO_REJECTED")
        if self.pending_undo is not None:
            raise SessionError("An undo request is already pending", "UNDO_REJECTED")
        self._index_of(to_event_id)

        request = UndoRequest(
            request_id=str(uuid.uuid4()),
            by_player=player_id,
            to_event_id=to_event_id,
            needed={p for p in self.players if p != player_id and not self.is_bot(p)},
            reason=reason,
        )
        self.pending_undo = request
        if not request.needed:
            self._execute_undo(request)
        return request

    def approve_undo(self, player_id: str, request_id: str) -> UndoRequest:
        """Record an approval; the undo runs once every needed seat approves."""
        request = self._pending_request(request_id)
        if player_id not in request.needed:
            raise SessionError(f"{player_id} cannot approve this undo", "UNDO_REJECTED")
        request.approvals.add(player_id)
        if request.approvals >= request.needed:
            self._execute_undo(request)
        return request

    def deny_undo(self, player_id: str, request_id: str) -> UndoRequest:
        request = self._pending_request(request_id)
        if player_id not in request.needed:
            raise SessionError(f"{player_id} cannot deny this undo", "UNDO_REJECTED")
        request.status = UndoStatus.DENIED
        self.pending_undo = None
        return request

    def _pending_request(self, request_id: str) -> UndoRequest:
        if self.pending_undo is None:
            raise SessionError("No undo request is pending", "UNDO_REJECTED")
        if self.pending_undo.request_id != request_id:
            raise SessionError(f"Undo request {request_id} is not pending", "UNDO_REJECTED")
        return self.pending_undo

    def _execute_undo(self, request: UndoRequest) -> None:
        request.removed_events = len(self.undo_to(request.to_event_id))
        request.status = UndoStatus.EXECUTED


class SessionManager:
    """
    Manages game sessions.

    Responsibilities:
    - Create sessions and start their games
    - Track active sessions
    - Clean up finished sessions

    No persistence - sessions are in-memory only.
    """

    def __init__(self, engine: CommandEngine | None = None):
        self._sessions: dict[str, Session] = {}
        self._engine = engine or CommandEngine()

    def create_session(
        self,
        players: list[str],
        bots: dict[str, str] | None = None,
        kingdom_cards: list[str] | None = None,
        seed: int | None = None,
    ) -> Session:
        """
        Create a session and start its game.

        Args:
            players: Seat ids in turn order
            bots: Seat id -> policy name for automated seats
            kingdom_cards: Kingdom to use (random from seed if omitted)
            seed: Game seed (random if omitted)

        Raises:
            SessionError: if a bot seat is unknown or the game cannot start
        """
        bots = bots or {}
        unknown = [seat for seat in bots if seat not in players]
        if unknown:
            raise SessionError(f"Bot seats not in players: {unknown}", "INVALID_SETUP")
        try:
            policies = {
                seat: make_policy(name, seed=None if seed is None else seed + index)
                for index, (seat, name) in enumerate(bots.items())
            }
        except ValueError as e:
            raise SessionError(str(e), "INVALID_SETUP") from e

        session = Session(
            session_id=str(uuid.uuid4()),
            players=list(players),
            created_at=time.time(),
            engine=self._engine,
            bots=policies,
        )
        result = session.execute(Command.start_game(players, kingdom_cards, seed))
        if not result.success:
            raise SessionError(result.error or "Could not start game", result.error_code)

        self._sessions[session.session_id] = session
        logger.info("Session %s created for %s", session.session_id, players)
        return session

    def get_session(self, session_id: str) -> Session | None:
        """Get a session by ID."""
        return self._sessions.get(session_id)

    def end_session(self, session_id: str, reason: str = "completed") -> bool:
        """
        End a session and remove it from memory.

        Returns True if the session existed.
        """
        session = self._sessions.pop(session_id, None)
        if session is None:
            return False
        if reason != "completed":
            session.abandoned = True
        logger.info("Session %s ended (%s)", session_id, reason)
        return True

    def list_sessions(self) -> list[Session]:
        return list(self._sessions.values())

    def list_active_sessions(self) -> list[str]:
        """List IDs of active sessions."""
        return [sid for sid, session in self._sessions.items() if session.is_active()]

    def cleanup_stale_sessions(self, max_age_seconds: int = 3600) -> int:
        """
        Remove finished sessions older than max_age.

        Returns the number of sessions removed.
        """
        now = time.time()
        stale = [
            sid for sid, session in self._sessions.items()
            if now - session.created_at > max_age_seconds and not session.is_active()
        ]
        for sid in stale:
            self.end_session(sid, reason="stale")
        return len(stale)
