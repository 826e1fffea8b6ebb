"""
API Service - Business logic layer between API and engine.

The service:
1. Translates API requests to session and engine calls
2. Manages sessions and their bot loops
3. Formats responses for clients

This layer is framework-agnostic (can be used with FastAPI, Flask, etc.)
"""

from __future__ import annotations
import logging
from dataclasses import dataclass, field

from .schemas import (
    # Requests
    CreateSessionRequest,
    CommandRequest,
    UndoRequestBody,
    UndoVoteRequest,
    # Responses
    CardListResponse,
    CommandResponse,
    ErrorResponse,
    EventListResponse,
    GameStateResponse,
    RunBotsResponse,
    SessionResponse,
    UndoResponse,
    # Shared
    CardInfo,
    EventInfo,
    PendingChoiceInfo,
    PlayerInfo,
    # Enums
    ErrorCode,
    SessionStatus,
)
from ..cards.catalog import CARDS
from ..config import Settings
from ..engine_core.command import Command
from ..engine_core.events import GameEvent
from ..engine_core.scoring import count_vp
from ..engine_core.state import GameState
from ..session import GameLoop, Session, SessionError, SessionManager, UndoRequest

logger = logging.getLogger(__name__)


def _not_found(session_id: str) -> ErrorResponse:
    return ErrorResponse(
        error=f"Session {session_id} not found",
        error_code=ErrorCode.SESSION_NOT_FOUND.value,
    )


@dataclass
class APIService:
    """
    Main API service.

    Usage:
        service = APIService()

        # Create session
        session_response = service.create_session(request)

        # Play
        command_response = service.submit_command(session_id, command_request)

        # Let bots act
        bots_response = service.run_bots(session_id)
    """
    session_manager: SessionManager = field(default_factory=SessionManager)
    settings: Settings = field(default_factory=Settings)

    def list_cards(self) -> CardListResponse:
        """The full card catalog."""
        cards = [CardInfo.model_validate(card.to_dict()) for card in CARDS.values()]
        return CardListResponse(cards=cards, count=len(cards))

    def create_session(self, request: CreateSessionRequest) -> SessionResponse | ErrorResponse:
        """
        Create a new game session and start its game.

        Finished sessions past the configured TTL are dropped first.
        """
        self.cleanup()
        seed = request.seed if request.seed is not None else self.settings.default_seed
        try:
            session = self.session_manager.create_session(
                players=request.players,
                bots=request.bots,
                kingdom_cards=request.kingdom_cards,
                seed=seed,
            )
        except SessionError as e:
            return ErrorResponse(
                error=str(e),
                error_code=_code_value(e.error_code) or ErrorCode.INVALID_SETUP.value,
            )
        return self._session_to_response(session)

    def get_session(self, session_id: str) -> SessionResponse | ErrorResponse:
        """
        Get session status.
        """
        session = self.session_manager.get_session(session_id)
        if not session:
            return _not_found(session_id)
        return self._session_to_response(session)

    def get_game_state(self, session_id: str) -> GameStateResponse | ErrorResponse:
        """
        Get current game state.
        """
        session = self.session_manager.get_session(session_id)
        if not session:
            return _not_found(session_id)
        return self._build_game_state(session)

    def get_events(self, session_id: str, since: int = 0) -> EventListResponse | ErrorResponse:
        """
        Get the event log, optionally skipping the first `since` events.
        """
        session = self.session_manager.get_session(session_id)
        if not session:
            return _not_found(session_id)
        return EventListResponse(
            session_id=session_id,
            since=since,
            total=len(session.events),
            events=self._convert_events(session.events_since(since)),
        )

    def submit_command(
        self,
        session_id: str,
        request: CommandRequest,
    ) -> CommandResponse | ErrorResponse:
        """
        Run a command against the session's game.
        """
        session = self.session_manager.get_session(session_id)
        if not session:
            return _not_found(session_id)

        try:
            command = Command.from_dict(request.model_dump())
        except ValueError as e:
            return ErrorResponse(
                error=f"Unknown command type: {request.command_type}",
                error_code=ErrorCode.INVALID_COMMAND.value,
                details={"reason": str(e)},
            )

        result = session.execute(command)
        if not result.success:
            return ErrorResponse(
                error=result.error or "Command rejected",
                error_code=_code_value(result.error_code) or ErrorCode.COMMAND_REJECTED.value,
                details={"command": command.to_dict()},
            )

        return CommandResponse(
            session_id=session_id,
            events=self._convert_events(result.events),
            game_state=self._build_game_state(session),
        )

    def run_bots(self, session_id: str, max_steps: int = 1000) -> RunBotsResponse | ErrorResponse:
        """
        Drive bot seats until a human must act or the game ends.
        """
        session = self.session_manager.get_session(session_id)
        if not session:
            return _not_found(session_id)

        result = GameLoop(session).run_bots(max_steps=max_steps)
        return RunBotsResponse(
            session_id=session_id,
            success=result.success,
            loop_state=result.loop_state.value,
            steps=result.steps,
            commands=[command.to_dict() for command in result.commands],
            errors=result.errors,
            game_state=self._build_game_state(session),
        )

    def get_state_at(self, session_id: str, event_id: str) -> GameStateResponse | ErrorResponse:
        """
        Project the log up to and including one event.
        """
        session = self.session_manager.get_session(session_id)
        if not session:
            return _not_found(session_id)
        try:
            state = session.state_at(event_id)
        except SessionError as e:
            return _session_error(e)
        return self._build_game_state(session, state)

    def request_undo(self, session_id: str, request: UndoRequestBody) -> UndoResponse | ErrorResponse:
        """
        Ask to rewind to an event; runs at once if nobody has to approve.
        """
        session = self.session_manager.get_session(session_id)
        if not session:
            return _not_found(session_id)
        try:
            undo = session.request_undo(request.player_id, request.to_event_id, request.reason)
        except SessionError as e:
            return _session_error(e)
        return self._undo_to_response(session, undo)

    def approve_undo(
        self,
        session_id: str,
        request_id: str,
        request: UndoVoteRequest,
    ) -> UndoResponse | ErrorResponse:
        session = self.session_manager.get_session(session_id)
        if not session:
            return _not_found(session_id)
        try:
            undo = session.approve_undo(request.player_id, request_id)
        except SessionError as e:
            return _session_error(e)
        return self._undo_to_response(session, undo)

    def deny_undo(
        self,
        session_id: str,
        request_id: str,
        request: UndoVoteRequest,
    ) -> UndoResponse | ErrorResponse:
        session = self.session_manager.get_session(session_id)
        if not session:
            return _not_found(session_id)
        try:
            undo = session.deny_undo(request.player_id, request_id)
        except SessionError as e:
            return _session_error(e)
        return self._undo_to_response(session, undo)

    def end_session(self, session_id: str, reason: str = "user_ended") -> bool:
        """
        End a game session.
        """
        return self.session_manager.end_session(session_id, reason)

    def list_sessions(self) -> list[str]:
        """
        List active session IDs.
        """
        return self.session_manager.list_active_sessions()

    def cleanup(self) -> int:
        """Drop finished sessions older than the configured TTL."""
        removed = self.session_manager.cleanup_stale_sessions(self.settings.session_ttl_seconds)
        if removed:
            logger.info("Cleaned up %d stale sessions", removed)
        return removed

    # =========================================================================
    # Helper methods
    # =========================================================================

    def _session_to_response(self, session: Session) -> SessionResponse:
        """Convert Session to SessionResponse."""
        state = session.game_state
        return SessionResponse(
            session_id=session.session_id,
            status=SessionStatus(session.state.value),
            players=list(session.players),
            bots={seat: policy.get_name() for seat, policy in session.bots.items()},
            acting_player=session.acting_player,
            turn=state.turn,
            kingdom_cards=list(state.kingdom_cards),
            seed=state.seed,
            created_at=session.created_at,
        )

    def _build_game_state(self, session: Session, state: GameState | None = None) -> GameStateResponse:
        """Build complete game state response, for the live state unless one is given."""
        state = session.game_state if state is None else state
        players = []
        for player_id in state.player_order:
            player = state.players[player_id]
            players.append(
                PlayerInfo(
                    player_id=player_id,
                    is_bot=session.is_bot(player_id),
                    is_current_turn=player_id == state.active_player,
                    hand=list(player.hand),
                    deck_count=len(player.deck),
                    discard=list(player.discard),
                    in_play=list(player.in_play),
                    set_aside=list(player.set_aside),
                    victory_points=count_vp(player),
                )
            )

        pending = None
        if state.pending_choice is not None:
            pending = PendingChoiceInfo.model_validate(state.pending_choice.to_dict())

        return GameStateResponse(
            session_id=session.session_id,
            status=SessionStatus(session.state.value),
            turn=state.turn,
            phase=state.phase.value,
            active_player=state.active_player,
            actions=state.actions,
            buys=state.buys,
            coins=state.coins,
            supply=dict(state.supply),
            kingdom_cards=list(state.kingdom_cards),
            trash=list(state.trash),
            players=players,
            pending_choice=pending,
            game_over=state.game_over,
            winner=state.winner,
            scores=dict(state.scores),
            end_reason=state.end_reason,
            event_count=state.event_count,
        )

    def _undo_to_response(self, session: Session, undo: UndoRequest) -> UndoResponse:
        return UndoResponse(
            session_id=session.session_id,
            request_id=undo.request_id,
            status=undo.status.value,
            by_player=undo.by_player,
            to_event_id=undo.to_event_id,
            needed=sorted(undo.needed),
            approvals=sorted(undo.approvals),
            removed_events=undo.removed_events,
            game_state=self._build_game_state(session),
        )

    def _convert_events(self, events: list[GameEvent]) -> list[EventInfo]:
        """Convert engine events to EventInfo."""
        return [EventInfo(**event.to_dict()) for event in events]


def _session_error(error: SessionError) -> ErrorResponse:
    return ErrorResponse(
        error=str(error),
        error_code=_code_value(error.error_code) or ErrorCode.UNDO_REJECTED.value,
    )


def _code_value(code) -> str | None:
    if code is None:
        return None
    return getattr(code, "value", code)
