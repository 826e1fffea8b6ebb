"""
Pydantic Schemas for API - Request/response models for OpenAPI.

These models define the exact contract between clients and the engine.
All responses include explicit types for OpenAPI schema generation.

Error Codes:
- SESSION_NOT_FOUND: Session does not exist or has expired
- INVALID_SETUP: Players, bots or kingdom could not start a game
- INVALID_COMMAND: Command body could not be parsed
- EVENT_NOT_FOUND: No event with that id in the session log
- UNDO_REJECTED: Undo request, approval or denial not allowed
- VALIDATION_ERROR: Request failed validation
- INTERNAL_ERROR: Unexpected failure
- Any engine failure code (NOT_YOUR_TURN, WRONG_PHASE, ...) for rejected commands
"""

from enum import Enum
from typing import Optional, Any
from pydantic import BaseModel, Field


# =============================================================================
# Enums
# =============================================================================

class SessionStatus(str, Enum):
    """Session status values."""
    ACTIVE = "active"
    WAITING_DECISION = "waiting_decision"
    GAME_OVER = "game_over"
    ABANDONED = "abandoned"


class ErrorCode(str, Enum):
    """Structured error codes raised by the API layer itself."""
    SESSION_NOT_FOUND = "SESSION_NOT_FOUND"
    INVALID_SETUP = "INVALID_SETUP"
    INVALID_COMMAND = "INVALID_COMMAND"
    COMMAND_REJECTED = "COMMAND_REJECTED"
    EVENT_NOT_FOUND = "EVENT_NOT_FOUND"
    UNDO_REJECTED = "UNDO_REJECTED"
    VALIDATION_ERROR = "VALIDATION_ERROR"
    INTERNAL_ERROR = "INTERNAL_ERROR"


# =============================================================================
# Shared Models
# =============================================================================

class CardInfo(BaseModel):
    """A card definition from the catalog."""
    name: str
    cost: int
    types: list[str] = Field(default_factory=list)
    description: str = ""
    coins: int = 0
    vp: Optional[int] = Field(None, description="Null for cards scored by a rule (Gardens)")
    reaction_trigger: Optional[str] = None
    decision_stages: list[str] = Field(default_factory=list)

    model_config = {"from_attributes": True}


class PlayerInfo(BaseModel):
    """One player's zones."""
    player_id: str
    is_bot: bool = False
    is_current_turn: bool = False
    hand: list[str] = Field(default_factory=list)
    deck_count: int = 0
    discard: list[str] = Field(default_factory=list)
    in_play: list[str] = Field(default_factory=list)
    set_aside: list[str] = Field(default_factory=list)
    victory_points: int = 0

    model_config = {"from_attributes": True}


class PendingChoiceInfo(BaseModel):
    """A choice the game is waiting on."""
    player_id: str
    prompt: str
    card_options: list[str] = Field(default_factory=list)
    min_count: int = 0
    max_count: int = 0
    card_being_played: str = ""
    stage: str = ""
    from_zone: str = "hand"
    choice_type: str = Field("decision", description="decision or reaction")
    metadata: dict[str, Any] = Field(default_factory=dict)

    model_config = {"from_attributes": True}


class EventInfo(BaseModel):
    """A single event from the log."""
    id: Optional[str] = None
    type: str
    caused_by: Optional[str] = None
    payload: dict[str, Any] = Field(default_factory=dict)


# =============================================================================
# Request Models
# =============================================================================

class CreateSessionRequest(BaseModel):
    """Request to create a new game session."""
    players: list[str] = Field(..., description="Seat ids in turn order (2-4)")
    bots: dict[str, str] = Field(
        default_factory=dict,
        description="Seat id -> bot policy (random, first_legal, big_money)",
    )
    kingdom_cards: Optional[list[str]] = Field(
        None, description="Ten kingdom cards; random from the seed if omitted"
    )
    seed: Optional[int] = Field(None, description="Seed for reproducible games")


class CommandRequest(BaseModel):
    """A command for the engine."""
    command_type: str = Field(..., description="play_action, buy_card, submit_decision, ...")
    player_id: Optional[str] = None
    card: Optional[str] = None
    selection: list[str] = Field(default_factory=list)
    params: dict[str, Any] = Field(default_factory=dict)


class RunBotsRequest(BaseModel):
    """Request to drive bot seats."""
    max_steps: int = Field(1000, ge=1, le=100_000, description="Upper bound on bot commands")


class UndoRequestBody(BaseModel):
    """Request to rewind the log to an event's causal chain."""
    player_id: str
    to_event_id: str = Field(..., description="Keep this event and everything it caused")
    reason: Optional[str] = None


class UndoVoteRequest(BaseModel):
    """Approve or deny a pending undo."""
    player_id: str


# =============================================================================
# Response Models
# =============================================================================

class ErrorResponse(BaseModel):
    """Standard error response."""
    error: str = Field(..., description="Human-readable error message")
    error_code: str = Field(..., description="Machine-readable error code")
    details: Optional[dict[str, Any]] = Field(None, description="Additional error context")
    api_version: str = Field("v1", description="API version")


class SessionResponse(BaseModel):
    """Response containing session information."""
    session_id: str
    status: SessionStatus
    players: list[str] = Field(default_factory=list)
    bots: dict[str, str] = Field(default_factory=dict)
    acting_player: Optional[str] = None
    turn: int = 0
    kingdom_cards: list[str] = Field(default_factory=list)
    seed: int = 0
    created_at: float = 0.0
    api_version: str = "v1"


class GameStateResponse(BaseModel):
    """Complete projected game state."""
    session_id: str
    status: SessionStatus
    turn: int
    phase: str
    active_player: Optional[str] = None
    actions: int = 0
    buys: int = 0
    coins: int = 0
    supply: dict[str, int] = Field(default_factory=dict)
    kingdom_cards: list[str] = Field(default_factory=list)
    trash: list[str] = Field(default_factory=list)
    players: list[PlayerInfo] = Field(default_factory=list)
    pending_choice: Optional[PendingChoiceInfo] = None
    game_over: bool = False
    winner: Optional[str] = None
    scores: dict[str, int] = Field(default_factory=dict)
    end_reason: Optional[str] = None
    event_count: int = 0
    api_version: str = "v1"


class EventListResponse(BaseModel):
    """A slice of the event log."""
    session_id: str
    since: int = 0
    total: int = 0
    events: list[EventInfo] = Field(default_factory=list)


class CommandResponse(BaseModel):
    """Response after a successful command."""
    session_id: str
    success: bool = True
    events: list[EventInfo] = Field(default_factory=list)
    game_state: GameStateResponse
    api_version: str = "v1"


class RunBotsResponse(BaseModel):
    """Response after driving bot seats."""
    session_id: str
    success: bool
    loop_state: str = Field(..., description="waiting_human, game_over, step_limit or error")
    steps: int = 0
    commands: list[dict[str, Any]] = Field(default_factory=list)
    errors: list[str] = Field(default_factory=list)
    game_state: GameStateResponse
    api_version: str = "v1"


class UndoResponse(BaseModel):
    """Where an undo request stands, with the state after it."""
    session_id: str
    request_id: str
    status: str = Field(..., description="pending, executed or denied")
    by_player: str
    to_event_id: str
    needed: list[str] = Field(default_factory=list)
    approvals: list[str] = Field(default_factory=list)
    removed_events: int = 0
    game_state: GameStateResponse
    api_version: str = "v1"


class CardListResponse(BaseModel):
    """The card catalog."""
    cards: list[CardInfo]
    count: int


class SessionListResponse(BaseModel):
    """Response listing active sessions."""
    sessions: list[str]
    count: int


class EndSessionResponse(BaseModel):
    """Response after ending a session."""
    success: bool
    session_id: str


class HealthResponse(BaseModel):
    """Health check response."""
    status: str
    service: str
    version: str
