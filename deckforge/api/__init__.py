"""
API Module - HTTP interface.

Exposes the engine via REST API.
A client:
1. Creates a game session (seats, bots, kingdom, seed)
2. Submits commands and answers pending choices
3. Polls the state or the event log
4. Lets bot seats act
5. Rewinds the log with an agreed undo

All state is session-scoped. No persistent user accounts required.
"""

from .schemas import (
    # Requests
    CreateSessionRequest,
    CommandRequest,
    RunBotsRequest,
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
)
from .service import APIService
from .app import create_app

__all__ = [
    # Requests
    "CreateSessionRequest",
    "CommandRequest",
    "RunBotsRequest",
    "UndoRequestBody",
    "UndoVoteRequest",
    # Responses
    "CardListResponse",
    "CommandResponse",
    "ErrorResponse",
    "EventListResponse",
    "GameStateResponse",
    "RunBotsResponse",
    "SessionResponse",
    "UndoResponse",
    # Shared
    "CardInfo",
    "EventInfo",
    "PendingChoiceInfo",
    "PlayerInfo",
    # Service
    "APIService",
    "create_app",
]
