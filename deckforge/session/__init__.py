"""
Session Module - Manages in-memory game sessions.

A session represents one play-through of a game:
- Created when the host starts a game
- Owns the authoritative event log and its projected state
- Drives bot seats through GameLoop

Sessions are EPHEMERAL:
- No persistence to database
- State is always rebuilt from the event log
"""

from .manager import SessionManager, Session, SessionError, SessionState, UndoRequest, UndoStatus
from .game_loop import GameLoop, LoopState, TurnResult

__all__ = [
    "SessionManager",
    "Session",
    "SessionError",
    "SessionState",
    "UndoRequest",
    "UndoStatus",
    "GameLoop",
    "LoopState",
    "TurnResult",
]
