"""
Engine Core - Event model, projection and command handling.

The engine and anything that needs the card catalog (scoring, legal
command generation) are imported from their modules directly:

    from deckforge.engine_core.engine import CommandEngine, handle_command
"""

from .card_moves import create_draw_events, create_gain_events, reveal_top
from .command import Command, CommandResult, CommandType, ErrorCode
from .events import (
    EventBuilder,
    EventType,
    GameEvent,
    build_causal_forest,
    get_causal_chain,
    truncate_after_chain,
)
from .projector import apply_event, apply_events, project
from .state import Decision, GameState, PendingChoice, Phase, PlayerState

__all__ = [
    "Command",
    "CommandResult",
    "CommandType",
    "Decision",
    "ErrorCode",
    "EventBuilder",
    "EventType",
    "GameEvent",
    "GameState",
    "PendingChoice",
    "Phase",
    "PlayerState",
    "apply_event",
    "apply_events",
    "build_causal_forest",
    "create_draw_events",
    "create_gain_events",
    "get_causal_chain",
    "project",
    "reveal_top",
    "truncate_after_chain",
]
