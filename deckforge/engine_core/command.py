"""
Command System - Commands, results and error codes.

Commands are the only way callers ask for change:
1. Setup (start_game)
2. Turn actions (play, buy, end phase)
3. Answers to pending choices (submit_decision, reactions)

A command either succeeds with the events it produced, or fails with
a structured error and produces nothing.
"""

from __future__ import annotations
from dataclasses import dataclass, field
from enum import Enum
from typing import Any

from .events import GameEvent


class CommandType(Enum):
    """Types of commands accepted by the engine."""
    START_GAME = "start_game"
    PLAY_ACTION = "play_action"
    PLAY_TREASURE = "play_treasure"
    PLAY_ALL_TREASURES = "play_all_treasures"
    UNPLAY_TREASURE = "unplay_treasure"
    BUY_CARD = "buy_card"
    END_PHASE = "end_phase"
    SUBMIT_DECISION = "submit_decision"
    REVEAL_REACTION = "reveal_reaction"
    DECLINE_REACTION = "decline_reaction"


class ErrorCode(str, Enum):
    """Machine-readable failure codes."""
    GAME_NOT_STARTED = "GAME_NOT_STARTED"
    GAME_ALREADY_STARTED = "GAME_ALREADY_STARTED"
    GAME_OVER = "GAME_OVER"
    NOT_YOUR_TURN = "NOT_YOUR_TURN"
    WRONG_PHASE = "WRONG_PHASE"
    NO_ACTIONS = "NO_ACTIONS"
    NO_BUYS = "NO_BUYS"
    INSUFFICIENT_COINS = "INSUFFICIENT_COINS"
    CARD_NOT_IN_HAND = "CARD_NOT_IN_HAND"
    CARD_NOT_IN_PLAY = "CARD_NOT_IN_PLAY"
    NOT_AN_ACTION = "NOT_AN_ACTION"
    NOT_A_TREASURE = "NOT_A_TREASURE"
    UNKNOWN_CARD = "UNKNOWN_CARD"
    SUPPLY_EMPTY = "SUPPLY_EMPTY"
    DECISION_PENDING = "DECISION_PENDING"
    NO_PENDING_DECISION = "NO_PENDING_DECISION"
    INVALID_DECISION = "INVALID_DECISION"
    PURCHASES_MADE = "PURCHASES_MADE"
    INVALID_SETUP = "INVALID_SETUP"
    HANDLER_ERROR = "HANDLER_ERROR"


@dataclass
class Command:
    """
    A request from a player (or the host, for start_game).

    card is used by play/buy commands, selection by decision answers.
    Setup parameters travel in params.
    """
    command_type: CommandType
    player_id: str | None = None
    card: str | None = None
    selection: list[str] = field(default_factory=list)
    params: dict[str, Any] = field(default_factory=dict)

    @classmethod
    def start_game(
        cls,
        players: list[str],
        kingdom_cards: list[str] | None = None,
        seed: int | None = None,
    ) -> Command:
        """Factory for game setup."""
        return cls(
            command_type=CommandType.START_GAME,
            params={"players": list(players), "kingdom_cards": kingdom_cards, "seed": seed},
        )

    @classmethod
    def play_action(cls, player_id: str, card: str) -> Command:
        return cls(command_type=CommandType.PLAY_ACTION, player_id=player_id, card=card)

    @classmethod
    def play_treasure(cls, player_id: str, card: str) -> Command:
        return cls(command_type=CommandType.PLAY_TREASURE, player_id=player_id, card=card)

    @classmethod
    def play_all_treasures(cls, player_id: str) -> Command:
        return cls(command_type=CommandType.PLAY_ALL_TREASURES, player_id=player_id)

    @classmethod
    def unplay_treasure(cls, player_id: str, card: str) -> Command:
        return cls(command_type=CommandType.UNPLAY_TREASURE, player_id=player_id, card=card)

    @classmethod
    def buy_card(cls, player_id: str, card: str) -> Command:
        return cls(command_type=CommandType.BUY_CARD, player_id=player_id, card=card)

    @classmethod
    def end_phase(cls, player_id: str) -> Command:
        return cls(command_type=CommandType.END_PHASE, player_id=player_id)

    @classmethod
    def submit_decision(cls, player_id: str, selection: list[str]) -> Command:
        """Factory for an answer to the pending choice."""
        return cls(
            command_type=CommandType.SUBMIT_DECISION,
            player_id=player_id,
            selection=list(selection),
        )

    @classmethod
    def reveal_reaction(cls, player_id: str, card: str) -> Command:
        return cls(command_type=CommandType.REVEAL_REACTION, player_id=player_id, card=card)

    @classmethod
    def decline_reaction(cls, player_id: str) -> Command:
        return cls(command_type=CommandType.DECLINE_REACTION, player_id=player_id)

    def to_dict(self) -> dict[str, Any]:
        return {
            "command_type": self.command_type.value,
            "player_id": self.player_id,
            "card": self.card,
            "selection": list(self.selection),
            "params": dict(self.params),
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> Command:
        """Parse a command; an unknown command type raises ValueError."""
        return cls(
            command_type=CommandType(data["command_type"]),
            player_id=data.get("player_id"),
            card=data.get("card"),
            selection=list(data.get("selection") or []),
            params=dict(data.get("params") or {}),
        )


@dataclass
class CommandResult:
    """
    Result of handling a command.

    Contains:
    - Whether the command succeeded
    - The stamped events it produced (empty on failure)
    - The state after those events
    - Error message and code (if failed)
    """
    success: bool
    events: list[GameEvent] = field(default_factory=list)
    new_state: Any | None = None  # GameState
    error: str | None = None
    error_code: ErrorCode | None = None

    @property
    def pending_choice(self):
        return self.new_state.pending_choice if self.new_state is not None else None

    @classmethod
    def failure(cls, error: str, error_code: ErrorCode | None = None) -> CommandResult:
        """Create a failure result."""
        return cls(success=False, error=error, error_code=error_code)

    @classmethod
    def success_with_events(cls, events: list[GameEvent], state: Any) -> CommandResult:
        """Create a success result with events and the resulting state."""
        return cls(success=True, events=list(events), new_state=state)
