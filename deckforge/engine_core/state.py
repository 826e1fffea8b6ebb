"""
Game State - The projected snapshot of an event log.

Design principles:
- Owned by the projector: only apply_event() builds new states
- Immutable-friendly: every change returns a new state via _copy_with
- Serializable: PendingChoice round-trips through DECISION_REQUIRED payloads
- Deck convention: the top of a deck is the END of its list
"""

from __future__ import annotations
from dataclasses import dataclass, field, replace
from enum import Enum
from typing import Any


class Phase(Enum):
    """Turn phases."""
    SETUP = "setup"
    ACTION = "action"
    BUY = "buy"


ZONES = ("hand", "deck", "discard", "in_play", "set_aside")


@dataclass
class PlayerState:
    """
    Card zones for a single player.

    All zones hold card names. Order matters for the deck (last = top)
    and is kept for the others so that replays compare equal.
    """
    player_id: str
    hand: list[str] = field(default_factory=list)
    deck: list[str] = field(default_factory=list)
    discard: list[str] = field(default_factory=list)
    in_play: list[str] = field(default_factory=list)
    set_aside: list[str] = field(default_factory=list)
    shuffle_count: int = 0

    def zone(self, name: str) -> list[str]:
        if name not in ZONES:
            raise ValueError(f"Unknown zone: {name}")
        return getattr(self, name)

    def with_zone(self, name: str, cards: list[str]) -> PlayerState:
        """Return new player state with one zone replaced."""
        if name not in ZONES:
            raise ValueError(f"Unknown zone: {name}")
        return replace(self, **{name: cards})

    def all_cards(self) -> list[str]:
        """Every card the player owns, across all zones."""
        return self.hand + self.deck + self.discard + self.in_play + self.set_aside

    @property
    def top_of_deck(self) -> str | None:
        return self.deck[-1] if self.deck else None


@dataclass
class PendingChoice:
    """
    An outstanding input request from a paused resolver.

    player_id answers the choice; played_by is the player whose card is
    being resolved (they differ for attacks). Values needed by a later
    stage travel in metadata. queued_plays and cause_id belong to the
    engine: the rest of the play chain and the root event it links to.
    """
    player_id: str
    prompt: str
    card_options: list[str]
    min_count: int
    max_count: int
    card_being_played: str
    stage: str
    from_zone: str = "hand"
    metadata: dict[str, Any] = field(default_factory=dict)
    choice_type: str = "decision"  # "decision" or "reaction"
    played_by: str | None = None
    attack_targets: list[str] | None = None
    queued_plays: list[str] = field(default_factory=list)
    cause_id: str | None = None

    @property
    def is_reaction(self) -> bool:
        return self.choice_type == "reaction"

    @property
    def optional(self) -> bool:
        return self.min_count == 0

    def with_engine_context(self, **kwargs) -> PendingChoice:
        """Return a copy with engine-owned fields filled in."""
        return replace(self, **kwargs)

    def to_dict(self) -> dict[str, Any]:
        return {
            "player_id": self.player_id,
            "prompt": self.prompt,
            "card_options": list(self.card_options),
            "min_count": self.min_count,
            "max_count": self.max_count,
            "card_being_played": self.card_being_played,
            "stage": self.stage,
            "from_zone": self.from_zone,
            "metadata": dict(self.metadata),
            "choice_type": self.choice_type,
            "played_by": self.played_by,
            "attack_targets": (
                list(self.attack_targets) if self.attack_targets is not None else None
            ),
            "queued_plays": list(self.queued_plays),
            "cause_id": self.cause_id,
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> PendingChoice:
        return cls(
            player_id=data["player_id"],
            prompt=data.get("prompt", ""),
            card_options=list(data.get("card_options", [])),
            min_count=data.get("min_count", 0),
            max_count=data.get("max_count", 0),
            card_being_played=data.get("card_being_played", ""),
            stage=data.get("stage", ""),
            from_zone=data.get("from_zone", "hand"),
            metadata=dict(data.get("metadata") or {}),
            choice_type=data.get("choice_type", "decision"),
            played_by=data.get("played_by"),
            attack_targets=(
                list(data["attack_targets"])
                if data.get("attack_targets") is not None else None
            ),
            queued_plays=list(data.get("queued_plays", [])),
            cause_id=data.get("cause_id"),
        )


@dataclass(frozen=True)
class Decision:
    """A player's answer to a PendingChoice."""
    player_id: str
    selection: tuple[str, ...] = ()

    @classmethod
    def of(cls, player_id: str, selection: list[str] | tuple[str, ...] = ()) -> Decision:
        return cls(player_id=player_id, selection=tuple(selection))

    @property
    def first(self) -> str | None:
        return self.selection[0] if self.selection else None


@dataclass
class GameState:
    """
    Complete game state at a point in time.

    Never mutated directly: the projector returns a fresh state
    for every applied event.
    """
    players: dict[str, PlayerState] = field(default_factory=dict)
    player_order: list[str] = field(default_factory=list)
    supply: dict[str, int] = field(default_factory=dict)
    kingdom_cards: list[str] = field(default_factory=list)
    trash: list[str] = field(default_factory=list)

    # Turn counters
    turn: int = 0
    active_player: str | None = None
    phase: Phase = Phase.SETUP
    actions: int = 0
    buys: int = 0
    coins: int = 0
    purchases_this_turn: int = 0

    # Effect resolution
    pending_choice: PendingChoice | None = None

    # End of game
    game_over: bool = False
    winner: str | None = None
    scores: dict[str, int] = field(default_factory=dict)
    end_reason: str | None = None

    # Determinism and id numbering
    seed: int = 0
    event_count: int = 0

    @property
    def is_started(self) -> bool:
        return bool(self.player_order)

    @property
    def num_players(self) -> int:
        return len(self.player_order)

    def get_player(self, player_id: str | None) -> PlayerState | None:
        """Get player by ID."""
        if player_id is None:
            return None
        return self.players.get(player_id)

    def opponents_of(self, player_id: str) -> list[str]:
        """Other players, in turn order starting after player_id."""
        if player_id not in self.player_order:
            return [p for p in self.player_order if p in self.players]
        idx = self.player_order.index(player_id)
        rotated = self.player_order[idx + 1:] + self.player_order[:idx]
        return [p for p in rotated if p in self.players]

    def empty_pile_count(self) -> int:
        return sum(1 for count in self.supply.values() if count <= 0)

    def with_player(self, player: PlayerState) -> GameState:
        """Return new state with updated player."""
        new_players = dict(self.players)
        new_players[player.player_id] = player
        return self._copy_with(players=new_players)

    def _copy_with(self, **kwargs) -> GameState:
        """Create a copy with some fields replaced."""
        return replace(self, **kwargs)
