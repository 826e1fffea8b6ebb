"""
Event Model - Typed, immutable domain events.

Every state change is an event. The ordered event log is the only
source of truth; GameState is always a projection of it.

Design principles:
- Immutable: events are frozen and never edited once logged
- Causal: each effect event links to the root event that produced it
- Serializable: events round-trip through plain dicts for storage and transport
- Draft-friendly: resolvers return events without ids, the engine stamps them
"""

from __future__ import annotations
from dataclasses import dataclass, field, replace
from enum import Enum
from typing import Any


class EventType(Enum):
    """Types of events in the log."""
    # Setup
    GAME_INITIALIZED = "GAME_INITIALIZED"
    INITIAL_DECK_DEALT = "INITIAL_DECK_DEALT"
    INITIAL_HAND_DRAWN = "INITIAL_HAND_DRAWN"

    # Turn structure
    TURN_STARTED = "TURN_STARTED"
    TURN_ENDED = "TURN_ENDED"
    PHASE_CHANGED = "PHASE_CHANGED"

    # Card movement
    CARD_DRAWN = "CARD_DRAWN"
    CARD_PLAYED = "CARD_PLAYED"
    CARD_DISCARDED = "CARD_DISCARDED"
    CARD_TRASHED = "CARD_TRASHED"
    CARD_GAINED = "CARD_GAINED"
    CARD_REVEALED = "CARD_REVEALED"
    CARD_SET_ASIDE = "CARD_SET_ASIDE"
    CARD_PUT_ON_DECK = "CARD_PUT_ON_DECK"
    CARD_RETURNED_TO_HAND = "CARD_RETURNED_TO_HAND"
    DECK_SHUFFLED = "DECK_SHUFFLED"

    # Resources
    ACTIONS_MODIFIED = "ACTIONS_MODIFIED"
    BUYS_MODIFIED = "BUYS_MODIFIED"
    COINS_MODIFIED = "COINS_MODIFIED"

    # Attacks and reactions
    ATTACK_DECLARED = "ATTACK_DECLARED"
    ATTACK_RESOLVED = "ATTACK_RESOLVED"
    REACTION_PLAYED = "REACTION_PLAYED"

    # Decisions
    DECISION_REQUIRED = "DECISION_REQUIRED"
    DECISION_RESOLVED = "DECISION_RESOLVED"

    # End
    GAME_ENDED = "GAME_ENDED"


@dataclass(frozen=True)
class GameEvent:
    """
    A single immutable record of one state change.

    Events returned by card resolvers are drafts (id is None).
    The engine assigns ids and causal links before they enter the log.
    """
    type: EventType
    payload: dict[str, Any] = field(default_factory=dict)
    id: str | None = None
    caused_by: str | None = None

    def get(self, key: str, default: Any = None) -> Any:
        return self.payload.get(key, default)

    @property
    def player_id(self) -> str | None:
        return self.payload.get("player_id")

    @property
    def card(self) -> str | None:
        return self.payload.get("card")

    @property
    def is_draft(self) -> bool:
        return self.id is None

    def to_dict(self) -> dict[str, Any]:
        """Serialize to a plain dict."""
        return {
            "id": self.id,
            "type": self.type.value,
            "caused_by": self.caused_by,
            "payload": self.payload,
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> GameEvent:
        """Deserialize from a plain dict."""
        return cls(
            type=EventType(data["type"]),
            payload=dict(data.get("payload") or {}),
            id=data.get("id"),
            caused_by=data.get("caused_by"),
        )

    # =========================================================================
    # Draft factories (used by resolvers and the engine)
    # =========================================================================

    @classmethod
    def card_drawn(cls, player_id: str, card: str) -> GameEvent:
        return cls(EventType.CARD_DRAWN, {"player_id": player_id, "card": card})

    @classmethod
    def card_played(cls, player_id: str, card: str, from_zone: str = "hand") -> GameEvent:
        return cls(
            EventType.CARD_PLAYED,
            {"player_id": player_id, "card": card, "from_zone": from_zone},
        )

    @classmethod
    def card_discarded(cls, player_id: str, card: str, from_zone: str = "hand") -> GameEvent:
        return cls(
            EventType.CARD_DISCARDED,
            {"player_id": player_id, "card": card, "from_zone": from_zone},
        )

    @classmethod
    def card_trashed(cls, player_id: str, card: str, from_zone: str = "hand") -> GameEvent:
        return cls(
            EventType.CARD_TRASHED,
            {"player_id": player_id, "card": card, "from_zone": from_zone},
        )

    @classmethod
    def card_gained(
        cls,
        player_id: str,
        card: str,
        to_zone: str = "discard",
        bought: bool = False,
    ) -> GameEvent:
        return cls(
            EventType.CARD_GAINED,
            {"player_id": player_id, "card": card, "to_zone": to_zone, "bought": bought},
        )

    @classmethod
    def card_revealed(cls, player_id: str, card: str, from_zone: str = "deck") -> GameEvent:
        return cls(
            EventType.CARD_REVEALED,
            {"player_id": player_id, "card": card, "from_zone": from_zone},
        )

    @classmethod
    def card_set_aside(cls, player_id: str, card: str, from_zone: str = "deck") -> GameEvent:
        return cls(
            EventType.CARD_SET_ASIDE,
            {"player_id": player_id, "card": card, "from_zone": from_zone},
        )

    @classmethod
    def card_put_on_deck(cls, player_id: str, card: str, from_zone: str = "hand") -> GameEvent:
        return cls(
            EventType.CARD_PUT_ON_DECK,
            {"player_id": player_id, "card": card, "from_zone": from_zone},
        )

    @classmethod
    def card_returned_to_hand(
        cls, player_id: str, card: str, from_zone: str = "in_play"
    ) -> GameEvent:
        return cls(
            EventType.CARD_RETURNED_TO_HAND,
            {"player_id": player_id, "card": card, "from_zone": from_zone},
        )

    @classmethod
    def deck_shuffled(cls, player_id: str, new_deck_order: list[str]) -> GameEvent:
        return cls(
            EventType.DECK_SHUFFLED,
            {"player_id": player_id, "new_deck_order": list(new_deck_order)},
        )

    @classmethod
    def actions_modified(cls, delta: int) -> GameEvent:
        return cls(EventType.ACTIONS_MODIFIED, {"delta": delta})

    @classmethod
    def buys_modified(cls, delta: int) -> GameEvent:
        return cls(EventType.BUYS_MODIFIED, {"delta": delta})

    @classmethod
    def coins_modified(cls, delta: int) -> GameEvent:
        return cls(EventType.COINS_MODIFIED, {"delta": delta})


def format_event_id(seq: int) -> str:
    """Event ids are the 1-based position of the event in the log."""
    return f"evt-{seq}"


class EventBuilder:
    """
    Assigns ids and causal links to the events produced by one command.

    The first event added is the root; later events are caused by it
    unless an explicit cause is given. Numbering continues from the
    number of events already in the log, so ids stay stable on replay.

    Usage:
        builder = EventBuilder(next_seq=state.event_count + 1)
        root = builder.add(GameEvent.card_played("p1", "Smithy"))
        builder.add(GameEvent.actions_modified(-1))
        builder.link(result.events, caused_by=root.id)
    """

    def __init__(self, next_seq: int = 1):
        self._next_seq = next_seq
        self._events: list[GameEvent] = []
        self._root_id: str | None = None

    @property
    def events(self) -> list[GameEvent]:
        return list(self._events)

    @property
    def root_id(self) -> str | None:
        return self._root_id

    def add(self, draft: GameEvent, caused_by: str | None = None) -> GameEvent:
        """Stamp a draft. The first event added becomes the root."""
        if self._root_id is None:
            return self.root(draft)
        return self._stamp(draft, caused_by or self._root_id)

    def root(self, draft: GameEvent) -> GameEvent:
        """Stamp a draft as a new root (no cause)."""
        event = self._stamp(draft, None)
        self._root_id = event.id
        return event

    def link(self, drafts: list[GameEvent], caused_by: str | None = None) -> list[GameEvent]:
        """Stamp a batch of drafts, all caused by the same event."""
        cause = caused_by or self._root_id
        return [self._stamp(draft, cause) for draft in drafts]

    def _stamp(self, draft: GameEvent, caused_by: str | None) -> GameEvent:
        event = replace(draft, id=format_event_id(self._next_seq), caused_by=caused_by)
        self._next_seq += 1
        self._events.append(event)
        return event


# =============================================================================
# Causality queries
# =============================================================================

def get_causal_chain(events: list[GameEvent], event_id: str) -> list[GameEvent]:
    """
    Return the event with the given id plus every event it caused,
    directly or transitively, in log order.
    """
    chain_ids = {event_id}
    chain: list[GameEvent] = []
    for event in events:
        if event.id == event_id:
            chain.append(event)
        elif event.caused_by in chain_ids:
            chain_ids.add(event.id)
            chain.append(event)
    return chain


def truncate_after_chain(events: list[GameEvent], event_id: str) -> list[GameEvent]:
    """
    Log prefix that ends with the last event of event_id's causal chain.

    "Undo to here" keeps the event and everything it caused; everything
    after the chain's last event is dropped. Kept events are untouched.

    Raises ValueError if no event has the given id.
    """
    chain = get_causal_chain(events, event_id)
    if not chain:
        raise ValueError(f"Event {event_id} not found")
    last = chain[-1]
    end = next(i for i, event in enumerate(events) if event is last)
    return events[:end + 1]


def build_causal_forest(events: list[GameEvent]) -> dict[str, list[str]]:
    """Map each root event id to the ids of its descendants, in log order."""
    root_of: dict[str, str] = {}
    forest: dict[str, list[str]] = {}
    for event in events:
        if event.id is None:
            continue
        if event.caused_by is None or event.caused_by not in root_of:
            root_of[event.id] = event.id
            forest[event.id] = []
        else:
            root = root_of[event.caused_by]
            root_of[event.id] = root
            forest[root].append(event.id)
    return forest


def events_to_dicts(events: list[GameEvent]) -> list[dict[str, Any]]:
    return [event.to_dict() for event in events]


def events_from_dicts(data: list[dict[str, Any]]) -> list[GameEvent]:
    return [GameEvent.from_dict(item) for item in data]
