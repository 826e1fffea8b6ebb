"""
Projector - Folds the event log into GameState.

apply_event() is the single point of state change. It is:
- Total: every event type is handled; unknown players or cards are no-ops
- Pure: (state, event) -> new state, the input state is never mutated
- Deterministic: shuffles are carried as explicit orders in the events

project() replays a complete log from the empty state.
"""

from __future__ import annotations
import logging
from dataclasses import replace
from typing import Callable, Iterable

from .events import EventType, GameEvent
from .state import GameState, PendingChoice, Phase, PlayerState

logger = logging.getLogger(__name__)


def initial_state() -> GameState:
    """The empty state every projection starts from."""
    return GameState()


def project(events: Iterable[GameEvent]) -> GameState:
    """Replay a complete event log from the empty state."""
    return apply_events(initial_state(), events)


def apply_events(state: GameState, events: Iterable[GameEvent]) -> GameState:
    """Apply events in order."""
    for event in events:
        state = apply_event(state, event)
    return state


def apply_event(state: GameState, event: GameEvent) -> GameState:
    """Apply one event, returning a new state."""
    handler = _HANDLERS.get(event.type)
    new_state = handler(state, event) if handler else state
    return new_state._copy_with(event_count=state.event_count + 1)


# =============================================================================
# Zone helpers
# =============================================================================

def _remove_one(cards: list[str], card: str, from_top: bool = False) -> list[str] | None:
    """Remove one occurrence of card. Returns None if the card is absent."""
    if card not in cards:
        return None
    new_cards = list(cards)
    if from_top:
        idx = len(new_cards) - 1 - new_cards[::-1].index(card)
    else:
        idx = new_cards.index(card)
    del new_cards[idx]
    return new_cards


def _take_from(player: PlayerState, zone: str, card: str) -> PlayerState | None:
    """Return the player with card removed from zone, or None if not there."""
    if zone not in ("hand", "deck", "discard", "in_play", "set_aside"):
        return None
    remaining = _remove_one(player.zone(zone), card, from_top=(zone == "deck"))
    if remaining is None:
        return None
    return player.with_zone(zone, remaining)


def _move(
    state: GameState,
    event: GameEvent,
    from_zone: str,
    to_zone: str | None,
) -> GameState:
    """Move one card between zones of the event's player. to_zone=None trashes."""
    player = state.get_player(event.player_id)
    card = event.card
    if player is None or card is None:
        return state
    player = _take_from(player, from_zone, card)
    if player is None:
        return state
    if to_zone is None:
        return state.with_player(player)._copy_with(trash=state.trash + [card])
    player = player.with_zone(to_zone, player.zone(to_zone) + [card])
    return state.with_player(player)


# =============================================================================
# Setup and turn structure
# =============================================================================

def _apply_game_initialized(state: GameState, event: GameEvent) -> GameState:
    players = list(event.get("players", []))
    return state._copy_with(
        players={pid: PlayerState(player_id=pid) for pid in players},
        player_order=players,
        supply=dict(event.get("supply", {})),
        kingdom_cards=list(event.get("kingdom_cards", [])),
        trash=[],
        turn=0,
        active_player=players[0] if players else None,
        phase=Phase.ACTION,
        actions=0,
        buys=0,
        coins=0,
        purchases_this_turn=0,
        pending_choice=None,
        game_over=False,
        winner=None,
        scores={},
        end_reason=None,
        seed=event.get("seed", 0) or 0,
    )


def _apply_initial_deck_dealt(state: GameState, event: GameEvent) -> GameState:
    player = state.get_player(event.player_id)
    if player is None:
        return state
    return state.with_player(player.with_zone("deck", list(event.get("cards", []))))


def _apply_initial_hand_drawn(state: GameState, event: GameEvent) -> GameState:
    player = state.get_player(event.player_id)
    if player is None:
        return state
    cards = list(event.get("cards", []))
    deck = player.deck[:len(player.deck) - len(cards)] if cards else player.deck
    player = player.with_zone("deck", deck).with_zone("hand", player.hand + cards)
    return state.with_player(player)


def _apply_turn_started(state: GameState, event: GameEvent) -> GameState:
    if event.player_id not in state.players:
        return state
    return state._copy_with(
        turn=event.get("turn", state.turn + 1),
        active_player=event.player_id,
        phase=Phase.ACTION,
        actions=0,
        buys=0,
        coins=0,
        purchases_this_turn=0,
    )


def _apply_phase_changed(state: GameState, event: GameEvent) -> GameState:
    try:
        phase = Phase(event.get("phase"))
    except ValueError:
        return state
    return state._copy_with(phase=phase)


# =============================================================================
# Card movement
# =============================================================================

def _apply_card_drawn(state: GameState, event: GameEvent) -> GameState:
    return _move(state, event, "deck", "hand")


def _apply_card_played(state: GameState, event: GameEvent) -> GameState:
    from_zone = event.get("from_zone", "hand")
    if from_zone == "in_play":
        return state
    return _move(state, event, from_zone, "in_play")


def _apply_card_discarded(state: GameState, event: GameEvent) -> GameState:
    return _move(state, event, event.get("from_zone", "hand"), "discard")


def _apply_card_trashed(state: GameState, event: GameEvent) -> GameState:
    return _move(state, event, event.get("from_zone", "hand"), None)


def _apply_card_set_aside(state: GameState, event: GameEvent) -> GameState:
    return _move(state, event, event.get("from_zone", "deck"), "set_aside")


def _apply_card_put_on_deck(state: GameState, event: GameEvent) -> GameState:
    return _move(state, event, event.get("from_zone", "hand"), "deck")


def _apply_card_returned_to_hand(state: GameState, event: GameEvent) -> GameState:
    return _move(state, event, event.get("from_zone", "in_play"), "hand")


def _apply_card_gained(state: GameState, event: GameEvent) -> GameState:
    player = state.get_player(event.player_id)
    card = event.card
    if player is None or card is None:
        return state
    remaining = state.supply.get(card, 0)
    if remaining <= 0:
        return state
    to_zone = event.get("to_zone", "discard")
    if to_zone not in ("discard", "hand", "deck"):
        return state
    supply = dict(state.supply)
    supply[card] = remaining - 1
    player = player.with_zone(to_zone, player.zone(to_zone) + [card])
    purchases = state.purchases_this_turn + (1 if event.get("bought") else 0)
    return state.with_player(player)._copy_with(supply=supply, purchases_this_turn=purchases)


def _apply_deck_shuffled(state: GameState, event: GameEvent) -> GameState:
    player = state.get_player(event.player_id)
    if player is None:
        return state
    logger.debug("Deck shuffled for %s", player.player_id)
    player = replace(
        player,
        deck=list(event.get("new_deck_order", [])),
        discard=[],
        shuffle_count=player.shuffle_count + 1,
    )
    return state.with_player(player)


def _apply_no_op(state: GameState, event: GameEvent) -> GameState:
    return state


# =============================================================================
# Resources
# =============================================================================

def _apply_actions_modified(state: GameState, event: GameEvent) -> GameState:
    return state._copy_with(actions=state.actions + event.get("delta", 0))


def _apply_buys_modified(state: GameState, event: GameEvent) -> GameState:
    return state._copy_with(buys=state.buys + event.get("delta", 0))


def _apply_coins_modified(state: GameState, event: GameEvent) -> GameState:
    return state._copy_with(coins=state.coins + event.get("delta", 0))


# =============================================================================
# Decisions and game end
# =============================================================================

def _apply_decision_required(state: GameState, event: GameEvent) -> GameState:
    choice = event.get("choice")
    if not choice or choice.get("player_id") not in state.players:
        return state
    return state._copy_with(pending_choice=PendingChoice.from_dict(choice))


def _apply_decision_resolved(state: GameState, event: GameEvent) -> GameState:
    return state._copy_with(pending_choice=None)


def _apply_game_ended(state: GameState, event: GameEvent) -> GameState:
    return state._copy_with(
        game_over=True,
        winner=event.get("winner"),
        scores=dict(event.get("scores", {})),
        end_reason=event.get("reason"),
        pending_choice=None,
    )


_HANDLERS: dict[EventType, Callable[[GameState, GameEvent], GameState]] = {
    EventType.GAME_INITIALIZED: _apply_game_initialized,
    EventType.INITIAL_DECK_DEALT: _apply_initial_deck_dealt,
    EventType.INITIAL_HAND_DRAWN: _apply_initial_hand_drawn,
    EventType.TURN_STARTED: _apply_turn_started,
    EventType.TURN_ENDED: _apply_no_op,
    EventType.PHASE_CHANGED: _apply_phase_changed,
    EventType.CARD_DRAWN: _apply_card_drawn,
    EventType.CARD_PLAYED: _apply_card_played,
    EventType.CARD_DISCARDED: _apply_card_discarded,
    EventType.CARD_TRASHED: _apply_card_trashed,
    EventType.CARD_GAINED: _apply_card_gained,
    EventType.CARD_REVEALED: _apply_no_op,
    EventType.CARD_SET_ASIDE: _apply_card_set_aside,
    EventType.CARD_PUT_ON_DECK: _apply_card_put_on_deck,
    EventType.CARD_RETURNED_TO_HAND: _apply_card_returned_to_hand,
    EventType.DECK_SHUFFLED: _apply_deck_shuffled,
    EventType.ACTIONS_MODIFIED: _apply_actions_modified,
    EventType.BUYS_MODIFIED: _apply_buys_modified,
    EventType.COINS_MODIFIED: _apply_coins_modified,
    EventType.ATTACK_DECLARED: _apply_no_op,
    EventType.ATTACK_RESOLVED: _apply_no_op,
    EventType.REACTION_PLAYED: _apply_no_op,
    EventType.DECISION_REQUIRED: _apply_decision_required,
    EventType.DECISION_RESOLVED: _apply_decision_resolved,
    EventType.GAME_ENDED: _apply_game_ended,
}
