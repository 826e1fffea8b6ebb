"""
Card Moves - Event builders for draws, reveals, gains and shuffles.

These helpers never touch state; they read it and return draft events.
All randomness is seeded from (game seed, player, shuffle count), and
the resulting order is recorded in DECK_SHUFFLED so replay never
consults the RNG.
"""

from __future__ import annotations
import random

from .events import GameEvent
from .state import GameState


def shuffle_order(seed: int, player_id: str, shuffle_count: int, cards: list[str]) -> list[str]:
    """Deterministic shuffle for a player's Nth shuffle."""
    rng = random.Random(f"{seed}:{player_id}:{shuffle_count}")
    order = list(cards)
    rng.shuffle(order)
    return order


def deal_order(seed: int, player_id: str, cards: list[str]) -> list[str]:
    """Deterministic order for a starting deck."""
    rng = random.Random(f"{seed}:{player_id}:deal")
    order = list(cards)
    rng.shuffle(order)
    return order


def create_draw_events(state: GameState, player_id: str, count: int) -> list[GameEvent]:
    """
    Draw count cards for a player.

    Emits the pre-shuffle draw batch, then DECK_SHUFFLED (only if the deck
    runs out and the discard pile has cards), then the post-shuffle batch.
    Total drawn is min(count, deck + discard).
    """
    player = state.get_player(player_id)
    if player is None or count <= 0:
        return []

    events: list[GameEvent] = []
    deck = list(player.deck)
    drawn = 0

    while deck and drawn < count:
        events.append(GameEvent.card_drawn(player_id, deck.pop()))
        drawn += 1

    if drawn < count and player.discard:
        new_order = shuffle_order(state.seed, player_id, player.shuffle_count, player.discard)
        events.append(GameEvent.deck_shuffled(player_id, new_order))
        deck = list(new_order)
        while deck and drawn < count:
            events.append(GameEvent.card_drawn(player_id, deck.pop()))
            drawn += 1

    return events


def reveal_top(
    state: GameState, player_id: str, count: int
) -> tuple[list[GameEvent], list[str]]:
    """
    Look at the top count cards of a player's deck.

    If the deck is short, the discard pile is shuffled and placed UNDER
    the remaining deck. Returns (shuffle events, cards top-first); the
    caller decides which reveal or movement events to emit.
    """
    player = state.get_player(player_id)
    if player is None or count <= 0:
        return [], []

    events: list[GameEvent] = []
    deck = list(player.deck)
    if len(deck) < count and player.discard:
        shuffled = shuffle_order(state.seed, player_id, player.shuffle_count, player.discard)
        deck = shuffled + deck
        events.append(GameEvent.deck_shuffled(player_id, deck))

    return events, list(reversed(deck))[:count]


def create_gain_events(
    state: GameState,
    player_id: str,
    card: str,
    to_zone: str = "discard",
    bought: bool = False,
) -> list[GameEvent]:
    """
    Gain a card from the supply.

    Returns no events if the pile is empty or missing. This is the one
    place gain availability is checked.
    """
    if state.get_player(player_id) is None:
        return []
    if state.supply.get(card, 0) <= 0:
        return []
    return [GameEvent.card_gained(player_id, card, to_zone=to_zone, bought=bought)]


def create_discard_events(
    player_id: str, cards: list[str] | tuple[str, ...], from_zone: str = "hand"
) -> list[GameEvent]:
    return [GameEvent.card_discarded(player_id, card, from_zone) for card in cards]


def create_trash_events(
    player_id: str, cards: list[str] | tuple[str, ...], from_zone: str = "hand"
) -> list[GameEvent]:
    return [GameEvent.card_trashed(player_id, card, from_zone) for card in cards]
