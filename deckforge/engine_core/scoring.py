"""
Scoring - Victory points, the game-over check and the winner.
"""

from __future__ import annotations

from ..cards.catalog import CARDS, EMPTY_PILES_TO_END, GAME_END_PILE
from .events import EventType, GameEvent
from .state import GameState, PlayerState

GARDENS_DIVISOR = 10

PROVINCES_EMPTY = "provinces_empty"
THREE_PILES_EMPTY = "three_piles_empty"


def card_vp(card: str, owned_count: int) -> int:
    """VP for one card, given how many cards its owner has in total."""
    definition = CARDS.get(card)
    if definition is None:
        return 0
    if definition.vp is None:
        # Gardens
        return owned_count // GARDENS_DIVISOR
    return definition.vp


def count_vp(player: PlayerState) -> int:
    """Total VP over every zone the player owns."""
    cards = player.all_cards()
    return sum(card_vp(card, len(cards)) for card in cards)


def compute_scores(state: GameState) -> dict[str, int]:
    return {
        pid: count_vp(state.players[pid])
        for pid in state.player_order
        if pid in state.players
    }


def determine_winner(state: GameState, scores: dict[str, int]) -> str | None:
    """Highest score wins; ties go to the earliest player in turn order."""
    winner = None
    best = None
    for pid in state.player_order:
        if pid not in scores:
            continue
        if best is None or scores[pid] > best:
            winner, best = pid, scores[pid]
    return winner


def check_game_over(state: GameState) -> str | None:
    """Return the end reason if the game should end, else None."""
    if GAME_END_PILE in state.supply and state.supply[GAME_END_PILE] <= 0:
        return PROVINCES_EMPTY
    if state.empty_pile_count() >= EMPTY_PILES_TO_END:
        return THREE_PILES_EMPTY
    return None


def create_game_over_event(state: GameState, reason: str) -> GameEvent:
    scores = compute_scores(state)
    return GameEvent(EventType.GAME_ENDED, {
        "winner": determine_winner(state, scores),
        "scores": scores,
        "reason": reason,
    })
