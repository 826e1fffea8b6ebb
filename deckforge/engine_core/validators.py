"""
Command Validators - Reusable checks run before any event is emitted.

Each check returns None when it passes or a failed CommandResult.
validate_command() takes zero-argument callables so later checks are
only evaluated once the earlier ones pass:

    error = validate_command(
        lambda: check_phase(state, Phase.ACTION),
        lambda: check_card_in_hand(state, player_id, card),
    )
    if error:
        return error
"""

from __future__ import annotations
from collections import Counter
from typing import Callable

from ..cards.catalog import CARDS, is_action, is_treasure
from .command import CommandResult, ErrorCode
from .state import GameState, Phase

Check = Callable[[], "CommandResult | None"]


def validate_command(*checks: Check) -> CommandResult | None:
    """Run checks in order and return the first failure."""
    for check in checks:
        error = check()
        if error is not None:
            return error
    return None


def check_started(state: GameState) -> CommandResult | None:
    if not state.is_started:
        return CommandResult.failure("Game has not started", ErrorCode.GAME_NOT_STARTED)
    return None


def check_not_over(state: GameState) -> CommandResult | None:
    if state.game_over:
        return CommandResult.failure("Game is over", ErrorCode.GAME_OVER)
    return None


def check_no_pending_choice(state: GameState) -> CommandResult | None:
    if state.pending_choice is not None:
        return CommandResult.failure(
            f"Waiting for {state.pending_choice.player_id} to decide "
            f"({state.pending_choice.card_being_played})",
            ErrorCode.DECISION_PENDING,
        )
    return None


def check_turn(state: GameState, player_id: str | None) -> CommandResult | None:
    if player_id is None or state.get_player(player_id) is None:
        return CommandResult.failure(f"Unknown player {player_id}", ErrorCode.NOT_YOUR_TURN)
    if state.active_player != player_id:
        return CommandResult.failure(f"Not {player_id}'s turn", ErrorCode.NOT_YOUR_TURN)
    return None


def check_phase(state: GameState, expected: Phase) -> CommandResult | None:
    if state.phase != expected:
        return CommandResult.failure(f"Not in {expected.value} phase", ErrorCode.WRONG_PHASE)
    return None


def check_has_actions(state: GameState) -> CommandResult | None:
    if state.actions < 1:
        return CommandResult.failure("No actions remaining", ErrorCode.NO_ACTIONS)
    return None


def check_has_buys(state: GameState) -> CommandResult | None:
    if state.buys < 1:
        return CommandResult.failure("No buys remaining", ErrorCode.NO_BUYS)
    return None


def check_has_coins(state: GameState, required: int) -> CommandResult | None:
    if state.coins < required:
        return CommandResult.failure(
            f"Not enough coins (have {state.coins}, need {required})",
            ErrorCode.INSUFFICIENT_COINS,
        )
    return None


def check_card_exists(card: str | None) -> CommandResult | None:
    if card is None or card not in CARDS:
        return CommandResult.failure(f"Unknown card {card}", ErrorCode.UNKNOWN_CARD)
    return None


def check_is_action(card: str) -> CommandResult | None:
    if not is_action(card):
        return CommandResult.failure(f"{card} is not an Action", ErrorCode.NOT_AN_ACTION)
    return None


def check_is_treasure(card: str) -> CommandResult | None:
    if not is_treasure(card):
        return CommandResult.failure(f"{card} is not a Treasure", ErrorCode.NOT_A_TREASURE)
    return None


def check_card_in_hand(state: GameState, player_id: str, card: str) -> CommandResult | None:
    player = state.get_player(player_id)
    if player is None or card not in player.hand:
        return CommandResult.failure(f"{card} is not in hand", ErrorCode.CARD_NOT_IN_HAND)
    return None


def check_card_in_play(state: GameState, player_id: str, card: str) -> CommandResult | None:
    player = state.get_player(player_id)
    if player is None or card not in player.in_play:
        return CommandResult.failure(f"{card} is not in play", ErrorCode.CARD_NOT_IN_PLAY)
    return None


def check_in_supply(state: GameState, card: str) -> CommandResult | None:
    if state.supply.get(card, 0) <= 0:
        return CommandResult.failure(f"No {card} left in the supply", ErrorCode.SUPPLY_EMPTY)
    return None


def check_no_purchases(state: GameState) -> CommandResult | None:
    if state.purchases_this_turn > 0:
        return CommandResult.failure(
            "Cannot unplay treasures after making a purchase", ErrorCode.PURCHASES_MADE
        )
    return None


def check_pending_choice_for(state: GameState, player_id: str | None) -> CommandResult | None:
    choice = state.pending_choice
    if choice is None:
        return CommandResult.failure("No decision is pending", ErrorCode.NO_PENDING_DECISION)
    if choice.player_id != player_id:
        return CommandResult.failure(
            f"Decision belongs to {choice.player_id}, not {player_id}",
            ErrorCode.INVALID_DECISION,
        )
    return None


def check_selection(state: GameState, selection: list[str]) -> CommandResult | None:
    """The selection must be a sub-multiset of the options, within [min, max]."""
    choice = state.pending_choice
    if choice is None:
        return CommandResult.failure("No decision is pending", ErrorCode.NO_PENDING_DECISION)
    count = len(selection)
    if count < choice.min_count or count > choice.max_count:
        return CommandResult.failure(
            f"Select between {choice.min_count} and {choice.max_count} cards, got {count}",
            ErrorCode.INVALID_DECISION,
        )
    available = Counter(choice.card_options)
    for card, wanted in Counter(selection).items():
        if available[card] < wanted:
            return CommandResult.failure(
                f"{card} is not one of the offered options", ErrorCode.INVALID_DECISION
            )
    return None
