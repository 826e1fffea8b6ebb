"""
Command Generator - Enumerates legal commands from a game state.

The command generator is used by:
1. Bots to enumerate possible moves
2. The API to show available commands
3. Tests (is this command among the legal ones?)

Every generated command passes engine validation for the state it was
generated from.
"""

from __future__ import annotations
from dataclasses import dataclass
from itertools import combinations, permutations

from ..cards import stages
from ..cards.catalog import CARDS
from .command import Command
from .state import GameState, PendingChoice, Phase

MAX_DECISION_OPTIONS = 256


@dataclass
class CommandGenerator:
    """
    Generates legal commands for one player.

    Decision answers are enumerated as distinct selections, capped at
    max_decision_options so huge hands stay cheap.
    """
    max_decision_options: int = MAX_DECISION_OPTIONS

    def generate(self, state: GameState, player_id: str) -> list[Command]:
        """Generate every legal command for player_id."""
        if not state.is_started or state.game_over:
            return []

        if state.pending_choice is not None:
            if state.pending_choice.player_id != player_id:
                return []
            return self._generate_decision_commands(state.pending_choice, player_id)

        if state.active_player != player_id:
            return []

        if state.phase == Phase.ACTION:
            return self._generate_action_phase(state, player_id)
        return self._generate_buy_phase(state, player_id)

    def _generate_action_phase(self, state: GameState, player_id: str) -> list[Command]:
        commands = []
        player = state.get_player(player_id)
        if state.actions > 0:
            for card in _distinct(player.hand):
                if CARDS[card].is_action:
                    commands.append(Command.play_action(player_id, card))
        commands.append(Command.end_phase(player_id))
        return commands

    def _generate_buy_phase(self, state: GameState, player_id: str) -> list[Command]:
        commands = []
        player = state.get_player(player_id)
        treasures = [card for card in _distinct(player.hand) if CARDS[card].is_treasure]
        if treasures:
            commands.append(Command.play_all_treasures(player_id))
            commands.extend(Command.play_treasure(player_id, card) for card in treasures)
        if state.buys > 0:
            for card, count in state.supply.items():
                definition = CARDS.get(card)
                if definition is not None and count > 0 and definition.cost <= state.coins:
                    commands.append(Command.buy_card(player_id, card))
        commands.append(Command.end_phase(player_id))
        return commands

    def _generate_decision_commands(self, choice: PendingChoice, player_id: str) -> list[Command]:
        return [
            Command.submit_decision(player_id, list(selection))
            for selection in legal_selections(choice, self.max_decision_options)
        ]


def legal_selections(choice: PendingChoice, limit: int = MAX_DECISION_OPTIONS) -> list[tuple[str, ...]]:
    """
    Distinct legal answers to a choice, smallest first.

    For an ordering choice every distinct order is a separate answer.
    """
    options = sorted(choice.card_options)
    seen: set[tuple[str, ...]] = set()
    selections: list[tuple[str, ...]] = []
    for size in range(choice.min_count, choice.max_count + 1):
        if choice.stage == stages.ORDER:
            candidates = permutations(choice.card_options, size)
        else:
            candidates = combinations(options, size)
        for selection in candidates:
            if selection in seen:
                continue
            seen.add(selection)
            selections.append(selection)
            if len(selections) >= limit:
                return selections
    return selections


def _distinct(cards: list[str]) -> list[str]:
    return list(dict.fromkeys(cards))


def legal_commands(state: GameState, player_id: str) -> list[Command]:
    """
    Convenience function to get legal commands.

    Creates a CommandGenerator and generates commands.
    """
    return CommandGenerator().generate(state, player_id)


def is_legal(state: GameState, command: Command) -> bool:
    """Check if a specific command is among the generated ones."""
    for legal in legal_commands(state, command.player_id):
        if (
            legal.command_type == command.command_type
            and legal.card == command.card
            and sorted(legal.selection) == sorted(command.selection)
        ):
            return True
    return False
