"""
Bot Policy - Interface for bot decision-making.

A BotPolicy takes a game state and returns a decision.
Decisions include:
- Which command to issue on the bot's turn
- Answers to pending choices (including attacks on the bot)
"""

from __future__ import annotations
import random
from abc import ABC, abstractmethod
from dataclasses import dataclass

from ..cards import stages
from ..cards.catalog import CARDS, CardType
from ..engine_core.command import Command, CommandType
from ..engine_core.command_generator import legal_selections
from ..engine_core.state import GameState, PendingChoice


@dataclass
class BotDecision:
    """
    A decision made by a bot.

    Contains:
    - The command to issue
    - Explanation (for logs/debugging)
    - Confidence in the decision
    """
    command: Command
    explanation: str = ""
    confidence: float = 1.0
    evaluated_commands: int = 0


@dataclass
class ChoiceDecision:
    """
    An answer to a pending choice.

    Used when resolving effects that require player input.
    """
    selection: list[str]
    explanation: str = ""

    def to_command(self, player_id: str) -> Command:
        return Command.submit_decision(player_id, self.selection)


class BotPolicy(ABC):
    """
    Abstract base class for bot policies.

    A policy defines how a bot selects commands.
    Implementations can range from simple heuristics
    to complex search algorithms.
    """

    @abstractmethod
    def select_command(
        self,
        state: GameState,
        player_id: str,
        legal_commands: list[Command],
    ) -> BotDecision:
        """
        Select a command from the legal commands.

        Args:
            state: Current game state
            player_id: The bot's seat
            legal_commands: List of legal commands to choose from

        Returns:
            BotDecision with the selected command
        """

    @abstractmethod
    def select_choice(self, state: GameState, pending_choice: PendingChoice) -> ChoiceDecision:
        """
        Answer a pending choice addressed to the bot.

        Args:
            state: Current game state
            pending_choice: The choice that needs to be made

        Returns:
            ChoiceDecision with the selected cards
        """

    def get_name(self) -> str:
        """Get the bot's name/identifier."""
        return self.__class__.__name__


class RandomPolicy(BotPolicy):
    """
    Random policy - selects commands uniformly at random.

    Used for:
    - Testing
    - Baseline comparison
    - Fuzzing the engine with legal play
    """

    def __init__(self, seed: int | None = None):
        self.rng = random.Random(seed)

    def select_command(
        self,
        state: GameState,
        player_id: str,
        legal_commands: list[Command],
    ) -> BotDecision:
        if not legal_commands:
            raise ValueError("No legal commands available")

        command = self.rng.choice(legal_commands)
        return BotDecision(
            command=command,
            explanation="Selected randomly",
            confidence=1.0 / len(legal_commands),
            evaluated_commands=len(legal_commands),
        )

    def select_choice(self, state: GameState, pending_choice: PendingChoice) -> ChoiceDecision:
        selections = legal_selections(pending_choice)
        if not selections:
            raise ValueError("No legal selections available")
        return ChoiceDecision(
            selection=list(self.rng.choice(selections)),
            explanation="Selected randomly",
        )


class FirstLegalPolicy(BotPolicy):
    """
    First-legal policy - always selects the first legal command.

    Used for:
    - Deterministic testing
    - Baseline comparison
    """

    def select_command(
        self,
        state: GameState,
        player_id: str,
        legal_commands: list[Command],
    ) -> BotDecision:
        if not legal_commands:
            raise ValueError("No legal commands available")

        return BotDecision(
            command=legal_commands[0],
            explanation="Selected first legal command",
            evaluated_commands=1,
        )

    def select_choice(self, state: GameState, pending_choice: PendingChoice) -> ChoiceDecision:
        selections = legal_selections(pending_choice, limit=1)
        if not selections:
            raise ValueError("No legal selections available")
        return ChoiceDecision(selection=list(selections[0]), explanation="Selected first option")


def _keep_value(card: str) -> int:
    """How much a bot wants to keep a card in hand; lower is discarded first."""
    definition = CARDS.get(card)
    if definition is None:
        return 0
    if definition.has_type(CardType.CURSE):
        return -2
    if definition.is_victory and not definition.is_action:
        return -1
    return definition.cost


class BigMoneyPolicy(BotPolicy):
    """
    Big Money - buys Province, Gold or Silver by coins and plays actions first.

    Choices are answered with the smallest legal selection, junk first;
    gains take the most expensive option and reactions are always revealed.
    """

    PRIORITIES = (("Province", 8), ("Gold", 6), ("Silver", 3))

    def select_command(
        self,
        state: GameState,
        player_id: str,
        legal_commands: list[Command],
    ) -> BotDecision:
        if not legal_commands:
            raise ValueError("No legal commands available")

        by_type: dict[CommandType, list[Command]] = {}
        for command in legal_commands:
            by_type.setdefault(command.command_type, []).append(command)

        if CommandType.PLAY_ACTION in by_type:
            return BotDecision(by_type[CommandType.PLAY_ACTION][0], "Play an action")
        if CommandType.PLAY_ALL_TREASURES in by_type:
            return BotDecision(by_type[CommandType.PLAY_ALL_TREASURES][0], "Play treasures")

        buys = {c.card: c for c in by_type.get(CommandType.BUY_CARD, [])}
        for card, price in self.PRIORITIES:
            if card in buys and state.coins >= price:
                return BotDecision(buys[card], f"Buy {card}")

        end = by_type.get(CommandType.END_PHASE)
        if end:
            return BotDecision(end[0], "Nothing worth doing")
        return BotDecision(legal_commands[0], "Fallback")

    def select_choice(self, state: GameState, pending_choice: PendingChoice) -> ChoiceDecision:
        options = list(pending_choice.card_options)
        if pending_choice.is_reaction:
            return ChoiceDecision(selection=options[:1], explanation="Reveal reaction")

        if pending_choice.from_zone == "supply":
            ranked = sorted(options, key=lambda c: -CARDS[c].cost if c in CARDS else 0)
            return ChoiceDecision(selection=ranked[:pending_choice.max_count], explanation="Gain best")

        count = pending_choice.min_count
        if pending_choice.stage == stages.ORDER:
            count = len(options)
        ranked = sorted(options, key=_keep_value)
        return ChoiceDecision(selection=ranked[:count], explanation="Minimal selection")


POLICIES = {
    "random": RandomPolicy,
    "first_legal": FirstLegalPolicy,
    "big_money": BigMoneyPolicy,
}


def make_policy(name: str, seed: int | None = None) -> BotPolicy:
    """Build a policy by name."""
    if name not in POLICIES:
        raise ValueError(f"Unknown bot policy: {name}")
    if name == "random":
        return RandomPolicy(seed)
    return POLICIES[name]()
