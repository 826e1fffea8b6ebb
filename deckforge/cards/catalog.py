"""
Card Catalog - Read-only card definitions for the base set.

Card definitions are pure data: cost, types, static coin/VP value,
an optional reaction trigger and optional declarative decision specs.
Nothing here is mutated at runtime.
"""

from __future__ import annotations
import random
from dataclasses import dataclass, field
from enum import Enum
from typing import Any

from ..engine_core.state import GameState
from . import stages
from .decision_spec import DecisionContext, DecisionSpec


class CardType(Enum):
    """Card type tags."""
    TREASURE = "treasure"
    VICTORY = "victory"
    CURSE = "curse"
    ACTION = "action"
    ATTACK = "attack"
    REACTION = "reaction"


@dataclass(frozen=True)
class CardDefinition:
    """
    Static definition of a card.

    vp is None for cards whose value depends on the owner's deck (Gardens).
    """
    name: str
    cost: int
    types: tuple[CardType, ...]
    description: str = ""
    coins: int = 0
    vp: int | None = 0
    reaction_trigger: str | None = None
    decisions: dict[str, DecisionSpec] = field(default_factory=dict)

    def has_type(self, card_type: CardType) -> bool:
        return card_type in self.types

    @property
    def is_action(self) -> bool:
        return CardType.ACTION in self.types

    @property
    def is_treasure(self) -> bool:
        return CardType.TREASURE in self.types

    @property
    def is_victory(self) -> bool:
        return CardType.VICTORY in self.types

    @property
    def is_attack(self) -> bool:
        return CardType.ATTACK in self.types

    @property
    def is_reaction(self) -> bool:
        return CardType.REACTION in self.types

    def to_dict(self) -> dict[str, Any]:
        return {
            "name": self.name,
            "cost": self.cost,
            "types": [t.value for t in self.types],
            "description": self.description,
            "coins": self.coins,
            "vp": self.vp,
            "reaction_trigger": self.reaction_trigger,
            "decision_stages": sorted(self.decisions),
        }


# =============================================================================
# Supply queries (used by decision specs and resolvers)
# =============================================================================

def get_gainable_cards(
    state: GameState, max_cost: int, card_type: CardType | None = None
) -> list[str]:
    """Supply cards with a non-empty pile costing up to max_cost, in supply order."""
    result = []
    for name, count in state.supply.items():
        card = CARDS.get(name)
        if card is None or count <= 0 or card.cost > max_cost:
            continue
        if card_type is not None and not card.has_type(card_type):
            continue
        result.append(name)
    return result


def get_gainable_treasures(state: GameState, max_cost: int) -> list[str]:
    return get_gainable_cards(state, max_cost, CardType.TREASURE)


def _hand(ctx: DecisionContext) -> list[str]:
    return ctx.hand


def _hand_of_type(card_type: CardType):
    def options(ctx: DecisionContext) -> list[str]:
        return [c for c in ctx.hand if CARDS[c].has_type(card_type)]
    return options


def _trashed_cost(ctx: DecisionContext) -> int:
    return int(ctx.metadata.get("trashed_cost", 0))


# =============================================================================
# Card definitions
# =============================================================================

_T = CardType

_BASE_CARDS = [
    CardDefinition("Copper", 0, (_T.TREASURE,), "+$1", coins=1),
    CardDefinition("Silver", 3, (_T.TREASURE,), "+$2", coins=2),
    CardDefinition("Gold", 6, (_T.TREASURE,), "+$3", coins=3),
    CardDefinition("Estate", 2, (_T.VICTORY,), "1 VP", vp=1),
    CardDefinition("Duchy", 5, (_T.VICTORY,), "3 VP", vp=3),
    CardDefinition("Province", 8, (_T.VICTORY,), "6 VP", vp=6),
    CardDefinition("Curse", 0, (_T.CURSE,), "-1 VP", vp=-1),
]

_KINGDOM = [
    # $2
    CardDefinition(
        "Cellar", 2, (_T.ACTION,),
        "+1 Action. Discard any number of cards, then draw that many.",
        decisions={
            stages.DISCARD: DecisionSpec(
                from_zone="hand",
                prompt="Discard any number of cards, then draw that many",
                card_options=_hand,
                min_count=0,
                max_count=lambda ctx: len(ctx.hand),
            ),
        },
    ),
    CardDefinition(
        "Chapel", 2, (_T.ACTION,),
        "Trash up to 4 cards from your hand.",
        decisions={
            stages.TRASH: DecisionSpec(
                from_zone="hand",
                prompt="Trash up to 4 cards",
                card_options=_hand,
                min_count=0,
                max_count=4,
            ),
        },
    ),
    CardDefinition(
        "Moat", 2, (_T.ACTION, _T.REACTION),
        "+2 Cards. When another player plays an Attack card, you may first "
        "reveal this from your hand, to be unaffected by it.",
        reaction_trigger="on_attack",
    ),
    # $3
    CardDefinition(
        "Harbinger", 3, (_T.ACTION,),
        "+1 Card, +1 Action. Look through your discard pile. You may put a "
        "card from it onto your deck.",
    ),
    CardDefinition(
        "Merchant", 3, (_T.ACTION,),
        "+1 Card, +1 Action. The first time you play a Silver this turn, +$1.",
    ),
    CardDefinition(
        "Vassal", 3, (_T.ACTION,),
        "+$2. Discard the top card of your deck. If it's an Action card, you may play it.",
    ),
    CardDefinition("Village", 3, (_T.ACTION,), "+1 Card, +2 Actions."),
    CardDefinition(
        "Workshop", 3, (_T.ACTION,),
        "Gain a card costing up to $4.",
        decisions={
            stages.GAIN: DecisionSpec(
                from_zone="supply",
                prompt="Gain a card costing up to $4",
                card_options=lambda ctx: get_gainable_cards(ctx.state, 4),
            ),
        },
    ),
    # $4
    CardDefinition(
        "Bureaucrat", 4, (_T.ACTION, _T.ATTACK),
        "Gain a Silver onto your deck. Each other player reveals a Victory card "
        "from their hand and puts it onto their deck (or reveals a hand with no "
        "Victory cards).",
    ),
    CardDefinition(
        "Gardens", 4, (_T.VICTORY,),
        "Worth 1 VP per 10 cards you have (round down).",
        vp=None,
    ),
    CardDefinition(
        "Militia", 4, (_T.ACTION, _T.ATTACK),
        "+$2. Each other player discards down to 3 cards in hand.",
    ),
    CardDefinition(
        "Moneylender", 4, (_T.ACTION,),
        "You may trash a Copper from your hand for +$3.",
        decisions={
            stages.TRASH: DecisionSpec(
                from_zone="hand",
                prompt="You may trash a Copper for +$3",
                card_options=lambda ctx: [c for c in ctx.hand if c == "Copper"][:1],
                min_count=0,
                max_count=1,
            ),
        },
    ),
    CardDefinition(
        "Poacher", 4, (_T.ACTION,),
        "+1 Card, +1 Action, +$1. Discard a card per empty Supply pile.",
    ),
    CardDefinition(
        "Remodel", 4, (_T.ACTION,),
        "Trash a card from your hand. Gain a card costing up to $2 more than it.",
        decisions={
            stages.TRASH: DecisionSpec(
                from_zone="hand",
                prompt="Trash a card from your hand",
                card_options=_hand,
            ),
            stages.GAIN: DecisionSpec(
                from_zone="supply",
                prompt=lambda ctx: f"Gain a card costing up to ${_trashed_cost(ctx) + 2}",
                card_options=lambda ctx: get_gainable_cards(ctx.state, _trashed_cost(ctx) + 2),
            ),
        },
    ),
    CardDefinition("Smithy", 4, (_T.ACTION,), "+3 Cards."),
    CardDefinition(
        "Throne Room", 4, (_T.ACTION,),
        "You may play an Action card from your hand twice.",
    ),
    # $5
    CardDefinition(
        "Bandit", 5, (_T.ACTION, _T.ATTACK),
        "Gain a Gold. Each other player reveals the top 2 cards of their deck, "
        "trashes a revealed Treasure other than Copper, and discards the rest.",
    ),
    CardDefinition(
        "Council Room", 5, (_T.ACTION,),
        "+4 Cards, +1 Buy. Each other player draws a card.",
    ),
    CardDefinition("Festival", 5, (_T.ACTION,), "+2 Actions, +1 Buy, +$2."),
    CardDefinition("Laboratory", 5, (_T.ACTION,), "+2 Cards, +1 Action."),
    CardDefinition(
        "Library", 5, (_T.ACTION,),
        "Draw until you have 7 cards in hand, skipping any Action cards you "
        "choose to; set those aside, discarding them afterwards.",
    ),
    CardDefinition("Market", 5, (_T.ACTION,), "+1 Card, +1 Action, +1 Buy, +$1."),
    CardDefinition(
        "Mine", 5, (_T.ACTION,),
        "You may trash a Treasure from your hand. Gain a Treasure to your hand "
        "costing up to $3 more than it.",
        decisions={
            stages.TRASH: DecisionSpec(
                from_zone="hand",
                prompt="You may trash a Treasure from your hand",
                card_options=_hand_of_type(CardType.TREASURE),
                min_count=0,
                max_count=1,
            ),
            stages.GAIN: DecisionSpec(
                from_zone="supply",
                prompt=lambda ctx: f"Gain a Treasure to your hand costing up to ${_trashed_cost(ctx) + 3}",
                card_options=lambda ctx: get_gainable_treasures(ctx.state, _trashed_cost(ctx) + 3),
            ),
        },
    ),
    CardDefinition(
        "Sentry", 5, (_T.ACTION,),
        "+1 Card, +1 Action. Look at the top 2 cards of your deck. Trash and/or "
        "discard any number of them. Put the rest back on top in any order.",
    ),
    CardDefinition(
        "Witch", 5, (_T.ACTION, _T.ATTACK),
        "+2 Cards. Each other player gains a Curse.",
    ),
    # $6
    CardDefinition(
        "Artisan", 6, (_T.ACTION,),
        "Gain a card to your hand costing up to $5. Put a card from your hand onto your deck.",
        decisions={
            stages.GAIN: DecisionSpec(
                from_zone="supply",
                prompt="Gain a card to your hand costing up to $5",
                card_options=lambda ctx: get_gainable_cards(ctx.state, 5),
            ),
            stages.TOPDECK: DecisionSpec(
                from_zone="hand",
                prompt="Put a card from your hand onto your deck",
                card_options=_hand,
            ),
        },
    ),
]

CARDS: dict[str, CardDefinition] = {card.name: card for card in _BASE_CARDS + _KINGDOM}

BASE_SUPPLY_CARDS = [card.name for card in _BASE_CARDS]
KINGDOM_CARDS = [card.name for card in _KINGDOM]
ACTION_CARDS = [card.name for card in _KINGDOM if card.is_action]

# The recommended first-game kingdom
DEFAULT_KINGDOM = [
    "Cellar", "Market", "Merchant", "Militia", "Mine",
    "Moat", "Remodel", "Smithy", "Village", "Workshop",
]

# =============================================================================
# Game constants
# =============================================================================

MIN_PLAYERS = 2
MAX_PLAYERS = 4
KINGDOM_SIZE = 10
KINGDOM_SIZE_BY_PLAYERS = {2: 8, 3: 10, 4: 10}
KINGDOM_PILE_SIZE = 10
HAND_SIZE = 5
STARTING_DECK = {"Copper": 7, "Estate": 3}
GAME_END_PILE = "Province"
EMPTY_PILES_TO_END = 3


def get_card(name: str) -> CardDefinition | None:
    """Look up a card definition by name."""
    return CARDS.get(name)


def card_cost(name: str) -> int:
    card = CARDS.get(name)
    return card.cost if card else 0


def is_action(name: str) -> bool:
    card = CARDS.get(name)
    return bool(card and card.is_action)


def is_treasure(name: str) -> bool:
    card = CARDS.get(name)
    return bool(card and card.is_treasure)


def is_victory(name: str) -> bool:
    card = CARDS.get(name)
    return bool(card and card.is_victory)


def victory_pile_size(num_players: int) -> int:
    return 8 if num_players == 2 else 12


def build_supply(kingdom_cards: list[str], num_players: int) -> dict[str, int]:
    """Starting supply counts for a kingdom and player count."""
    victory = victory_pile_size(num_players)
    supply = {
        "Copper": 60 - STARTING_DECK["Copper"] * num_players,
        "Silver": 40,
        "Gold": 30,
        "Estate": victory,
        "Duchy": victory,
        "Province": victory,
        "Curse": 10 * (num_players - 1),
    }
    for name in kingdom_cards:
        supply[name] = victory if CARDS[name].is_victory else KINGDOM_PILE_SIZE
    return supply


def random_kingdom(seed: int, player_count: int = MAX_PLAYERS) -> list[str]:
    """Pick a kingdom deterministically from a seed; two-player games use 8 piles."""
    size = KINGDOM_SIZE_BY_PLAYERS.get(player_count, KINGDOM_SIZE)
    return sorted(random.Random(seed).sample(KINGDOM_CARDS, size))


def starting_deck() -> list[str]:
    cards: list[str] = []
    for name, count in STARTING_DECK.items():
        cards.extend([name] * count)
    return cards
