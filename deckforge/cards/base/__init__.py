"""
Base set resolvers.

CARD_EFFECTS maps every action card in the catalog to its resolver.
The mapping is checked against the catalog when this package is
imported, so a missing resolver fails at import rather than mid-game.
"""

from ..effect_types import CardEffect
from ..validation import validate_registry
from .attacks import bandit, bureaucrat, council_room, militia, witch
from .decisions import (
    artisan,
    cellar,
    chapel,
    harbinger,
    mine,
    moneylender,
    poacher,
    remodel,
    workshop,
)
from .misc import library, sentry, throne_room, vassal
from .simple import festival, laboratory, market, merchant, moat, smithy, village

CARD_EFFECTS: dict[str, CardEffect] = {
    "Artisan": artisan,
    "Bandit": bandit,
    "Bureaucrat": bureaucrat,
    "Cellar": cellar,
    "Chapel": chapel,
    "Council Room": council_room,
    "Festival": festival,
    "Harbinger": harbinger,
    "Laboratory": laboratory,
    "Library": library,
    "Market": market,
    "Merchant": merchant,
    "Militia": militia,
    "Mine": mine,
    "Moat": moat,
    "Moneylender": moneylender,
    "Poacher": poacher,
    "Remodel": remodel,
    "Sentry": sentry,
    "Smithy": smithy,
    "Throne Room": throne_room,
    "Vassal": vassal,
    "Village": village,
    "Witch": witch,
    "Workshop": workshop,
}

validate_registry(CARD_EFFECTS)


def get_card_effect(name: str) -> CardEffect | None:
    """Look up the resolver for a card."""
    return CARD_EFFECTS.get(name)


__all__ = ["CARD_EFFECTS", "get_card_effect"]
