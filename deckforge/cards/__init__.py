"""
Cards - Catalog data, the resolver contract and the base set resolvers.
"""

from .catalog import (
    CARDS,
    DEFAULT_KINGDOM,
    KINGDOM_CARDS,
    CardDefinition,
    CardType,
    build_supply,
    get_card,
    random_kingdom,
)
from .decision_spec import DecisionContext, DecisionSpec, generate_decision_from_spec
from .effect_types import (
    CardEffect,
    CardEffectContext,
    CardEffectResult,
    PlayIntent,
    create_multi_stage_card,
    create_simple_card_effect,
    is_initial_call,
)
from .opponent_iterator import create_opponent_iterator_effect
from .validation import (
    CatalogValidationError,
    ValidationResult,
    validate_catalog,
    validate_kingdom,
    validate_registry,
)
from .base import CARD_EFFECTS, get_card_effect

__all__ = [
    "CARDS",
    "CARD_EFFECTS",
    "DEFAULT_KINGDOM",
    "KINGDOM_CARDS",
    "CardDefinition",
    "CardEffect",
    "CardEffectContext",
    "CardEffectResult",
    "CardType",
    "CatalogValidationError",
    "DecisionContext",
    "DecisionSpec",
    "PlayIntent",
    "ValidationResult",
    "build_supply",
    "create_multi_stage_card",
    "create_opponent_iterator_effect",
    "create_simple_card_effect",
    "generate_decision_from_spec",
    "get_card",
    "get_card_effect",
    "is_initial_call",
    "random_kingdom",
    "validate_catalog",
    "validate_kingdom",
    "validate_registry",
]
