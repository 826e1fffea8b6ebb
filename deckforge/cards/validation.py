"""
Catalog Validation - Consistency checks for cards, kingdoms and resolvers.

Validates that:
1. Every card definition is well-formed (cost, types, decision specs)
2. Every action card has exactly one resolver, and every resolver a card
3. A kingdom names real, distinct kingdom cards
"""

from __future__ import annotations
from dataclasses import dataclass
from typing import Callable, Mapping

from .catalog import CARDS, KINGDOM_CARDS, KINGDOM_SIZE, KINGDOM_SIZE_BY_PLAYERS, CardDefinition, CardType


class CatalogValidationError(Exception):
    """Raised when the catalog and resolver registry disagree."""

    def __init__(self, errors: list[str]):
        self.errors = errors
        super().__init__(
            f"Catalog validation failed with {len(errors)} error(s): " + "; ".join(errors)
        )


@dataclass
class ValidationResult:
    """Result of validation, with errors and warnings."""
    valid: bool
    errors: list[str]
    warnings: list[str]


def validate_catalog(cards: Mapping[str, CardDefinition] | None = None) -> ValidationResult:
    """Validate every card definition."""
    cards = CARDS if cards is None else cards
    errors: list[str] = []
    warnings: list[str] = []

    for name, card in cards.items():
        if name != card.name:
            errors.append(f"Card '{name}' is registered under a different name '{card.name}'")
        if card.cost < 0:
            errors.append(f"Card '{name}' has negative cost")
        if not card.types:
            errors.append(f"Card '{name}' has no types")
        if card.is_treasure and card.coins <= 0:
            errors.append(f"Treasure '{name}' has no coin value")
        if card.reaction_trigger and not card.is_reaction:
            errors.append(f"Card '{name}' has a reaction trigger but is not a Reaction")
        if card.is_reaction and not card.reaction_trigger:
            warnings.append(f"Reaction '{name}' has no trigger")
        if card.decisions and not card.is_action:
            errors.append(f"Card '{name}' declares decisions but is not an Action")
        if card.vp is None and not card.is_victory:
            errors.append(f"Card '{name}' has variable VP but is not a Victory card")

    return ValidationResult(valid=len(errors) == 0, errors=errors, warnings=warnings)


def validate_kingdom(names: list[str]) -> ValidationResult:
    """Validate a kingdom selection."""
    errors: list[str] = []
    warnings: list[str] = []

    for name in names:
        if name not in CARDS:
            errors.append(f"Unknown card '{name}'")
        elif name not in KINGDOM_CARDS:
            errors.append(f"'{name}' is not a kingdom card")
    duplicates = sorted({name for name in names if names.count(name) > 1})
    for name in duplicates:
        errors.append(f"'{name}' appears more than once")

    if not names:
        errors.append("Kingdom is empty")
    elif len(names) not in KINGDOM_SIZE_BY_PLAYERS.values():
        warnings.append(f"Kingdom has {len(names)} cards instead of {KINGDOM_SIZE}")

    return ValidationResult(valid=len(errors) == 0, errors=errors, warnings=warnings)


def validate_registry(
    registry: Mapping[str, Callable],
    cards: Mapping[str, CardDefinition] | None = None,
) -> None:
    """
    Check the resolver registry against the catalog.

    Raises CatalogValidationError if an action card has no resolver or a
    resolver names a card that is not an action in the catalog.
    """
    cards = CARDS if cards is None else cards
    errors: list[str] = []

    for name, card in cards.items():
        if card.has_type(CardType.ACTION) and name not in registry:
            errors.append(f"Action card '{name}' has no resolver")
    for name in registry:
        card = cards.get(name)
        if card is None:
            errors.append(f"Resolver registered for unknown card '{name}'")
        elif not card.is_action:
            errors.append(f"Resolver registered for non-action card '{name}'")

    if errors:
        raise CatalogValidationError(errors)
