"""
Tests for the card catalog and its consistency checks.

Tests:
- Catalog definitions are well-formed
- Kingdom selections are checked
- Resolver registry matches the catalog
- Supply setup by player count
"""

import pytest

from ..cards import CARD_EFFECTS
from ..cards.catalog import (
    CARDS,
    DEFAULT_KINGDOM,
    KINGDOM_CARDS,
    CardDefinition,
    CardType,
    build_supply,
    random_kingdom,
    starting_deck,
)
from ..cards.validation import (
    CatalogValidationError,
    validate_catalog,
    validate_kingdom,
    validate_registry,
)


class TestCatalog:
    """Tests for the shipped catalog."""

    def test_catalog_is_valid(self):
        result = validate_catalog()
        assert result.valid, result.errors

    def test_bad_definitions(self):
        cards = {
            "Broken": CardDefinition("Broken", -1, ()),
            "Penny": CardDefinition("Penny", 0, (CardType.TREASURE,)),
            "Shield": CardDefinition("Shield", 2, (CardType.ACTION, CardType.REACTION)),
        }
        result = validate_catalog(cards)
        assert not result.valid
        assert any("negative cost" in e for e in result.errors)
        assert any("no types" in e for e in result.errors)
        assert any("no coin value" in e for e in result.errors)
        assert result.warnings == ["Reaction 'Shield' has no trigger"]

    def test_starting_deck(self):
        deck = starting_deck()
        assert deck.count("Copper") == 7
        assert deck.count("Estate") == 3

    def test_random_kingdom_is_seeded(self):
        assert random_kingdom(3) == random_kingdom(3)
        assert len(set(random_kingdom(3))) == 10
        assert set(random_kingdom(3)) <= set(KINGDOM_CARDS)

    def test_random_kingdom_size_by_players(self):
        assert len(random_kingdom(3, player_count=2)) == 8
        assert len(random_kingdom(3, player_count=3)) == 10
        assert len(random_kingdom(3, player_count=4)) == 10
        assert validate_kingdom(random_kingdom(3, player_count=2)).warnings == []


class TestSupply:
    """Tests for build_supply."""

    @pytest.mark.parametrize("players,victory,curses,copper", [(2, 8, 10, 46), (3, 12, 20, 39), (4, 12, 30, 32)])
    def test_pile_sizes(self, players, victory, curses, copper):
        supply = build_supply(DEFAULT_KINGDOM, players)
        assert supply["Province"] == victory
        assert supply["Estate"] == victory
        assert supply["Curse"] == curses
        assert supply["Copper"] == copper
        assert supply["Gold"] == 30

    def test_victory_kingdom_pile(self):
        kingdom = [name for name in DEFAULT_KINGDOM if name != "Smithy"] + ["Gardens"]
        assert build_supply(kingdom, 2)["Gardens"] == 8
        assert build_supply(kingdom, 3)["Gardens"] == 12

    def test_order(self):
        supply = build_supply(DEFAULT_KINGDOM, 2)
        assert list(supply)[:7] == ["Copper", "Silver", "Gold", "Estate", "Duchy", "Province", "Curse"]
        assert list(supply)[7:] == list(DEFAULT_KINGDOM)


class TestKingdomValidation:
    """Tests for validate_kingdom."""

    def test_default_kingdom(self):
        result = validate_kingdom(DEFAULT_KINGDOM)
        assert result.valid
        assert result.warnings == []

    def test_unknown_and_base_cards(self):
        result = validate_kingdom(["Smithy", "Dragon", "Copper"])
        assert not result.valid
        assert "Unknown card 'Dragon'" in result.errors
        assert "'Copper' is not a kingdom card" in result.errors
        assert result.warnings

    def test_duplicates(self):
        result = validate_kingdom(["Smithy", "Smithy"])
        assert result.errors == ["'Smithy' appears more than once"]

    def test_empty(self):
        assert validate_kingdom([]).errors == ["Kingdom is empty"]


class TestRegistry:
    """Tests for validate_registry."""

    def test_shipped_registry(self):
        validate_registry(CARD_EFFECTS)

    def test_missing_resolver(self):
        registry = {name: effect for name, effect in CARD_EFFECTS.items() if name != "Smithy"}
        with pytest.raises(CatalogValidationError) as excinfo:
            validate_registry(registry)
        assert excinfo.value.errors == ["Action card 'Smithy' has no resolver"]

    def test_resolver_for_non_action(self):
        registry = dict(CARD_EFFECTS, Gold=CARD_EFFECTS["Smithy"], Dragon=CARD_EFFECTS["Smithy"])
        with pytest.raises(CatalogValidationError) as excinfo:
            validate_registry(registry)
        assert len(excinfo.value.errors) == 2

    def test_every_card_definition_is_frozen(self):
        assert all(isinstance(card, CardDefinition) for card in CARDS.values())
        with pytest.raises(AttributeError):
            CARDS["Copper"].cost = 5
