"""
Tests for draw, reveal, gain and shuffle helpers.

Tests:
- Draw order and the single mid-draw shuffle
- Deterministic shuffles
- Reveal shortfall placement
- Gains from empty piles
"""

from ..engine_core.card_moves import (
    create_draw_events,
    create_gain_events,
    deal_order,
    reveal_top,
    shuffle_order,
)
from ..engine_core.events import EventType
from ..engine_core.projector import apply_events


class TestDraw:
    """Tests for create_draw_events."""

    def test_draws_from_top(self, make_state):
        """Cards come off the end of the deck list."""
        state = make_state(decks={"alice": ["Estate", "Silver", "Gold"]})
        events = create_draw_events(state, "alice", 2)
        assert [e.card for e in events] == ["Gold", "Silver"]
        assert all(e.type == EventType.CARD_DRAWN for e in events)

    def test_no_shuffle_when_deck_suffices(self, make_state):
        """A full deck never triggers a shuffle."""
        state = make_state(decks={"alice": ["Copper"] * 5}, discards={"alice": ["Estate"]})
        events = create_draw_events(state, "alice", 5)
        assert not any(e.type == EventType.DECK_SHUFFLED for e in events)

    def test_single_shuffle_between_batches(self, make_state):
        """deck < N with discard: exactly one shuffle between the two batches."""
        state = make_state(
            decks={"alice": ["Copper", "Estate"]},
            discards={"alice": ["Silver", "Gold", "Duchy", "Copper"]},
        )
        events = create_draw_events(state, "alice", 5)
        types = [e.type for e in events]

        assert types.count(EventType.DECK_SHUFFLED) == 1
        shuffle_at = types.index(EventType.DECK_SHUFFLED)
        assert shuffle_at == 2
        assert types[:2] == [EventType.CARD_DRAWN] * 2
        assert types[3:] == [EventType.CARD_DRAWN] * 3

    def test_total_drawn_is_capped(self, make_state):
        """Total drawn = min(N, deck + discard)."""
        state = make_state(decks={"alice": ["Copper"]}, discards={"alice": ["Estate", "Silver"]})
        events = create_draw_events(state, "alice", 6)
        drawn = [e for e in events if e.type == EventType.CARD_DRAWN]
        assert len(drawn) == 3

        after = apply_events(state, events)
        player = after.get_player("alice")
        assert sorted(player.hand) == ["Copper", "Estate", "Silver"]
        assert player.deck == [] and player.discard == []

    def test_empty_deck_and_discard(self, make_state):
        """Nothing to draw means no events."""
        state = make_state()
        assert create_draw_events(state, "alice", 3) == []

    def test_unknown_player(self, make_state):
        """A missing player draws nothing."""
        assert create_draw_events(make_state(), "zed", 3) == []

    def test_shuffle_is_seeded(self, make_state):
        """The same state always produces the same shuffle."""
        state = make_state(discards={"alice": ["Copper", "Silver", "Gold", "Estate", "Duchy"]}, seed=11)
        first = create_draw_events(state, "alice", 1)
        second = create_draw_events(state, "alice", 1)
        assert first == second
        assert first[0].get("new_deck_order") == shuffle_order(
            11, "alice", 0, ["Copper", "Silver", "Gold", "Estate", "Duchy"]
        )


class TestShuffleOrder:
    """Tests for the seeded orderings."""

    def test_shuffle_depends_on_count(self):
        """Successive shuffles use different streams."""
        cards = [f"c{i}" for i in range(20)]
        assert shuffle_order(1, "alice", 0, cards) != shuffle_order(1, "alice", 1, cards)

    def test_shuffle_is_permutation(self):
        """Shuffling never adds or loses cards."""
        cards = ["Copper"] * 7 + ["Estate"] * 3
        assert sorted(shuffle_order(9, "bob", 2, cards)) == sorted(cards)

    def test_deal_is_per_player(self):
        """Players get independent deals from the same seed."""
        cards = [f"c{i}" for i in range(20)]
        assert deal_order(3, "alice", cards) == deal_order(3, "alice", cards)
        assert deal_order(3, "alice", cards) != deal_order(3, "bob", cards)


class TestReveal:
    """Tests for reveal_top."""

    def test_reveal_top_first(self, make_state):
        """Cards come back top-first with no events when the deck suffices."""
        state = make_state(decks={"alice": ["Estate", "Silver", "Gold"]})
        events, cards = reveal_top(state, "alice", 2)
        assert events == []
        assert cards == ["Gold", "Silver"]

    def test_shortfall_shuffles_under_deck(self, make_state):
        """The shuffled discard goes UNDER the remaining deck."""
        state = make_state(decks={"alice": ["Gold"]}, discards={"alice": ["Copper", "Estate"]})
        events, cards = reveal_top(state, "alice", 2)

        assert len(events) == 1
        new_deck = events[0].get("new_deck_order")
        assert new_deck[-1] == "Gold"
        assert cards[0] == "Gold"
        assert sorted(new_deck) == ["Copper", "Estate", "Gold"]

    def test_reveal_short_everything(self, make_state):
        """Fewer cards than asked are returned when both piles run out."""
        state = make_state(decks={"alice": ["Gold"]})
        events, cards = reveal_top(state, "alice", 2)
        assert events == []
        assert cards == ["Gold"]


class TestGain:
    """Tests for create_gain_events."""

    def test_gain_to_zone(self, make_state):
        """A gain names its destination."""
        events = create_gain_events(make_state(), "alice", "Silver", to_zone="deck")
        assert len(events) == 1
        assert events[0].get("to_zone") == "deck"
        assert events[0].get("bought") is False

    def test_empty_pile_gains_nothing(self, make_state):
        """Supply exhaustion is a silent no-op."""
        state = make_state(supply={"Curse": 0})
        assert create_gain_events(state, "alice", "Curse") == []

    def test_unknown_card_gains_nothing(self, make_state):
        """A card not in the supply cannot be gained."""
        assert create_gain_events(make_state(), "alice", "Platinum") == []
