"""
Pytest fixtures for Deckforge tests.
"""

import pytest

from ..cards.catalog import DEFAULT_KINGDOM, build_supply
from ..engine_core.command import Command
from ..engine_core.engine import CommandEngine
from ..engine_core.state import GameState, Phase, PlayerState


@pytest.fixture
def engine() -> CommandEngine:
    """A command engine with the base set resolvers."""
    return CommandEngine()


@pytest.fixture
def started_state(engine: CommandEngine) -> GameState:
    """A freshly started 2-player game with the default kingdom and a fixed seed."""
    result = engine.handle(
        GameState(),
        Command.start_game(["alice", "bob"], kingdom_cards=list(DEFAULT_KINGDOM), seed=42),
    )
    assert result.success, result.error
    return result.new_state


@pytest.fixture
def make_state():
    """
    Build a mid-game state directly, for card and engine tests.

    Zones not given are empty; the first player is active in the
    action phase with 1 action and 1 buy unless told otherwise.
    """

    def build(
        players=("alice", "bob"),
        hands=None,
        decks=None,
        discards=None,
        in_play=None,
        kingdom=None,
        supply=None,
        phase=Phase.ACTION,
        active=None,
        actions=1,
        buys=1,
        coins=0,
        seed=1,
        turn=1,
    ) -> GameState:
        hands = hands or {}
        decks = decks or {}
        discards = discards or {}
        in_play = in_play or {}
        kingdom = list(kingdom if kingdom is not None else DEFAULT_KINGDOM)
        return GameState(
            players={
                pid: PlayerState(
                    player_id=pid,
                    hand=list(hands.get(pid, [])),
                    deck=list(decks.get(pid, [])),
                    discard=list(discards.get(pid, [])),
                    in_play=list(in_play.get(pid, [])),
                )
                for pid in players
            },
            player_order=list(players),
            supply=dict(supply) if supply is not None else build_supply(kingdom, len(players)),
            kingdom_cards=kingdom,
            turn=turn,
            active_player=active or players[0],
            phase=phase,
            actions=actions,
            buys=buys,
            coins=coins,
            seed=seed,
        )

    return build


@pytest.fixture
def run(engine: CommandEngine):
    """Apply commands in order, asserting each succeeds; returns the final result."""

    def apply(state: GameState, *commands: Command):
        result = None
        for command in commands:
            result = engine.handle(state, command)
            assert result.success, f"{command.command_type.value} failed: {result.error}"
            state = result.new_state
        return result

    return apply
