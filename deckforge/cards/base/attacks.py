"""
Attack cards and Council Room.

Militia, Bureaucrat and Bandit run on the opponent iterator; Witch and
Council Room affect every other player without asking anything.
"""

from __future__ import annotations

from ...engine_core.card_moves import create_draw_events, create_gain_events, reveal_top
from ...engine_core.events import GameEvent
from ...engine_core.state import Decision, GameState
from .. import stages
from ..catalog import is_treasure, is_victory
from ..effect_types import (
    CardEffectContext,
    CardEffectResult,
    create_card_selection_decision,
    preview,
    resource_events,
)
from ..opponent_iterator import create_opponent_iterator_effect, iterator_metadata

MILITIA_HAND_LIMIT = 3
MILITIA_COINS = 2
BANDIT_REVEAL_COUNT = 2


# =============================================================================
# Militia: discard down to 3
# =============================================================================

def _militia_filter(opponent: str, state: GameState):
    player = state.get_player(opponent)
    if player is None or len(player.hand) <= MILITIA_HAND_LIMIT:
        return None
    return {"hand": list(player.hand), "discard_count": len(player.hand) - MILITIA_HAND_LIMIT}


def _militia_decision(opponent, data, remaining, attacker, card):
    count = data["discard_count"]
    return create_card_selection_decision(
        player_id=opponent,
        from_zone="hand",
        prompt=f"Militia: Discard down to {MILITIA_HAND_LIMIT} cards (discard {count})",
        card_options=data["hand"],
        min_count=count,
        max_count=count,
        card_being_played=card,
        stage=stages.OPPONENT_DISCARD,
        metadata=iterator_metadata(remaining, attacker),
    )


def _militia_process(decision: Decision, opponent: str, data, state: GameState):
    return [GameEvent.card_discarded(opponent, card) for card in decision.selection]


militia = create_opponent_iterator_effect(
    filter=_militia_filter,
    create_decision=_militia_decision,
    process_choice=_militia_process,
    stage=stages.OPPONENT_DISCARD,
    initial_events=lambda ctx: resource_events(coins=MILITIA_COINS),
)


# =============================================================================
# Bureaucrat: Silver onto your deck, Victory cards onto theirs
# =============================================================================

def _bureaucrat_initial(ctx: CardEffectContext):
    return create_gain_events(ctx.state, ctx.player_id, "Silver", to_zone="deck")


def _bureaucrat_filter(opponent: str, state: GameState):
    player = state.get_player(opponent)
    if player is None:
        return None
    victory = [card for card in player.hand if is_victory(card)]
    return victory or None


def _bureaucrat_decision(opponent, victory_cards, remaining, attacker, card):
    return create_card_selection_decision(
        player_id=opponent,
        from_zone="hand",
        prompt="Bureaucrat: Put a Victory card from your hand onto your deck",
        card_options=victory_cards,
        min_count=1,
        max_count=1,
        card_being_played=card,
        stage=stages.OPPONENT_TOPDECK,
        metadata=iterator_metadata(remaining, attacker),
    )


def _bureaucrat_process(decision: Decision, opponent: str, victory_cards, state: GameState):
    if not decision.selection:
        return []
    card = decision.selection[0]
    return [
        GameEvent.card_revealed(opponent, card, from_zone="hand"),
        GameEvent.card_put_on_deck(opponent, card),
    ]


def _bureaucrat_reveal_hand(opponent: str, state: GameState):
    player = state.get_player(opponent)
    if player is None:
        return []
    return [GameEvent.card_revealed(opponent, card, from_zone="hand") for card in player.hand]


bureaucrat = create_opponent_iterator_effect(
    filter=_bureaucrat_filter,
    create_decision=_bureaucrat_decision,
    process_choice=_bureaucrat_process,
    stage=stages.OPPONENT_TOPDECK,
    initial_events=_bureaucrat_initial,
    on_skip=_bureaucrat_reveal_hand,
)


# =============================================================================
# Bandit: gain Gold, victims trash a non-Copper Treasure
# =============================================================================

def _bandit_initial(ctx: CardEffectContext):
    return create_gain_events(ctx.state, ctx.player_id, "Gold")


def _bandit_reveal(opponent: str, state: GameState):
    shuffle_events, revealed = reveal_top(state, opponent, BANDIT_REVEAL_COUNT)
    trashable = [card for card in revealed if is_treasure(card) and card != "Copper"]
    return {"shuffle": shuffle_events, "revealed": revealed, "trashable": trashable}


def _reveal_events(opponent: str, data) -> list[GameEvent]:
    events = list(data["shuffle"])
    events.extend(GameEvent.card_revealed(opponent, card) for card in data["revealed"])
    return events


def _bandit_filter(opponent: str, state: GameState):
    if state.get_player(opponent) is None:
        return None
    data = _bandit_reveal(opponent, state)
    return data if data["trashable"] else None


def _bandit_skip(opponent: str, state: GameState):
    data = _bandit_reveal(opponent, state)
    events = _reveal_events(opponent, data)
    events.extend(
        GameEvent.card_discarded(opponent, card, from_zone="deck") for card in data["revealed"]
    )
    return events


def _bandit_before_decision(opponent: str, data, state: GameState):
    return _reveal_events(opponent, data)


def _bandit_decision(opponent, data, remaining, attacker, card):
    return create_card_selection_decision(
        player_id=opponent,
        from_zone="deck",
        prompt="Bandit: Choose a revealed Treasure to trash",
        card_options=data["trashable"],
        min_count=1,
        max_count=1,
        card_being_played=card,
        stage=stages.VICTIM_TRASH_CHOICE,
        metadata=iterator_metadata(remaining, attacker),
    )


def _bandit_process(decision: Decision, opponent: str, data, state: GameState):
    rest = list(data["revealed"])
    events = []
    choice = decision.first
    if choice is not None and choice in data["trashable"]:
        rest.remove(choice)
        events.append(GameEvent.card_trashed(opponent, choice, from_zone="deck"))
    events.extend(GameEvent.card_discarded(opponent, card, from_zone="deck") for card in rest)
    return events


bandit = create_opponent_iterator_effect(
    filter=_bandit_filter,
    create_decision=_bandit_decision,
    process_choice=_bandit_process,
    stage=stages.VICTIM_TRASH_CHOICE,
    initial_events=_bandit_initial,
    on_skip=_bandit_skip,
    before_decision=_bandit_before_decision,
)


# =============================================================================
# Witch and Council Room
# =============================================================================

def witch(ctx: CardEffectContext) -> CardEffectResult:
    events = create_draw_events(ctx.state, ctx.player_id, 2)
    state = preview(ctx.state, events)
    for target in ctx.targets:
        gained = create_gain_events(state, target, "Curse")
        events.extend(gained)
        state = preview(state, gained)
    return CardEffectResult(events=events)


def council_room(ctx: CardEffectContext) -> CardEffectResult:
    events = create_draw_events(ctx.state, ctx.player_id, 4)
    events.extend(resource_events(buys=1))
    state = preview(ctx.state, events)
    for other in ctx.state.opponents_of(ctx.player_id):
        drawn = create_draw_events(state, other, 1)
        events.extend(drawn)
        state = preview(state, drawn)
    return CardEffectResult(events=events)
