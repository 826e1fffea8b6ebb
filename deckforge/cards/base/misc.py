"""
Deck-manipulating state machines and play intents.

Library and Sentry work against the top of the deck; Vassal and
Throne Room only name a card for the engine to play.
"""

from __future__ import annotations

from ...engine_core.card_moves import create_draw_events, reveal_top
from ...engine_core.events import GameEvent
from ...engine_core.state import GameState
from .. import stages
from ..catalog import is_action
from ..effect_types import (
    CardEffectContext,
    CardEffectResult,
    PlayIntent,
    create_card_selection_decision,
    create_multi_stage_card,
    empty_result,
    preview,
    resource_events,
)

LIBRARY_HAND_TARGET = 7
SENTRY_LOOK_COUNT = 2
VASSAL_COINS = 2
THRONE_ROOM_TIMES = 2


# =============================================================================
# Library: draw to 7, optionally setting Actions aside
# =============================================================================

def _library_loop(ctx: CardEffectContext, state: GameState, events: list[GameEvent]) -> CardEffectResult:
    """Draw until the hand is full, pausing on each Action."""
    player_id = ctx.player_id
    while True:
        player = state.get_player(player_id)
        if player is None or len(player.hand) >= LIBRARY_HAND_TARGET:
            break
        shuffle_events, top = reveal_top(state, player_id, 1)
        if not top:
            break
        events.extend(shuffle_events)
        state = preview(state, shuffle_events)
        card = top[0]
        if is_action(card):
            events.append(GameEvent.card_revealed(player_id, card))
            choice = create_card_selection_decision(
                player_id=player_id,
                from_zone="deck",
                prompt=f"Library: Set aside {card}?",
                card_options=[card],
                min_count=0,
                max_count=1,
                card_being_played=ctx.card,
                stage=stages.SET_ASIDE,
                metadata={"revealed_card": card},
            )
            return CardEffectResult(events=events, pending_choice=choice)
        drawn = [GameEvent.card_drawn(player_id, card)]
        events.extend(drawn)
        state = preview(state, drawn)

    player = state.get_player(player_id)
    if player is not None:
        events.extend(
            GameEvent.card_discarded(player_id, card, from_zone="set_aside")
            for card in player.set_aside
        )
    return CardEffectResult(events=events)


def _library_initial(ctx: CardEffectContext) -> CardEffectResult:
    return _library_loop(ctx, ctx.state, [])


def _library_set_aside(ctx: CardEffectContext) -> CardEffectResult:
    card = ctx.metadata.get("revealed_card")
    if card is None:
        return empty_result()
    if card in ctx.selection:
        events = [GameEvent.card_set_aside(ctx.player_id, card)]
    else:
        events = [GameEvent.card_drawn(ctx.player_id, card)]
    return _library_loop(ctx, preview(ctx.state, events), events)


library = create_multi_stage_card({
    stages.INITIAL: _library_initial,
    stages.SET_ASIDE: _library_set_aside,
})


# =============================================================================
# Sentry: look at 2 -> trash -> discard -> reorder
# =============================================================================

def _remaining_after(cards: list[str], selection: tuple[str, ...]) -> list[str]:
    remaining = list(cards)
    for card in selection:
        if card in remaining:
            remaining.remove(card)
    return remaining


def _sentry_choice(ctx: CardEffectContext, cards: list[str], stage: str, prompt: str) -> CardEffectResult:
    return CardEffectResult(pending_choice=create_card_selection_decision(
        player_id=ctx.player_id,
        from_zone="deck",
        prompt=prompt,
        card_options=cards,
        min_count=len(cards) if stage == stages.ORDER else 0,
        max_count=len(cards),
        card_being_played=ctx.card,
        stage=stage,
        metadata={"cards": list(cards)},
    ))


def _sentry_initial(ctx: CardEffectContext) -> CardEffectResult:
    events = create_draw_events(ctx.state, ctx.player_id, 1)
    events.extend(resource_events(actions=1))
    shuffle_events, revealed = reveal_top(preview(ctx.state, events), ctx.player_id, SENTRY_LOOK_COUNT)
    events.extend(shuffle_events)
    if not revealed:
        return CardEffectResult(events=events)
    events.extend(GameEvent.card_revealed(ctx.player_id, card) for card in revealed)
    result = _sentry_choice(ctx, revealed, stages.TRASH, "Sentry: Choose cards to trash")
    result.events = events
    return result


def _sentry_trash(ctx: CardEffectContext) -> CardEffectResult:
    events = [GameEvent.card_trashed(ctx.player_id, c, from_zone="deck") for c in ctx.selection]
    remaining = _remaining_after(ctx.metadata.get("cards", []), ctx.selection)
    if not remaining:
        return CardEffectResult(events=events)
    result = _sentry_choice(ctx, remaining, stages.DISCARD, "Sentry: Choose cards to discard")
    result.events = events
    return result


def _sentry_discard(ctx: CardEffectContext) -> CardEffectResult:
    events = [GameEvent.card_discarded(ctx.player_id, c, from_zone="deck") for c in ctx.selection]
    remaining = _remaining_after(ctx.metadata.get("cards", []), ctx.selection)
    if len(remaining) < 2 or remaining[0] == remaining[1]:
        return CardEffectResult(events=events)
    result = _sentry_choice(
        ctx, remaining, stages.ORDER, "Sentry: Order the cards to put back (first = top)"
    )
    result.events = events
    return result


def _sentry_order(ctx: CardEffectContext) -> CardEffectResult:
    # Put back in reverse so the first selected ends on top
    return CardEffectResult(events=[
        GameEvent.card_put_on_deck(ctx.player_id, card, from_zone="deck")
        for card in reversed(ctx.selection)
    ])


sentry = create_multi_stage_card({
    stages.INITIAL: _sentry_initial,
    stages.TRASH: _sentry_trash,
    stages.DISCARD: _sentry_discard,
    stages.ORDER: _sentry_order,
})


# =============================================================================
# Vassal: discard the top card, maybe play it
# =============================================================================

def _vassal_initial(ctx: CardEffectContext) -> CardEffectResult:
    events = resource_events(coins=VASSAL_COINS)
    shuffle_events, top = reveal_top(ctx.state, ctx.player_id, 1)
    if not top:
        return CardEffectResult(events=events)
    card = top[0]
    events.extend(shuffle_events)
    events.append(GameEvent.card_discarded(ctx.player_id, card, from_zone="deck"))
    if not is_action(card):
        return CardEffectResult(events=events)
    choice = create_card_selection_decision(
        player_id=ctx.player_id,
        from_zone="discard",
        prompt=f"Vassal: Play {card} from your discard pile?",
        card_options=[card],
        min_count=0,
        max_count=1,
        card_being_played=ctx.card,
        stage=stages.PLAY_ACTION,
        metadata={"discarded_card": card},
    )
    return CardEffectResult(events=events, pending_choice=choice)


def _vassal_play(ctx: CardEffectContext) -> CardEffectResult:
    card = ctx.metadata.get("discarded_card")
    if card is None or card not in ctx.selection:
        return empty_result()
    return CardEffectResult(play=PlayIntent(card=card, times=1, from_zone="discard"))


vassal = create_multi_stage_card({
    stages.INITIAL: _vassal_initial,
    stages.PLAY_ACTION: _vassal_play,
})


# =============================================================================
# Throne Room: play an Action twice
# =============================================================================

def _throne_room_initial(ctx: CardEffectContext) -> CardEffectResult:
    player = ctx.player
    if player is None:
        return empty_result()
    actions = [card for card in player.hand if is_action(card)]
    if not actions:
        return empty_result()
    return CardEffectResult(pending_choice=create_card_selection_decision(
        player_id=ctx.player_id,
        from_zone="hand",
        prompt="Throne Room: Choose an Action to play twice",
        card_options=actions,
        min_count=0,
        max_count=1,
        card_being_played=ctx.card,
        stage=stages.CHOOSE_ACTION,
    ))


def _throne_room_choose(ctx: CardEffectContext) -> CardEffectResult:
    if not ctx.selection:
        return empty_result()
    return CardEffectResult(play=PlayIntent(card=ctx.selection[0], times=THRONE_ROOM_TIMES))


throne_room = create_multi_stage_card({
    stages.INITIAL: _throne_room_initial,
    stages.CHOOSE_ACTION: _throne_room_choose,
})
