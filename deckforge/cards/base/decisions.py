"""
Decision cards - Resolvers that pause for the playing player's input.

Covers the trash/gain family (Chapel, Workshop, Moneylender, Remodel,
Mine, Artisan), the batch discard of Cellar and the post-draw choices
of Harbinger and Poacher.
"""

from __future__ import annotations
from dataclasses import replace

from ...engine_core.card_moves import (
    create_discard_events,
    create_draw_events,
    create_gain_events,
    create_trash_events,
)
from ...engine_core.events import GameEvent
from .. import stages
from ..catalog import card_cost
from ..effect_types import (
    CardEffectContext,
    CardEffectResult,
    create_card_selection_decision,
    create_multi_stage_card,
    decision_from_catalog,
    empty_result,
    preview,
    resource_events,
)

REMODEL_BONUS = 2
MINE_BONUS = 3
MONEYLENDER_COINS = 3


# =============================================================================
# Chapel
# =============================================================================

def _chapel_initial(ctx: CardEffectContext) -> CardEffectResult:
    return CardEffectResult(pending_choice=decision_from_catalog(ctx, stages.TRASH))


def _chapel_trash(ctx: CardEffectContext) -> CardEffectResult:
    return CardEffectResult(events=create_trash_events(ctx.player_id, ctx.selection))


chapel = create_multi_stage_card({
    stages.INITIAL: _chapel_initial,
    stages.TRASH: _chapel_trash,
})


# =============================================================================
# Workshop
# =============================================================================

def _workshop_initial(ctx: CardEffectContext) -> CardEffectResult:
    return CardEffectResult(pending_choice=decision_from_catalog(ctx, stages.GAIN))


def _workshop_gain(ctx: CardEffectContext) -> CardEffectResult:
    if not ctx.selection:
        return empty_result()
    return CardEffectResult(
        events=create_gain_events(ctx.state, ctx.player_id, ctx.selection[0])
    )


workshop = create_multi_stage_card({
    stages.INITIAL: _workshop_initial,
    stages.GAIN: _workshop_gain,
})


# =============================================================================
# Moneylender
# =============================================================================

def _moneylender_initial(ctx: CardEffectContext) -> CardEffectResult:
    return CardEffectResult(pending_choice=decision_from_catalog(ctx, stages.TRASH))


def _moneylender_trash(ctx: CardEffectContext) -> CardEffectResult:
    if "Copper" not in ctx.selection:
        return empty_result()
    events = [GameEvent.card_trashed(ctx.player_id, "Copper")]
    events.extend(resource_events(coins=MONEYLENDER_COINS))
    return CardEffectResult(events=events)


moneylender = create_multi_stage_card({
    stages.INITIAL: _moneylender_initial,
    stages.TRASH: _moneylender_trash,
})


# =============================================================================
# Trash -> gain (Remodel, Mine)
# =============================================================================

def _create_trash_then_gain(bonus: int, gain_zone: str):
    """Trash a card, then gain one costing up to its cost plus bonus."""

    def initial(ctx: CardEffectContext) -> CardEffectResult:
        return CardEffectResult(pending_choice=decision_from_catalog(ctx, stages.TRASH))

    def trash(ctx: CardEffectContext) -> CardEffectResult:
        if not ctx.selection:
            return empty_result()
        trashed = ctx.selection[0]
        events = [GameEvent.card_trashed(ctx.player_id, trashed)]
        after = replace(ctx, state=preview(ctx.state, events))
        metadata = {"trashed_card": trashed, "trashed_cost": card_cost(trashed), "bonus": bonus}
        choice = decision_from_catalog(after, stages.GAIN, metadata=metadata)
        return CardEffectResult(events=events, pending_choice=choice)

    def gain(ctx: CardEffectContext) -> CardEffectResult:
        if not ctx.selection:
            return empty_result()
        return CardEffectResult(
            events=create_gain_events(ctx.state, ctx.player_id, ctx.selection[0], to_zone=gain_zone)
        )

    return create_multi_stage_card({
        stages.INITIAL: initial,
        stages.TRASH: trash,
        stages.GAIN: gain,
    })


remodel = _create_trash_then_gain(REMODEL_BONUS, "discard")
mine = _create_trash_then_gain(MINE_BONUS, "hand")


# =============================================================================
# Artisan: gain to hand -> topdeck
# =============================================================================

def _artisan_initial(ctx: CardEffectContext) -> CardEffectResult:
    choice = decision_from_catalog(ctx, stages.GAIN)
    if choice is None:
        choice = decision_from_catalog(ctx, stages.TOPDECK)
    return CardEffectResult(pending_choice=choice)


def _artisan_gain(ctx: CardEffectContext) -> CardEffectResult:
    events = []
    if ctx.selection:
        events = create_gain_events(ctx.state, ctx.player_id, ctx.selection[0], to_zone="hand")
    # The topdeck options include the card just gained
    after = replace(ctx, state=preview(ctx.state, events))
    return CardEffectResult(events=events, pending_choice=decision_from_catalog(after, stages.TOPDECK))


def _artisan_topdeck(ctx: CardEffectContext) -> CardEffectResult:
    if not ctx.selection:
        return empty_result()
    return CardEffectResult(events=[GameEvent.card_put_on_deck(ctx.player_id, ctx.selection[0])])


artisan = create_multi_stage_card({
    stages.INITIAL: _artisan_initial,
    stages.GAIN: _artisan_gain,
    stages.TOPDECK: _artisan_topdeck,
})


# =============================================================================
# Cellar: batch discard -> draw
# =============================================================================

def _cellar_initial(ctx: CardEffectContext) -> CardEffectResult:
    return CardEffectResult(
        events=resource_events(actions=1),
        pending_choice=decision_from_catalog(ctx, stages.DISCARD),
    )


def _cellar_discard(ctx: CardEffectContext) -> CardEffectResult:
    discards = create_discard_events(ctx.player_id, ctx.selection)
    after_discard = preview(ctx.state, discards)
    draws = create_draw_events(after_discard, ctx.player_id, len(ctx.selection))
    return CardEffectResult(events=discards + draws)


cellar = create_multi_stage_card({
    stages.INITIAL: _cellar_initial,
    stages.DISCARD: _cellar_discard,
})


# =============================================================================
# Harbinger
# =============================================================================

def _harbinger_initial(ctx: CardEffectContext) -> CardEffectResult:
    events = create_draw_events(ctx.state, ctx.player_id, 1)
    events.extend(resource_events(actions=1))
    player = preview(ctx.state, events).get_player(ctx.player_id)
    if player is None or not player.discard:
        return CardEffectResult(events=events)
    choice = create_card_selection_decision(
        player_id=ctx.player_id,
        from_zone="discard",
        prompt="Harbinger: You may put a card from your discard pile onto your deck",
        card_options=list(player.discard),
        min_count=0,
        max_count=1,
        card_being_played=ctx.card,
        stage=stages.TOPDECK,
    )
    return CardEffectResult(events=events, pending_choice=choice)


def _harbinger_topdeck(ctx: CardEffectContext) -> CardEffectResult:
    if not ctx.selection:
        return empty_result()
    return CardEffectResult(
        events=[GameEvent.card_put_on_deck(ctx.player_id, ctx.selection[0], from_zone="discard")]
    )


harbinger = create_multi_stage_card({
    stages.INITIAL: _harbinger_initial,
    stages.TOPDECK: _harbinger_topdeck,
})


# =============================================================================
# Poacher
# =============================================================================

def _poacher_initial(ctx: CardEffectContext) -> CardEffectResult:
    events = create_draw_events(ctx.state, ctx.player_id, 1)
    events.extend(resource_events(actions=1, coins=1))
    after = preview(ctx.state, events)
    player = after.get_player(ctx.player_id)
    if player is None:
        return CardEffectResult(events=events)
    to_discard = min(after.empty_pile_count(), len(player.hand))
    if to_discard == 0:
        return CardEffectResult(events=events)
    choice = create_card_selection_decision(
        player_id=ctx.player_id,
        from_zone="hand",
        prompt=f"Poacher: Discard {to_discard} card(s)",
        card_options=list(player.hand),
        min_count=to_discard,
        max_count=to_discard,
        card_being_played=ctx.card,
        stage=stages.DISCARD,
        metadata={"discard_count": to_discard},
    )
    return CardEffectResult(events=events, pending_choice=choice)


def _poacher_discard(ctx: CardEffectContext) -> CardEffectResult:
    return CardEffectResult(events=create_discard_events(ctx.player_id, ctx.selection))


poacher = create_multi_stage_card({
    stages.INITIAL: _poacher_initial,
    stages.DISCARD: _poacher_discard,
})
