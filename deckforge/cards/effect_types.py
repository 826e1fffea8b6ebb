"""
Card Effect Types - The resolver contract and shared helpers.

A resolver is a pure function:

    resolve(ctx: CardEffectContext) -> CardEffectResult

No decision/stage means "initial call". A resolver that needs input
returns a PendingChoice and is re-invoked later with the answer, the
stage tag and the metadata it carried. It never reads the live pending
choice and never mutates ctx.state.
"""

from __future__ import annotations
from dataclasses import dataclass, field
from typing import Any, Callable

from ..engine_core.card_moves import create_draw_events
from ..engine_core.events import GameEvent
from ..engine_core.projector import apply_events
from ..engine_core.state import Decision, GameState, PendingChoice
from . import stages
from .catalog import CARDS, get_gainable_cards, get_gainable_treasures
from .decision_spec import generate_decision_from_spec


@dataclass(frozen=True)
class CardEffectContext:
    """
    Everything a resolver may look at.

    player_id is the player who played the card, even when an opponent
    is answering the current decision. attack_targets is the
    reaction-filtered target list supplied by the engine.
    """
    state: GameState
    player_id: str
    card: str
    decision: Decision | None = None
    stage: str | None = None
    metadata: dict[str, Any] = field(default_factory=dict)
    attack_targets: list[str] | None = None

    @property
    def player(self):
        return self.state.get_player(self.player_id)

    @property
    def targets(self) -> list[str]:
        """Engine-supplied targets, or every opponent when called directly."""
        if self.attack_targets is not None:
            return list(self.attack_targets)
        return self.state.opponents_of(self.player_id)

    @property
    def selection(self) -> tuple[str, ...]:
        return self.decision.selection if self.decision else ()


@dataclass(frozen=True)
class PlayIntent:
    """
    Request for the engine to play another card.

    The resolver only names the card; the engine moves it into play
    from from_zone and runs its resolver `times` times.
    """
    card: str
    times: int = 1
    from_zone: str = "hand"


@dataclass
class CardEffectResult:
    """Events to emit plus an optional pause or follow-up play."""
    events: list[GameEvent] = field(default_factory=list)
    pending_choice: PendingChoice | None = None
    play: PlayIntent | None = None


CardEffect = Callable[[CardEffectContext], CardEffectResult]


def empty_result() -> CardEffectResult:
    return CardEffectResult()


def is_initial_call(decision: Decision | None, stage: str | None) -> bool:
    """True when a resolver is invoked for the first time."""
    return decision is None or stage is None


# =============================================================================
# Factories
# =============================================================================

def create_simple_card_effect(
    cards: int = 0, actions: int = 0, buys: int = 0, coins: int = 0
) -> CardEffect:
    """Resolver for cards that only grant fixed benefits."""

    def effect(ctx: CardEffectContext) -> CardEffectResult:
        events = create_draw_events(ctx.state, ctx.player_id, cards) if cards else []
        events.extend(resource_events(actions=actions, buys=buys, coins=coins))
        return CardEffectResult(events=events)

    return effect


def create_multi_stage_card(handlers: dict[str, CardEffect]) -> CardEffect:
    """
    Resolver that routes each call to a stage handler.

    handlers must include "initial". An unknown stage resolves to an
    empty result so a stale choice cannot wedge the session.
    """
    if stages.INITIAL not in handlers:
        raise ValueError("multi-stage card needs an 'initial' handler")

    def effect(ctx: CardEffectContext) -> CardEffectResult:
        if is_initial_call(ctx.decision, ctx.stage):
            return handlers[stages.INITIAL](ctx)
        handler = handlers.get(ctx.stage)
        if handler is None:
            return empty_result()
        return handler(ctx)

    return effect


# =============================================================================
# Decision helpers
# =============================================================================

def create_card_selection_decision(
    player_id: str,
    from_zone: str,
    prompt: str,
    card_options: list[str],
    min_count: int,
    max_count: int,
    card_being_played: str,
    stage: str,
    metadata: dict[str, Any] | None = None,
) -> PendingChoice:
    """Build a decision with the standard structure."""
    return PendingChoice(
        player_id=player_id,
        prompt=prompt,
        card_options=list(card_options),
        min_count=min_count,
        max_count=max_count,
        card_being_played=card_being_played,
        stage=stage,
        from_zone=from_zone,
        metadata=dict(metadata or {}),
    )


def decision_from_catalog(
    ctx: CardEffectContext, stage: str, metadata: dict[str, Any] | None = None
) -> PendingChoice | None:
    """
    Build the catalog-declared decision for a stage.

    Returns None when there is nothing to choose from.
    """
    spec = CARDS[ctx.card].decisions[stage]
    choice = generate_decision_from_spec(
        spec, ctx.card, ctx.player_id, ctx.state, stage, metadata=metadata
    )
    if not choice.card_options:
        return None
    return choice


# =============================================================================
# Event helpers
# =============================================================================

def resource_events(actions: int = 0, buys: int = 0, coins: int = 0) -> list[GameEvent]:
    events = []
    if actions:
        events.append(GameEvent.actions_modified(actions))
    if buys:
        events.append(GameEvent.buys_modified(buys))
    if coins:
        events.append(GameEvent.coins_modified(coins))
    return events


def preview(state: GameState, events: list[GameEvent]) -> GameState:
    """Scratch state after events, for computing what comes next."""
    return apply_events(state, events)


def available_reactions(state: GameState, player_id: str, trigger: str) -> list[str]:
    """Cards in a player's hand that react to a trigger."""
    player = state.get_player(player_id)
    if player is None:
        return []
    return [
        card for card in player.hand
        if CARDS.get(card) is not None and CARDS[card].reaction_trigger == trigger
    ]


__all__ = [
    "CardEffect",
    "CardEffectContext",
    "CardEffectResult",
    "PlayIntent",
    "available_reactions",
    "create_card_selection_decision",
    "create_multi_stage_card",
    "create_simple_card_effect",
    "decision_from_catalog",
    "empty_result",
    "generate_decision_from_spec",
    "get_gainable_cards",
    "get_gainable_treasures",
    "is_initial_call",
    "preview",
    "resource_events",
]
