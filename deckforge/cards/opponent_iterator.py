"""
Opponent Iterator - Drives an attack across opponents one decision at a time.

An attack is described by three callbacks:

    filter(opponent, state) -> data | None
        Does this opponent need to decide anything?
    create_decision(opponent, data, remaining, attacker, card) -> PendingChoice
        The choice to put to them.
    process_choice(decision, opponent, data, state) -> events
        What their answer does.

The initial call scans the attack targets in turn order and pauses on
the first opponent that matches, carrying the remaining opponents in
metadata. Each resume processes the answer and rescans what remains.
"""

from __future__ import annotations
from typing import Any, Callable, Sequence, Union

from ..engine_core.events import GameEvent
from ..engine_core.projector import apply_events
from ..engine_core.state import Decision, GameState, PendingChoice
from .effect_types import CardEffect, CardEffectContext, CardEffectResult, is_initial_call

OpponentFilter = Callable[[str, GameState], Any]
DecisionFactory = Callable[[str, Any, list, str, str], PendingChoice]
ChoiceProcessor = Callable[[Decision, str, Any, GameState], list]
OpponentEvents = Callable[[str, Any, GameState], list]
InitialEvents = Union[Sequence[GameEvent], Callable[[CardEffectContext], list]]


def create_opponent_iterator_effect(
    filter: OpponentFilter,
    create_decision: DecisionFactory,
    process_choice: ChoiceProcessor,
    stage: str,
    initial_events: InitialEvents = (),
    on_skip: Callable[[str, GameState], list] | None = None,
    before_decision: OpponentEvents | None = None,
) -> CardEffect:
    """
    Build an attack resolver.

    initial_events run once, before the first scan; the filter sees
    the state after they apply. on_skip emits events for a target that
    needs no decision, and before_decision emits events (reveals) just
    before a target is asked.
    """

    def scan(
        targets: list[str],
        state: GameState,
        attacker: str,
        card: str,
    ) -> tuple[list[GameEvent], PendingChoice | None]:
        events: list[GameEvent] = []
        for index, target in enumerate(targets):
            if state.get_player(target) is None:
                continue
            data = filter(target, state)
            if data is None:
                if on_skip is not None:
                    skipped = on_skip(target, state)
                    events.extend(skipped)
                    state = apply_events(state, skipped)
                continue
            if before_decision is not None:
                events.extend(before_decision(target, data, state))
            remaining = targets[index + 1:]
            return events, create_decision(target, data, remaining, attacker, card)
        return events, None

    def effect(ctx: CardEffectContext) -> CardEffectResult:
        if is_initial_call(ctx.decision, ctx.stage):
            if callable(initial_events):
                events = list(initial_events(ctx))
            else:
                events = list(initial_events)
            state = apply_events(ctx.state, events)
            scanned, choice = scan(ctx.targets, state, ctx.player_id, ctx.card)
            return CardEffectResult(events=events + scanned, pending_choice=choice)

        if ctx.stage != stage:
            return CardEffectResult()

        remaining = list(ctx.metadata.get("remaining_opponents", []))
        attacker = ctx.metadata.get("attacker", ctx.player_id)
        current = ctx.decision.player_id

        events: list[GameEvent] = []
        data = filter(current, ctx.state) if ctx.state.get_player(current) else None
        if data is not None:
            events.extend(process_choice(ctx.decision, current, data, ctx.state))

        state = apply_events(ctx.state, events)
        scanned, choice = scan(remaining, state, attacker, ctx.card)
        return CardEffectResult(events=events + scanned, pending_choice=choice)

    return effect


def iterator_metadata(remaining: list[str], attacker: str) -> dict[str, Any]:
    """Metadata every iterator decision carries."""
    return {"remaining_opponents": list(remaining), "attacker": attacker}
