"""
Command Engine - Validates commands and turns them into events.

The engine is the only producer of events. For each command it:
1. Validates the command in full against the current state
2. Builds the command's events, applying each to a scratch state
3. Returns a CommandResult with the stamped events and the new state

An invalid command produces no events at all. While a decision is
pending, only an answer to that decision is accepted.

Card plays run as a work list: a play can queue further plays
(Throne Room, Vassal), and the remaining list is carried in the
PendingChoice so that a pause anywhere in the chain resumes cleanly.
"""

from __future__ import annotations
import logging
import random
from dataclasses import dataclass, field

from ..cards import stages
from ..cards.base import CARD_EFFECTS
from ..cards.catalog import (
    CARDS,
    HAND_SIZE,
    MAX_PLAYERS,
    MIN_PLAYERS,
    build_supply,
    random_kingdom,
    starting_deck,
)
from ..cards.effect_types import CardEffect, CardEffectContext, available_reactions
from ..cards.validation import validate_kingdom
from .card_moves import create_draw_events, create_gain_events, deal_order
from .command import Command, CommandResult, CommandType, ErrorCode
from .events import EventBuilder, EventType, GameEvent
from .projector import apply_event
from .scoring import check_game_over, create_game_over_event
from .state import Decision, GameState, PendingChoice, Phase
from .validators import (
    check_card_exists,
    check_card_in_hand,
    check_card_in_play,
    check_has_actions,
    check_has_buys,
    check_has_coins,
    check_in_supply,
    check_is_action,
    check_is_treasure,
    check_no_pending_choice,
    check_no_purchases,
    check_not_over,
    check_pending_choice_for,
    check_phase,
    check_selection,
    check_started,
    check_turn,
    validate_command,
)

logger = logging.getLogger(__name__)

REACTION_TRIGGER = "on_attack"
TREASURE_ORDER = ("Copper", "Silver", "Gold")
ANSWER_COMMANDS = {
    CommandType.SUBMIT_DECISION,
    CommandType.REVEAL_REACTION,
    CommandType.DECLINE_REACTION,
}


class _Emitter:
    """Stamps events for one command and keeps a scratch projection."""

    def __init__(self, state: GameState):
        self.state = state
        self.builder = EventBuilder(next_seq=state.event_count + 1)

    def root(self, draft: GameEvent) -> GameEvent:
        event = self.builder.root(draft)
        self.state = apply_event(self.state, event)
        return event

    def emit(self, drafts: list[GameEvent], caused_by: str | None = None) -> list[GameEvent]:
        events = self.builder.link(list(drafts), caused_by=caused_by)
        for event in events:
            self.state = apply_event(self.state, event)
        return events

    def result(self) -> CommandResult:
        return CommandResult.success_with_events(self.builder.events, self.state)


def _event(event_type: EventType, **payload) -> GameEvent:
    return GameEvent(event_type, payload)


@dataclass
class CommandEngine:
    """
    Executes commands against a projected state.

    Stateless - the state passed in is never changed; callers append the
    returned events to their log.
    """
    card_effects: dict[str, CardEffect] = field(default_factory=lambda: dict(CARD_EFFECTS))

    def handle(self, state: GameState, command: Command) -> CommandResult:
        """
        Handle a command.

        Returns CommandResult with events and new state, or an error.
        Raises ValueError for a command type the engine does not know.
        """
        handler = self._get_handler(command.command_type)
        if handler is None:
            raise ValueError(f"Unknown command type: {command.command_type!r}")

        if command.command_type not in ANSWER_COMMANDS and command.command_type != CommandType.START_GAME:
            error = check_no_pending_choice(state)
            if error:
                logger.debug("Rejected %s: %s", command.command_type.value, error.error)
                return error

        try:
            result = handler(state, command)
        except Exception as e:
            logger.exception("Handler for %s failed", command.command_type.value)
            return CommandResult.failure(str(e), ErrorCode.HANDLER_ERROR)

        if not result.success:
            logger.debug("Rejected %s: %s", command.command_type.value, result.error)
        return result

    def _get_handler(self, command_type):
        """Get the handler function for a command type."""
        handlers = {
            CommandType.START_GAME: self._handle_start_game,
            CommandType.PLAY_ACTION: self._handle_play_action,
            CommandType.PLAY_TREASURE: self._handle_play_treasure,
            CommandType.PLAY_ALL_TREASURES: self._handle_play_all_treasures,
            CommandType.UNPLAY_TREASURE: self._handle_unplay_treasure,
            CommandType.BUY_CARD: self._handle_buy_card,
            CommandType.END_PHASE: self._handle_end_phase,
            CommandType.SUBMIT_DECISION: self._handle_submit_decision,
            CommandType.REVEAL_REACTION: self._handle_reveal_reaction,
            CommandType.DECLINE_REACTION: self._handle_decline_reaction,
        }
        if not isinstance(command_type, CommandType):
            return None
        return handlers.get(command_type)

    # =========================================================================
    # Setup
    # =========================================================================

    def _handle_start_game(self, state: GameState, command: Command) -> CommandResult:
        if state.is_started:
            return CommandResult.failure("Game already started", ErrorCode.GAME_ALREADY_STARTED)

        players = list(command.params.get("players") or [])
        if not MIN_PLAYERS <= len(players) <= MAX_PLAYERS:
            return CommandResult.failure(
                f"Need {MIN_PLAYERS}-{MAX_PLAYERS} players, got {len(players)}",
                ErrorCode.INVALID_SETUP,
            )
        if len(set(players)) != len(players) or not all(players):
            return CommandResult.failure("Player ids must be unique and non-empty", ErrorCode.INVALID_SETUP)

        seed = command.params.get("seed")
        if seed is None:
            seed = random.randrange(2 ** 31)

        kingdom = command.params.get("kingdom_cards")
        if kingdom is None:
            kingdom = random_kingdom(seed, len(players))
        kingdom = list(kingdom)
        validation = validate_kingdom(kingdom)
        if not validation.valid:
            return CommandResult.failure("; ".join(validation.errors), ErrorCode.INVALID_SETUP)

        em = _Emitter(state)
        em.root(_event(
            EventType.GAME_INITIALIZED,
            players=players,
            kingdom_cards=kingdom,
            supply=build_supply(kingdom, len(players)),
            seed=seed,
        ))
        for pid in players:
            deck = deal_order(seed, pid, starting_deck())
            em.emit([_event(EventType.INITIAL_DECK_DEALT, player_id=pid, cards=deck)])
            hand = list(reversed(deck[-HAND_SIZE:]))
            em.emit([_event(EventType.INITIAL_HAND_DRAWN, player_id=pid, cards=hand)])
        self._start_turn(em, players[0], turn=1)

        logger.info("Game started: players=%s seed=%s kingdom=%s", players, seed, kingdom)
        return em.result()

    def _start_turn(self, em: _Emitter, player_id: str, turn: int) -> None:
        em.emit([
            _event(EventType.TURN_STARTED, turn=turn, player_id=player_id),
            GameEvent.actions_modified(1),
            GameEvent.buys_modified(1),
        ])

    # =========================================================================
    # Action phase
    # =========================================================================

    def _handle_play_action(self, state: GameState, command: Command) -> CommandResult:
        player_id, card = command.player_id, command.card
        error = validate_command(
            lambda: check_started(state),
            lambda: check_not_over(state),
            lambda: check_turn(state, player_id),
            lambda: check_phase(state, Phase.ACTION),
            lambda: check_card_exists(card),
            lambda: check_is_action(card),
            lambda: check_card_in_hand(state, player_id, card),
            lambda: check_has_actions(state),
        )
        if error:
            return error

        em = _Emitter(state)
        root = em.root(GameEvent.card_played(player_id, card))
        em.emit([GameEvent.actions_modified(-1)])
        queue = self._start_card(em, player_id, card, root.id, [])
        self._drain(em, player_id, root.id, queue)
        return em.result()

    def _drain(self, em: _Emitter, player_id: str, cause_id: str, queue: list[str]) -> None:
        """Resolve queued plays until the list is empty or a decision is needed."""
        while queue and em.state.pending_choice is None:
            card, queue = queue[0], queue[1:]
            queue = self._start_card(em, player_id, card, cause_id, queue)

    def _start_card(
        self, em: _Emitter, player_id: str, card: str, cause_id: str, queue: list[str]
    ) -> list[str]:
        """Begin resolving a card that is already in play."""
        definition = CARDS.get(card)
        if definition is not None and definition.is_attack:
            targets = em.state.opponents_of(player_id)
            em.emit([_event(
                EventType.ATTACK_DECLARED, attacker=player_id, card=card, targets=targets,
            )], cause_id)
            return self._reaction_window(em, player_id, card, cause_id, queue, targets, [])
        return self._invoke(em, player_id, card, cause_id, queue)

    def _reaction_window(
        self,
        em: _Emitter,
        attacker: str,
        card: str,
        cause_id: str,
        queue: list[str],
        pending_targets: list[str],
        unblocked: list[str],
    ) -> list[str]:
        """Offer reactions to each target in turn, then run the attack."""
        pending_targets = list(pending_targets)
        unblocked = list(unblocked)
        while pending_targets:
            target = pending_targets.pop(0)
            reactions = sorted(set(available_reactions(em.state, target, REACTION_TRIGGER)))
            if reactions:
                choice = PendingChoice(
                    player_id=target,
                    prompt=f"{attacker} played {card}. Reveal a reaction?",
                    card_options=reactions,
                    min_count=0,
                    max_count=1,
                    card_being_played=card,
                    stage=stages.REACTION,
                    choice_type="reaction",
                    metadata={
                        "attacker": attacker,
                        "pending_targets": pending_targets,
                        "unblocked": unblocked,
                    },
                    played_by=attacker,
                    queued_plays=list(queue),
                    cause_id=cause_id,
                )
                self._require_decision(em, choice, cause_id)
                return queue
            em.emit([_event(
                EventType.ATTACK_RESOLVED, attacker=attacker, target=target, card=card, blocked=False,
            )], cause_id)
            unblocked.append(target)
        return self._invoke(em, attacker, card, cause_id, queue, attack_targets=unblocked)

    def _invoke(
        self,
        em: _Emitter,
        player_id: str,
        card: str,
        cause_id: str,
        queue: list[str],
        attack_targets: list[str] | None = None,
        decision: Decision | None = None,
        stage: str | None = None,
        metadata: dict | None = None,
    ) -> list[str]:
        """Run a card's resolver and splice its events and intents in."""
        effect = self.card_effects.get(card)
        if effect is None:
            return queue
        ctx = CardEffectContext(
            state=em.state,
            player_id=player_id,
            card=card,
            decision=decision,
            stage=stage,
            metadata=dict(metadata or {}),
            attack_targets=attack_targets,
        )
        result = effect(ctx)
        em.emit(result.events, cause_id)

        if result.pending_choice is not None:
            choice = result.pending_choice.with_engine_context(
                played_by=player_id,
                attack_targets=attack_targets,
                queued_plays=list(queue),
                cause_id=cause_id,
            )
            self._require_decision(em, choice, cause_id)
            return queue

        if result.play is not None:
            intent = result.play
            em.emit([GameEvent.card_played(player_id, intent.card, intent.from_zone)], cause_id)
            queue = [intent.card] * intent.times + list(queue)
        return queue

    def _require_decision(self, em: _Emitter, choice: PendingChoice, cause_id: str) -> None:
        logger.debug(
            "Decision required from %s for %s (stage %s)",
            choice.player_id, choice.card_being_played, choice.stage,
        )
        em.emit([_event(
            EventType.DECISION_REQUIRED, player_id=choice.player_id, choice=choice.to_dict(),
        )], cause_id)

    # =========================================================================
    # Decisions and reactions
    # =========================================================================

    def _handle_submit_decision(self, state: GameState, command: Command) -> CommandResult:
        player_id, selection = command.player_id, list(command.selection)
        error = validate_command(
            lambda: check_started(state),
            lambda: check_not_over(state),
            lambda: check_pending_choice_for(state, player_id),
            lambda: check_selection(state, selection),
        )
        if error:
            return error

        pending = state.pending_choice
        em = _Emitter(state)
        root = em.root(_event(
            EventType.DECISION_RESOLVED,
            player_id=player_id,
            selection=selection,
            card=pending.card_being_played,
            stage=pending.stage,
        ))
        cause_id = pending.cause_id or root.id
        actor = pending.played_by or player_id
        queue = list(pending.queued_plays)

        if pending.is_reaction:
            queue = self._resolve_reaction(em, pending, selection, cause_id, queue)
        else:
            queue = self._invoke(
                em,
                actor,
                pending.card_being_played,
                cause_id,
                queue,
                attack_targets=pending.attack_targets,
                decision=Decision.of(player_id, selection),
                stage=pending.stage,
                metadata=pending.metadata,
            )
        self._drain(em, actor, cause_id, queue)
        return em.result()

    def _resolve_reaction(
        self,
        em: _Emitter,
        pending: PendingChoice,
        selection: list[str],
        cause_id: str,
        queue: list[str],
    ) -> list[str]:
        attacker = pending.metadata.get("attacker", pending.played_by)
        target = pending.player_id
        card = pending.card_being_played
        unblocked = list(pending.metadata.get("unblocked", []))
        if selection:
            em.emit([
                _event(EventType.REACTION_PLAYED, player_id=target, card=selection[0], attack_card=card),
                _event(EventType.ATTACK_RESOLVED, attacker=attacker, target=target, card=card, blocked=True),
            ], cause_id)
        else:
            em.emit([_event(
                EventType.ATTACK_RESOLVED, attacker=attacker, target=target, card=card, blocked=False,
            )], cause_id)
            unblocked.append(target)
        return self._reaction_window(
            em, attacker, card, cause_id, queue,
            list(pending.metadata.get("pending_targets", [])), unblocked,
        )

    def _handle_reveal_reaction(self, state: GameState, command: Command) -> CommandResult:
        error = self._check_reaction_pending(state)
        if error:
            return error
        return self._handle_submit_decision(
            state, Command.submit_decision(command.player_id, [command.card] if command.card else [])
        )

    def _handle_decline_reaction(self, state: GameState, command: Command) -> CommandResult:
        error = self._check_reaction_pending(state)
        if error:
            return error
        return self._handle_submit_decision(state, Command.submit_decision(command.player_id, []))

    def _check_reaction_pending(self, state: GameState) -> CommandResult | None:
        if state.pending_choice is None:
            return CommandResult.failure("No decision is pending", ErrorCode.NO_PENDING_DECISION)
        if not state.pending_choice.is_reaction:
            return CommandResult.failure("Pending decision is not a reaction", ErrorCode.INVALID_DECISION)
        return None

    # =========================================================================
    # Buy phase
    # =========================================================================

    def _treasure_value(self, state: GameState, player_id: str, card: str) -> int:
        """Coins for playing card now, including the Merchant bonus on the first Silver."""
        value = CARDS[card].coins
        player = state.get_player(player_id)
        if card == "Silver" and player is not None and "Silver" not in player.in_play:
            value += player.in_play.count("Merchant")
        return value

    def _handle_play_treasure(self, state: GameState, command: Command) -> CommandResult:
        player_id, card = command.player_id, command.card
        error = validate_command(
            lambda: check_started(state),
            lambda: check_not_over(state),
            lambda: check_turn(state, player_id),
            lambda: check_phase(state, Phase.BUY),
            lambda: check_card_exists(card),
            lambda: check_is_treasure(card),
            lambda: check_card_in_hand(state, player_id, card),
        )
        if error:
            return error

        em = _Emitter(state)
        self._play_treasure(em, player_id, card)
        return em.result()

    def _play_treasure(self, em: _Emitter, player_id: str, card: str) -> None:
        value = self._treasure_value(em.state, player_id, card)
        em.root(GameEvent.card_played(player_id, card))
        em.emit([GameEvent.coins_modified(value)])

    def _handle_play_all_treasures(self, state: GameState, command: Command) -> CommandResult:
        player_id = command.player_id
        error = validate_command(
            lambda: check_started(state),
            lambda: check_not_over(state),
            lambda: check_turn(state, player_id),
            lambda: check_phase(state, Phase.BUY),
        )
        if error:
            return error

        hand = state.get_player(player_id).hand
        order = {name: i for i, name in enumerate(TREASURE_ORDER)}
        treasures = sorted(
            (card for card in hand if CARDS[card].is_treasure),
            key=lambda c: order.get(c, len(order)),
        )
        em = _Emitter(state)
        for card in treasures:
            self._play_treasure(em, player_id, card)
        return em.result()

    def _handle_unplay_treasure(self, state: GameState, command: Command) -> CommandResult:
        player_id, card = command.player_id, command.card
        error = validate_command(
            lambda: check_started(state),
            lambda: check_not_over(state),
            lambda: check_turn(state, player_id),
            lambda: check_phase(state, Phase.BUY),
            lambda: check_card_exists(card),
            lambda: check_is_treasure(card),
            lambda: check_card_in_play(state, player_id, card),
            lambda: check_no_purchases(state),
        )
        if error:
            return error

        em = _Emitter(state)
        em.root(GameEvent.card_returned_to_hand(player_id, card))
        # Valued as if played now, so the Merchant bonus leaves with the last Silver
        em.emit([GameEvent.coins_modified(-self._treasure_value(em.state, player_id, card))])
        return em.result()

    def _handle_buy_card(self, state: GameState, command: Command) -> CommandResult:
        player_id, card = command.player_id, command.card
        error = validate_command(
            lambda: check_started(state),
            lambda: check_not_over(state),
            lambda: check_turn(state, player_id),
            lambda: check_phase(state, Phase.BUY),
            lambda: check_card_exists(card),
            lambda: check_in_supply(state, card),
            lambda: check_has_buys(state),
            lambda: check_has_coins(state, CARDS[card].cost),
        )
        if error:
            return error

        em = _Emitter(state)
        gain = create_gain_events(state, player_id, card, bought=True)
        em.root(gain[0])
        em.emit([
            GameEvent.buys_modified(-1),
            GameEvent.coins_modified(-CARDS[card].cost),
        ])
        return em.result()

    # =========================================================================
    # Phase and turn flow
    # =========================================================================

    def _handle_end_phase(self, state: GameState, command: Command) -> CommandResult:
        player_id = command.player_id
        error = validate_command(
            lambda: check_started(state),
            lambda: check_not_over(state),
            lambda: check_turn(state, player_id),
        )
        if error:
            return error

        em = _Emitter(state)
        if state.phase == Phase.ACTION:
            em.root(_event(EventType.PHASE_CHANGED, phase=Phase.BUY.value))
            return em.result()

        self._cleanup(em, player_id)
        return em.result()

    def _cleanup(self, em: _Emitter, player_id: str) -> None:
        """Discard everything, draw the next hand, then end the game or pass the turn."""
        state = em.state
        em.root(_event(EventType.TURN_ENDED, turn=state.turn, player_id=player_id))

        player = state.get_player(player_id)
        em.emit([GameEvent.card_discarded(player_id, c, from_zone="hand") for c in player.hand])
        em.emit([GameEvent.card_discarded(player_id, c, from_zone="in_play") for c in player.in_play])
        em.emit(create_draw_events(em.state, player_id, HAND_SIZE))

        reason = check_game_over(em.state)
        if reason:
            ended = create_game_over_event(em.state, reason)
            em.emit([ended])
            logger.info(
                "Game over (%s): winner=%s scores=%s",
                reason, ended.get("winner"), ended.get("scores"),
            )
            return

        order = em.state.player_order
        next_player = order[(order.index(player_id) + 1) % len(order)]
        self._start_turn(em, next_player, turn=state.turn + 1)


_default_engine = CommandEngine()


def handle_command(state: GameState, command: Command) -> CommandResult:
    """Handle a command with the default engine."""
    return _default_engine.handle(state, command)
