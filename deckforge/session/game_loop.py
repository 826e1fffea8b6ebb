"""
Game Loop - Drives bot seats until a human has to act.

The loop:
1. Find who the game is waiting on (pending choice, else active player)
2. If that seat is a bot, ask its policy for a command or an answer
3. Execute it through the session
4. Repeat until a human must act, the game ends or the step limit is hit
"""

from __future__ import annotations
import logging
from dataclasses import dataclass, field
from enum import Enum
from typing import TYPE_CHECKING

from ..engine_core.command import Command
from ..engine_core.command_generator import legal_commands

if TYPE_CHECKING:
    from .manager import Session

logger = logging.getLogger(__name__)

DEFAULT_MAX_STEPS = 10_000


class LoopState(Enum):
    """Why the loop stopped."""
    WAITING_HUMAN = "waiting_human"
    GAME_OVER = "game_over"
    STEP_LIMIT = "step_limit"
    ERROR = "error"


@dataclass
class TurnResult:
    """
    Result of running bot seats.

    Contains the commands the bots issued and where the loop stopped.
    """
    success: bool
    loop_state: LoopState
    steps: int = 0
    commands: list[Command] = field(default_factory=list)
    errors: list[str] = field(default_factory=list)
    winner: str | None = None
    scores: dict[str, int] = field(default_factory=dict)


class GameLoop:
    """
    The bot driver for one session.

    Usage:
        loop = GameLoop(session)
        result = loop.run_bots(max_steps=500)
        if result.loop_state == LoopState.WAITING_HUMAN:
            # ask session.acting_player for a command
    """

    def __init__(self, session: Session):
        self.session = session

    def next_bot_command(self) -> Command | None:
        """The command the acting bot would issue now, or None if a human must act."""
        state = self.session.game_state
        player_id = self.session.acting_player
        if state.game_over or player_id is None or not self.session.is_bot(player_id):
            return None

        bot = self.session.bots[player_id]
        if state.pending_choice is not None:
            return bot.select_choice(state, state.pending_choice).to_command(player_id)

        legal = legal_commands(state, player_id)
        if not legal:
            return None
        return bot.select_command(state, player_id, legal).command

    def run_bots(self, max_steps: int = DEFAULT_MAX_STEPS) -> TurnResult:
        """Run bot seats until a human must act or the game ends."""
        commands: list[Command] = []
        steps = 0

        while steps < max_steps:
            if self.session.game_state.game_over:
                return self._result(LoopState.GAME_OVER, steps, commands)

            command = self.next_bot_command()
            if command is None:
                return self._result(LoopState.WAITING_HUMAN, steps, commands)

            result = self.session.execute(command)
            steps += 1
            if not result.success:
                logger.warning(
                    "Bot command %s rejected: %s", command.command_type.value, result.error
                )
                return self._result(LoopState.ERROR, steps, commands, errors=[result.error or ""])
            commands.append(command)

        if self.session.game_state.game_over:
            return self._result(LoopState.GAME_OVER, steps, commands)
        return self._result(LoopState.STEP_LIMIT, steps, commands)

    def _result(
        self,
        loop_state: LoopState,
        steps: int,
        commands: list[Command],
        errors: list[str] | None = None,
    ) -> TurnResult:
        state = self.session.game_state
        return TurnResult(
            success=loop_state != LoopState.ERROR,
            loop_state=loop_state,
            steps=steps,
            commands=commands,
            errors=errors or [],
            winner=state.winner,
            scores=dict(state.scores),
        )
