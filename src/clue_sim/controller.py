"""
Turn controller: drives a game from the first move to a win or game over.

Each turn walks through a small set of phases:

    AWAIT_MOVE -> AWAIT_MOVEMENT -> ACCUSATION | GUESS | END_TURN -> AWAIT_MOVE (next player)

Taking a secret passage skips AWAIT_MOVEMENT. WIN and GAME_OVER are
terminal. The controller is the only writer of the game state; agents
and the display only read it.
"""

import logging
import random
from dataclasses import dataclass, replace
from enum import Enum
from typing import Optional

from clue_sim.agents import Agent, default_agents
from clue_sim.display import Display
from clue_sim.errors import InvariantError
from clue_sim.game_state import (
    GameState,
    GuessRecord,
    Location,
    Passage,
    Player,
    RoomLocation,
    Roll,
)

logger = logging.getLogger(__name__)


class Phase(Enum):
    AWAIT_MOVE = "await_move"
    AWAIT_MOVEMENT = "await_movement"
    ACCUSATION = "accusation"
    GUESS = "guess"
    END_TURN = "end_turn"
    WIN = "win"
    GAME_OVER = "game_over"


TERMINAL_PHASES = {Phase.WIN, Phase.GAME_OVER}


@dataclass
class GameResult:
    """How a finished game ended."""
    outcome: Phase
    winner: Optional[str]
    turns: int
    reason: str
    state: GameState


@dataclass
class _Turn:
    """Scratch data for the turn in progress."""
    player: Player
    next_player: str
    destination: Optional[Location] = None


def roll_dice(rng: random.Random) -> int:
    """Dice total for a turn, drawn uniformly from 2 to 12."""
    return rng.randint(2, 12)


class TurnController:
    """
    Runs the turn state machine.

    Args:
        board: Answers get_move_options / get_movement_options
        display: Presentation hooks (silent by default)
        rng: The game's single random source (dice and AI tie-breaks)
        agents: Agent per AgentKind, optionally overridden per suspect name
        deduce_by_elimination: Let guessers apply process of elimination
        max_turns: Stop with GAME_OVER after this many played turns
    """

    def __init__(
        self,
        board,
        display: Optional[Display] = None,
        rng: Optional[random.Random] = None,
        agents: Optional[dict] = None,
        deduce_by_elimination: bool = True,
        max_turns: Optional[int] = None,
    ):
        self.board = board
        self.display = display or Display()
        self.rng = rng or random.Random()
        self.agents = default_agents(self.display, self.rng)
        if agents:
            self.agents.update(agents)
        self.deduce_by_elimination = deduce_by_elimination
        self.max_turns = max_turns
        self.reason = ""
        self.turns_played = 0
        self._turn: Optional[_Turn] = None
        self._handlers = {
            Phase.AWAIT_MOVE: self._await_move,
            Phase.AWAIT_MOVEMENT: self._await_movement,
            Phase.ACCUSATION: self._accusation,
            Phase.GUESS: self._guess,
            Phase.END_TURN: self._end_turn,
        }

    def agent_for(self, player: Player) -> Agent:
        return self.agents.get(player.suspect) or self.agents[player.kind]

    # ========================================================================
    # DRIVERS
    # ========================================================================

    def run(self, state: GameState) -> GameResult:
        """Play until somebody wins or the game stops."""
        self.display.display_start(state)
        self.turns_played = 0
        phase = Phase.AWAIT_MOVE
        while phase not in TERMINAL_PHASES:
            phase = self.play_turn(state)
        logger.debug("Final state:\n%s", state.get_game_summary())
        return GameResult(
            outcome=phase,
            winner=state.winner,
            turns=self.turns_played,
            reason=self.reason,
            state=state,
        )

    def play_turn(self, state: GameState) -> Phase:
        """
        Run the current player's turn.

        Returns:
            AWAIT_MOVE once play has passed to the next player (an
            eliminated player's turn is just skipped), or a terminal phase
        """
        if state.game_over:
            raise InvariantError("The game is already over")
        phase = self._step(state, Phase.AWAIT_MOVE)
        while phase not in TERMINAL_PHASES and phase is not Phase.AWAIT_MOVE:
            phase = self._step(state, phase)
        if phase in TERMINAL_PHASES:
            state.game_over = True
        return phase

    def _step(self, state: GameState, phase: Phase) -> Phase:
        next_phase = self._handlers[phase](state)
        logger.debug("%s: %s -> %s", state.public.current_player, phase.value, next_phase.value)
        return next_phase

    # ========================================================================
    # PHASES
    # ========================================================================

    def _await_move(self, state: GameState) -> Phase:
        order = state.players.find_turn_order(state.public.current_player)
        if not order.ok:
            raise InvariantError(f"{order.failure.value}: '{state.public.current_player}'")
        player = state.players[order.current]
        next_player = state.players[order.next].suspect

        if player.is_out:
            if state.players.all_out():
                return self._game_over(state, "Every player is out.")
            state.public.current_player = next_player
            return Phase.AWAIT_MOVE

        if self.max_turns is not None and self.turns_played >= self.max_turns:
            return self._game_over(state, f"No winner after {self.max_turns} turns.")

        self._turn = _Turn(player, next_player)
        self.turns_played += 1
        self.display.print_turn(state.public, player)
        move = self.agent_for(player).choose_move(player, state.public, self.board.get_move_options(state))
        self.display.print_move(player, move)

        if isinstance(move, Roll):
            return Phase.AWAIT_MOVEMENT
        if isinstance(move, Passage):
            return self._arrive(state, move.destination)
        raise InvariantError(f"Unknown move: {move!r}")

    def _await_movement(self, state: GameState) -> Phase:
        player = self._turn.player
        roll = roll_dice(self.rng)
        self.display.print_dice_roll(player, roll)

        options = self.board.get_movement_options(state, roll)
        if not options:
            self.display.display_message(f"{player.suspect} is boxed in and stays put.")
            self._turn.destination = player.location
            return Phase.END_TURN

        choice = self.agent_for(player).choose_movement(player, state.public, options)
        self.display.print_movement(player, choice)
        return self._arrive(state, choice.location)

    def _arrive(self, state: GameState, destination: Location) -> Phase:
        """Move the current player and decide what the location lets them do."""
        player = replace(self._turn.player, location=destination)
        state.players.replace(player)
        self._turn.player = player
        self._turn.destination = destination

        if isinstance(destination, RoomLocation):
            if destination.name == state.public.accusation_room:
                return Phase.ACCUSATION
            return Phase.GUESS
        return Phase.END_TURN

    def _accusation(self, state: GameState) -> Phase:
        player = self._turn.player
        accusation = self.agent_for(player).choose_accusation(player, state.public)
        correct = accusation == state.envelope
        self.display.print_accusation(player, accusation, correct)

        if correct:
            state.winner = player.suspect
            self.reason = f"{player.suspect} solved the case."
            self.display.display_victory(state, player.suspect)
            return Phase.WIN

        logger.info("%s accused %s and is out", player.suspect, accusation)
        state.players.replace(replace(player, is_out=True))
        keep_going = state.public.ai_only or state.players.humans_remaining()
        if keep_going and not state.players.all_out():
            return self._pass_turn(state)
        if state.players.all_out():
            return self._game_over(state, "Every player is out.")
        return self._game_over(state, "No human players remain.")

    def _guess(self, state: GameState) -> Phase:
        guesser = self._turn.player
        guess = self.agent_for(guesser).choose_guess(guesser, state.public)
        self.display.print_guess(guesser, guess)

        revealer, card = None, None
        seat = state.players.index_of(guesser.suspect)
        for other in state.players.after(seat):
            card = self.agent_for(other).choose_reveal(other, state.public, guess)
            if card is not None:
                if card not in guess.cards():
                    raise InvariantError(f"{other.suspect} showed '{card.name}', which was not guessed")
                revealer = other
                break

        if revealer is not None:
            guesser.sheet.record_shown(card, revealer.suspect)
            revealer.sheet.note_shown_to(card, guesser.suspect)
            state.players.replace(revealer)
        else:
            guesser.sheet.mark_no_disprove(guess)
        if self.deduce_by_elimination:
            for deduced in guesser.sheet.deduce_by_elimination():
                logger.debug("%s deduced %s by elimination", guesser.suspect, deduced.name)
        state.players.replace(guesser)

        state.guess_history.append(
            GuessRecord(
                turn=state.turn_number,
                guesser=guesser.suspect,
                guess=guess,
                revealer=revealer.suspect if revealer else None,
            )
        )
        self.display.print_reveal(guesser, revealer, card)
        return self._pass_turn(state)

    def _end_turn(self, state: GameState) -> Phase:
        state.players.replace(replace(self._turn.player, location=self._turn.destination))
        return self._pass_turn(state)

    # ========================================================================
    # HELPERS
    # ========================================================================

    def _pass_turn(self, state: GameState) -> Phase:
        state.public.current_player = self._turn.next_player
        state.turn_number += 1
        self._turn = None
        return Phase.AWAIT_MOVE

    def _game_over(self, state: GameState, reason: str) -> Phase:
        self.reason = reason
        self.display.display_game_over(state, reason)
        return Phase.GAME_OVER
