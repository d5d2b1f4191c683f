"""
Presentation for the Clue simulator.

The turn controller calls these hooks at fixed points of a turn. They
never change the game; the only thing that flows back is a human's
choice from a prompt. `Display` itself prints nothing, which is what
automated games and tests use.
"""

import sys
from typing import Callable, Optional, Sequence

from clue_sim.cards import Card, Triple
from clue_sim.game_state import GameState, MovementOption, Player, PublicState


class Display:
    """Silent display: every hook is a no-op and prompts are unavailable."""

    def print_turn(self, public: PublicState, player: Player) -> None:
        pass

    def print_move(self, player: Player, move) -> None:
        pass

    def print_dice_roll(self, player: Player, roll: int) -> None:
        pass

    def print_movement(self, player: Player, option: MovementOption) -> None:
        pass

    def print_guess(self, player: Player, guess: Triple) -> None:
        pass

    def print_reveal(self, guesser: Player, revealer: Optional[Player], card: Optional[Card]) -> None:
        pass

    def print_accusation(self, player: Player, accusation: Triple, correct: bool) -> None:
        pass

    def display_sheet(self, player: Player) -> None:
        pass

    def display_start(self, state: GameState) -> None:
        pass

    def display_message(self, message: str) -> None:
        pass

    def display_error(self, message: str) -> None:
        pass

    def display_victory(self, state: GameState, winner: str) -> None:
        pass

    def display_game_over(self, state: GameState, reason: str) -> None:
        pass

    def prompt_move(self, options: Sequence):
        raise NotImplementedError("This display cannot prompt a human player")

    def prompt_movement(self, options: Sequence[MovementOption]) -> MovementOption:
        raise NotImplementedError("This display cannot prompt a human player")

    def prompt_card(self, prompt: str, cards: Sequence[Card]) -> Card:
        raise NotImplementedError("This display cannot prompt a human player")

    def prompt_filename(self) -> str:
        raise NotImplementedError("This display cannot prompt a human player")


class ConsoleDisplay(Display):
    """Text display on stdout with numbered-choice prompts on stdin."""

    def __init__(self, input_func: Callable[[str], str] = input, out=None):
        self.input_func = input_func
        self.out = out or sys.stdout

    def _write(self, text: str) -> None:
        self.out.write(text + "\n")
        self.out.flush()

    def print_turn(self, public, player):
        self._write("\n" + "=" * 50)
        kind = "you" if player.is_human else "AI"
        self._write(f"🎲 {player.suspect}'s turn ({kind}) - at {player.location}")
        self._write("=" * 50)

    def print_move(self, player, move):
        self._write(f"    🚶 {player.suspect}: {move}")

    def print_dice_roll(self, player, roll):
        self._write(f"    🎲 {player.suspect} rolled {roll}")

    def print_movement(self, player, option):
        self._write(f"    📍 {player.suspect}: {option}")

    def print_guess(self, player, guess):
        self._write(f"\n    📣 SUGGESTION: {player.suspect} suggests {guess}")

    def print_reveal(self, guesser, revealer, card):
        if revealer is None:
            self._write("    ✓ NO ONE could disprove!")
            return
        self._write(f"    ❌ Disproven by {revealer.suspect}")
        if guesser.is_human and card is not None:
            self._write(f"    🔍 {revealer.suspect} showed you: {card.name}")

    def print_accusation(self, player, accusation, correct):
        self._write(f"\n    ⚖️ ACCUSATION: {player.suspect} accuses {accusation}")
        if not correct:
            self._write(f"    ❌ WRONG! {player.suspect} guessed incorrectly, and is out of the game.")

    def display_sheet(self, player):
        self._write(player.sheet.render(owner=player.suspect))

    def display_start(self, state):
        self._write("\n" + "=" * 60)
        self._write("🔍 CLUE: THE MYSTERY GAME 🔍")
        self._write("=" * 60)
        for player in state.players:
            self._write(f"{player.suspect} ({player.kind.value}) - starts at {player.location}")

    def display_message(self, message):
        self._write(message)

    def display_error(self, message):
        self._write(f"❌ Error: {message}")

    def display_victory(self, state, winner):
        self._write("\n" + "=" * 60)
        self._write(f"🎉 ACCUSATION CORRECT! {winner} WINS!")
        self._write(f"🔍 Solution: {state.envelope}")
        self._write("=" * 60)

    def display_game_over(self, state, reason):
        self._write("\n" + "=" * 60)
        self._write(f"🏁 GAME OVER! {reason}")
        self._write(state.get_game_summary())
        self._write(f"🔍 Solution: {state.envelope}")
        self._write("=" * 60)

    def _choose(self, prompt: str, options: Sequence, label=str):
        for i, option in enumerate(options, 1):
            self._write(f"  {i}. {label(option)}")
        while True:
            answer = self.input_func(f"{prompt} [1-{len(options)}]: ").strip()
            if answer.isdigit() and 1 <= int(answer) <= len(options):
                return options[int(answer) - 1]
            self.display_error(f"Please enter a number between 1 and {len(options)}")

    def prompt_move(self, options):
        return self._choose("Roll or take a passage?", list(options))

    def prompt_movement(self, options):
        return self._choose("Where do you want to go?", list(options))

    def prompt_card(self, prompt, cards):
        return self._choose(prompt, list(cards), label=lambda c: c.name)

    def prompt_filename(self):
        while True:
            answer = self.input_func("Game file to load: ").strip()
            if answer:
                return answer
            self.display_error("Please enter a file name")
