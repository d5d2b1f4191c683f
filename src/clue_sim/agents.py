"""
Agents: who makes a player's decisions.

Automated players answer immediately through the deduction engine; human
players are asked through the display and block until they answer.
"""

import random
from typing import Optional, Sequence

from clue_sim import deduction
from clue_sim.cards import Card, Category, Triple, room
from clue_sim.errors import InvariantError
from clue_sim.game_state import (
    AgentKind,
    MovementOption,
    Player,
    PublicState,
    RoomLocation,
)
from clue_sim.notebook import CardStatus


class Agent:
    """The decisions a player has to make during a game."""

    def choose_move(self, player: Player, public: PublicState, options: Sequence):
        raise NotImplementedError

    def choose_movement(
        self, player: Player, public: PublicState, options: Sequence[MovementOption]
    ) -> MovementOption:
        raise NotImplementedError

    def choose_guess(self, player: Player, public: PublicState) -> Triple:
        raise NotImplementedError

    def choose_accusation(self, player: Player, public: PublicState) -> Triple:
        raise NotImplementedError

    def choose_reveal(self, player: Player, public: PublicState, guess: Triple) -> Optional[Card]:
        raise NotImplementedError


class SmartAgent(Agent):
    """Heuristic AI driven by the player's own knowledge sheet."""

    def __init__(self, rng: Optional[random.Random] = None):
        self.rng = rng or random.Random()

    def choose_move(self, player, public, options):
        return deduction.decide_move(player.sheet, options, self.rng)

    def choose_movement(self, player, public, options):
        return deduction.decide_movement(player.sheet, public, options, self.rng)

    def choose_guess(self, player, public):
        return deduction.decide_guess(player.sheet, player.location, self.rng)

    def choose_accusation(self, player, public):
        return deduction.decide_accusation(player.sheet)

    def choose_reveal(self, player, public, guess):
        return deduction.decide_reveal(player.sheet, guess, public.current_player, self.rng)


class HumanAgent(Agent):
    """A person at the console. Every choice goes through the display's prompts."""

    def __init__(self, display):
        self.display = display

    def choose_move(self, player, public, options):
        self.display.display_sheet(player)
        return self.display.prompt_move(options)

    def choose_movement(self, player, public, options):
        return self.display.prompt_movement(options)

    def _pick(self, player: Player, category: Category, prompt: str) -> Card:
        return self.display.prompt_card(prompt, list(player.sheet.universe.of(category)))

    def choose_guess(self, player, public):
        if not isinstance(player.location, RoomLocation):
            raise InvariantError("Player must be in a room to make a guess")
        return Triple(
            self._pick(player, Category.SUSPECT, "Who did it?"),
            self._pick(player, Category.WEAPON, "With which weapon?"),
            room(player.location.name),
        )

    def choose_accusation(self, player, public):
        self.display.display_sheet(player)
        return Triple(
            self._pick(player, Category.SUSPECT, "Accuse which suspect?"),
            self._pick(player, Category.WEAPON, "With which weapon?"),
            self._pick(player, Category.ROOM, "In which room?"),
        )

    def choose_reveal(self, player, public, guess):
        matches = [c for c in guess.cards() if player.sheet.status(c) is CardStatus.MINE]
        if not matches:
            return None
        if len(matches) == 1:
            return matches[0]
        return self.display.prompt_card(
            f"{player.suspect}, show {public.current_player} which card?", matches
        )


def default_agents(display, rng: Optional[random.Random] = None) -> dict:
    """One agent per kind; all automated players share the game's random source."""
    return {
        AgentKind.HUMAN: HumanAgent(display),
        AgentKind.AI: SmartAgent(rng),
    }
