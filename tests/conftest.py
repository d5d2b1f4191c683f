"""
Shared fixtures for the Clue simulator tests.
A small three-player game (A, B, C) on a stub board, plus scripted agents.
"""

import os
import random
import sys

import pytest

# Add src to path for imports
sys.path.insert(0, os.path.join(os.path.dirname(__file__), '..', 'src'))

# Set environment variable before anything imports crewai
os.environ["CREWAI_TRACING_ENABLED"] = "false"

from clue_sim.agents import Agent
from clue_sim.cards import CardUniverse, Triple, room, suspect, weapon
from clue_sim.game_state import (
    AgentKind,
    GameState,
    MovementOption,
    Player,
    PlayerRing,
    PublicState,
    RoomLocation,
    Roll,
    Space,
)
from clue_sim.notebook import KnowledgeSheet


ACCUSATION_ROOM = "Cellar"


def small_universe() -> CardUniverse:
    return CardUniverse(
        ["Red", "Blue", "Green"],
        ["Knife", "Rope", "Pipe"],
        ["Library", "Hall", "Study"],
    )


def make_player(universe, name, hand=(), kind=AgentKind.AI, location=None, is_out=False) -> Player:
    return Player(
        suspect=name,
        kind=kind,
        location=location or Space(0, 0),
        sheet=KnowledgeSheet.initialize(universe, hand),
        is_out=is_out,
    )


def make_state(universe, players, envelope, first=None, ai_only=False) -> GameState:
    return GameState(
        players=PlayerRing(players),
        public=PublicState(
            current_player=first or players[0].suspect,
            accusation_room=ACCUSATION_ROOM,
            ai_only=ai_only,
        ),
        envelope=envelope,
        universe=universe,
    )


class StubBoard:
    """Board that hands out fixed options and records what it was asked."""

    def __init__(self, moves=None, movement=None):
        self.moves = moves if moves is not None else [Roll()]
        self.movement = movement if movement is not None else []
        self.rolls = []

    def get_move_options(self, state):
        return list(self.moves)

    def get_movement_options(self, state, roll):
        self.rolls.append(roll)
        if callable(self.movement):
            return self.movement(state, roll)
        return list(self.movement)


class ScriptedAgent(Agent):
    """
    Agent whose answers are fixed in advance. Each answer may be a value
    or a callable taking the same arguments as the agent method.
    """

    def __init__(self, move=None, movement=None, guess=None, accusation=None, reveal=None):
        self.move = move if move is not None else Roll()
        self.movement = movement
        self.guess = guess
        self.accusation = accusation
        self.reveal = reveal
        self.calls = []

    def _answer(self, name, value, *args):
        self.calls.append((name, args))
        return value(*args) if callable(value) else value

    def choose_move(self, player, public, options):
        return self._answer("move", self.move, player, public, options)

    def choose_movement(self, player, public, options):
        if self.movement is None:
            return options[0]
        return self._answer("movement", self.movement, player, public, options)

    def choose_guess(self, player, public):
        return self._answer("guess", self.guess, player, public)

    def choose_accusation(self, player, public):
        return self._answer("accusation", self.accusation, player, public)

    def choose_reveal(self, player, public, guess):
        return self._answer("reveal", self.reveal, player, public, guess)


@pytest.fixture
def universe():
    return small_universe()


@pytest.fixture
def envelope():
    return Triple(suspect("Blue"), weapon("Pipe"), room("Study"))


@pytest.fixture
def rng():
    return random.Random(1234)


@pytest.fixture
def three_players(universe):
    """A holds Green and Rope, B holds Knife and Hall, C holds Red and Library."""
    return [
        make_player(universe, "A", [suspect("Green"), weapon("Rope")]),
        make_player(universe, "B", [weapon("Knife"), room("Hall")]),
        make_player(universe, "C", [suspect("Red"), room("Library")]),
    ]


@pytest.fixture
def state(universe, three_players, envelope):
    return make_state(universe, three_players, envelope)


def into(name: str) -> list:
    """Movement options that lead only into `name`."""
    return [MovementOption(RoomLocation(name), exact=True)]
