"""
Game State Management for the Clue simulator.

Holds everything the turn controller owns: the ring of players in turn
order, the public state every agent may read, the envelope, and a log of
resolved guesses.

Key rules represented here:
- Turn order is a ring: the player after the last one is the first one
- Eliminated players stay in the ring (they still have to show cards)
- Players are updated by replacing them by identity (their suspect name)
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import Iterator, Optional, Union

from clue_sim.cards import CardUniverse, Triple
from clue_sim.errors import InvariantError
from clue_sim.notebook import KnowledgeSheet


# ============================================================================
# LOCATIONS AND MOVES
# ============================================================================

@dataclass(frozen=True)
class RoomLocation:
    """Inside a room (the accusation room included)."""
    name: str

    def __str__(self) -> str:
        return self.name


@dataclass(frozen=True)
class Space:
    """A hallway square on the board grid."""
    row: int
    col: int

    def __str__(self) -> str:
        return f"space ({self.row}, {self.col})"


Location = Union[RoomLocation, Space]


@dataclass(frozen=True)
class Roll:
    """Roll the dice and move."""

    def __str__(self) -> str:
        return "Roll the dice"


@dataclass(frozen=True)
class Passage:
    """Take a secret passage straight into a room."""
    destination: RoomLocation

    def __str__(self) -> str:
        return f"Secret passage to {self.destination.name}"


Move = Union[Roll, Passage]


@dataclass(frozen=True)
class MovementOption:
    """
    A destination reachable with the current roll.

    `exact` is the roll-parity flag: True when the distance has the same
    parity as the roll, i.e. the move uses the roll up without doubling back.
    """
    location: Location
    exact: bool = True

    @property
    def room_name(self) -> Optional[str]:
        if isinstance(self.location, RoomLocation):
            return self.location.name
        return None

    def __str__(self) -> str:
        if isinstance(self.location, RoomLocation):
            return f"Enter {self.location.name}"
        return f"Land on {self.location}"


# ============================================================================
# PLAYERS
# ============================================================================

class AgentKind(Enum):
    HUMAN = "human"
    AI = "ai"


@dataclass
class Player:
    """Represents a player in the game. `suspect` is the player's unique id."""
    suspect: str
    kind: AgentKind
    location: Location
    sheet: KnowledgeSheet
    is_out: bool = False  # True after a wrong accusation

    @property
    def is_human(self) -> bool:
        return self.kind is AgentKind.HUMAN


@dataclass
class PublicState:
    """State every agent may read."""
    current_player: str
    accusation_room: str
    ai_only: bool = False


@dataclass(frozen=True)
class GuessRecord:
    """A resolved guess. The shown card itself stays private to the guesser."""
    turn: int
    guesser: str
    guess: Triple
    revealer: Optional[str] = None


class LookupFailure(Enum):
    EMPTY_RING = "No players in game"
    PLAYER_NOT_FOUND = "No player with that suspect name"


@dataclass(frozen=True)
class TurnOrder:
    """Result of a turn-order lookup: ring indexes of (current, next), or a failure."""
    current: int = -1
    next: int = -1
    failure: Optional[LookupFailure] = None

    @property
    def ok(self) -> bool:
        return self.failure is None


class PlayerRing:
    """
    Players in fixed turn order, addressable by index and by suspect name.

    The ring never changes size; replacing a player keeps its seat.
    """

    def __init__(self, players: list[Player]):
        self._players = list(players)
        self._seats = {}
        for i, player in enumerate(self._players):
            if player.suspect in self._seats:
                raise InvariantError(f"Two players share the suspect '{player.suspect}'")
            self._seats[player.suspect] = i

    def __len__(self) -> int:
        return len(self._players)

    def __iter__(self) -> Iterator[Player]:
        return iter(list(self._players))

    def __getitem__(self, index: int) -> Player:
        return self._players[index]

    def index_of(self, player_id: str) -> Optional[int]:
        return self._seats.get(player_id)

    def get(self, player_id: str) -> Player:
        index = self.index_of(player_id)
        if index is None:
            raise InvariantError(f"No player with suspect name '{player_id}'")
        return self._players[index]

    def successor(self, index: int) -> int:
        return (index + 1) % len(self._players)

    def find_turn_order(self, player_id: str) -> TurnOrder:
        """
        Find the current player's seat and the seat that plays after it.

        Returns:
            TurnOrder with both indexes, or with a failure when the ring is
            empty or nobody plays `player_id`
        """
        if not self._players:
            return TurnOrder(failure=LookupFailure.EMPTY_RING)
        index = self.index_of(player_id)
        if index is None:
            return TurnOrder(failure=LookupFailure.PLAYER_NOT_FOUND)
        return TurnOrder(current=index, next=self.successor(index))

    def replace(self, player: Player) -> None:
        """Put `player` in the seat of the player with the same suspect name."""
        index = self.index_of(player.suspect)
        if index is None:
            raise InvariantError(f"No player with suspect name '{player.suspect}'")
        self._players[index] = player

    def after(self, index: int) -> list[Player]:
        """Everybody else, in turn order, starting with the player after `index`."""
        n = len(self._players)
        return [self._players[(index + offset) % n] for offset in range(1, n)]

    def all_out(self) -> bool:
        return all(p.is_out for p in self._players)

    def humans_remaining(self) -> bool:
        """True if some human player has not been eliminated."""
        return any(p.is_human and not p.is_out for p in self._players)


@dataclass
class GameState:
    """Main game state. Owned and updated only by the turn controller."""
    players: PlayerRing
    public: PublicState
    envelope: Triple
    universe: CardUniverse
    turn_number: int = 1
    guess_history: list[GuessRecord] = field(default_factory=list)
    game_over: bool = False
    winner: Optional[str] = None

    def current_player(self) -> Player:
        return self.players.get(self.public.current_player)

    def get_game_summary(self) -> str:
        """Get a summary of the current game state."""
        summary = f"=== Turn {self.turn_number} ===\n"
        summary += f"Current Player: {self.public.current_player}\n\n"

        for player in self.players:
            status = "Eliminated" if player.is_out else "Active"
            summary += f"{player.suspect} ({player.kind.value}): {status}, Location: {player.location}\n"

        if self.guess_history:
            last = self.guess_history[-1]
            summary += f"\nLast guess: {last.guesser} suggested {last.guess}"
            if last.revealer:
                summary += f" (disproven by {last.revealer})"
            summary += "\n"

        return summary
