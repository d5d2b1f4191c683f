"""
Board geometry for the Clue simulator.

The board is a grid of characters:
  '.'  hallway square (walkable)
  '#'  void (impassable)
  A-Z  room interior (a letter per room, see the room legend)
  a-z  door: a hallway square that opens into the room with that letter
  1-9  starting square for the n-th player (walkable hallway)

Movement rules:
- Move horizontally or vertically only (no diagonal)
- Cannot pass through or land on a square occupied by another player
- Entering a room through its door ends movement
- Secret passages connect rooms directly (no roll needed)
- The accusation room can be reached from anywhere once a player can move
"""

import logging
from collections import deque
from enum import Enum
from typing import Optional

from clue_sim.cards import Room
from clue_sim.errors import GameDefinitionError
from clue_sim.game_state import (
    GameState,
    Location,
    MovementOption,
    Passage,
    RoomLocation,
    Roll,
    Space,
)

logger = logging.getLogger(__name__)


class CellType(Enum):
    VOID = "#"
    HALLWAY = "."
    ROOM = "R"
    DOOR = "D"
    START = "S"


# ============================================================================
# CLASSIC BOARD
# A compact take on the Clue board: nine rooms around a central cellar
# where accusations are made. Corner rooms keep their secret passages.
#   K = Kitchen, B = Ballroom, C = Conservatory
#   D = Dining Room, I = Billiard Room, L = Library
#   O = Lounge, A = Hall, S = Study, X = Cellar
# ============================================================================

ACCUSATION_ROOM = "Cellar"

CLASSIC_LAYOUT = [
    "KKKK..BBBBB..CCCC",
    "KKKK..BBBBB..CCCC",
    "KKKK..BBBBB..CCCC",
    "KKKK..BBBBB..CCCC",
    "1.k....b.b....c.2",
    "...........6.....",
    "DDDD....x...iIIII",
    "DDDD...XXX...IIII",
    "DDDDd..XXX.......",
    "DDDD...XXX...LLLL",
    "DDDD....x...lLLLL",
    ".....5...........",
    "3..o...a.a....s.4",
    "OOOO..AAAAA..SSSS",
    "OOOO..AAAAA..SSSS",
    "OOOO..AAAAA..SSSS",
    "OOOO..AAAAA..SSSS",
]

CLASSIC_ROOM_CODES = {
    "K": Room.KITCHEN.value,
    "B": Room.BALLROOM.value,
    "C": Room.CONSERVATORY.value,
    "D": Room.DINING_ROOM.value,
    "I": Room.BILLIARD_ROOM.value,
    "L": Room.LIBRARY.value,
    "O": Room.LOUNGE.value,
    "A": Room.HALL.value,
    "S": Room.STUDY.value,
    "X": ACCUSATION_ROOM,
}

# Secret passages connect diagonal corner rooms
CLASSIC_PASSAGES = [
    (Room.KITCHEN.value, Room.STUDY.value),
    (Room.CONSERVATORY.value, Room.LOUNGE.value),
]


def get_adjacent_cells(row: int, col: int) -> list[tuple[int, int]]:
    """Get orthogonally adjacent cells (no diagonal movement)."""
    return [
        (row - 1, col),  # Up
        (row + 1, col),  # Down
        (row, col - 1),  # Left
        (row, col + 1),  # Right
    ]


class Board:
    """
    A grid board that answers the turn controller's two questions: which
    top-level moves a player has, and where a roll can take them.
    """

    def __init__(
        self,
        layout: list[str],
        room_codes: dict[str, str],
        passages: list[tuple[str, str]] = (),
        accusation_room: str = ACCUSATION_ROOM,
    ):
        if not layout:
            raise GameDefinitionError("Board layout is empty")
        width = len(layout[0])
        if any(len(row) != width for row in layout):
            raise GameDefinitionError("Board rows must all have the same width")

        self.layout = list(layout)
        self.height = len(layout)
        self.width = width
        self.room_codes = dict(room_codes)
        self.accusation_room = accusation_room

        if accusation_room not in self.room_codes.values():
            raise GameDefinitionError(f"Accusation room '{accusation_room}' is not on the board")

        self.doors: dict[str, list[tuple[int, int]]] = {name: [] for name in self.room_codes.values()}
        self.starts: dict[int, Space] = {}
        for r, line in enumerate(self.layout):
            for c, char in enumerate(line):
                if char.islower():
                    name = self.room_codes.get(char.upper())
                    if name is None:
                        raise GameDefinitionError(f"Door '{char}' at ({r}, {c}) has no room")
                    self.doors[name].append((r, c))
                elif char.isdigit():
                    self.starts[int(char)] = Space(r, c)
                elif char.isupper() and char not in self.room_codes:
                    raise GameDefinitionError(f"Unknown room code '{char}' at ({r}, {c})")
                elif not (char.isupper() or char in ".#"):
                    raise GameDefinitionError(f"Unknown board character '{char}' at ({r}, {c})")

        self.passages: dict[str, str] = {}
        for a, b in passages:
            for name in (a, b):
                if name not in self.doors:
                    raise GameDefinitionError(f"Secret passage to unknown room '{name}'")
            self.passages[a] = b
            self.passages[b] = a

    @classmethod
    def classic(cls) -> "Board":
        return cls(CLASSIC_LAYOUT, CLASSIC_ROOM_CODES, CLASSIC_PASSAGES, ACCUSATION_ROOM)

    @property
    def room_names(self) -> list[str]:
        return list(self.room_codes.values())

    def get_cell_type(self, row: int, col: int) -> tuple[CellType, Optional[str]]:
        """
        Get the cell type and room (if applicable) at a grid position.

        Returns:
            (CellType, room name or None)
        """
        if row < 0 or row >= self.height or col < 0 or col >= self.width:
            return (CellType.VOID, None)

        char = self.layout[row][col]
        if char == "#":
            return (CellType.VOID, None)
        if char == ".":
            return (CellType.HALLWAY, None)
        if char.isdigit():
            return (CellType.START, None)
        if char.isupper():
            return (CellType.ROOM, self.room_codes[char])
        return (CellType.DOOR, self.room_codes[char.upper()])

    def is_walkable(self, row: int, col: int) -> bool:
        cell_type, _ = self.get_cell_type(row, col)
        return cell_type in (CellType.HALLWAY, CellType.DOOR, CellType.START)

    def start_location(self, seat: int) -> Space:
        """The starting square for the player in `seat` (0-based)."""
        try:
            return self.starts[seat + 1]
        except KeyError:
            raise GameDefinitionError(f"Board has no starting square {seat + 1}") from None

    def get_occupied_positions(self, state: GameState, exclude: str) -> set[tuple[int, int]]:
        """Get all hallway squares currently occupied by players other than `exclude`."""
        return {
            (p.location.row, p.location.col)
            for p in state.players
            if isinstance(p.location, Space) and p.suspect != exclude
        }

    # ========================================================================
    # COLLABORATOR INTERFACE
    # ========================================================================

    def get_move_options(self, state: GameState) -> list:
        """
        Top-level choices for the current player: always a roll, plus the
        secret passage out of a corner room.
        """
        location = state.current_player().location
        options = [Roll()]
        if isinstance(location, RoomLocation) and location.name in self.passages:
            options.append(Passage(RoomLocation(self.passages[location.name])))
        return options

    def get_movement_options(self, state: GameState, roll: int) -> list[MovementOption]:
        """
        Destinations the current player can reach with `roll`.

        Rooms are reachable at any distance up to the roll (entering a room
        ends movement); hallway squares only when the leftover steps are
        even, so the full roll is used. The accusation room is always
        offered alongside any other destination.

        Returns:
            MovementOptions, rooms first (in legend order) then squares;
            empty if the player is boxed in
        """
        player = state.current_player()
        occupied = self.get_occupied_positions(state, exclude=player.suspect)
        room_distances, space_distances = self._distances(player.location, roll, occupied)

        options = []
        for name in self.room_names:
            if name == self.accusation_room or name not in room_distances:
                continue
            distance = room_distances[name]
            options.append(MovementOption(RoomLocation(name), exact=(roll - distance) % 2 == 0))
        for (r, c), distance in sorted(space_distances.items()):
            if (roll - distance) % 2 == 0:
                options.append(MovementOption(Space(r, c), exact=True))

        if options:
            options.append(MovementOption(RoomLocation(self.accusation_room), exact=True))
        logger.debug("Roll %d from %s: %d options", roll, player.location, len(options))
        return options

    def _distances(
        self, start: Location, roll: int, occupied: set[tuple[int, int]]
    ) -> tuple[dict[str, int], dict[tuple[int, int], int]]:
        """
        BFS over hallway squares, limited to `roll` steps.

        Returns:
            (room name -> steps to enter it, square -> steps to land on it)
        """
        rooms: dict[str, int] = {}
        spaces: dict[tuple[int, int], int] = {}
        queue = deque()
        current_room = None

        if isinstance(start, RoomLocation):
            current_room = start.name
            # Leaving a room through one of its doors costs one step
            for door in self.doors.get(start.name, []):
                if door not in occupied:
                    spaces[door] = 1
                    queue.append((door, 1))
        else:
            queue.append(((start.row, start.col), 0))

        visited = {pos for pos, _ in queue}
        while queue:
            pos, dist = queue.popleft()
            cell_type, room_name = self.get_cell_type(*pos)

            if cell_type == CellType.DOOR and room_name != current_room and dist + 1 <= roll:
                if room_name not in rooms or dist + 1 < rooms[room_name]:
                    rooms[room_name] = dist + 1

            if dist >= roll:
                continue
            for next_pos in get_adjacent_cells(*pos):
                if next_pos in visited or next_pos in occupied:
                    continue
                if not self.is_walkable(*next_pos):
                    continue
                visited.add(next_pos)
                spaces[next_pos] = dist + 1
                queue.append((next_pos, dist + 1))

        if isinstance(start, Space):
            spaces.pop((start.row, start.col), None)
        return rooms, spaces
