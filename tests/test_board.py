"""
Tests for the Board
Grid movement on the classic board: doors, passages, occupancy and roll parity.
"""

import pytest

from clue_sim.board import ACCUSATION_ROOM, Board, CellType, get_adjacent_cells
from clue_sim.errors import GameDefinitionError
from clue_sim.game_state import Passage, RoomLocation, Roll, Space

from conftest import make_player, make_state


@pytest.fixture
def board():
    return Board.classic()


def state_with(universe, envelope, location, others=()):
    players = [make_player(universe, "A", location=location)]
    players += [make_player(universe, f"O{i}", location=loc) for i, loc in enumerate(others)]
    return make_state(universe, players, envelope)


def rooms_in(options):
    return {o.room_name: o.exact for o in options if o.room_name}


def spaces_in(options):
    return {o.location for o in options if isinstance(o.location, Space)}


class TestClassicBoard:
    """Test the bundled board definition."""

    def test_rooms_and_accusation_room(self, board):
        assert len(board.room_names) == 10
        assert board.accusation_room == ACCUSATION_ROOM
        assert "Kitchen" in board.room_names

    def test_secret_passages(self, board):
        """Kitchen-Study and Conservatory-Lounge, both ways."""
        assert board.passages["Kitchen"] == "Study"
        assert board.passages["Study"] == "Kitchen"
        assert board.passages["Conservatory"] == "Lounge"
        assert board.passages["Lounge"] == "Conservatory"

    def test_every_room_has_a_door(self, board):
        for name in board.room_names:
            assert board.doors[name], name

    def test_six_starting_squares(self, board):
        assert board.start_location(0) == Space(4, 0)
        assert board.start_location(5) == Space(5, 11)
        with pytest.raises(GameDefinitionError):
            board.start_location(6)

    def test_cell_types(self, board):
        assert board.get_cell_type(0, 0) == (CellType.ROOM, "Kitchen")
        assert board.get_cell_type(4, 2) == (CellType.DOOR, "Kitchen")
        assert board.get_cell_type(4, 0) == (CellType.START, None)
        assert board.get_cell_type(-1, 0) == (CellType.VOID, None)
        assert board.is_walkable(5, 0)
        assert not board.is_walkable(0, 0)

    def test_no_diagonal_neighbours(self):
        assert get_adjacent_cells(3, 3) == [(2, 3), (4, 3), (3, 2), (3, 4)]


class TestMoveOptions:
    """Roll, plus a passage out of a corner room."""

    def test_hallway_only_rolls(self, board, universe, envelope):
        state = state_with(universe, envelope, Space(4, 0))
        assert board.get_move_options(state) == [Roll()]

    def test_corner_room_offers_passage(self, board, universe, envelope):
        state = state_with(universe, envelope, RoomLocation("Kitchen"))
        assert board.get_move_options(state) == [Roll(), Passage(RoomLocation("Study"))]

    def test_other_rooms_have_no_passage(self, board, universe, envelope):
        state = state_with(universe, envelope, RoomLocation("Hall"))
        assert board.get_move_options(state) == [Roll()]


class TestMovementOptions:
    """Where a roll can take the current player."""

    def test_room_in_reach_with_exact_roll(self, board, universe, envelope):
        """From start 1, the Kitchen is two squares to its door plus one step in."""
        state = state_with(universe, envelope, Space(4, 0))

        options = board.get_movement_options(state, 3)

        assert rooms_in(options)["Kitchen"] is True

    def test_parity_flag_for_rooms(self, board, universe, envelope):
        """A room reached with steps to spare is flagged as inexact."""
        state = state_with(universe, envelope, Space(4, 0))

        options = board.get_movement_options(state, 4)

        assert rooms_in(options)["Kitchen"] is False

    def test_squares_only_with_matching_parity(self, board, universe, envelope):
        state = state_with(universe, envelope, Space(4, 0))

        squares = spaces_in(board.get_movement_options(state, 3))

        assert Space(4, 1) in squares      # 1 step, 2 to spare
        assert Space(4, 3) in squares      # 3 steps
        assert Space(4, 2) not in squares  # 2 steps, 1 to spare
        assert Space(4, 0) not in squares  # where the player stands

    def test_accusation_room_always_offered_once(self, board, universe, envelope):
        state = state_with(universe, envelope, Space(4, 0))

        options = board.get_movement_options(state, 2)

        assert [o.room_name for o in options].count(ACCUSATION_ROOM) == 1
        assert options[-1].location == RoomLocation(ACCUSATION_ROOM)

    def test_leaving_a_room(self, board, universe, envelope):
        """Leaving costs a step through a door; the current room is not a destination."""
        state = state_with(universe, envelope, RoomLocation("Kitchen"))

        options = board.get_movement_options(state, 2)

        assert "Kitchen" not in rooms_in(options)
        assert spaces_in(options) == {Space(4, 1), Space(4, 3), Space(5, 2)}

    def test_occupied_squares_block_movement(self, board, universe, envelope):
        """Other players cannot be passed through or landed on."""
        state = state_with(universe, envelope, Space(4, 0), others=[Space(4, 1)])

        options = board.get_movement_options(state, 3)

        assert "Kitchen" not in rooms_in(options)
        assert Space(4, 1) not in spaces_in(options)

    def test_boxed_in_player_has_no_options(self, board, universe, envelope):
        """With every exit blocked there is nowhere to go, not even to accuse."""
        state = state_with(universe, envelope, Space(4, 0), others=[Space(4, 1), Space(5, 0)])

        assert board.get_movement_options(state, 6) == []

    def test_accusation_room_not_listed_as_ordinary_room(self, board, universe, envelope):
        """The Cellar only appears as the final, always-offered option."""
        state = state_with(universe, envelope, Space(5, 8))

        options = board.get_movement_options(state, 2)

        assert [o.room_name for o in options[:-1]].count(ACCUSATION_ROOM) == 0


class TestBoardValidation:
    """Malformed custom boards."""

    def test_ragged_rows(self):
        with pytest.raises(GameDefinitionError):
            Board(["AA.", "A."], {"A": "Hall"}, accusation_room="Hall")

    def test_unknown_room_code(self):
        with pytest.raises(GameDefinitionError):
            Board(["AB", ".."], {"A": "Hall"}, accusation_room="Hall")

    def test_missing_accusation_room(self):
        with pytest.raises(GameDefinitionError):
            Board(["AA", "a1"], {"A": "Hall"}, accusation_room="Cellar")

    def test_passage_to_unknown_room(self):
        with pytest.raises(GameDefinitionError):
            Board(["AA", "a1"], {"A": "Hall"}, passages=[("Hall", "Study")], accusation_room="Hall")

    def test_unknown_character(self):
        with pytest.raises(GameDefinitionError):
            Board(["A?", "a1"], {"A": "Hall"}, accusation_room="Hall")
