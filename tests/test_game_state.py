"""
Tests for Game State Management
Covers the player ring, turn-order lookup and state snapshots.
"""

import pytest

from clue_sim.cards import Triple, room, suspect, weapon
from clue_sim.errors import InvariantError
from clue_sim.game_state import (
    AgentKind,
    GuessRecord,
    LookupFailure,
    PlayerRing,
    RoomLocation,
)

from conftest import make_player


class TestTurnOrder:
    """Test finding (current, next) in the ring."""

    def test_next_of_last_wraps_to_first(self, state):
        order = state.players.find_turn_order("C")

        assert order.ok
        assert state.players[order.current].suspect == "C"
        assert state.players[order.next].suspect == "A"

    def test_player_not_found(self, state):
        order = state.players.find_turn_order("Nobody")

        assert not order.ok
        assert order.failure is LookupFailure.PLAYER_NOT_FOUND

    def test_empty_ring(self):
        order = PlayerRing([]).find_turn_order("A")

        assert order.failure is LookupFailure.EMPTY_RING

    @pytest.mark.parametrize("size", [1, 2, 3, 6])
    def test_ring_visits_everyone_once(self, universe, size):
        """Following "next" from any player visits all n players before repeating."""
        ring = PlayerRing([make_player(universe, f"P{i}") for i in range(size)])

        for start in range(size):
            seen = []
            current = ring[start].suspect
            for _ in range(size):
                seen.append(current)
                current = ring[ring.find_turn_order(current).next].suspect
            assert sorted(seen) == sorted(p.suspect for p in ring)
            assert current == ring[start].suspect


class TestPlayerRing:
    """Test seat bookkeeping."""

    def test_duplicate_suspects_rejected(self, universe):
        with pytest.raises(InvariantError):
            PlayerRing([make_player(universe, "A"), make_player(universe, "A")])

    def test_replace_keeps_seat(self, state, universe):
        """Replacing a player by identity keeps the turn order."""
        moved = make_player(universe, "B", location=RoomLocation("Hall"))

        state.players.replace(moved)

        assert [p.suspect for p in state.players] == ["A", "B", "C"]
        assert state.players.get("B").location == RoomLocation("Hall")

    def test_replace_unknown_player_fails(self, state, universe):
        with pytest.raises(InvariantError):
            state.players.replace(make_player(universe, "Z"))

    def test_get_unknown_player_fails(self, state):
        with pytest.raises(InvariantError):
            state.players.get("Z")

    def test_after_starts_with_successor(self, state):
        """Everybody else, starting after the given seat and wrapping once."""
        assert [p.suspect for p in state.players.after(1)] == ["C", "A"]
        assert [p.suspect for p in state.players.after(2)] == ["A", "B"]

    def test_all_out_and_humans_remaining(self, universe):
        ring = PlayerRing([
            make_player(universe, "A", kind=AgentKind.HUMAN, is_out=True),
            make_player(universe, "B", is_out=True),
        ])
        assert ring.all_out()
        assert not ring.humans_remaining()

        ring.replace(make_player(universe, "A", kind=AgentKind.HUMAN))
        assert not ring.all_out()
        assert ring.humans_remaining()


class TestGameState:
    """Test whole-state helpers."""

    def test_current_player(self, state):
        assert state.current_player().suspect == "A"

    def test_summary_mentions_last_guess(self, state):
        state.guess_history.append(
            GuessRecord(1, "A", Triple(suspect("Red"), weapon("Knife"), room("Library")), revealer="B")
        )

        summary = state.get_game_summary()

        assert "=== Turn 1 ===" in summary
        assert "A suggested Red with the Knife in the Library" in summary
        assert "disproven by B" in summary
