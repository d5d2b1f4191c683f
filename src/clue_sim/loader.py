"""
Game definitions: building the initial game state.

A definition is a JSON object (or the equivalent dict):

    {
      "suspects": [...], "weapons": [...], "rooms": [...],      # default: classic cards
      "board": {                                                 # default: classic board
        "layout": ["KK..", ...],
        "rooms": {"K": "Kitchen", ...},
        "passages": [["Kitchen", "Study"]],
        "accusation_room": "Cellar"
      },
      "players": [{"suspect": "Miss Scarlet", "agent": "human", "start": "Kitchen"}, ...],
      "first_player": "Miss Scarlet",                            # default: first listed
      "ai_only": false,
      "envelope": {"suspect": ..., "weapon": ..., "room": ...},  # default: drawn at random
      "hands": {"Miss Scarlet": ["Knife", ...], ...}             # default: dealt round-robin
    }

A player's "start" is a room name or a [row, col] square; without one the
player starts on the board's numbered starting square for their seat.
"""

import json
import logging
import random
from pathlib import Path
from typing import Optional, Union

from clue_sim.board import Board
from clue_sim.cards import Card, CardUniverse, Category, Suspect, Triple, classic_universe, room
from clue_sim.errors import GameDefinitionError, InvariantError
from clue_sim.game_state import (
    AgentKind,
    GameState,
    Player,
    PlayerRing,
    PublicState,
    RoomLocation,
    Space,
)
from clue_sim.notebook import KnowledgeSheet

logger = logging.getLogger(__name__)

MIN_CLASSIC_PLAYERS = 3
MAX_CLASSIC_PLAYERS = 6


def draw_envelope(universe: CardUniverse, rng: random.Random) -> Triple:
    """Select the solution: one card of each category."""
    return Triple(*(rng.choice(universe.of(category)) for category in Category))


def deal(universe: CardUniverse, envelope: Triple, num_players: int, rng: random.Random) -> list[list[Card]]:
    """Shuffle everything outside the envelope and deal it round-robin."""
    remaining = [c for c in universe if c not in envelope.cards()]
    rng.shuffle(remaining)
    hands = [[] for _ in range(num_players)]
    for i, card in enumerate(remaining):
        hands[i % num_players].append(card)
    return hands


def _card(universe: CardUniverse, name: str, category: Optional[Category] = None) -> Card:
    card = universe.find(name, category)
    if card is None:
        kind = category.value if category else "card"
        raise GameDefinitionError(f"Unknown {kind} '{name}'")
    return card


def _build_board(board_def: Optional[dict]) -> Board:
    if board_def is None:
        return Board.classic()
    try:
        return Board(
            board_def["layout"],
            board_def["rooms"],
            [tuple(p) for p in board_def.get("passages", [])],
            board_def["accusation_room"],
        )
    except KeyError as e:
        raise GameDefinitionError(f"Board definition is missing '{e.args[0]}'") from e


def _start_location(board: Board, seat: int, start) -> Union[RoomLocation, Space]:
    if start is None:
        return board.start_location(seat)
    if isinstance(start, str):
        if start not in board.room_names:
            raise GameDefinitionError(f"Start room '{start}' is not on the board")
        return RoomLocation(start)
    if isinstance(start, (list, tuple)) and len(start) == 2:
        row, col = int(start[0]), int(start[1])
        if not board.is_walkable(row, col):
            raise GameDefinitionError(f"Start square ({row}, {col}) is not walkable")
        return Space(row, col)
    raise GameDefinitionError(f"Cannot understand start location {start!r}")


def build_game(definition: dict, rng: Optional[random.Random] = None) -> tuple[GameState, Board]:
    """
    Create the initial game state and board from a definition.

    Args:
        definition: Parsed game definition (see module docstring)
        rng: Random source for the envelope and the deal

    Returns:
        (GameState, Board)
    """
    rng = rng or random.Random()

    if any(key in definition for key in ("suspects", "weapons", "rooms")):
        try:
            universe = CardUniverse(definition["suspects"], definition["weapons"], definition["rooms"])
        except KeyError as e:
            raise GameDefinitionError(f"Card lists need '{e.args[0]}' as well") from e
        except InvariantError as e:
            raise GameDefinitionError(str(e)) from e
    else:
        universe = classic_universe()

    board = _build_board(definition.get("board"))
    for name in board.room_names:
        if name == board.accusation_room or room(name) in universe:
            continue
        near = universe.find(name, Category.ROOM)
        if near is not None:
            raise GameDefinitionError(f"Board room '{name}' must be spelled '{near.name}' like its card")
        raise GameDefinitionError(f"Board room '{name}' has no room card")

    player_specs = definition.get("players") or []
    if not player_specs:
        raise GameDefinitionError("No players in game definition")

    if "envelope" in definition:
        env = definition["envelope"]
        try:
            envelope = Triple(
                _card(universe, env["suspect"], Category.SUSPECT),
                _card(universe, env["weapon"], Category.WEAPON),
                _card(universe, env["room"], Category.ROOM),
            )
        except KeyError as e:
            raise GameDefinitionError(f"Envelope is missing its {e.args[0]}") from e
    else:
        envelope = draw_envelope(universe, rng)

    names = [p.get("suspect") for p in player_specs]
    if "hands" in definition:
        hands = _fixed_hands(universe, envelope, names, definition["hands"])
    else:
        hands = deal(universe, envelope, len(player_specs), rng)

    players = []
    for seat, (entry, hand) in enumerate(zip(player_specs, hands)):
        if not entry.get("suspect"):
            raise GameDefinitionError(f"Player {seat + 1} has no suspect name")
        try:
            kind = AgentKind(entry.get("agent", AgentKind.AI.value))
        except ValueError:
            raise GameDefinitionError(f"Unknown agent kind '{entry.get('agent')}'") from None
        players.append(
            Player(
                suspect=entry["suspect"],
                kind=kind,
                location=_start_location(board, seat, entry.get("start")),
                sheet=KnowledgeSheet.initialize(universe, hand),
            )
        )

    try:
        ring = PlayerRing(players)
    except InvariantError as e:
        raise GameDefinitionError(str(e)) from e

    first = definition.get("first_player", players[0].suspect)
    if ring.index_of(first) is None:
        raise GameDefinitionError(f"No player with suspect name '{first}'")

    public = PublicState(
        current_player=first,
        accusation_room=board.accusation_room,
        ai_only=bool(definition.get("ai_only", False)),
    )
    logger.debug("Game built: %d players, envelope %s", len(players), envelope)
    return GameState(players=ring, public=public, envelope=envelope, universe=universe), board


def _fixed_hands(universe: CardUniverse, envelope: Triple, names: list, hand_names: dict) -> list[list[Card]]:
    """
    Hands given in the definition. Together with the envelope they must
    cover every card exactly once.
    """
    strangers = sorted(set(hand_names) - set(names))
    if strangers:
        raise GameDefinitionError(f"Hands given for unknown players: {', '.join(strangers)}")
    seen = set(envelope.cards())
    hands = []
    for name in names:
        hand = []
        for card_name in hand_names.get(name, []):
            card = _card(universe, card_name)
            if card in seen:
                raise GameDefinitionError(f"'{card.name}' is dealt twice")
            seen.add(card)
            hand.append(card)
        hands.append(hand)
    missing = [card.name for card in universe if card not in seen]
    if missing:
        raise GameDefinitionError(f"Cards not dealt to anyone: {', '.join(missing)}")
    return hands


def import_game(source: Union[str, Path], rng: Optional[random.Random] = None) -> tuple[GameState, Board]:
    """Load a JSON game definition from a file."""
    path = Path(source)
    try:
        with open(path, encoding="utf-8") as f:
            definition = json.load(f)
    except OSError as e:
        raise GameDefinitionError(f"Cannot read game file '{path}': {e.strerror}") from e
    except json.JSONDecodeError as e:
        raise GameDefinitionError(f"Game file '{path}' is not valid JSON: {e.msg}") from e
    if not isinstance(definition, dict):
        raise GameDefinitionError(f"Game file '{path}' must contain a JSON object")
    return build_game(definition, rng)


def classic_definition(num_players: int = 6, humans: int = 1, ai_only: bool = False) -> dict:
    """
    The classic game: Miss Scarlet goes first, the first `humans` seats
    are human players, everyone starts on their numbered square.
    """
    if num_players < MIN_CLASSIC_PLAYERS or num_players > MAX_CLASSIC_PLAYERS:
        raise GameDefinitionError(
            f"Number of players must be between {MIN_CLASSIC_PLAYERS} and {MAX_CLASSIC_PLAYERS}"
        )
    characters = [s.value for s in Suspect][:num_players]
    return {
        "players": [
            {"suspect": name, "agent": "human" if seat < humans else "ai"}
            for seat, name in enumerate(characters)
        ],
        "first_player": Suspect.MISS_SCARLET.value,
        "ai_only": ai_only,
    }


def classic_game(
    num_players: int = 6,
    humans: int = 1,
    ai_only: bool = False,
    rng: Optional[random.Random] = None,
) -> tuple[GameState, Board]:
    return build_game(classic_definition(num_players, humans, ai_only), rng)
