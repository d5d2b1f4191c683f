"""
Deduction engine for automated players.

Stateless, fast heuristics (not a solver). Every function reads only the
acting player's own sheet plus the public state, and takes the random
source it uses for tie-breaks so a seeded game replays exactly.
"""

import logging
import random
from typing import Optional, Sequence

from clue_sim.cards import Card, Category, Triple, room
from clue_sim.errors import InvariantError
from clue_sim.game_state import (
    MovementOption,
    Passage,
    PublicState,
    RoomLocation,
    Roll,
)
from clue_sim.notebook import CardStatus, KnowledgeSheet

logger = logging.getLogger(__name__)


def choose(rng: random.Random, candidates: Sequence):
    """Pick uniformly at random. An empty candidate list is a logic error."""
    if not candidates:
        raise InvariantError("Asked to choose from an empty set of candidates")
    return candidates[rng.randrange(len(candidates))]


def _room_status(sheet: KnowledgeSheet, name: Optional[str]) -> Optional[CardStatus]:
    """Belief about the room called `name`; None for squares and non-card rooms."""
    if name is None:
        return None
    card = room(name)
    if card not in sheet.universe:
        return None
    return sheet.status(card)


def decide_move(sheet: KnowledgeSheet, move_options: Sequence, rng: random.Random):
    """
    Roll the dice or take a secret passage.

    While the room is unsolved, a passage into one of my own rooms (then
    into an envelope room) is taken; once it is solved, a passage into a
    room I know nothing about. Otherwise roll.
    """
    passages = [m for m in move_options if isinstance(m, Passage)]

    def leading_to(*statuses: CardStatus) -> list:
        return [p for p in passages if _room_status(sheet, p.destination.name) in statuses]

    if not sheet.category_solved(Category.ROOM):
        mine = leading_to(CardStatus.MINE)
        if mine:
            return choose(rng, mine)
        envelope = leading_to(CardStatus.ENVELOPE)
        if envelope:
            return choose(rng, envelope)
    else:
        unknown = leading_to(CardStatus.UNKNOWN)
        if unknown:
            return choose(rng, unknown)
    return Roll()


def decide_movement(
    sheet: KnowledgeSheet,
    public: PublicState,
    options: Sequence[MovementOption],
    rng: random.Random,
) -> MovementOption:
    """
    Pick a destination for the roll.

    With the whole case solved, head for the accusation room. Otherwise
    rank rooms by how useful a guess there would be and break ties
    uniformly at random.
    """
    if sheet.all_solved():
        accusation = [o for o in options if o.room_name == public.accusation_room]
        if len(accusation) != 1:
            raise InvariantError(
                f"Expected exactly one way into {public.accusation_room}, found {len(accusation)}"
            )
        return accusation[0]

    candidates = [o for o in options if o.room_name != public.accusation_room]
    room_unsolved = not sheet.category_solved(Category.ROOM)

    def matching(statuses, exact_only: bool) -> list:
        return [
            o for o in candidates
            if _room_status(sheet, o.room_name) in statuses and (o.exact or not exact_only)
        ]

    tiers = [
        matching((CardStatus.MINE,), exact_only=True),
        matching((CardStatus.ENVELOPE,), exact_only=True),
        matching((CardStatus.MINE, CardStatus.ENVELOPE), exact_only=False),
    ]
    if room_unsolved:
        tiers.append(matching((CardStatus.UNKNOWN,), exact_only=True))
        tiers.append(matching((CardStatus.UNKNOWN,), exact_only=False))
    tiers.append(candidates)

    for tier in tiers:
        if tier:
            return choose(rng, tier)
    raise InvariantError("No destination to move to")


def _pick_for_category(sheet: KnowledgeSheet, category: Category, rng: random.Random) -> Card:
    if not sheet.category_solved(category):
        unknown = sheet.cards_in(category, CardStatus.UNKNOWN)
        if unknown:
            return choose(rng, unknown)
    mine = sheet.cards_in(category, CardStatus.MINE)
    if mine:
        return choose(rng, mine)
    return choose(rng, sheet.cards_in(category, CardStatus.ENVELOPE))


def decide_guess(sheet: KnowledgeSheet, current_room: RoomLocation, rng: random.Random) -> Triple:
    """
    Build a guess in the current room.

    Unsolved categories test an unknown card; solved ones use a card from
    my own hand (or the envelope card) so the answer isolates the rest.
    """
    guess = Triple(
        _pick_for_category(sheet, Category.SUSPECT, rng),
        _pick_for_category(sheet, Category.WEAPON, rng),
        room(current_room.name),
    )
    logger.debug("Guess: %s", guess)
    return guess


def decide_accusation(sheet: KnowledgeSheet) -> Triple:
    """The envelope according to the sheet. Only valid once every category is solved."""
    suspect, weapon, room_card = sheet.solution_guess()
    if suspect is None or weapon is None or room_card is None:
        raise InvariantError("Cannot accuse before every category is solved")
    return Triple(suspect, weapon, room_card)


def decide_reveal(
    sheet: KnowledgeSheet, guess: Triple, asker: str, rng: random.Random
) -> Optional[Card]:
    """
    Answer another player's guess.

    Returns:
        None if I hold none of the guessed cards, otherwise one of them,
        preferring a card `asker` has not been shown yet
    """
    matches = [c for c in guess.cards() if sheet.status(c) is CardStatus.MINE]
    if not matches:
        return None
    if len(matches) == 1:
        return matches[0]
    fresh = [c for c in matches if asker not in sheet.entry(c).shown_to]
    return choose(rng, fresh or matches)
