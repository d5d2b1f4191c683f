"""
Cards for the Clue simulator.

A card is one of three categories (suspect, weapon, room) plus a name.
The classic card set follows the official Cluedo/Clue rules
(https://en.wikipedia.org/wiki/Cluedo#Rules); custom games may use any
names as long as every category is non-empty.
"""

from dataclasses import dataclass
from enum import Enum
from typing import Iterable, Iterator, Optional

from clue_sim.errors import InvariantError


class Category(Enum):
    SUSPECT = "suspect"
    WEAPON = "weapon"
    ROOM = "room"


class Suspect(Enum):
    MISS_SCARLET = "Miss Scarlet"
    COLONEL_MUSTARD = "Colonel Mustard"
    MRS_WHITE = "Mrs. White"
    MR_GREEN = "Mr. Green"
    MRS_PEACOCK = "Mrs. Peacock"
    PROFESSOR_PLUM = "Professor Plum"


class Weapon(Enum):
    CANDLESTICK = "Candlestick"
    KNIFE = "Knife"
    LEAD_PIPE = "Lead Pipe"
    REVOLVER = "Revolver"
    ROPE = "Rope"
    WRENCH = "Wrench"


class Room(Enum):
    KITCHEN = "Kitchen"
    BALLROOM = "Ballroom"
    CONSERVATORY = "Conservatory"
    BILLIARD_ROOM = "Billiard Room"
    LIBRARY = "Library"
    STUDY = "Study"
    HALL = "Hall"
    LOUNGE = "Lounge"
    DINING_ROOM = "Dining Room"


@dataclass(frozen=True)
class Card:
    """Represents a Clue game card."""
    category: Category
    name: str

    def __str__(self) -> str:
        return self.name


def suspect(name: str) -> Card:
    return Card(Category.SUSPECT, name)


def weapon(name: str) -> Card:
    return Card(Category.WEAPON, name)


def room(name: str) -> Card:
    return Card(Category.ROOM, name)


@dataclass(frozen=True)
class Triple:
    """One suspect, one weapon and one room: a guess, an accusation or the envelope."""
    suspect: Card
    weapon: Card
    room: Card

    def __post_init__(self):
        for card, category in zip(self.cards(), Category):
            if card.category is not category:
                raise InvariantError(f"{card.name} is not a {category.value} card")

    def cards(self) -> tuple:
        return (self.suspect, self.weapon, self.room)

    def __str__(self) -> str:
        return f"{self.suspect.name} with the {self.weapon.name} in the {self.room.name}"


class CardUniverse:
    """The fixed, finite set of cards in play, grouped by category."""

    def __init__(self, suspects: Iterable[str], weapons: Iterable[str], rooms: Iterable[str]):
        self._by_category = {
            Category.SUSPECT: tuple(suspect(n) for n in suspects),
            Category.WEAPON: tuple(weapon(n) for n in weapons),
            Category.ROOM: tuple(room(n) for n in rooms),
        }
        for category, cards in self._by_category.items():
            if not cards:
                raise InvariantError(f"Card universe has no {category.value} cards")
            if len(set(cards)) != len(cards):
                raise InvariantError(f"Duplicate {category.value} cards in universe")
        self._all = frozenset(c for cards in self._by_category.values() for c in cards)

    def of(self, category: Category) -> tuple:
        return self._by_category[category]

    def find(self, name: str, category: Optional[Category] = None) -> Optional[Card]:
        """Look a card up by name (case-insensitive), optionally within one category."""
        categories = [category] if category else list(Category)
        for cat in categories:
            for card in self._by_category[cat]:
                if card.name.lower() == name.lower():
                    return card
        return None

    def __contains__(self, card) -> bool:
        return card in self._all

    def __iter__(self) -> Iterator[Card]:
        for category in Category:
            yield from self._by_category[category]

    def __len__(self) -> int:
        return len(self._all)


def classic_universe() -> CardUniverse:
    """The 21 cards of the classic game: 6 suspects, 6 weapons, 9 rooms."""
    return CardUniverse(
        [s.value for s in Suspect],
        [w.value for w in Weapon],
        [r.value for r in Room],
    )
