"""
Detective Notebook - each player's private knowledge sheet.

Every card in the game has exactly one entry on the sheet. Entries only
ever move forward: an unknown card can be marked as being in the envelope
or as held by a rival, a card in hand stays in hand, and nothing is ever
forgotten. Any other change is a logic error and raises InvariantError.
"""

import logging
from dataclasses import dataclass, field, replace
from enum import Enum
from typing import Iterable, Optional

from clue_sim.cards import Card, CardUniverse, Category, Triple
from clue_sim.errors import InvariantError

logger = logging.getLogger(__name__)


class CardStatus(Enum):
    """What the sheet owner believes about a card."""
    UNKNOWN = "?"      # No information yet
    MINE = "M"         # In my own hand
    ENVELOPE = "E"     # Believed to be part of the solution
    SHOWN_BY = "S"     # A rival showed it to me


@dataclass(frozen=True)
class SheetEntry:
    """One card's belief. `shown_to` is used by MINE, `shown_by` by SHOWN_BY."""
    card: Card
    status: CardStatus = CardStatus.UNKNOWN
    shown_to: frozenset = field(default_factory=frozenset)
    shown_by: Optional[str] = None

    def describe(self) -> str:
        if self.status is CardStatus.MINE:
            if self.shown_to:
                return f"mine (shown to {', '.join(sorted(self.shown_to))})"
            return "mine"
        if self.status is CardStatus.SHOWN_BY:
            return f"held by {self.shown_by}"
        if self.status is CardStatus.ENVELOPE:
            return "envelope"
        return "unknown"


# Allowed belief changes; MINE -> MINE only grows the shown-to set
_TRANSITIONS = {
    CardStatus.UNKNOWN: {CardStatus.UNKNOWN, CardStatus.ENVELOPE, CardStatus.SHOWN_BY},
    CardStatus.MINE: {CardStatus.MINE},
    CardStatus.ENVELOPE: {CardStatus.ENVELOPE},
    CardStatus.SHOWN_BY: {CardStatus.SHOWN_BY},
}


class KnowledgeSheet:
    """
    A player's belief table over the whole card universe.

    Rows are the cards of the game in universe order (suspects, weapons,
    rooms). The sheet never looks at anybody else's sheet; the turn
    controller feeds it what its owner observes.
    """

    def __init__(self, universe: CardUniverse, entries: dict[Card, SheetEntry]):
        self.universe = universe
        self._entries = entries

    @classmethod
    def initialize(cls, universe: CardUniverse, hand: Iterable[Card]) -> "KnowledgeSheet":
        """
        Create a sheet for a freshly dealt hand.

        Args:
            universe: All cards in the game
            hand: The cards dealt to the sheet owner

        Returns:
            A sheet with MINE for hand cards and UNKNOWN everywhere else
        """
        hand = set(hand)
        strays = [c for c in hand if c not in universe]
        if strays:
            raise InvariantError(
                f"Hand contains cards outside the game: {', '.join(sorted(c.name for c in strays))}"
            )
        entries = {
            card: SheetEntry(card, CardStatus.MINE if card in hand else CardStatus.UNKNOWN)
            for card in universe
        }
        return cls(universe, entries)

    def copy(self) -> "KnowledgeSheet":
        # Entries are frozen, a shallow dict copy is enough
        return KnowledgeSheet(self.universe, dict(self._entries))

    # ==================== QUERIES ====================

    def entry(self, card: Card) -> SheetEntry:
        try:
            return self._entries[card]
        except KeyError:
            raise InvariantError(f"Card '{card.name}' is not on this sheet") from None

    def status(self, card: Card) -> CardStatus:
        return self.entry(card).status

    def entries(self) -> list[SheetEntry]:
        return [self._entries[card] for card in self.universe]

    def cards_in(self, category: Category, *statuses: CardStatus) -> list[Card]:
        """Cards of a category whose status is one of `statuses`, in universe order."""
        return [
            card for card in self.universe.of(category)
            if self._entries[card].status in statuses
        ]

    def category_solved(self, category: Category) -> bool:
        """True iff exactly one card of the category is marked ENVELOPE."""
        return len(self.cards_in(category, CardStatus.ENVELOPE)) == 1

    def all_solved(self) -> bool:
        return all(self.category_solved(category) for category in Category)

    def solution_guess(self) -> tuple:
        """
        The envelope as far as this sheet knows it.

        Returns:
            (suspect, weapon, room), each the unique ENVELOPE card of its
            category or None while that category is unresolved
        """
        guess = []
        for category in Category:
            envelope = self.cards_in(category, CardStatus.ENVELOPE)
            guess.append(envelope[0] if len(envelope) == 1 else None)
        return tuple(guess)

    # ==================== UPDATES ====================

    def _set(self, new: SheetEntry) -> None:
        old = self.entry(new.card)
        if new.status not in _TRANSITIONS[old.status]:
            raise InvariantError(
                f"Cannot change '{new.card.name}' from {old.describe()} to {new.describe()}"
            )
        if new != old:
            logger.debug("Sheet: %s %s -> %s", new.card.name, old.describe(), new.describe())
        self._entries[new.card] = new

    def record_shown(self, card: Card, by: str) -> None:
        """
        Record that rival `by` showed `card` to disprove my guess.

        Args:
            card: The card that was shown
            by: The id of the player who showed it
        """
        entry = self.entry(card)
        if entry.status is CardStatus.SHOWN_BY:
            # Replaying an observation changes nothing
            return
        if entry.status is not CardStatus.UNKNOWN:
            raise InvariantError(
                f"'{card.name}' was shown by {by} but the sheet has it as {entry.describe()}"
            )
        self._set(replace(entry, status=CardStatus.SHOWN_BY, shown_by=by))

    def mark_no_disprove(self, triple: Triple) -> None:
        """
        Nobody could disprove my guess: every card of it that is still
        unknown must be in the envelope (holders are required to show).
        """
        for card in triple.cards():
            entry = self.entry(card)
            if entry.status is CardStatus.UNKNOWN:
                self._set(replace(entry, status=CardStatus.ENVELOPE))

    def note_shown_to(self, card: Card, viewer: str) -> None:
        """Remember that I showed one of my own cards to `viewer`."""
        entry = self.entry(card)
        if entry.status is not CardStatus.MINE:
            raise InvariantError(
                f"Cannot show '{card.name}' to {viewer}: it is {entry.describe()}, not in hand"
            )
        if viewer not in entry.shown_to:
            self._set(replace(entry, shown_to=entry.shown_to | {viewer}))

    def deduce_by_elimination(self) -> list[Card]:
        """
        Process of elimination: in a category with nothing in the envelope
        yet, a single remaining unknown card must be the solution.

        Returns:
            The cards newly marked ENVELOPE
        """
        deduced = []
        for category in Category:
            if self.cards_in(category, CardStatus.ENVELOPE):
                continue
            unknown = self.cards_in(category, CardStatus.UNKNOWN)
            if len(unknown) == 1:
                self._set(replace(self.entry(unknown[0]), status=CardStatus.ENVELOPE))
                deduced.append(unknown[0])
        return deduced

    # ==================== DISPLAY ====================

    def render(self, owner: str = "") -> str:
        """
        Get the sheet as a text grid.

        Returns:
            Formatted grid of all card beliefs, grouped by category
        """
        result = "=== DETECTIVE NOTEBOOK ===\n"
        if owner:
            result += f"(Owner: {owner})\n"
        for category in Category:
            result += f"\n--- {category.value.upper()}S ---\n"
            for card in self.universe.of(category):
                entry = self._entries[card]
                result += f"{card.name.ljust(20)}[{entry.status.value}] {entry.describe()}\n"
        result += "\nLegend: M=Mine  E=Envelope  S=Shown by  ?=Unknown\n"
        return result
