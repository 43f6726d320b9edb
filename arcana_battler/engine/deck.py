"""
Deck management for the arcana battler.
Handles card creation, shuffling, drawing, and the player's hand.
"""

import itertools
import random
from dataclasses import dataclass, field, replace
from enum import Enum
from typing import Iterable, Optional, Union


class Suit(Enum):
    SWORDS = "Swords"        # Damage
    CUPS = "Cups"            # Healing
    PENTACLES = "Pentacles"  # Currency
    WANDS = "Wands"          # Shield


class CardKind(Enum):
    NORMAL = "normal"
    SPECIAL = "special"


class SpecialKind(Enum):
    DEATH = "Death"


SUITS = [Suit.SWORDS, Suit.CUPS, Suit.PENTACLES, Suit.WANDS]
VALUES = [1, 2, 3, 4, 5]

_card_ids = itertools.count(1)


def next_card_id() -> int:
    """Allocate a process-unique card id."""
    return next(_card_ids)


@dataclass
class Card:
    suit: Suit
    value: int
    id: int = field(default_factory=next_card_id, compare=False)

    kind = CardKind.NORMAL

    @property
    def is_special(self) -> bool:
        return False

    @property
    def label(self) -> str:
        return f"{self.value} of {self.suit.value}"

    def __str__(self) -> str:
        return f"{self.value}{self.suit.value[0]}"

    def __repr__(self) -> str:
        return self.__str__()


@dataclass
class SpecialCard:
    """A one-off card whose behavior is looked up by kind, not stored on the card."""
    special: SpecialKind
    name: str
    description: str
    cost: int = 0
    id: int = field(default_factory=next_card_id, compare=False)

    kind = CardKind.SPECIAL

    @property
    def is_special(self) -> bool:
        return True

    @property
    def label(self) -> str:
        return self.name

    def __str__(self) -> str:
        return f"[{self.name}]"

    def __repr__(self) -> str:
        return self.__str__()


AnyCard = Union[Card, SpecialCard]


@dataclass
class Deck:
    cards: list[AnyCard] = field(default_factory=list)

    @classmethod
    def create(cls, suit_values: Optional[dict] = None,
               special_cards: Iterable[SpecialCard] = ()) -> "Deck":
        """
        Build the suit x value cross product, suit-major and value-minor.

        Args:
            suit_values: Optional {Suit: values} restricting a suit's value range
            special_cards: Special cards to inject; each gets its own fresh copy
        """
        suit_values = suit_values or {}
        cards: list[AnyCard] = []
        for suit in SUITS:
            allowed = suit_values.get(suit, VALUES)
            for value in VALUES:
                if value in allowed:
                    cards.append(Card(suit=suit, value=value))
        for special in special_cards:
            cards.append(replace(special, id=next_card_id()))
        return cls(cards=cards)

    def shuffle(self, rng: Optional[random.Random] = None) -> None:
        """Shuffle in place with a backward Fisher-Yates scan."""
        rng = rng or random
        cards = self.cards
        for i in range(len(cards) - 1, 0, -1):
            j = rng.randint(0, i)
            cards[i], cards[j] = cards[j], cards[i]

    def draw(self, n: int = 1) -> list[AnyCard]:
        """Draw up to n cards from the top (end) of the deck."""
        drawn = []
        for _ in range(n):
            if not self.cards:
                break
            drawn.append(self.cards.pop())
        return drawn

    def add_card(self, card: AnyCard) -> None:
        """Add a card to the top of the deck."""
        self.cards.append(card)

    def cards_remaining(self) -> int:
        return len(self.cards)

    def count_by_suit(self, suit: Suit) -> int:
        """Count normal cards of a specific suit."""
        return sum(1 for c in self.cards if not c.is_special and c.suit == suit)

    def count_special(self) -> int:
        return sum(1 for c in self.cards if c.is_special)

    def __len__(self) -> int:
        return len(self.cards)


class StaleSelectionError(LookupError):
    """Raised when a selected card id is no longer held."""


class Hand:
    """Represents cards currently held in hand."""

    def __init__(self, cards: list[AnyCard] = None):
        self.cards: list[AnyCard] = cards or []

    def add(self, cards: list[AnyCard]) -> None:
        self.cards.extend(cards)

    def select(self, indices: Iterable[int]) -> list[AnyCard]:
        """Get cards at specified indices, in hand order."""
        wanted = set(indices)
        return [c for i, c in enumerate(self.cards) if i in wanted]

    def ids_at(self, indices: Iterable[int]) -> set[int]:
        """Translate hand positions to stable card ids."""
        return {self.cards[i].id for i in indices}

    def positions_of(self, card_ids: Iterable[int]) -> list[int]:
        """Translate card ids back to current positions, in hand order."""
        wanted = set(card_ids)
        positions = [i for i, c in enumerate(self.cards) if c.id in wanted]
        if len(positions) != len(wanted):
            held = {c.id for c in self.cards}
            raise StaleSelectionError(f"cards no longer held: {sorted(wanted - held)}")
        return positions

    def remove_ids(self, card_ids: Iterable[int]) -> list[AnyCard]:
        """Remove and return the cards with the given ids, in hand order."""
        wanted = set(card_ids)
        removed = [c for c in self.cards if c.id in wanted]
        self.cards = [c for c in self.cards if c.id not in wanted]
        return removed

    def clear(self) -> list[AnyCard]:
        """Remove and return all cards."""
        cards = self.cards
        self.cards = []
        return cards

    def is_valid_index(self, index: int) -> bool:
        return 0 <= index < len(self.cards)

    def size(self) -> int:
        return len(self.cards)

    def __len__(self) -> int:
        return len(self.cards)

    def __iter__(self):
        return iter(self.cards)

    def __str__(self) -> str:
        return ", ".join(str(c) for c in self.cards)

    def __repr__(self) -> str:
        return f"Hand({self.__str__()})"
