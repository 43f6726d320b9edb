"""
Hand evaluation for the arcana battler.
Classifies played cards into a poker hand, its multiplier, and the scoring positions.
"""

from collections import Counter
from dataclasses import dataclass
from enum import Enum

from .deck import AnyCard


class HandType(Enum):
    """Hand categories, labelled as the player sees them."""
    NO_CARDS = "No Cards"
    HIGH_CARD = "High Card"
    SINGLE_CARD = "Single Card"
    ONE_PAIR = "One Pair"
    TWO_PAIR = "Two Pair"
    THREE_OF_A_KIND = "Three of a Kind"
    STRAIGHT = "Straight"
    FLUSH = "Flush"
    FULL_HOUSE = "Full House"
    FOUR_OF_A_KIND = "Four of a Kind"
    STRAIGHT_FLUSH = "Straight Flush"
    FIVE_OF_A_KIND = "Five of a Kind"


# Multiplier applied to each scoring card's value
HAND_MULTIPLIERS = {
    HandType.NO_CARDS: 1,
    HandType.HIGH_CARD: 1,
    HandType.SINGLE_CARD: 1,
    HandType.ONE_PAIR: 2,
    HandType.TWO_PAIR: 2,
    HandType.THREE_OF_A_KIND: 3,
    HandType.STRAIGHT: 3,
    HandType.FLUSH: 3,
    HandType.FULL_HOUSE: 4,
    HandType.FOUR_OF_A_KIND: 4,
    HandType.STRAIGHT_FLUSH: 5,
    HandType.FIVE_OF_A_KIND: 5,
}

# Straights and flushes only exist for exactly this many cards
PATTERN_HAND_SIZE = 5


@dataclass(frozen=True)
class EvaluationResult:
    """Result of hand evaluation."""
    category: HandType
    multiplier: int
    scoring_indices: frozenset  # Positions within the evaluated cards

    @property
    def label(self) -> str:
        return self.category.value

    def is_scoring(self, index: int) -> bool:
        return index in self.scoring_indices


def evaluate_hand(cards: list[AnyCard]) -> EvaluationResult:
    """
    Classify played cards into a hand category.

    Value-count categories work for any number of cards. Straight, Flush
    and Straight Flush need exactly five normal cards. Special cards keep
    their positions but take no part in classification.
    """
    if not cards:
        return _result(HandType.NO_CARDS, frozenset())

    normal = [(i, c) for i, c in enumerate(cards) if not c.is_special]
    value_counts = Counter(c.value for _, c in normal)
    suit_counts = Counter(c.suit for _, c in normal)

    if len(cards) == PATTERN_HAND_SIZE and len(normal) == PATTERN_HAND_SIZE:
        all_positions = frozenset(range(PATTERN_HAND_SIZE))
        values = value_counts.keys()
        is_straight = (len(value_counts) == PATTERN_HAND_SIZE and
                       max(values) - min(values) == PATTERN_HAND_SIZE - 1)
        is_flush = len(suit_counts) == 1

        if is_flush and is_straight:
            return _result(HandType.STRAIGHT_FLUSH, all_positions)
        if is_straight:
            return _result(HandType.STRAIGHT, all_positions)
        if is_flush:
            return _result(HandType.FLUSH, all_positions)

    counts = sorted(value_counts.values(), reverse=True)
    top = counts[0] if counts else 0

    def positions_for(*wanted_counts: int) -> frozenset:
        scoring_values = {v for v, n in value_counts.items() if n in wanted_counts}
        return frozenset(i for i, c in normal if c.value in scoring_values)

    if top >= 5:
        return _result(HandType.FIVE_OF_A_KIND, positions_for(*range(5, top + 1)))

    if top == 4:
        return _result(HandType.FOUR_OF_A_KIND, positions_for(4))

    if top == 3 and 2 in counts:
        return _result(HandType.FULL_HOUSE, positions_for(3, 2))

    if top == 3:
        return _result(HandType.THREE_OF_A_KIND, positions_for(3))

    if counts.count(2) == 2:
        return _result(HandType.TWO_PAIR, positions_for(2))

    if top == 2:
        return _result(HandType.ONE_PAIR, positions_for(2))

    if len(cards) == 1 and normal:
        return _result(HandType.SINGLE_CARD, frozenset({0}))

    return _result(HandType.HIGH_CARD, frozenset())


def _result(category: HandType, scoring: frozenset) -> EvaluationResult:
    return EvaluationResult(category, HAND_MULTIPLIERS[category], scoring)
